#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
VectorRetriever - Interactive CLI Interface
A rich command-line front end for building the index, searching it and
evaluating it against TREC topics
"""

import argparse
import os
import sys
import time

# Add the project root directory to Python path
sys.path.insert(0, os.path.abspath(os.path.dirname(__file__)))

from rich import box
from rich.panel import Panel
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.table import Table

from VectorRetriever.config import load_config, output_path
from VectorRetriever.diagnostics import console, report
from VectorRetriever.main import VectorRetriever


class VectorRetrieverCLI:
    def __init__(self, config_file=None):
        """Initialize the CLI interface"""
        config, problems = load_config(config_file)
        report(problems)
        self.config = config
        self.retriever = VectorRetriever(config, verbose=False)
        self.index_ready = False

    def print_header(self):
        """Display the application header"""
        console.print(Panel(
            "[bold blue]VectorRetriever[/bold blue] [yellow]TF-IDF Search Engine[/yellow]",
            border_style="blue",
            subtitle="Vector space retrieval over TREC collections",
            width=80
        ))

    def build_index(self, corpus_dir: str = None) -> bool:
        """Load the corpus and build the index"""
        corpus_dir = corpus_dir or self.config["corpus"]["directory"]
        console.print(f"Loading documents from: [cyan]{corpus_dir}[/cyan]")

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TimeElapsedColumn(),
            console=console
        ) as progress:
            task = progress.add_task("Loading documents...", total=None)
            loaded = self.retriever.load_documents(corpus_dir)
            progress.update(task, description="Building index...")
            if loaded:
                self.retriever.build_index()
            progress.update(task, completed=True)

        if not loaded:
            console.print("[bold red]No documents loaded.[/bold red]")
            return False

        snapshot = self.retriever.snapshot
        console.print(f"[green]Indexed [bold]{snapshot.total_documents}[/bold] documents, "
                      f"[bold]{len(snapshot.term_dictionary)}[/bold] terms[/green]")
        if self.retriever.inconsistencies:
            console.print(f"[bold red]Index validation found {self.retriever.inconsistencies} problems[/bold red]")

        self.retriever.save_index()
        self.index_ready = True
        return True

    def search(self, query: str, top_k: int = 5):
        """Perform a TF-IDF search"""
        console.print(f"Executing TF-IDF search: '[cyan]{query}[/cyan]'")

        start_time = time.time()
        results = self.retriever.search(query, top_k=top_k)
        execution_time = time.time() - start_time

        console.print(f"[green]Found {len(results)} documents in {execution_time:.6f} seconds[/green]")
        return results

    def display_results(self, results):
        """Display search results in a formatted way"""
        if not results:
            console.print("[yellow]No results found.[/yellow]")
            return

        table = Table(
            box=box.HEAVY_EDGE,
            show_header=True,
            header_style="bold magenta",
            title=f"[bold]Found {len(results)} document(s) ranked by relevance[/bold]",
            title_style="yellow"
        )
        table.add_column("#", style="dim", width=4)
        table.add_column("Document", style="cyan bold")
        table.add_column("Score", style="yellow", width=10)

        for i, (docno, score) in enumerate(results):
            score_str = f"{score:.4f}"
            if score > 0.7:
                score_display = f"[bold green]{score_str}[/bold green]"
            elif score > 0.4:
                score_display = f"[yellow]{score_str}[/yellow]"
            else:
                score_display = f"[dim]{score_str}[/dim]"

            row_style = "on blue" if i == 0 else ""
            table.add_row(str(i + 1), docno, score_display, style=row_style)

        console.print(table)
        console.print("[dim]Tip: Higher scores indicate more relevant results.[/dim]")

    def term_lookup(self):
        """Look up terms until the user quits"""
        while True:
            term = console.input("\n[bold cyan]Enter a term to search (or 'quit' to exit): [/bold cyan]").strip()
            if term.lower() == 'quit':
                break
            if not term:
                continue

            lookup = self.retriever.lookup_term(term)
            if lookup is None:
                console.print(f"[yellow]Term '{term}' not found in the index.[/yellow]")
                continue
            if not lookup.postings:
                console.print(f"[yellow]Term '{lookup.term}' (ID: {lookup.term_id}) found but appears in "
                              f"no documents.[/yellow]")
                continue

            table = Table(title=f"[bold]{lookup.term}[/bold] (ID: {lookup.term_id})", box=box.ROUNDED)
            table.add_column("Document", style="cyan")
            table.add_column("Frequency", style="green", justify="right")
            for docno, count in lookup.postings:
                table.add_row(docno, str(count))
            console.print(table)

    def run_evaluation(self):
        """Run every topic and write the ranked results and performance report"""
        console.print(Panel(
            "[bold yellow]Running VectorRetriever Evaluation[/bold yellow]",
            border_style="yellow",
            subtitle="Title, title+desc and title+narr queries"
        ))

        evaluation = self.config["evaluation"]
        topics = console.input(f"[bold cyan]Topics file (default: {evaluation['topics']}): [/bold cyan]").strip()
        qrels = console.input(f"[bold cyan]Qrels file (default: {evaluation['qrels']}): [/bold cyan]").strip()

        if not self.retriever.load_evaluation_data(topics or None, qrels or None):
            console.print("[bold red]No topics loaded, nothing to evaluate.[/bold red]")
            return

        start_time = time.time()
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            TimeElapsedColumn(),
            console=console
        ) as progress:
            task = progress.add_task(f"Processing {len(self.retriever.queries)} topics...", total=None)
            failures = self.retriever.process_queries()
            progress.update(task, completed=True)

        if failures:
            console.print(f"[bold red]{failures} output file(s) could not be written[/bold red]")
        console.print(f"[green]Evaluation finished in {time.time() - start_time:.2f} seconds[/green]")
        self.show_evaluation_results()

    def show_evaluation_results(self):
        """Display precision and recall of the most recent evaluation"""
        performance = self.retriever.performance
        if not performance:
            report_file = output_path(self.config, "performance_report")
            if os.path.exists(report_file):
                with open(report_file, 'r', encoding='utf-8') as f:
                    console.print(Panel(f.read(), title=f"[bold]{report_file}[/bold]", border_style="green"))
            else:
                console.print("[bold red]No evaluation results found. Run an evaluation first.[/bold red]")
            return

        table = Table(title="[bold]Query Performance Comparison[/bold]", box=box.ROUNDED)
        table.add_column("Topic", style="dim")
        table.add_column("Variant", style="cyan")
        table.add_column("Precision", style="yellow", justify="right")
        table.add_column("Recall", style="green", justify="right")
        table.add_column("Relevant Retrieved", justify="right")

        for topic, by_variant in performance.items():
            for variant, metrics in by_variant.items():
                table.add_row(str(topic), variant.value, f"{metrics.precision:.4f}", f"{metrics.recall:.4f}",
                              f"{metrics.relevant_retrieved}/{metrics.total_relevant}")
        console.print(table)

    def interactive_mode(self):
        """Run the application in interactive mode"""
        while True:
            console.rule("[bold blue]VectorRetriever[/bold blue]")

            if not self.index_ready:
                console.print("[bold yellow]First, let's build the index.[/bold yellow]")
                corpus_dir = console.input(
                    f"\n[bold cyan]Corpus folder (default: {self.config['corpus']['directory']}): [/bold cyan]"
                ).strip()
                if not self.build_index(corpus_dir or None):
                    retry = console.input("[bold cyan]Try another folder? (y/n): [/bold cyan]").strip().lower()
                    if retry != 'y':
                        return
                    continue

            menu_table = Table(show_header=False, box=box.SIMPLE)
            menu_table.add_column("Option", style="dim")
            menu_table.add_column("Description", style="yellow")

            menu_table.add_row("1", "TF-IDF Search")
            menu_table.add_row("2", "Term Lookup")
            menu_table.add_row("3", "Run Evaluation")
            menu_table.add_row("4", "Show Evaluation Results")
            menu_table.add_row("5", "Quit")

            console.print("\n[bold cyan]Available Actions:[/bold cyan]")
            console.print(menu_table)

            choice = console.input("\n[bold cyan]Enter choice (1-5): [/bold cyan]").strip()

            if choice == '5' or choice.lower() == 'quit':
                break

            if choice == '2':
                self.term_lookup()
                continue

            if choice == '3':
                self.run_evaluation()
                continue

            if choice == '4':
                self.show_evaluation_results()
                continue

            if choice != '1':
                console.print("[bold red]Invalid choice. Please enter a number between 1 and 5.[/bold red]")
                continue

            query = console.input("\nEnter search query: ").strip()
            if not query:
                console.print("[bold red]Empty query. Please try again.[/bold red]")
                continue

            top_k = 5
            top_k_input = console.input(f"Number of results to show (default: {top_k}): ").strip()
            if top_k_input:
                try:
                    top_k = int(top_k_input)
                except ValueError:
                    console.print(f"[yellow]Invalid number. Using default: {top_k}[/yellow]")

            self.display_results(self.search(query, top_k))


def main():
    """Main entry point for the CLI application"""
    parser = argparse.ArgumentParser(
        description='VectorRetriever - TF-IDF Search System'
    )
    parser.add_argument('--config', help='Path to configuration file')
    parser.add_argument('--corpus', help='Folder with the TREC corpus files')
    parser.add_argument('--query', help='Free text query to search for')
    parser.add_argument('--top', type=int, default=5,
                        help='Number of top results to display')
    parser.add_argument('--interactive', action='store_true',
                        help='Run in interactive mode')
    args = parser.parse_args()

    cli = VectorRetrieverCLI(args.config)

    console.print("\n")
    console.rule("[bold blue]VectorRetriever System[/bold blue]", style="blue")
    cli.print_header()
    console.rule(style="blue")

    if args.query and not args.interactive:
        if not cli.build_index(args.corpus):
            return 1
        cli.display_results(cli.search(args.query, args.top))
        return 0

    if args.corpus and not cli.build_index(args.corpus):
        return 1

    cli.interactive_mode()
    return 0


if __name__ == "__main__":
    sys.exit(main())
