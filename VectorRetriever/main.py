import argparse
import os
import sys
from typing import List, Optional

from VectorRetriever.build_inverted_index import build_from_corpus
from VectorRetriever.config import load_config, output_path
from VectorRetriever.diagnostics import ERROR, Diagnostic, console, report
from VectorRetriever.eval_interface.evaluate import (
    QueryVariant,
    evaluate,
    run_query_variants,
    save_performance_report,
    save_ranked_results,
)
from VectorRetriever.eval_interface.topics import load_relevance_judgments, load_topics
from VectorRetriever.index_io import save_all
from VectorRetriever.preprocessing.document import load_corpus
from VectorRetriever.preprocessing.preprocess import create_pipeline
from VectorRetriever.tfidf_search.tfidf_search import TermLookup, TFIDFSearchEngine


class VectorRetriever:
    """
    Batch pipeline: corpus -> dictionaries -> indexes -> validation ->
    index files -> topic queries -> ranked results -> performance report.
    """

    def __init__(self, config: Optional[dict] = None, verbose: bool = True):
        if config is None:
            config, problems = load_config()
            report(problems)
        self.config = config
        self.verbose = verbose

        self.pipeline, problems = create_pipeline(config)
        report(problems)

        self.documents = []
        self.builder = None
        self.snapshot = None
        self.search_engine = None
        self.inconsistencies = 0
        self.queries = []
        self.judgments = {}
        self.results = []
        self.performance = {}

    def _print(self, *args, **kwargs):
        if self.verbose:
            console.print(*args, **kwargs)

    def load_documents(self, corpus_dir: Optional[str] = None) -> bool:
        """
        Load the TREC corpus.

        Returns:
            bool: True if at least one document was loaded
        """
        corpus = self.config["corpus"]
        corpus_dir = corpus_dir or corpus["directory"]
        self._print(f"Loading documents from: [cyan]{corpus_dir}[/cyan]")

        self.documents, problems = load_corpus(corpus_dir, corpus["extension"], corpus["encoding"],
                                               verbose=self.verbose)
        report(problems)
        self._print(f"Loaded {len(self.documents)} documents.")
        return bool(self.documents)

    def build_index(self) -> bool:
        """
        Build dictionaries and indexes, validate them and prepare the search engine.

        Returns:
            bool: True if the index was built without inconsistencies
        """
        if not self.documents:
            report([Diagnostic("corpus", "no documents loaded, load documents first", severity=ERROR)])
            return False

        self.builder, self.inconsistencies, problems = build_from_corpus(self.documents, self.pipeline,
                                                                         verbose=self.verbose)
        report(problems)
        self.snapshot = self.builder.snapshot()
        self.search_engine = TFIDFSearchEngine(self.snapshot, self.pipeline)
        return self.inconsistencies == 0

    def save_index(self, output_dir: Optional[str] = None) -> int:
        """Write every index file; returns the number of files that failed."""
        if self.snapshot is None:
            report([Diagnostic("index", "index not built, nothing to save", severity=ERROR)])
            return 1
        return save_all(self.snapshot, self.config, output_dir, verbose=self.verbose)

    def load_evaluation_data(self, topics_path: Optional[str] = None, qrels_path: Optional[str] = None) -> bool:
        """
        Load topics and relevance judgments.

        Returns:
            bool: True if at least one topic was loaded
        """
        evaluation = self.config["evaluation"]
        topics_path = topics_path or evaluation["topics"]
        qrels_path = qrels_path or evaluation["qrels"]

        self.queries, problems = load_topics(topics_path)
        report(problems)
        self.judgments, problems = load_relevance_judgments(qrels_path)
        report(problems)

        self._print(f"Found {len(self.queries)} queries to process")
        self._print(f"Loaded relevance judgments for {len(self.judgments)} topics")
        return bool(self.queries)

    def process_queries(self, output_dir: Optional[str] = None) -> int:
        """
        Run every query variant, write the ranked results (title variant) and
        the combined performance report.

        Returns:
            Number of output files that could not be written
        """
        if self.search_engine is None:
            report([Diagnostic("index", "index not built, cannot process queries", severity=ERROR)])
            return 2

        self.results = run_query_variants(self.queries, self.search_engine, self.judgments, verbose=self.verbose)
        self.performance = evaluate(self.results, self.judgments, topics=[query.number for query in self.queries])

        directory = output_dir or self.config["output"]["directory"]
        failures = 0
        try:
            os.makedirs(directory, exist_ok=True)
        except OSError as e:
            report([Diagnostic(directory, f"could not create output directory: {e}", severity=ERROR)])
            return 2

        ranked_path = output_path(self.config, "ranked_results", directory)
        try:
            save_ranked_results(self.results, ranked_path, self.config["output"]["score_precision"],
                                variant=QueryVariant.TITLE, verbose=self.verbose)
        except OSError as e:
            report([Diagnostic(ranked_path, f"could not write ranked results: {e}", severity=ERROR)])
            failures += 1

        report_path = output_path(self.config, "performance_report", directory)
        try:
            save_performance_report(self.performance, report_path)
            self._print(f"Performance report saved to [cyan]{report_path}[/cyan]")
        except OSError as e:
            report([Diagnostic(report_path, f"could not write performance report: {e}", severity=ERROR)])
            failures += 1

        return failures

    def search(self, query: str, top_k: Optional[int] = None) -> List[tuple]:
        if self.search_engine is None:
            return []
        return self.search_engine.search(query, top_k=top_k)

    def lookup_term(self, term: str) -> Optional[TermLookup]:
        if self.search_engine is None:
            return None
        return self.search_engine.lookup_term(term)


def display_lookup(term: str, lookup: Optional[TermLookup]) -> None:
    """Print the documents a term occurs in"""
    if lookup is None:
        console.print(f"Term '{term}' not found in the index.", markup=False)
        return

    console.print(f"Term: {lookup.term} (ID: {lookup.term_id})", markup=False)
    if not lookup.postings:
        console.print("Term found but appears in no documents.")
        return

    console.print("Appears in the following documents:")
    for docno, count in lookup.postings:
        console.print(f"  Document: {docno}, Frequency: {count}", markup=False)


def display_results(results, query):
    """Display search results in a formatted way"""
    if not results:
        console.print(f"\nNo results found for '{query}'.", markup=False)
        return

    console.print(f"\nSEARCH RESULTS for '{query}':", markup=False)
    console.rule()
    for rank, (docno, score) in enumerate(results, 1):
        console.print(f"{rank}. {docno}  Similarity: {score:.4f}", markup=False)


def main(argv=None):
    parser = argparse.ArgumentParser(
        description='VectorRetriever - TF-IDF vector space retrieval over a TREC collection'
    )
    parser.add_argument('--config', help='Path to configuration file')
    parser.add_argument('--corpus', help='Folder with the TREC corpus files')
    parser.add_argument('--topics', help='Path to the topics file')
    parser.add_argument('--qrels', help='Path to the relevance judgments file')
    parser.add_argument('--output-dir', help='Directory for index files, results and report')
    parser.add_argument('--no-evaluation', action='store_true',
                        help='Only build and save the index')
    parser.add_argument('--query', help='Free text query to search for')
    parser.add_argument('--top', type=int, default=10,
                        help='Number of top results to display')
    parser.add_argument('--lookup', nargs='*', default=[],
                        help='Terms to look up in the inverted index')
    parser.add_argument('--interactive', action='store_true',
                        help='Interactive term lookup after processing')
    args = parser.parse_args(argv)

    config, problems = load_config(args.config)
    report(problems)
    retriever = VectorRetriever(config)

    if not retriever.load_documents(args.corpus):
        console.print("[bold red]No documents loaded.[/bold red]")
        return 1

    retriever.build_index()
    failures = retriever.save_index(args.output_dir)

    if not args.no_evaluation:
        if retriever.load_evaluation_data(args.topics, args.qrels):
            failures += retriever.process_queries(args.output_dir)

    if args.query:
        display_results(retriever.search(args.query, args.top), args.query)

    for term in args.lookup:
        display_lookup(term, retriever.lookup_term(term))

    if args.interactive:
        while True:
            term = console.input("\nEnter a term to search (or 'quit' to exit): ").strip()
            if term.lower() == 'quit':
                break
            if term:
                display_lookup(term, retriever.lookup_term(term))

    return 1 if failures or retriever.inconsistencies else 0


if __name__ == "__main__":
    sys.exit(main())
