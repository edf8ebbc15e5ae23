#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Evaluation script for the VectorRetriever system.
Builds the index from a TREC corpus, runs the title, title+desc and
title+narr queries of every topic and writes the ranked results and the
precision/recall report.
"""

import argparse
import os
import sys
import time

# Add the project root directory to Python path
sys.path.insert(0, os.path.abspath(os.path.dirname(__file__)))

from VectorRetriever.config import load_config
from VectorRetriever.diagnostics import console, report
from VectorRetriever.main import VectorRetriever


def main(argv=None):
    """Main function for evaluating the VectorRetriever system."""
    parser = argparse.ArgumentParser(description="Evaluate VectorRetriever on TREC topics")
    parser.add_argument("--config", help="Path to configuration file")
    parser.add_argument("--corpus", help="Folder with the TREC corpus files")
    parser.add_argument("--topics", help="Topics file")
    parser.add_argument("--qrels", help="Relevance judgments file")
    parser.add_argument("--output_dir", help="Directory for output files")
    args = parser.parse_args(argv)

    config, problems = load_config(args.config)
    report(problems)
    retriever = VectorRetriever(config)

    console.print("\n======= PARSING =======")
    start_time = time.time()
    if not retriever.load_documents(args.corpus):
        console.print("[bold red]Error: the corpus could not be loaded[/bold red]")
        return 1
    parse_time = time.time() - start_time
    console.print(f"Parsing completed in {parse_time:.2f} seconds")

    console.print("\n======= INDEXING =======")
    start_time = time.time()
    retriever.build_index()
    failures = retriever.save_index(args.output_dir)
    index_time = time.time() - start_time
    console.print(f"Indexing completed in {index_time:.2f} seconds")

    console.print("\n======= QUERY PROCESSING =======")
    start_time = time.time()
    if retriever.load_evaluation_data(args.topics, args.qrels):
        failures += retriever.process_queries(args.output_dir)
    else:
        console.print("[yellow]No topics loaded, skipping query processing[/yellow]")
    query_time = time.time() - start_time
    console.print(f"Query processing completed in {query_time:.2f} seconds")

    console.print("\n======= SUMMARY =======")
    console.print(f"Documents: {len(retriever.documents)}")
    console.print(f"Parsing time: {parse_time:.2f} seconds")
    console.print(f"Indexing time: {index_time:.2f} seconds")
    console.print(f"Query processing time: {query_time:.2f} seconds")
    if failures:
        console.print(f"[yellow]{failures} output file(s) could not be written[/yellow]")

    return 0


if __name__ == "__main__":
    sys.exit(main())
