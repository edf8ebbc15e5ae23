import argparse
import time
from collections import Counter
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping

from VectorRetriever.diagnostics import console, report
from VectorRetriever.index_validation import validate_indexes
from VectorRetriever.preprocessing.dictionary import IdMapping, build_dictionaries
from VectorRetriever.preprocessing.document import Document


def _freeze(index: Mapping[int, Mapping[int, int]]) -> Mapping[int, Mapping[int, int]]:
    """Read-only copy of a nested index, keys in ascending order."""
    return MappingProxyType({
        key: MappingProxyType(dict(sorted(row.items())))
        for key, row in sorted(index.items())
    })


class IndexSnapshot:
    """
    Immutable view of a finished build: both indexes and both dictionaries.
    Scoring components only ever receive a snapshot, never the builder.
    """

    def __init__(self, forward_index, inverted_index, term_dictionary: IdMapping,
                 document_dictionary: IdMapping):
        self.forward_index = _freeze(forward_index)
        self.inverted_index = _freeze(inverted_index)
        self.term_dictionary = IdMapping.from_pairs(term_dictionary.items(), term_dictionary.name)
        self.document_dictionary = IdMapping.from_pairs(document_dictionary.items(), document_dictionary.name)

    @property
    def total_documents(self) -> int:
        return len(self.document_dictionary)

    def plain_inverted_index(self) -> Dict[int, Dict[int, int]]:
        return {term_id: dict(postings) for term_id, postings in self.inverted_index.items()}

    def plain_forward_index(self) -> Dict[int, Dict[int, int]]:
        return {doc_id: dict(term_counts) for doc_id, term_counts in self.forward_index.items()}


class IndexBuilder:
    """
    Builds the forward index (doc id -> {term id: count}) and the inverted
    index (term id -> {doc id: count}) together, so that one is always the
    transpose of the other.
    """

    def __init__(self, term_dictionary: IdMapping, document_dictionary: IdMapping):
        self.term_dictionary = term_dictionary
        self.document_dictionary = document_dictionary
        self.forward_index: Dict[int, Dict[int, int]] = {}
        self.inverted_index: Dict[int, Dict[int, int]] = {}
        self.indexed_documents = set()

    @property
    def document_count(self) -> int:
        """Distinct documents indexed so far; a repeated DOCNO counts once."""
        return len(self.indexed_documents)

    def add_document(self, doc_id: int, term_counts: Mapping[int, int]) -> None:
        """
        Insert or replace a document's contribution to both indexes.

        Calling this again for the same doc_id replaces the previous counts
        entirely. An empty ``term_counts`` removes the document from the
        indexes.

        Raises:
            ValueError: for a non-positive doc id, term id or count; nothing
                is modified in that case
        """
        if not isinstance(doc_id, int) or doc_id <= 0:
            raise ValueError(f"document id must be a positive integer, got {doc_id!r}")
        for term_id, count in term_counts.items():
            if not isinstance(term_id, int) or term_id <= 0:
                raise ValueError(f"term id must be a positive integer, got {term_id!r} in doc {doc_id}")
            if not isinstance(count, int) or count <= 0:
                raise ValueError(f"count for term {term_id} in doc {doc_id} must be positive, got {count!r}")

        self._remove_document(doc_id)

        if not term_counts:
            return

        self.forward_index[doc_id] = dict(term_counts)
        for term_id, count in term_counts.items():
            self.inverted_index.setdefault(term_id, {})[doc_id] = count

    def _remove_document(self, doc_id: int) -> None:
        previous = self.forward_index.pop(doc_id, None)
        if previous is None:
            return
        for term_id in previous:
            postings = self.inverted_index.get(term_id)
            if postings is None:
                continue
            postings.pop(doc_id, None)
            if not postings:
                del self.inverted_index[term_id]

    def index_terms(self, docno: str, terms: Iterable[str]) -> bool:
        """
        Count a document's normalized terms and add them to the indexes.

        Terms missing from the term dictionary are ignored.

        Returns:
            False if the document name has no id, True otherwise
        """
        doc_id = self.document_dictionary.id_of(docno)
        if doc_id is None:
            return False

        term_counts = {}
        for term, count in Counter(terms).items():
            term_id = self.term_dictionary.id_of(term)
            if term_id is not None:
                term_counts[term_id] = count

        self.add_document(doc_id, term_counts)
        self.indexed_documents.add(doc_id)
        return True

    def build(self, documents: List[Document], term_streams: List[List[str]], verbose: bool = True) -> int:
        """
        Index a whole corpus and validate the result once.

        Args:
            documents: Documents in corpus order
            term_streams: Preprocessed terms of each document, same order
            verbose: Print progress every 100 documents

        Returns:
            Number of index inconsistencies found by the validator
        """
        start_time = time.time()
        skipped = 0

        for count, (document, terms) in enumerate(zip(documents, term_streams), 1):
            if not self.index_terms(document.docno, terms):
                skipped += 1
            if verbose and count % 100 == 0:
                console.print(f"Indexed {count} documents")

        if verbose:
            console.print(f"Indexed {self.document_count} documents in {time.time() - start_time:.2f} seconds")
            if skipped:
                console.print(f"[yellow]Warning: {skipped} documents had no id and were skipped[/yellow]")
            console.print(f"Total terms in inverted index: {len(self.inverted_index)}")
            console.print(f"Total documents in forward index: {len(self.forward_index)}")

        return self.validate(verbose=verbose)

    def validate(self, verbose: bool = True) -> int:
        return validate_indexes(self.forward_index, self.inverted_index, verbose=verbose)

    def snapshot(self) -> IndexSnapshot:
        return IndexSnapshot(self.forward_index, self.inverted_index,
                             self.term_dictionary, self.document_dictionary)

    def print_sample(self, sample_size=10):
        """Print a sample of the inverted index"""
        console.print("\nInverted Index Sample:")
        console.rule()

        for term_id in sorted(self.inverted_index)[:sample_size]:
            postings = self.inverted_index[term_id]
            term = self.term_dictionary.name_of(term_id)
            doc_ids = sorted(postings)
            console.print(f"'{term}' ({term_id}) -> {len(doc_ids)} documents: "
                          f"{doc_ids[:5]}{'...' if len(doc_ids) > 5 else ''}", markup=False)

        console.rule()


def build_from_corpus(documents: List[Document], pipeline, verbose: bool = True):
    """
    Dictionary construction followed by index construction.

    Returns:
        ``(builder, inconsistencies, diagnostics)``
    """
    (term_dictionary, document_dictionary, term_streams), diagnostics = build_dictionaries(documents, pipeline)
    builder = IndexBuilder(term_dictionary, document_dictionary)
    inconsistencies = builder.build(documents, term_streams, verbose=verbose)
    return builder, inconsistencies, diagnostics


def main():
    from VectorRetriever.config import load_config
    from VectorRetriever.index_io import save_all
    from VectorRetriever.preprocessing.document import load_corpus
    from VectorRetriever.preprocessing.preprocess import create_pipeline

    parser = argparse.ArgumentParser(description='Build forward and inverted indexes from a TREC corpus')
    parser.add_argument('corpus', help='Folder with the corpus files')
    parser.add_argument('--config', help='Path to configuration file')
    parser.add_argument('--output-dir', help='Directory for the index files')
    args = parser.parse_args()

    console.rule("Index Builder")

    config, problems = load_config(args.config)
    report(problems)
    pipeline, problems = create_pipeline(config)
    report(problems)

    corpus = config["corpus"]
    documents, problems = load_corpus(args.corpus, corpus["extension"], corpus["encoding"])
    report(problems)
    if not documents:
        console.print("[bold red]Failed to build index: no documents loaded[/bold red]")
        return 1

    builder, inconsistencies, problems = build_from_corpus(documents, pipeline)
    report(problems)
    builder.print_sample()

    failures = save_all(builder.snapshot(), config, args.output_dir)
    console.print("\nDone!")
    return 1 if inconsistencies or failures else 0


if __name__ == "__main__":
    raise SystemExit(main())
