"""
Term and document dictionaries: bijective mappings between strings and the
dense integer ids the indexes are keyed by.
"""
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from .document import Document
from .preprocess import PreprocessingPipeline
from ..diagnostics import Diagnostic, LoadResult


class IdMapping:
    """
    Bidirectional name <-> id mapping. Any assignment that would map one name
    to two ids, or one id to two names, is rejected with ValueError.
    """

    def __init__(self, name: str = "mapping"):
        self.name = name
        self._ids: Dict[str, int] = {}
        self._names: Dict[int, str] = {}

    def add(self, key: str, id_: int) -> None:
        if not isinstance(id_, int) or isinstance(id_, bool) or id_ <= 0:
            raise ValueError(f"{self.name}: id for {key!r} must be a positive integer, got {id_!r}")

        existing_id = self._ids.get(key)
        existing_key = self._names.get(id_)
        if existing_id == id_:
            return
        if existing_id is not None:
            raise ValueError(f"{self.name}: {key!r} already has id {existing_id}, cannot assign {id_}")
        if existing_key is not None:
            raise ValueError(f"{self.name}: id {id_} already assigned to {existing_key!r}, cannot assign {key!r}")

        self._ids[key] = id_
        self._names[id_] = key

    def id_of(self, key: str) -> Optional[int]:
        return self._ids.get(key)

    def name_of(self, id_: int) -> Optional[str]:
        return self._names.get(id_)

    def items(self) -> List[Tuple[int, str]]:
        """(id, name) pairs in ascending id order."""
        return sorted(self._names.items())

    def names(self) -> Iterator[str]:
        return iter(self._ids)

    def __contains__(self, key) -> bool:
        return key in self._ids

    def __len__(self) -> int:
        return len(self._ids)

    def __repr__(self):
        return f"IdMapping({self.name!r}, {len(self)} entries)"

    @classmethod
    def from_names(cls, names: Iterable[str], name: str = "mapping") -> "IdMapping":
        """Assign dense ids starting at 1 in the given order."""
        mapping = cls(name)
        for id_, key in enumerate(names, 1):
            mapping.add(key, id_)
        return mapping

    @classmethod
    def from_pairs(cls, pairs: Iterable[Tuple[int, str]], name: str = "mapping") -> "IdMapping":
        """Rebuild a mapping from (id, name) pairs, e.g. from ``items()``."""
        mapping = cls(name)
        for id_, key in pairs:
            mapping.add(key, id_)
        return mapping


def term_sort_key(term: str):
    return term.lower(), term


def build_term_dictionary(term_streams: Iterable[Iterable[str]]) -> IdMapping:
    """
    Collect every distinct term and assign ids in case-insensitive alphabetical order.
    """
    all_terms = set()
    for terms in term_streams:
        all_terms.update(term for term in terms if term and term.strip())
    return IdMapping.from_names(sorted(all_terms, key=term_sort_key), name="terms")


def build_document_dictionary(docnos: Iterable[str]) -> LoadResult:
    """
    Assign document ids in order of first appearance. Repeated DOCNOs keep
    their first id and are reported.
    """
    mapping = IdMapping("documents")
    diagnostics = []
    next_id = 1
    for docno in docnos:
        if docno in mapping:
            diagnostics.append(Diagnostic("corpus", f"duplicate DOCNO {docno!r}, keeping id {mapping.id_of(docno)}"))
            continue
        mapping.add(docno, next_id)
        next_id += 1
    return LoadResult(mapping, diagnostics)


def build_dictionaries(documents: List[Document], pipeline: PreprocessingPipeline) -> LoadResult:
    """
    Build both dictionaries for a corpus.

    Returns:
        LoadResult whose value is ``(term_dictionary, document_dictionary, term_streams)``;
        ``term_streams`` holds the preprocessed terms of every document, in
        document order, so the corpus is tokenized only once.
    """
    term_streams = [pipeline.terms(document.text) for document in documents]
    term_dictionary = build_term_dictionary(term_streams)
    document_dictionary, diagnostics = build_document_dictionary(doc.docno for doc in documents)
    return LoadResult((term_dictionary, document_dictionary, term_streams), diagnostics)
