"""
TF-IDF search module for information retrieval using the TF-IDF weighting scheme.
Supports ranking documents by relevance to queries based on cosine similarity.
"""
from typing import Dict, List, Mapping, Optional, Tuple

from .vector_space import VectorSpaceModel, compute_cosine_similarity, vector_norm
from ..eval_interface.interface import SearchEngine
from ..preprocessing.preprocess import PreprocessingPipeline


class RetrievalEngine:
    """
    Scores documents against a query vector by cosine similarity.

    Only documents sharing at least one weighted term with the query are
    scored, found through the inverted index. Ranking is by descending
    similarity, ties broken by ascending document id.
    """

    def __init__(self, model: VectorSpaceModel):
        self.model = model
        self.snapshot = model.snapshot
        self._doc_vectors: Dict[int, Dict[int, float]] = {}
        self._doc_norms: Dict[int, float] = {}

    def _document(self, doc_id: int) -> Tuple[Dict[int, float], float]:
        vector = self._doc_vectors.get(doc_id)
        if vector is None:
            vector = self.model.document_vector(doc_id)
            self._doc_vectors[doc_id] = vector
            self._doc_norms[doc_id] = vector_norm(vector)
        return vector, self._doc_norms[doc_id]

    def candidates(self, query_vector: Mapping[int, float]) -> List[int]:
        """Ids of documents containing at least one weighted query term, ascending."""
        doc_ids = set()
        for term_id, weight in query_vector.items():
            if weight > 0:
                doc_ids.update(self.snapshot.inverted_index.get(term_id, {}))
        return sorted(doc_ids)

    def score_ids(self, query_vector: Mapping[int, float]) -> List[Tuple[int, float]]:
        """
        Rank documents for a query vector.

        Returns:
            List of (doc_id, similarity) with similarity in (0, 1]; empty when
            the query has no scorable terms
        """
        query_norm = vector_norm(query_vector)
        if query_norm == 0:
            return []

        scores = []
        for doc_id in self.candidates(query_vector):
            doc_vector, doc_norm = self._document(doc_id)
            if doc_norm == 0:
                continue
            cosine = compute_cosine_similarity(query_vector, doc_vector, query_norm, doc_norm)
            if cosine > 0:
                scores.append((doc_id, min(cosine, 1.0)))

        scores.sort(key=lambda item: (-item[1], item[0]))
        return scores

    def score(self, query_vector: Mapping[int, float]) -> List[Tuple[str, float]]:
        """Same as ``score_ids`` with document names instead of ids."""
        names = self.snapshot.document_dictionary
        return [(names.name_of(doc_id), similarity) for doc_id, similarity in self.score_ids(query_vector)]


class TermLookup:
    """Result of looking up one term: its id and the documents it occurs in."""

    def __init__(self, term: str, term_id: int, postings: List[Tuple[str, int]]):
        self.term = term
        self.term_id = term_id
        self.postings = postings

    def __repr__(self):
        return f"TermLookup({self.term!r}, {self.term_id}, {len(self.postings)} documents)"


class TFIDFSearchEngine(SearchEngine):
    """TF-IDF search engine over raw query text."""

    def __init__(self, snapshot, pipeline: PreprocessingPipeline):
        """
        Args:
            snapshot: IndexSnapshot of a finished build
            pipeline: The preprocessing pipeline the documents were indexed with
        """
        self.snapshot = snapshot
        self.pipeline = pipeline
        self.model = VectorSpaceModel(snapshot)
        self.engine = RetrievalEngine(self.model)

    def query_vector(self, query: str) -> Dict[int, float]:
        return self.model.query_vector_from_terms(self.pipeline.terms(query))

    def search(self, query: str, top_k: Optional[int] = None) -> List[Tuple[str, float]]:
        """
        Search for documents matching the query.

        Args:
            query: Query string
            top_k: Number of top results to return (all matches if None)

        Returns:
            List of (document name, similarity) tuples
        """
        results = self.engine.score(self.query_vector(query))
        return results if top_k is None else results[:top_k]

    def lookup_term(self, raw_term: str) -> Optional[TermLookup]:
        """
        Look up a raw term after preprocessing it like the documents.

        Returns:
            TermLookup with postings ordered by document id (empty when the term
            is in the dictionary but no document holds it any more), or None if
            the term is unknown (also when preprocessing removes it)
        """
        terms = self.pipeline.terms(raw_term.strip())
        if not terms:
            return None

        term = terms[0]
        term_id = self.snapshot.term_dictionary.id_of(term)
        if term_id is None:
            return None

        postings = self.snapshot.inverted_index.get(term_id, {})
        names = self.snapshot.document_dictionary
        return TermLookup(term, term_id, [(names.name_of(doc_id), count)
                                          for doc_id, count in sorted(postings.items())])
