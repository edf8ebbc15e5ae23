"""
TF-IDF vector space model over an IndexSnapshot.

    idf(t)       = ln(N / df(t)), 0 when df(t) = 0, N = size of the document dictionary
    doc weight   = (count / document length) * idf(t)
    query weight = (0.5 + 0.5 * qcount / query length) * idf(t)
"""
import math
from typing import Dict, Mapping, Optional


def vector_norm(vector: Mapping[int, float]) -> float:
    return math.sqrt(sum(weight * weight for weight in vector.values()))


def compute_cosine_similarity(vec1: Mapping[int, float], vec2: Mapping[int, float],
                              norm1: Optional[float] = None, norm2: Optional[float] = None) -> float:
    """
    Compute cosine similarity between two sparse vectors.

    Args:
        vec1: First vector as a dictionary {term_id: weight}
        vec2: Second vector as a dictionary {term_id: weight}
        norm1: Precomputed norm of vec1 (optional)
        norm2: Precomputed norm of vec2 (optional)

    Returns:
        Cosine similarity, 0 if either vector has zero norm
    """
    norm1 = vector_norm(vec1) if norm1 is None else norm1
    norm2 = vector_norm(vec2) if norm2 is None else norm2
    if norm1 == 0 or norm2 == 0:
        return 0.0

    # Iterate over the shorter vector
    if len(vec2) < len(vec1):
        vec1, vec2 = vec2, vec1
    dot_product = sum(weight * vec2[term_id] for term_id, weight in vec1.items() if term_id in vec2)

    return dot_product / (norm1 * norm2)


class VectorSpaceModel:
    """TF-IDF weights computed on demand from an immutable index snapshot."""

    def __init__(self, snapshot):
        self.snapshot = snapshot
        self.total_documents = snapshot.total_documents
        self._idf_cache: Dict[int, float] = {}

    def document_frequency(self, term_id: int) -> int:
        """Number of documents containing the term, 0 for an unknown term."""
        return len(self.snapshot.inverted_index.get(term_id, {}))

    def idf(self, term_id: int) -> float:
        cached = self._idf_cache.get(term_id)
        if cached is not None:
            return cached

        df = self.document_frequency(term_id)
        if df == 0 or self.total_documents == 0:
            value = 0.0
        else:
            # df > N only happens on an inconsistent build
            value = max(0.0, math.log(self.total_documents / df))
        self._idf_cache[term_id] = value
        return value

    def document_vector(self, doc_id: int) -> Dict[int, float]:
        """
        TF-IDF vector of a document. Empty for a document without indexed terms.
        """
        term_counts = self.snapshot.forward_index.get(doc_id)
        if not term_counts:
            return {}

        doc_length = sum(term_counts.values())
        if doc_length == 0:
            return {}

        return {term_id: (count / doc_length) * self.idf(term_id)
                for term_id, count in term_counts.items()}

    def query_vector(self, term_counts: Mapping[int, int], query_length: Optional[int] = None) -> Dict[int, float]:
        """
        Query vector with smoothed term frequency.

        Args:
            term_counts: {term_id: occurrences in the query}
            query_length: Total number of query terms counting repeats, including
                terms that did not make it into ``term_counts``. Defaults to
                the sum of ``term_counts``.

        Returns:
            {term_id: weight}; term ids unknown to the term dictionary are dropped
        """
        if query_length is None:
            query_length = sum(term_counts.values())
        if query_length <= 0:
            return {}

        vector = {}
        for term_id, count in term_counts.items():
            if count <= 0 or self.snapshot.term_dictionary.name_of(term_id) is None:
                continue
            tf = 0.5 + 0.5 * (count / query_length)
            vector[term_id] = tf * self.idf(term_id)
        return vector

    def query_vector_from_terms(self, terms) -> Dict[int, float]:
        """Query vector from a normalized term stream; unknown terms only count toward the length."""
        term_counts: Dict[int, int] = {}
        query_length = 0
        for term in terms:
            query_length += 1
            term_id = self.snapshot.term_dictionary.id_of(term)
            if term_id is not None:
                term_counts[term_id] = term_counts.get(term_id, 0) + 1
        return self.query_vector(term_counts, query_length)
