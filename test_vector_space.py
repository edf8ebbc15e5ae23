"""
Test TF-IDF weighting and cosine similarity
"""

import math

import pytest

from VectorRetriever.build_inverted_index import IndexSnapshot
from VectorRetriever.preprocessing.dictionary import IdMapping
from VectorRetriever.tfidf_search.vector_space import VectorSpaceModel, compute_cosine_similarity


@pytest.fixture
def graded_snapshot():
    """Term 1 in one document, term 2 in two, term 3 in all four."""
    forward = {
        1: {1: 1, 2: 1, 3: 1},
        2: {2: 2, 3: 1},
        3: {3: 5},
        4: {3: 1},
    }
    inverted = {
        1: {1: 1},
        2: {1: 1, 2: 2},
        3: {1: 1, 2: 1, 3: 5, 4: 1},
    }
    terms = IdMapping.from_names(["rare", "common", "everywhere"], name="terms")
    documents = IdMapping.from_names(["D1", "D2", "D3", "D4"], name="documents")
    return IndexSnapshot(forward, inverted, terms, documents)


def test_idf_values(snapshot):
    model = VectorSpaceModel(snapshot)
    assert model.idf(1) == pytest.approx(math.log(2))
    assert model.idf(2) == 0.0
    assert model.idf(3) == pytest.approx(math.log(2))


def test_idf_monotonic(graded_snapshot):
    model = VectorSpaceModel(graded_snapshot)
    idfs = [model.idf(term_id) for term_id in (1, 2, 3)]
    assert idfs[0] > idfs[1] > idfs[2]
    # df == N
    assert idfs[2] == 0.0


def test_idf_of_unknown_term(snapshot):
    model = VectorSpaceModel(snapshot)
    assert model.document_frequency(99) == 0
    assert model.idf(99) == 0.0


def test_document_vector(snapshot):
    model = VectorSpaceModel(snapshot)
    vector = model.document_vector(1)
    assert vector[1] == pytest.approx(2 / 3 * math.log(2))
    assert vector[2] == 0.0
    assert model.document_vector(42) == {}


def test_weights_are_non_negative(graded_snapshot):
    model = VectorSpaceModel(graded_snapshot)
    for doc_id in graded_snapshot.forward_index:
        assert all(weight >= 0 for weight in model.document_vector(doc_id).values())
    assert all(weight >= 0 for weight in model.query_vector({1: 3, 2: 1, 3: 7}).values())


def test_query_vector_smoothing(snapshot):
    model = VectorSpaceModel(snapshot)
    vector = model.query_vector({1: 1, 3: 1})
    assert vector[1] == pytest.approx(0.75 * math.log(2))
    assert vector[3] == pytest.approx(0.75 * math.log(2))


def test_query_vector_drops_unknown_ids(snapshot):
    model = VectorSpaceModel(snapshot)
    vector = model.query_vector({1: 1, 99: 1})
    assert set(vector) == {1}
    # the unknown id still counts toward the query length
    assert vector[1] == pytest.approx(0.75 * math.log(2))


def test_query_vector_from_terms_counts_unknown_terms(snapshot):
    model = VectorSpaceModel(snapshot)
    vector = model.query_vector_from_terms(["cat", "unicorn"])
    assert vector == {1: pytest.approx(0.75 * math.log(2))}


def test_empty_query_vector(snapshot):
    model = VectorSpaceModel(snapshot)
    assert model.query_vector({}) == {}
    assert model.query_vector_from_terms([]) == {}


def test_cosine_similarity():
    assert compute_cosine_similarity({1: 1.0, 2: 1.0}, {1: 2.0, 2: 2.0}) == pytest.approx(1.0)
    assert compute_cosine_similarity({1: 1.0}, {2: 1.0}) == 0.0
    assert compute_cosine_similarity({}, {1: 1.0}) == 0.0
    assert compute_cosine_similarity({1: 0.0}, {1: 1.0}) == 0.0


def test_cosine_similarity_bounds(graded_snapshot):
    model = VectorSpaceModel(graded_snapshot)
    query = model.query_vector({1: 1, 2: 2})
    for doc_id in graded_snapshot.forward_index:
        similarity = compute_cosine_similarity(query, model.document_vector(doc_id))
        assert 0.0 <= similarity <= 1.0 + 1e-12
