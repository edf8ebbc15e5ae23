"""
Test ranking and term lookup of the TF-IDF search engine
"""

import pytest

from VectorRetriever.build_inverted_index import IndexBuilder, build_from_corpus
from VectorRetriever.config import DEFAULT_CONFIG
from VectorRetriever.main import display_lookup
from VectorRetriever.preprocessing.dictionary import IdMapping
from VectorRetriever.preprocessing.document import Document
from VectorRetriever.preprocessing.preprocess import create_pipeline
from VectorRetriever.tfidf_search.tfidf_search import RetrievalEngine, TermLookup, TFIDFSearchEngine
from VectorRetriever.tfidf_search.vector_space import VectorSpaceModel


def test_minimal_corpus_query(engine):
    """A query for cat only matches A, B shares no weighted term and is left out"""
    results = engine.search("cat")
    assert [docno for docno, _ in results] == ["A"]
    assert 0 < results[0][1] <= 1.0
    assert results[0][1] == pytest.approx(1.0)


def test_query_terms_are_preprocessed(engine):
    assert engine.search("CAT") == engine.search("cat")


def test_empty_query(engine):
    assert engine.search("") == []
    assert engine.search("!!! 123") == []


def test_query_without_weighted_terms(engine):
    # "dog" occurs in every document so its idf is 0
    assert engine.search("dog") == []
    assert engine.search("unicorn") == []


def test_top_k(engine):
    assert len(engine.search("cat bird", top_k=1)) == 1
    assert len(engine.search("cat bird")) == 2


def test_ties_broken_by_document_id(pipeline):
    terms = IdMapping.from_names(["cat", "dog", "bird"], name="terms")
    documents = IdMapping.from_names(["Z", "A", "M"], name="documents")
    index_builder = IndexBuilder(terms, documents)
    index_builder.index_terms("A", ["cat", "dog"])
    index_builder.index_terms("Z", ["cat", "dog"])
    index_builder.index_terms("M", ["bird"])

    results = TFIDFSearchEngine(index_builder.snapshot(), pipeline).search("cat")

    assert [docno for docno, _ in results] == ["Z", "A"]
    assert results[0][1] == results[1][1]


def test_ranking_is_deterministic(snapshot):
    model = VectorSpaceModel(snapshot)
    query = model.query_vector({1: 1, 3: 2})

    first = RetrievalEngine(model).score_ids(query)
    second = RetrievalEngine(VectorSpaceModel(snapshot)).score_ids(query)

    assert first == second
    assert [doc_id for doc_id, _ in first] == [2, 1]


def test_candidates_come_from_inverted_index(snapshot):
    engine = RetrievalEngine(VectorSpaceModel(snapshot))
    assert engine.candidates({1: 0.5}) == [1]
    assert engine.candidates({3: 0.5, 1: 0.2}) == [1, 2]
    assert engine.candidates({2: 0.0}) == []


def test_lookup_term(engine):
    lookup = engine.lookup_term("dog")
    assert lookup.term == "dog"
    assert lookup.term_id == 2
    assert lookup.postings == [("A", 1), ("B", 1)]


def test_lookup_unknown_term(engine):
    assert engine.lookup_term("unicorn") is None
    assert engine.lookup_term("   ") is None


def test_lookup_term_uses_pipeline(snapshot):
    pipeline, _ = create_pipeline(DEFAULT_CONFIG)
    engine = TFIDFSearchEngine(snapshot, pipeline)

    # "cats" is stemmed to the indexed term
    lookup = engine.lookup_term("Cats")
    assert lookup.term == "cat"
    assert lookup.postings == [("A", 2)]
    # stop words never reach the index
    assert engine.lookup_term("the") is None


def test_lookup_term_without_postings(pipeline):
    documents = [Document("D1", "cat dog"), Document("D2", "dog"), Document("D1", "dog")]
    index_builder, _, _ = build_from_corpus(documents, pipeline, verbose=False)
    engine = TFIDFSearchEngine(index_builder.snapshot(), pipeline)

    # "cat" only occurred in the replaced copy of D1
    lookup = engine.lookup_term("cat")
    assert lookup is not None
    assert lookup.term_id == index_builder.term_dictionary.id_of("cat")
    assert lookup.postings == []


def test_display_lookup(engine, capsys):
    display_lookup("dog", engine.lookup_term("dog"))
    display_lookup("unicorn", engine.lookup_term("unicorn"))
    display_lookup("cat", TermLookup("cat", 1, []))

    out = capsys.readouterr().out
    assert "Document: A, Frequency: 1" in out
    assert "Term 'unicorn' not found in the index." in out
    assert "Term found but appears in no documents." in out
