#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Test forward / inverted index construction
"""

import pytest

from VectorRetriever.build_inverted_index import IndexBuilder, build_from_corpus
from VectorRetriever.preprocessing.dictionary import IdMapping
from VectorRetriever.preprocessing.document import Document


def test_minimal_corpus(builder):
    """Both indexes of the two-document corpus"""
    assert builder.forward_index == {1: {1: 2, 2: 1}, 2: {2: 1, 3: 1}}
    assert builder.inverted_index == {1: {1: 2}, 2: {1: 1, 2: 1}, 3: {2: 1}}
    assert builder.validate(verbose=False) == 0


def test_indexes_are_transposes(builder):
    forward_triples = {(doc_id, term_id, count)
                       for doc_id, terms in builder.forward_index.items()
                       for term_id, count in terms.items()}
    inverted_triples = {(doc_id, term_id, count)
                        for term_id, postings in builder.inverted_index.items()
                        for doc_id, count in postings.items()}
    assert forward_triples == inverted_triples


def test_readd_overwrites(builder):
    """Adding a document again replaces its previous counts"""
    builder.add_document(1, {3: 4})

    assert builder.forward_index[1] == {3: 4}
    assert 1 not in builder.inverted_index
    assert builder.inverted_index[2] == {2: 1}
    assert builder.inverted_index[3] == {1: 4, 2: 1}
    assert builder.validate(verbose=False) == 0


def test_empty_document_has_no_forward_row(builder):
    builder.add_document(2, {})

    assert 2 not in builder.forward_index
    assert 3 not in builder.inverted_index
    assert builder.inverted_index[2] == {1: 1}
    assert builder.validate(verbose=False) == 0


@pytest.mark.parametrize("doc_id, term_counts", [
    (0, {1: 1}),
    (-3, {1: 1}),
    (1, {0: 1}),
    (1, {1: 0}),
    (1, {1: -2}),
])
def test_add_document_rejects_invalid_input(builder, doc_id, term_counts):
    forward_before = {doc: dict(terms) for doc, terms in builder.forward_index.items()}
    inverted_before = {term: dict(postings) for term, postings in builder.inverted_index.items()}

    with pytest.raises(ValueError):
        builder.add_document(doc_id, term_counts)

    assert builder.forward_index == forward_before
    assert builder.inverted_index == inverted_before


def test_unknown_terms_and_documents_are_ignored(term_dictionary, document_dictionary):
    index_builder = IndexBuilder(term_dictionary, document_dictionary)

    assert index_builder.index_terms("A", ["cat", "unicorn"])
    assert not index_builder.index_terms("Z", ["cat"])
    assert index_builder.forward_index == {1: {1: 1}}


def test_snapshot_is_immutable_and_detached(builder):
    snapshot = builder.snapshot()

    with pytest.raises(TypeError):
        snapshot.inverted_index[1] = {}
    with pytest.raises(TypeError):
        snapshot.forward_index[1][1] = 10

    builder.add_document(1, {3: 1})
    assert dict(snapshot.forward_index[1]) == {1: 2, 2: 1}
    assert snapshot.total_documents == 2


def test_build_from_corpus(pipeline):
    documents = [Document("D1", "Cat dog cat"), Document("D2", "dog bird"), Document("D1", "duplicate")]

    index_builder, inconsistencies, diagnostics = build_from_corpus(documents, pipeline, verbose=False)

    assert inconsistencies == 0
    assert len(diagnostics) == 1
    assert "D1" in diagnostics[0].message
    # terms get ids alphabetically, documents by first appearance
    assert index_builder.term_dictionary.items() == [(1, "bird"), (2, "cat"), (3, "dog"), (4, "duplicate")]
    assert index_builder.document_dictionary.items() == [(1, "D1"), (2, "D2")]
    # the duplicate replaces the first D1 contribution
    assert index_builder.forward_index == {1: {4: 1}, 2: {1: 1, 3: 1}}


def test_validate_reports_tampered_index(builder):
    builder.inverted_index[1][1] = 5
    assert builder.validate(verbose=False) == 1


def test_term_dictionary_used_as_given():
    terms = IdMapping.from_pairs([(10, "cat"), (20, "dog")], name="terms")
    documents = IdMapping.from_names(["A"], name="documents")
    index_builder = IndexBuilder(terms, documents)
    index_builder.index_terms("A", ["dog", "cat", "dog"])
    assert index_builder.forward_index == {1: {10: 1, 20: 2}}


def test_document_count_ignores_duplicate_docno(pipeline):
    documents = [Document("D1", "cat"), Document("D2", "dog"), Document("D1", "bird")]

    index_builder, _, _ = build_from_corpus(documents, pipeline, verbose=False)

    assert index_builder.document_count == 2
