"""
Test the term and document id mappings
"""

import pytest

from VectorRetriever.preprocessing.dictionary import (
    IdMapping,
    build_document_dictionary,
    build_term_dictionary,
)


def test_mapping_is_bijective():
    mapping = IdMapping("terms")
    mapping.add("cat", 1)
    mapping.add("cat", 1)

    with pytest.raises(ValueError):
        mapping.add("cat", 2)
    with pytest.raises(ValueError):
        mapping.add("dog", 1)
    with pytest.raises(ValueError):
        mapping.add("dog", 0)

    assert len(mapping) == 1
    assert mapping.id_of("cat") == 1
    assert mapping.name_of(1) == "cat"
    assert mapping.id_of("dog") is None
    assert mapping.name_of(2) is None


def test_items_sorted_by_id():
    mapping = IdMapping.from_pairs([(3, "bird"), (1, "cat"), (2, "dog")])
    assert mapping.items() == [(1, "cat"), (2, "dog"), (3, "bird")]
    assert "bird" in mapping
    assert "fish" not in mapping


def test_term_dictionary_is_alphabetical():
    terms = build_term_dictionary([["dog", "Cat", "cat"], ["bird", ""], []])
    assert terms.items() == [(1, "bird"), (2, "Cat"), (3, "cat"), (4, "dog")]


def test_document_dictionary_reports_duplicates():
    documents, diagnostics = build_document_dictionary(["FT911-5", "FT911-2", "FT911-5"])

    assert documents.items() == [(1, "FT911-5"), (2, "FT911-2")]
    assert len(diagnostics) == 1
    assert "FT911-5" in diagnostics[0].message
