import os
import sys

import pytest

sys.path.insert(0, os.path.abspath(os.path.dirname(__file__)))

from VectorRetriever.build_inverted_index import IndexBuilder
from VectorRetriever.preprocessing.dictionary import IdMapping
from VectorRetriever.preprocessing.preprocess import LowercasePreprocessor, PreprocessingPipeline
from VectorRetriever.tfidf_search.tfidf_search import TFIDFSearchEngine

CORPUS_FILE = """<DOC>
<DOCNO> FT911-1 </DOCNO>
<PROFILE>_AN-BEOA7AAIFT</PROFILE>
<TEXT>
Cats chase the dog around the garden.
The cats are quick.
</TEXT>
</DOC>
<DOC>
<DOCNO> FT911-2 </DOCNO>
<TEXT>
A dog watches a bird.
</TEXT>
</DOC>
"""

SECOND_CORPUS_FILE = """<DOC>
<DOCNO> FT911-3 </DOCNO>
<TEXT>Birds sing in the garden every morning.</TEXT>
</DOC>
"""

TOPICS_FILE = """<top>
<num> Number: 351
<title> cats

<desc> Description:
Documents about cats chasing dogs.

<narr> Narrative:
A relevant document mentions a cat in a garden.
</top>

<top>
<num> Number: 352
<title> singing birds

<desc> Description:
Where do birds sing?

<narr> Narrative:
Any garden with a bird is relevant.
</top>
"""

QRELS_FILE = """351 0 FT911-1 1
351 0 FT911-2 0
352 0 FT911-2 1
352 0 FT911-3 1
"""


@pytest.fixture
def term_dictionary():
    return IdMapping.from_names(["cat", "dog", "bird"], name="terms")


@pytest.fixture
def document_dictionary():
    return IdMapping.from_names(["A", "B"], name="documents")


@pytest.fixture
def builder(term_dictionary, document_dictionary):
    """Minimal corpus: A = "cat dog cat", B = "dog bird"."""
    index_builder = IndexBuilder(term_dictionary, document_dictionary)
    index_builder.index_terms("A", ["cat", "dog", "cat"])
    index_builder.index_terms("B", ["dog", "bird"])
    return index_builder


@pytest.fixture
def snapshot(builder):
    return builder.snapshot()


@pytest.fixture
def pipeline():
    return PreprocessingPipeline([LowercasePreprocessor()], name="Lowercase")


@pytest.fixture
def engine(snapshot, pipeline):
    return TFIDFSearchEngine(snapshot, pipeline)


@pytest.fixture
def corpus_dir(tmp_path):
    folder = tmp_path / "corpus"
    folder.mkdir()
    (folder / "ft911_1.txt").write_text(CORPUS_FILE, encoding="latin-1")
    (folder / "ft911_2.txt").write_text(SECOND_CORPUS_FILE, encoding="latin-1")
    (folder / "README.md").write_text("not part of the corpus", encoding="latin-1")
    return folder


@pytest.fixture
def topics_file(tmp_path):
    path = tmp_path / "topics.txt"
    path.write_text(TOPICS_FILE, encoding="utf-8")
    return path


@pytest.fixture
def qrels_file(tmp_path):
    path = tmp_path / "main.qrels"
    path.write_text(QRELS_FILE, encoding="utf-8")
    return path
