"""
Test the persisted index files
"""

import gzip

from VectorRetriever.config import DEFAULT_CONFIG
from VectorRetriever.diagnostics import ERROR
from VectorRetriever.index_io import (
    format_index_line,
    load_compressed_index,
    save_all,
    save_compressed_index,
)


def test_format_index_line():
    assert format_index_line(2, {3: 1, 1: 4}) == "2: 1:4; 3:1"


def test_save_all(snapshot, tmp_path):
    assert save_all(snapshot, DEFAULT_CONFIG, str(tmp_path), verbose=False) == 0

    assert (tmp_path / "forward_index.txt").read_text(encoding="utf-8") == "1: 1:2; 2:1\n2: 2:1; 3:1\n"
    assert (tmp_path / "inverted_index.txt").read_text(encoding="utf-8") == "1: 1:2\n2: 1:1; 2:1\n3: 2:1\n"
    assert (tmp_path / "word_ids.txt").read_text(encoding="utf-8") == "1: cat\n2: dog\n3: bird\n"
    assert (tmp_path / "doc_ids.txt").read_text(encoding="utf-8") == "1: A\n2: B\n"
    assert (tmp_path / "parser_output.txt").read_text(encoding="utf-8") == (
        "bird\t3\ncat\t1\ndog\t2\nA\t1\nB\t2\n")

    inverted, diagnostics = load_compressed_index(str(tmp_path / "inverted_index.pkl.gz"))
    assert diagnostics == []
    assert inverted == snapshot.plain_inverted_index()


def test_failed_file_does_not_stop_the_others(snapshot, tmp_path):
    # a directory where the forward index file should go
    (tmp_path / "forward_index.txt").mkdir()

    assert save_all(snapshot, DEFAULT_CONFIG, str(tmp_path), verbose=False) == 1
    assert (tmp_path / "inverted_index.txt").is_file()
    assert (tmp_path / "inverted_index.pkl.gz").is_file()


def test_unusable_output_directory(snapshot, tmp_path):
    blocker = tmp_path / "output"
    blocker.write_text("a file, not a directory", encoding="utf-8")

    assert save_all(snapshot, DEFAULT_CONFIG, str(blocker), verbose=False) == 6


def test_compressed_round_trip(tmp_path):
    index = {5: {1: 3, 9: 1}, 7: {2: 2}}
    path = tmp_path / "index.pkl.gz"

    save_compressed_index(index, str(path))

    assert load_compressed_index(str(path)).value == index


def test_load_corrupt_compressed_index(tmp_path):
    not_gzip = tmp_path / "plain.pkl.gz"
    not_gzip.write_text("plain text", encoding="utf-8")
    result = load_compressed_index(str(not_gzip))
    assert result.value == {}
    assert result.diagnostics[0].severity == ERROR

    truncated = tmp_path / "truncated.pkl.gz"
    with gzip.open(truncated, "wb") as f:
        f.write(b"\x80\x05")
    assert not load_compressed_index(str(truncated)).ok

    assert not load_compressed_index(str(tmp_path / "missing.pkl.gz")).ok
