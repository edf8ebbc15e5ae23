"""
Persisted forms of the indexes and dictionaries.

Text dumps are written in ascending key order so repeated runs produce
identical files. The compressed inverted index is a gzip-compressed pickle
of a plain ``{term_id: {doc_id: count}}`` dictionary.
"""
import gzip
import os
import pickle
from typing import Any, Dict, Mapping

from .config import output_path
from .diagnostics import ERROR, Diagnostic, LoadResult, console, report
from .preprocessing.dictionary import IdMapping, term_sort_key


def format_index_line(key: int, row: Mapping[int, int]) -> str:
    """``key: id1:count1; id2:count2`` with ids ascending."""
    entries = "; ".join(f"{id_}:{count}" for id_, count in sorted(row.items()))
    return f"{key}: {entries}"


def save_index(index: Mapping[int, Mapping[int, int]], path: str) -> None:
    with open(path, 'w', encoding='utf-8') as f:
        for key in sorted(index):
            f.write(format_index_line(key, index[key]) + "\n")


def save_forward_index(snapshot, path: str) -> None:
    save_index(snapshot.forward_index, path)


def save_inverted_index(snapshot, path: str) -> None:
    save_index(snapshot.inverted_index, path)


def save_id_mapping(mapping: IdMapping, path: str) -> None:
    """``id: string`` lines sorted by id."""
    with open(path, 'w', encoding='utf-8') as f:
        for id_, name in mapping.items():
            f.write(f"{id_}: {name}\n")


def save_parser_output(term_dictionary: IdMapping, document_dictionary: IdMapping, path: str) -> None:
    """Terms alphabetically (case-insensitive) then documents by id, tab separated."""
    with open(path, 'w', encoding='utf-8') as f:
        for term in sorted(term_dictionary.names(), key=term_sort_key):
            f.write(f"{term}\t{term_dictionary.id_of(term)}\n")
        for id_, docno in document_dictionary.items():
            f.write(f"{docno}\t{id_}\n")


def save_compressed_index(inverted_index: Mapping[int, Mapping[int, int]], path: str) -> None:
    plain = {term_id: dict(postings) for term_id, postings in inverted_index.items()}
    with gzip.open(path, 'wb') as f:
        pickle.dump(plain, f, protocol=pickle.HIGHEST_PROTOCOL)


def load_compressed_index(path: str) -> LoadResult:
    """
    Load an inverted index written by ``save_compressed_index``.

    Returns:
        LoadResult with the index, or an empty dict and an error diagnostic
    """
    try:
        with gzip.open(path, 'rb') as f:
            data = pickle.load(f)
    except (OSError, EOFError, pickle.UnpicklingError) as e:
        return LoadResult({}, [Diagnostic(path, f"could not load compressed index: {e}", severity=ERROR)])

    if not isinstance(data, dict):
        return LoadResult({}, [Diagnostic(path, "compressed index does not hold a mapping", severity=ERROR)])
    return LoadResult(data, [])


def save_all(snapshot, config: Dict[str, Any], output_dir: str = None, verbose: bool = True) -> int:
    """
    Write every index artefact. A file that cannot be written is reported and
    the remaining files are still attempted.

    Returns:
        Number of artefacts that failed
    """
    writers = [
        ("forward_index", lambda path: save_forward_index(snapshot, path)),
        ("inverted_index", lambda path: save_inverted_index(snapshot, path)),
        ("word_ids", lambda path: save_id_mapping(snapshot.term_dictionary, path)),
        ("doc_ids", lambda path: save_id_mapping(snapshot.document_dictionary, path)),
        ("parser_output", lambda path: save_parser_output(snapshot.term_dictionary,
                                                          snapshot.document_dictionary, path)),
        ("compressed_index", lambda path: save_compressed_index(snapshot.inverted_index, path)),
    ]

    directory = output_dir or config["output"]["directory"]
    try:
        os.makedirs(directory, exist_ok=True)
    except OSError as e:
        report([Diagnostic(directory, f"could not create output directory: {e}", severity=ERROR)])
        return len(writers)

    failures = 0
    for name, write in writers:
        path = output_path(config, name, directory)
        try:
            write(path)
        except OSError as e:
            report([Diagnostic(path, f"could not write {name}: {e}", severity=ERROR)])
            failures += 1
            continue
        if verbose:
            console.print(f"Saved {name.replace('_', ' ')} to [cyan]{path}[/cyan]")

    return failures
