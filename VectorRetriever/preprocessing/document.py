"""
TREC-style corpus reading. A corpus file holds ``<DOC>`` records, each with a
``<DOCNO>`` line and a ``<TEXT>`` ... ``</TEXT>`` block.
"""
import os
import re
from typing import List, Optional

from ..diagnostics import ERROR, Diagnostic, LoadResult, console

DOCNO_PATTERN = re.compile(r"<DOCNO>(.*?)(?:</DOCNO>|$)")


class Document:
    """
    Represents a document of the collection: its DOCNO and raw text.
    """

    def __init__(self, docno: str, text: str = "", source: Optional[str] = None):
        self.docno = docno
        self.text = text
        self.source = source

    def __repr__(self):
        return f"Document(docno={self.docno!r}, source={self.source!r}, length={len(self.text)})"


def parse_trec_file(path: str, encoding: str = "latin-1") -> LoadResult:
    """
    Parse a single TREC file.

    Records without a DOCNO or whose TEXT block is never closed are skipped
    with a diagnostic. An unreadable file gives no documents and an error
    diagnostic.

    Returns:
        LoadResult with the list of Documents found in the file
    """
    documents = []
    diagnostics = []

    try:
        with open(path, 'r', encoding=encoding) as f:
            lines = f.read().splitlines()
    except OSError as e:
        return LoadResult([], [Diagnostic(path, f"could not read file: {e}", severity=ERROR)])

    docno = ""
    text_lines = []
    text_start = None
    in_text = False

    for line_number, line in enumerate(lines, 1):
        if in_text:
            if "</TEXT>" in line:
                text_lines.append(line.split("</TEXT>")[0])
                in_text = False
                if docno:
                    documents.append(Document(docno, " ".join(text_lines).strip(), source=path))
                else:
                    diagnostics.append(Diagnostic(path, "TEXT block without DOCNO, record skipped", text_start))
            else:
                text_lines.append(line)
            continue

        if "<DOC>" in line:
            docno = ""
        elif "<DOCNO>" in line:
            docno = DOCNO_PATTERN.search(line).group(1).strip()
        elif "<TEXT>" in line:
            in_text = True
            text_start = line_number
            rest = line.split("<TEXT>", 1)[1]
            if "</TEXT>" in rest:
                # whole block on one line
                text_lines = [rest.split("</TEXT>")[0]]
                in_text = False
                if docno:
                    documents.append(Document(docno, text_lines[0].strip(), source=path))
                else:
                    diagnostics.append(Diagnostic(path, "TEXT block without DOCNO, record skipped", line_number))
            else:
                text_lines = [rest]

    if in_text:
        diagnostics.append(Diagnostic(path, f"unterminated TEXT block for {docno or 'unknown DOCNO'}, record skipped",
                                      text_start))

    return LoadResult(documents, diagnostics)


def list_corpus_files(folder: str, extension: str = ".txt") -> List[str]:
    """Corpus files of a folder, sorted by name. An empty extension matches every file."""
    files = []
    for name in sorted(os.listdir(folder)):
        path = os.path.join(folder, name)
        if os.path.isfile(path) and (not extension or name.endswith(extension)):
            files.append(path)
    return files


def load_corpus(folder: str, extension: str = ".txt", encoding: str = "latin-1",
                verbose: bool = True) -> LoadResult:
    """
    Load every document of a TREC corpus folder.

    Args:
        folder: Directory with the corpus files
        extension: Only files ending with this suffix are read
        encoding: File encoding
        verbose: Print progress every 100 files

    Returns:
        LoadResult with the list of Documents in file order
    """
    try:
        files = list_corpus_files(folder, extension)
    except OSError as e:
        return LoadResult([], [Diagnostic(folder, f"could not list corpus folder: {e}", severity=ERROR)])

    if not files:
        return LoadResult([], [Diagnostic(folder, "the folder is empty or has no corpus files", severity=ERROR)])

    if verbose:
        console.print(f"Processing {len(files)} files...")

    documents = []
    diagnostics = []
    for count, path in enumerate(files, 1):
        file_documents, problems = parse_trec_file(path, encoding)
        documents.extend(file_documents)
        diagnostics.extend(problems)
        if verbose and count % 100 == 0:
            console.print(f"Processed {count} files")

    if verbose:
        console.print(f"Finished processing {len(files)} files, {len(documents)} documents")

    return LoadResult(documents, diagnostics)
