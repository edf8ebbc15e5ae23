"""
Loading of query topics and relevance judgments (qrels) in TREC format.
Malformed records are skipped and reported, the rest of the file is still used.
"""
import re
from typing import Dict, List

from ..diagnostics import ERROR, Diagnostic, LoadResult

TAG_PATTERN = re.compile(r"</?\w+>")

# errors="replace" turns undecodable bytes into this character
REPLACEMENT_CHARACTER = "\ufffd"


class Query:
    """A topic: number plus title, description and narrative text."""

    def __init__(self, number: int, title: str = "", description: str = "", narrative: str = ""):
        self.number = number
        self.title = title
        self.description = description
        self.narrative = narrative

    def __repr__(self):
        return f"Query({self.number}, {self.title!r})"


def _strip_label(text: str, label: str) -> str:
    text = TAG_PATTERN.sub("", text).strip()
    if text.lower().startswith(label.lower()):
        text = text[len(label):]
    return text.strip()


def load_topics(path: str, encoding: str = "utf-8") -> LoadResult:
    """
    Parse a TREC topics file.

    Each ``<top>`` record needs ``<num> Number: N``; the ``<title>`` line,
    the lines after ``<desc>`` and the lines after ``<narr>`` become the three
    query fields. Records with a missing or malformed number are skipped.
    Undecodable bytes are replaced and the line is reported, the record is kept.

    Returns:
        LoadResult with the list of Query objects in file order
    """
    try:
        with open(path, 'r', encoding=encoding, errors="replace") as f:
            lines = f.read().splitlines()
    except OSError as e:
        return LoadResult([], [Diagnostic(path, f"could not read topics: {e}", severity=ERROR)])

    queries = []
    diagnostics = []

    number = None
    number_error = None
    record_start = None
    title = ""
    desc_lines: List[str] = []
    narr_lines: List[str] = []
    section = None

    for line_number, raw_line in enumerate(lines, 1):
        line = raw_line.strip()
        if not line:
            continue
        if REPLACEMENT_CHARACTER in line:
            diagnostics.append(Diagnostic(path, f"line is not valid {encoding}, undecodable bytes replaced", line_number))

        if line.startswith("<top>"):
            number, number_error, record_start = None, None, line_number
            title, desc_lines, narr_lines, section = "", [], [], None
        elif line.startswith("<num>"):
            section = None
            value = TAG_PATTERN.sub("", line).strip()
            if ":" not in value:
                number_error = f"topic number line {value!r} has no ':' delimiter"
                continue
            try:
                number = int(value.split(":", 1)[1].strip())
            except ValueError:
                number_error = f"topic number {value!r} is not an integer"
        elif line.startswith("<title>"):
            section = None
            title = _strip_label(line, "Topic:")
        elif line.startswith("<desc>"):
            section = "desc"
            rest = _strip_label(line, "Description:")
            if rest:
                desc_lines.append(rest)
        elif line.startswith("<narr>"):
            section = "narr"
            rest = _strip_label(line, "Narrative:")
            if rest:
                narr_lines.append(rest)
        elif line.startswith("</top>"):
            if number is None:
                diagnostics.append(Diagnostic(path, f"{number_error or 'topic without <num>'}, record skipped",
                                              record_start or line_number))
            else:
                queries.append(Query(number, title, " ".join(desc_lines), " ".join(narr_lines)))
            number, number_error, section = None, None, None
        elif section == "desc":
            desc_lines.append(line)
        elif section == "narr":
            narr_lines.append(line)

    return LoadResult(queries, diagnostics)


def load_relevance_judgments(path: str, encoding: str = "utf-8") -> LoadResult:
    """
    Load qrels lines ``topic iteration docno grade``.
    Lines with undecodable bytes are skipped, the document name would be wrong.

    Returns:
        LoadResult with {topic: {docno: grade}}
    """
    try:
        with open(path, 'r', encoding=encoding, errors="replace") as f:
            lines = f.read().splitlines()
    except OSError as e:
        return LoadResult({}, [Diagnostic(path, f"could not read relevance judgments: {e}", severity=ERROR)])

    judgments: Dict[int, Dict[str, int]] = {}
    diagnostics = []

    for line_number, line in enumerate(lines, 1):
        parts = line.split()
        if not parts:
            continue
        if REPLACEMENT_CHARACTER in line:
            diagnostics.append(Diagnostic(path, f"line is not valid {encoding}, line skipped", line_number))
            continue
        if len(parts) < 4:
            diagnostics.append(Diagnostic(path, f"expected 4 fields, got {len(parts)}, line skipped", line_number))
            continue
        try:
            topic = int(parts[0])
            relevance = int(parts[3])
        except ValueError:
            diagnostics.append(Diagnostic(path, "topic and grade must be integers, line skipped", line_number))
            continue

        judgments.setdefault(topic, {})[parts[2]] = relevance

    return LoadResult(judgments, diagnostics)
