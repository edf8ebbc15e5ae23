"""
Cross-check of the forward and inverted indexes. The validator only observes:
it reports every disagreement and returns how many there were, it never
repairs anything.
"""
from typing import List, Mapping, Optional

from .diagnostics import ERROR, Diagnostic, console, report

MISSING_TERM = "missing_term"
MISSING_POSTING = "missing_posting"
COUNT_MISMATCH = "count_mismatch"
MISSING_DOCUMENT = "missing_document"
MISSING_FORWARD_TERM = "missing_forward_term"


class Inconsistency:
    """One disagreement between the two indexes."""

    def __init__(self, kind: str, term_id: int, doc_id: int,
                 forward_count: Optional[int] = None, inverted_count: Optional[int] = None):
        self.kind = kind
        self.term_id = term_id
        self.doc_id = doc_id
        self.forward_count = forward_count
        self.inverted_count = inverted_count

    def describe(self) -> str:
        if self.kind == MISSING_TERM:
            return f"TermID {self.term_id} exists in doc {self.doc_id} but missing in inverted index"
        if self.kind == MISSING_POSTING:
            return f"TermID {self.term_id} missing doc {self.doc_id} entry in inverted index"
        if self.kind == COUNT_MISMATCH:
            return (f"Frequency mismatch for term {self.term_id} in doc {self.doc_id} "
                    f"(fwd:{self.forward_count} vs inv:{self.inverted_count})")
        if self.kind == MISSING_DOCUMENT:
            return f"DocID {self.doc_id} exists for term {self.term_id} but missing in forward index"
        return f"TermID {self.term_id} missing in doc {self.doc_id}'s forward index"

    def __repr__(self):
        return f"Inconsistency({self.kind!r}, term_id={self.term_id}, doc_id={self.doc_id})"


def find_inconsistencies(forward_index: Mapping[int, Mapping[int, int]],
                         inverted_index: Mapping[int, Mapping[int, int]]) -> List[Inconsistency]:
    """
    Run both passes and collect every disagreement.

    Pass (a): every (doc, term, count) of the forward index must exist in the
    inverted index with the same count.
    Pass (b): every (term, doc) of the inverted index must exist in the
    forward index; counts were already compared by pass (a).
    """
    problems = []

    for doc_id, term_counts in forward_index.items():
        for term_id, count in term_counts.items():
            postings = inverted_index.get(term_id)
            if postings is None:
                problems.append(Inconsistency(MISSING_TERM, term_id, doc_id, forward_count=count))
            elif doc_id not in postings:
                problems.append(Inconsistency(MISSING_POSTING, term_id, doc_id, forward_count=count))
            elif postings[doc_id] != count:
                problems.append(Inconsistency(COUNT_MISMATCH, term_id, doc_id,
                                              forward_count=count, inverted_count=postings[doc_id]))

    for term_id, postings in inverted_index.items():
        for doc_id, count in postings.items():
            term_counts = forward_index.get(doc_id)
            if term_counts is None:
                problems.append(Inconsistency(MISSING_DOCUMENT, term_id, doc_id, inverted_count=count))
            elif term_id not in term_counts:
                problems.append(Inconsistency(MISSING_FORWARD_TERM, term_id, doc_id, inverted_count=count))

    return problems


def validate_indexes(forward_index: Mapping[int, Mapping[int, int]],
                     inverted_index: Mapping[int, Mapping[int, int]],
                     verbose: bool = True) -> int:
    """
    Validate index consistency, report every problem on the error channel.

    Returns:
        Number of inconsistencies found (0 for a correctly built index)
    """
    if verbose:
        console.print("Validating index consistency...")

    problems = find_inconsistencies(forward_index, inverted_index)
    report(Diagnostic("index", problem.describe(), severity=ERROR) for problem in problems)

    if verbose:
        console.print(f"Validation complete. Found {len(problems)} consistency issues.")
    return len(problems)
