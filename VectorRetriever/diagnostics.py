"""
Console output and diagnostics for VectorRetriever.

Progress messages go to ``console`` (stdout), problems go to ``error_console``
(stderr). Loaders return a ``LoadResult`` instead of raising, so callers can
decide whether a problem is fatal.
"""
from typing import Iterable, List, Optional

from rich.console import Console

console = Console()
error_console = Console(stderr=True)

WARNING = "warning"
ERROR = "error"


class Diagnostic:
    """A single problem found while loading, building or saving."""

    def __init__(self, resource: str, message: str, line_number: Optional[int] = None,
                 severity: str = WARNING):
        self.resource = resource
        self.message = message
        self.line_number = line_number
        self.severity = severity

    def __str__(self):
        location = self.resource
        if self.line_number is not None:
            location = f"{location}:{self.line_number}"
        return f"{self.severity.upper()}: {location}: {self.message}"

    def __repr__(self):
        return (f"Diagnostic(resource={self.resource!r}, message={self.message!r}, "
                f"line_number={self.line_number!r}, severity={self.severity!r})")


class LoadResult:
    """
    Value produced by a loader together with the diagnostics raised on the way.

    Args:
        value: The loaded data (possibly partial)
        diagnostics: Problems encountered, records that were skipped etc.
    """

    def __init__(self, value, diagnostics: Optional[List[Diagnostic]] = None):
        self.value = value
        self.diagnostics = diagnostics or []

    @property
    def ok(self) -> bool:
        return not any(d.severity == ERROR for d in self.diagnostics)

    def __iter__(self):
        # Allows ``value, diagnostics = loader(...)``
        yield self.value
        yield self.diagnostics


def report(diagnostics: Iterable[Diagnostic]) -> int:
    """Print diagnostics on the error channel and return how many were printed."""
    count = 0
    for diagnostic in diagnostics:
        style = "bold red" if diagnostic.severity == ERROR else "yellow"
        error_console.print(str(diagnostic), style=style, markup=False, highlight=False)
        count += 1
    return count
