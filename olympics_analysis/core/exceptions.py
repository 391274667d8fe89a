"""
Error types raised by the analysis pipeline.
"""

from typing import Iterable, List, Tuple


class AnalysisError(Exception):
    """Base class for errors that abort an analysis run."""


class ParseError(AnalysisError):
    """A row or column of an input table could not be parsed."""

    def __init__(self, row: int, column: str, message: str, source: str = None):
        self.row = row
        self.column = column
        self.message = message
        self.source = source
        location = f"{source}: " if source else ""
        super().__init__(f"{location}row {row}, column {column!r}: {message}")


class ImputationError(AnalysisError):
    """A (Year, Sex) group has no observations to estimate a missing value from."""

    def __init__(self, column: str, groups: Iterable[Tuple]):
        self.column = column
        self.groups: List[Tuple] = list(groups)
        shown = ", ".join(str(g) for g in self.groups[:10])
        more = f" (+{len(self.groups) - 10} more)" if len(self.groups) > 10 else ""
        super().__init__(f"No observed {column} values in groups: {shown}{more}")


class JoinGapError(AnalysisError):
    """NOC codes without a region row were dropped by the region join."""

    def __init__(self, nocs: Iterable[str]):
        self.nocs = sorted(set(nocs))
        super().__init__(f"NOC codes missing from region table: {', '.join(self.nocs)}")
