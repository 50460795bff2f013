"""Error taxonomy shared by every layer of the analyzer.

Errors are raised as exceptions inside the package and only flattened to text
at the dispatch boundary (see `o2o_analyzer.agent.dispatcher`).
"""

from __future__ import annotations


class AnalyzerError(Exception):
    """Base class for all expected analyzer failures."""

    kind = "internal"


class UsageError(AnalyzerError, ValueError):
    """Invalid arguments: unknown domain, missing argument combination, etc."""

    kind = "usage"


class ConfigurationError(UsageError):
    """The analyzer is not pointed at a usable Laravel checkout."""


class UnknownCapabilityError(UsageError):
    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown tool: {name}")
        self.name = name


class NotFoundError(AnalyzerError):
    """A single-entity lookup matched nothing."""

    kind = "not_found"


class CollaboratorError(AnalyzerError):
    """An external process failed, timed out, or produced unusable output."""

    kind = "collaborator"


class InternalError(AnalyzerError):
    """Unexpected failure wrapped at the dispatch boundary."""

    kind = "internal"
