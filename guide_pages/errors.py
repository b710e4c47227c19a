"""Fatal error types raised by the guide_pages build pipeline.

Recoverable problems (malformed documents, broken links) are never raised;
they are collected into :class:`~guide_pages.report.BuildReport`. Only the
errors defined here abort a build.
"""

from __future__ import annotations

from pathlib import Path


class GuidePagesError(RuntimeError):
    """Base class for errors that abort a site build."""


class _PathError(GuidePagesError):
    """Error tied to a specific filesystem location."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"{path}: {reason}")


class LoadError(_PathError):
    """Raised when a declared source cannot be read within the time budget."""


class WriteError(_PathError):
    """Raised when the output directory or a page cannot be written."""


__all__ = ["GuidePagesError", "LoadError", "WriteError"]
