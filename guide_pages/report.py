"""Recoverable build findings and the end-of-build report.

Malformed documents and broken cross-references never abort a build. Each
stage returns them as plain data and :class:`BuildReport` gathers them so a
single run surfaces every recoverable issue at once.
"""

from __future__ import annotations

import dataclasses as dc
import json
import typing as typ

from guide_pages.errors import WriteError

if typ.TYPE_CHECKING:
    from pathlib import Path

MISSING_DOCUMENT = "missing-document"
MISSING_ANCHOR = "missing-anchor"


@dc.dataclass(frozen=True, slots=True)
class MalformedDocument:
    """Structural anomaly found while parsing a document.

    Attributes
    ----------
    doc_id : str
        Identifier of the affected document.
    line : int
        1-based source line where the anomaly starts.
    message : str
        Human readable description.
    """

    doc_id: str
    line: int
    message: str

    def describe(self) -> str:
        """Return a one-line summary suitable for diagnostics output."""
        return f"{self.doc_id}:{self.line}: {self.message}"


@dc.dataclass(frozen=True, slots=True)
class BrokenLink:
    """A local document link that could not be resolved.

    Attributes
    ----------
    source_id : str
        Document containing the link.
    target : str
        Link target exactly as written in the source.
    reason : str
        ``"missing-document"`` or ``"missing-anchor"``.
    """

    source_id: str
    target: str
    reason: str = MISSING_DOCUMENT

    def describe(self) -> str:
        """Return a one-line summary suitable for diagnostics output."""
        if self.reason == MISSING_DOCUMENT:
            detail = "no such document"
        else:
            detail = "no such section"
        return f"{self.source_id}: broken link '{self.target}' ({detail})"


@dc.dataclass(frozen=True, slots=True)
class BuildReport:
    """Aggregate outcome of one build pass."""

    malformed: tuple[MalformedDocument, ...] = ()
    broken_links: tuple[BrokenLink, ...] = ()
    written: tuple[Path, ...] = ()

    @property
    def has_findings(self) -> bool:
        """Return ``True`` when any recoverable issue was recorded."""
        return bool(self.malformed or self.broken_links)

    def summary_lines(self) -> list[str]:
        """Return diagnostics lines followed by a totals line."""
        lines = [f"warning: {finding.describe()}" for finding in self.malformed]
        lines.extend(f"warning: {link.describe()}" for link in self.broken_links)
        lines.append(
            f"{len(self.written)} file(s) written, "
            f"{len(self.malformed)} malformed document warning(s), "
            f"{len(self.broken_links)} broken link(s)"
        )
        return lines

    def to_dict(self) -> dict[str, typ.Any]:
        """Return a JSON-serialisable representation of the report."""
        return {
            "written": [path.name for path in self.written],
            "malformed": [dc.asdict(finding) for finding in self.malformed],
            "broken_links": [dc.asdict(link) for link in self.broken_links],
        }

    def write_json(self, path: Path) -> None:
        """Persist the report as indented JSON at ``path``.

        Raises
        ------
        WriteError
            If the file or its parent directory cannot be written.
        """
        payload = json.dumps(self.to_dict(), indent=2) + "\n"
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(payload, encoding="utf-8")
        except OSError as exc:
            raise WriteError(path, exc.strerror or str(exc)) from exc


__all__ = [
    "MISSING_ANCHOR",
    "MISSING_DOCUMENT",
    "BrokenLink",
    "BuildReport",
    "MalformedDocument",
]
