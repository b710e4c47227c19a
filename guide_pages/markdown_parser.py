r"""Parse Markdown guides into immutable document trees.

This module powers the second stage of the build: it splits a guide into
optional YAML front matter, heading-delimited sections, and blocks that are
either prose or fenced code. Parsing never fails; structural anomalies such
as an unterminated fence are returned as
:class:`~guide_pages.report.MalformedDocument` findings next to a best-effort
document.

Example
-------
>>> from guide_pages.markdown_parser import parse_document
>>> result = parse_document("Maybe.md", "# Maybe\nA value or nothing.\n")
>>> result.document.title
'Maybe'
>>> result.document.sections[0].blocks
(ProseBlock(text='A value or nothing.'),)
"""

from __future__ import annotations

import dataclasses as dc
import re
import types
import typing as typ

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from guide_pages.report import MalformedDocument

HEADING_PATTERN = re.compile(r"^(#{1,6})(?:[ \t]+(.*?))?[ \t]*$")
CLOSING_HASHES_PATTERN = re.compile(r"(?:^|[ \t]+)#+$")
FENCE_OPEN_PATTERN = re.compile(r"^ {0,3}(`{3,})([^`]*)$")
FENCE_CLOSE_PATTERN = re.compile(r"^ {0,3}(`{3,})[ \t]*$")
FRONT_MATTER_OPEN = "---"
FRONT_MATTER_CLOSE = ("---", "...")


@dc.dataclass(frozen=True, slots=True)
class ProseBlock:
    """Contiguous non-blank Markdown lines rendered as prose."""

    text: str


@dc.dataclass(frozen=True, slots=True)
class CodeBlock:
    """Fenced code captured verbatim.

    Attributes
    ----------
    text : str
        Lines between the fences joined with newlines; whitespace untouched.
    language : str or None
        First word of the fence info string, used for highlighting only.
    """

    text: str
    language: str | None = None


Block = ProseBlock | CodeBlock


@dc.dataclass(frozen=True, slots=True)
class Section:
    """Heading-delimited run of blocks.

    Attributes
    ----------
    title : str
        Heading text; empty for the implicit section holding content that
        precedes the first heading.
    level : int
        Heading depth from 1 to 6.
    anchor : str
        URL-safe identifier unique within the document.
    blocks : tuple[Block, ...]
        Prose and code blocks in source order.
    """

    title: str
    level: int
    anchor: str
    blocks: tuple[Block, ...] = ()

    @property
    def is_implicit(self) -> bool:
        """Return ``True`` for the untitled section created before any heading."""
        return not self.title


@dc.dataclass(frozen=True, slots=True)
class Document:
    """A parsed guide.

    Attributes
    ----------
    doc_id : str
        Identifier derived from the source filename.
    title : str
        Front-matter title, else the first level-1 heading, else the first
        heading, else ``doc_id``.
    sections : tuple[Section, ...]
        Sections in source order.
    metadata : Mapping[str, Any]
        Read-only front-matter mapping; empty when the document has none.
        It takes part in equality but not in hashing.
    """

    doc_id: str
    title: str
    sections: tuple[Section, ...] = ()
    metadata: typ.Mapping[str, typ.Any] = dc.field(
        default_factory=lambda: types.MappingProxyType({}), hash=False
    )

    @property
    def anchors(self) -> frozenset[str]:
        """Return every section anchor defined by the document."""
        return frozenset(section.anchor for section in self.sections)


@dc.dataclass(frozen=True, slots=True)
class ParseResult:
    """A document paired with the findings recorded while parsing it."""

    document: Document
    findings: tuple[MalformedDocument, ...] = ()


@dc.dataclass(slots=True)
class _SectionDraft:
    """Mutable accumulator used while scanning lines."""

    title: str
    level: int
    blocks: list[Block] = dc.field(default_factory=list)
    explicit: bool = True


def _clean_heading(text: str) -> str:
    """Return a cleaned heading, removing escapes and whitespace."""
    return text.replace("\\", "").strip()


def _slugify(title: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", title.lower()).strip("-")
    return slug or "section"


def _unique_slug(base: str, used: set[str]) -> str:
    """Generate a unique slug, appending numeric suffixes when needed."""
    candidate = base
    suffix = 2
    while candidate in used:
        candidate = f"{base}-{suffix}"
        suffix += 1
    used.add(candidate)
    return candidate


def _fence_language(info: str) -> str | None:
    """Return the language tag from a fence info string such as ``rust,no_run``."""
    words = info.strip().split()
    if not words:
        return None
    language = words[0].split(",", 1)[0].strip()
    return language or None


def _split_lines(text: str) -> list[str]:
    """Split on line endings only, so other separators stay inside code."""
    lines = text.replace("\r\n", "\n").replace("\r", "\n").split("\n")
    if lines[-1] == "":
        lines.pop()
    return lines


def _match_heading(line: str) -> tuple[int, str] | None:
    match = HEADING_PATTERN.match(line)
    if match is None:
        return None
    text = CLOSING_HASHES_PATTERN.sub("", match.group(2) or "")
    return len(match.group(1)), _clean_heading(text)


def _split_front_matter(
    doc_id: str, lines: list[str]
) -> tuple[dict[str, typ.Any], int, list[MalformedDocument]]:
    """Return front-matter metadata, the body's first line index, and findings.

    A leading ``---`` block only counts as front matter when it holds a YAML
    mapping. Anything else, such as prose between two thematic breaks, is
    left in the body so it still renders.
    """
    if not lines or lines[0].rstrip() != FRONT_MATTER_OPEN:
        return {}, 0, []
    for idx in range(1, len(lines)):
        if lines[idx].rstrip() in FRONT_MATTER_CLOSE:
            break
    else:
        return {}, 0, []

    payload = "\n".join(lines[1:idx])
    loader = YAML(typ="safe")
    loader.version = (1, 2)
    try:
        loaded = loader.load(payload)
    except YAMLError as exc:
        finding = MalformedDocument(doc_id, 1, f"invalid front matter: {exc}")
        return {}, 0, [finding]
    if loaded is None:
        return {}, idx + 1, []
    if not isinstance(loaded, dict):
        return {}, 0, []
    return dict(loaded), idx + 1, []


def _scan_sections(
    doc_id: str, lines: list[str], start: int
) -> tuple[list[_SectionDraft], list[MalformedDocument]]:
    """Scan body lines into section drafts holding prose and code blocks."""
    drafts: list[_SectionDraft] = []
    findings: list[MalformedDocument] = []
    prose: list[str] = []

    def current() -> _SectionDraft:
        if not drafts:
            drafts.append(_SectionDraft(title="", level=1, explicit=False))
        return drafts[-1]

    def flush_prose() -> None:
        if prose:
            current().blocks.append(ProseBlock("\n".join(prose)))
            prose.clear()

    idx = start
    while idx < len(lines):
        line = lines[idx]
        fence = FENCE_OPEN_PATTERN.match(line)
        if fence is not None:
            flush_prose()
            opening = fence.group(1)
            body: list[str] = []
            idx += 1
            closed = False
            while idx < len(lines):
                closing = FENCE_CLOSE_PATTERN.match(lines[idx])
                if closing is not None and len(closing.group(1)) >= len(opening):
                    closed = True
                    break
                body.append(lines[idx])
                idx += 1
            if not closed:
                findings.append(
                    MalformedDocument(
                        doc_id,
                        idx - len(body),
                        "unterminated code fence; treated as code to end of document",
                    )
                )
            current().blocks.append(
                CodeBlock("\n".join(body), _fence_language(fence.group(2)))
            )
            idx += 1
            continue

        heading = _match_heading(line)
        if heading is not None:
            flush_prose()
            level, title = heading
            drafts.append(_SectionDraft(title=title, level=level))
        elif line.strip():
            prose.append(line)
        else:
            flush_prose()
        idx += 1

    flush_prose()
    return drafts, findings


def _resolve_title(
    doc_id: str, drafts: list[_SectionDraft], metadata: typ.Mapping[str, typ.Any]
) -> str:
    """Pick the document title using front matter, then headings, then the id."""
    override = metadata.get("title")
    if isinstance(override, str) and override.strip():
        return override.strip()
    headed = [draft for draft in drafts if draft.explicit and draft.title]
    for draft in headed:
        if draft.level == 1:
            return draft.title
    if headed:
        return headed[0].title
    return doc_id


def parse_document(doc_id: str, text: str) -> ParseResult:
    """Parse one guide into a :class:`Document`.

    Parameters
    ----------
    doc_id : str
        Identifier of the document, threaded into findings and the result.
    text : str
        Raw Markdown source.

    Returns
    -------
    ParseResult
        The parsed document and any :class:`MalformedDocument` findings. The
        same input always yields an equal result.
    """
    lines = _split_lines(text)
    metadata, body_start, findings = _split_front_matter(doc_id, lines)
    drafts, scan_findings = _scan_sections(doc_id, lines, body_start)
    findings.extend(scan_findings)

    used: set[str] = set()
    sections = tuple(
        Section(
            title=draft.title,
            level=draft.level,
            anchor=_unique_slug(_slugify(draft.title), used),
            blocks=tuple(draft.blocks),
        )
        for draft in drafts
    )
    document = Document(
        doc_id=doc_id,
        title=_resolve_title(doc_id, drafts, metadata),
        sections=sections,
        metadata=types.MappingProxyType(metadata),
    )
    return ParseResult(document=document, findings=tuple(findings))


__all__ = [
    "Block",
    "CodeBlock",
    "Document",
    "ParseResult",
    "ProseBlock",
    "Section",
    "parse_document",
]
