"""Map document identifiers to generated page metadata."""

from __future__ import annotations

import collections.abc as cabc
import dataclasses as dc
import posixpath
import re
import types
import typing as typ

from guide_pages._constants import PAGE_SUFFIX, TOC_SLUG

if typ.TYPE_CHECKING:
    from guide_pages.markdown_parser import Document


@dc.dataclass(frozen=True, slots=True)
class PageEntry:
    """Title and output filename for one rendered document."""

    doc_id: str
    title: str
    output_path: str


SiteIndex = cabc.Mapping[str, PageEntry]


def _page_slug(doc_id: str) -> str:
    """Return a filename-safe slug built from the id's path without its suffix."""
    stem, _ = posixpath.splitext(doc_id)
    slug = re.sub(r"[^a-z0-9]+", "-", stem.lower()).strip("-")
    return slug or "page"


def _unique_slug(base: str, used: set[str]) -> str:
    candidate = base
    suffix = 2
    while candidate in used:
        candidate = f"{base}-{suffix}"
        suffix += 1
    used.add(candidate)
    return candidate


def build_site_index(
    documents: cabc.Iterable[Document],
) -> SiteIndex:
    """Assign every document a unique output page.

    Identifiers are processed in lexicographic order so the same document set
    always receives the same filenames. The table-of-contents slug is
    reserved and never handed to a document.

    Parameters
    ----------
    documents : Iterable[Document]
        Parsed documents of the build.

    Returns
    -------
    SiteIndex
        Read-only mapping keyed by document id, iterating in id order.
    """
    used = {TOC_SLUG}
    entries: dict[str, PageEntry] = {}
    for document in sorted(documents, key=lambda doc: doc.doc_id):
        slug = _unique_slug(_page_slug(document.doc_id), used)
        entries[document.doc_id] = PageEntry(
            doc_id=document.doc_id,
            title=document.title,
            output_path=f"{slug}{PAGE_SUFFIX}",
        )
    return types.MappingProxyType(entries)


__all__ = ["PageEntry", "SiteIndex", "build_site_index"]
