"""Discover and read Markdown guide sources from disk.

The loader is the first stage of the build pipeline. It turns an input path
(a directory or a single file) into an ordered list of :class:`RawDocument`
values. Every read shares one deadline; a source that cannot be read, is not
valid UTF-8, or does not finish reading before the deadline raises
:class:`~guide_pages.errors.LoadError`.

Example
-------
>>> from pathlib import Path
>>> from guide_pages.loader import discover_sources, load_documents
>>> root = Path("guides")  # doctest: +SKIP
>>> raw = load_documents(discover_sources(root), root=root)  # doctest: +SKIP
>>> raw[0].doc_id  # doctest: +SKIP
'Maybe.md'
"""

from __future__ import annotations

import concurrent.futures as cf
import dataclasses as dc
import logging
import time
import typing as typ
from pathlib import Path

from guide_pages._constants import DEFAULT_SOURCE_SUFFIXES
from guide_pages.errors import LoadError

if typ.TYPE_CHECKING:
    import collections.abc as cabc

logger = logging.getLogger(__name__)


@dc.dataclass(frozen=True, slots=True)
class RawDocument:
    """Unparsed source text keyed by its document identifier.

    Attributes
    ----------
    doc_id : str
        Source path relative to the input root using POSIX separators,
        including the file suffix (``"Scope.md"``).
    path : Path
        Location the text was read from.
    text : str
        Decoded UTF-8 content.
    """

    doc_id: str
    path: Path
    text: str


def discover_sources(
    input_path: Path, suffixes: cabc.Iterable[str] = DEFAULT_SOURCE_SUFFIXES
) -> list[Path]:
    """Return the source files under ``input_path`` in a stable order.

    Parameters
    ----------
    input_path : Path
        Directory to walk recursively, or a single Markdown file.
    suffixes : Iterable[str], optional
        File suffixes treated as guide sources (case-sensitive).

    Returns
    -------
    list[Path]
        Matching files sorted by their POSIX path. Hidden files and
        directories are skipped.

    Raises
    ------
    LoadError
        If ``input_path`` does not exist.
    """
    if not input_path.exists():
        raise LoadError(input_path, "input path does not exist")
    if input_path.is_file():
        return [input_path]

    allowed = tuple(suffixes)
    found = [
        path
        for path in input_path.rglob("*")
        if path.is_file()
        and path.name.endswith(allowed)
        and not _is_hidden(path.relative_to(input_path))
    ]
    found.sort(key=lambda path: path.relative_to(input_path).as_posix())
    logger.debug("discovered %d source(s) under %s", len(found), input_path)
    return found


def _is_hidden(relative: Path) -> bool:
    return any(part.startswith(".") for part in relative.parts)


def document_id(path: Path, root: Path) -> str:
    """Return the identifier for ``path`` relative to ``root``.

    When ``root`` is the file itself (single-file input) the bare filename is
    used.
    """
    if path == root or not root.is_dir():
        return path.name
    return path.relative_to(root).as_posix()


def _read_source(path: Path) -> str:
    """Read ``path`` as UTF-8, translating failures into LoadError."""
    try:
        return path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise LoadError(path, f"not valid UTF-8 ({exc.reason})") from exc
    except OSError as exc:
        raise LoadError(path, exc.strerror or str(exc)) from exc


def load_documents(
    sources: cabc.Sequence[Path],
    *,
    root: Path,
    timeout: float = 30.0,
    workers: int = 4,
) -> list[RawDocument]:
    """Read every source concurrently and return them in input order.

    Parameters
    ----------
    sources : Sequence[Path]
        Files to read, typically from :func:`discover_sources`.
    root : Path
        Input root used to derive document identifiers.
    timeout : float, optional
        Seconds allowed for the whole read stage.
    workers : int, optional
        Maximum number of concurrent reads.

    Returns
    -------
    list[RawDocument]
        One entry per source, in the same order as ``sources``.

    Raises
    ------
    LoadError
        If a source is unreadable or the deadline passes before it is read.
    """
    if not sources:
        return []

    deadline = time.monotonic() + timeout
    executor = cf.ThreadPoolExecutor(max_workers=max(1, workers))
    try:
        futures = [(path, executor.submit(_read_source, path)) for path in sources]
        documents: list[RawDocument] = []
        for path, future in futures:
            remaining = max(0.0, deadline - time.monotonic())
            try:
                text = future.result(timeout=remaining)
            except cf.TimeoutError as exc:
                msg = f"read did not complete within {timeout:g}s"
                raise LoadError(path, msg) from exc
            documents.append(
                RawDocument(doc_id=document_id(path, root), path=path, text=text)
            )
    finally:
        executor.shutdown(wait=False, cancel_futures=True)
    logger.info("loaded %d document(s)", len(documents))
    return documents


__all__ = ["RawDocument", "discover_sources", "document_id", "load_documents"]
