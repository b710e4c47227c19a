"""High-level orchestration for guide site builds.

:class:`SiteBuilder` runs the four pipeline stages in order:

1. load raw sources (:mod:`guide_pages.loader`),
2. parse each document on a worker pool (:mod:`guide_pages.markdown_parser`),
3. resolve cross-references once every document is parsed
   (:mod:`guide_pages.xrefs`),
4. render each page on the worker pool plus the table of contents
   (:mod:`guide_pages.generator`).

Pages are written to a staging directory beside the destination and only
published, by renaming, once every file is on disk. A failed or interrupted
build removes the staging directory and leaves any previous output in place.

Example
-------
>>> from pathlib import Path
>>> from guide_pages.builder import SiteBuilder
>>> from guide_pages.config import BuildConfig
>>> report = SiteBuilder(BuildConfig()).build(Path("guides"), Path("site"))  # doctest: +SKIP
>>> report.broken_links  # doctest: +SKIP
()
"""

from __future__ import annotations

import concurrent.futures as cf
import logging
import shutil
import tempfile
import time
import typing as typ
from pathlib import Path

from guide_pages._constants import BACKUP_PREFIX, STAGING_PREFIX
from guide_pages.errors import WriteError
from guide_pages.generator import PageRenderer
from guide_pages.loader import discover_sources, load_documents
from guide_pages.markdown_parser import parse_document
from guide_pages.report import BuildReport
from guide_pages.site_index import build_site_index
from guide_pages.xrefs import resolve_references

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from guide_pages.config import BuildConfig
    from guide_pages.generator.models import RenderedPage
    from guide_pages.loader import RawDocument
    from guide_pages.markdown_parser import ParseResult

logger = logging.getLogger(__name__)


class SiteBuilder:
    """Build a static guide site from a directory of Markdown sources."""

    def __init__(
        self, config: BuildConfig, *, templates_dir: Path | None = None
    ) -> None:
        self.config = config
        self.renderer = PageRenderer(config, templates_dir=templates_dir)

    def build(self, input_path: Path, output_dir: Path) -> BuildReport:
        """Run the full pipeline and publish the rendered site.

        Parameters
        ----------
        input_path : Path
            Directory of guides, or a single guide file.
        output_dir : Path
            Destination directory; replaced as a whole on success.

        Returns
        -------
        BuildReport
            Malformed-document and broken-link findings plus written paths.

        Raises
        ------
        LoadError
            If the input path or any source cannot be read in time.
        WriteError
            If the output cannot be staged or published in time, or if
            publishing would replace the directory holding the sources.
        """
        _check_output_location(input_path, output_dir)
        sources = discover_sources(input_path, self.config.source_suffixes)
        raw = load_documents(
            sources,
            root=input_path,
            timeout=self.config.timeout,
            workers=self.config.workers,
        )
        report, pages = self.render(raw)
        written = self.publish(pages, output_dir)
        return BuildReport(
            malformed=report.malformed,
            broken_links=report.broken_links,
            written=tuple(written),
        )

    def render(
        self, raw: cabc.Sequence[RawDocument]
    ) -> tuple[BuildReport, list[RenderedPage]]:
        """Parse, resolve, and render already loaded sources without writing.

        An empty input yields no pages at all, not even a table of contents.
        """
        if not raw:
            return BuildReport(), []

        with cf.ThreadPoolExecutor(max_workers=self.config.workers) as pool:
            parsed: list[ParseResult] = list(
                pool.map(lambda item: parse_document(item.doc_id, item.text), raw)
            )
            documents = [result.document for result in parsed]
            logger.debug("parsed %d document(s)", len(documents))

            resolution = resolve_references(documents, self.config.source_suffixes)
            site_index = build_site_index(documents)

            pages = list(
                pool.map(
                    lambda doc: self.renderer.render_page(doc, resolution, site_index),
                    documents,
                )
            )
        pages.append(self.renderer.render_toc(site_index))

        malformed = tuple(
            finding for result in parsed for finding in result.findings
        )
        report = BuildReport(malformed=malformed, broken_links=resolution.broken)
        return report, pages

    def publish(
        self, pages: cabc.Sequence[RenderedPage], output_dir: Path
    ) -> list[Path]:
        """Write ``pages`` to a staging directory, then swap it into place.

        Returns
        -------
        list[Path]
            Final locations of the written files, in page order.

        Raises
        ------
        WriteError
            If staging, writing, or the final rename fails, or writing takes
            longer than the configured timeout. The previous contents of
            ``output_dir`` are kept in that case.
        """
        parent = output_dir.parent
        try:
            parent.mkdir(parents=True, exist_ok=True)
            staging = Path(tempfile.mkdtemp(prefix=STAGING_PREFIX, dir=parent))
        except OSError as exc:
            raise WriteError(output_dir, exc.strerror or str(exc)) from exc

        try:
            self._write_pages(pages, staging)
            self._swap_into_place(staging, output_dir)
        except BaseException:
            shutil.rmtree(staging, ignore_errors=True)
            raise
        logger.info("published %d file(s) to %s", len(pages), output_dir)
        return [output_dir / page.output_path for page in pages]

    def _write_pages(self, pages: cabc.Sequence[RenderedPage], staging: Path) -> None:
        deadline = time.monotonic() + self.config.timeout
        for page in pages:
            target = staging / page.output_path
            if time.monotonic() > deadline:
                msg = f"writes did not complete within {self.config.timeout:g}s"
                raise WriteError(target, msg)
            try:
                target.write_text(page.html, encoding="utf-8")
            except OSError as exc:
                raise WriteError(target, exc.strerror or str(exc)) from exc

    @staticmethod
    def _swap_into_place(staging: Path, output_dir: Path) -> None:
        """Replace ``output_dir`` with ``staging`` using renames."""
        backup: Path | None = None
        try:
            if output_dir.exists():
                if not output_dir.is_dir():
                    msg = "output path exists and is not a directory"
                    raise WriteError(output_dir, msg)
                backup = Path(
                    tempfile.mkdtemp(prefix=BACKUP_PREFIX, dir=output_dir.parent)
                )
                backup.rmdir()
                output_dir.rename(backup)
            staging.rename(output_dir)
        except OSError as exc:
            if backup is not None and not output_dir.exists():
                backup.rename(output_dir)
            raise WriteError(output_dir, exc.strerror or str(exc)) from exc
        if backup is not None:
            shutil.rmtree(backup, ignore_errors=True)


def _check_output_location(input_path: Path, output_dir: Path) -> None:
    """Refuse an output directory that is, or contains, the input path.

    Publishing replaces ``output_dir`` as a whole, which would delete the
    guides being built.
    """
    source = input_path.resolve()
    target = output_dir.resolve()
    if target == source or target in source.parents:
        msg = f"output directory would replace the guide sources in {input_path}"
        raise WriteError(output_dir, msg)


__all__ = ["SiteBuilder"]
