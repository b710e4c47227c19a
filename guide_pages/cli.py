"""Cyclopts CLI entrypoint for building static guide sites.

The ``guide-pages`` console script defined here renders a directory of
Markdown guides into HTML pages plus a table of contents. Warnings about
malformed documents and broken cross-references are printed to stderr; the
exit status is non-zero only for fatal load/write errors, or for any warning
when ``--strict`` is given.

Examples
--------
Build a site from the ``guides`` directory:

>>> from guide_pages.cli import main
>>> main(["build", "guides", "site"])  # doctest: +SKIP
0

Fail the build on broken links:

>>> from guide_pages.cli import app
>>> app(["build", "guides", "site", "--strict"])  # doctest: +SKIP
"""

from __future__ import annotations

import logging
import sys
import typing as typ
from pathlib import Path

import cyclopts
from cyclopts import App, Parameter
from ruamel.yaml.error import YAMLError

from ._constants import DEFAULT_CONFIG_FILENAME, EXIT_FATAL, EXIT_OK, EXIT_STRICT
from .builder import SiteBuilder
from .config import BuildConfigError, apply_overrides, load_build_config
from .errors import GuidePagesError

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from .config import BuildConfig
    from .report import BuildReport

DEFAULT_CONFIG = Path(DEFAULT_CONFIG_FILENAME)

app = App(name="guide-pages", config=cyclopts.config.Env("INPUT_", command=False))  # type: ignore[unknown-argument]


def _format_path(path: Path) -> str:
    """Return a cwd-relative path when possible, otherwise the absolute path."""
    if path.is_absolute():
        try:
            return str(path.relative_to(Path.cwd()))
        except ValueError:  # pragma: no cover - fallback for different roots
            return str(path)
    return str(path)


def _resolve_config(config: Path | None, **overrides: typ.Any) -> BuildConfig:
    """Load the explicit or default config file and apply CLI overrides."""
    if config is None:
        config = DEFAULT_CONFIG if DEFAULT_CONFIG.exists() else None
    return apply_overrides(load_build_config(config), **overrides)


def _print_report(report: BuildReport) -> None:
    for line in report.summary_lines():
        print(line, file=sys.stderr)


@app.command(help="Render Markdown guides into a static HTML site.")
def build(
    input_path: typ.Annotated[
        Path, Parameter(help="Guide directory or single Markdown file")
    ],
    output_dir: typ.Annotated[Path, Parameter(help="Directory to publish into")],
    *,
    strict: typ.Annotated[
        bool | None,
        Parameter(
            help="Exit non-zero when any warning is reported", env_var="INPUT_STRICT"
        ),
    ] = None,
    config: typ.Annotated[
        Path | None, Parameter(help="Path to build config", env_var="INPUT_CONFIG")
    ] = None,
    timeout: typ.Annotated[
        float | None, Parameter(help="Seconds allowed for reads and for writes")
    ] = None,
    workers: typ.Annotated[
        int | None, Parameter(help="Concurrent parse/render tasks")
    ] = None,
    report_json: typ.Annotated[
        Path | None, Parameter(help="Also write the build report as JSON")
    ] = None,
    verbose: bool = False,
) -> int:
    """Build the site and return the process exit status.

    Parameters
    ----------
    input_path : Path
        Directory walked for guide sources, or one Markdown file.
    output_dir : Path
        Destination directory, replaced only after every page is written.
    strict : bool or None, optional
        Override the config ``strict`` flag; when set, warnings produce exit
        status 2.
    config : Path or None, optional
        Build configuration YAML; defaults to ``guide-pages.yaml`` in the
        working directory when that file exists.
    timeout : float or None, optional
        Override the I/O time budget in seconds.
    workers : int or None, optional
        Override the worker pool size.
    report_json : Path or None, optional
        Destination for a JSON copy of the build report.
    verbose : bool, optional
        Emit progress logging on stderr.

    Returns
    -------
    int
        ``0`` on success (with or without warnings), ``1`` on fatal load,
        write, or configuration errors, ``2`` on warnings in strict mode.
    """
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s"
        )

    try:
        build_config = _resolve_config(
            config, strict=strict, timeout=timeout, workers=workers
        )
        report = SiteBuilder(build_config).build(input_path, output_dir)
    except (GuidePagesError, BuildConfigError, FileNotFoundError, YAMLError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_FATAL

    for path in report.written:
        print(f"wrote {_format_path(path)}")
    _print_report(report)
    if report_json is not None:
        try:
            report.write_json(report_json)
        except GuidePagesError as exc:
            print(f"error: {exc}", file=sys.stderr)
            return EXIT_FATAL

    if build_config.strict and report.has_findings:
        print("error: warnings reported in strict mode", file=sys.stderr)
        return EXIT_STRICT
    return EXIT_OK


def main(argv: cabc.Sequence[str] | None = None) -> int:
    """Invoke the Cyclopts application that powers the ``guide-pages`` command.

    Parameters
    ----------
    argv : Sequence[str] or None, optional
        Arguments to parse; ``None`` reads ``sys.argv``.

    Returns
    -------
    int
        Exit status of the executed command.

    Examples
    --------
    >>> main(["build", "guides", "site"])  # doctest: +SKIP
    """
    result = app(list(argv) if argv is not None else None)
    return result if isinstance(result, int) else EXIT_OK


if __name__ == "__main__":  # pragma: no cover - manual invocation helper
    raise SystemExit(main())
