"""Build static HTML sites from Markdown guide collections.

This package exposes the CLI entry points used by ``guide-pages build`` along
with the programmatic builder that loads, parses, cross-links, and renders a
directory of guides.

Exports
-------
- ``app``: Cyclopts application entry for subcommands.
- ``main``: Convenience function that invokes the Cyclopts app.
- ``SiteBuilder``: Run the whole pipeline from Python.

Examples
--------
>>> from guide_pages import main
>>> main(["build", "guides", "site"])  # doctest: +SKIP
0
>>> from guide_pages import app
>>> callable(app)
True
"""

from __future__ import annotations

from .builder import SiteBuilder
from .cli import app, main

__all__ = ["SiteBuilder", "app", "main"]
