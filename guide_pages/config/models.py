"""Typed dataclasses describing guide_pages build configuration."""

from __future__ import annotations

import dataclasses as dc

from guide_pages._constants import DEFAULT_SOURCE_SUFFIXES


class BuildConfigError(ValueError):
    """Raised when the build configuration is invalid or incomplete."""


@dc.dataclass(frozen=True, slots=True)
class ThemeConfig:
    """Labels applied to generated pages."""

    site_name: str = "Guides"
    page_title_suffix: str = "Guide"
    toc_title: str = "Contents"


@dc.dataclass(frozen=True, slots=True)
class BuildConfig:
    """A fully resolved build definition.

    Attributes
    ----------
    theme : ThemeConfig
        Site name and title labels used by the templates.
    pygments_style : str
        Pygments style for highlighted code blocks.
    source_suffixes : tuple[str, ...]
        File suffixes that mark guide sources and local document links.
    strict : bool
        Treat recoverable findings as a failed build in the CLI.
    timeout : float
        Seconds allowed for the read stage and again for the write stage.
    workers : int
        Concurrent parse/render tasks.
    """

    theme: ThemeConfig = dc.field(default_factory=ThemeConfig)
    pygments_style: str = "monokai"
    source_suffixes: tuple[str, ...] = DEFAULT_SOURCE_SUFFIXES
    strict: bool = False
    timeout: float = 30.0
    workers: int = 4

    def __post_init__(self) -> None:
        if self.timeout <= 0:
            msg = f"timeout must be positive, got {self.timeout!r}"
            raise BuildConfigError(msg)
        if self.workers < 1:
            msg = f"workers must be at least 1, got {self.workers!r}"
            raise BuildConfigError(msg)
        if not self.source_suffixes:
            msg = "source_suffixes must name at least one suffix"
            raise BuildConfigError(msg)


__all__ = ["BuildConfig", "BuildConfigError", "ThemeConfig"]
