"""Load build configuration YAML into typed dataclasses."""

from __future__ import annotations

import dataclasses as dc
import typing as typ

from ruamel.yaml import YAML

from .models import BuildConfig, BuildConfigError, ThemeConfig

if typ.TYPE_CHECKING:
    from pathlib import Path

_KNOWN_KEYS = frozenset(
    {
        "site_name",
        "page_title_suffix",
        "toc_title",
        "pygments_style",
        "source_suffixes",
        "strict",
        "timeout",
        "workers",
    }
)


def load_build_config(path: Path | None) -> BuildConfig:
    """Load the YAML file describing site labels and build behaviour.

    Parameters
    ----------
    path : Path or None
        Filesystem path to the YAML configuration file. ``None`` returns the
        defaults.

    Returns
    -------
    BuildConfig
        Parsed configuration with defaults applied for missing keys.

    Raises
    ------
    FileNotFoundError
        If the configuration file does not exist at ``path``.
    BuildConfigError
        If the top-level structure is not a mapping, a key is unknown, or a
        value has the wrong type.
    YAMLError
        If the YAML content cannot be parsed by the underlying loader.

    Examples
    --------
    >>> from pathlib import Path
    >>> from guide_pages.config import load_build_config
    >>> config = load_build_config(Path("guide-pages.yaml"))  # doctest: +SKIP
    >>> config.theme.site_name  # doctest: +SKIP
    'Elm Guides'
    """
    if path is None:
        return BuildConfig()
    if not path.exists():
        msg = f"Configuration file '{path}' not found."
        raise FileNotFoundError(msg)

    loader = YAML(typ="safe")
    loader.version = (1, 2)
    with path.open("r", encoding="utf-8") as handle:
        loaded = loader.load(handle) or {}
    if not isinstance(loaded, dict):
        msg = "Top-level YAML structure must be a mapping."
        raise BuildConfigError(msg)
    return build_config_from_mapping(loaded)


def build_config_from_mapping(raw: typ.Mapping[str, typ.Any]) -> BuildConfig:
    """Build a BuildConfig from an already parsed mapping."""
    unknown = sorted(set(raw) - _KNOWN_KEYS)
    if unknown:
        msg = f"Unknown configuration key(s): {', '.join(unknown)}"
        raise BuildConfigError(msg)

    base = BuildConfig()
    theme = ThemeConfig(
        site_name=_as_str(raw, "site_name", base.theme.site_name),
        page_title_suffix=_as_str(
            raw, "page_title_suffix", base.theme.page_title_suffix
        ),
        toc_title=_as_str(raw, "toc_title", base.theme.toc_title),
    )
    suffixes = raw.get("source_suffixes", base.source_suffixes)
    match suffixes:
        case str():
            suffixes = (suffixes,)
        case list() | tuple():
            suffixes = tuple(str(item) for item in suffixes)
        case _:
            msg = "source_suffixes must be a string or a list of strings"
            raise BuildConfigError(msg)

    strict = raw.get("strict", base.strict)
    if not isinstance(strict, bool):
        msg = "strict must be true or false"
        raise BuildConfigError(msg)

    return BuildConfig(
        theme=theme,
        pygments_style=_as_str(raw, "pygments_style", base.pygments_style),
        source_suffixes=suffixes,
        strict=strict,
        timeout=_as_number(raw, "timeout", base.timeout),
        workers=int(_as_number(raw, "workers", base.workers)),
    )


def apply_overrides(config: BuildConfig, **overrides: typ.Any) -> BuildConfig:
    """Return ``config`` with every non-``None`` override applied."""
    changes = {key: value for key, value in overrides.items() if value is not None}
    if not changes:
        return config
    return dc.replace(config, **changes)


def _as_str(raw: typ.Mapping[str, typ.Any], key: str, default: str) -> str:
    value = raw.get(key, default)
    if not isinstance(value, str) or not value.strip():
        msg = f"{key} must be a non-empty string"
        raise BuildConfigError(msg)
    return value.strip()


def _as_number(raw: typ.Mapping[str, typ.Any], key: str, default: float) -> float:
    value = raw.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int | float):
        msg = f"{key} must be a number"
        raise BuildConfigError(msg)
    return value


__all__ = ["apply_overrides", "build_config_from_mapping", "load_build_config"]
