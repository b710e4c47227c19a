"""Load and validate build configuration YAML for guide_pages.

This subpackage parses an optional ``guide-pages.yaml`` file, applies
defaults, and produces frozen dataclasses (:class:`BuildConfig`,
:class:`ThemeConfig`) that the builder and renderer consume. The primary entry
point is :func:`load_build_config`; :func:`apply_overrides` layers command
line values on top.

Examples
--------
>>> from guide_pages.config import load_build_config
>>> load_build_config(None).pygments_style
'monokai'
"""

from .loader import apply_overrides, build_config_from_mapping, load_build_config
from .models import BuildConfig, BuildConfigError, ThemeConfig

__all__ = [
    "BuildConfig",
    "BuildConfigError",
    "ThemeConfig",
    "apply_overrides",
    "build_config_from_mapping",
    "load_build_config",
]
