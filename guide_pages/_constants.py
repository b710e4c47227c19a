"""Common literal values used across guide_pages.

These constants keep filenames, exit codes, and defaults centralized so the
builder, CLI, and tests can import the same values without drifting. Intended
for internal use within the guide_pages package.

Examples
--------
>>> from guide_pages import _constants
>>> _constants.TOC_FILENAME
'index.html'
>>> _constants.STAGING_PREFIX.startswith(".")
True
"""

TOC_FILENAME = "index.html"
TOC_SLUG = "index"
PAGE_SUFFIX = ".html"
STAGING_PREFIX = ".guide-pages-staging-"
BACKUP_PREFIX = ".guide-pages-previous-"
DEFAULT_CONFIG_FILENAME = "guide-pages.yaml"
DEFAULT_SOURCE_SUFFIXES = (".md", ".markdown")

EXIT_OK = 0
EXIT_FATAL = 1
EXIT_STRICT = 2
