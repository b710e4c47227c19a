"""Behaviour tests for the generated table of contents.

The scenarios in ``table_of_contents.feature`` check that every guide appears
exactly once in filename order and that an empty guide directory publishes an
empty site. Steps live in ``tests/bdd/conftest.py``.
"""

from __future__ import annotations

from pathlib import Path

from pytest_bdd import scenarios

FEATURE_FILE = (
    Path(__file__).resolve().parents[2] / "features" / "table_of_contents.feature"
)
scenarios(FEATURE_FILE)
