"""Shared pytest-bdd steps for guide site build scenarios.

Steps write guides into a per-scenario source directory, run the
``guide-pages build`` command function, and inspect the published HTML and
the JSON build report. State is shared through the ``scenario_state`` fixture.
"""

from __future__ import annotations

import json
import typing as typ
from pathlib import Path

import pytest
from bs4 import BeautifulSoup
from pytest_bdd import given, parsers, then, when

from guide_pages import cli


@pytest.fixture
def scenario_state(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> dict[str, typ.Any]:
    """Return a mutable dict used to share scenario state across BDD steps."""
    monkeypatch.chdir(tmp_path)
    source_dir = tmp_path / "guides"
    source_dir.mkdir()
    return {
        "source_dir": source_dir,
        "output_dir": tmp_path / "site",
        "report_path": tmp_path / "report.json",
    }


@given(parsers.parse('the guide "{name}" containing "{text}"'))
def given_guide(scenario_state: dict[str, typ.Any], name: str, text: str) -> None:
    """Write a guide whose escaped ``\\n`` sequences become newlines."""
    source_dir = typ.cast("Path", scenario_state["source_dir"])
    (source_dir / name).write_text(text.replace("\\n", "\n"), encoding="utf-8")


def _run_build(scenario_state: dict[str, typ.Any], *, strict: bool) -> None:
    scenario_state["status"] = cli.build(
        scenario_state["source_dir"],
        scenario_state["output_dir"],
        strict=strict,
        report_json=scenario_state["report_path"],
    )
    report_path = typ.cast("Path", scenario_state["report_path"])
    scenario_state["report"] = json.loads(report_path.read_text(encoding="utf-8"))


@when("I build the site")
def when_build(scenario_state: dict[str, typ.Any]) -> None:
    """Build the site with default settings."""
    _run_build(scenario_state, strict=False)


@when("I build the site in strict mode")
def when_build_strict(scenario_state: dict[str, typ.Any]) -> None:
    """Build the site treating warnings as failures."""
    _run_build(scenario_state, strict=True)


@then(parsers.parse("the build exits with status {status:d}"))
def then_status(scenario_state: dict[str, typ.Any], status: int) -> None:
    """Check the command's exit status."""
    assert scenario_state["status"] == status, (
        f"expected exit status {status}, got {scenario_state['status']}"
    )


@then(parsers.parse("{count:d} guide pages and a table of contents are written"))
def then_pages_written(scenario_state: dict[str, typ.Any], count: int) -> None:
    """Check the number of published files."""
    output_dir = typ.cast("Path", scenario_state["output_dir"])
    names = sorted(path.name for path in output_dir.iterdir())
    assert "index.html" in names
    assert len(names) == count + 1, f"unexpected output files: {names}"


@then(parsers.parse('the page "{page}" links to "{href}"'))
def then_page_links(scenario_state: dict[str, typ.Any], page: str, href: str) -> None:
    """Check that a rendered page contains a link to ``href``."""
    output_dir = typ.cast("Path", scenario_state["output_dir"])
    soup = BeautifulSoup((output_dir / page).read_text(encoding="utf-8"), "html.parser")
    hrefs = [anchor.get("href") for anchor in soup.select("main a")]
    assert href in hrefs, f"expected a link to {href!r} in {page}, found {hrefs}"


@then(parsers.parse("the report lists {count:d} broken links"))
def then_broken_count(scenario_state: dict[str, typ.Any], count: int) -> None:
    """Check the number of broken links in the JSON report."""
    assert len(scenario_state["report"]["broken_links"]) == count


@then(parsers.parse('the report lists {count:d} broken link to "{target}"'))
def then_broken_target(
    scenario_state: dict[str, typ.Any], count: int, target: str
) -> None:
    """Check the broken links in the JSON report all point at ``target``."""
    broken = scenario_state["report"]["broken_links"]
    assert [item["target"] for item in broken] == [target] * count


@then(parsers.parse('the table of contents lists "{titles}"'))
def then_toc_lists(scenario_state: dict[str, typ.Any], titles: str) -> None:
    """Check the table of contents entries and their order."""
    output_dir = typ.cast("Path", scenario_state["output_dir"])
    soup = BeautifulSoup(
        (output_dir / "index.html").read_text(encoding="utf-8"), "html.parser"
    )
    labels = [anchor.get_text() for anchor in soup.select("ol.toc a")]
    assert labels == titles.split(", "), f"unexpected table of contents: {labels}"


@then("the output directory is empty")
def then_output_empty(scenario_state: dict[str, typ.Any]) -> None:
    """Check that nothing was published."""
    output_dir = typ.cast("Path", scenario_state["output_dir"])
    assert output_dir.is_dir()
    assert list(output_dir.iterdir()) == []
