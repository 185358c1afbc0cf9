from __future__ import annotations

import json
from pathlib import Path

import polars as pl
import pytest

from tidylab.core.errors import ConfigError
from tidylab.io.config import LabSettings
from tidylab.lessons import Lesson, Step, get_lesson, run_lesson
from tidylab.lessons.render import compile_charts, render_html, render_markdown, write_report
from tidylab.viz import Plot, aes, geom_point


def _mixed_lesson() -> Lesson:
    df = pl.DataFrame({"a": list(range(10)), "b": [x * x for x in range(10)]})

    def boom(ns):
        raise ValueError("broken </script> step")

    return Lesson(
        name="mixed",
        title="Mixed outputs",
        intro="All output kinds.",
        steps=(
            Step("A frame", "Ten rows.", lambda ns: df, key="df"),
            Step("A chart", "Points.", lambda ns: (Plot(ns["df"], aes(x="a", y="b")) + geom_point()).to_chart()),
            Step("A plot", "Uncompiled.", lambda ns: Plot(ns["df"], aes(x="a", y="b")) + geom_point()),
            Step("A mapping", "Counts.", lambda ns: {"rows": 10}),
            Step("A failure", "Raises.", boom),
            Step("Nothing", "No output.", lambda ns: None),
        ),
    )


@pytest.fixture()
def result():
    return run_lesson(_mixed_lesson(), keep_going=True)


def test_render_markdown(result) -> None:
    text = render_markdown(result, {2: "figures/mixed_02"})

    assert text.startswith("# Mixed outputs")
    assert "## 1. A frame" in text
    assert "10 rows x 2 columns, first 6 shown" in text
    assert "[Open chart](figures/mixed_02.html)" in text
    assert "_(chart not saved)_" in text  # step 3 has no figure here
    assert '"rows": 10' in text
    assert "> **Error:** `ValueError: broken </script> step`" in text
    assert "1 step(s) failed" in text


def test_render_html_embeds_charts(result) -> None:
    page = render_html(result)

    assert page.count('<div id="vis') == 2
    assert "vega-embed@6" in page
    assert "vegaEmbed(\"#vis2\"" in page
    assert "broken &lt;/script&gt; step" in page


def test_write_report_files_and_manifest(result, tmp_path: Path) -> None:
    report = write_report(result, tmp_path / "mixed", "md")

    assert report == tmp_path / "mixed" / "mixed.md"
    figs = sorted(p.name for p in (tmp_path / "mixed" / "figures").iterdir())
    assert figs == ["mixed_02.html", "mixed_02.vl.json", "mixed_03.html", "mixed_03.vl.json"]

    manifest = json.loads((tmp_path / "mixed" / "manifest.json").read_text())
    assert manifest["lesson"] == "mixed"
    assert manifest["failures"] == 1
    assert manifest["report"] == "mixed.md"
    assert [s["kind"] for s in manifest["steps"]] == ["frame", "chart", "chart", "mapping", "error", "none"]
    assert manifest["steps"][0]["shape"] == [10, 2]
    assert manifest["steps"][1]["figure"] == "figures/mixed_02"
    assert len(manifest["digest"]) == 64


def test_digest_is_stable_across_runs(tmp_path: Path) -> None:
    lesson = _mixed_lesson()
    write_report(run_lesson(lesson, keep_going=True), tmp_path / "one", "html")
    write_report(run_lesson(lesson, keep_going=True), tmp_path / "two", "html")
    one = json.loads((tmp_path / "one" / "manifest.json").read_text())
    two = json.loads((tmp_path / "two" / "manifest.json").read_text())
    assert one["digest"] == two["digest"]
    assert (tmp_path / "one" / "mixed.html").exists()


def test_write_report_rejects_unknown_format(result, tmp_path: Path) -> None:
    with pytest.raises(ConfigError):
        write_report(result, tmp_path, "pdf")


def test_reshaping_report_html(tmp_path: Path) -> None:
    settings = LabSettings(offline=True)
    res = run_lesson(get_lesson("reshaping", settings), settings)
    report = write_report(res, tmp_path, "html")
    page = report.read_text(encoding="utf-8")
    assert "<h1>Reshaping and summarising tables</h1>" in page
    assert "32 rows x 4 columns" in page


def _undrawable_lesson() -> Lesson:
    df = pl.DataFrame({"a": [1, 2, 3], "b": [4, 5, 6]})
    return Lesson(
        name="undrawable",
        title="A plot without layers",
        intro="The second step cannot be drawn.",
        steps=(
            Step("Points", "Drawable.", lambda ns: Plot(df, aes(x="a", y="b")) + geom_point()),
            Step("Bare plot", "No layers.", lambda ns: Plot(df, aes(x="a", y="b"))),
        ),
    )


def test_chart_compile_failure_becomes_failed_step(tmp_path: Path) -> None:
    result = run_lesson(_undrawable_lesson())
    assert result.ok

    charts, errors = compile_charts(result)
    assert list(charts) == [1]
    assert list(errors) == [2] and errors[2].startswith("ChartError: Plot has no layers")

    text = render_markdown(result, {1: "figures/undrawable_01"})
    assert "> **Error:** `ChartError: Plot has no layers" in text
    assert "1 step(s) failed" in text

    page = render_html(result)
    assert page.count('<div id="vis') == 1
    assert '<p class="error"><strong>Error:</strong> ChartError' in page

    write_report(result, tmp_path, "md")
    manifest = json.loads((tmp_path / "manifest.json").read_text())
    assert manifest["failures"] == 1
    bare = manifest["steps"][1]
    assert bare["kind"] == "error" and bare["ok"] is False and bare["figure"] is None
    assert sorted(p.name for p in (tmp_path / "figures").iterdir()) == [
        "undrawable_01.html",
        "undrawable_01.vl.json",
    ]


def test_graphics_report_writes_every_step(tmp_path: Path) -> None:
    settings = LabSettings(offline=True)
    res = run_lesson(get_lesson("graphics", settings), settings)
    report = write_report(res, tmp_path, "md")

    manifest = json.loads((tmp_path / "manifest.json").read_text())
    assert manifest["failures"] == 0
    assert all(step["ok"] for step in manifest["steps"])
    base = next(s for s in manifest["steps"] if s["title"] == "A base plot")
    assert base["kind"] == "mapping"
    assert "step(s) failed" not in report.read_text(encoding="utf-8")
