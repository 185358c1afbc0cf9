"""
Render lesson results as Markdown or standalone HTML reports.

Layout written by write_report(result, out_dir, fmt):
- <out_dir>/<lesson>.md or <lesson>.html
- <out_dir>/figures/<lesson>_<NN>.html and .vl.json, one pair per chart step
- <out_dir>/manifest.json (RunManifest)

Frames appear as a preview of their first rows plus their shape. A chart output that
fails to compile is reported as a failed step. In Markdown, charts
are linked to their saved figure files; in HTML they are embedded with vega-embed.
"""

from __future__ import annotations

import html
import json
import logging
from pathlib import Path
from typing import Any

import altair as alt
import polars as pl
from pydantic import BaseModel, Field

from tidylab.core.constants import PREVIEW_ROWS, REPORT_FORMATS, VEGA_EMBED_VERSIONS
from tidylab.core.errors import ConfigError, TidyLabError
from tidylab.core.hashing import hash_mapping
from tidylab.io.write import ensure_dir, write_manifest
from tidylab.viz.plot import Plot
from tidylab.viz.save import chart_to_json, save_chart

from .base import LessonResult, StepOutcome

logger = logging.getLogger(__name__)

__all__ = [
    "StepRecord",
    "RunManifest",
    "output_kind",
    "as_chart",
    "compile_charts",
    "frame_preview",
    "render_markdown",
    "render_html",
    "write_report",
]


class StepRecord(BaseModel):
    index: int
    title: str
    kind: str
    ok: bool
    seconds: float
    error: str | None = None
    shape: list[int] | None = None
    figure: str | None = None


class RunManifest(BaseModel):
    """Summary of one rendered lesson run, written next to the report."""

    lesson: str
    title: str
    started_at: str
    format: str
    steps: list[StepRecord] = Field(default_factory=list)
    failures: int = 0
    report: str | None = None
    digest: str = ""


def as_chart(output: Any) -> alt.TopLevelMixin | None:
    """The chart an output displays as, compiling a Plot; None for non-charts."""
    if isinstance(output, Plot):
        return output.to_chart()
    if isinstance(output, alt.TopLevelMixin):
        return output
    return None


def compile_charts(result: LessonResult) -> tuple[dict[int, alt.TopLevelMixin], dict[int, str]]:
    """Compile every chart output of a run.

    Returns:
        tuple: (step index -> chart, step index -> error text) for chart steps; a
        TidyLabError while compiling lands in the second mapping.
    """
    charts: dict[int, alt.TopLevelMixin] = {}
    errors: dict[int, str] = {}
    for i, outcome in enumerate(result.outcomes, start=1):
        if output_kind(outcome) != "chart":
            continue
        try:
            charts[i] = as_chart(outcome.output)
        except TidyLabError as exc:
            logger.warning("step %d (%r) output is not drawable: %s", i, outcome.step.title, exc)
            errors[i] = _error_text(exc)
    return charts, errors


def output_kind(outcome: StepOutcome) -> str:
    """One of: error, none, frame, chart, mapping, value."""
    if outcome.error is not None:
        return "error"
    out = outcome.output
    if out is None:
        return "none"
    if isinstance(out, pl.DataFrame):
        return "frame"
    if isinstance(out, (Plot, alt.TopLevelMixin)):
        return "chart"
    if isinstance(out, dict):
        return "mapping"
    return "value"


def frame_preview(df: pl.DataFrame, n: int = PREVIEW_ROWS) -> str:
    with pl.Config(tbl_rows=n, tbl_cols=-1, tbl_width_chars=120):
        return str(df.head(n))


def _shape_line(df: pl.DataFrame) -> str:
    more = f", first {PREVIEW_ROWS} shown" if df.height > PREVIEW_ROWS else ""
    return f"{df.height} rows x {df.width} columns{more}"


def _error_text(exc: BaseException) -> str:
    return f"{type(exc).__name__}: {exc}"


def _figure_stem(result: LessonResult, index: int) -> str:
    return f"{result.lesson.name}_{index:02d}"


def render_markdown(result: LessonResult, figures: dict[int, str] | None = None) -> str:
    """Render a lesson run as Markdown.

    Args:
        result: Lesson run.
        figures: Step index -> figure path stem relative to the report (without
            suffix), as produced by write_report. Charts without a figure are noted
            but not drawn.
    """
    figures = figures or {}
    _, chart_errors = compile_charts(result)
    lesson = result.lesson
    lines = [f"# {lesson.title}", "", lesson.intro.strip(), ""]
    for i, outcome in enumerate(result.outcomes, start=1):
        step = outcome.step
        lines += [f"## {i}. {step.title}", "", step.prose.strip(), ""]
        kind = output_kind(outcome)
        if kind == "error":
            lines += [f"> **Error:** `{_error_text(outcome.error)}`", ""]
        elif kind == "frame":
            df = outcome.output
            lines += [f"_{_shape_line(df)}_", "", "```text", frame_preview(df), "```", ""]
        elif i in chart_errors:
            lines += [f"> **Error:** `{chart_errors[i]}`", ""]
        elif kind == "chart":
            stem = figures.get(i)
            if stem is None:
                lines += ["_(chart not saved)_", ""]
            else:
                lines += [f"[Open chart]({stem}.html) · [Vega-Lite spec]({stem}.vl.json)", ""]
        elif kind == "mapping":
            body = json.dumps(outcome.output, indent=2, default=str)
            lines += ["```json", body, "```", ""]
        elif kind == "value":
            lines += ["```text", repr(outcome.output), "```", ""]
    failed = len(result.failures) + len(chart_errors)
    if failed:
        lines += ["---", "", f"**{failed} step(s) failed.**", ""]
    return "\n".join(lines)


_HTML_HEAD = """<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<title>{title}</title>
<script src="https://cdn.jsdelivr.net/npm/vega@{vega}"></script>
<script src="https://cdn.jsdelivr.net/npm/vega-lite@{vega_lite}"></script>
<script src="https://cdn.jsdelivr.net/npm/vega-embed@{vega_embed}"></script>
<style>
body {{ font-family: Helvetica, Arial, sans-serif; max-width: 960px; margin: 2em auto; color: #222; }}
pre {{ background: #f6f6f6; padding: 0.8em; overflow-x: auto; }}
.error {{ color: #a40000; }}
.shape {{ color: #666; font-style: italic; }}
</style>
</head>
<body>
"""


def _script_json(chart: alt.TopLevelMixin) -> str:
    # A literal "</" would end the <script> element early.
    return chart_to_json(chart, indent=None).replace("</", "<\\/")


def render_html(result: LessonResult) -> str:
    """Render a lesson run as one standalone HTML page with embedded charts."""
    lesson = result.lesson
    parts = [
        _HTML_HEAD.format(
            title=html.escape(lesson.title),
            vega=VEGA_EMBED_VERSIONS["vega"],
            vega_lite=VEGA_EMBED_VERSIONS["vega-lite"],
            vega_embed=VEGA_EMBED_VERSIONS["vega-embed"],
        ),
        f"<h1>{html.escape(lesson.title)}</h1>",
        f"<p>{html.escape(lesson.intro.strip())}</p>",
    ]
    charts, chart_errors = compile_charts(result)
    scripts: list[str] = []
    for i, outcome in enumerate(result.outcomes, start=1):
        step = outcome.step
        parts.append(f"<h2>{i}. {html.escape(step.title)}</h2>")
        parts.append(f"<p>{html.escape(step.prose.strip())}</p>")
        kind = output_kind(outcome)
        if kind == "error":
            parts.append(f'<p class="error"><strong>Error:</strong> {html.escape(_error_text(outcome.error))}</p>')
        elif kind == "frame":
            df = outcome.output
            parts.append(f'<p class="shape">{_shape_line(df)}</p>')
            parts.append(f"<pre>{html.escape(frame_preview(df))}</pre>")
        elif i in chart_errors:
            parts.append(f'<p class="error"><strong>Error:</strong> {html.escape(chart_errors[i])}</p>')
        elif kind == "chart":
            parts.append(f'<div id="vis{i}"></div>')
            scripts.append(f'vegaEmbed("#vis{i}", {_script_json(charts[i])}, {{"actions": false}});')
        elif kind == "mapping":
            parts.append(f"<pre>{html.escape(json.dumps(outcome.output, indent=2, default=str))}</pre>")
        elif kind == "value":
            parts.append(f"<pre>{html.escape(repr(outcome.output))}</pre>")
    if scripts:
        parts.append("<script>\n" + "\n".join(scripts) + "\n</script>")
    parts.append("</body>\n</html>\n")
    return "\n".join(parts)


def _record(index: int, outcome: StepOutcome, figure: str | None, chart_error: str | None = None) -> StepRecord:
    out = outcome.output
    error = _error_text(outcome.error) if outcome.error is not None else chart_error
    return StepRecord(
        index=index,
        title=outcome.step.title,
        kind="error" if error is not None else output_kind(outcome),
        ok=error is None,
        seconds=round(outcome.seconds, 4),
        error=error,
        shape=[out.height, out.width] if isinstance(out, pl.DataFrame) else None,
        figure=figure,
    )


def write_report(result: LessonResult, out_dir: str | Path, fmt: str = "md") -> Path:
    """Write the report, its figures and manifest.json into `out_dir`.

    Args:
        result: Lesson run.
        out_dir: Target directory (created if needed).
        fmt: "md" or "html".

    Returns:
        Path: The report file.

    Raises:
        ConfigError: If `fmt` is not a known report format.
    """
    if fmt not in REPORT_FORMATS:
        raise ConfigError(f"unknown report format {fmt!r}; choose from {list(REPORT_FORMATS)!r}")
    out = ensure_dir(Path(out_dir))
    name = result.lesson.name

    charts, chart_errors = compile_charts(result)
    figures: dict[int, str] = {}
    for i, chart in charts.items():
        stem = f"figures/{_figure_stem(result, i)}"
        save_chart(
            chart,
            out_html=out / f"{stem}.html",
            out_json=out / f"{stem}.vl.json",
        )
        figures[i] = stem

    if fmt == "md":
        text = render_markdown(result, figures)
    else:
        text = render_html(result)
    report = out / f"{name}.{fmt}"
    report.write_text(text, encoding="utf-8")

    records = [
        _record(i, o, figures.get(i), chart_errors.get(i)) for i, o in enumerate(result.outcomes, start=1)
    ]
    manifest = RunManifest(
        lesson=name,
        title=result.lesson.title,
        started_at=result.started_at,
        format=fmt,
        steps=records,
        failures=sum(1 for r in records if not r.ok),
        report=report.name,
    )
    digest_src = manifest.model_dump(mode="json", exclude={"digest", "started_at"})
    for step in digest_src["steps"]:
        step.pop("seconds", None)
    manifest = manifest.model_copy(update={"digest": hash_mapping(digest_src)})
    write_manifest(manifest.model_dump(mode="json"), out)
    logger.info("wrote %s report for %s to %s (%d figure(s))", fmt, name, report, len(figures))
    return report
