"""
Write charts to disk.

HTML and Vega-Lite JSON need nothing beyond altair. PNG and SVG go through
vl-convert-python, imported only when an image is requested.
"""

from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Any

import altair as alt

logger = logging.getLogger(__name__)

__all__ = ["save_chart", "chart_to_json"]


def chart_to_json(chart: alt.TopLevelMixin, *, indent: int | None = 2) -> str:
    """Vega-Lite JSON of a chart (validated by altair)."""
    return chart.to_json(indent=indent)


def _converter() -> Any:
    try:
        return importlib.import_module("vl_convert")
    except ImportError as exc:
        raise RuntimeError(
            "PNG/SVG export requires vl-convert-python; install it with "
            "`pip install vl-convert-python` or save HTML/JSON instead"
        ) from exc


def _prepare(path: str | Path) -> Path:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    return p


def save_chart(
    chart: alt.TopLevelMixin,
    *,
    out_html: str | Path | None = None,
    out_json: str | Path | None = None,
    out_png: str | Path | None = None,
    out_svg: str | Path | None = None,
    scale: float = 2.0,
) -> list[Path]:
    """Save a chart in one or more formats.

    Args:
        chart: Any top-level altair chart.
        out_html: Standalone HTML page (vega-embed from CDN).
        out_json: Vega-Lite spec.
        out_png: Raster image (requires vl-convert-python).
        out_svg: Vector image (requires vl-convert-python).
        scale: PNG scale factor.

    Returns:
        list[Path]: Written paths, in argument order.

    Raises:
        RuntimeError: An image was requested and vl-convert-python is not installed.
    """
    written: list[Path] = []
    if out_html is not None:
        p = _prepare(out_html)
        chart.save(str(p), format="html")
        written.append(p)
    if out_json is not None:
        p = _prepare(out_json)
        p.write_text(chart_to_json(chart), encoding="utf-8")
        written.append(p)
    if out_png is not None or out_svg is not None:
        vlc = _converter()
        spec = chart.to_dict()
        if out_png is not None:
            p = _prepare(out_png)
            p.write_bytes(vlc.vegalite_to_png(spec, scale=scale))
            written.append(p)
        if out_svg is not None:
            p = _prepare(out_svg)
            p.write_text(vlc.vegalite_to_svg(spec), encoding="utf-8")
            written.append(p)
    logger.debug("saved chart to %s", [str(p) for p in written])
    return written
