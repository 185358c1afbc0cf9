from __future__ import annotations

import json
from pathlib import Path

import pytest

from tidylab import cli


@pytest.fixture(autouse=True)
def _isolated(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    for key in ("TIDYLAB_OUT_DIR", "TIDYLAB_OFFLINE", "TIDYLAB_REPORT_FORMAT", "TIDYLAB_THEME"):
        monkeypatch.delenv(key, raising=False)


def _run(argv: list[str]) -> int:
    with pytest.raises(SystemExit) as ei:
        cli.main(argv)
    return int(ei.value.code)


def test_list(capsys) -> None:
    assert _run(["list"]) == 0
    out = capsys.readouterr().out
    assert "reshaping" in out and "graphics" in out


def test_unknown_command(capsys) -> None:
    assert _run(["frobnicate"]) == 2
    assert "Unknown command: frobnicate" in capsys.readouterr().err


def test_no_args_prints_help(capsys) -> None:
    cli.main([])
    assert "usage" in capsys.readouterr().out.lower()


def test_run_writes_report(tmp_path: Path, capsys) -> None:
    code = _run(["run", "--lesson", "reshaping", "--offline", "--format", "html"])

    assert code == 0
    out_dir = tmp_path / "out" / "reshaping"
    assert (out_dir / "reshaping.html").exists()
    manifest = json.loads((out_dir / "manifest.json").read_text())
    assert manifest["failures"] == 0
    assert "[INFO] Wrote report to" in capsys.readouterr().out


def test_run_graphics_to_custom_dir(tmp_path: Path) -> None:
    code = _run(["run", "--lesson", "graphics", "--offline", "--out-dir", "reports"])
    assert code == 0
    assert (tmp_path / "reports" / "graphics.md").exists()
    assert any((tmp_path / "reports" / "figures").glob("graphics_*.vl.json"))


def test_run_unknown_lesson(capsys) -> None:
    assert _run(["run", "--lesson", "nope"]) == 1
    assert "unknown lesson" in capsys.readouterr().err


def test_run_failing_step_exit_code(monkeypatch, capsys) -> None:
    monkeypatch.setenv("TIDYLAB_THEME", "no_such_theme")
    assert _run(["run", "--lesson", "graphics", "--offline"]) == 1
    assert _run(["run", "--lesson", "graphics", "--offline", "--keep-going"]) == 1
    assert "[WARN] Step failed" in capsys.readouterr().out


@pytest.mark.parametrize("dataset", ["survey", "demographics", "measurements", "groups", "timeseries"])
def test_show_data(dataset: str, capsys) -> None:
    assert _run(["show-data", "--dataset", dataset, "--n", "3"]) == 0
    assert f"[INFO] {dataset}:" in capsys.readouterr().out


def test_show_data_long_survey(capsys) -> None:
    assert _run(["show-data", "--dataset", "survey", "--long"]) == 0
    assert "[INFO] survey: 32 rows x 4 columns" in capsys.readouterr().out


def test_show_data_penguins_offline(capsys) -> None:
    assert _run(["show-data", "--dataset", "penguins", "--offline"]) == 0
    assert "150 rows" in capsys.readouterr().out
