from __future__ import annotations

import os
from pathlib import Path

import pytest

from app import main as app_main


def test_main_renders_inline(monkeypatch) -> None:
    called = {}

    def fake_streamlit_app(*, default_lesson=None):
        called["default_lesson"] = default_lesson

    monkeypatch.setenv("STREAMLIT_SERVER_PORT", "1")
    monkeypatch.setenv("TIDYLAB_OFFLINE", "0")
    # app.main imported the name directly, so patch it there
    monkeypatch.setattr(app_main, "streamlit_app", fake_streamlit_app, raising=True)

    app_main.main(["--lesson", "graphics", "--offline"])

    assert called["default_lesson"] == "graphics"
    assert os.environ["TIDYLAB_OFFLINE"] == "1"


def test_main_execs_streamlit(monkeypatch) -> None:
    monkeypatch.delenv("STREAMLIT_SERVER_PORT", raising=False)

    captured = {}

    def fake_execv(exe: str, cmd: list[str]) -> None:
        captured["exe"] = exe
        captured["cmd"] = cmd
        # stop before the process would be replaced
        raise SystemExit

    monkeypatch.setattr(os, "execv", fake_execv, raising=True)

    with pytest.raises(SystemExit):
        app_main.main(["--lesson", "reshaping"])

    assert captured["cmd"][0] == captured["exe"]
    # python -m streamlit run <app.main path> -- <forwarded options>
    assert captured["cmd"][1:4] == ["-m", "streamlit", "run"]
    expected_main_path = str(Path(app_main.__file__).resolve())
    assert captured["cmd"][4] == expected_main_path
    dashdash_idx = captured["cmd"].index("--")
    assert captured["cmd"][dashdash_idx + 1 :] == ["--lesson", "reshaping"]


def test_main_without_options_has_no_passthrough(monkeypatch) -> None:
    monkeypatch.delenv("STREAMLIT_SERVER_PORT", raising=False)
    captured = {}

    def fake_execv(exe: str, cmd: list[str]) -> None:
        captured["cmd"] = cmd
        raise SystemExit

    monkeypatch.setattr(os, "execv", fake_execv, raising=True)
    with pytest.raises(SystemExit):
        app_main.main([])
    assert "--" not in captured["cmd"]
