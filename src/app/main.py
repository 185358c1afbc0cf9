"""
Launcher for the tidylab lesson viewer (`tidylab-app`).

Outside Streamlit, `main` replaces the current process with
`python -m streamlit run <this file>` and forwards --lesson/--offline after
"--". When Streamlit executes this file, the `__main__` block reads those
options back and draws the UI.

    tidylab-app --lesson graphics --offline
    streamlit run src/app/main.py -- --lesson reshaping
"""

from __future__ import annotations

import argparse
import os
import subprocess
import sys
from pathlib import Path

from app.ui import streamlit_app


def _parser(add_help: bool = True) -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="tidylab-app", description="tidylab lesson viewer", add_help=add_help)
    p.add_argument("--lesson", default=None, help="Lesson preselected on first render.")
    p.add_argument("--offline", action="store_true", help="Use synthetic data (sets TIDYLAB_OFFLINE).")
    return p


def main(argv: list[str] | None = None) -> None:
    """Start the viewer.

    Renders in place when a Streamlit server is already running this code
    (STREAMLIT_SERVER_PORT is set); otherwise hands the process over to
    `streamlit run`, falling back to a child process if exec fails.

    Args:
        argv (list[str] | None): Arguments without the program name; defaults
            to sys.argv[1:].
    """
    ns = _parser().parse_args(list(sys.argv[1:] if argv is None else argv))

    if ns.offline:
        os.environ["TIDYLAB_OFFLINE"] = "1"

    if os.environ.get("STREAMLIT_SERVER_PORT"):
        streamlit_app(default_lesson=ns.lesson)
        return

    forwarded: list[str] = []
    if ns.lesson:
        forwarded += ["--lesson", ns.lesson]
    if ns.offline:
        forwarded.append("--offline")

    cmd = [sys.executable, "-m", "streamlit", "run", str(Path(__file__).resolve())]
    if forwarded:
        cmd += ["--", *forwarded]

    try:
        os.execv(sys.executable, cmd)
    except OSError:
        subprocess.run(cmd, check=False)


if __name__ == "__main__":
    # Streamlit may append its own flags; ignore anything we do not know.
    opts, _ = _parser(add_help=False).parse_known_args(sys.argv[1:])
    if opts.offline:
        os.environ["TIDYLAB_OFFLINE"] = "1"
    streamlit_app(default_lesson=opts.lesson)
