"""
tidylab command line.

Usage:
    tidylab list
    tidylab run --lesson reshaping --format html --offline
    tidylab show-data --dataset survey --long
"""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path

import polars as pl

from tidylab.core.constants import REPORT_FORMATS, SURVEY_QUESTIONS
from tidylab.core.errors import LessonError, TidyLabError
from tidylab.io.config import LabSettings
from tidylab.lessons import get_lesson, list_lessons, run_lesson, write_report
from tidylab.lessons.render import compile_charts
from tidylab.wrangle import datasets
from tidylab.wrangle.reshape import pivot_longer

DATASETS: tuple[str, ...] = ("survey", "demographics", "measurements", "groups", "timeseries", "penguins")


def _load_dataset(name: str, settings: LabSettings, *, long: bool = False) -> pl.DataFrame:
    if name == "survey":
        df = datasets.survey_responses()
        if long:
            df = pivot_longer(df, list(SURVEY_QUESTIONS), names_to="question", values_to="answer")
        return df
    if name == "measurements":
        df = datasets.measurements_wide(seed=settings.seed)
        if long:
            times = [c for c in df.columns if c not in ("subject", "treatment")]
            df = pivot_longer(df, times, names_to="time", values_to="score")
        return df
    if name == "demographics":
        return datasets.demographics()
    if name == "groups":
        return datasets.groups_long(seed=settings.seed)
    if name == "timeseries":
        return datasets.timeseries(seed=settings.seed)
    return datasets.penguins(settings)


def _cmd_list(argv: list[str]) -> int:
    p = argparse.ArgumentParser(prog="tidylab list", description="List available lessons.")
    p.parse_args(argv)
    settings = LabSettings()
    for name in list_lessons():
        lesson = get_lesson(name, settings)
        print(f"{name:<12} {lesson.title} ({len(lesson.steps)} steps)")
    return 0


def _cmd_run(argv: list[str]) -> int:
    p = argparse.ArgumentParser(prog="tidylab run", description="Run a lesson and write its report.")
    p.add_argument("--lesson", required=True, help=f"Lesson name ({', '.join(list_lessons())}).")
    p.add_argument("--out-dir", type=str, default=None, help="Report directory (default <out_dir>/<lesson>).")
    p.add_argument("--format", dest="fmt", choices=REPORT_FORMATS, default=None, help="Report format.")
    p.add_argument("--offline", action="store_true", help="Use synthetic data instead of remote CSVs.")
    p.add_argument("--keep-going", action="store_true", help="Record failing steps and continue.")
    p.add_argument("--verbose", action="store_true", help="Log library messages to stderr.")
    args = p.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    settings = LabSettings.load()
    if args.offline:
        settings = replace(settings, offline=True)
    fmt = args.fmt or settings.report_format
    out_dir = Path(args.out_dir) if args.out_dir else Path(settings.out_dir) / args.lesson

    try:
        lesson = get_lesson(args.lesson, settings)
    except LessonError as exc:
        print(f"[ERROR] {exc}", file=sys.stderr)
        return 1
    print(f"[INFO] Running lesson {lesson.name!r} ({len(lesson.steps)} steps, offline={settings.offline})")
    try:
        result = run_lesson(lesson, settings, keep_going=args.keep_going)
    except LessonError as exc:
        print(f"[ERROR] {exc}", file=sys.stderr)
        if exc.__cause__ is not None:
            print(f"[ERROR] caused by {type(exc.__cause__).__name__}: {exc.__cause__}", file=sys.stderr)
        return 1

    report = write_report(result, out_dir, fmt)
    print(f"[INFO] Wrote report to {report}")
    print(f"[INFO] Wrote manifest to {out_dir / 'manifest.json'}")
    for outcome in result.failures:
        print(f"[WARN] Step failed: {outcome.step.title}: {outcome.error}")
    _, chart_errors = compile_charts(result)
    for i, text in chart_errors.items():
        print(f"[WARN] Step failed: {result.outcomes[i - 1].step.title}: {text}")
    return 0 if result.ok and not chart_errors else 1


def _cmd_show_data(argv: list[str]) -> int:
    p = argparse.ArgumentParser(prog="tidylab show-data", description="Print the head of an example dataset.")
    p.add_argument("--dataset", choices=DATASETS, default="survey", help="Dataset name.")
    p.add_argument("--n", type=int, default=5, help="Rows to display.")
    p.add_argument("--long", action="store_true", help="Show the long layout (survey, measurements).")
    p.add_argument("--offline", action="store_true", help="Use the synthetic penguins table.")
    args = p.parse_args(argv)

    settings = LabSettings.load()
    if args.offline:
        settings = replace(settings, offline=True)
    try:
        df = _load_dataset(args.dataset, settings, long=args.long)
    except TidyLabError as exc:
        print(f"[ERROR] {exc}", file=sys.stderr)
        return 1
    print(f"[INFO] {args.dataset}: {df.height} rows x {df.width} columns")
    print(df.head(args.n))
    return 0


def build_argparser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="tidylab", description="Tidy data and layered graphics lessons.")
    sub = p.add_subparsers(dest="cmd", required=True)

    sub.add_parser("list")
    sub.add_parser("run")
    sub.add_parser("show-data")
    return p


def main(argv: list[str] | None = None) -> None:
    argv = list(sys.argv[1:] if argv is None else argv)
    if not argv:
        build_argparser().print_help()
        return
    cmd, rest = argv[0], argv[1:]
    if cmd == "list":
        code = _cmd_list(rest)
    elif cmd == "run":
        code = _cmd_run(rest)
    elif cmd == "show-data":
        code = _cmd_show_data(rest)
    else:
        print(f"Unknown command: {cmd}", file=sys.stderr)
        code = 2
    raise SystemExit(code)


if __name__ == "__main__":
    main()
