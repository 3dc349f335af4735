"""Command line entry points.

e2e-run builds a pytest command for the training suites:

    e2e-run --env qa --spec "e2e_training/specs/day2/*.py" --reporter html,junit
    e2e-run --shard-index 0 --shard-total 4 --retries 2
    e2e-run --marker smoke -- -x

e2e-merge-reports merges the JUnit files written by parallel shards:

    e2e-merge-reports artifacts/reports/*.xml --output artifacts/reports/merged.xml
"""
from __future__ import annotations

import argparse
import glob
import os
import shlex
import sys
from pathlib import Path
from typing import List, Optional, Sequence

import pytest

from e2e_training.ci import select_shard
from e2e_training.env_config import ENVIRONMENTS, resolve_environment_name, settings
from e2e_training.reports import merge_junit_reports, report_paths

SPECS_DIR = Path(__file__).resolve().parent / "specs"
PLUGIN = "e2e_training.pytest_fixtures"
REPORTERS = ("html", "junit")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="e2e-run", description="Run the end-to-end training suites")
    parser.add_argument("--spec", action="append", default=[],
                        help="Spec file, glob or node id; repeatable, comma separated")
    parser.add_argument("--reporter", default="html,junit",
                        help="Comma separated reporters: html, junit (empty for none)")
    parser.add_argument("--env", default=None, choices=sorted(set(ENVIRONMENTS) | {"dev", "prod", "stage"}),
                        help="Environment profile (default: E2E_ENV or qa)")
    parser.add_argument("--browser", choices=["chromium", "firefox", "webkit"], default=None)
    parser.add_argument("--headed", action="store_true", help="Show the browser window")
    parser.add_argument("--retries", type=int, default=None,
                        help="Reruns for failed tests (default: environment profile)")
    parser.add_argument("--shard-index", type=int, default=None, help="0-based shard of this machine")
    parser.add_argument("--shard-total", type=int, default=None, help="Number of parallel machines")
    parser.add_argument("--reports-dir", default=None, help="Report output directory")
    parser.add_argument("--marker", "-m", default=None, help="pytest marker expression")
    parser.add_argument("--dry-run", action="store_true", help="Print the pytest command and exit")
    parser.add_argument("pytest_args", nargs=argparse.REMAINDER,
                        help="Extra pytest arguments after --")
    return parser


def _split(values: Sequence[str]) -> List[str]:
    return [part.strip() for value in values for part in value.split(",") if part.strip()]


def collect_specs(patterns: Sequence[str]) -> List[str]:
    """Resolve spec patterns to a sorted, de-duplicated list.

    Without patterns every test_*.py under the specs package is returned.
    Paths and the file part of node ids (path::test) are tried against the
    working directory first, then against the specs package.
    """
    if not patterns:
        return sorted(str(path) for path in SPECS_DIR.rglob("test_*.py"))

    specs: List[str] = []
    for pattern in _split(patterns):
        path, sep, test = pattern.partition("::")
        matches = sorted(glob.glob(path, recursive=True))
        if not matches:
            matches = sorted(glob.glob(str(SPECS_DIR / path), recursive=True))
        if not matches:
            raise FileNotFoundError(f"No spec files match {pattern!r}")
        if sep:
            matches = [f"{match}::{test}" for match in matches]
        for match in matches:
            if match not in specs:
                specs.append(match)
    return sorted(specs)


def apply_environment(args: argparse.Namespace) -> None:
    """Export the selected options and reload settings from them."""
    if args.env:
        os.environ["E2E_ENV"] = resolve_environment_name(args.env)
    if args.browser:
        os.environ["E2E_BROWSER"] = args.browser
    if args.headed:
        os.environ["PLAYWRIGHT_HEADLESS"] = "false"
    settings.reload()


def build_pytest_args(args: argparse.Namespace, timestamp: Optional[str] = None) -> List[str]:
    """Translate CLI options into pytest arguments; empty when the shard has no specs."""
    sharded = args.shard_total is not None
    if sharded and args.shard_index is None:
        raise ValueError("--shard-total requires --shard-index")
    if args.shard_index is not None and not sharded:
        raise ValueError("--shard-index requires --shard-total")

    specs = collect_specs(args.spec)
    if sharded:
        specs = select_shard(specs, args.shard_index, args.shard_total)
        if not specs:
            return []

    pytest_args: List[str] = ["-p", PLUGIN, *specs]

    reports_dir = Path(args.reports_dir) if args.reports_dir else settings.reports_folder
    paths = report_paths(reports_dir, timestamp, args.shard_index if sharded else None)
    reporters = _split([args.reporter]) if args.reporter else []
    for reporter in reporters:
        if reporter not in REPORTERS:
            raise ValueError(f"Unknown reporter {reporter!r}; expected one of {', '.join(REPORTERS)}")
    if "html" in reporters:
        pytest_args += [f"--html={paths['html']}", "--self-contained-html"]
    if "junit" in reporters:
        pytest_args.append(f"--junitxml={paths['junit']}")

    retries = settings.retries if args.retries is None else args.retries
    if retries > 0:
        pytest_args += ["--reruns", str(retries)]

    if args.marker:
        pytest_args += ["-m", args.marker]

    extra = list(args.pytest_args or [])
    if extra and extra[0] == "--":
        extra = extra[1:]
    return pytest_args + extra


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    apply_environment(args)
    try:
        pytest_args = build_pytest_args(args)
    except (ValueError, FileNotFoundError) as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 2

    if not pytest_args:
        print(f"[RUN] Shard {args.shard_index}/{args.shard_total} has no specs, nothing to do")
        return 0

    print(f"[RUN] Environment: {settings.environment} ({settings.base_url})")
    print(f"[RUN] pytest {shlex.join(pytest_args)}")
    if args.dry_run:
        return 0

    settings.ensure_artifact_dirs()
    return int(pytest.main(pytest_args))


def merge_main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="e2e-merge-reports", description="Merge JUnit XML reports")
    parser.add_argument("inputs", nargs="*", help="JUnit files or globs (default: reports dir *.xml)")
    parser.add_argument("--output", default=None, help="Merged report path")
    args = parser.parse_args(argv)

    output = Path(args.output) if args.output else settings.reports_folder / "merged-junit.xml"
    patterns = args.inputs or [str(settings.reports_folder / "*.xml")]
    inputs = [
        path
        for pattern in patterns
        for path in sorted(glob.glob(pattern))
        if Path(path).resolve() != output.resolve()
    ]
    if not inputs:
        print("ERROR: no JUnit reports found", file=sys.stderr)
        return 1

    merge_junit_reports(inputs, output)
    print(f"[RUN] Merged {len(inputs)} report(s) into {output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
