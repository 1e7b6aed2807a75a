#!/usr/bin/env python3
# Copyright 2026 GraphSchema Contributors
# SPDX-License-Identifier: Apache-2.0

"""Run the CI pipeline locally.

Steps run in order: format check, lint, tests with coverage, a CLI smoke
test on a freshly initialized project, and the package build. Individual
steps can be selected with ``--only`` or skipped with ``--skip``.
"""

import argparse
import subprocess
import sys
import tempfile
import time
from dataclasses import dataclass
from pathlib import Path

from yachalk import chalk

# ###############
# Public Interface
# ###############


@dataclass(frozen=True)
class Step:
    """One CI step: a short key for selection, a title and the commands to run."""

    key: str
    title: str
    commands: tuple[tuple[str, ...], ...]


def build_steps(scratch: Path) -> list[Step]:
    """Return the pipeline. *scratch* is an empty directory for the smoke test project."""
    project = str(scratch)
    return [
        Step("format", "Format check", (("uv", "run", "ruff", "format", "--check", "src/", "tests/", "tools/"),)),
        Step("lint", "Lint", (("uv", "run", "ruff", "check", "src/", "tests/", "tools/"),)),
        Step(
            "test",
            "Tests",
            (("uv", "run", "pytest", "--cov=graphschema", "--cov-report=term-missing"),),
        ),
        Step(
            "smoke",
            "CLI smoke test",
            (
                ("uv", "run", "graphschema", "init", project),
                ("uv", "run", "graphschema", "check", project),
                ("uv", "run", "graphschema", "graph", str(scratch / "schema.yaml"), "--root", "Post"),
            ),
        ),
        Step("build", "Build", (("uv", "build"),)),
    ]


def main(argv: list[str] | None = None) -> int:
    """Run the selected CI steps and print a summary. Returns the process exit code."""
    parser = argparse.ArgumentParser(description="Run the GraphSchema CI pipeline locally.")
    parser.add_argument("--only", nargs="+", metavar="STEP", help="Run only these steps")
    parser.add_argument("--skip", nargs="+", metavar="STEP", default=[], help="Skip these steps")
    parser.add_argument("--fail-fast", action="store_true", help="Stop at the first failing step")
    args = parser.parse_args(argv)

    with tempfile.TemporaryDirectory(prefix="graphschema-ci-") as scratch:
        steps = build_steps(Path(scratch))
        known = {step.key for step in steps}
        unknown = sorted((set(args.only or []) | set(args.skip)) - known)
        if unknown:
            parser.error(f"unknown step(s): {', '.join(unknown)} (choose from {', '.join(sorted(known))})")

        selected = [s for s in steps if (args.only is None or s.key in args.only) and s.key not in args.skip]
        results: list[tuple[str, bool, float]] = []
        for step in selected:
            passed, elapsed = _run_step(step)
            results.append((step.title, passed, elapsed))
            if not passed and args.fail_fast:
                break

    _print_summary(results, skipped=len(selected) - len(results))
    return 0 if results and all(passed for _, passed, _ in results) else 1


# ################
# Implementation
# ################

_RULE = "=" * 60


def _repo_root() -> Path:
    return Path(__file__).resolve().parent.parent


def _run_step(step: Step) -> tuple[bool, float]:
    print(f"\n{chalk.blue(_RULE)}")
    print(chalk.blue(step.title))
    print(chalk.blue(_RULE))
    start = time.monotonic()
    for command in step.commands:
        if subprocess.run(command, cwd=_repo_root()).returncode != 0:
            return False, time.monotonic() - start
    return True, time.monotonic() - start


def _print_summary(results: list[tuple[str, bool, float]], skipped: int) -> None:
    print(f"\n{chalk.blue(_RULE)}")
    print(chalk.blue("  Summary"))
    print(chalk.blue(_RULE))
    for title, passed, elapsed in results:
        colour = chalk.green if passed else chalk.red
        print(colour(f"  {'PASS' if passed else 'FAIL'}  {title} ({elapsed:.1f}s)"))
    if skipped:
        print(chalk.yellow(f"  {skipped} step(s) not run after failure"))
    print()


if __name__ == "__main__":
    sys.exit(main())
