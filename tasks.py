"""Invoke tasks for syncing, building, testing, and linting tidyname.

Every task shells out to the `uv` CLI so local runs match CI.
"""

from __future__ import annotations

import shlex
import shutil
from collections.abc import Sequence
from pathlib import Path

from invoke import Collection, Context, task

PROJECT_ROOT = Path(__file__).parent
DIST_DIR = PROJECT_ROOT / "dist"


def _run_uv(ctx: Context, args: Sequence[str], *, echo: bool = True) -> None:
    """Execute a uv command with consistent quoting and PTY defaults.

    Args:
        ctx: Invoke execution context.
        args: Arguments appended after the `uv` executable.
        echo: Whether to echo the command before running it.
    """
    ctx.run(shlex.join(("uv", *args)), echo=echo, pty=True)


@task
def sync(ctx: Context, dev: bool = True) -> None:
    """Synchronize the virtual environment, including the dev extra by default."""
    args = ["sync"]
    if dev:
        args.extend(["--extra", "dev"])
    _run_uv(ctx, args)


@task(help={"clean": "Remove existing artifacts from dist/ before building."})
def build(ctx: Context, clean: bool = False) -> None:
    """Build source and wheel distributions in `dist/`."""
    if clean and DIST_DIR.exists():
        shutil.rmtree(DIST_DIR)
    _run_uv(ctx, ["build"])


@task(
    help={
        "k": "pytest -k expression for test selection.",
        "path": "Path or module to test (defaults to tests/).",
        "options": "Additional CLI flags forwarded verbatim to pytest.",
    }
)
def tests(ctx: Context, k: str = "", path: str = "tests", options: str = "") -> None:
    """Run the pytest suite.

    Args:
        ctx: Invoke execution context.
        k: `pytest -k` expression to select tests.
        path: Target path for pytest discovery.
        options: Extra CLI arguments appended to the pytest call.
    """
    args: list[str] = ["run", "pytest"]
    if k:
        args.extend(["-k", k])
    if options:
        args.extend(shlex.split(options))
    if path:
        args.append(path)
    _run_uv(ctx, args)


@task(
    help={
        "fix": "Apply auto-fixes where possible (ruff --fix).",
        "check_format": "Run ruff format --check before linting.",
    }
)
def lint(ctx: Context, fix: bool = False, check_format: bool = False) -> None:
    """Run Ruff formatting and lint checks."""
    if check_format:
        _run_uv(ctx, ["run", "ruff", "format", "--check", "src", "tests"])
    lint_args: list[str] = ["run", "ruff", "check", "src", "tests"]
    if fix:
        lint_args.append("--fix")
    _run_uv(ctx, lint_args)


@task
def mypy(ctx: Context) -> None:
    """Run MyPy over the package sources."""
    _run_uv(ctx, ["run", "mypy", "src"])


@task
def ci(ctx: Context) -> None:
    """Replicate the CI workflow locally."""
    ctx.invoke(lint, check_format=True)
    ctx.invoke(mypy)
    ctx.invoke(tests)


namespace = Collection(sync, build, tests, lint, mypy, ci)
