"""Invoke tasks for developing Tractor.

Every task shells out to `uv` so local runs use the same environment as CI.
"""

from __future__ import annotations

import shlex
import shutil
from collections.abc import Sequence
from pathlib import Path

from invoke import Collection, Context, task

PROJECT_ROOT = Path(__file__).parent
DIST_DIR = PROJECT_ROOT / "dist"


def _run_uv(ctx: Context, args: Sequence[str], *, env: dict[str, str] | None = None) -> None:
    """Execute a uv command with consistent quoting and PTY defaults.

    Args:
        ctx: Invoke execution context.
        args: Arguments to append after the `uv` executable.
        env: Optional environment variables for the invocation.
    """
    ctx.run(shlex.join(("uv", *args)), echo=True, pty=True, env=env or {})


@task
def sync(ctx: Context) -> None:
    """Synchronize the virtual environment, including the dev extra."""
    _run_uv(ctx, ["sync", "--extra", "dev"])


@task(help={"clean": "Remove existing artifacts from dist/ before building."})
def build(ctx: Context, clean: bool = False) -> None:
    """Build source and wheel distributions in `dist/`."""
    if clean and DIST_DIR.exists():
        shutil.rmtree(DIST_DIR)
    _run_uv(ctx, ["build"])


@task(
    help={
        "k": "pytest -k expression for test selection.",
        "options": "Additional CLI flags forwarded verbatim to pytest.",
    }
)
def tests(ctx: Context, k: str = "", options: str = "") -> None:
    """Run the pytest suite."""
    args: list[str] = ["run", "pytest"]
    if k:
        args.extend(["-k", k])
    if options:
        args.extend(shlex.split(options))
    _run_uv(ctx, args)


@task(help={"fix": "Apply auto-fixes where possible (ruff --fix)."})
def lint(ctx: Context, fix: bool = False) -> None:
    """Run Ruff format and lint checks."""
    _run_uv(ctx, ["run", "ruff", "format", "--check", "src", "tests"])
    args: list[str] = ["run", "ruff", "check", "src", "tests"]
    if fix:
        args.append("--fix")
    _run_uv(ctx, args)


@task(
    help={
        "path": "File or directory of images to import.",
        "storage": "Scratch storage root used instead of ~/.tractor/storage.",
    }
)
def smoke(ctx: Context, path: str, storage: str = ".tractor-smoke") -> None:
    """Import PATH twice into a scratch storage root; the second run must skip everything."""
    env = {"TRACTOR__STORAGE__ROOT": str(Path(storage).resolve())}
    for _ in range(2):
        _run_uv(ctx, ["run", "tractor", "import", "--resource", "smoke", path], env=env)


@task
def ci(ctx: Context) -> None:
    """Replicate the CI workflow locally."""
    ctx.invoke(lint)
    ctx.invoke(tests)


namespace = Collection(sync, build, tests, lint, smoke, ci)
