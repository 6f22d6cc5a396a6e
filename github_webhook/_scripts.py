"""Dev tasks for the webhook relay (lint, format, type-check, tests). Use: uv run <script-name>."""

import subprocess
import sys


def _run(args: list[str]) -> None:
    """Run a command; exit with its code."""
    sys.exit(subprocess.run(args).returncode)


def lint() -> None:
    """Run ruff check on github_webhook and tests."""
    _run([sys.executable, "-m", "ruff", "check", "github_webhook", "tests"])


def format() -> None:
    """Run ruff format on github_webhook and tests."""
    _run([sys.executable, "-m", "ruff", "format", "github_webhook", "tests"])


def type_check() -> None:
    """Run pyright on github_webhook."""
    _run([sys.executable, "-m", "pyright", "github_webhook"])


def test() -> None:
    """Run the webhook relay test suite under tests/."""
    _run([sys.executable, "-m", "pytest", "tests/", "-v"])


def test_cov() -> None:
    """Run the test suite with line coverage of github_webhook."""
    _run(
        [
            sys.executable,
            "-m",
            "pytest",
            "tests/",
            "--cov=github_webhook",
            "--cov-report=term-missing",
            "-v",
        ]
    )
