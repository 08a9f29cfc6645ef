"""Nox sessions for line-clamp development tasks."""

from __future__ import annotations

import nox

PACKAGE = "src/line_clamp"

nox.options.error_on_missing_interpreters = False
nox.options.sessions = ["lint", "typecheck", "tests"]


@nox.session
def lint(session: nox.Session) -> None:
    """Run ruff linting and formatting checks."""
    session.install("ruff")
    session.run("ruff", "check", ".")
    session.run("ruff", "format", "--check", ".")


@nox.session(name="lint-fix")
def lint_fix(session: nox.Session) -> None:
    """Apply ruff fixes and formatting."""
    session.install("ruff")
    session.run("ruff", "check", "--fix", ".")
    session.run("ruff", "format", ".")


@nox.session
def tests(session: nox.Session) -> None:
    """Run the test suite."""
    session.install("-e", ".[dev]")
    session.run("pytest", "-q", *session.posargs)


@nox.session
def typecheck(session: nox.Session) -> None:
    """Run mypy over the package."""
    session.install("-e", ".[dev]")
    session.run("mypy", PACKAGE)


@nox.session
def coverage(session: nox.Session) -> None:
    """Run tests under coverage and enforce a floor."""
    session.install("-e", ".[dev]")
    session.run("coverage", "run", "--source=line_clamp", "-m", "pytest", "-q")
    session.run("coverage", "report", "--fail-under=85", "-m")


@nox.session
def build(session: nox.Session) -> None:
    """Build sdist and wheel artifacts."""
    session.install("build")
    session.run("python", "-m", "build")


@nox.session(name="dev", venv_backend="none")
def dev(session: nox.Session) -> None:
    """Fast local lint, typecheck and tests using the active venv."""
    session.run("python", "-m", "ruff", "check", "--fix", ".", external=True)
    session.run("python", "-m", "ruff", "format", ".", external=True)
    session.run("python", "-m", "mypy", PACKAGE, external=True)
    session.run("python", "-m", "pytest", "-q", external=True)
