"""Nox sessions for the exporter's test suite, type checks and CLI smoke test."""

import nox

nox.options.sessions = ["tests", "smoke"]
nox.options.default_venv_backend = "uv"

PYTHONS = ["3.10", "3.11", "3.12", "3.13"]


@nox.session(python=PYTHONS)
def tests(session):
    """Run the unit tests, including the Redis state store tests."""
    session.install(".[full,dev]")
    session.run("pytest", "tests/unit", "-q", "--no-cov", *session.posargs)


@nox.session(python=PYTHONS)
def type_check(session):
    """Run mypy over the package."""
    session.install(".[full,dev]")
    session.install("mypy")
    session.run("mypy", "src/cloudflare_exporter", *session.posargs)


@nox.session(python="3.12")
def smoke(session):
    """Install without extras and check the CLI refuses to start without credentials."""
    session.install(".")
    session.run(
        "cloudflare-exporter",
        env={"CF_API_TOKEN": "", "CF_API_KEY": "", "CF_API_EMAIL": ""},
        success_codes=[2],
    )
