import nox

PYTHON_VERSIONS = ["3.11", "3.12", "3.13", "3.14"]

# Packages with C extensions that must be rebuilt per Python version.
_C_EXT_PACKAGES = ["psycopg2"]


def _install(session: nox.Session, postgres: bool = False) -> None:
    """Install the project with its test extra into the nox virtualenv."""
    extras = "test,postgresql" if postgres else "test"
    session.install("-e", f".[{extras}]")
    if postgres:
        # Force-rebuild C-extension packages so the .so matches this Python version.
        session.run("pip", "install", "--force-reinstall", "--no-cache-dir", *_C_EXT_PACKAGES)


@nox.session(python=PYTHON_VERSIONS)
def tests(session: nox.Session) -> None:
    """Run the full test suite against the in-memory adapters."""
    _install(session)
    session.run("pytest", *session.posargs)


@nox.session(python=PYTHON_VERSIONS)
def tests_domain(session: nox.Session) -> None:
    """Run domain-layer tests only (no infrastructure required)."""
    _install(session)
    session.run("pytest", "tests/warehouse/domain/", *session.posargs)


@nox.session(python=PYTHON_VERSIONS[-1])
def tests_postgres(session: nox.Session) -> None:
    """Run the suite against PostgreSQL (``PROTEAN_ENV=production``)."""
    _install(session, postgres=True)
    session.run("pytest", "--env", "production", *session.posargs)
