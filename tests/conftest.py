# tests/conftest.py
#
# Test bootstrap for pytest: ensure repository root is on sys.path so tests can import
# the `patloc` package without requiring PYTHONPATH to be explicitly set by the caller.
#
# Fixture Organization:
# - This file: core fixtures (repo_root, config, scenario tables)
# - tests/factories.py: PatstatTablesBuilder and small frame helpers
#
from __future__ import annotations

import sys
from pathlib import Path

import pytest
from loguru import logger


_repo_root = Path(__file__).resolve().parents[1]
_repo_root_str = str(_repo_root)

if _repo_root_str not in sys.path:
    sys.path.insert(0, _repo_root_str)

logger.remove()
logger.add(
    sys.stderr,
    level="INFO",
    format="{time:YYYY-MM-DD HH:mm:ss} {level} {name}: {message}",
)

from patloc.config.loader import get_config, reload_config  # noqa: E402
from patloc.config.schemas import PipelineConfig  # noqa: E402

from tests.factories import PatstatTablesBuilder  # noqa: E402


def pytest_configure(config):
    """Register custom pytest markers."""
    config.addinivalue_line("markers", "fast: Fast unit tests that should complete in < 1 second")
    config.addinivalue_line(
        "markers", "integration: Tests running the full pipeline through DuckDB"
    )


@pytest.fixture(scope="session")
def repo_root() -> Path:
    return _repo_root


@pytest.fixture(autouse=True)
def _fresh_config():
    """Every test starts and ends with an empty configuration cache."""
    reload_config()
    yield
    reload_config()


@pytest.fixture
def test_config(repo_root: Path) -> PipelineConfig:
    """Configuration of the ``test`` environment (in-memory DuckDB, strict validation)."""
    return get_config(environment="test", config_dir=repo_root / "config")


@pytest.fixture
def default_config() -> PipelineConfig:
    """Model defaults, independent of any YAML file."""
    return PipelineConfig()


@pytest.fixture
def builder() -> PatstatTablesBuilder:
    return PatstatTablesBuilder()


@pytest.fixture
def priority_scenario() -> PatstatTablesBuilder:
    """DE first filing 1 (1995) claimed as sole priority by US filing 2 (1996).

    Both filings belong to document family 10. Inventors 100 (on 1) and 200
    (on 2) are listed; no location is geocoded yet.
    """
    return (
        PatstatTablesBuilder()
        .with_filing(1, auth="DE", filing_date="1995-03-01", family=10)
        .with_filing(2, auth="US", filing_date="1996-02-15", family=10, publn_kind="A")
        .with_priority_claim(2, 1, seq_nr=1)
        .with_inventor(1, person_id=100, ctry_code="DE")
        .with_inventor(2, person_id=200, ctry_code="DE")
    )
