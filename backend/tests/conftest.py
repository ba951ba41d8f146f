"""
Shared fixtures for the accounts tests.

Puts the repo root and this directory on sys.path so `backend.*` and
`utils.*` import, pins async API tests to asyncio, clears the StudentDesk
environment variables per test, provides a seeded in-memory AccountService
and unwires the web layer's service afterwards.
"""
import sys
from pathlib import Path

import pytest

# Ensure `backend.*` and the test utilities are importable across tests
REPO_ROOT = Path(__file__).resolve().parents[2]
TESTS_DIR = REPO_ROOT / "backend" / "tests"
for p in (str(REPO_ROOT), str(TESTS_DIR)):
    if p not in sys.path:
        sys.path.insert(0, p)


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture(autouse=True)
def _clear_env_toggles(monkeypatch: pytest.MonkeyPatch):
    """Start every test in a dev environment without a configured store."""
    for var in (
        "STUDENTDESK_ENV",
        "STUDENTDESK_DATABASE_URL",
        "DATABASE_URL",
        "STUDENTDESK_ACCOUNTS_BACKEND",
        "STUDENTDESK_DB_CONNECT_TIMEOUT",
    ):
        monkeypatch.delenv(var, raising=False)
    yield


@pytest.fixture
def memory_repo():
    """InMemoryAccountRepo seeded with the fixture accounts."""
    from backend.accounts.repo_memory import InMemoryAccountRepo
    from utils.accounts_fixtures import seed_accounts

    return seed_accounts(InMemoryAccountRepo())


@pytest.fixture
def memory_service(memory_repo):
    from backend.accounts import AccountService

    return AccountService(memory_repo)


@pytest.fixture(autouse=True)
def _reset_accounts_service():
    """Reset the web layer's AccountService after each test.

    Why:
        API tests install their own service via `set_service`; without a reset
        the instance leaks into later tests.
    """
    yield
    mod = sys.modules.get("backend.web.routes.accounts")
    if mod is not None:
        mod.set_service(None)
