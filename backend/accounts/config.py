"""
Database configuration for the accounts context.

Intent:
    Read the environment once, validate it, and hand an explicit config object
    to whoever builds the repository. Nothing in `backend.accounts` reads the
    environment on its own.
"""
from __future__ import annotations

from dataclasses import dataclass
import os
from typing import Optional

ACCOUNTS_BACKENDS = frozenset({"db", "memory"})


@dataclass(frozen=True)
class DatabaseConfig:
    dsn: Optional[str]
    backend: str  # "db" | "memory"
    connect_timeout_seconds: int


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got: {raw!r}")
    if value <= 0 or value > 300:
        raise ValueError(f"{name} out of range (1..300), got: {value}")
    return value


def is_prod_like(env: Optional[str] = None) -> bool:
    if env is None:
        env = os.getenv("STUDENTDESK_ENV", "dev")
    return (env or "").strip().lower() in {"prod", "production", "stage", "staging"}


def load_db_config() -> DatabaseConfig:
    """Parse account store settings from environment variables.

    Env:
        STUDENTDESK_DATABASE_URL – psycopg DSN; falls back to DATABASE_URL.
        STUDENTDESK_ACCOUNTS_BACKEND – "db" (default) or "memory".
        STUDENTDESK_DB_CONNECT_TIMEOUT – seconds, 1..300 (default 30).
    """
    dsn = (os.getenv("STUDENTDESK_DATABASE_URL") or os.getenv("DATABASE_URL") or "").strip() or None
    backend = (os.getenv("STUDENTDESK_ACCOUNTS_BACKEND") or "db").strip().lower()
    if backend not in ACCOUNTS_BACKENDS:
        raise ValueError("STUDENTDESK_ACCOUNTS_BACKEND must be 'db' or 'memory'")
    timeout = _int_env("STUDENTDESK_DB_CONNECT_TIMEOUT", 30)
    return DatabaseConfig(dsn=dsn, backend=backend, connect_timeout_seconds=timeout)


def build_account_repo(cfg: DatabaseConfig):
    """Return the repository selected by `cfg`.

    The DB repository requires a DSN; the memory backend starts empty.
    """
    if cfg.backend == "memory":
        from .repo_memory import InMemoryAccountRepo

        return InMemoryAccountRepo()
    if not cfg.dsn:
        raise RuntimeError("Database DSN unavailable: set STUDENTDESK_DATABASE_URL or DATABASE_URL")
    from .repo_db import DBAccountRepo

    return DBAccountRepo(cfg.dsn, connect_timeout=cfg.connect_timeout_seconds)


__all__ = ["DatabaseConfig", "load_db_config", "build_account_repo", "is_prod_like", "ACCOUNTS_BACKENDS"]
