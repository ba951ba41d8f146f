"""
Configuration and startup security checks for StudentDesk.

Why: Account data (hashes, salts, verification codes) must never be served
from an insecure or throwaway store in production. This module provides a
single guard that enforces minimal production safety constraints without
burdening local development.

Permissions: The caller needs no special privileges. The function simply reads
environment variables and raises `SystemExit` on fatal misconfiguration.
"""
from __future__ import annotations

import os
import re
from urllib.parse import urlparse

from backend.accounts.config import is_prod_like


def _parse_user(dsn_value: str) -> str | None:
    if "://" in dsn_value:
        return urlparse(dsn_value).username
    # Keyword form: host=... user=... dbname=...
    m = re.search(r"\buser\s*=\s*([^\s]+)", dsn_value)
    return m.group(1) if m else None


def ensure_secure_config_on_startup() -> None:
    """Fail fast on insecure production configuration.

    Checks (prod/production/stage/staging only):
    - The accounts backend must be the database, not the in-memory store.
    - A DSN must be configured.
    - The DSN must not explicitly disable TLS.
    - The DSN must not authenticate as the superuser `postgres`.
    """
    if not is_prod_like():
        return  # dev/test remain permissive

    backend = (os.getenv("STUDENTDESK_ACCOUNTS_BACKEND") or "db").strip().lower()
    if backend == "memory":
        raise SystemExit(
            "Refusing to start: STUDENTDESK_ACCOUNTS_BACKEND=memory is not allowed in production/staging."
        )

    dsn = (os.getenv("STUDENTDESK_DATABASE_URL") or os.getenv("DATABASE_URL") or "").strip()
    if not dsn:
        raise SystemExit("Refusing to start: no database DSN configured (STUDENTDESK_DATABASE_URL).")

    if "sslmode=disable" in dsn:
        raise SystemExit(
            "Refusing to start: database DSN contains sslmode=disable in production. Use sslmode=require or verify TLS."
        )

    if (_parse_user(dsn) or "").lower() == "postgres":
        raise SystemExit(
            "Refusing to start: database DSN authenticates as 'postgres' in production. Use a limited login role."
        )
