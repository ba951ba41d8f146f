"StudentDesk accounts API"
from __future__ import annotations

import logging
import os
import sys

from fastapi import FastAPI, Request

from backend.accounts import AccountService
from backend.accounts.config import build_account_repo, load_db_config
from backend.web import config as _cfg
from backend.web.routes.accounts import accounts_router, set_service


def _should_load_dotenv() -> bool:
    """Decide if we should load a local .env file.

    - Never load under pytest to avoid contaminating test env.
    - Allow explicit opt-out via STUDENTDESK_ENABLE_DOTENV (default true
      outside pytest).
    """
    if "pytest" in sys.modules or os.getenv("PYTEST_CURRENT_TEST"):
        return False
    flag = (os.getenv("STUDENTDESK_ENABLE_DOTENV", "true") or "").strip().lower()
    return flag in ("1", "true", "yes")


if _should_load_dotenv():
    from dotenv import load_dotenv

    load_dotenv()

# Minimal production safety checks (fail-fast on insecure config)
_cfg.ensure_secure_config_on_startup()

logger = logging.getLogger("studentdesk.web")

app = FastAPI(title="StudentDesk", description="Student portal accounts API", version="0.1.0")
app.include_router(accounts_router)


def build_default_service() -> AccountService:
    """Build the AccountService from environment configuration."""
    cfg = load_db_config()
    repo = build_account_repo(cfg)
    logger.info("account service wired backend=%s", cfg.backend)
    return AccountService(repo)


def wire_service_if_configured() -> None:
    """Wire the default service; leave routes unwired when no store is configured.

    Unwired routes answer 503 until a service is installed.
    """
    try:
        set_service(build_default_service())
    except RuntimeError as exc:
        logger.warning("account service not wired: %s", exc)


# --- Security Headers Middleware ----------------------------------------------

@app.middleware("http")
async def security_headers(request: Request, call_next):
    response = await call_next(request)
    response.headers.setdefault("X-Frame-Options", "DENY")
    response.headers.setdefault("X-Content-Type-Options", "nosniff")
    response.headers.setdefault("Referrer-Policy", "no-referrer")
    # HSTS: always on (dev = prod)
    response.headers.setdefault("Strict-Transport-Security", "max-age=31536000; includeSubDomains")
    return response


wire_service_if_configured()
