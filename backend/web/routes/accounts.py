"""
Account API routes: login, verification codes, password reset, requests.

Why:
    Keep the HTTP surface thin: validate payloads, call `AccountService`, map
    results to status codes. Credential logic lives in `backend.accounts`.

Notes:
    - Login failures always answer 401 `invalid_credentials`, whether the email
      is unknown or the password wrong.
    - Issuing a code always answers 202 so the endpoint cannot be used to probe
      which emails exist.
    - Every response is `Cache-Control: private, no-store`.
"""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from pydantic.functional_validators import field_validator

from backend.accounts import (
    AccountService,
    AuthenticationFailed,
    InvalidVerificationCode,
    RequestRecord,
    StoreUnavailable,
    UnknownTenant,
)
from backend.accounts.domain import email_tail, parse_request_table, parse_tenant
from backend.accounts.errors import AccountNotFound

accounts_router = APIRouter(tags=["Accounts"])  # explicit paths, no prefix
logger = logging.getLogger("studentdesk.web.accounts")

SERVICE: Optional[AccountService] = None


def set_service(service: Optional[AccountService]) -> None:
    """Install the AccountService used by the routes (startup wiring and tests)."""
    global SERVICE
    SERVICE = service


def send_verification_code(*, email: str, tenant: str, code: str) -> None:
    """Delivery hook for verification codes; replaced in deployments and tests.

    The default only records that a code was produced, never the code itself.
    """
    logger.info("verification code ready for delivery tenant=%s email_tail=%s", tenant, email_tail(email))


def _private_response(body: dict, *, status_code: int = 200) -> JSONResponse:
    return JSONResponse(body, status_code=status_code, headers={"Cache-Control": "private, no-store"})


def _bad_tenant() -> JSONResponse:
    return _private_response({"error": "bad_request", "detail": "invalid_tenant"}, status_code=400)


def _store_unavailable() -> JSONResponse:
    return _private_response({"error": "service_unavailable"}, status_code=503)


def _service() -> AccountService:
    if SERVICE is None:
        raise StoreUnavailable("account service not configured")
    return SERVICE


# --- Request models ---------------------------------------------------------------

class _AccountPayload(BaseModel):
    email: str = Field(..., min_length=3, max_length=320)
    tenant: str = Field(..., min_length=1, max_length=64)

    @field_validator("email")
    @classmethod
    def _strip_email(cls, v: str) -> str:
        return v.strip()


class LoginPayload(_AccountPayload):
    password: str = Field(..., min_length=1, max_length=1024)


class IssueCodePayload(_AccountPayload):
    pass


class VerifyCodePayload(_AccountPayload):
    code: str = Field(..., min_length=1, max_length=32)


class PasswordResetPayload(_AccountPayload):
    code: str = Field(..., min_length=1, max_length=32)
    new_password: str = Field(..., min_length=1, max_length=1024)


class RequestPayload(BaseModel):
    table: str = Field(..., min_length=1, max_length=64)
    email: str = Field(..., min_length=3, max_length=320)
    request_type: str = Field(..., min_length=1, max_length=100)
    request_subtype: str | None = Field(default=None, max_length=100)
    body: str = Field(..., min_length=1, max_length=10000)

    @field_validator("request_subtype")
    @classmethod
    def _strip_empty(cls, v):
        if isinstance(v, str):
            v = v.strip()
            return v if v else None
        return v


# --- Routes -----------------------------------------------------------------------

@accounts_router.post("/api/auth/login")
async def login(payload: LoginPayload):
    """Check email/password for a tenant.

    Responses:
        200 {"authenticated": true}; 401 {"error": "invalid_credentials"};
        400 on an unknown tenant; 503 when the store is unreachable.
    """
    try:
        tenant = parse_tenant(payload.tenant)
        _service().authenticate_or_raise(payload.email, payload.password, tenant)
    except UnknownTenant:
        return _bad_tenant()
    except AuthenticationFailed:
        return _private_response({"error": "invalid_credentials"}, status_code=401)
    except StoreUnavailable:
        logger.warning("login failed: store unavailable")
        return _store_unavailable()
    return _private_response({"authenticated": True})


@accounts_router.post("/api/auth/verification-code")
async def issue_verification_code(payload: IssueCodePayload):
    """Generate and deliver a fresh verification code.

    Always 202 for known tenants; unknown emails are silently ignored.
    """
    try:
        tenant = parse_tenant(payload.tenant)
        code = _service().issue_verification_code(payload.email, tenant)
    except UnknownTenant:
        return _bad_tenant()
    except StoreUnavailable:
        logger.warning("issue code failed: store unavailable")
        return _store_unavailable()
    if code is not None:
        send_verification_code(email=payload.email, tenant=tenant.value, code=code)
    return _private_response({"status": "issued"}, status_code=202)


@accounts_router.post("/api/auth/verification-code/verify")
async def verify_verification_code(payload: VerifyCodePayload):
    try:
        tenant = parse_tenant(payload.tenant)
        verified = _service().verify_verification_code(payload.email, payload.code, tenant)
    except UnknownTenant:
        return _bad_tenant()
    except StoreUnavailable:
        return _store_unavailable()
    return _private_response({"verified": verified})


@accounts_router.post("/api/auth/password-reset")
async def reset_password(payload: PasswordResetPayload):
    """Replace the password when the verification code matches.

    Responses:
        200 {"updated": true}; 400 {"error": "invalid_verification_code"} for a
        wrong code or an unknown email (same response for both).
    """
    try:
        tenant = parse_tenant(payload.tenant)
        _service().reset_password_or_raise(payload.email, payload.new_password, payload.code, tenant)
    except UnknownTenant:
        return _bad_tenant()
    except (InvalidVerificationCode, AccountNotFound):
        return _private_response({"error": "invalid_verification_code"}, status_code=400)
    except StoreUnavailable:
        logger.warning("password reset failed: store unavailable")
        return _store_unavailable()
    return _private_response({"updated": True})


@accounts_router.post("/api/requests")
async def create_request(payload: RequestPayload):
    try:
        table = parse_request_table(payload.table)
        record = RequestRecord(
            email=payload.email.strip(),
            request_type=payload.request_type.strip(),
            request_subtype=payload.request_subtype,
            body=payload.body,
        )
        created = _service().add_request(table, record)
    except UnknownTenant:
        return _private_response({"error": "bad_request", "detail": "invalid_table"}, status_code=400)
    except StoreUnavailable:
        return _store_unavailable()
    if not created:
        return _private_response({"error": "not_created"}, status_code=500)
    return _private_response({"created": True}, status_code=201)
