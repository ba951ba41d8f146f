"""Accounts context: credentials, verification codes, password reset.

Re-export the service and value types for convenient imports in the web layer
and tests. The DB repository is imported from `backend.accounts.repo_db`
directly so the psycopg dependency stays out of pure imports.
"""

from .domain import RequestRecord, RequestTable, Tenant
from .errors import (
    AccountError,
    AccountNotFound,
    AuthenticationFailed,
    CredentialCheck,
    FailureReason,
    InvalidCredential,
    InvalidVerificationCode,
    StoreUnavailable,
    UnknownTenant,
)
from .service import AccountService

__all__ = [
    "AccountService",
    "Tenant",
    "RequestTable",
    "RequestRecord",
    "AccountError",
    "AccountNotFound",
    "AuthenticationFailed",
    "CredentialCheck",
    "FailureReason",
    "InvalidCredential",
    "InvalidVerificationCode",
    "StoreUnavailable",
    "UnknownTenant",
]
