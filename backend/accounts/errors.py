"""
Error taxonomy and credential check result for the accounts context.

Intent:
    Lookups and comparisons report failures through `CredentialCheck` so
    callers can branch without exceptions. The raising entry points collapse
    "unknown email" and "wrong password" into `AuthenticationFailed`, which
    keeps the boundary free of identifier enumeration.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class AccountError(Exception):
    """Base class for account errors."""


class AccountNotFound(AccountError):
    """No record for the email in the given tenant."""


class InvalidCredential(AccountError):
    """Salted hash comparison failed."""


class InvalidVerificationCode(AccountError):
    """Supplied verification code does not match the stored one."""


class AuthenticationFailed(AccountError):
    """Authentication failed. Deliberately does not say why."""


class StoreUnavailable(AccountError):
    """The record store could not be reached."""


class UnknownTenant(AccountError, ValueError):
    """Tenant or request table outside the allowlist."""


class FailureReason(str, Enum):
    NOT_FOUND = "not_found"
    INVALID_CREDENTIAL = "invalid_credential"


@dataclass(frozen=True)
class CredentialCheck:
    ok: bool
    reason: Optional[FailureReason] = None

    @classmethod
    def success(cls) -> "CredentialCheck":
        return cls(ok=True)

    @classmethod
    def failure(cls, reason: FailureReason) -> "CredentialCheck":
        return cls(ok=False, reason=reason)

    def __bool__(self) -> bool:
        return self.ok

    def raise_for_failure(self) -> None:
        """Raise the specific error for internal callers (never at the HTTP boundary)."""
        if self.ok:
            return
        if self.reason is FailureReason.NOT_FOUND:
            raise AccountNotFound("no account for email")
        raise InvalidCredential("password does not match")


__all__ = [
    "AccountError",
    "AccountNotFound",
    "InvalidCredential",
    "InvalidVerificationCode",
    "AuthenticationFailed",
    "StoreUnavailable",
    "UnknownTenant",
    "FailureReason",
    "CredentialCheck",
]
