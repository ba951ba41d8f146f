"""
Account domain constants and value types.

Why:
- Table names cannot be bound as SQL parameters. Keep the accepted tenants and
  request tables in closed enums so no caller string ever reaches SQL text.
- Keep terms aligned with the glossary (tenant, request, verification code).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from .errors import UnknownTenant


class Tenant(str, Enum):
    """Logical partition an account belongs to (one table each)."""

    STUDENTS = "Students"
    PHILANTHROPISTS = "Philanthropists"


class RequestTable(str, Enum):
    """Tables that accept request records."""

    STUDENT_REQUESTS = "Student_Requests"
    PHILANTHROPIST_REQUESTS = "Philanthropist_Requests"


def parse_tenant(value: Union[str, Tenant]) -> Tenant:
    """Return the Tenant for `value` or raise UnknownTenant.

    Accepts the enum itself or its exact table name ("Students"). Matching is
    case-sensitive so a table name always maps to exactly one identifier.
    """
    if isinstance(value, Tenant):
        return value
    try:
        return Tenant(value)
    except ValueError:
        raise UnknownTenant(f"unknown tenant: {value!r}") from None


def parse_request_table(value: Union[str, RequestTable]) -> RequestTable:
    if isinstance(value, RequestTable):
        return value
    try:
        return RequestTable(value)
    except ValueError:
        raise UnknownTenant(f"unknown request table: {value!r}") from None


@dataclass(frozen=True)
class CredentialRecord:
    password_hash: str
    salt: str


@dataclass(frozen=True)
class RequestRecord:
    """A support request submitted by an account holder. Stored verbatim."""

    email: str
    request_type: str
    request_subtype: Optional[str]
    body: str


def email_tail(email: str) -> str:
    """Masked form of an email for logs (last six characters)."""
    return (email or "")[-6:]


__all__ = [
    "Tenant",
    "RequestTable",
    "parse_tenant",
    "parse_request_table",
    "CredentialRecord",
    "RequestRecord",
    "email_tail",
]
