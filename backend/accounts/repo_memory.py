"""
In-memory account repository for development and tests.

Why: Run the web layer and the account flows without Postgres. Mirrors the
semantics of `DBAccountRepo` (same method names, same return values). For
production use the DB-backed repository.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Dict, List, Optional, Tuple, Union

from .domain import (
    CredentialRecord,
    RequestRecord,
    RequestTable,
    Tenant,
    parse_request_table,
    parse_tenant,
)


@dataclass
class AccountRow:
    id: int
    email: str
    password_hash: str
    salt: str
    verification_code: Optional[str] = None


class InMemoryAccountRepo:
    def __init__(self) -> None:
        self._accounts: Dict[Tuple[Tenant, str], AccountRow] = {}
        self._requests: Dict[RequestTable, List[RequestRecord]] = {}
        self._next_id = 1

    def add_account(
        self,
        tenant: Union[str, Tenant],
        email: str,
        *,
        password_hash: str,
        salt: str,
        account_id: Optional[int] = None,
        verification_code: Optional[str] = None,
    ) -> AccountRow:
        """Seed an account (registration is not part of this repository)."""
        key = (parse_tenant(tenant), email)
        if key in self._accounts:
            raise ValueError(f"account already exists: {email}")
        if account_id is None:
            account_id = self._next_id
        self._next_id = max(self._next_id, account_id) + 1
        row = AccountRow(
            id=account_id,
            email=email,
            password_hash=password_hash,
            salt=salt,
            verification_code=verification_code,
        )
        self._accounts[key] = row
        return replace(row)

    def requests(self, table: Union[str, RequestTable]) -> List[RequestRecord]:
        return list(self._requests.get(parse_request_table(table), []))

    def _row(self, email: str, tenant: Union[str, Tenant]) -> Optional[AccountRow]:
        return self._accounts.get((parse_tenant(tenant), email))

    def email_exists(self, email: str, tenant: Union[str, Tenant]) -> bool:
        return self._row(email, tenant) is not None

    def find_credential(self, email: str, tenant: Union[str, Tenant]) -> Optional[CredentialRecord]:
        row = self._row(email, tenant)
        if row is None:
            return None
        return CredentialRecord(password_hash=row.password_hash, salt=row.salt)

    def get_salt(self, email: str, tenant: Union[str, Tenant]) -> Optional[str]:
        row = self._row(email, tenant)
        return row.salt if row else None

    def get_verification_code(self, email: str, tenant: Union[str, Tenant]) -> Optional[str]:
        row = self._row(email, tenant)
        return row.verification_code if row else None

    def find_id(self, email: str, tenant: Union[str, Tenant]) -> Optional[int]:
        row = self._row(email, tenant)
        return row.id if row else None

    def set_verification_code(self, email: str, code: str, tenant: Union[str, Tenant]) -> bool:
        row = self._row(email, tenant)
        if row is None:
            return False
        row.verification_code = code
        return True

    def update_salt(self, email: str, salt: str, tenant: Union[str, Tenant]) -> bool:
        row = self._row(email, tenant)
        if row is None:
            return False
        row.salt = salt
        return True

    def update_password(self, email: str, password_hash: str, salt: str, tenant: Union[str, Tenant]) -> bool:
        row = self._row(email, tenant)
        if row is None:
            return False
        row.password_hash = password_hash
        row.salt = salt
        return True

    def insert_request(self, table: Union[str, RequestTable], request: RequestRecord) -> bool:
        self._requests.setdefault(parse_request_table(table), []).append(request)
        return True


__all__ = ["InMemoryAccountRepo", "AccountRow"]
