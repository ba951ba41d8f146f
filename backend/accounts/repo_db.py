"""
Postgres-backed account repository (the StudentDesk DAO).

Security:
- Tenant tables are composed with `psycopg.sql.Identifier` from the closed
  `Tenant`/`RequestTable` enums. Values are always bound parameters.
- This module never sees plaintext passwords; callers pass hashes and salts.

Design:
- Minimal psycopg3 usage. `open()`/`close()` (or `with repo:`) hold one
  connection for a unit of work; outside of that each call opens a
  short-lived connection which is released on exit.
- Connections run in autocommit mode; every statement stands on its own.
"""
from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, Optional, Union

import psycopg
from psycopg import sql

from .domain import (
    CredentialRecord,
    RequestRecord,
    RequestTable,
    Tenant,
    parse_request_table,
    parse_tenant,
)
from .errors import StoreUnavailable


class DBAccountRepo:
    """Account queries against one tenant table per call.

    Parameters
    ----------
    dsn:
        Psycopg3 connection string. Required; resolve it with
        `backend.accounts.config.load_db_config()`.
    connect_timeout:
        Seconds to wait for the server before giving up.
    """

    def __init__(self, dsn: str, *, connect_timeout: int = 30) -> None:
        if not dsn:
            raise RuntimeError("No database DSN provided for DBAccountRepo")
        self._dsn = dsn
        self._connect_timeout = connect_timeout
        self._conn = None

    # --- connection lifecycle -------------------------------------------------

    def _connect(self):
        try:
            return psycopg.connect(self._dsn, autocommit=True, connect_timeout=self._connect_timeout)
        except psycopg.OperationalError as exc:
            raise StoreUnavailable("account store unreachable") from exc

    def open(self) -> "DBAccountRepo":
        if self._conn is None:
            self._conn = self._connect()
        return self

    def close(self) -> None:
        conn, self._conn = self._conn, None
        if conn is not None:
            conn.close()

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    def __enter__(self) -> "DBAccountRepo":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.close()
        return False

    @contextmanager
    def _cursor(self) -> Iterator:
        """Cursor on the held connection, or on a short-lived one.

        A connection that breaks mid-call is dropped (the repo is no longer
        open) and the failure surfaces as `StoreUnavailable`.
        """
        try:
            if self._conn is not None:
                with self._conn.cursor() as cur:
                    yield cur
                return
            with self._connect() as conn:
                with conn.cursor() as cur:
                    yield cur
        except psycopg.OperationalError as exc:
            self.close()
            raise StoreUnavailable("account store connection lost") from exc

    @staticmethod
    def _stmt(template: str, table: str):
        return sql.SQL(template).format(sql.Identifier(table))

    # --- lookups --------------------------------------------------------------

    def email_exists(self, email: str, tenant: Union[str, Tenant]) -> bool:
        table = parse_tenant(tenant).value
        with self._cursor() as cur:
            cur.execute(self._stmt("select 1 from {} where email = %s", table), (email,))
            return cur.fetchone() is not None

    def find_credential(self, email: str, tenant: Union[str, Tenant]) -> Optional[CredentialRecord]:
        """Return the stored hash and salt, or None when the email is unknown."""
        table = parse_tenant(tenant).value
        with self._cursor() as cur:
            cur.execute(self._stmt("select password_hash, salt from {} where email = %s", table), (email,))
            row = cur.fetchone()
        if not row:
            return None
        return CredentialRecord(password_hash=row[0] or "", salt=row[1] or "")

    def get_salt(self, email: str, tenant: Union[str, Tenant]) -> Optional[str]:
        table = parse_tenant(tenant).value
        with self._cursor() as cur:
            cur.execute(self._stmt("select salt from {} where email = %s", table), (email,))
            row = cur.fetchone()
        return row[0] if row else None

    def get_verification_code(self, email: str, tenant: Union[str, Tenant]) -> Optional[str]:
        table = parse_tenant(tenant).value
        with self._cursor() as cur:
            cur.execute(self._stmt("select verification_code from {} where email = %s", table), (email,))
            row = cur.fetchone()
        if not row or row[0] is None:
            return None
        return str(row[0])

    def find_id(self, email: str, tenant: Union[str, Tenant]) -> Optional[int]:
        table = parse_tenant(tenant).value
        with self._cursor() as cur:
            cur.execute(self._stmt("select id from {} where email = %s", table), (email,))
            row = cur.fetchone()
        return int(row[0]) if row else None

    # --- writes ---------------------------------------------------------------

    def set_verification_code(self, email: str, code: str, tenant: Union[str, Tenant]) -> bool:
        table = parse_tenant(tenant).value
        with self._cursor() as cur:
            cur.execute(
                self._stmt("update {} set verification_code = %s where email = %s", table),
                (code, email),
            )
            return cur.rowcount == 1

    def update_salt(self, email: str, salt: str, tenant: Union[str, Tenant]) -> bool:
        table = parse_tenant(tenant).value
        with self._cursor() as cur:
            cur.execute(self._stmt("update {} set salt = %s where email = %s", table), (salt, email))
            return cur.rowcount == 1

    def update_password(self, email: str, password_hash: str, salt: str, tenant: Union[str, Tenant]) -> bool:
        """Replace hash and salt in a single statement. True iff one row changed."""
        table = parse_tenant(tenant).value
        with self._cursor() as cur:
            cur.execute(
                self._stmt("update {} set password_hash = %s, salt = %s where email = %s", table),
                (password_hash, salt, email),
            )
            return cur.rowcount == 1

    def insert_request(self, table: Union[str, RequestTable], request: RequestRecord) -> bool:
        name = parse_request_table(table).value
        with self._cursor() as cur:
            cur.execute(
                self._stmt(
                    "insert into {} (email, request_type, request_subtype, body) values (%s, %s, %s, %s)",
                    name,
                ),
                (request.email, request.request_type, request.request_subtype, request.body),
            )
            return cur.rowcount == 1


__all__ = ["DBAccountRepo"]
