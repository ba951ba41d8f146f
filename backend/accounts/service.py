"""Account flows: authentication, verification codes, password reset.

Why:
    Keep credential logic (salted hashing, code checks, failure collapsing) in
    one framework-free layer. Repositories only move rows; the web adapter only
    maps results to HTTP.

Failure policy:
    - Unknown email and wrong password look identical from the outside
      (`False` or `AuthenticationFailed`). The reason is kept in
      `CredentialCheck` for internal branching and logs.
    - Store connectivity errors (`StoreUnavailable`) propagate unchanged. No
      operation is retried.
"""

from __future__ import annotations

import hmac
import logging
import secrets
from typing import Optional, Protocol, Union

from .domain import (
    CredentialRecord,
    RequestRecord,
    RequestTable,
    Tenant,
    email_tail,
    parse_request_table,
    parse_tenant,
)
from .errors import (
    AccountNotFound,
    AuthenticationFailed,
    CredentialCheck,
    FailureReason,
    InvalidVerificationCode,
)
from .hashing import digests_match, generate_salt, hash_password, verify_password

logger = logging.getLogger("studentdesk.accounts")

VERIFICATION_CODE_DIGITS = 6


class AccountRepoProtocol(Protocol):
    def email_exists(self, email: str, tenant: Tenant) -> bool:
        ...

    def find_credential(self, email: str, tenant: Tenant) -> Optional[CredentialRecord]:
        ...

    def get_salt(self, email: str, tenant: Tenant) -> Optional[str]:
        ...

    def get_verification_code(self, email: str, tenant: Tenant) -> Optional[str]:
        ...

    def find_id(self, email: str, tenant: Tenant) -> Optional[int]:
        ...

    def set_verification_code(self, email: str, code: str, tenant: Tenant) -> bool:
        ...

    def update_salt(self, email: str, salt: str, tenant: Tenant) -> bool:
        ...

    def update_password(self, email: str, password_hash: str, salt: str, tenant: Tenant) -> bool:
        ...

    def insert_request(self, table: RequestTable, request: RequestRecord) -> bool:
        ...


def generate_verification_code(digits: int = VERIFICATION_CODE_DIGITS) -> str:
    """Return a zero-padded numeric code drawn from `secrets`."""
    return str(secrets.randbelow(10**digits)).zfill(digits)


class AccountService:
    def __init__(self, repo: AccountRepoProtocol) -> None:
        self._repo = repo

    @property
    def repo(self) -> AccountRepoProtocol:
        return self._repo

    # --- authentication -------------------------------------------------------

    def check_credentials(self, email: str, plaintext: str, tenant: Union[str, Tenant]) -> CredentialCheck:
        """Look up the credential and verify the salted hash.

        Returns a `CredentialCheck` whose `reason` tells NOT_FOUND apart from
        INVALID_CREDENTIAL. Do not surface the reason to end users.
        """
        t = parse_tenant(tenant)
        cred = self._repo.find_credential(email, t)
        if cred is None:
            return CredentialCheck.failure(FailureReason.NOT_FOUND)
        if not verify_password(plaintext, cred.salt, cred.password_hash):
            return CredentialCheck.failure(FailureReason.INVALID_CREDENTIAL)
        return CredentialCheck.success()

    def authenticate(self, email: str, plaintext: str, tenant: Union[str, Tenant]) -> bool:
        result = self.check_credentials(email, plaintext, tenant)
        if not result.ok:
            logger.info(
                "authentication failed tenant=%s email_tail=%s reason=%s",
                parse_tenant(tenant).value,
                email_tail(email),
                result.reason.value,
            )
        return result.ok

    def authenticate_or_raise(self, email: str, plaintext: str, tenant: Union[str, Tenant]) -> None:
        """Raise `AuthenticationFailed` unless the credentials are valid."""
        if not self.authenticate(email, plaintext, tenant):
            raise AuthenticationFailed("invalid credentials")

    def compare_password_hash(self, email: str, password_hash: str, tenant: Union[str, Tenant]) -> bool:
        """Compare an already-hashed password against the stored hash."""
        cred = self._repo.find_credential(email, parse_tenant(tenant))
        if cred is None:
            return False
        return digests_match(password_hash or "", cred.password_hash)

    # --- account utilities ----------------------------------------------------

    def check_email_exists(self, email: str, tenant: Union[str, Tenant]) -> bool:
        return self._repo.email_exists(email, parse_tenant(tenant))

    def retrieve_salt(self, email: str, tenant: Union[str, Tenant]) -> Optional[str]:
        return self._repo.get_salt(email, parse_tenant(tenant))

    def update_salt(self, email: str, salt: str, tenant: Union[str, Tenant]) -> bool:
        return self._repo.update_salt(email, salt, parse_tenant(tenant))

    def get_id_via_email(self, email: str, tenant: Union[str, Tenant]) -> int:
        account_id = self._repo.find_id(email, parse_tenant(tenant))
        if account_id is None:
            raise AccountNotFound(f"no account for email in {parse_tenant(tenant).value}")
        return account_id

    def add_request(self, table: Union[str, RequestTable], request: RequestRecord) -> bool:
        t = parse_request_table(table)
        created = self._repo.insert_request(t, request)
        if created:
            logger.info("request stored table=%s type=%s email_tail=%s", t.value, request.request_type, email_tail(request.email))
        return created

    # --- verification codes ---------------------------------------------------

    def update_verification_code(self, email: str, code: str, tenant: Union[str, Tenant]) -> bool:
        """Overwrite the stored code. Returns False when the email is unknown."""
        return self._repo.set_verification_code(email, code, parse_tenant(tenant))

    def verify_verification_code(self, email: str, code: str, tenant: Union[str, Tenant]) -> bool:
        """True iff a non-empty stored code equals `code`. Empty never matches."""
        stored = self._repo.get_verification_code(email, parse_tenant(tenant))
        if not stored or not code:
            return False
        return hmac.compare_digest(stored.encode("utf-8"), str(code).encode("utf-8"))

    def issue_verification_code(self, email: str, tenant: Union[str, Tenant]) -> Optional[str]:
        """Generate, store and return a fresh code; None if the email is unknown.

        Delivering the code (email) is the caller's job.
        """
        t = parse_tenant(tenant)
        code = generate_verification_code()
        if not self._repo.set_verification_code(email, code, t):
            logger.info("verification code not issued tenant=%s email_tail=%s", t.value, email_tail(email))
            return None
        logger.info("verification code issued tenant=%s email_tail=%s", t.value, email_tail(email))
        return code

    # --- password reset -------------------------------------------------------

    def _reset(self, email: str, new_plaintext: str, tenant: Tenant) -> bool:
        salt = generate_salt()
        updated = self._repo.update_password(email, hash_password(new_plaintext, salt), salt, tenant)
        if updated:
            logger.info("password reset tenant=%s email_tail=%s", tenant.value, email_tail(email))
        else:
            logger.warning("password reset updated no record tenant=%s email_tail=%s", tenant.value, email_tail(email))
        return updated

    def _reject_reset(self, email: str, tenant: Tenant) -> None:
        logger.warning("password reset rejected tenant=%s email_tail=%s reason=invalid_code", tenant.value, email_tail(email))

    def update_password_via_email(self, email: str, new_plaintext: str, code: str, tenant: Union[str, Tenant]) -> bool:
        """Set a new password after checking the verification code.

        Behavior:
            - Invalid code: returns False and leaves the stored hash untouched.
            - Valid code: fresh salt, new hash, one UPDATE for both columns.
            - True only if exactly one record was updated.
        """
        t = parse_tenant(tenant)
        if not self.verify_verification_code(email, code, t):
            self._reject_reset(email, t)
            return False
        return self._reset(email, new_plaintext, t)

    def reset_password_or_raise(self, email: str, new_plaintext: str, code: str, tenant: Union[str, Tenant]) -> None:
        """Like `update_password_via_email` but raises on a bad code or missing record."""
        t = parse_tenant(tenant)
        if not self.verify_verification_code(email, code, t):
            self._reject_reset(email, t)
            raise InvalidVerificationCode("verification code does not match")
        if not self._reset(email, new_plaintext, t):
            raise AccountNotFound(f"no account for email in {t.value}")


__all__ = [
    "AccountRepoProtocol",
    "AccountService",
    "generate_verification_code",
    "VERIFICATION_CODE_DIGITS",
]
