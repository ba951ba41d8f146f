"""
Salted password hashing.

Scheme (fixed, stored hashes depend on it):
    hex(SHA-256(utf8(password + salt))), lowercase, 64 characters.

Comparisons go through `hmac.compare_digest` so the time taken does not depend
on how many leading characters match.
"""
from __future__ import annotations

import hashlib
import hmac
import secrets
from typing import Optional

SALT_BYTES = 16
_HEX_DIGITS = frozenset("0123456789abcdef")


def hash_password(plaintext: str, salt: str) -> str:
    return hashlib.sha256((plaintext + salt).encode("utf-8")).hexdigest()


def _normalized_hex(digest: Optional[str]) -> Optional[str]:
    if not digest:
        return None
    digest = digest.strip().lower()
    if not digest or not set(digest) <= _HEX_DIGITS:
        return None
    return digest


def digests_match(computed: str, stored: Optional[str]) -> bool:
    """Constant-time equality of two hex digests.

    Empty/None never matches, and neither does anything that is not hex.
    """
    a, b = _normalized_hex(computed), _normalized_hex(stored)
    if a is None or b is None:
        return False
    return hmac.compare_digest(a.encode("ascii"), b.encode("ascii"))


def verify_password(plaintext: str, salt: str, stored_hash: Optional[str]) -> bool:
    return digests_match(hash_password(plaintext, salt or ""), stored_hash)


def generate_salt() -> str:
    return secrets.token_hex(SALT_BYTES)


__all__ = ["hash_password", "verify_password", "digests_match", "generate_salt", "SALT_BYTES"]
