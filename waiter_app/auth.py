"""Admin authorization for edit mode and ledger maintenance."""

from __future__ import annotations

import hashlib
import hmac
import os
from typing import Protocol

from waiter_app.config import ADMIN_PASSWORD_SHA256_ENV


class Authorization(Protocol):
    def check_admin_password(self) -> bool: ...


def hash_password(password: str) -> str:
    return hashlib.sha256(password.encode("utf-8")).hexdigest()


class PasswordAuthorization:
    """Check a typed password against the configured SHA-256 digest."""

    def __init__(self, candidate: str, expected_digest: str | None = None) -> None:
        self.candidate = candidate
        if expected_digest is None:
            expected_digest = os.environ.get(ADMIN_PASSWORD_SHA256_ENV, "")
        self.expected_digest = expected_digest.strip().lower()

    def check_admin_password(self) -> bool:
        if not self.expected_digest:
            return False
        return hmac.compare_digest(hash_password(self.candidate), self.expected_digest)
