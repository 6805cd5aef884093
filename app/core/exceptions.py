"""
Auth error taxonomy.

Errors that reach the HTTP boundary subclass AuthError and carry their
status code and public message. Nonce and signature internals are plain
exceptions the login flow collapses into InvalidCredentials.
"""
from __future__ import annotations

from typing import Any, Optional


class AuthError(Exception):
    status_code: int = 400
    message: str = "Authentication failed"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.message)
        if message:
            self.message = message

    def extra(self) -> dict[str, Any]:
        """Additional fields rendered next to the detail message."""
        return {}


class InvalidWalletFormat(AuthError):
    status_code = 400
    message = "Invalid wallet address format"


class RateLimitExceeded(AuthError):
    status_code = 429
    message = "Too many login attempts. Please try again later."

    def __init__(self, retry_after: int):
        super().__init__()
        self.retry_after = retry_after

    def extra(self) -> dict[str, Any]:
        return {"retry_after_seconds": self.retry_after}


class InvalidCredentials(AuthError):
    status_code = 401
    message = "Invalid signature or nonce"

    def __init__(self, remaining_attempts: Optional[int] = None):
        super().__init__()
        self.remaining_attempts = remaining_attempts

    def extra(self) -> dict[str, Any]:
        if self.remaining_attempts is None:
            return {}
        return {"remaining_attempts": self.remaining_attempts}


class PrincipalNotFound(AuthError):
    status_code = 401
    message = "Account not found for this wallet address"

    def __init__(self, message: Optional[str] = None, remaining_attempts: Optional[int] = None):
        super().__init__(message)
        self.remaining_attempts = remaining_attempts

    def extra(self) -> dict[str, Any]:
        if self.remaining_attempts is None:
            return {}
        return {"remaining_attempts": self.remaining_attempts}


class AccountNotApproved(AuthError):
    status_code = 403
    message = "Farmer account is not approved"

    def __init__(self, current_status: str):
        super().__init__()
        self.current_status = current_status

    def extra(self) -> dict[str, Any]:
        return {"current_status": self.current_status}


class AccountInactive(AuthError):
    status_code = 401
    message = "Account is inactive. Please contact support."


class StoreUnavailable(AuthError):
    status_code = 500
    message = "Internal server error"


class TokenExpired(AuthError):
    status_code = 401
    message = "Token has expired"


class TokenInvalid(AuthError):
    status_code = 401
    message = "Invalid token"


# Internal failures, never rendered directly.

class NonceNotFound(Exception):
    """Nonce absent, expired or already consumed."""


class NonceMismatch(Exception):
    """Stored nonce differs from the supplied one."""


class InvalidSignature(Exception):
    """Signature is not 65 bytes or public key recovery failed."""


class SignatureMismatch(Exception):
    """Signature recovers to a different address."""
