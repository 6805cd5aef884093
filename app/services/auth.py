"""
Wallet Login Service
Nonce issue and signature login for investors, farmers and admins.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from app.core.exceptions import (
    AccountInactive,
    AccountNotApproved,
    InvalidCredentials,
    InvalidSignature,
    InvalidWalletFormat,
    NonceMismatch,
    NonceNotFound,
    PrincipalNotFound,
    RateLimitExceeded,
    SignatureMismatch,
    StoreUnavailable,
)
from app.core.security import SessionIssuer
from app.models.farmer import FarmerStatus
from app.services.messages import Role, build_sign_message
from app.services.nonce_store import NonceStore
from app.services.principals import Principal, PrincipalRepository
from app.services.rate_limiter import RateLimiter
from app.services.signature import SignatureVerifier, normalize_wallet_address, to_checksum_address

logger = logging.getLogger(__name__)

PRINCIPAL_NOT_FOUND_MESSAGES = {
    Role.FARMER: "Farmer account not found. Please register first.",
    Role.ADMIN: "Admin account not found for this wallet address",
}


@dataclass
class NonceChallenge:
    nonce: str
    message: str
    wallet_address: str
    expires_in: int
    typed_data: dict[str, Any] = field(default_factory=dict)


@dataclass
class LoginResult:
    token: str
    role: Role
    principal: Principal


class WalletAuthService:
    """
    Runs a wallet login through its stages:
    rate limit -> nonce -> signature -> principal lookup -> status -> token.

    Nonce and signature failures all surface as InvalidCredentials so callers
    cannot tell which stage rejected the attempt.
    """

    def __init__(
        self,
        nonce_store: NonceStore,
        verifier: SignatureVerifier,
        rate_limiters: Mapping[Role, RateLimiter],
        session_issuer: SessionIssuer,
        repositories: Mapping[Role, PrincipalRepository],
        product: Optional[str] = None,
    ):
        self.nonce_store = nonce_store
        self.verifier = verifier
        self.rate_limiters = rate_limiters
        self.session_issuer = session_issuer
        self.repositories = repositories
        self.product = product

    def request_nonce(self, role: Role, wallet_address: str) -> NonceChallenge:
        role = Role(role)
        address = normalize_wallet_address(wallet_address)

        nonce = self.nonce_store.issue(role, address)
        message = build_sign_message(role, nonce, self.product)
        logger.info("Issued %s login nonce for %s", role.value, address)

        return NonceChallenge(
            nonce=nonce,
            message=message,
            wallet_address=to_checksum_address(address),
            expires_in=self.nonce_store.ttl_seconds,
            typed_data=self.verifier.typed_data(message),
        )

    def login(self, role: Role, wallet_address: str, signature: str, nonce: str) -> LoginResult:
        """
        Authenticate a wallet for a role and mint its session token.

        Raises:
            InvalidWalletFormat: Malformed wallet address (not counted as an attempt)
            RateLimitExceeded: Too many attempts for this wallet in the window
            InvalidCredentials: Bad/expired nonce or signature
            PrincipalNotFound: No farmer/admin record for the wallet
            AccountNotApproved: Farmer not approved
            AccountInactive: Admin deactivated
            StoreUnavailable: Redis failure before authentication completed
        """
        role = Role(role)
        address = normalize_wallet_address(wallet_address)
        rate_limiter = self.rate_limiters[role]

        limit = rate_limiter.check(address)
        if not limit.allowed:
            logger.warning("%s login rate limited for %s, retry after %ss", role.value, address, limit.retry_after)
            raise RateLimitExceeded(limit.retry_after)

        try:
            self.nonce_store.validate_and_consume(role, address, nonce)
        except (NonceNotFound, NonceMismatch) as exc:
            logger.warning("%s login rejected for %s: %s", role.value, address, type(exc).__name__)
            raise InvalidCredentials(remaining_attempts=limit.remaining) from exc

        message = build_sign_message(role, nonce, self.product)
        try:
            self.verifier.verify(address, signature, message)
        except (InvalidWalletFormat, InvalidSignature, SignatureMismatch) as exc:
            logger.warning("%s login rejected for %s: %s", role.value, address, type(exc).__name__)
            raise InvalidCredentials(remaining_attempts=limit.remaining) from exc

        principal = self._find_principal(role, address, limit.remaining)
        self._check_status(role, principal)

        self._reset_rate_limit(rate_limiter, address)
        self._update_last_login(role, principal)

        admin_role = principal.role if role is Role.ADMIN else None
        token = self.session_issuer.mint(principal.id, address, role, admin_role=admin_role)
        logger.info("%s %s logged in with %s", role.value, principal.id, address)

        return LoginResult(token=token, role=role, principal=principal)

    def _find_principal(self, role: Role, address: str, remaining: int) -> Principal:
        repository = self.repositories[role]
        principal = repository.find_by_wallet_address(address)
        if principal is not None:
            return principal

        if role is not Role.INVESTOR:
            logger.warning("%s login for unknown wallet %s", role.value, address)
            raise PrincipalNotFound(PRINCIPAL_NOT_FOUND_MESSAGES[role], remaining_attempts=remaining)

        try:
            principal = repository.create(address)
        except IntegrityError:
            # another login for the same wallet created it first
            principal = repository.find_by_wallet_address(address)
            if principal is None:
                raise
        else:
            logger.info("Provisioned investor %s for %s", principal.id, address)
        return principal

    def _check_status(self, role: Role, principal: Principal) -> None:
        if role is Role.FARMER and principal.status != FarmerStatus.APPROVED.value:
            logger.warning("Farmer %s login refused, status %s", principal.id, principal.status)
            raise AccountNotApproved(principal.status)

        if role is Role.ADMIN and not principal.is_active:
            logger.warning("Admin %s login refused, account inactive", principal.id)
            raise AccountInactive()

    def _reset_rate_limit(self, rate_limiter: RateLimiter, address: str) -> None:
        try:
            rate_limiter.reset(address)
        except StoreUnavailable:
            logger.warning("Failed to reset login rate limit for %s", address, exc_info=True)

    def _update_last_login(self, role: Role, principal: Principal) -> None:
        try:
            self.repositories[role].update_last_login(principal.id)
        except SQLAlchemyError:
            logger.warning("Failed to update last login for %s %s", role.value, principal.id, exc_info=True)
