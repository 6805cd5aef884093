from __future__ import annotations

from typing import Optional

import redis
from fastapi import Depends, Header
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import TokenInvalid
from app.core.redis import get_redis
from app.core.security import SessionClaims, SessionIssuer
from app.db.session import get_db
from app.models.admin_user import AdminUser
from app.models.farmer import Farmer
from app.models.investor import Investor
from app.services.auth import WalletAuthService
from app.services.messages import Role
from app.services.nonce_store import NonceStore
from app.services.principals import AdminUserRepository, FarmerRepository, InvestorRepository
from app.services.rate_limiter import RateLimiter
from app.services.signature import SignatureVerifier

__all__ = [
    "get_db",
    "get_redis",
    "get_session_issuer",
    "get_auth_service",
    "get_current_investor",
    "get_current_farmer",
    "get_current_admin",
]

BEARER_PREFIX = "Bearer "


def get_session_issuer() -> SessionIssuer:
    return SessionIssuer.from_settings(settings)


def get_auth_service(
    db: Session = Depends(get_db),
    client: redis.Redis = Depends(get_redis),
    session_issuer: SessionIssuer = Depends(get_session_issuer),
) -> WalletAuthService:
    window_seconds = settings.rate_limit_window_minutes * 60
    return WalletAuthService(
        nonce_store=NonceStore(client, ttl_seconds=settings.nonce_ttl_minutes * 60),
        verifier=SignatureVerifier.from_settings(settings),
        rate_limiters={
            role: RateLimiter(
                client,
                max_attempts=settings.rate_limit_max_attempts,
                window_seconds=window_seconds,
                scope=f"{role.value}_login",
            )
            for role in Role
        },
        session_issuer=session_issuer,
        repositories={
            Role.INVESTOR: InvestorRepository(db),
            Role.FARMER: FarmerRepository(db),
            Role.ADMIN: AdminUserRepository(db),
        },
        product=settings.app_name,
    )


def bearer_token(authorization: Optional[str]) -> str:
    if not authorization:
        raise TokenInvalid("Authorization header is required")
    if not authorization.startswith(BEARER_PREFIX):
        raise TokenInvalid("Invalid authorization header format")
    token = authorization[len(BEARER_PREFIX):].strip()
    if not token:
        raise TokenInvalid("Token is required")
    return token


def _claims_for(role: Role, authorization: Optional[str], session_issuer: SessionIssuer) -> SessionClaims:
    return session_issuer.parse(bearer_token(authorization), role)


def get_current_investor(
    authorization: Optional[str] = Header(default=None),
    db: Session = Depends(get_db),
    session_issuer: SessionIssuer = Depends(get_session_issuer),
) -> Investor:
    claims = _claims_for(Role.INVESTOR, authorization, session_issuer)
    investor = db.get(Investor, claims.principal_id)
    if investor is None:
        raise TokenInvalid()
    return investor


def get_current_farmer(
    authorization: Optional[str] = Header(default=None),
    db: Session = Depends(get_db),
    session_issuer: SessionIssuer = Depends(get_session_issuer),
) -> Farmer:
    claims = _claims_for(Role.FARMER, authorization, session_issuer)
    farmer = db.get(Farmer, claims.principal_id)
    if farmer is None:
        raise TokenInvalid()
    return farmer


def get_current_admin(
    authorization: Optional[str] = Header(default=None),
    db: Session = Depends(get_db),
    session_issuer: SessionIssuer = Depends(get_session_issuer),
) -> AdminUser:
    claims = _claims_for(Role.ADMIN, authorization, session_issuer)
    admin = db.get(AdminUser, claims.principal_id)
    if admin is None:
        raise TokenInvalid()
    return admin
