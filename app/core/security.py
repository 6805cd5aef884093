from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from pydantic import BaseModel, ValidationError

from app.core.config import Settings, settings as default_settings
from app.core.exceptions import TokenExpired, TokenInvalid
from app.services.messages import Role

# Only HMAC-SHA256 is accepted; anything else in the header is rejected.
SESSION_TOKEN_ALGORITHM = "HS256"
REQUIRED_CLAIMS = ["exp", "iat", "nbf", "sub", "iss"]


class SessionClaims(BaseModel):
    sub: str
    wallet_address: str
    role: Role
    admin_role: Optional[str] = None
    iss: str
    iat: int
    nbf: int
    exp: int

    @property
    def principal_id(self) -> str:
        return self.sub


class SessionIssuer:
    """Mints and parses stateless session tokens."""

    def __init__(
        self,
        secret: str,
        expiration_hours: int = 24,
        issuer: str = "ownafarm",
        admin_issuer: str = "ownafarm-admin",
        algorithm: str = SESSION_TOKEN_ALGORITHM,
    ):
        if not secret:
            raise ValueError("Session token secret must not be empty")
        if algorithm != SESSION_TOKEN_ALGORITHM:
            raise ValueError(f"Unsupported session token algorithm: {algorithm}")
        self.secret = secret
        self.lifetime = timedelta(hours=expiration_hours)
        self.issuer = issuer
        self.admin_issuer = admin_issuer
        self.algorithm = algorithm

    @classmethod
    def from_settings(cls, settings: Settings = default_settings) -> "SessionIssuer":
        return cls(
            secret=settings.jwt_secret,
            expiration_hours=settings.jwt_expiration_hours,
            issuer=settings.jwt_issuer,
            admin_issuer=settings.jwt_admin_issuer,
            algorithm=settings.jwt_alg,
        )

    def issuer_for(self, role: Role) -> str:
        return self.admin_issuer if Role(role) is Role.ADMIN else self.issuer

    def mint(
        self,
        principal_id: str,
        wallet_address: str,
        role: Role,
        admin_role: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> str:
        role = Role(role)
        now = now or datetime.now(timezone.utc)
        claims = {
            "sub": str(principal_id),
            "wallet_address": wallet_address,
            "role": role.value,
            "iss": self.issuer_for(role),
            "iat": now,
            "nbf": now,
            "exp": now + self.lifetime,
        }
        if role is Role.ADMIN:
            claims["admin_role"] = admin_role
        return jwt.encode(claims, self.secret, algorithm=self.algorithm)

    def parse(self, token: str, role: Role) -> SessionClaims:
        role = Role(role)
        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                issuer=self.issuer_for(role),
                options={"require": REQUIRED_CLAIMS},
            )
        except jwt.ExpiredSignatureError as exc:
            raise TokenExpired() from exc
        except jwt.InvalidTokenError as exc:
            raise TokenInvalid() from exc

        try:
            claims = SessionClaims(**payload)
        except ValidationError as exc:
            raise TokenInvalid() from exc

        # a farmer token must not open investor routes and vice versa
        if claims.role is not role:
            raise TokenInvalid()
        return claims
