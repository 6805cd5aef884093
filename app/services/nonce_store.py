# app/services/nonce_store.py
from __future__ import annotations

import logging
import secrets

import redis

from app.core.exceptions import NonceMismatch, NonceNotFound, StoreUnavailable
from app.services.messages import Role

logger = logging.getLogger(__name__)

NONCE_BYTES = 16

# Investor keys keep the bare "nonce:" prefix; other roles get their own namespace.
NONCE_KEY_PREFIXES = {
    Role.INVESTOR: "",
    Role.FARMER: "farmer_",
    Role.ADMIN: "admin_",
}


def nonce_key(role: Role, wallet_address: str) -> str:
    return f"{NONCE_KEY_PREFIXES[Role(role)]}nonce:{wallet_address.lower()}"


def generate_nonce() -> str:
    return secrets.token_bytes(NONCE_BYTES).hex()


class NonceStore:
    """One-time login nonces in Redis, keyed by role and wallet address."""

    def __init__(self, client: redis.Redis, ttl_seconds: int):
        self.client = client
        self.ttl_seconds = ttl_seconds

    def issue(self, role: Role, wallet_address: str) -> str:
        nonce = generate_nonce()
        key = nonce_key(role, wallet_address)
        try:
            # overwrites any nonce still pending for this wallet
            self.client.set(key, nonce, ex=self.ttl_seconds)
        except redis.RedisError as exc:
            logger.error("Failed to store %s nonce for %s", Role(role).value, wallet_address.lower(), exc_info=True)
            raise StoreUnavailable() from exc
        return nonce

    def validate_and_consume(self, role: Role, wallet_address: str, supplied_nonce: str) -> None:
        key = nonce_key(role, wallet_address)
        try:
            stored = self.client.get(key)
            if stored is None:
                raise NonceNotFound()
            if isinstance(stored, bytes):
                stored = stored.decode()
            if stored != supplied_nonce:
                raise NonceMismatch()
            # zero deleted keys means a concurrent login consumed it first
            if not self.client.delete(key):
                raise NonceNotFound()
        except redis.RedisError as exc:
            logger.error("Failed to validate %s nonce for %s", Role(role).value, wallet_address.lower(), exc_info=True)
            raise StoreUnavailable() from exc
