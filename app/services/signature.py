# app/services/signature.py
from __future__ import annotations

import logging
import re
from typing import Any

from eth_keys import keys
from eth_keys.exceptions import BadSignature, ValidationError as KeyValidationError
from eth_utils import ValidationError, decode_hex, keccak
from web3 import Web3

from app.core.config import Settings, settings as default_settings
from app.core.exceptions import InvalidSignature, InvalidWalletFormat, SignatureMismatch

logger = logging.getLogger(__name__)

WALLET_ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")

SIGNATURE_LENGTH = 65

# EIP-712 login payload:
#   domain  EIP712Domain(string name,string version,uint256 chainId)
#   primary Login(string message)
# digest = keccak256(0x19 0x01 || domainSeparator || hashStruct(Login))
EIP712_DOMAIN_TYPE = "EIP712Domain(string name,string version,uint256 chainId)"
LOGIN_TYPE = "Login(string message)"
LOGIN_PRIMARY_TYPE = "Login"

EIP712_DOMAIN_FIELDS = [
    {"name": "name", "type": "string"},
    {"name": "version", "type": "string"},
    {"name": "chainId", "type": "uint256"},
]
LOGIN_FIELDS = [
    {"name": "message", "type": "string"},
]


def is_valid_wallet_address(wallet_address: Any) -> bool:
    return isinstance(wallet_address, str) and bool(WALLET_ADDRESS_RE.match(wallet_address))


def normalize_wallet_address(wallet_address: str) -> str:
    """Canonical storage/comparison form: lowercase hex with 0x prefix."""
    if not is_valid_wallet_address(wallet_address):
        raise InvalidWalletFormat()
    return wallet_address.lower()


def to_checksum_address(wallet_address: str) -> str:
    """EIP-55 mixed-case form, for display only."""
    return Web3.to_checksum_address(normalize_wallet_address(wallet_address))


def _uint256(value: int) -> bytes:
    return value.to_bytes(32, "big")


class SignatureVerifier:
    """Verifies EIP-712 `Login` signatures against a fixed signing domain."""

    def __init__(self, name: str, version: str, chain_id: int):
        self.name = name
        self.version = version
        self.chain_id = int(chain_id)

    @classmethod
    def from_settings(cls, settings: Settings = default_settings) -> "SignatureVerifier":
        return cls(settings.eip712_name, settings.eip712_version, settings.eip712_chain_id)

    def domain_separator(self) -> bytes:
        return keccak(
            keccak(text=EIP712_DOMAIN_TYPE)
            + keccak(text=self.name)
            + keccak(text=self.version)
            + _uint256(self.chain_id)
        )

    def struct_hash(self, message: str) -> bytes:
        return keccak(keccak(text=LOGIN_TYPE) + keccak(text=message))

    def build_typed_data_hash(self, message: str) -> bytes:
        return keccak(b"\x19\x01" + self.domain_separator() + self.struct_hash(message))

    def typed_data(self, message: str) -> dict[str, Any]:
        """The eth_signTypedData_v4 payload a wallet signs for `message`."""
        return {
            "types": {
                "EIP712Domain": EIP712_DOMAIN_FIELDS,
                LOGIN_PRIMARY_TYPE: LOGIN_FIELDS,
            },
            "primaryType": LOGIN_PRIMARY_TYPE,
            "domain": {
                "name": self.name,
                "version": self.version,
                "chainId": self.chain_id,
            },
            "message": {"message": message},
        }

    def recover_address(self, message: str, signature: str) -> str:
        """Address (lowercase) whose key produced `signature` over `message`."""
        try:
            sig_bytes = bytearray(decode_hex(signature))
        except (ValueError, TypeError) as exc:
            raise InvalidSignature() from exc

        if len(sig_bytes) != SIGNATURE_LENGTH:
            raise InvalidSignature()

        # wallets emit v as 27/28, raw secp256k1 uses 0/1
        if sig_bytes[64] >= 27:
            sig_bytes[64] -= 27

        digest = self.build_typed_data_hash(message)
        try:
            public_key = keys.Signature(signature_bytes=bytes(sig_bytes)).recover_public_key_from_msg_hash(digest)
        except (BadSignature, KeyValidationError, ValidationError) as exc:
            raise InvalidSignature() from exc

        # address = rightmost 20 bytes of keccak256(uncompressed pubkey without prefix)
        return "0x" + keccak(public_key.to_bytes())[-20:].hex()

    def verify(self, wallet_address: str, signature: str, message: str) -> None:
        if not is_valid_wallet_address(wallet_address):
            raise InvalidWalletFormat()

        recovered = self.recover_address(message, signature)
        if recovered != wallet_address.lower():
            logger.debug("Signature recovered %s, expected %s", recovered, wallet_address.lower())
            raise SignatureMismatch()
