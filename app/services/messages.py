# app/services/messages.py
from __future__ import annotations

from enum import Enum

from app.core.config import settings


class Role(str, Enum):
    INVESTOR = "investor"
    FARMER = "farmer"
    ADMIN = "admin"


# Each role signs different text, so a signature collected for one login
# prompt never verifies against another role's prompt.
SIGN_MESSAGE_TEMPLATES = {
    Role.INVESTOR: "Sign this message to login to {product}.\n\nNonce: {nonce}",
    Role.FARMER: "Sign this message to login to {product} as Farmer.\n\nNonce: {nonce}",
    Role.ADMIN: "Sign this message to login to {product} Admin.\n\nNonce: {nonce}",
}


def build_sign_message(role: Role, nonce: str, product: str | None = None) -> str:
    template = SIGN_MESSAGE_TEMPLATES[Role(role)]
    return template.format(product=product or settings.app_name, nonce=nonce)
