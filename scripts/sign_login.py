# scripts/sign_login.py
# Dev helper: sign a wallet login message the way a browser wallet would
# (eth_signTypedData_v4 over the configured EIP-712 domain).
import argparse
import json

from eth_account import Account
from eth_account.messages import encode_typed_data

from app.services.messages import Role, build_sign_message
from app.services.signature import SignatureVerifier


def sign_login_message(private_key: str, message: str, verifier: SignatureVerifier) -> str:
    signable = encode_typed_data(full_message=verifier.typed_data(message))
    signed = Account.sign_message(signable, private_key=private_key)
    return "0x" + bytes(signed.signature).hex()


def main() -> None:
    ap = argparse.ArgumentParser(description="Sign a wallet login message for a nonce")
    ap.add_argument("--pk", required=True, help="0x + 64 hex private key")
    ap.add_argument("--nonce", required=True, help="nonce returned by the /nonce endpoint")
    ap.add_argument("--role", default=Role.INVESTOR.value, choices=[r.value for r in Role])
    args = ap.parse_args()

    account = Account.from_key(args.pk)
    message = build_sign_message(Role(args.role), args.nonce)
    signature = sign_login_message(args.pk, message, SignatureVerifier.from_settings())

    print(json.dumps({
        "wallet_address": account.address,
        "signature": signature,
        "nonce": args.nonce,
    }, indent=2))


if __name__ == "__main__":
    main()
