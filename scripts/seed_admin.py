import argparse
import sys

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.exceptions import InvalidWalletFormat
from app.db.session import SessionLocal
from app.models.admin_user import AdminUser
from app.services.signature import normalize_wallet_address


def seed_admin(db: Session, wallet_address: str, role: str = "admin") -> AdminUser:
    """
    Create an active admin for a wallet address.

    Raises:
        InvalidWalletFormat: If the address is not 0x + 40 hex characters
        ValueError: If an admin already exists for the wallet
    """
    address = normalize_wallet_address(wallet_address)

    existing = db.scalar(select(AdminUser).where(AdminUser.wallet_address == address))
    if existing:
        raise ValueError("Admin with this wallet address already exists")

    admin = AdminUser(wallet_address=address, role=role or "admin", is_active=True)
    db.add(admin)
    db.commit()
    db.refresh(admin)
    return admin


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Create an admin user for wallet login")
    parser.add_argument("--wallet", required=True, help="admin wallet address (0x...)")
    parser.add_argument("--role", default="admin", help="admin role (default: admin)")
    args = parser.parse_args(argv)

    db: Session = SessionLocal()
    try:
        admin = seed_admin(db, args.wallet.strip(), args.role.strip())
    except InvalidWalletFormat:
        print("Invalid wallet address format. Must be 0x followed by 40 hex characters.", file=sys.stderr)
        return 2
    except ValueError as e:
        print(str(e), file=sys.stderr)
        return 1
    finally:
        db.close()

    print("Admin user created")
    print(f"   ID:             {admin.id}")
    print(f"   Wallet Address: {admin.wallet_address}")
    print(f"   Role:           {admin.role}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
