"""
Principal Repositories
Wallet-address lookups over the investor, farmer and admin tables.
"""
from __future__ import annotations

from typing import Optional, Protocol, Union

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.db.base import utcnow
from app.models.admin_user import AdminUser
from app.models.farmer import Farmer
from app.models.investor import Investor

Principal = Union[Investor, Farmer, AdminUser]


class PrincipalRepository(Protocol):
    def find_by_wallet_address(self, wallet_address: str) -> Optional[Principal]: ...

    def update_last_login(self, principal_id: str) -> None: ...


class _SqlPrincipalRepository:
    model: type

    def __init__(self, db: Session):
        self.db = db

    def find_by_wallet_address(self, wallet_address: str):
        """
        Get a principal by wallet address.

        Args:
            wallet_address: Normalized (lowercase) wallet address

        Returns:
            The principal if found, None otherwise
        """
        stmt = select(self.model).where(self.model.wallet_address == wallet_address)
        return self.db.scalar(stmt)

    def update_last_login(self, principal_id: str) -> None:
        now = utcnow()
        stmt = (
            update(self.model)
            .where(self.model.id == principal_id)
            .values(last_login_at=now, updated_at=now)
        )
        try:
            self.db.execute(stmt)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise


class InvestorRepository(_SqlPrincipalRepository):
    model = Investor

    def create(self, wallet_address: str) -> Investor:
        """
        Create an investor for a wallet that has just proven ownership.

        Args:
            wallet_address: Normalized (lowercase) wallet address

        Returns:
            Created Investor object
        """
        investor = Investor(wallet_address=wallet_address)
        self.db.add(investor)
        try:
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        self.db.refresh(investor)
        return investor


class FarmerRepository(_SqlPrincipalRepository):
    model = Farmer


class AdminUserRepository(_SqlPrincipalRepository):
    model = AdminUser
