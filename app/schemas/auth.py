# app/schemas/auth.py
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.services.signature import to_checksum_address

# 65 bytes as hex, with or without 0x
SIGNATURE_PATTERN = r"^(0x)?[0-9a-fA-F]{130}$"


class WalletLoginRequest(BaseModel):
    wallet_address: str = Field(..., min_length=1, max_length=64)
    signature: str = Field(..., pattern=SIGNATURE_PATTERN)
    nonce: str = Field(..., min_length=1, max_length=128)


class NonceResponse(BaseModel):
    nonce: str
    message: str
    wallet_address: str = Field(..., description="EIP-55 checksum form of the requested wallet")
    expires_in: int = Field(..., description="Seconds until the nonce expires")
    typed_data: dict[str, Any] = Field(..., description="EIP-712 payload to pass to eth_signTypedData_v4")


class PrincipalOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    wallet_address: str

    @field_validator("wallet_address")
    @classmethod
    def display_checksummed(cls, value: str) -> str:
        return to_checksum_address(value)


class InvestorOut(PrincipalOut):
    name: Optional[str] = None
    email: Optional[str] = None
    last_login_at: Optional[datetime] = None
    created_at: datetime


class FarmerOut(PrincipalOut):
    full_name: str
    email: str
    status: str


class AdminOut(PrincipalOut):
    role: str
    is_active: bool


class InvestorLoginResponse(BaseModel):
    token: str
    token_type: str = "bearer"
    investor: InvestorOut


class FarmerLoginResponse(BaseModel):
    token: str
    token_type: str = "bearer"
    farmer: FarmerOut


class AdminLoginResponse(BaseModel):
    token: str
    token_type: str = "bearer"
    admin: AdminOut
