from .auth import (
    WalletLoginRequest,
    NonceResponse,
    InvestorOut,
    FarmerOut,
    AdminOut,
    InvestorLoginResponse,
    FarmerLoginResponse,
    AdminLoginResponse,
)

__all__ = [
    "WalletLoginRequest",
    "NonceResponse",
    "InvestorOut",
    "FarmerOut",
    "AdminOut",
    "InvestorLoginResponse",
    "FarmerLoginResponse",
    "AdminLoginResponse",
]
