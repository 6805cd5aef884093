from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from app.core.deps import get_auth_service, get_current_farmer
from app.models.farmer import Farmer
from app.schemas.auth import FarmerLoginResponse, FarmerOut, NonceResponse, WalletLoginRequest
from app.services.auth import WalletAuthService
from app.services.messages import Role

router = APIRouter()


@router.get("/farmer/auth/nonce", response_model=NonceResponse)
def farmer_nonce(
    wallet_address: str = Query(..., description="Farmer wallet address"),
    service: WalletAuthService = Depends(get_auth_service),
):
    challenge = service.request_nonce(Role.FARMER, wallet_address)
    return NonceResponse(**vars(challenge))


@router.post("/farmer/auth/login", response_model=FarmerLoginResponse)
def farmer_login(payload: WalletLoginRequest, service: WalletAuthService = Depends(get_auth_service)):
    """Only approved farmers can log in."""
    result = service.login(Role.FARMER, payload.wallet_address, payload.signature, payload.nonce)
    return FarmerLoginResponse(token=result.token, farmer=FarmerOut.model_validate(result.principal))


@router.get("/farmer/auth/me", response_model=FarmerOut)
def farmer_me(current_farmer: Farmer = Depends(get_current_farmer)):
    return current_farmer
