from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from app.core.deps import get_auth_service, get_current_investor
from app.models.investor import Investor
from app.schemas.auth import InvestorLoginResponse, InvestorOut, NonceResponse, WalletLoginRequest
from app.services.auth import WalletAuthService
from app.services.messages import Role

router = APIRouter()


# -----------------------------
# Investor wallet auth (EIP-712)
# -----------------------------

@router.get("/auth/nonce", response_model=NonceResponse)
def investor_nonce(
    wallet_address: str = Query(..., description="Investor wallet address"),
    service: WalletAuthService = Depends(get_auth_service),
):
    challenge = service.request_nonce(Role.INVESTOR, wallet_address)
    return NonceResponse(**vars(challenge))


@router.post("/auth/login", response_model=InvestorLoginResponse)
def investor_login(payload: WalletLoginRequest, service: WalletAuthService = Depends(get_auth_service)):
    # first successful login provisions the investor account
    result = service.login(Role.INVESTOR, payload.wallet_address, payload.signature, payload.nonce)
    return InvestorLoginResponse(token=result.token, investor=InvestorOut.model_validate(result.principal))


@router.get("/auth/me", response_model=InvestorOut)
def me(current_investor: Investor = Depends(get_current_investor)):
    return current_investor
