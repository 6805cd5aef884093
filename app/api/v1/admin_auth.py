from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from app.core.deps import get_auth_service, get_current_admin
from app.models.admin_user import AdminUser
from app.schemas.auth import AdminLoginResponse, AdminOut, NonceResponse, WalletLoginRequest
from app.services.auth import WalletAuthService
from app.services.messages import Role

router = APIRouter()


@router.get("/admin/auth/nonce", response_model=NonceResponse)
def admin_nonce(
    wallet_address: str = Query(..., description="Admin wallet address"),
    service: WalletAuthService = Depends(get_auth_service),
):
    challenge = service.request_nonce(Role.ADMIN, wallet_address)
    return NonceResponse(**vars(challenge))


@router.post("/admin/auth/login", response_model=AdminLoginResponse)
def admin_login(payload: WalletLoginRequest, service: WalletAuthService = Depends(get_auth_service)):
    """
    Authenticate an admin with a wallet signature.

    - **wallet_address**: Admin wallet (must already be registered and active)
    - **signature**: EIP-712 signature over the admin login message
    - **nonce**: Nonce from /admin/auth/nonce
    """
    result = service.login(Role.ADMIN, payload.wallet_address, payload.signature, payload.nonce)
    return AdminLoginResponse(token=result.token, admin=AdminOut.model_validate(result.principal))


@router.get("/admin/auth/me", response_model=AdminOut)
def admin_me(current_admin: AdminUser = Depends(get_current_admin)):
    return current_admin
