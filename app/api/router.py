from fastapi import APIRouter
from app.api.v1.health import router as health_router
from app.api.v1.auth import router as auth_router
from app.api.v1.farmer_auth import router as farmer_auth_router
from app.api.v1.admin_auth import router as admin_auth_router


api_router = APIRouter()
api_router.include_router(health_router, prefix="/v1", tags=["health"])
api_router.include_router(auth_router, prefix="/v1", tags=["auth"])
api_router.include_router(farmer_auth_router, prefix="/v1", tags=["farmer auth"])
api_router.include_router(admin_auth_router, prefix="/v1", tags=["admin auth"])
