"""
LinguaHub Backend — Admin Route Handlers
==========================================

What:  POST /admin/login, the admin panel's credential check.
"""

from fastapi import APIRouter, Depends

from app.config import Settings
from app.dependencies import get_app_settings
from app.schemas.common import ErrorResponse
from app.schemas.user import AdminLoginRequest, AdminLoginResponse
from app.services.admin_service import admin_service

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.post(
    "/login",
    response_model=AdminLoginResponse,
    responses={
        400: {"description": "Email or password missing", "model": ErrorResponse},
        401: {"description": "Credentials rejected", "model": ErrorResponse},
    },
    summary="Check admin credentials",
)
async def admin_login(
    body: AdminLoginRequest,
    app_settings: Settings = Depends(get_app_settings),
) -> AdminLoginResponse:
    """Returns {success: true} or 401; no token or session is issued."""
    return admin_service.login(app_settings, body.email, body.password)
