import asyncio
import logging
from fastapi import APIRouter, Depends, HTTPException
from app.database.supabase_client import get_supabase
from app.modules.auth.schemas import (
    AuthUser, LoginRequest, PermissionCheckRequest, SessionResponse, TokenResponse
)
from app.modules.auth.service import AuthService
from app.modules.activity.service import ActivityService
from app.core.dependencies import get_auth_service, get_current_token, get_current_user
from app.core.permissions import (
    get_accessible_modules, get_highest_role, has_permission, is_super_admin, permission_name
)
from app.config.permissions_config import ALL_PERMISSION_NAMES
from app.config.settings import settings
from supabase import Client

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def build_session(user: AuthUser) -> SessionResponse:
    if is_super_admin(user):
        permissions = list(ALL_PERMISSION_NAMES)
    else:
        permissions = sorted(user.permissions)
    return SessionResponse(
        user=user,
        permissions=permissions,
        is_super_admin=is_super_admin(user),
        highest_role=get_highest_role(user),
        accessible_modules=get_accessible_modules(user),
    )


@router.post("/login", response_model=TokenResponse)
async def login(
    login_data: LoginRequest,
    service: AuthService = Depends(get_auth_service),
    supabase: Client = Depends(get_supabase)
):
    """Login and get access token"""
    response = service.login(login_data)
    ActivityService(supabase).log_activity(
        response.user.id, "login", "auth",
        resource_type="admin_user", resource_id=response.user.id, resource_name=response.user.email
    )
    return response


@router.post("/logout", status_code=200)
async def logout(
    token: str = Depends(get_current_token),
    user: AuthUser = Depends(get_current_user),
    service: AuthService = Depends(get_auth_service),
    supabase: Client = Depends(get_supabase)
):
    """Logout and drop the cached session"""
    service.logout(token)
    ActivityService(supabase).log_activity(
        user.id, "logout", "auth",
        resource_type="admin_user", resource_id=user.id, resource_name=user.email
    )
    return {"message": "Logged out successfully"}


@router.get("/me", response_model=SessionResponse)
async def get_me(
    token: str = Depends(get_current_token),
    service: AuthService = Depends(get_auth_service)
):
    """Current admin with roles and effective permissions (for frontend UI)."""
    try:
        user = await asyncio.wait_for(
            asyncio.to_thread(service.get_current_user, token),
            timeout=settings.session_bootstrap_timeout_seconds,
        )
    except asyncio.TimeoutError:
        logger.warning("Session bootstrap timed out")
        raise HTTPException(status_code=504, detail="Timed out loading session")
    return build_session(user)


@router.post("/refresh", response_model=SessionResponse)
async def refresh_session(
    token: str = Depends(get_current_token),
    service: AuthService = Depends(get_auth_service)
):
    """Reload roles and permissions, bypassing the session cache"""
    return build_session(service.refresh(token))


@router.get("/permissions")
async def get_effective_permissions(user: AuthUser = Depends(get_current_user)):
    """Debug view of what the current admin can do"""
    return {
        "user_id": user.id,
        "email": user.email,
        "roles": [role.name for role in user.roles],
        "is_super_admin": is_super_admin(user),
        "highest_role": get_highest_role(user),
        "permissions": sorted(user.permissions),
        "accessible_modules": get_accessible_modules(user),
    }


@router.post("/check")
async def check_permission(
    request: PermissionCheckRequest,
    user: AuthUser = Depends(get_current_user)
):
    return {
        "permission": permission_name(request.module, request.action),
        "allowed": has_permission(user, request.module, request.action),
    }
