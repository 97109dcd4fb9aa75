"""
Core dependencies for route protection and permission checking
"""

from fastapi import Depends, HTTPException, Security, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from app.core.permissions import (
    PermissionCheck,
    has_all_permissions,
    has_any_permission,
    has_permission,
    is_super_admin,
    permission_name,
)
from app.database.supabase_client import get_supabase
from app.modules.auth.schemas import AuthUser
from app.modules.auth.service import AuthService
from supabase import Client
import logging

logger = logging.getLogger(__name__)

security = HTTPBearer()


def get_auth_service(supabase: Client = Depends(get_supabase)) -> AuthService:
    return AuthService(supabase)


def get_current_token(
    credentials: HTTPAuthorizationCredentials = Security(security)
) -> str:
    """Extract JWT token from Authorization header"""
    return credentials.credentials


def get_current_user(
    token: str = Depends(get_current_token),
    auth_service: AuthService = Depends(get_auth_service)
) -> AuthUser:
    """Resolve the current admin (roles + permissions) from the bearer token"""
    return auth_service.get_current_user(token)


def require_permission(module: str, action: str):
    """Factory function to create permission check dependency"""
    required = permission_name(module, action)

    def check_permission(user: AuthUser = Depends(get_current_user)) -> AuthUser:
        if not has_permission(user, module, action):
            logger.info(f"Denied {required} for admin {user.id}")
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Insufficient permissions. Required: {required}"
            )
        return user
    return check_permission


def require_any_permission(*checks: PermissionCheck):
    """Dependency passing when the user holds at least one of the (module, action) pairs"""
    def check_any(user: AuthUser = Depends(get_current_user)) -> AuthUser:
        if not has_any_permission(user, checks):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions. Required one of: "
                + ", ".join(permission_name(m, a) for m, a in checks)
            )
        return user
    return check_any


def require_all_permissions(*checks: PermissionCheck):
    """Dependency passing only when the user holds every (module, action) pair"""
    def check_all(user: AuthUser = Depends(get_current_user)) -> AuthUser:
        if not has_all_permissions(user, checks):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions. Required all of: "
                + ", ".join(permission_name(m, a) for m, a in checks)
            )
        return user
    return check_all


def require_super_admin(user: AuthUser = Depends(get_current_user)) -> AuthUser:
    if not is_super_admin(user):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only super admins can perform this action"
        )
    return user
