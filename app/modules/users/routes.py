from fastapi import APIRouter, Depends, Query
from app.database.supabase_client import get_supabase
from app.modules.users.schemas import (
    AdminUserCreate, AdminUserUpdate, AdminUserResponse, AdminUserWithRolesResponse,
    UserRolesUpdate
)
from app.modules.users.service import UserService
from app.modules.auth.schemas import AuthUser, UserRole
from app.core.dependencies import require_permission
from app.core.pagination import PaginatedResponse, clamp_per_page
from supabase import Client
from typing import List, Optional

router = APIRouter(prefix="/users", tags=["users"])


def get_user_service(supabase: Client = Depends(get_supabase)) -> UserService:
    return UserService(supabase)


@router.get("", response_model=PaginatedResponse[AdminUserWithRolesResponse])
async def list_users(
    search: Optional[str] = None,
    is_active: Optional[bool] = None,
    role_id: Optional[str] = None,
    page: int = Query(1, ge=1),
    per_page: int = Query(10, ge=1),
    user: AuthUser = Depends(require_permission("admin_users", "view")),
    service: UserService = Depends(get_user_service)
):
    return service.list_users(
        search=search, is_active=is_active, role_id=role_id,
        page=page, per_page=clamp_per_page(per_page),
    )


@router.post("", response_model=AdminUserWithRolesResponse, status_code=201)
async def create_user(
    user_data: AdminUserCreate,
    user: AuthUser = Depends(require_permission("admin_users", "create")),
    service: UserService = Depends(get_user_service)
):
    """Create an admin profile with initial roles"""
    return service.create_user(user_data, actor_id=user.id)


@router.get("/{user_id}", response_model=AdminUserWithRolesResponse)
async def get_user(
    user_id: str,
    user: AuthUser = Depends(require_permission("admin_users", "view")),
    service: UserService = Depends(get_user_service)
):
    return service.get_user_with_roles(user_id)


@router.put("/{user_id}", response_model=AdminUserResponse)
async def update_user(
    user_id: str,
    user_data: AdminUserUpdate,
    user: AuthUser = Depends(require_permission("admin_users", "edit")),
    service: UserService = Depends(get_user_service)
):
    return service.update_user(user_id, user_data, actor_id=user.id)


@router.post("/{user_id}/toggle-active", response_model=AdminUserResponse)
async def toggle_user_active(
    user_id: str,
    user: AuthUser = Depends(require_permission("admin_users", "edit")),
    service: UserService = Depends(get_user_service)
):
    return service.toggle_active(user_id, actor_id=user.id)


@router.delete("/{user_id}", status_code=204)
async def delete_user(
    user_id: str,
    user: AuthUser = Depends(require_permission("admin_users", "delete")),
    service: UserService = Depends(get_user_service)
):
    """Delete admin user (never the caller)"""
    service.delete_user(user_id, actor_id=user.id)
    return None


@router.get("/{user_id}/roles", response_model=List[UserRole])
async def get_user_roles(
    user_id: str,
    user: AuthUser = Depends(require_permission("admin_users", "view")),
    service: UserService = Depends(get_user_service)
):
    return service.get_user_roles(user_id)


@router.put("/{user_id}/roles", response_model=List[UserRole])
async def replace_user_roles(
    user_id: str,
    roles_data: UserRolesUpdate,
    user: AuthUser = Depends(require_permission("admin_users", "manage_roles")),
    service: UserService = Depends(get_user_service)
):
    """Replace all role assignments of a user"""
    return service.replace_user_roles(user_id, roles_data.role_ids, actor_id=user.id)
