from fastapi import APIRouter, Depends
from app.database.supabase_client import get_supabase
from app.modules.roles.schemas import (
    PermissionCreate, PermissionUpdate, PermissionResponse,
    RoleCreate, RoleUpdate, RoleResponse, RoleWithPermissionsResponse,
    RolePermissionAssign, RolePermissionResponse,
    BulkPermissionAssign, BulkPermissionAssignResponse, BulkPermissionUpdate
)
from app.modules.roles.service import RoleService, PermissionService
from app.modules.auth.schemas import AuthUser
from app.core.dependencies import require_permission, require_super_admin
from app.config.permissions_config import PERMISSION_MATRIX
from supabase import Client
from typing import List, Optional

router = APIRouter(prefix="/roles", tags=["roles"])


def get_role_service(supabase: Client = Depends(get_supabase)) -> RoleService:
    return RoleService(supabase)


def get_permission_service(supabase: Client = Depends(get_supabase)) -> PermissionService:
    return PermissionService(supabase)


# Permission endpoints
@router.get("/matrix")
async def get_permission_matrix(
    user: AuthUser = Depends(require_permission("admin_roles", "view"))
):
    """Static module/action matrix and default roles used for seeding"""
    return PERMISSION_MATRIX


@router.post("/permissions", response_model=PermissionResponse, status_code=201)
async def create_permission(
    permission_data: PermissionCreate,
    user: AuthUser = Depends(require_super_admin),
    service: PermissionService = Depends(get_permission_service)
):
    """Create a new permission"""
    return service.create_permission(permission_data, actor_id=user.id)


@router.get("/permissions", response_model=List[PermissionResponse])
async def list_permissions(
    module: Optional[str] = None,
    is_active: Optional[bool] = None,
    user: AuthUser = Depends(require_permission("admin_roles", "view")),
    service: PermissionService = Depends(get_permission_service)
):
    return service.list_permissions(module=module, is_active=is_active)


@router.get("/permissions/{permission_id}", response_model=PermissionResponse)
async def get_permission(
    permission_id: str,
    user: AuthUser = Depends(require_permission("admin_roles", "view")),
    service: PermissionService = Depends(get_permission_service)
):
    return service.get_permission_by_id(permission_id)


@router.put("/permissions/{permission_id}", response_model=PermissionResponse)
async def update_permission(
    permission_id: str,
    permission_data: PermissionUpdate,
    user: AuthUser = Depends(require_permission("admin_roles", "edit")),
    service: PermissionService = Depends(get_permission_service)
):
    return service.update_permission(permission_id, permission_data, actor_id=user.id)


@router.delete("/permissions/{permission_id}", status_code=204)
async def delete_permission(
    permission_id: str,
    user: AuthUser = Depends(require_super_admin),
    service: PermissionService = Depends(get_permission_service)
):
    """Delete permission and detach it from every role"""
    service.delete_permission(permission_id, actor_id=user.id)
    return None


# Role endpoints
@router.post("", response_model=RoleResponse, status_code=201)
async def create_role(
    role_data: RoleCreate,
    user: AuthUser = Depends(require_permission("admin_roles", "create")),
    service: RoleService = Depends(get_role_service)
):
    """Create a new role"""
    return service.create_role(role_data, actor_id=user.id)


@router.get("", response_model=List[RoleResponse])
async def list_roles(
    include_inactive: bool = True,
    user: AuthUser = Depends(require_permission("admin_roles", "view")),
    service: RoleService = Depends(get_role_service)
):
    return service.list_roles(include_inactive=include_inactive)


@router.get("/{role_id}", response_model=RoleWithPermissionsResponse)
async def get_role(
    role_id: str,
    user: AuthUser = Depends(require_permission("admin_roles", "view")),
    service: RoleService = Depends(get_role_service)
):
    """Get role with its permissions"""
    return service.get_role_with_permissions(role_id)


@router.put("/{role_id}", response_model=RoleResponse)
async def update_role(
    role_id: str,
    role_data: RoleUpdate,
    user: AuthUser = Depends(require_permission("admin_roles", "edit")),
    service: RoleService = Depends(get_role_service)
):
    return service.update_role(role_id, role_data, actor_id=user.id)


@router.delete("/{role_id}", status_code=204)
async def delete_role(
    role_id: str,
    user: AuthUser = Depends(require_permission("admin_roles", "delete")),
    service: RoleService = Depends(get_role_service)
):
    service.delete_role(role_id, actor_id=user.id)
    return None


# Role-Permission association endpoints
@router.post("/{role_id}/permissions", response_model=RolePermissionResponse, status_code=201)
async def assign_permission_to_role(
    role_id: str,
    permission_assign: RolePermissionAssign,
    user: AuthUser = Depends(require_permission("admin_roles", "edit")),
    service: RoleService = Depends(get_role_service)
):
    return service.assign_permission_to_role(role_id, permission_assign.permission_id)


@router.get("/{role_id}/permissions", response_model=List[PermissionResponse])
async def get_role_permissions(
    role_id: str,
    user: AuthUser = Depends(require_permission("admin_roles", "view")),
    service: RoleService = Depends(get_role_service)
):
    return service.get_role_permissions(role_id)


@router.delete("/{role_id}/permissions/{permission_id}", status_code=204)
async def remove_permission_from_role(
    role_id: str,
    permission_id: str,
    user: AuthUser = Depends(require_permission("admin_roles", "edit")),
    service: RoleService = Depends(get_role_service)
):
    service.remove_permission_from_role(role_id, permission_id)
    return None


@router.post("/{role_id}/permissions/bulk-assign", response_model=BulkPermissionAssignResponse, status_code=200)
async def bulk_assign_permissions_to_role(
    role_id: str,
    bulk_data: BulkPermissionAssign,
    user: AuthUser = Depends(require_permission("admin_roles", "edit")),
    service: RoleService = Depends(get_role_service)
):
    """Assign several permissions at once, skipping ones the role already has"""
    return service.bulk_assign_permissions_to_role(role_id, bulk_data.permission_ids)


@router.put("/{role_id}/permissions/bulk-update", response_model=BulkPermissionAssignResponse, status_code=200)
async def bulk_update_role_permissions(
    role_id: str,
    bulk_data: BulkPermissionUpdate,
    user: AuthUser = Depends(require_permission("admin_roles", "edit")),
    service: RoleService = Depends(get_role_service)
):
    """Replace all permissions for a role"""
    return service.bulk_update_role_permissions(role_id, bulk_data.permission_ids)
