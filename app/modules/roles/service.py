import logging
from supabase import Client
from app.modules.roles.schemas import (
    PermissionCreate, PermissionUpdate, PermissionResponse,
    RoleCreate, RoleUpdate, RoleResponse, RoleWithPermissionsResponse,
    RolePermissionResponse, BulkPermissionAssignResponse
)
from app.modules.auth.service import session_cache
from app.modules.activity.service import ActivityService
from app.config.permissions_config import SUPER_ADMIN_ROLE
from app.core.errors import handle_supabase_error, not_found
from app.core.permissions import get_permission_display_name, permission_name
from typing import List, Optional
from fastapi import HTTPException

logger = logging.getLogger(__name__)


class PermissionService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.activity = ActivityService(supabase)

    def _find_by_name(self, name: str) -> Optional[dict]:
        result = self.supabase.table("admin_permissions")\
            .select("id")\
            .eq("name", name)\
            .limit(1)\
            .execute()
        return result.data[0] if result.data else None

    def create_permission(self, permission_data: PermissionCreate, actor_id: Optional[str] = None) -> PermissionResponse:
        """Create a permission; the name is always derived from module and action"""
        try:
            name = permission_name(permission_data.module, permission_data.action)
            if self._find_by_name(name):
                raise HTTPException(status_code=409, detail=f"Permission {name} already exists")

            result = self.supabase.table("admin_permissions").insert({
                "name": name,
                "module": permission_data.module,
                "action": permission_data.action,
                "display_name": permission_data.display_name
                or get_permission_display_name(permission_data.module, permission_data.action),
                "description": permission_data.description,
                "is_active": permission_data.is_active,
            }).execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create permission")

            session_cache.clear()
            permission = PermissionResponse(**result.data[0])
            self.activity.log_activity(
                actor_id, "create", "admin_roles",
                resource_type="permission", resource_id=permission.id, resource_name=name,
                new_values=permission_data.model_dump()
            )
            return permission
        except HTTPException:
            raise
        except Exception as e:
            raise handle_supabase_error(e, "create permission")

    def get_permission_by_id(self, permission_id: str) -> PermissionResponse:
        """Get permission by ID"""
        try:
            result = self.supabase.table("admin_permissions")\
                .select("*")\
                .eq("id", permission_id)\
                .limit(1)\
                .execute()

            if not result.data:
                raise not_found("Permission")

            return PermissionResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise handle_supabase_error(e, "get permission")

    def update_permission(
        self, permission_id: str, permission_data: PermissionUpdate, actor_id: Optional[str] = None
    ) -> PermissionResponse:
        """Update permission; changing module or action re-derives the name"""
        try:
            current = self.get_permission_by_id(permission_id)
            update_data = permission_data.model_dump(exclude_unset=True)

            module = update_data.get("module") or current.module
            action = update_data.get("action") or current.action
            name = permission_name(module, action)
            if name != current.name:
                existing = self._find_by_name(name)
                if existing and existing["id"] != permission_id:
                    raise HTTPException(status_code=409, detail=f"Permission {name} already exists")
                update_data["name"] = name
                update_data["module"] = module
                update_data["action"] = action

            if not update_data:
                return current

            result = self.supabase.table("admin_permissions")\
                .update(update_data)\
                .eq("id", permission_id)\
                .execute()

            if not result.data:
                raise not_found("Permission")

            session_cache.clear()
            self.activity.log_activity(
                actor_id, "update", "admin_roles",
                resource_type="permission", resource_id=permission_id, resource_name=name,
                old_values=current.model_dump(mode="json"), new_values=update_data
            )
            return PermissionResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise handle_supabase_error(e, "update permission")

    def list_permissions(
        self,
        module: Optional[str] = None,
        is_active: Optional[bool] = None,
    ) -> List[PermissionResponse]:
        """List permissions ordered by module then action"""
        try:
            query = self.supabase.table("admin_permissions").select("*")
            if module:
                query = query.eq("module", module)
            if is_active is not None:
                query = query.eq("is_active", is_active)
            result = query.order("module")\
                .order("action")\
                .execute()
            return [PermissionResponse(**permission) for permission in result.data or []]
        except Exception as e:
            raise handle_supabase_error(e, "list permissions")

    def delete_permission(self, permission_id: str, actor_id: Optional[str] = None) -> bool:
        """Delete permission"""
        try:
            permission = self.get_permission_by_id(permission_id)

            # Detach from roles first
            self.supabase.table("admin_role_permissions")\
                .delete()\
                .eq("permission_id", permission_id)\
                .execute()

            result = self.supabase.table("admin_permissions")\
                .delete()\
                .eq("id", permission_id)\
                .execute()

            session_cache.clear()
            self.activity.log_activity(
                actor_id, "delete", "admin_roles",
                resource_type="permission", resource_id=permission_id, resource_name=permission.name
            )
            return bool(result.data)
        except HTTPException:
            raise
        except Exception as e:
            raise handle_supabase_error(e, "delete permission")


class RoleService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.activity = ActivityService(supabase)

    def _find_by_name(self, name: str) -> Optional[dict]:
        result = self.supabase.table("admin_roles")\
            .select("id")\
            .eq("name", name)\
            .limit(1)\
            .execute()
        return result.data[0] if result.data else None

    def _next_sort_order(self) -> int:
        result = self.supabase.table("admin_roles")\
            .select("sort_order")\
            .order("sort_order", desc=True)\
            .limit(1)\
            .execute()
        if not result.data or result.data[0].get("sort_order") is None:
            return 1
        return result.data[0]["sort_order"] + 1

    def _verify_permissions(self, permission_ids: List[str]) -> None:
        if not permission_ids:
            return
        result = self.supabase.table("admin_permissions")\
            .select("id")\
            .in_("id", permission_ids)\
            .execute()
        found = {p["id"] for p in result.data or []}
        missing = [pid for pid in permission_ids if pid not in found]
        if missing:
            raise HTTPException(status_code=404, detail=f"Permission not found: {', '.join(missing)}")

    def create_role(self, role_data: RoleCreate, actor_id: Optional[str] = None) -> RoleResponse:
        """Create a role at the end of the display order, optionally with permissions"""
        try:
            if self._find_by_name(role_data.name):
                raise HTTPException(status_code=409, detail=f"Role {role_data.name} already exists")
            self._verify_permissions(role_data.permission_ids)

            result = self.supabase.table("admin_roles").insert({
                "name": role_data.name,
                "display_name": role_data.display_name,
                "description": role_data.description,
                "color": role_data.color,
                "is_active": role_data.is_active,
                "sort_order": self._next_sort_order(),
            }).execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create role")

            role = RoleResponse(**result.data[0])
            if role_data.permission_ids:
                self.supabase.table("admin_role_permissions").insert([
                    {"role_id": role.id, "permission_id": pid}
                    for pid in dict.fromkeys(role_data.permission_ids)
                ]).execute()

            session_cache.clear()
            self.activity.log_activity(
                actor_id, "create", "admin_roles",
                resource_type="role", resource_id=role.id, resource_name=role.name,
                new_values=role_data.model_dump()
            )
            return role
        except HTTPException:
            raise
        except Exception as e:
            raise handle_supabase_error(e, "create role")

    def get_role_by_id(self, role_id: str) -> RoleResponse:
        """Get role by ID"""
        try:
            result = self.supabase.table("admin_roles")\
                .select("*")\
                .eq("id", role_id)\
                .limit(1)\
                .execute()

            if not result.data:
                raise not_found("Role")

            return RoleResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise handle_supabase_error(e, "get role")

    def get_role_with_permissions(self, role_id: str) -> RoleWithPermissionsResponse:
        """Get role with all associated permissions and the number of users holding it"""
        try:
            role = self.get_role_by_id(role_id)
            permissions = self.get_role_permissions(role_id)
            users = self.supabase.table("admin_user_roles")\
                .select("user_id")\
                .eq("role_id", role_id)\
                .execute()
            return RoleWithPermissionsResponse(
                **role.model_dump(),
                permissions=permissions,
                user_count=len({u["user_id"] for u in users.data or []}),
            )
        except HTTPException:
            raise
        except Exception as e:
            raise handle_supabase_error(e, "get role")

    def update_role(self, role_id: str, role_data: RoleUpdate, actor_id: Optional[str] = None) -> RoleResponse:
        """Update role; permission_ids, when given, replaces the role's permissions"""
        try:
            current = self.get_role_by_id(role_id)
            update_data = role_data.model_dump(exclude_unset=True, exclude={"permission_ids"})

            new_name = update_data.get("name")
            if new_name and new_name != current.name:
                if current.name == SUPER_ADMIN_ROLE:
                    raise HTTPException(status_code=400, detail="The super_admin role cannot be renamed")
                if self._find_by_name(new_name):
                    raise HTTPException(status_code=409, detail=f"Role {new_name} already exists")
            if current.name == SUPER_ADMIN_ROLE and update_data.get("is_active") is False:
                raise HTTPException(status_code=400, detail="The super_admin role cannot be deactivated")

            role = current
            if update_data:
                result = self.supabase.table("admin_roles")\
                    .update(update_data)\
                    .eq("id", role_id)\
                    .execute()
                if not result.data:
                    raise not_found("Role")
                role = RoleResponse(**result.data[0])

            if role_data.permission_ids is not None:
                self.bulk_update_role_permissions(role_id, role_data.permission_ids)

            session_cache.clear()
            self.activity.log_activity(
                actor_id, "update", "admin_roles",
                resource_type="role", resource_id=role_id, resource_name=role.name,
                old_values=current.model_dump(mode="json"),
                new_values=role_data.model_dump(exclude_unset=True)
            )
            return role
        except HTTPException:
            raise
        except Exception as e:
            raise handle_supabase_error(e, "update role")

    def list_roles(self, include_inactive: bool = True) -> List[RoleResponse]:
        """List roles in display order"""
        try:
            query = self.supabase.table("admin_roles").select("*")
            if not include_inactive:
                query = query.eq("is_active", True)
            result = query.order("sort_order").execute()
            return [RoleResponse(**role) for role in result.data or []]
        except Exception as e:
            raise handle_supabase_error(e, "list roles")

    def delete_role(self, role_id: str, actor_id: Optional[str] = None) -> bool:
        """Delete role; the super_admin role is protected"""
        try:
            role = self.get_role_by_id(role_id)
            if role.name == SUPER_ADMIN_ROLE:
                raise HTTPException(status_code=400, detail="The super_admin role cannot be deleted")

            self.supabase.table("admin_role_permissions")\
                .delete()\
                .eq("role_id", role_id)\
                .execute()
            self.supabase.table("admin_user_roles")\
                .delete()\
                .eq("role_id", role_id)\
                .execute()

            result = self.supabase.table("admin_roles")\
                .delete()\
                .eq("id", role_id)\
                .execute()

            session_cache.clear()
            self.activity.log_activity(
                actor_id, "delete", "admin_roles",
                resource_type="role", resource_id=role_id, resource_name=role.name
            )
            return bool(result.data)
        except HTTPException:
            raise
        except Exception as e:
            raise handle_supabase_error(e, "delete role")

    def assign_permission_to_role(self, role_id: str, permission_id: str) -> RolePermissionResponse:
        """Assign a permission to a role"""
        try:
            self.get_role_by_id(role_id)
            PermissionService(self.supabase).get_permission_by_id(permission_id)

            existing = self.supabase.table("admin_role_permissions")\
                .select("id")\
                .eq("role_id", role_id)\
                .eq("permission_id", permission_id)\
                .execute()

            if existing.data:
                raise HTTPException(status_code=409, detail="Permission already assigned to role")

            result = self.supabase.table("admin_role_permissions").insert({
                "role_id": role_id,
                "permission_id": permission_id
            }).execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to assign permission")

            session_cache.clear()
            return RolePermissionResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise handle_supabase_error(e, "assign permission")

    def remove_permission_from_role(self, role_id: str, permission_id: str) -> bool:
        """Remove a permission from a role"""
        try:
            result = self.supabase.table("admin_role_permissions")\
                .delete()\
                .eq("role_id", role_id)\
                .eq("permission_id", permission_id)\
                .execute()

            if not result.data:
                raise HTTPException(status_code=404, detail="Permission is not assigned to this role")

            session_cache.clear()
            return True
        except HTTPException:
            raise
        except Exception as e:
            raise handle_supabase_error(e, "remove permission")

    def get_role_permissions(self, role_id: str) -> List[PermissionResponse]:
        """Get all permissions for a role"""
        try:
            links = self.supabase.table("admin_role_permissions")\
                .select("permission_id")\
                .eq("role_id", role_id)\
                .execute()

            permission_ids = list({link["permission_id"] for link in links.data or []})
            if not permission_ids:
                return []

            result = self.supabase.table("admin_permissions")\
                .select("*")\
                .in_("id", permission_ids)\
                .order("module")\
                .order("action")\
                .execute()
            return [PermissionResponse(**permission) for permission in result.data or []]
        except Exception as e:
            raise handle_supabase_error(e, "get role permissions")

    def bulk_assign_permissions_to_role(self, role_id: str, permission_ids: List[str]) -> BulkPermissionAssignResponse:
        """Bulk assign multiple permissions to a role, skipping ones already assigned"""
        try:
            self.get_role_by_id(role_id)
            permission_ids = list(dict.fromkeys(permission_ids))
            self._verify_permissions(permission_ids)

            existing_result = self.supabase.table("admin_role_permissions")\
                .select("permission_id")\
                .eq("role_id", role_id)\
                .in_("permission_id", permission_ids)\
                .execute()

            existing_permission_ids = {item["permission_id"] for item in existing_result.data} if existing_result.data else set()

            insert_data = [
                {"role_id": role_id, "permission_id": pid}
                for pid in permission_ids
                if pid not in existing_permission_ids
            ]

            assigned_permissions = []
            skipped_count = len(existing_permission_ids)

            if insert_data:
                result = self.supabase.table("admin_role_permissions").insert(insert_data).execute()
                if result.data:
                    assigned_permissions = [RolePermissionResponse(**item) for item in result.data]

            session_cache.clear()
            return BulkPermissionAssignResponse(
                role_id=role_id,
                assigned_count=len(assigned_permissions),
                skipped_count=skipped_count,
                assigned_permissions=assigned_permissions,
                message=f"Assigned {len(assigned_permissions)} permissions, skipped {skipped_count} already assigned"
            )
        except HTTPException:
            raise
        except Exception as e:
            raise handle_supabase_error(e, "bulk assign permissions")

    def bulk_update_role_permissions(self, role_id: str, permission_ids: List[str]) -> BulkPermissionAssignResponse:
        """Replace all permissions for a role"""
        try:
            self.get_role_by_id(role_id)
            permission_ids = list(dict.fromkeys(permission_ids))
            self._verify_permissions(permission_ids)

            self.supabase.table("admin_role_permissions")\
                .delete()\
                .eq("role_id", role_id)\
                .execute()

            assigned_permissions = []
            if permission_ids:
                insert_data = [
                    {"role_id": role_id, "permission_id": pid}
                    for pid in permission_ids
                ]

                result = self.supabase.table("admin_role_permissions").insert(insert_data).execute()
                if result.data:
                    assigned_permissions = [RolePermissionResponse(**item) for item in result.data]

            session_cache.clear()
            logger.info(f"Role {role_id} now has {len(assigned_permissions)} permissions")
            return BulkPermissionAssignResponse(
                role_id=role_id,
                assigned_count=len(assigned_permissions),
                skipped_count=0,
                assigned_permissions=assigned_permissions,
                message=f"Updated role with {len(assigned_permissions)} permissions"
            )
        except HTTPException:
            raise
        except Exception as e:
            raise handle_supabase_error(e, "bulk update permissions")
