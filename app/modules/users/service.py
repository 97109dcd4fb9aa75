import logging
from supabase import Client
from app.modules.users.schemas import (
    AdminUserCreate, AdminUserUpdate, AdminUserResponse, AdminUserWithRolesResponse
)
from app.modules.auth.schemas import UserRole
from app.modules.auth.service import session_cache
from app.modules.activity.service import ActivityService
from app.core.content_status import utcnow
from app.core.errors import forbidden, handle_supabase_error, not_found
from app.core.pagination import PaginatedResponse, build_page, page_range, search_filter
from typing import Dict, List, Optional
from fastapi import HTTPException

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.activity = ActivityService(supabase)

    def _roles_by_user(self, user_ids: List[str]) -> Dict[str, List[UserRole]]:
        if not user_ids:
            return {}
        assignments = self.supabase.table("admin_user_roles")\
            .select("user_id, role_id")\
            .in_("user_id", user_ids)\
            .execute()
        role_ids = list({a["role_id"] for a in assignments.data or []})
        roles: Dict[str, UserRole] = {}
        if role_ids:
            roles_result = self.supabase.table("admin_roles")\
                .select("id, name, display_name, description, color")\
                .in_("id", role_ids)\
                .execute()
            roles = {r["id"]: UserRole(**r) for r in roles_result.data or []}

        by_user: Dict[str, List[UserRole]] = {uid: [] for uid in user_ids}
        for assignment in assignments.data or []:
            role = roles.get(assignment["role_id"])
            if role:
                by_user.setdefault(assignment["user_id"], []).append(role)
        return by_user

    def _verify_roles(self, role_ids: List[str]) -> None:
        if not role_ids:
            return
        result = self.supabase.table("admin_roles")\
            .select("id")\
            .in_("id", role_ids)\
            .execute()
        found = {r["id"] for r in result.data or []}
        missing = [rid for rid in role_ids if rid not in found]
        if missing:
            raise HTTPException(status_code=404, detail=f"Role not found: {', '.join(missing)}")

    def _write_roles(self, user_id: str, role_ids: List[str], assigned_by: Optional[str]) -> None:
        self.supabase.table("admin_user_roles")\
            .delete()\
            .eq("user_id", user_id)\
            .execute()
        if role_ids:
            self.supabase.table("admin_user_roles").insert([
                {"user_id": user_id, "role_id": rid, "assigned_by": assigned_by}
                for rid in role_ids
            ]).execute()

    def get_user_by_id(self, user_id: str) -> AdminUserResponse:
        """Get admin user profile by ID"""
        try:
            result = self.supabase.table("admin_users")\
                .select("*")\
                .eq("id", user_id)\
                .limit(1)\
                .execute()

            if not result.data:
                raise not_found("Admin user")

            return AdminUserResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise handle_supabase_error(e, "get admin user")

    def get_user_by_email(self, email: str) -> Optional[AdminUserResponse]:
        result = self.supabase.table("admin_users")\
            .select("*")\
            .eq("email", email.lower())\
            .limit(1)\
            .execute()
        return AdminUserResponse(**result.data[0]) if result.data else None

    def get_user_with_roles(self, user_id: str) -> AdminUserWithRolesResponse:
        try:
            user = self.get_user_by_id(user_id)
            roles = self._roles_by_user([user_id]).get(user_id, [])
            return AdminUserWithRolesResponse(**user.model_dump(), roles=roles)
        except HTTPException:
            raise
        except Exception as e:
            raise handle_supabase_error(e, "get admin user")

    def list_users(
        self,
        search: Optional[str] = None,
        is_active: Optional[bool] = None,
        role_id: Optional[str] = None,
        page: int = 1,
        per_page: int = 10,
    ) -> PaginatedResponse:
        """List admin users with their roles, newest first"""
        try:
            query = self.supabase.table("admin_users").select("*", count="exact")
            if search:
                query = query.or_(search_filter(["full_name", "email"], search))
            if is_active is not None:
                query = query.eq("is_active", is_active)
            if role_id:
                holders = self.supabase.table("admin_user_roles")\
                    .select("user_id")\
                    .eq("role_id", role_id)\
                    .execute()
                user_ids = list({h["user_id"] for h in holders.data or []})
                if not user_ids:
                    return build_page([], 0, page, per_page)
                query = query.in_("id", user_ids)

            start, end = page_range(page, per_page)
            result = query.order("created_at", desc=True).range(start, end).execute()
            rows = result.data or []
            roles = self._roles_by_user([row["id"] for row in rows])
            users = [AdminUserWithRolesResponse(**row, roles=roles.get(row["id"], [])) for row in rows]
            return build_page(users, result.count, page, per_page)
        except HTTPException:
            raise
        except Exception as e:
            raise handle_supabase_error(e, "list admin users")

    def create_user(self, user_data: AdminUserCreate, actor_id: Optional[str] = None) -> AdminUserWithRolesResponse:
        """Create an admin profile; the matching Supabase Auth account signs in with the same email"""
        try:
            email = user_data.email.lower()
            if self.get_user_by_email(email):
                raise HTTPException(status_code=409, detail="An admin user with this email already exists")
            role_ids = list(dict.fromkeys(user_data.role_ids))
            self._verify_roles(role_ids)

            result = self.supabase.table("admin_users").insert({
                "email": email,
                "full_name": user_data.full_name,
                "avatar_url": user_data.avatar_url,
                "is_active": user_data.is_active,
            }).execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create admin user")

            user_id = result.data[0]["id"]
            self._write_roles(user_id, role_ids, actor_id)
            self.activity.log_activity(
                actor_id, "create", "admin_users",
                resource_type="admin_user", resource_id=user_id, resource_name=email,
                new_values={"email": email, "full_name": user_data.full_name, "role_ids": role_ids}
            )
            return self.get_user_with_roles(user_id)
        except HTTPException:
            raise
        except Exception as e:
            raise handle_supabase_error(e, "create admin user")

    def update_user(
        self, user_id: str, user_data: AdminUserUpdate, actor_id: Optional[str] = None
    ) -> AdminUserResponse:
        """Update admin profile"""
        try:
            current = self.get_user_by_id(user_id)
            update_data = user_data.model_dump(exclude_unset=True)
            if not update_data:
                return current
            if update_data.get("is_active") is False and user_id == actor_id:
                raise forbidden("You cannot deactivate your own account")
            update_data["updated_at"] = utcnow().isoformat()

            result = self.supabase.table("admin_users")\
                .update(update_data)\
                .eq("id", user_id)\
                .execute()

            if not result.data:
                raise not_found("Admin user")

            session_cache.invalidate_user(user_id)
            self.activity.log_activity(
                actor_id, "update", "admin_users",
                resource_type="admin_user", resource_id=user_id, resource_name=current.email,
                old_values=current.model_dump(mode="json"), new_values=update_data
            )
            return AdminUserResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise handle_supabase_error(e, "update admin user")

    def toggle_active(self, user_id: str, actor_id: Optional[str] = None) -> AdminUserResponse:
        current = self.get_user_by_id(user_id)
        return self.update_user(user_id, AdminUserUpdate(is_active=not current.is_active), actor_id)

    def delete_user(self, user_id: str, actor_id: Optional[str] = None) -> bool:
        """Delete admin profile and its role assignments"""
        try:
            if user_id == actor_id:
                raise HTTPException(status_code=400, detail="You cannot delete your own account")
            user = self.get_user_by_id(user_id)

            self.supabase.table("admin_user_roles")\
                .delete()\
                .eq("user_id", user_id)\
                .execute()

            result = self.supabase.table("admin_users")\
                .delete()\
                .eq("id", user_id)\
                .execute()

            session_cache.invalidate_user(user_id)
            self.activity.log_activity(
                actor_id, "delete", "admin_users",
                resource_type="admin_user", resource_id=user_id, resource_name=user.email
            )
            return bool(result.data)
        except HTTPException:
            raise
        except Exception as e:
            raise handle_supabase_error(e, "delete admin user")

    def get_user_roles(self, user_id: str) -> List[UserRole]:
        self.get_user_by_id(user_id)
        try:
            return self._roles_by_user([user_id]).get(user_id, [])
        except Exception as e:
            raise handle_supabase_error(e, "get admin user roles")

    def replace_user_roles(
        self, user_id: str, role_ids: List[str], actor_id: Optional[str] = None
    ) -> List[UserRole]:
        """Replace every role assignment of a user"""
        try:
            user = self.get_user_by_id(user_id)
            role_ids = list(dict.fromkeys(role_ids))
            self._verify_roles(role_ids)
            previous = [r.id for r in self._roles_by_user([user_id]).get(user_id, [])]

            self._write_roles(user_id, role_ids, actor_id)

            session_cache.invalidate_user(user_id)
            self.activity.log_activity(
                actor_id, "update", "admin_users",
                resource_type="admin_user_roles", resource_id=user_id, resource_name=user.email,
                old_values={"role_ids": previous}, new_values={"role_ids": role_ids}
            )
            logger.info(f"Admin {user_id} now holds roles {role_ids}")
            return self._roles_by_user([user_id]).get(user_id, [])
        except HTTPException:
            raise
        except Exception as e:
            raise handle_supabase_error(e, "replace admin user roles")
