import hashlib
import logging
import threading
import time
from supabase import Client
from app.modules.auth.schemas import AuthUser, LoginRequest, TokenResponse, UserRole
from app.config.settings import settings
from fastapi import HTTPException
from app.core.errors import handle_supabase_error
from typing import Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)


class SessionCache:
    """In-memory cache of AuthUser snapshots keyed by a hash of the bearer token."""

    def __init__(self, ttl_seconds: int, max_size: int):
        self.ttl_seconds = ttl_seconds
        self.max_size = max_size
        self._entries: Dict[str, Tuple[AuthUser, float]] = {}
        self._lock = threading.Lock()

    @staticmethod
    def _key(token: str) -> str:
        return hashlib.sha256(token.encode()).hexdigest()

    def get(self, token: str) -> Optional[AuthUser]:
        key = self._key(token)
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            user, expiry = entry
            if time.monotonic() >= expiry:
                del self._entries[key]
                return None
            return user

    def set(self, token: str, user: AuthUser) -> None:
        now = time.monotonic()
        with self._lock:
            if len(self._entries) >= self.max_size:
                self._entries = {k: v for k, v in self._entries.items() if v[1] > now}
            if len(self._entries) < self.max_size:
                self._entries[self._key(token)] = (user, now + self.ttl_seconds)

    def invalidate(self, token: str) -> None:
        with self._lock:
            self._entries.pop(self._key(token), None)

    def invalidate_user(self, user_id: str) -> None:
        with self._lock:
            self._entries = {k: v for k, v in self._entries.items() if v[0].id != user_id}

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


session_cache = SessionCache(settings.session_cache_ttl_seconds, settings.session_cache_max_size)


class AuthService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _get_active_admin_by_email(self, email: str) -> Optional[dict]:
        try:
            result = self.supabase.table("admin_users")\
                .select("id, email, is_active")\
                .eq("email", email.lower())\
                .eq("is_active", True)\
                .limit(1)\
                .execute()
        except Exception as e:
            raise handle_supabase_error(e, "find admin user")
        return result.data[0] if result.data else None

    def login(self, login_data: LoginRequest) -> TokenResponse:
        """Authenticate through Supabase Auth; only active admin profiles may sign in"""
        try:
            admin = self._get_active_admin_by_email(login_data.email)
            if not admin:
                raise HTTPException(status_code=401, detail="Invalid email or password")

            auth_response = self.supabase.auth.sign_in_with_password({
                "email": login_data.email,
                "password": login_data.password
            })
            if not auth_response.user or not auth_response.session:
                raise HTTPException(status_code=401, detail="Invalid email or password")

            user = self.load_auth_user(admin["id"])
            if user is None:
                raise HTTPException(status_code=401, detail="Invalid email or password")

            token = auth_response.session.access_token
            session_cache.set(token, user)
            return TokenResponse(access_token=token, user=user)
        except HTTPException:
            raise
        except Exception as e:
            error_message = str(e)
            if "invalid" in error_message.lower() or "credentials" in error_message.lower():
                raise HTTPException(status_code=401, detail="Invalid email or password")
            logger.error(f"Login failed: {error_message}")
            raise HTTPException(status_code=500, detail="An error occurred during sign in")

    def get_current_user(self, token: str) -> AuthUser:
        """Resolve the admin behind a bearer token. Uses the session cache to avoid reloading roles."""
        cached = session_cache.get(token)
        if cached is not None:
            return cached
        try:
            user_response = self.supabase.auth.get_user(jwt=token)
            if not user_response or not user_response.user or not user_response.user.email:
                raise HTTPException(status_code=401, detail="Invalid or expired token")
            admin = self._get_active_admin_by_email(user_response.user.email)
            if not admin:
                raise HTTPException(status_code=401, detail="No active admin account for this user")
            user = self.load_auth_user(admin["id"])
            if user is None:
                raise HTTPException(status_code=401, detail="No active admin account for this user")
            session_cache.set(token, user)
            return user
        except HTTPException:
            raise
        except Exception as e:
            error_msg = str(e)
            if "JWT" in error_msg or "expired" in error_msg.lower() or "invalid" in error_msg.lower():
                raise HTTPException(status_code=401, detail="Invalid or expired token")
            logger.error(f"Session lookup failed: {error_msg}")
            raise HTTPException(status_code=401, detail="Authentication failed")

    def refresh(self, token: str) -> AuthUser:
        session_cache.invalidate(token)
        return self.get_current_user(token)

    def logout(self, token: str) -> bool:
        session_cache.invalidate(token)
        try:
            self.supabase.auth.sign_out()
            return True
        except Exception as e:
            logger.warning(f"Sign out failed: {e}")
            return False

    def get_user_roles(self, user_id: str) -> List[UserRole]:
        assignments = self.supabase.table("admin_user_roles")\
            .select("role_id")\
            .eq("user_id", user_id)\
            .execute()
        role_ids = list({a["role_id"] for a in assignments.data}) if assignments.data else []
        if not role_ids:
            return []
        roles_result = self.supabase.table("admin_roles")\
            .select("id, name, display_name, description, color, is_active")\
            .in_("id", role_ids)\
            .execute()
        return [
            UserRole(**role)
            for role in roles_result.data or []
            if role.get("is_active", True)
        ]

    def get_role_permission_names(self, role_ids: List[str]) -> List[str]:
        """Union of active permission names across the given roles"""
        if not role_ids:
            return []
        links = self.supabase.table("admin_role_permissions")\
            .select("permission_id")\
            .in_("role_id", role_ids)\
            .execute()
        permission_ids = list({link["permission_id"] for link in links.data}) if links.data else []
        if not permission_ids:
            return []
        permissions = self.supabase.table("admin_permissions")\
            .select("name, is_active")\
            .in_("id", permission_ids)\
            .execute()
        return sorted({
            p["name"] for p in permissions.data or []
            if p.get("name") and p.get("is_active", True)
        })

    def load_auth_user(self, user_id: str) -> Optional[AuthUser]:
        """Load an active admin with roles and the union of their permissions; None when no active row exists"""
        try:
            result = self.supabase.table("admin_users")\
                .select("id, email, full_name, avatar_url, is_active, created_at, updated_at")\
                .eq("id", user_id)\
                .eq("is_active", True)\
                .limit(1)\
                .execute()
            if not result.data:
                return None
            roles = self.get_user_roles(user_id)
            permissions = self.get_role_permission_names([r.id for r in roles])
            return AuthUser(**result.data[0], roles=roles, permissions=set(permissions))
        except HTTPException:
            raise
        except Exception as e:
            raise handle_supabase_error(e, f"load admin user {user_id}")
