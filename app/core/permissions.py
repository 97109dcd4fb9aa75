"""
Permission evaluation over an AuthUser snapshot.

A permission is the string "<module>.<action>". A user holding the super_admin
role passes every check; everyone else needs the exact name in the union of
their roles' permissions. A missing user is always denied.
"""

import re
from typing import Iterable, List, Optional, Sequence, Tuple, TypeVar

from app.config.permissions_config import (
    ACTION_DISPLAY_NAMES,
    MANAGEMENT_ROLES,
    MODULES,
    ROLE_HIERARCHY,
    ROUTE_PERMISSIONS,
    SUPER_ADMIN_ROLE,
)
from app.modules.auth.schemas import AuthUser

PermissionCheck = Tuple[str, str]
T = TypeVar("T")

_UUID_SEGMENT = re.compile(r"/[0-9a-fA-F-]{36}(?=/|$)")
_NUMERIC_SEGMENT = re.compile(r"/\d+(?=/|$)")


def permission_name(module: str, action: str) -> str:
    return f"{module}.{action}"


def has_role(user: Optional[AuthUser], role_name: str) -> bool:
    if user is None:
        return False
    return any(role.name == role_name for role in user.roles)


def is_super_admin(user: Optional[AuthUser]) -> bool:
    return has_role(user, SUPER_ADMIN_ROLE)


def has_permission(user: Optional[AuthUser], module: str, action: str) -> bool:
    if user is None:
        return False
    if is_super_admin(user):
        return True
    return permission_name(module, action) in user.permissions


def has_any_permission(user: Optional[AuthUser], checks: Iterable[PermissionCheck]) -> bool:
    if user is None:
        return False
    if is_super_admin(user):
        return True
    return any(has_permission(user, module, action) for module, action in checks)


def has_all_permissions(user: Optional[AuthUser], checks: Iterable[PermissionCheck]) -> bool:
    if user is None:
        return False
    if is_super_admin(user):
        return True
    return all(has_permission(user, module, action) for module, action in checks)


def is_content_manager(user: Optional[AuthUser]) -> bool:
    return is_super_admin(user) or has_role(user, "content_manager")


def is_operations_manager(user: Optional[AuthUser]) -> bool:
    return is_super_admin(user) or has_role(user, "operations_manager")


def has_management_role(user: Optional[AuthUser]) -> bool:
    if user is None:
        return False
    return any(role.name in MANAGEMENT_ROLES for role in user.roles)


def get_highest_role(user: Optional[AuthUser]) -> Optional[str]:
    """Role shown for the user: first match in the hierarchy, else the first assigned role."""
    if user is None or not user.roles:
        return None
    for role_name in ROLE_HIERARCHY:
        if has_role(user, role_name):
            return role_name
    return user.roles[0].name


def normalize_route(path: str) -> str:
    """Collapse UUID and numeric path segments to "[id]"."""
    path = _UUID_SEGMENT.sub("/[id]", path)
    path = _NUMERIC_SEGMENT.sub("/[id]", path)
    if len(path) > 1:
        path = path.rstrip("/")
    return path


def check_route_permission(user: Optional[AuthUser], path: str) -> bool:
    if user is None:
        return False
    if is_super_admin(user):
        return True
    required = ROUTE_PERMISSIONS.get(normalize_route(path))
    if required is None:
        # Unmapped routes only require an authenticated admin
        return True
    return has_permission(user, *required)


def get_accessible_modules(user: Optional[AuthUser]) -> List[str]:
    if user is None:
        return []
    if is_super_admin(user):
        return list(MODULES)
    modules = {name.split(".", 1)[0] for name in user.permissions}
    return [m for m in MODULES if m in modules] + sorted(modules - set(MODULES))


def filter_navigation(items: Sequence[T], user: Optional[AuthUser], href_key: str = "href") -> List[T]:
    """Keep navigation entries whose route the user may open."""
    if user is None:
        return []
    if is_super_admin(user):
        return list(items)
    visible = []
    for item in items:
        href = item[href_key] if isinstance(item, dict) else getattr(item, href_key)
        required = ROUTE_PERMISSIONS.get(normalize_route(href))
        if required is None or has_permission(user, *required):
            visible.append(item)
    return visible


def get_permission_display_name(module: str, action: str) -> str:
    module_name = MODULES.get(module, {}).get("display_name", module.replace("_", " ").title())
    action_name = ACTION_DISPLAY_NAMES.get(action, action.replace("_", " ").title())
    return f"{action_name} {module_name}"
