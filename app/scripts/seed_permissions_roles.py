"""
Seed Permissions and Roles Script
This script populates admin_permissions, admin_roles and admin_role_permissions from the config.
Safe to re-run: existing rows are updated and role permissions are synced to the config.

    python -m app.scripts.seed_permissions_roles
"""

import sys
import logging
from typing import Tuple

from supabase import Client

from app.config.permissions_config import PERMISSION_MATRIX
from app.database.supabase_client import get_service_supabase

logger = logging.getLogger(__name__)


def seed_permissions(supabase: Client) -> Tuple[int, int]:
    """Seed permissions from config; returns (created, updated)"""
    logger.info("Seeding permissions...")

    created_count = 0
    updated_count = 0

    for perm in PERMISSION_MATRIX["permissions"]:
        try:
            existing = supabase.table("admin_permissions")\
                .select("id")\
                .eq("name", perm["name"])\
                .execute()

            fields = {
                "module": perm["module"],
                "action": perm["action"],
                "display_name": perm["display_name"],
                "description": perm["description"],
            }
            if existing.data:
                supabase.table("admin_permissions")\
                    .update(fields)\
                    .eq("name", perm["name"])\
                    .execute()
                updated_count += 1
                logger.debug(f"Updated permission: {perm['name']}")
            else:
                supabase.table("admin_permissions").insert({
                    "name": perm["name"], "is_active": True, **fields
                }).execute()
                created_count += 1
                logger.debug(f"Created permission: {perm['name']}")
        except Exception as e:
            logger.error(f"Error processing permission {perm['name']}: {e}")

    logger.info(f"Permissions seeded: {created_count} created, {updated_count} updated")
    return created_count, updated_count


def seed_roles(supabase: Client) -> Tuple[int, int]:
    """Seed default roles from config; returns (created, updated)"""
    logger.info("Seeding roles...")

    created_count = 0
    updated_count = 0

    for role in PERMISSION_MATRIX["roles"]:
        try:
            existing = supabase.table("admin_roles")\
                .select("id")\
                .eq("name", role["name"])\
                .execute()

            fields = {
                "display_name": role["display_name"],
                "description": role["description"],
                "color": role["color"],
                "sort_order": role["sort_order"],
            }
            if existing.data:
                supabase.table("admin_roles")\
                    .update(fields)\
                    .eq("name", role["name"])\
                    .execute()
                role_id = existing.data[0]["id"]
                updated_count += 1
                logger.debug(f"Updated role: {role['name']}")
            else:
                result = supabase.table("admin_roles").insert({
                    "name": role["name"], "is_active": True, **fields
                }).execute()
                role_id = result.data[0]["id"]
                created_count += 1
                logger.debug(f"Created role: {role['name']}")

            sync_role_permissions(supabase, role_id, role["name"], role["permissions"])
        except Exception as e:
            logger.error(f"Error processing role {role['name']}: {e}")

    logger.info(f"Roles seeded: {created_count} created, {updated_count} updated")
    return created_count, updated_count


def sync_role_permissions(supabase: Client, role_id: str, role_name: str, permission_names: list):
    """Make the role hold exactly the configured permissions"""
    permission_ids = set()
    if permission_names:
        permission_result = supabase.table("admin_permissions")\
            .select("id")\
            .in_("name", permission_names)\
            .execute()
        permission_ids = {p["id"] for p in permission_result.data or []}
        if len(permission_ids) < len(permission_names):
            logger.warning(f"Some permissions for role {role_name} are missing; seed permissions first")

    existing_result = supabase.table("admin_role_permissions")\
        .select("permission_id")\
        .eq("role_id", role_id)\
        .execute()
    existing_permission_ids = {p["permission_id"] for p in existing_result.data or []}

    new_assignments = [
        {"role_id": role_id, "permission_id": pid}
        for pid in sorted(permission_ids - existing_permission_ids)
    ]
    if new_assignments:
        supabase.table("admin_role_permissions").insert(new_assignments).execute()
        logger.debug(f"Assigned {len(new_assignments)} permissions to role {role_name}")

    permissions_to_remove = existing_permission_ids - permission_ids
    if permissions_to_remove:
        supabase.table("admin_role_permissions")\
            .delete()\
            .eq("role_id", role_id)\
            .in_("permission_id", list(permissions_to_remove))\
            .execute()
        logger.debug(f"Removed {len(permissions_to_remove)} permissions from role {role_name}")


def main():
    """Seed permissions, then the roles that reference them"""
    logging.basicConfig(level=logging.INFO)
    try:
        supabase = get_service_supabase()

        logger.info("Starting permissions and roles seeding...")
        perm_created, perm_updated = seed_permissions(supabase)
        role_created, role_updated = seed_roles(supabase)

        logger.info("Seeding completed successfully!")
        logger.info(
            f"Total: {perm_created + perm_updated} permissions, {role_created + role_updated} roles processed"
        )
    except Exception as e:
        logger.error(f"Error during seeding: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
