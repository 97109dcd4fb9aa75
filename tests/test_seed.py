from app.config.permissions_config import (
    ALL_PERMISSION_NAMES,
    MODULES,
    PERMISSION_MATRIX,
    ROLE_HIERARCHY,
    ROLE_TYPES,
    expand_actions,
)
from app.scripts.seed_permissions_roles import seed_permissions, seed_roles, sync_role_permissions
from tests.fakes import FakeSupabase


def role_permission_names(fake, role_name):
    role_id = next(r["id"] for r in fake.rows("admin_roles") if r["name"] == role_name)
    names = {p["id"]: p["name"] for p in fake.rows("admin_permissions")}
    return sorted(names[link["permission_id"]] for link in fake.rows("admin_role_permissions") if link["role_id"] == role_id)


def test_matrix_covers_every_module_action():
    names = [p["name"] for p in PERMISSION_MATRIX["permissions"]]
    assert sorted(names) == ALL_PERMISSION_NAMES
    assert len(names) == sum(len(cfg["actions"]) for cfg in MODULES.values())


def test_expand_actions():
    assert expand_actions("events", ["*"]) == MODULES["events"]["actions"]
    assert expand_actions("events", ["view", "fly"]) == ["view"]


def test_roles_follow_hierarchy_order():
    assert [r["name"] for r in PERMISSION_MATRIX["roles"]] == list(ROLE_TYPES)
    assert set(ROLE_HIERARCHY) == set(ROLE_TYPES)
    viewer = next(r for r in PERMISSION_MATRIX["roles"] if r["name"] == "viewer")
    assert all(name.endswith(".view") for name in viewer["permissions"])


def test_seed_is_idempotent():
    fake = FakeSupabase()
    assert seed_permissions(fake) == (len(ALL_PERMISSION_NAMES), 0)
    assert seed_roles(fake) == (len(ROLE_TYPES), 0)
    links = len(fake.rows("admin_role_permissions"))

    assert seed_permissions(fake) == (0, len(ALL_PERMISSION_NAMES))
    assert seed_roles(fake) == (0, len(ROLE_TYPES))
    assert len(fake.rows("admin_role_permissions")) == links
    assert role_permission_names(fake, "super_admin") == []
    expected = next(r["permissions"] for r in PERMISSION_MATRIX["roles"] if r["name"] == "content_manager")
    assert role_permission_names(fake, "content_manager") == expected


def test_sync_removes_permissions_not_in_config():
    fake = FakeSupabase()
    seed_permissions(fake)
    seed_roles(fake)
    role_id = next(r["id"] for r in fake.rows("admin_roles") if r["name"] == "viewer")

    sync_role_permissions(fake, role_id, "viewer", ["events.view"])

    assert role_permission_names(fake, "viewer") == ["events.view"]
