import uuid
from dataclasses import dataclass
from typing import Dict, Iterable, Optional

import pytest
from fastapi.testclient import TestClient

from app.database.supabase_client import get_supabase
from app.main import app
from app.modules.auth.service import session_cache
from tests.fakes import FakeSupabase


@dataclass
class SeededAdmin:
    id: str
    email: str
    token: str

    @property
    def headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}


def seed_permission(fake: FakeSupabase, name: str, is_active: bool = True) -> str:
    for row in fake.rows("admin_permissions"):
        if row["name"] == name:
            return row["id"]
    module, action = name.split(".", 1)
    return fake.add_row("admin_permissions", {
        "name": name, "module": module, "action": action,
        "display_name": name, "is_active": is_active,
    })["id"]


def seed_role(fake: FakeSupabase, name: str, permissions: Iterable[str] = (), is_active: bool = True) -> str:
    for row in fake.rows("admin_roles"):
        if row["name"] == name:
            role_id = row["id"]
            break
    else:
        role_id = fake.add_row("admin_roles", {
            "name": name, "display_name": name.replace("_", " ").title(),
            "is_active": is_active, "sort_order": len(fake.rows("admin_roles")) + 1,
        })["id"]
    for permission in permissions:
        fake.add_row("admin_role_permissions", {
            "role_id": role_id, "permission_id": seed_permission(fake, permission),
        })
    return role_id


def seed_admin(
    fake: FakeSupabase,
    permissions: Iterable[str] = (),
    role_name: Optional[str] = None,
    email: Optional[str] = None,
    is_active: bool = True,
) -> SeededAdmin:
    email = email or f"admin-{uuid.uuid4().hex[:8]}@grandmall.com"
    user = fake.add_row("admin_users", {
        "email": email, "full_name": email.split("@")[0], "is_active": is_active,
    })
    role_id = seed_role(fake, role_name or f"role_{uuid.uuid4().hex[:8]}", permissions)
    fake.add_row("admin_user_roles", {"user_id": user["id"], "role_id": role_id})
    token = fake.auth.add_account(email)
    return SeededAdmin(id=user["id"], email=email, token=token)


@pytest.fixture(autouse=True)
def clear_session_cache():
    session_cache.clear()
    yield
    session_cache.clear()


@pytest.fixture
def fake_supabase():
    return FakeSupabase()


@pytest.fixture
def client(fake_supabase):
    app.dependency_overrides[get_supabase] = lambda: fake_supabase
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def make_admin(fake_supabase):
    def _make(*permissions: str, role_name: Optional[str] = None, **kwargs) -> SeededAdmin:
        return seed_admin(fake_supabase, permissions, role_name=role_name, **kwargs)
    return _make


@pytest.fixture
def super_admin(make_admin):
    return make_admin(role_name="super_admin")
