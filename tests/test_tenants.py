TENANT_EDITOR = ("tenants.view", "tenants.create", "tenants.edit", "tenants.delete", "tenants.feature")


def test_create_tenant_code(client, fake_supabase, make_admin):
    admin = make_admin(*TENANT_EDITOR)
    r = client.post("/api/v1/tenants", json={"name": "Uniqlo Flagship", "main_floor": "2"}, headers=admin.headers)
    assert r.status_code == 201
    assert r.json()["tenant_code"] == "UNIQLO"

    r = client.post("/api/v1/tenants", json={"name": "Another", "tenant_code": "uniqlo"}, headers=admin.headers)
    assert r.status_code == 409

    r = client.post("/api/v1/tenants", json={"name": "Zara", "tenant_code": "zara01"}, headers=admin.headers)
    assert r.json()["tenant_code"] == "ZARA01"

    r = client.post("/api/v1/tenants", json={"name": "!!!"}, headers=admin.headers)
    assert r.status_code == 422


def test_get_tenant_by_code_is_case_insensitive(client, fake_supabase, make_admin):
    admin = make_admin("tenants.view")
    tenant = fake_supabase.add_row("tenants", {"tenant_code": "HM", "name": "H&M"})
    r = client.get("/api/v1/tenants/code/hm", headers=admin.headers)
    assert r.status_code == 200
    assert r.json()["id"] == tenant["id"]
    assert client.get("/api/v1/tenants/code/none", headers=admin.headers).status_code == 404


def test_list_tenants_filters(client, fake_supabase, make_admin):
    admin = make_admin("tenants.view")
    fake_supabase.add_row("tenants", {"tenant_code": "A1", "name": "Alpha", "main_floor": "G", "is_active": True, "is_featured": True})
    fake_supabase.add_row("tenants", {"tenant_code": "B1", "name": "Bravo", "main_floor": "1", "is_active": False, "is_new_tenant": True})
    fake_supabase.add_row("tenants", {"tenant_code": "C1", "name": "Charlie", "main_floor": "G", "is_active": True})

    def names(**params):
        r = client.get("/api/v1/tenants", params=params, headers=admin.headers)
        return sorted(t["name"] for t in r.json()["data"])

    assert names(floor="G") == ["Alpha", "Charlie"]
    assert names(is_active=False) == ["Bravo"]
    assert names(featured=True) == ["Alpha"]
    assert names(new_tenant=True) == ["Bravo"]
    assert names(search="b1") == ["Bravo"]


def test_update_tenant_code_conflict(client, fake_supabase, make_admin):
    admin = make_admin(*TENANT_EDITOR)
    fake_supabase.add_row("tenants", {"tenant_code": "TAKEN", "name": "Taken"})
    tenant = fake_supabase.add_row("tenants", {"tenant_code": "MINE", "name": "Mine"})

    r = client.put(f"/api/v1/tenants/{tenant['id']}", json={"tenant_code": "taken"}, headers=admin.headers)
    assert r.status_code == 409

    r = client.put(f"/api/v1/tenants/{tenant['id']}", json={"tenant_code": "mine", "phone": "021-555"}, headers=admin.headers)
    assert r.status_code == 200
    assert r.json()["tenant_code"] == "MINE"
    assert r.json()["phone"] == "021-555"


def test_toggles_need_their_permissions(client, fake_supabase, make_admin):
    editor = make_admin("tenants.view", "tenants.edit")
    tenant = fake_supabase.add_row("tenants", {"tenant_code": "T1", "name": "Toggle", "is_active": True, "is_featured": False})

    r = client.post(f"/api/v1/tenants/{tenant['id']}/toggle-active", headers=editor.headers)
    assert r.json()["is_active"] is False
    assert client.post(f"/api/v1/tenants/{tenant['id']}/toggle-featured", headers=editor.headers).status_code == 403

    featurer = make_admin("tenants.feature")
    r = client.post(f"/api/v1/tenants/{tenant['id']}/toggle-featured", headers=featurer.headers)
    assert r.json()["is_featured"] is True


def test_delete_tenant_with_promotions(client, fake_supabase, make_admin):
    admin = make_admin(*TENANT_EDITOR)
    tenant = fake_supabase.add_row("tenants", {"tenant_code": "BUSY", "name": "Busy"})
    promo = fake_supabase.add_row("promotions", {"tenant_id": tenant["id"], "title": "Deal", "status": "staging"})

    assert client.delete(f"/api/v1/tenants/{tenant['id']}", headers=admin.headers).status_code == 409

    fake_supabase.tables["promotions"].remove(promo)
    assert client.delete(f"/api/v1/tenants/{tenant['id']}", headers=admin.headers).status_code == 204
    assert client.get(f"/api/v1/tenants/{tenant['id']}", headers=admin.headers).status_code == 404
