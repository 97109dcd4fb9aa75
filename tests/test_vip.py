VIP_EDITOR = ("vip_tiers.view", "vip_tiers.create", "vip_tiers.edit", "vip_tiers.delete")


def add_tier(fake, name, level, **fields):
    return fake.add_row("vip_tiers", {
        "name": name, "tier_level": level, "minimum_spend_amount": 0,
        "is_active": True, "sort_order": level, **fields,
    })


def test_list_tiers_ordered_by_level(client, fake_supabase, make_admin):
    admin = make_admin("vip_tiers.view")
    add_tier(fake_supabase, "Platinum", 3)
    add_tier(fake_supabase, "Silver", 1)
    add_tier(fake_supabase, "Gold", 2, is_active=False)

    r = client.get("/api/v1/vip/tiers", headers=admin.headers)
    assert [t["name"] for t in r.json()] == ["Silver", "Gold", "Platinum"]
    r = client.get("/api/v1/vip/tiers", params={"is_active": True}, headers=admin.headers)
    assert [t["name"] for t in r.json()] == ["Silver", "Platinum"]


def test_tier_level_is_unique(client, fake_supabase, make_admin):
    admin = make_admin(*VIP_EDITOR)
    add_tier(fake_supabase, "Silver", 1)

    r = client.post("/api/v1/vip/tiers", json={"name": "Bronze", "tier_level": 1}, headers=admin.headers)
    assert r.status_code == 409
    r = client.post("/api/v1/vip/tiers", json={"name": "Gold", "tier_level": 2, "minimum_spend_amount": 5000000}, headers=admin.headers)
    assert r.status_code == 201
    gold = r.json()

    r = client.put(f"/api/v1/vip/tiers/{gold['id']}", json={"tier_level": 1}, headers=admin.headers)
    assert r.status_code == 409
    r = client.put(f"/api/v1/vip/tiers/{gold['id']}", json={"tier_level": 2, "card_color": "#d4af37"}, headers=admin.headers)
    assert r.status_code == 200
    assert r.json()["card_color"] == "#d4af37"

    assert client.post("/api/v1/vip/tiers", json={"name": "Zero", "tier_level": 0}, headers=admin.headers).status_code == 422


def test_tier_detail_lists_benefits_in_order(client, fake_supabase, make_admin):
    admin = make_admin("vip_tiers.view")
    tier = add_tier(fake_supabase, "Gold", 2)
    parking = fake_supabase.add_row("vip_benefits", {"name": "Free parking"})
    lounge = fake_supabase.add_row("vip_benefits", {"name": "Lounge access", "icon": "sofa"})
    fake_supabase.add_row("vip_tier_benefits", {"tier_id": tier["id"], "benefit_id": parking["id"], "display_order": 2})
    fake_supabase.add_row("vip_tier_benefits", {
        "tier_id": tier["id"], "benefit_id": lounge["id"], "display_order": 1, "benefit_note": "Weekdays only",
    })

    r = client.get(f"/api/v1/vip/tiers/{tier['id']}", headers=admin.headers)
    assert r.status_code == 200
    benefits = r.json()["benefits"]
    assert [b["name"] for b in benefits] == ["Lounge access", "Free parking"]
    assert benefits[0]["benefit_note"] == "Weekdays only"

    assert client.get("/api/v1/vip/tiers/missing", headers=admin.headers).status_code == 404


def test_delete_tier_detaches_benefits(client, fake_supabase, make_admin):
    admin = make_admin(*VIP_EDITOR)
    tier = add_tier(fake_supabase, "Silver", 1)
    benefit = fake_supabase.add_row("vip_benefits", {"name": "Birthday voucher"})
    fake_supabase.add_row("vip_tier_benefits", {"tier_id": tier["id"], "benefit_id": benefit["id"]})

    assert client.delete(f"/api/v1/vip/tiers/{tier['id']}", headers=admin.headers).status_code == 204
    assert fake_supabase.rows("vip_tiers") == []
    assert fake_supabase.rows("vip_tier_benefits") == []
    assert len(fake_supabase.rows("vip_benefits")) == 1


def test_toggle_tier_logs_activation(client, fake_supabase, make_admin):
    viewer = make_admin("vip_tiers.view")
    editor = make_admin("vip_tiers.edit")
    tier = add_tier(fake_supabase, "Silver", 1)

    assert client.post(f"/api/v1/vip/tiers/{tier['id']}/toggle-active", headers=viewer.headers).status_code == 403

    r = client.post(f"/api/v1/vip/tiers/{tier['id']}/toggle-active", headers=editor.headers)
    assert r.json()["is_active"] is False
    r = client.post(f"/api/v1/vip/tiers/{tier['id']}/toggle-active", headers=editor.headers)
    assert r.json()["is_active"] is True

    logs = fake_supabase.rows("admin_activity_logs")
    assert [(log["module"], log["action"]) for log in logs] == [("vip", "deactivate"), ("vip", "activate")]
