from datetime import timedelta

from app.core.content_status import utcnow


def submitted(days_ago):
    return (utcnow() - timedelta(days=days_ago)).isoformat()


def add_contact(fake, name, **fields):
    row = {
        "full_name": name, "email": f"{name.lower()}@example.com",
        "enquiry_type": "General", "enquiry_details": "Opening hours?",
        "submitted_date": submitted(0), **fields,
    }
    return fake.add_row("contacts", row)


def names(response):
    return sorted(c["full_name"] for c in response.json()["data"])


def test_list_contacts_by_read_state(client, fake_supabase, make_admin):
    admin = make_admin("contacts.view")
    add_contact(fake_supabase, "Ana", is_read=True)
    add_contact(fake_supabase, "Budi", is_read=False)
    add_contact(fake_supabase, "Citra", is_read=None)

    r = client.get("/api/v1/contacts", params={"status": "unread"}, headers=admin.headers)
    assert names(r) == ["Budi", "Citra"]
    assert all(c["is_read"] is False for c in r.json()["data"])

    r = client.get("/api/v1/contacts", params={"status": "read"}, headers=admin.headers)
    assert names(r) == ["Ana"]
    assert r.json()["total"] == 1

    assert client.get("/api/v1/contacts", params={"status": "spam"}, headers=admin.headers).status_code == 422


def test_list_contacts_search_and_type(client, fake_supabase, make_admin):
    admin = make_admin("contacts.view")
    add_contact(fake_supabase, "Dewi", enquiry_type="Leasing", enquiry_details="Unit on level 3")
    add_contact(fake_supabase, "Eko", enquiry_type="Parking & Security")

    r = client.get("/api/v1/contacts", params={"search": "level 3"}, headers=admin.headers)
    assert names(r) == ["Dewi"]
    r = client.get("/api/v1/contacts", params={"enquiry_type": "Parking & Security"}, headers=admin.headers)
    assert names(r) == ["Eko"]


def test_contact_detail_includes_latest_reply(client, fake_supabase, make_admin):
    admin = make_admin("contacts.view")
    contact = add_contact(fake_supabase, "Fajar")
    fake_supabase.add_row("contact_responses", {
        "contact_id": contact["id"], "response_message": "Old reply",
        "responded_at": submitted(2), "responded_by": admin.id,
    })
    fake_supabase.add_row("contact_responses", {
        "contact_id": contact["id"], "response_message": "We open at 10am",
        "responded_at": submitted(1), "responded_by": admin.id,
    })

    r = client.get(f"/api/v1/contacts/{contact['id']}", headers=admin.headers)
    assert r.status_code == 200
    reply = r.json()["admin_response"]
    assert reply["response_message"] == "We open at 10am"
    assert reply["admin_name"] == admin.email.split("@")[0]

    assert client.get("/api/v1/contacts/missing", headers=admin.headers).status_code == 404


def test_mark_read_needs_respond(client, fake_supabase, make_admin):
    viewer = make_admin("contacts.view")
    responder = make_admin("contacts.view", "contacts.respond")
    contact = add_contact(fake_supabase, "Gita", is_read=False)

    assert client.post(f"/api/v1/contacts/{contact['id']}/read", headers=viewer.headers).status_code == 403

    r = client.post(f"/api/v1/contacts/{contact['id']}/read", headers=responder.headers)
    assert r.status_code == 200
    assert r.json()["is_read"] is True
    r = client.post(f"/api/v1/contacts/{contact['id']}/unread", headers=responder.headers)
    assert r.json()["is_read"] is False

    actions = [log["action"] for log in fake_supabase.rows("admin_activity_logs")]
    assert actions == ["read", "unread"]


def test_bulk_read_and_delete(client, fake_supabase, make_admin):
    admin = make_admin("contacts.view", "contacts.respond", "contacts.delete")
    first = add_contact(fake_supabase, "Hadi", is_read=False)
    second = add_contact(fake_supabase, "Intan", is_read=False)
    keep = add_contact(fake_supabase, "Joko", is_read=False)
    fake_supabase.add_row("contact_responses", {"contact_id": first["id"], "response_message": "Thanks"})

    r = client.post("/api/v1/contacts/bulk-read", json={"ids": [first["id"], second["id"]]}, headers=admin.headers)
    assert r.json() == {"count": 2}
    assert [c["is_read"] for c in fake_supabase.rows("contacts")] == [True, True, False]

    assert client.post("/api/v1/contacts/bulk-delete", json={"ids": []}, headers=admin.headers).status_code == 422
    r = client.post("/api/v1/contacts/bulk-delete", json={"ids": [first["id"], second["id"]]}, headers=admin.headers)
    assert r.json() == {"count": 2}
    assert [c["id"] for c in fake_supabase.rows("contacts")] == [keep["id"]]
    assert fake_supabase.rows("contact_responses") == []


def test_delete_contact_removes_replies(client, fake_supabase, make_admin):
    admin = make_admin("contacts.delete")
    contact = add_contact(fake_supabase, "Kartika")
    fake_supabase.add_row("contact_responses", {"contact_id": contact["id"], "response_message": "Noted"})

    assert client.delete(f"/api/v1/contacts/{contact['id']}", headers=admin.headers).status_code == 204
    assert fake_supabase.rows("contacts") == []
    assert fake_supabase.rows("contact_responses") == []
    assert client.delete(f"/api/v1/contacts/{contact['id']}", headers=admin.headers).status_code == 404


def test_contact_stats(client, fake_supabase, make_admin):
    admin = make_admin("contacts.view")
    add_contact(fake_supabase, "Lina", is_read=False)
    add_contact(fake_supabase, "Made", is_read=True, enquiry_type="Leasing", submitted_date=submitted(3))
    add_contact(fake_supabase, "Nina", enquiry_type="Leasing", submitted_date=submitted(10))

    r = client.get("/api/v1/contacts/stats", headers=admin.headers)
    assert r.status_code == 200
    stats = r.json()
    assert stats["total"] == 3
    assert stats["unread"] == 2
    assert stats["by_type"]["Leasing"] == 2
    assert stats["by_type"]["Legal"] == 0
    assert stats["today_count"] == 1
    assert stats["week_count"] == 2
