from datetime import timedelta

import pytest

from app.core.content_status import utcnow

EVENT_EDITOR = ("events.view", "events.create", "events.edit", "events.delete")


def iso(delta_days):
    return (utcnow() + timedelta(days=delta_days)).isoformat()


@pytest.fixture
def seeded_events(fake_supabase):
    rows = {
        "draft": {"is_published": False, "start_at": iso(-1), "end_at": iso(1)},
        "upcoming": {"is_published": True, "start_at": iso(3), "end_at": iso(5)},
        "open-ended": {"is_published": True, "start_at": iso(-3), "end_at": None},
        "running": {"is_published": True, "start_at": iso(-1), "end_at": iso(1)},
        "finished": {"is_published": True, "start_at": iso(-5), "end_at": iso(-2)},
    }
    for title, fields in rows.items():
        fake_supabase.add_row("events", {"title": title, "slug": title, "tags": [], "images": [], **fields})
    return rows


def titles(response):
    return sorted(e["title"] for e in response.json()["data"])


def test_create_event_generates_unique_slugs(client, fake_supabase, make_admin):
    admin = make_admin(*EVENT_EDITOR)
    payload = {"title": "Summer Sale!", "start_at": iso(1), "end_at": iso(2)}

    first = client.post("/api/v1/events", json=payload, headers=admin.headers)
    second = client.post("/api/v1/events", json=payload, headers=admin.headers)
    assert first.status_code == 201
    assert first.json()["slug"] == "summer-sale"
    assert second.json()["slug"] == "summer-sale-1"
    assert first.json()["created_by"] == admin.id
    assert first.json()["status"] == "draft"

    log = fake_supabase.rows("admin_activity_logs")[-1]
    assert (log["action"], log["module"], log["user_id"]) == ("create", "events", admin.id)


def test_create_event_validates_dates(client, make_admin):
    admin = make_admin(*EVENT_EDITOR)
    r = client.post("/api/v1/events", json={"title": "Backwards", "start_at": iso(2), "end_at": iso(1)}, headers=admin.headers)
    assert r.status_code == 422


def test_create_event_accepts_mixed_offsets(client, make_admin):
    admin = make_admin(*EVENT_EDITOR)
    r = client.post("/api/v1/events", json={
        "title": "Mixed", "start_at": "2026-11-01T10:00:00Z", "end_at": "2026-11-01T12:00:00",
    }, headers=admin.headers)
    assert r.status_code == 201

    r = client.post("/api/v1/events", json={
        "title": "Mixed Backwards", "start_at": "2026-11-01T10:00:00+07:00", "end_at": "2026-11-01T02:00:00",
    }, headers=admin.headers)
    assert r.status_code == 422


def test_create_event_requires_permission(client, make_admin):
    viewer = make_admin("events.view")
    r = client.post("/api/v1/events", json={"title": "Nope", "start_at": iso(1)}, headers=viewer.headers)
    assert r.status_code == 403


def test_status_filter(client, make_admin, seeded_events):
    admin = make_admin("events.view")

    def status(name):
        return titles(client.get("/api/v1/events", params={"status": name}, headers=admin.headers))

    assert status("draft") == ["draft"]
    assert status("upcoming") == ["upcoming"]
    assert status("ongoing") == ["open-ended", "running"]
    assert status("ended") == ["finished"]
    assert status("published") == ["finished", "open-ended", "running", "upcoming"]
    assert len(status("all")) == 5

    r = client.get("/api/v1/events", params={"status": "cancelled"}, headers=admin.headers)
    assert r.status_code == 422


def test_list_reports_bucket_per_event(client, make_admin, seeded_events):
    admin = make_admin("events.view")
    r = client.get("/api/v1/events", params={"per_page": 50}, headers=admin.headers)
    statuses = {e["title"]: e["status"] for e in r.json()["data"]}
    assert statuses == {
        "draft": "draft",
        "upcoming": "upcoming",
        "open-ended": "ongoing",
        "running": "ongoing",
        "finished": "ended",
    }


def test_pagination_and_sorting(client, make_admin, seeded_events):
    admin = make_admin("events.view")
    r = client.get("/api/v1/events", params={
        "sort_by": "title", "sort_order": "asc", "page": 2, "per_page": 2,
    }, headers=admin.headers)
    body = r.json()
    assert body["total"] == 5
    assert body["total_pages"] == 3
    assert [e["title"] for e in body["data"]] == ["open-ended", "running"]


def test_search_and_tags(client, fake_supabase, make_admin):
    admin = make_admin("events.view")
    fake_supabase.add_row("events", {"title": "Jazz Night", "slug": "jazz-night", "tags": ["music", "night"], "start_at": iso(1)})
    fake_supabase.add_row("events", {"title": "Kids Workshop", "slug": "kids-workshop", "tags": ["family"], "start_at": iso(1)})

    assert titles(client.get("/api/v1/events", params={"search": "jazz"}, headers=admin.headers)) == ["Jazz Night"]
    r = client.get("/api/v1/events", params=[("tags", "music"), ("tags", "night")], headers=admin.headers)
    assert titles(r) == ["Jazz Night"]
    assert client.get("/api/v1/events/tags", headers=admin.headers).json() == ["family", "music", "night"]


def test_legacy_images_are_normalized(client, fake_supabase, make_admin):
    admin = make_admin("events.view")
    fake_supabase.add_row("events", {
        "title": "Old Event", "slug": "old-event", "start_at": iso(-1),
        "images": ["https://cdn.grandmall.com/a.jpg", {"url": "https://cdn.grandmall.com/b.jpg", "alt": "B"}],
    })
    r = client.get("/api/v1/events/slug/old-event", headers=admin.headers)
    assert r.status_code == 200
    assert r.json()["images"][0] == {"url": "https://cdn.grandmall.com/a.jpg", "alt": "Old Event", "caption": "Event image"}
    assert r.json()["images"][1]["alt"] == "B"

    assert client.get("/api/v1/events/slug/missing", headers=admin.headers).status_code == 404


def test_update_event(client, make_admin):
    admin = make_admin(*EVENT_EDITOR)
    event = client.post("/api/v1/events", json={"title": "Launch", "start_at": iso(2)}, headers=admin.headers).json()
    client.post("/api/v1/events", json={"title": "Other", "slug": "finale", "start_at": iso(2)}, headers=admin.headers)

    r = client.put(f"/api/v1/events/{event['id']}", json={"end_at": iso(1)}, headers=admin.headers)
    assert r.status_code == 422

    r = client.put(f"/api/v1/events/{event['id']}", json={"title": "Grand Launch", "slug": "finale"}, headers=admin.headers)
    assert r.status_code == 200
    assert r.json()["title"] == "Grand Launch"
    assert r.json()["slug"] == "finale-1"
    assert r.json()["updated_at"] is not None


def test_toggles(client, fake_supabase, make_admin):
    editor = make_admin(*EVENT_EDITOR)
    publisher = make_admin("events.publish")
    event = client.post("/api/v1/events", json={"title": "Flash", "start_at": iso(-1)}, headers=editor.headers).json()

    assert client.post(f"/api/v1/events/{event['id']}/toggle-publish", headers=editor.headers).status_code == 403
    r = client.post(f"/api/v1/events/{event['id']}/toggle-publish", headers=publisher.headers)
    assert r.json()["is_published"] is True
    assert r.json()["status"] == "ongoing"
    assert fake_supabase.rows("admin_activity_logs")[-1]["action"] == "publish"

    r = client.post(f"/api/v1/events/{event['id']}/toggle-featured", headers=editor.headers)
    assert r.json()["is_featured"] is True


def test_delete_event(client, make_admin):
    admin = make_admin(*EVENT_EDITOR)
    event = client.post("/api/v1/events", json={"title": "Gone", "start_at": iso(1)}, headers=admin.headers).json()
    assert client.delete(f"/api/v1/events/{event['id']}", headers=admin.headers).status_code == 204
    assert client.get(f"/api/v1/events/{event['id']}", headers=admin.headers).status_code == 404
    assert client.delete(f"/api/v1/events/{event['id']}", headers=admin.headers).status_code == 404


def test_status_filter_treats_missing_start_as_started(client, fake_supabase, make_admin):
    admin = make_admin("events.view")
    fake_supabase.add_row("events", {"title": "no-start-past", "slug": "a", "is_published": True, "start_at": None, "end_at": iso(-1)})
    fake_supabase.add_row("events", {"title": "no-start-open", "slug": "b", "is_published": True, "start_at": None, "end_at": None})

    def status(name):
        return titles(client.get("/api/v1/events", params={"status": name}, headers=admin.headers))

    assert status("ended") == ["no-start-past"]
    assert status("ongoing") == ["no-start-open"]
    assert status("upcoming") == []
