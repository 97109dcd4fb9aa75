from datetime import timedelta

import pytest

from app.core.content_status import utcnow
from app.modules.activity import service as activity_service
from tests.fakes import FakeAPIError


def ago(days=0, hours=0):
    return (utcnow() - timedelta(days=days, hours=hours)).isoformat()


def add_log(fake, action, module, days=0, user_id=None, name=None):
    return fake.add_row("admin_activity_logs", {
        "user_id": user_id, "action": action, "module": module,
        "resource_type": module.rstrip("s"), "resource_name": name, "created_at": ago(days),
        "metadata": {},
    })


@pytest.fixture
def mall_content(fake_supabase):
    fake_supabase.add_row("events", {"title": "Draft", "is_published": False, "start_at": ago(1)})
    fake_supabase.add_row("events", {"title": "Soon", "is_published": True, "is_featured": True, "start_at": ago(-3)})
    fake_supabase.add_row("events", {"title": "Now", "is_published": True, "start_at": ago(1), "end_at": ago(-1)})
    fake_supabase.add_row("events", {"title": "Past", "is_published": True, "start_at": ago(5), "end_at": ago(2)})
    fake_supabase.add_row("tenants", {"name": "A", "is_active": True, "is_featured": True})
    fake_supabase.add_row("tenants", {"name": "B", "is_active": False})
    fake_supabase.add_row("posts", {"title": "P1", "is_published": True})
    fake_supabase.add_row("posts", {"title": "P2", "is_published": False, "is_featured": True})
    fake_supabase.add_row("promotions", {"title": "Live", "status": "published", "start_date": ago(2), "end_date": ago(-2)})
    fake_supabase.add_row("promotions", {"title": "Staged", "status": "staging"})
    fake_supabase.add_row("promotions", {"title": "Gone", "status": "expired", "start_date": ago(9), "end_date": ago(3)})
    fake_supabase.add_row("contacts", {"name": "Visitor", "is_read": False})
    fake_supabase.add_row("contacts", {"name": "Visitor 2", "is_read": None})
    fake_supabase.add_row("contacts", {"name": "Visitor 3", "is_read": True})
    fake_supabase.add_row("vip_tiers", {"name": "Gold", "is_active": True})
    fake_supabase.add_row("whats_on", {"content_type": "event", "reference_id": "x", "is_active": True})
    fake_supabase.add_row("whats_on", {"content_type": "event", "reference_id": "y", "is_active": False})
    fake_supabase.add_row("whats_on", {"content_type": "promotion", "reference_id": "z", "is_active": True})


def test_activity_logs_are_listed_with_users(client, fake_supabase, make_admin):
    auditor = make_admin("activity_logs.view", "events.view", "events.create")
    client.post("/api/v1/events", json={"title": "Food Fest", "start_at": ago(-1)}, headers=auditor.headers)
    add_log(fake_supabase, "update", "tenants", days=1, name="Uniqlo")

    r = client.get("/api/v1/activity", headers=auditor.headers)
    assert r.status_code == 200
    body = r.json()
    assert body["total"] == 2
    newest = body["data"][0]
    assert newest["module"] == "events"
    assert newest["user"]["email"] == auditor.email

    assert [log["module"] for log in client.get("/api/v1/activity", params={"module": "tenants"}, headers=auditor.headers).json()["data"]] == ["tenants"]
    assert client.get("/api/v1/activity", params={"module": "all"}, headers=auditor.headers).json()["total"] == 2
    assert client.get("/api/v1/activity", params={"search": "uniq"}, headers=auditor.headers).json()["total"] == 1
    assert client.get("/api/v1/activity", params={"user_id": auditor.id}, headers=auditor.headers).json()["total"] == 1

    r = client.get(f"/api/v1/activity/{newest['id']}", headers=auditor.headers)
    assert r.json()["resource_name"] == "Food Fest"
    assert client.get("/api/v1/activity/unknown", headers=auditor.headers).status_code == 404


def test_activity_logs_require_permission(client, make_admin):
    staff = make_admin("dashboard.view")
    assert client.get("/api/v1/activity", headers=staff.headers).status_code == 403


def test_failed_audit_write_does_not_fail_request(client, fake_supabase, make_admin):
    admin = make_admin("events.view", "events.create")
    fake_supabase.failures["admin_activity_logs"] = FakeAPIError("permission denied", code="42501")
    r = client.post("/api/v1/events", json={"title": "Still Saved", "start_at": ago(-1)}, headers=admin.headers)
    assert r.status_code == 201
    assert len(fake_supabase.rows("events")) == 1


def test_dashboard_stats(client, make_admin, mall_content):
    staff = make_admin("dashboard.view")
    r = client.get("/api/v1/analytics/dashboard", headers=staff.headers)
    assert r.status_code == 200
    assert r.json() == {
        "total_events": 4, "published_events": 3, "upcoming_events": 1,
        "total_tenants": 2, "active_tenants": 1, "featured_tenants": 1,
        "total_posts": 2, "published_posts": 1,
        "total_promotions": 3, "active_promotions": 1,
        "total_contacts": 3, "unread_contacts": 2,
        "total_vip_tiers": 1, "active_vip_tiers": 1,
    }


def test_dashboard_access(client, make_admin):
    assert client.get("/api/v1/analytics/dashboard", headers=make_admin("analytics.view").headers).status_code == 200
    assert client.get("/api/v1/analytics/dashboard", headers=make_admin("events.view").headers).status_code == 403


def test_content_overview(client, make_admin, mall_content):
    staff = make_admin("analytics.view")
    rows = {row["content_type"]: row for row in client.get("/api/v1/analytics/content-overview", headers=staff.headers).json()}
    assert list(rows) == ["Events", "Tenants", "Blog Posts", "Promotions"]

    events = rows["Events"]
    assert (events["total_count"], events["published_count"], events["featured_count"]) == (4, 3, 1)
    assert (events["upcoming_count"], events["ongoing_count"], events["ended_count"]) == (1, 1, 1)
    assert events["in_whats_on_count"] == 1

    promotions = rows["Promotions"]
    assert (promotions["published_count"], promotions["ongoing_count"]) == (1, 1)
    assert promotions["ended_count"] == 0
    assert promotions["in_whats_on_count"] == 1

    assert rows["Blog Posts"]["featured_count"] == 1
    assert rows["Tenants"]["published_count"] == 1


def test_activity_by_day_and_module(client, fake_supabase, make_admin):
    staff = make_admin("dashboard.view")
    add_log(fake_supabase, "create", "events")
    add_log(fake_supabase, "update", "events", days=2)
    add_log(fake_supabase, "delete", "tenants", days=10)

    r = client.get("/api/v1/analytics/activity-by-day", params={"days": 3}, headers=staff.headers)
    assert [day["count"] for day in r.json()] == [1, 0, 1]
    assert r.json()[-1]["date"] == utcnow().date().isoformat()

    assert client.get("/api/v1/analytics/activity-by-day", params={"days": 0}, headers=staff.headers).status_code == 422

    r = client.get("/api/v1/analytics/activity-by-module", headers=staff.headers)
    assert r.json() == [{"module": "events", "count": 2}, {"module": "tenants", "count": 1}]


def test_recent_activity(client, fake_supabase, make_admin):
    staff = make_admin("dashboard.view")
    add_log(fake_supabase, "create", "events", days=1, name="Older")
    add_log(fake_supabase, "update", "posts", name="Newer")
    add_log(fake_supabase, "delete", "tenants", days=3)

    r = client.get("/api/v1/analytics/recent", params={"limit": 2}, headers=staff.headers)
    assert [(a["activity_title"], a["activity_type"]) for a in r.json()] == [("Newer", "update"), ("Older", "create")]


def test_summary_degrades_optional_sections(client, fake_supabase, make_admin, mall_content):
    staff = make_admin("dashboard.view")
    add_log(fake_supabase, "create", "events")

    r = client.get("/api/v1/analytics/summary", headers=staff.headers)
    assert r.status_code == 200
    body = r.json()
    assert len(body["content_overview"]) == 4
    assert len(body["activity_by_day"]) == 14
    assert body["recent_activity"][0]["activity_subject"] == "events"

    fake_supabase.failures["whats_on"] = FakeAPIError("relation does not exist")
    r = client.get("/api/v1/analytics/summary", headers=staff.headers)
    assert r.status_code == 200
    assert r.json()["content_overview"] == []
    assert r.json()["stats"]["total_events"] == 4

    fake_supabase.failures["events"] = FakeAPIError("timeout")
    assert client.get("/api/v1/analytics/summary", headers=staff.headers).status_code == 500


def test_admin_user_options(client, make_admin):
    auditor = make_admin("activity_logs.view", email="zed@grandmall.com")
    make_admin(email="amy@grandmall.com")
    r = client.get("/api/v1/analytics/admin-users", headers=auditor.headers)
    assert [u["email"] for u in r.json()] == ["amy@grandmall.com", "zed@grandmall.com"]


def test_analytics_are_not_truncated_by_row_cap(client, fake_supabase, make_admin, monkeypatch):
    staff = make_admin("dashboard.view")
    for i in range(5):
        fake_supabase.add_row("events", {"title": f"E{i}", "is_published": True, "start_at": ago(1), "end_at": ago(-1)})
        add_log(fake_supabase, "create", "events")
    add_log(fake_supabase, "update", "tenants", days=1)
    monkeypatch.setattr(activity_service, "SCAN_PAGE_SIZE", 2)
    fake_supabase.max_rows = 2

    stats = client.get("/api/v1/analytics/dashboard", headers=staff.headers).json()
    assert (stats["total_events"], stats["published_events"]) == (5, 5)

    events = next(row for row in client.get("/api/v1/analytics/content-overview", headers=staff.headers).json()
                  if row["content_type"] == "Events")
    assert events["ongoing_count"] == 5

    by_day = client.get("/api/v1/analytics/activity-by-day", params={"days": 2}, headers=staff.headers).json()
    assert [day["count"] for day in by_day] == [1, 5]

    by_module = client.get("/api/v1/analytics/activity-by-module", headers=staff.headers).json()
    assert by_module == [{"module": "events", "count": 5}, {"module": "tenants", "count": 1}]
