from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

from app.core.content_status import (
    ContentBucket,
    activity_by_day,
    activity_by_module,
    apply_bucket_filter,
    bucket_counts,
    classify,
    first_published_at,
    parse_timestamp,
    window_start,
)
from tests.fakes import FakeSupabase

NOW = datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)


def test_classify_buckets():
    past = NOW - timedelta(days=2)
    future = NOW + timedelta(days=2)
    assert classify(False, past, future, NOW) == ContentBucket.DRAFT
    assert classify(True, future, None, NOW) == ContentBucket.UPCOMING
    assert classify(True, past, NOW - timedelta(hours=1), NOW) == ContentBucket.ENDED
    assert classify(True, past, future, NOW) == ContentBucket.ONGOING


def test_classify_boundaries_are_ongoing():
    assert classify(True, NOW, NOW, NOW) == ContentBucket.ONGOING
    assert classify(True, None, None, NOW) == ContentBucket.ONGOING


def test_classify_accepts_iso_strings():
    assert classify(True, "2026-03-11T00:00:00Z", None, NOW) == ContentBucket.UPCOMING
    assert classify(True, "2026-03-01T00:00:00", "2026-03-02T00:00:00+00:00", NOW) == ContentBucket.ENDED


def test_parse_timestamp():
    assert parse_timestamp(None) is None
    assert parse_timestamp("") is None
    assert parse_timestamp("2026-03-10T12:00:00Z") == NOW
    assert parse_timestamp("2026-03-10T12:00:00").tzinfo is not None


def test_bucket_counts_has_every_bucket():
    items = [
        {"is_published": False},
        {"is_published": True, "start_at": "2026-04-01T00:00:00Z"},
        {"is_published": True, "start_at": "2026-03-01T00:00:00Z", "end_at": "2026-03-05T00:00:00Z"},
    ]
    counts = bucket_counts(items, NOW)
    assert counts == {"draft": 1, "upcoming": 1, "ongoing": 0, "ended": 1, "total": 3, "published": 2}


def test_bucket_counts_with_custom_keys():
    promotions = [
        {"status": "published", "start_date": "2026-03-01T00:00:00Z", "end_date": "2026-03-20T00:00:00Z"},
        {"status": "staging", "start_date": "2026-03-01T00:00:00Z"},
    ]
    counts = bucket_counts(
        promotions, NOW, start_key="start_date", end_key="end_date",
        is_published=lambda p: p["status"] == "published",
    )
    assert counts["ongoing"] == 1
    assert counts["draft"] == 1


def test_bucket_filter_matches_classify():
    fake = FakeSupabase()
    rows = [
        {"start_at": None, "end_at": None},
        {"start_at": None, "end_at": "2026-03-01T00:00:00Z"},
        {"start_at": None, "end_at": "2026-03-20T00:00:00Z"},
        {"start_at": "2026-03-10T12:00:00Z", "end_at": "2026-03-10T12:00:00Z"},
        {"start_at": "2026-03-01T00:00:00Z", "end_at": "2026-03-05T00:00:00Z"},
        {"start_at": "2026-04-01T00:00:00Z", "end_at": None},
        {"start_at": "2026-04-01T00:00:00Z", "end_at": "2026-03-01T00:00:00Z"},
    ]
    for row in rows:
        fake.add_row("events", {"is_published": True, **row})

    expected = bucket_counts(fake.rows("events"), NOW)
    for bucket in (ContentBucket.UPCOMING, ContentBucket.ONGOING, ContentBucket.ENDED):
        result = apply_bucket_filter(fake.table("events").select("id", count="exact"), bucket, NOW).execute()
        assert result.count == expected[bucket.value], bucket


def test_activity_by_day_zero_fills_window():
    timestamps = [
        "2026-03-09T08:00:00Z",
        "2026-03-01T08:00:00Z",  # outside the window
        None,
    ]
    days = activity_by_day(timestamps, 3, NOW)
    assert [d["date"] for d in days] == ["2026-03-08", "2026-03-09", "2026-03-10"]
    assert [d["count"] for d in days] == [0, 1, 0]


def test_activity_by_day_uses_timezone():
    tz = ZoneInfo("Asia/Jakarta")
    # 20:00 UTC on the 9th is already the 10th in Jakarta
    days = activity_by_day(["2026-03-09T20:00:00Z"], 2, NOW, tz)
    assert days == [{"date": "2026-03-09", "count": 0}, {"date": "2026-03-10", "count": 1}]


def test_activity_by_day_empty_window():
    assert activity_by_day(["2026-03-10T00:00:00Z"], 0, NOW) == []


def test_window_start():
    assert window_start(7, NOW) == datetime(2026, 3, 4, tzinfo=timezone.utc)
    assert window_start(0, NOW) == datetime(2026, 3, 10, tzinfo=timezone.utc)


def test_activity_by_module_sorted_by_count():
    modules = ["events", "tenants", "events", None, "auth", "tenants", "events"]
    assert activity_by_module(modules) == [
        {"module": "events", "count": 3},
        {"module": "tenants", "count": 2},
        {"module": "auth", "count": 1},
    ]


def test_first_published_at_is_set_once():
    assert first_published_at(None, False, NOW) is None
    assert first_published_at(None, True, NOW) == NOW.isoformat()
    stamped = "2026-01-01T00:00:00+00:00"
    assert first_published_at(stamped, True, NOW) == stamped
    assert first_published_at(stamped, False, NOW) == stamped
