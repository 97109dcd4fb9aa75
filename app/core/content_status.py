"""
Date bucketing for published content and activity.

Items carry a published flag and optional start/end timestamps. Relative to a
reference instant ``now`` each item lands in exactly one bucket:

    draft     not published
    upcoming  published, start > now
    ended     published, end < now
    ongoing   everything else (start == now and end == now are ongoing)
"""

from collections import Counter
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional


class ContentBucket(str, Enum):
    DRAFT = "draft"
    UPCOMING = "upcoming"
    ONGOING = "ongoing"
    ENDED = "ended"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 value into an aware datetime; naive values are taken as UTC."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time.min)
    else:
        parsed = datetime.fromisoformat(str(value).strip().replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def classify(published: bool, start: Any, end: Any, now: datetime) -> ContentBucket:
    if not published:
        return ContentBucket.DRAFT
    start_at = parse_timestamp(start)
    end_at = parse_timestamp(end)
    if start_at is not None and start_at > now:
        return ContentBucket.UPCOMING
    if end_at is not None and end_at < now:
        return ContentBucket.ENDED
    return ContentBucket.ONGOING


def apply_bucket_filter(query, bucket: ContentBucket, now: datetime,
                        start_key: str = "start_at", end_key: str = "end_at"):
    """Restrict a PostgREST query to the rows classify() puts in ``bucket``.

    Only the date conditions are added; the caller filters on published state.
    """
    now_iso = now.isoformat()
    started = f"{start_key}.is.null,{start_key}.lte.{now_iso}"
    if bucket == ContentBucket.UPCOMING:
        return query.gt(start_key, now_iso)
    if bucket == ContentBucket.ONGOING:
        return query.or_(started).or_(f"{end_key}.is.null,{end_key}.gte.{now_iso}")
    if bucket == ContentBucket.ENDED:
        return query.or_(started).lt(end_key, now_iso)
    return query


def bucket_counts(
    items: Iterable[Dict[str, Any]],
    now: datetime,
    start_key: str = "start_at",
    end_key: str = "end_at",
    is_published: Optional[Callable[[Dict[str, Any]], bool]] = None,
) -> Dict[str, int]:
    """Count items per bucket. Every bucket is present; "published" excludes drafts."""
    if is_published is None:
        is_published = lambda item: bool(item.get("is_published"))  # noqa: E731
    counts = Counter({bucket.value: 0 for bucket in ContentBucket})
    total = 0
    for item in items:
        total += 1
        bucket = classify(is_published(item), item.get(start_key), item.get(end_key), now)
        counts[bucket.value] += 1
    result = dict(counts)
    result["total"] = total
    result["published"] = total - counts[ContentBucket.DRAFT.value]
    return result


def window_start(days: int, now: datetime, tz: tzinfo = timezone.utc) -> datetime:
    """First instant of the trailing ``days``-day window that ends today (in ``tz``)."""
    today = now.astimezone(tz).date()
    first_day = today - timedelta(days=max(days, 1) - 1)
    return datetime.combine(first_day, time.min, tzinfo=tz)


def activity_by_day(
    timestamps: Iterable[Any],
    days: int,
    now: datetime,
    tz: tzinfo = timezone.utc,
) -> List[Dict[str, Any]]:
    """Daily counts for the ``days`` calendar days ending today, oldest first, zero-filled."""
    if days < 1:
        return []
    today = now.astimezone(tz).date()
    first_day = today - timedelta(days=days - 1)

    counts: Counter = Counter()
    for value in timestamps:
        moment = parse_timestamp(value)
        if moment is None:
            continue
        day = moment.astimezone(tz).date()
        if first_day <= day <= today:
            counts[day] += 1

    return [
        {"date": (first_day + timedelta(days=offset)).isoformat(), "count": counts[first_day + timedelta(days=offset)]}
        for offset in range(days)
    ]


def activity_by_module(modules: Iterable[Optional[str]]) -> List[Dict[str, Any]]:
    counts = Counter(m for m in modules if m)
    return [
        {"module": module, "count": count}
        for module, count in sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))
    ]


def first_published_at(current: Optional[str], publishing: bool, now: datetime) -> Optional[str]:
    """Publication stamp: set on the first publish, then never cleared or overwritten."""
    if current:
        return current
    if publishing:
        return now.isoformat()
    return None
