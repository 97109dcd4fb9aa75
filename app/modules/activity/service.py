import asyncio
import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional
from zoneinfo import ZoneInfo

from fastapi import HTTPException
from supabase import Client

from app.config import settings
from app.core.content_status import (
    ContentBucket,
    activity_by_day,
    activity_by_module,
    apply_bucket_filter,
    utcnow,
    window_start,
)
from app.core.errors import handle_supabase_error, not_found
from app.core.pagination import PaginatedResponse, build_page, page_range, search_filter
from app.modules.activity.schemas import (
    ActivityLogResponse, AdminUserOption, AnalyticsSummary, ContentStatsOverview,
    DashboardStats, DayCount, ModuleCount, RecentActivity
)

logger = logging.getLogger(__name__)

# PostgREST default max-rows
SCAN_PAGE_SIZE = 1000


def _published(query):
    return query.eq("is_published", True)


def _published_promotion(query):
    return query.eq("status", "published")


class ActivityService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def log_activity(
        self,
        user_id: Optional[str],
        action: str,
        module: str,
        resource_type: Optional[str] = None,
        resource_id: Optional[str] = None,
        resource_name: Optional[str] = None,
        old_values: Optional[Dict[str, Any]] = None,
        new_values: Optional[Dict[str, Any]] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Record an admin action. Never raises: a failed audit write must not fail the request."""
        try:
            self.supabase.table("admin_activity_logs").insert({
                "user_id": user_id,
                "action": action,
                "module": module,
                "resource_type": resource_type,
                "resource_id": resource_id,
                "resource_name": resource_name,
                "old_values": old_values,
                "new_values": new_values,
                "metadata": metadata or {},
            }).execute()
        except Exception as e:
            logger.error(f"Failed to log activity {module}.{action} for {resource_id}: {e}")

    def _attach_users(self, rows: List[dict]) -> List[ActivityLogResponse]:
        user_ids = list({r["user_id"] for r in rows if r.get("user_id")})
        users: Dict[str, dict] = {}
        if user_ids:
            result = self.supabase.table("admin_users")\
                .select("id, full_name, email, avatar_url")\
                .in_("id", user_ids)\
                .execute()
            users = {u["id"]: u for u in result.data or []}
        return [ActivityLogResponse(**row, user=users.get(row.get("user_id"))) for row in rows]

    def list_activity_logs(
        self,
        search: Optional[str] = None,
        action: Optional[str] = None,
        module: Optional[str] = None,
        user_id: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        page: int = 1,
        per_page: int = 20,
    ) -> PaginatedResponse:
        try:
            query = self.supabase.table("admin_activity_logs").select("*", count="exact")
            if search:
                query = query.or_(search_filter(["resource_name", "action", "module"], search))
            if action and action != "all":
                query = query.eq("action", action)
            if module and module != "all":
                query = query.eq("module", module)
            if user_id:
                query = query.eq("user_id", user_id)
            if start_date:
                query = query.gte("created_at", start_date)
            if end_date:
                query = query.lte("created_at", end_date)

            start, end = page_range(page, per_page)
            result = query.order("created_at", desc=True).range(start, end).execute()
            return build_page(self._attach_users(result.data or []), result.count, page, per_page)
        except HTTPException:
            raise
        except Exception as e:
            raise handle_supabase_error(e, "list activity logs")

    def get_activity_log(self, log_id: str) -> ActivityLogResponse:
        try:
            result = self.supabase.table("admin_activity_logs")\
                .select("*")\
                .eq("id", log_id)\
                .limit(1)\
                .execute()
            if not result.data:
                raise not_found("Activity log")
            return self._attach_users(result.data)[0]
        except HTTPException:
            raise
        except Exception as e:
            raise handle_supabase_error(e, "get activity log")


class AnalyticsService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.tz = ZoneInfo(settings.timezone)

    def _count(self, table: str, narrow: Optional[Callable] = None) -> int:
        """Exact row count without fetching rows"""
        query = self.supabase.table(table).select("id", count="exact", head=True)
        if narrow is not None:
            query = narrow(query)
        return query.execute().count or 0

    def _all_rows(self, build_query: Callable) -> List[dict]:
        """Page through a query so PostgREST's max-rows cap cannot truncate it"""
        rows: List[dict] = []
        start = 0
        while True:
            batch = build_query().range(start, start + SCAN_PAGE_SIZE - 1).execute().data or []
            rows.extend(batch)
            if len(batch) < SCAN_PAGE_SIZE:
                return rows
            start += SCAN_PAGE_SIZE

    def _bucket_count(self, table: str, published: Callable, bucket: ContentBucket, now: datetime,
                      start_key: str = "start_at", end_key: str = "end_at") -> int:
        return self._count(table, lambda q: apply_bucket_filter(published(q), bucket, now, start_key, end_key))

    def get_dashboard_stats(self, now: Optional[datetime] = None) -> DashboardStats:
        """Headline counts for the dashboard cards"""
        now = now or utcnow()
        try:
            return DashboardStats(
                total_events=self._count("events"),
                published_events=self._count("events", _published),
                upcoming_events=self._bucket_count("events", _published, ContentBucket.UPCOMING, now),
                total_tenants=self._count("tenants"),
                active_tenants=self._count("tenants", lambda q: q.eq("is_active", True)),
                featured_tenants=self._count("tenants", lambda q: q.eq("is_featured", True)),
                total_posts=self._count("posts"),
                published_posts=self._count("posts", lambda q: q.eq("is_published", True)),
                total_promotions=self._count("promotions"),
                active_promotions=self._count("promotions", lambda q: q.eq("status", "published")),
                total_contacts=self._count("contacts"),
                unread_contacts=self._count("contacts", lambda q: q.or_("is_read.is.null,is_read.eq.false")),
                total_vip_tiers=self._count("vip_tiers"),
                active_vip_tiers=self._count("vip_tiers", lambda q: q.eq("is_active", True)),
            )
        except Exception as e:
            raise handle_supabase_error(e, "dashboard stats")

    def get_content_overview(self, now: Optional[datetime] = None) -> List[ContentStatsOverview]:
        """Per content type totals bucketed relative to now"""
        now = now or utcnow()
        try:
            def in_whats_on(content_type: str) -> int:
                return self._count("whats_on", lambda q: q.eq("is_active", True).eq("content_type", content_type))

            def promotion_bucket(bucket: ContentBucket) -> int:
                return self._bucket_count(
                    "promotions", _published_promotion, bucket, now,
                    start_key="start_date", end_key="end_date",
                )

            return [
                ContentStatsOverview(
                    content_type="Events",
                    total_count=self._count("events"),
                    published_count=self._count("events", _published),
                    featured_count=self._count("events", lambda q: q.eq("is_featured", True)),
                    upcoming_count=self._bucket_count("events", _published, ContentBucket.UPCOMING, now),
                    ongoing_count=self._bucket_count("events", _published, ContentBucket.ONGOING, now),
                    ended_count=self._bucket_count("events", _published, ContentBucket.ENDED, now),
                    in_whats_on_count=in_whats_on("event"),
                ),
                ContentStatsOverview(
                    content_type="Tenants",
                    total_count=self._count("tenants"),
                    published_count=self._count("tenants", lambda q: q.eq("is_active", True)),
                    featured_count=self._count("tenants", lambda q: q.eq("is_featured", True)),
                    in_whats_on_count=in_whats_on("tenant"),
                ),
                ContentStatsOverview(
                    content_type="Blog Posts",
                    total_count=self._count("posts"),
                    published_count=self._count("posts", lambda q: q.eq("is_published", True)),
                    featured_count=self._count("posts", lambda q: q.eq("is_featured", True)),
                    in_whats_on_count=in_whats_on("post"),
                ),
                ContentStatsOverview(
                    content_type="Promotions",
                    total_count=self._count("promotions"),
                    published_count=self._count("promotions", _published_promotion),
                    upcoming_count=promotion_bucket(ContentBucket.UPCOMING),
                    ongoing_count=promotion_bucket(ContentBucket.ONGOING),
                    ended_count=promotion_bucket(ContentBucket.ENDED),
                    in_whats_on_count=in_whats_on("promotion"),
                ),
            ]
        except Exception as e:
            raise handle_supabase_error(e, "content overview")

    def get_recent_activity(self, limit: int = 10) -> List[RecentActivity]:
        try:
            result = self.supabase.table("admin_activity_logs")\
                .select("id, action, module, resource_type, resource_name, created_at")\
                .order("created_at", desc=True)\
                .limit(limit)\
                .execute()
            return [
                RecentActivity(
                    activity_id=row["id"],
                    activity_type=row["action"],
                    activity_title=row.get("resource_name") or row["action"],
                    activity_subject=row["module"],
                    activity_category=row.get("resource_type") or "",
                    activity_date=row["created_at"],
                )
                for row in result.data or []
            ]
        except Exception as e:
            raise handle_supabase_error(e, "recent activity")

    def get_activity_by_day(self, days: Optional[int] = None, now: Optional[datetime] = None) -> List[DayCount]:
        days = days or settings.activity_default_days
        now = now or utcnow()
        try:
            since = window_start(days, now, self.tz).isoformat()
            rows = self._all_rows(
                lambda: self.supabase.table("admin_activity_logs")
                .select("id, created_at")
                .gte("created_at", since)
                .order("created_at")
                .order("id")
            )
            histogram = activity_by_day((r["created_at"] for r in rows), days, now, self.tz)
            return [DayCount(**day) for day in histogram]
        except Exception as e:
            raise handle_supabase_error(e, "activity by day")

    def get_activity_by_module(self) -> List[ModuleCount]:
        try:
            rows = self._all_rows(
                lambda: self.supabase.table("admin_activity_logs").select("id, module").order("id")
            )
            return [ModuleCount(**entry) for entry in activity_by_module(r.get("module") for r in rows)]
        except Exception as e:
            raise handle_supabase_error(e, "activity by module")

    def list_admin_user_options(self) -> List[AdminUserOption]:
        try:
            result = self.supabase.table("admin_users")\
                .select("id, full_name, email")\
                .order("full_name")\
                .execute()
            return [AdminUserOption(**row) for row in result.data or []]
        except Exception as e:
            raise handle_supabase_error(e, "admin user options")

    async def get_summary(self) -> AnalyticsSummary:
        """Fan out the dashboard queries concurrently; only the stats are mandatory"""
        stats, overview, recent, by_day, by_module = await asyncio.gather(
            asyncio.to_thread(self.get_dashboard_stats),
            asyncio.to_thread(self.get_content_overview),
            asyncio.to_thread(self.get_recent_activity, 5),
            asyncio.to_thread(self.get_activity_by_day, 14),
            asyncio.to_thread(self.get_activity_by_module),
            return_exceptions=True,
        )
        if isinstance(stats, BaseException):
            raise handle_supabase_error(stats, "analytics summary")

        def or_empty(value, name: str) -> list:
            if isinstance(value, BaseException):
                logger.warning(f"Analytics summary: {name} unavailable: {value}")
                return []
            return value

        return AnalyticsSummary(
            stats=stats,
            content_overview=or_empty(overview, "content overview"),
            recent_activity=or_empty(recent, "recent activity"),
            activity_by_day=or_empty(by_day, "activity by day"),
            activity_by_module=or_empty(by_module, "activity by module"),
        )
