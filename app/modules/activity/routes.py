from fastapi import APIRouter, Depends, Query
from app.database.supabase_client import get_supabase
from app.modules.activity.schemas import (
    ActivityLogResponse, AdminUserOption, AnalyticsSummary, ContentStatsOverview,
    DashboardStats, DayCount, ModuleCount, RecentActivity
)
from app.modules.activity.service import ActivityService, AnalyticsService
from app.modules.auth.schemas import AuthUser
from app.core.dependencies import require_any_permission, require_permission
from app.core.pagination import PaginatedResponse, clamp_per_page
from supabase import Client
from typing import List, Optional

router = APIRouter(tags=["activity"])

dashboard_access = require_any_permission(("dashboard", "view"), ("analytics", "view"))


def get_activity_service(supabase: Client = Depends(get_supabase)) -> ActivityService:
    return ActivityService(supabase)


def get_analytics_service(supabase: Client = Depends(get_supabase)) -> AnalyticsService:
    return AnalyticsService(supabase)


@router.get("/activity", response_model=PaginatedResponse[ActivityLogResponse])
async def list_activity_logs(
    search: Optional[str] = None,
    action: Optional[str] = None,
    module: Optional[str] = None,
    user_id: Optional[str] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1),
    user: AuthUser = Depends(require_permission("activity_logs", "view")),
    service: ActivityService = Depends(get_activity_service)
):
    """Filterable, paginated audit trail, newest first"""
    return service.list_activity_logs(
        search=search, action=action, module=module, user_id=user_id,
        start_date=start_date, end_date=end_date,
        page=page, per_page=clamp_per_page(per_page),
    )


@router.get("/activity/{log_id}", response_model=ActivityLogResponse)
async def get_activity_log(
    log_id: str,
    user: AuthUser = Depends(require_permission("activity_logs", "view")),
    service: ActivityService = Depends(get_activity_service)
):
    return service.get_activity_log(log_id)


@router.get("/analytics/dashboard", response_model=DashboardStats)
async def get_dashboard_stats(
    user: AuthUser = Depends(dashboard_access),
    service: AnalyticsService = Depends(get_analytics_service)
):
    return service.get_dashboard_stats()


@router.get("/analytics/content-overview", response_model=List[ContentStatsOverview])
async def get_content_overview(
    user: AuthUser = Depends(dashboard_access),
    service: AnalyticsService = Depends(get_analytics_service)
):
    return service.get_content_overview()


@router.get("/analytics/activity-by-day", response_model=List[DayCount])
async def get_activity_by_day(
    days: Optional[int] = Query(None, ge=1, le=366),
    user: AuthUser = Depends(dashboard_access),
    service: AnalyticsService = Depends(get_analytics_service)
):
    """One entry per calendar day ending today, zero-filled"""
    return service.get_activity_by_day(days)


@router.get("/analytics/activity-by-module", response_model=List[ModuleCount])
async def get_activity_by_module(
    user: AuthUser = Depends(dashboard_access),
    service: AnalyticsService = Depends(get_analytics_service)
):
    return service.get_activity_by_module()


@router.get("/analytics/recent", response_model=List[RecentActivity])
async def get_recent_activity(
    limit: int = Query(10, ge=1, le=100),
    user: AuthUser = Depends(dashboard_access),
    service: AnalyticsService = Depends(get_analytics_service)
):
    return service.get_recent_activity(limit)


@router.get("/analytics/summary", response_model=AnalyticsSummary)
async def get_analytics_summary(
    user: AuthUser = Depends(dashboard_access),
    service: AnalyticsService = Depends(get_analytics_service)
):
    """Everything the dashboard page needs in one round trip"""
    return await service.get_summary()


@router.get("/analytics/admin-users", response_model=List[AdminUserOption])
async def list_admin_user_options(
    user: AuthUser = Depends(require_permission("activity_logs", "view")),
    service: AnalyticsService = Depends(get_analytics_service)
):
    """Admin names for the activity log user filter"""
    return service.list_admin_user_options()
