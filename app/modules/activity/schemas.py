from pydantic import BaseModel
from typing import Optional, List, Dict, Any
from datetime import datetime


class ActivityUser(BaseModel):
    id: str
    full_name: Optional[str] = None
    email: Optional[str] = None
    avatar_url: Optional[str] = None


class ActivityLogResponse(BaseModel):
    id: str
    user_id: Optional[str] = None
    action: str
    module: str
    resource_type: Optional[str] = None
    resource_id: Optional[str] = None
    resource_name: Optional[str] = None
    old_values: Optional[Dict[str, Any]] = None
    new_values: Optional[Dict[str, Any]] = None
    metadata: Optional[Dict[str, Any]] = None
    created_at: datetime
    user: Optional[ActivityUser] = None

    class Config:
        from_attributes = True


class DashboardStats(BaseModel):
    total_events: int = 0
    published_events: int = 0
    upcoming_events: int = 0
    total_tenants: int = 0
    active_tenants: int = 0
    featured_tenants: int = 0
    total_posts: int = 0
    published_posts: int = 0
    total_promotions: int = 0
    active_promotions: int = 0
    total_contacts: int = 0
    unread_contacts: int = 0
    total_vip_tiers: int = 0
    active_vip_tiers: int = 0


class ContentStatsOverview(BaseModel):
    content_type: str
    total_count: int = 0
    published_count: int = 0
    featured_count: int = 0
    upcoming_count: int = 0
    ongoing_count: int = 0
    ended_count: int = 0
    in_whats_on_count: int = 0


class DayCount(BaseModel):
    date: str
    count: int


class ModuleCount(BaseModel):
    module: str
    count: int


class RecentActivity(BaseModel):
    activity_id: str
    activity_type: str
    activity_title: str
    activity_subject: str
    activity_category: str
    activity_date: datetime


class AnalyticsSummary(BaseModel):
    stats: DashboardStats
    content_overview: List[ContentStatsOverview]
    recent_activity: List[RecentActivity]
    activity_by_day: List[DayCount]
    activity_by_module: List[ModuleCount]


class AdminUserOption(BaseModel):
    id: str
    full_name: Optional[str] = None
    email: str
