import logging
from datetime import datetime, timedelta
from zoneinfo import ZoneInfo
from supabase import Client
from app.modules.contacts.schemas import (
    ENQUIRY_TYPES, AdminReply, ContactDetailResponse, ContactResponse, ContactStats
)
from app.modules.activity.service import ActivityService
from app.config import settings
from app.core.content_status import utcnow, window_start
from app.core.errors import handle_supabase_error, not_found
from app.core.pagination import PaginatedResponse, build_page, page_range, search_filter, sort_params
from typing import List, Optional
from fastapi import HTTPException

logger = logging.getLogger(__name__)

CONTACT_SORT_COLUMNS = ["submitted_date", "created_at", "full_name", "email", "enquiry_type"]
CONTACT_STATUSES = ["all", "read", "unread"]
UNREAD_FILTER = "is_read.is.null,is_read.eq.false"


def _to_response(row: dict) -> ContactResponse:
    return ContactResponse(**{**row, "is_read": bool(row.get("is_read"))})


class ContactService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.activity = ActivityService(supabase)

    def _get_row(self, contact_id: str) -> dict:
        result = self.supabase.table("contacts")\
            .select("*")\
            .eq("id", contact_id)\
            .limit(1)\
            .execute()
        if not result.data:
            raise not_found("Contact")
        return result.data[0]

    def _count(self, narrow=None) -> int:
        query = self.supabase.table("contacts").select("id", count="exact", head=True)
        if narrow is not None:
            query = narrow(query)
        return query.execute().count or 0

    def list_contacts(
        self,
        search: Optional[str] = None,
        enquiry_type: Optional[str] = None,
        status: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        sort_by: Optional[str] = None,
        sort_order: Optional[str] = None,
        page: int = 1,
        per_page: int = 10,
    ) -> PaginatedResponse:
        if status and status not in CONTACT_STATUSES:
            raise HTTPException(status_code=422, detail=f"Unknown status {status}")
        try:
            query = self.supabase.table("contacts").select("*", count="exact")
            if search:
                query = query.or_(search_filter(["full_name", "email", "enquiry_details"], search))
            if enquiry_type and enquiry_type != "all":
                query = query.eq("enquiry_type", enquiry_type)
            if status == "read":
                query = query.eq("is_read", True)
            elif status == "unread":
                query = query.or_(UNREAD_FILTER)
            if start_date:
                query = query.gte("submitted_date", start_date)
            if end_date:
                query = query.lte("submitted_date", end_date)

            column, desc = sort_params(sort_by, sort_order, CONTACT_SORT_COLUMNS, default="submitted_date")
            start, end = page_range(page, per_page)
            result = query.order(column, desc=desc).range(start, end).execute()
            contacts = [_to_response(row) for row in result.data or []]
            return build_page(contacts, result.count, page, per_page)
        except HTTPException:
            raise
        except Exception as e:
            raise handle_supabase_error(e, "list contacts")

    def get_contact(self, contact_id: str) -> ContactDetailResponse:
        """Contact with the latest admin reply, if any"""
        try:
            row = self._get_row(contact_id)
            replies = self.supabase.table("contact_responses")\
                .select("*")\
                .eq("contact_id", contact_id)\
                .order("responded_at", desc=True)\
                .limit(1)\
                .execute()
            reply = None
            if replies.data:
                latest = replies.data[0]
                admin_name = None
                if latest.get("responded_by"):
                    admin = self.supabase.table("admin_users")\
                        .select("full_name")\
                        .eq("id", latest["responded_by"])\
                        .limit(1)\
                        .execute()
                    admin_name = admin.data[0].get("full_name") if admin.data else None
                reply = AdminReply(**latest, admin_name=admin_name)
            return ContactDetailResponse(**_to_response(row).model_dump(), admin_response=reply)
        except HTTPException:
            raise
        except Exception as e:
            raise handle_supabase_error(e, "get contact")

    def set_read(self, contact_id: str, is_read: bool, actor_id: Optional[str] = None) -> ContactResponse:
        try:
            current = self._get_row(contact_id)
            result = self.supabase.table("contacts")\
                .update({"is_read": is_read})\
                .eq("id", contact_id)\
                .execute()
            if not result.data:
                raise not_found("Contact")
            self.activity.log_activity(
                actor_id, "read" if is_read else "unread", "contacts",
                resource_type="contact", resource_id=contact_id, resource_name=current.get("full_name")
            )
            return _to_response(result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise handle_supabase_error(e, "mark contact")

    def mark_many_read(self, contact_ids: List[str], actor_id: Optional[str] = None) -> int:
        try:
            result = self.supabase.table("contacts")\
                .update({"is_read": True})\
                .in_("id", contact_ids)\
                .execute()
            count = len(result.data or [])
            self.activity.log_activity(
                actor_id, "bulk_read", "contacts",
                resource_type="contact", resource_name=f"{count} contacts",
                metadata={"ids": contact_ids}
            )
            return count
        except Exception as e:
            raise handle_supabase_error(e, "mark contacts read")

    def delete_contact(self, contact_id: str, actor_id: Optional[str] = None) -> bool:
        try:
            current = self._get_row(contact_id)
            self.supabase.table("contact_responses")\
                .delete()\
                .eq("contact_id", contact_id)\
                .execute()
            result = self.supabase.table("contacts")\
                .delete()\
                .eq("id", contact_id)\
                .execute()
            self.activity.log_activity(
                actor_id, "delete", "contacts",
                resource_type="contact", resource_id=contact_id, resource_name=current.get("full_name")
            )
            return bool(result.data)
        except HTTPException:
            raise
        except Exception as e:
            raise handle_supabase_error(e, "delete contact")

    def delete_many(self, contact_ids: List[str], actor_id: Optional[str] = None) -> int:
        try:
            self.supabase.table("contact_responses")\
                .delete()\
                .in_("contact_id", contact_ids)\
                .execute()
            result = self.supabase.table("contacts")\
                .delete()\
                .in_("id", contact_ids)\
                .execute()
            count = len(result.data or [])
            self.activity.log_activity(
                actor_id, "bulk_delete", "contacts",
                resource_type="contact", resource_name=f"{count} contacts",
                metadata={"ids": contact_ids}
            )
            return count
        except Exception as e:
            raise handle_supabase_error(e, "delete contacts")

    def get_stats(self, now: Optional[datetime] = None) -> ContactStats:
        """Inbox counters; 'today' starts at local midnight"""
        now = now or utcnow()
        try:
            today = window_start(1, now, ZoneInfo(settings.timezone)).isoformat()
            week_ago = (now - timedelta(days=7)).isoformat()
            return ContactStats(
                total=self._count(),
                unread=self._count(lambda q: q.or_(UNREAD_FILTER)),
                by_type={t: self._count(lambda q, t=t: q.eq("enquiry_type", t)) for t in ENQUIRY_TYPES},
                today_count=self._count(lambda q: q.gte("submitted_date", today)),
                week_count=self._count(lambda q: q.gte("submitted_date", week_ago)),
            )
        except Exception as e:
            raise handle_supabase_error(e, "contact stats")
