import logging
from datetime import datetime
from supabase import Client
from app.modules.events.schemas import EventCreate, EventUpdate, EventResponse
from app.modules.activity.service import ActivityService
from app.core.content_status import ContentBucket, apply_bucket_filter, classify, parse_timestamp, utcnow
from app.core.errors import handle_supabase_error, not_found
from app.core.pagination import PaginatedResponse, build_page, page_range, search_filter, sort_params
from app.core.slug import generate_slug, unique_slug
from typing import Any, Dict, List, Optional
from fastapi import HTTPException

logger = logging.getLogger(__name__)

EVENT_SORT_COLUMNS = ["created_at", "updated_at", "title", "start_at", "end_at"]
EVENT_STATUSES = ["all", "draft", "published", "upcoming", "ongoing", "ended"]


def normalize_images(images: Any, title: Optional[str]) -> List[Dict[str, Any]]:
    """Legacy rows store plain URL strings; expand them to image objects"""
    if not isinstance(images, list):
        return []
    normalized = []
    for image in images:
        if isinstance(image, str):
            normalized.append({"url": image, "alt": title or "Event image", "caption": "Event image"})
        elif isinstance(image, dict) and "url" in image:
            normalized.append(image)
    return normalized


class EventService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.activity = ActivityService(supabase)

    def _to_response(self, row: dict, now: Optional[datetime] = None) -> EventResponse:
        now = now or utcnow()
        data = dict(row)
        data["images"] = normalize_images(row.get("images"), row.get("title"))
        data["tags"] = row.get("tags") or []
        data["status"] = classify(row.get("is_published", False), row.get("start_at"), row.get("end_at"), now)
        return EventResponse(**data)

    def _unique_slug(self, source: str, exclude_id: Optional[str] = None) -> str:
        base = generate_slug(source)
        if not base:
            raise HTTPException(status_code=422, detail="Could not derive a slug from the title")
        query = self.supabase.table("events")\
            .select("id, slug")\
            .ilike("slug", f"{base}%")
        if exclude_id:
            query = query.neq("id", exclude_id)
        result = query.execute()
        return unique_slug(base, [r["slug"] for r in result.data or []])

    def _get_row(self, event_id: str) -> dict:
        result = self.supabase.table("events")\
            .select("*")\
            .eq("id", event_id)\
            .limit(1)\
            .execute()
        if not result.data:
            raise not_found("Event")
        return result.data[0]

    def list_events(
        self,
        search: Optional[str] = None,
        status: Optional[str] = None,
        featured: Optional[bool] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        tags: Optional[List[str]] = None,
        sort_by: Optional[str] = None,
        sort_order: Optional[str] = None,
        page: int = 1,
        per_page: int = 10,
        now: Optional[datetime] = None,
    ) -> PaginatedResponse:
        """Paginated events; status buckets follow the same rules as the dashboard counts"""
        now = now or utcnow()
        if status and status not in EVENT_STATUSES:
            raise HTTPException(status_code=422, detail=f"Unknown status {status}")
        try:
            query = self.supabase.table("events").select("*", count="exact")
            if search:
                query = query.or_(search_filter(["title", "summary"], search))

            if status == "draft":
                query = query.eq("is_published", False)
            elif status and status != "all":
                query = query.eq("is_published", True)
                if status != "published":
                    query = apply_bucket_filter(query, ContentBucket(status), now)

            if featured is not None:
                query = query.eq("is_featured", featured)
            if start_date:
                query = query.gte("start_at", start_date)
            if end_date:
                query = query.lte("start_at", end_date)
            if tags:
                query = query.contains("tags", tags)

            column, desc = sort_params(sort_by, sort_order, EVENT_SORT_COLUMNS)
            start, end = page_range(page, per_page)
            result = query.order(column, desc=desc).range(start, end).execute()
            events = [self._to_response(row, now) for row in result.data or []]
            return build_page(events, result.count, page, per_page)
        except HTTPException:
            raise
        except Exception as e:
            raise handle_supabase_error(e, "list events")

    def get_event(self, event_id: str) -> EventResponse:
        try:
            return self._to_response(self._get_row(event_id))
        except HTTPException:
            raise
        except Exception as e:
            raise handle_supabase_error(e, "get event")

    def get_event_by_slug(self, slug: str) -> EventResponse:
        try:
            result = self.supabase.table("events")\
                .select("*")\
                .eq("slug", slug)\
                .limit(1)\
                .execute()
            if not result.data:
                raise not_found("Event")
            return self._to_response(result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise handle_supabase_error(e, "get event")

    def create_event(self, event_data: EventCreate, actor_id: Optional[str] = None) -> EventResponse:
        """Create an event; the slug comes from the title when not given and is made unique"""
        try:
            data = event_data.model_dump(mode="json")
            data["slug"] = self._unique_slug(event_data.slug or event_data.title)
            data["created_by"] = actor_id
            data["metadata"] = {}

            result = self.supabase.table("events").insert(data).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create event")

            event = self._to_response(result.data[0])
            self.activity.log_activity(
                actor_id, "create", "events",
                resource_type="event", resource_id=event.id, resource_name=event.title,
                new_values={"title": event.title, "is_published": event.is_published}
            )
            return event
        except HTTPException:
            raise
        except Exception as e:
            raise handle_supabase_error(e, "create event")

    def update_event(self, event_id: str, event_data: EventUpdate, actor_id: Optional[str] = None) -> EventResponse:
        try:
            current = self._get_row(event_id)
            update_data = event_data.model_dump(mode="json", exclude_unset=True)

            start_at = update_data.get("start_at", current.get("start_at"))
            end_at = update_data.get("end_at", current.get("end_at"))
            if start_at and end_at and parse_timestamp(end_at) < parse_timestamp(start_at):
                raise HTTPException(status_code=422, detail="end_at must not be before start_at")

            if "slug" in update_data and update_data["slug"] != current.get("slug"):
                update_data["slug"] = self._unique_slug(update_data["slug"] or current["title"], exclude_id=event_id)
            update_data["updated_at"] = utcnow().isoformat()

            result = self.supabase.table("events")\
                .update(update_data)\
                .eq("id", event_id)\
                .execute()
            if not result.data:
                raise not_found("Event")

            event = self._to_response(result.data[0])
            self.activity.log_activity(
                actor_id, "update", "events",
                resource_type="event", resource_id=event_id, resource_name=event.title,
                old_values={"title": current.get("title"), "is_published": current.get("is_published")},
                new_values={"title": event.title, "is_published": event.is_published}
            )
            return event
        except HTTPException:
            raise
        except Exception as e:
            raise handle_supabase_error(e, "update event")

    def delete_event(self, event_id: str, actor_id: Optional[str] = None) -> bool:
        try:
            current = self._get_row(event_id)
            result = self.supabase.table("events")\
                .delete()\
                .eq("id", event_id)\
                .execute()
            self.activity.log_activity(
                actor_id, "delete", "events",
                resource_type="event", resource_id=event_id, resource_name=current.get("title")
            )
            return bool(result.data)
        except HTTPException:
            raise
        except Exception as e:
            raise handle_supabase_error(e, "delete event")

    def _toggle(self, event_id: str, field: str, action: str, actor_id: Optional[str]) -> EventResponse:
        try:
            current = self._get_row(event_id)
            value = not current.get(field, False)
            result = self.supabase.table("events")\
                .update({field: value, "updated_at": utcnow().isoformat()})\
                .eq("id", event_id)\
                .execute()
            if not result.data:
                raise not_found("Event")
            self.activity.log_activity(
                actor_id, action, "events",
                resource_type="event", resource_id=event_id, resource_name=current.get("title"),
                old_values={field: not value}, new_values={field: value}
            )
            return self._to_response(result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise handle_supabase_error(e, f"toggle event {field}")

    def toggle_publish(self, event_id: str, actor_id: Optional[str] = None) -> EventResponse:
        return self._toggle(event_id, "is_published", "publish", actor_id)

    def toggle_featured(self, event_id: str, actor_id: Optional[str] = None) -> EventResponse:
        return self._toggle(event_id, "is_featured", "feature", actor_id)

    def list_tags(self) -> List[str]:
        """Distinct tags across all events"""
        try:
            result = self.supabase.table("events").select("tags").execute()
            return sorted({tag for row in result.data or [] for tag in row.get("tags") or []})
        except Exception as e:
            raise handle_supabase_error(e, "list event tags")
