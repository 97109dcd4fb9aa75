from fastapi import APIRouter, Depends, Query
from app.database.supabase_client import get_supabase
from app.modules.events.schemas import EventCreate, EventUpdate, EventResponse
from app.modules.events.service import EventService
from app.modules.auth.schemas import AuthUser
from app.core.dependencies import require_permission
from app.core.pagination import PaginatedResponse, clamp_per_page
from supabase import Client
from typing import List, Optional

router = APIRouter(prefix="/events", tags=["events"])


def get_event_service(supabase: Client = Depends(get_supabase)) -> EventService:
    return EventService(supabase)


@router.get("", response_model=PaginatedResponse[EventResponse])
async def list_events(
    search: Optional[str] = None,
    status: Optional[str] = Query(None, description="all | draft | published | upcoming | ongoing | ended"),
    featured: Optional[bool] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    tags: Optional[List[str]] = Query(None),
    sort_by: Optional[str] = None,
    sort_order: Optional[str] = None,
    page: int = Query(1, ge=1),
    per_page: int = Query(10, ge=1),
    user: AuthUser = Depends(require_permission("events", "view")),
    service: EventService = Depends(get_event_service)
):
    return service.list_events(
        search=search, status=status, featured=featured,
        start_date=start_date, end_date=end_date, tags=tags,
        sort_by=sort_by, sort_order=sort_order,
        page=page, per_page=clamp_per_page(per_page),
    )


@router.get("/tags", response_model=List[str])
async def list_event_tags(
    user: AuthUser = Depends(require_permission("events", "view")),
    service: EventService = Depends(get_event_service)
):
    return service.list_tags()


@router.get("/slug/{slug}", response_model=EventResponse)
async def get_event_by_slug(
    slug: str,
    user: AuthUser = Depends(require_permission("events", "view")),
    service: EventService = Depends(get_event_service)
):
    return service.get_event_by_slug(slug)


@router.post("", response_model=EventResponse, status_code=201)
async def create_event(
    event_data: EventCreate,
    user: AuthUser = Depends(require_permission("events", "create")),
    service: EventService = Depends(get_event_service)
):
    return service.create_event(event_data, actor_id=user.id)


@router.get("/{event_id}", response_model=EventResponse)
async def get_event(
    event_id: str,
    user: AuthUser = Depends(require_permission("events", "view")),
    service: EventService = Depends(get_event_service)
):
    return service.get_event(event_id)


@router.put("/{event_id}", response_model=EventResponse)
async def update_event(
    event_id: str,
    event_data: EventUpdate,
    user: AuthUser = Depends(require_permission("events", "edit")),
    service: EventService = Depends(get_event_service)
):
    return service.update_event(event_id, event_data, actor_id=user.id)


@router.delete("/{event_id}", status_code=204)
async def delete_event(
    event_id: str,
    user: AuthUser = Depends(require_permission("events", "delete")),
    service: EventService = Depends(get_event_service)
):
    service.delete_event(event_id, actor_id=user.id)
    return None


@router.post("/{event_id}/toggle-publish", response_model=EventResponse)
async def toggle_event_publish(
    event_id: str,
    user: AuthUser = Depends(require_permission("events", "publish")),
    service: EventService = Depends(get_event_service)
):
    return service.toggle_publish(event_id, actor_id=user.id)


@router.post("/{event_id}/toggle-featured", response_model=EventResponse)
async def toggle_event_featured(
    event_id: str,
    user: AuthUser = Depends(require_permission("events", "edit")),
    service: EventService = Depends(get_event_service)
):
    return service.toggle_featured(event_id, actor_id=user.id)
