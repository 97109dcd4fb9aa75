from fastapi import APIRouter, Depends, Query
from app.database.supabase_client import get_supabase
from app.modules.contacts.schemas import (
    BulkContactResult, ContactDetailResponse, ContactIds, ContactResponse, ContactStats
)
from app.modules.contacts.service import ContactService
from app.modules.auth.schemas import AuthUser
from app.core.dependencies import require_permission
from app.core.pagination import PaginatedResponse, clamp_per_page
from supabase import Client
from typing import Optional

router = APIRouter(prefix="/contacts", tags=["contacts"])


def get_contact_service(supabase: Client = Depends(get_supabase)) -> ContactService:
    return ContactService(supabase)


@router.get("", response_model=PaginatedResponse[ContactResponse])
async def list_contacts(
    search: Optional[str] = None,
    enquiry_type: Optional[str] = None,
    status: Optional[str] = Query(None, description="all | read | unread"),
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    sort_by: Optional[str] = None,
    sort_order: Optional[str] = None,
    page: int = Query(1, ge=1),
    per_page: int = Query(10, ge=1),
    user: AuthUser = Depends(require_permission("contacts", "view")),
    service: ContactService = Depends(get_contact_service)
):
    return service.list_contacts(
        search=search, enquiry_type=enquiry_type, status=status,
        start_date=start_date, end_date=end_date,
        sort_by=sort_by, sort_order=sort_order,
        page=page, per_page=clamp_per_page(per_page),
    )


@router.get("/stats", response_model=ContactStats)
async def get_contact_stats(
    user: AuthUser = Depends(require_permission("contacts", "view")),
    service: ContactService = Depends(get_contact_service)
):
    return service.get_stats()


@router.post("/bulk-read", response_model=BulkContactResult)
async def mark_contacts_read(
    payload: ContactIds,
    user: AuthUser = Depends(require_permission("contacts", "respond")),
    service: ContactService = Depends(get_contact_service)
):
    return BulkContactResult(count=service.mark_many_read(payload.ids, actor_id=user.id))


@router.post("/bulk-delete", response_model=BulkContactResult)
async def delete_contacts(
    payload: ContactIds,
    user: AuthUser = Depends(require_permission("contacts", "delete")),
    service: ContactService = Depends(get_contact_service)
):
    return BulkContactResult(count=service.delete_many(payload.ids, actor_id=user.id))


@router.get("/{contact_id}", response_model=ContactDetailResponse)
async def get_contact(
    contact_id: str,
    user: AuthUser = Depends(require_permission("contacts", "view")),
    service: ContactService = Depends(get_contact_service)
):
    return service.get_contact(contact_id)


@router.post("/{contact_id}/read", response_model=ContactResponse)
async def mark_contact_read(
    contact_id: str,
    user: AuthUser = Depends(require_permission("contacts", "respond")),
    service: ContactService = Depends(get_contact_service)
):
    return service.set_read(contact_id, True, actor_id=user.id)


@router.post("/{contact_id}/unread", response_model=ContactResponse)
async def mark_contact_unread(
    contact_id: str,
    user: AuthUser = Depends(require_permission("contacts", "respond")),
    service: ContactService = Depends(get_contact_service)
):
    return service.set_read(contact_id, False, actor_id=user.id)


@router.delete("/{contact_id}", status_code=204)
async def delete_contact(
    contact_id: str,
    user: AuthUser = Depends(require_permission("contacts", "delete")),
    service: ContactService = Depends(get_contact_service)
):
    service.delete_contact(contact_id, actor_id=user.id)
    return None
