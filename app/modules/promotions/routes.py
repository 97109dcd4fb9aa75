from fastapi import APIRouter, Depends, Query
from app.database.supabase_client import get_supabase
from app.modules.promotions.schemas import (
    AutoExpireResult, PromotionCreate, PromotionUpdate, PromotionResponse, PromotionStatusUpdate
)
from app.modules.promotions.service import PromotionService
from app.modules.auth.schemas import AuthUser
from app.core.dependencies import require_permission
from app.core.pagination import PaginatedResponse, clamp_per_page
from supabase import Client
from typing import List, Optional

router = APIRouter(prefix="/promotions", tags=["promotions"])


def get_promotion_service(supabase: Client = Depends(get_supabase)) -> PromotionService:
    return PromotionService(supabase)


@router.get("", response_model=PaginatedResponse[PromotionResponse])
async def list_promotions(
    search: Optional[str] = None,
    status: Optional[str] = Query(None, description="all | staging | published | expired"),
    tenant_id: Optional[str] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    sort_by: Optional[str] = None,
    sort_order: Optional[str] = None,
    page: int = Query(1, ge=1),
    per_page: int = Query(10, ge=1),
    user: AuthUser = Depends(require_permission("promotions", "view")),
    service: PromotionService = Depends(get_promotion_service)
):
    return service.list_promotions(
        search=search, status=status, tenant_id=tenant_id,
        start_date=start_date, end_date=end_date,
        sort_by=sort_by, sort_order=sort_order,
        page=page, per_page=clamp_per_page(per_page),
    )


@router.get("/expiring-soon", response_model=List[PromotionResponse])
async def list_expiring_promotions(
    days: Optional[int] = Query(None, ge=0, le=90),
    user: AuthUser = Depends(require_permission("promotions", "view")),
    service: PromotionService = Depends(get_promotion_service)
):
    """Published promotions ending within the warning window"""
    return service.list_expiring_soon(days)


@router.post("/auto-expire", response_model=AutoExpireResult)
async def auto_expire_promotions(
    user: AuthUser = Depends(require_permission("promotions", "publish")),
    service: PromotionService = Depends(get_promotion_service)
):
    return service.auto_expire(actor_id=user.id)


@router.post("", response_model=PromotionResponse, status_code=201)
async def create_promotion(
    promotion_data: PromotionCreate,
    user: AuthUser = Depends(require_permission("promotions", "create")),
    service: PromotionService = Depends(get_promotion_service)
):
    return service.create_promotion(promotion_data, actor_id=user.id)


@router.get("/{promotion_id}", response_model=PromotionResponse)
async def get_promotion(
    promotion_id: str,
    user: AuthUser = Depends(require_permission("promotions", "view")),
    service: PromotionService = Depends(get_promotion_service)
):
    return service.get_promotion(promotion_id)


@router.put("/{promotion_id}", response_model=PromotionResponse)
async def update_promotion(
    promotion_id: str,
    promotion_data: PromotionUpdate,
    user: AuthUser = Depends(require_permission("promotions", "edit")),
    service: PromotionService = Depends(get_promotion_service)
):
    return service.update_promotion(promotion_id, promotion_data, actor_id=user.id)


@router.patch("/{promotion_id}/status", response_model=PromotionResponse)
async def update_promotion_status(
    promotion_id: str,
    status_data: PromotionStatusUpdate,
    user: AuthUser = Depends(require_permission("promotions", "publish")),
    service: PromotionService = Depends(get_promotion_service)
):
    return service.update_status(promotion_id, status_data.status, actor_id=user.id)


@router.delete("/{promotion_id}", status_code=204)
async def delete_promotion(
    promotion_id: str,
    user: AuthUser = Depends(require_permission("promotions", "delete")),
    service: PromotionService = Depends(get_promotion_service)
):
    service.delete_promotion(promotion_id, actor_id=user.id)
    return None
