from fastapi import APIRouter, Depends
from app.database.supabase_client import get_supabase
from app.modules.vip.schemas import VipTierCreate, VipTierUpdate, VipTierResponse, VipTierWithBenefitsResponse
from app.modules.vip.service import VipTierService
from app.modules.auth.schemas import AuthUser
from app.core.dependencies import require_permission
from supabase import Client
from typing import List, Optional

router = APIRouter(prefix="/vip/tiers", tags=["vip"])


def get_vip_tier_service(supabase: Client = Depends(get_supabase)) -> VipTierService:
    return VipTierService(supabase)


@router.get("", response_model=List[VipTierResponse])
async def list_vip_tiers(
    is_active: Optional[bool] = None,
    user: AuthUser = Depends(require_permission("vip_tiers", "view")),
    service: VipTierService = Depends(get_vip_tier_service)
):
    """Tiers in ascending tier_level"""
    return service.list_tiers(is_active=is_active)


@router.post("", response_model=VipTierResponse, status_code=201)
async def create_vip_tier(
    tier_data: VipTierCreate,
    user: AuthUser = Depends(require_permission("vip_tiers", "create")),
    service: VipTierService = Depends(get_vip_tier_service)
):
    return service.create_tier(tier_data, actor_id=user.id)


@router.get("/{tier_id}", response_model=VipTierWithBenefitsResponse)
async def get_vip_tier(
    tier_id: str,
    user: AuthUser = Depends(require_permission("vip_tiers", "view")),
    service: VipTierService = Depends(get_vip_tier_service)
):
    return service.get_tier(tier_id)


@router.put("/{tier_id}", response_model=VipTierResponse)
async def update_vip_tier(
    tier_id: str,
    tier_data: VipTierUpdate,
    user: AuthUser = Depends(require_permission("vip_tiers", "edit")),
    service: VipTierService = Depends(get_vip_tier_service)
):
    return service.update_tier(tier_id, tier_data, actor_id=user.id)


@router.delete("/{tier_id}", status_code=204)
async def delete_vip_tier(
    tier_id: str,
    user: AuthUser = Depends(require_permission("vip_tiers", "delete")),
    service: VipTierService = Depends(get_vip_tier_service)
):
    service.delete_tier(tier_id, actor_id=user.id)
    return None


@router.post("/{tier_id}/toggle-active", response_model=VipTierResponse)
async def toggle_vip_tier_active(
    tier_id: str,
    user: AuthUser = Depends(require_permission("vip_tiers", "edit")),
    service: VipTierService = Depends(get_vip_tier_service)
):
    return service.toggle_active(tier_id, actor_id=user.id)
