from fastapi import APIRouter, Depends
from app.database.supabase_client import get_supabase
from app.modules.homepage.schemas import (
    FeaturedRestaurantCreate, FeaturedRestaurantResponse, FeaturedRestaurantUpdate,
    ReferenceOption, ReorderRequest, WhatsOnContentType, WhatsOnCreate, WhatsOnResponse, WhatsOnUpdate,
)
from app.modules.homepage.service import FeaturedRestaurantService, WhatsOnService
from app.modules.auth.schemas import AuthUser
from app.core.dependencies import require_permission
from supabase import Client
from typing import List, Optional

router = APIRouter(prefix="/homepage", tags=["homepage"])


def get_whats_on_service(supabase: Client = Depends(get_supabase)) -> WhatsOnService:
    return WhatsOnService(supabase)


def get_featured_restaurant_service(supabase: Client = Depends(get_supabase)) -> FeaturedRestaurantService:
    return FeaturedRestaurantService(supabase)


# What's On

@router.get("/whats-on", response_model=List[WhatsOnResponse])
async def list_whats_on(
    is_active: Optional[bool] = None,
    user: AuthUser = Depends(require_permission("whats_on", "view")),
    service: WhatsOnService = Depends(get_whats_on_service)
):
    return service.list_items(is_active=is_active)


@router.post("/whats-on", response_model=WhatsOnResponse, status_code=201)
async def create_whats_on(
    item_data: WhatsOnCreate,
    user: AuthUser = Depends(require_permission("whats_on", "manage")),
    service: WhatsOnService = Depends(get_whats_on_service)
):
    return service.create_item(item_data, actor_id=user.id)


@router.get("/whats-on/options/{content_type}", response_model=List[ReferenceOption])
async def list_whats_on_options(
    content_type: WhatsOnContentType,
    user: AuthUser = Depends(require_permission("whats_on", "view")),
    service: WhatsOnService = Depends(get_whats_on_service)
):
    """Rows that can be referenced by a What's On item"""
    return service.reference_options(content_type)


@router.post("/whats-on/reorder", response_model=List[WhatsOnResponse])
async def reorder_whats_on(
    payload: ReorderRequest,
    user: AuthUser = Depends(require_permission("whats_on", "manage")),
    service: WhatsOnService = Depends(get_whats_on_service)
):
    return service.reorder(payload.items, actor_id=user.id)


@router.get("/whats-on/{item_id}", response_model=WhatsOnResponse)
async def get_whats_on(
    item_id: str,
    user: AuthUser = Depends(require_permission("whats_on", "view")),
    service: WhatsOnService = Depends(get_whats_on_service)
):
    return service.get_item(item_id)


@router.put("/whats-on/{item_id}", response_model=WhatsOnResponse)
async def update_whats_on(
    item_id: str,
    item_data: WhatsOnUpdate,
    user: AuthUser = Depends(require_permission("whats_on", "manage")),
    service: WhatsOnService = Depends(get_whats_on_service)
):
    return service.update_item(item_id, item_data, actor_id=user.id)


@router.delete("/whats-on/{item_id}", status_code=204)
async def delete_whats_on(
    item_id: str,
    user: AuthUser = Depends(require_permission("whats_on", "manage")),
    service: WhatsOnService = Depends(get_whats_on_service)
):
    service.delete_item(item_id, actor_id=user.id)
    return None


@router.post("/whats-on/{item_id}/toggle-active", response_model=WhatsOnResponse)
async def toggle_whats_on_active(
    item_id: str,
    user: AuthUser = Depends(require_permission("whats_on", "manage")),
    service: WhatsOnService = Depends(get_whats_on_service)
):
    return service.toggle_active(item_id, actor_id=user.id)


# Featured restaurants

@router.get("/restaurants", response_model=List[FeaturedRestaurantResponse])
async def list_featured_restaurants(
    is_active: Optional[bool] = None,
    user: AuthUser = Depends(require_permission("featured_restaurants", "view")),
    service: FeaturedRestaurantService = Depends(get_featured_restaurant_service)
):
    return service.list_restaurants(is_active=is_active)


@router.post("/restaurants", response_model=FeaturedRestaurantResponse, status_code=201)
async def create_featured_restaurant(
    data: FeaturedRestaurantCreate,
    user: AuthUser = Depends(require_permission("featured_restaurants", "manage")),
    service: FeaturedRestaurantService = Depends(get_featured_restaurant_service)
):
    return service.create_restaurant(data, actor_id=user.id)


@router.post("/restaurants/reorder", response_model=List[FeaturedRestaurantResponse])
async def reorder_featured_restaurants(
    payload: ReorderRequest,
    user: AuthUser = Depends(require_permission("featured_restaurants", "manage")),
    service: FeaturedRestaurantService = Depends(get_featured_restaurant_service)
):
    return service.reorder(payload.items, actor_id=user.id)


@router.get("/restaurants/{restaurant_id}", response_model=FeaturedRestaurantResponse)
async def get_featured_restaurant(
    restaurant_id: str,
    user: AuthUser = Depends(require_permission("featured_restaurants", "view")),
    service: FeaturedRestaurantService = Depends(get_featured_restaurant_service)
):
    return service.get_restaurant(restaurant_id)


@router.put("/restaurants/{restaurant_id}", response_model=FeaturedRestaurantResponse)
async def update_featured_restaurant(
    restaurant_id: str,
    data: FeaturedRestaurantUpdate,
    user: AuthUser = Depends(require_permission("featured_restaurants", "manage")),
    service: FeaturedRestaurantService = Depends(get_featured_restaurant_service)
):
    return service.update_restaurant(restaurant_id, data, actor_id=user.id)


@router.delete("/restaurants/{restaurant_id}", status_code=204)
async def delete_featured_restaurant(
    restaurant_id: str,
    user: AuthUser = Depends(require_permission("featured_restaurants", "manage")),
    service: FeaturedRestaurantService = Depends(get_featured_restaurant_service)
):
    service.delete_restaurant(restaurant_id, actor_id=user.id)
    return None


@router.post("/restaurants/{restaurant_id}/toggle-active", response_model=FeaturedRestaurantResponse)
async def toggle_featured_restaurant_active(
    restaurant_id: str,
    user: AuthUser = Depends(require_permission("featured_restaurants", "manage")),
    service: FeaturedRestaurantService = Depends(get_featured_restaurant_service)
):
    return service.toggle_active(restaurant_id, actor_id=user.id)
