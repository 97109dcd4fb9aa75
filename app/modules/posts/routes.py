from fastapi import APIRouter, Depends, Query
from app.database.supabase_client import get_supabase
from app.modules.posts.schemas import PostCreate, PostUpdate, PostResponse
from app.modules.posts.service import PostService
from app.modules.auth.schemas import AuthUser
from app.core.dependencies import require_permission
from app.core.pagination import PaginatedResponse, clamp_per_page
from supabase import Client
from typing import List, Optional

router = APIRouter(prefix="/posts", tags=["posts"])


def get_post_service(supabase: Client = Depends(get_supabase)) -> PostService:
    return PostService(supabase)


@router.get("", response_model=PaginatedResponse[PostResponse])
async def list_posts(
    search: Optional[str] = None,
    status: Optional[str] = Query(None, description="all | published | draft"),
    featured: Optional[bool] = None,
    category_id: Optional[str] = None,
    tags: Optional[List[str]] = Query(None),
    sort_by: Optional[str] = None,
    sort_order: Optional[str] = None,
    page: int = Query(1, ge=1),
    per_page: int = Query(10, ge=1),
    user: AuthUser = Depends(require_permission("posts", "view")),
    service: PostService = Depends(get_post_service)
):
    return service.list_posts(
        search=search, status=status, featured=featured, category_id=category_id, tags=tags,
        sort_by=sort_by, sort_order=sort_order,
        page=page, per_page=clamp_per_page(per_page),
    )


@router.get("/tags", response_model=List[str])
async def list_post_tags(
    user: AuthUser = Depends(require_permission("posts", "view")),
    service: PostService = Depends(get_post_service)
):
    return service.list_tags()


@router.get("/slug/{slug}", response_model=PostResponse)
async def get_post_by_slug(
    slug: str,
    user: AuthUser = Depends(require_permission("posts", "view")),
    service: PostService = Depends(get_post_service)
):
    return service.get_post_by_slug(slug)


@router.post("", response_model=PostResponse, status_code=201)
async def create_post(
    post_data: PostCreate,
    user: AuthUser = Depends(require_permission("posts", "create")),
    service: PostService = Depends(get_post_service)
):
    return service.create_post(post_data, actor_id=user.id)


@router.get("/{post_id}", response_model=PostResponse)
async def get_post(
    post_id: str,
    user: AuthUser = Depends(require_permission("posts", "view")),
    service: PostService = Depends(get_post_service)
):
    return service.get_post(post_id)


@router.put("/{post_id}", response_model=PostResponse)
async def update_post(
    post_id: str,
    post_data: PostUpdate,
    user: AuthUser = Depends(require_permission("posts", "edit")),
    service: PostService = Depends(get_post_service)
):
    return service.update_post(post_id, post_data, actor_id=user.id)


@router.delete("/{post_id}", status_code=204)
async def delete_post(
    post_id: str,
    user: AuthUser = Depends(require_permission("posts", "delete")),
    service: PostService = Depends(get_post_service)
):
    service.delete_post(post_id, actor_id=user.id)
    return None


@router.post("/{post_id}/toggle-publish", response_model=PostResponse)
async def toggle_post_publish(
    post_id: str,
    user: AuthUser = Depends(require_permission("posts", "publish")),
    service: PostService = Depends(get_post_service)
):
    return service.toggle_publish(post_id, actor_id=user.id)


@router.post("/{post_id}/toggle-featured", response_model=PostResponse)
async def toggle_post_featured(
    post_id: str,
    user: AuthUser = Depends(require_permission("posts", "edit")),
    service: PostService = Depends(get_post_service)
):
    return service.toggle_featured(post_id, actor_id=user.id)
