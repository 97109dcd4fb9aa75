from fastapi import APIRouter, Depends, Query
from app.database.supabase_client import get_supabase
from app.modules.tenants.schemas import TenantCreate, TenantUpdate, TenantResponse
from app.modules.tenants.service import TenantService
from app.modules.auth.schemas import AuthUser
from app.core.dependencies import require_permission
from app.core.pagination import PaginatedResponse, clamp_per_page
from supabase import Client
from typing import Optional

router = APIRouter(prefix="/tenants", tags=["tenants"])


def get_tenant_service(supabase: Client = Depends(get_supabase)) -> TenantService:
    return TenantService(supabase)


@router.get("", response_model=PaginatedResponse[TenantResponse])
async def list_tenants(
    search: Optional[str] = None,
    category_id: Optional[str] = None,
    floor: Optional[str] = None,
    is_active: Optional[bool] = None,
    featured: Optional[bool] = None,
    new_tenant: Optional[bool] = None,
    sort_by: Optional[str] = None,
    sort_order: Optional[str] = None,
    page: int = Query(1, ge=1),
    per_page: int = Query(10, ge=1),
    user: AuthUser = Depends(require_permission("tenants", "view")),
    service: TenantService = Depends(get_tenant_service)
):
    return service.list_tenants(
        search=search, category_id=category_id, floor=floor,
        is_active=is_active, featured=featured, new_tenant=new_tenant,
        sort_by=sort_by, sort_order=sort_order,
        page=page, per_page=clamp_per_page(per_page),
    )


@router.get("/code/{tenant_code}", response_model=TenantResponse)
async def get_tenant_by_code(
    tenant_code: str,
    user: AuthUser = Depends(require_permission("tenants", "view")),
    service: TenantService = Depends(get_tenant_service)
):
    return service.get_tenant_by_code(tenant_code)


@router.post("", response_model=TenantResponse, status_code=201)
async def create_tenant(
    tenant_data: TenantCreate,
    user: AuthUser = Depends(require_permission("tenants", "create")),
    service: TenantService = Depends(get_tenant_service)
):
    return service.create_tenant(tenant_data, actor_id=user.id)


@router.get("/{tenant_id}", response_model=TenantResponse)
async def get_tenant(
    tenant_id: str,
    user: AuthUser = Depends(require_permission("tenants", "view")),
    service: TenantService = Depends(get_tenant_service)
):
    return service.get_tenant(tenant_id)


@router.put("/{tenant_id}", response_model=TenantResponse)
async def update_tenant(
    tenant_id: str,
    tenant_data: TenantUpdate,
    user: AuthUser = Depends(require_permission("tenants", "edit")),
    service: TenantService = Depends(get_tenant_service)
):
    return service.update_tenant(tenant_id, tenant_data, actor_id=user.id)


@router.delete("/{tenant_id}", status_code=204)
async def delete_tenant(
    tenant_id: str,
    user: AuthUser = Depends(require_permission("tenants", "delete")),
    service: TenantService = Depends(get_tenant_service)
):
    service.delete_tenant(tenant_id, actor_id=user.id)
    return None


@router.post("/{tenant_id}/toggle-active", response_model=TenantResponse)
async def toggle_tenant_active(
    tenant_id: str,
    user: AuthUser = Depends(require_permission("tenants", "edit")),
    service: TenantService = Depends(get_tenant_service)
):
    return service.toggle_active(tenant_id, actor_id=user.id)


@router.post("/{tenant_id}/toggle-featured", response_model=TenantResponse)
async def toggle_tenant_featured(
    tenant_id: str,
    user: AuthUser = Depends(require_permission("tenants", "feature")),
    service: TenantService = Depends(get_tenant_service)
):
    return service.toggle_featured(tenant_id, actor_id=user.id)
