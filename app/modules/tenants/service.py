import logging
from supabase import Client
from app.modules.tenants.schemas import TenantCreate, TenantUpdate, TenantResponse
from app.modules.activity.service import ActivityService
from app.core.content_status import utcnow
from app.core.errors import handle_supabase_error, not_found
from app.core.pagination import PaginatedResponse, build_page, page_range, search_filter, sort_params
from app.core.slug import generate_tenant_code
from typing import Optional
from fastapi import HTTPException

logger = logging.getLogger(__name__)

TENANT_SORT_COLUMNS = ["created_at", "updated_at", "name", "tenant_code", "main_floor"]


class TenantService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.activity = ActivityService(supabase)

    def _get_row(self, tenant_id: str) -> dict:
        result = self.supabase.table("tenants")\
            .select("*")\
            .eq("id", tenant_id)\
            .limit(1)\
            .execute()
        if not result.data:
            raise not_found("Tenant")
        return result.data[0]

    def _code_taken(self, tenant_code: str, exclude_id: Optional[str] = None) -> bool:
        query = self.supabase.table("tenants")\
            .select("id")\
            .eq("tenant_code", tenant_code)
        if exclude_id:
            query = query.neq("id", exclude_id)
        result = query.limit(1).execute()
        return bool(result.data)

    def list_tenants(
        self,
        search: Optional[str] = None,
        category_id: Optional[str] = None,
        floor: Optional[str] = None,
        is_active: Optional[bool] = None,
        featured: Optional[bool] = None,
        new_tenant: Optional[bool] = None,
        sort_by: Optional[str] = None,
        sort_order: Optional[str] = None,
        page: int = 1,
        per_page: int = 10,
    ) -> PaginatedResponse:
        try:
            query = self.supabase.table("tenants").select("*", count="exact")
            if search:
                query = query.or_(search_filter(["name", "tenant_code"], search))
            if category_id:
                query = query.eq("category_id", category_id)
            if floor:
                query = query.eq("main_floor", floor)
            if is_active is not None:
                query = query.eq("is_active", is_active)
            if featured is not None:
                query = query.eq("is_featured", featured)
            if new_tenant is not None:
                query = query.eq("is_new_tenant", new_tenant)

            column, desc = sort_params(sort_by, sort_order, TENANT_SORT_COLUMNS)
            start, end = page_range(page, per_page)
            result = query.order(column, desc=desc).range(start, end).execute()
            tenants = [TenantResponse(**row) for row in result.data or []]
            return build_page(tenants, result.count, page, per_page)
        except HTTPException:
            raise
        except Exception as e:
            raise handle_supabase_error(e, "list tenants")

    def get_tenant(self, tenant_id: str) -> TenantResponse:
        try:
            return TenantResponse(**self._get_row(tenant_id))
        except HTTPException:
            raise
        except Exception as e:
            raise handle_supabase_error(e, "get tenant")

    def get_tenant_by_code(self, tenant_code: str) -> TenantResponse:
        try:
            result = self.supabase.table("tenants")\
                .select("*")\
                .eq("tenant_code", tenant_code.upper())\
                .limit(1)\
                .execute()
            if not result.data:
                raise not_found("Tenant")
            return TenantResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise handle_supabase_error(e, "get tenant")

    def create_tenant(self, tenant_data: TenantCreate, actor_id: Optional[str] = None) -> TenantResponse:
        """Create a tenant; tenant_code is upper-cased (or derived from the name) and must be unique"""
        try:
            data = tenant_data.model_dump(mode="json")
            tenant_code = (tenant_data.tenant_code or generate_tenant_code(tenant_data.name)).upper()
            if not tenant_code:
                raise HTTPException(status_code=422, detail="tenant_code is required")
            if self._code_taken(tenant_code):
                raise HTTPException(status_code=409, detail=f"Tenant code {tenant_code} already exists")
            data["tenant_code"] = tenant_code
            data["metadata"] = {}

            result = self.supabase.table("tenants").insert(data).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create tenant")

            tenant = TenantResponse(**result.data[0])
            self.activity.log_activity(
                actor_id, "create", "tenants",
                resource_type="tenant", resource_id=tenant.id, resource_name=tenant.name,
                new_values={"tenant_code": tenant.tenant_code, "name": tenant.name}
            )
            return tenant
        except HTTPException:
            raise
        except Exception as e:
            raise handle_supabase_error(e, "create tenant")

    def update_tenant(self, tenant_id: str, tenant_data: TenantUpdate, actor_id: Optional[str] = None) -> TenantResponse:
        try:
            current = self._get_row(tenant_id)
            update_data = tenant_data.model_dump(mode="json", exclude_unset=True)
            if update_data.get("tenant_code"):
                update_data["tenant_code"] = update_data["tenant_code"].upper()
                if update_data["tenant_code"] != current.get("tenant_code") \
                        and self._code_taken(update_data["tenant_code"], exclude_id=tenant_id):
                    raise HTTPException(status_code=409, detail=f"Tenant code {update_data['tenant_code']} already exists")
            elif "tenant_code" in update_data:
                del update_data["tenant_code"]
            update_data["updated_at"] = utcnow().isoformat()

            result = self.supabase.table("tenants")\
                .update(update_data)\
                .eq("id", tenant_id)\
                .execute()
            if not result.data:
                raise not_found("Tenant")

            tenant = TenantResponse(**result.data[0])
            self.activity.log_activity(
                actor_id, "update", "tenants",
                resource_type="tenant", resource_id=tenant_id, resource_name=tenant.name,
                old_values={"tenant_code": current.get("tenant_code"), "name": current.get("name")},
                new_values={"tenant_code": tenant.tenant_code, "name": tenant.name}
            )
            return tenant
        except HTTPException:
            raise
        except Exception as e:
            raise handle_supabase_error(e, "update tenant")

    def delete_tenant(self, tenant_id: str, actor_id: Optional[str] = None) -> bool:
        """Delete a tenant that no promotion refers to"""
        try:
            current = self._get_row(tenant_id)
            promotions = self.supabase.table("promotions")\
                .select("id", count="exact")\
                .eq("tenant_id", tenant_id)\
                .execute()
            if promotions.count:
                raise HTTPException(
                    status_code=409,
                    detail=f"Cannot delete tenant with {promotions.count} promotion(s). Delete them first."
                )

            result = self.supabase.table("tenants")\
                .delete()\
                .eq("id", tenant_id)\
                .execute()
            self.activity.log_activity(
                actor_id, "delete", "tenants",
                resource_type="tenant", resource_id=tenant_id, resource_name=current.get("name")
            )
            return bool(result.data)
        except HTTPException:
            raise
        except Exception as e:
            raise handle_supabase_error(e, "delete tenant")

    def _toggle(self, tenant_id: str, field: str, actor_id: Optional[str]) -> TenantResponse:
        try:
            current = self._get_row(tenant_id)
            value = not current.get(field, False)
            result = self.supabase.table("tenants")\
                .update({field: value, "updated_at": utcnow().isoformat()})\
                .eq("id", tenant_id)\
                .execute()
            if not result.data:
                raise not_found("Tenant")
            self.activity.log_activity(
                actor_id, "update", "tenants",
                resource_type="tenant", resource_id=tenant_id, resource_name=current.get("name"),
                old_values={field: not value}, new_values={field: value}
            )
            return TenantResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise handle_supabase_error(e, f"toggle tenant {field}")

    def toggle_active(self, tenant_id: str, actor_id: Optional[str] = None) -> TenantResponse:
        return self._toggle(tenant_id, "is_active", actor_id)

    def toggle_featured(self, tenant_id: str, actor_id: Optional[str] = None) -> TenantResponse:
        return self._toggle(tenant_id, "is_featured", actor_id)
