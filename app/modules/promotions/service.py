import logging
from datetime import datetime, timedelta
from supabase import Client
from app.modules.promotions.schemas import (
    AutoExpireResult, PromotionCreate, PromotionUpdate, PromotionResponse, PromotionTenant
)
from app.modules.activity.service import ActivityService
from app.config import settings
from app.core.content_status import first_published_at, parse_timestamp, utcnow
from app.core.errors import handle_supabase_error, not_found
from app.core.pagination import PaginatedResponse, build_page, page_range, search_filter, sort_params
from typing import Dict, List, Optional
from fastapi import HTTPException

logger = logging.getLogger(__name__)

PROMOTION_SORT_COLUMNS = ["created_at", "title", "start_date", "end_date", "published_at", "status"]


class PromotionService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.activity = ActivityService(supabase)

    def _tenants(self, tenant_ids: List[str]) -> Dict[str, PromotionTenant]:
        if not tenant_ids:
            return {}
        result = self.supabase.table("tenants")\
            .select("id, name, tenant_code, logo_url, category_id, main_floor")\
            .in_("id", tenant_ids)\
            .execute()
        return {t["id"]: PromotionTenant(**t) for t in result.data or []}

    def _with_tenants(self, rows: List[dict]) -> List[PromotionResponse]:
        tenants = self._tenants(list({r["tenant_id"] for r in rows if r.get("tenant_id")}))
        return [PromotionResponse(**row, tenant=tenants.get(row.get("tenant_id"))) for row in rows]

    def _get_row(self, promotion_id: str) -> dict:
        result = self.supabase.table("promotions")\
            .select("*")\
            .eq("id", promotion_id)\
            .limit(1)\
            .execute()
        if not result.data:
            raise not_found("Promotion")
        return result.data[0]

    def _verify_tenant(self, tenant_id: str) -> None:
        result = self.supabase.table("tenants")\
            .select("id")\
            .eq("id", tenant_id)\
            .limit(1)\
            .execute()
        if not result.data:
            raise not_found("Tenant")

    def list_promotions(
        self,
        search: Optional[str] = None,
        status: Optional[str] = None,
        tenant_id: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        sort_by: Optional[str] = None,
        sort_order: Optional[str] = None,
        page: int = 1,
        per_page: int = 10,
    ) -> PaginatedResponse:
        """Paginated promotions, each with a summary of its tenant"""
        try:
            query = self.supabase.table("promotions").select("*", count="exact")
            if search:
                query = query.or_(search_filter(["title", "full_description"], search))
            if status and status != "all":
                query = query.eq("status", status)
            if tenant_id:
                query = query.eq("tenant_id", tenant_id)
            if start_date:
                query = query.gte("start_date", start_date)
            if end_date:
                query = query.lte("end_date", end_date)

            column, desc = sort_params(sort_by, sort_order, PROMOTION_SORT_COLUMNS)
            start, end = page_range(page, per_page)
            result = query.order(column, desc=desc).range(start, end).execute()
            return build_page(self._with_tenants(result.data or []), result.count, page, per_page)
        except HTTPException:
            raise
        except Exception as e:
            raise handle_supabase_error(e, "list promotions")

    def get_promotion(self, promotion_id: str) -> PromotionResponse:
        try:
            return self._with_tenants([self._get_row(promotion_id)])[0]
        except HTTPException:
            raise
        except Exception as e:
            raise handle_supabase_error(e, "get promotion")

    def create_promotion(
        self, promotion_data: PromotionCreate, actor_id: Optional[str] = None, now: Optional[datetime] = None
    ) -> PromotionResponse:
        now = now or utcnow()
        try:
            self._verify_tenant(promotion_data.tenant_id)
            data = promotion_data.model_dump(mode="json")
            data["published_at"] = first_published_at(None, promotion_data.status == "published", now)

            result = self.supabase.table("promotions").insert(data).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create promotion")

            promotion = self._with_tenants(result.data)[0]
            self.activity.log_activity(
                actor_id, "create", "promotions",
                resource_type="promotion", resource_id=promotion.id, resource_name=promotion.title,
                new_values={"title": promotion.title, "status": promotion.status}
            )
            return promotion
        except HTTPException:
            raise
        except Exception as e:
            raise handle_supabase_error(e, "create promotion")

    def update_promotion(
        self,
        promotion_id: str,
        promotion_data: PromotionUpdate,
        actor_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> PromotionResponse:
        now = now or utcnow()
        try:
            current = self._get_row(promotion_id)
            update_data = promotion_data.model_dump(mode="json", exclude_unset=True)
            if update_data.get("tenant_id"):
                self._verify_tenant(update_data["tenant_id"])

            start_date = update_data.get("start_date", current.get("start_date"))
            end_date = update_data.get("end_date", current.get("end_date"))
            if start_date and end_date and parse_timestamp(end_date) < parse_timestamp(start_date):
                raise HTTPException(status_code=422, detail="end_date must not be before start_date")

            new_status = update_data.get("status", current.get("status"))
            update_data["published_at"] = first_published_at(current.get("published_at"), new_status == "published", now)

            result = self.supabase.table("promotions")\
                .update(update_data)\
                .eq("id", promotion_id)\
                .execute()
            if not result.data:
                raise not_found("Promotion")

            promotion = self._with_tenants(result.data)[0]
            self.activity.log_activity(
                actor_id, "update", "promotions",
                resource_type="promotion", resource_id=promotion_id, resource_name=promotion.title,
                old_values={"title": current.get("title"), "status": current.get("status")},
                new_values={"title": promotion.title, "status": promotion.status}
            )
            return promotion
        except HTTPException:
            raise
        except Exception as e:
            raise handle_supabase_error(e, "update promotion")

    def update_status(
        self, promotion_id: str, status: str, actor_id: Optional[str] = None, now: Optional[datetime] = None
    ) -> PromotionResponse:
        """Move a promotion between staging, published and expired"""
        now = now or utcnow()
        try:
            current = self._get_row(promotion_id)
            result = self.supabase.table("promotions")\
                .update({
                    "status": status,
                    "published_at": first_published_at(current.get("published_at"), status == "published", now),
                })\
                .eq("id", promotion_id)\
                .execute()
            if not result.data:
                raise not_found("Promotion")

            self.activity.log_activity(
                actor_id, "update_status", "promotions",
                resource_type="promotion", resource_id=promotion_id, resource_name=current.get("title"),
                old_values={"status": current.get("status")}, new_values={"status": status}
            )
            return self._with_tenants(result.data)[0]
        except HTTPException:
            raise
        except Exception as e:
            raise handle_supabase_error(e, "update promotion status")

    def delete_promotion(self, promotion_id: str, actor_id: Optional[str] = None) -> bool:
        try:
            current = self._get_row(promotion_id)
            result = self.supabase.table("promotions")\
                .delete()\
                .eq("id", promotion_id)\
                .execute()
            self.activity.log_activity(
                actor_id, "delete", "promotions",
                resource_type="promotion", resource_id=promotion_id, resource_name=current.get("title")
            )
            return bool(result.data)
        except HTTPException:
            raise
        except Exception as e:
            raise handle_supabase_error(e, "delete promotion")

    def list_expiring_soon(self, days: Optional[int] = None, now: Optional[datetime] = None) -> List[PromotionResponse]:
        """Published promotions whose end_date falls within the next ``days`` days"""
        days = days if days is not None else settings.promotion_expiring_window_days
        now = now or utcnow()
        try:
            result = self.supabase.table("promotions")\
                .select("*")\
                .eq("status", "published")\
                .gte("end_date", now.isoformat())\
                .lte("end_date", (now + timedelta(days=days)).isoformat())\
                .order("end_date")\
                .execute()
            return self._with_tenants(result.data or [])
        except Exception as e:
            raise handle_supabase_error(e, "expiring promotions")

    def auto_expire(self, now: Optional[datetime] = None, actor_id: Optional[str] = None) -> AutoExpireResult:
        """Mark every published promotion whose end_date has passed as expired"""
        now = now or utcnow()
        try:
            result = self.supabase.table("promotions")\
                .update({"status": "expired"})\
                .eq("status", "published")\
                .lt("end_date", now.isoformat())\
                .execute()
            expired_ids = [row["id"] for row in result.data or []]
            if expired_ids:
                logger.info(f"Expired {len(expired_ids)} promotion(s)")
                self.activity.log_activity(
                    actor_id, "auto_expire", "promotions",
                    resource_type="promotion",
                    metadata={"expired_ids": expired_ids, "count": len(expired_ids)}
                )
            return AutoExpireResult(expired_count=len(expired_ids), expired_ids=expired_ids)
        except Exception as e:
            raise handle_supabase_error(e, "auto expire promotions")
