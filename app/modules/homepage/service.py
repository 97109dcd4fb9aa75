import logging
from supabase import Client
from app.modules.homepage.schemas import (
    FeaturedRestaurantCreate, FeaturedRestaurantResponse, FeaturedRestaurantUpdate,
    ReferenceData, ReferenceOption, ReorderItem, RestaurantTenant,
    WhatsOnCreate, WhatsOnResponse, WhatsOnUpdate,
)
from app.modules.activity.service import ActivityService
from app.core.content_status import parse_timestamp, utcnow
from app.core.errors import handle_supabase_error, not_found
from typing import Any, Dict, List, Optional
from fastapi import HTTPException

logger = logging.getLogger(__name__)

# content_type -> (table, columns, display name)
REFERENCE_SOURCES = {
    "event": ("events", "id, title, images", "Event"),
    "tenant": ("tenants", "id, name, logo_url", "Tenant"),
    "post": ("posts", "id, title, image_url", "Post"),
    "promotion": ("promotions", "id, title, image_url", "Promotion"),
}


def _first_image(images: Any) -> Optional[str]:
    if not images:
        return None
    first = images[0]
    return first.get("url") if isinstance(first, dict) else first


def _reference_data(row: Dict[str, Any]) -> ReferenceData:
    return ReferenceData(
        id=row["id"],
        title=row.get("title") or row.get("name"),
        image_url=row.get("image_url") or row.get("logo_url") or _first_image(row.get("images")),
    )


def _check_dates(start: Any, end: Any, label: str = "end date") -> None:
    start_at, end_at = parse_timestamp(start), parse_timestamp(end)
    if start_at and end_at and end_at < start_at:
        raise HTTPException(status_code=422, detail=f"The {label} must not be before the start date")


class WhatsOnService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.activity = ActivityService(supabase)

    def _get_row(self, item_id: str) -> dict:
        result = self.supabase.table("whats_on")\
            .select("*")\
            .eq("id", item_id)\
            .limit(1)\
            .execute()
        if not result.data:
            raise not_found("What's On item")
        return result.data[0]

    def _resolve(self, rows: List[dict]) -> List[WhatsOnResponse]:
        """Attach reference_data with one query per referenced table"""
        wanted: Dict[str, set] = {}
        for row in rows:
            if row.get("content_type") in REFERENCE_SOURCES and row.get("reference_id"):
                wanted.setdefault(row["content_type"], set()).add(row["reference_id"])
        found: Dict[tuple, ReferenceData] = {}
        for content_type, ids in wanted.items():
            table, columns, _ = REFERENCE_SOURCES[content_type]
            result = self.supabase.table(table).select(columns).in_("id", list(ids)).execute()
            for ref in result.data or []:
                found[(content_type, ref["id"])] = _reference_data(ref)
        return [
            WhatsOnResponse(**row, reference_data=found.get((row.get("content_type"), row.get("reference_id"))))
            for row in rows
        ]

    def _require_reference(self, content_type: str, reference_id: Optional[str]) -> None:
        if content_type == "custom":
            return
        if not reference_id:
            raise HTTPException(status_code=422, detail="reference_id is required")
        table, _, label = REFERENCE_SOURCES[content_type]
        result = self.supabase.table(table).select("id").eq("id", reference_id).limit(1).execute()
        if not result.data:
            raise not_found(label)

    @staticmethod
    def _label(item: dict) -> str:
        return item.get("custom_title") or f"{item.get('content_type')} reference"

    def list_items(self, is_active: Optional[bool] = None) -> List[WhatsOnResponse]:
        try:
            query = self.supabase.table("whats_on").select("*")
            if is_active is not None:
                query = query.eq("is_active", is_active)
            result = query.order("sort_order").execute()
            return self._resolve(result.data or [])
        except HTTPException:
            raise
        except Exception as e:
            raise handle_supabase_error(e, "list What's On items")

    def get_item(self, item_id: str) -> WhatsOnResponse:
        try:
            return self._resolve([self._get_row(item_id)])[0]
        except HTTPException:
            raise
        except Exception as e:
            raise handle_supabase_error(e, "get What's On item")

    def create_item(self, item_data: WhatsOnCreate, actor_id: Optional[str] = None) -> WhatsOnResponse:
        try:
            self._require_reference(item_data.content_type, item_data.reference_id)
            data = item_data.model_dump(mode="json")
            if item_data.content_type == "custom":
                data["reference_id"] = None
            data["created_by"] = actor_id

            result = self.supabase.table("whats_on").insert(data).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create What's On item")
            item = result.data[0]
            self.activity.log_activity(
                actor_id, "create", "homepage",
                resource_type="whats_on", resource_id=item["id"], resource_name=self._label(item)
            )
            return self._resolve([item])[0]
        except HTTPException:
            raise
        except Exception as e:
            raise handle_supabase_error(e, "create What's On item")

    def update_item(self, item_id: str, item_data: WhatsOnUpdate, actor_id: Optional[str] = None) -> WhatsOnResponse:
        try:
            current = self._get_row(item_id)
            update_data = item_data.model_dump(mode="json", exclude_unset=True)
            merged = {**current, **update_data}
            if merged.get("content_type") == "custom":
                if not merged.get("custom_title"):
                    raise HTTPException(status_code=422, detail="custom_title is required for custom items")
            elif "content_type" in update_data or "reference_id" in update_data:
                self._require_reference(merged.get("content_type"), merged.get("reference_id"))
            _check_dates(merged.get("override_start_date"), merged.get("override_end_date"), "override end date")
            update_data["updated_at"] = utcnow().isoformat()

            result = self.supabase.table("whats_on")\
                .update(update_data)\
                .eq("id", item_id)\
                .execute()
            if not result.data:
                raise not_found("What's On item")
            item = result.data[0]
            self.activity.log_activity(
                actor_id, "update", "homepage",
                resource_type="whats_on", resource_id=item_id, resource_name=self._label(item)
            )
            return self._resolve([item])[0]
        except HTTPException:
            raise
        except Exception as e:
            raise handle_supabase_error(e, "update What's On item")

    def delete_item(self, item_id: str, actor_id: Optional[str] = None) -> bool:
        try:
            current = self._get_row(item_id)
            result = self.supabase.table("whats_on")\
                .delete()\
                .eq("id", item_id)\
                .execute()
            self.activity.log_activity(
                actor_id, "delete", "homepage",
                resource_type="whats_on", resource_id=item_id, resource_name=self._label(current)
            )
            return bool(result.data)
        except HTTPException:
            raise
        except Exception as e:
            raise handle_supabase_error(e, "delete What's On item")

    def reorder(self, items: List[ReorderItem], actor_id: Optional[str] = None) -> List[WhatsOnResponse]:
        try:
            for entry in items:
                self.supabase.table("whats_on")\
                    .update({"sort_order": entry.sort_order})\
                    .eq("id", entry.id)\
                    .execute()
            self.activity.log_activity(
                actor_id, "reorder", "homepage",
                resource_type="whats_on", metadata={"count": len(items)}
            )
            return self.list_items()
        except HTTPException:
            raise
        except Exception as e:
            raise handle_supabase_error(e, "reorder What's On items")

    def toggle_active(self, item_id: str, actor_id: Optional[str] = None) -> WhatsOnResponse:
        try:
            current = self._get_row(item_id)
            is_active = not current.get("is_active", False)
            result = self.supabase.table("whats_on")\
                .update({"is_active": is_active, "updated_at": utcnow().isoformat()})\
                .eq("id", item_id)\
                .execute()
            if not result.data:
                raise not_found("What's On item")
            self.activity.log_activity(
                actor_id, "update", "homepage",
                resource_type="whats_on", resource_id=item_id, resource_name=self._label(current),
                old_values={"is_active": not is_active}, new_values={"is_active": is_active}
            )
            return self._resolve(result.data)[0]
        except HTTPException:
            raise
        except Exception as e:
            raise handle_supabase_error(e, "toggle What's On item")

    def reference_options(self, content_type: str) -> List[ReferenceOption]:
        """Selectable rows for a content type; published or active rows only"""
        if content_type not in REFERENCE_SOURCES:
            return []
        table, columns, _ = REFERENCE_SOURCES[content_type]
        try:
            query = self.supabase.table(table).select(columns)
            if content_type == "event":
                query = query.eq("is_published", True).order("start_at", desc=True).limit(50)
            elif content_type == "tenant":
                query = query.eq("is_active", True).order("name").limit(100)
            elif content_type == "post":
                query = query.eq("is_published", True).order("publish_at", desc=True).limit(50)
            else:
                query = query.eq("status", "published").order("start_date", desc=True).limit(50)
            result = query.execute()
            options = []
            for row in result.data or []:
                ref = _reference_data(row)
                options.append(ReferenceOption(id=ref.id, label=ref.title or "", image=ref.image_url))
            return options
        except Exception as e:
            raise handle_supabase_error(e, "reference options")


class FeaturedRestaurantService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.activity = ActivityService(supabase)

    def _get_row(self, restaurant_id: str) -> dict:
        result = self.supabase.table("featured_restaurants")\
            .select("*")\
            .eq("id", restaurant_id)\
            .limit(1)\
            .execute()
        if not result.data:
            raise not_found("Featured restaurant")
        return result.data[0]

    def _tenants(self, tenant_ids: List[str]) -> Dict[str, dict]:
        if not tenant_ids:
            return {}
        result = self.supabase.table("tenants")\
            .select("id, name, tenant_code, logo_url")\
            .in_("id", list(set(tenant_ids)))\
            .execute()
        return {t["id"]: t for t in result.data or []}

    def _with_tenants(self, rows: List[dict]) -> List[FeaturedRestaurantResponse]:
        tenants = self._tenants([r["tenant_id"] for r in rows if r.get("tenant_id")])
        return [
            FeaturedRestaurantResponse(
                **row,
                tenant=RestaurantTenant(**tenants[row["tenant_id"]]) if row.get("tenant_id") in tenants else None,
            )
            for row in rows
        ]

    def _require_tenant(self, tenant_id: str) -> dict:
        tenant = self._tenants([tenant_id]).get(tenant_id)
        if tenant is None:
            raise not_found("Tenant")
        return tenant

    def _already_featured(self, tenant_id: str, exclude_id: Optional[str] = None) -> bool:
        query = self.supabase.table("featured_restaurants")\
            .select("id")\
            .eq("tenant_id", tenant_id)
        if exclude_id:
            query = query.neq("id", exclude_id)
        return bool(query.limit(1).execute().data)

    def list_restaurants(self, is_active: Optional[bool] = None) -> List[FeaturedRestaurantResponse]:
        try:
            query = self.supabase.table("featured_restaurants").select("*")
            if is_active is not None:
                query = query.eq("is_active", is_active)
            result = query.order("sort_order").execute()
            return self._with_tenants(result.data or [])
        except Exception as e:
            raise handle_supabase_error(e, "list featured restaurants")

    def get_restaurant(self, restaurant_id: str) -> FeaturedRestaurantResponse:
        try:
            return self._with_tenants([self._get_row(restaurant_id)])[0]
        except HTTPException:
            raise
        except Exception as e:
            raise handle_supabase_error(e, "get featured restaurant")

    def create_restaurant(self, data: FeaturedRestaurantCreate, actor_id: Optional[str] = None) -> FeaturedRestaurantResponse:
        """Feature a tenant on the homepage; each tenant can be featured once"""
        try:
            tenant = self._require_tenant(data.tenant_id)
            if self._already_featured(data.tenant_id):
                raise HTTPException(status_code=409, detail="This restaurant is already featured")
            payload = data.model_dump(mode="json")
            payload["created_by"] = actor_id

            result = self.supabase.table("featured_restaurants").insert(payload).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to feature restaurant")
            row = result.data[0]
            self.activity.log_activity(
                actor_id, "create", "homepage",
                resource_type="featured_restaurant", resource_id=row["id"], resource_name=tenant.get("name")
            )
            return self._with_tenants([row])[0]
        except HTTPException:
            raise
        except Exception as e:
            raise handle_supabase_error(e, "create featured restaurant")

    def update_restaurant(
        self, restaurant_id: str, data: FeaturedRestaurantUpdate, actor_id: Optional[str] = None
    ) -> FeaturedRestaurantResponse:
        try:
            current = self._get_row(restaurant_id)
            update_data = data.model_dump(mode="json", exclude_unset=True)
            tenant_id = update_data.get("tenant_id")
            if tenant_id and tenant_id != current.get("tenant_id"):
                self._require_tenant(tenant_id)
                if self._already_featured(tenant_id, exclude_id=restaurant_id):
                    raise HTTPException(status_code=409, detail="This restaurant is already featured")
            merged = {**current, **update_data}
            _check_dates(merged.get("start_date"), merged.get("end_date"))
            update_data["updated_at"] = utcnow().isoformat()

            result = self.supabase.table("featured_restaurants")\
                .update(update_data)\
                .eq("id", restaurant_id)\
                .execute()
            if not result.data:
                raise not_found("Featured restaurant")
            restaurant = self._with_tenants(result.data)[0]
            self.activity.log_activity(
                actor_id, "update", "homepage",
                resource_type="featured_restaurant", resource_id=restaurant_id,
                resource_name=restaurant.tenant.name if restaurant.tenant else None
            )
            return restaurant
        except HTTPException:
            raise
        except Exception as e:
            raise handle_supabase_error(e, "update featured restaurant")

    def delete_restaurant(self, restaurant_id: str, actor_id: Optional[str] = None) -> bool:
        try:
            current = self._with_tenants([self._get_row(restaurant_id)])[0]
            result = self.supabase.table("featured_restaurants")\
                .delete()\
                .eq("id", restaurant_id)\
                .execute()
            self.activity.log_activity(
                actor_id, "delete", "homepage",
                resource_type="featured_restaurant", resource_id=restaurant_id,
                resource_name=current.tenant.name if current.tenant else None
            )
            return bool(result.data)
        except HTTPException:
            raise
        except Exception as e:
            raise handle_supabase_error(e, "delete featured restaurant")

    def reorder(self, items: List[ReorderItem], actor_id: Optional[str] = None) -> List[FeaturedRestaurantResponse]:
        try:
            for entry in items:
                self.supabase.table("featured_restaurants")\
                    .update({"sort_order": entry.sort_order})\
                    .eq("id", entry.id)\
                    .execute()
            self.activity.log_activity(
                actor_id, "reorder", "homepage",
                resource_type="featured_restaurant", metadata={"count": len(items)}
            )
            return self.list_restaurants()
        except HTTPException:
            raise
        except Exception as e:
            raise handle_supabase_error(e, "reorder featured restaurants")

    def toggle_active(self, restaurant_id: str, actor_id: Optional[str] = None) -> FeaturedRestaurantResponse:
        try:
            current = self._get_row(restaurant_id)
            is_active = not current.get("is_active", False)
            result = self.supabase.table("featured_restaurants")\
                .update({"is_active": is_active, "updated_at": utcnow().isoformat()})\
                .eq("id", restaurant_id)\
                .execute()
            if not result.data:
                raise not_found("Featured restaurant")
            restaurant = self._with_tenants(result.data)[0]
            self.activity.log_activity(
                actor_id, "update", "homepage",
                resource_type="featured_restaurant", resource_id=restaurant_id,
                resource_name=restaurant.tenant.name if restaurant.tenant else None,
                old_values={"is_active": not is_active}, new_values={"is_active": is_active}
            )
            return restaurant
        except HTTPException:
            raise
        except Exception as e:
            raise handle_supabase_error(e, "toggle featured restaurant")
