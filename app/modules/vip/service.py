import logging
from supabase import Client
from app.modules.vip.schemas import (
    TierBenefit, VipTierCreate, VipTierResponse, VipTierUpdate, VipTierWithBenefitsResponse
)
from app.modules.activity.service import ActivityService
from app.core.content_status import utcnow
from app.core.errors import handle_supabase_error, not_found
from typing import List, Optional
from fastapi import HTTPException

logger = logging.getLogger(__name__)


class VipTierService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.activity = ActivityService(supabase)

    def _get_row(self, tier_id: str) -> dict:
        result = self.supabase.table("vip_tiers")\
            .select("*")\
            .eq("id", tier_id)\
            .limit(1)\
            .execute()
        if not result.data:
            raise not_found("VIP tier")
        return result.data[0]

    def _level_taken(self, tier_level: int, exclude_id: Optional[str] = None) -> bool:
        query = self.supabase.table("vip_tiers")\
            .select("id")\
            .eq("tier_level", tier_level)
        if exclude_id:
            query = query.neq("id", exclude_id)
        return bool(query.limit(1).execute().data)

    def _tier_benefits(self, tier_id: str) -> List[TierBenefit]:
        links = self.supabase.table("vip_tier_benefits")\
            .select("benefit_id, benefit_note, display_order")\
            .eq("tier_id", tier_id)\
            .execute()
        if not links.data:
            return []
        benefits = self.supabase.table("vip_benefits")\
            .select("id, name, description, icon")\
            .in_("id", [link["benefit_id"] for link in links.data])\
            .execute()
        by_id = {b["id"]: b for b in benefits.data or []}
        result = [
            TierBenefit(
                **by_id[link["benefit_id"]],
                benefit_note=link.get("benefit_note"),
                display_order=link.get("display_order") or 0,
            )
            for link in links.data
            if link["benefit_id"] in by_id
        ]
        return sorted(result, key=lambda b: b.display_order)

    def list_tiers(self, is_active: Optional[bool] = None) -> List[VipTierResponse]:
        try:
            query = self.supabase.table("vip_tiers").select("*")
            if is_active is not None:
                query = query.eq("is_active", is_active)
            result = query.order("tier_level").execute()
            return [VipTierResponse(**row) for row in result.data or []]
        except Exception as e:
            raise handle_supabase_error(e, "list VIP tiers")

    def get_tier(self, tier_id: str) -> VipTierWithBenefitsResponse:
        try:
            row = self._get_row(tier_id)
            return VipTierWithBenefitsResponse(**row, benefits=self._tier_benefits(tier_id))
        except HTTPException:
            raise
        except Exception as e:
            raise handle_supabase_error(e, "get VIP tier")

    def create_tier(self, tier_data: VipTierCreate, actor_id: Optional[str] = None) -> VipTierResponse:
        """Create a tier; tier_level is unique across tiers"""
        try:
            if self._level_taken(tier_data.tier_level):
                raise HTTPException(status_code=409, detail=f"A tier with level {tier_data.tier_level} already exists")
            result = self.supabase.table("vip_tiers").insert(tier_data.model_dump()).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create VIP tier")
            tier = VipTierResponse(**result.data[0])
            self.activity.log_activity(
                actor_id, "create", "vip",
                resource_type="tier", resource_id=tier.id, resource_name=tier.name
            )
            return tier
        except HTTPException:
            raise
        except Exception as e:
            raise handle_supabase_error(e, "create VIP tier")

    def update_tier(self, tier_id: str, tier_data: VipTierUpdate, actor_id: Optional[str] = None) -> VipTierResponse:
        try:
            current = self._get_row(tier_id)
            update_data = tier_data.model_dump(exclude_unset=True)
            level = update_data.get("tier_level")
            if level is not None and level != current.get("tier_level") \
                    and self._level_taken(level, exclude_id=tier_id):
                raise HTTPException(status_code=409, detail=f"A tier with level {level} already exists")
            update_data["updated_at"] = utcnow().isoformat()

            result = self.supabase.table("vip_tiers")\
                .update(update_data)\
                .eq("id", tier_id)\
                .execute()
            if not result.data:
                raise not_found("VIP tier")
            tier = VipTierResponse(**result.data[0])
            self.activity.log_activity(
                actor_id, "update", "vip",
                resource_type="tier", resource_id=tier_id, resource_name=tier.name,
                new_values=tier_data.model_dump(exclude_unset=True)
            )
            return tier
        except HTTPException:
            raise
        except Exception as e:
            raise handle_supabase_error(e, "update VIP tier")

    def delete_tier(self, tier_id: str, actor_id: Optional[str] = None) -> bool:
        try:
            current = self._get_row(tier_id)
            self.supabase.table("vip_tier_benefits")\
                .delete()\
                .eq("tier_id", tier_id)\
                .execute()
            result = self.supabase.table("vip_tiers")\
                .delete()\
                .eq("id", tier_id)\
                .execute()
            self.activity.log_activity(
                actor_id, "delete", "vip",
                resource_type="tier", resource_id=tier_id, resource_name=current.get("name")
            )
            return bool(result.data)
        except HTTPException:
            raise
        except Exception as e:
            raise handle_supabase_error(e, "delete VIP tier")

    def toggle_active(self, tier_id: str, actor_id: Optional[str] = None) -> VipTierResponse:
        try:
            current = self._get_row(tier_id)
            is_active = not current.get("is_active", False)
            result = self.supabase.table("vip_tiers")\
                .update({"is_active": is_active, "updated_at": utcnow().isoformat()})\
                .eq("id", tier_id)\
                .execute()
            if not result.data:
                raise not_found("VIP tier")
            self.activity.log_activity(
                actor_id, "activate" if is_active else "deactivate", "vip",
                resource_type="tier", resource_id=tier_id, resource_name=current.get("name")
            )
            return VipTierResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise handle_supabase_error(e, "toggle VIP tier")
