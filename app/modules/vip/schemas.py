from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime


class VipTierCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    qualification_requirement: Optional[str] = None
    minimum_spend_amount: float = Field(0, ge=0)
    minimum_receipt_amount: Optional[float] = Field(None, ge=0)
    tier_level: int = Field(1, ge=1)
    card_color: str = "#6b7280"
    is_active: bool = True
    sort_order: int = 0


class VipTierUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    qualification_requirement: Optional[str] = None
    minimum_spend_amount: Optional[float] = Field(None, ge=0)
    minimum_receipt_amount: Optional[float] = Field(None, ge=0)
    tier_level: Optional[int] = Field(None, ge=1)
    card_color: Optional[str] = None
    is_active: Optional[bool] = None
    sort_order: Optional[int] = None


class VipTierResponse(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    qualification_requirement: Optional[str] = None
    minimum_spend_amount: float = 0
    minimum_receipt_amount: Optional[float] = None
    tier_level: int
    card_color: Optional[str] = None
    is_active: bool = True
    sort_order: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class TierBenefit(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    icon: Optional[str] = None
    benefit_note: Optional[str] = None
    display_order: int = 0


class VipTierWithBenefitsResponse(VipTierResponse):
    benefits: List[TierBenefit] = []
