from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Optional, List, Dict, Any, Literal
from datetime import datetime
from app.core.content_status import parse_timestamp

PromotionStatus = Literal["staging", "published", "expired"]


class PromotionCreate(BaseModel):
    tenant_id: str
    title: str = Field(..., min_length=1, max_length=255)
    full_description: Optional[str] = None
    image_url: Optional[str] = None
    source_post: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    status: PromotionStatus = "staging"
    raw_json: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("start_date", "end_date")
    @classmethod
    def as_utc(cls, value):
        return parse_timestamp(value)

    @model_validator(mode="after")
    def end_after_start(self):
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class PromotionUpdate(BaseModel):
    tenant_id: Optional[str] = None
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    full_description: Optional[str] = None
    image_url: Optional[str] = None
    source_post: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    status: Optional[PromotionStatus] = None

    @field_validator("start_date", "end_date")
    @classmethod
    def as_utc(cls, value):
        return parse_timestamp(value)

    @model_validator(mode="after")
    def end_after_start(self):
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class PromotionStatusUpdate(BaseModel):
    status: PromotionStatus


class PromotionTenant(BaseModel):
    id: str
    name: str
    tenant_code: Optional[str] = None
    logo_url: Optional[str] = None
    category_id: Optional[str] = None
    main_floor: Optional[str] = None


class PromotionResponse(BaseModel):
    id: str
    tenant_id: Optional[str] = None
    title: str
    full_description: Optional[str] = None
    image_url: Optional[str] = None
    source_post: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    status: PromotionStatus = "staging"
    published_at: Optional[datetime] = None
    raw_json: Optional[Dict[str, Any]] = None
    created_at: Optional[datetime] = None
    tenant: Optional[PromotionTenant] = None

    class Config:
        from_attributes = True


class AutoExpireResult(BaseModel):
    expired_count: int
    expired_ids: List[str]
