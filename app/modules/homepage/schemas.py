from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Optional, List, Literal
from datetime import datetime
from app.core.content_status import parse_timestamp

WhatsOnContentType = Literal["event", "tenant", "post", "promotion", "custom"]


class WhatsOnCreate(BaseModel):
    content_type: WhatsOnContentType
    reference_id: Optional[str] = None
    custom_title: Optional[str] = Field(None, max_length=255)
    custom_description: Optional[str] = None
    custom_image_url: Optional[str] = None
    custom_link_url: Optional[str] = None
    sort_order: int = 0
    is_active: bool = True
    override_start_date: Optional[datetime] = None
    override_end_date: Optional[datetime] = None

    @field_validator("override_start_date", "override_end_date")
    @classmethod
    def as_utc(cls, value):
        return parse_timestamp(value)

    @model_validator(mode="after")
    def check_item(self):
        if self.content_type == "custom" and not self.custom_title:
            raise ValueError("custom_title is required for custom items")
        if self.content_type != "custom" and not self.reference_id:
            raise ValueError("reference_id is required")
        if self.override_start_date and self.override_end_date \
                and self.override_end_date < self.override_start_date:
            raise ValueError("override_end_date must not be before override_start_date")
        return self


class WhatsOnUpdate(BaseModel):
    content_type: Optional[WhatsOnContentType] = None
    reference_id: Optional[str] = None
    custom_title: Optional[str] = Field(None, max_length=255)
    custom_description: Optional[str] = None
    custom_image_url: Optional[str] = None
    custom_link_url: Optional[str] = None
    sort_order: Optional[int] = None
    is_active: Optional[bool] = None
    override_start_date: Optional[datetime] = None
    override_end_date: Optional[datetime] = None

    @field_validator("override_start_date", "override_end_date")
    @classmethod
    def as_utc(cls, value):
        return parse_timestamp(value)


class ReferenceData(BaseModel):
    id: str
    title: Optional[str] = None
    image_url: Optional[str] = None


class WhatsOnResponse(BaseModel):
    id: str
    content_type: str
    reference_id: Optional[str] = None
    custom_title: Optional[str] = None
    custom_description: Optional[str] = None
    custom_image_url: Optional[str] = None
    custom_link_url: Optional[str] = None
    sort_order: int = 0
    is_active: bool = True
    override_start_date: Optional[datetime] = None
    override_end_date: Optional[datetime] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    reference_data: Optional[ReferenceData] = None


class ReferenceOption(BaseModel):
    id: str
    label: str
    image: Optional[str] = None


class ReorderItem(BaseModel):
    id: str
    sort_order: int


class ReorderRequest(BaseModel):
    items: List[ReorderItem] = Field(..., min_length=1)


class FeaturedRestaurantCreate(BaseModel):
    tenant_id: str
    featured_image_url: Optional[str] = None
    featured_description: Optional[str] = None
    highlight_text: Optional[str] = Field(None, max_length=100)
    sort_order: int = 0
    is_active: bool = True
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None

    @field_validator("start_date", "end_date")
    @classmethod
    def as_utc(cls, value):
        return parse_timestamp(value)

    @model_validator(mode="after")
    def end_after_start(self):
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class FeaturedRestaurantUpdate(BaseModel):
    tenant_id: Optional[str] = None
    featured_image_url: Optional[str] = None
    featured_description: Optional[str] = None
    highlight_text: Optional[str] = Field(None, max_length=100)
    sort_order: Optional[int] = None
    is_active: Optional[bool] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None

    @field_validator("start_date", "end_date")
    @classmethod
    def as_utc(cls, value):
        return parse_timestamp(value)

    @model_validator(mode="after")
    def end_after_start(self):
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class RestaurantTenant(BaseModel):
    id: str
    name: str
    tenant_code: Optional[str] = None
    logo_url: Optional[str] = None


class FeaturedRestaurantResponse(BaseModel):
    id: str
    tenant_id: str
    featured_image_url: Optional[str] = None
    featured_description: Optional[str] = None
    highlight_text: Optional[str] = None
    sort_order: int = 0
    is_active: bool = True
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    tenant: Optional[RestaurantTenant] = None
