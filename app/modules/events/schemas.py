from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Optional, List
from datetime import datetime
from app.core.content_status import ContentBucket, parse_timestamp


class EventImage(BaseModel):
    url: str
    alt: Optional[str] = None
    caption: Optional[str] = None


class EventCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    slug: Optional[str] = None
    summary: Optional[str] = None
    body: Optional[str] = None
    start_at: datetime
    end_at: Optional[datetime] = None
    venue: Optional[str] = None
    images: List[EventImage] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    is_published: bool = False
    is_featured: bool = False

    @field_validator("start_at", "end_at")
    @classmethod
    def as_utc(cls, value):
        return parse_timestamp(value)

    @model_validator(mode="after")
    def end_after_start(self):
        if self.end_at and self.end_at < self.start_at:
            raise ValueError("end_at must not be before start_at")
        return self


class EventUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    slug: Optional[str] = None
    summary: Optional[str] = None
    body: Optional[str] = None
    start_at: Optional[datetime] = None
    end_at: Optional[datetime] = None
    venue: Optional[str] = None
    images: Optional[List[EventImage]] = None
    tags: Optional[List[str]] = None
    is_published: Optional[bool] = None
    is_featured: Optional[bool] = None

    @field_validator("start_at", "end_at")
    @classmethod
    def as_utc(cls, value):
        return parse_timestamp(value)

    @model_validator(mode="after")
    def end_after_start(self):
        if self.start_at and self.end_at and self.end_at < self.start_at:
            raise ValueError("end_at must not be before start_at")
        return self


class EventResponse(BaseModel):
    id: str
    title: str
    slug: str
    summary: Optional[str] = None
    body: Optional[str] = None
    start_at: Optional[datetime] = None
    end_at: Optional[datetime] = None
    venue: Optional[str] = None
    images: List[EventImage] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    is_published: bool = False
    is_featured: bool = False
    status: ContentBucket = ContentBucket.DRAFT
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
