from pydantic import BaseModel, Field
from typing import Optional, Dict, Any
from datetime import datetime


class TenantCreate(BaseModel):
    tenant_code: Optional[str] = Field(None, max_length=20)
    name: str = Field(..., min_length=1, max_length=255)
    category_id: Optional[str] = None
    description: Optional[str] = None
    main_floor: Optional[str] = None
    operating_hours: Optional[Dict[str, Any]] = None
    phone: Optional[str] = None
    logo_url: Optional[str] = None
    banner_url: Optional[str] = None
    is_active: bool = True
    is_featured: bool = False
    is_new_tenant: bool = False


class TenantUpdate(BaseModel):
    tenant_code: Optional[str] = Field(None, max_length=20)
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    category_id: Optional[str] = None
    description: Optional[str] = None
    main_floor: Optional[str] = None
    operating_hours: Optional[Dict[str, Any]] = None
    phone: Optional[str] = None
    logo_url: Optional[str] = None
    banner_url: Optional[str] = None
    is_active: Optional[bool] = None
    is_featured: Optional[bool] = None
    is_new_tenant: Optional[bool] = None


class TenantResponse(BaseModel):
    id: str
    tenant_code: str
    name: str
    category_id: Optional[str] = None
    description: Optional[str] = None
    main_floor: Optional[str] = None
    operating_hours: Optional[Dict[str, Any]] = None
    phone: Optional[str] = None
    logo_url: Optional[str] = None
    banner_url: Optional[str] = None
    is_active: bool = True
    is_featured: bool = False
    is_new_tenant: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
