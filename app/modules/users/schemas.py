from pydantic import BaseModel, EmailStr, Field
from typing import Optional, List
from datetime import datetime
from app.modules.auth.schemas import UserRole


class AdminUserCreate(BaseModel):
    email: EmailStr
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    is_active: bool = True
    role_ids: List[str] = Field(default_factory=list)


class AdminUserUpdate(BaseModel):
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    is_active: Optional[bool] = None


class AdminUserResponse(BaseModel):
    id: str
    email: str
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class AdminUserWithRolesResponse(AdminUserResponse):
    roles: List[UserRole] = Field(default_factory=list)


class UserRolesUpdate(BaseModel):
    role_ids: List[str]
