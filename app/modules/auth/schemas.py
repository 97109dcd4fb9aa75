from pydantic import BaseModel, EmailStr, Field
from typing import Optional, List, Set
from datetime import datetime


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class UserRole(BaseModel):
    id: str
    name: str
    display_name: Optional[str] = None
    description: Optional[str] = None
    color: Optional[str] = None


class AuthUser(BaseModel):
    """Snapshot of an admin user with roles and the union of their permissions."""
    id: str
    email: str
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    is_active: bool = True
    roles: List[UserRole] = Field(default_factory=list)
    permissions: Set[str] = Field(default_factory=set)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class SessionResponse(BaseModel):
    user: AuthUser
    permissions: List[str]
    is_super_admin: bool
    highest_role: Optional[str] = None
    accessible_modules: List[str]


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: AuthUser


class PermissionCheckRequest(BaseModel):
    module: str
    action: str
