from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime


class PermissionCreate(BaseModel):
    module: str
    action: str
    display_name: Optional[str] = None
    description: Optional[str] = None
    is_active: bool = True


class PermissionUpdate(BaseModel):
    module: Optional[str] = None
    action: Optional[str] = None
    display_name: Optional[str] = None
    description: Optional[str] = None
    is_active: Optional[bool] = None


class PermissionResponse(BaseModel):
    id: str
    name: str
    display_name: Optional[str] = None
    description: Optional[str] = None
    module: str
    action: str
    is_active: bool = True
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class RoleCreate(BaseModel):
    name: str = Field(..., min_length=1)
    display_name: str
    description: Optional[str] = None
    color: Optional[str] = None
    is_active: bool = True
    permission_ids: List[str] = Field(default_factory=list)


class RoleUpdate(BaseModel):
    name: Optional[str] = None
    display_name: Optional[str] = None
    description: Optional[str] = None
    color: Optional[str] = None
    sort_order: Optional[int] = None
    is_active: Optional[bool] = None
    permission_ids: Optional[List[str]] = None


class RoleResponse(BaseModel):
    id: str
    name: str
    display_name: Optional[str] = None
    description: Optional[str] = None
    color: Optional[str] = None
    sort_order: int = 0
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class RoleWithPermissionsResponse(RoleResponse):
    permissions: List[PermissionResponse] = Field(default_factory=list)
    user_count: int = 0


class RolePermissionAssign(BaseModel):
    permission_id: str


class RolePermissionResponse(BaseModel):
    id: str
    role_id: str
    permission_id: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class BulkPermissionAssign(BaseModel):
    permission_ids: List[str]


class BulkPermissionAssignResponse(BaseModel):
    role_id: str
    assigned_count: int
    skipped_count: int
    assigned_permissions: List[RolePermissionResponse]
    message: str


class BulkPermissionUpdate(BaseModel):
    permission_ids: List[str]
