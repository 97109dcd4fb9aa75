from pydantic import BaseModel, Field
from typing import Optional, List, Dict
from datetime import datetime

ENQUIRY_TYPES = ["General", "Leasing", "Marketing", "Legal", "Lost & Found", "Parking & Security"]


class ContactResponse(BaseModel):
    id: str
    full_name: str
    email: str
    phone_number: Optional[str] = None
    enquiry_type: str
    enquiry_details: str
    submitted_date: Optional[datetime] = None
    is_read: bool = False
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class AdminReply(BaseModel):
    id: str
    response_message: str
    responded_at: Optional[datetime] = None
    responded_by: Optional[str] = None
    admin_name: Optional[str] = None


class ContactDetailResponse(ContactResponse):
    admin_response: Optional[AdminReply] = None


class ContactIds(BaseModel):
    ids: List[str] = Field(..., min_length=1)


class BulkContactResult(BaseModel):
    count: int


class ContactStats(BaseModel):
    total: int
    unread: int
    by_type: Dict[str, int]
    today_count: int
    week_count: int
