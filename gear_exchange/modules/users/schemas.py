from pydantic import BaseModel
from typing import Optional, List
from datetime import datetime

from gear_exchange.core.validators import FullName, Merhav, Phone


class UserResponse(BaseModel):
    """Public view of a user row; the credential never leaves the service layer."""
    id: str
    username: str
    email: str
    full_name: Optional[str] = None
    phone: Optional[str] = None
    merhav: Optional[str] = None
    role: str
    volunteer_declaration: bool = False
    approved_at: Optional[datetime] = None
    approved_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ProfileUpdate(BaseModel):
    """Caller-editable profile fields. Anything else in the body (role included) is ignored."""
    full_name: Optional[FullName] = None
    phone: Optional[Phone] = None
    merhav: Optional[Merhav] = None


class ProfileUpdateResponse(BaseModel):
    message: str
    profile: UserResponse


class UserListResponse(BaseModel):
    users: List[UserResponse]
