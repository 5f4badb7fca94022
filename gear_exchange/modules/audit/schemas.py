from pydantic import BaseModel
from typing import Optional, List, Dict, Any
from datetime import datetime


class AuditUserRef(BaseModel):
    full_name: Optional[str] = None
    email: Optional[str] = None


class AuditLogEntryResponse(BaseModel):
    id: str
    admin_id: Optional[str] = None
    action: str
    target_user_id: Optional[str] = None
    details: Optional[Dict[str, Any]] = None
    created_at: Optional[datetime] = None
    admin: Optional[AuditUserRef] = None
    target_user: Optional[AuditUserRef] = None

    class Config:
        from_attributes = True


class AuditLogResponse(BaseModel):
    log: List[AuditLogEntryResponse]
