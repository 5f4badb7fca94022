from pydantic import BaseModel
from typing import Optional, List

from gear_exchange.modules.users.schemas import UserResponse


class PlatformStats(BaseModel):
    total_users: int
    pending_volunteers: int
    verified_volunteers: int
    admins: int
    regular_users: int
    active_listings: Optional[int] = None


class StatsResponse(BaseModel):
    stats: PlatformStats


class PendingVolunteersResponse(BaseModel):
    pending: List[UserResponse]


class RoleChangeResponse(BaseModel):
    message: str
    user: UserResponse


class DeleteUserResponse(BaseModel):
    message: str
    deleted_user: Optional[str] = None
    deleted_listings: int = 0
