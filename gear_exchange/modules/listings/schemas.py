from pydantic import BaseModel, field_validator
from typing import Optional, List
from datetime import datetime

from gear_exchange.core.validators import Category, Description, Merhav, Title, TransactionType


def _blank_to_none(v: Optional[str]) -> Optional[str]:
    if v is None:
        return None
    v = v.strip()
    return v or None


class ListingCreate(BaseModel):
    title: Title
    description: Description = None
    category: Category
    transaction_type: TransactionType
    size: Optional[str] = None
    merhav: Merhav
    volunteer_only: bool = False

    @field_validator("size")
    @classmethod
    def normalize_size(cls, v: Optional[str]) -> Optional[str]:
        return _blank_to_none(v)


class ListingUpdate(BaseModel):
    title: Optional[Title] = None
    description: Description = None
    category: Optional[Category] = None
    transaction_type: Optional[TransactionType] = None
    size: Optional[str] = None
    merhav: Optional[Merhav] = None
    volunteer_only: Optional[bool] = None
    is_available: Optional[bool] = None

    @field_validator("size")
    @classmethod
    def normalize_size(cls, v: Optional[str]) -> Optional[str]:
        return _blank_to_none(v)


class ListingFilters(BaseModel):
    category: Optional[str] = None
    merhav: Optional[str] = None
    transaction_type: Optional[str] = None
    search: Optional[str] = None


class ListingOwner(BaseModel):
    id: Optional[str] = None
    full_name: Optional[str] = None
    phone: Optional[str] = None
    merhav: Optional[str] = None


class ListingResponse(BaseModel):
    id: str
    owner_id: Optional[str] = None
    title: str
    description: Optional[str] = None
    category: str
    transaction_type: str
    size: Optional[str] = None
    merhav: Optional[str] = None
    image1: Optional[str] = None
    image2: Optional[str] = None
    volunteer_only: bool = False
    is_available: bool = True
    views: int = 0
    created_at: Optional[datetime] = None
    owner: Optional[ListingOwner] = None

    class Config:
        from_attributes = True


class ListingListResponse(BaseModel):
    listings: List[ListingResponse]


class ListingDetailResponse(BaseModel):
    listing: ListingResponse


class ListingMutationResponse(BaseModel):
    message: str
    listing: ListingResponse


class ViewIncrementResponse(BaseModel):
    success: bool
    error: Optional[str] = None
