from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from pydantic import ValidationError as PydanticValidationError
from gear_exchange.config.settings import settings
from gear_exchange.core.dependencies import (
    get_current_user, get_optional_user, require_ownership_or_admin, require_verified_volunteer
)
from gear_exchange.core.exceptions import ValidationError, format_validation_errors
from gear_exchange.database.supabase_client import get_service_supabase
from gear_exchange.modules.listings.image_storage import get_image_storage, read_image_upload
from gear_exchange.modules.listings.schemas import (
    ListingCreate, ListingDetailResponse, ListingFilters, ListingListResponse,
    ListingMutationResponse, ListingUpdate, ViewIncrementResponse
)
from gear_exchange.modules.listings.service import ListingService
from supabase import Client
from typing import Dict, Optional
from uuid import UUID

router = APIRouter(prefix="/listings", tags=["listings"])


def get_listing_service(
    service_supabase: Client = Depends(get_service_supabase),
    storage=Depends(get_image_storage)
) -> ListingService:
    return ListingService(service_supabase, storage)


def _is_true(value: Optional[str]) -> bool:
    return value is not None and value.strip().lower() == "true"


# Form fields an explicit empty value clears; FastAPI reports "" as missing
CLEARABLE_FIELDS = ("description", "size")


def _parse_form(model, fields: Dict):
    try:
        return model(**fields)
    except PydanticValidationError as e:
        raise ValidationError(details=format_validation_errors(e.errors()))


@router.get("", response_model=ListingListResponse)
async def list_listings(
    category: Optional[str] = None,
    merhav: Optional[str] = None,
    transaction_type: Optional[str] = None,
    search: Optional[str] = None,
    user_data: Optional[Dict] = Depends(get_optional_user),
    service: ListingService = Depends(get_listing_service)
):
    """Available listings; volunteer-only ones are shown to verified volunteers and admins"""
    filters = ListingFilters(category=category, merhav=merhav, transaction_type=transaction_type, search=search)
    return {"listings": service.list_listings(user_data, filters)}


@router.get("/my/listings", response_model=ListingListResponse)
async def list_my_listings(
    current_user: Dict = Depends(get_current_user),
    service: ListingService = Depends(get_listing_service)
):
    """All of the caller's listings, including unavailable ones"""
    return {"listings": service.list_owner_listings(current_user["id"])}


@router.get("/{listing_id}", response_model=ListingDetailResponse)
async def get_listing(
    listing_id: UUID,
    user_data: Optional[Dict] = Depends(get_optional_user),
    service: ListingService = Depends(get_listing_service)
):
    """Get a single listing by ID"""
    return {"listing": service.get_visible_listing(str(listing_id), user_data)}


@router.post("/{listing_id}/increment-view", response_model=ViewIncrementResponse)
async def increment_view(
    listing_id: UUID,
    service: ListingService = Depends(get_listing_service)
):
    """View counting is not critical: failures are reported in the body, never as an error status"""
    if service.increment_views(str(listing_id)):
        return ViewIncrementResponse(success=True)
    return ViewIncrementResponse(success=False, error="Failed to increment view")


@router.post("", response_model=ListingMutationResponse, status_code=201)
async def create_listing(
    current_user: Dict = Depends(require_verified_volunteer),
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    category: Optional[str] = Form(None),
    transaction_type: Optional[str] = Form(None),
    size: Optional[str] = Form(None),
    merhav: Optional[str] = Form(None),
    volunteer_only: Optional[str] = Form(None),
    image1: Optional[UploadFile] = File(None),
    image2: Optional[UploadFile] = File(None),
    service: ListingService = Depends(get_listing_service)
):
    """Create a new listing (verified volunteers and admins only)"""
    fields = {
        "title": title,
        "description": description,
        "category": category,
        "transaction_type": transaction_type,
        "size": size,
        "merhav": merhav,
        "volunteer_only": _is_true(volunteer_only)
    }
    listing_data = _parse_form(ListingCreate, fields)
    images = {
        "image1": await read_image_upload(image1, settings.max_image_bytes),
        "image2": await read_image_upload(image2, settings.max_image_bytes)
    }
    listing = service.create_listing(current_user["id"], listing_data, images)
    return {"message": "Listing created successfully", "listing": listing}


@router.patch("/{listing_id}", response_model=ListingMutationResponse)
async def update_listing(
    listing_id: UUID,
    request: Request,
    current_user: Dict = Depends(get_current_user),
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    category: Optional[str] = Form(None),
    transaction_type: Optional[str] = Form(None),
    size: Optional[str] = Form(None),
    merhav: Optional[str] = Form(None),
    volunteer_only: Optional[str] = Form(None),
    is_available: Optional[str] = Form(None),
    remove_image1: Optional[str] = Form(None, alias="removeImage1"),
    remove_image2: Optional[str] = Form(None, alias="removeImage2"),
    image1: Optional[UploadFile] = File(None),
    image2: Optional[UploadFile] = File(None),
    service: ListingService = Depends(get_listing_service)
):
    """Update a listing (owner or admin only)"""
    listing = service.get_listing(str(listing_id), with_owner=False)
    require_ownership_or_admin(current_user, listing, "owner_id", "You can only edit your own listings")

    submitted = {
        "title": title,
        "description": description,
        "category": category,
        "transaction_type": transaction_type,
        "size": size,
        "merhav": merhav,
        "volunteer_only": volunteer_only,
        "is_available": is_available
    }
    fields = {k: v for k, v in submitted.items() if v is not None}
    form = await request.form()
    for field in CLEARABLE_FIELDS:
        if field not in fields and form.get(field) == "":
            fields[field] = None
    listing_data = _parse_form(ListingUpdate, fields)
    images = {
        "image1": await read_image_upload(image1, settings.max_image_bytes),
        "image2": await read_image_upload(image2, settings.max_image_bytes)
    }
    remove_images = {"image1": _is_true(remove_image1), "image2": _is_true(remove_image2)}
    updated = service.update_listing(listing, listing_data, images, remove_images)
    return {"message": "Listing updated successfully", "listing": updated}


@router.delete("/{listing_id}", status_code=200)
async def delete_listing(
    listing_id: UUID,
    current_user: Dict = Depends(get_current_user),
    service: ListingService = Depends(get_listing_service)
):
    """Delete a listing (owner or admin only)"""
    listing = service.get_listing(str(listing_id), with_owner=False)
    require_ownership_or_admin(current_user, listing, "owner_id", "You can only delete your own listings")
    service.delete_listing(listing)
    return {"message": "Listing deleted successfully"}
