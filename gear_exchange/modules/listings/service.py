from supabase import Client
from gear_exchange.core.exceptions import AppError, NotFound, ServerError, ValidationError
from gear_exchange.modules.listings.schemas import ListingCreate, ListingFilters, ListingUpdate
from gear_exchange.modules.listings.visibility import apply_filters, apply_visibility, caller_role, ensure_listing_visible
from typing import Any, Dict, List, Optional, Tuple
import logging

logger = logging.getLogger(__name__)

LISTING_SELECT = "*, owner:users!owner_id(id, full_name, phone, merhav)"
IMAGE_FIELDS = ("image1", "image2")

# (content, original filename, content type)
ImageUpload = Tuple[bytes, str, str]


class ListingService:
    """
    Listing reads and writes. Runs on the privileged client, so every method
    relies on the caller having applied the role/ownership checks or on the
    visibility rules enforced here.
    """

    def __init__(self, supabase: Client, storage):
        self.supabase = supabase
        self.storage = storage

    def list_listings(self, user_data: Optional[Dict[str, Any]], filters: ListingFilters) -> List[Dict[str, Any]]:
        """Available listings visible to the caller, newest first"""
        try:
            query = self.supabase.table("listings").select(LISTING_SELECT)
            query = apply_visibility(query, caller_role(user_data))
            query = apply_filters(query, filters)
            result = query.order("created_at", desc=True).execute()
            return result.data or []
        except Exception as e:
            logger.error(f"Fetch listings error: {e}")
            raise ServerError("Server error fetching listings")

    def get_listing(self, listing_id: str, with_owner: bool = True) -> Dict[str, Any]:
        try:
            result = self.supabase.table("listings")\
                .select(LISTING_SELECT if with_owner else "*")\
                .eq("id", listing_id)\
                .limit(1)\
                .execute()
        except Exception as e:
            logger.error(f"Get listing error: {e}")
            raise ServerError("Server error fetching listing")
        if not result.data:
            raise NotFound("Listing not found")
        return result.data[0]

    def get_visible_listing(self, listing_id: str, user_data: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        """Fetch unconditionally, then refuse volunteer-only listings to non-volunteers (403, not 404)"""
        listing = self.get_listing(listing_id)
        ensure_listing_visible(listing, user_data)
        return listing

    def list_owner_listings(self, owner_id: str) -> List[Dict[str, Any]]:
        try:
            result = self.supabase.table("listings")\
                .select("*")\
                .eq("owner_id", owner_id)\
                .order("created_at", desc=True)\
                .execute()
            return result.data or []
        except Exception as e:
            logger.error(f"Fetch my listings error: {e}")
            raise ServerError("Server error fetching your listings")

    def _store_images(self, images: Dict[str, Optional[ImageUpload]]) -> Dict[str, str]:
        stored = {}
        for field in IMAGE_FIELDS:
            upload = images.get(field)
            if upload:
                content, filename, content_type = upload
                stored[field] = self.storage.upload_file(content, filename, content_type)
        return stored

    def _discard_images(self, references: List[Optional[str]]) -> None:
        """Best-effort clean-up; a leftover file never fails the request"""
        for reference in references:
            if not reference:
                continue
            try:
                self.storage.delete_file(reference)
            except Exception as e:
                logger.warning(f"Could not delete image {reference}: {e}")

    def create_listing(
        self,
        owner_id: str,
        listing_data: ListingCreate,
        images: Dict[str, Optional[ImageUpload]]
    ) -> Dict[str, Any]:
        stored = {}
        try:
            stored = self._store_images(images)
            row = {
                "owner_id": owner_id,
                **listing_data.model_dump(),
                "image1": stored.get("image1"),
                "image2": stored.get("image2"),
                "is_available": True
            }
            result = self.supabase.table("listings").insert(row).execute()
            if not result.data:
                raise ServerError("Failed to create listing")
            logger.info("Listing %s created by %s", result.data[0]["id"], owner_id)
            return self.get_listing(result.data[0]["id"])
        except AppError:
            self._discard_images(list(stored.values()))
            raise
        except Exception as e:
            logger.error(f"Create listing error: {e}")
            self._discard_images(list(stored.values()))
            raise ServerError("Server error creating listing")

    def update_listing(
        self,
        listing: Dict[str, Any],
        listing_data: ListingUpdate,
        images: Dict[str, Optional[ImageUpload]],
        remove_images: Dict[str, bool]
    ) -> Dict[str, Any]:
        """Apply allowed field changes; a new upload for a slot overrides its removal flag"""
        updates = listing_data.model_dump(exclude_unset=True)
        for field in IMAGE_FIELDS:
            if remove_images.get(field):
                updates[field] = None
        if not updates and not any(images.get(field) for field in IMAGE_FIELDS):
            raise ValidationError("No listing fields to update")

        stored = {}
        try:
            stored = self._store_images(images)
            updates.update(stored)
            result = self.supabase.table("listings")\
                .update(updates)\
                .eq("id", listing["id"])\
                .execute()
            if not result.data:
                raise NotFound("Listing not found")
        except AppError:
            self._discard_images(list(stored.values()))
            raise
        except Exception as e:
            logger.error(f"Update listing error: {e}")
            self._discard_images(list(stored.values()))
            raise ServerError("Server error updating listing")

        replaced = [listing.get(field) for field in IMAGE_FIELDS if field in updates and updates[field] != listing.get(field)]
        self._discard_images(replaced)
        return self.get_listing(listing["id"])

    def delete_listing(self, listing: Dict[str, Any]) -> None:
        try:
            self.supabase.table("listings")\
                .delete()\
                .eq("id", listing["id"])\
                .execute()
        except Exception as e:
            logger.error(f"Delete listing error: {e}")
            raise ServerError("Server error deleting listing")
        self._discard_images([listing.get(field) for field in IMAGE_FIELDS])

    def delete_owner_listings(self, owner_id: str) -> int:
        """Remove every listing of a user (account deletion). Returns how many were removed."""
        try:
            result = self.supabase.table("listings")\
                .delete()\
                .eq("owner_id", owner_id)\
                .execute()
        except Exception as e:
            logger.error(f"Error deleting user listings: {e}")
            raise ServerError("Server error deleting user listings", details=str(e))
        deleted = result.data or []
        self._discard_images([row.get(field) for row in deleted for field in IMAGE_FIELDS])
        return len(deleted)

    def increment_views(self, listing_id: str) -> bool:
        """
        Best-effort view counter. Uses the increment_listing_views function when it
        exists; the fallback is read-then-write and may lose concurrent increments.
        """
        try:
            self.supabase.rpc("increment_listing_views", {"listing_id": listing_id}).execute()
            return True
        except Exception as e:
            logger.warning(f"increment_listing_views rpc failed, using fallback: {e}")
        try:
            result = self.supabase.table("listings")\
                .select("views")\
                .eq("id", listing_id)\
                .limit(1)\
                .execute()
            if not result.data:
                return False
            self.supabase.table("listings")\
                .update({"views": (result.data[0].get("views") or 0) + 1})\
                .eq("id", listing_id)\
                .execute()
            return True
        except Exception as e:
            logger.error(f"Increment view error: {e}")
            return False
