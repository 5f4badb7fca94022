from datetime import datetime, timezone
from supabase import Client
from gear_exchange.core.exceptions import AppError, DuplicateEmail, DuplicateUsername, NotFound, ServerError
from gear_exchange.core.validators import sanitize_search_term
from typing import Any, Dict, List, Optional
import logging

logger = logging.getLogger(__name__)

# Everything except password_hash
PUBLIC_COLUMNS = (
    "id, username, email, full_name, phone, merhav, role, volunteer_declaration, "
    "approved_at, approved_by, created_at, updated_at"
)

# Postgres unique_violation, surfaced as the PostgREST error code
UNIQUE_VIOLATION = "23505"


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _duplicate_error(error: Exception) -> Optional[AppError]:
    """Map a users unique-constraint violation to the matching duplicate error, or None"""
    text = " ".join(str(part) for part in (
        getattr(error, "message", None), getattr(error, "details", None), error
    ) if part)
    if getattr(error, "code", None) != UNIQUE_VIOLATION and "unique constraint" not in text:
        return None
    if "users_username_key" in text:
        return DuplicateUsername()
    if "users_email_key" in text:
        return DuplicateEmail()
    return None


class UserService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def get_user_by_id(self, user_id: str) -> Optional[Dict[str, Any]]:
        """Get user profile by ID, or None"""
        try:
            result = self.supabase.table("users")\
                .select(PUBLIC_COLUMNS)\
                .eq("id", user_id)\
                .limit(1)\
                .execute()
            return result.data[0] if result.data else None
        except Exception as e:
            logger.error(f"Error fetching user {user_id}: {e}")
            raise ServerError("Server error fetching user")

    def require_user(self, user_id: str) -> Dict[str, Any]:
        user = self.get_user_by_id(user_id)
        if not user:
            raise NotFound("User not found")
        return user

    def get_user_with_credentials(self, username: str) -> Optional[Dict[str, Any]]:
        """Full row including password_hash; only the login flow should call this."""
        try:
            result = self.supabase.table("users")\
                .select("*")\
                .eq("username", username)\
                .limit(1)\
                .execute()
            return result.data[0] if result.data else None
        except Exception as e:
            logger.error(f"Error looking up user by username: {e}")
            raise ServerError("Server error during login")

    def username_exists(self, username: str) -> bool:
        return self._exists("username", username)

    def email_exists(self, email: str) -> bool:
        return self._exists("email", email)

    def _exists(self, column: str, value: str) -> bool:
        try:
            result = self.supabase.table("users")\
                .select("id")\
                .eq(column, value)\
                .limit(1)\
                .execute()
            return bool(result.data)
        except Exception as e:
            logger.error(f"Error checking {column} uniqueness: {e}")
            raise ServerError("Server error during registration")

    def create_user(self, user_data: Dict[str, Any]) -> Dict[str, Any]:
        """Insert a user row and return it without the credential"""
        try:
            result = self.supabase.table("users").insert(user_data).execute()
            if not result.data:
                raise ServerError("Failed to create account")
            created = dict(result.data[0])
            created.pop("password_hash", None)
            return created
        except AppError:
            raise
        except Exception as e:
            duplicate = _duplicate_error(e)
            if duplicate is not None:
                # Lost a race with a concurrent registration after the existence checks
                logger.warning(f"Registration hit unique constraint: {e}")
                raise duplicate
            logger.error(f"Registration insert failed: {e}")
            raise ServerError("Failed to create account", details=str(e))

    def update_profile(self, user_id: str, updates: Dict[str, Any]) -> Dict[str, Any]:
        """Update the caller-editable profile fields"""
        try:
            update_data = {**updates, "updated_at": utc_now_iso()}
            result = self.supabase.table("users")\
                .update(update_data)\
                .eq("id", user_id)\
                .execute()
            if not result.data:
                raise NotFound("User not found")
            updated = dict(result.data[0])
            updated.pop("password_hash", None)
            return updated
        except AppError:
            raise
        except Exception as e:
            logger.error(f"Profile update failed for {user_id}: {e}")
            raise ServerError("Server error updating profile")

    def transition_role(
        self,
        user_id: str,
        expected_role: str,
        updates: Dict[str, Any],
    ) -> Optional[Dict[str, Any]]:
        """
        Compare-and-swap update: only applies when the row still has expected_role.
        Returns the updated row, or None when the role changed underneath us.
        """
        try:
            update_data = {**updates, "updated_at": utc_now_iso()}
            result = self.supabase.table("users")\
                .update(update_data)\
                .eq("id", user_id)\
                .eq("role", expected_role)\
                .execute()
            if not result.data:
                return None
            updated = dict(result.data[0])
            updated.pop("password_hash", None)
            return updated
        except Exception as e:
            logger.error(f"Role transition failed for {user_id}: {e}")
            raise ServerError("Server error updating user role")

    def list_users(self, role: Optional[str] = None, search: Optional[str] = None) -> List[Dict[str, Any]]:
        """List users newest first, optionally filtered by role and a name/phone/username search"""
        try:
            query = self.supabase.table("users")\
                .select(PUBLIC_COLUMNS)\
                .order("created_at", desc=True)
            if role:
                query = query.eq("role", role)
            term = sanitize_search_term(search) if search else ""
            if term:
                query = query.or_(
                    f"full_name.ilike.%{term}%,phone.ilike.%{term}%,username.ilike.%{term}%"
                )
            result = query.execute()
            return result.data or []
        except Exception as e:
            logger.error(f"Error listing users: {e}")
            raise ServerError("Server error fetching users")

    def list_roles(self) -> List[str]:
        try:
            result = self.supabase.table("users").select("role").execute()
            return [row["role"] for row in (result.data or [])]
        except Exception as e:
            logger.error(f"Error fetching user roles: {e}")
            raise ServerError("Server error fetching statistics")

    def delete_user(self, user_id: str) -> bool:
        """Delete the user row (listings and audit references must already be handled)"""
        try:
            result = self.supabase.table("users")\
                .delete()\
                .eq("id", user_id)\
                .execute()
            return bool(result.data)
        except Exception as e:
            logger.error(f"Error deleting user {user_id}: {e}")
            raise ServerError("Server error deleting user", details=str(e))
