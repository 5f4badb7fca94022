from supabase import Client
from gear_exchange.core.exceptions import ServerError
from typing import Any, Dict, List, Optional
import logging

logger = logging.getLogger(__name__)

ENTRY_SELECT = (
    "*, "
    "admin:users!admin_id(full_name, email), "
    "target_user:users!target_user_id(full_name, email)"
)


class AuditLogService:
    """Append-only record of admin actions. Expects the privileged client."""

    def __init__(self, supabase: Client):
        self.supabase = supabase

    def record(
        self,
        admin_id: Optional[str],
        action: str,
        target_user_id: Optional[str],
        details: Optional[Dict[str, Any]] = None
    ) -> bool:
        """Write one entry. Failures are logged and swallowed so the admin action itself still succeeds."""
        try:
            self.supabase.table("audit_log").insert({
                "admin_id": admin_id,
                "action": action,
                "target_user_id": target_user_id,
                "details": details
            }).execute()
            return True
        except Exception:
            logger.exception("Failed to log admin action %s on %s", action, target_user_id)
            return False

    def list_entries(self, limit: int = 50) -> List[Dict[str, Any]]:
        """Newest entries first, with the acting and affected users embedded"""
        try:
            result = self.supabase.table("audit_log")\
                .select(ENTRY_SELECT)\
                .order("created_at", desc=True)\
                .limit(limit)\
                .execute()
            return result.data or []
        except Exception as e:
            logger.error(f"Error fetching audit log: {e}")
            raise ServerError("Server error fetching audit log")

    def detach_user(self, user_id: str) -> None:
        """Null out references to a user that is about to be deleted; history rows are kept."""
        try:
            self.supabase.table("audit_log")\
                .update({"target_user_id": None})\
                .eq("target_user_id", user_id)\
                .execute()
            self.supabase.table("audit_log")\
                .update({"admin_id": None})\
                .eq("admin_id", user_id)\
                .execute()
        except Exception as e:
            logger.error(f"Error detaching audit references for {user_id}: {e}")
            raise ServerError("Server error deleting user", details=str(e))
