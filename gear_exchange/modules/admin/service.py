from supabase import Client
from gear_exchange.config.roles_config import Role, is_valid_role
from gear_exchange.config.settings import settings
from gear_exchange.core.exceptions import (
    InvalidState, NotFound, ProtectedAccount, SelfActionForbidden, ValidationError
)
from gear_exchange.modules.admin import models as actions
from gear_exchange.modules.admin.schemas import (
    DeleteUserResponse, PendingVolunteersResponse, PlatformStats, RoleChangeResponse, StatsResponse
)
from gear_exchange.modules.audit.service import AuditLogService
from gear_exchange.modules.listings.service import ListingService
from gear_exchange.modules.users.schemas import UserListResponse, UserResponse
from gear_exchange.modules.users.service import UserService, utc_now_iso
from typing import Any, Dict, List, Optional
import logging

logger = logging.getLogger(__name__)


class AdminService:
    """
    Admin console operations. Constructed only behind require_admin, with the
    privileged client; RLS is bypassed and the role check is the gate.
    """

    def __init__(self, supabase: Client, storage):
        self.supabase = supabase
        self.users = UserService(supabase)
        self.listings = ListingService(supabase, storage)
        self.audit = AuditLogService(supabase)

    # Reads

    def get_stats(self) -> StatsResponse:
        roles = self.users.list_roles()
        stats = PlatformStats(
            total_users=len(roles),
            pending_volunteers=roles.count(Role.PENDING_VOLUNTEER.value),
            verified_volunteers=roles.count(Role.VERIFIED_VOLUNTEER.value),
            admins=roles.count(Role.ADMIN.value),
            regular_users=roles.count(Role.USER.value)
        )
        try:
            result = self.supabase.table("listings")\
                .select("id", count="exact", head=True)\
                .eq("is_available", True)\
                .execute()
            stats.active_listings = result.count
        except Exception as e:
            logger.warning(f"Could not count active listings: {e}")
        return StatsResponse(stats=stats)

    def list_pending_volunteers(self) -> PendingVolunteersResponse:
        pending = self.users.list_users(role=Role.PENDING_VOLUNTEER.value)
        return PendingVolunteersResponse(pending=[UserResponse(**u) for u in pending])

    def list_users(self, role: Optional[str] = None, search: Optional[str] = None) -> UserListResponse:
        if role and not is_valid_role(role):
            raise ValidationError(f"Unknown role: {role}")
        users = self.users.list_users(role=role, search=search)
        return UserListResponse(users=[UserResponse(**u) for u in users])

    def get_audit_log(self, limit: int = 50) -> List[Dict[str, Any]]:
        return self.audit.list_entries(limit)

    # Role transitions

    def _guard_protected(self, target: Dict[str, Any], message: str) -> None:
        if target.get("username") == settings.protected_admin_username:
            raise ProtectedAccount(message)

    def _transition(
        self,
        admin_id: str,
        target: Dict[str, Any],
        action: str,
        new_role: str,
        extra_updates: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        old_role = target["role"]
        updates = {"role": new_role, **(extra_updates or {})}
        updated = self.users.transition_role(target["id"], old_role, updates)
        if updated is None:
            # Another admin changed the role between our read and this write
            raise InvalidState("User role changed concurrently, reload and try again")
        logger.info("Admin %s: %s on %s (%s -> %s)", admin_id, action, target["id"], old_role, new_role)
        self.audit.record(admin_id, action, target["id"], {
            "old_role": old_role,
            "new_role": new_role
        })
        return updated

    def approve_volunteer(self, admin: Dict[str, Any], user_id: str) -> RoleChangeResponse:
        target = self.users.require_user(user_id)
        if target["role"] != Role.PENDING_VOLUNTEER.value:
            raise InvalidState("User is not pending approval")
        updated = self._transition(admin["id"], target, actions.APPROVE_VOLUNTEER, Role.VERIFIED_VOLUNTEER.value, {
            "approved_at": utc_now_iso(),
            "approved_by": admin["id"]
        })
        return RoleChangeResponse(message="Volunteer approved", user=UserResponse(**updated))

    def reject_volunteer(self, admin: Dict[str, Any], user_id: str) -> RoleChangeResponse:
        target = self.users.require_user(user_id)
        if target["role"] != Role.PENDING_VOLUNTEER.value:
            raise InvalidState("User is not pending approval")
        updated = self._transition(admin["id"], target, actions.REJECT_VOLUNTEER, Role.USER.value, {
            "volunteer_declaration": False
        })
        return RoleChangeResponse(message="Volunteer request rejected", user=UserResponse(**updated))

    def promote_admin(self, admin: Dict[str, Any], user_id: str) -> RoleChangeResponse:
        target = self.users.require_user(user_id)
        if target["role"] == Role.ADMIN.value:
            raise InvalidState("User is already an admin")
        updated = self._transition(admin["id"], target, actions.PROMOTE_ADMIN, Role.ADMIN.value)
        return RoleChangeResponse(message="User promoted to admin", user=UserResponse(**updated))

    def demote_admin(self, admin: Dict[str, Any], user_id: str) -> RoleChangeResponse:
        if user_id == admin["id"]:
            raise SelfActionForbidden("Cannot demote yourself")
        target = self.users.require_user(user_id)
        self._guard_protected(target, "Cannot demote the main admin account")
        if target["role"] != Role.ADMIN.value:
            raise InvalidState("User is not an admin")
        updated = self._transition(admin["id"], target, actions.DEMOTE_ADMIN, Role.VERIFIED_VOLUNTEER.value)
        return RoleChangeResponse(message="Admin permissions removed", user=UserResponse(**updated))

    def delete_user(self, admin: Dict[str, Any], user_id: str) -> DeleteUserResponse:
        """Cascade the user's listings, detach audit history, then remove the account"""
        if user_id == admin["id"]:
            raise SelfActionForbidden("Cannot delete your own account")
        target = self.users.require_user(user_id)
        self._guard_protected(target, "Cannot delete the main admin account")

        deleted_listings = self.listings.delete_owner_listings(user_id)
        self.audit.detach_user(user_id)
        if not self.users.delete_user(user_id):
            raise NotFound("User not found")

        logger.info("Admin %s deleted user %s (%d listings)", admin["id"], user_id, deleted_listings)
        # The target row is gone, so the entry keeps its identity in details only
        self.audit.record(admin["id"], actions.DELETE_USER, None, {
            "deleted_user_id": user_id,
            "deleted_username": target.get("username"),
            "deleted_user_name": target.get("full_name"),
            "deleted_listings": deleted_listings
        })
        return DeleteUserResponse(
            message="User deleted successfully",
            deleted_user=target.get("full_name"),
            deleted_listings=deleted_listings
        )
