from fastapi import APIRouter, Depends, Query
from gear_exchange.core.dependencies import require_admin
from gear_exchange.database.supabase_client import get_service_supabase
from gear_exchange.modules.admin.schemas import (
    DeleteUserResponse, PendingVolunteersResponse, RoleChangeResponse, StatsResponse
)
from gear_exchange.modules.admin.service import AdminService
from gear_exchange.modules.audit.schemas import AuditLogResponse
from gear_exchange.modules.listings.image_storage import get_image_storage
from gear_exchange.modules.users.schemas import UserListResponse
from supabase import Client
from typing import Dict, Optional
from uuid import UUID

router = APIRouter(prefix="/admin", tags=["admin"])


def get_admin_service(
    admin: Dict = Depends(require_admin),
    service_supabase: Client = Depends(get_service_supabase),
    storage=Depends(get_image_storage)
) -> AdminService:
    """The privileged client is only handed out after require_admin passed"""
    return AdminService(service_supabase, storage)


@router.get("/stats", response_model=StatsResponse)
async def get_stats(service: AdminService = Depends(get_admin_service)):
    """Platform statistics"""
    return service.get_stats()


@router.get("/pending-volunteers", response_model=PendingVolunteersResponse)
async def get_pending_volunteers(service: AdminService = Depends(get_admin_service)):
    """Users waiting for volunteer approval"""
    return service.list_pending_volunteers()


@router.get("/users", response_model=UserListResponse)
async def list_users(
    role: Optional[str] = None,
    search: Optional[str] = None,
    service: AdminService = Depends(get_admin_service)
):
    """All users, optionally filtered by role and a name/phone/username search"""
    return service.list_users(role=role, search=search)


@router.post("/approve-volunteer/{user_id}", response_model=RoleChangeResponse)
async def approve_volunteer(
    user_id: UUID,
    admin: Dict = Depends(require_admin),
    service: AdminService = Depends(get_admin_service)
):
    return service.approve_volunteer(admin, str(user_id))


@router.post("/reject-volunteer/{user_id}", response_model=RoleChangeResponse)
async def reject_volunteer(
    user_id: UUID,
    admin: Dict = Depends(require_admin),
    service: AdminService = Depends(get_admin_service)
):
    """Reject a pending volunteer (back to regular user)"""
    return service.reject_volunteer(admin, str(user_id))


@router.post("/promote-admin/{user_id}", response_model=RoleChangeResponse)
async def promote_admin(
    user_id: UUID,
    admin: Dict = Depends(require_admin),
    service: AdminService = Depends(get_admin_service)
):
    return service.promote_admin(admin, str(user_id))


@router.post("/demote-admin/{user_id}", response_model=RoleChangeResponse)
async def demote_admin(
    user_id: UUID,
    admin: Dict = Depends(require_admin),
    service: AdminService = Depends(get_admin_service)
):
    """Demote an admin to verified volunteer"""
    return service.demote_admin(admin, str(user_id))


@router.delete("/users/{user_id}", response_model=DeleteUserResponse)
async def delete_user(
    user_id: UUID,
    admin: Dict = Depends(require_admin),
    service: AdminService = Depends(get_admin_service)
):
    """Delete a user together with their listings"""
    return service.delete_user(admin, str(user_id))


@router.get("/audit-log", response_model=AuditLogResponse)
async def get_audit_log(
    limit: int = Query(50, ge=1, le=500),
    service: AdminService = Depends(get_admin_service)
):
    """Admin action history, newest first"""
    return {"log": service.get_audit_log(limit)}
