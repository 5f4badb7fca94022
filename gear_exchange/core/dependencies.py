"""
Core dependencies for route protection and role checking
"""

from fastapi import Depends, Request, Security
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from gear_exchange.config.roles_config import ADMIN_ROLES, VERIFIED_VOLUNTEER_ROLES
from gear_exchange.core.exceptions import Forbidden, InvalidToken, ProfileNotFound, Unauthenticated
from gear_exchange.core.security import decode_token
from gear_exchange.database.supabase_client import get_supabase
from gear_exchange.modules.users.service import UserService
from supabase import Client
from typing import Any, Dict, Iterable, Optional
import logging

logger = logging.getLogger(__name__)

# auto_error=False so a missing header is reported as 401 by us, not 403 by FastAPI
security = HTTPBearer(auto_error=False)


def _resolve_identity(token: str, supabase: Client) -> Dict[str, Any]:
    payload = decode_token(token)
    # The role claim is a snapshot from issuance; the stored row is authoritative.
    profile = UserService(supabase).get_user_by_id(payload["userId"])
    if not profile:
        raise ProfileNotFound()
    return profile


def get_current_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security)
) -> str:
    """Extract JWT token from Authorization header"""
    if credentials is None or not credentials.credentials:
        raise Unauthenticated("Missing or invalid authorization header")
    return credentials.credentials


def get_current_user(
    request: Request,
    token: str = Depends(get_current_token),
    supabase: Client = Depends(get_supabase)
) -> Dict[str, Any]:
    """Resolve the bearer token to the current user row"""
    profile = _resolve_identity(token, supabase)
    request.state.user = profile
    return profile


def get_optional_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security),
    supabase: Client = Depends(get_supabase)
) -> Optional[Dict[str, Any]]:
    """Like get_current_user but never fails; anonymous callers resolve to None"""
    if credentials is None or not credentials.credentials:
        return None
    try:
        profile = _resolve_identity(credentials.credentials, supabase)
    except (InvalidToken, ProfileNotFound):
        return None
    except Exception as e:
        logger.error(f"Optional auth error: {e}")
        return None
    request.state.user = profile
    return profile


def check_role(user_data: Optional[Dict[str, Any]], allowed_roles: Iterable[str]) -> Dict[str, Any]:
    if not user_data:
        raise Unauthenticated()
    if user_data.get("role") not in allowed_roles:
        raise Forbidden("Insufficient permissions")
    return user_data


def require_role(allowed_roles: Iterable[str]):
    """Factory function to create a role check dependency"""
    allowed = frozenset(allowed_roles)

    def role_checker(user_data: Dict[str, Any] = Depends(get_current_user)) -> Dict[str, Any]:
        return check_role(user_data, allowed)
    return role_checker


require_verified_volunteer = require_role(VERIFIED_VOLUNTEER_ROLES)
require_admin = require_role(ADMIN_ROLES)


def require_ownership_or_admin(
    user_data: Optional[Dict[str, Any]],
    resource: Dict[str, Any],
    owner_field: str = "owner_id",
    message: str = "You can only modify your own resources",
) -> Dict[str, Any]:
    """Allow admins and the resource owner; the resource is loaded by the caller"""
    if not user_data:
        raise Unauthenticated()
    if user_data.get("role") in ADMIN_ROLES:
        return user_data
    if resource.get(owner_field) is not None and resource.get(owner_field) == user_data.get("id"):
        return user_data
    raise Forbidden(message)
