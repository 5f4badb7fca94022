from supabase import Client
from gear_exchange.config.roles_config import Role
from gear_exchange.core.exceptions import DuplicateEmail, DuplicateUsername, InvalidCredentials, ValidationError
from gear_exchange.core.security import create_access_token, hash_password, token_lifetime_seconds, verify_password
from gear_exchange.modules.auth.schemas import AuthResponse, LoginRequest, RegisterRequest, SessionInfo
from gear_exchange.modules.users.schemas import ProfileUpdate, ProfileUpdateResponse, UserResponse
from gear_exchange.modules.users.service import UserService
from typing import Any, Dict
import logging

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self, supabase: Client, service_supabase: Client):
        self.users = UserService(supabase)
        # Registration inserts bypass RLS; nothing else here needs the privileged client
        self.privileged_users = UserService(service_supabase)

    def _session_for(self, user: Dict[str, Any]) -> SessionInfo:
        token = create_access_token(user["id"], user["username"], user["role"])
        return SessionInfo(access_token=token, expires_in=token_lifetime_seconds())

    def register(self, register_data: RegisterRequest) -> AuthResponse:
        """Create an account; a volunteer declaration puts the user in the approval queue"""
        if self.users.username_exists(register_data.username):
            raise DuplicateUsername()
        if self.users.email_exists(register_data.email):
            raise DuplicateEmail()

        role = Role.PENDING_VOLUNTEER if register_data.volunteer_declaration else Role.USER
        new_user = self.privileged_users.create_user({
            "username": register_data.username,
            "email": register_data.email,
            "password_hash": hash_password(register_data.password),
            "full_name": register_data.full_name,
            "phone": register_data.phone,
            "merhav": register_data.merhav,
            "role": role.value,
            "volunteer_declaration": bool(register_data.volunteer_declaration)
        })
        logger.info("Registered user %s with role %s", new_user["id"], role.value)

        user = UserResponse(**new_user)
        return AuthResponse(
            message="Account created successfully",
            user=user,
            profile=user,
            session=self._session_for(new_user)
        )

    def login(self, login_data: LoginRequest) -> AuthResponse:
        """Unknown username and wrong password fail identically"""
        record = self.users.get_user_with_credentials(login_data.username)
        if not record or not verify_password(login_data.password, record.get("password_hash")):
            raise InvalidCredentials()

        record = dict(record)
        record.pop("password_hash", None)
        user = UserResponse(**record)
        return AuthResponse(
            message="Logged in successfully",
            user=user,
            profile=user,
            session=self._session_for(record)
        )

    def update_profile(self, user_id: str, profile_data: ProfileUpdate) -> ProfileUpdateResponse:
        updates = profile_data.model_dump(exclude_none=True)
        if not updates:
            raise ValidationError("No profile fields to update")
        updated = self.users.update_profile(user_id, updates)
        return ProfileUpdateResponse(
            message="Profile updated successfully",
            profile=UserResponse(**updated)
        )
