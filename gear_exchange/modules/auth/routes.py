from fastapi import APIRouter, Depends, Request
from gear_exchange.core.dependencies import get_current_user
from gear_exchange.core.rate_limit import auth_limit
from gear_exchange.database.supabase_client import get_service_supabase, get_supabase
from gear_exchange.modules.auth.schemas import AuthResponse, LoginRequest, MeResponse, RegisterRequest
from gear_exchange.modules.auth.service import AuthService
from gear_exchange.modules.users.schemas import ProfileUpdate, ProfileUpdateResponse, UserResponse
from supabase import Client
from typing import Dict

router = APIRouter(prefix="/auth", tags=["auth"])


def get_auth_service(
    supabase: Client = Depends(get_supabase),
    service_supabase: Client = Depends(get_service_supabase)
) -> AuthService:
    return AuthService(supabase, service_supabase)


@router.post("/register", response_model=AuthResponse, status_code=201)
@auth_limit
async def register(
    request: Request,
    register_data: RegisterRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Register a new user"""
    return service.register(register_data)


@router.post("/login", response_model=AuthResponse)
@auth_limit
async def login(
    request: Request,
    login_data: LoginRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Login with username and password"""
    return service.login(login_data)


@router.post("/logout", status_code=200)
async def logout(current_user: Dict = Depends(get_current_user)):
    """Tokens are stateless; the client drops its copy"""
    return {"message": "Logged out successfully"}


@router.get("/me", response_model=MeResponse)
async def get_me(current_user: Dict = Depends(get_current_user)):
    """Get the current user as stored now (not as encoded in the token)"""
    user = UserResponse(**current_user)
    return MeResponse(user=user, profile=user)


@router.patch("/profile", response_model=ProfileUpdateResponse)
async def update_profile(
    profile_data: ProfileUpdate,
    current_user: Dict = Depends(get_current_user),
    service: AuthService = Depends(get_auth_service)
):
    """Update the caller's own profile (never the role)"""
    return service.update_profile(current_user["id"], profile_data)
