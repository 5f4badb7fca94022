from pydantic import BaseModel, EmailStr, field_validator
from typing import Optional

from gear_exchange.core.validators import FullName, Merhav, Password, Phone, Username
from gear_exchange.modules.users.schemas import UserResponse


class LoginRequest(BaseModel):
    username: str
    password: str

    @field_validator("username")
    @classmethod
    def username_required(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Username is required")
        return v

    @field_validator("password")
    @classmethod
    def password_required(cls, v: str) -> str:
        if not v:
            raise ValueError("Password is required")
        return v


class RegisterRequest(BaseModel):
    username: Username
    email: EmailStr
    password: Password
    full_name: FullName
    merhav: Merhav
    phone: Phone
    volunteer_declaration: Optional[bool] = False

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.lower()


class SessionInfo(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int


class AuthResponse(BaseModel):
    message: str
    user: UserResponse
    profile: UserResponse
    session: SessionInfo


class MeResponse(BaseModel):
    user: UserResponse
    profile: UserResponse
