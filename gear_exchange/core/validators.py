"""Field checks shared by the request schemas."""

import re
from typing import Annotated, Optional

from pydantic import AfterValidator

from gear_exchange.config.roles_config import LISTING_CATEGORIES, MERHAVIM, TRANSACTION_TYPES

USERNAME_RE = re.compile(r"^[a-zA-Z0-9_]+$")
PASSWORD_RE = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)")
PHONE_RE = re.compile(r"^05\d{8}$")


def validate_username(v: str) -> str:
    v = v.strip()
    if not 3 <= len(v) <= 20:
        raise ValueError("Username must be 3-20 characters")
    if not USERNAME_RE.match(v):
        raise ValueError("Username may contain only English letters, digits and underscore")
    return v


def validate_password(v: str) -> str:
    if len(v) < 8:
        raise ValueError("Password must be at least 8 characters")
    if not PASSWORD_RE.match(v):
        raise ValueError("Password must contain upper-case and lower-case letters and a digit")
    return v


def validate_full_name(v: str) -> str:
    v = v.strip()
    if len(v) < 2:
        raise ValueError("Full name must be at least 2 characters")
    return v


def validate_phone(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("Phone number is required")
    if not PHONE_RE.match(v):
        raise ValueError("Invalid phone number")
    return v


def validate_merhav(v: str) -> str:
    if v not in MERHAVIM:
        raise ValueError("Invalid merhav")
    return v


def validate_category(v: str) -> str:
    if v not in LISTING_CATEGORIES:
        raise ValueError("Invalid category")
    return v


def validate_transaction_type(v: str) -> str:
    if v not in TRANSACTION_TYPES:
        raise ValueError("Invalid transaction type")
    return v


def validate_title(v: str) -> str:
    v = v.strip()
    if not 3 <= len(v) <= 100:
        raise ValueError("Title must be 3-100 characters")
    return v


def validate_description(v: Optional[str]) -> Optional[str]:
    if v is None:
        return None
    v = v.strip()
    if len(v) > 1000:
        raise ValueError("Description may be up to 1000 characters")
    return v or None


def sanitize_search_term(term: str) -> str:
    """Strip characters that would break a PostgREST ``or=(...)`` filter."""
    return re.sub(r"[,()]", " ", term).strip()


Username = Annotated[str, AfterValidator(validate_username)]
Password = Annotated[str, AfterValidator(validate_password)]
FullName = Annotated[str, AfterValidator(validate_full_name)]
Phone = Annotated[str, AfterValidator(validate_phone)]
Merhav = Annotated[str, AfterValidator(validate_merhav)]
Category = Annotated[str, AfterValidator(validate_category)]
TransactionType = Annotated[str, AfterValidator(validate_transaction_type)]
Title = Annotated[str, AfterValidator(validate_title)]
Description = Annotated[Optional[str], AfterValidator(validate_description)]
