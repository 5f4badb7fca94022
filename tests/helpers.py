"""Row builders and auth headers used across the test modules."""

from typing import Any, Dict

from fake_supabase import FakeSupabase
from gear_exchange.core.security import create_access_token, hash_password

DEFAULT_PASSWORD = "Password123"


def make_user(
    db: FakeSupabase,
    username: str,
    role: str = "user",
    password: str = DEFAULT_PASSWORD,
    **fields: Any
) -> Dict[str, Any]:
    row = {
        "username": username,
        "email": f"{username}@example.com",
        "password_hash": hash_password(password),
        "full_name": f"{username.title()} Person",
        "phone": "0501234567",
        "merhav": "דן",
        "role": role,
        "volunteer_declaration": role == "pending_volunteer",
    }
    row.update(fields)
    return db.table("users").insert(row).execute().data[0]


def auth_headers(user: Dict[str, Any]) -> Dict[str, str]:
    token = create_access_token(user["id"], user["username"], user["role"])
    return {"Authorization": f"Bearer {token}"}


def make_listing(db: FakeSupabase, owner: Dict[str, Any], **fields: Any) -> Dict[str, Any]:
    row = {
        "owner_id": owner["id"],
        "title": "Winter coat",
        "description": "Warm and dry",
        "category": "מעילים",
        "transaction_type": "מסירה",
        "size": "L",
        "merhav": "דן",
        "volunteer_only": False,
        "is_available": True,
    }
    row.update(fields)
    return db.table("listings").insert(row).execute().data[0]
