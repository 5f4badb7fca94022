"""
Seed Admin Account Script
Creates the protected main admin account (settings.protected_admin_username)
or restores its admin role. This is the bootstrap path for the first admin;
every later role change goes through the admin endpoints.

Usage:
    ADMIN_PASSWORD=... ADMIN_EMAIL=... python -m gear_exchange.scripts.seed_admin
"""

import os
import sys

from gear_exchange.config.roles_config import MERHAVIM, Role
from gear_exchange.config.settings import settings
from gear_exchange.core.security import hash_password
from gear_exchange.core.validators import validate_password
from gear_exchange.database.supabase_client import get_service_supabase
from supabase import Client
import logging

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def seed_admin(
    supabase: Client,
    password: str,
    email: str,
    full_name: str = "System Admin",
    phone: str = "0500000000",
    merhav: str = MERHAVIM[0],
) -> str:
    """Returns "created", "promoted" or "unchanged"."""
    username = settings.protected_admin_username
    existing = supabase.table("users")\
        .select("id, role")\
        .eq("username", username)\
        .limit(1)\
        .execute()

    if existing.data:
        user = existing.data[0]
        if user["role"] == Role.ADMIN.value:
            logger.info(f"Admin account '{username}' already present")
            return "unchanged"
        supabase.table("users")\
            .update({"role": Role.ADMIN.value})\
            .eq("id", user["id"])\
            .execute()
        logger.info(f"Restored admin role for '{username}' (was {user['role']})")
        return "promoted"

    supabase.table("users").insert({
        "username": username,
        "email": email.lower(),
        "password_hash": hash_password(validate_password(password)),
        "full_name": full_name,
        "phone": phone,
        "merhav": merhav,
        "role": Role.ADMIN.value,
        "volunteer_declaration": False
    }).execute()
    logger.info(f"Created admin account '{username}'")
    return "created"


def main():
    """Main function to seed the admin account"""
    password = os.environ.get("ADMIN_PASSWORD")
    email = os.environ.get("ADMIN_EMAIL")
    if not password or not email:
        logger.error("ADMIN_PASSWORD and ADMIN_EMAIL must be set")
        sys.exit(1)
    try:
        seed_admin(
            get_service_supabase(),
            password,
            email,
            full_name=os.environ.get("ADMIN_FULL_NAME", "System Admin"),
            phone=os.environ.get("ADMIN_PHONE", "0500000000"),
        )
    except Exception as e:
        logger.error(f"Error during admin seeding: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
