"""
Roles and Closed Vocabularies Configuration
This config defines the role tiers, the role sets used by the policy
dependencies, and the fixed value lists accepted for users and listings.
"""

from enum import Enum


class Role(str, Enum):
    USER = "user"
    PENDING_VOLUNTEER = "pending_volunteer"
    VERIFIED_VOLUNTEER = "verified_volunteer"
    ADMIN = "admin"


ROLES = [role.value for role in Role]

# Explicit allowed sets; there is no role inheritance.
VERIFIED_VOLUNTEER_ROLES = frozenset({Role.VERIFIED_VOLUNTEER.value, Role.ADMIN.value})
ADMIN_ROLES = frozenset({Role.ADMIN.value})

# Roles allowed to see volunteer-only listings
VOLUNTEER_VISIBLE_ROLES = VERIFIED_VOLUNTEER_ROLES

# Role assumed for anonymous callers when applying visibility rules
ANONYMOUS_ROLE = Role.USER.value

# Regional zones
MERHAVIM = [
    "ירדן",
    "גלבוע",
    "אשר",
    "כרמל",
    "שרון",
    "ירקון",
    "דן",
    "איילון",
    "לכיש",
    "נגב",
    "ירושלים",
]

LISTING_CATEGORIES = [
    "חולצות",
    "מעילים",
    "פליזים",
    "מכנסיים",
    "נעליים",
    "אחר",
]

# giveaway, loan, swap
TRANSACTION_TYPES = [
    "מסירה",
    "השאלה",
    "החלפה",
]

ALLOWED_IMAGE_EXTENSIONS = {".jpeg", ".jpg", ".png", ".gif"}
ALLOWED_IMAGE_CONTENT_TYPES = {"image/jpeg", "image/jpg", "image/png", "image/gif"}


def is_valid_role(role: str) -> bool:
    return role in ROLES


def can_view_volunteer_only(role: str) -> bool:
    """True when the role may see listings marked volunteer_only."""
    return role in VOLUNTEER_VISIBLE_ROLES
