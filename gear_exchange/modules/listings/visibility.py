"""
Role-aware visibility rules for listings.

Enumeration narrows the query itself; single fetches load the row first and
then check it, so a restricted listing answers 403 instead of 404.
"""

from typing import Any, Dict, Optional

from gear_exchange.config.roles_config import ANONYMOUS_ROLE, can_view_volunteer_only
from gear_exchange.core.exceptions import Forbidden
from gear_exchange.core.validators import sanitize_search_term
from gear_exchange.modules.listings.schemas import ListingFilters


def caller_role(user_data: Optional[Dict[str, Any]]) -> str:
    if not user_data:
        return ANONYMOUS_ROLE
    return user_data.get("role") or ANONYMOUS_ROLE


def apply_visibility(query, role: str):
    """Base predicate for listing enumeration"""
    query = query.eq("is_available", True)
    if not can_view_volunteer_only(role):
        query = query.eq("volunteer_only", False)
    return query


def apply_filters(query, filters: Optional[ListingFilters]):
    """Caller-supplied filters, ANDed with the visibility predicate"""
    if filters is None:
        return query
    if filters.category:
        query = query.eq("category", filters.category)
    if filters.merhav:
        query = query.eq("merhav", filters.merhav)
    if filters.transaction_type:
        query = query.eq("transaction_type", filters.transaction_type)
    term = sanitize_search_term(filters.search) if filters.search else ""
    if term:
        query = query.or_(f"title.ilike.%{term}%,description.ilike.%{term}%")
    return query


def ensure_listing_visible(listing: Dict[str, Any], user_data: Optional[Dict[str, Any]]) -> None:
    if listing.get("volunteer_only") and not can_view_volunteer_only(caller_role(user_data)):
        raise Forbidden("This listing is for verified volunteers only")
