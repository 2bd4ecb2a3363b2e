"""
Draft Normalizer

Projects a persisted listing onto the editable form structure
"""

from typing import Any, Mapping, Optional

from .models import Draft, Listing


def to_draft(listing: Optional[Listing]) -> Optional[Draft]:
    """
    Build the edit-form draft for a listing

    No validation happens here and the listing is left untouched; the image
    sequence is copied so the draft shares no mutable state with it.

    Args:
        listing: persisted listing, or None when creating a new one

    Returns:
        Draft, or None for the new-listing case
    """
    if listing is None:
        return None

    info = listing.product_info
    return Draft(
        name=info.name,
        description=info.description,
        category=info.category,
        images=list(info.images or ()),
        cost_price=listing.pricing.cost_price,
        selling_price=listing.pricing.selling_price,
        current_stock=listing.inventory.current_stock,
        recycled_material_percentage=listing.sustainability.recycled_material_percentage,
        is_active=listing.availability.is_active,
    )


def blank_draft(defaults: Optional[Mapping[str, Any]] = None) -> Draft:
    """Blank new-listing form filled with the configured defaults"""
    defaults = defaults or {}
    return Draft(
        category=str(defaults.get("category", "home_decor")),
        recycled_material_percentage=float(defaults.get("recycled_material_percentage", 80)),
        is_active=bool(defaults.get("is_active", True)),
    )
