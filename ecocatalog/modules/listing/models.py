"""
Listing Models

Persisted listings, editable drafts and mutation requests
"""

import math
import mimetypes
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

IDENTIFIER_KEYS = ("_id", "id", "listing_id")

_TRUE_TEXT = {"1", "true", "yes", "y", "on", "active"}
_FALSE_TEXT = {"0", "false", "no", "n", "off", "inactive", ""}


def _non_negative(name: str, value: float) -> None:
    if not math.isfinite(value):
        raise ValueError(f"{name} must be a finite number, got {value}")
    if value < 0:
        raise ValueError(f"{name} must be non-negative, got {value}")


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        text = value.strip().lower()
        if text in _TRUE_TEXT:
            return True
        if text in _FALSE_TEXT:
            return False
        raise ValueError(f"expected a boolean, got {value!r}")
    return bool(value)


@dataclass(frozen=True, slots=True)
class ProductInfo:
    """Name, description, category and image URLs"""

    name: str
    description: str = ""
    category: str = ""
    images: Tuple[str, ...] = ()

    def __post_init__(self):
        if isinstance(self.images, str):
            object.__setattr__(self, "images", (self.images,))
        else:
            object.__setattr__(self, "images", tuple(self.images))


@dataclass(frozen=True, slots=True)
class Pricing:
    cost_price: float = 0.0
    selling_price: float = 0.0

    def __post_init__(self):
        _non_negative("cost_price", self.cost_price)
        _non_negative("selling_price", self.selling_price)


@dataclass(frozen=True, slots=True)
class Inventory:
    current_stock: int = 0

    def __post_init__(self):
        if isinstance(self.current_stock, bool) or not isinstance(self.current_stock, int):
            raise ValueError(f"current_stock must be an integer, got {self.current_stock!r}")
        _non_negative("current_stock", self.current_stock)


@dataclass(frozen=True, slots=True)
class Sustainability:
    recycled_material_percentage: float = 0.0

    def __post_init__(self):
        if not 0 <= self.recycled_material_percentage <= 100:
            raise ValueError(
                f"recycled_material_percentage must be within [0, 100], "
                f"got {self.recycled_material_percentage}"
            )


@dataclass(frozen=True, slots=True)
class Availability:
    is_active: bool = True


def _as_int(value: Any) -> int:
    number = float(value)
    if not number.is_integer():
        raise ValueError(f"expected a whole number, got {value!r}")
    return int(number)


def _as_id(value: Any) -> Optional[str]:
    if isinstance(value, Mapping):
        value = value.get("_id") or value.get("id")
    return str(value) if value not in (None, "") else None


@dataclass(frozen=True, slots=True)
class Listing:
    """
    Persisted catalog listing

    Read-only snapshot of the server's entity. Changes go through the
    controller and come back via a fresh fetch, never by mutation.
    """

    listing_id: str
    product_info: ProductInfo
    pricing: Pricing = field(default_factory=Pricing)
    inventory: Inventory = field(default_factory=Inventory)
    sustainability: Sustainability = field(default_factory=Sustainability)
    availability: Availability = field(default_factory=Availability)
    factory_id: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @property
    def name(self) -> str:
        return self.product_info.name

    @property
    def status_label(self) -> str:
        return "Active" if self.availability.is_active else "Inactive"

    def cover_image(self, fallback: str) -> str:
        """First image, or the fallback when the listing has none"""
        images = self.product_info.images
        return images[0] if images else fallback

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Listing":
        """
        Parse the catalog service's JSON representation

        Args:
            data: entity with productInfo/pricing/inventory/sustainability/availability sections

        Returns:
            Listing

        Raises:
            ValueError: identifier missing or a field violates its invariant
        """
        if not isinstance(data, Mapping):
            raise ValueError(f"listing must be an object, got {type(data).__name__}")

        listing_id = _as_id(data.get("_id") or data.get("id"))
        if listing_id is None:
            raise ValueError("listing has no identifier")

        info = data.get("productInfo") or {}
        pricing = data.get("pricing") or {}
        inventory = data.get("inventory") or {}
        sustainability = data.get("sustainability") or {}
        availability = data.get("availability") or {}

        return cls(
            listing_id=listing_id,
            product_info=ProductInfo(
                name=str(info.get("name") or ""),
                description=str(info.get("description") or ""),
                category=str(info.get("category") or ""),
                images=tuple(str(url) for url in (info.get("images") or [])),
            ),
            pricing=Pricing(
                cost_price=float(pricing.get("costPrice") or 0),
                selling_price=float(pricing.get("sellingPrice") or 0),
            ),
            inventory=Inventory(current_stock=_as_int(inventory.get("currentStock") or 0)),
            sustainability=Sustainability(
                recycled_material_percentage=float(sustainability.get("recycledMaterialPercentage") or 0),
            ),
            availability=Availability(is_active=_as_bool(availability.get("isActive", True))),
            factory_id=_as_id(data.get("factoryId")),
            created_at=data.get("createdAt"),
            updated_at=data.get("updatedAt"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "_id": self.listing_id,
            "factoryId": self.factory_id,
            "productInfo": {
                "name": self.product_info.name,
                "description": self.product_info.description,
                "category": self.product_info.category,
                "images": list(self.product_info.images),
            },
            "pricing": {
                "costPrice": self.pricing.cost_price,
                "sellingPrice": self.pricing.selling_price,
            },
            "inventory": {"currentStock": self.inventory.current_stock},
            "sustainability": {
                "recycledMaterialPercentage": self.sustainability.recycled_material_percentage,
            },
            "availability": {"isActive": self.availability.is_active},
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }


@dataclass
class Draft:
    """Editable projection of a listing's mutable fields"""

    name: str = ""
    description: str = ""
    category: str = ""
    images: List[str] = field(default_factory=list)
    cost_price: float = 0.0
    selling_price: float = 0.0
    current_stock: int = 0
    recycled_material_percentage: float = 0.0
    is_active: bool = True

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Draft":
        """
        Build a draft from form input

        Raises:
            ValueError: the input names a listing identifier
        """
        named = [key for key in IDENTIFIER_KEYS if data.get(key) not in (None, "")]
        if named:
            raise ValueError(f"draft must not reference a listing identifier: {named}")

        images = data.get("images") or []
        if isinstance(images, str):
            images = [url.strip() for url in images.split(",") if url.strip()]

        return cls(
            name=str(data.get("name") or ""),
            description=str(data.get("description") or ""),
            category=str(data.get("category") or ""),
            images=[str(url) for url in images],
            cost_price=float(data.get("cost_price") or 0),
            selling_price=float(data.get("selling_price") or 0),
            current_stock=_as_int(data.get("current_stock") or 0),
            recycled_material_percentage=float(data.get("recycled_material_percentage") or 0),
            is_active=_as_bool(data.get("is_active", True)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "category": self.category,
            "images": list(self.images),
            "cost_price": self.cost_price,
            "selling_price": self.selling_price,
            "current_stock": self.current_stock,
            "recycled_material_percentage": self.recycled_material_percentage,
            "is_active": self.is_active,
        }

    def to_payload(self, include_images: bool = False) -> Dict[str, Any]:
        """
        Wire metadata sent in the multipart "data" field

        Args:
            include_images: send the retained image URLs (updates only)
        """
        payload: Dict[str, Any] = {
            "name": self.name,
            "description": self.description,
            "category": self.category,
            "price": {
                "fiatAmount": self.cost_price,
                "tokenAmount": self.selling_price,
            },
            "inventory": {"available": self.current_stock},
            "sustainabilityScore": self.recycled_material_percentage,
            "isActive": self.is_active,
        }
        if include_images:
            payload["images"] = list(self.images)
        return payload


@dataclass(frozen=True, slots=True)
class ImageAttachment:
    """New image uploaded alongside listing metadata"""

    filename: str
    content: bytes
    content_type: str = "application/octet-stream"

    @classmethod
    def from_path(cls, path: str) -> "ImageAttachment":
        file_path = Path(path)
        content_type, _ = mimetypes.guess_type(file_path.name)
        return cls(
            filename=file_path.name,
            content=file_path.read_bytes(),
            content_type=content_type or "application/octet-stream",
        )


@dataclass
class MutationRequest:
    """Draft metadata plus newly attached images, submitted to create or update"""

    draft: Draft
    images: Tuple[ImageAttachment, ...] = ()

    def __post_init__(self):
        self.images = tuple(self.images)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any],
                  images: Tuple[ImageAttachment, ...] = ()) -> "MutationRequest":
        return cls(draft=Draft.from_dict(data), images=images)
