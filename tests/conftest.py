"""
Test Utilities and Fixtures
"""

import asyncio
import os
import sys
import tempfile
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from ecocatalog.core.error_handler import NotFound
from ecocatalog.modules.interfaces import ICatalogTransport
from ecocatalog.modules.listing.models import (
    Availability,
    Draft,
    Inventory,
    Listing,
    Pricing,
    ProductInfo,
    Sustainability,
)


def listing_from_draft(listing_id: str, draft: Draft) -> Listing:
    """Listing a server would persist for the draft"""
    return Listing(
        listing_id=listing_id,
        product_info=ProductInfo(
            name=draft.name,
            description=draft.description,
            category=draft.category,
            images=tuple(draft.images),
        ),
        pricing=Pricing(cost_price=draft.cost_price, selling_price=draft.selling_price),
        inventory=Inventory(current_stock=draft.current_stock),
        sustainability=Sustainability(recycled_material_percentage=draft.recycled_material_percentage),
        availability=Availability(is_active=draft.is_active),
    )


class FakeCatalogTransport(ICatalogTransport):
    """In-memory catalog service echoing submitted drafts back as listings"""

    def __init__(self, listings=None):
        self.listings = list(listings or [])
        self.calls = []
        self.failures = {}
        self.gates = {}
        self._next_id = 1
        self.closed = False

    def fail(self, operation: str, error: Exception) -> None:
        self.failures[operation] = error

    def gate(self, operation: str) -> asyncio.Event:
        """Block the operation until the returned event is set"""
        event = asyncio.Event()
        self.gates[operation] = event
        return event

    async def _enter(self, operation: str, *args) -> None:
        self.calls.append((operation, *args))
        if operation in self.gates:
            await self.gates[operation].wait()
        if operation in self.failures:
            raise self.failures[operation]

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        self.closed = True
        return False

    async def list_listings(self):
        await self._enter("list")
        return list(self.listings)

    async def browse_marketplace(self):
        await self._enter("browse")
        return [item for item in self.listings if item.availability.is_active]

    async def create_listing(self, request):
        await self._enter("create", request)
        listing = listing_from_draft(f"new{self._next_id}", request.draft)
        self._next_id += 1
        self.listings.append(listing)
        return listing

    async def update_listing(self, listing_id, request):
        await self._enter("update", listing_id, request)
        for index, listing in enumerate(self.listings):
            if listing.listing_id == listing_id:
                self.listings[index] = listing_from_draft(listing_id, request.draft)
                return self.listings[index]
        raise NotFound("Marketplace listing not found", status_code=404)

    async def delete_listing(self, listing_id):
        await self._enter("delete", listing_id)
        before = len(self.listings)
        self.listings = [item for item in self.listings if item.listing_id != listing_id]
        if len(self.listings) == before:
            raise NotFound("Marketplace listing not found", status_code=404)


@pytest.fixture
def temp_dir():
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def temp_config_file(temp_dir):
    config_file = temp_dir / "config.yaml"
    config_file.write_text(
        """
app:
  name: "ecocatalog"
  version: "1.0.0"
  debug: true
  log_level: "DEBUG"

catalog:
  base_url: "${ECOCATALOG_TEST_API_URL}"
  timeout: 5
  scope: "factory"
  cache_bust: false

display:
  fallback_image: "/placeholder.png"

draft_defaults:
  category: "garden"
  recycled_material_percentage: 60
  is_active: false
"""
    )
    return config_file


@pytest.fixture
def config(temp_config_file, monkeypatch):
    from ecocatalog.core.config import Config

    monkeypatch.setenv("ECOCATALOG_TEST_API_URL", "http://catalog.test/api")
    return Config(str(temp_config_file))


@pytest.fixture
def sample_listing_data():
    """Listing as returned by the catalog service"""
    return {
        "_id": "p1",
        "factoryId": {"_id": "f1", "companyInfo": {"name": "GreenWorks"}},
        "productInfo": {
            "name": "Jar",
            "description": "Recycled glass jar",
            "category": "home_decor",
            "images": ["https://cdn.test/jar.jpg"],
        },
        "pricing": {"costPrice": 4, "sellingPrice": 9.5},
        "inventory": {"currentStock": 5},
        "sustainability": {"recycledMaterialPercentage": 90},
        "availability": {"isActive": True},
        "createdAt": "2024-05-01T10:00:00.000Z",
        "updatedAt": "2024-05-02T10:00:00.000Z",
    }


@pytest.fixture
def make_listing():
    """Factory for listings with overridable fields"""

    def _make(listing_id="p1", name="Jar", current_stock=5, is_active=True,
              images=(), cost_price=4.0, selling_price=9.5, recycled=90.0):
        return Listing(
            listing_id=listing_id,
            product_info=ProductInfo(name=name, description="", category="home_decor", images=images),
            pricing=Pricing(cost_price=cost_price, selling_price=selling_price),
            inventory=Inventory(current_stock=current_stock),
            sustainability=Sustainability(recycled_material_percentage=recycled),
            availability=Availability(is_active=is_active),
        )

    return _make


@pytest.fixture
def fake_transport(make_listing):
    return FakeCatalogTransport([make_listing()])


@pytest.fixture(scope="session", autouse=True)
def logger():
    """Configure logging once, before any test captures stderr"""
    os.environ.setdefault("ECOCATALOG_LOG_FILE", "false")
    from ecocatalog.core.logger import Logger

    return Logger()
