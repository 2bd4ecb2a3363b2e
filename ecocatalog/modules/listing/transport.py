"""
Catalog Transport

httpx client for the marketplace REST endpoints
"""

import json
import time
from typing import Any, Dict, List, Optional

import httpx

from ecocatalog.core.config_models import CatalogScope
from ecocatalog.core.error_handler import (
    ServerRejection,
    UnexpectedFailure,
    handle_transport_errors,
    log_execution_time,
    rejection_from_response,
)
from ecocatalog.core.logger import get_logger
from ecocatalog.modules.interfaces import ICatalogTransport

from .models import Listing, MutationRequest


class HttpCatalogTransport(ICatalogTransport):
    """
    REST transport

    Endpoints:
        GET    /marketplace/my-products   listings owned by the factory
        GET    /marketplace               aggregated buyer view
        POST   /marketplace               create (multipart)
        PUT    /marketplace/{id}          update (multipart)
        DELETE /marketplace/{id}          delete

    Responses use the envelope {"success": bool, "data": ..., "message": str};
    bare JSON bodies are accepted as data.
    """

    def __init__(self, base_url: str = "http://localhost:5000/api", timeout: float = 10.0,
                 scope: CatalogScope = CatalogScope.FACTORY, cache_bust: bool = True,
                 headers: Optional[Dict[str, str]] = None,
                 client: Optional[httpx.AsyncClient] = None):
        """
        Args:
            base_url: API root
            timeout: request timeout in seconds
            scope: collection returned by list_listings
            cache_bust: append a millisecond timestamp to list requests
            headers: extra headers sent with every request
            client: preconfigured client, mainly for tests
        """
        self.base_url = base_url.rstrip("/")
        self.scope = CatalogScope(scope)
        self.cache_bust = cache_bust
        self.logger = get_logger()
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            headers=headers or {},
        )

    @classmethod
    def from_config(cls, catalog_config: Dict[str, Any]) -> "HttpCatalogTransport":
        return cls(
            base_url=catalog_config.get("base_url", "http://localhost:5000/api"),
            timeout=float(catalog_config.get("timeout", 10.0)),
            scope=catalog_config.get("scope", CatalogScope.FACTORY),
            cache_bust=bool(catalog_config.get("cache_bust", True)),
        )

    async def __aenter__(self) -> "HttpCatalogTransport":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    def _unwrap(self, response: httpx.Response) -> Any:
        """Check status and envelope, return the payload"""
        if response.status_code >= 400:
            raise rejection_from_response(response)

        if response.status_code == 204 or not response.content:
            return None

        try:
            body = response.json()
        except (json.JSONDecodeError, ValueError) as e:
            raise UnexpectedFailure(f"Malformed response body: {e}")

        if isinstance(body, dict) and "success" in body:
            if not body.get("success"):
                raise ServerRejection(
                    str(body.get("message") or "Request was not successful"),
                    status_code=response.status_code,
                )
            return body.get("data")
        return body

    def _parse_listing(self, data: Any) -> Listing:
        try:
            return Listing.from_dict(data)
        except (TypeError, ValueError) as e:
            raise UnexpectedFailure(f"Malformed listing in response: {e}")

    def _parse_listings(self, data: Any) -> List[Listing]:
        if not isinstance(data, list):
            raise UnexpectedFailure(f"Expected a list of listings, got {type(data).__name__}")
        return [self._parse_listing(item) for item in data]

    def _multipart(self, request: MutationRequest, include_images: bool) -> List[tuple]:
        """Metadata as the "data" field followed by one "images" part per attachment"""
        payload = json.dumps(request.draft.to_payload(include_images=include_images))
        # a part without filename is a plain form field; keeps multipart even with no images
        parts: List[tuple] = [("data", (None, payload.encode("utf-8"), "application/json"))]
        parts.extend(
            ("images", (image.filename, image.content, image.content_type))
            for image in request.images
        )
        return parts

    @log_execution_time()
    @handle_transport_errors
    async def list_listings(self) -> List[Listing]:
        if self.scope is CatalogScope.MARKETPLACE:
            return await self.browse_marketplace()

        params = {"t": int(time.time() * 1000)} if self.cache_bust else None
        response = await self._client.get("/marketplace/my-products", params=params)
        listings = self._parse_listings(self._unwrap(response))
        self.logger.debug(f"Fetched {len(listings)} factory listings")
        return listings

    @handle_transport_errors
    async def browse_marketplace(self) -> List[Listing]:
        """Active listings of every factory"""
        response = await self._client.get("/marketplace")
        listings = self._parse_listings(self._unwrap(response))
        self.logger.debug(f"Fetched {len(listings)} marketplace listings")
        return listings

    @log_execution_time()
    @handle_transport_errors
    async def create_listing(self, request: MutationRequest) -> Listing:
        self.logger.debug(f"Creating listing {request.draft.name!r} with {len(request.images)} images")
        response = await self._client.post(
            "/marketplace", files=self._multipart(request, include_images=False)
        )
        return self._parse_listing(self._unwrap(response))

    @log_execution_time()
    @handle_transport_errors
    async def update_listing(self, listing_id: str, request: MutationRequest) -> Listing:
        self.logger.debug(f"Updating listing {listing_id} with {len(request.images)} new images")
        response = await self._client.put(
            f"/marketplace/{listing_id}", files=self._multipart(request, include_images=True)
        )
        return self._parse_listing(self._unwrap(response))

    @log_execution_time()
    @handle_transport_errors
    async def delete_listing(self, listing_id: str) -> None:
        self.logger.debug(f"Deleting listing {listing_id}")
        response = await self._client.delete(f"/marketplace/{listing_id}")
        self._unwrap(response)
