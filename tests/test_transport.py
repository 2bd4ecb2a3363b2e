"""
HTTP catalog transport tests
"""

import json

import httpx
import pytest

from ecocatalog.core.config_models import CatalogScope
from ecocatalog.core.error_handler import (
    NetworkFailure,
    NotFound,
    ServerRejection,
    UnexpectedFailure,
    ValidationRejected,
)
from ecocatalog.modules.listing.models import Draft, ImageAttachment, MutationRequest
from ecocatalog.modules.listing.transport import HttpCatalogTransport


def _transport(handler, **kwargs) -> HttpCatalogTransport:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://catalog.test/api")
    return HttpCatalogTransport(client=client, **kwargs)


def _multipart_fields(request: httpx.Request) -> str:
    return request.read().decode("utf-8", errors="replace")


@pytest.mark.asyncio
async def test_list_listings_uses_factory_endpoint_with_cache_bust(sample_listing_data):
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={"success": True, "data": [sample_listing_data]})

    transport = _transport(handler)
    listings = await transport.list_listings()

    assert [item.listing_id for item in listings] == ["p1"]
    assert seen[0].method == "GET"
    assert seen[0].url.path == "/api/marketplace/my-products"
    assert "t" in seen[0].url.params


@pytest.mark.asyncio
async def test_list_listings_without_cache_bust(sample_listing_data):
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json=[sample_listing_data])

    transport = _transport(handler, cache_bust=False)
    listings = await transport.list_listings()

    assert len(listings) == 1
    assert "t" not in seen[0].url.params


@pytest.mark.asyncio
async def test_marketplace_scope_lists_aggregated_view(sample_listing_data):
    seen = []

    def handler(request):
        seen.append(request.url.path)
        return httpx.Response(200, json={"success": True, "data": [sample_listing_data]})

    transport = _transport(handler, scope=CatalogScope.MARKETPLACE)
    await transport.list_listings()

    assert seen == ["/api/marketplace"]


@pytest.mark.asyncio
async def test_create_sends_multipart_metadata_and_images(sample_listing_data):
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(201, json={"success": True, "data": sample_listing_data})

    transport = _transport(handler)
    request = MutationRequest(
        draft=Draft(name="Jar", images=["kept.jpg"], cost_price=4, selling_price=9.5),
        images=(ImageAttachment("jar.jpg", b"jpeg-bytes", "image/jpeg"),),
    )

    listing = await transport.create_listing(request)

    assert listing.listing_id == "p1"
    sent = seen[0]
    assert sent.method == "POST"
    assert sent.url.path == "/api/marketplace"
    assert sent.headers["content-type"].startswith("multipart/form-data")
    body = _multipart_fields(sent)
    assert 'name="data"' in body
    assert '"tokenAmount": 9.5' in body
    assert "kept.jpg" not in body
    assert 'name="images"; filename="jar.jpg"' in body
    assert "jpeg-bytes" in body


@pytest.mark.asyncio
async def test_update_sends_retained_images(sample_listing_data):
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={"success": True, "data": sample_listing_data})

    transport = _transport(handler)
    await transport.update_listing("p1", MutationRequest(draft=Draft(name="Jar", images=["kept.jpg"])))

    assert seen[0].method == "PUT"
    assert seen[0].url.path == "/api/marketplace/p1"
    assert "kept.jpg" in _multipart_fields(seen[0])


@pytest.mark.asyncio
async def test_delete_accepts_message_only_body():
    def handler(request):
        assert request.method == "DELETE"
        return httpx.Response(200, json={"message": "Marketplace listing deleted successfully"})

    transport = _transport(handler)
    assert await transport.delete_listing("p1") is None


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "status,error_type",
    [(400, ValidationRejected), (422, ValidationRejected), (404, NotFound), (500, ServerRejection)],
)
async def test_error_status_mapping(status, error_type):
    def handler(request):
        return httpx.Response(status, json={"message": "nope"})

    transport = _transport(handler)
    with pytest.raises(error_type) as exc_info:
        await transport.update_listing("p1", MutationRequest(draft=Draft()))

    assert exc_info.value.status_code == status
    assert exc_info.value.message == "nope"


@pytest.mark.asyncio
async def test_unsuccessful_envelope_is_rejection():
    def handler(request):
        return httpx.Response(200, json={"success": False, "message": "Failed to fetch factory products"})

    transport = _transport(handler)
    with pytest.raises(ServerRejection) as exc_info:
        await transport.list_listings()
    assert exc_info.value.message == "Failed to fetch factory products"


@pytest.mark.asyncio
async def test_connect_error_is_network_failure():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    transport = _transport(handler)
    with pytest.raises(NetworkFailure):
        await transport.list_listings()


@pytest.mark.asyncio
async def test_timeout_is_network_failure():
    def handler(request):
        raise httpx.ReadTimeout("read timed out", request=request)

    transport = _transport(handler)
    with pytest.raises(NetworkFailure):
        await transport.delete_listing("p1")


@pytest.mark.asyncio
async def test_malformed_body_is_unexpected_failure():
    def handler(request):
        return httpx.Response(200, content=b"<html>oops</html>")

    transport = _transport(handler)
    with pytest.raises(UnexpectedFailure):
        await transport.list_listings()


@pytest.mark.asyncio
async def test_invalid_listing_in_response_is_unexpected_failure(sample_listing_data):
    sample_listing_data["inventory"]["currentStock"] = -2

    def handler(request):
        return httpx.Response(200, json={"success": True, "data": [sample_listing_data]})

    transport = _transport(handler)
    with pytest.raises(UnexpectedFailure):
        await transport.list_listings()


@pytest.mark.asyncio
async def test_context_manager_closes_owned_client():
    transport = HttpCatalogTransport(base_url="http://catalog.test/api/")
    async with transport:
        assert transport.base_url == "http://catalog.test/api"
    assert transport._client.is_closed


def test_from_config_reads_catalog_section():
    transport = HttpCatalogTransport.from_config(
        {"base_url": "http://catalog.test/api", "timeout": 3, "scope": "marketplace", "cache_bust": False}
    )
    assert transport.scope is CatalogScope.MARKETPLACE
    assert transport.cache_bust is False
