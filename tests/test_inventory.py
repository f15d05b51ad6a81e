import httpx
import pytest  # type: ignore[reportMissingImports]

from storefront.config import CartSettings
from storefront.errors import InventoryError
from storefront.inventory import InventoryClient

BASE_URL = "http://inventory.test/api"


def _client(handler) -> InventoryClient:
    transport = httpx.MockTransport(handler)
    return InventoryClient(BASE_URL, http_client=httpx.AsyncClient(transport=transport))


@pytest.mark.asyncio
async def test_get_stock_parses_payload():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append((request.method, str(request.url)))
        return httpx.Response(200, json={"id": 3, "amount": 7})

    client = _client(handler)
    stock = await client.get_stock(3)

    assert stock.id == 3
    assert stock.amount == 7
    assert seen == [("GET", "http://inventory.test/api/stock/3")]

    await client.aclose()


@pytest.mark.asyncio
async def test_get_product_drops_amount_and_keeps_metadata():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/api/products/1"
        return httpx.Response(
            200,
            json={"id": 1, "title": "Tênis", "price": 179.9, "image": "a.jpg", "amount": 99, "brand": "Rocket"},
        )

    client = _client(handler)
    info = await client.get_product(1)

    assert info.title == "Tênis"
    assert info.price == 179.9
    assert "amount" not in info.model_dump()
    assert info.model_dump()["brand"] == "Rocket"

    await client.aclose()


@pytest.mark.asyncio
async def test_get_product_keeps_display_fields_verbatim():
    payload = {"id": 4, "title": None, "price": "179.90", "image": {"url": "b.jpg", "width": 640}}
    client = _client(lambda request: httpx.Response(200, json=payload))

    info = await client.get_product(4)

    assert info.model_dump() == payload

    await client.aclose()


@pytest.mark.asyncio
@pytest.mark.parametrize("status", [404, 500, 503])
async def test_error_status_raises_inventory_error(status):
    client = _client(lambda request: httpx.Response(status, json={"message": "nope"}))

    with pytest.raises(InventoryError) as exc_info:
        await client.get_stock(1)

    assert f"HTTP {status}" in str(exc_info.value)
    await client.aclose()


@pytest.mark.asyncio
async def test_transport_error_raises_inventory_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = _client(handler)

    with pytest.raises(InventoryError) as exc_info:
        await client.get_stock(1)

    assert isinstance(exc_info.value.__cause__, httpx.ConnectError)
    await client.aclose()


@pytest.mark.asyncio
async def test_non_json_body_raises_inventory_error():
    client = _client(lambda request: httpx.Response(200, text="<html>maintenance</html>"))

    with pytest.raises(InventoryError):
        await client.get_product(1)

    await client.aclose()


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload",
    [{"id": 1}, {"id": 1, "amount": -1}, {"amount": 2}, [1, 2], {"id": "abc", "amount": 1}],
)
async def test_invalid_stock_payload_raises_inventory_error(payload):
    client = _client(lambda request: httpx.Response(200, json=payload))

    with pytest.raises(InventoryError):
        await client.get_stock(1)

    await client.aclose()


@pytest.mark.asyncio
async def test_invalid_product_payload_raises_inventory_error():
    client = _client(lambda request: httpx.Response(200, json={"title": "missing id"}))

    with pytest.raises(InventoryError):
        await client.get_product(1)

    await client.aclose()


def test_requires_base_url():
    with pytest.raises(ValueError):
        InventoryClient("")


@pytest.mark.asyncio
async def test_from_settings_strips_trailing_slash():
    client = InventoryClient.from_settings(
        CartSettings(inventory_url="http://inventory.test/", inventory_timeout=3.0, storage_backend="memory")
    )

    assert client.base_url == "http://inventory.test"
    assert client.timeout == 3.0

    http_client = await client._get_http_client()
    assert http_client is await client._get_http_client()

    await client.aclose()
    assert client._http_client is None
