import asyncio
from unittest.mock import AsyncMock, patch

import pytest

from book_catalog.integrations.dummyjson import DummyJsonClient, is_dummy_product, parse_product, to_book
from book_catalog.schemas.dummy import DummyProductUpdate
from book_catalog.tools.errors import UnexpectedResponseError, UpstreamStatusError


def test_is_dummy_product_requires_int_id_and_str_title():
    assert is_dummy_product({"id": 1, "title": "A"})
    assert not is_dummy_product({"id": "1", "title": "A"})
    assert not is_dummy_product({"id": True, "title": "A"})
    assert not is_dummy_product({"id": 1})
    assert not is_dummy_product(None)
    assert not is_dummy_product([{"id": 1, "title": "A"}])


def test_to_book_maps_brand_to_author_and_fills_defaults():
    book = to_book(parse_product({"id": 7, "title": "Powder Canister"}))

    assert book.id == 7
    assert book.author == "Unknown"
    assert book.description == ""
    assert book.rating == 0.0


def test_to_book_keeps_provided_fields():
    book = to_book(parse_product({
        "id": 1, "title": "Mascara", "brand": "Essence", "description": "d", "rating": 4.5,
    }))

    assert (book.author, book.description, book.rating) == ("Essence", "d", 4.5)


def test_non_numeric_rating_becomes_zero():
    book = to_book(parse_product({"id": 1, "title": "X", "rating": "high"}))

    assert book.rating == 0.0


def test_list_products_uses_search_endpoint_and_drops_invalid_entries():
    client = DummyJsonClient(base_url="https://example.test")
    response = {"products": [{"id": 1, "title": "A"}, {"id": "bad"}, {"id": 2, "title": "B"}]}

    with patch.object(client, "_make_request", AsyncMock(return_value=response)) as request:
        products = asyncio.run(client.list_products(search="mascara", limit=100))

    request.assert_awaited_once_with(
        "GET", "/products/search", params={"q": "mascara", "limit": 100, "skip": 0}
    )
    assert [p.id for p in products] == [1, 2]


def test_list_products_without_search():
    client = DummyJsonClient(base_url="https://example.test")

    with patch.object(client, "_make_request", AsyncMock(return_value={"products": []})) as request:
        asyncio.run(client.list_products())

    request.assert_awaited_once_with("GET", "/products", params={"limit": 100, "skip": 0})


def test_list_products_without_products_array_is_empty():
    client = DummyJsonClient(base_url="https://example.test")

    with patch.object(client, "_make_request", AsyncMock(return_value={"message": "?"})):
        assert asyncio.run(client.list_products()) == []


def test_list_products_error_status():
    client = DummyJsonClient(base_url="https://example.test")

    with patch.object(client, "_make_request", AsyncMock(side_effect=UpstreamStatusError(503))):
        with pytest.raises(UpstreamStatusError, match="DummyJSON error: 503"):
            asyncio.run(client.list_products())


def test_get_product_not_found_returns_none():
    client = DummyJsonClient(base_url="https://example.test")

    with patch.object(client, "_make_request", AsyncMock(side_effect=UpstreamStatusError(404))):
        assert asyncio.run(client.get_product(999)) is None


def test_get_product_bad_shape_returns_none():
    client = DummyJsonClient(base_url="https://example.test")

    with patch.object(client, "_make_request", AsyncMock(return_value={"id": "x"})):
        assert asyncio.run(client.get_product(1)) is None


def test_add_product_posts_payload():
    client = DummyJsonClient(base_url="https://example.test")
    payload = DummyProductUpdate(title="T", brand="A", description="", rating=0)

    with patch.object(client, "_make_request", AsyncMock(return_value={"id": 195, "title": "T"})) as request:
        product = asyncio.run(client.add_product(payload))

    assert product.id == 195
    method, endpoint = request.await_args.args
    assert (method, endpoint) == ("POST", "/products/add")
    assert request.await_args.kwargs["data"]["brand"] == "A"


def test_add_product_unexpected_shape():
    client = DummyJsonClient(base_url="https://example.test")

    with patch.object(client, "_make_request", AsyncMock(return_value={"ok": True})):
        with pytest.raises(UnexpectedResponseError):
            asyncio.run(client.add_product(DummyProductUpdate(title="T")))


def test_update_product_sends_only_set_fields():
    client = DummyJsonClient(base_url="https://example.test")
    payload = DummyProductUpdate(title="New")

    with patch.object(client, "_make_request", AsyncMock(return_value={"id": 3, "title": "New"})) as request:
        asyncio.run(client.update_product(3, payload))

    assert request.await_args.kwargs["data"] == {"title": "New"}


@pytest.mark.parametrize("method_name, args, message", [
    ("update_product", (3, DummyProductUpdate(title="x")), "Update failed: 500"),
    ("delete_product", (3,), "Delete failed: 500"),
    ("add_product", (DummyProductUpdate(title="x"),), "Create failed: 500"),
])
def test_mutation_error_messages(method_name, args, message):
    client = DummyJsonClient(base_url="https://example.test")

    with patch.object(client, "_make_request", AsyncMock(side_effect=UpstreamStatusError(500))):
        with pytest.raises(UpstreamStatusError, match=message):
            asyncio.run(getattr(client, method_name)(*args))


def test_make_request_requires_open_session():
    client = DummyJsonClient(base_url="https://example.test")

    with pytest.raises(RuntimeError):
        asyncio.run(client._make_request("GET", "/products"))
