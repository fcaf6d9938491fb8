"""
Tests for ProductGateway against a mocked backend.
"""

import httpx
import pytest

from helpers import form_field, image_parts, product_json
from productr.core.exceptions import NetworkError
from productr.schemas.product import Product, ProductPayload
from productr.schemas.product_image import BinaryFile
from productr.services.products import ProductGateway


def payload(**overrides) -> ProductPayload:
    data = dict(
        name="Shoes",
        type="clothes",
        quantity_stock=5,
        mrp=1200,
        selling_price="999",
        brand_name="Acme",
        exchange_or_return="no",
        images=[
            BinaryFile(name="b.jpg", content_type="image/jpeg", content=b"b"),
            BinaryFile(name="c.png", content_type="image/png", content=b"c"),
        ],
    )
    data.update(overrides)
    return ProductPayload(**data)


class TestProductModel:
    def test_accepts_backend_id(self):
        product = Product.model_validate(product_json(_id=42, images=["u", "", None]))
        assert product.id == "42"
        assert product.images == ["u"]

    def test_stock_falls_back_to_quantity(self):
        product = Product.model_validate(product_json(stock=None, quantity=7))
        assert product.stock_quantity == 7


class TestListProducts:
    async def test_published_query(self, client, backend):
        backend.json("GET", "/products", [product_json()])

        products = await ProductGateway(client).list_products(True)

        assert [p.id for p in products] == ["p1"]
        assert backend.last("GET", "/products").url.params["published"] == "true"

    async def test_non_list_body_is_empty(self, client, backend):
        backend.json("GET", "/products", {"message": "ok"})

        assert await ProductGateway(client).list_products(False) == []

    async def test_blank_numbers_are_empty(self, client, backend):
        backend.json("GET", "/products", [product_json(stock="", quantity=" ", mrp="", selling_price="n/a")])

        (product,) = await ProductGateway(client).list_products(True)

        assert product.stock is None
        assert product.quantity is None
        assert product.mrp is None
        assert product.selling_price is None
        assert product.stock_quantity == 0

    async def test_numeric_strings_are_parsed(self, client, backend):
        backend.json("GET", "/products", [product_json(stock="7", mrp="1200.50")])

        (product,) = await ProductGateway(client).list_products(True)

        assert product.stock == 7
        assert product.mrp == 1200.5

    async def test_broken_row_is_skipped(self, client, backend):
        broken = product_json()
        del broken["_id"]
        backend.json("GET", "/products", [broken, product_json(_id="p2")])

        products = await ProductGateway(client).list_products(True)

        assert [p.id for p in products] == ["p2"]

    async def test_all_products_published_first(self, client, backend):
        def handler(request):
            published = request.url.params["published"] == "true"
            pid = "pub" if published else "draft"
            return httpx.Response(200, json=[product_json(_id=pid, is_published=published)])

        backend.add("GET", "/products", handler)

        products = await ProductGateway(client).list_all_products()

        assert [p.id for p in products] == ["pub", "draft"]

    async def test_error_message_from_backend(self, client, backend):
        backend.json("GET", "/products", {"message": "Session expired"}, status_code=401)

        with pytest.raises(NetworkError) as exc_info:
            await ProductGateway(client).list_products(True)
        assert exc_info.value.message == "Session expired"
        assert exc_info.value.status_code == 401


class TestWriteProducts:
    async def test_create_sends_multipart(self, client, backend):
        backend.json("POST", "/products", {"success": True}, status_code=201)

        await ProductGateway(client).create_product(payload())

        request = backend.last("POST", "/products")
        assert request.headers["content-type"].startswith("multipart/form-data")
        assert form_field(request, "name") == "Shoes"
        assert form_field(request, "quantity") == "5"
        assert form_field(request, "stock") == "5"
        assert form_field(request, "mrp") == "1200"
        assert form_field(request, "selling_price") == "999"
        assert form_field(request, "brand_name") == "Acme"
        assert form_field(request, "exchange_or_return") == "no"
        assert form_field(request, "is_published") == "false"
        assert image_parts(request) == ["b.jpg", "c.png"]

    async def test_update_is_full_replacement(self, client, backend):
        backend.json("PUT", "/products/p1", {"success": True})

        await ProductGateway(client).update_product("p1", payload(is_published=True, images=[]))

        request = backend.last("PUT", "/products/p1")
        assert request.headers["content-type"].startswith("multipart/form-data")
        assert form_field(request, "is_published") == "true"
        assert image_parts(request) == []

    async def test_set_published_only_sends_flag(self, client, backend):
        backend.json("PUT", "/products/p1", {"success": True})

        await ProductGateway(client).set_published("p1", False)

        request = backend.last("PUT", "/products/p1")
        assert request.headers["content-type"].startswith("multipart/form-data")
        assert form_field(request, "is_published") == "false"
        assert 'name="name"' not in request.content.decode()

    async def test_delete(self, client, backend):
        backend.json("DELETE", "/products/p1", {"success": True})

        await ProductGateway(client).delete_product("p1")

        assert backend.last("DELETE", "/products/p1")

    async def test_transport_failure_uses_fallback_message(self, client, backend):
        def broken(request):
            raise httpx.ConnectError("down", request=request)

        backend.add("DELETE", "/products/p1", broken)

        with pytest.raises(NetworkError) as exc_info:
            await ProductGateway(client).delete_product("p1")
        assert exc_info.value.message == "Failed to delete product. Please try again."
