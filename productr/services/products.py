# productr/services/products.py
import asyncio
import logging
from typing import List, Union

import httpx
from pydantic import ValidationError as PydanticValidationError

from productr.core.http import read_json, send
from productr.schemas.product import Product, ProductPayload, multipart_fields

logger = logging.getLogger(__name__)

ProductId = Union[int, str]


class ProductGateway:
    """Клиент к API продуктов"""

    def __init__(self, client: httpx.AsyncClient):
        self.client = client

    async def list_products(self, published: bool) -> List[Product]:
        response = await send(
            self.client,
            "GET",
            "/products",
            params={"published": "true" if published else "false"},
            fallback_message="Failed to load products. Please try again.",
        )
        data = read_json(response)
        if not isinstance(data, list):
            logger.warning("Ожидали список продуктов, получили %s", type(data).__name__)
            return []
        products = []
        for item in data:
            try:
                products.append(Product.model_validate(item))
            except PydanticValidationError as e:
                logger.warning("Пропущен продукт с некорректными данными: %s", e.errors()[:1])
        return products

    async def list_all_products(self) -> List[Product]:
        """Опубликованные и неопубликованные продукты одним списком"""
        published, unpublished = await asyncio.gather(
            self.list_products(True),
            self.list_products(False),
        )
        return published + unpublished

    async def create_product(self, payload: ProductPayload) -> httpx.Response:
        logger.info("Создание продукта %r (%d картинок)", payload.name, len(payload.images))
        return await send(
            self.client,
            "POST",
            "/products",
            files=payload.multipart(),
            fallback_message="Failed to create product. Please try again.",
        )

    async def update_product(self, product_id: ProductId, payload: ProductPayload) -> httpx.Response:
        # Полная замена: картинки, которых нет в payload, на бэкенде пропадут
        logger.info("Обновление продукта %s (%d картинок)", product_id, len(payload.images))
        return await send(
            self.client,
            "PUT",
            f"/products/{product_id}",
            files=payload.multipart(),
            fallback_message="Failed to update product. Please try again.",
        )

    async def delete_product(self, product_id: ProductId) -> httpx.Response:
        logger.info("Удаление продукта %s", product_id)
        return await send(
            self.client,
            "DELETE",
            f"/products/{product_id}",
            fallback_message="Failed to delete product. Please try again.",
        )

    async def set_published(self, product_id: ProductId, is_published: bool) -> httpx.Response:
        action = "publish" if is_published else "unpublish"
        return await send(
            self.client,
            "PUT",
            f"/products/{product_id}",
            files=multipart_fields({"is_published": "true" if is_published else "false"}),
            fallback_message=f"Failed to {action} product. Please try again.",
        )
