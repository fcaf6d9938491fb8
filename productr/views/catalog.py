# productr/views/catalog.py
import logging
from enum import Enum
from typing import Dict, List, Optional

from productr.core.exceptions import IndexOutOfRange, NetworkError
from productr.forms.product_form import ProductForm
from productr.schemas.product import Product
from productr.services.image_service import ImageFetcher
from productr.services.products import ProductGateway

logger = logging.getLogger(__name__)


class Tab(str, Enum):
    PUBLISHED = "published"
    UNPUBLISHED = "unpublished"


class CatalogView:
    """Общая часть экранов со списком продуктов"""

    def __init__(self, gateway: ProductGateway, fetcher: ImageFetcher):
        self.gateway = gateway
        self.form = ProductForm(gateway, fetcher)
        self.products: List[Product] = []
        self.image_index: Dict[str, int] = {}

    async def _load(self) -> List[Product]:
        raise NotImplementedError

    async def refresh(self) -> List[Product]:
        try:
            products = await self._load()
        except NetworkError as e:
            # Список просто остаётся пустым, как и раньше
            logger.error("Ошибка загрузки продуктов: %s", e)
            products = []
        self.products = products
        self.image_index = {p.id: 0 for p in products}
        return products

    def select_image(self, product_id: str, index: int) -> None:
        product = self.get(product_id)
        if not 0 <= index < len(product.images):
            raise IndexOutOfRange(index, len(product.images))
        self.image_index[product_id] = index

    def current_image(self, product_id: str) -> Optional[str]:
        product = self.get(product_id)
        if not product.images:
            return None
        return product.images[self.image_index.get(product_id, 0)]

    def get(self, product_id: str) -> Product:
        for product in self.products:
            if product.id == product_id:
                return product
        raise KeyError(product_id)

    async def toggle_published(self, product: Product) -> str:
        target = not product.is_published
        await self.gateway.set_published(product.id, target)
        await self._after_toggle(product, target)
        return "Product Published Successfully" if target else "Product Unpublished Successfully"

    async def _after_toggle(self, product: Product, is_published: bool) -> None:
        await self.refresh()

    async def delete(self, product: Product) -> str:
        await self.gateway.delete_product(product.id)
        await self.refresh()
        return "Product Deleted Successfully"

    async def save_form(self) -> str:
        message = await self.form.submit()
        await self.refresh()
        return message


class HomeView(CatalogView):
    """Главная: вкладки опубликованных и неопубликованных продуктов"""

    def __init__(self, gateway: ProductGateway, fetcher: ImageFetcher):
        super().__init__(gateway, fetcher)
        self.active_tab = Tab.PUBLISHED

    async def _load(self) -> List[Product]:
        return await self.gateway.list_products(self.active_tab == Tab.PUBLISHED)

    async def switch_tab(self, tab: Tab) -> List[Product]:
        self.active_tab = Tab(tab)
        return await self.refresh()


class ProductsView(CatalogView):
    """Все продукты сразу"""

    async def _load(self) -> List[Product]:
        return await self.gateway.list_all_products()

    async def _after_toggle(self, product: Product, is_published: bool) -> None:
        # Здесь список не перезагружается, правим локальную копию
        self.products = [
            p.model_copy(update={"is_published": is_published}) if p.id == product.id else p
            for p in self.products
        ]
