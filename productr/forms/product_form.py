# productr/forms/product_form.py
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Sequence, Union

from productr.core.exceptions import NetworkError, ValidationError
from productr.schemas.product import Product, ProductPayload
from productr.schemas.product_image import BinaryFile, ImageSlot
from productr.services.image_service import ImageFetcher, ImageSetReconciler
from productr.services.products import ProductGateway

logger = logging.getLogger(__name__)

FieldValue = Union[str, int, float]

EDITABLE_FIELDS = (
    "name",
    "type",
    "quantity_stock",
    "mrp",
    "selling_price",
    "brand_name",
    "exchange_or_return",
)


class FormStatus(str, Enum):
    CLOSED = "closed"
    CREATE = "create"
    EDIT = "edit"
    SUBMITTING = "submitting"


@dataclass
class ProductFormState:
    """Всё, что живёт, пока открыта форма продукта"""
    name: str = ""
    type: str = ""
    quantity_stock: FieldValue = ""
    mrp: FieldValue = ""
    selling_price: FieldValue = ""
    brand_name: str = ""
    exchange_or_return: str = "yes"
    images: ImageSetReconciler = field(default_factory=ImageSetReconciler)
    errors: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_product(cls, product: Product) -> "ProductFormState":
        return cls(
            name=product.name or "",
            type=product.type or "",
            quantity_stock=product.stock or product.quantity or "",
            mrp=product.mrp or "",
            selling_price=product.selling_price or "",
            brand_name=product.brand_name or "",
            exchange_or_return=product.exchange_or_return or "yes",
            images=ImageSetReconciler(product.images),
        )

    def to_payload(self, images: Sequence[BinaryFile], is_published: bool) -> ProductPayload:
        return ProductPayload(
            name=self.name,
            type=self.type,
            quantity_stock=_blank_to_none(self.quantity_stock),
            mrp=_blank_to_none(self.mrp),
            selling_price=_blank_to_none(self.selling_price),
            brand_name=self.brand_name,
            exchange_or_return=self.exchange_or_return,
            is_published=is_published,
            images=list(images),
        )


def _blank_to_none(value: FieldValue) -> Optional[FieldValue]:
    if isinstance(value, str) and not value.strip():
        return None
    return value


class ProductForm:
    """
    Форма создания / редактирования продукта.

    Closed -> Open(Create) | Open(Edit) -> Submitting -> Closed,
    при ошибке отправки возвращается в Open с сохранённым состоянием.
    """

    def __init__(self, gateway: ProductGateway, fetcher: ImageFetcher):
        self.gateway = gateway
        self.fetcher = fetcher
        self.status = FormStatus.CLOSED
        self.state: Optional[ProductFormState] = None
        self.editing: Optional[Product] = None

    @property
    def is_open(self) -> bool:
        return self.status != FormStatus.CLOSED

    @property
    def images(self) -> ImageSetReconciler:
        return self._require_state().images

    @property
    def errors(self) -> Dict[str, str]:
        return self._require_state().errors

    # ---------- Открытие / закрытие ----------

    def open_create(self) -> ProductFormState:
        self._ensure_not_submitting()
        self.editing = None
        self.state = ProductFormState()
        self.status = FormStatus.CREATE
        return self.state

    def open_edit(self, product: Product) -> ProductFormState:
        self._ensure_not_submitting()
        self.editing = product
        self.state = ProductFormState.from_product(product)
        self.status = FormStatus.EDIT
        return self.state

    def close(self) -> None:
        self._ensure_not_submitting()
        self.editing = None
        self.state = None
        self.status = FormStatus.CLOSED

    # ---------- Поля и картинки ----------

    def set_field(self, name: str, value: FieldValue) -> None:
        if name not in EDITABLE_FIELDS:
            raise KeyError(name)
        state = self._require_state()
        setattr(state, name, value)
        # Как только пользователь правит поле, его ошибка скрывается
        state.errors.pop(name, None)

    def add_files(self, files: Sequence[BinaryFile]) -> None:
        self.images.add_files(files)

    def remove_image(self, display_index: int) -> ImageSlot:
        return self.images.remove_at(display_index)

    # ---------- Отправка ----------

    def validate(self) -> None:
        state = self._require_state()
        errors = {}
        if not state.name.strip():
            errors["name"] = "Please enter product name"
        if errors:
            state.errors = errors
            raise ValidationError(errors)

    async def submit(self) -> str:
        """Отправляет форму, возвращает текст уведомления об успехе"""
        self._ensure_not_submitting()
        state = self._require_state()
        self.validate()

        previous = self.status
        editing = self.editing
        self.status = FormStatus.SUBMITTING
        state.errors.pop("submit", None)

        try:
            if editing is not None:
                images = await state.images.materialize_submission_payload(self.fetcher)
                payload = state.to_payload(images, is_published=editing.is_published)
                await self.gateway.update_product(editing.id, payload)
                message = "Product updated Successfully"
            else:
                payload = state.to_payload(state.images.staged_files, is_published=False)
                await self.gateway.create_product(payload)
                message = "Product added Successfully"
        except NetworkError as e:
            action = "update" if editing is not None else "create"
            logger.error("Ошибка сохранения продукта (%s): %s", action, e)
            state.errors["submit"] = e.message or f"Failed to {action} product. Please try again."
            self.status = previous
            raise

        self.status = FormStatus.CLOSED
        self.editing = None
        self.state = None
        return message

    # ---------- Вспомогательные ----------

    def _require_state(self) -> ProductFormState:
        if self.state is None:
            raise RuntimeError("Product form is not open")
        return self.state

    def _ensure_not_submitting(self) -> None:
        if self.status == FormStatus.SUBMITTING:
            raise RuntimeError("Product form is being submitted")
