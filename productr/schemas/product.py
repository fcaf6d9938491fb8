# productr/schemas/product.py
import math
from typing import Any, Dict, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from productr.schemas.product_image import BinaryFile

PRODUCT_TYPES = {
    "foods": "Foods",
    "electronics": "Electronics",
    "clothes": "Clothes",
    "beauty": "Beauty Products",
    "others": "Others",
}

EXCHANGE_CHOICES = ("yes", "no")


class Product(BaseModel):
    """Продукт в том виде, в каком его отдаёт бэкенд"""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(alias="_id")
    name: str = ""
    type: Optional[str] = None
    stock: Optional[int] = None
    quantity: Optional[int] = None
    mrp: Optional[float] = None
    selling_price: Optional[float] = None
    brand_name: Optional[str] = None
    is_published: bool = False
    exchange_or_return: Optional[str] = None
    images: List[str] = []

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v):
        if isinstance(v, int):
            return str(v)
        return v

    @field_validator("stock", "quantity", mode="before")
    @classmethod
    def lenient_int(cls, v):
        # Бэкенд хранит то, что пришло из формы, в том числе пустые строки
        number = _to_number(v)
        return None if number is None else int(number)

    @field_validator("mrp", "selling_price", mode="before")
    @classmethod
    def lenient_float(cls, v):
        return _to_number(v)

    @field_validator("images", mode="before")
    @classmethod
    def drop_empty_images(cls, v):
        if v is None:
            return []
        return [url for url in v if url]

    @property
    def stock_quantity(self) -> int:
        return self.stock or self.quantity or 0


def _to_number(value: Any) -> Optional[float]:
    """Число из ответа бэкенда; пустое или нечисловое значение - None"""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return value if math.isfinite(value) else None
    try:
        number = float(str(value).strip())
    except ValueError:
        return None
    return number if math.isfinite(number) else None


Number = Union[int, float, str, None]


def _field(value: Number) -> str:
    if value is None:
        return ""
    return str(value)


class ProductPayload(BaseModel):
    """Полная замена продукта: все поля и все картинки"""

    name: str
    type: Optional[str] = None
    quantity_stock: Number = None
    mrp: Number = None
    selling_price: Number = None
    brand_name: Optional[str] = None
    exchange_or_return: str = "yes"
    is_published: bool = False
    images: List[BinaryFile] = []

    def to_form_data(self) -> Dict[str, str]:
        return {
            "name": self.name,
            "type": self.type or "",
            "quantity": _field(self.quantity_stock),
            "stock": _field(self.quantity_stock),
            "mrp": _field(self.mrp),
            "selling_price": _field(self.selling_price),
            "brand_name": self.brand_name or "",
            "exchange_or_return": self.exchange_or_return,
            "is_published": "true" if self.is_published else "false",
        }

    def to_files(self) -> List[Tuple[str, Tuple[str, bytes, str]]]:
        # Каждая картинка уходит отдельной частью с одним и тем же именем "images"
        return [("images", image.as_upload()) for image in self.images]

    def multipart(self) -> List[Tuple[str, Any]]:
        return multipart_fields(self.to_form_data()) + self.to_files()


def multipart_fields(data: Dict[str, str]) -> List[Tuple[str, Any]]:
    """
    Текстовые поля как части multipart без имени файла.

    Так запрос остаётся multipart/form-data даже без картинок,
    иначе httpx отправил бы обычную urlencoded форму.
    """
    return [(key, (None, value)) for key, value in data.items()]
