from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import List, Union

from productr.schemas.product import PRODUCT_TYPES, Product

CURRENCY_SYMBOL = "₹"


def group_indian(digits: str) -> str:
    """
    Группирует цифры по-индийски: последние три, дальше по две
    1234567 -> 12,34,567
    """
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return ",".join(groups + [tail])


def format_price(price: Union[int, float, str, Decimal, None]) -> str:
    """Цена в рупиях без копеек: 123456.7 -> ₹1,23,457"""
    try:
        value = Decimal(str(price if price not in (None, "") else 0))
    except InvalidOperation:
        value = Decimal(0)

    rounded = value.quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    sign = "-" if rounded < 0 else ""
    return f"{sign}{CURRENCY_SYMBOL}{group_indian(str(abs(int(rounded))))}"


def describe_product(product: Product) -> List[str]:
    """Строки карточки продукта для консоли"""
    product_type = PRODUCT_TYPES.get(product.type or "", product.type) or "N/A"
    return [
        product.name,
        f"  Product type: {product_type}",
        f"  Quantity Stock: {product.stock_quantity}",
        f"  MRP: {format_price(product.mrp or 0)}",
        f"  Selling Price: {format_price(product.selling_price or 0)}",
        f"  Brand Name: {product.brand_name or 'N/A'}",
        f"  Total Number of images: {len(product.images)}",
        f"  Exchange Eligibility: {'YES' if product.exchange_or_return == 'yes' else 'NO'}",
    ]
