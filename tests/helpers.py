"""
Helpers for building backend payloads and reading captured requests.
"""

import json
from typing import List

import httpx


def product_json(**overrides) -> dict:
    data = {
        "_id": "p1",
        "name": "Shoes",
        "type": "clothes",
        "stock": 5,
        "mrp": 1200,
        "selling_price": 999,
        "brand_name": "Acme",
        "is_published": True,
        "exchange_or_return": "yes",
        "images": ["https://x/a.jpg", "https://x/b.jpg"],
    }
    data.update(overrides)
    return data


def multipart_text(request: httpx.Request) -> str:
    return request.content.decode("latin-1")


def form_field(request: httpx.Request, name: str) -> str:
    """Value of a text part in a multipart request body."""
    body = multipart_text(request)
    marker = f'name="{name}"\r\n\r\n'
    start = body.index(marker) + len(marker)
    return body[start: body.index("\r\n", start)]


def image_parts(request: httpx.Request) -> List[str]:
    """Filenames of the "images" parts, in order."""
    body = multipart_text(request)
    names = []
    marker = 'name="images"; filename="'
    position = body.find(marker)
    while position != -1:
        start = position + len(marker)
        names.append(body[start: body.index('"', start)])
        position = body.find(marker, start)
    return names


def json_body(request: httpx.Request) -> dict:
    return json.loads(request.content)
