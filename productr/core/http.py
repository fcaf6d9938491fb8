# productr/core/http.py
import logging
from typing import Any, Optional

import httpx

from productr.core.config import Settings, settings as default_settings
from productr.core.exceptions import raise_network

logger = logging.getLogger(__name__)


def create_client(
    settings: Optional[Settings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.AsyncClient:
    """
    Создаёт общий клиент для API.

    Куки живут в клиенте всё время сессии, поэтому один и тот же клиент
    нужно передавать и в SessionGateway, и в ProductGateway.
    """
    settings = settings or default_settings
    return httpx.AsyncClient(
        base_url=settings.BASE_URL,
        timeout=settings.REQUEST_TIMEOUT,
        transport=transport,
        follow_redirects=True,
    )


def extract_message(response: httpx.Response) -> Optional[str]:
    """Достаёт поле message из JSON-ответа бэкенда, если оно там есть"""
    try:
        data = response.json()
    except ValueError:
        return None
    if isinstance(data, dict):
        message = data.get("message")
        if isinstance(message, str) and message:
            return message
    return None


async def send(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    *,
    fallback_message: str,
    **kwargs: Any,
) -> httpx.Response:
    """Выполняет запрос и переводит ошибки httpx в NetworkError"""
    try:
        response = await client.request(method, url, **kwargs)
        response.raise_for_status()
        return response
    except httpx.HTTPStatusError as e:
        message = extract_message(e.response) or fallback_message
        logger.warning("%s %s -> %s: %s", method, url, e.response.status_code, message)
        raise_network(message, status_code=e.response.status_code)
    except httpx.HTTPError as e:
        logger.warning("%s %s failed: %s", method, url, e)
        raise_network(fallback_message)


def read_json(response: httpx.Response, default: Any = None) -> Any:
    try:
        return response.json()
    except ValueError:
        logger.warning("Ответ не JSON (status %s)", response.status_code)
        return default
