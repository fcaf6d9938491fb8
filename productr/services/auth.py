# productr/services/auth.py
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import httpx

from productr.core.config import Settings, settings as default_settings
from productr.core.http import read_json, send
from productr.schemas.auth import (
    Identifier,
    LoginResponse,
    User,
    VerifyOtpResponse,
    validate_otp,
)

logger = logging.getLogger(__name__)


class UserStore:
    """Хранит вошедшего пользователя в JSON-файле между запусками"""

    def __init__(self, path: Path):
        self.path = Path(path)

    def save(self, user: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(user, ensure_ascii=False), encoding="utf-8")

    def load(self) -> Optional[Dict[str, Any]]:
        if not self.path.exists():
            return None
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning("Не удалось прочитать %s: %s", self.path, e)
            return None
        return data if isinstance(data, dict) else None

    def clear(self) -> None:
        if self.path.exists():
            self.path.unlink()


class SessionGateway:
    """Вход по email / телефону и одноразовому коду"""

    def __init__(self, client: httpx.AsyncClient, settings: Optional[Settings] = None):
        self.client = client
        self.settings = settings or default_settings
        self.store = UserStore(self.settings.USER_STORE_PATH)

    async def login(self, identifier: Identifier) -> LoginResponse:
        """Отправить код на телефон / почту"""
        response = await send(
            self.client,
            "POST",
            "/login",
            json={"identifier": identifier.to_json()},
            fallback_message="Something went wrong. Please try again.",
        )
        result = LoginResponse.model_validate(read_json(response, {}))
        logger.info("Запрос входа для %s: success=%s", identifier, result.success)
        return result

    async def request_otp(self, identifier: Identifier) -> LoginResponse:
        """Повторно запросить код"""
        response = await send(
            self.client,
            "POST",
            "/auth/request-otp",
            json={"identifier": identifier.to_json()},
            fallback_message="Failed to resend OTP. Please try again.",
        )
        return LoginResponse.model_validate(read_json(response, {}))

    async def verify_otp(self, identifier: Identifier, otp: str) -> VerifyOtpResponse:
        otp = validate_otp(otp)
        response = await send(
            self.client,
            "POST",
            "/verify_otp",
            json={"identifier": identifier.to_json(), "otp": otp},
            fallback_message="Please enter a valid OTP",
        )
        result = VerifyOtpResponse.model_validate(read_json(response, {}))

        if result.success and result.user:
            self.store.save(result.user)
            logger.info("Пользователь %s вошёл", identifier)
        return result

    def current_user(self) -> Optional[User]:
        data = self.store.load()
        return User.model_validate(data) if data else None

    def logout(self) -> None:
        self.store.clear()
        self.client.cookies.clear()
