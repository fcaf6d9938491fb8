# productr/forms/login_form.py
import logging
import time
from typing import Callable, List, Optional

from productr.core.config import settings
from productr.core.exceptions import NetworkError, ValidationError
from productr.schemas.auth import OTP_LENGTH, Identifier, User, parse_identifier
from productr.services.auth import SessionGateway

logger = logging.getLogger(__name__)


class OtpInput:
    """Шесть ячеек для кода; методы возвращают индекс ячейки, куда перейти"""

    def __init__(self, length: int = OTP_LENGTH):
        self.length = length
        self.digits: List[str] = [""] * length

    @property
    def value(self) -> str:
        return "".join(self.digits)

    @property
    def is_complete(self) -> bool:
        return len(self.value) == self.length and self.value.isdigit()

    def set_digit(self, index: int, value: str) -> int:
        if len(value) > 1:
            return index
        self.digits[index] = value
        if value and index < self.length - 1:
            return index + 1
        return index

    def backspace(self, index: int) -> int:
        if not self.digits[index] and index > 0:
            return index - 1
        return index

    def paste(self, text: str) -> int:
        for index, char in enumerate(text[: self.length]):
            if char.isdigit() and char.isascii():
                self.digits[index] = char
        for index, digit in enumerate(self.digits):
            if not digit:
                return index
        return self.length - 1

    def clear(self) -> None:
        self.digits = [""] * self.length


class ResendTimer:
    """Обратный отсчёт до повторной отправки кода"""

    def __init__(self, seconds: int = None, clock: Callable[[], float] = time.monotonic):
        self.seconds = settings.RESEND_OTP_SECONDS if seconds is None else seconds
        self._clock = clock
        self._started_at: Optional[float] = None

    def reset(self) -> None:
        self._started_at = self._clock()

    @property
    def remaining(self) -> int:
        if self._started_at is None:
            return 0
        left = self.seconds - int(self._clock() - self._started_at)
        return max(left, 0)

    @property
    def can_resend(self) -> bool:
        return self.remaining == 0


class LoginForm:
    """Два шага: идентификатор, затем одноразовый код"""

    def __init__(self, gateway: SessionGateway, timer: Optional[ResendTimer] = None):
        self.gateway = gateway
        self.timer = timer or ResendTimer()
        self.otp = OtpInput()
        self.identifier: Optional[Identifier] = None
        self.show_otp = False
        self.otp_error = False
        self.error = ""

    async def submit_identifier(self, raw: str) -> bool:
        self.error = ""
        try:
            identifier = parse_identifier(raw)
            response = await self.gateway.login(identifier)
        except (ValidationError, NetworkError) as e:
            self.error = str(e)
            raise

        if response.success:
            self.identifier = identifier
            self.show_otp = True
            self.otp.clear()
            self.timer.reset()
        elif response.message:
            self.error = response.message
        return response.success

    async def resend(self) -> bool:
        if self.identifier is None or not self.timer.can_resend:
            return False
        response = await self.gateway.request_otp(self.identifier)
        if response.success:
            self.timer.reset()
        return response.success

    def type_digit(self, index: int, value: str) -> int:
        self._clear_otp_error()
        return self.otp.set_digit(index, value)

    def paste_otp(self, text: str) -> int:
        self._clear_otp_error()
        return self.otp.paste(text)

    def _clear_otp_error(self) -> None:
        # Старая ошибка не должна висеть, пока пользователь правит код
        self.error = ""
        self.otp_error = False

    async def submit_otp(self) -> Optional[User]:
        """Возвращает пользователя при успехе, иначе None"""
        if self.identifier is None:
            raise RuntimeError("Identifier has not been submitted")

        self.error = ""
        self.otp_error = False
        try:
            response = await self.gateway.verify_otp(self.identifier, self.otp.value)
        except (ValidationError, NetworkError) as e:
            self.error = str(e)
            self.otp_error = True
            raise

        if not response.success:
            self.error = response.message or "Please enter a valid OTP"
            self.otp_error = True
            return None
        return User.model_validate(response.user or {})
