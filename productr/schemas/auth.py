# productr/schemas/auth.py
import re
from typing import Any, Dict, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from productr.core.exceptions import raise_validation

OTP_LENGTH = 6

_DIGITS = re.compile(r"[0-9]+")


# === Идентификатор пользователя ===

class PhoneIdentifier(BaseModel):
    """Номер телефона: в API уходит числом"""
    kind: Literal["phone"] = "phone"
    number: int

    def to_json(self) -> int:
        return self.number

    def __str__(self) -> str:
        return str(self.number)


class EmailIdentifier(BaseModel):
    kind: Literal["email"] = "email"
    email: str

    def to_json(self) -> str:
        return str(self.email)

    def __str__(self) -> str:
        return str(self.email)


Identifier = Union[PhoneIdentifier, EmailIdentifier]


def parse_identifier(raw: str) -> Identifier:
    """Решает один раз при вводе: только цифры - телефон, иначе email"""
    value = (raw or "").strip()
    if not value:
        raise_validation("identifier", "Please enter email or phone number")

    if _DIGITS.fullmatch(value):
        return PhoneIdentifier(number=int(value))

    # Формат почты проверяет бэкенд
    return EmailIdentifier(email=value)


def validate_otp(otp: str) -> str:
    if not otp or len(otp) != OTP_LENGTH or not _DIGITS.fullmatch(otp):
        raise_validation("otp", "Please enter a valid OTP")
    return otp


# === Ответы API ===

class User(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: Optional[Union[int, str]] = Field(default=None, alias="_id")
    email: Optional[str] = None
    phone: Optional[Union[int, str]] = None
    name: Optional[str] = None


class LoginResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    success: bool = False
    message: Optional[str] = None


class VerifyOtpResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    success: bool = False
    user: Optional[Dict[str, Any]] = None
    message: Optional[str] = None
