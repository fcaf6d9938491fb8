from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # === API ===
    BASE_URL: str = Field(default="http://localhost:8000")
    REQUEST_TIMEOUT: float = Field(default=15.0)

    # Куда сохраняем пользователя после входа (аналог localStorage)
    USER_STORE_PATH: Path = Field(default=Path.home() / ".productr" / "user.json")

    LOG_LEVEL: str = Field(default="INFO")

    # Через сколько секунд можно запросить OTP повторно
    RESEND_OTP_SECONDS: int = Field(default=30)

    @field_validator("BASE_URL", mode="before")
    @classmethod
    def strip_trailing_slash(cls, v):
        if isinstance(v, str):
            return v.rstrip("/")
        return v

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def upper_log_level(cls, v):
        if isinstance(v, str):
            return v.strip().upper()
        return v


settings = Settings()
