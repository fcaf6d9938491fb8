from typing import Dict, NoReturn, Optional


class ProductrError(Exception):
    """Базовая ошибка клиента"""


class ValidationError(ProductrError):
    """Локальная ошибка формы: блокирует отправку, пользователь исправляет поле"""

    def __init__(self, errors: Dict[str, str]):
        self.errors = dict(errors)
        super().__init__("; ".join(self.errors.values()) or "Validation failed")


class NetworkError(ProductrError):
    """Запрос к API не удался"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class PartialFetchError(ProductrError):
    """Не удалось повторно скачать одну из уже сохранённых картинок"""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"Failed to refetch {url}: {reason}")


class IndexOutOfRange(ProductrError, IndexError):
    def __init__(self, index: int, length: int):
        self.index = index
        self.length = length
        super().__init__(f"Index {index} out of range for {length} images")


def raise_validation(field: str, message: str) -> NoReturn:
    raise ValidationError({field: message})


def raise_network(message: str = "Something went wrong. Please try again.", *, status_code: int = None) -> NoReturn:
    raise NetworkError(message, status_code=status_code)
