import mimetypes
import uuid
from pathlib import Path
from typing import Literal, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_CONTENT_TYPE = "application/octet-stream"


class BinaryFile(BaseModel):
    """Файл картинки в памяти: имя, MIME-тип и содержимое"""
    model_config = ConfigDict(frozen=True)

    name: str
    content_type: str = DEFAULT_CONTENT_TYPE
    content: bytes = b""

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "BinaryFile":
        path = Path(path)
        content_type, _ = mimetypes.guess_type(path.name)
        return cls(
            name=path.name,
            content_type=content_type or DEFAULT_CONTENT_TYPE,
            content=path.read_bytes(),
        )

    def as_upload(self) -> Tuple[str, bytes, str]:
        """Кортеж в формате, который понимает httpx для files="""
        return self.name, self.content, self.content_type


def _slot_id() -> str:
    return uuid.uuid4().hex


class RemoteSlot(BaseModel):
    """Картинка, которая уже хранится на бэкенде"""
    model_config = ConfigDict(frozen=True)

    kind: Literal["remote"] = "remote"
    url: str
    slot_id: str = Field(default_factory=_slot_id)


class LocalSlot(BaseModel):
    """Новая картинка, выбранная пользователем и ещё не загруженная"""
    model_config = ConfigDict(frozen=True)

    kind: Literal["local"] = "local"
    file: BinaryFile
    slot_id: str = Field(default_factory=_slot_id)


ImageSlot = Union[RemoteSlot, LocalSlot]
