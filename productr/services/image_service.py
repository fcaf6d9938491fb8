"""
Картинки формы продукта: что уже лежит на бэкенде и что выбрано локально.

Бэкенд не умеет частично обновлять картинки, поэтому при сохранении
отправляется полный набор: оставшиеся удалённые картинки скачиваются
заново и уходят вместе с новыми файлами.

Используется:
  - формой создания / редактирования продукта
  - консолью для вывода превью
"""

import asyncio
import logging
from typing import Iterable, List, Optional, Sequence, Set
from urllib.parse import unquote, urlparse

import httpx

from productr.core.exceptions import IndexOutOfRange, PartialFetchError
from productr.schemas.product_image import (
    DEFAULT_CONTENT_TYPE,
    BinaryFile,
    ImageSlot,
    LocalSlot,
    RemoteSlot,
)

logger = logging.getLogger("image_service")

DEFAULT_FILENAME = "image.jpg"


def filename_from_url(url: str) -> str:
    """Последний сегмент пути URL или image.jpg, если его нет"""
    path = urlparse(url).path
    segment = path.rsplit("/", 1)[-1]
    return unquote(segment) or DEFAULT_FILENAME


class ImageFetcher:
    """Скачивает уже сохранённую картинку обратно в память"""

    def __init__(self, client: httpx.AsyncClient):
        self.client = client

    async def fetch(self, url: str) -> BinaryFile:
        try:
            response = await self.client.get(url)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise PartialFetchError(url, f"HTTP {e.response.status_code}") from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise PartialFetchError(url, str(e) or e.__class__.__name__) from e

        content_type = response.headers.get("Content-Type", "").split(";")[0].strip()
        return BinaryFile(
            name=filename_from_url(url),
            content_type=content_type or DEFAULT_CONTENT_TYPE,
            content=response.content,
        )


class ImageSetReconciler:
    """
    Список картинок формы.

    display_sequence - то, что видит пользователь, единственный источник порядка.
    Удалённые и локальные слоты могут идти вперемешку.
    Локальные слоты один к одному соответствуют staged_files.
    """

    def __init__(self, existing_urls: Optional[Iterable[str]] = None):
        self._slots: List[ImageSlot] = []
        self._live_slot_ids: Set[str] = set()
        self._staged_files: List[BinaryFile] = []
        self.initialize(existing_urls or [])

    # ---------- Состояние ----------

    @property
    def display_sequence(self) -> List[ImageSlot]:
        return list(self._slots)

    @property
    def staged_files(self) -> List[BinaryFile]:
        return list(self._staged_files)

    @property
    def live_remote_urls(self) -> Set[str]:
        return {
            slot.url
            for slot in self._slots
            if isinstance(slot, RemoteSlot) and slot.slot_id in self._live_slot_ids
        }

    @property
    def remote_count(self) -> int:
        return sum(1 for slot in self._slots if isinstance(slot, RemoteSlot))

    @property
    def local_count(self) -> int:
        return len(self._slots) - self.remote_count

    def __len__(self) -> int:
        return len(self._slots)

    # ---------- Операции ----------

    def initialize(self, existing_urls: Iterable[str]) -> None:
        slots = [RemoteSlot(url=url) for url in existing_urls]
        self._slots = list(slots)
        # Живые удалённые картинки отслеживаем по слоту, а не по URL:
        # два слота с одинаковым URL удаляются независимо
        self._live_slot_ids = {slot.slot_id for slot in slots}
        self._staged_files = []

    def add_files(self, files: Sequence[BinaryFile]) -> None:
        files = list(files)
        self._slots.extend(LocalSlot(file=f) for f in files)
        self._staged_files.extend(files)

    def file_index_of(self, display_index: int) -> int:
        """Позиция локального слота в staged_files, считается заново каждый раз"""
        self._check_index(display_index)
        if not isinstance(self._slots[display_index], LocalSlot):
            raise ValueError(f"Slot {display_index} is not a local file")
        remote_before = sum(
            1 for slot in self._slots[:display_index] if isinstance(slot, RemoteSlot)
        )
        return display_index - remote_before

    def remove_at(self, display_index: int) -> ImageSlot:
        self._check_index(display_index)
        slot = self._slots[display_index]

        if isinstance(slot, RemoteSlot):
            self._live_slot_ids.discard(slot.slot_id)
        else:
            del self._staged_files[self.file_index_of(display_index)]

        del self._slots[display_index]
        logger.debug("Удалён слот %d (%s)", display_index, slot.kind)
        return slot

    async def materialize_submission_payload(self, fetcher: ImageFetcher) -> List[BinaryFile]:
        """
        Финальный список файлов для отправки.

        Сначала заново скачанные удалённые картинки в порядке отображения,
        затем локальные файлы в порядке добавления. Картинка, которую
        не удалось скачать, пишется в лог и пропускается.
        Состояние не меняется.
        """
        urls = [
            slot.url
            for slot in self._slots
            if isinstance(slot, RemoteSlot) and slot.slot_id in self._live_slot_ids
        ]
        staged = list(self._staged_files)

        refetched = await asyncio.gather(*(self._refetch(fetcher, url) for url in urls))
        valid = [f for f in refetched if f is not None]

        if len(valid) < len(urls):
            logger.warning(
                "Скачано %d из %d сохранённых картинок", len(valid), len(urls)
            )
        return valid + staged

    # ---------- Вспомогательные ----------

    @staticmethod
    async def _refetch(fetcher: ImageFetcher, url: str) -> Optional[BinaryFile]:
        try:
            return await fetcher.fetch(url)
        except PartialFetchError as e:
            logger.error("Ошибка повторного скачивания картинки: %s", e)
            return None

    def _check_index(self, display_index: int) -> None:
        if not 0 <= display_index < len(self._slots):
            raise IndexOutOfRange(display_index, len(self._slots))
