# social_api/services/image_service.py
import logging
from dataclasses import dataclass, field
from typing import AsyncIterator, Dict, Optional
from urllib.parse import quote

from social_api.core.exceptions import NotFoundError, ObjectNotFoundError, StorageError, ValidationError
from social_api.repositories.object_store import DownloadStream, ObjectStore, as_file_id

logger = logging.getLogger(__name__)

NOT_AN_IMAGE = "File not found or not an image"


@dataclass
class ImageDownload:
    """Готовый к отдаче файл: заголовки и поток чанков"""
    content_type: str
    headers: Dict[str, str]
    body: AsyncIterator[bytes] = field(repr=False)


class ImageService:
    def __init__(self, object_store: ObjectStore, default_content_type: str = "image/jpeg", cache_max_age: int = 31536000):
        self.object_store = object_store
        self.default_content_type = default_content_type
        self.cache_max_age = cache_max_age

    async def by_name(self, filename: str) -> ImageDownload:
        """Картинка по сгенерированному имени файла"""
        try:
            stream = await self.object_store.open_download_stream_by_name(filename)
        except ObjectNotFoundError:
            raise NotFoundError(NOT_AN_IMAGE)
        return await self._prepare(stream)

    async def by_id(self, file_id: str) -> ImageDownload:
        """Картинка по id объекта"""
        try:
            file_id = as_file_id(file_id)
        except ValueError:
            raise ValidationError("Invalid file ID format")

        try:
            stream = await self.object_store.open_download_stream(file_id)
        except ObjectNotFoundError:
            raise NotFoundError(NOT_AN_IMAGE)
        return await self._prepare(stream)

    async def _prepare(self, stream: DownloadStream) -> ImageDownload:
        record = stream.file
        content_type = record.content_type or self.default_content_type
        if not content_type.startswith("image/"):
            logger.info(f"Refused to serve {record.filename}: content type {content_type}")
            raise NotFoundError(NOT_AN_IMAGE)

        headers = {
            "Content-Length": str(record.length),
            "Cache-Control": f"public, max-age={self.cache_max_age}, immutable",
        }
        if record.original_name:
            headers["Content-Disposition"] = f"inline; filename*=UTF-8''{quote(record.original_name)}"

        chunks = stream.__aiter__()
        # Первый чанк читаем до начала ответа: ошибка здесь еще может стать 500
        try:
            first: Optional[bytes] = await chunks.__anext__()
        except StopAsyncIteration:
            first = None
        except StorageError:
            logger.exception(f"Failed to read {record.filename}")
            raise

        return ImageDownload(
            content_type=content_type,
            headers=headers,
            body=self._relay(record.filename, first, chunks),
        )

    async def _relay(self, filename: str, first: Optional[bytes], chunks: AsyncIterator[bytes]) -> AsyncIterator[bytes]:
        if first is None:
            return
        yield first
        try:
            async for chunk in chunks:
                yield chunk
        except StorageError:
            # Заголовки уже отправлены, остается только оборвать соединение
            logger.exception(f"Stream of {filename} interrupted")
            raise
