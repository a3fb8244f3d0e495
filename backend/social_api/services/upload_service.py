# social_api/services/upload_service.py
import asyncio
import logging
import os
import secrets
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from social_api.core.exceptions import ObjectNotFoundError
from social_api.core.schemas.storage import UploadedFile
from social_api.repositories.object_store import ObjectStore

logger = logging.getLogger(__name__)


@dataclass
class FileUpload:
    """Файл из multipart-запроса, уже прочитанный в память"""
    buffer: bytes
    original_name: Optional[str]
    content_type: str


def generate_storage_name(original_name: Optional[str]) -> str:
    """16 случайных байт в hex + расширение исходного файла"""
    extension = os.path.splitext(original_name)[1] if original_name else ""
    return secrets.token_hex(16) + extension


class UploadPipeline:
    def __init__(self, object_store: ObjectStore):
        self.object_store = object_store

    async def upload(
            self,
            buffer: bytes,
            original_name: Optional[str],
            mime_type: str,
            uploaded_by: int,
    ) -> UploadedFile:
        """Сохраняет один буфер в хранилище и возвращает ссылку для поста"""
        filename = generate_storage_name(original_name)
        metadata = {
            "original_name": original_name,
            "uploaded_by": uploaded_by,
            "uploaded_at": datetime.now(timezone.utc).isoformat(),
            "content_type": mime_type,
        }

        stream = await self.object_store.open_upload_stream(filename, metadata)
        async with stream:
            await stream.write(buffer)

        return UploadedFile(
            id=stream.id,
            filename=filename,
            content_type=mime_type,
            size=len(buffer),
        )

    async def upload_multiple(self, files: Sequence[FileUpload], uploaded_by: int) -> List[UploadedFile]:
        """
        Загружает все файлы конкурентно. Если хоть один упал, уже сохраненные
        удаляются и пробрасывается первая ошибка.
        """
        if not files:
            return []

        results = await asyncio.gather(
            *(self.upload(f.buffer, f.original_name, f.content_type, uploaded_by) for f in files),
            return_exceptions=True,
        )

        uploaded = [r for r in results if isinstance(r, UploadedFile)]
        errors = [r for r in results if isinstance(r, BaseException)]
        if errors:
            logger.error(f"Batch upload failed ({len(errors)} of {len(files)} files), removing {len(uploaded)} stored files")
            await self.discard(uploaded)
            raise errors[0]

        return uploaded

    async def discard(self, uploaded: Sequence[UploadedFile]) -> None:
        """Компенсирующее удаление загруженных файлов, ошибки только логируются"""
        for item in uploaded:
            try:
                await self.object_store.delete(item.id)
            except ObjectNotFoundError:
                logger.warning(f"Orphan cleanup: file {item.id} already gone")
            except Exception as e:
                logger.error(f"Orphan cleanup: failed to delete file {item.id}: {e}")
