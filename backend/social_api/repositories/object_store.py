# social_api/repositories/object_store.py
"""
Хранилище бинарных объектов поверх БД, по модели GridFS.

Файл = одна запись StoredObject (метаданные) + упорядоченные чанки StoredChunk
фиксированного размера. Запись и все чанки пишутся в одной транзакции, поэтому
объект не виден другим запросам, пока UploadStream не закрыт.
"""
import asyncio
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, AsyncIterator, Dict, Optional, Union

from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from social_api.core.exceptions import ObjectNotFoundError, StorageError
from social_api.models.base import Base
from social_api.models.storage import StoredChunk, StoredObject

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 255 * 1024

FileId = Union[uuid.UUID, str]


def as_file_id(file_id: FileId) -> uuid.UUID:
    """Приводит id к UUID, ValueError если строка не UUID"""
    if isinstance(file_id, uuid.UUID):
        return file_id
    return uuid.UUID(str(file_id))


class UploadStream:
    """Поток записи одного объекта. Создается через ObjectStore.open_upload_stream"""

    def __init__(self, store: "ObjectStore", filename: str, metadata: Dict[str, Any]):
        self._store = store
        self.filename = filename
        self.metadata = metadata
        self.id: uuid.UUID = uuid.uuid4()
        self.length = 0
        self._buffer = bytearray()
        self._next_n = 0
        self._session: Optional[AsyncSession] = None
        self._record: Optional[StoredObject] = None
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def _open(self) -> None:
        self._session = self._store.session_factory()
        self._record = StoredObject(
            id=self.id,
            bucket=self._store.bucket_name,
            filename=self.filename,
            length=0,
            chunk_size=self._store.chunk_size,
            file_metadata=self.metadata,
        )
        self._session.add(self._record)
        await self._flush()

    async def write(self, data: bytes) -> None:
        """Дописывает байты, полные чанки сразу уходят в транзакцию"""
        if self._closed:
            raise StorageError("Upload stream is closed")

        self._buffer.extend(data)
        self.length += len(data)

        chunk_size = self._store.chunk_size
        while len(self._buffer) >= chunk_size:
            await self._write_chunk(bytes(self._buffer[:chunk_size]))
            del self._buffer[:chunk_size]

    async def close(self) -> StoredObject:
        """Финализирует запись: остаток буфера, длина, дата, commit"""
        if self._closed:
            raise StorageError("Upload stream is closed")

        if self._buffer:
            await self._write_chunk(bytes(self._buffer))
            self._buffer.clear()

        self._record.length = self.length
        self._record.upload_date = datetime.now(timezone.utc)

        try:
            await self._session.commit()
        except SQLAlchemyError as e:
            await self._fail(e)

        self._closed = True
        await self._session.close()
        logger.debug(f"Stored {self.filename} ({self.length} bytes, {self._next_n} chunks) as {self.id}")
        return self._record

    async def abort(self) -> None:
        """Отменяет незавершенную загрузку, ничего не сохраняется"""
        if self._closed:
            return
        self._closed = True
        if self._session is not None:
            await self._session.rollback()
            await self._session.close()

    async def _write_chunk(self, data: bytes) -> None:
        self._session.add(StoredChunk(files_id=self.id, n=self._next_n, data=data))
        self._next_n += 1
        await self._flush()

    async def _flush(self) -> None:
        try:
            await self._session.flush()
        except SQLAlchemyError as e:
            await self._fail(e)

    async def _fail(self, exc: Exception) -> None:
        logger.error(f"Upload of {self.filename} failed: {exc}")
        self._closed = True
        await self._session.rollback()
        await self._session.close()
        raise StorageError(f"Failed to store file {self.filename}") from exc

    async def __aenter__(self) -> "UploadStream":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        if exc_type is None:
            await self.close()
        else:
            await self.abort()
        return False


class DownloadStream:
    """Ленивая последовательность чанков одного объекта. Читается один раз"""

    def __init__(self, store: "ObjectStore", record: StoredObject):
        self._store = store
        self.file = record
        self._consumed = False

    @property
    def chunk_count(self) -> int:
        if self.file.length == 0:
            return 0
        return -(-self.file.length // self.file.chunk_size)

    def __aiter__(self) -> AsyncIterator[bytes]:
        if self._consumed:
            raise StorageError("Download stream already consumed")
        self._consumed = True
        return self._iter_chunks()

    async def _iter_chunks(self) -> AsyncIterator[bytes]:
        async with self._store.session_factory() as session:
            for n in range(self.chunk_count):
                try:
                    result = await session.execute(
                        select(StoredChunk.data).where(
                            StoredChunk.files_id == self.file.id,
                            StoredChunk.n == n,
                        )
                    )
                except SQLAlchemyError as e:
                    raise StorageError(f"Failed to read chunk {n} of file {self.file.id}") from e

                data = result.scalar_one_or_none()
                if data is None:
                    raise StorageError(f"Chunk {n} of file {self.file.id} is missing")
                yield data

    async def read(self) -> bytes:
        """Читает объект целиком. Только для маленьких файлов"""
        parts = []
        async for chunk in self:
            parts.append(chunk)
        return b"".join(parts)


class ObjectStore:
    def __init__(
            self,
            engine: AsyncEngine,
            session_factory: async_sessionmaker[AsyncSession],
            bucket_name: str = "uploads",
            chunk_size: int = DEFAULT_CHUNK_SIZE,
    ):
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        self.engine = engine
        self.session_factory = session_factory
        self.bucket_name = bucket_name
        self.chunk_size = chunk_size
        self._initialized = False
        self._init_task: Optional[asyncio.Future] = None

    @property
    def initialized(self) -> bool:
        return self._initialized

    async def initialize(self) -> None:
        """
        Однократная инициализация (таблицы бакета).
        Конкурентные вызовы ждут одну и ту же задачу; после ошибки следующий вызов повторяет попытку.
        """
        if self._initialized:
            return

        if self._init_task is None:
            self._init_task = asyncio.ensure_future(self._create_tables())
        task = self._init_task

        try:
            await asyncio.shield(task)
        except Exception:
            if self._init_task is task:
                self._init_task = None
            raise

    async def _create_tables(self) -> None:
        try:
            async with self.engine.begin() as conn:
                await conn.run_sync(
                    Base.metadata.create_all,
                    tables=[StoredObject.__table__, StoredChunk.__table__],
                )
        except SQLAlchemyError as e:
            logger.error(f"❌ Object store initialization failed: {e}")
            raise StorageError("Object store is not available") from e

        self._initialized = True
        logger.info(f"✅ Object store initialized (bucket '{self.bucket_name}', chunk size {self.chunk_size})")

    async def open_upload_stream(self, filename: str, metadata: Optional[Dict[str, Any]] = None) -> UploadStream:
        """Открывает поток записи. Объект появится после stream.close()"""
        await self.initialize()
        stream = UploadStream(self, filename, dict(metadata or {}))
        await stream._open()
        return stream

    async def find_by_name(self, filename: str) -> Optional[StoredObject]:
        await self.initialize()
        stmt = select(StoredObject).where(
            StoredObject.bucket == self.bucket_name,
            StoredObject.filename == filename,
            StoredObject.upload_date.is_not(None),
        )
        return await self._fetch_one(stmt)

    async def find_by_id(self, file_id: FileId) -> Optional[StoredObject]:
        await self.initialize()
        try:
            file_id = as_file_id(file_id)
        except ValueError:
            return None
        stmt = select(StoredObject).where(
            StoredObject.bucket == self.bucket_name,
            StoredObject.id == file_id,
            StoredObject.upload_date.is_not(None),
        )
        return await self._fetch_one(stmt)

    async def open_download_stream_by_name(self, filename: str) -> DownloadStream:
        record = await self.find_by_name(filename)
        if record is None:
            raise ObjectNotFoundError(f"File {filename} not found")
        return DownloadStream(self, record)

    async def open_download_stream(self, file_id: FileId) -> DownloadStream:
        record = await self.find_by_id(file_id)
        if record is None:
            raise ObjectNotFoundError(f"File {file_id} not found")
        return DownloadStream(self, record)

    async def delete(self, file_id: FileId) -> None:
        """Удаляет метаданные и все чанки. ObjectNotFoundError, если объекта нет"""
        await self.initialize()
        try:
            file_id = as_file_id(file_id)
        except ValueError:
            raise ObjectNotFoundError(f"File {file_id} not found")

        async with self.session_factory() as session:
            try:
                result = await session.execute(
                    delete(StoredObject).where(
                        StoredObject.bucket == self.bucket_name,
                        StoredObject.id == file_id,
                    )
                    .execution_options(synchronize_session=False)
                )
                if result.rowcount == 0:
                    await session.rollback()
                    raise ObjectNotFoundError(f"File {file_id} not found")
                await session.execute(
                    delete(StoredChunk)
                    .where(StoredChunk.files_id == file_id)
                    .execution_options(synchronize_session=False)
                )
                await session.commit()
            except SQLAlchemyError as e:
                await session.rollback()
                raise StorageError(f"Failed to delete file {file_id}") from e

    async def count(self) -> int:
        """Количество завершенных объектов в бакете"""
        await self.initialize()
        stmt = select(func.count(StoredObject.id)).where(
            StoredObject.bucket == self.bucket_name,
            StoredObject.upload_date.is_not(None),
        )
        async with self.session_factory() as session:
            result = await session.execute(stmt)
            return result.scalar() or 0

    async def _fetch_one(self, stmt) -> Optional[StoredObject]:
        async with self.session_factory() as session:
            try:
                result = await session.execute(stmt)
            except SQLAlchemyError as e:
                raise StorageError("Failed to query object store") from e
            return result.scalar_one_or_none()
