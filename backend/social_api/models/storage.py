# social_api/models/storage.py
import uuid
from sqlalchemy import Column, Integer, String, BigInteger, DateTime, ForeignKey, LargeBinary, UniqueConstraint, Uuid
from .base import Base
from .post import JSONDocument

class StoredObject(Base):
    """Метаданные файла. Байты лежат в StoredChunk, по chunk_size байт на запись"""
    __tablename__ = "storage_files"
    __table_args__ = (UniqueConstraint("bucket", "filename"),)

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    bucket = Column(String(64), nullable=False, index=True)
    filename = Column(String, nullable=False)  # сгенерированное имя, публичный ключ для скачивания
    length = Column(BigInteger, nullable=False, default=0)
    chunk_size = Column(Integer, nullable=False)
    upload_date = Column(DateTime(timezone=True), nullable=True)  # None пока загрузка не завершена

    # original_name, uploaded_by, uploaded_at, content_type
    file_metadata = Column("metadata", JSONDocument, nullable=False, default=dict)

    @property
    def content_type(self):
        return (self.file_metadata or {}).get("content_type")

    @property
    def original_name(self):
        return (self.file_metadata or {}).get("original_name")

    def __repr__(self):
        return f"<StoredObject(id={self.id}, filename={self.filename}, length={self.length})>"

class StoredChunk(Base):
    __tablename__ = "storage_chunks"
    __table_args__ = (UniqueConstraint("files_id", "n"),)

    id = Column(Integer, primary_key=True)
    files_id = Column(Uuid, ForeignKey("storage_files.id", ondelete="CASCADE"), index=True, nullable=False)
    n = Column(Integer, nullable=False)  # порядковый номер чанка, с 0
    data = Column(LargeBinary, nullable=False)
