# social_api/core/schemas/storage.py
import uuid
from pydantic import BaseModel, ConfigDict


class UploadedFile(BaseModel):
    """Результат загрузки одного файла, из него строится PostImageRef"""
    id: uuid.UUID
    filename: str
    content_type: str
    size: int

    model_config = ConfigDict(frozen=True)
