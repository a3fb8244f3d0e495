# social_api/core/storage.py
from social_api.core.config import settings
from social_api.core.database import db_helper
from social_api.repositories.object_store import ObjectStore

# Один экземпляр на процесс; таблицы создаются при первом обращении или в lifespan
object_store = ObjectStore(
    engine=db_helper.engine,
    session_factory=db_helper.session_factory,
    bucket_name=settings.storage.BUCKET_NAME,
    chunk_size=settings.storage.CHUNK_SIZE_BYTES,
)


def get_object_store() -> ObjectStore:
    """Зависимость FastAPI: хранилище файлов"""
    return object_store
