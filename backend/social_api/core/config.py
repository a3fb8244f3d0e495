# social_api/core/config.py
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import BaseModel, Field, SecretStr
from typing import List
from functools import lru_cache


class DataBaseConfig(BaseModel):
    DB_HOST: str = Field(..., description="Database host")
    DB_PORT: int = Field(5432, description="Database port")
    DB_NAME: str = Field(..., description="Database name")
    DB_USER: str = Field(..., description="Database user")
    DB_PASSWORD: SecretStr = Field(..., description="Database password")  # SecretStr скрывает значение в логах
    DB_ECHO: bool = Field(False, description="Enable SQL echo")
    DB_POOL_SIZE: int = Field(5, description="Database pool size")
    DB_MAX_OVERFLOW: int = Field(10, description="Database max overflow")

    @property
    def DATABASE_URL(self) -> str:
        return f"postgresql+asyncpg://{self.DB_USER}:{self.DB_PASSWORD.get_secret_value()}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"

    naming_convention: dict[str, str] = {
        "ix": "ix_%(column_0_label)s",
        "uq": "uq_%(table_name)s_%(column_0_N_name)s",
        "ck": "ck_%(table_name)s_%(constraint_name)s",
        "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
        "pk": "pk_%(table_name)s",
    }


class StorageConfig(BaseModel):
    """Настройки хранилища бинарных объектов (чанки в БД)"""
    BUCKET_NAME: str = Field("uploads", description="Logical bucket, stored in the bucket column of storage_files")
    CHUNK_SIZE_BYTES: int = Field(255 * 1024, description="Size of a stored chunk", gt=0)
    MAX_FILES_PER_POST: int = Field(5, description="Max images attached to one post", ge=0)
    MAX_UPLOAD_BYTES: int = Field(10 * 1024 * 1024, description="Request body limit for uploads")
    DEFAULT_IMAGE_TYPE: str = Field("image/jpeg", description="Content type when metadata has none")
    CACHE_MAX_AGE: int = Field(31536000, description="Cache-Control max-age for images, seconds")


class SecurityConfig(BaseModel):
    JWT_SECRET_KEY: SecretStr = Field(..., description="JWT secret key")
    JWT_ALGORITHM: str = Field("HS256", description="JWT algorithm")
    JWT_ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(3 * 24 * 60, description="Access token expiration")


class RateLimitConfig(BaseModel):
    ENABLED: bool = Field(True, description="Enable route rate limits")
    LOGIN_MAX_ATTEMPTS: int = Field(5, description="Login attempts per window")
    LOGIN_WINDOW_SECONDS: int = Field(15 * 60, description="Sliding window for login attempts")
    SIGNUP_LIMIT: str = Field("5/minute", description="slowapi limit for signup")
    LOGIN_LIMIT: str = Field("10/minute", description="slowapi limit for login")


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_nested_delimiter="__",  # Для вложенных объектов
        extra="ignore",
    )

    app_name: str = Field("Social Backend", description="Application name")
    debug: bool = Field(False, description="Debug mode")
    cors_origins: List[str] = Field(
        default_factory=lambda: [
            "http://localhost:5173",
            "http://localhost:3000",
        ],
        description="CORS origins"
    )

    db: DataBaseConfig
    security: SecurityConfig
    storage: StorageConfig = Field(default_factory=StorageConfig)
    rate_limit: RateLimitConfig = Field(default_factory=RateLimitConfig)


@lru_cache()
def get_settings() -> Settings:
    """Кэшированный экземпляр настроек"""
    return Settings()

settings = get_settings()
