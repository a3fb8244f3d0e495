# social_api/api/deps.py
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Query, Request
from fastapi.security import OAuth2PasswordBearer
from slowapi import Limiter
from slowapi.util import get_remote_address
from sqlalchemy.ext.asyncio import AsyncSession

from social_api.core.config import settings
from social_api.core.database import db_helper
from social_api.core.exceptions import AuthenticationError, ValidationError
from social_api.models.user import User
from social_api.repositories.user_repository import UserRepository
from social_api.services.auth_service import AuthService
import logging

logger = logging.getLogger(__name__)

# OAuth2 схема для Bearer токенов; без токена ошибку бросаем сами, чтобы был единый формат
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="api/user/login", auto_error=False)

# Rate limiter по IP (можно использовать Redis в продакшене)
limiter = Limiter(key_func=get_remote_address, enabled=settings.rate_limit.ENABLED)


async def get_current_user(
    token: Optional[str] = Depends(oauth2_scheme),
    session: AsyncSession = Depends(db_helper.session_getter)
) -> User:
    """Зависимость для получения текущего пользователя из токена"""
    if not token:
        raise AuthenticationError("No token provided. Please include Bearer token in Authorization header")

    auth_service = AuthService(UserRepository(session))
    try:
        return await auth_service.get_current_user(token)
    except AuthenticationError as e:
        logger.warning(f"Authentication failed: {e.detail}")
        raise


@dataclass(frozen=True)
class PageParams:
    page: int
    limit: int


def get_pagination(
    page: int = Query(1, description="Page number, from 1"),
    limit: int = Query(10, description="Page size, 1..100"),
) -> PageParams:
    """Проверка параметров пагинации"""
    if page < 1:
        raise ValidationError("Page must be greater than 0")
    if limit < 1 or limit > 100:
        raise ValidationError("Limit must be between 1 and 100")
    return PageParams(page=page, limit=limit)


def client_ip(request: Request) -> str:
    return request.client.host if request.client else "unknown"
