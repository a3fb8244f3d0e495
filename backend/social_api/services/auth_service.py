# social_api/services/auth_service.py
from typing import Optional, Tuple
import logging
from social_api.core.security import (
    get_password_hash,
    verify_password,
    create_access_token,
    access_token_lifetime,
    decode_token
)
from social_api.repositories.user_repository import UserRepository
from social_api.core.schemas.auth import AuthResponse, UserCreate, UserPublic
from social_api.core.exceptions import AuthenticationError, ValidationError
from social_api.services.rate_limiter import RateLimiter, login_rate_limiter
from social_api.models.user import User

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self, user_repository: UserRepository, rate_limiter: Optional[RateLimiter] = None):
        self.user_repository = user_repository
        self.rate_limiter = rate_limiter or login_rate_limiter

    async def signup(self, user_create: UserCreate) -> Tuple[User, AuthResponse]:
        """Регистрация нового пользователя"""
        existing_user = await self.user_repository.get_by_email(user_create.email)
        if existing_user:
            raise ValidationError("Email already in use")

        password_hash = get_password_hash(user_create.password)
        user = await self.user_repository.create(user_create.email, password_hash)
        logger.info(f"Registered user {user.id}")

        return user, self._auth_response(user)

    async def login(self, email: str, password: str, client_ip: str) -> Tuple[User, AuthResponse]:
        """Аутентификация пользователя с защитой от брутфорса"""
        email = email.lower()

        # Проверка rate limit по email и IP
        await self.rate_limiter.check_rate_limit(f"login_email_{email}")
        await self.rate_limiter.check_rate_limit(f"login_ip_{client_ip}")

        user = await self.user_repository.get_by_email(email)
        if not user or not verify_password(password, user.password_hash):
            raise AuthenticationError("Incorrect email or password")

        # Очищаем попытки после успешной аутентификации
        await self.rate_limiter.clear_attempts(f"login_email_{email}")
        await self.rate_limiter.clear_attempts(f"login_ip_{client_ip}")

        return user, self._auth_response(user)

    async def get_current_user(self, token: str) -> User:
        """Получение текущего пользователя из токена"""
        try:
            payload = decode_token(token)
        except ValueError as e:
            raise AuthenticationError(str(e))

        if payload.get("type") != "access":
            raise AuthenticationError("Invalid token type for this operation")

        user_id = payload.get("sub")
        if not user_id or not str(user_id).isdigit():
            raise AuthenticationError("Invalid token payload")

        user = await self.user_repository.get_by_id(int(user_id))
        if not user:
            raise AuthenticationError("User not found")

        return user

    def _auth_response(self, user: User) -> AuthResponse:
        return AuthResponse(
            user=UserPublic.model_validate(user),
            token=create_access_token(user.id),
            expires_in=int(access_token_lifetime().total_seconds()),
        )
