# social_api/api/routes/users.py
from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession
from social_api.api.deps import client_ip, get_current_user, limiter
from social_api.core.config import settings
from social_api.core.database import db_helper
from social_api.core.exceptions import ValidationError
from social_api.core.schemas.auth import AuthResponse, UserCreate, UserLogin, UserResponse
from social_api.models.user import User
from social_api.repositories.user_repository import UserRepository
from social_api.services.auth_service import AuthService
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/user", tags=["users"])


def reject_query_credentials(request: Request) -> None:
    """Логин и пароль принимаются только в теле запроса"""
    if "email" in request.query_params or "password" in request.query_params:
        raise ValidationError("Credentials must be sent in request body, not URL")


@router.post("/signup", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.rate_limit.SIGNUP_LIMIT)
async def signup(
    request: Request,
    user_create: UserCreate,
    session: AsyncSession = Depends(db_helper.session_getter)
):
    """Регистрация нового пользователя"""
    reject_query_credentials(request)
    logger.info(f"Registration attempt from IP: {client_ip(request)}")

    auth_service = AuthService(UserRepository(session))
    _, response = await auth_service.signup(user_create)
    return response


@router.post("/login", response_model=AuthResponse)
@limiter.limit(settings.rate_limit.LOGIN_LIMIT)
async def login(
    request: Request,
    credentials: UserLogin,
    session: AsyncSession = Depends(db_helper.session_getter)
):
    """Логин пользователя и получение токена"""
    reject_query_credentials(request)
    ip = client_ip(request)
    logger.info(f"Login attempt from IP: {ip} for email: {credentials.email}")

    auth_service = AuthService(UserRepository(session))
    user, response = await auth_service.login(credentials.email, credentials.password, ip)

    logger.info(f"Successful login for user ID: {user.id}")
    return response


@router.get("/profile", response_model=UserResponse)
async def profile(current_user: User = Depends(get_current_user)):
    """Профиль текущего пользователя"""
    return current_user
