# social_api/core/security.py
import bcrypt
from jose import jwt, JWTError, ExpiredSignatureError
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any
from social_api.core.config import settings


def get_password_hash(password: str) -> str:
    """Хеширование пароля с помощью bcrypt"""
    salt = bcrypt.gensalt()
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')

def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Проверка пароля"""
    return bcrypt.checkpw(
        plain_password.encode('utf-8'),
        hashed_password.encode('utf-8')
    )

def access_token_lifetime() -> timedelta:
    return timedelta(minutes=settings.security.JWT_ACCESS_TOKEN_EXPIRE_MINUTES)

def create_access_token(user_id: int, expires_delta: Optional[timedelta] = None) -> str:
    """Создание JWT access token"""
    expire = datetime.now(timezone.utc) + (expires_delta or access_token_lifetime())
    to_encode = {"sub": str(user_id), "exp": expire, "type": "access"}

    return jwt.encode(
        to_encode,
        settings.security.JWT_SECRET_KEY.get_secret_value(),
        algorithm=settings.security.JWT_ALGORITHM
    )

def decode_token(token: str) -> Dict[str, Any]:
    """Декодирование и валидация JWT токена"""
    try:
        return jwt.decode(
            token,
            settings.security.JWT_SECRET_KEY.get_secret_value(),
            algorithms=[settings.security.JWT_ALGORITHM]
        )
    except ExpiredSignatureError:
        raise ValueError("Token has expired")
    except JWTError:
        raise ValueError("Invalid token")
