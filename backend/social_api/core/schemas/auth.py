# social_api/core/schemas/auth.py
from pydantic import BaseModel, EmailStr, Field, ConfigDict, field_validator
from datetime import datetime
from typing import Optional


class PasswordComplexity:
    """Класс для проверки сложности пароля"""
    MIN_LENGTH = 8
    MAX_LENGTH = 64
    SPECIAL_CHARS = "!@#$%^&*()_+-=[]{}|;:,.<>?/~`'\"\\"

    @classmethod
    def validate(cls, password: str) -> None:
        """Проверка сложности пароля"""
        errors = []

        if len(password) < cls.MIN_LENGTH:
            errors.append(f"Password must be at least {cls.MIN_LENGTH} characters long")
        if len(password) > cls.MAX_LENGTH:
            errors.append(f"Password must be at most {cls.MAX_LENGTH} characters long")
        if not any(c.isupper() for c in password):
            errors.append("Password must contain at least one uppercase letter")
        if not any(c.islower() for c in password):
            errors.append("Password must contain at least one lowercase letter")
        if not any(c.isdigit() for c in password):
            errors.append("Password must contain at least one digit")
        if not any(c in cls.SPECIAL_CHARS for c in password):
            errors.append("Password must contain at least one special character")

        if errors:
            raise ValueError("; ".join(errors))


class UserCreate(BaseModel):
    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., description="User password")

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, v):
        return v.lower()

    @field_validator("password")
    @classmethod
    def validate_password(cls, v):
        """Валидация сложности пароля"""
        PasswordComplexity.validate(v)
        return v


class UserLogin(BaseModel):
    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., description="User password", min_length=1, max_length=64)

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, v):
        return v.lower()


class UserPublic(BaseModel):
    id: int
    email: str

    model_config = ConfigDict(from_attributes=True)


class AuthResponse(BaseModel):
    user: UserPublic
    token: str
    token_type: str = "bearer"
    expires_in: int = Field(..., description="Token expiration time in seconds")


class UserResponse(BaseModel):
    id: int
    email: str
    role: str = "user"
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
