# social_api/repositories/user_repository.py
from typing import Optional
from datetime import datetime, timezone
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from social_api.models.user import User, UserRole

class UserRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_email(self, email: str) -> Optional[User]:
        """Получить пользователя по email"""
        stmt = select(User).where(func.lower(User.email) == email.lower())
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_id(self, user_id: int) -> Optional[User]:
        """Получить пользователя по ID"""
        stmt = select(User).where(User.id == user_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def create(self, email: str, password_hash: str, role: UserRole = UserRole.USER) -> User:
        """Создать нового пользователя"""
        now = datetime.now(timezone.utc)
        db_user = User(
            email=email.lower(),
            password_hash=password_hash,
            role=role.value,
            created_at=now,
            updated_at=now,
        )

        self.session.add(db_user)
        await self.session.commit()
        await self.session.refresh(db_user)
        return db_user
