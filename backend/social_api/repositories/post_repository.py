# social_api/repositories/post_repository.py
from typing import Any, Dict, List, Optional, Sequence, Tuple
from datetime import datetime, timezone
from sqlalchemy import select, func, delete
from sqlalchemy.ext.asyncio import AsyncSession
from social_api.models.post import Post


class PostRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, title: str, content: str, user_id: int, images: List[Dict[str, Any]]) -> Post:
        """Создать пост"""
        now = datetime.now(timezone.utc)
        post = Post(
            title=title,
            content=content,
            user_id=user_id,
            images=images,
            created_at=now,
            updated_at=now,
        )
        self.session.add(post)
        await self.session.commit()
        await self.session.refresh(post)
        return post

    async def get_by_id(self, post_id: int) -> Optional[Post]:
        """Получить пост по ID"""
        stmt = select(Post).where(Post.id == post_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_page(self, offset: int, limit: int, user_id: Optional[int] = None) -> Tuple[Sequence[Post], int]:
        """Страница постов, новые первыми, и общее количество"""
        stmt = select(Post)
        count_stmt = select(func.count(Post.id))
        if user_id is not None:
            stmt = stmt.where(Post.user_id == user_id)
            count_stmt = count_stmt.where(Post.user_id == user_id)

        stmt = stmt.order_by(Post.created_at.desc(), Post.id.desc()).offset(offset).limit(limit)

        posts = (await self.session.execute(stmt)).scalars().all()
        total = (await self.session.execute(count_stmt)).scalar() or 0
        return posts, total

    async def update(self, post: Post, values: Dict[str, Any]) -> Post:
        """Обновить поля поста"""
        for field, value in values.items():
            setattr(post, field, value)
        post.updated_at = datetime.now(timezone.utc)
        await self.session.commit()
        await self.session.refresh(post)
        return post

    async def delete(self, post_id: int) -> None:
        """Удалить пост"""
        await self.session.execute(delete(Post).where(Post.id == post_id))
        await self.session.commit()
