# social_api/repositories/workout_repository.py
from typing import Any, Dict, Optional, Sequence
from datetime import datetime, timezone
from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession
from social_api.models.workout import Workout


class WorkoutRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, user_id: int, values: Dict[str, Any]) -> Workout:
        now = datetime.now(timezone.utc)
        workout = Workout(user_id=user_id, created_at=now, updated_at=now, **values)
        self.session.add(workout)
        await self.session.commit()
        await self.session.refresh(workout)
        return workout

    async def get_by_id(self, workout_id: int) -> Optional[Workout]:
        stmt = select(Workout).where(Workout.id == workout_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_all(self, user_id: Optional[int] = None) -> Sequence[Workout]:
        """Тренировки, новые первыми"""
        stmt = select(Workout).order_by(Workout.created_at.desc(), Workout.id.desc())
        if user_id is not None:
            stmt = stmt.where(Workout.user_id == user_id)
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def update(self, workout: Workout, values: Dict[str, Any]) -> Workout:
        for field, value in values.items():
            setattr(workout, field, value)
        workout.updated_at = datetime.now(timezone.utc)
        await self.session.commit()
        await self.session.refresh(workout)
        return workout

    async def delete(self, workout_id: int) -> None:
        await self.session.execute(delete(Workout).where(Workout.id == workout_id))
        await self.session.commit()
