# social_api/services/workout_service.py
import logging
from typing import Any, Optional
from social_api.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from social_api.core.schemas.workout import WorkoutCreate, WorkoutList, WorkoutResponse, WorkoutUpdate
from social_api.core.validation import parse_payload
from social_api.models.workout import Workout
from social_api.repositories.workout_repository import WorkoutRepository

logger = logging.getLogger(__name__)


class WorkoutService:
    def __init__(self, workout_repository: WorkoutRepository):
        self.workout_repository = workout_repository

    async def list_workouts(self, user_id: Optional[int] = None) -> WorkoutList:
        workouts = await self.workout_repository.get_all(user_id=user_id)
        return WorkoutList(
            workouts=[WorkoutResponse.model_validate(w) for w in workouts],
            total=len(workouts),
        )

    async def get_workout(self, workout_id: int) -> Workout:
        workout = await self.workout_repository.get_by_id(workout_id)
        if not workout:
            raise NotFoundError("No such workout")
        return workout

    async def create_workout(self, data: WorkoutCreate, user_id: int) -> Workout:
        title = data.title.strip()
        if not title:
            raise ValidationError("Title is required")
        workout = await self.workout_repository.create(
            user_id, {"title": title, "reps": data.reps, "load": data.load}
        )
        logger.info(f"User {user_id} created workout {workout.id}")
        return workout

    async def update_workout(self, workout_id: int, payload: Any, user_id: int) -> Workout:
        workout = await self._get_owned(workout_id, user_id, action="update")
        patch = parse_payload(WorkoutUpdate, payload)
        updates = patch.model_dump(exclude_none=True)
        if "title" in updates:
            updates["title"] = updates["title"].strip()
            if not updates["title"]:
                raise ValidationError("Title is required")
        if not updates:
            return workout
        return await self.workout_repository.update(workout, updates)

    async def delete_workout(self, workout_id: int, user_id: int) -> Workout:
        workout = await self._get_owned(workout_id, user_id, action="delete")
        await self.workout_repository.delete(workout_id)
        return workout

    async def _get_owned(self, workout_id: int, user_id: int, action: str) -> Workout:
        workout = await self.get_workout(workout_id)
        if workout.user_id != user_id:
            raise AuthorizationError(f"You can only {action} your own workouts")
        return workout
