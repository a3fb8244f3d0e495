# social_api/api/routes/workouts.py
from typing import Any
from fastapi import APIRouter, Body, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from social_api.api.deps import get_current_user
from social_api.core.database import db_helper
from social_api.core.schemas.workout import WorkoutCreate, WorkoutList, WorkoutResponse
from social_api.models.user import User
from social_api.repositories.workout_repository import WorkoutRepository
from social_api.services.workout_service import WorkoutService

router = APIRouter(prefix="/workouts", tags=["workouts"])


def get_workout_service(session: AsyncSession = Depends(db_helper.session_getter)) -> WorkoutService:
    return WorkoutService(WorkoutRepository(session))


@router.get("/all", response_model=WorkoutList)
async def get_all_workouts(
    current_user: User = Depends(get_current_user),
    workout_service: WorkoutService = Depends(get_workout_service),
):
    return await workout_service.list_workouts()


@router.get("", response_model=WorkoutList)
async def get_my_workouts(
    current_user: User = Depends(get_current_user),
    workout_service: WorkoutService = Depends(get_workout_service),
):
    return await workout_service.list_workouts(user_id=current_user.id)


@router.get("/{workout_id}", response_model=WorkoutResponse)
async def get_workout(
    workout_id: int,
    current_user: User = Depends(get_current_user),
    workout_service: WorkoutService = Depends(get_workout_service),
):
    return await workout_service.get_workout(workout_id)


@router.post("", response_model=WorkoutResponse, status_code=status.HTTP_201_CREATED)
async def create_workout(
    data: WorkoutCreate,
    current_user: User = Depends(get_current_user),
    workout_service: WorkoutService = Depends(get_workout_service),
):
    return await workout_service.create_workout(data, current_user.id)


@router.patch("/{workout_id}", response_model=WorkoutResponse)
async def update_workout(
    workout_id: int,
    payload: Any = Body(None),
    current_user: User = Depends(get_current_user),
    workout_service: WorkoutService = Depends(get_workout_service),
):
    return await workout_service.update_workout(workout_id, payload, current_user.id)


@router.delete("/{workout_id}", response_model=WorkoutResponse)
async def delete_workout(
    workout_id: int,
    current_user: User = Depends(get_current_user),
    workout_service: WorkoutService = Depends(get_workout_service),
):
    return await workout_service.delete_workout(workout_id, current_user.id)
