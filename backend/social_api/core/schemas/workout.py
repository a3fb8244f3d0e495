# social_api/core/schemas/workout.py
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class WorkoutCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    reps: int = Field(..., ge=0)
    load: float = Field(..., ge=0)


class WorkoutUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    reps: Optional[int] = Field(None, ge=0)
    load: Optional[float] = Field(None, ge=0)

    model_config = ConfigDict(extra="forbid")


class WorkoutResponse(BaseModel):
    id: int
    title: str
    reps: int
    load: float
    user_id: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class WorkoutList(BaseModel):
    workouts: List[WorkoutResponse]
    total: int
