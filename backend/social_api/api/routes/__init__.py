from fastapi import APIRouter
from .users import router as users_router
from .posts import router as posts_router
from .workouts import router as workouts_router


api_router = APIRouter()

api_router.include_router(users_router)
api_router.include_router(posts_router)
api_router.include_router(workouts_router)
