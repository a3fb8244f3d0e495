# social_api/api/routes/posts.py
from typing import Any, List, Optional

from fastapi import APIRouter, Body, Depends, File, Form, UploadFile, status
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession

from social_api.api.deps import PageParams, get_current_user, get_pagination
from social_api.core.config import settings
from social_api.core.database import db_helper
from social_api.core.exceptions import PayloadTooLargeError, ValidationError
from social_api.core.schemas.post import PostDeleteResponse, PostPage, PostResponse
from social_api.core.storage import get_object_store
from social_api.models.user import User
from social_api.repositories.object_store import ObjectStore
from social_api.repositories.post_repository import PostRepository
from social_api.services.image_service import ImageService
from social_api.services.post_service import PostService
from social_api.services.upload_service import FileUpload, UploadPipeline
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/posts", tags=["posts"])


def get_post_service(
    session: AsyncSession = Depends(db_helper.session_getter),
    object_store: ObjectStore = Depends(get_object_store),
) -> PostService:
    return PostService(PostRepository(session), object_store)


def get_image_service(object_store: ObjectStore = Depends(get_object_store)) -> ImageService:
    return ImageService(
        object_store,
        default_content_type=settings.storage.DEFAULT_IMAGE_TYPE,
        cache_max_age=settings.storage.CACHE_MAX_AGE,
    )


async def read_uploads(images: Optional[List[UploadFile]]) -> List[FileUpload]:
    """Читает файлы запроса в память с проверкой лимитов"""
    images = [f for f in images or [] if f.filename]
    max_files = settings.storage.MAX_FILES_PER_POST
    if len(images) > max_files:
        raise ValidationError(f"Too many files. Maximum is {max_files} images per post")

    uploads = []
    total = 0
    for f in images:
        buffer = await f.read()
        total += len(buffer)
        if total > settings.storage.MAX_UPLOAD_BYTES:
            raise PayloadTooLargeError(f"Upload exceeds {settings.storage.MAX_UPLOAD_BYTES} bytes")
        uploads.append(FileUpload(
            buffer=buffer,
            original_name=f.filename,
            content_type=f.content_type or "application/octet-stream",
        ))
    return uploads


@router.get("/all", response_model=PostPage)
async def get_all_posts(
    pagination: PageParams = Depends(get_pagination),
    current_user: User = Depends(get_current_user),
    post_service: PostService = Depends(get_post_service),
):
    """Все посты, новые первыми"""
    return await post_service.list_posts(pagination.page, pagination.limit)


@router.get("", response_model=PostPage)
async def get_my_posts(
    pagination: PageParams = Depends(get_pagination),
    current_user: User = Depends(get_current_user),
    post_service: PostService = Depends(get_post_service),
):
    """Посты текущего пользователя"""
    return await post_service.list_posts_by_user(current_user.id, pagination.page, pagination.limit)


@router.get("/image/{filename}")
async def get_image(filename: str, image_service: ImageService = Depends(get_image_service)):
    """Картинка по имени файла (публично)"""
    download = await image_service.by_name(filename)
    return StreamingResponse(download.body, media_type=download.content_type, headers=download.headers)


@router.get("/image/id/{file_id}")
async def get_image_by_id(file_id: str, image_service: ImageService = Depends(get_image_service)):
    """Картинка по id файла (публично)"""
    download = await image_service.by_id(file_id)
    return StreamingResponse(download.body, media_type=download.content_type, headers=download.headers)


@router.get("/{post_id}", response_model=PostResponse)
async def get_post(
    post_id: int,
    current_user: User = Depends(get_current_user),
    post_service: PostService = Depends(get_post_service),
):
    return await post_service.get_post(post_id)


@router.post("", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
async def create_post(
    title: Optional[str] = Form(None),
    content: Optional[str] = Form(None),
    images: Optional[List[UploadFile]] = File(None),
    current_user: User = Depends(get_current_user),
    post_service: PostService = Depends(get_post_service),
    object_store: ObjectStore = Depends(get_object_store),
):
    """Создать пост, до MAX_FILES_PER_POST картинок в поле images"""
    uploads = await read_uploads(images)

    pipeline = UploadPipeline(object_store)
    uploaded = await pipeline.upload_multiple(uploads, current_user.id)

    try:
        return await post_service.create_post(title, content, current_user.id, uploaded)
    except Exception:
        # пост не создан, загруженные файлы никому не нужны
        await pipeline.discard(uploaded)
        raise


@router.patch("/{post_id}", response_model=PostResponse)
async def update_post(
    post_id: int,
    payload: Any = Body(None),
    current_user: User = Depends(get_current_user),
    post_service: PostService = Depends(get_post_service),
):
    return await post_service.update_post(post_id, payload, current_user.id)


@router.delete("/{post_id}", response_model=PostDeleteResponse)
async def delete_post(
    post_id: int,
    current_user: User = Depends(get_current_user),
    post_service: PostService = Depends(get_post_service),
):
    summary = await post_service.delete_post(post_id, current_user.id)
    return PostDeleteResponse(summary=summary)
