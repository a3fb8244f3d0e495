# social_api/services/post_service.py
import logging
import math
from typing import Any, List, Optional, Sequence

from social_api.core.exceptions import (
    AppException,
    AuthorizationError,
    NotFoundError,
    ObjectNotFoundError,
    ValidationError,
)
from social_api.core.schemas.post import (
    CascadeDeleteSummary,
    ImageDeleteResult,
    ImageDeleteStatus,
    Pagination,
    PostImageRef,
    PostPage,
    PostResponse,
    PostUpdate,
)
from social_api.core.schemas.storage import UploadedFile
from social_api.core.validation import parse_payload
from social_api.models.post import Post
from social_api.repositories.object_store import ObjectStore
from social_api.repositories.post_repository import PostRepository

logger = logging.getLogger(__name__)

TITLE_MIN_LENGTH = 3
CONTENT_MIN_LENGTH = 10


def validate_title(title: Optional[str]) -> str:
    if title is None or len(title.strip()) < TITLE_MIN_LENGTH:
        raise ValidationError(f"Title must be at least {TITLE_MIN_LENGTH} characters long")
    return title.strip()


def validate_content(content: Optional[str]) -> str:
    if content is None or len(content.strip()) < CONTENT_MIN_LENGTH:
        raise ValidationError(f"Content must be at least {CONTENT_MIN_LENGTH} characters long")
    return content.strip()


class PostService:
    def __init__(self, post_repository: PostRepository, object_store: ObjectStore):
        self.post_repository = post_repository
        self.object_store = object_store

    async def list_posts(self, page: int, limit: int) -> PostPage:
        """Все посты, новые первыми. page/limit уже проверены в зависимости"""
        return await self._page(page, limit)

    async def list_posts_by_user(self, user_id: int, page: int, limit: int) -> PostPage:
        """Посты одного пользователя"""
        return await self._page(page, limit, user_id=user_id)

    async def get_post(self, post_id: int) -> Post:
        post = await self.post_repository.get_by_id(post_id)
        if not post:
            raise NotFoundError("Post not found")
        return post

    async def create_post(
            self,
            title: Optional[str],
            content: Optional[str],
            user_id: int,
            images: Sequence[UploadedFile] = (),
    ) -> Post:
        """Создать пост со ссылками на уже загруженные файлы"""
        if not title or not content:
            raise ValidationError("Title and content are required")
        title = validate_title(title)
        content = validate_content(content)

        image_refs = [
            PostImageRef(
                file_id=f.id,
                filename=f.filename,
                content_type=f.content_type,
                size=f.size,
            ).model_dump(mode="json")
            for f in images
        ]

        post = await self.post_repository.create(title, content, user_id, image_refs)
        logger.info(f"User {user_id} created post {post.id} with {len(image_refs)} images")
        return post

    async def update_post(self, post_id: int, payload: Any, user_id: int) -> Post:
        """
        Изменить заголовок и/или текст своего поста.
        Тело проверяется после проверки владельца: чужой пост дает 403 при любом теле.
        """
        post = await self._get_owned(post_id, user_id, action="update")
        patch = parse_payload(PostUpdate, payload)

        updates = {}
        if patch.title is not None:
            updates["title"] = validate_title(patch.title)
        if patch.content is not None:
            updates["content"] = validate_content(patch.content)

        if not updates:
            return post
        return await self.post_repository.update(post, updates)

    async def delete_post(self, post_id: int, user_id: int) -> CascadeDeleteSummary:
        """
        Удаляет картинки поста (каждую независимо, ошибки не прерывают удаление),
        затем сам пост.
        """
        post = await self._get_owned(post_id, user_id, action="delete")

        results: List[ImageDeleteResult] = []
        for image in post.images or []:
            results.append(await self._delete_image(image))

        await self.post_repository.delete(post_id)

        summary = CascadeDeleteSummary.from_results(post_id, results)
        if summary.failed or summary.not_found:
            logger.warning(
                f"Post {post_id} deleted with {summary.failed} failed and "
                f"{summary.not_found} missing image deletions"
            )
        return summary

    async def _delete_image(self, image: dict) -> ImageDeleteResult:
        file_id = str(image.get("file_id"))
        filename = image.get("filename")
        try:
            await self.object_store.delete(file_id)
        except ObjectNotFoundError:
            logger.warning(f"Image {filename} ({file_id}) already deleted")
            return ImageDeleteResult(file_id=file_id, filename=filename, status=ImageDeleteStatus.NOT_FOUND)
        except Exception as e:
            logger.error(f"Error deleting image {filename} ({file_id}): {e}")
            return ImageDeleteResult(
                file_id=file_id,
                filename=filename,
                status=ImageDeleteStatus.FAILED,
                error=e.detail if isinstance(e, AppException) else "Failed to delete image",
            )

        logger.info(f"Deleted image file: {filename}")
        return ImageDeleteResult(file_id=file_id, filename=filename, status=ImageDeleteStatus.DELETED)

    async def _get_owned(self, post_id: int, user_id: int, action: str) -> Post:
        post = await self.get_post(post_id)
        if post.user_id != user_id:
            raise AuthorizationError(f"You can only {action} your own posts")
        return post

    async def _page(self, page: int, limit: int, user_id: Optional[int] = None) -> PostPage:
        posts, total = await self.post_repository.get_page((page - 1) * limit, limit, user_id=user_id)
        return PostPage(
            posts=[PostResponse.model_validate(p) for p in posts],
            pagination=Pagination(
                page=page,
                limit=limit,
                total=total,
                pages=math.ceil(total / limit),
            ),
        )
