# social_api/core/schemas/post.py
import enum
import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class PostImageRef(BaseModel):
    file_id: uuid.UUID
    filename: str
    content_type: str
    size: int

    model_config = ConfigDict(from_attributes=True)


class PostCreate(BaseModel):
    title: str
    content: str


class PostUpdate(BaseModel):
    """Разрешенные для изменения поля поста. Картинки после создания не меняются"""
    title: Optional[str] = None
    content: Optional[str] = None

    model_config = ConfigDict(extra="forbid")


class PostResponse(BaseModel):
    id: int
    title: str
    content: str
    user_id: int
    images: List[PostImageRef] = []
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


class PostPage(BaseModel):
    posts: List[PostResponse]
    pagination: Pagination


class ImageDeleteStatus(str, enum.Enum):
    DELETED = "deleted"
    NOT_FOUND = "not_found"
    FAILED = "failed"


class ImageDeleteResult(BaseModel):
    file_id: str
    filename: Optional[str] = None
    status: ImageDeleteStatus
    error: Optional[str] = None


class CascadeDeleteSummary(BaseModel):
    """Итог удаления поста: результат по каждой картинке"""
    post_id: int
    images: List[ImageDeleteResult] = Field(default_factory=list)
    deleted: int = 0
    not_found: int = 0
    failed: int = 0

    @classmethod
    def from_results(cls, post_id: int, results: List[ImageDeleteResult]) -> "CascadeDeleteSummary":
        return cls(
            post_id=post_id,
            images=results,
            deleted=sum(r.status == ImageDeleteStatus.DELETED for r in results),
            not_found=sum(r.status == ImageDeleteStatus.NOT_FOUND for r in results),
            failed=sum(r.status == ImageDeleteStatus.FAILED for r in results),
        )


class PostDeleteResponse(BaseModel):
    message: str = "Post deleted successfully"
    summary: CascadeDeleteSummary
