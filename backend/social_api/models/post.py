# social_api/models/post.py
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, JSON
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship
from .base import Base

# JSONB на Postgres, обычный JSON на остальных диалектах (SQLite в тестах)
JSONDocument = JSON().with_variant(JSONB(), "postgresql")

class Post(Base):
    __tablename__ = "posts"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    content = Column(Text, nullable=False)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False)

    # [{file_id, filename, content_type, size}], не больше MAX_FILES_PER_POST
    images = Column(JSONDocument, nullable=False, default=list)

    created_at = Column(DateTime(timezone=True), nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False)

    author = relationship("User", back_populates="posts")

    def __str__(self):
        return self.title
