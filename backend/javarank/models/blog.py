"""Blog post model. Only rows with published = true are publicly visible."""

import datetime

from sqlalchemy import Boolean, DateTime, Index, Integer, String, Text, false
from sqlalchemy.sql import func
from sqlalchemy.orm import Mapped, mapped_column

from javarank.core.database import Base


class Blog(Base):
    """An article; title/content/author are stored HTML-escaped."""

    __tablename__ = "blogs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    author: Mapped[str] = mapped_column(String(100), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), nullable=False)
    published: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=false(),
    )
    created_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    __table_args__ = (
        Index("ix_blogs_slug", "slug"),
        Index("ix_blogs_published_created_at", "published", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Blog id={self.id} slug={self.slug!r} published={self.published}>"
