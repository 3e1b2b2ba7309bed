from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.fellowship.models import Base, User, isoformat


class Announcement(Base):
    __tablename__ = "announcements"
    __table_args__ = (
        Index("idx_announcements_created_at", "created_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    author_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)

    author: Mapped[User] = relationship(User, lazy="joined")
    comments: Mapped[list["Comment"]] = relationship(
        "Comment",
        back_populates="announcement",
        lazy="select",
    )

    def to_dict(self, *, with_author: bool = False) -> dict:
        d = {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "authorId": self.author_id,
            "createdAt": isoformat(self.created_at),
        }
        if with_author:
            d["author"] = self.author.to_dict() if self.author else None
        return d


class Comment(Base):
    __tablename__ = "comments"
    __table_args__ = (
        Index("idx_comments_announcement", "announcement_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    announcement_id: Mapped[int] = mapped_column(ForeignKey("announcements.id"), nullable=False)
    # Reply target; stored as given, threads are assembled by the client.
    parent_id: Mapped[int | None] = mapped_column(ForeignKey("comments.id"), nullable=True)
    author_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)

    announcement: Mapped[Announcement] = relationship(Announcement, back_populates="comments")
    author: Mapped[User] = relationship(User, lazy="joined")

    def to_dict(self, *, with_author: bool = False) -> dict:
        d = {
            "id": self.id,
            "announcementId": self.announcement_id,
            "parentId": self.parent_id,
            "authorId": self.author_id,
            "content": self.content,
            "createdAt": isoformat(self.created_at),
        }
        if with_author:
            d["author"] = self.author.to_dict() if self.author else None
        return d
