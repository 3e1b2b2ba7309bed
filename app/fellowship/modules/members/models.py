from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.fellowship.models import Base, isoformat


class Member(Base):
    __tablename__ = "members"
    __table_args__ = (
        Index("idx_members_category", "category"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    # One profile per login account; NULL for people without an account.
    user_id: Mapped[int | None] = mapped_column(ForeignKey("users.id"), nullable=True, unique=True)

    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    category: Mapped[str] = mapped_column(String(32), nullable=False)  # children, youth, adult

    # Contact (optional)
    email: Mapped[str | None] = mapped_column(String(320), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(64), nullable=True)
    address: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "userId": self.user_id,
            "fullName": self.full_name,
            "category": self.category,
            "email": self.email,
            "phone": self.phone,
            "address": self.address,
            "createdAt": isoformat(self.created_at),
        }
