from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.fellowship.constants import GroupMemberStatus
from app.fellowship.models import Base, isoformat
from app.fellowship.modules.members.models import Member


class Group(Base):
    __tablename__ = "groups"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    leader_id: Mapped[int | None] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    # Denormalized: bumped once per join request, pending or not.
    member_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)

    memberships: Mapped[list["GroupMember"]] = relationship(
        "GroupMember",
        back_populates="group",
        lazy="select",
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "leaderId": self.leader_id,
            "memberCount": self.member_count,
            "createdAt": isoformat(self.created_at),
        }


class GroupMember(Base):
    __tablename__ = "group_members"
    __table_args__ = (
        UniqueConstraint("group_id", "member_id", name="uq_group_members_group_member"),
        Index("idx_group_members_group", "group_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    group_id: Mapped[int] = mapped_column(ForeignKey("groups.id"), nullable=False)
    member_id: Mapped[int] = mapped_column(ForeignKey("members.id"), nullable=False)
    status: Mapped[str] = mapped_column(String(32), nullable=False, default=GroupMemberStatus.PENDING.value)  # pending, approved
    joined_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)

    group: Mapped[Group] = relationship(Group, back_populates="memberships")
    member: Mapped[Member] = relationship(Member, lazy="joined")

    def to_dict(self, *, with_member: bool = False) -> dict:
        d = {
            "id": self.id,
            "groupId": self.group_id,
            "memberId": self.member_id,
            "status": self.status,
            "joinedAt": isoformat(self.joined_at),
        }
        if with_member:
            d["member"] = self.member.to_dict() if self.member else None
        return d
