from __future__ import annotations

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shelfy.db.base import Base
from shelfy.domain.enums import JoinRequestStatus

if TYPE_CHECKING:
    from shelfy.db.models.group import Group
    from shelfy.db.models.user import User


class JoinRequest(Base):
    """One row per (group, user); a declined request is reopened in place."""

    __tablename__ = "join_requests"
    __table_args__ = (
        UniqueConstraint("group_id", "user_id", name="uq_join_requests_group_user"),
    )

    group_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("groups.id"), index=True)
    user_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("users.id"), index=True)
    status: Mapped[str] = mapped_column(
        String(20), default=JoinRequestStatus.pending, index=True
    )
    # reset when a declined request is reopened
    requested_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    resolved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), default=None)
    resolved_by_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("users.id"), default=None
    )

    group: Mapped[Group] = relationship(back_populates="join_requests")
    user: Mapped[User] = relationship(foreign_keys=[user_id])
