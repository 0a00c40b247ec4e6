from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shelfy.db.base import Base

if TYPE_CHECKING:
    from shelfy.db.models.join_request import JoinRequest
    from shelfy.db.models.membership import Membership


class Group(Base):
    __tablename__ = "groups"

    name: Mapped[str] = mapped_column(String(255))
    description: Mapped[str | None] = mapped_column(Text, default=None)

    memberships: Mapped[list[Membership]] = relationship(back_populates="group")
    join_requests: Mapped[list[JoinRequest]] = relationship(back_populates="group")
