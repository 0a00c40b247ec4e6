from __future__ import annotations

import uuid

from sqlalchemy.orm import Session, joinedload

from shelfy.db.models.group import Group
from shelfy.db.models.membership import Membership
from shelfy.domain.enums import MembershipRole


def create_group(
    db: Session,
    *,
    name: str,
    creator_id: uuid.UUID,
    description: str | None = None,
) -> Group:
    """Create a group and make its creator the first admin."""
    group = Group(name=name, description=description)
    db.add(group)
    db.flush()

    db.add(Membership(group_id=group.id, user_id=creator_id, role=MembershipRole.admin))
    db.commit()
    db.refresh(group)
    return group


def get_group(db: Session, group_id: uuid.UUID) -> Group | None:
    return (
        db.query(Group)
        .options(joinedload(Group.memberships).joinedload(Membership.user))
        .filter(Group.id == group_id)
        .first()
    )


def list_user_groups(db: Session, user_id: uuid.UUID) -> list[tuple[Group, str]]:
    """Groups the user belongs to, with the user's role in each."""
    rows = (
        db.query(Group, Membership.role)
        .join(Membership, Membership.group_id == Group.id)
        .filter(Membership.user_id == user_id)
        .order_by(Group.name)
        .all()
    )
    return [(group, role) for group, role in rows]


def get_membership(db: Session, group_id: uuid.UUID, user_id: uuid.UUID) -> Membership | None:
    return (
        db.query(Membership)
        .filter(Membership.group_id == group_id, Membership.user_id == user_id)
        .first()
    )


def list_group_admins(db: Session, group_id: uuid.UUID) -> list[Membership]:
    return (
        db.query(Membership)
        .options(joinedload(Membership.user))
        .filter(Membership.group_id == group_id, Membership.role == MembershipRole.admin)
        .all()
    )
