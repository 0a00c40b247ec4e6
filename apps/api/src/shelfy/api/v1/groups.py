from __future__ import annotations

import json
import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from shelfy.core.security import CurrentUser, GroupAdmin, GroupMember
from shelfy.db.session import get_db
from shelfy.services.audit_service import list_audit_events_for_group
from shelfy.services.group_service import create_group, get_group, list_user_groups

router = APIRouter(prefix="/groups", tags=["groups"])

DB = Annotated[Session, Depends(get_db)]


# -- Schemas ------------------------------------------------------------------


class GroupCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    description: str | None = None


# -- Helpers ------------------------------------------------------------------


def _group_to_dict(g, *, role: str | None = None, include_members: bool = False):
    out = {
        "id": str(g.id),
        "name": g.name,
        "description": g.description,
        "created_at": g.created_at.isoformat() if g.created_at else None,
    }
    if role is not None:
        out["role"] = role
    if include_members:
        out["members"] = [
            {
                "user": {
                    "id": str(m.user.id),
                    "name": m.user.name,
                    "image": m.user.image,
                    "email": m.user.email,
                },
                "role": m.role,
            }
            for m in g.memberships
        ]
    return out


# -- Endpoints ----------------------------------------------------------------


@router.post("", status_code=status.HTTP_201_CREATED)
def create(body: GroupCreate, user: CurrentUser, db: DB):
    group = create_group(db, name=body.name, description=body.description, creator_id=user.id)
    return _group_to_dict(group, role="admin")


@router.get("")
def list_mine(user: CurrentUser, db: DB):
    return [_group_to_dict(g, role=role) for g, role in list_user_groups(db, user.id)]


@router.get("/{group_id}")
def get_by_id(group_id: uuid.UUID, _user: GroupMember, db: DB):
    group = get_group(db, group_id)
    if group is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Group not found",
        )
    return _group_to_dict(group, include_members=True)


@router.get("/{group_id}/audit")
def get_audit(group_id: uuid.UUID, _user: GroupAdmin, db: DB):
    """Audit trail of membership changes in a group. Admin only."""
    events = list_audit_events_for_group(db, group_id)
    return [
        {
            "id": str(e.id),
            "action": e.action,
            "entity_type": e.entity_type,
            "entity_id": str(e.entity_id) if e.entity_id else None,
            "actor_id": str(e.actor_id) if e.actor_id else None,
            "detail": json.loads(e.detail) if e.detail else None,
            "created_at": e.created_at.isoformat() if e.created_at else None,
        }
        for e in events
    ]
