from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from kombu.exceptions import OperationalError
from pydantic import BaseModel
from sqlalchemy.orm import Session

from shelfy.core.security import CurrentUser, GroupAdmin
from shelfy.db.session import get_db
from shelfy.domain.enums import JoinRequestAction
from shelfy.domain.errors import (
    GroupNotFoundError,
    JoinRequestNotFoundError,
    JoinRequestServiceError,
)
from shelfy.services.join_request_service import (
    create_join_request,
    list_pending_join_requests,
    resolve_join_request,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/groups/{group_id}/join-requests", tags=["join-requests"])

DB = Annotated[Session, Depends(get_db)]


# -- Schemas ------------------------------------------------------------------


class JoinRequestResolve(BaseModel):
    action: JoinRequestAction


class RequesterOut(BaseModel):
    id: str
    name: str | None
    image: str | None
    email: str | None


class PendingJoinRequestOut(BaseModel):
    id: str
    user: RequesterOut
    requested_at: datetime | None


class JoinRequestOut(BaseModel):
    id: str
    status: str
    message: str


# -- Helpers ------------------------------------------------------------------


def _http_error(exc: JoinRequestServiceError) -> HTTPException:
    if isinstance(exc, (GroupNotFoundError, JoinRequestNotFoundError)):
        code = status.HTTP_404_NOT_FOUND
    else:
        code = status.HTTP_400_BAD_REQUEST
    return HTTPException(status_code=code, detail=str(exc))


def _enqueue_admin_notification(join_request_id: uuid.UUID) -> None:
    from shelfy.workers.tasks import notify_join_request_admins

    try:
        # no publish retries: a broker outage must not hold up the response
        notify_join_request_admins.apply_async(args=[str(join_request_id)], retry=False)
    except OperationalError:
        logger.exception("could not enqueue admin notification for join request %s", join_request_id)


# -- Endpoints ----------------------------------------------------------------


@router.post("", response_model=JoinRequestOut, status_code=status.HTTP_201_CREATED)
def create(group_id: uuid.UUID, user: CurrentUser, db: DB):
    try:
        join_request = create_join_request(db, group_id=group_id, user_id=user.id)
    except JoinRequestServiceError as exc:
        raise _http_error(exc) from None

    _enqueue_admin_notification(join_request.id)

    return JoinRequestOut(
        id=str(join_request.id),
        status=join_request.status,
        message="Join request sent successfully.",
    )


@router.get("", response_model=list[PendingJoinRequestOut])
def list_pending(group_id: uuid.UUID, _user: GroupAdmin, db: DB):
    return [
        PendingJoinRequestOut(
            id=str(r.id),
            user=RequesterOut(
                id=str(r.user.id),
                name=r.user.name,
                image=r.user.image,
                email=r.user.email,
            ),
            requested_at=r.requested_at,
        )
        for r in list_pending_join_requests(db, group_id)
    ]


@router.put("/{request_id}", response_model=JoinRequestOut)
def resolve(
    group_id: uuid.UUID,
    request_id: uuid.UUID,
    body: JoinRequestResolve,
    user: GroupAdmin,
    db: DB,
):
    try:
        join_request = resolve_join_request(
            db,
            group_id=group_id,
            request_id=request_id,
            action=body.action,
            actor_id=user.id,
        )
    except JoinRequestServiceError as exc:
        raise _http_error(exc) from None

    verb = "accepted" if body.action == JoinRequestAction.accept else "declined"
    return JoinRequestOut(
        id=str(join_request.id),
        status=join_request.status,
        message=f"Join request {verb}.",
    )
