"""Join-request lifecycle for reading groups.

There is at most one ``JoinRequest`` row per (group, user)::

    (none)   --create-->  pending
    pending  --accept-->  accepted   (+ member Membership)
    pending  --decline--> declined
    declined --create-->  pending    (same row, same id)

``accepted`` is never reopened here.
"""

from __future__ import annotations

import logging
import uuid
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import UTC, datetime

from sqlalchemy import func
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from shelfy.core.config import settings
from shelfy.db.models.group import Group
from shelfy.db.models.join_request import JoinRequest
from shelfy.db.models.membership import Membership
from shelfy.domain.enums import JoinRequestAction, JoinRequestStatus, MembershipRole
from shelfy.domain.errors import (
    AlreadyAcceptedError,
    AlreadyMemberError,
    AlreadyPendingError,
    GroupNotFoundError,
    JoinRequestNotFoundError,
)
from shelfy.services.audit_service import create_audit_event
from shelfy.services.group_service import get_membership, list_group_admins
from shelfy.services.notification_service import (
    NotificationOutcome,
    NotificationSender,
    build_join_request_email,
)

logger = logging.getLogger(__name__)


_UPSERT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def _dialect_insert(db: Session):
    dialect = db.get_bind().dialect.name
    try:
        return _UPSERT_INSERTS[dialect]
    except KeyError:
        raise ValueError(f"upsert not supported on {dialect}") from None


def _upsert_pending(db: Session, group_id: uuid.UUID, user_id: uuid.UUID) -> uuid.UUID | None:
    """Insert a pending request or reopen a declined one in a single statement.

    Returns the request id, or None when the existing row is not declined
    (pending or accepted) and was left untouched.
    """
    insert = _dialect_insert(db)
    stmt = insert(JoinRequest).values(
        id=uuid.uuid4(),
        group_id=group_id,
        user_id=user_id,
        status=JoinRequestStatus.pending,
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=["group_id", "user_id"],
        set_={
            "status": JoinRequestStatus.pending,
            "requested_at": func.now(),
            "resolved_at": None,
            "resolved_by_id": None,
            "updated_at": func.now(),
        },
        where=JoinRequest.status == JoinRequestStatus.declined,
    ).returning(JoinRequest.id)
    return db.execute(stmt).scalar_one_or_none()


def _get_request_for_pair(
    db: Session, group_id: uuid.UUID, user_id: uuid.UUID
) -> JoinRequest | None:
    return (
        db.query(JoinRequest)
        .filter(JoinRequest.group_id == group_id, JoinRequest.user_id == user_id)
        .first()
    )


def _raise_for_existing(existing: JoinRequest) -> None:
    if existing.status == JoinRequestStatus.pending:
        raise AlreadyPendingError("You have already requested to join this group.")
    if existing.status == JoinRequestStatus.accepted:
        raise AlreadyAcceptedError("Your request to join this group was already accepted.")


def create_join_request(
    db: Session, *, group_id: uuid.UUID, user_id: uuid.UUID
) -> JoinRequest:
    """Open (or reopen) the user's request to join the group and commit it.

    Admin notification is not sent from here; callers dispatch
    ``notify_group_admins`` once this returns.
    """
    group = db.get(Group, group_id)
    if group is None:
        raise GroupNotFoundError("Group not found.")

    if get_membership(db, group_id, user_id) is not None:
        raise AlreadyMemberError("You are already a member of this group.")

    existing = _get_request_for_pair(db, group_id, user_id)
    if existing is not None:
        _raise_for_existing(existing)

    try:
        request_id = _upsert_pending(db, group_id, user_id)
        if request_id is None:
            # lost a race with a concurrent create
            db.rollback()
            existing = _get_request_for_pair(db, group_id, user_id)
            if existing is not None:
                _raise_for_existing(existing)
            raise AlreadyPendingError("You have already requested to join this group.")

        create_audit_event(
            db,
            group_id=group_id,
            action="join_request.reopened" if existing is not None else "join_request.created",
            entity_type="join_request",
            entity_id=request_id,
            actor_id=user_id,
        )
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise

    join_request = db.get(JoinRequest, request_id)
    logger.info(
        "join request %s %s: group=%s user=%s",
        request_id,
        "reopened" if existing is not None else "created",
        group_id,
        user_id,
    )
    return join_request


def list_pending_join_requests(db: Session, group_id: uuid.UUID) -> list[JoinRequest]:
    """Pending requests for the group, longest waiting first, with the requesting user loaded.

    A reopened request waits from the time it was reopened.
    """
    return (
        db.query(JoinRequest)
        .options(joinedload(JoinRequest.user))
        .filter(
            JoinRequest.group_id == group_id,
            JoinRequest.status == JoinRequestStatus.pending,
        )
        .order_by(JoinRequest.requested_at.asc(), JoinRequest.id)
        .all()
    )


def resolve_join_request(
    db: Session,
    *,
    group_id: uuid.UUID,
    request_id: uuid.UUID,
    action: JoinRequestAction,
    actor_id: uuid.UUID,
) -> JoinRequest:
    """Accept or decline a pending request.

    Accepting adds a ``member`` membership in the same transaction as the
    status change. A request that is missing, belongs to another group, or is
    no longer pending raises ``JoinRequestNotFoundError``.
    """
    join_request = (
        db.query(JoinRequest)
        .filter(
            JoinRequest.id == request_id,
            JoinRequest.group_id == group_id,
            JoinRequest.status == JoinRequestStatus.pending,
        )
        .with_for_update()
        .first()
    )
    if join_request is None:
        raise JoinRequestNotFoundError("Join request not found or already processed.")

    now = datetime.now(UTC)
    try:
        if action == JoinRequestAction.accept:
            join_request.status = JoinRequestStatus.accepted
            if get_membership(db, group_id, join_request.user_id) is None:
                db.add(
                    Membership(
                        group_id=group_id,
                        user_id=join_request.user_id,
                        role=MembershipRole.member,
                    )
                )
        else:
            join_request.status = JoinRequestStatus.declined
        join_request.resolved_at = now
        join_request.resolved_by_id = actor_id

        create_audit_event(
            db,
            group_id=group_id,
            action=f"join_request.{join_request.status}",
            entity_type="join_request",
            entity_id=join_request.id,
            actor_id=actor_id,
            detail={"user_id": str(join_request.user_id)},
        )
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise

    db.refresh(join_request)
    logger.info(
        "join request %s %s by %s", join_request.id, join_request.status, actor_id
    )
    return join_request


def notify_group_admins(
    db: Session,
    join_request: JoinRequest,
    sender: NotificationSender,
    *,
    max_workers: int | None = None,
) -> list[NotificationOutcome]:
    """Email every admin of the request's group, best effort.

    Sends run concurrently in a bounded pool. A failure for one admin is
    logged and returned as a failed outcome; it never stops the other sends
    and never raises.
    """
    group = join_request.group
    requester = join_request.user

    messages = [
        (
            admin.user.email,
            build_join_request_email(
                admin_name=admin.user.name,
                requester_name=requester.name,
                group_name=group.name,
                group_id=group.id,
            ),
        )
        for admin in list_group_admins(db, group.id)
        if admin.user.email
    ]
    if not messages:
        logger.info("join request %s: group %s has no admin to notify", join_request.id, group.id)
        return []

    workers = max(1, min(max_workers or settings.NOTIFICATION_MAX_WORKERS, len(messages)))
    outcomes: list[NotificationOutcome] = []
    with ThreadPoolExecutor(max_workers=workers) as pool:
        futures = {
            pool.submit(sender.send, recipient, content): recipient
            for recipient, content in messages
        }
        for future in as_completed(futures):
            recipient = futures[future]
            try:
                outcome = future.result()
            except Exception as exc:
                logger.warning(
                    "join request %s: email to %s failed",
                    join_request.id,
                    recipient,
                    exc_info=True,
                )
                outcome = NotificationOutcome(recipient=recipient, ok=False, error=str(exc))
            else:
                if not outcome.ok:
                    logger.warning(
                        "join request %s: email to %s rejected: %s",
                        join_request.id,
                        recipient,
                        outcome.error,
                    )
            outcomes.append(outcome)

    delivered = sum(1 for o in outcomes if o.ok)
    logger.info(
        "join request %s: notified %d/%d admin(s)", join_request.id, delivered, len(outcomes)
    )
    return outcomes
