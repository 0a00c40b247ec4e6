from __future__ import annotations

import json
import uuid

from sqlalchemy.orm import Session

from shelfy.db.models.audit import AuditEvent


def create_audit_event(
    db: Session,
    *,
    group_id: uuid.UUID,
    action: str,
    entity_type: str,
    entity_id: uuid.UUID | None = None,
    actor_id: uuid.UUID | None = None,
    detail: dict | None = None,
) -> AuditEvent:
    """Stage an audit row in the caller's transaction; the caller commits."""
    event = AuditEvent(
        group_id=group_id,
        actor_id=actor_id,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        detail=json.dumps(detail) if detail is not None else None,
    )
    db.add(event)
    db.flush()
    return event


def list_audit_events_for_group(db: Session, group_id: uuid.UUID) -> list[AuditEvent]:
    return (
        db.query(AuditEvent)
        .filter(AuditEvent.group_id == group_id)
        .order_by(AuditEvent.created_at.desc())
        .all()
    )
