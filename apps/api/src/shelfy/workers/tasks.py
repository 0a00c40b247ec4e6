from __future__ import annotations

import logging

from shelfy.workers.celery_app import celery_app

logger = logging.getLogger(__name__)


@celery_app.task(name="shelfy.notify_join_request_admins", acks_late=True)
def notify_join_request_admins(join_request_id: str) -> dict:
    """Email the group's admins about a new or reopened join request.

    Not retried: a failed email is logged per recipient and dropped.
    """
    from uuid import UUID

    from shelfy.db.models.join_request import JoinRequest
    from shelfy.db.session import SessionLocal
    from shelfy.services.join_request_service import notify_group_admins
    from shelfy.services.notification_service import get_notification_sender

    sender = get_notification_sender()
    db = SessionLocal()
    try:
        join_request = db.get(JoinRequest, UUID(join_request_id))
        if join_request is None:
            logger.warning("notify_join_request_admins: join request %s not found", join_request_id)
            return {"join_request_id": join_request_id, "attempted": 0, "delivered": 0}

        outcomes = notify_group_admins(db, join_request, sender)
        result = {
            "join_request_id": join_request_id,
            "attempted": len(outcomes),
            "delivered": sum(1 for o in outcomes if o.ok),
        }
        logger.info("notify_join_request_admins: %s", result)
        return result
    except Exception:
        logger.exception("notify_join_request_admins failed for join_request_id=%s", join_request_id)
        raise
    finally:
        sender.close()
        db.close()
