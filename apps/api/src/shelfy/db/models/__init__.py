from shelfy.db.models.audit import AuditEvent
from shelfy.db.models.group import Group
from shelfy.db.models.join_request import JoinRequest
from shelfy.db.models.membership import Membership
from shelfy.db.models.user import User

__all__ = [
    "AuditEvent",
    "Group",
    "JoinRequest",
    "Membership",
    "User",
]
