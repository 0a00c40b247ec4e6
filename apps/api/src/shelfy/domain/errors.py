"""Errors raised by the group and join-request services.

Routers translate these into HTTP responses; services never build
``HTTPException`` themselves.
"""


class JoinRequestServiceError(Exception):
    """Base class for lifecycle errors that abort an operation."""


class GroupNotFoundError(JoinRequestServiceError):
    pass


class JoinRequestNotFoundError(JoinRequestServiceError):
    """No request with that id in the group, or it is no longer pending."""


class JoinRequestConflictError(JoinRequestServiceError):
    pass


class AlreadyMemberError(JoinRequestConflictError):
    pass


class AlreadyPendingError(JoinRequestConflictError):
    pass


class AlreadyAcceptedError(JoinRequestConflictError):
    pass
