from enum import StrEnum


class MembershipRole(StrEnum):
    member = "member"
    admin = "admin"


class JoinRequestStatus(StrEnum):
    pending = "pending"
    accepted = "accepted"
    declined = "declined"


class JoinRequestAction(StrEnum):
    accept = "accept"
    decline = "decline"
