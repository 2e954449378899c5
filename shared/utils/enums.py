from enum import Enum


class AccountType(str, Enum):
    individual = "individual"
    organization = "organization"


class ProfileType(str, Enum):
    individual = "individual"
    group = "group"


class LeaderRole(str, Enum):
    chairperson = "chairperson"
    secretary = "secretary"
    treasurer = "treasurer"


class JoinRequestStatus(str, Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"


class VoteDecision(str, Enum):
    approve = "approve"
    reject = "reject"


class InvitationType(str, Enum):
    Invite = "Invite"
    Knock = "Knock"


class InvitationStatus(str, Enum):
    Active = "Active"
    Canceled = "Canceled"
    Used = "Used"
    Pending = "Pending"
    Approved = "Approved"
    Denied = "Denied"
    Expired = "Expired"


class KnockDecision(str, Enum):
    approve = "approve"
    deny = "deny"


class NotificationActionType(str, Enum):
    sacco_join_request = "sacco_join_request"
    gate_knock = "gate_knock"
