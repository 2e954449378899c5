from datetime import date, datetime
from typing import List, Optional
from uuid import UUID
from pydantic import BaseModel, field_validator

from shared.helpers.phone_helper import normalize_phone
from shared.utils.enums import InvitationStatus, InvitationType, KnockDecision
from shared.wrappers.empty_string_model_wrapper import EmptyStringModel


class InviteCreate(EmptyStringModel):
    visitor_phone: str
    visit_date: date
    host_apartment: Optional[str] = None

    @field_validator("visitor_phone")
    @classmethod
    def phone_has_digits(cls, value: str) -> str:
        if normalize_phone(value) is None:
            raise ValueError("visitor_phone must contain digits")
        return value


class KnockCreate(EmptyStringModel):
    host_id: int
    host_apartment: str
    visit_date: Optional[date] = None

    @field_validator("host_apartment")
    @classmethod
    def upper_apartment(cls, value: str) -> str:
        return value.upper()


class KnockDecisionRequest(BaseModel):
    decision: KnockDecision


class RedeemRequest(EmptyStringModel):
    # blank or odd codes still reach redeem() and get the uniform invalid answer
    access_code: Optional[str] = None

    @field_validator("access_code", mode="before")
    @classmethod
    def code_as_text(cls, value):
        if value is not None and not isinstance(value, str):
            return str(value)
        return value


class InvitationOut(BaseModel):
    id: UUID
    host_id: int
    host_name: str
    host_apartment: Optional[str] = None
    visitor_phone: str
    visitor_id: Optional[int] = None
    visitor_name: Optional[str] = None
    visitor_avatar: Optional[str] = None
    visit_date: date
    status: InvitationStatus
    access_code: str
    type: InvitationType
    created_at: Optional[datetime] = None
    redeemed_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class InvitationResult(BaseModel):
    invitation: InvitationOut
    changed: bool
    status_code: str
    message: str


class RedeemResult(BaseModel):
    valid: bool
    status_code: str
    message: str
    invitation: Optional[InvitationOut] = None


class InvitationsResponse(BaseModel):
    invitations: List[InvitationOut]
    total: int


class HostBoard(BaseModel):
    requests: List[InvitationOut]
    invites: List[InvitationOut]
    history: List[InvitationOut]


class ExpireRequest(BaseModel):
    today: Optional[date] = None


class ExpireResult(BaseModel):
    expired: int
