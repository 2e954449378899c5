import logging
import secrets
from datetime import date, datetime
from typing import List, Optional
from uuid import UUID
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from shared.core.config import settings
from shared.core.schemas import CommonQueryParams
from shared.helpers.json_response_helper import error_response, not_found
from shared.helpers.phone_helper import normalize_phone
from shared.utils.app_status_code import AppStatusCode
from shared.utils.enums import (
    InvitationStatus, InvitationType, KnockDecision, NotificationActionType
)
from ...models.gate_pass.invitations import Invitation, PENDING_ACCESS_CODE
from ...schemas.gate_pass.invitation_schemas import InvitationOut
from ..membership.providers_crud import get_provider_by_id
from ..system.notifications_crud import notify

logger = logging.getLogger(__name__)

ACCESS_CODE_DIGITS = 6

REDEEMABLE_STATUSES = (InvitationStatus.Active, InvitationStatus.Approved)
HISTORY_STATUSES = (
    InvitationStatus.Used,
    InvitationStatus.Canceled,
    InvitationStatus.Denied,
    InvitationStatus.Expired,
)
EXPIRABLE_STATUSES = (
    InvitationStatus.Active,
    InvitationStatus.Approved,
    InvitationStatus.Pending,
)

INVALID_CODE_MESSAGE = "Invalid access code"


def _draw_code() -> str:
    return str(secrets.randbelow(9 * 10 ** (ACCESS_CODE_DIGITS - 1)) + 10 ** (ACCESS_CODE_DIGITS - 1))


def generate_access_code(db: Session) -> str:
    """Six digit code that does not clash with any currently redeemable pass."""
    for _ in range(settings.ACCESS_CODE_MAX_ATTEMPTS):
        code = _draw_code()
        clash = db.query(Invitation.id).filter(
            Invitation.access_code == code,
            Invitation.status.in_(REDEEMABLE_STATUSES),
        ).first()
        if clash is None:
            return code

    logger.error("No free access code after %s attempts",
                 settings.ACCESS_CODE_MAX_ATTEMPTS)
    return error_response(message="Could not issue an access code, please retry",
                          status_code=AppStatusCode.ACCESS_CODE_EXHAUSTED,
                          http_status=503)


def _result(invitation: Invitation, changed: bool, status_code: str, message: str) -> dict:
    return {
        "invitation": InvitationOut.model_validate(invitation),
        "changed": changed,
        "status_code": status_code,
        "message": message,
    }


def get_invitation_by_id(db: Session, invitation_id: UUID, lock: bool = False) -> Invitation:
    query = db.query(Invitation).filter(Invitation.id == invitation_id)
    if lock:
        query = query.with_for_update()
    invitation = query.first()
    if not invitation:
        return not_found("Invitation not found", AppStatusCode.INVITATION_NOT_FOUND)
    return invitation


def _commit(db: Session, invitation: Invitation, action: str):
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Failed to %s invitation %s", action, invitation.id)
        return error_response(message=f"Could not {action} invitation",
                              status_code=AppStatusCode.OPERATION_ERROR)
    db.refresh(invitation)


def create_invite(db: Session, host_id: int, visitor_phone: str, visit_date: date,
                  host_apartment: Optional[str] = None) -> dict:
    host = get_provider_by_id(db, host_id)
    if not host:
        return not_found("Host user not found", AppStatusCode.HOST_NOT_FOUND)
    if not host.service:
        return error_response(message="Please complete your profile to host visitors.",
                              status_code=AppStatusCode.PROFILE_INCOMPLETE)

    invitation = Invitation(
        host_id=host.id,
        host_name=host.name,
        host_apartment=normalize_apartment(host_apartment),
        visitor_phone=normalize_phone(visitor_phone),
        visit_date=visit_date,
        status=InvitationStatus.Active,
        access_code=generate_access_code(db),
        type=InvitationType.Invite,
    )
    db.add(invitation)
    _commit(db, invitation, "create")
    logger.info("Invite %s issued by host %s for %s",
                invitation.id, host.id, invitation.visit_date)
    return _result(invitation, changed=True,
                   status_code=AppStatusCode.OPERATION_SUCCESSFUL,
                   message=f"Invite ready. Share access code {invitation.access_code} with your visitor.")


def normalize_apartment(label: Optional[str]) -> Optional[str]:
    """Apartment labels compare case-insensitively: " c5 " and "C5" are one door."""
    if label is None:
        return None
    return label.strip().upper() or None


def _pending_knock(db: Session, host_id: int, host_apartment: Optional[str], visitor_id: int):
    return db.query(Invitation).filter(
        Invitation.type == InvitationType.Knock,
        Invitation.status == InvitationStatus.Pending,
        Invitation.host_id == host_id,
        Invitation.host_apartment == host_apartment,
        Invitation.visitor_id == visitor_id,
    ).first()


def _duplicate_knock(invitation: Invitation) -> dict:
    return _result(invitation, changed=False,
                   status_code=AppStatusCode.REQUEST_ALREADY_PENDING,
                   message="Your request is already waiting for the host.")


def create_knock(db: Session, host_id: int, host_apartment: str, visitor_id: int,
                 visitor_phone: Optional[str] = None, visit_date: Optional[date] = None) -> dict:
    visitor = get_provider_by_id(db, visitor_id)
    if not visitor:
        return not_found("Visitor user not found", AppStatusCode.VISITOR_NOT_FOUND)
    host = get_provider_by_id(db, host_id)
    if not host:
        return not_found("Host user not found", AppStatusCode.HOST_NOT_FOUND)

    apartment = normalize_apartment(host_apartment)
    existing = _pending_knock(db, host.id, apartment, visitor.id)
    if existing:
        return _duplicate_knock(existing)

    invitation = Invitation(
        host_id=host.id,
        host_name=host.name,
        host_apartment=apartment,
        visitor_phone=normalize_phone(visitor_phone) or visitor.phone,
        visitor_id=visitor.id,
        visitor_name=visitor.name,
        visitor_avatar=visitor.avatar_url,
        visit_date=visit_date or date.today(),
        status=InvitationStatus.Pending,
        access_code=PENDING_ACCESS_CODE,
        type=InvitationType.Knock,
    )

    try:
        db.add(invitation)
        db.flush()
    except IntegrityError:
        # lost the race against the same visitor knocking twice
        db.rollback()
        return _duplicate_knock(_pending_knock(db, host.id, apartment, visitor.id))

    notify(
        db,
        recipient_phone=host.phone,
        sender="Karibu",
        subject="Visitor at the gate",
        body=f"{visitor.name} is at the gate for apartment {apartment}.",
        action_type=NotificationActionType.gate_knock,
        invitation_id=invitation.id,
    )
    _commit(db, invitation, "create")
    logger.info("Knock %s from visitor %s to host %s (%s)",
                invitation.id, visitor.id, host.id, apartment)
    return _result(invitation, changed=True,
                   status_code=AppStatusCode.OPERATION_SUCCESSFUL,
                   message=f"Your request to visit {host.name} at apartment {apartment} has been sent.")


def decide_knock(db: Session, invitation_id: UUID, decision: KnockDecision) -> dict:
    invitation = get_invitation_by_id(db, invitation_id, lock=True)

    if invitation.type != InvitationType.Knock or invitation.status != InvitationStatus.Pending:
        return _result(invitation, changed=False,
                       status_code=AppStatusCode.DECISION_IGNORED,
                       message=f"This request is already {invitation.status.value}.")

    if decision == KnockDecision.approve:
        invitation.access_code = generate_access_code(db)
        invitation.status = InvitationStatus.Approved
        notify(
            db,
            recipient_phone=invitation.visitor_phone,
            sender=invitation.host_name,
            subject="Visit approved",
            body=f"{invitation.host_name} approved your visit. Your access code is {invitation.access_code}.",
        )
    else:
        invitation.status = InvitationStatus.Denied

    _commit(db, invitation, "decide")
    logger.info("Knock %s %s", invitation.id, invitation.status.value)
    return _result(invitation, changed=True,
                   status_code=AppStatusCode.OPERATION_SUCCESSFUL,
                   message=f"Visitor {invitation.status.value.lower()}.")


def cancel_invite(db: Session, invitation_id: UUID) -> dict:
    invitation = get_invitation_by_id(db, invitation_id, lock=True)

    if invitation.status != InvitationStatus.Active:
        return _result(invitation, changed=False,
                       status_code=AppStatusCode.DECISION_IGNORED,
                       message=f"Only active invites can be canceled (this one is {invitation.status.value}).")

    invitation.status = InvitationStatus.Canceled
    _commit(db, invitation, "cancel")
    logger.info("Invite %s canceled", invitation.id)
    return _result(invitation, changed=True,
                   status_code=AppStatusCode.OPERATION_SUCCESSFUL,
                   message="Invite canceled.")


def _invalid_code() -> dict:
    return {
        "valid": False,
        "status_code": AppStatusCode.ACCESS_CODE_INVALID,
        "message": INVALID_CODE_MESSAGE,
        "invitation": None,
    }


def redeem(db: Session, access_code: str) -> dict:
    """Scan flow. Same answer for unknown, used, canceled, denied and expired codes."""
    code = (access_code or "").strip()
    if not code.isdigit() or len(code) != ACCESS_CODE_DIGITS:
        logger.warning("Rejected malformed access code")
        return _invalid_code()

    invitation = db.query(Invitation).filter(
        Invitation.access_code == code,
        Invitation.status.in_(REDEEMABLE_STATUSES),
    ).with_for_update().first()
    if invitation is None:
        logger.warning("Rejected access code ending %s", code[-2:])
        return _invalid_code()

    # conditional update: only one scanner can flip the status
    updated = db.query(Invitation).filter(
        Invitation.id == invitation.id,
        Invitation.status.in_(REDEEMABLE_STATUSES),
    ).update({
        "status": InvitationStatus.Used,
        "redeemed_at": datetime.utcnow(),
        "updated_at": datetime.utcnow(),
    }, synchronize_session=False)

    if updated != 1:
        db.rollback()
        logger.warning("Access code ending %s lost a redemption race", code[-2:])
        return _invalid_code()

    _commit(db, invitation, "redeem")
    logger.info("Invitation %s redeemed", invitation.id)
    return {
        "valid": True,
        "status_code": AppStatusCode.OPERATION_SUCCESSFUL,
        "message": f"Welcome {invitation.visitor_name or invitation.visitor_phone}, visiting {invitation.host_name}.",
        "invitation": InvitationOut.model_validate(invitation),
    }


def _paginate(query, params: Optional[CommonQueryParams]):
    total = query.with_entities(func.count(Invitation.id)).scalar()
    query = query.order_by(Invitation.created_at.desc())
    if params is not None:
        query = query.offset(params.skip).limit(params.limit)
    return {
        "invitations": [InvitationOut.model_validate(i) for i in query.all()],
        "total": total,
    }


def _search(query, params: Optional[CommonQueryParams]):
    if params is not None and params.search:
        search_term = f"%{params.search}%"
        query = query.filter(Invitation.visitor_phone.ilike(search_term) |
                             Invitation.visitor_name.ilike(search_term) |
                             Invitation.host_apartment.ilike(search_term))
    return query


def invitations_for_host(db: Session, host_id: int, params: Optional[CommonQueryParams] = None) -> dict:
    query = db.query(Invitation).filter(Invitation.host_id == host_id)
    return _paginate(_search(query, params), params)


def invitations_for_hosts(db: Session, host_ids: List[int], params: Optional[CommonQueryParams] = None) -> dict:
    query = db.query(Invitation).filter(Invitation.host_id.in_(host_ids))
    return _paginate(_search(query, params), params)


def all_invitations(db: Session, params: Optional[CommonQueryParams] = None) -> dict:
    return _paginate(_search(db.query(Invitation), params), params)


def host_board(db: Session, host_id: int) -> dict:
    invitations = (
        db.query(Invitation)
        .filter(Invitation.host_id == host_id)
        .order_by(Invitation.created_at.desc())
        .all()
    )
    board = {"requests": [], "invites": [], "history": []}
    for invitation in invitations:
        out = InvitationOut.model_validate(invitation)
        if invitation.status == InvitationStatus.Pending:
            board["requests"].append(out)
        elif invitation.status in REDEEMABLE_STATUSES:
            board["invites"].append(out)
        else:
            board["history"].append(out)
    return board


def expire_invitations(db: Session, today: Optional[date] = None) -> dict:
    """Manual sweep: anything still open after its visit date becomes Expired."""
    today = today or date.today()
    try:
        expired = db.query(Invitation).filter(
            Invitation.visit_date < today,
            Invitation.status.in_(EXPIRABLE_STATUSES),
        ).update({
            "status": InvitationStatus.Expired,
            "updated_at": datetime.utcnow(),
        }, synchronize_session=False)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Invitation expiry sweep failed")
        return error_response(message="Could not expire invitations",
                              status_code=AppStatusCode.OPERATION_ERROR)

    logger.info("Expired %s invitations older than %s", expired, today)
    return {"expired": expired}
