import logging
from datetime import datetime
from typing import Optional
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from shared.helpers.json_response_helper import error_response, forbidden, not_found
from shared.helpers.phone_helper import normalize_phone
from shared.utils.app_status_code import AppStatusCode
from shared.utils.enums import (
    JoinRequestStatus, LeaderRole, NotificationActionType, VoteDecision
)
from ...models.membership.join_requests import JoinRequest, JoinRequestVote
from ...models.membership.organization_members import OrganizationMember
from ...models.membership.providers import Provider
from ...schemas.membership.providers_schemas import JoinRequestOut
from ..system.notifications_crud import notify
from .providers_crud import get_organization, get_provider_by_id

logger = logging.getLogger(__name__)

# Every leader has to approve
APPROVAL_THRESHOLD = len(LeaderRole)


def _result(join_request: Optional[JoinRequest], changed: bool, status_code: str, message: str,
            leader_vote: Optional[VoteDecision] = None) -> dict:
    return {
        "join_request": JoinRequestOut.model_validate(join_request) if join_request else None,
        "changed": changed,
        "status_code": status_code,
        "message": message,
        "leader_vote": leader_vote,
    }


def _get_requester(db: Session, requester_id: int) -> Provider:
    requester = get_provider_by_id(db, requester_id)
    if not requester:
        return not_found("Requester not found", AppStatusCode.REQUESTER_NOT_FOUND)
    return requester


def _pending_request(db: Session, organization_id: int, requester_id: int, lock: bool = False):
    query = db.query(JoinRequest).filter(
        JoinRequest.organization_id == organization_id,
        JoinRequest.user_id == requester_id,
        JoinRequest.status == JoinRequestStatus.pending,
    )
    if lock:
        # one vote at a time per request
        query = query.with_for_update()
    return query.first()


def _latest_request(db: Session, organization_id: int, requester_id: int):
    return (
        db.query(JoinRequest)
        .filter(JoinRequest.organization_id == organization_id,
                JoinRequest.user_id == requester_id)
        .order_by(JoinRequest.id.desc())
        .first()
    )


def _is_member(db: Session, organization_id: int, provider_id: int) -> bool:
    return db.query(OrganizationMember.id).filter(
        OrganizationMember.organization_id == organization_id,
        OrganizationMember.provider_id == provider_id,
    ).first() is not None


def _duplicate_result(join_request: JoinRequest) -> dict:
    return _result(
        join_request,
        changed=False,
        status_code=AppStatusCode.REQUEST_ALREADY_PENDING,
        message="You already have a pending request to join this group.",
    )


def submit_join_request(db: Session, organization_id: int, requester_id: int) -> dict:
    organization = get_organization(db, organization_id)
    requester = _get_requester(db, requester_id)

    existing = _pending_request(db, organization.id, requester.id)
    if existing:
        return _duplicate_result(existing)

    if _is_member(db, organization.id, requester.id):
        return _result(
            None,
            changed=False,
            status_code=AppStatusCode.ALREADY_A_MEMBER,
            message=f"You are already a member of {organization.name}.",
        )

    join_request = JoinRequest(
        organization_id=organization.id,
        user_id=requester.id,
        user_name=requester.name,
        user_phone=requester.phone,
        status=JoinRequestStatus.pending,
    )

    try:
        db.add(join_request)
        db.flush()
    except IntegrityError:
        # lost the race against an identical submission
        db.rollback()
        return _duplicate_result(_pending_request(db, organization.id, requester.id))

    try:
        notify(
            db,
            recipient_phone=requester.phone,
            sender=organization.name,
            subject="Request Sent",
            body="Your request to join has been sent to the SACCO leadership for approval.",
        )
        for role, leader_phone in organization.leaders.items():
            if not leader_phone:
                continue
            notify(
                db,
                recipient_phone=leader_phone,
                sender=organization.name,
                subject="New membership request",
                body=f"{requester.name} has asked to join {organization.name}. "
                     f"As {role} your vote is needed.",
                action_type=NotificationActionType.sacco_join_request,
                organization_id=organization.id,
                requester_id=requester.id,
            )
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Failed to submit join request for org %s user %s",
                         organization_id, requester_id)
        return error_response(message="Could not submit join request",
                              status_code=AppStatusCode.OPERATION_ERROR)

    db.refresh(join_request)
    logger.info("Join request %s submitted: user %s -> org %s",
                join_request.id, requester.id, organization.id)
    return _result(
        join_request,
        changed=True,
        status_code=AppStatusCode.OPERATION_SUCCESSFUL,
        message="Your request to join has been sent to the SACCO leadership for approval.",
    )


def _approve(db: Session, organization: Provider, requester: Provider, join_request: JoinRequest):
    join_request.status = JoinRequestStatus.approved
    join_request.decided_at = datetime.utcnow()

    # snapshot, later profile edits do not flow into the member list
    db.add(OrganizationMember(
        organization_id=organization.id,
        provider_id=requester.id,
        name=requester.name,
        avatar_url=requester.avatar_url,
        rating=requester.rating,
        distance_km=requester.distance_km,
        hourly_rate=requester.hourly_rate,
        rate_type=requester.rate_type,
        phone=requester.phone,
        whatsapp=requester.whatsapp,
        is_online=requester.is_online,
    ))

    requester.is_verified = True
    requester.cover_image_url = organization.cover_image_url

    notify(
        db,
        recipient_phone=requester.phone,
        sender=organization.name,
        subject="Member Approved",
        body=f"{requester.name} is now a member of {organization.name}.",
    )
    logger.info("Join request %s approved: user %s joined org %s",
                join_request.id, requester.id, organization.id)


def _reject(db: Session, organization: Provider, requester: Provider, join_request: JoinRequest):
    join_request.status = JoinRequestStatus.rejected
    join_request.decided_at = datetime.utcnow()

    notify(
        db,
        recipient_phone=requester.phone,
        sender=organization.name,
        subject="Member Rejected",
        body=f"{requester.name}'s request to join {organization.name} was rejected.",
    )
    logger.info("Join request %s rejected for user %s by org %s",
                join_request.id, requester.id, organization.id)


def cast_leader_vote(db: Session, organization_id: int, requester_id: int,
                     leader_phone: str, decision: VoteDecision) -> dict:
    organization = get_organization(db, organization_id)
    requester = _get_requester(db, requester_id)

    phone = normalize_phone(leader_phone)
    role = organization.leader_role_of(phone)
    if role is None:
        logger.warning("Vote on org %s refused: %s is not a leader",
                       organization.id, phone)
        return forbidden("Only the chairperson, secretary or treasurer can vote",
                         AppStatusCode.NOT_A_LEADER)

    join_request = _pending_request(
        db, organization.id, requester.id, lock=True)
    if join_request is None:
        latest = _latest_request(db, organization.id, requester.id)
        if latest is None:
            return not_found("Join request not found",
                             AppStatusCode.JOIN_REQUEST_NOT_FOUND)
        # stale inbox action, someone already decided
        return _result(
            latest,
            changed=False,
            status_code=AppStatusCode.VOTE_IGNORED,
            message=f"This request has already been {latest.status.value}.",
            leader_vote=latest.vote_of(phone),
        )

    prior_vote = join_request.vote_of(phone)
    if prior_vote is not None:
        return _result(
            join_request,
            changed=False,
            status_code=AppStatusCode.VOTE_IGNORED,
            message=f"You have already voted ({prior_vote.value}).",
            leader_vote=prior_vote,
        )

    try:
        join_request.votes.append(
            JoinRequestVote(leader_phone=phone, decision=decision))
        db.flush()

        if decision == VoteDecision.reject:
            _reject(db, organization, requester, join_request)
        elif len(join_request.approvals) >= APPROVAL_THRESHOLD:
            _approve(db, organization, requester, join_request)
        else:
            logger.info("Join request %s: %s approved (%s/%s)",
                        join_request.id, role, len(join_request.approvals), APPROVAL_THRESHOLD)

        db.commit()
    except IntegrityError:
        # same leader voting from two devices at once
        db.rollback()
        join_request = _latest_request(db, organization.id, requester.id)
        return _result(
            join_request,
            changed=False,
            status_code=AppStatusCode.VOTE_IGNORED,
            message="You have already voted.",
            leader_vote=join_request.vote_of(phone),
        )
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Failed to record vote on join request %s",
                         join_request.id)
        return error_response(message="Could not record vote",
                              status_code=AppStatusCode.OPERATION_ERROR)

    db.refresh(join_request)
    if join_request.status == JoinRequestStatus.pending:
        message = f"Approved by you ({len(join_request.approvals)}/{APPROVAL_THRESHOLD} needed)"
    else:
        message = f"Request {join_request.status.value}."
    return _result(
        join_request,
        changed=True,
        status_code=AppStatusCode.OPERATION_SUCCESSFUL,
        message=message,
        leader_vote=decision,
    )


def pending_requests_for(db: Session, organization_id: int) -> dict:
    organization = get_organization(db, organization_id)
    requests = (
        db.query(JoinRequest)
        .filter(JoinRequest.organization_id == organization.id,
                JoinRequest.status == JoinRequestStatus.pending)
        .order_by(JoinRequest.id)
        .all()
    )
    return {
        "join_requests": [JoinRequestOut.model_validate(r) for r in requests],
        "total": len(requests),
    }
