import logging
from uuid import UUID
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from shared.core.schemas import CommonQueryParams, UserToken
from shared.helpers.json_response_helper import error_response, forbidden, not_found
from shared.utils.app_status_code import AppStatusCode
from ...models.gate_pass.invitations import Invitation
from ...models.gate_pass.premises import Premise, PremiseHost
from ..membership.providers_crud import get_provider_by_id
from .invitation_crud import get_invitation_by_id, invitations_for_hosts

logger = logging.getLogger(__name__)


def get_premise_by_id(db: Session, premise_id: UUID) -> Premise:
    premise = db.query(Premise).filter(Premise.id == premise_id).first()
    if not premise:
        return not_found("Premise not found", AppStatusCode.PREMISE_NOT_FOUND)
    return premise


def register_premise(db: Session, name: str, superhost_id: int) -> Premise:
    superhost = get_provider_by_id(db, superhost_id)
    if not superhost:
        return not_found("Host user not found", AppStatusCode.HOST_NOT_FOUND)

    premise = Premise(name=name, superhost_id=superhost.id)
    premise.hosts.append(PremiseHost(host_id=superhost.id))
    db.add(premise)
    db.commit()
    db.refresh(premise)
    logger.info("Premise %s (%s) registered by superhost %s",
                premise.id, premise.name, superhost.id)
    return premise


def _ensure_superhost(premise: Premise, current_user: UserToken):
    if current_user.is_super_admin or premise.superhost_id == current_user.user_id:
        return
    return forbidden("Only the premise superhost can do this")


def add_premise_host(db: Session, premise_id: UUID, host_id: int, current_user: UserToken) -> Premise:
    premise = get_premise_by_id(db, premise_id)
    _ensure_superhost(premise, current_user)

    if not get_provider_by_id(db, host_id):
        return not_found("Host user not found", AppStatusCode.HOST_NOT_FOUND)

    if host_id in premise.host_ids:
        return premise

    try:
        premise.hosts.append(PremiseHost(host_id=host_id))
        db.commit()
    except IntegrityError:
        db.rollback()
        return error_response(message="Host already belongs to this premise",
                              status_code=AppStatusCode.INVALID_INPUT)
    db.refresh(premise)
    logger.info("Host %s added to premise %s", host_id, premise.id)
    return premise


def premise_invitations(db: Session, premise_id: UUID, current_user: UserToken,
                        params: CommonQueryParams = None) -> dict:
    premise = get_premise_by_id(db, premise_id)
    _ensure_superhost(premise, current_user)
    return invitations_for_hosts(db, premise.host_ids, params)


def is_superhost_of(db: Session, user_id: int, host_id: int) -> bool:
    return db.query(PremiseHost.id).join(Premise, Premise.id == PremiseHost.premise_id).filter(
        Premise.superhost_id == user_id,
        PremiseHost.host_id == host_id,
    ).first() is not None


def get_managed_invitation(db: Session, invitation_id: UUID, current_user: UserToken) -> Invitation:
    """Invitation the caller may act on: own, a premise host's (superhost) or any (super admin)."""
    invitation = get_invitation_by_id(db, invitation_id)
    if current_user.is_super_admin or invitation.host_id == current_user.user_id:
        return invitation
    if current_user.user_id is not None and is_superhost_of(db, current_user.user_id, invitation.host_id):
        return invitation
    return forbidden("You are not the host of this invitation")
