from uuid import UUID
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...schemas.gate_pass.invitation_schemas import (
    ExpireRequest, ExpireResult, HostBoard, InvitationResult,
    InvitationsResponse, InviteCreate, KnockCreate, KnockDecisionRequest,
    RedeemRequest, RedeemResult
)
from ...crud.gate_pass import invitation_crud as crud
from ...crud.gate_pass.premise_crud import get_managed_invitation
from shared.core.database import get_db
from shared.core.auth import require_profile, require_super_admin, validate_current_token
from shared.core.schemas import CommonQueryParams, UserToken

router = APIRouter(
    prefix="/api/invitations",
    tags=["invitations"],
    dependencies=[Depends(validate_current_token)]
)


@router.post("/invite", response_model=InvitationResult)
def create_invite(
        data: InviteCreate,
        db: Session = Depends(get_db),
        current_user: UserToken = Depends(require_profile)):
    return crud.create_invite(db, current_user.user_id, data.visitor_phone,
                              data.visit_date, data.host_apartment)


@router.post("/knock", response_model=InvitationResult)
def create_knock(
        data: KnockCreate,
        db: Session = Depends(get_db),
        current_user: UserToken = Depends(require_profile)):
    return crud.create_knock(db, data.host_id, data.host_apartment,
                             current_user.user_id, current_user.phone, data.visit_date)


@router.post("/{invitation_id}/decision", response_model=InvitationResult)
def decide_knock(
        invitation_id: UUID,
        data: KnockDecisionRequest,
        db: Session = Depends(get_db),
        current_user: UserToken = Depends(validate_current_token)):
    get_managed_invitation(db, invitation_id, current_user)
    return crud.decide_knock(db, invitation_id, data.decision)


@router.post("/{invitation_id}/cancel", response_model=InvitationResult)
def cancel_invite(
        invitation_id: UUID,
        db: Session = Depends(get_db),
        current_user: UserToken = Depends(validate_current_token)):
    get_managed_invitation(db, invitation_id, current_user)
    return crud.cancel_invite(db, invitation_id)


@router.post("/redeem", response_model=RedeemResult)
def redeem(data: RedeemRequest, db: Session = Depends(get_db)):
    return crud.redeem(db, data.access_code)


@router.get("/mine", response_model=InvitationsResponse)
def get_my_invitations(
        params: CommonQueryParams = Depends(),
        db: Session = Depends(get_db),
        current_user: UserToken = Depends(require_profile)):
    return crud.invitations_for_host(db, current_user.user_id, params)


@router.get("/board", response_model=HostBoard)
def get_host_board(
        db: Session = Depends(get_db),
        current_user: UserToken = Depends(require_profile)):
    return crud.host_board(db, current_user.user_id)


@router.get("/all", response_model=InvitationsResponse)
def get_all_invitations(
        params: CommonQueryParams = Depends(),
        db: Session = Depends(get_db),
        current_user: UserToken = Depends(require_super_admin)):
    return crud.all_invitations(db, params)


@router.post("/expire", response_model=ExpireResult)
def expire_invitations(
        data: ExpireRequest,
        db: Session = Depends(get_db),
        current_user: UserToken = Depends(require_super_admin)):
    return crud.expire_invitations(db, data.today)
