from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...schemas.membership.providers_schemas import OrganizationCreate, OrganizationOut
from ...schemas.membership.join_requests_schemas import (
    JoinRequestResult, PendingRequestsResponse, VoteRequest
)
from ...crud.membership import providers_crud
from ...crud.membership import join_requests_crud as crud
from shared.core.database import get_db
from shared.core.auth import require_profile, require_super_admin, validate_current_token
from shared.core.schemas import UserToken

router = APIRouter(
    prefix="/api/organizations",
    tags=["organizations"],
    dependencies=[Depends(validate_current_token)]
)


@router.post("/", response_model=OrganizationOut)
def create_organization(data: OrganizationCreate, db: Session = Depends(get_db)):
    return providers_crud.create_organization(db, data)


@router.get("/join-requests/pending", response_model=PendingRequestsResponse)
def get_all_pending_requests(
        db: Session = Depends(get_db),
        current_user: UserToken = Depends(require_super_admin)):
    return providers_crud.get_all_pending_requests(db)


@router.get("/{organization_id}", response_model=OrganizationOut)
def get_organization(organization_id: int, db: Session = Depends(get_db)):
    return providers_crud.get_organization(db, organization_id)


@router.post("/{organization_id}/join", response_model=JoinRequestResult)
def submit_join_request(
        organization_id: int,
        db: Session = Depends(get_db),
        current_user: UserToken = Depends(require_profile)):
    return crud.submit_join_request(db, organization_id, current_user.user_id)


@router.get("/{organization_id}/join-requests/pending", response_model=PendingRequestsResponse)
def get_pending_requests(organization_id: int, db: Session = Depends(get_db)):
    return crud.pending_requests_for(db, organization_id)


@router.post("/{organization_id}/join-requests/{user_id}/vote", response_model=JoinRequestResult)
def cast_leader_vote(
        organization_id: int,
        user_id: int,
        data: VoteRequest,
        db: Session = Depends(get_db),
        current_user: UserToken = Depends(validate_current_token)):
    return crud.cast_leader_vote(db, organization_id, user_id, current_user.phone, data.decision)
