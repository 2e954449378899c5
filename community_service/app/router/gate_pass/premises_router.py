from uuid import UUID
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...schemas.gate_pass.premise_schemas import PremiseCreate, PremiseHostAdd, PremiseOut
from ...schemas.gate_pass.invitation_schemas import InvitationsResponse
from ...crud.gate_pass import premise_crud as crud
from shared.core.database import get_db
from shared.core.auth import require_profile, validate_current_token
from shared.core.schemas import CommonQueryParams, UserToken

router = APIRouter(
    prefix="/api/premises",
    tags=["premises"],
    dependencies=[Depends(validate_current_token)]
)


@router.post("/", response_model=PremiseOut)
def register_premise(
        data: PremiseCreate,
        db: Session = Depends(get_db),
        current_user: UserToken = Depends(require_profile)):
    return crud.register_premise(db, data.name, current_user.user_id)


@router.post("/{premise_id}/hosts", response_model=PremiseOut)
def add_premise_host(
        premise_id: UUID,
        data: PremiseHostAdd,
        db: Session = Depends(get_db),
        current_user: UserToken = Depends(validate_current_token)):
    return crud.add_premise_host(db, premise_id, data.host_id, current_user)


@router.get("/{premise_id}/invitations", response_model=InvitationsResponse)
def get_premise_invitations(
        premise_id: UUID,
        params: CommonQueryParams = Depends(),
        db: Session = Depends(get_db),
        current_user: UserToken = Depends(validate_current_token)):
    return crud.premise_invitations(db, premise_id, current_user, params)
