from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from shared.core import auth
from shared.core.database import get_db
from shared.core.schemas import UserToken
from ..schemas import authschemas
from ..services import authservices

router = APIRouter(prefix="/api/auth", tags=["Karibu Auth"])


@router.post("/mobile/login", response_model=authschemas.AuthenticationResponse)
def mobile_login(
        request: authschemas.MobileLoginRequest,
        db: Session = Depends(get_db)):
    return authservices.mobile_login(db, request)


@router.get("/me", response_model=authschemas.MeResponse)
def me(current_user: UserToken = Depends(auth.validate_current_token)):
    return current_user
