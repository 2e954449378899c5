from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...schemas.system.notifications_schemas import (
    NotificationListResponse, NotificationOut, UnreadCount
)
from ...crud.system import notifications_crud as crud
from shared.core.database import get_db
from shared.core.auth import validate_current_token
from shared.core.schemas import CommonQueryParams, UserToken

router = APIRouter(prefix="/api/inbox",
                   tags=["inbox"], dependencies=[Depends(validate_current_token)])


@router.post("/all", response_model=NotificationListResponse)
def get_all_notifications(
    params: CommonQueryParams = None,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    return crud.get_all_notifications(db, current_user.phone, params or CommonQueryParams())


@router.get("/unread-count", response_model=UnreadCount)
def get_unread_count(
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    return crud.get_unread_count(db, current_user.phone)


@router.put("/{notification_id}/read", response_model=NotificationOut)
def mark_read(
    notification_id: int,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    return crud.mark_read(db, current_user.phone, notification_id)
