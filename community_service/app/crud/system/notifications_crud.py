import logging
from typing import Optional
from uuid import UUID
from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from shared.core.schemas import CommonQueryParams
from shared.helpers.json_response_helper import not_found
from shared.helpers.phone_helper import normalize_phone
from shared.utils.enums import NotificationActionType
from ...models.system.notifications import Notification
from ...schemas.system.notifications_schemas import NotificationOut

logger = logging.getLogger(__name__)


def notify(
    db: Session,
    recipient_phone: Optional[str],
    sender: str,
    subject: str,
    body: str,
    action_type: Optional[NotificationActionType] = None,
    organization_id: Optional[int] = None,
    requester_id: Optional[int] = None,
    invitation_id: Optional[UUID] = None,
) -> Notification:
    """Queue an inbox message inside the caller's transaction (no commit)."""
    notification = Notification(
        recipient_phone=normalize_phone(recipient_phone),
        sender=sender,
        subject=subject,
        body=body,
        action_type=action_type,
        action_organization_id=organization_id,
        action_requester_id=requester_id,
        action_invitation_id=invitation_id,
    )
    db.add(notification)
    db.flush()
    logger.debug("Queued notification %s for %s",
                 notification.id, notification.recipient_phone or "everyone")
    return notification


def inbox_query(db: Session, phone: str):
    return db.query(Notification).filter(
        or_(
            Notification.recipient_phone == normalize_phone(phone),
            Notification.recipient_phone.is_(None),
        )
    )


def get_all_notifications(db: Session, phone: str, params: CommonQueryParams):
    notification_query = inbox_query(db, phone)

    if params.search:
        search_term = f"%{params.search}%"
        notification_query = notification_query.filter(
            or_(Notification.subject.ilike(search_term),
                Notification.body.ilike(search_term)))

    total = notification_query.with_entities(
        func.count(Notification.id.distinct())).scalar()
    notifications = (
        notification_query
        .order_by(Notification.posted_date.desc(), Notification.id.desc())
        .offset(params.skip)
        .limit(params.limit)
        .all()
    )

    result = [NotificationOut.model_validate(n) for n in notifications]
    return {"notifications": result, "total": total}


def get_unread_count(db: Session, phone: str) -> dict:
    unread = inbox_query(db, phone).filter(
        Notification.read == False).count()
    return {"unread": unread}


def mark_read(db: Session, phone: str, notification_id: int) -> Notification:
    notification = inbox_query(db, phone).filter(
        Notification.id == notification_id).first()
    if not notification:
        return not_found("Notification not found")

    notification.read = True
    db.commit()
    db.refresh(notification)
    return notification
