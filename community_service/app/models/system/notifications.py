from datetime import datetime
from sqlalchemy import Boolean, Column, DateTime, Enum, Integer, String, Uuid
from shared.core.database import Base
from shared.utils.enums import NotificationActionType


class Notification(Base):
    """Inbox message. A null recipient_phone is a broadcast."""
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, autoincrement=True)
    recipient_phone = Column(String(20), nullable=True, index=True)
    sender = Column(String(128), nullable=False)
    subject = Column(String(255), nullable=False)
    body = Column(String(1000), nullable=False)
    posted_date = Column(DateTime, default=datetime.utcnow)
    read = Column(Boolean, default=False, nullable=False)

    action_type = Column(
        Enum(NotificationActionType, name="notification_action_type"), nullable=True)
    action_organization_id = Column(Integer, nullable=True)
    action_requester_id = Column(Integer, nullable=True)
    action_invitation_id = Column(Uuid(as_uuid=True), nullable=True)

    @property
    def action(self):
        if self.action_type is None:
            return None
        return {
            "type": self.action_type,
            "organization_id": self.action_organization_id,
            "requester_id": self.action_requester_id,
            "invitation_id": self.action_invitation_id,
        }
