import uuid
from datetime import datetime
from sqlalchemy import Column, Date, DateTime, Enum, ForeignKey, Index, Integer, String, Uuid, text
from shared.core.database import Base
from shared.utils.enums import InvitationStatus, InvitationType

PENDING_ACCESS_CODE = "PENDING"


class Invitation(Base):
    __tablename__ = "invitations"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    host_id = Column(Integer, ForeignKey("providers.id"), nullable=False)
    host_name = Column(String(128), nullable=False)
    host_apartment = Column(String(32), nullable=True)
    visitor_phone = Column(String(20), nullable=False)
    visitor_id = Column(Integer, ForeignKey("providers.id"), nullable=True)
    visitor_name = Column(String(128), nullable=True)
    visitor_avatar = Column(String(512), nullable=True)
    visit_date = Column(Date, nullable=False)
    status = Column(
        Enum(InvitationStatus, name="invitation_status"),
        nullable=False,
        default=InvitationStatus.Active
    )
    access_code = Column(String(16), nullable=False,
                         default=PENDING_ACCESS_CODE)
    type = Column(Enum(InvitationType, name="invitation_type"), nullable=False)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow)
    updated_at = Column(DateTime(timezone=True),
                        default=datetime.utcnow, onupdate=datetime.utcnow)
    redeemed_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index("ix_invitation_access_code_status", "access_code", "status"),
        Index("ix_invitation_host", "host_id"),
        # one open knock per visitor and door
        Index(
            "uq_invitation_pending_knock",
            "host_id",
            "host_apartment",
            "visitor_id",
            unique=True,
            postgresql_where=text("status = 'Pending' AND type = 'Knock'"),
            sqlite_where=text("status = 'Pending' AND type = 'Knock'"),
        ),
    )
