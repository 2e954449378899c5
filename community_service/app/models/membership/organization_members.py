from datetime import datetime
from sqlalchemy import Boolean, Column, Integer, String, Float, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from shared.core.database import Base


class OrganizationMember(Base):
    """Point-in-time copy of a provider taken when the join request was approved."""
    __tablename__ = "organization_members"

    id = Column(Integer, primary_key=True, autoincrement=True)
    organization_id = Column(Integer, ForeignKey(
        "providers.id", ondelete="CASCADE"), nullable=False)
    provider_id = Column(Integer, nullable=False)  # no FK: snapshot outlives the profile
    name = Column(String(128), nullable=False)
    avatar_url = Column(String(512), nullable=True)
    rating = Column(Float, default=0)
    distance_km = Column(Float, default=0)
    hourly_rate = Column(Float, default=0)
    rate_type = Column(String(32), nullable=True)
    phone = Column(String(20), nullable=False)
    whatsapp = Column(String(20), nullable=True)
    is_online = Column(Boolean, default=False)
    joined_at = Column(DateTime(timezone=True), default=datetime.utcnow)

    organization = relationship(
        "Provider", back_populates="members", foreign_keys=[organization_id])
