from datetime import datetime
from sqlalchemy import Boolean, Column, Integer, String, Float, DateTime, Enum, Text
from sqlalchemy.orm import relationship
from shared.core.database import Base
from shared.helpers.phone_helper import same_phone
from shared.utils.enums import AccountType, ProfileType


class Provider(Base):
    """A directory profile. Organizations are providers with account_type organization."""
    __tablename__ = "providers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(128), nullable=False)
    phone = Column(String(20), nullable=False, index=True)  # normalized
    whatsapp = Column(String(20), nullable=True)
    service = Column(String(128), nullable=True)
    category = Column(String(64), nullable=True)
    location = Column(String(128), nullable=True)
    about = Column(Text, nullable=True)
    avatar_url = Column(String(512), nullable=True)
    cover_image_url = Column(String(512), nullable=True)
    rating = Column(Float, default=0, nullable=False)
    distance_km = Column(Float, default=0, nullable=False)
    hourly_rate = Column(Float, default=0, nullable=False)
    rate_type = Column(String(32), default="per hour", nullable=False)
    currency = Column(String(8), default="KES", nullable=False)
    is_verified = Column(Boolean, default=False, nullable=False)
    is_online = Column(Boolean, default=False, nullable=False)

    account_type = Column(Enum(AccountType, name="account_type"),
                          default=AccountType.individual, nullable=False)
    profile_type = Column(Enum(ProfileType, name="profile_type"),
                          default=ProfileType.individual, nullable=False)

    # Leadership of a group profile, stored normalized
    chairperson_phone = Column(String(20), nullable=True)
    secretary_phone = Column(String(20), nullable=True)
    treasurer_phone = Column(String(20), nullable=True)

    created_at = Column(DateTime(timezone=True), default=datetime.utcnow)

    join_requests = relationship(
        "JoinRequest",
        back_populates="organization",
        foreign_keys="JoinRequest.organization_id",
        order_by="JoinRequest.id",
        cascade="all, delete-orphan",
    )
    members = relationship(
        "OrganizationMember",
        back_populates="organization",
        foreign_keys="OrganizationMember.organization_id",
        order_by="OrganizationMember.id",
        cascade="all, delete-orphan",
    )

    @property
    def is_organization(self) -> bool:
        return self.account_type == AccountType.organization

    @property
    def leaders(self) -> dict:
        return {
            "chairperson": self.chairperson_phone,
            "secretary": self.secretary_phone,
            "treasurer": self.treasurer_phone,
        }

    def leader_role_of(self, phone: str):
        for role, leader_phone in self.leaders.items():
            if same_phone(leader_phone, phone):
                return role
        return None
