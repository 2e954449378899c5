import uuid
from datetime import datetime
from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship
from shared.core.database import Base


class Premise(Base):
    __tablename__ = "premises"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(128), nullable=False)
    superhost_id = Column(Integer, ForeignKey("providers.id"), nullable=False)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow)

    hosts = relationship(
        "PremiseHost",
        back_populates="premise",
        order_by="PremiseHost.id",
        cascade="all, delete-orphan",
    )

    @property
    def host_ids(self) -> list:
        return [h.host_id for h in self.hosts]


class PremiseHost(Base):
    __tablename__ = "premise_hosts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    premise_id = Column(Uuid(as_uuid=True), ForeignKey(
        "premises.id", ondelete="CASCADE"), nullable=False)
    host_id = Column(Integer, ForeignKey("providers.id"), nullable=False)

    premise = relationship("Premise", back_populates="hosts")

    __table_args__ = (
        UniqueConstraint("premise_id", "host_id", name="uq_premise_host"),
    )
