from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, Enum, ForeignKey, Index, UniqueConstraint, text
from sqlalchemy.orm import relationship
from shared.core.database import Base
from shared.utils.enums import JoinRequestStatus, VoteDecision


class JoinRequest(Base):
    __tablename__ = "join_requests"

    # autoincrement id doubles as submission order
    id = Column(Integer, primary_key=True, autoincrement=True)
    organization_id = Column(Integer, ForeignKey(
        "providers.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Integer, ForeignKey(
        "providers.id", ondelete="CASCADE"), nullable=False)
    user_name = Column(String(128), nullable=False)
    user_phone = Column(String(20), nullable=False)
    status = Column(
        Enum(JoinRequestStatus, name="join_request_status"),
        default=JoinRequestStatus.pending,
        nullable=False
    )
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow)
    decided_at = Column(DateTime(timezone=True), nullable=True)

    organization = relationship(
        "Provider", back_populates="join_requests", foreign_keys=[organization_id])
    votes = relationship(
        "JoinRequestVote",
        back_populates="join_request",
        order_by="JoinRequestVote.id",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        Index(
            "uq_join_request_pending",
            "organization_id",
            "user_id",
            unique=True,
            postgresql_where=text("status = 'pending'"),
            sqlite_where=text("status = 'pending'"),
        ),
    )

    @property
    def approvals(self) -> list:
        return [v.leader_phone for v in self.votes if v.decision == VoteDecision.approve]

    @property
    def rejections(self) -> list:
        return [v.leader_phone for v in self.votes if v.decision == VoteDecision.reject]

    def vote_of(self, leader_phone: str):
        for vote in self.votes:
            if vote.leader_phone == leader_phone:
                return vote.decision
        return None


class JoinRequestVote(Base):
    """One leader's vote. The unique key keeps approvals and rejections disjoint."""
    __tablename__ = "join_request_votes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    join_request_id = Column(Integer, ForeignKey(
        "join_requests.id", ondelete="CASCADE"), nullable=False)
    leader_phone = Column(String(20), nullable=False)
    decision = Column(Enum(VoteDecision, name="vote_decision"), nullable=False)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow)

    join_request = relationship("JoinRequest", back_populates="votes")

    __table_args__ = (
        UniqueConstraint("join_request_id", "leader_phone",
                         name="uq_join_request_vote_leader"),
    )
