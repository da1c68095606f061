# mentor_matching/models.py
from datetime import datetime, timezone
from enum import Enum
from sqlalchemy import CheckConstraint, Column, Integer, String, Text, DateTime, ForeignKey, Index, Sequence, UniqueConstraint, text
from sqlalchemy.orm import relationship

from .database import Base

def utcnow() -> datetime:
    return datetime.now(timezone.utc)

class UserRole(str, Enum):
    MENTOR = "mentor"
    MENTEE = "mentee"

# Enum for Matching Request Status
class MatchingStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected" # Mentor rejects, or another request to the same mentor was accepted
    CANCELLED = "cancelled" # Mentee cancels a PENDING request

    @property
    def is_terminal(self) -> bool:
        return self is not MatchingStatus.PENDING

UNIQUE_PAIR_CONSTRAINT = "uq_matching_requests_mentee_mentor"
PENDING_PER_MENTEE_INDEX = "uq_matching_requests_pending_mentee"

# Only PENDING has outgoing transitions
ALLOWED_TRANSITIONS = {
    MatchingStatus.PENDING: frozenset({MatchingStatus.ACCEPTED, MatchingStatus.REJECTED, MatchingStatus.CANCELLED}),
    MatchingStatus.ACCEPTED: frozenset(),
    MatchingStatus.REJECTED: frozenset(),
    MatchingStatus.CANCELLED: frozenset(),
}

def can_transition(current: MatchingStatus, target: MatchingStatus) -> bool:
    return target in ALLOWED_TRANSITIONS[MatchingStatus(current)]

# Users are owned by the external auth component; this service only reads them.
class User(Base):
    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("role IN ('mentor', 'mentee')", name="ck_users_role"),
    )

    id = Column(Integer, Sequence('user_id_seq'), primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    name = Column(String, nullable=True)
    role = Column(String, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    sent_requests = relationship("MatchingRequest", back_populates="mentee", foreign_keys="MatchingRequest.mentee_id")
    received_requests = relationship("MatchingRequest", back_populates="mentor", foreign_keys="MatchingRequest.mentor_id")

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}', role='{self.role}')>"

class MatchingRequest(Base):
    __tablename__ = "matching_requests"
    __table_args__ = (
        # One request per mentee/mentor pair, whatever its status
        UniqueConstraint("mentee_id", "mentor_id", name=UNIQUE_PAIR_CONSTRAINT),
        # At most one PENDING request per mentee
        Index(
            PENDING_PER_MENTEE_INDEX,
            "mentee_id",
            unique=True,
            postgresql_where=text("status = 'pending'"),
            sqlite_where=text("status = 'pending'"),
        ),
        Index("ix_matching_requests_mentor_created", "mentor_id", "created_at"),
        Index("ix_matching_requests_mentee_created", "mentee_id", "created_at"),
        CheckConstraint(
            "status IN ('pending', 'accepted', 'rejected', 'cancelled')",
            name="ck_matching_requests_status",
        ),
    )

    id = Column(Integer, Sequence('matching_request_id_seq'), primary_key=True, index=True)

    mentee_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    mentor_id = Column(Integer, ForeignKey("users.id"), nullable=False)

    message = Column(Text, nullable=False)
    status = Column(String, default=MatchingStatus.PENDING.value, nullable=False)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    mentee = relationship("User", back_populates="sent_requests", foreign_keys=[mentee_id])
    mentor = relationship("User", back_populates="received_requests", foreign_keys=[mentor_id])

    def __repr__(self):
        return f"<MatchingRequest(id={self.id}, mentee_id={self.mentee_id}, mentor_id={self.mentor_id}, status='{self.status}')>"
