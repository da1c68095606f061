from typing import List, Optional
from sqlalchemy import update
from sqlalchemy.orm import Session, joinedload

from ..models import MatchingRequest, MatchingStatus, utcnow

class RequestStore:
    """
    Reads and writes matching-request rows on the caller's session.

    The store never commits: transaction boundaries belong to the service, so
    several store calls can form one atomic unit.
    """

    def __init__(self, db: Session):
        self.db = db

    def _newest_first(self, query):
        # id breaks ties between rows created within the same clock tick
        return query.order_by(MatchingRequest.created_at.desc(), MatchingRequest.id.desc())

    def insert(self, record: MatchingRequest) -> MatchingRequest:
        """Adds the record and flushes so the database assigns its id and checks constraints."""
        self.db.add(record)
        self.db.flush()
        return record

    def get_by_id(self, request_id: int, refresh: bool = False) -> Optional[MatchingRequest]:
        """Loads one record; refresh=True overwrites any stale copy held by the session."""
        query = self.db.query(MatchingRequest).filter(MatchingRequest.id == request_id)
        if refresh:
            query = query.populate_existing()
        return query.first()

    def find_by_mentee_and_mentor(self, mentee_id: int, mentor_id: int) -> Optional[MatchingRequest]:
        return self.db.query(MatchingRequest).filter(
            MatchingRequest.mentee_id == mentee_id,
            MatchingRequest.mentor_id == mentor_id
        ).first()

    def find_pending_by_mentee(self, mentee_id: int) -> Optional[MatchingRequest]:
        return self._newest_first(self.db.query(MatchingRequest).filter(
            MatchingRequest.mentee_id == mentee_id,
            MatchingRequest.status == MatchingStatus.PENDING.value
        )).first()

    def update_status(
        self,
        request_id: int,
        expected_status: MatchingStatus,
        new_status: MatchingStatus,
        mentor_id: Optional[int] = None,
        mentee_id: Optional[int] = None,
    ) -> int:
        """
        Compare-and-set on status. Applies only while the row is still in expected_status
        (and, when given, still belongs to mentor_id / mentee_id).
        Returns the number of rows changed; 0 means the precondition no longer holds.
        """
        stmt = update(MatchingRequest).where(
            MatchingRequest.id == request_id,
            MatchingRequest.status == MatchingStatus(expected_status).value
        )
        if mentor_id is not None:
            stmt = stmt.where(MatchingRequest.mentor_id == mentor_id)
        if mentee_id is not None:
            stmt = stmt.where(MatchingRequest.mentee_id == mentee_id)
        stmt = stmt.values(
            status=MatchingStatus(new_status).value,
            updated_at=utcnow()
        ).execution_options(synchronize_session=False)

        result = self.db.execute(stmt)
        return result.rowcount

    def reject_other_pending(self, mentor_id: int, exclude_id: int) -> int:
        """Rejects every PENDING request to mentor_id except exclude_id. Returns how many changed."""
        stmt = update(MatchingRequest).where(
            MatchingRequest.mentor_id == mentor_id,
            MatchingRequest.id != exclude_id,
            MatchingRequest.status == MatchingStatus.PENDING.value
        ).values(
            status=MatchingStatus.REJECTED.value,
            updated_at=utcnow()
        ).execution_options(synchronize_session=False)

        result = self.db.execute(stmt)
        return result.rowcount

    def list_by_mentor(self, mentor_id: int, status: Optional[MatchingStatus] = None) -> List[MatchingRequest]:
        """All requests received by a mentor, newest first, with the mentee eagerly loaded"""
        query = self.db.query(MatchingRequest).options(
            joinedload(MatchingRequest.mentee)
        ).filter(MatchingRequest.mentor_id == mentor_id)
        if status is not None:
            query = query.filter(MatchingRequest.status == MatchingStatus(status).value)
        return self._newest_first(query).all()

    def list_by_mentee(self, mentee_id: int, status: Optional[MatchingStatus] = None) -> List[MatchingRequest]:
        """All requests sent by a mentee, newest first, with the mentor eagerly loaded"""
        query = self.db.query(MatchingRequest).options(
            joinedload(MatchingRequest.mentor)
        ).filter(MatchingRequest.mentee_id == mentee_id)
        if status is not None:
            query = query.filter(MatchingRequest.status == MatchingStatus(status).value)
        return self._newest_first(query).all()
