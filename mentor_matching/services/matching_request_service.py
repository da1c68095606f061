# mentor_matching/services/matching_request_service.py
import logging
from contextlib import contextmanager
from typing import Any, Callable, List, Optional, Union
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError

from ..models import (
    PENDING_PER_MENTEE_INDEX,
    UNIQUE_PAIR_CONSTRAINT,
    MatchingRequest,
    MatchingStatus,
    UserRole,
    can_transition,
)
from ..schemas import Actor, MatchingRequestCreate, RequestDirection
from ..constants import ErrorMessages
from ..core.request_store import RequestStore
from ..exceptions import BusinessLogicError, ConflictError, ForbiddenError, NotFoundError
from ..utils.validation_utils import ValidationUtils

logger = logging.getLogger(__name__)

# PostgreSQL serialization_failure / deadlock_detected
_LOCK_CONTENTION_PGCODES = {"40001", "40P01"}

def _is_lock_contention(error: OperationalError) -> bool:
    if getattr(error.orig, "pgcode", None) in _LOCK_CONTENTION_PGCODES:
        return True
    return "database is locked" in str(error.orig)

def _violated_constraint(error: IntegrityError) -> str:
    """Names the unique rule behind an IntegrityError raised while inserting a request."""
    # psycopg2 exposes the constraint name directly
    diag = getattr(error.orig, "diag", None)
    name = getattr(diag, "constraint_name", None)
    if name in (UNIQUE_PAIR_CONSTRAINT, PENDING_PER_MENTEE_INDEX):
        return name

    message = str(error.orig)
    for constraint in (UNIQUE_PAIR_CONSTRAINT, PENDING_PER_MENTEE_INDEX):
        if constraint in message:
            return constraint

    # SQLite names the columns instead: the pair rule is the only one covering mentor_id
    if "mentor_id" in message:
        return UNIQUE_PAIR_CONSTRAINT
    return PENDING_PER_MENTEE_INDEX

def _integrity_conflict_message(error: IntegrityError) -> str:
    if _violated_constraint(error) == UNIQUE_PAIR_CONSTRAINT:
        return ErrorMessages.DUPLICATE_REQUEST
    return ErrorMessages.PENDING_REQUEST_EXISTS

class MatchingRequestService:
    """
    Lifecycle engine for matching requests.

    pending -> accepted | rejected | cancelled; every other state is terminal.
    Each public operation runs in its own transaction and either commits fully
    or raises a BusinessLogicError subclass after rolling back.
    """

    def __init__(self, db: Session, mentor_exists: Optional[Callable[[int], bool]] = None):
        self.db = db
        self.store = RequestStore(db)
        self.validator = ValidationUtils(db)
        self.mentor_exists = mentor_exists or self.validator.mentor_exists

    @contextmanager
    def _transaction(self, operation: str):
        try:
            yield
            self.db.commit()
        except BusinessLogicError as e:
            self.db.rollback()
            logger.warning(f"{operation} refused: {e}")
            raise
        except IntegrityError as e:
            self.db.rollback()
            logger.warning(f"{operation} hit a constraint violation: {e.orig}")
            raise ConflictError(_integrity_conflict_message(e)) from e
        except OperationalError as e:
            self.db.rollback()
            if _is_lock_contention(e):
                logger.warning(f"{operation} lost a lock race: {e.orig}")
                raise ConflictError(ErrorMessages.CONCURRENT_UPDATE) from e
            logger.error(f"Database error during {operation}: {e}")
            raise
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Database error during {operation}: {e}")
            raise

    def create_request(self, actor: Actor, payload: Union[MatchingRequestCreate, Any]) -> MatchingRequest:
        """Creates a PENDING request from a mentee to a mentor. payload may be a raw JSON body."""
        self.validator.require_role(actor, UserRole.MENTEE, ErrorMessages.MENTEE_ONLY_CREATE)
        if not isinstance(payload, MatchingRequestCreate):
            payload = self.validator.parse_create_payload(payload)
        mentee_id = self.validator.validate_create_payload(actor, payload)

        with self._transaction("create"):
            if not self.mentor_exists(payload.mentor_id):
                raise NotFoundError(ErrorMessages.MENTOR_NOT_FOUND)

            if self.store.find_by_mentee_and_mentor(mentee_id, payload.mentor_id):
                raise ConflictError(ErrorMessages.DUPLICATE_REQUEST)

            # Backed by the partial unique index when two creates slip past this check together
            if self.store.find_pending_by_mentee(mentee_id):
                raise ConflictError(ErrorMessages.PENDING_REQUEST_EXISTS)

            request = self.store.insert(MatchingRequest(
                mentee_id=mentee_id,
                mentor_id=payload.mentor_id,
                message=payload.message,
                status=MatchingStatus.PENDING.value
            ))

        logger.info(f"Matching request {request.id} created: mentee {mentee_id} -> mentor {payload.mentor_id}")
        return request

    def accept_request(self, actor: Actor, request_id: int) -> MatchingRequest:
        """
        Accepts a PENDING request and rejects every other PENDING request to the
        same mentor in the same transaction.
        """
        self.validator.require_role(actor, UserRole.MENTOR, ErrorMessages.MENTOR_ONLY_ACCEPT)

        with self._transaction("accept"):
            request = self.store.get_by_id(request_id, refresh=True)
            if request is None or request.mentor_id != actor.id:
                raise NotFoundError(ErrorMessages.REQUEST_NOT_FOUND)
            if not can_transition(request.status, MatchingStatus.ACCEPTED):
                raise ConflictError(ErrorMessages.ALREADY_PROCESSED)

            changed = self.store.update_status(
                request_id, MatchingStatus.PENDING, MatchingStatus.ACCEPTED, mentor_id=actor.id
            )
            if changed == 0:
                raise ConflictError(ErrorMessages.CONCURRENT_UPDATE)

            auto_rejected = self.store.reject_other_pending(actor.id, request_id)
            request = self.store.get_by_id(request_id, refresh=True)

        logger.info(f"Auto-rejected {auto_rejected} other requests for mentor {actor.id}")
        logger.info(f"Matching request {request_id} accepted by mentor {actor.id}")
        return request

    def reject_request(self, actor: Actor, request_id: int) -> MatchingRequest:
        """Rejects a PENDING request addressed to the acting mentor"""
        self.validator.require_role(actor, UserRole.MENTOR, ErrorMessages.MENTOR_ONLY_REJECT)

        with self._transaction("reject"):
            changed = self.store.update_status(
                request_id, MatchingStatus.PENDING, MatchingStatus.REJECTED, mentor_id=actor.id
            )
            # Missing, someone else's, and already processed all look the same to the caller
            if changed == 0:
                raise NotFoundError(ErrorMessages.REQUEST_NOT_FOUND_OR_PROCESSED)
            request = self.store.get_by_id(request_id, refresh=True)

        logger.info(f"Matching request {request_id} rejected by mentor {actor.id}")
        return request

    def cancel_request(self, actor: Actor, request_id: int) -> MatchingRequest:
        """
        Cancels the acting mentee's PENDING request.
        Cancelling an already cancelled request returns it unchanged so client retries succeed.
        """
        self.validator.require_role(actor, UserRole.MENTEE, ErrorMessages.MENTEE_ONLY_CANCEL)

        with self._transaction("cancel"):
            request = self.store.get_by_id(request_id, refresh=True)
            if request is None:
                raise NotFoundError(ErrorMessages.REQUEST_NOT_FOUND)
            if request.mentee_id != actor.id:
                raise ForbiddenError(ErrorMessages.NOT_REQUEST_OWNER)

            current = MatchingStatus(request.status)
            if current is MatchingStatus.CANCELLED:
                logger.info(f"Matching request {request_id} already cancelled")
                return request
            if current.is_terminal:
                raise ConflictError(ErrorMessages.CANNOT_CANCEL.format(status=current.value))

            changed = self.store.update_status(
                request_id, MatchingStatus.PENDING, MatchingStatus.CANCELLED, mentee_id=actor.id
            )
            request = self.store.get_by_id(request_id, refresh=True)
            if changed == 0 and request.status != MatchingStatus.CANCELLED.value:
                raise ConflictError(ErrorMessages.CANNOT_CANCEL.format(status=request.status))

        logger.info(f"Matching request {request_id} cancelled by mentee {actor.id}")
        return request

    def list_requests(
        self,
        actor: Actor,
        direction: RequestDirection,
        status: Optional[MatchingStatus] = None
    ) -> List[MatchingRequest]:
        """Outgoing requests for a mentee or incoming requests for a mentor, newest first"""
        direction = RequestDirection(direction)
        if direction is RequestDirection.OUTGOING:
            self.validator.require_role(actor, UserRole.MENTEE, ErrorMessages.MENTEE_ONLY_OUTGOING)
        else:
            self.validator.require_role(actor, UserRole.MENTOR, ErrorMessages.MENTOR_ONLY_INCOMING)

        with self._transaction(f"list {direction.value}"):
            if direction is RequestDirection.OUTGOING:
                requests = self.store.list_by_mentee(actor.id, status)
            else:
                requests = self.store.list_by_mentor(actor.id, status)
        return requests

    def list_outgoing(self, actor: Actor, status: Optional[MatchingStatus] = None) -> List[MatchingRequest]:
        return self.list_requests(actor, RequestDirection.OUTGOING, status)

    def list_incoming(self, actor: Actor, status: Optional[MatchingStatus] = None) -> List[MatchingRequest]:
        return self.list_requests(actor, RequestDirection.INCOMING, status)
