# mentor_matching/utils/validation_utils.py
from typing import Any
from pydantic import ValidationError
from sqlalchemy.orm import Session
from ..models import User, UserRole
from ..schemas import Actor, MatchingRequestCreate
from ..constants import ErrorMessages
from ..exceptions import ForbiddenRoleError, InvalidArgumentError

class ValidationUtils:
    def __init__(self, db: Session):
        self.db = db

    def mentor_exists(self, mentor_id: int) -> bool:
        """Default mentor directory lookup: a user row with role mentor"""
        mentor = self.db.query(User.id).filter(
            User.id == mentor_id,
            User.role == UserRole.MENTOR.value
        ).first()
        return mentor is not None

    @staticmethod
    def require_role(actor: Actor, role: UserRole, message: str):
        if actor.role != role:
            raise ForbiddenRoleError(message)

    @staticmethod
    def validate_create_payload(actor: Actor, payload: MatchingRequestCreate) -> int:
        """Checks a create payload before any store access. Returns the mentee id to use."""
        if not payload.mentor_id or not payload.message or not payload.message.strip():
            raise InvalidArgumentError(ErrorMessages.MENTOR_AND_MESSAGE_REQUIRED)

        # menteeId is optional; when supplied it must be the caller
        if payload.mentee_id is not None and payload.mentee_id != actor.id:
            raise InvalidArgumentError(ErrorMessages.SEND_AS_YOURSELF)
        return actor.id

    @staticmethod
    def parse_create_payload(body: Any) -> MatchingRequestCreate:
        """Turns a raw JSON body into a create payload; malformed bodies are InvalidArgumentError"""
        if body is None:
            raise InvalidArgumentError(ErrorMessages.MENTOR_AND_MESSAGE_REQUIRED)
        try:
            return MatchingRequestCreate.model_validate(body)
        except ValidationError as e:
            fields = ", ".join(".".join(str(part) for part in err["loc"]) or "body" for err in e.errors())
            raise InvalidArgumentError(f"{ErrorMessages.MALFORMED_PAYLOAD}: {fields}") from e
