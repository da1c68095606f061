from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field
from .models import MatchingStatus, UserRole

# --- Actor supplied by the authentication layer ---
class Actor(BaseModel):
    id: int
    role: UserRole

    model_config = ConfigDict(frozen=True)

class TokenData(BaseModel):
    user_id: Optional[int] = None
    role: Optional[UserRole] = None

class RequestDirection(str, Enum):
    OUTGOING = "outgoing" # requests a mentee has sent
    INCOMING = "incoming" # requests a mentor has received

# --- Input Models ---

class MatchingRequestCreate(BaseModel):
    # Fields stay optional here so missing values reach the service and surface as InvalidArgumentError
    mentor_id: Optional[int] = Field(None, alias="mentorId", description="The mentor to send the request to.")
    mentee_id: Optional[int] = Field(None, alias="menteeId", description="Optional; must match the authenticated mentee.")
    message: Optional[str] = Field(None, description="Message for the mentor.")

    model_config = ConfigDict(populate_by_name=True)

# --- Output Models ---

class MatchingRequestResponse(BaseModel):
    id: int
    mentee_id: int = Field(..., serialization_alias="menteeId")
    mentee_name: Optional[str] = Field(None, serialization_alias="menteeName") # populated on incoming listings
    mentor_id: int = Field(..., serialization_alias="mentorId")
    mentor_name: Optional[str] = Field(None, serialization_alias="mentorName") # populated on outgoing listings
    message: str
    status: MatchingStatus
    created_at: datetime = Field(..., serialization_alias="createdAt")
    updated_at: datetime = Field(..., serialization_alias="updatedAt")

    model_config = {
        "from_attributes": True,
        "arbitrary_types_allowed": True
    }
