# mentor_matching/dependencies/service_dependencies.py
from fastapi import Depends
from sqlalchemy.orm import Session
from ..database import get_db
from ..services.matching_request_service import MatchingRequestService

def get_matching_request_service(db: Session = Depends(get_db)) -> MatchingRequestService:
    return MatchingRequestService(db)
