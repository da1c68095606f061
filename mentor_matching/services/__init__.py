# mentor_matching/services/__init__.py
from .matching_request_service import MatchingRequestService

__all__ = ["MatchingRequestService"]
