# mentor_matching/utils/response_enricher.py
from typing import Dict, Any, List
from ..models import MatchingRequest
from ..schemas import MatchingRequestResponse, RequestDirection

class ResponseEnricher:
    @staticmethod
    def enrich_requests(requests: List[MatchingRequest], direction: RequestDirection) -> List[Dict[str, Any]]:
        """Adds the counterpart's display name; relies on the store's eager loading"""
        enriched = []
        for req in requests:
            req_dict = MatchingRequestResponse.model_validate(req).model_dump()
            if direction is RequestDirection.OUTGOING:
                req_dict['mentor_name'] = req.mentor.name if req.mentor and req.mentor.name else f"Mentor {req.mentor_id}"
            else:
                req_dict['mentee_name'] = req.mentee.name if req.mentee and req.mentee.name else f"Mentee {req.mentee_id}"
            enriched.append(req_dict)
        return enriched

    @staticmethod
    def single_request(request: MatchingRequest) -> Dict[str, Any]:
        """Serializes a record returned by a lifecycle operation"""
        return MatchingRequestResponse.model_validate(request).model_dump()
