# mentor_matching/routers/matching_router.py
from fastapi import APIRouter, Body, Depends, HTTPException, Path, Query
from typing import Any, Optional, List

from ..services import MatchingRequestService
from ..dependencies.auth_dependencies import get_current_actor
from ..dependencies.service_dependencies import get_matching_request_service
from ..utils.response_enricher import ResponseEnricher
from ..schemas import Actor, MatchingRequestResponse, RequestDirection
from ..models import MatchingStatus
from ..exceptions import BusinessLogicError

router = APIRouter(prefix="/api", tags=["matching"])

def _http_error(e: BusinessLogicError) -> HTTPException:
    return HTTPException(status_code=e.status_code, detail=str(e))

@router.post("/match-requests", response_model=MatchingRequestResponse, status_code=201)
def create_match_request(
    body: Any = Body(None),
    actor: Actor = Depends(get_current_actor),
    matching_service: MatchingRequestService = Depends(get_matching_request_service)
):
    """Send a matching request to a mentor (mentees only)"""
    try:
        request = matching_service.create_request(actor, body)
        return ResponseEnricher.single_request(request)
    except BusinessLogicError as e:
        raise _http_error(e)

@router.get("/match-requests/incoming", response_model=List[MatchingRequestResponse])
def get_incoming_requests(
    status: Optional[MatchingStatus] = Query(None, description="Filter by request status"),
    actor: Actor = Depends(get_current_actor),
    matching_service: MatchingRequestService = Depends(get_matching_request_service)
):
    """Requests received by the current mentor, newest first"""
    try:
        requests = matching_service.list_incoming(actor, status)
        return ResponseEnricher.enrich_requests(requests, RequestDirection.INCOMING)
    except BusinessLogicError as e:
        raise _http_error(e)

@router.get("/match-requests/outgoing", response_model=List[MatchingRequestResponse])
def get_outgoing_requests(
    status: Optional[MatchingStatus] = Query(None, description="Filter by request status"),
    actor: Actor = Depends(get_current_actor),
    matching_service: MatchingRequestService = Depends(get_matching_request_service)
):
    """Requests sent by the current mentee, newest first"""
    try:
        requests = matching_service.list_outgoing(actor, status)
        return ResponseEnricher.enrich_requests(requests, RequestDirection.OUTGOING)
    except BusinessLogicError as e:
        raise _http_error(e)

@router.put("/match-requests/{request_id}/accept", response_model=MatchingRequestResponse)
def accept_match_request(
    request_id: int = Path(..., description="The ID of the matching request"),
    actor: Actor = Depends(get_current_actor),
    matching_service: MatchingRequestService = Depends(get_matching_request_service)
):
    """Accept a request; the mentor's other pending requests are rejected automatically"""
    try:
        request = matching_service.accept_request(actor, request_id)
        return ResponseEnricher.single_request(request)
    except BusinessLogicError as e:
        raise _http_error(e)

@router.put("/match-requests/{request_id}/reject", response_model=MatchingRequestResponse)
def reject_match_request(
    request_id: int = Path(..., description="The ID of the matching request"),
    actor: Actor = Depends(get_current_actor),
    matching_service: MatchingRequestService = Depends(get_matching_request_service)
):
    """Reject a pending request"""
    try:
        request = matching_service.reject_request(actor, request_id)
        return ResponseEnricher.single_request(request)
    except BusinessLogicError as e:
        raise _http_error(e)

@router.delete("/match-requests/{request_id}", response_model=MatchingRequestResponse)
def cancel_match_request(
    request_id: int = Path(..., description="The ID of the matching request"),
    actor: Actor = Depends(get_current_actor),
    matching_service: MatchingRequestService = Depends(get_matching_request_service)
):
    """Cancel a pending request; repeating the call on a cancelled request is a no-op"""
    try:
        request = matching_service.cancel_request(actor, request_id)
        return ResponseEnricher.single_request(request)
    except BusinessLogicError as e:
        raise _http_error(e)
