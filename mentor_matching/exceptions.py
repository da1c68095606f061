# mentor_matching/exceptions.py (COMPLETE)
class BusinessLogicError(Exception):
    """Base exception for business logic errors"""
    status_code = 400

class InvalidArgumentError(BusinessLogicError):
    """Raised when a payload is missing or malformed"""
    status_code = 400

class ForbiddenRoleError(BusinessLogicError):
    """Raised when the actor's role may not perform the operation"""
    status_code = 403

class ForbiddenError(BusinessLogicError):
    """Raised when the actor has the right role but does not own the record"""
    status_code = 403

class NotFoundError(BusinessLogicError):
    """Raised when a resource is not found or not visible to the actor"""
    status_code = 404

class ConflictError(BusinessLogicError):
    """Raised when a request would break the matching-request state machine"""
    status_code = 409
