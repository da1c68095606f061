# mentor_matching/constants.py
class ErrorMessages:
    MENTEE_ONLY_CREATE = "Only mentees can send matching requests"
    MENTEE_ONLY_CANCEL = "Only mentees can cancel their requests"
    MENTEE_ONLY_OUTGOING = "Only mentees can access outgoing requests"
    MENTOR_ONLY_ACCEPT = "Only mentors can accept requests"
    MENTOR_ONLY_REJECT = "Only mentors can reject requests"
    MENTOR_ONLY_INCOMING = "Only mentors can access incoming requests"
    MENTOR_AND_MESSAGE_REQUIRED = "Mentor ID and message are required"
    MALFORMED_PAYLOAD = "Malformed matching request"
    SEND_AS_YOURSELF = "You can only send requests as yourself"
    MENTOR_NOT_FOUND = "Mentor not found"
    REQUEST_NOT_FOUND = "Matching request not found"
    REQUEST_NOT_FOUND_OR_PROCESSED = "Matching request not found or already processed"
    NOT_REQUEST_OWNER = "You can only cancel your own requests"
    DUPLICATE_REQUEST = "You have already sent a request to this mentor"
    PENDING_REQUEST_EXISTS = "You already have a pending request. Please wait for a response or cancel it first."
    ALREADY_PROCESSED = "Request has already been processed"
    CANNOT_CANCEL = "Request cannot be cancelled (current status: {status})"
    CONCURRENT_UPDATE = "Request was modified by another operation"
