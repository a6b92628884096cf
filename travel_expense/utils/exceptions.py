"""
Approval Errors
Error taxonomy surfaced synchronously by the approval engine
"""

from fastapi import status


class ApprovalError(Exception):
    """Base class for approval engine errors"""

    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "approval_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class RequestNotFoundError(ApprovalError):
    """Request id does not resolve to an existing entity"""

    status_code = status.HTTP_404_NOT_FOUND
    error_code = "not_found"


class ForbiddenActionError(ApprovalError):
    """Self-review, unassigned manager, or a role that may not act"""

    status_code = status.HTTP_403_FORBIDDEN
    error_code = "forbidden"


class RequestFinalizedError(ApprovalError):
    """The admin tier has already decided"""

    status_code = status.HTTP_409_CONFLICT
    error_code = "finalized"


class SubmissionValidationError(ApprovalError):
    """Submission payload breaks a business rule"""

    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "validation_error"
