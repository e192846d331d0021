"""
Error taxonomy

Validation errors are raised before any I/O and reported to the user as-is.
Classification errors never block a submission: callers fall back to the
keyword heuristic. Persistence errors carry the underlying message and are
not retried.
"""
from typing import Optional

from fastapi import status


class ComplaintServiceError(Exception):
    """Base class for all service errors"""

    code = "service_error"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Unexpected service error"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.message)
        self.message = message or self.message


# ============================================
# Validation
# ============================================

class ComplaintValidationError(ComplaintServiceError):
    code = "validation_error"
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    message = "Invalid complaint"


class MissingCategory(ComplaintValidationError):
    code = "missing_category"
    message = "Please select a category"


class MissingDescription(ComplaintValidationError):
    code = "missing_description"
    message = "Please describe the issue"


class DescriptionTooShort(ComplaintValidationError):
    code = "description_too_short"
    message = "Complaint description is too short (minimum 10 characters)"


class NotAuthenticated(ComplaintValidationError):
    code = "not_authenticated"
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Please login again"


class InvalidImage(ComplaintValidationError):
    code = "invalid_image"
    message = "The uploaded file is not a supported image"


# ============================================
# Classification
# ============================================

class ClassificationError(ComplaintServiceError):
    code = "classification_failed"
    status_code = status.HTTP_502_BAD_GATEWAY
    message = "AI classification failed"


class ClassificationUnavailable(ClassificationError):
    code = "classification_unavailable"
    message = "AI classification service is unavailable"


class MalformedClassification(ClassificationError):
    code = "classification_malformed"
    message = "AI classification reply could not be parsed"


# ============================================
# Persistence
# ============================================

class PersistenceError(ComplaintServiceError):
    code = "persistence_error"
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    message = "Storage operation failed"


class ComplaintNotFound(PersistenceError):
    code = "complaint_not_found"
    status_code = status.HTTP_404_NOT_FOUND
    message = "Complaint not found"


class DraftNotFound(PersistenceError):
    code = "draft_not_found"
    status_code = status.HTTP_404_NOT_FOUND
    message = "Draft not found"


class InvalidStatusTransition(PersistenceError):
    code = "invalid_status_transition"
    status_code = status.HTTP_409_CONFLICT
    message = "Status change not allowed"
