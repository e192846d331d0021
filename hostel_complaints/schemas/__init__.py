# Pydantic Schemas
from hostel_complaints.schemas.user import UserCreate, UserLogin, UserResponse, UserUpdate, Token
from hostel_complaints.schemas.classification import (
    ClassificationOutcome, ImageClassification, ClassifyTextRequest
)
from hostel_complaints.schemas.complaint import (
    ComplaintCreate, ComplaintSubmission, ComplaintRecord,
    ComplaintStatusUpdate, ComplaintResponse, ComplaintSummary,
    ComplaintListResponse, ComplaintStats
)
from hostel_complaints.schemas.draft import (
    DraftTextUpdate, DraftCategoryUpdate, DraftRoomUpdate, DraftResponse
)

__all__ = [
    # User
    "UserCreate", "UserLogin", "UserResponse", "UserUpdate", "Token",
    # Classification
    "ClassificationOutcome", "ImageClassification", "ClassifyTextRequest",
    # Complaint
    "ComplaintCreate", "ComplaintSubmission", "ComplaintRecord",
    "ComplaintStatusUpdate", "ComplaintResponse", "ComplaintSummary",
    "ComplaintListResponse", "ComplaintStats",
    # Draft
    "DraftTextUpdate", "DraftCategoryUpdate", "DraftRoomUpdate", "DraftResponse",
]
