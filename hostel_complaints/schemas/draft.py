"""
Draft schemas
"""
from typing import Optional, Literal
from pydantic import BaseModel, Field

from hostel_complaints.models.complaint import ComplaintCategory, ComplaintUrgency
from hostel_complaints.schemas.classification import ClassificationOutcome, ImageClassification


class DraftTextUpdate(BaseModel):
    text: str = Field("", max_length=5000)


class DraftCategoryUpdate(BaseModel):
    category: ComplaintCategory


class DraftRoomUpdate(BaseModel):
    room: Optional[str] = Field(None, max_length=50)


class DraftResponse(BaseModel):
    """Current state of a complaint draft"""
    id: str
    text: str
    room: Optional[str] = None
    category: Optional[ComplaintCategory] = None
    category_source: Optional[Literal["user", "ai"]] = None
    urgency_from_ai: Optional[ComplaintUrgency] = None
    ai_completed: bool = False
    classification_pending: bool = False
    has_image: bool = False
    image_classification: Optional[ImageClassification] = None
    text_outcome: Optional[ClassificationOutcome] = None
    image_outcome: Optional[ClassificationOutcome] = None
