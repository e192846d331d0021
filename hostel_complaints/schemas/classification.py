"""
Classification schemas
"""
from typing import Optional, Literal
from pydantic import BaseModel, Field

from hostel_complaints.models.complaint import ComplaintCategory, ComplaintUrgency

IMAGE_DESCRIPTION_PLACEHOLDER = "Issue detected in image"
REPAIR_STEPS_PLACEHOLDER = "Please contact maintenance staff"


class ImageClassification(BaseModel):
    """What the vision model saw in a complaint photo"""
    category: ComplaintCategory
    urgency: ComplaintUrgency
    problem_description: str = IMAGE_DESCRIPTION_PLACEHOLDER
    suggested_repair_steps: str = REPAIR_STEPS_PLACEHOLDER
    detected_location: Optional[str] = None

    class Config:
        frozen = True


class ClassificationOutcome(BaseModel):
    """
    Result of a single classification attempt

    Outcomes are immutable. `revision` is the draft text/image revision the
    attempt was made for, so late results can be recognised as stale.
    """
    source: Literal["text", "image"]
    succeeded: bool
    category: Optional[ComplaintCategory] = None
    urgency: Optional[ComplaintUrgency] = None
    image: Optional[ImageClassification] = None
    error: Optional[str] = None
    revision: int = 0

    class Config:
        frozen = True

    def for_revision(self, revision: int) -> "ClassificationOutcome":
        return self.model_copy(update={"revision": revision})


class ClassifyTextRequest(BaseModel):
    """One-shot text classification"""
    description: str = Field(..., min_length=1, max_length=5000)
