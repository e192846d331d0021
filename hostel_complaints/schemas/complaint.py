"""
Complaint schemas
"""
from datetime import datetime
from typing import Optional, List, Dict
from pydantic import BaseModel, Field

from hostel_complaints.models.complaint import ComplaintCategory, ComplaintStatus, ComplaintUrgency
from hostel_complaints.schemas.classification import ImageClassification


class ComplaintCreate(BaseModel):
    """Direct submission (without a draft)"""
    description: str = Field("", max_length=5000)
    category: Optional[ComplaintCategory] = None
    room: Optional[str] = Field(None, max_length=50)


class ComplaintSubmission(BaseModel):
    """Everything complaint assembly needs from the submitting flow"""
    description: str = ""
    category: Optional[ComplaintCategory] = None
    room: Optional[str] = None
    ai_completed: bool = False
    urgency_from_ai: Optional[ComplaintUrgency] = None
    image_classification: Optional[ImageClassification] = None
    image_data: Optional[str] = None


class ComplaintRecord(BaseModel):
    """Fully assembled complaint, ready to be stored"""
    user_id: int
    user_name: str
    user_room: str
    category: ComplaintCategory
    urgency: ComplaintUrgency
    title: str
    description: str
    location: str
    status: ComplaintStatus = ComplaintStatus.PENDING
    admin_notes: str = ""
    image_data: Optional[str] = None
    ai_analysis_text: Optional[str] = None


class ComplaintStatusUpdate(BaseModel):
    """Status change by staff"""
    status: ComplaintStatus
    admin_notes: Optional[str] = Field(None, max_length=5000)


class ComplaintResponse(BaseModel):
    """Complaint response"""
    id: int
    user_id: int
    user_name: str
    user_room: str
    category: ComplaintCategory
    urgency: ComplaintUrgency
    title: str
    description: str
    location: str
    status: ComplaintStatus
    admin_notes: str = ""
    has_image: bool = False
    image_data: Optional[str] = None
    ai_analysis_text: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ComplaintSummary(BaseModel):
    """List item, without the photo payload"""
    id: int
    user_name: str
    user_room: str
    category: ComplaintCategory
    urgency: ComplaintUrgency
    title: str
    location: str
    status: ComplaintStatus
    has_image: bool = False
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ComplaintListResponse(BaseModel):
    """Complaint list"""
    items: List[ComplaintSummary]
    total: int


class ComplaintStats(BaseModel):
    """Admin dashboard counters"""
    total_complaints: int
    pending: int
    in_progress: int
    resolved: int
    cancelled: int
    high_urgency: int
    by_category: Dict[str, int]
