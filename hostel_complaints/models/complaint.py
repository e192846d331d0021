"""
Complaint model
"""
from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, Text, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import relationship
import enum

from hostel_complaints.core.database import Base


class ComplaintCategory(str, enum.Enum):
    """Complaint categories"""
    ELECTRICITY = "electricity"
    WATER = "water"
    MAINTENANCE = "maintenance"
    CLEANLINESS = "cleanliness"
    STAFF = "staff"


class ComplaintStatus(str, enum.Enum):
    """Complaint states"""
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
    CANCELLED = "cancelled"


class ComplaintUrgency(str, enum.Enum):
    """Urgency levels. MEDIUM is accepted by the column but never assigned."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


ACTIVE_STATUSES = (ComplaintStatus.PENDING, ComplaintStatus.IN_PROGRESS)
TERMINAL_STATUSES = (ComplaintStatus.RESOLVED, ComplaintStatus.CANCELLED)

# Moves staff may make; cancellation belongs to the owning student
STAFF_TRANSITIONS = {
    ComplaintStatus.PENDING: {ComplaintStatus.IN_PROGRESS, ComplaintStatus.RESOLVED},
    ComplaintStatus.IN_PROGRESS: {ComplaintStatus.RESOLVED},
    ComplaintStatus.RESOLVED: set(),
    ComplaintStatus.CANCELLED: set(),
}


class Complaint(Base):
    """Complaints table"""
    __tablename__ = "complaints"

    id = Column(Integer, primary_key=True, index=True)

    # Author, copied at submission time
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    user = relationship("User", back_populates="complaints")
    user_name = Column(String(255), nullable=False, default="")
    user_room = Column(String(50), nullable=False, default="")

    # Details
    category = Column(SQLEnum(ComplaintCategory), nullable=False)
    urgency = Column(SQLEnum(ComplaintUrgency), nullable=False, default=ComplaintUrgency.LOW, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    location = Column(String(255), nullable=False, default="")

    # Handling
    status = Column(SQLEnum(ComplaintStatus), nullable=False, default=ComplaintStatus.PENDING, index=True)
    admin_notes = Column(Text, nullable=False, default="")

    # Photo (base64 JPEG) and the AI notes derived from it
    image_data = Column(Text, nullable=True)
    ai_analysis_text = Column(Text, nullable=True)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow)

    @property
    def has_image(self) -> bool:
        return bool(self.image_data)

    def __repr__(self):
        return f"<Complaint {self.id}: {self.title}>"
