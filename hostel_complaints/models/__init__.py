# Database Models
from hostel_complaints.models.user import User, UserRole
from hostel_complaints.models.complaint import (
    Complaint,
    ComplaintCategory,
    ComplaintStatus,
    ComplaintUrgency,
)

__all__ = [
    "User",
    "UserRole",
    "Complaint",
    "ComplaintCategory",
    "ComplaintStatus",
    "ComplaintUrgency",
]
