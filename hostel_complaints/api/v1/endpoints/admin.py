"""
Complaint endpoints - staff panel
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from hostel_complaints.core.database import get_db
from hostel_complaints.core.security import get_current_admin
from hostel_complaints.models.complaint import ComplaintCategory, ComplaintStatus, ComplaintUrgency
from hostel_complaints.models.user import User
from hostel_complaints.schemas.complaint import (
    ComplaintListResponse, ComplaintResponse, ComplaintStats, ComplaintStatusUpdate, ComplaintSummary
)
from hostel_complaints.services.complaint_repository import ComplaintRepository

router = APIRouter()


# ============================================
# COMPLAINTS
# ============================================

@router.get("/complaints", response_model=ComplaintListResponse)
async def list_complaints(
    status_filter: Optional[ComplaintStatus] = Query(None, alias="status"),
    urgency: Optional[ComplaintUrgency] = Query(None),
    category: Optional[ComplaintCategory] = Query(None),
    search: Optional[str] = Query(None, max_length=100),
    current_admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    """
    All complaints, newest first

    `search` matches title, description, student name and room,
    case-insensitively.
    """
    complaints = await ComplaintRepository(db).list_all_complaints(
        status=status_filter,
        urgency=urgency,
        category=category,
        search=search
    )
    return ComplaintListResponse(
        items=[ComplaintSummary.model_validate(c) for c in complaints],
        total=len(complaints)
    )


@router.get("/complaints/{complaint_id}", response_model=ComplaintResponse)
async def get_complaint(
    complaint_id: int,
    current_admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    """Complaint detail, including the photo and its AI analysis"""
    complaint = await ComplaintRepository(db).get_complaint(complaint_id)
    return ComplaintResponse.model_validate(complaint)


@router.put("/complaints/{complaint_id}/status", response_model=ComplaintResponse)
async def update_complaint_status(
    complaint_id: int,
    payload: ComplaintStatusUpdate,
    current_admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    """
    Move a complaint forward (pending -> in_progress -> resolved)

    Sending the current status again only updates the notes. Cancelled and
    resolved complaints cannot be reopened.
    """
    complaint = await ComplaintRepository(db).update_status(
        complaint_id, payload.status, payload.admin_notes
    )
    return ComplaintResponse.model_validate(complaint)


# ============================================
# DASHBOARD
# ============================================

@router.get("/stats", response_model=ComplaintStats)
async def get_stats(
    current_admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    """Counters for the dashboard header"""
    return await ComplaintRepository(db).complaint_stats()
