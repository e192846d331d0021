"""
Complaint endpoints - student side
"""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from hostel_complaints.core.config import settings
from hostel_complaints.core.database import get_db
from hostel_complaints.core.exceptions import ComplaintNotFound
from hostel_complaints.core.security import get_current_user
from hostel_complaints.models.complaint import ComplaintCategory, ComplaintStatus
from hostel_complaints.models.user import User
from hostel_complaints.schemas.complaint import (
    ComplaintCreate, ComplaintListResponse, ComplaintResponse, ComplaintSubmission, ComplaintSummary
)
from hostel_complaints.services.complaint_ai_service import ComplaintClassifier, get_classifier
from hostel_complaints.services.complaint_assembly import assemble_complaint
from hostel_complaints.services.complaint_repository import ComplaintRepository
from hostel_complaints.services.image_processing import decode_image

router = APIRouter()


# ============================================
# PUBLIC ENDPOINTS
# ============================================

@router.get("/categories")
async def list_categories():
    """Complaint categories, for the category picker"""
    categories = [{"id": category.value} for category in ComplaintCategory]
    return {
        "categories": categories,
        "total": len(categories)
    }


# ============================================
# AUTHENTICATED ENDPOINTS
# ============================================

@router.post("/", response_model=ComplaintResponse, status_code=status.HTTP_201_CREATED)
async def create_complaint(
    payload: ComplaintCreate,
    current_user: User = Depends(get_current_user),
    classifier: ComplaintClassifier = Depends(get_classifier),
    db: AsyncSession = Depends(get_db)
):
    """
    Submit a complaint in one request (no draft)

    Descriptions long enough to classify are sent to the AI first. A chosen
    category is kept; otherwise the AI category is used. Short text skips
    the AI entirely, so a missing category is reported without any call.
    """
    description = payload.description.strip()
    category = payload.category
    ai_completed = False
    urgency_from_ai = None

    if len(description) >= settings.CLASSIFY_MIN_LENGTH:
        outcome = await classifier.classify_text(description)
        if outcome.succeeded:
            ai_completed = True
            urgency_from_ai = outcome.urgency
            if category is None:
                category = outcome.category

    submission = ComplaintSubmission(
        description=description,
        category=category,
        room=payload.room,
        ai_completed=ai_completed,
        urgency_from_ai=urgency_from_ai,
    )
    record = assemble_complaint(submission, current_user)

    repo = ComplaintRepository(db)
    complaint_id = await repo.create_complaint(record)
    complaint = await repo.get_complaint(complaint_id)
    return ComplaintResponse.model_validate(complaint)


@router.get("/", response_model=ComplaintListResponse)
async def list_my_complaints(
    status_filter: Optional[ComplaintStatus] = Query(None),
    active_only: bool = Query(False),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    The current user's complaints, newest first

    `active_only` limits the list to pending and in-progress complaints and
    takes precedence over `status_filter`.
    """
    repo = ComplaintRepository(db)
    if active_only:
        complaints = await repo.list_active_complaints(current_user.id)
    else:
        complaints = await repo.list_complaints_for_user(current_user.id, status_filter)

    return ComplaintListResponse(
        items=[ComplaintSummary.model_validate(c) for c in complaints],
        total=len(complaints)
    )


@router.get("/{complaint_id}", response_model=ComplaintResponse)
async def get_complaint(
    complaint_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Complaint detail (own complaints only)"""
    complaint = await ComplaintRepository(db).get_complaint(complaint_id)
    if complaint.user_id != current_user.id:
        raise ComplaintNotFound()
    return ComplaintResponse.model_validate(complaint)


@router.get("/{complaint_id}/image")
async def get_complaint_image(
    complaint_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Attached photo as JPEG (author or staff)"""
    complaint = await ComplaintRepository(db).get_complaint(complaint_id)
    if complaint.user_id != current_user.id and not current_user.is_admin:
        raise ComplaintNotFound()

    content = decode_image(complaint.image_data) if complaint.image_data else None
    if content is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Complaint has no photo"
        )
    return Response(content=content, media_type="image/jpeg")


@router.post("/{complaint_id}/cancel", response_model=ComplaintResponse)
async def cancel_complaint(
    complaint_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Withdraw a complaint that nobody has started on yet"""
    complaint = await ComplaintRepository(db).cancel_complaint(complaint_id, current_user.id)
    return ComplaintResponse.model_validate(complaint)
