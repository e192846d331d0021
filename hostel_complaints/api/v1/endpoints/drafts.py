"""
Complaint draft endpoints

The submit screen works on a draft: text edits trigger a debounced AI
classification, a photo is classified as soon as it is attached, and
submit turns the draft into a stored complaint.
"""
from fastapi import APIRouter, Depends, File, Response, UploadFile, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from hostel_complaints.core.database import get_db
from hostel_complaints.core.exceptions import PersistenceError
from hostel_complaints.core.security import get_current_user
from hostel_complaints.models.user import User
from hostel_complaints.schemas.complaint import ComplaintResponse
from hostel_complaints.schemas.draft import (
    DraftCategoryUpdate, DraftResponse, DraftRoomUpdate, DraftTextUpdate
)
from hostel_complaints.services.complaint_assembly import assemble_complaint
from hostel_complaints.services.complaint_repository import ComplaintRepository
from hostel_complaints.services.drafts import DraftRegistry, get_draft_registry
from hostel_complaints.services.image_processing import read_upload

router = APIRouter()


@router.post("/", response_model=DraftResponse, status_code=status.HTTP_201_CREATED)
async def create_draft(
    current_user: User = Depends(get_current_user),
    registry: DraftRegistry = Depends(get_draft_registry)
):
    """Start a new complaint draft"""
    draft = registry.create(current_user.id)
    return registry.to_response(draft)


@router.get("/{draft_id}", response_model=DraftResponse)
async def get_draft(
    draft_id: str,
    current_user: User = Depends(get_current_user),
    registry: DraftRegistry = Depends(get_draft_registry)
):
    """
    Current draft state

    Poll this after editing the text: `classification_pending` stays true
    until the debounced classification has finished.
    """
    draft = registry.get(draft_id, current_user.id)
    return registry.to_response(draft)


@router.put("/{draft_id}/text", response_model=DraftResponse)
async def update_draft_text(
    draft_id: str,
    payload: DraftTextUpdate,
    current_user: User = Depends(get_current_user),
    registry: DraftRegistry = Depends(get_draft_registry)
):
    """Replace the description; classification runs after a quiet period"""
    draft = registry.get(draft_id, current_user.id)
    registry.update_text(draft, payload.text)
    return registry.to_response(draft)


@router.put("/{draft_id}/category", response_model=DraftResponse)
async def select_draft_category(
    draft_id: str,
    payload: DraftCategoryUpdate,
    current_user: User = Depends(get_current_user),
    registry: DraftRegistry = Depends(get_draft_registry)
):
    """Pick a category by hand (AI urgency is left untouched)"""
    draft = registry.get(draft_id, current_user.id)
    registry.select_category(draft, payload.category)
    return registry.to_response(draft)


@router.put("/{draft_id}/room", response_model=DraftResponse)
async def set_draft_room(
    draft_id: str,
    payload: DraftRoomUpdate,
    current_user: User = Depends(get_current_user),
    registry: DraftRegistry = Depends(get_draft_registry)
):
    """Room/location; empty falls back to the profile room on submit"""
    draft = registry.get(draft_id, current_user.id)
    registry.set_room(draft, payload.room)
    return registry.to_response(draft)


@router.post("/{draft_id}/image", response_model=DraftResponse)
async def attach_draft_image(
    draft_id: str,
    image: UploadFile = File(...),
    current_user: User = Depends(get_current_user),
    registry: DraftRegistry = Depends(get_draft_registry)
):
    """Attach a photo and classify it right away"""
    draft = registry.get(draft_id, current_user.id)
    content = await read_upload(image)
    await registry.attach_image(draft, content)
    return registry.to_response(draft)


@router.delete("/{draft_id}/image", response_model=DraftResponse)
async def remove_draft_image(
    draft_id: str,
    current_user: User = Depends(get_current_user),
    registry: DraftRegistry = Depends(get_draft_registry)
):
    """Drop the photo together with its AI analysis"""
    draft = registry.get(draft_id, current_user.id)
    registry.remove_image(draft)
    return registry.to_response(draft)


@router.post("/{draft_id}/submit", response_model=ComplaintResponse, status_code=status.HTTP_201_CREATED)
async def submit_draft(
    draft_id: str,
    current_user: User = Depends(get_current_user),
    registry: DraftRegistry = Depends(get_draft_registry),
    db: AsyncSession = Depends(get_db)
):
    """
    Submit the draft as a complaint

    Uses whatever classification has completed so far; a classification
    still in flight is not waited for. Validation failures leave the draft
    in place so it can be fixed and resubmitted.
    """
    draft = registry.get(draft_id, current_user.id)
    record = assemble_complaint(draft.submission(), current_user)

    repo = ComplaintRepository(db)
    complaint_id = await repo.create_complaint(record)
    # The draft stays available for a retry until the complaint is stored
    try:
        await db.commit()
    except SQLAlchemyError as e:
        raise PersistenceError(f"Failed to submit complaint: {e}") from e
    registry.discard(draft.id)

    complaint = await repo.get_complaint(complaint_id)
    return ComplaintResponse.model_validate(complaint)


@router.delete("/{draft_id}", status_code=status.HTTP_204_NO_CONTENT)
async def discard_draft(
    draft_id: str,
    current_user: User = Depends(get_current_user),
    registry: DraftRegistry = Depends(get_draft_registry)
):
    """Throw the draft away"""
    draft = registry.get(draft_id, current_user.id)
    registry.discard(draft.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
