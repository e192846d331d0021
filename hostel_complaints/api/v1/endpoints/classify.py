"""
One-shot classification endpoints

Stateless: nothing is stored. A failed classification is not an HTTP
error, the outcome simply reports `succeeded: false`.
"""
import asyncio

from fastapi import APIRouter, Depends, File, UploadFile

from hostel_complaints.core.security import get_current_user
from hostel_complaints.models.user import User
from hostel_complaints.schemas.classification import ClassificationOutcome, ClassifyTextRequest
from hostel_complaints.services.complaint_ai_service import ComplaintClassifier, get_classifier
from hostel_complaints.services.image_processing import compress_image, read_upload

router = APIRouter()


@router.post("/text", response_model=ClassificationOutcome)
async def classify_text(
    payload: ClassifyTextRequest,
    current_user: User = Depends(get_current_user),
    classifier: ComplaintClassifier = Depends(get_classifier)
):
    """Category and urgency for a complaint description"""
    return await classifier.classify_text(payload.description.strip())


@router.post("/image", response_model=ClassificationOutcome)
async def classify_image(
    image: UploadFile = File(...),
    current_user: User = Depends(get_current_user),
    classifier: ComplaintClassifier = Depends(get_classifier)
):
    """Category, urgency and repair guidance for a complaint photo"""
    content = await read_upload(image)
    compressed = await asyncio.to_thread(compress_image, content)
    return await classifier.classify_image(compressed)
