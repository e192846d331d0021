"""
Complaint assembly

Turns a submission (text, category, room, AI side outputs) plus the author's
profile into a ComplaintRecord. Pure: no database or network access.
"""
import logging
from typing import Optional

from hostel_complaints.core.exceptions import (
    DescriptionTooShort,
    MissingCategory,
    MissingDescription,
    NotAuthenticated,
)
from hostel_complaints.models.complaint import ComplaintStatus
from hostel_complaints.models.user import User
from hostel_complaints.schemas.classification import ImageClassification
from hostel_complaints.schemas.complaint import ComplaintRecord, ComplaintSubmission
from hostel_complaints.services.urgency import reconcile_urgency

logger = logging.getLogger(__name__)

TITLE_MAX_LENGTH = 50
MIN_DESCRIPTION_LENGTH = 10


def derive_title(description: str) -> str:
    if len(description) > TITLE_MAX_LENGTH:
        return description[:TITLE_MAX_LENGTH] + "..."
    return description


def build_ai_analysis_text(result: Optional[ImageClassification]) -> Optional[str]:
    if result is None:
        return None

    lines = [
        f"Category: {result.category.value}",
        f"Urgency: {result.urgency.value}",
    ]
    if result.problem_description:
        lines.append(f"Issue: {result.problem_description}")
    if result.suggested_repair_steps:
        lines.append(f"Suggested: {result.suggested_repair_steps}")
    return "\n".join(lines)


def validate_submission(submission: ComplaintSubmission, user: Optional[User]) -> str:
    """Check the submission in display order, returning the trimmed description"""
    if submission.category is None:
        raise MissingCategory()

    description = (submission.description or "").strip()
    if not description:
        raise MissingDescription()
    if len(description) < MIN_DESCRIPTION_LENGTH:
        raise DescriptionTooShort()

    if user is None:
        raise NotAuthenticated()

    return description


def assemble_complaint(submission: ComplaintSubmission, user: Optional[User]) -> ComplaintRecord:
    description = validate_submission(submission, user)

    room = (submission.room or "").strip() or (user.room or "")
    urgency = reconcile_urgency(description, submission.ai_completed, submission.urgency_from_ai)

    record = ComplaintRecord(
        user_id=user.id,
        user_name=user.name or "",
        user_room=room,
        category=submission.category,
        urgency=urgency,
        title=derive_title(description),
        description=description,
        location=room,
        status=ComplaintStatus.PENDING,
        image_data=submission.image_data,
        ai_analysis_text=build_ai_analysis_text(submission.image_classification),
    )
    logger.info(
        f"Assembled complaint for user {user.id}: {record.category.value}/{record.urgency.value}"
        f" (ai_completed={submission.ai_completed})"
    )
    return record
