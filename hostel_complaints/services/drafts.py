"""
Complaint drafts

A draft is the complaint a student is still composing. Classification
results are immutable ClassificationOutcome values; the draft keeps the
latest text outcome and the latest image outcome and derives category,
AI urgency and the AI-completed flag from them:

- a successful image outcome takes priority over a text outcome
- a category picked by the student always wins over an AI category and
  never changes the AI urgency
- an outcome is applied only if it was produced for the current text/image
  revision of a draft that still exists; anything else is dropped

Drafts live in process memory. They are discarded on submit, and drafts
untouched for DRAFT_TTL_MINUTES are evicted the next time the registry is
used.
"""
import asyncio
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Dict, Optional

from hostel_complaints.core.config import settings
from hostel_complaints.core.exceptions import DraftNotFound
from hostel_complaints.models.complaint import ComplaintCategory, ComplaintUrgency
from hostel_complaints.schemas.classification import ClassificationOutcome, ImageClassification
from hostel_complaints.schemas.complaint import ComplaintSubmission
from hostel_complaints.schemas.draft import DraftResponse
from hostel_complaints.services.complaint_ai_service import ComplaintClassifier, complaint_classifier
from hostel_complaints.services.debounce import DebouncedTrigger
from hostel_complaints.services.image_processing import compress_image, encode_image

logger = logging.getLogger(__name__)


@dataclass
class DraftState:
    id: str
    owner_id: int
    text: str = ""
    room: Optional[str] = None
    user_category: Optional[ComplaintCategory] = None
    image_data: Optional[str] = None
    text_revision: int = 0
    image_revision: int = 0
    text_outcome: Optional[ClassificationOutcome] = None
    image_outcome: Optional[ClassificationOutcome] = None
    touched_at: datetime = field(default_factory=datetime.utcnow)

    @property
    def effective_outcome(self) -> Optional[ClassificationOutcome]:
        image = self.image_outcome
        if image is not None and image.succeeded and image.revision == self.image_revision:
            return image
        # A result for text the student has since changed no longer counts
        text = self.text_outcome
        if text is not None and text.succeeded and text.revision == self.text_revision:
            return text
        return None

    @property
    def ai_completed(self) -> bool:
        return self.effective_outcome is not None

    @property
    def urgency_from_ai(self) -> Optional[ComplaintUrgency]:
        outcome = self.effective_outcome
        return outcome.urgency if outcome else None

    @property
    def category(self) -> Optional[ComplaintCategory]:
        if self.user_category is not None:
            return self.user_category
        outcome = self.effective_outcome
        return outcome.category if outcome else None

    @property
    def category_source(self) -> Optional[str]:
        if self.user_category is not None:
            return "user"
        if self.effective_outcome is not None:
            return "ai"
        return None

    @property
    def image_classification(self) -> Optional[ImageClassification]:
        if self.image_outcome is not None and self.image_outcome.succeeded:
            return self.image_outcome.image
        return None

    def submission(self) -> ComplaintSubmission:
        return ComplaintSubmission(
            description=self.text,
            category=self.category,
            room=self.room,
            ai_completed=self.ai_completed,
            urgency_from_ai=self.urgency_from_ai,
            image_classification=self.image_classification,
            image_data=self.image_data,
        )


class DraftRegistry:
    """Owns the drafts of this process and their classification flow"""

    def __init__(
        self,
        classifier: Optional[ComplaintClassifier] = None,
        debounce_seconds: Optional[float] = None,
        min_length: Optional[int] = None,
        ttl_minutes: Optional[int] = None,
    ):
        self.classifier = classifier or complaint_classifier
        self.min_length = settings.CLASSIFY_MIN_LENGTH if min_length is None else min_length
        delay = settings.CLASSIFY_DEBOUNCE_SECONDS if debounce_seconds is None else debounce_seconds
        self.debouncer = DebouncedTrigger(delay)
        self.ttl = timedelta(minutes=settings.DRAFT_TTL_MINUTES if ttl_minutes is None else ttl_minutes)
        self._drafts: Dict[str, DraftState] = {}

    # ============================================
    # Lifecycle
    # ============================================

    def create(self, owner_id: int) -> DraftState:
        self.evict_expired()
        draft = DraftState(id=uuid.uuid4().hex, owner_id=owner_id)
        self._drafts[draft.id] = draft
        logger.info(f"Draft {draft.id} created for user {owner_id}")
        return draft

    def get(self, draft_id: str, owner_id: int) -> DraftState:
        self.evict_expired()
        draft = self._drafts.get(draft_id)
        if draft is None or draft.owner_id != owner_id:
            raise DraftNotFound()
        draft.touched_at = datetime.utcnow()
        return draft

    def discard(self, draft_id: str) -> None:
        """Forget a draft; results still in flight for it will be dropped"""
        self.debouncer.cancel(draft_id)
        if self._drafts.pop(draft_id, None) is not None:
            logger.info(f"Draft {draft_id} discarded")

    def evict_expired(self) -> int:
        """Discard drafts nobody has touched within the TTL"""
        cutoff = datetime.utcnow() - self.ttl
        expired = [draft_id for draft_id, draft in self._drafts.items() if draft.touched_at < cutoff]
        for draft_id in expired:
            logger.info(f"Draft {draft_id} expired")
            self.discard(draft_id)
        return len(expired)

    def is_live(self, draft: DraftState) -> bool:
        return self._drafts.get(draft.id) is draft

    async def shutdown(self) -> None:
        await self.debouncer.shutdown()
        self._drafts.clear()

    # ============================================
    # Edits
    # ============================================

    def update_text(self, draft: DraftState, text: str) -> None:
        """Store new text and schedule a debounced classification for it"""
        draft.text = text
        draft.text_revision += 1

        trimmed = text.strip()
        if len(trimmed) >= self.min_length:
            revision = draft.text_revision
            self.debouncer.schedule(
                draft.id,
                lambda: self._classify_text(draft, trimmed, revision)
            )
        else:
            # Nothing worth classifying; a queued call for older text is moot
            self.debouncer.cancel(draft.id)

    def select_category(self, draft: DraftState, category: Optional[ComplaintCategory]) -> None:
        draft.user_category = category

    def set_room(self, draft: DraftState, room: Optional[str]) -> None:
        draft.room = (room or "").strip() or None

    async def attach_image(self, draft: DraftState, data: bytes) -> ClassificationOutcome:
        """Store a compressed photo and classify it straight away"""
        compressed = await asyncio.to_thread(compress_image, data)
        draft.image_data = encode_image(compressed)
        draft.image_revision += 1
        draft.image_outcome = None
        revision = draft.image_revision

        outcome = (await self.classifier.classify_image(compressed)).for_revision(revision)
        self.apply_outcome(draft, outcome)
        return outcome

    def remove_image(self, draft: DraftState) -> None:
        draft.image_data = None
        draft.image_revision += 1
        draft.image_outcome = None

    # ============================================
    # Outcomes
    # ============================================

    async def _classify_text(self, draft: DraftState, text: str, revision: int) -> None:
        outcome = await self.classifier.classify_text(text)
        self.apply_outcome(draft, outcome.for_revision(revision))

    def apply_outcome(self, draft: DraftState, outcome: ClassificationOutcome) -> bool:
        """Record an outcome unless it is stale. Returns True when applied."""
        if not self.is_live(draft):
            logger.info(f"Dropping {outcome.source} outcome for discarded draft {draft.id}")
            return False

        if outcome.source == "text":
            if outcome.revision != draft.text_revision:
                logger.info(
                    f"Dropping stale text outcome for draft {draft.id} "
                    f"(revision {outcome.revision}, current {draft.text_revision})"
                )
                return False
            draft.text_outcome = outcome
        else:
            if outcome.revision != draft.image_revision:
                logger.info(f"Dropping stale image outcome for draft {draft.id}")
                return False
            draft.image_outcome = outcome
            # An empty description is filled with what the photo shows
            if outcome.succeeded and outcome.image and not draft.text.strip():
                draft.text = outcome.image.problem_description
                draft.text_revision += 1

        if outcome.succeeded:
            logger.info(
                f"Draft {draft.id}: {outcome.source} classification "
                f"{outcome.category.value}/{outcome.urgency.value}"
            )
        else:
            logger.info(f"Draft {draft.id}: {outcome.source} classification failed ({outcome.error})")
        return True

    # ============================================
    # Views
    # ============================================

    def to_response(self, draft: DraftState) -> DraftResponse:
        return DraftResponse(
            id=draft.id,
            text=draft.text,
            room=draft.room,
            category=draft.category,
            category_source=draft.category_source,
            urgency_from_ai=draft.urgency_from_ai,
            ai_completed=draft.ai_completed,
            classification_pending=self.debouncer.pending(draft.id),
            has_image=draft.image_data is not None,
            image_classification=draft.image_classification,
            text_outcome=draft.text_outcome,
            image_outcome=draft.image_outcome,
        )


# Singleton instance
draft_registry = DraftRegistry()


def get_draft_registry() -> DraftRegistry:
    """Dependency returning the process draft registry"""
    return draft_registry
