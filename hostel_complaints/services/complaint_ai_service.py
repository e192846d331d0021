"""
Complaint AI classification service

Asks Gemini for a category/urgency judgment on complaint text or a photo.
Every call is a single attempt and always returns a ClassificationOutcome:
transport failures, empty replies and unparseable replies all come back as
a failed outcome so the caller can fall back to keyword urgency detection.
"""
import logging
from typing import Optional

from hostel_complaints.core.config import settings
from hostel_complaints.core.exceptions import ClassificationError, MalformedClassification
from hostel_complaints.schemas.classification import ClassificationOutcome
from hostel_complaints.services.ai_response import parse_classification, parse_image_classification
from hostel_complaints.services.gemini_client import GeminiClient

logger = logging.getLogger(__name__)

TEXT_PROMPT = """Classify this hostel complaint into category and urgency.

Categories: electricity, water, maintenance, cleanliness, staff
Urgency: high (safety/danger/emergency/hazard/short circuit/naked wires/fire) or low (routine)

Complaint: "{description}"

Reply with JSON only: {{"category":"...","urgency":"..."}}"""

IMAGE_PROMPT = """Analyze this hostel complaint image and provide:
1. Category: electricity/water/maintenance/cleanliness/staff
2. Urgency: high (safety hazard/emergency/danger) or low (routine)
3. Problem description: What issue is visible in the image
4. Suggested repair steps: Brief repair recommendations
5. Location details: Any visible room/area identifiers (optional)

Reply with JSON only: {"category":"...","urgency":"...","problemDescription":"...","suggestedRepairSteps":"...","detectedLocation":"..."}"""


class ComplaintClassifier:
    """Category/urgency classification for complaint text and photos"""

    def __init__(self, client: Optional[GeminiClient] = None, enabled: Optional[bool] = None):
        self.client = client or GeminiClient()
        self.enabled = settings.AI_ENABLED if enabled is None else enabled

        if self.enabled and not self.client.configured:
            logger.warning("GEMINI_API_KEY not set, AI classification will always fall back to keywords")

    @staticmethod
    def build_text_prompt(description: str) -> str:
        # Quotes would close the embedded string early
        return TEXT_PROMPT.format(description=description.replace('"', "'"))

    def _disabled(self, source: str) -> Optional[ClassificationOutcome]:
        if self.enabled:
            return None
        return ClassificationOutcome(source=source, succeeded=False, error="AI classification is disabled")

    async def classify_text(self, description: str) -> ClassificationOutcome:
        """
        Classify complaint text

        Callers are expected to skip very short input (see
        CLASSIFY_MIN_LENGTH); this method classifies whatever it is given.
        """
        disabled = self._disabled("text")
        if disabled:
            return disabled

        logger.info(f"Text classification started ({len(description)} chars)")
        try:
            reply = await self.client.generate(self.build_text_prompt(description))
        except ClassificationError as e:
            logger.warning(f"Text classification failed: {e.message}")
            return ClassificationOutcome(source="text", succeeded=False, error=e.message)

        parsed = parse_classification(reply)
        if not parsed.well_formed:
            error = MalformedClassification(f"{MalformedClassification.message}: {parsed.problem}")
            logger.warning(error.message)
            return ClassificationOutcome(
                source="text",
                succeeded=False,
                category=parsed.category,
                urgency=parsed.urgency,
                error=error.message,
            )

        logger.info(f"Text classified as {parsed.category.value}/{parsed.urgency.value}")
        return ClassificationOutcome(
            source="text",
            succeeded=True,
            category=parsed.category,
            urgency=parsed.urgency,
        )

    async def classify_image(self, image: bytes, mime_type: str = "image/jpeg") -> ClassificationOutcome:
        """Classify a complaint photo, one attempt per image"""
        disabled = self._disabled("image")
        if disabled:
            return disabled

        logger.info(f"Image classification started ({len(image)} bytes)")
        try:
            reply = await self.client.generate(IMAGE_PROMPT, image=image, mime_type=mime_type)
        except ClassificationError as e:
            logger.warning(f"Image classification failed: {e.message}")
            return ClassificationOutcome(source="image", succeeded=False, error=e.message)

        parsed = parse_image_classification(reply)
        result = parsed.classification
        if not parsed.well_formed:
            error = MalformedClassification(f"{MalformedClassification.message}: {parsed.problem}")
            logger.warning(error.message)
            return ClassificationOutcome(
                source="image",
                succeeded=False,
                category=result.category,
                urgency=result.urgency,
                image=result,
                error=error.message,
            )

        logger.info(f"Image classified as {result.category.value}/{result.urgency.value}")
        return ClassificationOutcome(
            source="image",
            succeeded=True,
            category=result.category,
            urgency=result.urgency,
            image=result,
        )


# Singleton instance
complaint_classifier = ComplaintClassifier()


def get_classifier() -> ComplaintClassifier:
    """Dependency returning the shared classifier"""
    return complaint_classifier
