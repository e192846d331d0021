"""Helpers for parsing the loosely structured JSON replies of the AI model."""

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Optional

from hostel_complaints.models.complaint import ComplaintCategory, ComplaintUrgency
from hostel_complaints.schemas.classification import (
    IMAGE_DESCRIPTION_PLACEHOLDER,
    REPAIR_STEPS_PLACEHOLDER,
    ImageClassification,
)

logger = logging.getLogger(__name__)

DEFAULT_CATEGORY = ComplaintCategory.MAINTENANCE
DEFAULT_URGENCY = ComplaintUrgency.LOW

_VALID_CATEGORIES = {c.value: c for c in ComplaintCategory}


@dataclass(frozen=True)
class ParsedReply:
    category: ComplaintCategory
    urgency: ComplaintUrgency
    well_formed: bool
    problem: Optional[str] = None


@dataclass(frozen=True)
class ParsedImageReply:
    classification: ImageClassification
    well_formed: bool
    problem: Optional[str] = None


def strip_reply_wrapping(text: str) -> str:
    """Remove code fences and a leading `json` marker around a reply."""
    content = (text or "").strip()
    if content.startswith("```"):
        content = content[3:]
        if content.rstrip().endswith("```"):
            content = content.rstrip()[:-3]
        content = content.strip()
    if content.lower().startswith("json"):
        content = content[4:]
    return content.strip()


def parse_json_object(text: str) -> Optional[dict]:
    content = strip_reply_wrapping(text)
    try:
        data = json.loads(content)
    except json.JSONDecodeError as exc:
        match = re.search(r"\{[\s\S]*\}", content)
        if not match:
            logger.warning(f"Failed to parse JSON object: {exc}")
            return None
        try:
            data = json.loads(match.group(0))
        except json.JSONDecodeError as inner_exc:
            logger.warning(f"Failed to parse JSON object: {inner_exc}")
            return None
    return data if isinstance(data, dict) else None


def normalize_category(value: Any) -> ComplaintCategory:
    category = str(value or "").strip().lower()
    if category not in _VALID_CATEGORIES:
        logger.warning(f"Invalid category '{value}', defaulting to maintenance")
        return DEFAULT_CATEGORY
    return _VALID_CATEGORIES[category]


def normalize_urgency(value: Any) -> ComplaintUrgency:
    # Only high and low are assigned; medium collapses to low
    urgency = str(value or "").strip().lower()
    if urgency == ComplaintUrgency.HIGH.value:
        return ComplaintUrgency.HIGH
    if urgency != ComplaintUrgency.LOW.value:
        logger.warning(f"Urgency '{value}' is not high/low, defaulting to low")
    return ComplaintUrgency.LOW


def _text_field(data: dict, key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    return str(value).strip()


def parse_classification(text: str) -> ParsedReply:
    """
    Parse a `{"category": ..., "urgency": ...}` reply.

    Never raises. A reply that is not a JSON object or lacks either key comes
    back as maintenance/low with `well_formed=False`.
    """
    data = parse_json_object(text)
    if data is None:
        return ParsedReply(DEFAULT_CATEGORY, DEFAULT_URGENCY, False, "reply is not a JSON object")

    missing = [key for key in ("category", "urgency") if key not in data]
    if missing:
        logger.warning(f"Classification reply missing keys: {missing}")
        return ParsedReply(
            DEFAULT_CATEGORY, DEFAULT_URGENCY, False, f"missing keys: {', '.join(missing)}"
        )

    return ParsedReply(
        category=normalize_category(data["category"]),
        urgency=normalize_urgency(data["urgency"]),
        well_formed=True,
    )


def parse_image_classification(text: str) -> ParsedImageReply:
    """Parse a vision reply; empty guidance is replaced with placeholders."""
    parsed = parse_classification(text)
    data = parse_json_object(text) if parsed.well_formed else None

    if data is None:
        classification = ImageClassification(
            category=parsed.category,
            urgency=parsed.urgency,
            problem_description="Unable to analyze image",
            suggested_repair_steps=REPAIR_STEPS_PLACEHOLDER,
        )
        return ParsedImageReply(classification, False, parsed.problem)

    location = _text_field(data, "detectedLocation")
    classification = ImageClassification(
        category=parsed.category,
        urgency=parsed.urgency,
        problem_description=_text_field(data, "problemDescription") or IMAGE_DESCRIPTION_PLACEHOLDER,
        suggested_repair_steps=_text_field(data, "suggestedRepairSteps") or REPAIR_STEPS_PLACEHOLDER,
        detected_location=location or None,
    )
    return ParsedImageReply(classification, True)
