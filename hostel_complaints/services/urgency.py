"""
Final urgency for a complaint

The AI result is used when there is one, but it is never allowed to
under-call a complaint that mentions a hazard.
"""
import logging
from typing import Optional

from hostel_complaints.models.complaint import ComplaintUrgency

logger = logging.getLogger(__name__)

HIGH_URGENCY_KEYWORDS = (
    "hazard", "danger", "dangerous", "emergency", "urgent", "severe",
    "short circuit", "short-circuit", "exposed wire", "naked wire",
    "fire", "burning", "smoke", "spark", "electric shock", "electrocution",
    "flooding", "flood", "leak", "gas leak", "no water", "no electricity",
    "broken glass", "injury", "injured", "health", "safety", "risk",
    "immediate", "critical", "serious",
)


def matched_keywords(text: str) -> list:
    text_lower = (text or "").lower()
    return [keyword for keyword in HIGH_URGENCY_KEYWORDS if keyword in text_lower]


def has_high_urgency_keyword(text: str) -> bool:
    text_lower = (text or "").lower()
    return any(keyword in text_lower for keyword in HIGH_URGENCY_KEYWORDS)


def reconcile_urgency(
    complaint_text: str,
    ai_completed: bool,
    urgency_from_ai: Optional[ComplaintUrgency]
) -> ComplaintUrgency:
    """
    Combine the AI urgency with the keyword scan

    - AI completed: its value, except low becomes high when a keyword matches
    - AI did not complete: high if a keyword matches, otherwise low

    Only HIGH or LOW is ever returned.
    """
    keyword_high = has_high_urgency_keyword(complaint_text)

    if ai_completed and urgency_from_ai is not None:
        if urgency_from_ai == ComplaintUrgency.HIGH:
            return ComplaintUrgency.HIGH
        if keyword_high:
            logger.info(
                f"AI said {urgency_from_ai.value} but keywords {matched_keywords(complaint_text)} "
                "suggest high, overriding"
            )
            return ComplaintUrgency.HIGH
        return ComplaintUrgency.LOW

    if keyword_high:
        logger.debug("AI result unavailable, keyword detection: high")
        return ComplaintUrgency.HIGH
    return ComplaintUrgency.LOW
