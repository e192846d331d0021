import asyncio
from datetime import datetime
from io import BytesIO

import pytest
from PIL import Image

from hostel_complaints.core.exceptions import DraftNotFound
from hostel_complaints.models.complaint import ComplaintCategory, ComplaintUrgency
from hostel_complaints.models.user import User, UserRole
from hostel_complaints.schemas.classification import ClassificationOutcome, ImageClassification
from hostel_complaints.services.complaint_assembly import assemble_complaint

HAZARD_TEXT = "There is a short circuit and sparks near my bed"
DRIP_TEXT = "The tap in my bathroom drips slowly"


def text_outcome(category, urgency) -> ClassificationOutcome:
    return ClassificationOutcome(source="text", succeeded=True, category=category, urgency=urgency)


def image_outcome(category, urgency, description="Water pooling under the sink") -> ClassificationOutcome:
    return ClassificationOutcome(
        source="image",
        succeeded=True,
        category=category,
        urgency=urgency,
        image=ImageClassification(
            category=category,
            urgency=urgency,
            problem_description=description,
            suggested_repair_steps="Replace the drain seal",
        ),
    )


def png_bytes() -> bytes:
    buf = BytesIO()
    Image.new("RGB", (64, 48), color=(10, 120, 200)).save(buf, format="PNG")
    return buf.getvalue()


@pytest.mark.asyncio
async def test_text_edits_are_debounced_into_one_call(registry, fake_classifier):
    fake_classifier.text_outcome = text_outcome(ComplaintCategory.WATER, ComplaintUrgency.LOW)
    draft = registry.create(owner_id=1)

    for end in range(25, len(DRIP_TEXT) + 1):
        registry.update_text(draft, DRIP_TEXT[:end])
    await registry.debouncer.wait(draft.id)

    assert fake_classifier.text_calls == [DRIP_TEXT]
    assert draft.ai_completed is True
    assert draft.category == ComplaintCategory.WATER
    assert draft.category_source == "ai"
    assert draft.urgency_from_ai == ComplaintUrgency.LOW


@pytest.mark.asyncio
async def test_short_text_is_never_classified(registry, fake_classifier):
    draft = registry.create(owner_id=1)

    registry.update_text(draft, "Tap drips")
    await asyncio.sleep(0.1)

    assert fake_classifier.text_calls == []
    assert draft.ai_completed is False


@pytest.mark.asyncio
async def test_shortening_text_cancels_the_queued_call(registry, fake_classifier):
    draft = registry.create(owner_id=1)

    registry.update_text(draft, DRIP_TEXT)
    registry.update_text(draft, "Tap")
    await asyncio.sleep(0.1)

    assert fake_classifier.text_calls == []


@pytest.mark.asyncio
async def test_outcome_for_outdated_text_is_dropped(registry, fake_classifier):
    fake_classifier.gate = asyncio.Event()
    fake_classifier.text_replies = {
        DRIP_TEXT: text_outcome(ComplaintCategory.WATER, ComplaintUrgency.LOW),
        HAZARD_TEXT: text_outcome(ComplaintCategory.ELECTRICITY, ComplaintUrgency.HIGH),
    }
    draft = registry.create(owner_id=1)

    registry.update_text(draft, DRIP_TEXT)
    while not fake_classifier.text_calls:
        await asyncio.sleep(0.01)

    # The first call is in flight; edit again and let the second call fire
    registry.update_text(draft, HAZARD_TEXT)
    while len(fake_classifier.text_calls) < 2:
        await asyncio.sleep(0.01)
    fake_classifier.gate.set()
    await registry.debouncer.wait(draft.id)

    assert draft.text_outcome.revision == draft.text_revision
    assert draft.category == ComplaintCategory.ELECTRICITY
    assert draft.urgency_from_ai == ComplaintUrgency.HIGH


@pytest.mark.asyncio
async def test_outcome_for_discarded_draft_is_dropped(registry, fake_classifier):
    fake_classifier.gate = asyncio.Event()
    fake_classifier.text_outcome = text_outcome(ComplaintCategory.WATER, ComplaintUrgency.LOW)
    draft = registry.create(owner_id=1)

    registry.update_text(draft, DRIP_TEXT)
    while not fake_classifier.text_calls:
        await asyncio.sleep(0.01)
    registry.discard(draft.id)
    fake_classifier.gate.set()
    await registry.debouncer.wait(draft.id)

    assert draft.text_outcome is None
    with pytest.raises(DraftNotFound):
        registry.get(draft.id, owner_id=1)


@pytest.mark.asyncio
async def test_user_category_wins_and_keeps_ai_urgency(registry, fake_classifier):
    fake_classifier.text_outcome = text_outcome(ComplaintCategory.ELECTRICITY, ComplaintUrgency.HIGH)
    draft = registry.create(owner_id=1)
    registry.update_text(draft, HAZARD_TEXT)
    await registry.debouncer.wait(draft.id)

    registry.select_category(draft, ComplaintCategory.MAINTENANCE)

    assert draft.category == ComplaintCategory.MAINTENANCE
    assert draft.category_source == "user"
    assert draft.urgency_from_ai == ComplaintUrgency.HIGH
    assert draft.ai_completed is True


@pytest.mark.asyncio
async def test_successful_image_outcome_takes_priority(registry, fake_classifier):
    fake_classifier.text_outcome = text_outcome(ComplaintCategory.MAINTENANCE, ComplaintUrgency.LOW)
    fake_classifier.image_outcome = image_outcome(ComplaintCategory.WATER, ComplaintUrgency.HIGH)
    draft = registry.create(owner_id=1)

    await registry.attach_image(draft, png_bytes())
    registry.update_text(draft, "The sink cabinet is wet every morning")
    await registry.debouncer.wait(draft.id)

    # Text result arrived last but the photo result still decides
    assert draft.text_outcome.succeeded is True
    assert draft.category == ComplaintCategory.WATER
    assert draft.urgency_from_ai == ComplaintUrgency.HIGH
    assert draft.image_classification.problem_description == "Water pooling under the sink"


@pytest.mark.asyncio
async def test_failed_image_outcome_keeps_text_result(registry, fake_classifier):
    fake_classifier.text_outcome = text_outcome(ComplaintCategory.WATER, ComplaintUrgency.LOW)
    draft = registry.create(owner_id=1)
    registry.update_text(draft, DRIP_TEXT)
    await registry.debouncer.wait(draft.id)

    outcome = await registry.attach_image(draft, png_bytes())

    assert outcome.succeeded is False
    assert draft.category == ComplaintCategory.WATER
    assert draft.image_classification is None
    assert draft.image_data is not None


@pytest.mark.asyncio
async def test_image_fills_empty_description(registry, fake_classifier):
    fake_classifier.image_outcome = image_outcome(
        ComplaintCategory.CLEANLINESS, ComplaintUrgency.LOW, description="Overflowing bin in the corridor"
    )
    draft = registry.create(owner_id=1)

    await registry.attach_image(draft, png_bytes())

    assert draft.text == "Overflowing bin in the corridor"
    assert fake_classifier.text_calls == []


@pytest.mark.asyncio
async def test_removing_image_drops_its_analysis(registry, fake_classifier):
    fake_classifier.image_outcome = image_outcome(ComplaintCategory.WATER, ComplaintUrgency.HIGH)
    draft = registry.create(owner_id=1)
    await registry.attach_image(draft, png_bytes())

    registry.remove_image(draft)

    assert draft.image_data is None
    assert draft.image_classification is None
    assert draft.ai_completed is False


@pytest.mark.asyncio
async def test_stale_image_outcome_is_dropped(registry, fake_classifier):
    draft = registry.create(owner_id=1)
    late = image_outcome(ComplaintCategory.WATER, ComplaintUrgency.HIGH).for_revision(draft.image_revision)

    registry.remove_image(draft)

    assert registry.apply_outcome(draft, late) is False
    assert draft.image_outcome is None


@pytest.mark.asyncio
async def test_submission_reflects_draft_state(registry, fake_classifier):
    fake_classifier.text_outcome = text_outcome(ComplaintCategory.WATER, ComplaintUrgency.LOW)
    draft = registry.create(owner_id=1)
    registry.update_text(draft, DRIP_TEXT)
    registry.set_room(draft, "  ")
    await registry.debouncer.wait(draft.id)

    submission = draft.submission()

    assert submission.description == DRIP_TEXT
    assert submission.category == ComplaintCategory.WATER
    assert submission.room is None
    assert submission.ai_completed is True
    assert submission.urgency_from_ai == ComplaintUrgency.LOW


@pytest.mark.asyncio
async def test_drafts_are_private_to_their_owner(registry):
    draft = registry.create(owner_id=1)

    assert registry.get(draft.id, owner_id=1) is draft
    with pytest.raises(DraftNotFound):
        registry.get(draft.id, owner_id=2)


@pytest.mark.asyncio
async def test_edited_text_drops_the_earlier_classification(registry, fake_classifier):
    fake_classifier.text_outcome = text_outcome(ComplaintCategory.ELECTRICITY, ComplaintUrgency.HIGH)
    draft = registry.create(owner_id=1)
    registry.update_text(draft, HAZARD_TEXT)
    await registry.debouncer.wait(draft.id)
    assert draft.urgency_from_ai == ComplaintUrgency.HIGH

    # Too short to be classified again
    registry.update_text(draft, "Tap drips.")
    registry.select_category(draft, ComplaintCategory.WATER)

    assert draft.ai_completed is False
    assert draft.urgency_from_ai is None
    assert draft.category_source == "user"

    student = User(id=1, email="ada@hostel.edu", name="Ada Student", room="A-101", role=UserRole.STUDENT)
    record = assemble_complaint(draft.submission(), student)
    assert record.category == ComplaintCategory.WATER
    assert record.urgency == ComplaintUrgency.LOW


@pytest.mark.asyncio
async def test_edited_text_without_user_category_has_no_category(registry, fake_classifier):
    fake_classifier.text_outcome = text_outcome(ComplaintCategory.WATER, ComplaintUrgency.LOW)
    draft = registry.create(owner_id=1)
    registry.update_text(draft, DRIP_TEXT)
    await registry.debouncer.wait(draft.id)

    registry.update_text(draft, "Tap drips.")

    assert draft.category is None
    assert draft.submission().category is None


@pytest.mark.asyncio
async def test_untouched_drafts_expire(registry, fake_classifier):
    stale = registry.create(owner_id=1)
    registry.update_text(stale, DRIP_TEXT)
    stale.touched_at = datetime.utcnow() - registry.ttl - registry.ttl
    fresh = registry.create(owner_id=2)

    assert registry.debouncer.pending(stale.id) is False
    with pytest.raises(DraftNotFound):
        registry.get(stale.id, owner_id=1)
    assert registry.get(fresh.id, owner_id=2) is fresh

    await asyncio.sleep(0.1)
    assert fake_classifier.text_calls == []


@pytest.mark.asyncio
async def test_reading_a_draft_keeps_it_alive(registry):
    draft = registry.create(owner_id=1)
    draft.touched_at = datetime.utcnow() - registry.ttl / 2

    registry.get(draft.id, owner_id=1)
    draft_age = datetime.utcnow() - draft.touched_at

    assert draft_age < registry.ttl / 2
    assert registry.evict_expired() == 0
