"""
Complaint persistence

All reads are ordered newest first. Database failures are re-raised as
PersistenceError carrying the driver message; nothing is retried here.
"""
import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy import select, func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from hostel_complaints.core.exceptions import (
    ComplaintNotFound,
    InvalidStatusTransition,
    PersistenceError,
)
from hostel_complaints.models.complaint import (
    ACTIVE_STATUSES,
    STAFF_TRANSITIONS,
    Complaint,
    ComplaintCategory,
    ComplaintStatus,
    ComplaintUrgency,
)
from hostel_complaints.schemas.complaint import ComplaintRecord, ComplaintStats

logger = logging.getLogger(__name__)


class ComplaintRepository:
    """Complaint storage on top of an async SQLAlchemy session"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _scalars(self, query) -> List[Complaint]:
        try:
            result = await self.db.execute(query)
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to load complaints: {e}") from e
        return list(result.scalars().all())

    async def create_complaint(self, record: ComplaintRecord) -> int:
        now = datetime.utcnow()
        complaint = Complaint(**record.model_dump(), created_at=now, updated_at=now)
        try:
            self.db.add(complaint)
            await self.db.flush()
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to submit complaint: {e}") from e

        logger.info(f"Complaint {complaint.id} saved ({record.category.value}/{record.urgency.value})")
        return complaint.id

    async def get_complaint(self, complaint_id: int) -> Complaint:
        try:
            complaint = await self.db.get(Complaint, complaint_id)
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to load complaint: {e}") from e
        if complaint is None:
            raise ComplaintNotFound()
        return complaint

    async def list_complaints_for_user(
        self,
        user_id: int,
        status: Optional[ComplaintStatus] = None
    ) -> List[Complaint]:
        query = select(Complaint).where(Complaint.user_id == user_id)
        if status is not None:
            query = query.where(Complaint.status == status)
        return await self._scalars(query.order_by(Complaint.created_at.desc(), Complaint.id.desc()))

    async def list_active_complaints(self, user_id: int) -> List[Complaint]:
        query = (
            select(Complaint)
            .where(Complaint.user_id == user_id, Complaint.status.in_(ACTIVE_STATUSES))
            .order_by(Complaint.created_at.desc(), Complaint.id.desc())
        )
        return await self._scalars(query)

    async def list_all_complaints(
        self,
        status: Optional[ComplaintStatus] = None,
        urgency: Optional[ComplaintUrgency] = None,
        category: Optional[ComplaintCategory] = None,
        search: Optional[str] = None,
    ) -> List[Complaint]:
        query = select(Complaint)

        filters = []
        if status is not None:
            filters.append(Complaint.status == status)
        if urgency is not None:
            filters.append(Complaint.urgency == urgency)
        if category is not None:
            filters.append(Complaint.category == category)
        if search:
            pattern = f"%{search.strip().lower()}%"
            filters.append(or_(
                func.lower(Complaint.title).like(pattern),
                func.lower(Complaint.description).like(pattern),
                func.lower(Complaint.user_name).like(pattern),
                func.lower(Complaint.user_room).like(pattern),
            ))
        if filters:
            query = query.where(*filters)

        return await self._scalars(query.order_by(Complaint.created_at.desc(), Complaint.id.desc()))

    async def update_status(
        self,
        complaint_id: int,
        status: ComplaintStatus,
        notes: Optional[str] = None
    ) -> Complaint:
        """Staff status change; a same-status call only updates the notes"""
        complaint = await self.get_complaint(complaint_id)

        if status != complaint.status and status not in STAFF_TRANSITIONS[complaint.status]:
            raise InvalidStatusTransition(
                f"Cannot move a {complaint.status.value} complaint to {status.value}"
            )

        complaint.status = status
        if notes:
            complaint.admin_notes = notes
        complaint.updated_at = datetime.utcnow()

        try:
            await self.db.flush()
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to update complaint: {e}") from e

        logger.info(f"Complaint {complaint_id} status -> {status.value}")
        return complaint

    async def cancel_complaint(self, complaint_id: int, user_id: int) -> Complaint:
        """Cancellation by the author while the complaint is still pending"""
        complaint = await self.get_complaint(complaint_id)
        if complaint.user_id != user_id:
            raise ComplaintNotFound()
        if complaint.status != ComplaintStatus.PENDING:
            raise InvalidStatusTransition("Only pending complaints can be cancelled")

        complaint.status = ComplaintStatus.CANCELLED
        complaint.updated_at = datetime.utcnow()
        try:
            await self.db.flush()
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to cancel complaint: {e}") from e

        logger.info(f"Complaint {complaint_id} cancelled by user {user_id}")
        return complaint

    async def complaint_stats(self) -> ComplaintStats:
        try:
            status_rows = (await self.db.execute(
                select(Complaint.status, func.count(Complaint.id)).group_by(Complaint.status)
            )).all()
            category_rows = (await self.db.execute(
                select(Complaint.category, func.count(Complaint.id)).group_by(Complaint.category)
            )).all()
            high_urgency = (await self.db.execute(
                select(func.count(Complaint.id)).where(Complaint.urgency == ComplaintUrgency.HIGH)
            )).scalar() or 0
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to load statistics: {e}") from e

        by_status = {row[0]: row[1] for row in status_rows}
        by_category = {category.value: 0 for category in ComplaintCategory}
        for category, count in category_rows:
            by_category[category.value] = count

        return ComplaintStats(
            total_complaints=sum(by_status.values()),
            pending=by_status.get(ComplaintStatus.PENDING, 0),
            in_progress=by_status.get(ComplaintStatus.IN_PROGRESS, 0),
            resolved=by_status.get(ComplaintStatus.RESOLVED, 0),
            cancelled=by_status.get(ComplaintStatus.CANCELLED, 0),
            high_urgency=high_urgency,
            by_category=by_category,
        )
