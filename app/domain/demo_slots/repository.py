"""Demo slot repository - Database operations for demo slots"""

from datetime import timedelta
from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models import DemoSlot, DemoSlotStatus, Event, utcnow
from ...shared.errors import ValidationError

DEFAULT_DURATION_MINUTES = 5

# Fields a slot may change after creation; member_id/event_id are fixed
MUTABLE_FIELDS = {
    "title",
    "description",
    "requested_time",
    "duration_minutes",
    "status",
    "confirmed_by_organizer",
}


def _next_timestamp(slot: DemoSlot):
    """Current time, nudged forward so updated_at always advances"""
    now = utcnow()
    if slot.updated_at and now <= slot.updated_at:
        now = slot.updated_at + timedelta(microseconds=1)
    return now


class DemoSlotRepository:
    """Repository for demo slot database operations"""

    @staticmethod
    def create(
        db: Session,
        member_id: str,
        event_id: str,
        title: str,
        description: Optional[str] = None,
        requested_time: Optional[str] = None,
        duration_minutes: Optional[int] = DEFAULT_DURATION_MINUTES,
    ) -> DemoSlot:
        """Create a pending demo slot"""
        if not member_id or not event_id:
            raise ValidationError("Member and event are required")
        if not title or not title.strip():
            raise ValidationError("Title is required")

        now = utcnow()
        slot = DemoSlot(
            member_id=member_id,
            event_id=event_id,
            title=title,
            description=description or None,
            requested_time=requested_time or None,
            duration_minutes=duration_minutes or DEFAULT_DURATION_MINUTES,
            status=DemoSlotStatus.PENDING,
            confirmed_by_organizer=False,
            created_at=now,
            updated_at=now,
        )
        db.add(slot)
        db.commit()
        db.refresh(slot)
        return slot

    @staticmethod
    def get_by_id(db: Session, slot_id: str) -> Optional[DemoSlot]:
        """Get a demo slot by ID"""
        if not slot_id:
            return None
        return db.query(DemoSlot).filter(DemoSlot.id == slot_id).first()

    @staticmethod
    def list_by_event(
        db: Session, event_id: str, status: Optional[DemoSlotStatus] = None
    ) -> list[DemoSlot]:
        """Get all demo slots for an event with their presenters, oldest request first"""
        query = (
            db.query(DemoSlot)
            .options(joinedload(DemoSlot.member))
            .filter(DemoSlot.event_id == event_id)
        )
        if status:
            query = query.filter(DemoSlot.status == status)
        return query.order_by(DemoSlot.created_at.asc(), DemoSlot.id.asc()).all()

    @staticmethod
    def list_by_member(
        db: Session, member_id: str, status: Optional[DemoSlotStatus] = None
    ) -> list[DemoSlot]:
        """Get all demo slots requested by a member, oldest request first"""
        query = db.query(DemoSlot).filter(DemoSlot.member_id == member_id)
        if status:
            query = query.filter(DemoSlot.status == status)
        return query.order_by(DemoSlot.created_at.asc(), DemoSlot.id.asc()).all()

    @staticmethod
    def list_all(db: Session, status: Optional[DemoSlotStatus] = None) -> list[DemoSlot]:
        """Get every demo slot, optionally filtered by status"""
        query = db.query(DemoSlot)
        if status:
            query = query.filter(DemoSlot.status == status)
        return query.order_by(DemoSlot.created_at.asc(), DemoSlot.id.asc()).all()

    @staticmethod
    def list_with_members_and_events(
        db: Session,
        event_id: Optional[str] = None,
        status: Optional[DemoSlotStatus] = None,
    ) -> list[DemoSlot]:
        """Admin listing with member and event loaded, most recent event first"""
        query = (
            db.query(DemoSlot)
            .join(Event, DemoSlot.event_id == Event.id)
            .options(joinedload(DemoSlot.member), joinedload(DemoSlot.event))
        )
        if event_id:
            query = query.filter(DemoSlot.event_id == event_id)
        if status:
            query = query.filter(DemoSlot.status == status)

        return query.order_by(
            Event.start_at.desc(), DemoSlot.created_at.asc(), DemoSlot.id.asc()
        ).all()

    @staticmethod
    def update(db: Session, slot_id: str, **updates) -> bool:
        """
        Update a demo slot with the provided fields.

        Only fields in MUTABLE_FIELDS are accepted. updated_at is always
        stamped, even when no field changes.
        Returns False if the slot does not exist.
        """
        unknown = set(updates) - MUTABLE_FIELDS
        if unknown:
            raise ValidationError(f"Cannot update fields: {', '.join(sorted(unknown))}")

        slot = DemoSlotRepository.get_by_id(db, slot_id)
        if not slot:
            return False

        for key, value in updates.items():
            setattr(slot, key, value)
        slot.updated_at = _next_timestamp(slot)

        db.commit()
        db.refresh(slot)
        return True

    @staticmethod
    def delete(db: Session, slot_id: str) -> bool:
        """Delete a demo slot"""
        slot = DemoSlotRepository.get_by_id(db, slot_id)
        if not slot:
            return False
        db.delete(slot)
        db.commit()
        return True

