"""Event repository - Read-only hack night lookups"""

from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from ...models import Event


class EventRepository:
    @staticmethod
    def get_by_id(db: Session, event_id: str) -> Optional[Event]:
        """Get an event by its ID"""
        if not event_id:
            return None
        return db.query(Event).filter(Event.id == event_id).first()

    @staticmethod
    def format_event_date(start_at: Optional[datetime]) -> str:
        """Human-readable date, e.g. 'Tuesday, March 3, 2026'"""
        if not start_at:
            return "Date TBD"
        return f"{start_at:%A, %B} {start_at.day}, {start_at:%Y}"
