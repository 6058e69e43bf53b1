import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from .database import Base


def generate_id():
    """Generate a UUID primary key"""
    return str(uuid.uuid4())


def utcnow() -> datetime:
    """Naive UTC timestamp, matching how timestamps are stored"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class DemoSlotStatus(str, enum.Enum):
    """Demo slot lifecycle status"""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELED = "canceled"


class Profile(Base):
    __tablename__ = "profiles"

    id = Column(String(36), primary_key=True, default=generate_id)
    clerk_user_id = Column(String(255), unique=True, index=True, nullable=True)  # Hosted auth user ID
    luma_email = Column(String(255), index=True, nullable=False)  # Email used in Luma registration
    github_username = Column(String(255), nullable=True)
    is_app_admin = Column(Boolean, default=False, nullable=False)  # Calendar administrator
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    demo_slots = relationship("DemoSlot", back_populates="member")


class Event(Base):
    __tablename__ = "events"

    id = Column(String(36), primary_key=True, default=generate_id)
    luma_event_id = Column(String(255), unique=True, nullable=True)  # e.g. "evt-xxxxxxxxxxxxx"
    name = Column(String(255), nullable=False)
    start_at = Column(DateTime, nullable=True)
    timezone = Column(String(64), default="America/New_York", nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    demo_slots = relationship("DemoSlot", back_populates="event")


class DemoSlot(Base):
    __tablename__ = "demo_slots"

    id = Column(String(36), primary_key=True, default=generate_id)
    # member_id and event_id are immutable after creation
    member_id = Column(
        String(36), ForeignKey("profiles.id", ondelete="CASCADE"), index=True, nullable=False
    )
    event_id = Column(
        String(36), ForeignKey("events.id", ondelete="CASCADE"), index=True, nullable=False
    )
    title = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    requested_time = Column(Text, nullable=True)  # Free text, advisory only
    duration_minutes = Column(Integer, default=5, nullable=False)
    status = Column(
        Enum(
            DemoSlotStatus,
            name="demo_slot_status",
            values_callable=lambda statuses: [s.value for s in statuses],
            native_enum=False,
        ),
        default=DemoSlotStatus.PENDING,
        index=True,
        nullable=False,
    )
    confirmed_by_organizer = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, nullable=False)

    member = relationship("Profile", back_populates="demo_slots")
    event = relationship("Event", back_populates="demo_slots")
