"""
Demo slot notifications
Booking confirmations, status updates and organizer alerts for demo slots.

Every operation returns a result dict instead of raising so callers running
it in the background only have to log the outcome.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from pydantic import BaseModel
from sqlalchemy.orm import Session, sessionmaker

from ... import email_service
from ...config import APP_ADMIN_EMAILS
from ...email_templates import (
    demo_booking_confirmation_template,
    demo_status_update_template,
    new_demo_notification_template,
)
from ...models import DemoSlotStatus
from ...shared.validators import parse_email_list
from ..events.repository import EventRepository
from ..profiles.repository import ProfileRepository
from .schemas import DemoSlotRead

logger = logging.getLogger(__name__)

EmailSender = Callable[..., Awaitable[dict]]

DEFAULT_EVENT_NAME = "Hack Night"


class NotificationConfig(BaseModel):
    """Explicit settings for demo slot notifications"""

    organizer_emails: list[str] = []

    @classmethod
    def from_env(cls) -> "NotificationConfig":
        return cls(organizer_emails=parse_email_list(APP_ADMIN_EMAILS))


class SlotContext(BaseModel):
    """Member and event details needed to render an email"""

    member_email: str
    member_name: str
    event_name: str
    event_date: str


def _result(success: bool, error: Optional[str] = None) -> dict:
    return {"success": success, "error": error}


class DemoSlotNotifier:
    """Sends demo slot emails; opens its own DB sessions since it runs after the request"""

    def __init__(
        self,
        config: NotificationConfig,
        session_factory: sessionmaker,
        send_email: Optional[EmailSender] = None,
    ):
        self.config = config
        self.session_factory = session_factory
        self.send_email = send_email or email_service.send_email

    def _load_context(self, slot: DemoSlotRead) -> Optional[SlotContext]:
        db: Session = self.session_factory()
        try:
            member = ProfileRepository.get_by_id(db, slot.memberId)
            event = EventRepository.get_by_id(db, slot.eventId)
            if not member or not event:
                return None
            return SlotContext(
                member_email=member.luma_email,
                member_name=ProfileRepository.display_name(member),
                event_name=event.name or DEFAULT_EVENT_NAME,
                event_date=EventRepository.format_event_date(event.start_at),
            )
        finally:
            db.close()

    async def _deliver(self, to: str, subject: str, mjml_content: str) -> dict:
        """Single send attempt; transport errors become a failed result"""
        try:
            response = await self.send_email(to=to, subject=subject, mjml_content=mjml_content)
        except Exception as e:
            logger.error(f"❌ Failed to send '{subject}' to {to}: {e}")
            return _result(False, str(e))

        if isinstance(response, dict) and response.get("success") is False:
            return _result(False, response.get("error") or "Unknown email error")
        return _result(True)

    async def send_booking_confirmation(self, slot: DemoSlotRead) -> dict:
        """Send confirmation email to member after booking demo slot"""
        try:
            context = self._load_context(slot)
            if not context:
                return _result(False, "Member or event not found")

            mjml_content = demo_booking_confirmation_template(
                member_name=context.member_name,
                demo_title=slot.title,
                event_name=context.event_name,
                event_date=context.event_date,
                requested_time=slot.requestedTime,
                duration_minutes=slot.durationMinutes or 5,
            )
            logger.info(f"📧 Sending demo booking confirmation for slot {slot.id}")
            return await self._deliver(
                context.member_email, f"Demo Slot Received: {slot.title}", mjml_content
            )
        except Exception as e:
            logger.error(f"❌ Failed to send demo booking confirmation: {e}")
            return _result(False, str(e))

    async def send_status_update(self, slot: DemoSlotRead, status: DemoSlotStatus) -> dict:
        """Send status update email to member when demo is confirmed or canceled"""
        status = DemoSlotStatus(status)
        if status not in (DemoSlotStatus.CONFIRMED, DemoSlotStatus.CANCELED):
            raise ValueError(f"No status email for '{status.value}'")

        try:
            context = self._load_context(slot)
            if not context:
                return _result(False, "Member or event not found")

            mjml_content = demo_status_update_template(
                member_name=context.member_name,
                demo_title=slot.title,
                event_name=context.event_name,
                event_date=context.event_date,
                status=status.value,
                requested_time=slot.requestedTime,
                duration_minutes=slot.durationMinutes or 5,
            )
            status_text = "Confirmed" if status == DemoSlotStatus.CONFIRMED else "Canceled"
            logger.info(f"📧 Sending demo status update ({status.value}) for slot {slot.id}")
            return await self._deliver(
                context.member_email, f"Demo Slot {status_text}: {slot.title}", mjml_content
            )
        except Exception as e:
            logger.error(f"❌ Failed to send demo status update: {e}")
            return _result(False, str(e))

    async def notify_organizers(self, slot: DemoSlotRead) -> dict:
        """Notify every organizer of a new demo booking; all sends are attempted"""
        organizer_emails = self.config.organizer_emails
        if not organizer_emails:
            logger.warning("⚠️ No organizer emails configured")
            return _result(False, "No organizer emails configured")

        try:
            context = self._load_context(slot)
            if not context:
                return _result(False, "Member or event not found")

            mjml_content = new_demo_notification_template(
                organizer_name="Organizer",
                member_name=context.member_name,
                demo_title=slot.title,
                demo_description=slot.description,
                event_name=context.event_name,
                event_date=context.event_date,
                requested_time=slot.requestedTime,
                duration_minutes=slot.durationMinutes or 5,
            )
            subject = f"New Demo Booking: {slot.title}"

            results = await asyncio.gather(
                *(self._deliver(email, subject, mjml_content) for email in organizer_emails)
            )
        except Exception as e:
            logger.error(f"❌ Failed to notify organizers: {e}")
            return _result(False, str(e))

        failed_count = sum(1 for result in results if not result["success"])
        if failed_count:
            return _result(
                False,
                f"Failed to send {failed_count} of {len(results)} organizer notifications",
            )

        logger.info(f"✅ Notified {len(results)} organizers of demo slot {slot.id}")
        return _result(True)
