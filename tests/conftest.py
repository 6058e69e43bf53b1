import asyncio
import os
from datetime import datetime

# Keep the module-level engine off disk; tests bind their own engine below
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["DB_LOG_SLOW_QUERIES"] = "false"

import pytest
from fastapi import BackgroundTasks, Depends, HTTPException, Request
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.auth import get_current_profile
from app.database import Base, get_db, get_session_factory
from app.domain.demo_slots.notifications import DemoSlotNotifier, NotificationConfig
from app.domain.demo_slots.router import get_notifier
from app.domain.demo_slots.service import DemoSlotService
from app.main import app
from app.models import Event, Profile
from app.shared.errors import NotificationError

ORGANIZERS = ["ana@hellomiami.community", "ben@hellomiami.community", "cy@hellomiami.community"]


class FakeEmailSender:
    """Records sends; recipients in fail_for (or every recipient when fail_all) raise"""

    def __init__(self):
        self.calls = []
        self.fail_for = set()
        self.fail_all = False

    async def __call__(self, to, subject, mjml_content):
        self.calls.append({"to": to, "subject": subject, "mjml_content": mjml_content})
        if self.fail_all or to in self.fail_for:
            raise NotificationError(f"Failed to send email: mailbox {to} unavailable")
        return {"success": True, "id": f"msg-{len(self.calls)}"}

    def subjects(self):
        return [call["subject"] for call in self.calls]


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def sender():
    return FakeEmailSender()


@pytest.fixture
def notification_config():
    return NotificationConfig(organizer_emails=list(ORGANIZERS))


@pytest.fixture
def notifier(notification_config, session_factory, sender):
    return DemoSlotNotifier(notification_config, session_factory, send_email=sender)


@pytest.fixture
def service(db, notifier):
    return DemoSlotService(db, notifier, BackgroundTasks())


def run_background(service: DemoSlotService) -> None:
    """Run (and clear) the background tasks a service scheduled"""
    asyncio.run(service.background_tasks())
    service.background_tasks.tasks.clear()


def add_profile(db: Session, **overrides) -> Profile:
    values = {
        "clerk_user_id": None,
        "luma_email": "member@example.com",
        "github_username": None,
        "is_app_admin": False,
    }
    values.update(overrides)
    profile = Profile(**values)
    db.add(profile)
    db.commit()
    db.refresh(profile)
    return profile


@pytest.fixture
def member(db):
    return add_profile(
        db, id="m1", clerk_user_id="user_member", luma_email="maria@example.com", github_username="mariadev"
    )


@pytest.fixture
def other_member(db):
    return add_profile(db, id="m2", clerk_user_id="user_other", luma_email="otto@example.com")


@pytest.fixture
def admin(db):
    return add_profile(
        db, id="a1", clerk_user_id="user_admin", luma_email="admin@hellomiami.community", is_app_admin=True
    )


@pytest.fixture
def event(db):
    event = Event(id="e1", luma_event_id="evt-123", name="Hack Night #42", start_at=datetime(2026, 3, 3, 19, 0))
    db.add(event)
    db.commit()
    db.refresh(event)
    return event


@pytest.fixture
def client(db, session_factory, notifier):
    """API client; X-Test-Profile selects the signed-in profile"""

    def override_get_db():
        yield db

    def override_current_profile(request: Request, session: Session = Depends(get_db)) -> Profile:
        profile_id = request.headers.get("X-Test-Profile")
        profile = session.get(Profile, profile_id) if profile_id else None
        if not profile:
            raise HTTPException(status_code=401, detail="Not authenticated")
        return profile

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_notifier] = lambda: notifier
    app.dependency_overrides[get_current_profile] = override_current_profile

    yield TestClient(app)

    app.dependency_overrides.clear()
