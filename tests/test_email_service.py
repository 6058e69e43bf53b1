import asyncio

import pytest
import resend

from app import email_service
from app.email_templates import demo_booking_confirmation_template
from app.shared.errors import NotificationError


@pytest.fixture
def compiled(monkeypatch):
    compiled = []

    def fake_mjml_to_html(stream):
        compiled.append(stream.read())
        return {"html": "<html>compiled</html>", "errors": []}

    monkeypatch.setattr(email_service, "mjml_to_html", fake_mjml_to_html)
    return compiled


@pytest.fixture
def resend_calls(monkeypatch):
    calls = []

    def fake_send(params):
        calls.append(params)
        return {"id": "re_123"}

    monkeypatch.setattr(email_service, "RESEND_API_KEY", "re_test_key")
    monkeypatch.setattr(resend.Emails, "send", fake_send)
    return calls


def test_sends_compiled_html(compiled, resend_calls):
    result = asyncio.run(email_service.send_email("maria@example.com", "Hi", "<mjml></mjml>"))

    assert result == {"success": True, "id": "re_123"}
    assert compiled == ["<mjml></mjml>"]
    assert resend_calls[0]["to"] == ["maria@example.com"]
    assert resend_calls[0]["html"] == "<html>compiled</html>"
    assert resend_calls[0]["from"] == email_service.EMAIL_FROM_ADDRESS


def test_custom_from_address(compiled, resend_calls):
    asyncio.run(
        email_service.send_email(["a@example.com", "b@example.com"], "Hi", "<mjml></mjml>", from_address="x@y.z")
    )

    assert resend_calls[0]["from"] == "x@y.z"
    assert resend_calls[0]["to"] == ["a@example.com", "b@example.com"]


def test_resend_failure_raises_notification_error(compiled, monkeypatch):
    def broken_send(params):
        raise RuntimeError("rate limited")

    monkeypatch.setattr(email_service, "RESEND_API_KEY", "re_test_key")
    monkeypatch.setattr(resend.Emails, "send", broken_send)

    with pytest.raises(NotificationError, match="rate limited"):
        asyncio.run(email_service.send_email("maria@example.com", "Hi", "<mjml></mjml>"))


def test_missing_api_key(compiled, monkeypatch):
    monkeypatch.setattr(email_service, "RESEND_API_KEY", None)

    with pytest.raises(NotificationError, match="not configured"):
        asyncio.run(email_service.send_email("maria@example.com", "Hi", "<mjml></mjml>"))


def test_compile_failure(monkeypatch):
    def broken_compile(stream):
        raise ValueError("unclosed tag")

    monkeypatch.setattr(email_service, "mjml_to_html", broken_compile)

    with pytest.raises(NotificationError, match="unclosed tag"):
        email_service.compile_mjml_to_html("<mjml>")


def test_templates_escape_member_content():
    mjml = demo_booking_confirmation_template(
        member_name="<script>",
        demo_title="Tom & Jerry",
        event_name="Hack Night",
        event_date="Date TBD",
        requested_time=None,
        duration_minutes=5,
    )

    assert "<script>" not in mjml
    assert "Tom &amp; Jerry" in mjml
    assert "5 minutes" in mjml


def test_compiles_booking_template_with_mjml():
    mjml = demo_booking_confirmation_template(
        member_name="mariadev",
        demo_title="Robot Barista",
        event_name="Hack Night #42",
        event_date="Tuesday, March 3, 2026",
        requested_time="8:30pm",
        duration_minutes=90,
    )

    html = email_service.compile_mjml_to_html(mjml)

    assert "<html" in html.lower()
    assert "Robot Barista" in html
    assert "90 minutes" in html
