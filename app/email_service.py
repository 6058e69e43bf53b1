"""
Email Service using Resend
Compiles MJML templates to HTML and sends them through the Resend API
"""

import asyncio
import io
import logging
from typing import Optional, Union

import resend
from mjml import mjml_to_html

from .config import EMAIL_FROM_ADDRESS, RESEND_API_KEY
from .shared.errors import NotificationError

logger = logging.getLogger(__name__)

resend.api_key = RESEND_API_KEY


def compile_mjml_to_html(mjml_content: str) -> str:
    """Compile MJML template to production-ready HTML"""
    try:
        result = mjml_to_html(io.StringIO(mjml_content))
        # mjml_to_html returns a dict-like result with 'html' and 'errors' keys
        if isinstance(result, dict):
            if result.get("errors"):
                logger.warning(f"MJML compilation warnings: {result['errors']}")
            return result.get("html", "")
        if hasattr(result, "html"):
            if getattr(result, "errors", None):
                logger.warning(f"MJML compilation warnings: {result.errors}")
            return result.html
        return str(result)
    except Exception as e:
        logger.error(f"MJML compilation error: {e}")
        raise NotificationError(f"Failed to compile MJML template: {str(e)}") from e


async def send_email(
    to: Union[str, list[str]],
    subject: str,
    mjml_content: str,
    from_address: Optional[str] = None,
) -> dict:
    """
    Send an email using Resend

    Args:
        to: Recipient email(s)
        subject: Email subject line
        mjml_content: MJML template content (will be compiled to HTML)
        from_address: Optional custom from address

    Returns:
        {"success": True, "id": <resend message id>}

    Raises:
        NotificationError: if the service is not configured or the send fails
    """
    html_content = compile_mjml_to_html(mjml_content)

    recipients = [to] if isinstance(to, str) else to
    sender = from_address or EMAIL_FROM_ADDRESS

    if not RESEND_API_KEY:
        logger.error("❌ No email service configured - RESEND_API_KEY missing")
        raise NotificationError("Email service not configured")

    try:
        logger.info(f"📧 Sending email via Resend to: {recipients}")
        email_data = {
            "from": sender,
            "to": recipients,
            "subject": subject,
            "html": html_content,
        }

        # Resend's client is blocking; keep it off the event loop so sends can overlap
        response = await asyncio.to_thread(resend.Emails.send, email_data)
        logger.info(f"✅ Email sent successfully via Resend: {response}")
        message_id = response.get("id") if isinstance(response, dict) else None
        return {"success": True, "id": message_id}
    except Exception as e:
        logger.error(f"❌ Email send error to {recipients}: {e}")
        raise NotificationError(f"Failed to send email: {str(e)}") from e
