"""
MJML Email Templates
Demo slot emails using MJML for responsive, cross-client compatibility
"""

from html import escape
from typing import Optional

from .config import APP_URL

# hello_miami brand colors
THEME = {
    "primary": "#22c55e",
    "primary_dark": "#16a34a",
    "background": "#f8fafc",
    "card_bg": "#ffffff",
    "text_primary": "#0f172a",
    "text_secondary": "#334155",
    "text_muted": "#64748b",
    "border": "#e2e8f0",
    "detail_bg": "#f0fdf4",
    "success": "#22c55e",
    "danger": "#ef4444",
}

FOOTER_TAGLINE = "hello_miami - Miami's no-ego builder community"
FOOTER_VENUES = "The DOCK (Wynwood) • Tuesdays | Moonlighter FabLab (South Beach) • Thursdays"


def get_base_template(
    title: str,
    preview_text: str,
    content_sections: str,
    cta_url: Optional[str] = None,
    cta_label: Optional[str] = None,
    footer_lines: Optional[list[str]] = None,
) -> str:
    """Base MJML template wrapper for all emails"""

    cta_section = ""
    if cta_url and cta_label:
        cta_section = f"""
        <mj-section background-color="{THEME['card_bg']}" padding="0 40px 32px 40px">
          <mj-column>
            <mj-button
              href="{cta_url}"
              background-color="{THEME['primary']}"
              color="#ffffff"
              font-weight="600"
              border-radius="4px"
              padding="12px 24px"
              font-size="16px">
              {cta_label}
            </mj-button>
          </mj-column>
        </mj-section>
        """

    footer = "".join(
        f"""
            <mj-text align="center" font-size="13px" color="#94a3b8" padding="4px 0 0 0">
              {line}
            </mj-text>"""
        for line in (footer_lines or [FOOTER_TAGLINE, FOOTER_VENUES])
    )

    return f"""
    <mjml>
      <mj-head>
        <mj-title>{title}</mj-title>
        <mj-preview>{preview_text}</mj-preview>
        <mj-attributes>
          <mj-all font-family="-apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, Helvetica, Arial, sans-serif" />
          <mj-text font-size="16px" line-height="1.6" color="{THEME['text_secondary']}" />
        </mj-attributes>
      </mj-head>
      <mj-body background-color="{THEME['background']}">
        <!-- Header -->
        <mj-section background-color="{THEME['primary']}" padding="24px 20px">
          <mj-column>
            <mj-text align="center" font-size="28px" font-weight="700" color="#ffffff" padding="0">
              hello_miami
            </mj-text>
            <mj-text align="center" font-size="18px" color="#ffffff" padding="8px 0 0 0">
              {title}
            </mj-text>
          </mj-column>
        </mj-section>

        <!-- Main Content -->
        <mj-section background-color="{THEME['card_bg']}" padding="32px 40px 16px 40px">
          <mj-column>
            {content_sections}
          </mj-column>
        </mj-section>

        {cta_section}

        <!-- Footer -->
        <mj-section padding="24px 20px">
          <mj-column>{footer}
          </mj-column>
        </mj-section>
      </mj-body>
    </mjml>
    """


def _demo_details(rows: list[tuple[str, Optional[str]]]) -> str:
    """Boxed label/value list; rows with an empty value are skipped"""
    lines = "<br/>".join(
        f"<strong>{label}:</strong> {value}" for label, value in rows if value
    )
    return f"""
    <mj-text container-background-color="{THEME['detail_bg']}" padding="16px">
      {lines}
    </mj-text>
    """


def demo_booking_confirmation_template(
    member_name: str,
    demo_title: str,
    event_name: str,
    event_date: str,
    requested_time: Optional[str],
    duration_minutes: int,
) -> str:
    """Member confirmation that a demo slot request was received"""
    details = _demo_details(
        [
            ("Demo Title", escape(demo_title)),
            ("Event", escape(event_name)),
            ("Date", event_date),
            ("Requested Time", escape(requested_time) if requested_time else None),
            ("Duration", f"{duration_minutes} minutes"),
            ("Status", "Pending Organizer Confirmation"),
        ]
    )

    content = f"""
    <mj-text>Hey {escape(member_name)},</mj-text>

    <mj-text>
      Your demo slot request has been received! Our organizers will review it and confirm the final time slot.
    </mj-text>

    {details}

    <mj-text>
      You'll receive another email once an organizer confirms your demo slot. You can also check your demo status anytime on your dashboard.
    </mj-text>

    <mj-text>
      <strong>Demo Tips:</strong><br/>
      • Keep your demo concise and focused<br/>
      • Show, don't just tell<br/>
      • Prepare for Q&amp;A time<br/>
      • Share what you learned along the way
    </mj-text>
    """

    return get_base_template(
        title="Demo Slot Received! 🎉",
        preview_text=f"We got your demo request for {escape(event_name)}",
        content_sections=content,
        cta_url=f"{APP_URL}/dashboard",
        cta_label="View My Dashboard",
    )


def demo_status_update_template(
    member_name: str,
    demo_title: str,
    event_name: str,
    event_date: str,
    status: str,
    requested_time: Optional[str],
    duration_minutes: int,
) -> str:
    """Member update when an organizer confirms or cancels a demo slot"""
    is_confirmed = status == "confirmed"
    status_text = "Confirmed" if is_confirmed else "Canceled"
    status_emoji = "✅" if is_confirmed else "❌"
    status_color = THEME["success"] if is_confirmed else THEME["danger"]

    details = _demo_details(
        [
            ("Demo Title", escape(demo_title)),
            ("Event", escape(event_name)),
            ("Date", event_date),
            ("Time", escape(requested_time) if requested_time else None),
            ("Duration", f"{duration_minutes} minutes"),
            ("Status", f'<span style="color: {status_color};">{status_text}</span>'),
        ]
    )

    if is_confirmed:
        intro = "Great news! Your demo slot has been confirmed by an organizer."
        closing = """
    <mj-text>
      <strong>Next Steps:</strong><br/>
      • Make sure to arrive on time for your demo<br/>
      • Test any equipment/projector setup beforehand<br/>
      • Have a backup plan (screenshots, recording) in case of tech issues<br/>
      • Bring enthusiasm and be ready to answer questions!
    </mj-text>

    <mj-text>See you at the event! 🚀</mj-text>
    """
    else:
        intro = (
            "Your demo slot has been canceled. If you have questions, feel free to reach out "
            "to the organizers at the next event."
        )
        closing = """
    <mj-text>
      You can still attend the event and book a demo for a future hack night.
    </mj-text>
    """

    content = f"""
    <mj-text>Hey {escape(member_name)},</mj-text>

    <mj-text>{intro}</mj-text>

    {details}

    {closing}
    """

    return get_base_template(
        title=f"Demo Slot {status_text} {status_emoji}",
        preview_text=f"Your demo slot for {escape(event_name)} was {status_text.lower()}",
        content_sections=content,
        cta_url=f"{APP_URL}/dashboard",
        cta_label="View Dashboard",
    )


def new_demo_notification_template(
    organizer_name: str,
    member_name: str,
    demo_title: str,
    demo_description: Optional[str],
    event_name: str,
    event_date: str,
    requested_time: Optional[str],
    duration_minutes: int,
) -> str:
    """Organizer alert for a new demo slot request"""
    details = _demo_details(
        [
            ("Member", escape(member_name)),
            ("Demo Title", escape(demo_title)),
            ("Description", escape(demo_description) if demo_description else None),
            ("Event", escape(event_name)),
            ("Date", event_date),
            ("Requested Time", escape(requested_time) if requested_time else None),
            ("Duration", f"{duration_minutes} minutes"),
        ]
    )

    content = f"""
    <mj-text>Hey {escape(organizer_name)},</mj-text>

    <mj-text>A new demo slot has been requested and needs your review.</mj-text>

    {details}

    <mj-text>Please review and confirm this demo slot in the admin dashboard.</mj-text>
    """

    return get_base_template(
        title="New Demo Booking 📝",
        preview_text=f"{escape(member_name)} requested a demo slot",
        content_sections=content,
        cta_url=f"{APP_URL}/admin/demo-slots",
        cta_label="Review Demo Slots",
        footer_lines=["hello_miami - Organizer Tools"],
    )
