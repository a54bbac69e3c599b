from __future__ import annotations

import logging
from datetime import date

from app.models.booking import Booking
from app.models.settings import AppSettings
from app.services.mailer import send_email, transport_from_settings

logger = logging.getLogger(__name__)


def format_booking_date(d: date) -> str:
    return f"{d.strftime('%A')}, {d.day} {d.strftime('%B %Y')}"


def render_template(text: str, booking: Booking) -> str:
    return (
        text.replace("{{customerName}}", booking.customer_name)
        .replace("{{date}}", format_booking_date(booking.date))
        .replace("{{startTime}}", booking.start_time)
        .replace("{{endTime}}", booking.end_time)
    )


def find_template(row: AppSettings, template_type: str) -> dict | None:
    return next((t for t in row.email_templates or [] if t.get("type") == template_type), None)


class EmailNotifier:
    """Booking emails rendered from the templates stored in settings.

    Methods return ``True`` when the customer email went out and ``False``
    when there was nothing to send. SMTP errors propagate to the caller.
    """

    def send_booking_confirmation(self, booking: Booking, settings_row: AppSettings) -> bool:
        template = find_template(settings_row, "booking_confirmation")
        if template is None:
            logger.error("Booking confirmation email template not found")
            return False

        transport = transport_from_settings(settings_row)
        send_email(
            booking.customer_email,
            render_template(template["subject"], booking),
            render_template(template["body"], booking),
            transport=transport,
            sender_name=settings_row.business_name,
            sender_email=settings_row.business_email,
            html=True,
        )

        admin_template = find_template(settings_row, "admin_notification")
        if admin_template and settings_row.admin_notification_emails:
            send_email(
                settings_row.admin_notification_emails,
                render_template(admin_template["subject"], booking),
                render_template(admin_template["body"], booking),
                transport=transport,
                sender_name=settings_row.business_name,
                sender_email=settings_row.business_email,
                html=True,
            )
        return True

    def send_booking_cancellation(self, booking: Booking, settings_row: AppSettings) -> bool:
        template = find_template(settings_row, "booking_cancellation")
        if template is None:
            logger.error("Booking cancellation email template not found")
            return False

        send_email(
            booking.customer_email,
            render_template(template["subject"], booking),
            render_template(template["body"], booking),
            transport=transport_from_settings(settings_row),
            sender_name=settings_row.business_name,
            sender_email=settings_row.business_email,
            html=True,
        )
        return True

    def send_test_email(self, to_email: str, settings_row: AppSettings) -> None:
        send_email(
            to_email,
            f"Test Email from {settings_row.business_name}",
            "<p>This is a test email from your kart booking system. If you received this, "
            "your email configuration is working correctly.</p>",
            transport=transport_from_settings(settings_row),
            sender_name=settings_row.business_name,
            sender_email=settings_row.business_email,
            html=True,
        )


def get_notifier() -> EmailNotifier:
    return EmailNotifier()
