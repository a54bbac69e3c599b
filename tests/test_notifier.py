"""
Tests for booking emails.
"""

from datetime import date
from types import SimpleNamespace

import pytest

from app.models.settings import default_email_settings, default_email_templates
from app.services import notifier as notifier_module
from app.services.mailer import SmtpTransport, transport_from_settings
from app.services.notifier import EmailNotifier, find_template, format_booking_date, render_template


@pytest.fixture
def booking():
    return SimpleNamespace(
        id="b1",
        customer_name="Mari",
        customer_email="mari@example.com",
        date=date(2026, 10, 26),
        start_time="09:00",
        end_time="10:00",
    )


@pytest.fixture
def settings_row():
    return SimpleNamespace(
        business_name="Kart Booking System",
        business_email="info@kartbooking.com",
        admin_notification_emails=["admin@kartbooking.com"],
        email_templates=default_email_templates(),
        email_settings=default_email_settings(),
    )


@pytest.fixture
def sent(monkeypatch):
    outbox = []

    def fake_send_email(to_emails, subject, body, **kwargs):
        outbox.append(SimpleNamespace(to=to_emails, subject=subject, body=body, **kwargs))

    monkeypatch.setattr(notifier_module, "send_email", fake_send_email)
    return outbox


def test_format_booking_date():
    assert format_booking_date(date(2026, 10, 26)) == "Monday, 26 October 2026"


def test_render_template(booking):
    text = render_template("{{customerName}}: {{date}} {{startTime}}-{{endTime}}", booking)
    assert text == "Mari: Monday, 26 October 2026 09:00-10:00"


def test_confirmation_goes_to_customer_and_admins(booking, settings_row, sent):
    assert EmailNotifier().send_booking_confirmation(booking, settings_row) is True

    customer, admin = sent
    assert customer.to == "mari@example.com"
    assert customer.subject == "Booking Confirmation"
    assert "Dear Mari" in customer.body
    assert customer.sender_name == "Kart Booking System"
    assert admin.to == ["admin@kartbooking.com"]
    assert admin.subject == "New Booking Notification"


def test_missing_template_sends_nothing(booking, settings_row, sent):
    settings_row.email_templates = [t for t in settings_row.email_templates if t["type"] != "booking_confirmation"]
    assert EmailNotifier().send_booking_confirmation(booking, settings_row) is False
    assert sent == []


def test_cancellation(booking, settings_row, sent):
    assert EmailNotifier().send_booking_cancellation(booking, settings_row) is True
    assert [m.subject for m in sent] == ["Booking Cancellation"]


def test_smtp_errors_propagate(booking, settings_row, monkeypatch):
    def refuse(*args, **kwargs):
        raise ConnectionRefusedError("smtp down")

    monkeypatch.setattr(notifier_module, "send_email", refuse)
    with pytest.raises(ConnectionRefusedError):
        EmailNotifier().send_booking_confirmation(booking, settings_row)


def test_find_template(settings_row):
    assert find_template(settings_row, "admin_notification")["subject"] == "New Booking Notification"
    assert find_template(settings_row, "newsletter") is None


class TestTransport:

    def test_env_fallback_without_host(self, settings_row):
        transport = transport_from_settings(settings_row)
        assert (transport.host, transport.port) == ("localhost", 1025)

    def test_configured_host(self, settings_row):
        settings_row.email_settings = dict(settings_row.email_settings, host="smtp.example.com", port=465, username="u", password="p")
        assert transport_from_settings(settings_row) == SmtpTransport("smtp.example.com", 465, "u", "p", use_ssl=True)

    def test_sendgrid_relay(self, settings_row):
        settings_row.email_settings = dict(settings_row.email_settings, provider="sendgrid", api_key="SG.key")
        transport = transport_from_settings(settings_row)
        assert transport.host == "smtp.sendgrid.net"
        assert (transport.username, transport.password) == ("apikey", "SG.key")
