from unittest.mock import patch, MagicMock

from app.services.email_service import (
    send_admission_approved_email,
    send_admission_received_email,
    send_admission_rejected_email,
)


def smtp_server(mock_smtp):
    server = MagicMock()
    mock_smtp.return_value.__enter__.return_value = server
    return server


@patch("app.services.email_service.settings.SMTP_HOST", "smtp.test")
@patch("app.services.email_service.smtplib.SMTP")
def test_send_received_email(mock_smtp):
    server = smtp_server(mock_smtp)

    send_admission_received_email({
        "name": "Jane Doe",
        "email": "jane@example.com",
        "application_number": "ADM-25-0001",
    })

    mock_smtp.assert_called()
    server.sendmail.assert_called()
    assert server.sendmail.call_args[0][1] == "jane@example.com"


def test_approved_email_carries_login_details():
    with patch("app.services.email_service.send_email_via_smtp") as send:
        send_admission_approved_email({
            "name": "Jane Doe",
            "email": "jane@example.com",
            "application_number": "ADM-25-0001",
            "registration_number": "STU-25-0001",
            "temporary_password": "Temp-Pass-1",
        })

    to_email, subject, html = send.call_args[0]
    assert to_email == "jane@example.com"
    assert "STU-25-0001" in html
    assert "Temp-Pass-1" in html
    assert "change this password" in html
    assert "Sign in to the student portal" in html


def test_approved_email_for_existing_account_has_no_password():
    with patch("app.services.email_service.send_email_via_smtp") as send:
        send_admission_approved_email({
            "name": "Jane Doe",
            "email": "jane@example.com",
            "application_number": "ADM-25-0001",
            "registration_number": "STU-25-0001",
        })

    html = send.call_args[0][2]
    assert "Temporary Password" not in html
    assert "keeps its current role" in html
    assert "now has access" not in html


@patch("app.services.email_service.settings.SMTP_HOST", "smtp.test")
@patch("app.services.email_service.smtplib.SMTP")
def test_send_rejection_email(mock_smtp):
    server = smtp_server(mock_smtp)

    send_admission_rejected_email({
        "name": "John Smith",
        "email": "john@example.com",
        "application_number": "ADM-25-0002",
        "remarks": "Seats full",
    })

    server.sendmail.assert_called()
    assert server.sendmail.call_args[0][1] == "john@example.com"


@patch("app.services.email_service.smtplib.SMTP")
def test_no_smtp_host_skips_sending(mock_smtp):
    send_admission_received_email({
        "name": "Jane Doe",
        "email": "jane@example.com",
        "application_number": "ADM-25-0001",
    })

    mock_smtp.assert_not_called()
