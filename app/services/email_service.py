import smtplib
from datetime import datetime
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape
from loguru import logger

from app.core.config import settings

TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates" / "email"

_env = Environment(
    loader=FileSystemLoader(str(TEMPLATE_DIR)),
    autoescape=select_autoescape(["html"]),
)


def get_template(template_name):
    return _env.get_template(template_name)


# Helper to send email via SMTP
def send_email_via_smtp(to_email, subject, html_content):
    # Only HOST is required. User/Pass are optional (Mailpit, local relays)
    if not settings.SMTP_HOST:
        logger.warning("SMTP Host not configured. Skipping email.")
        return

    try:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = f"{settings.EMAILS_FROM_NAME} <{settings.EMAILS_FROM_EMAIL}>"
        msg["To"] = to_email
        msg.attach(MIMEText(html_content, "html"))

        logger.debug(f"Connecting to SMTP: {settings.SMTP_HOST}:{settings.SMTP_PORT}")

        with smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT) as server:
            server.ehlo()

            # TLS only on submission ports; local catchers (1025) speak plain SMTP
            if settings.SMTP_PORT in [587, 2525]:
                server.starttls()
                server.ehlo()

            if settings.SMTP_USER and settings.SMTP_PASSWORD:
                server.login(settings.SMTP_USER, settings.SMTP_PASSWORD)

            server.sendmail(settings.EMAILS_FROM_EMAIL, to_email, msg.as_string())

        logger.info(f"Email sent to {to_email}")
    except Exception:
        logger.exception(f"Failed to send email to {to_email}")


# ---------------------------------------------------------
# 1. APPLICATION RECEIVED
# ---------------------------------------------------------
def send_admission_received_email(data: dict):
    """data requires: name, email, application_number"""
    try:
        html_content = get_template("admission_received.html").render(
            name=data.get("name"),
            application_number=data.get("application_number"),
            submission_date=datetime.now().strftime("%d-%m-%Y %I:%M %p"),
        )
        send_email_via_smtp(
            data.get("email"),
            f"Application {data.get('application_number')} received",
            html_content,
        )
    except Exception:
        logger.exception("Error preparing admission received email")


# ---------------------------------------------------------
# 2. ADMISSION APPROVED (+ login details for new accounts)
# ---------------------------------------------------------
def send_admission_approved_email(data: dict):
    """
    data requires: name, email, application_number, registration_number.
    temporary_password is set only when the account was just created.
    """
    try:
        html_content = get_template("admission_approved.html").render(
            name=data.get("name"),
            email=data.get("email"),
            application_number=data.get("application_number"),
            registration_number=data.get("registration_number"),
            temporary_password=data.get("temporary_password"),
            approval_date=datetime.now().strftime("%d-%m-%Y"),
            login_url=f"{settings.FRONTEND_URL}/login",
        )
        send_email_via_smtp(data.get("email"), "🎉 Admission Approved", html_content)
    except Exception:
        logger.exception("Error preparing admission approved email")


# ---------------------------------------------------------
# 3. ADMISSION REJECTED
# ---------------------------------------------------------
def send_admission_rejected_email(data: dict):
    """data requires: name, email, application_number; remarks optional"""
    try:
        html_content = get_template("admission_rejected.html").render(
            name=data.get("name"),
            application_number=data.get("application_number"),
            remarks=data.get("remarks"),
            decision_date=datetime.now().strftime("%d-%m-%Y"),
        )
        send_email_via_smtp(
            data.get("email"),
            f"Update on application {data.get('application_number')}",
            html_content,
        )
    except Exception:
        logger.exception("Error preparing admission rejected email")
