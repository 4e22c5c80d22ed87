import logging
import smtplib
from email.message import EmailMessage

from flask import current_app

from utils.audit import log_event

logger = logging.getLogger(__name__)


def send_email(to_email: str, subject: str, body: str):
    host = current_app.config.get("SMTP_HOST")
    port = current_app.config.get("SMTP_PORT", 587)
    username = current_app.config.get("SMTP_USERNAME")
    password = current_app.config.get("SMTP_PASSWORD")
    from_email = current_app.config.get("SMTP_FROM_EMAIL") or username
    use_tls = current_app.config.get("SMTP_USE_TLS", True)
    timeout = current_app.config.get("SMTP_TIMEOUT_SECONDS", 10)

    if not host or not from_email:
        return False, "Email not configured"

    msg = EmailMessage()
    msg["From"] = from_email
    msg["To"] = to_email
    msg["Subject"] = subject
    msg.set_content(body)

    try:
        with smtplib.SMTP(host, port, timeout=timeout) as server:
            if use_tls:
                server.starttls()
            if username and password:
                server.login(username, password)
            server.send_message(msg)
        return True, None
    except (smtplib.SMTPException, OSError) as exc:
        return False, str(exc)


def send_booking_confirmation(booking):
    """Email the customer; a failure is logged and never undoes the booking."""
    subject = f"Booking confirmed: {booking.booking_ref}"
    lines = [
        f"Hi {booking.name},",
        "",
        f"Your {booking.sport} booking on the {booking.ground} ground is confirmed.",
        f"Date: {booking.date.isoformat()}",
        f"Slots: {', '.join(booking.slot_list)}",
        f"Total: Rs {booking.final_price}",
    ]
    if booking.remaining_payment and float(booking.remaining_payment) > 0:
        lines.append(f"Paid online: Rs {booking.advance_payment}")
        lines.append(f"Pay at the turf: Rs {booking.remaining_payment}")
    lines += ["", f"Reference: {booking.booking_ref}", "", "See you on the ground!"]

    ok, error = send_email(booking.email, subject, "\n".join(lines))
    if not ok:
        logger.warning("Booking confirmation email for %s not sent: %s", booking.booking_ref, error)
        log_event("EMAIL_FAIL", actor="system", entity="booking", entity_id=booking.id, metadata={"error": error})
    return ok, error


def send_newsletter_welcome(subscriber):
    base_url = current_app.config.get("PUBLIC_BASE_URL", "").rstrip("/")
    unsubscribe_url = f"{base_url}/newsletter/unsubscribe?token={subscriber.unsubscribe_token}"
    body = "\n".join([
        "Thanks for subscribing to turf news and offers.",
        "",
        f"To stop these emails, open: {unsubscribe_url}",
    ])
    ok, error = send_email(subscriber.email, "Welcome to our newsletter", body)
    if not ok:
        logger.warning("Newsletter welcome email for subscriber %s not sent: %s", subscriber.id, error)
    return ok, error
