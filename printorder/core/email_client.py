# printorder/core/email_client.py
"""
Email client utilities.

Responsibilities:
  - Build an SMTP connection from Settings (TLS via STARTTLS, or SSL).
  - Provide send_email(...) and the operator alert sent when an order was
    saved without its items.

Typical .env configuration:

    SMTP_HOST=smtp.gmail.com
    SMTP_PORT=465
    SMTP_USERNAME=orders@example.com
    SMTP_PASSWORD=<app password>
    SMTP_USE_TLS=false
    SMTP_USE_SSL=true
    OPERATOR_ALERT_EMAIL=ops@example.com
"""
import logging
import smtplib
from email.message import EmailMessage

from printorder.core.config import Settings, get_settings

logger = logging.getLogger(__name__)


def is_configured(settings: Settings) -> bool:
    return bool(settings.SMTP_HOST and settings.SMTP_USERNAME and settings.SMTP_PASSWORD)


def _create_smtp_client(settings: Settings) -> smtplib.SMTP:
    """
    Create an SMTP client configured for TLS or SSL.

    Typical configs:
      * SSL: SMTP_PORT=465, SMTP_USE_SSL=true,  SMTP_USE_TLS=false
      * TLS: SMTP_PORT=587, SMTP_USE_SSL=false, SMTP_USE_TLS=true
    """
    if settings.SMTP_USE_SSL:
        return smtplib.SMTP_SSL(settings.SMTP_HOST, settings.SMTP_PORT, timeout=30)

    server = smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT, timeout=30)
    if settings.SMTP_USE_TLS:
        server.starttls()
    return server


def send_email(
    to_email: str,
    subject: str,
    text_body: str,
    settings: Settings | None = None,
) -> None:
    """
    Send a plain-text email to a single recipient.

    Raises:
        RuntimeError: if SMTP is not configured.
        smtplib.SMTPException: if the connection or send fails.
    """
    settings = settings or get_settings()
    if not is_configured(settings):
        raise RuntimeError(
            "SMTP is not configured correctly. "
            "Please set SMTP_HOST, SMTP_USERNAME, and SMTP_PASSWORD in .env."
        )

    from_email = settings.SMTP_FROM_EMAIL or settings.SMTP_USERNAME
    msg = EmailMessage()
    msg["From"] = f"{settings.SMTP_FROM_NAME} <{from_email}>"
    msg["To"] = to_email
    msg["Subject"] = subject
    msg.set_content(text_body)

    server = _create_smtp_client(settings)
    try:
        server.login(settings.SMTP_USERNAME, settings.SMTP_PASSWORD)
        server.send_message(msg)
    finally:
        try:
            server.quit()
        except smtplib.SMTPException:
            # Connection is being torn down anyway.
            pass


def send_partial_order_alert(order_id: int, warning: str, settings: Settings | None = None) -> None:
    """
    Tell the operator that an order exists without its item rows.

    Runs as a background task after the response is sent; a mail failure
    is logged, never raised into the request.
    """
    settings = settings or get_settings()
    if not settings.OPERATOR_ALERT_EMAIL or not is_configured(settings):
        return

    try:
        send_email(
            to_email=settings.OPERATOR_ALERT_EMAIL,
            subject=f"[Orders] Order {order_id} saved without items",
            text_body=(
                f"Order {order_id} was created but its items could not be saved.\n\n"
                f"{warning}\n\n"
                "Re-enter the items from the back office."
            ),
            settings=settings,
        )
    except (RuntimeError, OSError) as exc:
        logger.error("Could not send alert for order %s: %s", order_id, exc)
