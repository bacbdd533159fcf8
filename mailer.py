import logging
from typing import Dict, Optional, Tuple

import resend

import config

logger = logging.getLogger(__name__)


def send_email(to: str, subject: str, html: str, text: Optional[str] = None) -> Tuple[bool, Optional[str]]:
    """Send one message through Resend. Returns (sent, error)."""
    if not config.RESEND_API_KEY:
        logger.warning("RESEND_API_KEY is not configured; email to %s not sent", to)
        return False, "Email service is not configured."

    payload: Dict[str, object] = {
        "from": config.EMAIL_FROM,
        "to": [to],
        "subject": subject,
        "html": html,
    }
    if text:
        payload["text"] = text

    resend.api_key = config.RESEND_API_KEY
    try:
        response = resend.Emails.send(payload)
    except Exception as exc:
        logger.exception("Resend failed to send email to %s", to)
        return False, str(exc)

    if not isinstance(response, dict) or not response.get("id"):
        logger.error("Unexpected Resend response for %s: %s", to, response)
        return False, str(response)

    logger.info("Email '%s' dispatched to %s", subject, to)
    return True, None
