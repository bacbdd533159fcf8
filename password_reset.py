import logging
import secrets
from datetime import timedelta
from typing import Optional

from pymongo.database import Database

import config
import users
from database import as_utc, utcnow
from errors import invalid
from mailer import send_email

logger = logging.getLogger(__name__)

TOKENS = "password_reset_tokens"
TOKEN_TTL = timedelta(hours=1)

INVALID_TOKEN = "Invalid or expired reset token. Please request a new link."

RESET_SUBJECT = "Password Reset Request"

RESET_HTML = """
<p>Hello {name},</p>
<p>You requested a password reset for your account.</p>
<p>Please click the link below to set a new password. This link will expire in 1 hour:</p>
<p><a href="{url}" target="_blank">Reset Your Password</a></p>
<p>If you did not request a password reset, please ignore this email.</p>
"""

RESET_TEXT = """Hello {name},
You requested a password reset for your account.
Visit the following link to set a new password. This link will expire in 1 hour:
{url}
If you did not request a password reset, please ignore this email.
"""


def _issue_token(db: Database, user_id) -> str:
    db[TOKENS].delete_many({"userId": user_id})
    token = secrets.token_hex(32)
    now = utcnow()
    db[TOKENS].insert_one({"userId": user_id, "token": token, "expiresAt": now + TOKEN_TTL, "createdAt": now})
    return token


def reset_url(token: str) -> str:
    return f"{config.PUBLIC_BASE_URL}/reset-password?token={token}"


def request_password_reset(db: Database, email: str) -> bool:
    """Issue a token and mail the link. Returns whether an email was sent.

    Unknown addresses are not an error; the caller answers the same either way.
    """
    user = users.find_by_email(db, email)
    if user is None:
        logger.info("Password reset requested for unknown email")
        return False

    token = _issue_token(db, user["_id"])
    url = reset_url(token)
    name = user.get("name") or "User"
    sent, error = send_email(
        user["email"],
        RESET_SUBJECT,
        RESET_HTML.format(name=name, url=url),
        RESET_TEXT.format(name=name, url=url),
    )
    if not sent:
        logger.error("Password reset email for user %s not sent: %s", user["_id"], error)
    return sent


def verify_reset_token(db: Database, token: str) -> Optional[dict]:
    """Return the token document if it exists and has not expired."""
    if not token:
        return None
    doc = db[TOKENS].find_one({"token": token})
    if doc is None:
        return None
    if as_utc(doc["expiresAt"]) < utcnow():
        logger.info("Expired reset token for user %s removed", doc["userId"])
        db[TOKENS].delete_one({"_id": doc["_id"]})
        return None
    return doc


def reset_password(db: Database, token: str, new_password: str) -> None:
    doc = verify_reset_token(db, token)
    if doc is None:
        raise invalid(INVALID_TOKEN)
    if not users.set_password(db, doc["userId"], new_password):
        logger.error("Reset token %s... points at a missing user", token[:8])
        db[TOKENS].delete_one({"_id": doc["_id"]})
        raise invalid(INVALID_TOKEN)
    db[TOKENS].delete_one({"_id": doc["_id"]})
    logger.info("Password reset completed for user %s", doc["userId"])
