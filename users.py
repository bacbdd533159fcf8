import logging
from typing import List, Optional

from pymongo import ReturnDocument
from pymongo.database import Database

from auth import check_password, create_token, hash_password
from database import create_document, parse_object_id, serialize_doc, utcnow
from errors import ErrorKind, ServiceError, conflict, invalid, not_found
from schemas import ProfileUpdate, RegisterRequest, User

logger = logging.getLogger(__name__)

USERS = "users"

MIN_PASSWORD_LENGTH = 6

HIDE_PASSWORD = {"hashedPassword": 0}


def public_user(doc: dict) -> dict:
    return {
        "id": str(doc["_id"]),
        "name": doc.get("name"),
        "email": doc.get("email"),
        "role": doc.get("role", "user"),
    }


def register(db: Database, body: RegisterRequest) -> str:
    email = body.email.lower()
    if db[USERS].find_one({"email": email}):
        logger.warning("Registration rejected, email %s already in use", email)
        raise conflict("User with this email already exists")
    user = User(name=body.name, email=email, hashed_password=hash_password(body.password), role="user")
    user_id = create_document(db, USERS, user)
    logger.info("User %s registered", user_id)
    return user_id


def authenticate(db: Database, email: str, password: str) -> dict:
    """Check credentials and return ``{"token", "user"}`` for a login response."""
    user = db[USERS].find_one({"email": email.lower()})
    if not user or not check_password(password, user.get("hashedPassword", "")):
        logger.info("Failed login for %s", email)
        raise ServiceError(ErrorKind.UNAUTHENTICATED, "Invalid credentials")
    logger.info("User %s logged in", user["_id"])
    return {"token": create_token(user), "user": public_user(user)}


def get_user(db: Database, user_id: str) -> dict:
    doc = db[USERS].find_one({"_id": parse_object_id(user_id, "user")}, HIDE_PASSWORD)
    if doc is None:
        raise not_found("User not found")
    return serialize_doc(doc)


def list_users(db: Database) -> List[dict]:
    return [serialize_doc(d) for d in db[USERS].find({}, HIDE_PASSWORD).sort("createdAt", -1)]


def update_user_role(db: Database, user_id: str, role: str) -> dict:
    doc = db[USERS].find_one_and_update(
        {"_id": parse_object_id(user_id, "user")},
        {"$set": {"role": role, "updatedAt": utcnow()}},
        projection=HIDE_PASSWORD,
        return_document=ReturnDocument.AFTER,
    )
    if doc is None:
        raise not_found("User not found")
    logger.info("User %s role set to %s", user_id, role)
    return serialize_doc(doc)


def delete_user(db: Database, user_id: str) -> None:
    res = db[USERS].delete_one({"_id": parse_object_id(user_id, "user")})
    if res.deleted_count == 0:
        raise not_found("User not found or failed to delete")
    logger.info("User %s deleted", user_id)


def verify_password(db: Database, user_id: str, password: str) -> None:
    user = db[USERS].find_one({"_id": parse_object_id(user_id, "user")})
    if user is None:
        raise not_found("User not found.")
    if not check_password(password, user.get("hashedPassword", "")):
        raise invalid("Incorrect password provided.")


def update_profile(db: Database, user_id: str, body: ProfileUpdate) -> dict:
    oid = parse_object_id(user_id, "user")
    user = db[USERS].find_one({"_id": oid})
    if user is None:
        raise not_found("User profile not found.")

    update = {}
    name = (body.name or "").strip()
    if name:
        update["name"] = name

    email = (body.email or "").strip().lower()
    if email and email != user.get("email"):
        if db[USERS].find_one({"email": email, "_id": {"$ne": oid}}):
            raise conflict("This email address is already in use by another account.")
        update["email"] = email

    if body.new_password:
        if not body.current_password:
            raise invalid("Current password is required to change your password.")
        if not check_password(body.current_password, user.get("hashedPassword", "")):
            logger.warning("Incorrect current password on profile update for user %s", user_id)
            raise ServiceError(ErrorKind.FORBIDDEN, "Incorrect current password.")
        if len(body.new_password) < MIN_PASSWORD_LENGTH:
            raise invalid("New password must be at least 6 characters long.")
        update["hashedPassword"] = hash_password(body.new_password)

    if not update:
        return get_user(db, user_id)

    update["updatedAt"] = utcnow()
    doc = db[USERS].find_one_and_update(
        {"_id": oid}, {"$set": update}, projection=HIDE_PASSWORD, return_document=ReturnDocument.AFTER
    )
    logger.info("Profile updated for user %s (%s)", user_id, ", ".join(k for k in update if k != "updatedAt"))
    return serialize_doc(doc)


def set_password(db: Database, user_id, new_password: str) -> bool:
    if len(new_password) < MIN_PASSWORD_LENGTH:
        raise invalid("Password must be at least 6 characters long.")
    res = db[USERS].update_one(
        {"_id": user_id}, {"$set": {"hashedPassword": hash_password(new_password), "updatedAt": utcnow()}}
    )
    return res.matched_count > 0


def find_by_email(db: Database, email: str) -> Optional[dict]:
    return db[USERS].find_one({"email": email.strip().lower()})
