import logging
from datetime import datetime, timedelta, timezone

import bcrypt
import jwt
from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

import config

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)

if len(config.JWT_SECRET) < 32:
    logger.warning("JWT_SECRET is shorter than 32 characters; set a strong secret outside development")


def hash_password(password: str) -> str:
    salt = bcrypt.gensalt(rounds=config.BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def check_password(password: str, hashed: str) -> bool:
    if not hashed:
        return False
    return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))


def create_token(user: dict) -> str:
    exp = datetime.now(timezone.utc) + timedelta(hours=config.JWT_EXPIRY_HOURS)
    payload = {
        "userId": str(user["_id"]),
        "email": user["email"],
        "name": user.get("name"),
        "role": user.get("role", "user"),
        "exp": exp,
    }
    return jwt.encode(payload, config.JWT_SECRET, algorithm=config.JWT_ALGO)


def decode_token(token: str) -> dict:
    try:
        return jwt.decode(token, config.JWT_SECRET, algorithms=[config.JWT_ALGO])
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token expired")
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=401, detail="Invalid token")


def get_token_payload(credentials: HTTPAuthorizationCredentials = Depends(security)) -> dict:
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise HTTPException(status_code=401, detail="Unauthorized. Please log in.")
    payload = decode_token(credentials.credentials)
    if not payload.get("userId"):
        raise HTTPException(status_code=401, detail="Invalid token payload")
    return payload


def get_current_user_id(payload: dict = Depends(get_token_payload)) -> str:
    return payload["userId"]


def require_admin(payload: dict = Depends(get_token_payload)) -> dict:
    if payload.get("role") != "admin":
        raise HTTPException(status_code=403, detail="Admin only")
    return payload
