import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple, Union

from bson.objectid import ObjectId
from fastapi import Request
from pydantic import BaseModel
from pymongo import MongoClient
from pymongo.database import Database

import config
from errors import invalid

logger = logging.getLogger(__name__)


def connect(url: Optional[str] = None, name: Optional[str] = None) -> Tuple[MongoClient, Database]:
    url = url or config.DATABASE_URL
    name = name or config.DATABASE_NAME
    if not url.startswith(("mongodb://", "mongodb+srv://")):
        raise RuntimeError('DATABASE_URL must start with "mongodb://" or "mongodb+srv://"')
    client = MongoClient(url)
    logger.info("MongoDB client created for database %s", name)
    return client, client[name]


def get_db(request: Request) -> Database:
    return request.app.state.db


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    # pymongo hands back naive datetimes that are already UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def parse_object_id(value: str, label: str) -> ObjectId:
    if not isinstance(value, str) or not ObjectId.is_valid(value):
        raise invalid(f"Invalid {label} ID format.")
    return ObjectId(value)


def serialize_doc(doc):
    if not doc:
        return doc
    doc = dict(doc)
    if "_id" in doc:
        doc["id"] = str(doc.pop("_id"))
    for k, v in list(doc.items()):
        if isinstance(v, ObjectId):
            doc[k] = str(v)
        elif isinstance(v, datetime):
            doc[k] = as_utc(v).isoformat()
    return doc


def create_document(db: Database, collection_name: str, data: Union[BaseModel, dict]) -> str:
    if isinstance(data, BaseModel):
        data = data.model_dump(by_alias=True)
    else:
        data = dict(data)
    now = utcnow()
    data.setdefault("createdAt", now)
    data["updatedAt"] = now
    result = db[collection_name].insert_one(data)
    return str(result.inserted_id)


def get_documents(
    db: Database,
    collection_name: str,
    filter_dict: Optional[Dict[str, Any]] = None,
    sort: Optional[List[Tuple[str, int]]] = None,
    limit: Optional[int] = None,
    projection: Optional[Dict[str, int]] = None,
) -> List[dict]:
    cursor = db[collection_name].find(filter_dict or {}, projection)
    if sort:
        cursor = cursor.sort(sort)
    if limit:
        cursor = cursor.limit(limit)
    return list(cursor)
