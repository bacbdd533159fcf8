import logging
from typing import List

from bson.objectid import ObjectId
from pymongo import ReturnDocument
from pymongo.database import Database

from database import create_document, parse_object_id, serialize_doc, utcnow
from errors import not_found
from schemas import AddressCreate, AddressUpdate

logger = logging.getLogger(__name__)

ADDRESSES = "user_addresses"

NOT_FOUND = "Address not found or access denied."


def _clear_default(db: Database, user_oid: ObjectId, keep=None) -> None:
    filt = {"userId": user_oid, "isDefault": True}
    if keep is not None:
        filt["_id"] = {"$ne": keep}
    db[ADDRESSES].update_many(filt, {"$set": {"isDefault": False, "updatedAt": utcnow()}})


def list_addresses(db: Database, user_id: str) -> List[dict]:
    user_oid = parse_object_id(user_id, "user")
    return [serialize_doc(d) for d in db[ADDRESSES].find({"userId": user_oid}).sort("createdAt", -1)]


def add_address(db: Database, user_id: str, body: AddressCreate) -> dict:
    user_oid = parse_object_id(user_id, "user")
    if body.is_default:
        _clear_default(db, user_oid)
    data = body.model_dump(by_alias=True)
    data["userId"] = user_oid
    address_id = create_document(db, ADDRESSES, data)
    logger.info("Address %s added for user %s", address_id, user_id)
    return serialize_doc(db[ADDRESSES].find_one({"_id": ObjectId(address_id)}))


def update_address(db: Database, user_id: str, address_id: str, body: AddressUpdate) -> dict:
    user_oid = parse_object_id(user_id, "user")
    oid = parse_object_id(address_id, "address")
    if db[ADDRESSES].find_one({"_id": oid, "userId": user_oid}) is None:
        raise not_found(NOT_FOUND)

    update = body.model_dump(by_alias=True, exclude_none=True)
    if update.get("isDefault"):
        _clear_default(db, user_oid, keep=oid)
    update["updatedAt"] = utcnow()

    doc = db[ADDRESSES].find_one_and_update(
        {"_id": oid, "userId": user_oid}, {"$set": update}, return_document=ReturnDocument.AFTER
    )
    logger.info("Address %s updated for user %s", address_id, user_id)
    return serialize_doc(doc)


def delete_address(db: Database, user_id: str, address_id: str) -> None:
    user_oid = parse_object_id(user_id, "user")
    res = db[ADDRESSES].delete_one({"_id": parse_object_id(address_id, "address"), "userId": user_oid})
    if res.deleted_count == 0:
        raise not_found(NOT_FOUND)
    logger.info("Address %s deleted for user %s", address_id, user_id)


def set_default_address(db: Database, user_id: str, address_id: str) -> dict:
    user_oid = parse_object_id(user_id, "user")
    oid = parse_object_id(address_id, "address")
    if db[ADDRESSES].find_one({"_id": oid, "userId": user_oid}) is None:
        raise not_found(NOT_FOUND)
    _clear_default(db, user_oid)
    doc = db[ADDRESSES].find_one_and_update(
        {"_id": oid, "userId": user_oid},
        {"$set": {"isDefault": True, "updatedAt": utcnow()}},
        return_document=ReturnDocument.AFTER,
    )
    logger.info("Address %s is now the default for user %s", address_id, user_id)
    return serialize_doc(doc)
