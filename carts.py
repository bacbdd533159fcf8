import logging
from typing import List

from bson.objectid import ObjectId
from pymongo import ReturnDocument
from pymongo.database import Database

from database import create_document, parse_object_id, serialize_doc, utcnow
from schemas import CartItem

logger = logging.getLogger(__name__)

CARTS = "user_carts"


def merge_item(items: List[dict], new_item: dict) -> List[dict]:
    """Add ``new_item`` to the list, summing quantities on a matching cartKey."""
    merged = []
    found = False
    for item in items:
        if item["cartKey"] == new_item["cartKey"]:
            item = {**item, "quantity": item["quantity"] + new_item["quantity"]}
            found = True
        merged.append(item)
    if not found:
        merged.append(dict(new_item))
    return merged


def set_item_quantity(items: List[dict], cart_key: str, quantity: int) -> List[dict]:
    if quantity <= 0:
        return drop_item(items, cart_key)
    return [{**item, "quantity": quantity} if item["cartKey"] == cart_key else item for item in items]


def drop_item(items: List[dict], cart_key: str) -> List[dict]:
    return [item for item in items if item["cartKey"] != cart_key]


def _load(db: Database, user_oid: ObjectId) -> dict:
    doc = db[CARTS].find_one({"userId": user_oid})
    if doc is None:
        create_document(db, CARTS, {"userId": user_oid, "items": []})
        doc = db[CARTS].find_one({"userId": user_oid})
        logger.info("New cart created for user %s", user_oid)
    return doc


def _save(db: Database, user_oid: ObjectId, items: List[dict]) -> dict:
    doc = db[CARTS].find_one_and_update(
        {"userId": user_oid},
        {"$set": {"items": items, "updatedAt": utcnow()}},
        return_document=ReturnDocument.AFTER,
    )
    return serialize_doc(doc)


def get_cart(db: Database, user_id: str) -> dict:
    user_oid = parse_object_id(user_id, "user")
    return serialize_doc(_load(db, user_oid))


def add_item(db: Database, user_id: str, item: CartItem) -> dict:
    user_oid = parse_object_id(user_id, "user")
    cart = _load(db, user_oid)
    logger.info("Adding %s x%d to cart of user %s", item.cart_key, item.quantity, user_id)
    return _save(db, user_oid, merge_item(cart["items"], item.model_dump(by_alias=True)))


def update_item_quantity(db: Database, user_id: str, cart_key: str, quantity: int) -> dict:
    user_oid = parse_object_id(user_id, "user")
    cart = _load(db, user_oid)
    if quantity > 0 and not any(i["cartKey"] == cart_key for i in cart["items"]):
        logger.warning("Quantity update for unknown cart key %s (user %s)", cart_key, user_id)
    return _save(db, user_oid, set_item_quantity(cart["items"], cart_key, quantity))


def remove_item(db: Database, user_id: str, cart_key: str) -> dict:
    user_oid = parse_object_id(user_id, "user")
    cart = _load(db, user_oid)
    return _save(db, user_oid, drop_item(cart["items"], cart_key))


def clear_cart(db: Database, user_id: str) -> dict:
    user_oid = parse_object_id(user_id, "user")
    now = utcnow()
    doc = db[CARTS].find_one_and_update(
        {"userId": user_oid},
        {"$set": {"items": [], "updatedAt": now}, "$setOnInsert": {"createdAt": now}},
        upsert=True,
        return_document=ReturnDocument.AFTER,
    )
    logger.info("Cart cleared for user %s", user_id)
    return serialize_doc(doc)
