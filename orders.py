import logging
from typing import List

from bson.objectid import ObjectId
from pymongo import ReturnDocument
from pymongo.database import Database
from pymongo.errors import PyMongoError

import coupons
from catalog import PRODUCTS
from database import create_document, parse_object_id, serialize_doc, utcnow
from errors import ErrorKind, ServiceError, not_found
from schemas import OrderCreate

logger = logging.getLogger(__name__)

ORDERS = "orders"

CANCELLABLE = ("Pending", "Processing")


def can_cancel(status: str) -> bool:
    return status in CANCELLABLE


def create_order(db: Database, user_id: str, body: OrderCreate) -> str:
    """Store the order, then count the coupon use. Returns the new order id.

    The coupon increment runs after the insert and is not retried; if it fails
    the order stands and the failure is only logged.
    """
    data = body.model_dump(by_alias=True)
    data["userId"] = user_id
    if data.get("appliedCouponCode"):
        data["appliedCouponCode"] = data["appliedCouponCode"].strip().upper()
    order_id = create_document(db, ORDERS, data)
    logger.info("Order %s created for user %s (total %.2f)", order_id, user_id, body.total_amount)

    code = data.get("appliedCouponCode")
    if code:
        try:
            coupons.increment_usage(db, code)
        except PyMongoError:
            logger.exception("Error incrementing coupon usage for %s after order %s", code, order_id)
    return order_id


def list_orders(db: Database) -> List[dict]:
    return [serialize_doc(d) for d in db[ORDERS].find({}).sort("createdAt", -1)]


def list_user_orders(db: Database, user_id: str) -> List[dict]:
    return [serialize_doc(d) for d in db[ORDERS].find({"userId": user_id}).sort("createdAt", -1)]


def get_order(db: Database, order_id: str) -> dict:
    doc = db[ORDERS].find_one({"_id": parse_object_id(order_id, "order")})
    if doc is None:
        raise not_found("Order not found.")
    return serialize_doc(doc)


def get_user_order(db: Database, user_id: str, order_id: str) -> dict:
    doc = db[ORDERS].find_one({"_id": parse_object_id(order_id, "order"), "userId": user_id})
    if doc is None:
        raise not_found("Order not found or access denied.")
    return serialize_doc(doc)


def cancel_user_order(db: Database, user_id: str, order_id: str) -> dict:
    oid = parse_object_id(order_id, "order")
    order = db[ORDERS].find_one({"_id": oid, "userId": user_id})
    if order is None:
        raise not_found("Order not found or access denied.")

    status = order.get("orderStatus")
    if not can_cancel(status):
        logger.warning("User %s tried to cancel order %s in status %s", user_id, order_id, status)
        raise ServiceError(ErrorKind.FORBIDDEN, f"Order cannot be cancelled as it is already {status}.")

    doc = db[ORDERS].find_one_and_update(
        {"_id": oid, "userId": user_id},
        {"$set": {"orderStatus": "Cancelled", "updatedAt": utcnow()}},
        return_document=ReturnDocument.AFTER,
    )
    logger.info("Order %s cancelled by user %s", order_id, user_id)
    return serialize_doc(doc)


def _decrement_stock(db: Database, order: dict) -> None:
    order_id = order["_id"]
    for item in order.get("items", []):
        product_id = item.get("productId")
        if not isinstance(product_id, str) or not ObjectId.is_valid(product_id):
            logger.warning("Invalid productId %r for item %s in order %s; stock not updated", product_id, item.get("name"), order_id)
            continue
        res = db[PRODUCTS].update_one({"_id": ObjectId(product_id)}, {"$inc": {"stock": -item.get("quantity", 0)}})
        if res.matched_count == 0:
            logger.warning("Product %s not found for stock update (order %s)", product_id, order_id)


def update_order_status(db: Database, order_id: str, new_status: str) -> dict:
    oid = parse_object_id(order_id, "order")
    update = {"orderStatus": new_status, "updatedAt": utcnow()}
    if new_status == "Delivered":
        update["deliveredAt"] = utcnow()

    before = db[ORDERS].find_one_and_update({"_id": oid}, {"$set": update}, return_document=ReturnDocument.BEFORE)
    if before is None:
        logger.warning("Order %s not found for status update", order_id)
        raise not_found("Order not found.")
    logger.info("Order %s status updated to %s", order_id, new_status)

    doc = {**before, **update}
    if new_status == "Delivered" and before.get("orderStatus") != "Delivered":
        _decrement_stock(db, doc)
    return serialize_doc(doc)
