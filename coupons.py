import logging
from typing import List, Optional

from pymongo import ReturnDocument
from pymongo.database import Database

from database import as_utc, create_document, parse_object_id, serialize_doc, utcnow
from errors import ErrorKind, ServiceError, conflict, invalid, not_found
from schemas import CouponCreate, CouponUpdate

logger = logging.getLogger(__name__)

COUPONS = "coupons"

INVALID_COUPON = "Invalid or expired coupon code."


def _normalize_code(code: str) -> str:
    return (code or "").strip().upper()


def list_coupons(db: Database) -> List[dict]:
    return [serialize_doc(d) for d in db[COUPONS].find({}).sort("createdAt", -1)]


def get_coupon(db: Database, coupon_id: str) -> dict:
    doc = db[COUPONS].find_one({"_id": parse_object_id(coupon_id, "coupon")})
    if doc is None:
        raise not_found("Coupon not found.")
    return serialize_doc(doc)


def create_coupon(db: Database, body: CouponCreate) -> dict:
    code = _normalize_code(body.code)
    if db[COUPONS].find_one({"code": code}):
        logger.warning("Coupon code %s already exists", code)
        raise conflict(f'Coupon code "{code}" already exists.')
    data = body.model_dump(by_alias=True)
    data["code"] = code
    data["usageCount"] = 0
    coupon_id = create_document(db, COUPONS, data)
    logger.info("Coupon %s created (%s)", coupon_id, code)
    return get_coupon(db, coupon_id)


def update_coupon(db: Database, coupon_id: str, body: CouponUpdate) -> dict:
    oid = parse_object_id(coupon_id, "coupon")
    changes = body.model_dump(by_alias=True, exclude_unset=True)

    # these two may be cleared explicitly with null; the rest ignore nulls
    update = {k: v for k, v in changes.items() if v is not None or k in ("minPurchaseAmount", "usageLimit")}
    if "code" in update:
        update["code"] = _normalize_code(update["code"])
        if db[COUPONS].find_one({"code": update["code"], "_id": {"$ne": oid}}):
            raise conflict(f'Coupon code "{update["code"]}" already exists.')

    existing = db[COUPONS].find_one({"_id": oid})
    if existing is None:
        raise not_found("Coupon not found.")
    discount_type = update.get("discountType", existing.get("discountType"))
    discount_value = update.get("discountValue", existing.get("discountValue"))
    if discount_type == "percentage" and discount_value is not None and discount_value > 100:
        raise invalid("Percentage coupon cannot exceed 100.")
    update["updatedAt"] = utcnow()

    doc = db[COUPONS].find_one_and_update({"_id": oid}, {"$set": update}, return_document=ReturnDocument.AFTER)
    if doc is None:
        raise not_found("Coupon not found.")
    logger.info("Coupon %s updated", coupon_id)
    return serialize_doc(doc)


def delete_coupon(db: Database, coupon_id: str) -> None:
    res = db[COUPONS].delete_one({"_id": parse_object_id(coupon_id, "coupon")})
    if res.deleted_count == 0:
        raise not_found("Coupon not found.")
    logger.info("Coupon %s deleted", coupon_id)


def is_redeemable(coupon: dict) -> bool:
    if not coupon.get("isActive"):
        return False
    expiry = coupon.get("expiryDate")
    if expiry is None or as_utc(expiry) < utcnow():
        return False
    limit = coupon.get("usageLimit")
    if limit is not None and coupon.get("usageCount", 0) >= limit:
        return False
    return True


def find_redeemable_coupon(db: Database, code: str) -> Optional[dict]:
    """Return the raw coupon document for ``code`` if it can be used right now."""
    code = _normalize_code(code)
    if not code:
        return None
    coupon = db[COUPONS].find_one({"code": code})
    if coupon is None or not is_redeemable(coupon):
        return None
    return coupon


def validate_coupon(db: Database, code: str, subtotal: float) -> dict:
    coupon = find_redeemable_coupon(db, code)
    if coupon is None:
        logger.info("Rejected coupon code %r", code)
        raise not_found(INVALID_COUPON)

    minimum = coupon.get("minPurchaseAmount")
    if minimum and subtotal < minimum:
        raise ServiceError(
            ErrorKind.MINIMUM_NOT_MET,
            f"Minimum purchase of ৳{minimum:.2f} required for this coupon. Your subtotal is ৳{subtotal:.2f}.",
        )

    logger.info("Coupon %s validated for subtotal %.2f", coupon["code"], subtotal)
    return {
        "code": coupon["code"],
        "discountType": coupon["discountType"],
        "discountValue": coupon["discountValue"],
        "minPurchaseAmount": minimum,
    }


def increment_usage(db: Database, code: str) -> bool:
    coupon = find_redeemable_coupon(db, code)
    if coupon is None:
        logger.warning("Could not find coupon %s to increment usage", code)
        return False
    db[COUPONS].update_one({"_id": coupon["_id"]}, {"$inc": {"usageCount": 1}, "$set": {"updatedAt": utcnow()}})
    logger.info("Incremented usage for coupon %s", coupon["code"])
    return True
