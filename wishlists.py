import logging
from typing import List

from pymongo.database import Database

from database import create_document, utcnow
from errors import invalid

logger = logging.getLogger(__name__)

WISHLISTS = "wishlists"


def _ensure(db: Database, user_id: str) -> dict:
    doc = db[WISHLISTS].find_one({"userId": user_id})
    if doc is None:
        create_document(db, WISHLISTS, {"userId": user_id, "productIds": []})
        doc = db[WISHLISTS].find_one({"userId": user_id})
        logger.info("Created new wishlist for user %s", user_id)
    return doc


def get_wishlist(db: Database, user_id: str) -> List[str]:
    return list(_ensure(db, user_id).get("productIds", []))


def add_product(db: Database, user_id: str, product_id: str) -> List[str]:
    _ensure(db, user_id)
    db[WISHLISTS].update_one(
        {"userId": user_id},
        {"$addToSet": {"productIds": product_id}, "$set": {"updatedAt": utcnow()}},
    )
    logger.info("Product %s added to wishlist of user %s", product_id, user_id)
    return get_wishlist(db, user_id)


def remove_product(db: Database, user_id: str, product_id: str) -> List[str]:
    res = db[WISHLISTS].update_one(
        {"userId": user_id, "productIds": product_id},
        {"$pull": {"productIds": product_id}, "$set": {"updatedAt": utcnow()}},
    )
    if res.modified_count == 0:
        raise invalid("Product is not in the wishlist.")
    logger.info("Product %s removed from wishlist of user %s", product_id, user_id)
    return get_wishlist(db, user_id)
