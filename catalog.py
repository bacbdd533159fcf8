import logging
import re
from collections import Counter
from typing import List, Optional

from pymongo import ReturnDocument
from pymongo.database import Database

from database import create_document, get_documents, parse_object_id, serialize_doc, utcnow
from errors import conflict, invalid, not_found
from pricing import calculate_effective_price
from schemas import Category, Product

logger = logging.getLogger(__name__)

CATEGORIES = "categories"
PRODUCTS = "products"

SEARCH_LIMIT = 10


# ----------------------- Categories -----------------------
def _name_pattern(name: str) -> dict:
    return {"$regex": f"^{re.escape(name)}$", "$options": "i"}


def list_categories(db: Database) -> List[dict]:
    docs = get_documents(db, CATEGORIES, sort=[("name", 1)])
    return [serialize_doc(d) for d in docs]


def list_categories_with_counts(db: Database) -> List[dict]:
    counts = Counter(p.get("category") for p in db[PRODUCTS].find({}, {"category": 1}))
    categories = []
    for doc in get_documents(db, CATEGORIES, sort=[("name", 1)]):
        cat = serialize_doc(doc)
        cat["aiHint"] = cat.get("aiHint") or cat["name"].lower()
        cat["productCount"] = counts.get(cat["name"], 0)
        categories.append(cat)
    return categories


def create_category(db: Database, body: Category) -> dict:
    name = body.name
    if db[CATEGORIES].find_one({"name": _name_pattern(name)}):
        logger.warning("Category %r already exists", name)
        raise conflict(f'Category "{name}" already exists.')
    doc = {
        "name": name,
        "imageUrl": (body.image_url or "").strip(),
        "aiHint": (body.ai_hint or "").strip() or name.lower(),
    }
    category_id = create_document(db, CATEGORIES, doc)
    logger.info("Category %s created", category_id)
    return serialize_doc(db[CATEGORIES].find_one({"_id": parse_object_id(category_id, "category")}))


def update_category(db: Database, category_id: str, body: Category) -> dict:
    oid = parse_object_id(category_id, "category")
    name = body.name
    if db[CATEGORIES].find_one({"name": _name_pattern(name), "_id": {"$ne": oid}}):
        raise conflict(f'Another category named "{name}" already exists.')

    update = {"name": name, "updatedAt": utcnow()}
    if body.image_url is not None:
        update["imageUrl"] = body.image_url.strip()
    if body.ai_hint is not None:
        update["aiHint"] = body.ai_hint.strip() or name.lower()

    doc = db[CATEGORIES].find_one_and_update({"_id": oid}, {"$set": update}, return_document=ReturnDocument.AFTER)
    if doc is None:
        raise not_found("Category not found.")
    logger.info("Category %s updated", category_id)
    return serialize_doc(doc)


def delete_category(db: Database, category_id: str) -> None:
    oid = parse_object_id(category_id, "category")
    res = db[CATEGORIES].delete_one({"_id": oid})
    if res.deleted_count == 0:
        raise not_found("Category not found.")
    logger.info("Category %s deleted", category_id)


# ----------------------- Products -----------------------
def serialize_product(doc: dict) -> dict:
    product = serialize_doc(doc)
    if not product.get("discountType") or not product.get("discountValue"):
        product.pop("discountType", None)
        product.pop("discountValue", None)
    product.setdefault("specifications", [])
    product.setdefault("sizes", [])
    pricing = calculate_effective_price(
        product.get("price", 0), product.get("discountType"), product.get("discountValue")
    )
    product["effectivePrice"] = pricing.effective_price
    product["discountAmount"] = pricing.discount_amount
    product["discountText"] = pricing.discount_text
    return product


def _product_fields(body: Product) -> dict:
    data = body.model_dump(by_alias=True)
    first_image = body.image_urls[0]
    data["colors"] = [{**c, "image": c.get("image") or first_image} for c in data["colors"]]
    data["aiHint"] = body.ai_hint or body.category
    data.pop("discountType")
    data.pop("discountValue")
    return data


def _has_discount(body: Product) -> bool:
    return bool(body.discount_type and body.discount_value and body.discount_value > 0)


def list_products(db: Database, limit: Optional[int] = None, category: Optional[str] = None) -> List[dict]:
    filt = {"category": category} if category else {}
    docs = get_documents(db, PRODUCTS, filt, sort=[("createdAt", -1)], limit=limit if limit and limit > 0 else None)
    return [serialize_product(d) for d in docs]


def get_product(db: Database, product_id: str) -> dict:
    doc = db[PRODUCTS].find_one({"_id": parse_object_id(product_id, "product")})
    if doc is None:
        raise not_found("Product not found")
    return serialize_product(doc)


def create_product(db: Database, body: Product) -> dict:
    data = _product_fields(body)
    if _has_discount(body):
        data["discountType"] = body.discount_type
        data["discountValue"] = body.discount_value
    product_id = create_document(db, PRODUCTS, data)
    logger.info("Product %s created (%s)", product_id, body.name)
    return get_product(db, product_id)


def update_product(db: Database, product_id: str, body: Product) -> dict:
    oid = parse_object_id(product_id, "product")
    to_set = _product_fields(body)
    to_set["updatedAt"] = utcnow()
    update = {"$set": to_set}
    if _has_discount(body):
        to_set["discountType"] = body.discount_type
        to_set["discountValue"] = body.discount_value
    else:
        update["$unset"] = {"discountType": "", "discountValue": ""}

    res = db[PRODUCTS].update_one({"_id": oid}, update)
    if res.matched_count == 0:
        raise not_found("Product not found")
    logger.info("Product %s updated", product_id)
    return get_product(db, product_id)


def delete_product(db: Database, product_id: str) -> None:
    res = db[PRODUCTS].delete_one({"_id": parse_object_id(product_id, "product")})
    if res.deleted_count == 0:
        raise not_found("Product not found")
    logger.info("Product %s deleted", product_id)


def search_products(db: Database, query: Optional[str], limit: int = SEARCH_LIMIT) -> List[dict]:
    query = (query or "").strip()
    if len(query) < 2:
        raise invalid("Search query must be at least 2 characters long.")
    pattern = {"$regex": re.escape(query), "$options": "i"}
    filt = {"$or": [{"name": pattern}, {"description": pattern}, {"category": pattern}]}
    return [serialize_product(d) for d in get_documents(db, PRODUCTS, filt, limit=limit)]
