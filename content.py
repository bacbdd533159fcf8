import logging
from typing import List, Optional

from pymongo import ReturnDocument
from pymongo.database import Database

from database import create_document, parse_object_id, serialize_doc, utcnow
from errors import not_found
from schemas import FeaturedBanner, HeroSlide, HeroSlideUpdate, SocialLinks

logger = logging.getLogger(__name__)

HERO_SLIDES = "hero_slides"
BANNERS = "featured_banners"
SETTINGS = "site_settings"

BANNER_ID = "homepage_exclusive_deal"
SETTINGS_ID = "global_settings"

SOCIAL_NETWORKS = ("facebook", "instagram", "twitter", "youtube")

DEFAULT_BANNER = {
    "title": "Exclusive Deals - Limited Time Only!",
    "subtitle": (
        "Grab a chance to buy your desired clothes and accessories at unbeatable prices. "
        "Don't miss out on these amazing offers."
    ),
    "buttonText": "Shop Now",
    "buttonLink": "/shop?filter=deals",
    "imageUrl": "https://placehold.co/600x450.png",
    "aiHint": "clothing store interior",
}

BLOG_POSTS = [
    {
        "id": "1",
        "slug": "summer-trends-2024",
        "title": "Top 5 Fashion Trends for Summer 2024",
        "date": "July 15, 2024",
        "category": "Trends",
        "excerpt": (
            "Discover the hottest looks for the summer season, from vibrant colors and sheer fabrics "
            "to the revival of '90s minimalism..."
        ),
        "image": "https://images.unsplash.com/photo-1598363777525-4818477ba9f9?fit=max&fm=jpg&q=80&w=1080",
        "aiHint": "summer fashion trends",
    },
    {
        "id": "2",
        "slug": "style-denim-jacket",
        "title": "How to Style Your Denim Jacket: 7 Creative Ways",
        "date": "July 10, 2024",
        "category": "Style Guides",
        "excerpt": (
            "The denim jacket is a versatile wardrobe staple. Learn new ways to style it for any occasion, "
            "from classic double denim to smart casual looks..."
        ),
        "image": "https://images.unsplash.com/photo-1543076447-215ad9ba6923?fit=max&fm=jpg&q=80&w=1080",
        "aiHint": "denim jacket style",
    },
    {
        "id": "3",
        "slug": "sustainable-fashion-commitment",
        "title": "Behind the Seams: Our Commitment to Sustainable Fashion",
        "date": "July 5, 2024",
        "category": "Our Brand",
        "excerpt": (
            "We believe in fashion that feels good and does good. Read about our sustainability efforts, "
            "from materials to production..."
        ),
        "image": "https://images.unsplash.com/photo-1711016948399-70b57cd06d90?fit=max&fm=jpg&q=80&w=1080",
        "aiHint": "sustainable fashion brand",
    },
]


# ----------------------- Hero slides -----------------------
def list_hero_slides(db: Database) -> List[dict]:
    docs = db[HERO_SLIDES].find({}).sort([("displayOrder", 1), ("createdAt", -1)])
    return [serialize_doc(d) for d in docs]


def list_active_hero_slides(db: Database) -> List[dict]:
    docs = db[HERO_SLIDES].find({"isActive": True}).sort([("displayOrder", 1), ("createdAt", -1)])
    return [serialize_doc(d) for d in docs]


def create_hero_slide(db: Database, body: HeroSlide) -> dict:
    slide_id = create_document(db, HERO_SLIDES, body)
    logger.info("Hero slide %s created", slide_id)
    return serialize_doc(db[HERO_SLIDES].find_one({"_id": parse_object_id(slide_id, "slide")}))


def update_hero_slide(db: Database, slide_id: str, body: HeroSlideUpdate) -> dict:
    oid = parse_object_id(slide_id, "slide")
    update = body.model_dump(by_alias=True, exclude_unset=True, exclude_none=True)
    update["updatedAt"] = utcnow()
    doc = db[HERO_SLIDES].find_one_and_update({"_id": oid}, {"$set": update}, return_document=ReturnDocument.AFTER)
    if doc is None:
        raise not_found("Hero slide not found.")
    logger.info("Hero slide %s updated", slide_id)
    return serialize_doc(doc)


def delete_hero_slide(db: Database, slide_id: str) -> None:
    res = db[HERO_SLIDES].delete_one({"_id": parse_object_id(slide_id, "slide")})
    if res.deleted_count == 0:
        raise not_found("Hero slide not found.")
    logger.info("Hero slide %s deleted", slide_id)


# ----------------------- Featured banner -----------------------
def get_featured_banner(db: Database) -> Optional[dict]:
    return serialize_doc(db[BANNERS].find_one({"_id": BANNER_ID}))


def get_featured_banner_or_default(db: Database) -> dict:
    return get_featured_banner(db) or dict(DEFAULT_BANNER)


def upsert_featured_banner(db: Database, body: FeaturedBanner) -> dict:
    data = body.model_dump(by_alias=True)
    data["updatedAt"] = utcnow()
    doc = db[BANNERS].find_one_and_update(
        {"_id": BANNER_ID}, {"$set": data}, upsert=True, return_document=ReturnDocument.AFTER
    )
    logger.info("Featured banner updated")
    return serialize_doc(doc)


# ----------------------- Social links -----------------------
def get_social_links(db: Database) -> dict:
    doc = db[SETTINGS].find_one({"_id": SETTINGS_ID}) or {}
    links = doc.get("socialLinks") or {}
    return {name: links.get(name) or "" for name in SOCIAL_NETWORKS}


def upsert_social_links(db: Database, body: SocialLinks) -> dict:
    links = {name: (value or "").strip() for name, value in body.model_dump().items()}
    db[SETTINGS].update_one(
        {"_id": SETTINGS_ID}, {"$set": {"socialLinks": links, "updatedAt": utcnow()}}, upsert=True
    )
    logger.info("Social links updated")
    return get_social_links(db)


# ----------------------- Blog -----------------------
def list_blog_posts() -> List[dict]:
    return [dict(p) for p in BLOG_POSTS]


def get_blog_post(slug: str) -> dict:
    for post in BLOG_POSTS:
        if post["slug"] == slug:
            return dict(post)
    raise not_found("Blog post not found.")
