import logging

from pymongo.database import Database

import catalog
import users
from auth import hash_password
from database import create_document
from schemas import Category, Product, User

logger = logging.getLogger(__name__)

ADMIN_EMAIL = "admin@shop.com"
ADMIN_PASSWORD = "admin123"

DEMO_CATEGORIES = [
    {"name": "Shirts", "imageUrl": "https://placehold.co/400x300.png", "aiHint": "shirts"},
    {"name": "Pants", "imageUrl": "https://placehold.co/400x300.png", "aiHint": "pants"},
    {"name": "Accessories", "imageUrl": "https://placehold.co/400x300.png", "aiHint": "fashion accessories"},
    {"name": "Outerwear", "imageUrl": "https://placehold.co/400x300.png", "aiHint": "jackets"},
]

DEMO_PRODUCTS = [
    {
        "name": "Classic Cotton Tee",
        "description": "A timeless classic, this 100% cotton t-shirt offers comfort and style. Perfect for everyday wear.",
        "price": 29.99,
        "category": "Shirts",
        "imageUrls": ["https://placehold.co/600x800.png"],
        "aiHint": "white t-shirt",
        "colors": [
            {"name": "White", "hex": "#FFFFFF", "aiHint": "white t-shirt"},
            {"name": "Black", "hex": "#000000", "aiHint": "black t-shirt"},
            {"name": "Navy", "hex": "#000080", "aiHint": "navy t-shirt"},
        ],
        "sizes": ["S", "M", "L", "XL"],
        "stock": 50,
    },
    {
        "name": "Slim Fit Chinos",
        "description": "Versatile and stylish, these slim fit chinos are made from a comfortable stretch cotton blend.",
        "price": 79.99,
        "discountType": "percentage",
        "discountValue": 15,
        "category": "Pants",
        "imageUrls": ["https://placehold.co/600x800.png"],
        "aiHint": "khaki pants",
        "colors": [
            {"name": "Khaki", "hex": "#F0E68C", "aiHint": "khaki pants"},
            {"name": "Olive", "hex": "#808000", "aiHint": "olive pants"},
            {"name": "Grey", "hex": "#808080", "aiHint": "grey pants"},
        ],
        "sizes": ["30", "32", "34", "36"],
        "stock": 30,
    },
    {
        "name": "Leather Belt",
        "description": "A high-quality genuine leather belt with a classic metal buckle.",
        "price": 49.99,
        "category": "Accessories",
        "imageUrls": ["https://placehold.co/400x300.png"],
        "aiHint": "brown belt",
        "colors": [
            {"name": "Brown", "hex": "#A52A2A", "aiHint": "brown belt"},
            {"name": "Black", "hex": "#000000", "aiHint": "black belt"},
        ],
        "specifications": [{"name": "Material", "value": "Genuine leather"}],
        "stock": 40,
    },
    {
        "name": "Silk Scarf",
        "description": "Luxurious 100% silk scarf with a vibrant print. An elegant accessory for any season.",
        "price": 65.00,
        "discountType": "fixed",
        "discountValue": 10,
        "category": "Accessories",
        "imageUrls": ["https://placehold.co/400x300.png"],
        "aiHint": "floral scarf",
        "colors": [
            {"name": "Floral Blue", "hex": "#ADD8E6", "aiHint": "blue scarf"},
            {"name": "Abstract Red", "hex": "#FFC0CB", "aiHint": "red scarf"},
        ],
        "specifications": [{"name": "Material", "value": "100% silk"}],
        "stock": 25,
    },
    {
        "name": "Denim Jacket",
        "description": "A rugged and stylish denim jacket, perfect for layering. Classic button-front styling and chest pockets.",
        "price": 119.99,
        "category": "Outerwear",
        "imageUrls": ["https://placehold.co/600x800.png"],
        "aiHint": "blue jacket",
        "colors": [
            {"name": "Classic Blue", "hex": "#4682B4", "aiHint": "blue jacket"},
            {"name": "Washed Black", "hex": "#36454F", "aiHint": "black jacket"},
        ],
        "sizes": ["S", "M", "L"],
        "stock": 15,
    },
    {
        "name": "Linen Shirt",
        "description": "Lightweight and breathable linen shirt, ideal for warm weather. Relaxed fit and button-down collar.",
        "price": 75.50,
        "category": "Shirts",
        "imageUrls": ["https://placehold.co/600x800.png"],
        "aiHint": "white shirt",
        "colors": [
            {"name": "Natural White", "hex": "#F5F5DC", "aiHint": "white shirt"},
            {"name": "Sky Blue", "hex": "#87CEEB", "aiHint": "blue shirt"},
        ],
        "sizes": ["S", "M", "L", "XL"],
        "stock": 20,
    },
]


def seed_demo_data(db: Database) -> dict:
    if db[catalog.PRODUCTS].count_documents({}) > 0:
        return {"seeded": False, "message": "Products already exist"}

    for c in DEMO_CATEGORIES:
        if not db[catalog.CATEGORIES].find_one({"name": c["name"]}):
            catalog.create_category(db, Category(**c))
    for p in DEMO_PRODUCTS:
        catalog.create_product(db, Product(**p))

    # create admin user if none
    if db[users.USERS].count_documents({"role": "admin"}) == 0:
        admin = User(name="Admin", email=ADMIN_EMAIL, hashed_password=hash_password(ADMIN_PASSWORD), role="admin")
        create_document(db, users.USERS, admin)
        logger.info("Demo admin %s created", ADMIN_EMAIL)

    logger.info("Demo data seeded")
    return {
        "seeded": True,
        "categories": db[catalog.CATEGORIES].count_documents({}),
        "products": db[catalog.PRODUCTS].count_documents({}),
    }
