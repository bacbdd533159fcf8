import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pymongo.database import Database
from pymongo.errors import PyMongoError
from starlette.exceptions import HTTPException as StarletteHTTPException

import addresses
import carts
import catalog
import config
import content
import coupons
import orders
import password_reset
import users
import wishlists
from auth import get_current_user_id, require_admin
from database import connect, get_db
from errors import ErrorKind, ServiceError, kind_for_status
from pricing import coupon_discount
from schemas import (
    AddressCreate,
    AddressUpdate,
    CartItem,
    CartItemRef,
    CartQuantityUpdate,
    Category,
    CouponCheck,
    CouponCreate,
    CouponUpdate,
    FeaturedBanner,
    ForgotPasswordRequest,
    HeroSlide,
    HeroSlideUpdate,
    LoginRequest,
    OrderCreate,
    OrderStatusUpdate,
    PasswordCheck,
    Product,
    ProfileUpdate,
    RegisterRequest,
    ResetPasswordRequest,
    RoleUpdate,
    SocialLinks,
    WishlistProduct,
)
from seed import seed_demo_data

logging.basicConfig(level=config.LOG_LEVEL, format="%(asctime)s %(levelname)s [%(name)s] %(message)s")
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    client = None
    # tests install their own database before startup
    if getattr(app.state, "db", None) is None:
        client, app.state.db = connect()
    yield
    if client is not None:
        client.close()
        logger.info("MongoDB client closed")


app = FastAPI(title="Storefront Backend", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ----------------------- Errors -----------------------
def error_response(status_code: int, kind: ErrorKind, message: str, **extra) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": message, "kind": kind.value, **extra})


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    return error_response(exc.status_code, exc.kind, exc.message)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return error_response(exc.status_code, kind_for_status(exc.status_code), str(exc.detail))


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = [{"loc": [str(p) for p in e.get("loc", ())], "msg": e.get("msg", "")} for e in exc.errors()]
    message = errors[0]["msg"] if errors else "Invalid request body."
    return error_response(400, ErrorKind.VALIDATION, message, errors=errors)


@app.exception_handler(PyMongoError)
async def database_error_handler(request: Request, exc: PyMongoError):
    logger.exception("Database error on %s %s", request.method, request.url.path, exc_info=exc)
    return error_response(500, ErrorKind.INTERNAL, "Database error.")


# ----------------------- Health -----------------------
@app.get("/")
def root():
    return {"message": "Storefront API running"}


@app.get("/test")
def test_database(request: Request):
    response = {
        "backend": "✅ Running",
        "database": "❌ Not Available",
        "database_url": "✅ Set" if os.getenv("DATABASE_URL") else "❌ Not Set",
        "database_name": "✅ Set" if os.getenv("DATABASE_NAME") else "❌ Not Set",
        "connection_status": "Not Connected",
        "collections": [],
    }
    db = getattr(request.app.state, "db", None)
    try:
        if db is not None:
            response["collections"] = db.list_collection_names()[:10]
            response["database"] = "✅ Connected & Working"
            response["connection_status"] = "Connected"
    except PyMongoError as e:
        response["database"] = f"❌ Error: {str(e)[:80]}"
    return response


# ----------------------- Auth -----------------------
@app.post("/auth/register", status_code=201)
def register(body: RegisterRequest, db: Database = Depends(get_db)):
    user_id = users.register(db, body)
    return {"message": "User registered successfully", "userId": user_id}


@app.post("/auth/login")
def login(body: LoginRequest, db: Database = Depends(get_db)):
    result = users.authenticate(db, body.email, body.password)
    return {"message": "Login successful", **result}


@app.post("/auth/verify-password")
def verify_password(body: PasswordCheck, user_id: str = Depends(get_current_user_id), db: Database = Depends(get_db)):
    users.verify_password(db, user_id, body.password)
    return {"success": True, "message": "Password verified successfully."}


@app.post("/auth/forgot-password")
def forgot_password(body: ForgotPasswordRequest, db: Database = Depends(get_db)):
    password_reset.request_password_reset(db, body.email)
    return {"message": "If an account with that email exists, a password reset link has been sent."}


@app.get("/auth/reset-password/verify-token")
def verify_reset_token(token: Optional[str] = None, db: Database = Depends(get_db)):
    if not token:
        raise ServiceError(ErrorKind.VALIDATION, "Reset token is missing.")
    if password_reset.verify_reset_token(db, token) is None:
        raise ServiceError(ErrorKind.VALIDATION, "Invalid or expired reset token.")
    return {"valid": True, "message": "Token is valid."}


@app.post("/auth/reset-password")
def reset_password(body: ResetPasswordRequest, db: Database = Depends(get_db)):
    password_reset.reset_password(db, body.token, body.new_password)
    return {"message": "Password has been successfully reset. You can now log in with your new password."}


# ----------------------- Catalog -----------------------
@app.get("/products")
def list_products(limit: Optional[int] = None, category: Optional[str] = None, db: Database = Depends(get_db)):
    return catalog.list_products(db, limit=limit, category=category)


@app.get("/products/{product_id}")
def get_product(product_id: str, db: Database = Depends(get_db)):
    return catalog.get_product(db, product_id)


@app.get("/categories")
def list_categories(db: Database = Depends(get_db)):
    return catalog.list_categories(db)


@app.get("/search")
def search(q: Optional[str] = None, db: Database = Depends(get_db)):
    return catalog.search_products(db, q)


# ----------------------- Cart -----------------------
@app.get("/cart")
def get_cart(user_id: str = Depends(get_current_user_id), db: Database = Depends(get_db)):
    return carts.get_cart(db, user_id)


@app.post("/cart/item")
def add_cart_item(body: CartItem, user_id: str = Depends(get_current_user_id), db: Database = Depends(get_db)):
    return carts.add_item(db, user_id, body)


@app.put("/cart/item")
def update_cart_item(
    body: CartQuantityUpdate, user_id: str = Depends(get_current_user_id), db: Database = Depends(get_db)
):
    return carts.update_item_quantity(db, user_id, body.cart_key, body.quantity)


@app.delete("/cart/item")
def remove_cart_item(body: CartItemRef, user_id: str = Depends(get_current_user_id), db: Database = Depends(get_db)):
    return carts.remove_item(db, user_id, body.cart_key)


@app.delete("/cart")
def clear_cart(user_id: str = Depends(get_current_user_id), db: Database = Depends(get_db)):
    return carts.clear_cart(db, user_id)


# ----------------------- Checkout -----------------------
@app.post("/coupons/validate-checkout")
def validate_checkout_coupon(body: CouponCheck, db: Database = Depends(get_db)):
    terms = coupons.validate_coupon(db, body.coupon_code, body.cart_subtotal)
    terms["discountAmount"] = coupon_discount(body.cart_subtotal, terms["discountType"], terms["discountValue"])
    terms["message"] = "Coupon applied successfully."
    return terms


@app.post("/orders", status_code=201)
def create_order(body: OrderCreate, user_id: str = Depends(get_current_user_id), db: Database = Depends(get_db)):
    order_id = orders.create_order(db, user_id, body)
    return {"message": "Order created successfully", "orderId": order_id}


@app.get("/my-orders")
def my_orders(user_id: str = Depends(get_current_user_id), db: Database = Depends(get_db)):
    return orders.list_user_orders(db, user_id)


@app.get("/my-orders/{order_id}")
def my_order(order_id: str, user_id: str = Depends(get_current_user_id), db: Database = Depends(get_db)):
    return orders.get_user_order(db, user_id, order_id)


@app.post("/my-orders/{order_id}/cancel")
def cancel_my_order(order_id: str, user_id: str = Depends(get_current_user_id), db: Database = Depends(get_db)):
    order = orders.cancel_user_order(db, user_id, order_id)
    return {"message": "Order cancelled successfully.", "order": order}


# ----------------------- Wishlist -----------------------
@app.get("/wishlist")
def get_wishlist(user_id: str = Depends(get_current_user_id), db: Database = Depends(get_db)):
    return {"productIds": wishlists.get_wishlist(db, user_id)}


@app.post("/wishlist")
def add_to_wishlist(body: WishlistProduct, user_id: str = Depends(get_current_user_id), db: Database = Depends(get_db)):
    return {"message": "Product added to wishlist", "productIds": wishlists.add_product(db, user_id, body.product_id)}


@app.post("/wishlist/remove")
def remove_from_wishlist(
    body: WishlistProduct, user_id: str = Depends(get_current_user_id), db: Database = Depends(get_db)
):
    product_ids = wishlists.remove_product(db, user_id, body.product_id)
    return {"message": "Product removed from wishlist", "productIds": product_ids}


# ----------------------- Account -----------------------
@app.get("/user/profile")
def get_profile(user_id: str = Depends(get_current_user_id), db: Database = Depends(get_db)):
    return users.get_user(db, user_id)


@app.put("/user/profile")
def update_profile(body: ProfileUpdate, user_id: str = Depends(get_current_user_id), db: Database = Depends(get_db)):
    return users.update_profile(db, user_id, body)


@app.delete("/user/account")
def delete_account(user_id: str = Depends(get_current_user_id), db: Database = Depends(get_db)):
    users.delete_user(db, user_id)
    return {"message": "Account deleted successfully."}


@app.get("/user/addresses")
def list_addresses(user_id: str = Depends(get_current_user_id), db: Database = Depends(get_db)):
    return addresses.list_addresses(db, user_id)


@app.post("/user/addresses", status_code=201)
def add_address(body: AddressCreate, user_id: str = Depends(get_current_user_id), db: Database = Depends(get_db)):
    return addresses.add_address(db, user_id, body)


@app.put("/user/addresses/{address_id}")
def update_address(
    address_id: str, body: AddressUpdate, user_id: str = Depends(get_current_user_id), db: Database = Depends(get_db)
):
    return addresses.update_address(db, user_id, address_id, body)


@app.delete("/user/addresses/{address_id}")
def delete_address(address_id: str, user_id: str = Depends(get_current_user_id), db: Database = Depends(get_db)):
    addresses.delete_address(db, user_id, address_id)
    return {"message": "Address deleted successfully."}


@app.put("/user/addresses/{address_id}/default")
def set_default_address(address_id: str, user_id: str = Depends(get_current_user_id), db: Database = Depends(get_db)):
    return addresses.set_default_address(db, user_id, address_id)


# ----------------------- Content -----------------------
@app.get("/hero-slides")
def active_hero_slides(db: Database = Depends(get_db)):
    return {"slides": content.list_active_hero_slides(db)}


@app.get("/featured-banner")
def featured_banner(db: Database = Depends(get_db)):
    return content.get_featured_banner(db)


@app.get("/social-links")
def social_links(db: Database = Depends(get_db)):
    return content.get_social_links(db)


@app.get("/blog")
def blog_posts():
    return content.list_blog_posts()


@app.get("/blog/{slug}")
def blog_post(slug: str):
    return content.get_blog_post(slug)


# ----------------------- Admin: catalog -----------------------
@app.get("/admin/categories")
def admin_categories(admin=Depends(require_admin), db: Database = Depends(get_db)):
    return catalog.list_categories_with_counts(db)


@app.post("/admin/categories", status_code=201)
def admin_create_category(body: Category, admin=Depends(require_admin), db: Database = Depends(get_db)):
    return catalog.create_category(db, body)


@app.put("/admin/categories/{category_id}")
def admin_update_category(
    category_id: str, body: Category, admin=Depends(require_admin), db: Database = Depends(get_db)
):
    return catalog.update_category(db, category_id, body)


@app.delete("/admin/categories/{category_id}")
def admin_delete_category(category_id: str, admin=Depends(require_admin), db: Database = Depends(get_db)):
    catalog.delete_category(db, category_id)
    return {"message": "Category deleted successfully."}


@app.get("/admin/products")
def admin_products(admin=Depends(require_admin), db: Database = Depends(get_db)):
    return catalog.list_products(db)


@app.post("/admin/products", status_code=201)
def admin_create_product(body: Product, admin=Depends(require_admin), db: Database = Depends(get_db)):
    return catalog.create_product(db, body)


@app.get("/admin/products/{product_id}")
def admin_get_product(product_id: str, admin=Depends(require_admin), db: Database = Depends(get_db)):
    return catalog.get_product(db, product_id)


@app.put("/admin/products/{product_id}")
def admin_update_product(product_id: str, body: Product, admin=Depends(require_admin), db: Database = Depends(get_db)):
    return catalog.update_product(db, product_id, body)


@app.delete("/admin/products/{product_id}")
def admin_delete_product(product_id: str, admin=Depends(require_admin), db: Database = Depends(get_db)):
    catalog.delete_product(db, product_id)
    return {"message": "Product deleted successfully."}


# ----------------------- Admin: coupons -----------------------
@app.get("/admin/coupons")
def admin_coupons(admin=Depends(require_admin), db: Database = Depends(get_db)):
    return coupons.list_coupons(db)


@app.post("/admin/coupons", status_code=201)
def admin_create_coupon(body: CouponCreate, admin=Depends(require_admin), db: Database = Depends(get_db)):
    return coupons.create_coupon(db, body)


@app.get("/admin/coupons/{coupon_id}")
def admin_get_coupon(coupon_id: str, admin=Depends(require_admin), db: Database = Depends(get_db)):
    return coupons.get_coupon(db, coupon_id)


@app.put("/admin/coupons/{coupon_id}")
def admin_update_coupon(
    coupon_id: str, body: CouponUpdate, admin=Depends(require_admin), db: Database = Depends(get_db)
):
    return coupons.update_coupon(db, coupon_id, body)


@app.delete("/admin/coupons/{coupon_id}")
def admin_delete_coupon(coupon_id: str, admin=Depends(require_admin), db: Database = Depends(get_db)):
    coupons.delete_coupon(db, coupon_id)
    return {"message": "Coupon deleted successfully."}


# ----------------------- Admin: orders -----------------------
@app.get("/admin/orders")
def admin_orders(admin=Depends(require_admin), db: Database = Depends(get_db)):
    return orders.list_orders(db)


@app.get("/admin/orders/{order_id}")
def admin_get_order(order_id: str, admin=Depends(require_admin), db: Database = Depends(get_db)):
    return orders.get_order(db, order_id)


@app.put("/admin/orders/{order_id}/status")
def admin_update_order_status(
    order_id: str, body: OrderStatusUpdate, admin=Depends(require_admin), db: Database = Depends(get_db)
):
    return orders.update_order_status(db, order_id, body.new_status)


# ----------------------- Admin: users -----------------------
@app.get("/admin/users")
def admin_users(admin=Depends(require_admin), db: Database = Depends(get_db)):
    return users.list_users(db)


@app.get("/admin/users/{user_id}")
def admin_get_user(user_id: str, admin=Depends(require_admin), db: Database = Depends(get_db)):
    return users.get_user(db, user_id)


@app.put("/admin/users/{user_id}")
def admin_update_user_role(user_id: str, body: RoleUpdate, admin=Depends(require_admin), db: Database = Depends(get_db)):
    return users.update_user_role(db, user_id, body.role)


@app.delete("/admin/users/{user_id}")
def admin_delete_user(user_id: str, admin=Depends(require_admin), db: Database = Depends(get_db)):
    users.delete_user(db, user_id)
    return {"message": "User deleted successfully"}


# ----------------------- Admin: content -----------------------
@app.get("/admin/hero-slides")
def admin_hero_slides(admin=Depends(require_admin), db: Database = Depends(get_db)):
    return content.list_hero_slides(db)


@app.post("/admin/hero-slides", status_code=201)
def admin_create_hero_slide(body: HeroSlide, admin=Depends(require_admin), db: Database = Depends(get_db)):
    return content.create_hero_slide(db, body)


@app.put("/admin/hero-slides/{slide_id}")
def admin_update_hero_slide(
    slide_id: str, body: HeroSlideUpdate, admin=Depends(require_admin), db: Database = Depends(get_db)
):
    return content.update_hero_slide(db, slide_id, body)


@app.delete("/admin/hero-slides/{slide_id}")
def admin_delete_hero_slide(slide_id: str, admin=Depends(require_admin), db: Database = Depends(get_db)):
    content.delete_hero_slide(db, slide_id)
    return {"message": "Hero slide deleted successfully."}


@app.get("/admin/featured-banner")
def admin_featured_banner(admin=Depends(require_admin), db: Database = Depends(get_db)):
    return content.get_featured_banner_or_default(db)


@app.post("/admin/featured-banner")
def admin_update_featured_banner(body: FeaturedBanner, admin=Depends(require_admin), db: Database = Depends(get_db)):
    return content.upsert_featured_banner(db, body)


@app.get("/admin/social-links")
def admin_social_links(admin=Depends(require_admin), db: Database = Depends(get_db)):
    return content.get_social_links(db)


@app.post("/admin/social-links")
def admin_update_social_links(body: SocialLinks, admin=Depends(require_admin), db: Database = Depends(get_db)):
    return content.upsert_social_links(db, body)


# ----------------------- Seed Demo Data -----------------------
@app.post("/seed")
def seed(db: Database = Depends(get_db)):
    return seed_demo_data(db)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=config.PORT)
