"""
Database and request schemas for the storefront API

Collection models describe what is stored in MongoDB; request models describe
what the routes accept. Documents use camelCase field names, so every model
aliases its snake_case attributes to camelCase and accepts either spelling.
"""
from datetime import datetime
from typing import Annotated, List, Literal, Optional, get_args

from pydantic import (
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    StringConstraints,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

DiscountType = Literal["percentage", "fixed"]
OrderStatus = Literal["Pending", "Processing", "Shipped", "Delivered", "Cancelled", "Failed"]
Role = Literal["user", "admin"]

ORDER_STATUSES = get_args(OrderStatus)

NonEmptyStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _check_product_discount(price: Optional[float], discount_type: Optional[str], discount_value: Optional[float]):
    if not discount_value or discount_value <= 0:
        return
    if not discount_type:
        raise ValueError("Discount type is required if discount value is provided.")
    if discount_type == "percentage" and not 1 <= discount_value <= 99:
        raise ValueError("Percentage discount must be between 1 and 99.")
    if discount_type == "fixed" and price is not None and discount_value >= price:
        raise ValueError("Fixed discount value must be less than the regular price.")


# ----------------------- Catalog -----------------------
class Category(CamelModel):
    name: NonEmptyStr
    image_url: Optional[str] = None
    ai_hint: Optional[str] = None


class ProductColor(CamelModel):
    name: NonEmptyStr
    hex: str
    image: str = ""
    ai_hint: str = ""


class ProductSpecification(CamelModel):
    name: str
    value: str


class Product(CamelModel):
    name: NonEmptyStr
    description: NonEmptyStr
    price: float = Field(..., ge=0)
    discount_type: Optional[DiscountType] = None
    discount_value: Optional[float] = Field(None, ge=0)
    category: NonEmptyStr
    image_urls: List[str] = Field(..., min_length=1)
    colors: List[ProductColor]
    sizes: List[str] = []
    specifications: List[ProductSpecification] = []
    ai_hint: Optional[str] = None
    stock: int = Field(..., ge=0)

    @model_validator(mode="after")
    def check_discount(self):
        _check_product_discount(self.price, self.discount_type, self.discount_value)
        return self


# ----------------------- Cart -----------------------
class CartItem(CamelModel):
    product_id: NonEmptyStr
    name: str
    price: float = Field(..., ge=0)
    original_price: Optional[float] = None
    image: str = ""
    quantity: int = Field(..., ge=1)
    size: Optional[str] = None
    color: Optional[str] = None
    color_hex: Optional[str] = None
    applied_discount_type: Optional[DiscountType] = None
    applied_discount_value: Optional[float] = None
    cart_key: NonEmptyStr


class CartQuantityUpdate(CamelModel):
    cart_key: NonEmptyStr
    quantity: int = Field(..., ge=0)


class CartItemRef(CamelModel):
    cart_key: NonEmptyStr


# ----------------------- Coupons -----------------------
class CouponBase(CamelModel):
    @field_validator("code", mode="before", check_fields=False)
    @classmethod
    def normalize_code(cls, v):
        if isinstance(v, str):
            return v.strip().upper()
        return v

    @model_validator(mode="after")
    def check_percentage(self):
        if self.discount_type == "percentage" and self.discount_value is not None and self.discount_value > 100:
            raise ValueError("Percentage coupon cannot exceed 100.")
        return self


class CouponCreate(CouponBase):
    code: NonEmptyStr
    discount_type: DiscountType
    discount_value: float = Field(..., gt=0)
    expiry_date: datetime
    min_purchase_amount: Optional[float] = Field(None, ge=0)
    usage_limit: Optional[int] = Field(None, ge=1)
    is_active: bool = True


class CouponUpdate(CouponBase):
    code: Optional[NonEmptyStr] = None
    discount_type: Optional[DiscountType] = None
    discount_value: Optional[float] = Field(None, gt=0)
    expiry_date: Optional[datetime] = None
    min_purchase_amount: Optional[float] = Field(None, ge=0)
    usage_limit: Optional[int] = Field(None, ge=1)
    is_active: Optional[bool] = None


class CouponCheck(CamelModel):
    coupon_code: NonEmptyStr
    cart_subtotal: float = Field(..., ge=0)


# ----------------------- Orders -----------------------
class OrderItem(CamelModel):
    product_id: NonEmptyStr
    name: str
    price: float = Field(..., ge=0)
    original_price: Optional[float] = None
    image: str = ""
    quantity: int = Field(..., ge=1)
    size: Optional[str] = None
    color: Optional[str] = None
    applied_discount_type: Optional[DiscountType] = None
    applied_discount_value: Optional[float] = None


class ShippingAddress(CamelModel):
    full_name: NonEmptyStr
    phone: NonEmptyStr
    street_address: NonEmptyStr
    city: NonEmptyStr
    postal_code: NonEmptyStr
    country: NonEmptyStr


class OrderCreate(CamelModel):
    items: List[OrderItem] = Field(..., min_length=1)
    total_amount: float = Field(..., gt=0)
    shipping_address: ShippingAddress
    payment_method: NonEmptyStr
    payment_status: Optional[str] = None
    order_status: OrderStatus = "Pending"
    applied_coupon_code: Optional[str] = None
    coupon_discount_amount: Optional[float] = Field(None, ge=0)


class OrderStatusUpdate(CamelModel):
    new_status: OrderStatus


# ----------------------- Users -----------------------
class User(CamelModel):
    name: str = Field(..., description="Full name")
    email: EmailStr
    hashed_password: str = Field(..., description="bcrypt hash")
    role: Role = "user"


class RegisterRequest(CamelModel):
    name: NonEmptyStr
    email: EmailStr
    password: str = Field(..., min_length=6)


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class PasswordCheck(CamelModel):
    password: str = Field(..., min_length=1)


class ProfileUpdate(CamelModel):
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    current_password: Optional[str] = None
    new_password: Optional[str] = None

    @field_validator("email", mode="before")
    @classmethod
    def blank_email_is_unset(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v


class RoleUpdate(CamelModel):
    role: Role


class ForgotPasswordRequest(CamelModel):
    email: EmailStr


class ResetPasswordRequest(CamelModel):
    token: NonEmptyStr
    new_password: str = Field(..., min_length=6)


# ----------------------- Addresses -----------------------
class AddressCreate(ShippingAddress):
    is_default: bool = False


class AddressUpdate(CamelModel):
    full_name: Optional[NonEmptyStr] = None
    phone: Optional[NonEmptyStr] = None
    street_address: Optional[NonEmptyStr] = None
    city: Optional[NonEmptyStr] = None
    postal_code: Optional[NonEmptyStr] = None
    country: Optional[NonEmptyStr] = None
    is_default: Optional[bool] = None


# ----------------------- Wishlist -----------------------
class WishlistProduct(CamelModel):
    product_id: NonEmptyStr


# ----------------------- Content -----------------------
def _coerce_display_order(v):
    try:
        return int(v)
    except (TypeError, ValueError):
        return 0


class HeroSlide(CamelModel):
    title: Optional[str] = None
    subtitle: Optional[str] = None
    image_url: NonEmptyStr
    button_text: Optional[str] = None
    button_link: Optional[str] = None
    display_order: int = 0
    is_active: bool = True
    ai_hint: Optional[str] = None

    @field_validator("display_order", mode="before")
    @classmethod
    def coerce_display_order(cls, v):
        return _coerce_display_order(v)


class HeroSlideUpdate(CamelModel):
    title: Optional[str] = None
    subtitle: Optional[str] = None
    image_url: Optional[NonEmptyStr] = None
    button_text: Optional[str] = None
    button_link: Optional[str] = None
    display_order: Optional[int] = None
    is_active: Optional[bool] = None
    ai_hint: Optional[str] = None

    @field_validator("display_order", mode="before")
    @classmethod
    def coerce_display_order(cls, v):
        if v is None:
            return None
        return _coerce_display_order(v)


class FeaturedBanner(CamelModel):
    title: NonEmptyStr
    subtitle: NonEmptyStr
    image_url: NonEmptyStr
    button_text: NonEmptyStr
    button_link: NonEmptyStr
    ai_hint: Optional[str] = None


class SocialLinks(CamelModel):
    facebook: Optional[str] = None
    instagram: Optional[str] = None
    twitter: Optional[str] = None
    youtube: Optional[str] = None
