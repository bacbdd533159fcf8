from typing import NamedTuple, Optional


class PriceBreakdown(NamedTuple):
    effective_price: float
    discount_amount: float
    original_price: Optional[float] = None
    discount_text: Optional[str] = None


def calculate_effective_price(
    price: float,
    discount_type: Optional[str] = None,
    discount_value: Optional[float] = None,
) -> PriceBreakdown:
    """Apply a product discount to its base price.

    Percentage discounts must lie in [1, 99] and fixed discounts must be below
    the price. Anything else leaves the base price untouched.
    """
    if discount_type and discount_value and discount_value > 0 and price > 0:
        if discount_type == "percentage" and 1 <= discount_value <= 99:
            discount = price * discount_value / 100
            return PriceBreakdown(
                effective_price=round(price - discount, 2),
                discount_amount=round(discount, 2),
                original_price=price,
                discount_text=f"{discount_value:g}% OFF",
            )
        if discount_type == "fixed" and discount_value < price:
            return PriceBreakdown(
                effective_price=round(price - discount_value, 2),
                discount_amount=round(discount_value, 2),
                original_price=price,
                discount_text=f"৳{discount_value:.0f} OFF",
            )
    return PriceBreakdown(effective_price=price, discount_amount=0)


def coupon_discount(subtotal: float, discount_type: str, discount_value: float) -> float:
    if subtotal <= 0 or not discount_value or discount_value <= 0:
        return 0.0
    if discount_type == "percentage":
        amount = subtotal * discount_value / 100
    else:
        amount = discount_value
    return round(min(amount, subtotal), 2)
