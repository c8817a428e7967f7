from dataclasses import dataclass, field
from typing import Dict, List, Optional

BUNDLE_DISCOUNTS = {
    "arc": 0.10,  # Full arc vs individual issues
    "saga": 0.20,
    "volume": 0.30,
    "book": 0.40,
}

# (minimum quantity, discount), highest tier first
QUANTITY_TIERS = [(10, 0.20), (5, 0.15), (3, 0.10)]


def to_cents(amount: float) -> float:
    return round(amount + 1e-9, 2)


@dataclass
class BundleOffer:
    item_id: int
    title: str
    type: str
    item_count: int
    original_price: float
    discount: float
    bundle_price: float
    savings: float


@dataclass
class QuoteLine:
    item_id: int
    title: str
    type: str
    unit_price: float
    quantity: int
    line_total: float


@dataclass
class Quote:
    lines: List[QuoteLine] = field(default_factory=list)
    item_count: int = 0
    subtotal: float = 0.0
    discount_rate: float = 0.0
    discount: float = 0.0
    total: float = 0.0


class PricingRules:
    @staticmethod
    def bundle_discount(item_type: str) -> Optional[float]:
        return BUNDLE_DISCOUNTS.get(item_type)

    @staticmethod
    def quantity_discount(quantity: int) -> float:
        for minimum, discount in QUANTITY_TIERS:
            if quantity >= minimum:
                return discount
        return 0.0

    @staticmethod
    def bundle_offer(item_id: int, title: str, item_type: str, child_prices: List[float]) -> Optional[BundleOffer]:
        """Whole-container price: sum of the direct children less the level's discount."""
        discount = PricingRules.bundle_discount(item_type)
        if discount is None or not child_prices:
            return None
        original = to_cents(sum(p or 0 for p in child_prices))
        bundle_price = to_cents(original * (1 - discount))
        return BundleOffer(
            item_id=item_id,
            title=title,
            type=item_type,
            item_count=len(child_prices),
            original_price=original,
            discount=discount,
            bundle_price=bundle_price,
            savings=to_cents(original - bundle_price),
        )

    @staticmethod
    def quote(items: List[Dict], quantities: Dict[int, int]) -> Quote:
        """
        Cart total for ``items`` (dicts with id/title/type/price); the
        quantity tier is chosen from the total number of units.
        """
        quote = Quote()
        for item in items:
            quantity = quantities.get(item["id"], 1)
            unit_price = to_cents(item.get("price") or 0)
            quote.lines.append(
                QuoteLine(
                    item_id=item["id"],
                    title=item["title"],
                    type=item["type"],
                    unit_price=unit_price,
                    quantity=quantity,
                    line_total=to_cents(unit_price * quantity),
                )
            )
            quote.item_count += quantity

        quote.subtotal = to_cents(sum(line.line_total for line in quote.lines))
        quote.discount_rate = PricingRules.quantity_discount(quote.item_count)
        quote.discount = to_cents(quote.subtotal * quote.discount_rate)
        quote.total = to_cents(quote.subtotal - quote.discount)
        return quote
