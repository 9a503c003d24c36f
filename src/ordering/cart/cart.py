"""Cart and CartLine — the client's read-only view of the server cart.

The backend's cart is always the source of truth. A Cart is rebuilt
wholesale from every cart response; its ``total_price`` is the
server-computed figure. The subtotal/tax/shipping breakdown is derived for
presentation only.

The backend records one entry per add call, so the same product can appear
several times in a response. Those entries fold into a single CartLine
whose quantity counts them, keeping the first-seen position.
"""

from __future__ import annotations

from dataclasses import dataclass

from ordering.api.schemas import CartResponse

DEFAULT_TAX_RATE = 0.10
SHIPPING_COST = 0.0


def _money(amount: float) -> float:
    return round(amount, 2)


@dataclass(frozen=True)
class CartLine:
    product_id: str
    product_name: str = ""
    price: float = 0.0
    image: str = ""
    rating: float = 0.0
    quantity: int = 1

    def __post_init__(self) -> None:
        if self.quantity < 1:
            raise ValueError(f"Cart line quantity must be at least 1, got {self.quantity}")

    @property
    def line_total(self) -> float:
        return _money(self.price * self.quantity)


@dataclass(frozen=True)
class Cart:
    lines: tuple[CartLine, ...] = ()
    total_price: float = 0.0
    tax_rate: float = DEFAULT_TAX_RATE

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def empty(cls, tax_rate: float = DEFAULT_TAX_RATE) -> Cart:
        return cls(tax_rate=tax_rate)

    @classmethod
    def from_response(cls, response: CartResponse, tax_rate: float = DEFAULT_TAX_RATE) -> Cart:
        quantities: dict[str, int] = {}
        snapshots: dict[str, CartLine] = {}
        for item in response.items or []:
            quantities[item.product_id] = quantities.get(item.product_id, 0) + (item.quantity or 1)
            snapshots.setdefault(
                item.product_id,
                CartLine(
                    product_id=item.product_id,
                    product_name=item.product_name,
                    price=item.price,
                    image=item.image,
                    rating=item.rating,
                ),
            )

        lines = tuple(
            CartLine(
                product_id=product_id,
                product_name=line.product_name,
                price=line.price,
                image=line.image,
                rating=line.rating,
                quantity=quantities[product_id],
            )
            for product_id, line in snapshots.items()
        )
        return cls(lines=lines, total_price=response.total_price or 0.0, tax_rate=tax_rate)

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    @property
    def line_count(self) -> int:
        return len(self.lines)

    @property
    def is_empty(self) -> bool:
        return not self.lines

    def line_for(self, product_id: str) -> CartLine | None:
        return next((line for line in self.lines if line.product_id == product_id), None)

    def __contains__(self, product_id: object) -> bool:
        return any(line.product_id == product_id for line in self.lines)

    # -------------------------------------------------------------------
    # Presentation totals
    # -------------------------------------------------------------------
    @property
    def subtotal(self) -> float:
        return _money(sum(line.price * line.quantity for line in self.lines))

    @property
    def tax(self) -> float:
        return _money(self.subtotal * self.tax_rate)

    @property
    def shipping(self) -> float:
        return SHIPPING_COST

    @property
    def display_total(self) -> float:
        return _money(self.subtotal + self.tax + self.shipping)
