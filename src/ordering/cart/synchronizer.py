"""CartSynchronizer — a read-through cache of the server-authoritative cart.

Every mutation (add, remove) is followed unconditionally by a full
``refresh()``; local state is replaced wholesale, never merged. Two
mutations racing each other are not reconciled: whichever refresh completes
last is what the visitor sees.

The backend has no quantity-update endpoint. ``change_quantity`` removes a
line when asked for fewer than one item and otherwise rejects the request;
it never emulates an update with remove + add.
"""

from __future__ import annotations

import structlog
from pydantic import ValidationError as PydanticValidationError

from identity.session.session import SessionState
from identity.session.store import SessionStore
from ordering.api.schemas import CartResponse
from ordering.cart.cart import DEFAULT_TAX_RATE, Cart, CartLine
from shared.errors import ServerError, ValidationError
from shared.gateway import BackendGateway

logger = structlog.get_logger(__name__)

QUANTITY_UPDATE_UNSUPPORTED = "Quantity updates not supported. Please remove and re-add items."
EMPTY_CART_MESSAGE = "Your cart is empty"


class CartSynchronizer:
    """Keeps a local Cart in step with the backend cart of the signed-in visitor.

    Empties itself whenever the SessionStore leaves Authenticated.
    """

    def __init__(
        self,
        gateway: BackendGateway,
        sessions: SessionStore,
        tax_rate: float = DEFAULT_TAX_RATE,
    ) -> None:
        self._gateway = gateway
        self._sessions = sessions
        self._tax_rate = tax_rate
        self._cart = Cart.empty(tax_rate)

        sessions.subscribe(self._on_session_change)

    # -------------------------------------------------------------------
    # Read side
    # -------------------------------------------------------------------
    @property
    def cart(self) -> Cart:
        return self._cart

    @property
    def items(self) -> tuple[CartLine, ...]:
        return self._cart.lines

    @property
    def line_count(self) -> int:
        return self._cart.line_count

    @property
    def total_price(self) -> float:
        return self._cart.total_price

    # -------------------------------------------------------------------
    # Synchronization
    # -------------------------------------------------------------------
    def refresh(self) -> Cart:
        """Replace local state with the backend's cart for the current visitor."""
        session = self._sessions.require_session()

        body = self._gateway.get_cart(session.user_id, credential=session.token)
        if not isinstance(body, dict):
            raise ServerError("Unexpected cart response from server")

        try:
            response = CartResponse.model_validate(body)
        except PydanticValidationError as exc:
            logger.warning("Unreadable cart response", user_id=session.user_id, error=str(exc))
            raise ServerError("Unexpected cart response from server") from exc

        self._cart = Cart.from_response(response, self._tax_rate)
        logger.debug(
            "Cart refreshed",
            user_id=session.user_id,
            line_count=self._cart.line_count,
            total_price=self._cart.total_price,
        )
        return self._cart

    def add_item(self, product_id: str) -> int:
        """Add a product, resync, and return the post-refresh line count."""
        session = self._sessions.require_session()

        self._gateway.add_to_cart(session.user_id, product_id, credential=session.token)
        logger.info("Item added to cart", user_id=session.user_id, product_id=product_id)

        return self.refresh().line_count

    def remove_item(self, product_id: str) -> Cart:
        session = self._sessions.require_session()

        self._gateway.remove_from_cart(session.user_id, product_id, credential=session.token)
        logger.info("Item removed from cart", user_id=session.user_id, product_id=product_id)

        return self.refresh()

    def change_quantity(self, product_id: str, quantity: int) -> Cart:
        """Handle a quantity change request from the visitor.

        Below 1 means removal. Anything else is rejected: the backend can
        only add or remove whole lines.
        """
        if quantity < 1:
            return self.remove_item(product_id)
        raise ValidationError({"quantity": QUANTITY_UPDATE_UNSUPPORTED})

    def checkout(self) -> None:
        """Place an order for the whole cart server-side, then clear locally."""
        session = self._sessions.require_session()
        if self._cart.is_empty:
            raise ValidationError({"cart": EMPTY_CART_MESSAGE})

        self._gateway.checkout_cart(session.user_id, credential=session.token)
        logger.info("Cart checked out", user_id=session.user_id, line_count=self._cart.line_count)

        self.clear()

    def clear(self) -> None:
        """Empty the local cart without a network call."""
        self._cart = Cart.empty(self._tax_rate)

    def _on_session_change(self, state: SessionState) -> None:
        if state != SessionState.AUTHENTICATED:
            self.clear()
