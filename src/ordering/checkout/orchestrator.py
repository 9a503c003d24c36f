"""Checkout orchestration — turns a validated form into a placed order.

Flow (strictly sequential; each step needs the previous one to succeed):
    0. Validate the form (no network call on failure), require a session
       and a non-empty cart
    1. Create a shipping address unless a saved one was chosen
    2. Capture payment through the payment gateway
    3. Clear the local cart
    4. Hand back a CheckoutReceipt; the caller shows the confirmation

A failure at any step aborts the rest and leaves the cart untouched. The
form is never modified, so the visitor can correct and resubmit it.
"""

from __future__ import annotations

from dataclasses import dataclass
from uuid import uuid4

import structlog

from identity.addresses import AddressBook
from identity.session.store import SessionStore
from ordering.cart.synchronizer import EMPTY_CART_MESSAGE, CartSynchronizer
from ordering.checkout.form import CheckoutForm, validate_checkout_form
from payments.gateway import PaymentGateway
from shared.errors import ServerError, ValidationError
from shared.gateway import BackendGateway

logger = structlog.get_logger(__name__)

DEFAULT_CURRENCY = "USD"


@dataclass(frozen=True)
class CheckoutReceipt:
    """What a successful checkout hands back to the caller."""

    address_id: str | None
    transaction_id: str | None
    display_total: float
    line_count: int


class CheckoutOrchestrator:
    """Runs one checkout attempt: address, payment capture, cart clear."""

    def __init__(
        self,
        gateway: BackendGateway,
        sessions: SessionStore,
        cart: CartSynchronizer,
        payments: PaymentGateway,
        addresses: AddressBook | None = None,
        currency: str = DEFAULT_CURRENCY,
    ) -> None:
        self._gateway = gateway
        self._sessions = sessions
        self._cart = cart
        self._payments = payments
        self._addresses = addresses or AddressBook(gateway, sessions)
        self._currency = currency

    def validate(self, form: CheckoutForm, saved_address_id: str | None = None) -> None:
        validate_checkout_form(form, use_saved_address=bool(saved_address_id))

    def submit(self, form: CheckoutForm, saved_address_id: str | None = None) -> CheckoutReceipt:
        self.validate(form, saved_address_id)
        session = self._sessions.require_session()

        cart = self._cart.cart
        if cart.is_empty:
            raise ValidationError({"cart": EMPTY_CART_MESSAGE})

        # Step 1: shipping address
        address_id = saved_address_id
        if not saved_address_id:
            address_id = self._addresses.add(form.to_address())

        # Step 2: payment capture
        result = self._payments.capture(
            amount=cart.display_total,
            currency=self._currency,
            last4=form.card_last4,
            idempotency_key=f"checkout-{session.user_id}-{uuid4().hex}",
        )
        if not result.success:
            logger.warning(
                "Payment capture declined",
                user_id=session.user_id,
                reason=result.failure_reason,
            )
            raise ServerError(f"Payment failed: {result.failure_reason or 'declined'}")

        # Step 3: local cart
        self._cart.clear()

        logger.info(
            "Order placed",
            user_id=session.user_id,
            address_id=address_id,
            transaction_id=result.transaction_id,
            display_total=cart.display_total,
        )
        return CheckoutReceipt(
            address_id=address_id,
            transaction_id=result.transaction_id,
            display_total=cart.display_total,
            line_count=cart.line_count,
        )

    def instant_buy(self, product_id: str) -> None:
        """Buy a single product immediately, bypassing the cart."""
        session = self._sessions.require_session()
        self._gateway.instant_buy(session.user_id, product_id, credential=session.token)
        logger.info("Instant purchase placed", user_id=session.user_id, product_id=product_id)
