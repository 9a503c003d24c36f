"""Simulated payment gateway.

Stands in for a real payment processor: every capture waits a fixed delay
and then succeeds, with no external call. It can be configured at runtime
to decline, which makes it useful for:
- Exercising checkout failure paths in tests
- Development without real gateway credentials
"""

import time
from collections.abc import Callable
from uuid import uuid4

import structlog

from payments.gateway.port import CaptureResult, PaymentGateway

logger = structlog.get_logger(__name__)

DEFAULT_CAPTURE_DELAY = 2.0


class SimulatedGateway(PaymentGateway):
    """Fixed-delay, configurable fake payment gateway."""

    def __init__(
        self,
        delay: float = DEFAULT_CAPTURE_DELAY,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.delay = delay
        self._sleep = sleep
        self.should_succeed: bool = True
        self.failure_reason: str = "Card declined"
        self.calls: list[dict] = []

    def configure(self, should_succeed: bool, failure_reason: str = "Card declined") -> None:
        """Configure gateway behavior at runtime."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def capture(
        self,
        amount: float,
        currency: str,
        last4: str | None,
        idempotency_key: str,
    ) -> CaptureResult:
        call = {
            "method": "capture",
            "amount": amount,
            "currency": currency,
            "last4": last4,
            "idempotency_key": idempotency_key,
        }
        self.calls.append(call)

        if self.delay > 0:
            self._sleep(self.delay)

        if self.should_succeed:
            logger.debug("Simulated capture succeeded", amount=amount, currency=currency)
            return CaptureResult(
                success=True,
                transaction_id=f"sim_txn_{uuid4().hex[:12]}",
                status="succeeded",
            )
        logger.debug("Simulated capture declined", amount=amount, reason=self.failure_reason)
        return CaptureResult(
            success=False,
            status="failed",
            failure_reason=self.failure_reason,
        )
