"""Payment gateway port (abstract interface).

Defines the contract a payment capture adapter must implement, so the
checkout flow can run against the simulated gateway today and a real
processor later without changing any ordering code.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class CaptureResult:
    """Result of a payment capture attempt."""

    success: bool
    transaction_id: str | None = None
    status: str | None = None
    failure_reason: str | None = None


class PaymentGateway(ABC):
    """Abstract payment gateway interface."""

    @abstractmethod
    def capture(
        self,
        amount: float,
        currency: str,
        last4: str | None,
        idempotency_key: str,
    ) -> CaptureResult:
        """Capture ``amount`` from the card ending in ``last4``."""
        ...
