"""Payment gateway port and adapters.

- SimulatedGateway for development and testing (fixed-delay capture)

Pass the gateway to CheckoutOrchestrator explicitly; there is no
module-level default instance.
"""

from payments.gateway.fake_adapter import SimulatedGateway
from payments.gateway.port import CaptureResult, PaymentGateway

__all__ = ["CaptureResult", "PaymentGateway", "SimulatedGateway"]
