"""Storefront client composition root.

Builds every service explicitly and wires them together; nothing is kept in
module-level globals. Callers (the CLI, a UI, tests) hold the returned
Storefront for as long as the visitor's session lasts.

Usage:
    storefront = create_storefront()
    storefront.sessions.restore()
"""

from __future__ import annotations

from dataclasses import dataclass

import requests

from catalogue.products import ProductCatalog
from identity.addresses import AddressBook
from identity.session.store import SessionStore
from identity.storage import JsonFileStore, KeyValueStore
from ordering.cart.synchronizer import CartSynchronizer
from ordering.checkout.orchestrator import CheckoutOrchestrator
from payments.gateway import PaymentGateway, SimulatedGateway
from shared.config import Settings, load_settings
from shared.gateway import BackendGateway


@dataclass
class Storefront:
    settings: Settings
    gateway: BackendGateway
    sessions: SessionStore
    catalogue: ProductCatalog
    addresses: AddressBook
    cart: CartSynchronizer
    checkout: CheckoutOrchestrator


def create_storefront(
    settings: Settings | None = None,
    storage: KeyValueStore | None = None,
    payments: PaymentGateway | None = None,
    http: requests.Session | None = None,
) -> Storefront:
    """Wire the storefront services.

    Each collaborator can be overridden, which is how tests swap in an
    in-memory store, an instant payment gateway or a fake backend.
    """
    settings = settings or load_settings()

    gateway = BackendGateway(
        settings.api_url,
        timeout=settings.timeout,
        auth_header=settings.auth_header,
        http=http,
    )
    sessions = SessionStore(gateway, storage or JsonFileStore(settings.storage_path))
    addresses = AddressBook(gateway, sessions)
    cart = CartSynchronizer(gateway, sessions, tax_rate=settings.tax_rate)
    checkout = CheckoutOrchestrator(
        gateway,
        sessions,
        cart,
        payments or SimulatedGateway(delay=settings.payment_delay),
        addresses=addresses,
    )

    return Storefront(
        settings=settings,
        gateway=gateway,
        sessions=sessions,
        catalogue=ProductCatalog(gateway, sessions),
        addresses=addresses,
        cart=cart,
        checkout=checkout,
    )
