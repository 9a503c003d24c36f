"""Shared fixtures: a fake commerce backend and the wired storefront services.

The fake backend is a FastAPI app driven through Starlette's TestClient. A
requests transport adapter bridges the gateway's ``requests.Session`` to it,
so every service test exercises the real HTTP path: headers, query strings,
status codes and JSON bodies.
"""

from collections import defaultdict
from pathlib import Path
from uuid import uuid4

import pytest
import requests
from fastapi import FastAPI, Header, HTTPException, Query, Request
from fastapi.responses import JSONResponse
from fastapi.testclient import TestClient
from identity.api.schemas import AddressRequest, LoginRequest, SignupRequest
from identity.session.store import SessionStore
from identity.storage import InMemoryStore
from ordering.cart.synchronizer import CartSynchronizer
from ordering.checkout.form import CheckoutForm
from ordering.checkout.orchestrator import CheckoutOrchestrator
from payments.gateway import SimulatedGateway
from requests.adapters import BaseAdapter
from requests.structures import CaseInsensitiveDict
from shared.gateway import BackendGateway

API_URL = "http://backend.test"
PASSWORD = "secret1"

SEED_PRODUCTS = [
    {"_id": "p1", "product_name": "Desk Lamp", "price": 10.0, "rating": 4, "image": "lamp.png"},
    {"_id": "p2", "product_name": "Notebook", "price": 4.5, "rating": 5, "image": "notebook.png"},
    {"_id": "p3", "product_name": "Headphones", "price": 59.99, "rating": 3, "image": "headphones.png"},
]


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = Path(item.fspath)

        if "/domain/" in str(test_path):
            item.add_marker(pytest.mark.domain)
        elif "/application/" in str(test_path):
            item.add_marker(pytest.mark.application)
        elif "/bdd/" in str(test_path):
            item.add_marker(pytest.mark.bdd)


# ---------------------------------------------------------------------------
# Fake backend
# ---------------------------------------------------------------------------
class FakeBackend:
    """In-memory commerce backend speaking the storefront's wire contracts.

    Like the real backend, every add pushes one more entry for the product
    onto the visitor's cart.
    """

    def __init__(self):
        self.users: dict[str, dict] = {}
        self.tokens: dict[str, str] = {}
        self.products = {p["_id"]: dict(p) for p in SEED_PRODUCTS}
        self.carts: dict[str, list[dict]] = defaultdict(list)
        self.addresses: dict[str, list[dict]] = defaultdict(list)
        self.orders: list[dict] = []
        self.requests: list[tuple[str, str]] = []
        self.failures: dict[str, tuple[int, object]] = {}
        self.next_token: str | None = None
        self.app = self._build_app()

    # -- test controls ------------------------------------------------------
    def register(self, email, password=PASSWORD, first_name="Jane", last_name="Doe", phone="555-0100"):
        user_id = uuid4().hex[:24]
        self.users[user_id] = {
            "user_id": user_id,
            "email": email,
            "password": password,
            "first_name": first_name,
            "last_name": last_name,
            "phone": phone,
        }
        return user_id

    def fail(self, path, status_code=500, body=None):
        """Make every request to ``path`` answer with ``status_code``."""
        self.failures[path] = (status_code, body if body is not None else {"error": "internal failure"})

    def revoke_tokens(self):
        self.tokens.clear()

    def paths(self):
        return [path for _, path in self.requests]

    def authenticate(self, token, user_id):
        if not token or token not in self.tokens:
            raise HTTPException(status_code=401, detail="Invalid token")
        if self.tokens[token] != user_id or user_id not in self.users:
            raise HTTPException(status_code=401, detail="Token does not match user")
        return self.users[user_id]

    # -- app ----------------------------------------------------------------
    def _build_app(self):
        app = FastAPI()
        backend = self

        @app.middleware("http")
        async def record_and_inject_failures(request: Request, call_next):
            backend.requests.append((request.method, request.url.path))
            failure = backend.failures.get(request.url.path)
            if failure is not None:
                status_code, body = failure
                return JSONResponse(status_code=status_code, content=body)
            return await call_next(request)

        @app.post("/signup", status_code=201)
        def signup(body: SignupRequest):
            if any(u["email"] == body.email for u in backend.users.values()):
                return JSONResponse(status_code=400, content={"error": "user already exists"})
            user_id = backend.register(body.email, body.password, body.first_name, body.last_name, body.phone)
            return {"InsertedID": user_id}

        @app.post("/login")
        def login(body: LoginRequest):
            user = next((u for u in backend.users.values() if u["email"] == body.email), None)
            if user is None:
                return JSONResponse(status_code=500, content={"error": "login failed"})
            if user["password"] != body.password:
                return JSONResponse(status_code=500, content={"error": "password is not valid"})

            token = backend.next_token or f"tok-{uuid4().hex}"
            backend.next_token = None
            backend.tokens[token] = user["user_id"]
            public = {k: v for k, v in user.items() if k != "password"}
            return {
                "token": token,
                "refresh_token": f"ref-{uuid4().hex}",
                "InsertedID": user["user_id"],
                "user": public,
            }

        @app.get("/products")
        def list_products():
            return list(backend.products.values())

        @app.get("/products/search")
        def search_products(name: str = ""):
            if not name:
                return JSONResponse(status_code=404, content={"Error": "Invalid search index"})
            return [p for p in backend.products.values() if name.lower() in p["product_name"].lower()]

        @app.get("/cart")
        def get_cart(user_id: str = Query(..., alias="id"), token: str | None = Header(None)):
            backend.authenticate(token, user_id)
            items = backend.carts[user_id]
            return {"user_cart": items, "total_price": round(sum(i["price"] for i in items), 2)}

        @app.get("/cart/add")
        def add_to_cart(
            user_id: str = Query(..., alias="id"),
            product_id: str = Query(..., alias="pid"),
            token: str | None = Header(None),
        ):
            backend.authenticate(token, user_id)
            product = backend.products.get(product_id)
            if product is None:
                return JSONResponse(status_code=404, content={"error": "product not found"})
            backend.carts[user_id].append(dict(product))
            return "product added to cart"

        @app.get("/cart/remove")
        def remove_from_cart(
            user_id: str = Query(..., alias="id"),
            product_id: str = Query(..., alias="pid"),
            token: str | None = Header(None),
        ):
            backend.authenticate(token, user_id)
            backend.carts[user_id] = [i for i in backend.carts[user_id] if i["_id"] != product_id]
            return "item removed from cart"

        @app.get("/cart/checkout")
        def checkout_cart(user_id: str = Query(..., alias="id"), token: str | None = Header(None)):
            backend.authenticate(token, user_id)
            if not backend.carts[user_id]:
                return JSONResponse(status_code=400, content={"error": "cart is empty"})
            backend.orders.append({"user_id": user_id, "items": backend.carts[user_id]})
            backend.carts[user_id] = []
            return "items placed the order"

        @app.get("/cart/instant-buy")
        def instant_buy(
            product_id: str = Query(..., alias="id"),
            user_id: str = Query(..., alias="userID"),
            token: str | None = Header(None),
        ):
            backend.authenticate(token, user_id)
            product = backend.products.get(product_id)
            if product is None:
                return JSONResponse(status_code=404, content={"error": "product not found"})
            backend.orders.append({"user_id": user_id, "items": [dict(product)]})
            return "product placed the order"

        @app.post("/address", status_code=201)
        def add_address(body: AddressRequest, user_id: str = Query(..., alias="id"), token: str | None = Header(None)):
            backend.authenticate(token, user_id)
            if len(backend.addresses[user_id]) >= 2:
                return JSONResponse(status_code=400, content="Not Allowed")
            address_id = f"addr-{uuid4().hex[:8]}"
            backend.addresses[user_id].append({"_id": address_id, **body.model_dump()})
            return {"_id": address_id}

        @app.put("/address/home")
        def edit_home_address(
            body: AddressRequest, user_id: str = Query(..., alias="id"), token: str | None = Header(None)
        ):
            backend.authenticate(token, user_id)
            book = backend.addresses[user_id]
            book[0:1] = [{"_id": book[0]["_id"] if book else "home", **body.model_dump()}]
            return "Successfully updated the home address"

        @app.put("/address/work")
        def edit_work_address(
            body: AddressRequest, user_id: str = Query(..., alias="id"), token: str | None = Header(None)
        ):
            backend.authenticate(token, user_id)
            book = backend.addresses[user_id]
            if len(book) < 2:
                return JSONResponse(status_code=400, content={"error": "no work address"})
            book[1] = {"_id": book[1]["_id"], **body.model_dump()}
            return "Successfully updated the work address"

        @app.get("/address/delete")
        def delete_addresses(user_id: str = Query(..., alias="id"), token: str | None = Header(None)):
            backend.authenticate(token, user_id)
            backend.addresses[user_id] = []
            return "Successfully Deleted!"

        return app


class StarletteTransportAdapter(BaseAdapter):
    """requests transport that hands every request to a Starlette TestClient."""

    def __init__(self, client: TestClient):
        super().__init__()
        self.client = client
        self.timeouts: list = []
        self.sent_headers: list[dict] = []
        self.error: Exception | None = None

    def send(self, request, stream=False, timeout=None, verify=True, cert=None, proxies=None):
        self.timeouts.append(timeout)
        self.sent_headers.append(dict(request.headers))
        if self.error is not None:
            raise self.error

        headers = {k: v for k, v in request.headers.items() if k.lower() != "content-length"}
        reply = self.client.request(request.method, request.url, headers=headers, content=request.body)

        response = requests.Response()
        response.status_code = reply.status_code
        response.reason = reply.reason_phrase
        response.headers = CaseInsensitiveDict(reply.headers)
        response._content = reply.content
        response.encoding = "utf-8"
        response.url = request.url
        response.request = request
        return response

    def close(self):
        pass


# ---------------------------------------------------------------------------
# Service fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def backend():
    return FakeBackend()


@pytest.fixture()
def adapter(backend):
    return StarletteTransportAdapter(TestClient(backend.app))


@pytest.fixture()
def http(adapter):
    session = requests.Session()
    session.mount(API_URL, adapter)
    yield session
    session.close()


@pytest.fixture()
def gateway(http):
    return BackendGateway(API_URL, http=http)


@pytest.fixture()
def storage():
    return InMemoryStore()


@pytest.fixture()
def sessions(gateway, storage):
    return SessionStore(gateway, storage)


@pytest.fixture()
def cart(gateway, sessions):
    return CartSynchronizer(gateway, sessions)


@pytest.fixture()
def payments():
    return SimulatedGateway(delay=0)


@pytest.fixture()
def checkout(gateway, sessions, cart, payments):
    return CheckoutOrchestrator(gateway, sessions, cart, payments)


@pytest.fixture()
def customer_id(backend):
    return backend.register("jane@example.com")


@pytest.fixture()
def signed_in(sessions, customer_id):
    return sessions.login("jane@example.com", PASSWORD)


@pytest.fixture()
def valid_form():
    return CheckoutForm(
        email="jane@example.com",
        phone="555-0100",
        street="123 Elm Street",
        city="Springfield",
        state="IL",
        zip_code="62701",
        country="United States",
        card_number="4111 1111 1111 1111",
        expiry_date="12/30",
        cvv="123",
        cardholder_name="Jane Doe",
    )
