"""Shared BDD fixtures and step definitions for the cart and checkout."""

import pytest
from pytest_bdd import given, parsers, then

PASSWORD = "secret1"


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def outcome():
    """Container for what a When step produced or raised."""
    return {"result": None, "exc": None, "requests_before": None}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given("a signed-in visitor")
def signed_in_visitor(backend, sessions):
    backend.register("jane@example.com", PASSWORD)
    sessions.login("jane@example.com", PASSWORD)


@given(parsers.cfparse('the cart contains "{product_id}"'))
def cart_contains(cart, product_id):
    cart.add_item(product_id)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse("the cart has {count:d} line"))
@then(parsers.cfparse("the cart has {count:d} lines"))
def cart_line_count(cart, count):
    assert cart.line_count == count
