"""Shared BDD fixtures and step definitions for visitor sessions."""

import pytest
from identity.session.session import SessionState
from pytest_bdd import given, parsers, then


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def error():
    """Container for the error raised by a When step."""
    return {"exc": None}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('a registered visitor "{email}" with password "{password}"'))
def registered_visitor(backend, email, password):
    backend.register(email, password)


@given(parsers.cfparse('the visitor is signed in as "{email}" with password "{password}"'))
def visitor_signed_in(sessions, email, password):
    sessions.login(email, password)


@given("the backend has revoked every token")
def tokens_revoked(backend):
    backend.revoke_tokens()


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the session is "{state}"'))
def session_state_is(sessions, state):
    assert sessions.state == SessionState(state)


@then(parsers.cfparse('the stored token is "{token}"'))
def stored_token_is(storage, token):
    assert storage.get("token") == token


@then("no token is stored")
def no_token_stored(storage):
    assert storage.get("token") is None


@then("no request reached the backend")
def no_backend_request(backend):
    assert backend.requests == []
