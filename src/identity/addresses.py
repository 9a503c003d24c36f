"""Visitor address management against the backend's address endpoints."""

from __future__ import annotations

from typing import Any

import structlog

from identity.api.schemas import AddressRequest
from identity.forms import validate_address
from identity.session.store import SessionStore
from shared.gateway import BackendGateway

logger = structlog.get_logger(__name__)

_ADDRESS_ID_KEYS = ("_id", "address_id", "InsertedID")


def extract_address_id(body: Any) -> str | None:
    """Pull the created address identifier out of an ``/address`` response.

    The backend does not always return one; None means "created, id unknown".
    """
    if not isinstance(body, dict):
        return None
    for key in _ADDRESS_ID_KEYS:
        if body.get(key):
            return str(body[key])
    return None


class AddressBook:
    def __init__(self, gateway: BackendGateway, sessions: SessionStore) -> None:
        self._gateway = gateway
        self._sessions = sessions

    def add(self, address: AddressRequest) -> str | None:
        """Create a shipping address and return its identifier when known."""
        validate_address(address)
        session = self._sessions.require_session()

        body = self._gateway.add_address(session.user_id, address.model_dump(), credential=session.token)
        address_id = extract_address_id(body)

        logger.info("Address created", user_id=session.user_id, address_id=address_id)
        return address_id

    def edit_home(self, address: AddressRequest) -> None:
        validate_address(address)
        session = self._sessions.require_session()
        self._gateway.edit_home_address(session.user_id, address.model_dump(), credential=session.token)
        logger.info("Home address updated", user_id=session.user_id)

    def edit_work(self, address: AddressRequest) -> None:
        validate_address(address)
        session = self._sessions.require_session()
        self._gateway.edit_work_address(session.user_id, address.model_dump(), credential=session.token)
        logger.info("Work address updated", user_id=session.user_id)

    def delete_all(self) -> None:
        session = self._sessions.require_session()
        self._gateway.delete_addresses(session.user_id, credential=session.token)
        logger.info("Addresses deleted", user_id=session.user_id)
