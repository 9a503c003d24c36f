"""Product catalogue reads — the data source for product listings."""

from __future__ import annotations

from typing import Any

import structlog
from pydantic import BaseModel, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from identity.session.store import SessionStore
from shared.errors import ServerError, ValidationError
from shared.gateway import BackendGateway

logger = structlog.get_logger(__name__)


class Product(BaseModel):
    model_config = {"populate_by_name": True, "extra": "ignore"}

    product_id: str = Field(..., alias="_id")
    product_name: str = ""
    price: float = Field(0.0, ge=0)
    rating: float = 0.0
    image: str = ""

    @field_validator("product_name", "image", mode="before")
    @classmethod
    def _null_text(cls, value):
        return "" if value is None else value

    @field_validator("price", "rating", mode="before")
    @classmethod
    def _null_number(cls, value):
        return 0.0 if value is None else value


def _parse_products(body: Any) -> list[Product]:
    if not isinstance(body, list):
        return []
    try:
        return [Product.model_validate(item) for item in body if isinstance(item, dict)]
    except PydanticValidationError as exc:
        logger.warning("Unreadable product listing", error=str(exc))
        raise ServerError("Unexpected product response from server") from exc


class ProductCatalog:
    """List and search the catalogue.

    Reads are anonymous unless a signed-in session is available, in which
    case its credential rides along.
    """

    def __init__(self, gateway: BackendGateway, sessions: SessionStore | None = None) -> None:
        self._gateway = gateway
        self._sessions = sessions

    def _credential(self) -> str | None:
        if self._sessions is not None and self._sessions.is_authenticated:
            return self._sessions.session.token
        return None

    def list_products(self) -> list[Product]:
        products = _parse_products(self._gateway.list_products(credential=self._credential()))
        logger.debug("Catalogue listed", product_count=len(products))
        return products

    def search(self, query: str) -> list[Product]:
        query = query.strip()
        if not query:
            raise ValidationError({"query": "Search query is required"})
        return _parse_products(self._gateway.search_products(query, credential=self._credential()))

    def get(self, product_id: str) -> Product | None:
        """Find one product by id in the full listing."""
        return next((p for p in self.list_products() if p.product_id == product_id), None)
