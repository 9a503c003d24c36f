"""Pydantic response schemas for the backend's cart endpoints.

The backend's cart payload as it arrives on the wire. Cart and CartLine are
built from these; nothing outside the cart module reads them directly.
"""

from pydantic import AliasChoices, BaseModel, Field, field_validator


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class CartProductSchema(BaseModel):
    """One entry of the backend's cart listing (a product snapshot)."""

    model_config = {"populate_by_name": True, "extra": "ignore"}

    product_id: str = Field(..., alias="_id")
    product_name: str = ""
    price: float = Field(0.0, ge=0)
    rating: float = 0.0
    image: str = ""
    quantity: int | None = Field(None, ge=1)

    @field_validator("product_name", "image", mode="before")
    @classmethod
    def _null_text(cls, value):
        # The backend sends null for unset product fields
        return "" if value is None else value

    @field_validator("price", "rating", mode="before")
    @classmethod
    def _null_number(cls, value):
        return 0.0 if value is None else value


# ---------------------------------------------------------------------------
# Cart Response Schemas
# ---------------------------------------------------------------------------
class CartResponse(BaseModel):
    model_config = {
        "populate_by_name": True,
        "extra": "ignore",
        "json_schema_extra": {
            "examples": [
                {
                    "user_cart": [
                        {
                            "_id": "64b7f0c2a1",
                            "product_name": "Desk Lamp",
                            "price": 10,
                            "rating": 4,
                            "image": "lamp.png",
                        }
                    ],
                    "total_price": 10,
                }
            ]
        },
    }

    items: list[CartProductSchema] | None = Field(
        None,
        validation_alias=AliasChoices("user_cart", "cart_items", "items"),
    )
    total_price: float | None = None
