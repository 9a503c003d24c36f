"""Pydantic request/response schemas for the backend's identity endpoints.

These are the wire contracts of ``/signup``, ``/login`` and the address
endpoints, kept separate from the client-side Session record.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

# --- Request Schemas ---


class LoginRequest(BaseModel):
    model_config = {"json_schema_extra": {"examples": [{"email": "jane.doe@example.com", "password": "s3cret!"}]}}

    email: str
    password: str


class SignupRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "first_name": "Jane",
                    "last_name": "Doe",
                    "email": "jane.doe@example.com",
                    "password": "s3cret!",
                    "phone": "+1-555-0123",
                }
            ]
        }
    }

    first_name: str = ""
    last_name: str = ""
    email: str = ""
    password: str = ""
    phone: str = ""


class AddressRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "house_name": "123 Elm Street",
                    "street_name": "123 Elm Street",
                    "city_name": "Springfield",
                    "pin_code": "62701",
                }
            ]
        }
    }

    house_name: str = ""
    street_name: str = ""
    city_name: str = ""
    pin_code: str = ""


# --- Response Schemas ---


class AuthResponse(BaseModel):
    """Body of ``/login`` and ``/signup`` responses.

    Every field is optional: signup answers with ``InsertedID`` or a bare
    ``message``, login with the credential pair plus the stored user record.
    """

    model_config = {"populate_by_name": True, "extra": "ignore"}

    inserted_id: str | None = Field(None, alias="InsertedID")
    message: str | None = None
    token: str | None = None
    refresh_token: str | None = None
    user: dict[str, Any] | None = None
