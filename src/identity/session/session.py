"""Session record — the authenticated identity plus its credential.

A Session is valid only while both the identity id and the bearer
credential are present; anything less means the visitor is anonymous.
"""

from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

_CREDENTIAL_FIELDS = {"token", "refresh_token"}


def _utc_now() -> datetime:
    return datetime.now(UTC)


class SessionState(Enum):
    ANONYMOUS = "Anonymous"
    AUTHENTICATING = "Authenticating"
    AUTHENTICATED = "Authenticated"


class Session(BaseModel):
    model_config = {"extra": "ignore"}

    user_id: str = ""
    token: str = ""
    refresh_token: str | None = None
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    phone: str = ""
    created_at: datetime = Field(default_factory=_utc_now)
    updated_at: datetime = Field(default_factory=_utc_now)

    @property
    def is_valid(self) -> bool:
        return bool(self.user_id) and bool(self.token)

    @property
    def display_name(self) -> str:
        name = f"{self.first_name} {self.last_name}".strip()
        return name or self.email

    def identity_record(self) -> dict[str, Any]:
        """The JSON identity record persisted alongside (not with) the credential."""
        return self.model_dump(mode="json", exclude=_CREDENTIAL_FIELDS)
