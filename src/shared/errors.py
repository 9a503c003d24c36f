"""Error taxonomy shared by every storefront service.

Each service operation either returns a value or raises one of these.
Callers (CLI, views) turn them into a message for the visitor.
"""

GENERIC_ERROR_MESSAGE = "Something went wrong. Please try again."
NETWORK_ERROR_MESSAGE = "Network error. Please check your connection and try again."


class StorefrontError(Exception):
    """Base class for all storefront errors."""

    def __init__(self, message: str = GENERIC_ERROR_MESSAGE) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(StorefrontError):
    """Field-level input errors, raised before any network call.

    ``errors`` maps a field name to a human-readable message.
    """

    def __init__(self, errors: dict[str, str]) -> None:
        self.errors = dict(errors)
        super().__init__("; ".join(f"{field}: {msg}" for field, msg in self.errors.items()))


class AuthError(StorefrontError):
    """Invalid credentials, a missing session, or a rejected credential."""


class NetworkError(StorefrontError):
    """The backend could not be reached or did not answer in time."""

    def __init__(self, message: str = NETWORK_ERROR_MESSAGE) -> None:
        super().__init__(message)


class ServerError(StorefrontError):
    """The backend answered with a non-2xx, non-401 status."""

    def __init__(self, message: str = GENERIC_ERROR_MESSAGE, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ConfigError(StorefrontError):
    """A setting from the environment or ``.env`` file cannot be used."""
