"""Login and signup form validation.

Both validators collect every failing field before raising, so the visitor
sees all problems at once. They run before any network call.
"""

from __future__ import annotations

from identity.api.schemas import AddressRequest, SignupRequest
from identity.shared.email import is_valid_email
from identity.shared.phone import is_valid_phone
from shared.errors import ValidationError

MIN_PASSWORD_LENGTH = 6


def _check_email(email: str, errors: dict[str, str]) -> None:
    if not email:
        errors["email"] = "Email is required"
    elif not is_valid_email(email):
        errors["email"] = "Please enter a valid email"


def _check_password(password: str, errors: dict[str, str]) -> None:
    if not password:
        errors["password"] = "Password is required"
    elif len(password) < MIN_PASSWORD_LENGTH:
        errors["password"] = f"Password must be at least {MIN_PASSWORD_LENGTH} characters"


def validate_login(email: str, password: str) -> None:
    errors: dict[str, str] = {}
    _check_email(email, errors)
    _check_password(password, errors)
    if errors:
        raise ValidationError(errors)


def validate_signup(profile: SignupRequest, confirm_password: str | None = None) -> None:
    """Validate a signup profile.

    ``confirm_password`` is only checked when the caller collected one.
    """
    errors: dict[str, str] = {}

    if not profile.first_name:
        errors["first_name"] = "First name is required"
    if not profile.last_name:
        errors["last_name"] = "Last name is required"

    _check_email(profile.email, errors)

    if not profile.phone:
        errors["phone"] = "Phone number is required"
    elif not is_valid_phone(profile.phone):
        errors["phone"] = "Please enter a valid phone number"

    _check_password(profile.password, errors)

    if confirm_password is not None:
        if not confirm_password:
            errors["confirm_password"] = "Please confirm your password"
        elif confirm_password != profile.password:
            errors["confirm_password"] = "Passwords do not match"

    if errors:
        raise ValidationError(errors)


def validate_address(address: AddressRequest) -> None:
    errors: dict[str, str] = {}
    if not address.house_name:
        errors["house_name"] = "House or building is required"
    if not address.street_name:
        errors["street_name"] = "Street address is required"
    if not address.city_name:
        errors["city_name"] = "City is required"
    if not address.pin_code:
        errors["pin_code"] = "ZIP code is required"
    if errors:
        raise ValidationError(errors)
