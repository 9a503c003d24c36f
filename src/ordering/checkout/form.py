"""Checkout form — the transient input of one checkout attempt.

The form is never persisted and never mutated by the checkout flow, so a
failed attempt leaves the visitor's entries in place for a retry.
"""

from __future__ import annotations

import re

from pydantic import BaseModel

from identity.api.schemas import AddressRequest
from identity.shared.email import is_valid_email
from shared.errors import ValidationError

MIN_CARD_DIGITS = 16
MIN_CVV_DIGITS = 3
_EXPIRY_PATTERN = re.compile(r"^\d{2}/\d{2}$")


class CheckoutForm(BaseModel):
    # Contact
    email: str = ""
    phone: str = ""

    # Shipping address
    street: str = ""
    city: str = ""
    state: str = ""
    zip_code: str = ""
    country: str = "United States"

    # Payment
    card_number: str = ""
    expiry_date: str = ""
    cvv: str = ""
    cardholder_name: str = ""

    @property
    def card_digits(self) -> str:
        return re.sub(r"\s", "", self.card_number)

    @property
    def card_last4(self) -> str | None:
        digits = self.card_digits
        return digits[-4:] if len(digits) >= 4 else None

    def to_address(self) -> AddressRequest:
        """Map the shipping fields onto the backend's address contract."""
        return AddressRequest(
            house_name=self.street,
            street_name=self.street,
            city_name=self.city,
            pin_code=self.zip_code,
        )


def validate_checkout_form(form: CheckoutForm, use_saved_address: bool = False) -> None:
    """Check every field, raising one ValidationError listing all failures.

    Address fields are only required when no saved address was chosen.
    """
    errors: dict[str, str] = {}

    if not form.email:
        errors["email"] = "Email is required"
    elif not is_valid_email(form.email):
        errors["email"] = "Please enter a valid email"

    if not form.phone:
        errors["phone"] = "Phone number is required"

    if not use_saved_address:
        if not form.street:
            errors["street"] = "Street address is required"
        if not form.city:
            errors["city"] = "City is required"
        if not form.state:
            errors["state"] = "State is required"
        if not form.zip_code:
            errors["zip_code"] = "ZIP code is required"
        if not form.country:
            errors["country"] = "Country is required"

    digits = form.card_digits
    if not digits:
        errors["card_number"] = "Card number is required"
    elif not digits.isdigit() or len(digits) < MIN_CARD_DIGITS:
        errors["card_number"] = "Please enter a valid card number"

    if not form.expiry_date:
        errors["expiry_date"] = "Expiry date is required"
    elif not _EXPIRY_PATTERN.match(form.expiry_date):
        errors["expiry_date"] = "Please enter date in MM/YY format"

    if not form.cvv:
        errors["cvv"] = "CVV is required"
    elif not form.cvv.isdigit() or len(form.cvv) < MIN_CVV_DIGITS:
        errors["cvv"] = "Please enter a valid CVV"

    if not form.cardholder_name:
        errors["cardholder_name"] = "Cardholder name is required"

    if errors:
        raise ValidationError(errors)


# ---------------------------------------------------------------------------
# Input formatters
# ---------------------------------------------------------------------------
def format_card_number(value: str) -> str:
    """Group a typed card number into blocks of four digits.

    Non-digits are dropped; at most 16 digits are kept once four or more
    have been typed.
    """
    digits = re.sub(r"[^0-9]", "", value)
    match = re.search(r"\d{4,16}", digits)
    if not match:
        return digits
    number = match.group(0)
    return " ".join(number[i : i + 4] for i in range(0, len(number), 4))


def format_expiry_date(value: str) -> str:
    """Turn typed digits into ``MM/YY``: "1234" -> "12/34", "99" -> "99/"."""
    digits = re.sub(r"[^0-9]", "", value)
    if len(digits) >= 2:
        return f"{digits[:2]}/{digits[2:4]}"
    return digits
