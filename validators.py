"""
Input validators for checkout submissions.

Every check runs; failures are collected in field order rather than stopping
at the first one. Nothing here raises or touches the database.
"""

import re
from datetime import date
from typing import List, Optional

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_RE = re.compile(r"^\+?[\d\s()-]{10,}$", re.ASCII)
CARD_RE = re.compile(r"^\d{16}$", re.ASCII)
CVV_RE = re.compile(r"^\d{3}$", re.ASCII)
EXPIRY_RE = re.compile(r"^(\d{2})/(\d{2})$", re.ASCII)


def _clean(value) -> str:
    return (value or "").strip()


def is_valid_email(email: Optional[str]) -> bool:
    return bool(EMAIL_RE.match(_clean(email)))


def is_valid_phone(phone: Optional[str]) -> bool:
    return bool(PHONE_RE.match(_clean(phone)))


def is_valid_card_number(card_number: Optional[str]) -> bool:
    return bool(CARD_RE.match(re.sub(r"\s", "", card_number or "")))


def is_valid_cvv(cvv: Optional[str]) -> bool:
    return bool(CVV_RE.match(_clean(cvv)))


def is_valid_expiry(expiry: Optional[str], today: Optional[date] = None) -> bool:
    """MM/YY, month 1-12, not before the current month (two-digit years)."""
    match = EXPIRY_RE.match(_clean(expiry))
    if not match:
        return False
    month, year = int(match.group(1)), int(match.group(2))
    if month < 1 or month > 12:
        return False
    today = today or date.today()
    return (year, month) >= (today.year % 100, today.month)


def validate_customer(customer, payment=None, today: Optional[date] = None) -> List[str]:
    """
    Check customer fields and, when supplied, payment fields.

    `customer` and `payment` are schema objects (see schemas.CustomerData and
    schemas.PaymentData). Returns an empty list when everything passes.
    """
    errors = []

    if not _clean(customer.full_name):
        errors.append("Full name is required")
    if not is_valid_email(customer.email):
        errors.append("Valid email is required")
    if not is_valid_phone(customer.phone):
        errors.append("Valid phone number is required")
    if not _clean(customer.address):
        errors.append("Address is required")
    if not _clean(customer.city):
        errors.append("City is required")
    if not _clean(customer.state):
        errors.append("State is required")
    if not _clean(customer.zip_code):
        errors.append("Zip code is required")

    if payment is not None:
        if not is_valid_card_number(payment.card_number):
            errors.append("Valid 16-digit card number is required")
        if not is_valid_expiry(payment.expiry, today):
            errors.append("Valid future expiry date is required (MM/YY)")
        if not is_valid_cvv(payment.cvv):
            errors.append("Valid 3-digit CVV is required")

    return errors


def validate_quantity(quantity) -> List[str]:
    """Quantity must be a positive integer."""
    if not isinstance(quantity, int) or quantity < 1:
        return ["Quantity must be at least 1"]
    return []
