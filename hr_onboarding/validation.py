# validation.py
from __future__ import annotations
import re
from re import Pattern
from typing import Any
from collections.abc import Callable, Collection
from datetime import date, datetime

# --- Type Aliases ---
ValidationResult = tuple[bool, str]
# A validator gets the value and the whole form (or row) for context
ValidatorFunc = Callable[[Any | None, dict[str, Any]], ValidationResult]

# --- Regex Patterns (centralized) ---
EMAIL_PATTERN: Pattern[str] = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')
AADHAAR_PATTERN: Pattern[str] = re.compile(r'^\d{12}$')
PAN_PATTERN: Pattern[str] = re.compile(r'^[A-Z]{5}[0-9]{4}[A-Z]$')
UAN_PATTERN: Pattern[str] = re.compile(r'^\d{12}$')
IFSC_PATTERN: Pattern[str] = re.compile(r'^[A-Z]{4}0[A-Z0-9]{6}$')
POSTAL_CODE_PATTERN: Pattern[str] = re.compile(r'^\d{6}$')
MOBILE_PATTERN: Pattern[str] = re.compile(r'^[6-9]\d{9}$')
LANDLINE_PATTERN: Pattern[str] = re.compile(r'^0[2-9]\d{1,3}\d{6,8}$')
DATE_FORMAT_STORAGE: str = '%Y-%m-%d'

# ===================================================================
# GENERIC VALIDATOR GENERATORS
# ===================================================================

def required(message: str = "This field is required.") -> ValidatorFunc:
    """Ensures a value is not None, not an empty string, and not just whitespace."""
    def validator(value: Any | None, form_data: dict[str, Any]) -> ValidationResult:
        if value is None:
            return False, message
        if isinstance(value, str) and not value.strip():
            return False, message
        if isinstance(value, (list, dict)) and not value:
            return False, message
        return True, ""
    return validator

def required_choice(message: str = "Please make a selection.") -> ValidatorFunc:
    """Ensures a value from a select/radio is not None or empty/whitespace."""
    def validator(value: Any | None, form_data: dict[str, Any]) -> ValidationResult:
        if value is None or (isinstance(value, str) and not value.strip()):
            return False, message
        return True, ""
    return validator

def required_when(other_field_key: str, values: Collection[str], message: str) -> ValidatorFunc:
    """
    Requires a value only while another field holds one of `values`,
    e.g. the confirmation date is only required for a 'confirmed' status.
    """
    inner = required(message)
    def validator(value: Any | None, form_data: dict[str, Any]) -> ValidationResult:
        if form_data.get(other_field_key) not in values:
            return True, ""
        return inner(value, form_data)
    return validator

def required_if_present(other_field_key: str, message: str) -> ValidatorFunc:
    """Requires a value only once another field (e.g. a contact's name) is filled."""
    inner = required(message)
    def validator(value: Any | None, form_data: dict[str, Any]) -> ValidationResult:
        other_value = form_data.get(other_field_key)
        if not other_value or (isinstance(other_value, str) and not other_value.strip()):
            return True, ""
        return inner(value, form_data)
    return validator

def match_pattern(pattern: Pattern[str], message: str) -> ValidatorFunc:
    """Ensures a string value matches a regex pattern."""
    def validator(value: Any | None, form_data: dict[str, Any]) -> ValidationResult:
        # Empty values are `required`'s job.
        if not value or not isinstance(value, str):
            return True, ""
        if not pattern.match(value.strip()):
            return False, message
        return True, ""
    return validator

def max_length(limit: int, message: str) -> ValidatorFunc:
    """Ensures a string value does not exceed `limit` characters."""
    def validator(value: Any | None, form_data: dict[str, Any]) -> ValidationResult:
        if not value or not isinstance(value, str):
            return True, ""
        if len(value.strip()) > limit:
            return False, message
        return True, ""
    return validator

def is_within_date_range(
    min_date: date | None = date(1900, 1, 1), max_date: date | None = None,
    message: str = "Date is outside the allowed range."
) -> ValidatorFunc:
    """Ensures a YYYY-MM-DD date string is within the specified min/max range.
    A missing `max_date` means "today", evaluated at validation time."""
    def validator(value: str | None, form_data: dict[str, Any]) -> ValidationResult:
        if not value:
            return True, ''
        try:
            dt_object = datetime.strptime(value, DATE_FORMAT_STORAGE).date()
        except (ValueError, TypeError):
            return False, "Invalid date format."
        upper = max_date or date.today()
        if (min_date and dt_object < min_date) or dt_object > upper:
            return False, message
        return True, ''
    return validator

def is_date_on_or_after(other_field_key: str, message: str) -> ValidatorFunc:
    """
    Validates that a YYYY-MM-DD date in one field is not earlier than the
    date held by another field of the same form.
    """
    def validator(value: str | None, form_data: dict[str, Any]) -> ValidationResult:
        other_value = form_data.get(other_field_key)
        if not value or not other_value:
            return True, ""
        try:
            this_date = datetime.strptime(value, DATE_FORMAT_STORAGE).date()
            other_date = datetime.strptime(other_value, DATE_FORMAT_STORAGE).date()
        except (ValueError, TypeError):
            return True, ""  # Format errors belong to the range validator.
        if this_date < other_date:
            return False, message
        return True, ""
    return validator

# ===================================================================
# PHONE NUMBERS
# ===================================================================

def is_valid_indian_phone_number(phone_number: Any) -> bool:
    """
    Accepts +91/91-prefixed mobiles, bare 10-digit mobiles (starting 6-9)
    and 0-prefixed landlines with a 2-4 digit STD code.
    """
    if not phone_number or not isinstance(phone_number, str):
        return False

    clean_number = re.sub(r'[^\d+]', '', phone_number)

    if clean_number.startswith('+91'):
        return bool(MOBILE_PATTERN.match(re.sub(r'\D', '', clean_number[3:])))
    if clean_number.startswith('91') and len(clean_number) == 12:
        return bool(MOBILE_PATTERN.match(clean_number[2:]))
    if clean_number.startswith('0'):
        return bool(LANDLINE_PATTERN.match(re.sub(r'\D', '', clean_number)))
    return bool(MOBILE_PATTERN.match(re.sub(r'\D', '', clean_number)))

def is_indian_phone(message: str = "Please enter a valid Indian phone number.") -> ValidatorFunc:
    def validator(value: Any | None, form_data: dict[str, Any]) -> ValidationResult:
        if not value:
            return True, ""
        if not is_valid_indian_phone_number(value):
            return False, message
        return True, ""
    return validator

def is_contact_value(type_field_key: str, email_message: str, phone_message: str) -> ValidatorFunc:
    """Checks a contact value against the format implied by its sibling type field."""
    def validator(value: Any | None, row_data: dict[str, Any]) -> ValidationResult:
        if not value:
            return True, ""
        contact_type = row_data.get(type_field_key)
        if contact_type == 'email' and not EMAIL_PATTERN.match(str(value).strip()):
            return False, email_message
        if contact_type == 'phone' and not is_valid_indian_phone_number(value):
            return False, phone_message
        return True, ""
    return validator

def format_indian_phone_number(phone_number: str | None) -> str:
    """Formats a phone number for display; landlines are returned as given."""
    if not phone_number:
        return ''
    digits = re.sub(r'\D', '', phone_number)
    if digits.startswith('91') and len(digits) == 12:
        return f"+91 {digits[2:7]} {digits[7:]}"
    if len(digits) == 10 and digits[0] in '6789':
        return f"{digits[:5]} {digits[5:]}"
    return phone_number
