# tests/test_validation.py
from __future__ import annotations

import sys
from pathlib import Path
from datetime import date, timedelta
from typing import Any

# Make the `hr_onboarding` directory importable
# without having to install the project in editable mode.
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from hr_onboarding.validation import (
    required,
    required_when,
    required_if_present,
    match_pattern,
    is_within_date_range,
    is_date_on_or_after,
    max_length,
    is_indian_phone,
    is_contact_value,
    is_valid_indian_phone_number,
    format_indian_phone_number,
    PAN_PATTERN,
    IFSC_PATTERN,
    POSTAL_CODE_PATTERN,
)

# Test data is just a dummy dict for context, as our validators require it.
FORM_DATA: dict[str, Any] = {}

def test_max_length_validator() -> None:
    """Tests the `max_length` validator."""
    validator = max_length(20, "Max 20 characters.")

    is_valid_exact, _ = validator("1" * 20, FORM_DATA)
    assert is_valid_exact, "Should pass for a string at the exact limit"

    is_invalid_over, msg = validator("1" * 21, FORM_DATA)
    assert not is_invalid_over, "Should fail for a string over the limit"
    assert msg == "Max 20 characters."

    is_valid_none, _ = validator(None, FORM_DATA)
    assert is_valid_none, "Should pass for None (not its responsibility)"

def test_required_validator() -> None:
    """Tests the `required` validator for various empty/non-empty cases."""
    validator = required("This field is required.")

    assert not validator(None, FORM_DATA)[0], "Should fail for None"
    assert not validator("", FORM_DATA)[0], "Should fail for empty string"
    assert not validator("   ", FORM_DATA)[0], "Should fail for whitespace-only string"
    assert not validator([], FORM_DATA)[0], "Should fail for an empty role list"

    assert validator("some value", FORM_DATA)[0], "Should pass for a valid string"
    assert validator(0, FORM_DATA)[0], "Should pass for the number 0"
    assert validator([3], FORM_DATA)[0], "Should pass for a non-empty list"

def test_required_when_only_applies_to_matching_status() -> None:
    validator = required_when('status', ('confirmed',), "Confirmation date is required for 'Confirmed' status.")

    is_valid, msg = validator(None, {'status': 'confirmed'})
    assert not is_valid and msg == "Confirmation date is required for 'Confirmed' status."

    assert validator(None, {'status': 'probation'})[0], "Should not be required for other statuses"
    assert validator('2024-01-01', {'status': 'confirmed'})[0]

def test_required_if_present() -> None:
    validator = required_if_present('name', "Please provide relationship.")
    assert validator('', {'name': ''})[0], "A blank row needs nothing else"
    assert not validator('', {'name': 'Ravi'})[0], "A named contact needs a relationship"
    assert validator('Brother', {'name': 'Ravi'})[0]

def test_match_pattern_validator() -> None:
    """Tests `match_pattern` with the statutory id patterns."""
    pan = match_pattern(PAN_PATTERN, "Invalid PAN format.")
    assert pan("ABCDE1234F", FORM_DATA)[0], "Should pass for a valid PAN"
    assert not pan("ABCD1234F", FORM_DATA)[0], "Should fail for a short PAN"
    assert not pan("abcde1234f", FORM_DATA)[0], "PAN is upper case"
    assert pan("", FORM_DATA)[0], "Should pass for empty (not its responsibility)"

    ifsc = match_pattern(IFSC_PATTERN, "Invalid IFSC format.")
    assert ifsc("SBIN0001234", FORM_DATA)[0]
    assert not ifsc("SBIN1001234", FORM_DATA)[0], "The fifth character must be 0"

    postal = match_pattern(POSTAL_CODE_PATTERN, "Postal code must be 6 digits.")
    assert postal("560001", FORM_DATA)[0]
    assert not postal("56000", FORM_DATA)[0]

def test_date_range_validator() -> None:
    """Tests `is_within_date_range` with its default bounds (1900 .. today)."""
    validator = is_within_date_range(message="Date of birth must be between 1900 and today.")

    assert validator("1990-05-17", FORM_DATA)[0], "Should pass for a date in range"
    assert validator(date.today().strftime('%Y-%m-%d'), FORM_DATA)[0], "Today is inclusive"

    tomorrow = (date.today() + timedelta(days=1)).strftime('%Y-%m-%d')
    assert not validator(tomorrow, FORM_DATA)[0], "Should fail for a future date"
    assert not validator("1899-12-31", FORM_DATA)[0], "Should fail before 1900"

    is_valid, msg = validator("17/05/1990", FORM_DATA)
    assert not is_valid and msg == "Invalid date format."

    assert validator(None, FORM_DATA)[0], "Should pass for None (not its responsibility)"

def test_date_on_or_after_validator() -> None:
    validator = is_date_on_or_after('joining_date', "Last working date cannot be before the joining date.")
    form = {'joining_date': '2024-04-01'}

    assert validator('2024-04-01', form)[0], "The same day is allowed"
    assert validator('2025-01-31', form)[0]
    assert not validator('2024-03-31', form)[0]
    assert validator('2024-03-31', {})[0], "Nothing to compare against"

def test_indian_phone_numbers() -> None:
    valid = ['+919876543210', '+91 98765 43210', '919876543210', '9876543210', '08041234567', '022-23456789']
    invalid = ['1234567890', '+915876543210', '98765', '0123456789', 'not a phone', '']
    for number in valid:
        assert is_valid_indian_phone_number(number), f"{number!r} should be accepted"
    for number in invalid:
        assert not is_valid_indian_phone_number(number), f"{number!r} should be rejected"

    validator = is_indian_phone()
    assert validator('', FORM_DATA)[0], "Empty is `required`'s job"
    assert not validator('12345', FORM_DATA)[0]

def test_contact_value_depends_on_type() -> None:
    validator = is_contact_value('type', "Please enter a valid email address.",
                                 "Please enter a valid Indian phone number.")

    assert validator('ravi@example.com', {'type': 'email'})[0]
    is_valid, msg = validator('ravi@', {'type': 'email'})
    assert not is_valid and msg == "Please enter a valid email address."

    assert validator('9876543210', {'type': 'phone'})[0]
    is_valid, msg = validator('ravi@example.com', {'type': 'phone'})
    assert not is_valid and msg == "Please enter a valid Indian phone number."

def test_format_indian_phone_number() -> None:
    assert format_indian_phone_number('+919876543210') == '+91 98765 43210'
    assert format_indian_phone_number('9876543210') == '98765 43210'
    assert format_indian_phone_number('080-41234567') == '080-41234567', "Landlines are left alone"
    assert format_indian_phone_number(None) == ''
