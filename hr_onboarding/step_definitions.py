# hr_onboarding/step_definitions.py
from __future__ import annotations
from typing import Any

from .schema import AppSchema, EmergencyContactRow, StepDefinition, DataframeColumnRules, OnboardingStep, STEP_TITLES
from .validation import (
    ValidatorFunc, required, required_choice, required_when, required_if_present,
    match_pattern, max_length, is_within_date_range, is_date_on_or_after,
    is_indian_phone, is_contact_value,
    EMAIL_PATTERN, AADHAAR_PATTERN, PAN_PATTERN, UAN_PATTERN, IFSC_PATTERN, POSTAL_CODE_PATTERN
)

_P = AppSchema.Personal
_J = AppSchema.JobDetails
_C = AppSchema.Contact
_B = AppSchema.Bank

STEPS_BY_ID: dict[int, StepDefinition] = {
    OnboardingStep.PERSONAL: {
        'id': 1, 'name': 'personal', 'title': STEP_TITLES[OnboardingStep.PERSONAL],
        'subtitle': 'Basic identity details of the new employee.',
        'fields': [
            {'field': _P.FIRST_NAME, 'validators': [required("First name is required."), max_length(100, "Max 100 characters.")]},
            {'field': _P.MIDDLE_NAME, 'validators': [max_length(100, "Max 100 characters.")]},
            {'field': _P.LAST_NAME, 'validators': [required("Last name is required."), max_length(100, "Max 100 characters.")]},
            {'field': _P.DATE_OF_BIRTH, 'validators': [
                required("Date of birth is required."),
                is_within_date_range(message="Date of birth must be between 1900 and today.")
            ]},
            {'field': _P.GENDER, 'validators': [required_choice("Gender is required.")]},
            {'field': _P.MARITAL_STATUS, 'validators': [required_choice("Marital status is required.")]},
            {'field': _P.BLOOD_GROUP, 'validators': []},
            {'field': _P.PERSONAL_EMAIL, 'validators': [
                required("Personal email is required."),
                match_pattern(EMAIL_PATTERN, "Please enter a valid email address.")
            ]},
            {'field': _P.PERSONAL_PHONE, 'validators': [
                required("Personal phone is required."),
                is_indian_phone()
            ]},
        ],
        'dataframes': []
    },
    OnboardingStep.JOB_DETAILS: {
        'id': 2, 'name': 'job_details', 'title': STEP_TITLES[OnboardingStep.JOB_DETAILS],
        'subtitle': 'Where the employee sits in the organisation.',
        'fields': [
            {'field': _J.COMPANY, 'validators': [required_choice("Company is required.")]},
            {'field': _J.DEPARTMENT, 'validators': [required_choice("Department is required.")]},
            {'field': _J.DESIGNATION, 'validators': [required_choice("Designation is required.")]},
            {'field': _J.EMPLOYEE_CODE, 'validators': [required("Employee code is required.")]},
            {'field': _J.STATUS, 'validators': [required_choice("Status is required.")]},
            {'field': _J.TYPE, 'validators': [required_choice("Type is required.")]},
            {'field': _J.JOINING_DATE, 'validators': [required("Joining date is required.")]},
            {'field': _J.CONFIRMATION_DATE, 'validators': [
                required_when('status', ('confirmed',), "Confirmation date is required for 'Confirmed' status."),
                is_date_on_or_after('joining_date', "Confirmation date cannot be before the joining date.")
            ]},
            {'field': _J.RESIGNATION_DATE, 'validators': [
                required_when('status', ('resigned',), "Resignation date is required for 'Resigned' status.")
            ]},
            {'field': _J.TERMINATION_DATE, 'validators': [
                required_when('status', ('terminated',), "Termination date is required for 'Terminated' status.")
            ]},
            {'field': _J.LAST_WORKING_DATE, 'validators': [
                is_date_on_or_after('joining_date', "Last working date cannot be before the joining date.")
            ]},
            {'field': _J.OFFICE_EMAIL, 'validators': [
                required("Office email is required."),
                match_pattern(EMAIL_PATTERN, "Please enter a valid email address.")
            ]},
            {'field': _J.OFFICE_PHONE, 'validators': []},
            {'field': _J.LEAVE_POLICY, 'validators': [required_choice("Leave policy is required.")]},
            {'field': _J.SHIFT, 'validators': [required_choice("Shift is required.")]},
            {'field': _J.REPORTING_TO, 'validators': []},
            {'field': _J.REASON_FOR_LEAVING, 'validators': []},
            {'field': _J.ROLES, 'validators': [required("At least one role is required.")]},
        ],
        'dataframes': []
    },
    OnboardingStep.CONTACT: {
        'id': 3, 'name': 'contact', 'title': STEP_TITLES[OnboardingStep.CONTACT],
        'subtitle': 'Residential address and people to call in an emergency.',
        'fields': [
            {'field': _C.ADDRESS, 'validators': [required("Address is required.")]},
            {'field': _C.CITY, 'validators': [required("City is required.")]},
            {'field': _C.STATE, 'validators': [required_choice("State is required.")]},
            {'field': _C.COUNTRY, 'validators': []},
            {'field': _C.POSTAL_CODE, 'validators': [
                required("Postal code is required."),
                match_pattern(POSTAL_CODE_PATTERN, "Postal code must be 6 digits.")
            ]},
        ],
        'dataframes': [{
            'field': _C.EMERGENCY_CONTACTS,
            'validators': {
                EmergencyContactRow.TYPE.key: [required_if_present('name', "Please select contact type.")],
                EmergencyContactRow.VALUE.key: [
                    required_if_present('name', "Please provide contact value."),
                    is_contact_value('type', "Please enter a valid email address.",
                                     "Please enter a valid Indian phone number.")
                ],
                EmergencyContactRow.RELATIONSHIP.key: [required_if_present('name', "Please provide relationship.")],
            }
        }]
    },
    OnboardingStep.BANK: {
        'id': 4, 'name': 'bank', 'title': STEP_TITLES[OnboardingStep.BANK],
        'subtitle': 'Statutory identifiers and salary account. Every field is optional.',
        'fields': [
            {'field': _B.AADHAAR_NO, 'validators': [match_pattern(AADHAAR_PATTERN, "Aadhaar must be 12 digits.")]},
            {'field': _B.PAN_NO, 'validators': [match_pattern(PAN_PATTERN, "Invalid PAN format.")]},
            {'field': _B.UAN_NO, 'validators': [match_pattern(UAN_PATTERN, "UAN must be 12 digits.")]},
            {'field': _B.BANK_ACCOUNT_NO, 'validators': [max_length(20, "Max 20 characters.")]},
            {'field': _B.IFSC_CODE, 'validators': [match_pattern(IFSC_PATTERN, "Invalid IFSC format.")]},
            {'field': _B.BANK_NAME, 'validators': [max_length(255, "Max 255 characters.")]},
        ],
        'dataframes': []
    },
    OnboardingStep.DOCUMENTS: {
        'id': 5, 'name': 'documents', 'title': STEP_TITLES[OnboardingStep.DOCUMENTS],
        'subtitle': 'Upload the employee documents. Types marked * are mandatory.',
        'fields': [], 'dataframes': []
    },
}

# ===================================================================
# LOCAL VALIDATION
# ===================================================================

def _validate_simple_field(field_key: str, validator_list: list[ValidatorFunc], form_data: dict[str, Any], errors: dict[str, str]) -> bool:
    value_to_validate = form_data.get(field_key)
    for validator_func in validator_list:
        is_valid, msg = validator_func(value_to_validate, form_data)
        if not is_valid:
            errors.setdefault(field_key, msg)
            return False
    return True

def _validate_dataframe_field(dataframe_key: str, column_rules: DataframeColumnRules, form_data: dict[str, Any], errors: dict[str, str]) -> bool:
    is_dataframe_valid = True
    dataframe_value = form_data.get(dataframe_key) or []
    for row_index, row_data in enumerate(dataframe_value):
        for col_key, validator_list in column_rules.items():
            cell_value = row_data.get(col_key)
            for validator_func in validator_list:
                is_valid, msg = validator_func(cell_value, row_data)
                if not is_valid:
                    is_dataframe_valid = False
                    error_key = f"{dataframe_key}_{row_index}_{col_key}"
                    errors.setdefault(error_key, msg)
                    break
    return is_dataframe_valid

def execute_step_validators(step_def: StepDefinition, form_data: dict[str, Any]) -> tuple[bool, dict[str, str]]:
    """Runs every validator of a step. Fields hidden for the current form state are skipped."""
    new_errors: dict[str, str] = {}
    is_step_valid = True
    for field_conf in step_def.get('fields', []):
        field = field_conf['field']
        if not field.is_visible(form_data):
            continue
        if not _validate_simple_field(field.key, field_conf['validators'], form_data, new_errors):
            is_step_valid = False
    for df_conf in step_def.get('dataframes', []):
        if not _validate_dataframe_field(df_conf['field'].key, df_conf['validators'], form_data, new_errors):
            is_step_valid = False
    return is_step_valid, new_errors
