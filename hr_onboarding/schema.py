# hr_onboarding/schema.py
from __future__ import annotations
from typing import Any, TypedDict
from dataclasses import dataclass
from enum import IntEnum

from .choices import (
    genders, marital_statuses, blood_groups, employment_statuses,
    employment_types, contact_types, indian_states, DEFAULT_COUNTRY
)
from .validation import ValidatorFunc

# ===================================================================
# 1. CORE DATA STRUCTURES & TYPE ALIASES
# ===================================================================

class OnboardingStep(IntEnum):
    PERSONAL = 1
    JOB_DETAILS = 2
    CONTACT = 3
    BANK = 4
    DOCUMENTS = 5

FIRST_STEP: int = OnboardingStep.PERSONAL
LAST_STEP: int = OnboardingStep.DOCUMENTS

@dataclass(frozen=True)
class FormField:
    """Defines everything about a form field in one place."""
    key: str
    label: str
    ui_type: str = 'text'
    options: list[str] | dict[str, str] | None = None
    # Name of a master-data lookup that supplies the options at render time
    master: str | None = None
    default_value: Any = ''
    max_length: int | None = None
    placeholder: str = ''
    # (controlling field key, values for which this field is shown)
    visible_when: tuple[str, tuple[str, ...]] | None = None
    row_schema: type | None = None

    def is_visible(self, form_data: dict[str, Any]) -> bool:
        if not self.visible_when:
            return True
        controlling_key, values = self.visible_when
        return form_data.get(controlling_key) in values

class FieldConfig(TypedDict):
    field: FormField
    validators: list[ValidatorFunc]

DataframeColumnRules = dict[str, list[ValidatorFunc]]

class DataframeConfig(TypedDict):
    field: FormField
    validators: DataframeColumnRules

class StepDefinition(TypedDict):
    id: int
    name: str
    title: str
    subtitle: str
    fields: list[FieldConfig]
    dataframes: list[DataframeConfig]

# ===================================================================
# 2. THE APPLICATION SCHEMA (Single Source of Truth)
# ===================================================================

_LEAVING_STATUSES: tuple[str, ...] = ('resigned', 'terminated')

class EmergencyContactRow:
    NAME = FormField(key='name', label='Name')
    TYPE = FormField(key='type', label='Contact Type', ui_type='select', options=contact_types, default_value='phone')
    VALUE = FormField(key='value', label='Phone / Email')
    RELATIONSHIP = FormField(key='relationship', label='Relationship')

class AppSchema:
    """
    Defines all fields used by the onboarding wizard, grouped per step.
    """
    class Personal:
        FIRST_NAME = FormField(key='first_name', label='First Name')
        MIDDLE_NAME = FormField(key='middle_name', label='Middle Name (Optional)')
        LAST_NAME = FormField(key='last_name', label='Last Name')
        DATE_OF_BIRTH = FormField(key='date_of_birth', label='Date of Birth', ui_type='date', default_value=None)
        GENDER = FormField(key='gender', label='Gender', ui_type='select', options=genders, default_value=None)
        MARITAL_STATUS = FormField(key='marital_status', label='Marital Status', ui_type='select',
                                   options=marital_statuses, default_value=None)
        BLOOD_GROUP = FormField(key='blood_group', label='Blood Group', ui_type='select',
                                options={bg.lower(): bg for bg in blood_groups}, default_value=None)
        PERSONAL_EMAIL = FormField(key='personal_email', label='Personal Email', ui_type='email')
        PERSONAL_PHONE = FormField(key='personal_phone_no', label='Personal Phone', placeholder='+91 98765 43210')

    class JobDetails:
        COMPANY = FormField(key='company_id', label='Company', ui_type='select', master='companies', default_value=None)
        DEPARTMENT = FormField(key='department_id', label='Department', ui_type='select', master='departments', default_value=None)
        DESIGNATION = FormField(key='designation_id', label='Designation', ui_type='select', master='designations', default_value=None)
        EMPLOYEE_CODE = FormField(key='employee_code', label='Employee Code')
        STATUS = FormField(key='status', label='Employment Status', ui_type='select',
                           options=employment_statuses, default_value=None)
        TYPE = FormField(key='type', label='Employment Type', ui_type='select',
                         options=employment_types, default_value=None)
        JOINING_DATE = FormField(key='joining_date', label='Joining Date', ui_type='date', default_value=None)
        CONFIRMATION_DATE = FormField(key='confirmation_date', label='Confirmation Date', ui_type='date',
                                      default_value=None, visible_when=('status', ('confirmed',)))
        RESIGNATION_DATE = FormField(key='resignation_date', label='Resignation Date', ui_type='date',
                                     default_value=None, visible_when=('status', ('resigned',)))
        TERMINATION_DATE = FormField(key='termination_date', label='Termination Date', ui_type='date',
                                     default_value=None, visible_when=('status', ('terminated',)))
        LAST_WORKING_DATE = FormField(key='last_working_date', label='Last Working Date', ui_type='date',
                                      default_value=None, visible_when=('status', _LEAVING_STATUSES))
        OFFICE_EMAIL = FormField(key='office_email', label='Office Email', ui_type='email')
        OFFICE_PHONE = FormField(key='office_phone_no', label='Office Phone (Optional)')
        LEAVE_POLICY = FormField(key='leave_policy_id', label='Leave Policy', ui_type='select', master='leave-policies', default_value=None)
        SHIFT = FormField(key='shift_id', label='Shift', ui_type='select', master='shifts', default_value=None)
        REPORTING_TO = FormField(key='reporting_to', label='Reporting To', ui_type='select', master='managers', default_value=None)
        REASON_FOR_LEAVING = FormField(key='reason_for_leaving', label='Reason for Leaving', ui_type='textarea',
                                       visible_when=('status', _LEAVING_STATUSES))
        ROLES = FormField(key='roles', label='Roles', ui_type='multiselect', master='roles', default_value=[])

    class Contact:
        ADDRESS = FormField(key='address', label='Address', placeholder='e.g., 123 MG Road, Near Central Mall')
        CITY = FormField(key='city', label='City', placeholder='e.g., Bangalore')
        STATE = FormField(key='state', label='State', ui_type='select', options=indian_states, default_value=None)
        COUNTRY = FormField(key='country', label='Country', default_value=DEFAULT_COUNTRY)
        POSTAL_CODE = FormField(key='postal_code', label='Postal Code', max_length=6, placeholder='e.g., 560001')
        EMERGENCY_CONTACTS = FormField(
            key='emergency_contact', label='Emergency Contact', ui_type='contacts',
            row_schema=EmergencyContactRow, default_value=[]
        )

    class Bank:
        AADHAAR_NO = FormField(key='aadhaar_no', label='Aadhaar Number', max_length=12, placeholder='XXXX XXXX XXXX')
        PAN_NO = FormField(key='pan_no', label='PAN Number', max_length=10, placeholder='ABCDE1234F')
        UAN_NO = FormField(key='uan_no', label='UAN Number', max_length=12)
        BANK_ACCOUNT_NO = FormField(key='bank_account_no', label='Bank Account Number', max_length=20)
        IFSC_CODE = FormField(key='ifsc_code', label='IFSC Code', max_length=11, placeholder='SBIN0001234')
        BANK_NAME = FormField(key='bank_name', label='Bank Name', max_length=255)

    GROUPS_BY_STEP: dict[int, type] = {}

    @classmethod
    def fields_of(cls, group: type) -> list[FormField]:
        return [
            field_instance for field_instance in group.__dict__.values()
            if isinstance(field_instance, FormField)
        ]

    @classmethod
    def get_all_fields(cls) -> list[FormField]:
        return [field for group in cls.GROUPS_BY_STEP.values() for field in cls.fields_of(group)]

    @classmethod
    def blank_row(cls, row_schema: type) -> dict[str, Any]:
        return {field.key: field.default_value for field in cls.fields_of(row_schema)}

    @classmethod
    def defaults_for(cls, step: int) -> dict[str, Any]:
        """Empty form values for a step; lists are fresh copies."""
        group = cls.GROUPS_BY_STEP.get(step)
        if group is None:
            return {}
        defaults: dict[str, Any] = {}
        for field in cls.fields_of(group):
            if field.row_schema is not None:
                # Row editors start with one blank row
                defaults[field.key] = [cls.blank_row(field.row_schema)]
                continue
            value = field.default_value
            defaults[field.key] = list(value) if isinstance(value, list) else value
        return defaults

AppSchema.GROUPS_BY_STEP.update({
    OnboardingStep.PERSONAL: AppSchema.Personal,
    OnboardingStep.JOB_DETAILS: AppSchema.JobDetails,
    OnboardingStep.CONTACT: AppSchema.Contact,
    OnboardingStep.BANK: AppSchema.Bank,
})

# ===================================================================
# 3. CENTRALIZED CONSTANTS
# ===================================================================

STEP_TITLES: dict[int, str] = {
    OnboardingStep.PERSONAL: "Personal Information",
    OnboardingStep.JOB_DETAILS: "Job Details",
    OnboardingStep.CONTACT: "Contact Information",
    OnboardingStep.BANK: "Bank Information",
    OnboardingStep.DOCUMENTS: "Documents",
}

STEP_ICONS: dict[int, str] = {
    OnboardingStep.PERSONAL: 'person',
    OnboardingStep.JOB_DETAILS: 'work',
    OnboardingStep.CONTACT: 'call',
    OnboardingStep.BANK: 'account_balance',
    OnboardingStep.DOCUMENTS: 'description',
}

DATE_FORMAT_STORAGE: str = '%Y-%m-%d'
