# hr_onboarding/payloads.py
"""
Structured request bodies for the four form steps.

Each step's free-form `form_data` dict is turned into a frozen dataclass by
`from_form`, which is where ids are coerced and optional blanks become None.
`to_request` renders the JSON body the backend expects and `to_form` renders
the values back for a form that is revisited.

Employment status is modelled as a union of variants, each carrying only the
dates that are valid for it, so a confirmed employee can never be sent with
a termination date.
"""
from __future__ import annotations
from typing import Any, Literal, Protocol, Union
from dataclasses import dataclass, field

from .choices import DEFAULT_COUNTRY
from .schema import OnboardingStep


class PayloadError(ValueError):
    """Raised when form data cannot be turned into a step payload."""


class StepPayload(Protocol):
    def to_request(self) -> dict[str, Any]: ...
    def to_form(self) -> dict[str, Any]: ...


# ===================================================================
# COERCION HELPERS
# ===================================================================

def _text(form_data: dict[str, Any], key: str) -> str:
    value = form_data.get(key)
    return value.strip() if isinstance(value, str) else ('' if value is None else str(value))

def _optional_text(form_data: dict[str, Any], key: str) -> str | None:
    return _text(form_data, key) or None

def _required_text(form_data: dict[str, Any], key: str) -> str:
    value = _text(form_data, key)
    if not value:
        raise PayloadError(f"'{key}' is required.")
    return value

def _to_int(value: Any, key: str) -> int:
    if isinstance(value, bool):
        raise PayloadError(f"'{key}' must be an id, got {value!r}.")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise PayloadError(f"'{key}' must be an id, got {value!r}.") from None

def _optional_int(value: Any, key: str) -> int | None:
    if value is None or value == '':
        return None
    return _to_int(value, key)


# ===================================================================
# STEP 1: PERSONAL INFORMATION
# ===================================================================

@dataclass(frozen=True)
class PersonalInfo:
    first_name: str
    last_name: str
    date_of_birth: str
    gender: str
    marital_status: str
    personal_email: str
    personal_phone_no: str
    middle_name: str | None = None
    blood_group: str | None = None

    @classmethod
    def from_form(cls, form_data: dict[str, Any]) -> PersonalInfo:
        return cls(
            first_name=_required_text(form_data, 'first_name'),
            last_name=_required_text(form_data, 'last_name'),
            date_of_birth=_required_text(form_data, 'date_of_birth'),
            gender=_required_text(form_data, 'gender'),
            marital_status=_required_text(form_data, 'marital_status'),
            personal_email=_required_text(form_data, 'personal_email'),
            personal_phone_no=_required_text(form_data, 'personal_phone_no'),
            middle_name=_optional_text(form_data, 'middle_name'),
            blood_group=_optional_text(form_data, 'blood_group'),
        )

    def to_request(self) -> dict[str, Any]:
        return {
            'first_name': self.first_name,
            'middle_name': self.middle_name,
            'last_name': self.last_name,
            'date_of_birth': self.date_of_birth,
            'gender': self.gender,
            'marital_status': self.marital_status,
            'blood_group': self.blood_group,
            'personal_email': self.personal_email,
            'personal_phone_no': self.personal_phone_no,
        }

    def to_form(self) -> dict[str, Any]:
        form = self.to_request()
        form['middle_name'] = self.middle_name or ''
        return form


# ===================================================================
# STEP 2: JOB DETAILS (employment status as a tagged union)
# ===================================================================

@dataclass(frozen=True)
class ActiveEmployment:
    status: Literal['intern', 'probation']

@dataclass(frozen=True)
class ConfirmedEmployment:
    confirmation_date: str
    status: Literal['confirmed'] = 'confirmed'

@dataclass(frozen=True)
class ResignedEmployment:
    resignation_date: str
    last_working_date: str | None = None
    reason_for_leaving: str | None = None
    status: Literal['resigned'] = 'resigned'

@dataclass(frozen=True)
class TerminatedEmployment:
    termination_date: str
    last_working_date: str | None = None
    reason_for_leaving: str | None = None
    status: Literal['terminated'] = 'terminated'

Employment = Union[ActiveEmployment, ConfirmedEmployment, ResignedEmployment, TerminatedEmployment]

def employment_from_form(form_data: dict[str, Any]) -> Employment:
    """Picks the variant for the selected status; fields of other statuses are ignored."""
    status = _text(form_data, 'status')
    if status in ('intern', 'probation'):
        return ActiveEmployment(status=status)  # type: ignore[arg-type]
    if status == 'confirmed':
        return ConfirmedEmployment(confirmation_date=_required_text(form_data, 'confirmation_date'))
    if status == 'resigned':
        return ResignedEmployment(
            resignation_date=_required_text(form_data, 'resignation_date'),
            last_working_date=_optional_text(form_data, 'last_working_date'),
            reason_for_leaving=_optional_text(form_data, 'reason_for_leaving'),
        )
    if status == 'terminated':
        return TerminatedEmployment(
            termination_date=_required_text(form_data, 'termination_date'),
            last_working_date=_optional_text(form_data, 'last_working_date'),
            reason_for_leaving=_optional_text(form_data, 'reason_for_leaving'),
        )
    raise PayloadError(f"Unknown employment status {status!r}.")

def employment_fields(employment: Employment) -> dict[str, Any]:
    """Every status-dependent request field; those the variant lacks are None."""
    fields: dict[str, Any] = {
        'status': employment.status,
        'confirmation_date': None,
        'resignation_date': None,
        'termination_date': None,
        'last_working_date': None,
        'reason_for_leaving': None,
    }
    if isinstance(employment, ConfirmedEmployment):
        fields['confirmation_date'] = employment.confirmation_date
    elif isinstance(employment, ResignedEmployment):
        fields['resignation_date'] = employment.resignation_date
        fields['last_working_date'] = employment.last_working_date
        fields['reason_for_leaving'] = employment.reason_for_leaving
    elif isinstance(employment, TerminatedEmployment):
        fields['termination_date'] = employment.termination_date
        fields['last_working_date'] = employment.last_working_date
        fields['reason_for_leaving'] = employment.reason_for_leaving
    return fields

@dataclass(frozen=True)
class JobDetails:
    company_id: int
    department_id: int
    designation_id: int
    employee_code: str
    employment: Employment
    type: str
    joining_date: str
    office_email: str
    leave_policy_id: int
    shift_id: int
    roles: tuple[int, ...]
    office_phone_no: str | None = None
    reporting_to: int | None = None

    @property
    def status(self) -> str:
        return self.employment.status

    @classmethod
    def from_form(cls, form_data: dict[str, Any]) -> JobDetails:
        roles = form_data.get('roles') or []
        return cls(
            company_id=_to_int(form_data.get('company_id'), 'company_id'),
            department_id=_to_int(form_data.get('department_id'), 'department_id'),
            designation_id=_to_int(form_data.get('designation_id'), 'designation_id'),
            employee_code=_required_text(form_data, 'employee_code'),
            employment=employment_from_form(form_data),
            type=_required_text(form_data, 'type'),
            joining_date=_required_text(form_data, 'joining_date'),
            office_email=_required_text(form_data, 'office_email'),
            leave_policy_id=_to_int(form_data.get('leave_policy_id'), 'leave_policy_id'),
            shift_id=_to_int(form_data.get('shift_id'), 'shift_id'),
            roles=tuple(_to_int(role, 'roles') for role in roles),
            office_phone_no=_optional_text(form_data, 'office_phone_no'),
            reporting_to=_optional_int(form_data.get('reporting_to'), 'reporting_to'),
        )

    def to_request(self) -> dict[str, Any]:
        request: dict[str, Any] = {
            'company_id': self.company_id,
            'department_id': self.department_id,
            'designation_id': self.designation_id,
            'employee_code': self.employee_code,
            'type': self.type,
            'joining_date': self.joining_date,
            'office_email': self.office_email,
            'office_phone_no': self.office_phone_no,
            'leave_policy_id': self.leave_policy_id,
            'shift_id': self.shift_id,
            'reporting_to': self.reporting_to,
            'roles': list(self.roles),
        }
        request.update(employment_fields(self.employment))
        return request

    def to_form(self) -> dict[str, Any]:
        form = self.to_request()
        form['office_phone_no'] = self.office_phone_no or ''
        form['reason_for_leaving'] = form['reason_for_leaving'] or ''
        return form


# ===================================================================
# STEP 3: CONTACT INFORMATION
# ===================================================================

@dataclass(frozen=True)
class EmergencyContact:
    name: str
    type: str
    value: str
    relationship: str

    def to_request(self) -> dict[str, str]:
        return {'name': self.name, 'type': self.type, 'value': self.value, 'relationship': self.relationship}

@dataclass(frozen=True)
class ContactInfo:
    address: str
    city: str
    state: str
    postal_code: str
    country: str = DEFAULT_COUNTRY
    emergency_contact: tuple[EmergencyContact, ...] = field(default_factory=tuple)

    @classmethod
    def from_form(cls, form_data: dict[str, Any]) -> ContactInfo:
        # Rows without a name are blank editor rows and are dropped
        contacts = tuple(
            EmergencyContact(
                name=_text(row, 'name'),
                type=_text(row, 'type') or 'phone',
                value=_text(row, 'value'),
                relationship=_text(row, 'relationship'),
            )
            for row in form_data.get('emergency_contact') or []
            if _text(row, 'name')
        )
        return cls(
            address=_required_text(form_data, 'address'),
            city=_required_text(form_data, 'city'),
            state=_required_text(form_data, 'state'),
            postal_code=_required_text(form_data, 'postal_code'),
            country=_text(form_data, 'country') or DEFAULT_COUNTRY,
            emergency_contact=contacts,
        )

    def to_request(self) -> dict[str, Any]:
        return {
            'address': self.address,
            'city': self.city,
            'state': self.state,
            'country': self.country,
            'postal_code': self.postal_code,
            'emergency_contact': [contact.to_request() for contact in self.emergency_contact],
        }

    def to_form(self) -> dict[str, Any]:
        return self.to_request()


# ===================================================================
# STEP 4: BANK INFORMATION (every field optional)
# ===================================================================

BANK_FIELDS: tuple[str, ...] = ('aadhaar_no', 'pan_no', 'uan_no', 'bank_account_no', 'ifsc_code', 'bank_name')

@dataclass(frozen=True)
class BankInfo:
    aadhaar_no: str | None = None
    pan_no: str | None = None
    uan_no: str | None = None
    bank_account_no: str | None = None
    ifsc_code: str | None = None
    bank_name: str | None = None

    @classmethod
    def from_form(cls, form_data: dict[str, Any]) -> BankInfo:
        return cls(**{key: _optional_text(form_data, key) for key in BANK_FIELDS})

    def to_request(self) -> dict[str, Any]:
        # Empty fields are omitted rather than sent as null
        return {key: getattr(self, key) for key in BANK_FIELDS if getattr(self, key)}

    def to_form(self) -> dict[str, Any]:
        return {key: getattr(self, key) or '' for key in BANK_FIELDS}


PAYLOAD_TYPES: dict[int, Any] = {
    OnboardingStep.PERSONAL: PersonalInfo,
    OnboardingStep.JOB_DETAILS: JobDetails,
    OnboardingStep.CONTACT: ContactInfo,
    OnboardingStep.BANK: BankInfo,
}

def build_payload(step: int, form_data: dict[str, Any]) -> StepPayload:
    """Turns validated form data for a form step into its structured payload."""
    payload_type = PAYLOAD_TYPES.get(step)
    if payload_type is None:
        raise PayloadError(f"Step {step} has no form payload.")
    return payload_type.from_form(form_data)
