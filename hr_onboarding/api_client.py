# hr_onboarding/api_client.py
from __future__ import annotations
import logging
from typing import Any, Protocol
from dataclasses import dataclass

import requests

logger = logging.getLogger(__name__)

# ===================================================================
# 1. TYPES
# ===================================================================

class ApiError(Exception):
    """A failed backend call. `message` is safe to show to the operator."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code

@dataclass(frozen=True)
class MasterOption:
    id: int
    name: str

@dataclass(frozen=True)
class DocumentType:
    id: int
    name: str
    is_mandatory: bool = False
    description: str = ''

# Master lookups served under /masters/<name>, keyed by the list name in the response
MASTER_COLLECTIONS: dict[str, str] = {
    'companies': 'companies',
    'departments': 'departments',
    'designations': 'designations',
    'leave-policies': 'leave_policies',
    'shifts': 'shifts',
    'roles': 'roles',
    'document-types': 'document_types',
}
# Lookups the backend serves unpaginated
UNPAGINATED_MASTERS: frozenset[str] = frozenset({'roles'})

class OnboardingGateway(Protocol):
    """The backend calls the onboarding wizard depends on."""

    def create_personal_info(self, body: dict[str, Any]) -> str:
        """Returns the correlation id (employee uuid) of the new record."""
        raise NotImplementedError

    def create_job_details(self, body: dict[str, Any]) -> None:
        raise NotImplementedError

    def create_contact_info(self, body: dict[str, Any]) -> None:
        raise NotImplementedError

    def create_bank_info(self, body: dict[str, Any]) -> None:
        raise NotImplementedError

    def upload_attachment(self, filename: str, content: bytes, content_type: str | None = None) -> int:
        """Returns the id of the stored file."""
        raise NotImplementedError

    def complete_onboarding(self, body: dict[str, Any]) -> None:
        raise NotImplementedError

    def list_master(self, name: str, page: int = 1, limit: int = 1000) -> list[MasterOption]:
        raise NotImplementedError

    def list_document_types(self, page: int = 1, limit: int = 100) -> list[DocumentType]:
        raise NotImplementedError

    def list_managers(self, company_id: int, department_id: int) -> list[MasterOption]:
        raise NotImplementedError

    def close(self) -> None:
        """Releases connections held for this wizard."""
        raise NotImplementedError

# ===================================================================
# 2. REST IMPLEMENTATION
# ===================================================================

def _error_message(response: requests.Response, fallback: str) -> str:
    """The backend's `message` field when it sent one, else `fallback`."""
    try:
        body = response.json()
    except ValueError:
        return fallback
    if isinstance(body, dict):
        message = body.get('message')
        if isinstance(message, str) and message.strip():
            return message
    return fallback

def _data(body: Any) -> dict[str, Any]:
    if isinstance(body, dict) and isinstance(body.get('data'), dict):
        return body['data']
    return {}

class RestOnboardingClient:
    """
    Talks to the HR backend over JSON/HTTP. One request per call: no retry,
    and no timeout unless one is configured.
    """

    def __init__(self, base_url: str, token: str | None = None,
                 timeout: float | None = None, session: requests.Session | None = None) -> None:
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = session or requests.Session()
        if token:
            self.session.headers['Authorization'] = f"Bearer {token}"

    def close(self) -> None:
        self.session.close()

    def _request(self, method: str, path: str, fallback: str, **kwargs: Any) -> Any:
        url = f"{self.base_url}{path}"
        logger.debug(f"{method} {url}")
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            logger.warning(f"{method} {url} failed: {e}")
            raise ApiError(fallback) from e

        if not response.ok:
            message = _error_message(response, fallback)
            logger.warning(f"{method} {url} returned {response.status_code}: {message}")
            raise ApiError(message, response.status_code)

        try:
            return response.json()
        except ValueError:
            return None

    # --- Onboarding steps ---
    def create_personal_info(self, body: dict[str, Any]) -> str:
        result = self._request('POST', '/employees/personal-info', "Failed to save personal info.", json=body)
        uuid = _data(result).get('uuid')
        if not uuid:
            raise ApiError("Failed to save personal info.")
        return str(uuid)

    def create_job_details(self, body: dict[str, Any]) -> None:
        self._request('POST', '/employees/job-details', "Failed to save job details.", json=body)

    def create_contact_info(self, body: dict[str, Any]) -> None:
        self._request('POST', '/employees/contact-info', "Failed to save contact info.", json=body)

    def create_bank_info(self, body: dict[str, Any]) -> None:
        self._request('POST', '/employees/bank-info', "Failed to save bank info.", json=body)

    def upload_attachment(self, filename: str, content: bytes, content_type: str | None = None) -> int:
        fallback = f"Failed to upload {filename}."
        file_tuple = (filename, content, content_type) if content_type else (filename, content)
        result = self._request('POST', '/attachments', fallback, files={'file': file_tuple})
        file_id = _data(result).get('id')
        if file_id is None:
            raise ApiError(fallback)
        return int(file_id)

    def complete_onboarding(self, body: dict[str, Any]) -> None:
        self._request('POST', '/employees/complete', "Failed to complete onboarding.", json=body)

    # --- Master data ---
    def list_master(self, name: str, page: int = 1, limit: int = 1000) -> list[MasterOption]:
        collection = MASTER_COLLECTIONS.get(name)
        if collection is None:
            raise ValueError(f"Unknown master lookup: {name}")
        params = None if name in UNPAGINATED_MASTERS else {'page': page, 'limit': limit}
        result = self._request('GET', f"/masters/{name}", f"Failed to load {name}.", params=params)
        return [
            MasterOption(id=int(item['id']), name=str(item.get('name', item['id'])))
            for item in _data(result).get(collection, [])
        ]

    def list_document_types(self, page: int = 1, limit: int = 100) -> list[DocumentType]:
        result = self._request('GET', '/masters/document-types', "Failed to load document types.",
                               params={'page': page, 'limit': limit})
        return [
            DocumentType(
                id=int(item['id']),
                name=str(item.get('name', '')),
                is_mandatory=bool(item.get('is_mandatory')),
                description=item.get('description') or '',
            )
            for item in _data(result).get('document_types', [])
        ]

    def list_managers(self, company_id: int, department_id: int) -> list[MasterOption]:
        result = self._request('GET', '/employees', "Failed to load managers.",
                               params={'company_id': company_id, 'department_id': department_id})
        return [
            MasterOption(id=int(item['id']), name=str(item.get('username') or item.get('name') or item['id']))
            for item in _data(result).get('employees', [])
        ]
