# tests/test_api_client.py
from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

import pytest
import requests

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from hr_onboarding.api_client import ApiError, DocumentType, MasterOption, RestOnboardingClient


class StubResponse:
    def __init__(self, status_code: int = 200, body: Any = None) -> None:
        self.status_code = status_code
        self.ok = status_code < 400
        self._body = body

    def json(self) -> Any:
        if self._body is None:
            raise ValueError("No JSON body")
        return self._body


class StubSession:
    """Stands in for `requests.Session`: records requests and replays canned responses."""

    def __init__(self, *responses: StubResponse | Exception) -> None:
        self.headers: dict[str, str] = {}
        self.requests: list[tuple[str, str, dict[str, Any]]] = []
        self._responses = list(responses)
        self.closed = False

    def request(self, method: str, url: str, **kwargs: Any) -> StubResponse:
        self.requests.append((method, url, kwargs))
        response = self._responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def close(self) -> None:
        self.closed = True


def make_client(*responses: StubResponse | Exception, **kwargs: Any) -> tuple[RestOnboardingClient, StubSession]:
    session = StubSession(*responses)
    client = RestOnboardingClient('http://hr.test/api/', session=session, **kwargs)  # type: ignore[arg-type]
    return client, session


def test_personal_info_returns_the_employee_uuid() -> None:
    client, session = make_client(StubResponse(201, {'data': {'uuid': 'emp-001'}}), token='secret')

    assert client.create_personal_info({'first_name': 'Asha'}) == 'emp-001'

    method, url, kwargs = session.requests[0]
    assert (method, url) == ('POST', 'http://hr.test/api/employees/personal-info')
    assert kwargs['json'] == {'first_name': 'Asha'}
    assert kwargs['timeout'] is None, "No timeout unless configured"
    assert session.headers['Authorization'] == 'Bearer secret'

def test_backend_message_is_surfaced() -> None:
    client, _ = make_client(StubResponse(422, {'message': 'Employee code already exists.'}))

    with pytest.raises(ApiError) as excinfo:
        client.create_job_details({'uuid': 'emp-001'})

    assert excinfo.value.message == 'Employee code already exists.'
    assert excinfo.value.status_code == 422

def test_fallback_message_without_backend_message() -> None:
    client, _ = make_client(StubResponse(500))
    with pytest.raises(ApiError, match="Failed to save bank info."):
        client.create_bank_info({'uuid': 'emp-001'})

def test_transport_failure_becomes_api_error() -> None:
    client, _ = make_client(requests.ConnectionError("connection refused"), timeout=5.0)
    with pytest.raises(ApiError) as excinfo:
        client.create_contact_info({'uuid': 'emp-001'})
    assert excinfo.value.message == "Failed to save contact info."
    assert excinfo.value.status_code is None

def test_missing_uuid_is_a_failure() -> None:
    client, _ = make_client(StubResponse(200, {'data': {}}))
    with pytest.raises(ApiError):
        client.create_personal_info({'first_name': 'Asha'})

def test_upload_sends_multipart_file_and_returns_id() -> None:
    client, session = make_client(StubResponse(200, {'data': {'id': 77}}))

    assert client.upload_attachment('pan.pdf', b'%PDF', 'application/pdf') == 77

    method, url, kwargs = session.requests[0]
    assert url == 'http://hr.test/api/attachments'
    assert kwargs['files'] == {'file': ('pan.pdf', b'%PDF', 'application/pdf')}

def test_upload_failure_names_the_file() -> None:
    client, _ = make_client(StubResponse(413))
    with pytest.raises(ApiError, match="Failed to upload pan.pdf."):
        client.upload_attachment('pan.pdf', b'%PDF')

def test_list_master_reads_the_named_collection() -> None:
    client, session = make_client(StubResponse(200, {'data': {'leave_policies': [{'id': 3, 'name': 'Standard'}]}}))

    assert client.list_master('leave-policies') == [MasterOption(3, 'Standard')]

    _, url, kwargs = session.requests[0]
    assert url == 'http://hr.test/api/masters/leave-policies'
    assert kwargs['params'] == {'page': 1, 'limit': 1000}

def test_roles_are_not_paginated() -> None:
    client, session = make_client(StubResponse(200, {'data': {'roles': [{'id': 4, 'name': 'Engineer'}]}}))
    assert client.list_master('roles') == [MasterOption(4, 'Engineer')]
    assert session.requests[0][2]['params'] is None

def test_unknown_master_is_rejected() -> None:
    client, session = make_client()
    with pytest.raises(ValueError):
        client.list_master('planets')
    assert session.requests == []

def test_document_types_and_managers() -> None:
    client, session = make_client(
        StubResponse(200, {'data': {'document_types': [{'id': 1, 'name': 'PAN Card', 'is_mandatory': 1}]}}),
        StubResponse(200, {'data': {'employees': [{'id': 9, 'username': 'meera.k'}, {'id': 10, 'name': 'Arjun'}]}}),
    )

    assert client.list_document_types() == [DocumentType(1, 'PAN Card', is_mandatory=True)]
    assert client.list_managers(1, 2) == [MasterOption(9, 'meera.k'), MasterOption(10, 'Arjun')]
    assert session.requests[1][2]['params'] == {'company_id': 1, 'department_id': 2}

def test_complete_onboarding_posts_the_manifest() -> None:
    client, session = make_client(StubResponse(200, {'success': True}))
    body = {'uuid': 'emp-001', 'documents': [{'type_id': 1, 'document_id': 77}]}

    client.complete_onboarding(body)

    method, url, kwargs = session.requests[0]
    assert (method, url) == ('POST', 'http://hr.test/api/employees/complete')
    assert kwargs['json'] == body

def test_close_releases_the_http_session() -> None:
    client, session = make_client()
    client.close()
    assert session.closed, "Closing the client must close its requests.Session"
