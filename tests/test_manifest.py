# tests/test_manifest.py
from __future__ import annotations

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from hr_onboarding.api_client import DocumentType
from hr_onboarding.manifest import DocumentManifest

PAN = DocumentType(id=1, name='PAN Card', is_mandatory=True)
AADHAAR = DocumentType(id=2, name='Aadhaar Card', is_mandatory=True)
PHOTO = DocumentType(id=3, name='Photo')


def test_record_replaces_previous_file() -> None:
    manifest = DocumentManifest()
    manifest.record(PAN.id, 10)
    manifest.record(PAN.id, 11)

    assert len(manifest) == 1, "Changing a file must not add a second entry"
    assert manifest.file_for(PAN.id) == 11

def test_missing_mandatory_ignores_optional_types() -> None:
    manifest = DocumentManifest()
    manifest.record(AADHAAR.id, 20)

    assert manifest.missing_mandatory([PAN, AADHAAR, PHOTO]) == [PAN]
    manifest.record(PAN.id, 21)
    assert manifest.missing_mandatory([PAN, AADHAAR, PHOTO]) == []

def test_discard_only_touches_its_own_type() -> None:
    manifest = DocumentManifest()
    manifest.record(PAN.id, 10)
    manifest.record(PHOTO.id, 30)

    manifest.discard(PAN.id)
    manifest.discard(AADHAAR.id)  # never uploaded

    assert list(manifest) == [PHOTO.id]

def test_snapshot_is_detached_from_later_changes() -> None:
    manifest = DocumentManifest()
    manifest.record(PAN.id, 10)
    snapshot = manifest.snapshot()
    manifest.record(AADHAAR.id, 20)

    assert snapshot.to_request() == {'documents': [{'type_id': 1, 'document_id': 10}]}
    assert manifest.entries() == [{'type_id': 1, 'document_id': 10}, {'type_id': 2, 'document_id': 20}]
