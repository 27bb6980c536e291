# hr_onboarding/manifest.py
from __future__ import annotations
from typing import Any
from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from .api_client import DocumentType


@dataclass(frozen=True)
class SubmittedDocuments:
    """The manifest as it stood when onboarding was completed."""
    files: tuple[tuple[int, int], ...]

    def to_request(self) -> dict[str, Any]:
        return {'documents': [{'type_id': type_id, 'document_id': file_id} for type_id, file_id in self.files]}

    def to_form(self) -> dict[str, Any]:
        return {'documents': dict(self.files)}


class DocumentManifest:
    """
    Maps a document type id to the id of the file uploaded for it.

    Uploads run concurrently, but each one only ever touches the entry of its
    own document type.
    """

    def __init__(self) -> None:
        self._files: dict[int, int] = {}

    def record(self, type_id: int, file_id: int) -> None:
        """Stores an upload. A second upload for the same type replaces the first."""
        self._files[type_id] = file_id

    def discard(self, type_id: int) -> None:
        self._files.pop(type_id, None)

    def file_for(self, type_id: int) -> int | None:
        return self._files.get(type_id)

    def missing_mandatory(self, document_types: Iterable[DocumentType]) -> list[DocumentType]:
        return [dt for dt in document_types if dt.is_mandatory and dt.id not in self._files]

    def entries(self) -> list[dict[str, Any]]:
        return [{'type_id': type_id, 'document_id': file_id} for type_id, file_id in self._files.items()]

    def snapshot(self) -> SubmittedDocuments:
        return SubmittedDocuments(files=tuple(self._files.items()))

    def __contains__(self, type_id: object) -> bool:
        return type_id in self._files

    def __len__(self) -> int:
        return len(self._files)

    def __iter__(self) -> Iterator[int]:
        return iter(list(self._files))
