# hr_onboarding/sequencer.py
"""
The onboarding step sequencer.

Five steps are walked in order. Steps 1-4 each persist one form through one
backend call; step 5 collects document uploads into a manifest and ends with
a single "complete onboarding" call. Step 1 returns the correlation id (the
employee uuid) that every later call carries.

`current_step` is the furthest step the operator may open: it only moves
forward, and only past a step that has succeeded. `active_step` is the step
on screen, which may be any step up to `current_step`. Editing an earlier
step therefore never moves `current_step` back.

A failed call leaves the session exactly as it was and hands back an `Err`
for the page to display. Calls made out of order are programming errors and
raise instead.
"""
from __future__ import annotations
import logging
import threading
from typing import Any, Generic, TypeVar, Union
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from enum import Enum

from .api_client import ApiError, DocumentType, OnboardingGateway
from .manifest import DocumentManifest
from .payloads import StepPayload
from .schema import AppSchema, OnboardingStep, FIRST_STEP, LAST_STEP

logger = logging.getLogger(__name__)

T = TypeVar('T')

# ===================================================================
# 1. RESULTS & ERRORS
# ===================================================================

class ErrorKind(str, Enum):
    VALIDATION = 'validation'
    SUBMISSION = 'submission'
    UPLOAD = 'upload'
    COMPLETION = 'completion'
    IN_FLIGHT = 'in_flight'

@dataclass(frozen=True)
class SubmitError:
    message: str
    kind: ErrorKind

@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T | None = None

@dataclass(frozen=True)
class Err:
    error: SubmitError

Result = Union[Ok[T], Err]

class SequencerError(RuntimeError):
    """A call the wizard's UI should never have been able to make."""

class MissingCorrelationIdError(SequencerError):
    pass

class StepOrderError(SequencerError):
    pass

class SessionFinishedError(SequencerError):
    pass

ALREADY_SUBMITTING_MESSAGE = "This step is already being saved. Please wait."
MISSING_DOCUMENTS_MESSAGE = "Please upload all mandatory documents before completing."

def _check_step(step: int) -> None:
    if not FIRST_STEP <= step <= LAST_STEP:
        raise ValueError(f"Unknown onboarding step: {step}")

# ===================================================================
# 2. STEP RESULT CACHE & PROGRESS
# ===================================================================

class StepResultCache:
    """Last successfully submitted payload per step. Never evicts; at most five entries."""

    def __init__(self) -> None:
        self._payloads: dict[int, Any] = {}

    def set(self, step: int, payload: Any) -> None:
        _check_step(step)
        self._payloads[step] = payload

    def payload(self, step: int) -> Any | None:
        return self._payloads.get(step)

    def get(self, step: int) -> dict[str, Any]:
        """Form values for `step`: the cached payload, else the empty defaults."""
        _check_step(step)
        payload = self._payloads.get(step)
        if payload is None:
            return AppSchema.defaults_for(step)
        return payload.to_form()

    def __getitem__(self, step: int) -> Any:
        return self._payloads[step]

    def __contains__(self, step: object) -> bool:
        return step in self._payloads

    def __len__(self) -> int:
        return len(self._payloads)

class StepState(str, Enum):
    PENDING = 'pending'
    CURRENT = 'current'
    COMPLETED = 'completed'

def step_state(step: int, completed_steps: Iterable[int], current_step: int) -> StepState:
    if step in set(completed_steps):
        return StepState.COMPLETED
    if step == current_step:
        return StepState.CURRENT
    return StepState.PENDING

def progress(completed_steps: Iterable[int], current_step: int) -> list[tuple[int, StepState]]:
    """Display state of every step. Holds no state of its own."""
    completed = set(completed_steps)
    return [(step, step_state(step, completed, current_step)) for step in OnboardingStep]

# ===================================================================
# 3. SESSION
# ===================================================================

@dataclass
class OnboardingSession:
    """Lives in memory for one visit of the onboarding page."""
    correlation_id: str | None = None
    current_step: int = FIRST_STEP
    active_step: int = FIRST_STEP
    completed_steps: set[int] = field(default_factory=set)
    step_payload: StepResultCache = field(default_factory=StepResultCache)
    manifest: DocumentManifest = field(default_factory=DocumentManifest)
    finished: bool = False

# ===================================================================
# 4. CONTROLLER
# ===================================================================

class SequencerController:
    _SUBMITTERS: dict[int, str] = {
        OnboardingStep.JOB_DETAILS: 'create_job_details',
        OnboardingStep.CONTACT: 'create_contact_info',
        OnboardingStep.BANK: 'create_bank_info',
    }

    def __init__(self, gateway: OnboardingGateway, session: OnboardingSession | None = None) -> None:
        self.gateway = gateway
        self.session = session or OnboardingSession()
        self._in_flight: set[int] = set()
        # Calls arrive from worker threads; guards and session updates take this lock
        self._lock = threading.Lock()

    # --- Guards ---
    def _ensure_open(self) -> None:
        if self.session.finished:
            raise SessionFinishedError("Onboarding is already complete.")

    def _require_correlation_id(self, step: int) -> str:
        correlation_id = self.session.correlation_id
        if not correlation_id:
            raise MissingCorrelationIdError(f"Step {step} needs the employee created by step 1.")
        return correlation_id

    def _require_reached(self, step: int) -> None:
        if step > self.session.current_step:
            raise StepOrderError(f"Step {step} is ahead of step {self.session.current_step}.")

    def is_pending(self, step: int) -> bool:
        return step in self._in_flight

    def _claim(self, step: int) -> bool:
        with self._lock:
            if step in self._in_flight:
                return False
            self._in_flight.add(step)
            return True

    def _release(self, step: int) -> None:
        with self._lock:
            self._in_flight.discard(step)

    # --- Navigation ---
    def can_go_to(self, target_step: int) -> bool:
        return (not self.session.finished) and FIRST_STEP <= target_step <= self.session.current_step

    def go_to_step(self, target_step: int) -> bool:
        """Shows a step already reached. Anything further ahead is ignored."""
        if not self.can_go_to(target_step):
            logger.debug(f"Ignoring navigation to step {target_step} (current: {self.session.current_step})")
            return False
        self.session.active_step = target_step
        return True

    def form_values(self, step: int) -> dict[str, Any]:
        """Values to pre-fill the form of `step` with."""
        return self.session.step_payload.get(step)

    def progress(self) -> list[tuple[int, StepState]]:
        return progress(self.session.completed_steps, self.session.current_step)

    # --- Steps 1-4 ---
    def submit_step(self, step: int, payload: Any) -> Result[None]:
        """
        Persists one step. For step 5 `payload` is the list of document
        types and the call completes the onboarding.
        """
        _check_step(step)
        self._ensure_open()
        if step == OnboardingStep.DOCUMENTS:
            return self.complete_onboarding(payload)

        session = self.session
        body: dict[str, Any] = payload.to_request()
        if step != OnboardingStep.PERSONAL:
            body = {'uuid': self._require_correlation_id(step), **body}
        self._require_reached(step)

        if not self._claim(step):
            return Err(SubmitError(ALREADY_SUBMITTING_MESSAGE, ErrorKind.IN_FLIGHT))

        try:
            if step == OnboardingStep.PERSONAL:
                correlation_id: str | None = self.gateway.create_personal_info(body)
            else:
                getattr(self.gateway, self._SUBMITTERS[step])(body)
                correlation_id = None
        except ApiError as e:
            logger.warning(f"Step {step} was rejected: {e.message}")
            return Err(SubmitError(e.message, ErrorKind.SUBMISSION))
        finally:
            self._release(step)

        with self._lock:
            self._record_success(step, payload)
            if correlation_id:
                # A re-posted step 1 may hand back a new employee uuid
                session.correlation_id = correlation_id
        logger.info(f"Step {step} saved for employee {session.correlation_id}; now at step {session.current_step}")
        return Ok()

    def _record_success(self, step: int, payload: StepPayload | Any) -> None:
        session = self.session
        session.step_payload.set(step, payload)
        session.completed_steps.add(step)
        if step < LAST_STEP:
            session.current_step = max(session.current_step, step + 1)
            session.active_step = step + 1

    # --- Step 5 ---
    def upload_document(self, document_type_id: int, filename: str, content: bytes,
                        content_type: str | None = None) -> Result[int]:
        """Uploads one document. A failure only clears that document type's entry."""
        self._ensure_open()
        self._require_correlation_id(OnboardingStep.DOCUMENTS)
        try:
            file_id = self.gateway.upload_attachment(filename, content, content_type)
        except ApiError as e:
            with self._lock:
                self.session.manifest.discard(document_type_id)
            logger.warning(f"Upload of {filename!r} for document type {document_type_id} failed: {e.message}")
            return Err(SubmitError(e.message, ErrorKind.UPLOAD))
        with self._lock:
            self.session.manifest.record(document_type_id, file_id)
        return Ok(file_id)

    def complete_onboarding(self, document_types: Sequence[DocumentType]) -> Result[None]:
        """Checks the manifest against the mandatory types, then completes the onboarding."""
        self._ensure_open()
        correlation_id = self._require_correlation_id(OnboardingStep.DOCUMENTS)
        self._require_reached(OnboardingStep.DOCUMENTS)

        manifest = self.session.manifest
        missing = manifest.missing_mandatory(document_types)
        if missing:
            logger.info(f"Completion blocked; missing document types: {[dt.name for dt in missing]}")
            return Err(SubmitError(MISSING_DOCUMENTS_MESSAGE, ErrorKind.VALIDATION))

        step = OnboardingStep.DOCUMENTS
        if not self._claim(step):
            return Err(SubmitError(ALREADY_SUBMITTING_MESSAGE, ErrorKind.IN_FLIGHT))

        submitted = manifest.snapshot()
        try:
            self.gateway.complete_onboarding({'uuid': correlation_id, **submitted.to_request()})
        except ApiError as e:
            logger.warning(f"Completing onboarding for {correlation_id} failed: {e.message}")
            return Err(SubmitError(e.message, ErrorKind.COMPLETION))
        finally:
            self._release(step)

        with self._lock:
            self._record_success(step, submitted)
            self.session.finished = True
        logger.info(f"Onboarding complete for employee {correlation_id}")
        return Ok()
