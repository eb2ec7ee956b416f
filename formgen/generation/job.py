"""Generation job state machine.

A ``GenerationJob`` tracks one generation request from creation to a
terminal outcome::

    PENDING -> PROCESSING -> COMPLETED
                          -> FAILED

Every transition method validates against ``VALID_TRANSITIONS`` and returns
a ``JobEvent`` describing what happened, so callers decide explicitly who
gets notified.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Optional, Protocol

from pydantic import BaseModel, ConfigDict, Field, computed_field

from formgen.errors import InvalidJobStateError, JobValidationError
from formgen.generation.artifacts import (
    ArtifactType,
    GeneratedArtifact,
    GenerationOptions,
    GenerationVersion,
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# Status and events
# ---------------------------------------------------------------------------

class JobStatus(str, Enum):
    """Lifecycle status of a generation job."""
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


VALID_TRANSITIONS: dict[JobStatus, set[JobStatus]] = {
    JobStatus.PENDING: {JobStatus.PROCESSING},
    JobStatus.PROCESSING: {JobStatus.COMPLETED, JobStatus.FAILED},
    JobStatus.COMPLETED: set(),  # terminal
    JobStatus.FAILED: set(),  # terminal
}


class JobEventKind(str, Enum):
    CREATED = "created"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class JobEvent(BaseModel):
    """A lifecycle signal emitted by a job transition."""

    model_config = ConfigDict(frozen=True)

    kind: JobEventKind
    job_id: uuid.UUID
    occurred_at: datetime = Field(default_factory=_utcnow)
    version: str = ""
    archive_path: Optional[str] = None
    error_message: Optional[str] = None


# ---------------------------------------------------------------------------
# GenerationJob
# ---------------------------------------------------------------------------

class GenerationJob(BaseModel):
    """One generation request, its accumulated artifacts and its outcome.

    Build instances through :meth:`create`; the transition methods enforce
    the state machine and raise :class:`InvalidJobStateError` on misuse.
    ``artifacts`` is a tuple, so :meth:`add_artifact` is the only way to grow it.
    """

    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    form_definition_id: uuid.UUID
    form_revision_id: uuid.UUID
    version: GenerationVersion
    options: GenerationOptions
    status: JobStatus = JobStatus.PENDING
    artifacts: tuple[GeneratedArtifact, ...] = ()

    output_folder_path: Optional[str] = None
    archive_path: Optional[str] = None
    archive_size_bytes: Optional[int] = None

    requested_at: datetime = Field(default_factory=_utcnow)
    requested_by: str
    completed_at: Optional[datetime] = None
    error_message: Optional[str] = None

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def create(
        cls,
        form_definition_id: uuid.UUID,
        form_revision_id: uuid.UUID,
        version: GenerationVersion | str | None,
        options: GenerationOptions | None,
        requested_by: str,
    ) -> tuple["GenerationJob", JobEvent]:
        """Validate the inputs and return a new ``PENDING`` job plus its created event.

        Raises:
            JobValidationError: If an identifier is the nil UUID, ``version``
                or ``options`` is missing, or ``requested_by`` is blank.
        """
        for label, value in (
            ("form_definition_id", form_definition_id),
            ("form_revision_id", form_revision_id),
        ):
            if not isinstance(value, uuid.UUID) or value.int == 0:
                raise JobValidationError(f"{label} is required and cannot be the nil UUID")
        if version is None:
            raise JobValidationError("version is required")
        if options is None:
            raise JobValidationError("options is required")
        if not requested_by or not requested_by.strip():
            raise JobValidationError("requested_by is required")

        if isinstance(version, str):
            try:
                version = GenerationVersion.parse(version)
            except ValueError as exc:
                raise JobValidationError(str(exc)) from exc

        job = cls(
            form_definition_id=form_definition_id,
            form_revision_id=form_revision_id,
            version=version,
            options=options,
            requested_by=requested_by,
        )
        return job, job._event(JobEventKind.CREATED)

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def mark_processing(self) -> JobEvent:
        self._transition(JobStatus.PROCESSING, "start processing")
        return self._event(JobEventKind.PROCESSING)

    def add_artifact(self, artifact: GeneratedArtifact) -> None:
        """Append *artifact*; only legal while the job is processing."""
        if self.status != JobStatus.PROCESSING:
            raise InvalidJobStateError("add artifacts to", self.status.value)
        self.artifacts = (*self.artifacts, artifact)

    def set_output_paths(self, output_folder: str, archive_path: str, archive_size: int) -> None:
        """Record where the organised folder and archive were written.  No state change."""
        if not output_folder or not str(output_folder).strip():
            raise JobValidationError("output_folder is required")
        if not archive_path or not str(archive_path).strip():
            raise JobValidationError("archive_path is required")
        if archive_size <= 0:
            raise JobValidationError(f"archive_size must be positive, got {archive_size}")
        self.output_folder_path = str(output_folder)
        self.archive_path = str(archive_path)
        self.archive_size_bytes = archive_size

    def complete(self) -> JobEvent:
        self._transition(JobStatus.COMPLETED, "complete")
        self.completed_at = _utcnow()
        return self._event(JobEventKind.COMPLETED, archive_path=self.archive_path)

    def fail(self, error: BaseException | str) -> JobEvent:
        """Record *error* and move to ``FAILED``."""
        self._transition(JobStatus.FAILED, "fail")
        if isinstance(error, BaseException):
            message = str(error) or type(error).__name__
        else:
            message = error
        self.completed_at = _utcnow()
        self.error_message = message
        return self._event(JobEventKind.FAILED, error_message=message)

    def _transition(self, target: JobStatus, operation: str) -> None:
        if target not in VALID_TRANSITIONS[self.status]:
            raise InvalidJobStateError(operation, self.status.value)
        self.status = target

    def _event(self, kind: JobEventKind, **extra: Optional[str]) -> JobEvent:
        return JobEvent(kind=kind, job_id=self.id, version=str(self.version), **extra)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @computed_field  # type: ignore[prop-decorator]
    @property
    def processing_duration(self) -> Optional[timedelta]:
        if self.completed_at is None:
            return None
        return self.completed_at - self.requested_at

    @computed_field  # type: ignore[prop-decorator]
    @property
    def artifact_count(self) -> int:
        return len(self.artifacts)

    @property
    def is_terminal(self) -> bool:
        return not VALID_TRANSITIONS[self.status]

    def total_artifact_size(self) -> int:
        """Sum of the UTF-8 byte sizes of every artifact."""
        return sum(a.size_bytes for a in self.artifacts)

    def artifacts_by_type(self, artifact_type: ArtifactType) -> list[GeneratedArtifact]:
        return [a for a in self.artifacts if a.artifact_type == artifact_type]


# ---------------------------------------------------------------------------
# Persistence contract
# ---------------------------------------------------------------------------

class JobRepository(Protocol):
    """Storage for finished jobs.  Implemented outside this package."""

    async def add(self, job: GenerationJob) -> None: ...

    async def get(self, job_id: uuid.UUID) -> GenerationJob | None: ...

    async def list_for_form(self, form_definition_id: uuid.UUID) -> list[GenerationJob]: ...

    async def recent(self, count: int = 10) -> list[GenerationJob]: ...
