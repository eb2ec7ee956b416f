"""Shared pytest fixtures for the formgen test suite.

Provides reusable fixtures for:
- Sample form fields, definitions and JSON schemas
- Generation options presets
- Wired engine / registry / organizer / packager instances
- Jobs in each lifecycle state
"""

from __future__ import annotations

import json
import uuid
from pathlib import Path
from typing import Any, Callable

import pytest

from formgen.config import Config
from formgen.forms import FormDefinition, FormField
from formgen.generation.artifacts import (
    ArtifactType,
    GeneratedArtifact,
    GenerationOptions,
    GenerationVersion,
)
from formgen.generation.engine import TemplateEngine
from formgen.generation.job import GenerationJob, JobEvent
from formgen.generation.orchestrator import GenerationOrchestrator
from formgen.generation.organizer import ArtifactOrganizer
from formgen.generation.packager import ArchivePackager
from formgen.generation.registry import TemplateRegistry


# ---------------------------------------------------------------------------
# Forms
# ---------------------------------------------------------------------------

@pytest.fixture
def sample_fields() -> list[FormField]:
    """A realistic mix of field types, including a select with options."""
    return [
        FormField(name="first_name", type="text", required=True, label="First Name", max_length=50),
        FormField(name="email", type="email", required=True),
        FormField(name="age", type="number", required=False),
        FormField(name="birth_date", type="date", required=False),
        FormField(name="subscribe", type="checkbox", required=False),
        FormField(name="plan", type="select", required=True, options=["Basic", "Pro"]),
        FormField(name="notes", type="textarea", required=False, placeholder="Anything else?"),
    ]


@pytest.fixture
def sample_definition(sample_fields: list[FormField]) -> FormDefinition:
    return FormDefinition.from_fields(sample_fields)


@pytest.fixture
def sample_form_json() -> str:
    """A form schema as stored by a form designer (camelCase keys)."""
    return json.dumps(
        {
            "fields": [
                {"name": "firstName", "type": "text", "required": True, "maxLength": 80},
                {"name": "email", "type": "email", "required": True, "placeholder": "you@example.com"},
                {"name": "country", "type": "select", "options": ["NZ", "AU", ""]},
                {"name": "startDate", "type": "date", "defaultValue": "2024-01-01"},
            ]
        }
    )


@pytest.fixture
def form_json_file(tmp_path: Path, sample_form_json: str) -> Path:
    path = tmp_path / "customer-intake.json"
    path.write_text(sample_form_json, encoding="utf-8")
    return path


# ---------------------------------------------------------------------------
# Options & identifiers
# ---------------------------------------------------------------------------

@pytest.fixture
def form_id() -> uuid.UUID:
    return uuid.uuid4()


@pytest.fixture
def revision_id() -> uuid.UUID:
    return uuid.uuid4()


@pytest.fixture
def default_options() -> GenerationOptions:
    return GenerationOptions.default("Customer Intake", "jane")


@pytest.fixture
def minimal_options() -> GenerationOptions:
    return GenerationOptions.minimal("Customer Intake", "jane")


@pytest.fixture
def full_stack_options() -> GenerationOptions:
    return GenerationOptions.full_stack("Customer Intake", "jane")


# ---------------------------------------------------------------------------
# Artifacts & jobs
# ---------------------------------------------------------------------------

@pytest.fixture
def make_artifact() -> Callable[..., GeneratedArtifact]:
    """Factory for artifacts with sensible defaults."""

    def _make(
        artifact_type: ArtifactType = ArtifactType.CSHARP_ENTITY,
        file_path: str = "Customer.cs",
        content: str = "public class Customer { }\n",
    ) -> GeneratedArtifact:
        return GeneratedArtifact.create(artifact_type, file_path, content)

    return _make


@pytest.fixture
def pending_job(form_id: uuid.UUID, revision_id: uuid.UUID, default_options: GenerationOptions) -> GenerationJob:
    job, _ = GenerationJob.create(
        form_id, revision_id, GenerationVersion.parse("1.0.0"), default_options, "jane"
    )
    return job


@pytest.fixture
def processing_job(pending_job: GenerationJob) -> GenerationJob:
    pending_job.mark_processing()
    return pending_job


# ---------------------------------------------------------------------------
# Pipeline components
# ---------------------------------------------------------------------------

@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    path = tmp_path / "output"
    path.mkdir()
    return path


@pytest.fixture
def engine() -> TemplateEngine:
    return TemplateEngine()


@pytest.fixture
def registry() -> TemplateRegistry:
    """Registry over the bundled templates."""
    return TemplateRegistry()


@pytest.fixture
def organizer(output_dir: Path) -> ArtifactOrganizer:
    return ArtifactOrganizer(output_dir)


@pytest.fixture
def packager() -> ArchivePackager:
    return ArchivePackager()


@pytest.fixture
def recorded_events() -> list[JobEvent]:
    return []


@pytest.fixture
def orchestrator(
    engine: TemplateEngine,
    registry: TemplateRegistry,
    organizer: ArtifactOrganizer,
    packager: ArchivePackager,
    recorded_events: list[JobEvent],
) -> GenerationOrchestrator:
    return GenerationOrchestrator(
        engine,
        registry,
        organizer,
        packager,
        observers=[recorded_events.append],
    )


@pytest.fixture
def config(tmp_path: Path) -> Config:
    return Config(output_dir=tmp_path / "output")


def write_template_tree(root: Path, files: dict[str, str]) -> Path:
    """Write ``relative path -> source`` templates under *root*."""
    for rel, source in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(source, encoding="utf-8")
    return root


@pytest.fixture
def template_tree(tmp_path: Path) -> Callable[[dict[str, str]], Path]:
    def _write(files: dict[str, str]) -> Path:
        return write_template_tree(tmp_path / "templates", files)

    return _write


@pytest.fixture
def model() -> dict[str, Any]:
    """A small template model for engine tests."""
    return {"entity_name": "Customer", "fields": [{"name": "email"}]}
