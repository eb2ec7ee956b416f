"""Generation orchestrator.

Drives one generation run end to end::

    create job -> mark processing -> build template model
      -> render each enabled family's templates -> organise -> archive
      -> record output paths -> complete

Any exception after the job is created is recorded on the job with
``fail()`` and re-raised, so the job's final state and the raised error
always describe the same event.  Lifecycle events are passed synchronously
to the registered observers.
"""

from __future__ import annotations

import asyncio
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Iterable, Optional

from formgen.errors import GenerationError
from formgen.forms.models import FormDefinition, FormField
from formgen.generation.artifacts import (
    GeneratedArtifact,
    GenerationOptions,
    GenerationVersion,
)
from formgen.generation.engine import TemplateEngine
from formgen.generation.job import GenerationJob, JobEvent, JobStatus
from formgen.generation.organizer import ArtifactOrganizer
from formgen.generation.packager import ArchivePackager
from formgen.generation.registry import TemplateRegistry
from formgen.generation.type_mapping import map_field_type
from formgen.naming import (
    derive_entity_name,
    pluralize,
    to_camel_case,
    to_pascal_case,
    to_snake_case,
)
from formgen.utils import format_bytes, format_duration, print_error, print_info, print_success, print_warning

JobObserver = Callable[[JobEvent], None]


# ---------------------------------------------------------------------------
# Artifact families
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ArtifactFamily:
    """A named, ordered group of templates switched on by one option."""

    name: str
    templates: tuple[str, ...]
    enabled: Callable[[GenerationOptions], bool]
    # Names that may be missing from the registry without failing the run.
    optional: frozenset[str] = field(default_factory=frozenset)


ARTIFACT_FAMILIES: tuple[ArtifactFamily, ...] = (
    ArtifactFamily(
        name="object_model",
        templates=(
            "CSharpEntity",
            "CSharpInterface",
            "CSharpRepository",
            "CSharpController",
            "CSharpDto",
            "CSharpAutoMapper",
            "CSharpValidation",
        ),
        enabled=lambda o: o.include_csharp_models,
        optional=frozenset({"CSharpAutoMapper", "CSharpValidation"}),
    ),
    ArtifactFamily(
        name="relational_schema",
        templates=("SqlCreateTable", "SqlStoredProcs"),
        enabled=lambda o: o.include_sql_schema,
    ),
    ArtifactFamily(
        name="ui_component",
        templates=("ReactComponent", "ReactValidation"),
        enabled=lambda o: o.include_react_components,
        optional=frozenset({"ReactValidation"}),
    ),
    ArtifactFamily(
        name="tests",
        templates=("CSharpUnitTests",),
        enabled=lambda o: o.include_tests,
    ),
    ArtifactFamily(
        name="integration_tests",
        templates=("CSharpIntegrationTests",),
        enabled=lambda o: o.include_tests and o.generate_integration_tests,
    ),
    ArtifactFamily(
        name="pipelines",
        templates=("GitHubActions", "AzurePipeline", "Dockerfile"),
        enabled=lambda o: o.include_pipelines,
    ),
)


# ---------------------------------------------------------------------------
# Template model
# ---------------------------------------------------------------------------


def deduplicate_field_names(fields: Iterable[FormField]) -> list[tuple[FormField, str]]:
    """Rename repeated field names (case-insensitive) with numeric suffixes.

    Returns ``(field, original_name)`` pairs in input order.  The second
    ``email`` becomes ``email2``, the third ``email3``; a suffix already used
    by another field is skipped.
    """
    fields = list(fields)
    taken = {f.name.lower() for f in fields}
    first_seen: set[str] = set()
    result: list[tuple[FormField, str]] = []

    for form_field in fields:
        key = form_field.name.lower()
        if key not in first_seen:
            first_seen.add(key)
            result.append((form_field, form_field.name))
            continue

        suffix = 2
        while f"{key}{suffix}" in taken:
            suffix += 1
        new_name = f"{form_field.name}{suffix}"
        taken.add(new_name.lower())
        print_warning(f"Duplicate field name '{form_field.name}' renamed to '{new_name}'")
        result.append((form_field.model_copy(update={"name": new_name}), form_field.name))

    return result


def project_field(form_field: FormField, original_name: str) -> dict[str, Any]:
    """Flatten one field into the dict templates iterate over."""
    mapped = map_field_type(form_field.type, form_field.required, form_field.max_length)
    return {
        "name": form_field.name,
        "type": form_field.type,
        "required": form_field.required,
        "label": form_field.label or to_pascal_case(form_field.name),
        "placeholder": form_field.placeholder,
        "default_value": form_field.default_value,
        "min_length": form_field.min_length,
        "max_length": form_field.max_length,
        "pattern": form_field.pattern,
        "options": list(form_field.options),
        "csharp_type": mapped.csharp,
        "sql_type": mapped.sql,
        "typescript_type": mapped.typescript,
        "name_pascal": to_pascal_case(form_field.name),
        "name_camel": to_camel_case(form_field.name),
        "name_snake": to_snake_case(form_field.name),
        "was_renamed": form_field.name != original_name,
        "original_name": original_name,
    }


def build_template_model(
    definition: FormDefinition,
    entity_name: str,
    options: GenerationOptions,
    version: GenerationVersion | str = "1.0.0",
    generated_at: Optional[datetime] = None,
) -> dict[str, Any]:
    """Build the model shared by every template render in one run."""
    generated_at = generated_at or datetime.now(timezone.utc)
    fields = [
        project_field(f, original)
        for f, original in deduplicate_field_names(definition.fields)
    ]
    return {
        "entity_name": entity_name,
        "entity_name_plural": pluralize(entity_name),
        "entity_name_camel": to_camel_case(entity_name),
        "entity_name_snake": to_snake_case(entity_name),
        "namespace": options.namespace,
        "project_name": options.project_name,
        "author": options.author,
        "fields": fields,
        "generated_date": generated_at,
        "generated_date_formatted": f"{generated_at:%Y-%m-%d %H:%M:%S}",
        "version": str(version),
        "database_type": options.database_type,
        "test_framework": options.test_framework,
        "use_fluent_assertions": options.use_fluent_assertions,
        "additional_imports": dict(options.additional_imports),
        "custom_settings": dict(options.custom_settings),
    }


# ---------------------------------------------------------------------------
# GenerationOrchestrator
# ---------------------------------------------------------------------------


class GenerationOrchestrator:
    """Coordinates the engine, registry, organizer and packager for one run."""

    def __init__(
        self,
        engine: TemplateEngine,
        registry: TemplateRegistry,
        organizer: ArtifactOrganizer,
        packager: ArchivePackager,
        *,
        archive_dir: str | Path | None = None,
        version: GenerationVersion | str = "1.0.0",
        observers: Optional[list[JobObserver]] = None,
        families: tuple[ArtifactFamily, ...] = ARTIFACT_FAMILIES,
        verbose: bool = False,
    ) -> None:
        self.engine = engine
        self.registry = registry
        self.organizer = organizer
        self.packager = packager
        self.archive_dir = Path(archive_dir) if archive_dir is not None else None
        self.version = GenerationVersion.parse(version) if isinstance(version, str) else version
        self.observers: list[JobObserver] = list(observers or [])
        self.families = families
        self.verbose = verbose

    def subscribe(self, observer: JobObserver) -> None:
        self.observers.append(observer)

    def _emit(self, event: JobEvent) -> None:
        for observer in self.observers:
            observer(event)

    # -- Main entry point --------------------------------------------------

    async def generate(
        self,
        form_id: uuid.UUID,
        revision_id: uuid.UUID,
        definition: FormDefinition,
        options: GenerationOptions,
        requested_by: str,
    ) -> GenerationJob:
        """Run a full generation and return the completed job.

        Raises:
            JobValidationError: If the identifiers, options or requester are
                invalid.  No job is created in that case.
            Exception: Whatever failed during the run; the job passed to the
                observers is marked ``FAILED`` with the same message.
        """
        job, created = GenerationJob.create(form_id, revision_id, self.version, options, requested_by)
        self._emit(created)

        try:
            self._emit(job.mark_processing())
            print_info(f"Starting generation job {job.id} for form {form_id}")

            entity_name = derive_entity_name(options.project_name)
            model = build_template_model(definition, entity_name, options, self.version)
            if self.verbose:
                print_info(f"  Entity name: {entity_name} ({len(model['fields'])} field(s))")

            for family in self.families:
                if not family.enabled(options):
                    continue
                print_info(f"Generating {family.name} artifacts...")
                for template_name in family.templates:
                    artifact = await self._render_template(family, template_name, model, entity_name)
                    if artifact is not None:
                        job.add_artifact(artifact)

            if not job.artifacts:
                raise GenerationError("No artifacts were generated; enable at least one artifact family")

            print_info(
                f"Generated {job.artifact_count} artifact(s) totaling "
                f"{format_bytes(job.total_artifact_size())}"
            )

            organized = await self.organizer.organize(list(job.artifacts), options.project_name)
            destination = self.archive_dir or organized.root_path.parent
            archive_path = await self.packager.create_archive(organized.root_path, destination)
            archive_size = self.packager.archive_size(archive_path)
            print_info(f"Created archive {archive_path} ({format_bytes(archive_size)})")

            job.set_output_paths(str(organized.root_path), str(archive_path), archive_size)
            completed = job.complete()
        except asyncio.CancelledError:
            if job.status == JobStatus.PROCESSING:
                self._emit(job.fail("Generation cancelled"))
            print_error(f"Generation job {job.id} cancelled")
            raise
        except Exception as exc:
            if job.status == JobStatus.PROCESSING:
                failed = job.fail(exc)
                print_error(f"Generation job {job.id} failed: {job.error_message}")
                self._emit(failed)
            raise

        duration = job.processing_duration.total_seconds() if job.processing_duration else 0.0
        print_success(f"Generation job {job.id} completed in {format_duration(duration)}")
        self._emit(completed)
        return job

    async def _render_template(
        self,
        family: ArtifactFamily,
        template_name: str,
        model: dict[str, Any],
        entity_name: str,
    ) -> GeneratedArtifact | None:
        if template_name not in self.registry and template_name in family.optional:
            return None
        metadata = self.registry.get(template_name)
        if metadata.optional and not metadata.template_path.is_file():
            if self.verbose:
                print_info(f"  Skipping optional template {template_name} (no source file)")
            return None

        content = await self.engine.render_from_file(metadata.template_path, model, template_name)
        file_name = metadata.generate_file_name(entity_name)
        if self.verbose:
            print_info(f"  {template_name} -> {file_name}")
        return GeneratedArtifact.create(metadata.artifact_type, file_name, content)
