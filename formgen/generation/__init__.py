"""formgen generation core -- renders form definitions into code bundles.

Quick usage::

    from formgen.generation import (
        ArchivePackager, ArtifactOrganizer, GenerationOrchestrator,
        TemplateEngine, TemplateRegistry,
    )

    orchestrator = GenerationOrchestrator(
        TemplateEngine(),
        TemplateRegistry(),
        ArtifactOrganizer("./output"),
        ArchivePackager(),
    )
    job = await orchestrator.generate(form_id, revision_id, definition, options, "jane")
"""

from formgen.generation.artifacts import (
    ArtifactType,
    GeneratedArtifact,
    GenerationOptions,
    GenerationVersion,
    TemplateMetadata,
)
from formgen.generation.engine import TemplateEngine
from formgen.generation.job import (
    GenerationJob,
    JobEvent,
    JobEventKind,
    JobRepository,
    JobStatus,
)
from formgen.generation.orchestrator import ARTIFACT_FAMILIES, ArtifactFamily, GenerationOrchestrator
from formgen.generation.organizer import ArtifactOrganizer, OrganizedArtifacts, OrganizedFile
from formgen.generation.packager import ArchivePackager
from formgen.generation.registry import DEFAULT_TEMPLATES, TemplateRegistry
from formgen.generation.type_mapping import MappedTypes, map_field_type

__all__ = [
    "ARTIFACT_FAMILIES",
    "ArchivePackager",
    "ArtifactFamily",
    "ArtifactOrganizer",
    "ArtifactType",
    "DEFAULT_TEMPLATES",
    "GeneratedArtifact",
    "GenerationJob",
    "GenerationOptions",
    "GenerationOrchestrator",
    "GenerationVersion",
    "JobEvent",
    "JobEventKind",
    "JobRepository",
    "JobStatus",
    "MappedTypes",
    "OrganizedArtifacts",
    "OrganizedFile",
    "TemplateEngine",
    "TemplateMetadata",
    "TemplateRegistry",
    "map_field_type",
]
