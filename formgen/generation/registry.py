"""Template registry.

A fixed catalogue of :class:`TemplateMetadata` keyed by template name,
built once from ``DEFAULT_TEMPLATES`` (or a caller-supplied list) and
read-only afterwards.  Source paths are rebased onto the registry's
template directory at construction time.
"""

from __future__ import annotations

from collections import Counter
from pathlib import Path
from types import MappingProxyType
from typing import Iterable, NamedTuple, Optional

from formgen.config import DEFAULT_TEMPLATE_DIR
from formgen.errors import TemplateLookupError
from formgen.generation.artifacts import ArtifactType, TemplateMetadata
from formgen.utils import print_success, print_warning


def _entry(
    name: str,
    artifact_type: ArtifactType,
    template_path: str,
    output_pattern: str,
    category: str,
    description: str,
    priority: int,
    optional: bool = False,
) -> TemplateMetadata:
    return TemplateMetadata(
        name=name,
        artifact_type=artifact_type,
        template_path=Path(template_path),
        output_pattern=output_pattern,
        category=category,
        description=description,
        priority=priority,
        optional=optional,
    )


# ---------------------------------------------------------------------------
# Built-in catalogue
# ---------------------------------------------------------------------------

DEFAULT_TEMPLATES: tuple[TemplateMetadata, ...] = (
    # C# object model
    _entry("CSharpEntity", ArtifactType.CSHARP_ENTITY, "CSharp/Entity.cs.j2",
           "{EntityName}.cs", "CSharp",
           "Domain entity class with properties and factory method", 1),
    _entry("CSharpInterface", ArtifactType.CSHARP_INTERFACE, "CSharp/Interface.cs.j2",
           "I{EntityName}Repository.cs", "CSharp",
           "Repository interface for the entity", 2),
    _entry("CSharpRepository", ArtifactType.CSHARP_REPOSITORY, "CSharp/Repository.cs.j2",
           "{EntityName}Repository.cs", "CSharp",
           "EF Core repository implementation", 3),
    _entry("CSharpController", ArtifactType.CSHARP_CONTROLLER, "CSharp/Controller.cs.j2",
           "{EntityName}Controller.cs", "CSharp",
           "ASP.NET Core API controller with CRUD endpoints", 4),
    _entry("CSharpDto", ArtifactType.CSHARP_DTO, "CSharp/Dto.cs.j2",
           "{EntityName}Dtos.cs", "CSharp",
           "Data transfer objects for API requests and responses", 5),
    _entry("CSharpAutoMapper", ArtifactType.CSHARP_AUTOMAPPER, "CSharp/MappingProfile.cs.j2",
           "{EntityName}MappingProfile.cs", "CSharp",
           "AutoMapper profile between entity and DTOs", 6, optional=True),
    _entry("CSharpValidation", ArtifactType.CSHARP_VALIDATION, "CSharp/Validator.cs.j2",
           "{EntityName}Validator.cs", "CSharp",
           "FluentValidation validator for the create DTO", 7, optional=True),
    # SQL schema
    _entry("SqlCreateTable", ArtifactType.SQL_CREATE_TABLE, "Sql/CreateTable.sql.j2",
           "Create{EntityName}Table.sql", "SQL",
           "CREATE TABLE script with indexes", 10),
    _entry("SqlStoredProcs", ArtifactType.SQL_STORED_PROCEDURES, "Sql/StoredProcs.sql.j2",
           "{EntityName}StoredProcedures.sql", "SQL",
           "CRUD stored procedures", 11),
    # React UI
    _entry("ReactComponent", ArtifactType.REACT_COMPONENT, "React/FormComponent.tsx.j2",
           "{EntityName}Form.tsx", "React",
           "React form component with TypeScript", 20),
    _entry("ReactValidation", ArtifactType.REACT_VALIDATION, "React/ValidationSchema.ts.j2",
           "{EntityName}Validation.ts", "React",
           "Yup validation schema for the form", 21, optional=True),
    # Tests
    _entry("CSharpUnitTests", ArtifactType.CSHARP_UNIT_TESTS, "Tests/UnitTests.cs.j2",
           "{EntityName}Tests.cs", "Tests",
           "Unit tests for the entity factory and validator", 30),
    _entry("CSharpIntegrationTests", ArtifactType.CSHARP_INTEGRATION_TESTS,
           "Tests/IntegrationTests.cs.j2",
           "{EntityName}IntegrationTests.cs", "Tests",
           "API integration tests against the controller", 31),
    # Pipelines
    _entry("GitHubActions", ArtifactType.GITHUB_ACTIONS, "Pipelines/GitHubActions.yml.j2",
           "build-{EntityName}.yml", "Pipelines",
           "GitHub Actions build and test workflow", 40),
    _entry("AzurePipeline", ArtifactType.AZURE_PIPELINE, "Pipelines/AzurePipeline.yml.j2",
           "azure-pipelines-{EntityName}.yml", "Pipelines",
           "Azure DevOps build pipeline", 41),
    _entry("Dockerfile", ArtifactType.DOCKERFILE, "Pipelines/Dockerfile.j2",
           "Dockerfile", "Pipelines",
           "Multi-stage Dockerfile for the API", 42),
)


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------

class TemplateValidationResult(NamedTuple):
    is_valid: bool
    missing: list[str]


class TemplateStatistics(NamedTuple):
    total: int
    by_category: dict[str, int]
    categories: list[str]


# ---------------------------------------------------------------------------
# TemplateRegistry
# ---------------------------------------------------------------------------


class TemplateRegistry:
    """Read-only catalogue of templates keyed by name."""

    def __init__(
        self,
        template_dir: str | Path | None = None,
        entries: Iterable[TemplateMetadata] = DEFAULT_TEMPLATES,
    ) -> None:
        self.template_dir = Path(template_dir) if template_dir is not None else DEFAULT_TEMPLATE_DIR
        templates: dict[str, TemplateMetadata] = {}
        for entry in entries:
            self._register(templates, entry)
        self._templates = MappingProxyType(templates)

    def _register(self, templates: dict[str, TemplateMetadata], entry: TemplateMetadata) -> None:
        if entry.name in templates:
            print_warning(f"Template already registered: {entry.name}. Overwriting.")
        path = entry.template_path
        if not path.is_absolute():
            entry = entry.model_copy(update={"template_path": self.template_dir / path})
        templates[entry.name] = entry

    # -- Lookups -----------------------------------------------------------

    def get(self, name: str) -> TemplateMetadata:
        """Return the entry for *name*.

        Raises:
            TemplateLookupError: If *name* is not registered; the message
                lists every registered name.
        """
        try:
            return self._templates[name]
        except KeyError:
            raise TemplateLookupError(name, list(self._templates)) from None

    def by_category(self, category: str) -> list[TemplateMetadata]:
        """All templates in *category* (case-insensitive), ordered by priority."""
        wanted = category.lower()
        matches = [t for t in self._templates.values() if t.category.lower() == wanted]
        return sorted(matches, key=lambda t: t.priority)

    def all_templates(self) -> list[TemplateMetadata]:
        return sorted(self._templates.values(), key=lambda t: t.priority)

    def exists(self, name: str) -> bool:
        return name in self._templates

    def names(self, category: Optional[str] = None) -> list[str]:
        if not category or not category.strip():
            return list(self._templates)
        return [t.name for t in self.by_category(category)]

    def __contains__(self, name: object) -> bool:
        return name in self._templates

    def __len__(self) -> int:
        return len(self._templates)

    # -- Diagnostics -------------------------------------------------------

    def validate(self) -> TemplateValidationResult:
        """Report every entry whose source file is missing.  Never raises."""
        missing: list[str] = []
        for template in self._templates.values():
            if not template.template_path.is_file():
                missing.append(str(template.template_path))
                print_warning(f"Template file not found: {template.template_path}")

        if missing:
            print_warning(
                f"Template validation failed. Missing {len(missing)} template file(s)"
            )
        else:
            print_success(f"All {len(self._templates)} templates validated successfully")
        return TemplateValidationResult(is_valid=not missing, missing=missing)

    def statistics(self) -> TemplateStatistics:
        counts = Counter(t.category for t in self._templates.values())
        return TemplateStatistics(
            total=len(self._templates),
            by_category=dict(sorted(counts.items())),
            categories=sorted(counts),
        )
