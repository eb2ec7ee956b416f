"""Value types for the generation pipeline.

Defines the artifact type tags, the immutable ``GeneratedArtifact`` produced
by one template render, the caller-supplied ``GenerationOptions``, the
semantic ``GenerationVersion`` stamped on every job, and the
``TemplateMetadata`` entries held by the template registry.
"""

from __future__ import annotations

import hashlib
import re
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path, PurePosixPath
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

ENTITY_NAME_TOKEN = "{EntityName}"

_VERSION_RE = re.compile(r"^(\d+)\.(\d+)\.(\d+)$")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def sha256_hex(content: str) -> str:
    """Lower-case SHA-256 hex digest of the UTF-8 encoding of *content*."""
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class ArtifactType(str, Enum):
    """Kind of file a template produces."""
    CSHARP_ENTITY = "CSharpEntity"
    CSHARP_INTERFACE = "CSharpInterface"
    CSHARP_REPOSITORY = "CSharpRepository"
    CSHARP_CONTROLLER = "CSharpController"
    CSHARP_DTO = "CSharpDto"
    CSHARP_AUTOMAPPER = "CSharpAutoMapper"
    CSHARP_VALIDATION = "CSharpValidation"
    CSHARP_UNIT_TESTS = "CSharpUnitTests"
    CSHARP_INTEGRATION_TESTS = "CSharpIntegrationTests"
    SQL_CREATE_TABLE = "SqlCreateTable"
    SQL_STORED_PROCEDURES = "SqlStoredProcedures"
    REACT_COMPONENT = "ReactComponent"
    REACT_VALIDATION = "ReactValidation"
    GITHUB_ACTIONS = "GitHubActions"
    AZURE_PIPELINE = "AzurePipeline"
    DOCKERFILE = "Dockerfile"


# ---------------------------------------------------------------------------
# Generated artifacts
# ---------------------------------------------------------------------------

class GeneratedArtifact(BaseModel):
    """One generated file.  Hash and size are derived from ``content``."""

    model_config = ConfigDict(frozen=True)

    artifact_type: ArtifactType
    file_path: str = Field(..., min_length=1, description="Relative output path, e.g. 'Customer.cs'")
    content: str
    generated_at: datetime = Field(default_factory=_utcnow)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def content_hash(self) -> str:
        return sha256_hex(self.content)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def size_bytes(self) -> int:
        return len(self.content.encode("utf-8"))

    @property
    def file_name(self) -> str:
        return PurePosixPath(self.file_path.replace("\\", "/")).name

    @property
    def file_extension(self) -> str:
        """Extension including the dot (``".cs"``), or ``""`` if there is none."""
        return PurePosixPath(self.file_name).suffix

    @classmethod
    def create(cls, artifact_type: ArtifactType, file_path: str, content: str) -> "GeneratedArtifact":
        return cls(artifact_type=artifact_type, file_path=file_path, content=content)


# ---------------------------------------------------------------------------
# Options
# ---------------------------------------------------------------------------

class GenerationOptions(BaseModel):
    """Which artifact families to produce, plus project metadata.

    Supplied by the caller and never mutated by the pipeline.  Use the
    ``default``/``minimal``/``full_stack`` presets for the common cases.
    """

    model_config = ConfigDict(frozen=True)

    # What to generate
    include_csharp_models: bool = True
    include_sql_schema: bool = True
    include_react_components: bool = True
    include_tests: bool = False
    generate_integration_tests: bool = False
    include_pipelines: bool = False

    # Project configuration
    namespace: str = Field(default="GeneratedApp", min_length=1)
    project_name: str = Field(default="GeneratedProject", min_length=1)
    author: str = Field(default="CodeGenerator")

    # Tests
    test_framework: str = Field(default="xUnit")
    use_fluent_assertions: bool = True

    # Database
    database_type: str = Field(default="SqlServer", description="SqlServer, PostgreSQL, MySQL")

    additional_imports: dict[str, str] = Field(default_factory=dict)
    custom_settings: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def default(cls, project_name: str, author: str, **overrides: Any) -> "GenerationOptions":
        """Object model, schema and UI components; no tests or pipelines."""
        return cls(
            project_name=project_name,
            namespace=project_name.replace(" ", ""),
            author=author,
            **overrides,
        )

    @classmethod
    def minimal(cls, project_name: str, author: str) -> "GenerationOptions":
        """Object model only."""
        return cls.default(
            project_name,
            author,
            include_sql_schema=False,
            include_react_components=False,
        )

    @classmethod
    def full_stack(cls, project_name: str, author: str) -> "GenerationOptions":
        """Every family, including unit and integration tests and CI pipelines."""
        return cls.default(
            project_name,
            author,
            include_tests=True,
            generate_integration_tests=True,
            include_pipelines=True,
        )


# ---------------------------------------------------------------------------
# Versioning
# ---------------------------------------------------------------------------

class GenerationVersion(BaseModel):
    """Semantic version (``MAJOR.MINOR.PATCH``) of the generator."""

    model_config = ConfigDict(frozen=True)

    major: int = Field(default=1, ge=0)
    minor: int = Field(default=0, ge=0)
    patch: int = Field(default=0, ge=0)

    @classmethod
    def parse(cls, version: str) -> "GenerationVersion":
        match = _VERSION_RE.match(version.strip())
        if not match:
            raise ValueError(f"Invalid version format: {version}")
        major, minor, patch = (int(g) for g in match.groups())
        return cls(major=major, minor=minor, patch=patch)

    def increment(self) -> "GenerationVersion":
        return GenerationVersion(major=self.major, minor=self.minor, patch=self.patch + 1)

    def increment_minor(self) -> "GenerationVersion":
        return GenerationVersion(major=self.major, minor=self.minor + 1, patch=0)

    def increment_major(self) -> "GenerationVersion":
        return GenerationVersion(major=self.major + 1, minor=0, patch=0)

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"


# ---------------------------------------------------------------------------
# Template metadata
# ---------------------------------------------------------------------------

class TemplateMetadata(BaseModel):
    """Registry entry describing one template.

    ``template_path`` is relative to the registry's template directory until
    the registry rebases it.  ``optional`` templates are skipped by the
    orchestrator when their source file is absent.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    artifact_type: ArtifactType
    template_path: Path
    output_pattern: str
    category: str = ""
    description: str = ""
    priority: int = 0
    optional: bool = False

    @field_validator("name", "output_pattern", mode="before")
    @classmethod
    def _not_blank(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            raise ValueError("must not be blank")
        return value

    @field_validator("template_path", mode="before")
    @classmethod
    def _path_not_blank(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            raise ValueError("template path must not be blank")
        return value

    def generate_file_name(self, entity_name: str) -> str:
        """Substitute *entity_name* for every ``{EntityName}`` in the pattern."""
        return self.output_pattern.replace(ENTITY_NAME_TOKEN, entity_name)
