"""Writes generated artifacts into a layered project folder.

Each artifact type has a fixed destination folder (``ARTIFACT_FOLDERS``) and
a README category (``ARTIFACT_CATEGORIES``).  Both tables are checked against
:class:`ArtifactType` at import time so a new type cannot be left unmapped.
Besides the artifacts, the organizer writes a ``README.md`` manifest and a
``.gitignore`` tuned to the generated .NET/React stack.
"""

from __future__ import annotations

import asyncio
import shutil
from datetime import datetime, timezone
from pathlib import Path, PurePosixPath
from typing import Any

from pydantic import BaseModel, Field

from formgen.generation.artifacts import ArtifactType, GeneratedArtifact
from formgen.utils import (
    format_bytes,
    print_info,
    print_warning,
    sanitize_folder_name,
    write_text_file,
)

# ---------------------------------------------------------------------------
# Mapping tables
# ---------------------------------------------------------------------------

ARTIFACT_FOLDERS: dict[ArtifactType, PurePosixPath] = {
    ArtifactType.CSHARP_ENTITY: PurePosixPath("CSharp/Domain/Entities"),
    ArtifactType.CSHARP_INTERFACE: PurePosixPath("CSharp/Domain/Interfaces"),
    ArtifactType.CSHARP_REPOSITORY: PurePosixPath("CSharp/Infrastructure/Repositories"),
    ArtifactType.CSHARP_CONTROLLER: PurePosixPath("CSharp/Web/Controllers"),
    ArtifactType.CSHARP_DTO: PurePosixPath("CSharp/Application/DTOs"),
    ArtifactType.CSHARP_AUTOMAPPER: PurePosixPath("CSharp/Application/Mappings"),
    ArtifactType.CSHARP_VALIDATION: PurePosixPath("CSharp/Application/Validators"),
    ArtifactType.CSHARP_UNIT_TESTS: PurePosixPath("Tests/UnitTests"),
    ArtifactType.CSHARP_INTEGRATION_TESTS: PurePosixPath("Tests/IntegrationTests"),
    ArtifactType.SQL_CREATE_TABLE: PurePosixPath("SQL/Tables"),
    ArtifactType.SQL_STORED_PROCEDURES: PurePosixPath("SQL/StoredProcedures"),
    ArtifactType.REACT_COMPONENT: PurePosixPath("React/Components"),
    ArtifactType.REACT_VALIDATION: PurePosixPath("React/Validation"),
    ArtifactType.GITHUB_ACTIONS: PurePosixPath(".github/workflows"),
    ArtifactType.AZURE_PIPELINE: PurePosixPath("Pipelines"),
    ArtifactType.DOCKERFILE: PurePosixPath("."),  # project root
}

CSHARP_FILES = "C# Files"
TEST_FILES = "Test Files"
SQL_SCRIPTS = "SQL Scripts"
REACT_FILES = "React Files"
CICD_FILES = "CI/CD Files"

ARTIFACT_CATEGORIES: dict[ArtifactType, str] = {
    ArtifactType.CSHARP_ENTITY: CSHARP_FILES,
    ArtifactType.CSHARP_INTERFACE: CSHARP_FILES,
    ArtifactType.CSHARP_REPOSITORY: CSHARP_FILES,
    ArtifactType.CSHARP_CONTROLLER: CSHARP_FILES,
    ArtifactType.CSHARP_DTO: CSHARP_FILES,
    ArtifactType.CSHARP_AUTOMAPPER: CSHARP_FILES,
    ArtifactType.CSHARP_VALIDATION: CSHARP_FILES,
    ArtifactType.CSHARP_UNIT_TESTS: TEST_FILES,
    ArtifactType.CSHARP_INTEGRATION_TESTS: TEST_FILES,
    ArtifactType.SQL_CREATE_TABLE: SQL_SCRIPTS,
    ArtifactType.SQL_STORED_PROCEDURES: SQL_SCRIPTS,
    ArtifactType.REACT_COMPONENT: REACT_FILES,
    ArtifactType.REACT_VALIDATION: REACT_FILES,
    ArtifactType.GITHUB_ACTIONS: CICD_FILES,
    ArtifactType.AZURE_PIPELINE: CICD_FILES,
    ArtifactType.DOCKERFILE: CICD_FILES,
}


def _check_total(table: dict[ArtifactType, Any], label: str) -> None:
    missing = [t.value for t in ArtifactType if t not in table]
    if missing:
        raise RuntimeError(f"{label} has no entry for artifact type(s): {', '.join(missing)}")


_check_total(ARTIFACT_FOLDERS, "ARTIFACT_FOLDERS")
_check_total(ARTIFACT_CATEGORIES, "ARTIFACT_CATEGORIES")

GITIGNORE_CONTENT = """\
# Build results
bin/
obj/
*.user
*.suo
TestResults/
coverage/

# IDE
.vs/
.vscode/
.idea/

# Node modules (for React)
node_modules/
dist/

# Logs
*.log
"""


# ---------------------------------------------------------------------------
# Result models
# ---------------------------------------------------------------------------

class OrganizedFile(BaseModel):
    artifact_type: ArtifactType
    full_path: Path
    file_name: str
    size_bytes: int


class OrganizedArtifacts(BaseModel):
    """Organised project root plus every artifact file written under it."""

    root_path: Path
    files: list[OrganizedFile] = Field(default_factory=list)

    @property
    def total_size(self) -> int:
        return sum(f.size_bytes for f in self.files)


# ---------------------------------------------------------------------------
# ArtifactOrganizer
# ---------------------------------------------------------------------------


class ArtifactOrganizer:
    """Lays generated artifacts out under ``<base_output_path>/<project>``."""

    def __init__(self, base_output_path: str | Path) -> None:
        self.base_output_path = Path(base_output_path)

    async def organize(
        self,
        artifacts: list[GeneratedArtifact],
        project_name: str,
    ) -> OrganizedArtifacts:
        """Write *artifacts* plus the README and .gitignore manifests.

        An existing project folder is removed first, so the folder holds only
        this run's output.

        Args:
            artifacts: Rendered artifacts, in generation order.
            project_name: Free-form project name; sanitised into the root
                folder name.

        Returns:
            The resolved root path and one ``OrganizedFile`` per artifact
            written.
        """
        root = (self.base_output_path / sanitize_folder_name(project_name)).resolve()

        targets: list[tuple[GeneratedArtifact, Path]] = []
        for artifact in artifacts:
            folder = ARTIFACT_FOLDERS.get(artifact.artifact_type)
            if folder is None:
                print_warning(f"No folder mapping for {artifact.artifact_type}; skipping {artifact.file_path}")
                continue
            targets.append((artifact, root / folder))

        await _clear_root(root)
        root.mkdir(parents=True, exist_ok=True)
        for directory in sorted({folder for _, folder in targets}):
            directory.mkdir(parents=True, exist_ok=True)

        files: list[OrganizedFile] = []
        for artifact, folder in targets:
            full_path = folder / artifact.file_name
            await write_text_file(full_path, artifact.content)
            files.append(
                OrganizedFile(
                    artifact_type=artifact.artifact_type,
                    full_path=full_path,
                    file_name=artifact.file_name,
                    size_bytes=artifact.size_bytes,
                )
            )

        await write_text_file(root / "README.md", build_readme(root, files, project_name))
        await write_text_file(root / ".gitignore", GITIGNORE_CONTENT)

        print_info(f"Organised {len(files)} file(s) under {root}")
        return OrganizedArtifacts(root_path=root, files=files)


async def _clear_root(root: Path) -> None:
    if root.is_dir():
        print_info(f"Replacing previous output in {root}")
        await asyncio.to_thread(shutil.rmtree, root)
    elif root.exists():
        await asyncio.to_thread(root.unlink)


# ---------------------------------------------------------------------------
# README synthesis
# ---------------------------------------------------------------------------


def build_readme(
    root: Path,
    files: list[OrganizedFile],
    project_name: str,
    generated_at: datetime | None = None,
) -> str:
    """Render the README manifest for an organised project."""
    generated_at = generated_at or datetime.now(timezone.utc)
    total = sum(f.size_bytes for f in files)

    lines: list[str] = [
        f"# Generated Code for {project_name}",
        "",
        f"**Generated on:** {generated_at:%Y-%m-%d %H:%M:%S} UTC",
        f"**Total Files:** {len(files)}",
        f"**Total Size:** {format_bytes(total)}",
        "",
        "## File Structure",
        "",
        "```",
        f"{root.name}/",
        *render_tree([f.full_path.relative_to(root) for f in files]),
        "```",
        "",
        "## Files Generated",
        "",
    ]

    grouped: dict[str, list[OrganizedFile]] = {}
    for f in files:
        grouped.setdefault(ARTIFACT_CATEGORIES.get(f.artifact_type, "Other Files"), []).append(f)

    for category in sorted(grouped):
        lines.append(f"### {category}")
        lines.append("")
        for f in sorted(grouped[category], key=lambda f: f.file_name):
            lines.append(f"- **{f.file_name}** ({format_bytes(f.size_bytes)})")
        lines.append("")

    lines += [
        "## Next Steps",
        "",
        "1. Review the generated code",
        "2. Adjust namespaces if needed",
        "3. Add to your solution",
        "4. Run and test",
        "",
        "## Important Notes",
        "",
        "- This code was generated from a form definition",
        "- Review for your specific requirements",
        "- Add error handling as needed",
        "- Customize validation rules",
        "- Add authentication/authorization",
        "",
    ]
    return "\n".join(lines)


def render_tree(paths: list[Path]) -> list[str]:
    """Draw relative *paths* as a box-drawing tree, directories first."""
    tree: dict[str, Any] = {}
    for path in paths:
        node = tree
        for part in path.parts[:-1]:
            node = node.setdefault(part + "/", {})
        node.setdefault(path.parts[-1], None)

    lines: list[str] = []

    def walk(node: dict[str, Any], prefix: str) -> None:
        entries = sorted(node.items(), key=lambda kv: (kv[1] is None, kv[0]))
        for index, (name, child) in enumerate(entries):
            last = index == len(entries) - 1
            lines.append(f"{prefix}{'└── ' if last else '├── '}{name}")
            if child is not None:
                walk(child, prefix + ("    " if last else "│   "))

    walk(tree, "")
    return lines
