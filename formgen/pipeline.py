"""formgen composition root and command-line entry point.

``create_orchestrator`` wires the template engine, registry, organizer and
packager from a :class:`Config`.  ``main`` is the ``formgen`` console script:
it reads a form definition JSON file, runs one generation job and prints a
summary.

Usage::

    formgen form.json --project-name "Customer Intake" --author jane
    python -m formgen.pipeline form.json --no-react --tests --pipelines
"""

from __future__ import annotations

import asyncio
import sys
import uuid
from pathlib import Path
from typing import Optional, Sequence

from pydantic import ValidationError

from formgen.config import Config
from formgen.errors import FormgenError
from formgen.forms import FormDefinition
from formgen.generation.artifacts import GenerationOptions
from formgen.generation.engine import TemplateEngine
from formgen.generation.job import GenerationJob
from formgen.generation.orchestrator import GenerationOrchestrator, JobObserver
from formgen.generation.organizer import ArtifactOrganizer
from formgen.generation.packager import ArchivePackager
from formgen.generation.registry import TemplateRegistry
from formgen.naming import to_pascal_case
from formgen.utils import (
    console,
    format_bytes,
    format_duration,
    print_error,
    print_summary_table,
    save_json,
)


def create_orchestrator(
    config: Config,
    observers: Optional[list[JobObserver]] = None,
) -> GenerationOrchestrator:
    """Build a fully wired orchestrator from *config*."""
    return GenerationOrchestrator(
        TemplateEngine(verbose=config.verbose),
        TemplateRegistry(config.template_dir),
        ArtifactOrganizer(config.output_dir),
        ArchivePackager(),
        archive_dir=config.archive_dir,
        version=config.generator_version,
        observers=observers,
        verbose=config.verbose,
    )


def _job_summary(job: GenerationJob) -> dict[str, str]:
    duration = job.processing_duration.total_seconds() if job.processing_duration else 0.0
    return {
        "Job ID": str(job.id),
        "Status": job.status.value,
        "Version": str(job.version),
        "Artifacts": str(job.artifact_count),
        "Artifact size": format_bytes(job.total_artifact_size()),
        "Output folder": job.output_folder_path or "-",
        "Archive": job.archive_path or "-",
        "Archive size": format_bytes(job.archive_size_bytes or 0),
        "Duration": format_duration(duration),
    }


def main(argv: Optional[Sequence[str]] = None) -> None:
    """CLI entry point for ``formgen`` / ``python -m formgen.pipeline``."""
    import argparse

    parser = argparse.ArgumentParser(
        description="formgen -- generate C#, SQL and React code from a form definition",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  formgen form.json --project-name 'Customer Intake'\n"
            "  formgen form.json -o ./generated --no-react --tests\n"
            "  formgen form.json --pipelines --job-record job.json\n"
        ),
    )

    parser.add_argument("form", help="Path to the form definition JSON file")
    parser.add_argument(
        "--project-name",
        default=None,
        help="Project name (default: derived from the form file name)",
    )
    parser.add_argument("--namespace", default=None, help="Root C# namespace")
    parser.add_argument("--author", default="CodeGenerator", help="Author stamped on output")
    parser.add_argument(
        "--requested-by",
        default="cli",
        help="Identity recorded on the job (default: cli)",
    )
    parser.add_argument("--form-id", default=None, help="Form definition UUID (default: random)")
    parser.add_argument("--revision-id", default=None, help="Form revision UUID (default: random)")
    parser.add_argument(
        "--output", "-o",
        default=None,
        help="Output directory (default: ./output or FORMGEN_OUTPUT_DIR)",
    )
    parser.add_argument("--template-dir", default=None, help="Override template directory")
    parser.add_argument("--archive-dir", default=None, help="Where to write the ZIP archive")
    parser.add_argument("--no-csharp", action="store_true", help="Skip C# object model")
    parser.add_argument("--no-sql", action="store_true", help="Skip SQL schema")
    parser.add_argument("--no-react", action="store_true", help="Skip React components")
    parser.add_argument("--tests", action="store_true", help="Generate unit tests")
    parser.add_argument(
        "--integration-tests",
        action="store_true",
        help="Generate integration tests (implies --tests)",
    )
    parser.add_argument("--pipelines", action="store_true", help="Generate CI/CD pipelines")
    parser.add_argument("--job-record", default=None, help="Write the job record JSON here")
    parser.add_argument("--verbose", "-v", action="store_true", help="Per-template progress")

    args = parser.parse_args(argv)

    form_path = Path(args.form)
    if not form_path.is_file():
        console.print(f"[bold red]Error:[/bold red] Form definition not found: {form_path}")
        sys.exit(1)

    try:
        form_id = uuid.UUID(args.form_id) if args.form_id else uuid.uuid4()
        revision_id = uuid.UUID(args.revision_id) if args.revision_id else uuid.uuid4()
    except ValueError as exc:
        console.print(f"[bold red]Error:[/bold red] Invalid UUID: {exc}")
        sys.exit(1)

    config = Config.from_env()
    updates: dict[str, object] = {}
    if args.output:
        updates["output_dir"] = Path(args.output)
    if args.template_dir:
        updates["template_dir"] = Path(args.template_dir)
    if args.archive_dir:
        updates["archive_dir"] = Path(args.archive_dir)
    if args.verbose:
        updates["verbose"] = True
    config = config.model_copy(update=updates)
    config.ensure_directories()

    try:
        definition = FormDefinition.from_json(form_path.read_text(encoding="utf-8"))
    except ValueError as exc:
        console.print(f"[bold red]Error:[/bold red] {exc}")
        sys.exit(1)

    project_name = args.project_name or to_pascal_case(form_path.stem)
    try:
        options = GenerationOptions(
            project_name=project_name,
            namespace=args.namespace or project_name.replace(" ", ""),
            author=args.author,
            include_csharp_models=not args.no_csharp,
            include_sql_schema=not args.no_sql,
            include_react_components=not args.no_react,
            include_tests=args.tests or args.integration_tests,
            generate_integration_tests=args.integration_tests,
            include_pipelines=args.pipelines,
        )
    except ValidationError as exc:
        console.print(f"[bold red]Error:[/bold red] Invalid generation options: {exc}")
        sys.exit(1)

    orchestrator = create_orchestrator(config)
    try:
        job = asyncio.run(
            orchestrator.generate(form_id, revision_id, definition, options, args.requested_by)
        )
    except (FormgenError, OSError) as exc:
        print_error(f"Generation failed: {exc}")
        sys.exit(1)

    print_summary_table(_job_summary(job), title="Generation Summary")

    if args.job_record:
        asyncio.run(save_json(job.model_dump(mode="json"), args.job_record))
        console.print(f"[dim]Job record written to {args.job_record}[/dim]")

    console.print("[bold green]Generation completed successfully![/bold green]")


if __name__ == "__main__":
    main()
