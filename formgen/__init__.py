"""formgen -- form-to-code generation pipeline.

Takes a form definition (an ordered list of typed fields) and produces a
packaged bundle of C# object-model code, SQL schema, and React components by
rendering Jinja2 templates against a generated model.

Quick usage::

    from formgen import Config, GenerationOptions, create_orchestrator

    orchestrator = create_orchestrator(Config(output_dir=Path("./output")))
    job = await orchestrator.generate(
        form_id, revision_id, definition,
        GenerationOptions.default("Customer Intake", "jane"),
        requested_by="jane",
    )
    print(job.archive_path)
"""

from formgen.config import Config
from formgen.errors import FormgenError
from formgen.forms import FormDefinition, FormField
from formgen.generation import (
    ArtifactType,
    GeneratedArtifact,
    GenerationJob,
    GenerationOptions,
    GenerationOrchestrator,
    JobStatus,
)
from formgen.pipeline import create_orchestrator

__version__ = "1.0.0"

__all__ = [
    "ArtifactType",
    "Config",
    "FormDefinition",
    "FormField",
    "FormgenError",
    "GeneratedArtifact",
    "GenerationJob",
    "GenerationOptions",
    "GenerationOrchestrator",
    "JobStatus",
    "create_orchestrator",
]
