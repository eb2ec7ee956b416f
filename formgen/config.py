"""formgen configuration.

Centralised, typed configuration for the generation pipeline. Settings use
Pydantic v2 models so they are validated at construction time and can be
serialised to/from JSON or read from environment variables.
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator

DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "generation" / "templates"

_VERSION_RE = re.compile(r"^\d+\.\d+\.\d+$")


class Config(BaseModel):
    """Global formgen configuration.

    Instances are typically created once by the CLI entry point (or by the
    host application) and handed to :func:`formgen.pipeline.create_orchestrator`.
    """

    template_dir: Path = Field(
        default=DEFAULT_TEMPLATE_DIR, description="Root directory of the Jinja2 template sources"
    )
    output_dir: Path = Field(
        default=Path("./output"), description="Base directory for organised project folders"
    )
    archive_dir: Path | None = Field(
        default=None,
        description="Where archives are written; defaults to the organised root's parent",
    )
    generator_version: str = Field(default="1.0.0", description="Version stamped on every job")
    verbose: bool = Field(default=False, description="Print per-template progress lines")

    @field_validator("generator_version")
    @classmethod
    def _check_version(cls, value: str) -> str:
        if not _VERSION_RE.match(value):
            raise ValueError(f"Invalid version format: {value}")
        return value

    # ------------------------------------------------------------------
    # Derived paths
    # ------------------------------------------------------------------

    @property
    def resolved_archive_dir(self) -> Path:
        """Directory that receives archives (``archive_dir`` or ``output_dir``)."""
        return self.archive_dir if self.archive_dir is not None else self.output_dir

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    def save(self, path: Path) -> Path:
        """Persist the configuration to a JSON file and return its path."""
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.model_dump_json(indent=2), encoding="utf-8")
        return path

    @classmethod
    def load(cls, path: Path) -> "Config":
        """Load a previously-saved configuration from JSON."""
        raw = Path(path).read_text(encoding="utf-8")
        return cls.model_validate_json(raw)

    @classmethod
    def from_env(cls) -> "Config":
        """Build a ``Config`` from environment variables.

        Recognised variables (all optional):
            FORMGEN_TEMPLATE_DIR, FORMGEN_OUTPUT_DIR, FORMGEN_ARCHIVE_DIR,
            FORMGEN_VERSION, FORMGEN_VERBOSE.
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("FORMGEN_TEMPLATE_DIR"):
            kwargs["template_dir"] = Path(os.environ["FORMGEN_TEMPLATE_DIR"])
        if os.environ.get("FORMGEN_OUTPUT_DIR"):
            kwargs["output_dir"] = Path(os.environ["FORMGEN_OUTPUT_DIR"])
        if os.environ.get("FORMGEN_ARCHIVE_DIR"):
            kwargs["archive_dir"] = Path(os.environ["FORMGEN_ARCHIVE_DIR"])
        if os.environ.get("FORMGEN_VERSION"):
            kwargs["generator_version"] = os.environ["FORMGEN_VERSION"]
        verbose = os.environ.get("FORMGEN_VERBOSE", "").strip().lower()
        kwargs["verbose"] = verbose in ("1", "true", "yes", "on")
        return cls(**kwargs)

    def ensure_directories(self) -> None:
        """Create the output and archive directories."""
        for directory in (self.output_dir, self.resolved_archive_dir):
            directory.mkdir(parents=True, exist_ok=True)
