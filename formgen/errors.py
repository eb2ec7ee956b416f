"""Exception hierarchy shared by every formgen subsystem."""

from __future__ import annotations


class FormgenError(Exception):
    """Base class for all errors raised by formgen."""


class JobValidationError(FormgenError, ValueError):
    """Raised when a required identifier, path, or size is missing or invalid."""


class InvalidJobStateError(FormgenError, RuntimeError):
    """Raised when an operation is not allowed in the job's current status."""

    def __init__(self, operation: str, status: str) -> None:
        self.operation = operation
        self.status = status
        super().__init__(f"Cannot {operation} a job in status '{status}'")


class TemplateLookupError(FormgenError, LookupError):
    """Raised when a template name is not registered."""

    def __init__(self, template_name: str, available: list[str]) -> None:
        self.template_name = template_name
        self.available = available
        super().__init__(
            f"Template not found: {template_name}. "
            f"Available templates: {', '.join(available) or '(none)'}"
        )

    def __str__(self) -> str:
        # LookupError/KeyError would otherwise repr() the message.
        return self.args[0]


class TemplateNotFoundError(FormgenError, FileNotFoundError):
    """Raised when a template source file does not exist on disk."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Template file not found: {path}")

    def __str__(self) -> str:
        return self.args[0]


class TemplateCompileError(FormgenError):
    """Raised when a template cannot be parsed.

    All diagnostics reported by the parser are kept in ``diagnostics`` and
    joined into the message.
    """

    def __init__(self, template_name: str, diagnostics: list[str]) -> None:
        self.template_name = template_name
        self.diagnostics = diagnostics
        super().__init__(
            f"Template '{template_name}' has syntax errors: {', '.join(diagnostics)}"
        )


class TemplateRenderError(FormgenError):
    """Raised when a compiled template fails while rendering."""

    def __init__(self, template_name: str, message: str) -> None:
        self.template_name = template_name
        super().__init__(f"Template rendering failed for '{template_name}': {message}")


class GenerationError(FormgenError):
    """Raised by the orchestrator for pipeline-level failures."""
