"""Pydantic v2 models for the form definitions that drive generation.

A form definition is an ordered list of typed fields.  It is usually parsed
from the JSON schema a form designer stores (``{"fields": [...]}`` with
camelCase keys) but can also be assembled directly from ``FormField`` objects.
"""

from __future__ import annotations

import json
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from formgen.utils import print_warning

# Logical types whose fields must carry a non-empty option list.
CHOICE_TYPES = frozenset({"select", "radio"})


class FormField(BaseModel):
    """A single field in a form definition."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    name: str = Field(..., description="Field identifier, e.g. 'firstName'")
    type: str = Field(..., description="Logical field type, e.g. 'text', 'date'")
    required: bool = Field(default=False)
    label: Optional[str] = Field(default=None)
    placeholder: Optional[str] = Field(default=None)
    default_value: Optional[str] = Field(default=None, alias="defaultValue")
    min_length: Optional[int] = Field(default=None, alias="minLength")
    max_length: Optional[int] = Field(default=None, alias="maxLength")
    pattern: Optional[str] = Field(default=None)
    validation_rules: dict[str, Any] = Field(default_factory=dict, alias="validationRules")
    options: list[str] = Field(default_factory=list)

    def is_valid(self) -> bool:
        """A field needs a name and a type; choice fields also need options."""
        if not self.name.strip() or not self.type.strip():
            return False
        if self.type.lower() in CHOICE_TYPES and not self.options:
            return False
        return True


class FormDefinition(BaseModel):
    """The structure and fields of a form.  Immutable once built."""

    model_config = ConfigDict(frozen=True)

    raw_schema: str = Field(default="", description="JSON text the fields came from")
    fields: list[FormField] = Field(default_factory=list)

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------

    @classmethod
    def from_json(cls, json_schema: str) -> "FormDefinition":
        """Parse a ``{"fields": [...]}`` JSON document.

        Entries that are not objects or fail validation are skipped with a
        warning.  A document without a ``fields`` array yields no fields.

        Raises:
            ValueError: If *json_schema* is blank or not valid JSON.
        """
        if not json_schema or not json_schema.strip():
            raise ValueError("JSON schema cannot be empty")
        try:
            root = json.loads(json_schema)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Invalid JSON schema: {exc}") from exc

        raw_fields = root.get("fields") if isinstance(root, dict) else None
        fields: list[FormField] = []
        if isinstance(raw_fields, list):
            for index, entry in enumerate(raw_fields):
                field = _parse_field(entry, index)
                if field is not None:
                    fields.append(field)

        return cls(raw_schema=json_schema, fields=fields)

    @classmethod
    def from_fields(cls, fields: list[FormField]) -> "FormDefinition":
        """Build a definition from field objects, generating its JSON schema.

        Raises:
            ValueError: If *fields* is empty or any field is invalid.
        """
        if not fields:
            raise ValueError("Fields list cannot be empty")
        invalid = [f.name or "<unnamed>" for f in fields if not f.is_valid()]
        if invalid:
            raise ValueError(f"One or more fields are invalid: {', '.join(invalid)}")

        schema = {
            "fields": [
                f.model_dump(by_alias=True, exclude_none=True, exclude={"validation_rules"})
                for f in fields
            ]
        }
        return cls(raw_schema=json.dumps(schema, indent=2), fields=list(fields))

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def get_field(self, name: str) -> FormField | None:
        """Return the first field whose name matches *name* case-insensitively."""
        wanted = name.lower()
        return next((f for f in self.fields if f.name.lower() == wanted), None)

    def has_field(self, name: str) -> bool:
        return self.get_field(name) is not None


def _parse_field(entry: Any, index: int) -> FormField | None:
    if not isinstance(entry, dict):
        print_warning(f"Skipping field #{index}: expected an object")
        return None
    options = entry.get("options")
    if isinstance(options, list):
        entry = {**entry, "options": [o for o in options if isinstance(o, str) and o]}
    try:
        return FormField.model_validate(entry)
    except ValidationError as exc:
        print_warning(f"Skipping malformed field #{index}: {exc.error_count()} validation error(s)")
        return None
