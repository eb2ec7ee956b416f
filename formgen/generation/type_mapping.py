"""Mapping of logical form-field types onto the three target type systems.

``TYPE_TABLE`` is the single source of truth: each logical type maps to a
row naming its C# type, SQL column type and TypeScript type.  Rows flagged
``sized`` take their SQL length from the field's ``max_length``.
"""

from __future__ import annotations

from typing import NamedTuple, Optional

DEFAULT_TEXT_LENGTH = 255


class TypeRow(NamedTuple):
    csharp: str
    sql: str
    typescript: str
    sized: bool = False


class MappedTypes(NamedTuple):
    csharp: str
    sql: str
    typescript: str


_TEXT = TypeRow("string", "NVARCHAR({length})", "string", sized=True)
_CHOICE = TypeRow("string", "NVARCHAR(100)", "string")
_DECIMAL = TypeRow("decimal", "DECIMAL(18,2)", "number")
_BOOLEAN = TypeRow("bool", "BIT", "boolean")

TYPE_TABLE: dict[str, TypeRow] = {
    "text": _TEXT,
    "email": _TEXT,
    "url": _TEXT,
    "tel": _TEXT,
    "textarea": TypeRow("string", "NVARCHAR(MAX)", "string"),
    "number": TypeRow("int", "INT", "number"),
    "decimal": _DECIMAL,
    "currency": _DECIMAL,
    "date": TypeRow("DateOnly", "DATE", "Date"),
    "datetime": TypeRow("DateTime", "DATETIME", "Date"),
    "time": TypeRow("TimeSpan", "TIME", "string"),
    "boolean": _BOOLEAN,
    "checkbox": _BOOLEAN,
    "select": _CHOICE,
    "radio": _CHOICE,
    "file": TypeRow("string", "NVARCHAR(500)", "File"),
}

FALLBACK_ROW = TypeRow("string", f"NVARCHAR({DEFAULT_TEXT_LENGTH})", "string")

# C# reference types that are nullable without a "?" marker.
NULLABLE_BY_DEFAULT = frozenset({"string"})


def _row(logical_type: str) -> TypeRow:
    return TYPE_TABLE.get((logical_type or "").strip().lower(), FALLBACK_ROW)


def map_to_csharp_type(logical_type: str, required: bool) -> str:
    """C# type for a field; non-string types get ``?`` when optional."""
    csharp = _row(logical_type).csharp
    if not required and csharp not in NULLABLE_BY_DEFAULT:
        return csharp + "?"
    return csharp


def map_to_sql_type(logical_type: str, max_length: Optional[int] = None) -> str:
    """SQL Server column type; sized text uses *max_length* or 255."""
    row = _row(logical_type)
    if row.sized:
        length = max_length if max_length and max_length > 0 else DEFAULT_TEXT_LENGTH
        return row.sql.format(length=length)
    return row.sql


def map_to_typescript_type(logical_type: str) -> str:
    return _row(logical_type).typescript


def map_field_type(
    logical_type: str, required: bool, max_length: Optional[int] = None
) -> MappedTypes:
    """Map one field to its C#, SQL and TypeScript types."""
    return MappedTypes(
        csharp=map_to_csharp_type(logical_type, required),
        sql=map_to_sql_type(logical_type, max_length),
        typescript=map_to_typescript_type(logical_type),
    )
