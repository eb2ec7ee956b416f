"""Case conversion and pluralization rules.

The single home for identifier naming.  The template engine exposes these as
helpers and the orchestrator uses them when building the template model, so
both always agree on edge cases.
"""

from __future__ import annotations

import re

# Token separators for case conversion.
_SEPARATORS = re.compile(r"[_\- ]+")

# Boundaries inside a mixed-case token: "HTTPServer" -> HTTP|Server,
# "firstName" -> first|Name, "line2Total" -> line2|Total.
_HUMP_BOUNDARY = re.compile(r"(?<=[A-Z])(?=[A-Z][a-z])|(?<=[a-z0-9])(?=[A-Z])")

_ES_PLURAL = re.compile(r"(s|x|z|ch|sh)es$", re.IGNORECASE)
_ES_SINGULAR_SUFFIX = re.compile(r"(s|x|z|ch|sh)$", re.IGNORECASE)


def _tokens(value: str) -> list[str]:
    tokens: list[str] = []
    for part in _SEPARATORS.split(value):
        if not part:
            continue
        if any(c.islower() for c in part) and any(c.isupper() for c in part):
            tokens.extend(t for t in _HUMP_BOUNDARY.split(part) if t)
        else:
            tokens.append(part)
    return tokens


# ---------------------------------------------------------------------------
# Case conversion
# ---------------------------------------------------------------------------


def to_pascal_case(value: str) -> str:
    """Convert *value* to PascalCase.

    Examples::

        to_pascal_case("first_name")  -> "FirstName"
        to_pascal_case("order-total") -> "OrderTotal"
        to_pascal_case("EMAIL")       -> "Email"
        to_pascal_case("firstName")   -> "FirstName"
    """
    if not value or not value.strip():
        return value
    return "".join(t[0].upper() + t[1:].lower() for t in _tokens(value))


def to_camel_case(value: str) -> str:
    """Convert *value* to camelCase (``"first_name"`` -> ``"firstName"``)."""
    pascal = to_pascal_case(value)
    if not pascal:
        return pascal
    return pascal[0].lower() + pascal[1:]


def to_snake_case(value: str) -> str:
    """Convert *value* to snake_case (``"FirstName"`` -> ``"first_name"``)."""
    pascal = to_pascal_case(value)
    if not pascal or not pascal.strip():
        return pascal
    chars = [pascal[0].lower()]
    for char in pascal[1:]:
        if char.isupper():
            chars.append("_")
            chars.append(char.lower())
        else:
            chars.append(char)
    return "".join(chars)


# ---------------------------------------------------------------------------
# Pluralization
# ---------------------------------------------------------------------------


def is_plural(word: str) -> bool:
    """Return True if *word* already carries a regular plural suffix."""
    lower = word.lower()
    if lower.endswith("ies") or _ES_PLURAL.search(lower):
        return True
    return lower.endswith("s") and not lower.endswith(("ss", "us", "is"))


def pluralize(word: str) -> str:
    """Pluralize an English noun using the regular suffix rules.

    ``y`` becomes ``ies``; ``s``, ``x``, ``z``, ``ch`` and ``sh`` take
    ``es``; everything else takes ``s``.  Words that already end in a
    regular plural suffix are returned unchanged.
    """
    if not word or is_plural(word):
        return word
    lower = word.lower()
    if lower.endswith("y"):
        return word[:-1] + "ies"
    if _ES_SINGULAR_SUFFIX.search(lower):
        return word + "es"
    return word + "s"


def singularize(word: str) -> str:
    """Reverse :func:`pluralize` for the regular suffix classes."""
    if not word:
        return word
    lower = word.lower()
    if lower.endswith("ies"):
        return word[:-3] + "y"
    if _ES_PLURAL.search(lower):
        return word[:-2]
    if lower.endswith("s") and not lower.endswith("ss"):
        return word[:-1]
    return word


# ---------------------------------------------------------------------------
# Entity names
# ---------------------------------------------------------------------------


def derive_entity_name(project_name: str, marker: str = "Entity") -> str:
    """Derive a code identifier from a free-form project name.

    Non-alphanumeric characters are removed; if the result does not start
    with a letter it is prefixed with *marker*.
    """
    cleaned = "".join(c for c in project_name if c.isalnum())
    if not cleaned or not cleaned[0].isalpha():
        return marker + cleaned
    return cleaned
