"""Jinja2 template engine with a name-keyed compilation cache.

Templates are compiled once per name and reused.  Each cache entry also
stores a SHA-256 fingerprint of the source it was compiled from, so
compiling an existing name with different source replaces the stale entry
instead of serving it.  The cache is guarded by a lock and may be shared by
concurrent generation runs.

Every render receives the model plus these helpers:

* filters and functions: ``pascal_case``/``to_pascal_case``,
  ``camel_case``/``to_camel_case``, ``snake_case``/``to_snake_case``,
  ``pluralize``, ``singularize``
* variables: ``now`` (UTC datetime) and ``today`` (UTC date)
"""

from __future__ import annotations

import asyncio
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping

from jinja2 import Environment, StrictUndefined, Template, TemplateSyntaxError
from pydantic import BaseModel

from formgen import naming
from formgen.errors import (
    TemplateCompileError,
    TemplateNotFoundError,
    TemplateRenderError,
)
from formgen.generation.artifacts import sha256_hex
from formgen.utils import print_info

_HELPERS = {
    "pascal_case": naming.to_pascal_case,
    "camel_case": naming.to_camel_case,
    "snake_case": naming.to_snake_case,
    "pluralize": naming.pluralize,
    "singularize": naming.singularize,
}


def _build_environment() -> Environment:
    env = Environment(
        autoescape=False,
        keep_trailing_newline=True,
        trim_blocks=True,
        lstrip_blocks=True,
        undefined=StrictUndefined,
    )
    for name, func in _HELPERS.items():
        env.filters[name] = func
        env.globals[name] = func
    env.globals["to_pascal_case"] = naming.to_pascal_case
    env.globals["to_camel_case"] = naming.to_camel_case
    env.globals["to_snake_case"] = naming.to_snake_case
    return env


class TemplateEngine:
    """Compiles, caches and renders Jinja2 template sources."""

    def __init__(self, *, verbose: bool = False) -> None:
        self.env = _build_environment()
        self.verbose = verbose
        self._cache: dict[str, tuple[str, Template]] = {}
        self._lock = threading.Lock()

    # -- Compilation -------------------------------------------------------

    def compile(self, name: str, source: str) -> Template:
        """Return the compiled template for *name*, compiling if needed.

        Raises:
            TemplateCompileError: If *source* has syntax errors.
        """
        fingerprint = sha256_hex(source)
        with self._lock:
            cached = self._cache.get(name)
            if cached is not None and cached[0] == fingerprint:
                return cached[1]

            if self.verbose:
                print_info(f"  Compiling template: {name}")
            try:
                template = self.env.from_string(source)
            except TemplateSyntaxError as exc:
                diagnostic = f"line {exc.lineno}: {exc.message}"
                raise TemplateCompileError(name, [diagnostic]) from exc

            self._cache[name] = (fingerprint, template)
            return template

    def clear_cache(self) -> None:
        with self._lock:
            self._cache.clear()

    @property
    def cache_count(self) -> int:
        with self._lock:
            return len(self._cache)

    # -- Rendering ---------------------------------------------------------

    def render(
        self,
        source: str,
        model: Mapping[str, Any] | BaseModel,
        template_name: str = "unknown",
    ) -> str:
        """Compile (or reuse) *source* under *template_name* and render it.

        Raises:
            TemplateCompileError: If the source does not parse.
            TemplateRenderError: If rendering fails for any other reason.
        """
        template = self.compile(template_name, source)

        context = dict(model.model_dump() if isinstance(model, BaseModel) else model)
        now = datetime.now(timezone.utc)
        context["now"] = now
        context["today"] = now.date()

        try:
            result = template.render(context)
        except Exception as exc:
            raise TemplateRenderError(template_name, str(exc)) from exc

        if self.verbose:
            print_info(f"  Rendered {template_name} ({len(result)} chars)")
        return result

    async def render_from_file(
        self,
        template_path: str | Path,
        model: Mapping[str, Any] | BaseModel,
        template_name: str | None = None,
    ) -> str:
        """Read *template_path* and render it.

        The cache key defaults to the file name.

        Raises:
            TemplateNotFoundError: If the file does not exist.
        """
        path = Path(template_path)
        if not path.is_file():
            raise TemplateNotFoundError(str(path))
        source = await asyncio.to_thread(path.read_text, "utf-8")
        return self.render(source, model, template_name or path.name)
