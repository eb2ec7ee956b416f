"""Unit tests for the Jinja2 template engine (formgen.generation.engine).

Tests cover:
- Rendering with naming helpers and the ``now``/``today`` variables
- Compilation cache: reuse, fingerprint refresh, clearing, concurrent access
- Compile, render and file-not-found errors
"""

from __future__ import annotations

import asyncio
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from pathlib import Path
from typing import Any
from unittest.mock import patch

import pytest
from pydantic import BaseModel

from formgen.errors import TemplateCompileError, TemplateNotFoundError, TemplateRenderError
from formgen.generation.engine import TemplateEngine


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


class TestRender:
    @pytest.mark.unit
    def test_renders_model_values(self, engine: TemplateEngine, model: dict[str, Any]):
        result = engine.render("class {{ entity_name }} {}", model)
        assert result == "class Customer {}"

    @pytest.mark.unit
    def test_naming_filters(self, engine: TemplateEngine):
        source = "{{ 'first_name' | pascal_case }} {{ 'first_name' | camel_case }} {{ 'FirstName' | snake_case }}"
        assert engine.render(source, {}) == "FirstName firstName first_name"

    @pytest.mark.unit
    def test_naming_functions(self, engine: TemplateEngine):
        source = "{{ to_pascal_case('order-total') }} {{ pluralize('Category') }} {{ singularize('Boxes') }}"
        assert engine.render(source, {}) == "OrderTotal Categories Box"

    @pytest.mark.unit
    def test_loops_over_fields(self, engine: TemplateEngine, model: dict[str, Any]):
        source = "{% for f in fields %}{{ f.name | pascal_case }};{% endfor %}"
        assert engine.render(source, model) == "Email;"

    @pytest.mark.unit
    def test_now_and_today_injected(self, engine: TemplateEngine):
        before = datetime.now(timezone.utc)
        result = engine.render("{{ now.isoformat() }}|{{ today.isoformat() }}", {})
        now_text, today_text = result.split("|")
        assert datetime.fromisoformat(now_text) >= before
        assert today_text == datetime.fromisoformat(now_text).date().isoformat()

    @pytest.mark.unit
    def test_accepts_pydantic_model(self, engine: TemplateEngine):
        class Model(BaseModel):
            entity_name: str

        assert engine.render("{{ entity_name }}", Model(entity_name="Order")) == "Order"

    @pytest.mark.unit
    def test_trailing_newline_kept(self, engine: TemplateEngine):
        assert engine.render("x\n", {}) == "x\n"

    @pytest.mark.unit
    def test_no_html_escaping(self, engine: TemplateEngine):
        assert engine.render("{{ v }}", {"v": "List<string> & more"}) == "List<string> & more"

    @pytest.mark.unit
    def test_verbose_reports_progress(self):
        engine = TemplateEngine(verbose=True)
        with patch("formgen.generation.engine.print_info") as mock_info:
            engine.render("x", {}, "Tiny")
        assert mock_info.call_count == 2


# ---------------------------------------------------------------------------
# Cache
# ---------------------------------------------------------------------------


class TestCache:
    @pytest.mark.unit
    def test_same_name_same_source_reuses_template(self, engine: TemplateEngine):
        first = engine.compile("A", "{{ x }}")
        second = engine.compile("A", "{{ x }}")
        assert first is second
        assert engine.cache_count == 1

    @pytest.mark.unit
    def test_changed_source_recompiles(self, engine: TemplateEngine):
        assert engine.render("one", {}, "A") == "one"
        assert engine.render("two", {}, "A") == "two"
        assert engine.cache_count == 1

    @pytest.mark.unit
    def test_distinct_names_cached_separately(self, engine: TemplateEngine):
        engine.render("a", {}, "A")
        engine.render("b", {}, "B")
        assert engine.cache_count == 2

    @pytest.mark.unit
    def test_clear_cache(self, engine: TemplateEngine):
        engine.render("a", {}, "A")
        engine.clear_cache()
        assert engine.cache_count == 0
        assert engine.render("a", {}, "A") == "a"

    @pytest.mark.unit
    def test_threads_sharing_one_name(self, engine: TemplateEngine):
        sources = [f"v{i % 2}-{{{{ n }}}}" for i in range(64)]

        def _render(index: int) -> str:
            return engine.render(sources[index], {"n": index}, "Shared")

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(_render, range(len(sources))))

        assert results == [f"v{i % 2}-{i}" for i in range(len(sources))]
        assert engine.cache_count == 1

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_gathered_renders_sharing_one_name(self, engine: TemplateEngine):
        old, new = "old {{ n }}", "new {{ n }}"
        calls = [
            asyncio.to_thread(engine.render, old if i % 2 else new, {"n": i}, "Shared")
            for i in range(40)
        ]
        results = await asyncio.gather(*calls)

        assert results == [f"{'old' if i % 2 else 'new'} {i}" for i in range(40)]
        assert engine.cache_count == 1


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class TestErrors:
    @pytest.mark.unit
    def test_syntax_error_raises_compile_error(self, engine: TemplateEngine):
        with pytest.raises(TemplateCompileError) as excinfo:
            engine.render("{% for x in %}", {}, "Broken")
        assert excinfo.value.template_name == "Broken"
        assert excinfo.value.diagnostics[0].startswith("line 1:")
        assert "Template 'Broken' has syntax errors" in str(excinfo.value)

    @pytest.mark.unit
    def test_failed_compile_not_cached(self, engine: TemplateEngine):
        with pytest.raises(TemplateCompileError):
            engine.compile("Broken", "{% if %}")
        assert engine.cache_count == 0

    @pytest.mark.unit
    def test_undefined_variable_raises_render_error(self, engine: TemplateEngine):
        with pytest.raises(TemplateRenderError, match="Template rendering failed for 'Entity'"):
            engine.render("{{ missing }}", {}, "Entity")

    @pytest.mark.unit
    def test_runtime_error_wrapped(self, engine: TemplateEngine):
        with pytest.raises(TemplateRenderError) as excinfo:
            engine.render("{{ 1 // zero }}", {"zero": 0}, "Math")
        assert isinstance(excinfo.value.__cause__, ZeroDivisionError)


# ---------------------------------------------------------------------------
# File rendering
# ---------------------------------------------------------------------------


class TestRenderFromFile:
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_renders_file(self, engine: TemplateEngine, tmp_path: Path, model: dict[str, Any]):
        path = tmp_path / "Entity.cs.j2"
        path.write_text("public class {{ entity_name }} { }\n", encoding="utf-8")
        result = await engine.render_from_file(path, model)
        assert result == "public class Customer { }\n"
        assert engine.cache_count == 1

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_missing_file(self, engine: TemplateEngine, tmp_path: Path):
        missing = tmp_path / "Nope.j2"
        with pytest.raises(TemplateNotFoundError, match="Template file not found"):
            await engine.render_from_file(missing, {})

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_bundled_template_renders(self, engine: TemplateEngine, registry, sample_definition, default_options):
        from formgen.generation.orchestrator import build_template_model

        context = build_template_model(sample_definition, "CustomerIntake", default_options)
        entity = registry.get("CSharpEntity")
        result = await engine.render_from_file(entity.template_path, context, entity.name)
        assert "class CustomerIntake" in result
        assert "FirstName" in result

    @pytest.mark.unit
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "template_name,expected",
        [
            ("ReactValidation", [r'.required("Say \"hi\" is required")']),
            ("CSharpValidation", [r'.WithMessage("Say \"hi\" is required")']),
            ("CSharpUnitTests", [r'"O\"K"']),
            ("CSharpIntegrationTests", [r'Choice = "O\"K",']),
            (
                "ReactComponent",
                [r'{"Say \"hi\""}', r'placeholder={"a \"b\""}', r'<option value={"O\"K"}>{"O\"K"}</option>'],
            ),
        ],
    )
    async def test_quotes_in_form_text_are_escaped(
        self, engine: TemplateEngine, registry, default_options, template_name: str, expected: list[str]
    ):
        from formgen.forms import FormDefinition, FormField
        from formgen.generation.orchestrator import build_template_model

        definition = FormDefinition.from_fields([
            FormField(name="greeting", type="text", required=True, label='Say "hi"', placeholder='a "b"'),
            FormField(name="choice", type="select", options=['O"K']),
        ])
        context = build_template_model(definition, "Greeting", default_options)
        metadata = registry.get(template_name)
        result = await engine.render_from_file(metadata.template_path, context, metadata.name)

        for literal in expected:
            assert literal in result
        assert '"Say "hi' not in result
