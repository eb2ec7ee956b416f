"""Unit tests for the template registry (formgen.generation.registry)."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from formgen.config import DEFAULT_TEMPLATE_DIR
from formgen.errors import TemplateLookupError
from formgen.generation.artifacts import ArtifactType, TemplateMetadata
from formgen.generation.registry import DEFAULT_TEMPLATES, TemplateRegistry


def _meta(name: str, category: str = "CSharp", priority: int = 1, path: str = "X.j2") -> TemplateMetadata:
    return TemplateMetadata(
        name=name,
        artifact_type=ArtifactType.CSHARP_ENTITY,
        template_path=Path(path),
        output_pattern="{EntityName}.cs",
        category=category,
        priority=priority,
    )


# ---------------------------------------------------------------------------
# Built-in catalogue
# ---------------------------------------------------------------------------


class TestBuiltinCatalogue:
    @pytest.mark.unit
    def test_all_bundled_templates_exist(self, registry: TemplateRegistry):
        result = registry.validate()
        assert result.is_valid, result.missing
        assert result.missing == []

    @pytest.mark.unit
    def test_names_unique(self):
        names = [t.name for t in DEFAULT_TEMPLATES]
        assert len(names) == len(set(names))

    @pytest.mark.unit
    def test_paths_rebased_onto_template_dir(self, registry: TemplateRegistry):
        entity = registry.get("CSharpEntity")
        assert entity.template_path == DEFAULT_TEMPLATE_DIR / "CSharp" / "Entity.cs.j2"

    @pytest.mark.unit
    def test_statistics(self, registry: TemplateRegistry):
        stats = registry.statistics()
        assert stats.total == len(DEFAULT_TEMPLATES) == len(registry)
        assert stats.by_category == {"CSharp": 7, "Pipelines": 3, "React": 2, "SQL": 2, "Tests": 2}
        assert stats.categories == ["CSharp", "Pipelines", "React", "SQL", "Tests"]

    @pytest.mark.unit
    def test_output_patterns(self, registry: TemplateRegistry):
        assert registry.get("CSharpInterface").generate_file_name("Order") == "IOrderRepository.cs"
        assert registry.get("Dockerfile").generate_file_name("Order") == "Dockerfile"


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------


class TestLookups:
    @pytest.mark.unit
    def test_get_unknown_lists_available(self, registry: TemplateRegistry):
        with pytest.raises(TemplateLookupError) as excinfo:
            registry.get("Nope")
        message = str(excinfo.value)
        assert message.startswith("Template not found: Nope.")
        assert "CSharpEntity" in message and "Dockerfile" in message

    @pytest.mark.unit
    def test_by_category_case_insensitive_and_ordered(self, registry: TemplateRegistry):
        csharp = registry.by_category("csharp")
        assert [t.name for t in csharp] == [
            "CSharpEntity",
            "CSharpInterface",
            "CSharpRepository",
            "CSharpController",
            "CSharpDto",
            "CSharpAutoMapper",
            "CSharpValidation",
        ]
        assert [t.priority for t in csharp] == sorted(t.priority for t in csharp)

    @pytest.mark.unit
    def test_by_category_unknown_is_empty(self, registry: TemplateRegistry):
        assert registry.by_category("Cobol") == []

    @pytest.mark.unit
    def test_all_templates_sorted_by_priority(self, registry: TemplateRegistry):
        priorities = [t.priority for t in registry.all_templates()]
        assert priorities == sorted(priorities)

    @pytest.mark.unit
    def test_exists_and_contains(self, registry: TemplateRegistry):
        assert registry.exists("SqlCreateTable")
        assert "SqlCreateTable" in registry
        assert not registry.exists("sqlcreatetable")

    @pytest.mark.unit
    def test_names(self, registry: TemplateRegistry):
        assert registry.names("SQL") == ["SqlCreateTable", "SqlStoredProcs"]
        assert len(registry.names()) == len(registry)
        assert registry.names("  ") == registry.names()


# ---------------------------------------------------------------------------
# Custom catalogues
# ---------------------------------------------------------------------------


class TestCustomCatalogue:
    @pytest.mark.unit
    def test_duplicate_name_overwrites_with_warning(self, tmp_path: Path):
        with patch("formgen.generation.registry.print_warning") as mock_warn:
            registry = TemplateRegistry(
                tmp_path, [_meta("A", priority=1), _meta("A", priority=9)]
            )
        assert len(registry) == 1
        assert registry.get("A").priority == 9
        mock_warn.assert_called_once_with("Template already registered: A. Overwriting.")

    @pytest.mark.unit
    def test_absolute_paths_kept(self, tmp_path: Path):
        absolute = tmp_path / "elsewhere" / "T.j2"
        registry = TemplateRegistry(tmp_path / "templates", [_meta("A", path=str(absolute))])
        assert registry.get("A").template_path == absolute

    @pytest.mark.unit
    def test_validate_reports_missing_files(self, tmp_path: Path):
        (tmp_path / "Present.j2").write_text("x", encoding="utf-8")
        registry = TemplateRegistry(
            tmp_path, [_meta("A", path="Present.j2"), _meta("B", path="Missing.j2")]
        )
        with patch("formgen.generation.registry.print_warning") as mock_warn:
            result = registry.validate()
        assert not result.is_valid
        assert result.missing == [str(tmp_path / "Missing.j2")]
        assert mock_warn.call_count == 2

    @pytest.mark.unit
    def test_catalogue_is_read_only(self, tmp_path: Path):
        registry = TemplateRegistry(tmp_path, [_meta("A")])
        with pytest.raises(TypeError):
            registry._templates["B"] = _meta("B")
