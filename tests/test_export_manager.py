"""Tests for JSON and HTML exports."""

import json
from datetime import datetime

import pytest

from sbom_visualizer.config import OutputConfig
from sbom_visualizer.consolidators import ExportManager, merge_documents
from sbom_visualizer.error_handling import ExportError
from sbom_visualizer.models import RawDocument


@pytest.fixture
def model(vulnerable_bom, merge_config):
    return merge_documents([RawDocument.from_dict(vulnerable_bom)], merge_config)


@pytest.fixture
def exporter(tmp_path):
    return ExportManager(OutputConfig(directory=str(tmp_path / "reports"), include_date=False))


class TestJsonExport:
    """Test the JSON export structure."""

    def test_structure(self, exporter, model):
        data = exporter.to_json_dict(model)
        assert data["projectName"] == "web"
        assert data["summary"]["totalComponents"] == 4
        assert data["summary"]["directDependencies"] == 3
        assert data["summary"]["transitiveDependencies"] == 1
        assert data["summary"]["exportedComponents"] == 4
        assert data["summary"]["vulnerabilities"] == {"critical": 1, "high": 1, "medium": 0, "low": 1}

        log4j = next(c for c in data["components"] if c["name"] == "log4j-core")
        assert log4j["isDirect"] is True
        assert log4j["license"] == "Unknown"
        assert log4j["vulnerabilities"][0]["id"] == "CVE-2021-44228"
        assert log4j["vulnerabilities"][0]["severity"] == "critical"

    def test_filtered_subset(self, exporter, model):
        subset = [model.get_component("left-pad@1.3.0")]
        data = exporter.to_json_dict(model, subset)
        assert [c["name"] for c in data["components"]] == ["left-pad"]
        assert data["summary"]["exportedComponents"] == 1
        assert data["summary"]["totalComponents"] == 4

    def test_export_json_writes_file(self, exporter, model, tmp_path):
        path = exporter.export_json(model, tmp_path / "out" / "model.json")
        assert json.loads(path.read_text(encoding="utf-8"))["projectName"] == "web"

    def test_model_not_modified(self, exporter, model):
        before = model.to_dict()
        exporter.to_json_dict(model)
        exporter.render_html_report(model)
        assert model.to_dict() == before


class TestHtmlReport:
    """Test the printable HTML report."""

    def test_contains_summary_and_rows(self, exporter, model):
        report = exporter.render_html_report(model, generated_at=datetime(2024, 5, 1, 12, 0, 0))
        assert "<title>SBOM Report - web</title>" in report
        assert "Generated: 2024-05-01 12:00:00" in report
        assert "log4j-core" in report
        assert '<span class="badge critical">CVE-2021-44228</span>' in report

    def test_input_values_escaped(self, exporter, bom, component, merge_config):
        doc = bom(components=[component("<script>alert(1)</script>", "1&2", "x")], project="a<b>")
        model = merge_documents([RawDocument.from_dict(doc)], merge_config)
        report = exporter.render_html_report(model)
        assert "<script>alert(1)</script>" not in report
        assert "&lt;script&gt;alert(1)&lt;/script&gt;" in report
        assert "1&amp;2" in report
        assert "a&lt;b&gt;" in report


class TestFilenames:
    """Test default export file names."""

    def test_dated_names(self, exporter):
        today = datetime(2024, 5, 1)
        assert exporter.default_filename("json", include_date=True, today=today) == "sbom-export-2024-05-01.json"
        assert exporter.default_filename("html", include_date=True, today=today) == "sbom-report-2024-05-01.html"

    def test_undated_names(self, exporter):
        assert exporter.default_filename("json") == "sbom-export.json"

    def test_unsupported_format(self, exporter):
        with pytest.raises(ExportError):
            exporter.default_filename("pdf")


class TestExportModel:
    """Test multi-format export."""

    def test_all_configured_formats(self, exporter, model, tmp_path):
        results = exporter.export_model(model)
        assert results["errors"] == []
        assert results["output_directory"] == str(tmp_path / "reports")
        for export_format in ("json", "html"):
            result = results["formats"][export_format]
            assert result["success"]
            assert result["file_size"] > 0

    def test_unsupported_format_recorded(self, exporter, model, tmp_path):
        results = exporter.export_model(model, output_dir=tmp_path, formats=["json", "pdf"])
        assert results["formats"]["json"]["success"]
        assert not results["formats"]["pdf"]["success"]
        assert len(results["errors"]) == 1

    def test_unwritable_directory(self, exporter, model, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory", encoding="utf-8")
        with pytest.raises(ExportError) as exc_info:
            exporter.export_json(model, blocker / "model.json")
        assert exc_info.value.export_format == "json"
        assert isinstance(exc_info.value.cause, OSError)
