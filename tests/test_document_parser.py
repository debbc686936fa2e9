"""Tests for parsing raw SBOM texts."""

import json

import pytest

from sbom_visualizer.consolidators import DocumentParser
from sbom_visualizer.error_handling import ParseError


class TestParseText:
    """Test single-document parsing."""

    def test_parse_valid_document(self, app_bom):
        parser = DocumentParser(max_workers=1)
        document = parser.parse_text(json.dumps(app_bom), source="app.json")
        assert document.source == "app.json"
        assert [c.identity for c in document.components] == ["app@1.0", "lib-a@2.0"]

    def test_parse_bytes_with_bom(self, app_bom):
        """UTF-8 input with a byte order mark is accepted."""
        parser = DocumentParser(max_workers=1)
        document = parser.parse_text(b"\xef\xbb\xbf" + json.dumps(app_bom).encode("utf-8"))
        assert document.project_name == "app"

    def test_invalid_json(self):
        parser = DocumentParser(max_workers=1)
        with pytest.raises(ParseError) as exc_info:
            parser.parse_text("{not json", source="broken.json", index=2)
        error = exc_info.value
        assert error.source == "broken.json"
        assert error.index == 2
        assert isinstance(error.cause, json.JSONDecodeError)
        assert "broken.json" in str(error)

    def test_invalid_encoding(self):
        parser = DocumentParser(max_workers=1)
        with pytest.raises(ParseError) as exc_info:
            parser.parse_text(b"\xff\xfe\x00bad")
        assert isinstance(exc_info.value.cause, UnicodeDecodeError)

    def test_json_array_rejected(self):
        parser = DocumentParser(max_workers=1)
        with pytest.raises(ParseError):
            parser.parse_text("[1, 2, 3]")

    def test_wrong_field_type_rejected(self):
        parser = DocumentParser(max_workers=1)
        with pytest.raises(ParseError):
            parser.parse_text(json.dumps({"components": "none"}))

    def test_non_string_rating_severity_rejected(self, bom, component):
        """A numeric rating severity makes the document invalid, not a crash."""
        doc = bom(
            components=[component("a", "1", "a")],
            vulnerabilities=[{"id": "CVE-1", "ratings": [{"severity": 7}], "affects": [{"ref": "a"}]}],
        )
        parser = DocumentParser(max_workers=1)
        with pytest.raises(ParseError) as exc_info:
            parser.parse_text(json.dumps(doc), source="scored.json")
        assert exc_info.value.source == "scored.json"
        assert isinstance(exc_info.value.cause, ValueError)

    def test_deeply_nested_json_rejected(self):
        parser = DocumentParser(max_workers=1)
        text = '{"components": ' + "[" * 100000 + "]" * 100000 + "}"
        with pytest.raises(ParseError) as exc_info:
            parser.parse_text(text, source="deep.json")
        assert exc_info.value.source == "deep.json"
        assert isinstance(exc_info.value.cause, RecursionError)

    def test_non_text_rejected(self):
        parser = DocumentParser(max_workers=1)
        with pytest.raises(ParseError):
            parser.parse_text(42)

    def test_default_label_uses_index(self):
        parser = DocumentParser(max_workers=1)
        with pytest.raises(ParseError) as exc_info:
            parser.parse_text("oops", index=3)
        assert exc_info.value.source == "document[3]"

    def test_foreign_bom_format_still_parses(self, caplog):
        parser = DocumentParser(max_workers=1)
        document = parser.parse_text(json.dumps({"bomFormat": "SPDX", "components": []}))
        assert document.bom_format == "SPDX"
        assert "expected 'CycloneDX'" in caplog.text


class TestParseAll:
    """Test batch parsing."""

    @pytest.mark.parametrize("workers", [1, 4])
    def test_order_preserved(self, bom, component, workers):
        texts = [json.dumps(bom(components=[component(f"pkg{i}", "1.0")])) for i in range(8)]
        documents = DocumentParser(max_workers=workers).parse_all(texts)
        assert [d.components[0].name for d in documents] == [f"pkg{i}" for i in range(8)]

    @pytest.mark.parametrize("workers", [1, 4])
    def test_first_failure_reported(self, app_bom, workers):
        texts = [json.dumps(app_bom), "nope", json.dumps(app_bom), "[]"]
        with pytest.raises(ParseError) as exc_info:
            DocumentParser(max_workers=workers).parse_all(texts, ["a.json", "b.json", "c.json", "d.json"])
        assert exc_info.value.index == 1
        assert exc_info.value.source == "b.json"

    def test_sources_length_mismatch(self):
        with pytest.raises(ValueError):
            DocumentParser(max_workers=1).parse_all(["{}", "{}"], ["only-one"])

    def test_empty_batch(self):
        assert DocumentParser(max_workers=2).parse_all([]) == []

    def test_worker_count_from_config(self, monkeypatch):
        monkeypatch.setenv("SBOM_PARSE_WORKERS", "3")
        assert DocumentParser().max_workers == 3


class TestReadFiles:
    """Test reading SBOM files from disk."""

    def test_read_files(self, write_bom, app_bom, lib_bom):
        paths = [write_bom(app_bom, "app.json"), write_bom(lib_bom, "lib.json")]
        documents = DocumentParser(max_workers=1).read_files(paths)
        assert [d.source for d in documents] == ["app.json", "lib.json"]

    def test_missing_file(self, tmp_path):
        with pytest.raises(ParseError) as exc_info:
            DocumentParser(max_workers=1).read_files([tmp_path / "absent.json"])
        assert exc_info.value.index == 0
