"""Tests for the command-line interface."""

import json

import pytest
import yaml
from click.testing import CliRunner

from sbom_visualizer import __version__
from sbom_visualizer.cli import cli


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def sbom_paths(write_bom, app_bom, lib_bom):
    return [str(write_bom(app_bom, "app.json")), str(write_bom(lib_bom, "lib.json"))]


def test_version(runner):
    result = runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_summary(runner, sbom_paths):
    result = runner.invoke(cli, ["summary", *sbom_paths])
    assert result.exit_code == 0, result.output
    assert "PROJECT: app" in result.output
    assert "Total components: 3" in result.output
    assert "Direct dependencies: 2" in result.output
    assert "Transitive dependencies: 1" in result.output
    assert "  - app@1.0" in result.output


def test_summary_json(runner, sbom_paths):
    result = runner.invoke(cli, ["summary", "--json", *sbom_paths])
    assert result.exit_code == 0, result.output
    data = json.loads(result.output)
    assert data["projectName"] == "app"
    assert data["rootComponents"] == ["app@1.0"]


def test_table_with_filters(runner, sbom_paths):
    result = runner.invoke(cli, ["table", "--type", "direct", "--sort", "name", "--desc", *sbom_paths])
    assert result.exit_code == 0, result.output
    lines = result.output.splitlines()
    assert lines[0].startswith("NAME")
    assert lines[2].startswith("lib-a")
    assert lines[3].startswith("app")
    assert "2 of 3 components shown" in result.output


def test_tree(runner, sbom_paths):
    result = runner.invoke(cli, ["tree", *sbom_paths])
    assert result.exit_code == 0, result.output
    assert result.output.splitlines() == [
        "app",
        "└── app@1.0",
        "    └── lib-a@2.0",
        "        └── lib-b@0.3",
    ]


def test_tree_max_depth(runner, sbom_paths):
    result = runner.invoke(cli, ["tree", "--max-depth", "1", *sbom_paths])
    assert result.exit_code == 0, result.output
    assert result.output.splitlines() == ["app", "└── app@1.0"]


def test_tree_shows_severity(runner, write_bom, vulnerable_bom):
    result = runner.invoke(cli, ["tree", str(write_bom(vulnerable_bom))])
    assert result.exit_code == 0, result.output
    assert "log4j-core@2.14.1 [critical]" in result.output


def test_export(runner, sbom_paths, tmp_path):
    output_dir = tmp_path / "out"
    result = runner.invoke(cli, ["export", "-f", "json", "-o", str(output_dir), *sbom_paths])
    assert result.exit_code == 0, result.output

    exported = list(output_dir.glob("sbom-export*.json"))
    assert len(exported) == 1
    data = json.loads(exported[0].read_text(encoding="utf-8"))
    assert data["summary"]["totalComponents"] == 3
    assert data["summary"]["exportedComponents"] == 3


def test_export_filtered(runner, sbom_paths, tmp_path):
    output_dir = tmp_path / "out"
    result = runner.invoke(cli, ["export", "-f", "json", "-o", str(output_dir), "--search", "lib-b", *sbom_paths])
    assert result.exit_code == 0, result.output

    data = json.loads(next(output_dir.glob("*.json")).read_text(encoding="utf-8"))
    assert [c["name"] for c in data["components"]] == ["lib-b"]


def test_parse_error_exits_nonzero(runner, sbom_paths, tmp_path):
    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")
    result = runner.invoke(cli, ["summary", *sbom_paths, str(broken)])
    assert result.exit_code == 1
    assert "Error:" in result.output
    assert "broken.json" in result.output


def test_missing_file_rejected(runner, tmp_path):
    result = runner.invoke(cli, ["summary", str(tmp_path / "absent.json")])
    assert result.exit_code == 2


def test_config_command_uses_file(runner, tmp_path):
    config_file = tmp_path / "config.yaml"
    config_file.write_text(yaml.dump({"merge": {"default_project_name": "fleet"}}), encoding="utf-8")

    result = runner.invoke(cli, ["--config", str(config_file), "config", "--format", "json"])
    assert result.exit_code == 0, result.output
    assert json.loads(result.output)["merge"]["default_project_name"] == "fleet"


def test_config_table(runner):
    result = runner.invoke(cli, ["config"])
    assert result.exit_code == 0, result.output
    assert "[merge]" in result.output
    assert "tree_max_depth: 6" in result.output


def test_invalid_config_exits_nonzero(runner, monkeypatch):
    monkeypatch.setenv("SBOM_TREE_MAX_DEPTH", "-3")
    result = runner.invoke(cli, ["config"])
    assert result.exit_code == 1
    assert "Error:" in result.output


def test_default_project_name_from_config(runner, write_bom, lib_bom, monkeypatch):
    monkeypatch.setenv("SBOM_DEFAULT_PROJECT", "fallback")
    result = runner.invoke(cli, ["summary", str(write_bom(lib_bom))])
    assert result.exit_code == 0, result.output
    assert "PROJECT: fallback" in result.output


def test_log_level_from_environment(runner, sbom_paths, monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "INFO")
    result = runner.invoke(cli, ["summary", *sbom_paths])
    assert result.exit_code == 0, result.output
    assert "Merging 2 SBOM documents" in result.output


def test_default_log_level_is_quiet(runner, sbom_paths):
    result = runner.invoke(cli, ["summary", *sbom_paths])
    assert result.exit_code == 0, result.output
    assert "Merging 2 SBOM documents" not in result.output
