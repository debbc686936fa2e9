"""Shared pytest fixtures for sbom-visualizer tests."""

import json
import sys
from pathlib import Path

import pytest

# Add src directory to path for imports without installation
_src_path = str(Path(__file__).parent.parent / "src")
if _src_path not in sys.path:
    sys.path.insert(0, _src_path)

from sbom_visualizer.config import ConfigManager, MergeConfig, reset_config_manager  # noqa: E402
from sbom_visualizer.logging import close_logging  # noqa: E402


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch):
    """Keep environment variables and the global config out of each test."""
    for env_var in ConfigManager()._env_var_mapping:
        monkeypatch.delenv(env_var, raising=False)
    reset_config_manager()
    yield
    reset_config_manager()
    close_logging()


@pytest.fixture
def merge_config():
    """Merge configuration with sequential parsing."""
    return MergeConfig(parse_workers=1)


def _component(name, version, ref=None, **extra):
    comp = {"type": extra.pop("type", "library"), "name": name, "version": version}
    if ref is not None:
        comp["bom-ref"] = ref
    comp.update(extra)
    return comp


def _bom(components=None, dependencies=None, project=None, timestamp=None, vulnerabilities=None):
    doc = {
        "bomFormat": "CycloneDX",
        "specVersion": "1.5",
        "serialNumber": "urn:uuid:3e671687-395b-41f5-a30f-a58921a69b79",
        "version": 1,
        "metadata": {},
    }
    if timestamp is not None:
        doc["metadata"]["timestamp"] = timestamp
    if project is not None:
        doc["metadata"]["component"] = {"bom-ref": project, "type": "application", "name": project}
    if components is not None:
        doc["components"] = components
    if dependencies is not None:
        doc["dependencies"] = dependencies
    if vulnerabilities is not None:
        doc["vulnerabilities"] = vulnerabilities
    return doc


@pytest.fixture
def component():
    """Factory for CycloneDX component entries."""
    return _component


@pytest.fixture
def bom():
    """Factory for CycloneDX documents as dictionaries."""
    return _bom


@pytest.fixture
def app_bom():
    """Project scan: app@1.0 depends on lib-a@2.0."""
    return _bom(
        components=[
            _component("app", "1.0", "app@1.0", type="application"),
            _component("lib-a", "2.0", "lib-a@2.0",
                       licenses=[{"license": {"id": "MIT"}}],
                       purl="pkg:npm/lib-a@2.0"),
        ],
        dependencies=[
            {"ref": "app@1.0", "dependsOn": ["lib-a@2.0"]},
            {"ref": "lib-a@2.0"},
        ],
        project="app",
        timestamp="2024-03-01T10:00:00Z",
    )


@pytest.fixture
def lib_bom():
    """Separate scan: lib-a@2.0 depends on lib-b@0.3, no project metadata."""
    return _bom(
        components=[
            _component("lib-a", "2.0", "lib-a@2.0"),
            _component("lib-b", "0.3", "lib-b@0.3",
                       properties=[{"name": "syft:location:0:path", "value": "/node_modules/lib-b/package.json"}]),
        ],
        dependencies=[
            {"ref": "lib-a@2.0", "dependsOn": ["lib-b@0.3"]},
        ],
    )


@pytest.fixture
def vulnerable_bom():
    """Document with embedded vulnerabilities."""
    return _bom(
        components=[
            _component("web", "1.0", "web@1.0", type="application"),
            _component("log4j-core", "2.14.1", "log4j-core@2.14.1"),
            _component("lodash", "4.17.20", "lodash@4.17.20"),
            _component("left-pad", "1.3.0", "left-pad@1.3.0"),
        ],
        dependencies=[
            {"ref": "web@1.0", "dependsOn": ["log4j-core@2.14.1", "lodash@4.17.20"]},
            {"ref": "lodash@4.17.20", "dependsOn": ["left-pad@1.3.0"]},
        ],
        project="web",
        vulnerabilities=[
            {
                "id": "CVE-2021-44228",
                "description": "Log4Shell remote code execution",
                "recommendation": "Upgrade to 2.17.1",
                "ratings": [{"severity": "critical"}],
                "affects": [{"ref": "log4j-core@2.14.1"}],
            },
            {
                "id": "CVE-2021-23337",
                "ratings": [{"severity": "medium"}, {"severity": "high"}],
                "affects": [{"ref": "lodash@4.17.20"}],
            },
            {
                "id": "GHSA-xxxx-0000",
                "ratings": [{"severity": "low"}],
                "affects": [{"ref": "lodash@4.17.20"}, {"ref": "missing@0.0.0"}],
            },
        ],
    )


@pytest.fixture
def write_bom(tmp_path):
    """Write a document dictionary to a JSON file and return its path."""
    def _write(doc, name="sbom.json"):
        path = tmp_path / name
        path.write_text(json.dumps(doc), encoding="utf-8")
        return path
    return _write
