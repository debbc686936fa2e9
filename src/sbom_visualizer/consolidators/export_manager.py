"""
Export manager for merged SBOM models: structured JSON and a printable HTML report.
"""

import html
import json
import logging
from datetime import datetime
from pathlib import Path
from string import Template
from typing import Dict, Any, List, Optional, Sequence

from ..models import Component, ParsedSBOM
from ..config import get_config, OutputConfig
from ..error_handling import ExportError
from ..views.severity import count_by_severity

logger = logging.getLogger(__name__)

FILENAME_PREFIXES = {
    "json": "sbom-export",
    "html": "sbom-report",
}

_REPORT_TEMPLATE = Template("""<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <title>SBOM Report - $project</title>
  <style>
    body { font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', sans-serif; padding: 40px; color: #000; }
    h1 { font-size: 28px; margin-bottom: 8px; }
    h2 { font-size: 20px; margin-top: 32px; border-bottom: 2px solid #e5e5e5; padding-bottom: 8px; }
    .meta { color: #666; font-size: 14px; margin-bottom: 4px; }
    .summary { display: grid; grid-template-columns: repeat(3, 1fr); gap: 16px; }
    .summary-card, .vuln-card { border: 1px solid #e5e5e5; padding: 16px; border-radius: 8px; }
    .summary-card .value { font-size: 32px; font-weight: bold; }
    .vuln-grid { display: grid; grid-template-columns: repeat(4, 1fr); gap: 12px; }
    .vuln-card { text-align: center; }
    .vuln-card.critical { background: #fee; } .vuln-card.high { background: #ffe; }
    .vuln-card.medium { background: #ffc; } .vuln-card.low { background: #efe; }
    table { width: 100%; border-collapse: collapse; font-size: 12px; }
    th { background: #f5f5f5; padding: 12px; text-align: left; border-bottom: 2px solid #e5e5e5; }
    td { padding: 10px 12px; border-bottom: 1px solid #f0f0f0; }
    .badge { display: inline-block; padding: 4px 8px; border-radius: 4px; font-size: 11px; }
    .badge.direct { background: #e0e7ff; color: #4338ca; }
    .badge.transitive { background: #f3f4f6; color: #6b7280; }
    .badge.critical { color: #dc2626; } .badge.high { color: #ea580c; }
    .badge.medium { color: #ca8a04; } .badge.low, .badge.info { color: #16a34a; }
    .footer { margin-top: 48px; text-align: center; color: #999; font-size: 12px; }
  </style>
</head>
<body>
  <h1>SBOM Dependency Report</h1>
  <div class="meta">Project: $project</div>
  <div class="meta">Generated: $generated</div>
  <div class="meta">Analysis Date: $analysis_date</div>

  <div class="summary">
    <div class="summary-card"><h3>Total Components</h3><div class="value">$total</div></div>
    <div class="summary-card"><h3>Direct Dependencies</h3><div class="value">$direct</div></div>
    <div class="summary-card"><h3>Transitive Dependencies</h3><div class="value">$transitive</div></div>
  </div>

  <h2>Vulnerability Summary</h2>
  <div class="vuln-grid">
$vulnerability_cards
  </div>

  <h2>Component Details</h2>
  <table>
    <thead>
      <tr><th>Component</th><th>Version</th><th>Type</th><th>License</th><th>Vulnerabilities</th></tr>
    </thead>
    <tbody>
$rows
    </tbody>
  </table>

  <div class="footer">Generated by SBOM Visualizer</div>
</body>
</html>
""")


class ExportManager:
    """
    Writes merged models to disk.

    The model is only read. Single-format methods raise ExportError on
    failure; ``export_model`` records per-format failures and carries on.
    """

    def __init__(self, config: Optional[OutputConfig] = None):
        """
        Initialize export manager.

        Args:
            config: Output configuration (defaults to the app config)
        """
        self.config = config or get_config().output

    def to_json_dict(
        self,
        model: ParsedSBOM,
        components: Optional[Sequence[Component]] = None
    ) -> Dict[str, Any]:
        """
        Build the JSON export structure.

        Args:
            model: Model to export
            components: Optional filtered subset to list instead of every component

        Returns:
            Export dictionary with project metadata, summary and components
        """
        selected = list(components) if components is not None else list(model.iter_components())

        return {
            "projectName": model.project_name,
            "timestamp": model.timestamp,
            "summary": {
                "totalComponents": model.total_components,
                "directDependencies": model.direct_count,
                "transitiveDependencies": model.transitive_count,
                "exportedComponents": len(selected),
                "vulnerabilities": count_by_severity(model),
            },
            "components": [
                {
                    "name": comp.name,
                    "version": comp.version,
                    "type": comp.type,
                    "license": comp.license,
                    "isDirect": comp.is_direct,
                    "purl": comp.purl,
                    "path": comp.path,
                    "vulnerabilities": [v.to_dict() for v in comp.vulnerabilities],
                    "dependencies": list(comp.dependencies),
                }
                for comp in selected
            ],
        }

    def render_html_report(
        self,
        model: ParsedSBOM,
        components: Optional[Sequence[Component]] = None,
        generated_at: Optional[datetime] = None
    ) -> str:
        """
        Render the printable HTML report.

        All values taken from the input are HTML-escaped.

        Args:
            model: Model to report on
            components: Optional filtered subset for the component table
            generated_at: Report generation time (defaults to now)

        Returns:
            HTML document text
        """
        selected = list(components) if components is not None else list(model.iter_components())
        generated_at = generated_at or datetime.now()
        esc = html.escape

        vulnerability_cards = "\n".join(
            f'    <div class="vuln-card {severity}"><div class="count">{count}</div>'
            f'<div class="label">{severity.capitalize()}</div></div>'
            for severity, count in count_by_severity(model).items()
        )

        rows = []
        for comp in selected:
            kind = "direct" if comp.is_direct else "transitive"
            if comp.vulnerabilities:
                vulns = " ".join(
                    f'<span class="badge {v.severity.value}">{esc(v.id)}</span>' for v in comp.vulnerabilities
                )
            else:
                vulns = '<span style="color: #16a34a;">None</span>'
            rows.append(
                f"      <tr><td><strong>{esc(comp.name)}</strong></td><td>{esc(comp.version)}</td>"
                f'<td><span class="badge {kind}">{kind.capitalize()}</span></td>'
                f"<td>{esc(comp.license)}</td><td>{vulns}</td></tr>"
            )

        return _REPORT_TEMPLATE.substitute(
            project=esc(model.project_name),
            generated=generated_at.strftime("%Y-%m-%d %H:%M:%S"),
            analysis_date=esc(model.timestamp),
            total=model.total_components,
            direct=model.direct_count,
            transitive=model.transitive_count,
            vulnerability_cards=vulnerability_cards,
            rows="\n".join(rows),
        )

    def export_json(
        self,
        model: ParsedSBOM,
        output_path: Path,
        components: Optional[Sequence[Component]] = None
    ) -> Path:
        """
        Write the JSON export.

        Raises:
            ExportError: If the file cannot be written
        """
        content = json.dumps(self.to_json_dict(model, components), indent=2)
        return self._write(output_path, content, "json")

    def export_html(
        self,
        model: ParsedSBOM,
        output_path: Path,
        components: Optional[Sequence[Component]] = None
    ) -> Path:
        """
        Write the HTML report.

        Raises:
            ExportError: If the file cannot be written
        """
        content = self.render_html_report(model, components)
        return self._write(output_path, content, "html")

    def default_filename(self, export_format: str, include_date: Optional[bool] = None,
                         today: Optional[datetime] = None) -> str:
        """
        Default file name for an export format.

        Returns:
            e.g. ``sbom-export-2024-05-01.json`` or ``sbom-report.html``
        """
        if export_format not in FILENAME_PREFIXES:
            raise ExportError(f"Unsupported export format: {export_format}", export_format=export_format)
        include_date = self.config.include_date if include_date is None else include_date
        prefix = FILENAME_PREFIXES[export_format]
        if include_date:
            prefix = f"{prefix}-{(today or datetime.now()).strftime('%Y-%m-%d')}"
        return f"{prefix}.{export_format}"

    def export_model(
        self,
        model: ParsedSBOM,
        output_dir: Optional[Path] = None,
        formats: Optional[List[str]] = None,
        components: Optional[Sequence[Component]] = None
    ) -> Dict[str, Any]:
        """
        Export a model in several formats.

        Args:
            model: Model to export
            output_dir: Output directory (defaults to config)
            formats: Formats to write (defaults to config)
            components: Optional filtered subset

        Returns:
            Dictionary with per-format results and collected errors
        """
        output_dir = Path(output_dir or self.config.directory)
        formats = formats or self.config.formats

        logger.info(f"Exporting {model.project_name} in {len(formats)} formats to {output_dir}")

        results: Dict[str, Any] = {
            "output_directory": str(output_dir),
            "formats": {},
            "errors": [],
        }

        exporters = {
            "json": self.export_json,
            "html": self.export_html,
        }

        for export_format in formats:
            try:
                exporter = exporters.get(export_format)
                if exporter is None:
                    raise ExportError(f"Unsupported export format: {export_format}", export_format=export_format)
                path = exporter(model, output_dir / self.default_filename(export_format), components)
                results["formats"][export_format] = {
                    "success": True,
                    "file_path": str(path),
                    "file_size": path.stat().st_size,
                }
            except ExportError as e:
                logger.error(f"Failed to export {export_format} format: {e}")
                results["formats"][export_format] = {"success": False, "error": e.message}
                results["errors"].append(str(e))

        logger.info(f"Export completed: {len(results['formats'])} formats, {len(results['errors'])} errors")
        return results

    def _write(self, output_path: Path, content: str, export_format: str) -> Path:
        output_path = Path(output_path)
        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_text(content, encoding="utf-8")
        except OSError as e:
            raise ExportError(
                f"Cannot write {export_format} export",
                export_format=export_format,
                output_path=str(output_path),
                cause=e
            )
        logger.info(f"Exported {export_format} format to {output_path}")
        return output_path
