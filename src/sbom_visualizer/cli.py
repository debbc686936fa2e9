"""
Command-line interface for the SBOM Visualizer.
"""

import click
import json
import sys
from typing import List, Optional, Tuple
from pathlib import Path

from . import __version__
from .config import get_config_manager, AppConfig
from .consolidators import SBOMMerger, DocumentParser, ExportManager
from .error_handling import SBOMVisualizerError
from .logging import setup_logging, close_logging, LoggerConfig
from .models import ParsedSBOM, Component
from .views import (
    FilterState, filter_components, sort_components, table_rows,
    build_tree, TreeNode, count_by_severity
)


@click.group()
@click.version_option(version=__version__)
@click.option(
    '--config', '-c',
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Path to configuration file'
)
@click.option(
    '--verbose', '-v',
    count=True,
    help='Increase verbosity (use -v or -vv)'
)
@click.pass_context
def cli(ctx: click.Context, config: Optional[Path], verbose: int) -> None:
    """
    SBOM Visualizer - merge CycloneDX SBOMs into one dependency model.

    Every command takes one or more CycloneDX JSON files. Files are merged in
    the order given: the first file declaring a component decides its name,
    version and license.
    """
    ctx.ensure_object(dict)
    ctx.obj['config_file'] = config
    ctx.obj['verbose'] = verbose

    try:
        app_config = get_config_manager(config).get_config()
    except SBOMVisualizerError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    ctx.obj['app_config'] = app_config
    configure_logging(app_config, verbose)
    ctx.call_on_close(close_logging)


def filter_options(command):
    """Attach the shared filter options to a command."""
    command = click.option('--cve', 'cve_id', default='', help='Vulnerability id substring')(command)
    command = click.option(
        '--severity',
        type=click.Choice(['all', 'critical', 'high', 'medium', 'low'], case_sensitive=False),
        default='all',
        help='Only components with a vulnerability of this severity'
    )(command)
    command = click.option(
        '--type', 'dependency_type',
        type=click.Choice(['all', 'direct', 'transitive'], case_sensitive=False),
        default='all',
        help='Dependency classification to show'
    )(command)
    command = click.option('--search', '-s', default='', help='Name or version substring')(command)
    return command


sbom_files = click.argument(
    'files',
    nargs=-1,
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path)
)


@cli.command()
@sbom_files
@click.option('--json', 'as_json', is_flag=True, help='Print the full model as JSON')
@click.pass_context
def summary(ctx: click.Context, files: Tuple[Path, ...], as_json: bool) -> None:
    """
    Merge SBOM files and print a summary.

    Examples:

        sbom-visualizer summary app.cdx.json libs.cdx.json
    """
    model = load_model(ctx, files)

    if as_json:
        click.echo(model.to_json())
        return

    click.echo("\n" + "=" * 60)
    click.echo(f"PROJECT: {model.project_name}")
    click.echo("=" * 60)
    click.echo(f"Analysis date: {model.timestamp}")
    click.echo(f"SBOM files merged: {model.source_count}")
    click.echo(f"Total components: {model.total_components}")
    click.echo(f"Direct dependencies: {model.direct_count}")
    click.echo(f"Transitive dependencies: {model.transitive_count}")

    counts = count_by_severity(model)
    click.echo("Vulnerabilities: " + ", ".join(f"{name}={count}" for name, count in counts.items()))

    click.echo(f"\nRoot components ({len(model.root_components)}):")
    for root_id in model.root_components[:20]:
        click.echo(f"  - {root_id}")
    if len(model.root_components) > 20:
        click.echo(f"  ... and {len(model.root_components) - 20} more")

    dangling = model.dangling_references()
    if dangling and ctx.obj.get('verbose', 0) > 0:
        click.echo("\nUnresolved dependency references:")
        for source_id, missing in dangling.items():
            click.echo(f"  - {source_id} -> {', '.join(missing)}")
    click.echo("=" * 60)


@cli.command()
@sbom_files
@filter_options
@click.option(
    '--sort',
    'sort_field',
    type=click.Choice(['name', 'version', 'type', 'is_direct', 'vulnerabilities']),
    default=None,
    help='Column to sort by (defaults to views.default_sort_field)'
)
@click.option('--desc', is_flag=True, help='Sort descending')
@click.pass_context
def table(
    ctx: click.Context,
    files: Tuple[Path, ...],
    search: str,
    dependency_type: str,
    severity: str,
    cve_id: str,
    sort_field: Optional[str],
    desc: bool
) -> None:
    """Print the filtered component table."""
    model = load_model(ctx, files)
    app_config: AppConfig = ctx.obj['app_config']

    filters = FilterState(search=search, dependency_type=dependency_type.lower(),
                          severity=severity.lower(), cve_id=cve_id)
    components = sort_components(
        filter_components(model, filters),
        sort_field or app_config.views.default_sort_field,
        "desc" if desc else "asc"
    )

    display_table(components)
    click.echo(f"\n{len(components)} of {model.total_components} components shown")


@cli.command()
@sbom_files
@filter_options
@click.option('--max-depth', type=int, default=None, help='Deepest tree level to print')
@click.pass_context
def tree(
    ctx: click.Context,
    files: Tuple[Path, ...],
    search: str,
    dependency_type: str,
    severity: str,
    cve_id: str,
    max_depth: Optional[int]
) -> None:
    """Print the dependency tree grown from the root components."""
    model = load_model(ctx, files)
    app_config: AppConfig = ctx.obj['app_config']

    filters = FilterState(search=search, dependency_type=dependency_type.lower(),
                          severity=severity.lower(), cve_id=cve_id)
    root = build_tree(
        model,
        filter_components(model, filters),
        max_depth=app_config.views.tree_max_depth if max_depth is None else max_depth
    )

    click.echo(model.project_name)
    for line in render_tree_lines(root):
        click.echo(line)


@cli.command()
@sbom_files
@filter_options
@click.option(
    '--format', '-f', 'formats',
    type=click.Choice(['json', 'html'], case_sensitive=False),
    multiple=True,
    help='Export format(s) (defaults to output.formats)'
)
@click.option(
    '--output', '-o',
    type=click.Path(file_okay=False, path_type=Path),
    help='Output directory (defaults to output.directory)'
)
@click.pass_context
def export(
    ctx: click.Context,
    files: Tuple[Path, ...],
    search: str,
    dependency_type: str,
    severity: str,
    cve_id: str,
    formats: Tuple[str, ...],
    output: Optional[Path]
) -> None:
    """Export the merged model as JSON and/or an HTML report."""
    model = load_model(ctx, files)
    app_config: AppConfig = ctx.obj['app_config']

    filters = FilterState(search=search, dependency_type=dependency_type.lower(),
                          severity=severity.lower(), cve_id=cve_id)
    components = None if filters.is_empty else filter_components(model, filters)

    results = ExportManager(app_config.output).export_model(
        model,
        output_dir=output,
        formats=[fmt.lower() for fmt in formats] or None,
        components=components
    )

    for export_format, result in results["formats"].items():
        if result["success"]:
            click.echo(f"{export_format}: {result['file_path']}")
        else:
            click.echo(f"{export_format}: failed ({result['error']})", err=True)

    if results["errors"]:
        sys.exit(1)


@cli.command()
@click.option(
    '--format', '-f',
    type=click.Choice(['table', 'json', 'yaml'], case_sensitive=False),
    default='table',
    help='Output format for configuration display'
)
@click.pass_context
def config(ctx: click.Context, format: str) -> None:
    """Display the effective configuration."""
    app_config: AppConfig = ctx.obj['app_config']

    if format == 'json':
        click.echo(json.dumps(app_config.to_dict(), indent=2, default=str))
    elif format == 'yaml':
        import yaml
        click.echo(yaml.dump(app_config.to_dict(), default_flow_style=False))
    else:
        display_config_table(app_config)


def configure_logging(app_config: AppConfig, verbose: int) -> None:
    """Set up logging from the config; -v and -vv override the level."""
    if verbose == 0:
        level = app_config.logging.level
    elif verbose == 1:
        level = "INFO"
    else:
        level = "DEBUG"

    setup_logging(LoggerConfig(
        level=level,
        file_path=app_config.logging.file,
        format_string=app_config.logging.format,
        max_file_size=app_config.logging.max_file_size,
        backup_count=app_config.logging.backup_count,
        enable_structured=app_config.logging.structured
    ))


def load_model(ctx: click.Context, files: Tuple[Path, ...]) -> ParsedSBOM:
    """Parse and merge the given files, exiting with status 1 on failure."""
    app_config: AppConfig = ctx.obj['app_config']
    parser = DocumentParser(app_config.merge.parse_workers)
    try:
        return SBOMMerger(app_config.merge, parser).merge_files(list(files))
    except SBOMVisualizerError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


def display_table(components: List[Component]) -> None:
    """Print components as a fixed-width table."""
    rows = table_rows(components)
    headers = ["name", "version", "type", "dependency", "license", "vulnerabilities", "severity"]
    widths = {
        header: max([len(header)] + [len(str(row[header])) for row in rows])
        for header in headers
    }

    click.echo("  ".join(header.upper().ljust(widths[header]) for header in headers))
    click.echo("  ".join("-" * widths[header] for header in headers))
    for row in rows:
        click.echo("  ".join(str(row[header]).ljust(widths[header]) for header in headers))


def render_tree_lines(node: TreeNode, prefix: str = "") -> List[str]:
    """Render tree children as box-drawing lines."""
    lines = []
    for position, child in enumerate(node.children):
        last = position == len(node.children) - 1
        component = child.component
        label = f"{component.name}@{component.version}" if component else child.id
        if child.max_severity:
            label += f" [{child.max_severity.value}]"
        if child.is_collapsed and child.child_count:
            label += f" (+{child.child_count})"
        lines.append(f"{prefix}{'└── ' if last else '├── '}{label}")
        lines.extend(render_tree_lines(child, prefix + ("    " if last else "│   ")))
    return lines


def display_config_table(app_config: AppConfig) -> None:
    """Display configuration in table format."""
    click.echo("\nCurrent Configuration:")
    click.echo("-" * 50)

    for section_name, values in app_config.to_dict().items():
        click.echo(f"\n[{section_name}]")
        for key, value in values.items():
            click.echo(f"  {key}: {value}")


def main() -> None:
    """Main entry point for the CLI."""
    cli()


if __name__ == '__main__':
    main()
