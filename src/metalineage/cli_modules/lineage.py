"""Data lineage commands.

Commands:
    metalineage lineage tables: Table lineage as vis-network JSON, HTML or Mermaid
    metalineage lineage fields: Field lineage as JSON or HTML
    metalineage lineage show: Summarize a catalog or a table's lineage
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.table import Table

from metalineage.catalog import MetadataCatalog
from metalineage.cli_modules.common.errors import (
    CLIError,
    ErrorCode,
    error_boundary,
    require_file,
)
from metalineage.config import load_config
from metalineage.service import LineageService
from metalineage.visualization import MermaidRenderer, RenderConfig

# Lineage app for subcommands
app = typer.Typer(
    name="lineage",
    help="Table and field lineage commands",
    no_args_is_help=True,
)

console = Console()


# =============================================================================
# Type Aliases
# =============================================================================

CatalogArg = Annotated[
    Path,
    typer.Argument(help="Catalog file (.json, .yaml) or directory of CSV exports"),
]

TableArg = Annotated[str, typer.Argument(help="Fully qualified table name")]

OutputOpt = Annotated[
    Optional[Path],
    typer.Option("--output", "-o", help="Output file path"),
]

ConfigOpt = Annotated[
    Optional[Path],
    typer.Option("--config", "-c", help="Configuration file (.yaml, .json)"),
]


def _open_service(
    catalog_path: Path,
    config_path: Path | None,
    **render_overrides,
) -> LineageService:
    require_file(catalog_path, "Catalog")
    if config_path is not None:
        require_file(config_path, "Configuration file")
    config = load_config(config_path)
    catalog = MetadataCatalog.load(catalog_path)
    render_config = RenderConfig.from_lineage_config(config, **render_overrides)
    return LineageService(catalog, config, render_config)


def _emit(content: str, output: Path | None) -> None:
    if output is None:
        typer.echo(content)
        return
    try:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(content, encoding="utf-8")
    except OSError as e:
        raise CLIError(
            f"Cannot write {output}: {e}",
            ErrorCode.FILE_NOT_WRITABLE,
        ) from e
    typer.echo(f"Lineage written to {output}")


@app.command(name="tables")
@error_boundary
def tables_cmd(
    catalog: CatalogArg,
    table: TableArg,
    format: Annotated[
        str,
        typer.Option("--format", "-f", help="Output format (json, html, mermaid)"),
    ] = "json",
    output: OutputOpt = None,
    config: ConfigOpt = None,
    theme: Annotated[
        str,
        typer.Option("--theme", "-t", help="Theme for html output (light, dark)"),
    ] = "light",
) -> None:
    """Render the table lineage of a table.

    Examples:
        metalineage lineage tables catalog.yaml shop.orders
        metalineage lineage tables catalog.yaml shop.orders -f html -o orders.html
        metalineage lineage tables exports/ shop.orders -f mermaid
    """
    service = _open_service(
        catalog, config, theme=theme, highlight_nodes=[table], title=f"Lineage of {table}"
    )

    if format == "json":
        content = service.dependency_graph_json(table)
    elif format == "html":
        content = service.dependency_graph_html(table)
    elif format == "mermaid":
        lineage = service.table_lineage(table)
        content = MermaidRenderer(service.render_config).render(lineage)
    else:
        raise CLIError(
            f"Unknown format '{format}'",
            ErrorCode.USAGE_ERROR,
            hint="Use one of: json, html, mermaid",
        )

    _emit(content, output)


@app.command(name="fields")
@error_boundary
def fields_cmd(
    catalog: CatalogArg,
    table: TableArg,
    format: Annotated[
        str,
        typer.Option("--format", "-f", help="Output format (json, html)"),
    ] = "json",
    output: OutputOpt = None,
    config: ConfigOpt = None,
) -> None:
    """Render the forward and backward field lineage of a table.

    Examples:
        metalineage lineage fields catalog.yaml shop.orders
        metalineage lineage fields catalog.yaml shop.orders -f html -o fields.html
    """
    service = _open_service(catalog, config, title=f"Field lineage of {table}")

    if format == "json":
        content = service.schema_lineage_json(table)
    elif format == "html":
        content = service.schema_lineage_html(table)
    else:
        raise CLIError(
            f"Unknown format '{format}'",
            ErrorCode.USAGE_ERROR,
            hint="Use one of: json, html",
        )

    _emit(content, output)


@app.command(name="show")
@error_boundary
def show_cmd(
    catalog: CatalogArg,
    table: Annotated[
        Optional[str],
        typer.Argument(help="Show the lineage of this table"),
    ] = None,
    config: ConfigOpt = None,
) -> None:
    """Display a catalog summary or the lineage of one table.

    Examples:
        metalineage lineage show catalog.yaml
        metalineage lineage show catalog.yaml shop.orders
    """
    service = _open_service(catalog, config)

    if table is None:
        snapshot = service.catalog
        summary = Table(title=f"Catalog {catalog}")
        summary.add_column("Table")
        summary.add_column("Fields", justify="right")
        summary.add_column("Dependencies", justify="right")
        summary.add_column("Successors", justify="right")
        for entity in sorted(snapshot.tables, key=lambda t: t.fqdn):
            summary.add_row(
                entity.fqdn,
                str(len(entity.fields)),
                str(len(entity.dependencies)),
                str(len(entity.successors)),
            )
        console.print(summary)
        console.print(
            f"{snapshot.table_count} tables, {snapshot.field_count} fields, "
            f"{len(snapshot.get_roots())} roots, {len(snapshot.get_leaves())} leaves"
        )
        return

    lineage = service.table_lineage(table)
    view = Table(title=f"Lineage of {table}")
    view.add_column("Id", justify="right")
    view.add_column("Table")
    view.add_column("Level", justify="right")
    view.add_column("Distance", justify="right")
    view.add_column("Reads from")
    for node in lineage.nodes:
        marker = "[bold]" if node.fqdn == table else ""
        view.add_row(
            str(node.id),
            f"{marker}{node.fqdn}",
            str(node.level),
            str(node.distance),
            ", ".join(sorted(n.fqdn for n in node.previous)),
        )
    console.print(view)
    console.print(
        f"{lineage.node_count} tables, {lineage.edge_count} edges, depth {lineage.depth}"
    )
