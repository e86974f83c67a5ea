"""Kinds commands - show the Kind to filename type mapping."""

from pathlib import Path
from typing import Optional

import typer
from imagesmith_common import ImagesmithError
from imagesmith_schema import MappingConfig
from imagesmith_sdk.kinds import KindFilenameMapper, build_mapper, dump_overrides
from rich.table import Table

from .utils import console, error, fail, load_project_config

OUTPUT_FORMATS = ["table", "properties"]


def _mapper(mapping: Optional[str], optional: bool, config_file: Optional[Path]) -> KindFilenameMapper:
    """--mapping wins over the config file, which wins over $IMAGESMITH_MAPPING."""
    config = load_project_config(config_file).mapping
    if mapping:
        config = MappingConfig(location=mapping, optional=optional)
    elif optional:
        config = config.model_copy(update={"optional": True})
    try:
        return build_mapper(config)
    except ImagesmithError as e:
        raise fail(e)


def kinds(
    mapping: Optional[str] = typer.Option(
        None,
        "--mapping",
        "-m",
        help="Override mapping document (defaults to mapping.location, then $IMAGESMITH_MAPPING)",
    ),
    config_file: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Project config file (defaults to ./imagesmith.yaml when present)",
    ),
    optional: bool = typer.Option(
        False,
        "--optional",
        help="Ignore an unreadable override document",
    ),
    kind: Optional[str] = typer.Option(
        None,
        "--kind",
        "-k",
        help="Only show this Kind",
    ),
    output: str = typer.Option(
        "table",
        "--format",
        "-f",
        help="Output format: table (default) or properties",
    ),
):
    """
    Show the Kind to filename type mapping.

    \b
    Examples:
        imagesmith kinds
        imagesmith kinds --kind ConfigMap
        imagesmith kinds --mapping custom.properties --format properties
        imagesmith kinds --config service/imagesmith.yaml
    """
    if output not in OUTPUT_FORMATS:
        error(f"Invalid format: '{output}'. Valid options: {', '.join(OUTPUT_FORMATS)}")
        raise typer.Exit(1)

    mapper = _mapper(mapping, optional, config_file)
    selected = mapper.as_dict()
    if kind:
        if kind not in mapper:
            error(f"Unknown Kind: '{kind}'")
            raise typer.Exit(1)
        selected = {kind: selected[kind]}

    if output == "properties":
        typer.echo(dump_overrides(selected), nl=False)
        return

    table = Table(title="Kind filename types")
    table.add_column("Kind", style="cyan")
    table.add_column("Filename types")
    table.add_column("Written as", style="green")
    for name, aliases in selected.items():
        table.add_row(name, ", ".join(aliases), mapper.filename_type(name))
    console.print(table)


def kind_of(
    filename: str = typer.Argument(..., help="Manifest fragment file name, e.g. app-cm.yml"),
    mapping: Optional[str] = typer.Option(
        None,
        "--mapping",
        "-m",
        help="Override mapping document (defaults to mapping.location, then $IMAGESMITH_MAPPING)",
    ),
    config_file: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Project config file (defaults to ./imagesmith.yaml when present)",
    ),
):
    """
    Show which Kind a manifest fragment file name maps to.

    \b
    Examples:
        imagesmith kind-of frontend-svc.yml
    """
    mapper = _mapper(mapping, False, config_file)
    resolved = mapper.kind_from_filename(filename)
    if resolved is None:
        error(f"No Kind matches '{filename}'")
        raise typer.Exit(1)
    typer.echo(resolved)
