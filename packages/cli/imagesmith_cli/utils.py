"""Console helpers shared by CLI commands."""

from pathlib import Path
from typing import Optional

import typer
import yaml
from imagesmith_common import ImagesmithError
from imagesmith_schema import ProjectConfig
from pydantic import ValidationError as PydanticValidationError
from rich.console import Console

console = Console()

CONFIG_FILENAME = "imagesmith.yaml"


def success(message: str) -> None:
    console.print(f"[green]✓[/green] {message}")


def info(message: str) -> None:
    console.print(f"[blue]ℹ[/blue] {message}")


def warning(message: str) -> None:
    console.print(f"[yellow]⚠[/yellow] {message}")


def error(message: str) -> None:
    console.print(f"[red]✗[/red] {message}")


def fail(exc: ImagesmithError, exit_code: int = 1) -> typer.Exit:
    """Print an imagesmith error with its code and return the Exit to raise."""
    error(f"{exc.message} [dim]({exc.code})[/dim]")
    return typer.Exit(exit_code)


def load_project_config(path: Optional[Path], base_dir: Path = Path(".")) -> ProjectConfig:
    """
    Load the project config, by default ``<base_dir>/imagesmith.yaml``.

    A missing file is only an error when the path was given explicitly. A
    relative ``mapping.location`` is resolved against the file's directory.

    Raises:
        typer.Exit: If the file is missing, is not valid YAML or fails validation
    """
    default = base_dir / CONFIG_FILENAME
    if path is None:
        if not default.exists():
            return ProjectConfig()
        path = default

    if not path.exists():
        error(f"Config file not found: {path}")
        raise typer.Exit(1)

    try:
        data = yaml.safe_load(path.read_text()) or {}
    except yaml.YAMLError as e:
        error(f"YAML parsing error: {e}")
        raise typer.Exit(1)

    if not isinstance(data, dict):
        error(f"Invalid config format: {path}")
        raise typer.Exit(1)

    try:
        config = ProjectConfig.model_validate(data)
    except ImagesmithError as e:
        raise fail(e)
    except PydanticValidationError as e:
        error(f"Invalid config {path}: {e.errors()[0]['msg']}")
        raise typer.Exit(1)

    # A relative override location in the file is relative to the file
    location = config.mapping.location
    if "mapping" in data and location and not Path(location).expanduser().is_absolute():
        mapping = config.mapping.model_copy(update={"location": str(path.parent / location)})
        config = config.model_copy(update={"mapping": mapping})
    return config
