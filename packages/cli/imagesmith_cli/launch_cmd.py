"""Launch command - resolve the entry point of the generated image."""

import json
from pathlib import Path
from typing import Optional

import typer
from imagesmith_common import ImagesmithError, ValidationError
from imagesmith_schema import LaunchConfig
from imagesmith_sdk.launch import (
    LaunchTargetResolver,
    ProjectContext,
    UndeterminedLaunchTarget,
)

from .utils import error, fail, info, load_project_config, success, warning

UNDETERMINED_EXIT_CODE = 2


def launch(
    project_dir: Path = typer.Argument(Path("."), help="Project base directory"),
    config_file: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Project config file (defaults to ./imagesmith.yaml when present)",
    ),
    main_class: Optional[str] = typer.Option(
        None,
        "--main-class",
        help="Explicit main class, overrides the config file",
    ),
    output_dir: Optional[Path] = typer.Option(
        None,
        "--output-dir",
        "-o",
        help="Build output directory holding archives (default: target)",
    ),
    classes_dir: Optional[Path] = typer.Option(
        None,
        "--classes-dir",
        help="Compiled classes directory (default: <output-dir>/classes)",
    ),
    strict: bool = typer.Option(
        False,
        "--strict",
        help="Fail when several archives or main classes are found",
    ),
    as_json: bool = typer.Option(
        False,
        "--json",
        help="Print the result as JSON",
    ),
):
    """
    Resolve the main class a generated image should launch.

    Tries, in order: explicit configuration, a fat archive in the build
    output, then a unique main class among the compiled classes.

    \b
    Examples:
        imagesmith launch
        imagesmith launch ./service --output-dir build/libs
        imagesmith launch --main-class org.example.App --json
    """
    project_config = load_project_config(config_file, project_dir)
    launch_config = project_config.launch
    if main_class:
        try:
            launch_config = LaunchConfig(main_class=main_class, name=launch_config.name)
        except ValidationError as e:
            raise fail(e)

    project = ProjectContext(
        base_directory=project_dir,
        output_directory=output_dir,
        classes_directory=classes_dir,
    )
    resolver = LaunchTargetResolver(launch_config, project, strict=strict)

    try:
        resolution = resolver.resolve()
    except ImagesmithError as e:
        raise fail(e)

    if isinstance(resolution, UndeterminedLaunchTarget):
        if as_json:
            typer.echo(
                json.dumps(
                    {
                        "resolved": False,
                        "stages_tried": list(resolution.stages_tried),
                        "candidates": list(resolution.candidates),
                    }
                )
            )
        else:
            error(resolution.message)
            for candidate in resolution.candidates:
                warning(f"candidate: {candidate}")
        raise typer.Exit(UNDETERMINED_EXIT_CODE)

    if as_json:
        payload = {
            "resolved": True,
            "main_class": resolution.main_class,
            "source": resolution.source.value,
            "inject_env": resolution.inject_env,
            "env": resolution.env(),
        }
        if resolution.archive is not None:
            payload["archive"] = resolution.archive.relative_to(project.base_directory).as_posix()
        typer.echo(json.dumps(payload))
        return

    success(f"Main class: {resolution.main_class} (from {resolution.source.value})")
    if resolution.archive is not None:
        info(f"Archive: {resolution.archive.relative_to(project.base_directory).as_posix()}")
    if resolution.inject_env:
        for key, value in resolution.env().items():
            info(f"Image environment: {key}={value}")
    else:
        info("Main class is embedded in the archive; no environment variable needed")
