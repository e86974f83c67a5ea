"""
imagesmith Launch Target Resolution
===================================

Determines the entry point of a generated image:

- Explicit configuration
- Fat archive manifest inspection
- Static class scanning

Usage:
    from imagesmith_sdk.launch import LaunchTargetResolver, ProjectContext

    resolver = LaunchTargetResolver(launch_config, ProjectContext(Path(".")))
    resolution = resolver.resolve()
"""

from .archive_inspector import (
    FatArchiveInspector,
    FatArchiveResult,
    manifest_value,
    parse_manifest,
    read_archive_manifest,
)
from .class_scanner import StaticClassScanner, select_main_class
from .classfile import ClassInfo, MethodInfo, read_class_info
from .generator import ImageConfiguration, JavaExecImageGenerator
from .project import ProjectContext
from .resolver import (
    ArchiveDetector,
    LaunchDescriptor,
    LaunchResolution,
    LaunchSource,
    LaunchTargetResolver,
    MainClassDetector,
    UndeterminedLaunchTarget,
)

__all__ = [
    # Project
    "ProjectContext",
    # Archive inspection
    "FatArchiveInspector",
    "FatArchiveResult",
    "parse_manifest",
    "manifest_value",
    "read_archive_manifest",
    # Class scanning
    "ClassInfo",
    "MethodInfo",
    "read_class_info",
    "StaticClassScanner",
    "select_main_class",
    # Resolution
    "ArchiveDetector",
    "MainClassDetector",
    "LaunchSource",
    "LaunchDescriptor",
    "UndeterminedLaunchTarget",
    "LaunchResolution",
    "LaunchTargetResolver",
    # Generation
    "ImageConfiguration",
    "JavaExecImageGenerator",
]
