"""imagesmith SDK - resolution engine for container image and manifest generation.

This package provides:
- Kind to filename-type mapping for splitting manifests
- Launch target resolution for generated images
- Java exec image configuration

Example:
    >>> from imagesmith_sdk import build_mapper, LaunchTargetResolver, ProjectContext
    >>> mapper = build_mapper()
    >>> mapper.filename_type("ConfigMap")
    'configmap'
    >>> resolution = LaunchTargetResolver(None, ProjectContext(Path("."))).resolve()
"""

from .kinds import (
    KindFilenameMapper,
    KindMapping,
    build_mapper,
    dump_overrides,
    load_default_mappings,
    load_mappings,
    merge_mappings,
    parse_kind_table,
    parse_overrides,
)
from .launch import (
    FatArchiveInspector,
    FatArchiveResult,
    ImageConfiguration,
    JavaExecImageGenerator,
    LaunchDescriptor,
    LaunchSource,
    LaunchTargetResolver,
    ProjectContext,
    StaticClassScanner,
    UndeterminedLaunchTarget,
)

__version__ = "0.1.0"

__all__ = [
    # Kind mapping
    "KindMapping",
    "parse_kind_table",
    "parse_overrides",
    "dump_overrides",
    "merge_mappings",
    "load_default_mappings",
    "load_mappings",
    "KindFilenameMapper",
    "build_mapper",
    # Launch target
    "ProjectContext",
    "FatArchiveInspector",
    "FatArchiveResult",
    "StaticClassScanner",
    "LaunchTargetResolver",
    "LaunchDescriptor",
    "LaunchSource",
    "UndeterminedLaunchTarget",
    # Generation
    "ImageConfiguration",
    "JavaExecImageGenerator",
]
