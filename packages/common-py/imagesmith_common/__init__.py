"""
imagesmith Common - shared errors, logging and constants.

Usage:
    from imagesmith_common import get_logger, MalformedInputError
"""

from .constants import (
    DEFAULT_MAPPING_RESOURCE,
    FRAGMENT_EXTENSIONS,
    JAVA_CLASS_NAME,
    JAVA_MAIN_CLASS_ENV,
    LOG_LEVEL_ENV_VAR,
    LOG_LEVELS,
    LOG_STREAMS,
    MAIN_CLASS_ATTRIBUTE,
    MANIFEST_PATH,
    MAPPING_ENV_VAR,
    GeneratorDefaults,
)
from .errors import (
    AmbiguousResolutionError,
    ImagesmithError,
    MalformedInputError,
    MissingResourceError,
    UndeterminedLaunchTargetError,
    ValidationError,
)
from .logger import (
    ImagesmithLogger,
    clear_build_id,
    configure_logging,
    get_build_id,
    get_log_stream,
    get_logger,
    set_build_id,
    set_log_stream,
)

__all__ = [
    # Errors
    "ImagesmithError",
    "ValidationError",
    "MalformedInputError",
    "MissingResourceError",
    "AmbiguousResolutionError",
    "UndeterminedLaunchTargetError",
    # Logging
    "ImagesmithLogger",
    "get_logger",
    "configure_logging",
    "set_log_stream",
    "get_log_stream",
    "set_build_id",
    "get_build_id",
    "clear_build_id",
    # Constants
    "MAPPING_ENV_VAR",
    "LOG_LEVEL_ENV_VAR",
    "LOG_LEVELS",
    "LOG_STREAMS",
    "DEFAULT_MAPPING_RESOURCE",
    "JAVA_MAIN_CLASS_ENV",
    "MANIFEST_PATH",
    "MAIN_CLASS_ATTRIBUTE",
    "FRAGMENT_EXTENSIONS",
    "JAVA_CLASS_NAME",
    "GeneratorDefaults",
]
