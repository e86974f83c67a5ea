"""
imagesmith Exception Classes

This module defines the exception hierarchy for all imagesmith packages.
All custom exceptions inherit from ImagesmithError to enable consistent error handling.

Usage:
    from imagesmith_common.errors import MalformedInputError, MissingResourceError

    if alias_line and kind is None:
        raise MalformedInputError("Alias row without a Kind row", source="mapping.adoc", line=7)
"""

from typing import List, Optional, Sequence


class ImagesmithError(Exception):
    """
    Base exception for all imagesmith errors.

    All custom imagesmith exceptions should inherit from this class to enable
    consistent error handling across packages and the CLI.

    Attributes:
        message: Human-readable error message
        code: Error code for programmatic handling
    """

    def __init__(self, message: str, code: str = "INTERNAL_ERROR"):
        self.message = message
        self.code = code
        super().__init__(self.message)

    def to_dict(self) -> dict:
        """
        Serialize error to dictionary for CLI and log output.

        Returns:
            dict with error details including class name, code, and message
        """
        return {
            "error": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
        }

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code='{self.code}', message='{self.message}')"


class ValidationError(ImagesmithError):
    """
    Raised when configuration validation fails.

    Use this for:
    - Malformed main class names
    - Empty mapping locations
    - Schema validation failures

    Example:
        if not JAVA_CLASS_NAME.match(main_class):
            raise ValidationError(f"Invalid main class: '{main_class}'")
    """

    def __init__(self, message: str):
        super().__init__(message, code="VALIDATION_ERROR")


class MalformedInputError(ImagesmithError):
    """
    Raised when a bundled or override document cannot be parsed.

    This always indicates a packaging or user configuration defect and is
    never silently ignored. The offending document and line are kept so the
    message can point at them.

    Example:
        raise MalformedInputError("Alias row without a Kind row", source="table.adoc", line=12)
    """

    def __init__(self, message: str, source: Optional[str] = None, line: Optional[int] = None):
        self.source = source
        self.line = line
        location = ""
        if source and line is not None:
            location = f" ({source}, line {line})"
        elif source:
            location = f" ({source})"
        elif line is not None:
            location = f" (line {line})"
        super().__init__(f"{message}{location}", code="MALFORMED_INPUT")

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["source"] = self.source
        data["line"] = self.line
        return data


class MissingResourceError(ImagesmithError):
    """
    Raised when a configured document cannot be read.

    Use this for:
    - An override mapping path that does not exist
    - An override mapping path that is a directory or unreadable

    Example:
        raise MissingResourceError("/etc/mapping.properties", key="IMAGESMITH_MAPPING")
    """

    def __init__(self, location: str, key: Optional[str] = None, reason: Optional[str] = None):
        self.location = location
        self.key = key
        message = f"Cannot read mapping document '{location}'"
        if key:
            message += f" (configured by {key})"
        if reason:
            message += f": {reason}"
        super().__init__(message, code="MISSING_RESOURCE")


class AmbiguousResolutionError(ImagesmithError):
    """
    Raised when several equally valid candidates exist and the caller
    asked for strict resolution.

    Without strict mode the same situation is resolved deterministically
    and only logged as a warning.

    Example:
        raise AmbiguousResolutionError("Several main classes found", candidates=["a.Main", "b.Main"])
    """

    def __init__(self, message: str, candidates: Sequence[str] = ()):
        self.candidates: List[str] = list(candidates)
        if self.candidates:
            message = f"{message}: {', '.join(self.candidates)}"
        super().__init__(message, code="AMBIGUOUS_RESOLUTION")

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["candidates"] = self.candidates
        return data


class UndeterminedLaunchTargetError(ImagesmithError):
    """
    Raised when no stage of the launch fallback chain produced an entry point
    and the caller needs one.

    Example:
        raise UndeterminedLaunchTargetError("No main class found", candidates=[])
    """

    def __init__(self, message: str, candidates: Sequence[str] = ()):
        self.candidates: List[str] = list(candidates)
        super().__init__(message, code="UNDETERMINED_LAUNCH_TARGET")

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["candidates"] = self.candidates
        return data
