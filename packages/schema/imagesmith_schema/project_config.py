"""
imagesmith Project Configuration Schema

Pydantic models for the project configuration consumed by the resolvers.

Design Principles:
- Pure validation: Receives dicts, validates structure, returns typed objects
- No file I/O: Reading imagesmith.yaml is the SDK/CLI's responsibility
- Extensible: Accepts unknown fields for generator options not modeled here

Usage:
    from imagesmith_schema import ProjectConfig

    data = yaml.safe_load(path.read_text())
    config = ProjectConfig.model_validate(data)
    config.launch.main_class
"""

import os
from typing import Any, Mapping, Optional

from imagesmith_common import JAVA_CLASS_NAME, MAPPING_ENV_VAR, ValidationError
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from typing_extensions import Self


def _blank_to_none(v: Any) -> Any:
    if isinstance(v, str) and not v.strip():
        return None
    return v.strip() if isinstance(v, str) else v


# =============================================================================
# LAUNCH TARGET
# =============================================================================


class LaunchConfig(BaseModel):
    """
    Explicit launch settings for the generated image.

    Both attributes are optional; leaving ``main_class`` unset lets the
    resolver fall back to archive inspection and class scanning.

    Example:
        ```yaml
        launch:
          mainClass: org.example.App
          name: example/app:1.0
        ```
    """

    main_class: Optional[str] = Field(default=None, alias="mainClass")
    """Fully-qualified entry point, used verbatim when set"""

    name: Optional[str] = None
    """Image name to generate"""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    @field_validator("main_class", mode="before")
    @classmethod
    def validate_main_class(cls, v: Any) -> Optional[str]:
        """Normalize blanks and check for a dotted Java class name."""
        v = _blank_to_none(v)
        if v is None:
            return None
        if not isinstance(v, str) or not JAVA_CLASS_NAME.match(v):
            raise ValidationError(
                f"Invalid main class: '{v}'. "
                f"Expected a fully-qualified class name such as 'org.example.App'"
            )
        return v

    @field_validator("name", mode="before")
    @classmethod
    def validate_name(cls, v: Any) -> Optional[str]:
        return _blank_to_none(v)


# =============================================================================
# KIND MAPPING OVERRIDE
# =============================================================================


class MappingConfig(BaseModel):
    """
    Location of the Kind-to-filename override document.

    ``location`` unset means only the bundled table applies. When
    ``optional`` is true an unreadable location is ignored with a warning
    instead of failing.

    Example:
        ```yaml
        mapping:
          location: config/kind-mapping.properties
          optional: false
        ```
    """

    location: Optional[str] = None
    optional: bool = False

    model_config = ConfigDict(extra="forbid")

    @field_validator("location", mode="before")
    @classmethod
    def validate_location(cls, v: Any) -> Optional[str]:
        return _blank_to_none(v)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "MappingConfig":
        """
        Build a MappingConfig from $IMAGESMITH_MAPPING.

        Args:
            environ: Environment to read, defaults to ``os.environ``
        """
        env = os.environ if environ is None else environ
        return cls(location=env.get(MAPPING_ENV_VAR))


# =============================================================================
# ROOT MODEL
# =============================================================================


class ProjectConfig(BaseModel):
    """
    Root model for ``imagesmith.yaml``.

    Usage:
        config = ProjectConfig.model_validate({"launch": {"mainClass": "a.B"}})
    """

    launch: LaunchConfig = Field(default_factory=LaunchConfig)
    mapping: MappingConfig = Field(default_factory=MappingConfig.from_env)

    model_config = ConfigDict(extra="allow")

    @model_validator(mode="after")
    def validate_mapping_optional(self) -> Self:
        """An optional override needs a location to be optional about."""
        if self.mapping.optional and self.mapping.location is None:
            raise ValidationError(
                "mapping.optional is set but mapping.location is missing; "
                "set a location or drop the optional flag"
            )
        return self
