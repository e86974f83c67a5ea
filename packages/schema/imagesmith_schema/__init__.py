"""
imagesmith Schema - validated configuration models.

Usage:
    from imagesmith_schema import LaunchConfig, MappingConfig, ProjectConfig
"""

from .project_config import LaunchConfig, MappingConfig, ProjectConfig

__all__ = [
    "LaunchConfig",
    "MappingConfig",
    "ProjectConfig",
]
