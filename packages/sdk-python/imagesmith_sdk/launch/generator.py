"""
Java Exec Image Generator
=========================

Turns a resolved launch target into the image configuration handed to the
build strategy. Only the configuration is produced here; building and
pushing images happens elsewhere.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from imagesmith_common import GeneratorDefaults
from imagesmith_common.logger import get_logger
from imagesmith_schema import LaunchConfig

from .project import ProjectContext
from .resolver import LaunchSource, LaunchTargetResolver

logger = get_logger(__name__)


@dataclass
class ImageConfiguration:
    """Image to build for a project."""

    name: str
    from_image: str = GeneratorDefaults.FROM_IMAGE
    env: Dict[str, str] = field(default_factory=dict)
    assembly_files: List[str] = field(default_factory=list)
    """Paths, relative to the project base directory, copied into the image"""


class JavaExecImageGenerator:
    """
    Generates the image configuration for a plain Java application.

    ``JAVA_MAIN_CLASS`` is set only when the resolved entry point is not
    already embedded in a fat archive.

    Example:
        >>> generator = JavaExecImageGenerator(LaunchConfig(name="app"), project)
        >>> images = generator.customize([])
        >>> images[0].env
        {'JAVA_MAIN_CLASS': 'org.example.App'}
    """

    def __init__(
        self,
        config: Optional[LaunchConfig],
        project: ProjectContext,
        resolver: Optional[LaunchTargetResolver] = None,
    ):
        self.config = config or LaunchConfig()
        self.project = project
        self.resolver = resolver or LaunchTargetResolver(self.config, project)

    def image_name(self) -> str:
        if self.config.name:
            return self.config.name
        artifact = self.project.artifact_id or self.project.base_directory.resolve().name
        return f"{artifact}:{self.project.version or GeneratorDefaults.IMAGE_TAG}"

    def customize(self, existing: List[ImageConfiguration]) -> List[ImageConfiguration]:
        """
        Append the generated image configuration.

        Args:
            existing: Image configurations from earlier generators

        Returns:
            New list with this generator's image appended

        Raises:
            UndeterminedLaunchTargetError: If no launch target can be resolved
        """
        descriptor = self.resolver.resolve_or_raise()

        if descriptor.source is LaunchSource.ARCHIVE and descriptor.archive is not None:
            assembly = descriptor.archive.relative_to(self.project.base_directory)
        else:
            assembly = self._relative(self.project.classes_directory)

        image = ImageConfiguration(
            name=self.image_name(),
            env=descriptor.env(),
            assembly_files=[assembly.as_posix()],
        )
        logger.info(
            "Generated image configuration",
            image=image.name,
            main_class=descriptor.main_class,
            source=descriptor.source.value,
        )
        return [*existing, image]

    def _relative(self, path: Path) -> Path:
        try:
            return path.resolve().relative_to(self.project.base_directory.resolve())
        except ValueError:
            return path
