"""
Launch Target Resolver
======================

Decides which entry point a generated image starts, trying three stages in
a fixed order and stopping at the first that produces an answer:

1. Explicit configuration (``LaunchConfig.main_class``), exported to the
   image environment
2. A fat archive in the build output, whose manifest already names the
   entry point, so nothing is exported
3. A unique main class found by static scanning, exported to the image
   environment

Each stage returns a descriptor or None. When every stage returns None the
result is an ``UndeterminedLaunchTarget`` value rather than an exception;
``resolve_or_raise`` turns it into ``UndeterminedLaunchTargetError`` for
callers that need an answer.

Usage:
    from imagesmith_sdk.launch import LaunchTargetResolver, ProjectContext

    resolver = LaunchTargetResolver(config.launch, ProjectContext(Path(".")))
    resolution = resolver.resolve()
    if isinstance(resolution, LaunchDescriptor):
        env.update(resolution.env())
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional, Protocol, Tuple, Union, runtime_checkable

from imagesmith_common import JAVA_MAIN_CLASS_ENV, UndeterminedLaunchTargetError
from imagesmith_common.logger import get_logger
from imagesmith_schema import LaunchConfig

from .archive_inspector import FatArchiveInspector, FatArchiveResult
from .class_scanner import StaticClassScanner, select_main_class
from .project import ProjectContext

logger = get_logger(__name__)


class LaunchSource(Enum):
    """Stage of the fallback chain that produced the entry point."""

    CONFIG = "config"
    ARCHIVE = "archive"
    SCAN = "scan"


@dataclass(frozen=True)
class LaunchDescriptor:
    """Resolved entry point for an image."""

    main_class: str
    inject_env: bool
    """True when the entry point must be exported as JAVA_MAIN_CLASS"""

    source: LaunchSource
    archive: Optional[FatArchiveResult] = None

    def env(self) -> Dict[str, str]:
        """Environment entries to add to the image."""
        if not self.inject_env:
            return {}
        return {JAVA_MAIN_CLASS_ENV: self.main_class}


@dataclass(frozen=True)
class UndeterminedLaunchTarget:
    """No stage produced an entry point."""

    stages_tried: Tuple[str, ...]
    candidates: Tuple[str, ...] = ()

    @property
    def message(self) -> str:
        text = f"Cannot determine a launch target (tried: {', '.join(self.stages_tried)})"
        if self.candidates:
            text += f"; several main classes found: {', '.join(self.candidates)}"
        else:
            text += "; no main class found"
        return text

    def to_error(self) -> UndeterminedLaunchTargetError:
        return UndeterminedLaunchTargetError(self.message, candidates=self.candidates)


LaunchResolution = Union[LaunchDescriptor, UndeterminedLaunchTarget]


@runtime_checkable
class ArchiveDetector(Protocol):
    """Anything that can look for a fat archive."""

    def scan(self) -> Optional[FatArchiveResult]:
        ...


@runtime_checkable
class MainClassDetector(Protocol):
    """Anything that can list runnable classes."""

    def find_main_classes(self) -> List[str]:
        ...


class LaunchTargetResolver:
    """
    Runs the launch fallback chain for one project.

    Resolvers hold no shared state; build one per project and call
    ``resolve`` as often as needed. Nothing is cached between calls since
    build outputs change between builds.
    """

    def __init__(
        self,
        config: Optional[LaunchConfig],
        project: ProjectContext,
        archive_detector: Optional[ArchiveDetector] = None,
        class_detector: Optional[MainClassDetector] = None,
        strict: bool = False,
    ):
        """
        Args:
            config: Explicit launch settings, may be None
            project: Build output locations
            archive_detector: Fat archive detector, defaults to FatArchiveInspector
                over the output directory
            class_detector: Main class detector, defaults to StaticClassScanner
                over the classes directory
            strict: Treat several archives or several main classes as an error
        """
        self.config = config or LaunchConfig()
        self.project = project
        self.strict = strict
        self.archive_detector = archive_detector or FatArchiveInspector(
            project.output_directory, strict=strict
        )
        self.class_detector = class_detector or StaticClassScanner(
            project.classes_directory, strict=strict
        )

    @property
    def stages(self) -> List[Tuple[str, Callable[[List[str]], Optional[LaunchDescriptor]]]]:
        """Stage name and callable, in order; each callable may record scan candidates."""
        return [
            (LaunchSource.CONFIG.value, self._from_config),
            (LaunchSource.ARCHIVE.value, self._from_archive),
            (LaunchSource.SCAN.value, self._from_scan),
        ]

    def resolve(self) -> LaunchResolution:
        """
        Resolve the launch target.

        Returns:
            LaunchDescriptor from the first successful stage, otherwise
            UndeterminedLaunchTarget listing the stages and candidates

        Raises:
            AmbiguousResolutionError: Only when strict is set
        """
        tried: List[str] = []
        candidates: List[str] = []
        for name, stage in self.stages:
            tried.append(name)
            descriptor = stage(candidates)
            if descriptor is not None:
                logger.info(
                    "Resolved launch target",
                    main_class=descriptor.main_class,
                    source=descriptor.source.value,
                    inject_env=descriptor.inject_env,
                )
                return descriptor

        outcome = UndeterminedLaunchTarget(stages_tried=tuple(tried), candidates=tuple(candidates))
        logger.warning(outcome.message, candidates=list(outcome.candidates))
        return outcome

    def resolve_or_raise(self) -> LaunchDescriptor:
        """
        Resolve the launch target or fail.

        Raises:
            UndeterminedLaunchTargetError: If no stage produced an entry point
        """
        resolution = self.resolve()
        if isinstance(resolution, UndeterminedLaunchTarget):
            raise resolution.to_error()
        return resolution

    def _from_config(self, candidates: List[str]) -> Optional[LaunchDescriptor]:
        if not self.config.main_class:
            return None
        return LaunchDescriptor(
            main_class=self.config.main_class,
            inject_env=True,
            source=LaunchSource.CONFIG,
        )

    def _from_archive(self, candidates: List[str]) -> Optional[LaunchDescriptor]:
        result = self.archive_detector.scan()
        if result is None:
            return None
        return LaunchDescriptor(
            main_class=result.main_class,
            inject_env=False,
            source=LaunchSource.ARCHIVE,
            archive=result,
        )

    def _from_scan(self, candidates: List[str]) -> Optional[LaunchDescriptor]:
        candidates.extend(self.class_detector.find_main_classes())
        main_class = select_main_class(candidates, self.strict, self.project.classes_directory)
        if main_class is None:
            return None
        return LaunchDescriptor(main_class=main_class, inject_env=True, source=LaunchSource.SCAN)
