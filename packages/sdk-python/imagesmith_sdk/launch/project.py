"""
Project build facts supplied by the build tool integration.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from imagesmith_common import GeneratorDefaults


@dataclass
class ProjectContext:
    """
    Where a project's build outputs live.

    ``output_directory`` defaults to ``<base_directory>/target`` and
    ``classes_directory`` to ``<output_directory>/classes``. Relative paths
    are taken relative to ``base_directory``.
    """

    base_directory: Path
    output_directory: Optional[Path] = None
    classes_directory: Optional[Path] = None
    version: Optional[str] = None
    artifact_id: Optional[str] = None

    def __post_init__(self) -> None:
        self.base_directory = Path(self.base_directory)
        self.output_directory = self._under_base(self.output_directory, GeneratorDefaults.OUTPUT_DIR)
        if self.classes_directory is None:
            self.classes_directory = self.output_directory / GeneratorDefaults.CLASSES_DIR
        else:
            self.classes_directory = self._under_base(self.classes_directory, GeneratorDefaults.CLASSES_DIR)

    def _under_base(self, value: Optional[Union[str, Path]], default: str) -> Path:
        path = Path(value) if value is not None else Path(default)
        return path if path.is_absolute() else self.base_directory / path
