"""
Fat Archive Inspection
======================

Finds a self-contained executable archive (a "fat" jar or war) in a build
output directory and reads the entry point declared in its manifest.

An archive qualifies by structure, not by extension: it must be a valid ZIP
file containing ``META-INF/MANIFEST.MF`` with a ``Main-Class`` attribute.
When several archives qualify, the largest wins (a fat archive bundles its
dependencies, so it outweighs a thin one that also declares ``Main-Class``);
equal sizes fall back to the file name.
"""

import os
import zipfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Union

from imagesmith_common import (
    MAIN_CLASS_ATTRIBUTE,
    MANIFEST_PATH,
    AmbiguousResolutionError,
)
from imagesmith_common.logger import get_logger

from .fs import is_within, list_files

logger = get_logger(__name__)


@dataclass
class FatArchiveResult:
    """A detected fat archive and its manifest."""

    archive_file: Path
    """Path of the archive"""

    main_class: str
    """Entry point from the ``Main-Class`` attribute"""

    manifest: Dict[str, str] = field(default_factory=dict)
    """Main section attributes of the manifest"""

    def manifest_entry(self, key: str) -> Optional[str]:
        """Value of a main section attribute (name matched case-insensitively), or None."""
        return manifest_value(self.manifest, key)

    def relative_to(self, base: Union[str, Path]) -> Path:
        """
        Archive location relative to ``base``.

        Uses ``..`` segments when the archive is not below ``base``.
        """
        return Path(os.path.relpath(self.archive_file.resolve(), Path(base).resolve()))


def parse_manifest(text: str) -> Dict[str, str]:
    """
    Parse the main section of a JAR manifest.

    Continuation lines start with a single space and are appended to the
    previous value. Parsing stops at the first blank line, which ends the
    main section.

    Examples:
        >>> parse_manifest("Manifest-Version: 1.0\\nMain-Class: org.example.App\\n")
        {'Manifest-Version': '1.0', 'Main-Class': 'org.example.App'}
    """
    attributes: Dict[str, str] = {}
    last_key: Optional[str] = None
    for line in text.splitlines():
        if not line:
            break
        if line.startswith(" ") and last_key is not None:
            attributes[last_key] += line[1:]
            continue
        key, sep, value = line.partition(":")
        if not sep:
            continue
        last_key = key.strip()
        attributes[last_key] = value.strip()
    return attributes


def manifest_value(manifest: Dict[str, str], key: str) -> Optional[str]:
    """Look up a manifest attribute; attribute names are case-insensitive."""
    if key in manifest:
        return manifest[key]
    wanted = key.lower()
    for name, value in manifest.items():
        if name.lower() == wanted:
            return value
    return None


def read_archive_manifest(archive: Path) -> Optional[Dict[str, str]]:
    """
    Return the manifest attributes of ``archive``, or None if it has none.

    Raises:
        zipfile.BadZipFile: If the archive is corrupt
        OSError: If the archive cannot be read
    """
    with zipfile.ZipFile(archive) as zf:
        try:
            raw = zf.read(MANIFEST_PATH)
        except KeyError:
            return None
    return parse_manifest(raw.decode("utf-8", errors="replace"))


class FatArchiveInspector:
    """
    Detects a fat archive directly inside a build output directory.

    Example:
        >>> result = FatArchiveInspector(Path("target")).scan()
        >>> if result:
        ...     print(result.main_class, result.archive_file)
    """

    def __init__(self, directory: Optional[Union[str, Path]], strict: bool = False):
        """
        Args:
            directory: Build output directory, may not exist
            strict: Raise AmbiguousResolutionError when several archives qualify
        """
        self.directory = Path(directory) if directory is not None else None
        self.strict = strict
        self.candidates: List[FatArchiveResult] = []

    def scan(self) -> Optional[FatArchiveResult]:
        """
        Scan the directory for a fat archive.

        Returns:
            FatArchiveResult for the selected archive, or None if there is none

        Raises:
            AmbiguousResolutionError: If several archives qualify and strict is set
        """
        self.candidates = []
        if self.directory is None or not self.directory.is_dir():
            logger.debug("No build output directory to inspect", directory=str(self.directory))
            return None

        for path in list_files(self.directory):
            if not is_within(path, self.directory):
                logger.debug("Skipping link leaving the output directory", path=str(path))
                continue
            result = self._inspect(path)
            if result is not None:
                self.candidates.append(result)

        if not self.candidates:
            return None

        ordered = sorted(
            self.candidates,
            key=lambda r: (-r.archive_file.stat().st_size, r.archive_file.name),
        )
        selected = ordered[0]
        if len(ordered) > 1:
            names = [r.archive_file.name for r in ordered]
            if self.strict:
                raise AmbiguousResolutionError(
                    f"Several executable archives found in {self.directory}", candidates=names
                )
            logger.warning(
                "Several executable archives found, using the largest",
                directory=str(self.directory),
                selected=selected.archive_file.name,
                candidates=names,
            )
        logger.debug(
            "Detected fat archive",
            archive=str(selected.archive_file),
            main_class=selected.main_class,
        )
        return selected

    def _inspect(self, path: Path) -> Optional[FatArchiveResult]:
        if not zipfile.is_zipfile(path):
            return None
        try:
            manifest = read_archive_manifest(path)
        except (zipfile.BadZipFile, OSError) as e:
            logger.warning("Cannot read archive", archive=str(path), error=str(e))
            return None
        if not manifest:
            return None
        main_class = manifest_value(manifest, MAIN_CLASS_ATTRIBUTE)
        if not main_class:
            return None
        return FatArchiveResult(archive_file=path, main_class=main_class, manifest=manifest)
