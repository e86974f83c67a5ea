"""
Static Main Class Scanning
==========================

Last resort of the launch fallback chain: walks a directory of compiled
classes and collects every class declaring ``public static void
main(String[])``. Exactly one such class is a usable answer; none or
several leave the launch target undetermined.
"""

from pathlib import Path
from typing import List, Optional, Union

from imagesmith_common import AmbiguousResolutionError, MalformedInputError
from imagesmith_common.logger import get_logger

from .classfile import read_class_info
from .fs import walk_files

logger = get_logger(__name__)

CLASS_SUFFIX = ".class"


class StaticClassScanner:
    """
    Finds runnable classes in a classes directory.

    Example:
        >>> scanner = StaticClassScanner(Path("target/classes"))
        >>> scanner.find_main_classes()
        ['org.example.App']
        >>> scanner.main_class()
        'org.example.App'
    """

    def __init__(self, classes_directory: Optional[Union[str, Path]], strict: bool = False):
        """
        Args:
            classes_directory: Root of the compiled classes, may not exist
            strict: Raise AmbiguousResolutionError when several classes qualify
        """
        self.classes_directory = Path(classes_directory) if classes_directory is not None else None
        self.strict = strict
        self.candidates: List[str] = []

    def find_main_classes(self) -> List[str]:
        """
        Collect the classes that declare a main method.

        Unreadable or corrupt class files are logged and skipped.

        Returns:
            Sorted list of fully-qualified class names
        """
        found: List[str] = []
        root = self.classes_directory
        if root is None or not root.is_dir():
            logger.debug("No classes directory to scan", directory=str(root))
            self.candidates = found
            return found

        for class_file in walk_files(root, CLASS_SUFFIX):
            try:
                info = read_class_info(class_file.read_bytes(), source=str(class_file))
            except (MalformedInputError, OSError) as e:
                logger.warning("Skipping unreadable class file", path=str(class_file), error=str(e))
                continue
            if info.has_main_method:
                found.append(info.name)

        self.candidates = sorted(set(found))
        return list(self.candidates)

    def main_class(self) -> Optional[str]:
        """
        The single runnable class, if there is exactly one.

        Returns:
            Class name, or None when zero or several classes qualify

        Raises:
            AmbiguousResolutionError: If several classes qualify and strict is set
        """
        return select_main_class(self.find_main_classes(), self.strict, self.classes_directory)


def select_main_class(
    candidates: List[str],
    strict: bool = False,
    where: Optional[Union[str, Path]] = None,
) -> Optional[str]:
    """
    Pick the single main class from scan candidates.

    Returns:
        The only candidate, or None for zero or several candidates

    Raises:
        AmbiguousResolutionError: If several candidates exist and strict is set
    """
    if len(candidates) == 1:
        return candidates[0]
    if len(candidates) > 1:
        if strict:
            raise AmbiguousResolutionError(f"Several main classes found in {where}", candidates=candidates)
        logger.warning(
            "Found more than one main class, ignoring all of them",
            directory=str(where),
            candidates=candidates,
        )
    return None
