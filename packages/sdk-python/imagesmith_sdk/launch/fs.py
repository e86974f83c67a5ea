"""
Filesystem traversal helpers for build output scanning.

Traversal never follows directory symlinks, and file symlinks whose target
lies outside the scanned root are reported by ``is_within`` so callers can
skip them.
"""

import os
from pathlib import Path
from typing import Iterator, List


def is_within(path: Path, root: Path) -> bool:
    """True if ``path`` (after resolving links) lies inside ``root``."""
    try:
        path.resolve().relative_to(root.resolve())
    except (ValueError, OSError):
        return False
    return True


def list_files(directory: Path) -> List[Path]:
    """Regular files directly inside ``directory``, sorted by name."""
    try:
        entries = sorted(directory.iterdir(), key=lambda p: p.name)
    except OSError:
        return []
    return [entry for entry in entries if entry.is_file()]


def walk_files(root: Path, suffix: str) -> Iterator[Path]:
    """
    Yield files under ``root`` ending with ``suffix``, in sorted order.

    Directory symlinks are not descended into; file symlinks pointing
    outside ``root`` are skipped.
    """
    for dirpath, dirnames, filenames in os.walk(root, followlinks=False):
        dirnames.sort()
        for filename in sorted(filenames):
            if not filename.endswith(suffix):
                continue
            path = Path(dirpath) / filename
            if path.is_symlink() and not is_within(path, root):
                continue
            if path.is_file():
                yield path
