"""
Kind Filename Mapping
=====================

Combines the bundled Kind table with an optional override document and
exposes the result to the manifest-splitting code:

- ``merge_mappings``: per-Kind union, bundled aliases first
- ``load_mappings``: bundled table + configured override, built fresh per call
- ``KindFilenameMapper``: read-only lookups by Kind, fragment or filename

Usage:
    from imagesmith_sdk.kinds import build_mapper

    mapper = build_mapper()
    mapper.filename_type("ConfigMap")             # 'configmap'
    mapper.kind_from_filename("app-cm.yml")       # 'ConfigMap'
"""

from importlib import resources
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Iterator, List, Mapping, Optional, Tuple

from imagesmith_common import (
    DEFAULT_MAPPING_RESOURCE,
    FRAGMENT_EXTENSIONS,
    MAPPING_ENV_VAR,
    MissingResourceError,
)
from imagesmith_common.logger import get_logger
from imagesmith_schema import MappingConfig

from .overrides_parser import parse_overrides
from .table_parser import KindMapping, parse_kind_table

logger = get_logger(__name__)


def merge_mappings(bundled: KindMapping, overrides: Optional[KindMapping] = None) -> KindMapping:
    """
    Merge override aliases into the bundled mapping.

    For every Kind in either input the result holds the union of both alias
    lists: bundled aliases keep their order and come first, override-only
    aliases follow. Kinds unknown to the bundled table are added as given.
    Inputs are not modified, and merging the same overrides again changes
    nothing.

    Args:
        bundled: Mapping parsed from the bundled table
        overrides: Mapping parsed from the override document, if any

    Returns:
        New merged mapping
    """
    merged: KindMapping = {kind: list(aliases) for kind, aliases in bundled.items()}
    for kind, aliases in (overrides or {}).items():
        target = merged.setdefault(kind, [])
        for alias in aliases:
            if alias not in target:
                target.append(alias)
    return merged


def load_default_mappings() -> KindMapping:
    """Parse the Kind table shipped with the package."""
    resource = resources.files(__package__).joinpath(DEFAULT_MAPPING_RESOURCE)
    return parse_kind_table(resource.open("rb"), source=DEFAULT_MAPPING_RESOURCE)


def load_override_mappings(location: str, optional: bool = False) -> KindMapping:
    """
    Parse the override document at ``location``.

    Args:
        location: Path of the properties document
        optional: Return an empty mapping instead of failing when unreadable

    Returns:
        Parsed override mapping

    Raises:
        MissingResourceError: If the document cannot be opened and is not optional
        MalformedInputError: If the document cannot be parsed
    """
    path = Path(location).expanduser()
    try:
        stream = path.open("rb")
    except OSError as e:
        if optional:
            logger.warning(
                "Override mapping not readable, using bundled table only",
                location=str(path),
                key=MAPPING_ENV_VAR,
                reason=e.strerror or str(e),
            )
            return {}
        raise MissingResourceError(str(path), key=MAPPING_ENV_VAR, reason=e.strerror or str(e)) from e
    return parse_overrides(stream, source=str(path))


def load_mappings(config: Optional[MappingConfig] = None) -> KindMapping:
    """
    Build the Kind mapping for one run.

    Args:
        config: Override location; read from $IMAGESMITH_MAPPING when None

    Returns:
        Bundled mapping merged with the configured override
    """
    if config is None:
        config = MappingConfig.from_env()

    bundled = load_default_mappings()
    if not config.location:
        return bundled

    overrides = load_override_mappings(config.location, optional=config.optional)
    merged = merge_mappings(bundled, overrides)
    logger.info(
        "Loaded kind mapping overrides",
        location=config.location,
        overridden=len(overrides),
        kinds=len(merged),
    )
    return merged


class KindFilenameMapper:
    """
    Read-only lookups over a merged Kind mapping.

    Example:
        >>> mapper = KindFilenameMapper({"ConfigMap": ["cm", "configmap"]})
        >>> mapper.preferred_alias("ConfigMap")
        'cm'
        >>> mapper.filename_type("ConfigMap")
        'configmap'
        >>> mapper.kind_for_fragment("CM")
        'ConfigMap'
    """

    def __init__(self, mapping: KindMapping):
        self._mapping: Mapping[str, Tuple[str, ...]] = MappingProxyType(
            {kind: tuple(aliases) for kind, aliases in mapping.items()}
        )
        fragments: Dict[str, str] = {}
        for kind, aliases in self._mapping.items():
            for alias in aliases:
                # First Kind to claim an alias keeps it
                fragments.setdefault(alias.lower(), kind)
        self._fragments: Mapping[str, str] = MappingProxyType(fragments)

    def __contains__(self, kind: object) -> bool:
        return kind in self._mapping

    def __iter__(self) -> Iterator[str]:
        return iter(self._mapping)

    def __len__(self) -> int:
        return len(self._mapping)

    @property
    def kinds(self) -> List[str]:
        return list(self._mapping)

    def aliases(self, kind: str) -> Tuple[str, ...]:
        """All aliases for ``kind``, preferred first; empty for unknown Kinds."""
        return self._mapping.get(kind, ())

    def preferred_alias(self, kind: str) -> Optional[str]:
        aliases = self.aliases(kind)
        return aliases[0] if aliases else None

    def filename_type(self, kind: str) -> str:
        """
        Fragment used when writing the file for a resource of ``kind``.

        The last alias is the long canonical form; unknown Kinds use the
        lower-cased Kind.
        """
        aliases = self.aliases(kind)
        return aliases[-1] if aliases else kind.lower()

    def kind_for_fragment(self, fragment: str) -> Optional[str]:
        """Kind whose aliases include ``fragment`` (case-insensitive)."""
        return self._fragments.get(fragment.strip().lower())

    def kind_from_filename(self, filename: str) -> Optional[str]:
        """
        Kind of a split manifest fragment file.

        Examples:
            ``my-app-cm.yml`` -> ``ConfigMap``, ``deployment.yaml`` -> ``Deployment``
        """
        name = Path(filename).name
        lowered = name.lower()
        for extension in FRAGMENT_EXTENSIONS:
            if lowered.endswith(extension):
                name = name[: -len(extension)]
                break
        else:
            return None
        fragment = name.rsplit("-", 1)[-1]
        return self.kind_for_fragment(fragment) if fragment else None

    def as_dict(self) -> KindMapping:
        return {kind: list(aliases) for kind, aliases in self._mapping.items()}


def build_mapper(config: Optional[MappingConfig] = None) -> KindFilenameMapper:
    """Load the mapping for ``config`` and wrap it in a KindFilenameMapper."""
    return KindFilenameMapper(load_mappings(config))
