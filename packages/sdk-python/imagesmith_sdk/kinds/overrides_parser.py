"""
Kind Overrides Parser
=====================

Parses user-supplied Kind/filename-type overrides written in flat
properties format:

    # extra aliases for existing kinds
    ConfigMap=cfg
    Pod = pd, pod
    MyCustomKind: mck, mycustomkind

Blank lines and ``#``/``!`` comments are skipped. ``=`` and ``:`` both
separate the Kind from its aliases; unlike Java properties, whitespace
alone is not a separator. A line ending in an unescaped ``\\`` continues on
the next line, and a repeated Kind replaces the earlier line, as in
properties files:

    Pod = pd, \\
          pod
"""

from typing import Dict, Iterator, List, Optional, Tuple

from imagesmith_common import MalformedInputError
from imagesmith_common.logger import get_logger

from .streams import Stream, iter_numbered, read_lines, stream_name
from .table_parser import KindMapping

logger = get_logger(__name__)

COMMENT_PREFIXES = ("#", "!")


def _continues(line: str) -> bool:
    trailing = len(line) - len(line.rstrip("\\"))
    return trailing % 2 == 1


def _logical_lines(lines: List[str]) -> Iterator[Tuple[int, str]]:
    """Join backslash-continued lines; yields the number of the first line."""
    start, parts = 0, []
    for line_no, line in iter_numbered(lines):
        if not parts:
            if not line or line.startswith(COMMENT_PREFIXES):
                continue
            start = line_no
        if _continues(line):
            parts.append(line[:-1])
            continue
        parts.append(line)
        yield start, "".join(parts)
        parts = []
    if parts:
        yield start, "".join(parts)


def _split_entry(line: str) -> Optional[tuple]:
    positions = [p for p in (line.find("="), line.find(":")) if p >= 0]
    if not positions:
        return None
    index = min(positions)
    return line[:index], line[index + 1 :]


def _parse_values(value: str) -> List[str]:
    aliases: List[str] = []
    for token in value.split(","):
        alias = token.strip().lower()
        if alias and alias not in aliases:
            aliases.append(alias)
    return aliases


def parse_overrides(stream: Stream, source: Optional[str] = None) -> KindMapping:
    """
    Parse a ``Kind=alias, alias`` override document.

    The stream is read to the end and closed, whether parsing succeeds or not.

    Args:
        stream: Binary or text stream with the override document
        source: Document name used in error messages (defaults to the stream name)

    Returns:
        Mapping of Kind to its ordered alias list

    Raises:
        MalformedInputError: If a line has no separator, no Kind or no aliases
    """
    name = stream_name(stream, source)
    lines = read_lines(stream, name)
    mapping: Dict[str, List[str]] = {}

    for line_no, line in _logical_lines(lines):
        entry = _split_entry(line)
        if entry is None:
            raise MalformedInputError(
                f"Expected 'Kind=alias, ...' but got '{line}'", source=name, line=line_no
            )
        kind, value = entry[0].strip(), entry[1]
        if not kind:
            raise MalformedInputError("Override entry has no Kind", source=name, line=line_no)

        aliases = _parse_values(value)
        if not aliases:
            raise MalformedInputError(
                f"Override for Kind '{kind}' has no filename types", source=name, line=line_no
            )

        if kind in mapping:
            logger.debug("Kind overridden twice, keeping last entry", kind=kind, source=name, line=line_no)
            del mapping[kind]
        mapping[kind] = aliases

    return mapping


def dump_overrides(mapping: KindMapping) -> str:
    """
    Serialize a mapping to the override format.

    ``parse_overrides`` of the result yields an equal mapping.

    Examples:
        >>> dump_overrides({"Pod": ["pd", "pod"]})
        'Pod=pd, pod\\n'
    """
    return "".join(f"{kind}={', '.join(aliases)}\n" for kind, aliases in mapping.items())
