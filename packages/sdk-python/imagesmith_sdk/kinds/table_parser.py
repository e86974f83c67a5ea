"""
Kind Table Parser
=================

Parses the bundled AsciiDoc table that lists, for each cluster resource
Kind, the filename types (aliases) used when a combined manifest is split
into one file per resource:

    [cols=2*,options="header"]
    |===
    |Kind
    |Filename Type

    |ConfigMap
    a|`cm`, `configmap`
    |===

Anything before the opening ``|===`` is formatting metadata and is skipped,
as is the header row. Structural defects are hard errors: a mapping with a
missing row would silently mis-name split files.
"""

from enum import Enum
from typing import Dict, List, Optional, Tuple

from imagesmith_common import MalformedInputError
from imagesmith_common.logger import get_logger

from .streams import Stream, iter_numbered, read_lines, stream_name

logger = get_logger(__name__)

KindMapping = Dict[str, List[str]]

TABLE_DELIMITER = "|==="


class _State(Enum):
    BEFORE_TABLE = "before_table"
    HEADER = "header"
    RECORDS = "records"
    DONE = "done"


def parse_aliases(cell: str) -> List[str]:
    """
    Split an alias cell into normalized tokens.

    Tokens are comma separated, trimmed, stripped of backtick quoting and
    lower-cased. Duplicates and empty tokens are dropped, order is kept.

    Examples:
        >>> parse_aliases("`cm`, `configmap`")
        ['cm', 'configmap']
    """
    aliases: List[str] = []
    for token in cell.split(","):
        alias = token.strip().strip("`").strip().lower()
        if alias and alias not in aliases:
            aliases.append(alias)
    return aliases


def _alias_cell(line: str) -> Optional[str]:
    """Return the cell content if ``line`` is an alias row, else None."""
    if line.startswith("a|"):
        return line[2:]
    if line.startswith("|`"):
        return line[1:]
    return None


def _add(mapping: KindMapping, kind: str, aliases: List[str]) -> None:
    existing = mapping.setdefault(kind, [])
    for alias in aliases:
        if alias not in existing:
            existing.append(alias)


def parse_kind_table(stream: Stream, source: Optional[str] = None) -> KindMapping:
    """
    Parse a Kind/filename-type AsciiDoc table.

    The stream is read to the end and closed, whether parsing succeeds or not.

    Args:
        stream: Binary or text stream with the table document
        source: Document name used in error messages (defaults to the stream name)

    Returns:
        Mapping of Kind to its ordered alias list

    Raises:
        MalformedInputError: If a filename type row has no Kind row before it,
            a Kind row has no filename types, or no table is present
    """
    name = stream_name(stream, source)
    lines = read_lines(stream, name)

    mapping: KindMapping = {}
    state = _State.BEFORE_TABLE
    pending: Optional[Tuple[str, int]] = None

    for line_no, line in iter_numbered(lines):
        if state is _State.DONE:
            break

        if line == TABLE_DELIMITER:
            if state is _State.BEFORE_TABLE:
                state = _State.HEADER
                continue
            if pending:
                raise MalformedInputError(
                    f"Kind '{pending[0]}' has no filename type row", source=name, line=pending[1]
                )
            state = _State.DONE
            continue

        if state is _State.BEFORE_TABLE:
            continue

        if state is _State.HEADER:
            if not line:
                state = _State.RECORDS
            continue

        if not line:
            if pending:
                raise MalformedInputError(
                    f"Kind '{pending[0]}' has no filename type row", source=name, line=pending[1]
                )
            continue

        cell = _alias_cell(line)
        if cell is not None:
            if pending is None:
                raise MalformedInputError(
                    "Filename type row without a preceding Kind row", source=name, line=line_no
                )
            aliases = parse_aliases(cell)
            if not aliases:
                raise MalformedInputError(
                    f"Kind '{pending[0]}' has an empty filename type row", source=name, line=line_no
                )
            _add(mapping, pending[0], aliases)
            pending = None
        elif line.startswith("|"):
            if pending:
                raise MalformedInputError(
                    f"Kind '{pending[0]}' has no filename type row", source=name, line=pending[1]
                )
            kind = line[1:].strip()
            if not kind:
                raise MalformedInputError("Empty Kind cell", source=name, line=line_no)
            pending = (kind, line_no)
        else:
            raise MalformedInputError(f"Unexpected content '{line}'", source=name, line=line_no)

    if state is _State.BEFORE_TABLE:
        raise MalformedInputError(f"No '{TABLE_DELIMITER}' table found", source=name)
    if pending:
        raise MalformedInputError(
            f"Kind '{pending[0]}' has no filename type row", source=name, line=pending[1]
        )

    logger.debug("Parsed kind table", source=name, kinds=len(mapping))
    return mapping
