"""
Stream helpers shared by the mapping parsers.

Both parsers accept binary or text streams and must release them on every
exit path, including parse failures.
"""

from contextlib import closing
from typing import IO, Iterator, List, Optional, Union

from imagesmith_common import MalformedInputError

Stream = Union[IO[bytes], IO[str]]


def stream_name(stream: Stream, source: Optional[str] = None) -> str:
    """Name used in error messages for ``stream``."""
    if source:
        return source
    name = getattr(stream, "name", None)
    return str(name) if name else "<stream>"


def read_lines(stream: Stream, source: str) -> List[str]:
    """
    Consume ``stream`` completely, close it and return its lines.

    Bytes are decoded as UTF-8 (a leading BOM is dropped).

    Raises:
        MalformedInputError: If the content is not valid UTF-8
    """
    with closing(stream):
        content = stream.read()
    if isinstance(content, bytes):
        try:
            content = content.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise MalformedInputError(f"Document is not valid UTF-8: {e}", source=source) from e
    return content.splitlines()


def iter_numbered(lines: List[str]) -> Iterator[tuple]:
    """Yield ``(line_number, stripped_line)`` pairs, 1-based."""
    for index, raw in enumerate(lines, start=1):
        yield index, raw.strip()
