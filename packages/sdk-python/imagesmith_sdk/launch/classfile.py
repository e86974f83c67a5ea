"""
JVM Class File Reader
=====================

Reads just enough of a compiled ``.class`` file to tell its binary name and
whether it declares a ``public static void main(String[])`` method.

Layout (JVM class file format):

    magic u4, minor u2, major u2,
    constant_pool_count u2, constant_pool[count - 1],
    access_flags u2, this_class u2, super_class u2,
    interfaces_count u2, interfaces[],
    fields_count u2, fields[], methods_count u2, methods[], ...
"""

import struct
from dataclasses import dataclass, field
from typing import Dict, List, Tuple

from imagesmith_common import MalformedInputError

MAGIC = 0xCAFEBABE

ACC_PUBLIC = 0x0001
ACC_STATIC = 0x0008

MAIN_METHOD_NAME = "main"
MAIN_METHOD_DESCRIPTOR = "([Ljava/lang/String;)V"

# Constant pool tags
CONSTANT_UTF8 = 1
CONSTANT_INTEGER = 3
CONSTANT_FLOAT = 4
CONSTANT_LONG = 5
CONSTANT_DOUBLE = 6
CONSTANT_CLASS = 7
CONSTANT_STRING = 8
CONSTANT_FIELDREF = 9
CONSTANT_METHODREF = 10
CONSTANT_INTERFACE_METHODREF = 11
CONSTANT_NAME_AND_TYPE = 12
CONSTANT_METHOD_HANDLE = 15
CONSTANT_METHOD_TYPE = 16
CONSTANT_DYNAMIC = 17
CONSTANT_INVOKE_DYNAMIC = 18
CONSTANT_MODULE = 19
CONSTANT_PACKAGE = 20

# Payload size in bytes for fixed-size entries
_FIXED_SIZES = {
    CONSTANT_INTEGER: 4,
    CONSTANT_FLOAT: 4,
    CONSTANT_LONG: 8,
    CONSTANT_DOUBLE: 8,
    CONSTANT_CLASS: 2,
    CONSTANT_STRING: 2,
    CONSTANT_FIELDREF: 4,
    CONSTANT_METHODREF: 4,
    CONSTANT_INTERFACE_METHODREF: 4,
    CONSTANT_NAME_AND_TYPE: 4,
    CONSTANT_METHOD_HANDLE: 3,
    CONSTANT_METHOD_TYPE: 2,
    CONSTANT_DYNAMIC: 4,
    CONSTANT_INVOKE_DYNAMIC: 4,
    CONSTANT_MODULE: 2,
    CONSTANT_PACKAGE: 2,
}


@dataclass
class MethodInfo:
    """A method declared by a class."""

    access_flags: int
    name: str
    descriptor: str

    @property
    def is_main(self) -> bool:
        required = ACC_PUBLIC | ACC_STATIC
        return (
            self.name == MAIN_METHOD_NAME
            and self.descriptor == MAIN_METHOD_DESCRIPTOR
            and self.access_flags & required == required
        )


@dataclass
class ClassInfo:
    """Summary of a parsed class file."""

    name: str
    """Binary name with dots, e.g. ``org.example.App``"""

    access_flags: int
    major_version: int
    methods: List[MethodInfo] = field(default_factory=list)

    @property
    def has_main_method(self) -> bool:
        return any(method.is_main for method in self.methods)


class _Reader:
    def __init__(self, data: bytes, source: str):
        self.data = data
        self.offset = 0
        self.source = source

    def take(self, size: int) -> bytes:
        end = self.offset + size
        if end > len(self.data):
            raise MalformedInputError(
                f"Truncated class file (needed {size} bytes at offset {self.offset})",
                source=self.source,
            )
        chunk = self.data[self.offset : end]
        self.offset = end
        return chunk

    def u1(self) -> int:
        return self.take(1)[0]

    def u2(self) -> int:
        return struct.unpack(">H", self.take(2))[0]

    def u4(self) -> int:
        return struct.unpack(">I", self.take(4))[0]


def _read_constant_pool(reader: _Reader) -> Tuple[Dict[int, str], Dict[int, int]]:
    """Return (utf8 entries, class entries -> name index) keyed by pool index."""
    utf8: Dict[int, str] = {}
    classes: Dict[int, int] = {}
    count = reader.u2()
    index = 1
    while index < count:
        tag = reader.u1()
        if tag == CONSTANT_UTF8:
            length = reader.u2()
            # Modified UTF-8; names of classes and methods decode fine as UTF-8
            utf8[index] = reader.take(length).decode("utf-8", errors="replace")
        elif tag == CONSTANT_CLASS:
            classes[index] = reader.u2()
        elif tag in _FIXED_SIZES:
            reader.take(_FIXED_SIZES[tag])
        else:
            raise MalformedInputError(
                f"Unknown constant pool tag {tag} at entry {index}", source=reader.source
            )
        # Long and Double take two pool slots
        index += 2 if tag in (CONSTANT_LONG, CONSTANT_DOUBLE) else 1
    return utf8, classes


def _skip_attributes(reader: _Reader) -> None:
    for _ in range(reader.u2()):
        reader.u2()
        reader.take(reader.u4())


def _utf8(pool: Dict[int, str], index: int, source: str) -> str:
    try:
        return pool[index]
    except KeyError:
        raise MalformedInputError(
            f"Constant pool index {index} is not a UTF-8 entry", source=source
        ) from None


def read_class_info(data: bytes, source: str = "<class>") -> ClassInfo:
    """
    Parse a class file.

    Args:
        data: Raw class file bytes
        source: Name used in error messages

    Returns:
        ClassInfo with the class name and its methods

    Raises:
        MalformedInputError: If the data is not a well-formed class file
    """
    reader = _Reader(data, source)
    if reader.u4() != MAGIC:
        raise MalformedInputError("Not a class file (bad magic number)", source=source)
    reader.u2()  # minor
    major = reader.u2()

    utf8, classes = _read_constant_pool(reader)

    access_flags = reader.u2()
    this_class = reader.u2()
    reader.u2()  # super_class
    if this_class not in classes:
        raise MalformedInputError(
            f"this_class index {this_class} is not a class entry", source=source
        )
    name = _utf8(utf8, classes[this_class], source).replace("/", ".")

    interfaces = reader.u2()
    reader.take(2 * interfaces)

    for _ in range(reader.u2()):  # fields
        reader.take(6)
        _skip_attributes(reader)

    methods: List[MethodInfo] = []
    for _ in range(reader.u2()):
        method_flags = reader.u2()
        method_name = _utf8(utf8, reader.u2(), source)
        descriptor = _utf8(utf8, reader.u2(), source)
        _skip_attributes(reader)
        methods.append(MethodInfo(method_flags, method_name, descriptor))

    return ClassInfo(name=name, access_flags=access_flags, major_version=major, methods=methods)
