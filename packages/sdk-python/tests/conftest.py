"""Shared fixtures for SDK tests.

Class files and archives are generated on the fly so tests do not depend
on a JDK or on checked-in binaries.
"""

import struct
import zipfile
from pathlib import Path
from typing import Dict, Iterable, Optional, Tuple

import pytest

ACC_PUBLIC_STATIC = 0x0009
MAIN_DESCRIPTOR = "([Ljava/lang/String;)V"

MethodSpec = Tuple[str, str, int]


def build_class_bytes(
    name: str,
    methods: Iterable[MethodSpec] = (),
    with_wide_constant: bool = False,
) -> bytes:
    """Assemble a minimal but well-formed class file."""
    entries = []
    next_index = 1

    def add(entry: bytes, slots: int = 1) -> int:
        nonlocal next_index
        index = next_index
        entries.append(entry)
        next_index += slots
        return index

    def utf8(text: str) -> int:
        data = text.encode("utf-8")
        return add(b"\x01" + struct.pack(">H", len(data)) + data)

    def class_ref(internal_name: str) -> int:
        return add(b"\x07" + struct.pack(">H", utf8(internal_name)))

    if with_wide_constant:
        add(b"\x05" + struct.pack(">q", 42), slots=2)
        add(b"\x06" + struct.pack(">d", 1.5), slots=2)
    this_index = class_ref(name.replace(".", "/"))
    super_index = class_ref("java/lang/Object")
    add(b"\x08" + struct.pack(">H", utf8("a string constant")))
    field_name = utf8("counter")
    field_desc = utf8("I")
    code = utf8("Code")
    method_refs = [(flags, utf8(mname), utf8(desc)) for mname, desc, flags in methods]

    data = struct.pack(">IHH", 0xCAFEBABE, 0, 61)
    data += struct.pack(">H", next_index) + b"".join(entries)
    data += struct.pack(">HHH", 0x0021, this_index, super_index)
    data += struct.pack(">H", 0)
    data += struct.pack(">H", 1) + struct.pack(">HHHH", 0x0002, field_name, field_desc, 0)
    data += struct.pack(">H", len(method_refs))
    for flags, name_index, desc_index in method_refs:
        data += struct.pack(">HHHH", flags, name_index, desc_index, 1)
        data += struct.pack(">HI", code, 4) + b"\x00\x00\x00\x00"
    data += struct.pack(">H", 0)
    return data


def write_class(root: Path, name: str, main: bool = True) -> Path:
    """Write ``name`` as a class file below ``root``."""
    methods = [("<init>", "()V", 0x0001)]
    if main:
        methods.append(("main", MAIN_DESCRIPTOR, ACC_PUBLIC_STATIC))
    path = root.joinpath(*name.split(".")).with_suffix(".class")
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(build_class_bytes(name, methods))
    return path


def write_archive(
    path: Path,
    main_class: Optional[str] = None,
    padding: int = 0,
    extra_manifest: Optional[Dict[str, str]] = None,
    with_manifest: bool = True,
) -> Path:
    """Write a jar; ``padding`` bytes of stored content control its size."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(path, "w", compression=zipfile.ZIP_STORED) as zf:
        if with_manifest:
            lines = ["Manifest-Version: 1.0"]
            if main_class:
                lines.append(f"Main-Class: {main_class}")
            for key, value in (extra_manifest or {}).items():
                lines.append(f"{key}: {value}")
            zf.writestr("META-INF/MANIFEST.MF", "\r\n".join(lines) + "\r\n\r\n")
        if padding:
            zf.writestr("lib/dependency.bin", b"\x00" * padding)
    return path


@pytest.fixture
def class_bytes():
    return build_class_bytes


@pytest.fixture
def make_class():
    return write_class


@pytest.fixture
def make_archive():
    return write_archive


@pytest.fixture
def project_dir(tmp_path):
    """A Maven-like project layout with empty target/ and target/classes/."""
    (tmp_path / "target" / "classes").mkdir(parents=True)
    return tmp_path
