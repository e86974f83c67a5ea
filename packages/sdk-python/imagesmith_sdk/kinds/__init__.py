"""
imagesmith Kind Mapping
=======================

Resolves which filename fragments are used for each cluster resource Kind
when a combined manifest is split into one file per resource:

- Bundled AsciiDoc table parsing
- Properties override parsing
- Union merge of both sources

Usage:
    from imagesmith_sdk.kinds import build_mapper, load_mappings

    mappings = load_mappings()            # Dict[str, List[str]]
    mapper = build_mapper()
    mapper.filename_type("Service")       # 'service'
"""

from .mapper import (
    KindFilenameMapper,
    build_mapper,
    load_default_mappings,
    load_mappings,
    load_override_mappings,
    merge_mappings,
)
from .overrides_parser import dump_overrides, parse_overrides
from .table_parser import KindMapping, parse_aliases, parse_kind_table

__all__ = [
    # Parsing
    "KindMapping",
    "parse_kind_table",
    "parse_aliases",
    "parse_overrides",
    "dump_overrides",
    # Merging
    "merge_mappings",
    "load_default_mappings",
    "load_override_mappings",
    "load_mappings",
    # Lookups
    "KindFilenameMapper",
    "build_mapper",
]
