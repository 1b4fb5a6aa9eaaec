"""
Reference extraction framework with pluggable components.

This package provides the leaf components used to build the configuration
dependency graph: reference extraction, name normalization, resolution against
known files, file classification and local file sources.
"""

from .protocols import FileEntry, FileReader, FileTreeProvider, NameNormalizer, ReferenceExtractor
from .normalization import PrefixStrippingNormalizer, RefNameNormalizer, SeparatorInsensitiveNormalizer
from .reference_extractors import (
    DEFAULT_PATTERNS,
    PatternReferenceExtractor,
    ReferencePattern,
    group_references_by_type,
    parse_references,
)
from .resolution import matches_known_file, parse_and_resolve_references, resolve_reference
from .classifier import classify, extract_target_files
from .sources import LocalFileReader, LocalFileTreeProvider

__all__ = [
    # Protocols
    "FileEntry",
    "FileReader",
    "FileTreeProvider",
    "NameNormalizer",
    "ReferenceExtractor",
    # Normalizers
    "RefNameNormalizer",
    "PrefixStrippingNormalizer",
    "SeparatorInsensitiveNormalizer",
    # Reference extraction
    "DEFAULT_PATTERNS",
    "PatternReferenceExtractor",
    "ReferencePattern",
    "parse_references",
    "group_references_by_type",
    # Resolution
    "matches_known_file",
    "resolve_reference",
    "parse_and_resolve_references",
    # Classification
    "classify",
    "extract_target_files",
    # Sources
    "LocalFileReader",
    "LocalFileTreeProvider",
]
