"""
Resolve reference names against the set of known configuration files.
"""
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from depgraph.types import ReferenceMatch
from .normalization import PrefixStrippingNormalizer, SeparatorInsensitiveNormalizer, file_stem
from .protocols import NameNormalizer, ReferenceExtractor
from .reference_extractors import parse_references


_default_normalizer = PrefixStrippingNormalizer()
_separator_normalizer = SeparatorInsensitiveNormalizer()


@dataclass(frozen=True)
class ResolvedReference:
    """A reference that matched a known file."""
    reference: ReferenceMatch
    file_path: str


def matches_known_file(
    ref_name: str,
    known_files: Sequence[str],
    normalizer: Optional[NameNormalizer] = None,
) -> Optional[str]:
    """
    Find the known file a reference name points to.

    For each path in order, compares the name against the lowercase filename
    stem, first exactly and then through SeparatorInsensitiveNormalizer (ignoring
    hyphens and underscores). The first path satisfying either rule wins.

    Args:
        ref_name: Reference name (normalized again here)
        known_files: Known file paths, in priority order
        normalizer: Name normalizer (default strips ``superpowers:``)

    Returns:
        The matching path, or None

    Examples:
        >>> matches_known_file('deploy', ['/skills/deploy.md', '/agents/backend.md'])
        '/skills/deploy.md'
        >>> matches_known_file('missing', ['/skills/deploy.md']) is None
        True
    """
    normalized = (normalizer or _default_normalizer).normalize(ref_name)
    normalized_bare = _separator_normalizer.normalize(normalized)

    for file_path in known_files:
        stem = file_stem(file_path).lower()
        if stem == normalized:
            return file_path
        if _separator_normalizer.normalize(stem) == normalized_bare:
            return file_path

    return None


def resolve_reference(
    reference: ReferenceMatch,
    known_files: Sequence[str],
    normalizer: Optional[NameNormalizer] = None,
) -> Optional[ResolvedReference]:
    file_path = matches_known_file(reference.name, known_files, normalizer)
    if file_path is None:
        return None
    return ResolvedReference(reference=reference, file_path=file_path)


def parse_and_resolve_references(
    content: str,
    known_files: Sequence[str],
    extractor: Optional[ReferenceExtractor] = None,
    normalizer: Optional[NameNormalizer] = None,
) -> Tuple[List[ResolvedReference], List[ReferenceMatch]]:
    """
    Extract references from content and split them into resolved and unresolved.

    Args:
        content: Raw document text
        known_files: Known file paths, in priority order
        extractor: Reference extractor (default patterns when None)
        normalizer: Normalizer used for resolution; pass the one the extractor
            was built with so both agree on prefixes

    Returns:
        (resolved, unresolved), each in extraction order
    """
    references = extractor.extract(content) if extractor is not None else parse_references(content)
    resolved: List[ResolvedReference] = []
    unresolved: List[ReferenceMatch] = []

    for ref in references:
        result = resolve_reference(ref, known_files, normalizer)
        if result is None:
            unresolved.append(ref)
        else:
            resolved.append(result)

    return resolved, unresolved
