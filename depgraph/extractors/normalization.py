"""
Reference name normalization utilities.

Core Purpose:
    Turn a raw captured reference ("  Superpowers:Deploy-Helper ") and a known
    file path ("~/.claude/skills/deploy-helper.md") into comparable names.

Design Pattern:
    Template Method - the base class defines the algorithm, subclasses customize
    the preprocess() hook.

The normalization algorithm:
    1. Canonicalization - trim, lowercase
    2. preprocess() - domain-specific rewriting (prefix stripping, separators)
"""
import re
from typing import Iterable, Tuple

from .protocols import NameNormalizer


DEFAULT_REFERENCE_PREFIXES: Tuple[str, ...] = ('superpowers:',)

_SEPARATOR_PATTERN = re.compile(r'[-_]')


class RefNameNormalizer(NameNormalizer):
    """
    Base normalizer: trims and lowercases.

    Examples:
        >>> RefNameNormalizer().normalize("  Deploy-Helper  ")
        'deploy-helper'
    """

    def normalize(self, name: str) -> str:
        """
        Template method defining the normalization algorithm.

        Override preprocess() rather than this method.

        Args:
            name: Raw reference name

        Returns:
            Normalized name
        """
        canonical = name.strip().lower()
        return self.preprocess(canonical)

    def preprocess(self, name: str) -> str:
        """Hook for domain-specific rewriting of the canonical name."""
        return name


class PrefixStrippingNormalizer(RefNameNormalizer):
    """
    Strips a literal namespace prefix such as ``superpowers:``.

    Only the first matching prefix is removed, and only at the start of the name.

    Examples:
        >>> PrefixStrippingNormalizer().normalize("superpowers:My-Skill")
        'my-skill'
    """

    def __init__(self, prefixes: Iterable[str] = DEFAULT_REFERENCE_PREFIXES):
        self.prefixes = tuple(prefix.lower() for prefix in prefixes)

    def preprocess(self, name: str) -> str:
        for prefix in self.prefixes:
            if name.startswith(prefix):
                return name[len(prefix):]
        return name


class SeparatorInsensitiveNormalizer(RefNameNormalizer):
    """
    Drops hyphens and underscores, so ``deploy_helper`` and ``deploy-helper``
    compare equal. Used for the fuzzy pass of file resolution, on names whose
    prefixes are already stripped and on bare filename stems.

    Examples:
        >>> SeparatorInsensitiveNormalizer().normalize("Deploy_Helper")
        'deployhelper'
    """

    def preprocess(self, name: str) -> str:
        return strip_separators(name)


def strip_separators(name: str) -> str:
    return _SEPARATOR_PATTERN.sub('', name)


def file_stem(path: str) -> str:
    """
    Last path component without its extension.

    A leading dot is not treated as an extension separator (".hidden" stays
    ".hidden").
    """
    file_name = path.replace('\\', '/').rstrip('/').split('/')[-1]
    dot_index = file_name.rfind('.')
    if dot_index > 0:
        return file_name[:dot_index]
    return file_name
