"""
Graph configuration shared by the CLI and the graph builder.

Bundles the conventions that affect how references are extracted and how the
file tree is scanned, so the same settings can be saved next to an exported graph
and reloaded later.
"""
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Optional, Tuple
import json
import logging

from depgraph.extractors.normalization import DEFAULT_REFERENCE_PREFIXES, PrefixStrippingNormalizer
from depgraph.extractors.protocols import NameNormalizer, ReferenceExtractor
from depgraph.extractors.reference_extractors import PatternReferenceExtractor
from depgraph.extractors.sources import DEFAULT_SKIP_DIRS
from depgraph.types import ERROR_NODE_COLOR


logger = logging.getLogger(__name__)

_COMPONENT_FIELDS = ('reference_prefixes', 'min_name_length')


@dataclass
class GraphConfig:
    """
    Configuration for building a dependency graph.

    Attributes:
        name: Human-readable configuration name
        target_extension: Suffix of the documents to analyze
        reference_prefixes: Literal namespace prefixes stripped from reference names
        min_name_length: Shortest reference name that is kept
        skip_dirs: Directory names never descended by the local tree provider
        error_color: Node color for files that could not be read
        description: Optional description
        _normalizer: Cached normalizer instance (not serialized)
        _extractor: Cached extractor instance (not serialized)
    """

    name: str = 'default'
    target_extension: str = '.md'
    reference_prefixes: Tuple[str, ...] = DEFAULT_REFERENCE_PREFIXES
    min_name_length: int = 2
    skip_dirs: Tuple[str, ...] = tuple(sorted(DEFAULT_SKIP_DIRS))
    error_color: str = ERROR_NODE_COLOR
    description: Optional[str] = None
    _normalizer: Optional[Any] = field(default=None, init=False, repr=False, compare=False)
    _extractor: Optional[Any] = field(default=None, init=False, repr=False, compare=False)

    def __post_init__(self):
        """Validate configuration after initialization."""
        if self.min_name_length < 1:
            raise ValueError(f"min_name_length must be at least 1, got {self.min_name_length}")
        if not self.target_extension.startswith('.'):
            self.target_extension = f'.{self.target_extension}'
        # JSON round-trips tuples as lists
        self.reference_prefixes = tuple(self.reference_prefixes)
        self.skip_dirs = tuple(self.skip_dirs)

        if self.target_extension != '.md':
            logger.warning(
                f"Using target_extension={self.target_extension!r}. "
                "Markdown link references only resolve to .md targets."
            )

    def __setattr__(self, name: str, value: Any) -> None:
        super().__setattr__(name, value)
        # Cached components are built from these fields
        if name in _COMPONENT_FIELDS:
            super().__setattr__('_normalizer', None)
            super().__setattr__('_extractor', None)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization (excludes cached components)."""
        data = asdict(self)
        data.pop('_normalizer', None)
        data.pop('_extractor', None)
        data['reference_prefixes'] = list(self.reference_prefixes)
        data['skip_dirs'] = list(self.skip_dirs)
        return data

    @classmethod
    def from_dict(cls, data: dict) -> 'GraphConfig':
        return cls(**data)

    def save(self, path: Path) -> None:
        with open(path, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def load(cls, path: Path) -> 'GraphConfig':
        with open(path, 'r') as f:
            data = json.load(f)
        return cls.from_dict(data)

    def get_normalizer(self) -> NameNormalizer:
        """Normalizer stripping the configured prefixes (cached)."""
        if self._normalizer is None:
            self._normalizer = PrefixStrippingNormalizer(self.reference_prefixes)
        return self._normalizer

    def get_extractor(self) -> ReferenceExtractor:
        """Reference extractor using the configured normalizer (cached)."""
        if self._extractor is None:
            self._extractor = PatternReferenceExtractor(
                normalizer=self.get_normalizer(),
                min_name_length=self.min_name_length,
            )
        return self._extractor


DEFAULT_CONFIG = GraphConfig(
    name='default',
    description='Claude-Code configuration root (CLAUDE.md, skills, agents, commands)',
)


def load_config(path: Optional[Path]) -> GraphConfig:
    """Load a saved config, or return DEFAULT_CONFIG when no path is given."""
    if path is None:
        return DEFAULT_CONFIG
    return GraphConfig.load(path)
