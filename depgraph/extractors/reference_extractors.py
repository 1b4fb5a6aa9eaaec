"""
Reference extraction for Claude-Code configuration documents.

Scans freeform markdown/frontmatter text with an ordered set of named patterns,
each tagged with the kind of reference it implies:
- slash commands and ``superpowers:`` invocations -> skill
- ``subagent_type=`` tokens and Task tool calls -> subagent
- markdown links and "use <name>" prose -> unknown (ambiguous)

This is heuristic matching, not a markdown parse. False positives are expected
and surface later as broken references.
"""
import re
from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, List, Optional, Pattern, Sequence
from urllib.parse import unquote

from depgraph.types import ReferenceMatch, ReferenceType
from .normalization import PrefixStrippingNormalizer, file_stem
from .protocols import NameNormalizer, ReferenceExtractor


# "https://...", a bare "https:" left over from a truncated capture, "www.", "mailto:"
_URL_LIKE = re.compile(r'^(?:[a-z][a-z0-9+.\-]*:(?://|$)|www\.|mailto:)', re.IGNORECASE)


@dataclass(frozen=True)
class ReferencePattern:
    """
    A named extraction pattern.

    Attributes:
        name: Pattern name, for logging and debugging
        regex: Compiled pattern; ``group`` holds the candidate name
        type: Reference type assigned to every match
        group: Capture group index of the candidate name
        use_stem: Reduce the candidate to its filename stem (link targets)
        target_suffix: If set, only candidates ending with this suffix are kept
    """
    name: str
    regex: Pattern[str]
    type: ReferenceType
    group: int = 1
    use_stem: bool = False
    target_suffix: Optional[str] = None


# Order matters: earlier patterns win the raw text for a shared (type, name) key.
DEFAULT_PATTERNS: Sequence[ReferencePattern] = (
    # /skill-name
    ReferencePattern(
        'slash_command',
        re.compile(r'(?:^|\s)/([a-z][a-z0-9-]*)', re.IGNORECASE | re.MULTILINE),
        'skill',
    ),
    # superpowers:skill-name
    ReferencePattern(
        'skill_use',
        re.compile(r'superpowers:([a-z][a-z0-9-]*)', re.IGNORECASE),
        'skill',
    ),
    # "superpowers:skill-name" or 'superpowers:skill-name'
    ReferencePattern(
        'skill_invoke',
        re.compile(r'["\']superpowers:([a-z][a-z0-9-]*)["\']', re.IGNORECASE),
        'skill',
    ),
    # Skill tool ... "name"
    ReferencePattern(
        'skill_tool',
        re.compile(r'Skill\s+tool.*?["\']([^"\']+)["\']', re.IGNORECASE),
        'skill',
    ),
    # subagent_type=name or subagent_type: name
    ReferencePattern(
        'subagent_type',
        re.compile(r'subagent_type[=:]\s*["\']?([A-Za-z][A-Za-z0-9-]*)["\']?', re.IGNORECASE),
        'subagent',
    ),
    # Task ... subagent_type ... "name"
    ReferencePattern(
        'task_agent',
        re.compile(r'Task.*?subagent_type.*?["\']([^"\']+)["\']', re.IGNORECASE),
        'subagent',
    ),
    # [text](other-file.md), but not ![image](...)
    ReferencePattern(
        'markdown_link',
        re.compile(r'(?<!!)\[[^\]]*\]\(([^)\s]+)\)'),
        'unknown',
        use_stem=True,
        target_suffix='.md',
    ),
    # use name
    ReferencePattern(
        'use_mention',
        re.compile(r'use\s+([a-z][a-z0-9\-:]+)', re.IGNORECASE),
        'unknown',
    ),
)


def is_url_like(candidate: str) -> bool:
    return bool(_URL_LIKE.match(candidate.strip()))


class PatternReferenceExtractor(ReferenceExtractor):
    """
    Applies an ordered list of ReferencePatterns to document text.

    Deduplicates by ``type:normalized_name``; the first occurrence keeps its raw
    text. The same name under two different types yields two entries, since
    collapsing happens later at edge level.

    Examples:
        >>> refs = PatternReferenceExtractor().extract("Run /deploy-helper now")
        >>> [(r.type, r.name) for r in refs]
        [('skill', 'deploy-helper')]
    """

    def __init__(
        self,
        patterns: Sequence[ReferencePattern] = DEFAULT_PATTERNS,
        normalizer: Optional[NameNormalizer] = None,
        min_name_length: int = 2,
    ):
        """
        Args:
            patterns: Patterns applied in order
            normalizer: Normalizes captured names (default strips ``superpowers:``)
            min_name_length: Candidates shorter than this after normalization are dropped
        """
        self.patterns = tuple(patterns)
        self.normalizer = normalizer or PrefixStrippingNormalizer()
        self.min_name_length = min_name_length

    def extract(self, content: str) -> List[ReferenceMatch]:
        """
        Extract all references from content.

        Args:
            content: Raw document text

        Returns:
            References in discovery order, unique per (type, name)
        """
        matches: Dict[str, ReferenceMatch] = {}

        for pattern in self.patterns:
            for match in pattern.regex.finditer(content):
                captured = match.group(pattern.group)
                name = self._candidate_name(captured, pattern)
                if name is None:
                    continue

                key = f"{pattern.type}:{name}"
                if key not in matches:
                    matches[key] = ReferenceMatch(type=pattern.type, name=name, raw=match.group(0))

        return list(matches.values())

    def _candidate_name(self, captured: Optional[str], pattern: ReferencePattern) -> Optional[str]:
        """Returns the normalized candidate, or None if it should be rejected."""
        if not captured:
            return None
        if is_url_like(captured):
            return None

        if pattern.use_stem:
            target = unquote(captured).split('#', 1)[0]
            if pattern.target_suffix and not target.lower().endswith(pattern.target_suffix):
                return None
            captured = file_stem(target)

        name = self.normalizer.normalize(captured)
        if len(name) < self.min_name_length:
            return None
        return name


_default_extractor = PatternReferenceExtractor()


def parse_references(content: str) -> List[ReferenceMatch]:
    """Extract references with the default patterns."""
    return _default_extractor.extract(content)


def group_references_by_type(references: Sequence[ReferenceMatch]) -> Dict[str, List[ReferenceMatch]]:
    grouped: Dict[str, List[ReferenceMatch]] = defaultdict(list)
    for ref in references:
        grouped[ref.type].append(ref)
    return dict(grouped)
