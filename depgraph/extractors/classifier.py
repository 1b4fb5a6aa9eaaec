"""
Classify configuration files and collect the documents to analyze.
"""
from typing import List, Sequence

from depgraph.types import NodeType
from .protocols import FileEntry


SKILL_DIR_MARKERS = ('/skills/', '/skill/')
SUBAGENT_DIR_MARKERS = ('/commands/', '/agents/', '/subagents/')


def classify(path: str) -> NodeType:
    """
    Infer the node type of a file from its path.

    Examples:
        >>> classify('/project/CLAUDE.md')
        'claude-md'
        >>> classify('/home/me/.claude/skills/deploy.md')
        'skill'
        >>> classify('/home/me/.claude/commands/build.md')
        'subagent'
    """
    normalized = path.replace('\\', '/').lower()

    if normalized.endswith('claude.md'):
        return 'claude-md'
    if any(marker in normalized for marker in SKILL_DIR_MARKERS):
        return 'skill'
    if any(marker in normalized for marker in SUBAGENT_DIR_MARKERS):
        return 'subagent'
    return 'unknown'


def extract_target_files(tree: Sequence[FileEntry], extension: str = '.md') -> List[str]:
    """
    Collect the paths of every file ending in ``extension``.

    The tree is assumed to already be scoped to the configuration root, so every
    directory is descended.

    Args:
        tree: Top-level entries of the file listing
        extension: File suffix to collect

    Returns:
        File paths in tree order
    """
    files: List[str] = []

    def traverse(entries: Sequence[FileEntry]) -> None:
        for entry in entries:
            if entry.file_type == 'directory':
                traverse(entry.children)
            elif entry.file_type == 'file' and entry.name.endswith(extension):
                files.append(entry.path)

    traverse(tree)
    return files
