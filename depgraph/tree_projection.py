"""
Project the (possibly cyclic) dependency graph into rooted trees for display.

The projection is a pure function of (nodes, edges, expanded_ids). Expansion
state is owned by the caller and passed in on every call; nothing here keeps
state between projections.
"""
import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import AbstractSet, Dict, FrozenSet, Iterator, List, Sequence, Set

from depgraph.types import UNKNOWN_ID_PREFIX, GraphEdge, GraphNode, TreeNode


logger = logging.getLogger(__name__)


def build_adjacency(edges: Sequence[GraphEdge]) -> Dict[str, List[str]]:
    """Map each source id to its target ids, in edge order."""
    adjacency: Dict[str, List[str]] = defaultdict(list)
    for edge in edges:
        adjacency[edge.source].append(edge.target)
    return dict(adjacency)


def select_roots(nodes: Sequence[GraphNode], edges: Sequence[GraphEdge]) -> List[GraphNode]:
    """
    Choose the root nodes of the projection.

    The first rule with a non-empty result wins:
    1. every claude-md node
    2. every node nobody references
    3. the first node, so a purely cyclic graph still has a root
    """
    if not nodes:
        return []

    claude_md_nodes = [node for node in nodes if node.type == 'claude-md']
    if claude_md_nodes:
        return claude_md_nodes

    referenced_ids = {edge.target for edge in edges}
    unreferenced_nodes = [node for node in nodes if node.id not in referenced_ids]
    if unreferenced_nodes:
        return unreferenced_nodes

    return [nodes[0]]


def project_tree(
    nodes: Sequence[GraphNode],
    edges: Sequence[GraphEdge],
    expanded_ids: AbstractSet[str] = frozenset(),
) -> List[TreeNode]:
    """
    Build one tree per root.

    Each branch carries its own visited set (the ids on the path from the root),
    so a node reached through two different parents appears under both, while a
    node reappearing among its own ancestors is emitted once more as a cyclic
    leaf and not descended.

    Args:
        nodes: Graph nodes
        edges: Graph edges; targets that are not nodes are skipped
        expanded_ids: Ids the caller has expanded. Keyed by id, so every
            occurrence of an expanded node is expanded.

    Returns:
        Root TreeNodes with depth 0
    """
    node_map = {node.id: node for node in nodes}
    adjacency = build_adjacency(edges)

    roots = [
        _project_from(root, node_map, adjacency, expanded_ids)
        for root in select_roots(nodes, edges)
    ]
    logger.debug(f"Projected {len(roots)} trees from {len(nodes)} nodes")
    return roots


@dataclass
class _Frame:
    """One node on the DFS stack, with the children built so far."""
    node: GraphNode
    branch: FrozenSet[str]
    depth: int
    child_ids: List[str]
    next_index: int = 0
    children: List[TreeNode] = field(default_factory=list)


def _project_from(
    root: GraphNode,
    node_map: Dict[str, GraphNode],
    adjacency: Dict[str, List[str]],
    expanded_ids: AbstractSet[str],
) -> TreeNode:
    """
    Depth-first projection of one root with an explicit stack.

    TreeNodes are assembled bottom-up as frames are popped, so depth is bounded
    by memory rather than the interpreter's recursion limit.
    """
    def open_frame(node: GraphNode, branch: FrozenSet[str], depth: int) -> _Frame:
        child_ids = [child_id for child_id in adjacency.get(node.id, []) if child_id in node_map]
        return _Frame(node=node, branch=branch | {node.id}, depth=depth, child_ids=child_ids)

    stack: List[_Frame] = [open_frame(root, frozenset(), 0)]
    while True:
        frame = stack[-1]

        if frame.next_index < len(frame.child_ids):
            child = node_map[frame.child_ids[frame.next_index]]
            frame.next_index += 1
            if child.id in frame.branch:
                frame.children.append(_to_tree_node(
                    child, children=(), is_expanded=False, is_cyclic=True, depth=frame.depth + 1,
                ))
            else:
                stack.append(open_frame(child, frame.branch, frame.depth + 1))
            continue

        stack.pop()
        tree_node = _to_tree_node(
            frame.node,
            children=tuple(frame.children),
            is_expanded=frame.node.id in expanded_ids,
            is_cyclic=False,
            depth=frame.depth,
        )
        if not stack:
            return tree_node
        stack[-1].children.append(tree_node)


def _to_tree_node(node: GraphNode, **tree_fields) -> TreeNode:
    return TreeNode(
        id=node.id,
        label=node.label,
        type=node.type,
        path=node.path,
        description=node.description,
        color=node.color,
        has_error=node.has_error,
        metadata=node.metadata,
        **tree_fields,
    )


def toggle_expanded(expanded_ids: AbstractSet[str], node_id: str) -> FrozenSet[str]:
    """Return a new expanded-id set with ``node_id`` flipped."""
    if node_id in expanded_ids:
        return frozenset(expanded_ids - {node_id})
    return frozenset(expanded_ids | {node_id})


def iter_tree(roots: Sequence[TreeNode]) -> Iterator[TreeNode]:
    """Pre-order walk over every occurrence in the projected trees."""
    stack: List[TreeNode] = list(reversed(roots))
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children))


def format_tree(roots: Sequence[TreeNode], only_expanded: bool = False) -> str:
    """
    Render trees as indented text.

    Markers: ``(cycle)`` for cyclic occurrences, ``(broken)`` for unresolved
    references, ``(unreadable)`` for files that failed to load.

    Args:
        roots: Projected trees
        only_expanded: Hide the children of nodes that are not expanded
    """
    lines: List[str] = []
    stack: List[TreeNode] = list(reversed(roots))

    while stack:
        node = stack.pop()
        markers = []
        if node.is_cyclic:
            markers.append('(cycle)')
        if node.id.startswith(UNKNOWN_ID_PREFIX):
            markers.append('(broken)')
        if node.has_error:
            markers.append('(unreadable)')

        suffix = f" {' '.join(markers)}" if markers else ''
        lines.append(f"{'  ' * node.depth}{node.label}{suffix}")

        if only_expanded and not node.is_expanded:
            continue
        stack.extend(reversed(node.children))

    return '\n'.join(lines)


def all_node_ids(nodes: Sequence[GraphNode]) -> Set[str]:
    """Every node id; passing this as ``expanded_ids`` expands everything."""
    return {node.id for node in nodes}
