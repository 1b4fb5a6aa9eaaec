"""
Resolve the forward, backward and unresolved references of a selected node.
"""
from typing import Dict, List, Sequence

from depgraph.types import GraphEdge, GraphNode, NodeDetail, strip_unknown_prefix


def get_node_detail(
    node: GraphNode,
    edges: Sequence[GraphEdge],
    nodes: Sequence[GraphNode],
) -> NodeDetail:
    """
    Build the detail view for one node.

    Pure and linear in the number of edges, so it is safe to recompute on every
    selection or graph change.

    Args:
        node: The selected node
        edges: Graph edges
        nodes: Graph nodes; edge endpoints missing from here are skipped

    Returns:
        NodeDetail with references in edge order
    """
    node_map: Dict[str, GraphNode] = {n.id: n for n in nodes}
    references_to: List[GraphNode] = []
    referenced_by: List[GraphNode] = []
    unknown_refs: List[str] = []

    for edge in edges:
        if edge.source == node.id:
            target = node_map.get(edge.target)
            if target is not None:
                references_to.append(target)
            if edge.type == 'broken':
                unknown_refs.append(strip_unknown_prefix(edge.target))
        if edge.target == node.id:
            source = node_map.get(edge.source)
            if source is not None:
                referenced_by.append(source)

    return NodeDetail(
        node=node,
        references_to=references_to,
        referenced_by=referenced_by,
        unknown_refs=unknown_refs,
    )


def format_node_detail(detail: NodeDetail) -> str:
    """Plain-text rendering used by the CLI."""
    lines = [f"{detail.node.label} ({detail.node.type})", f"  path: {detail.node.path}"]
    if detail.node.description:
        lines.append(f"  description: {detail.node.description}")

    lines.append(f"  references ({len(detail.references_to)}):")
    lines.extend(f"    -> {n.label} [{n.path}]" for n in detail.references_to)
    lines.append(f"  referenced by ({len(detail.referenced_by)}):")
    lines.extend(f"    <- {n.label} [{n.path}]" for n in detail.referenced_by)
    if detail.unknown_refs:
        lines.append(f"  unresolved ({len(detail.unknown_refs)}):")
        lines.extend(f"    ?? {name}" for name in detail.unknown_refs)

    return '\n'.join(lines)
