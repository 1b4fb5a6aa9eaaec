"""
Core data model for the configuration dependency graph.

Nodes and edges are plain immutable records keyed by id. The graph itself is just
a pair of collections; "cycles" are repeated ids, never object reference cycles.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Literal, Optional, Tuple


NodeType = Literal['claude-md', 'skill', 'subagent', 'unknown']
EdgeType = Literal['direct', 'mention', 'broken']
ReferenceType = Literal['skill', 'subagent', 'unknown']

UNKNOWN_ID_PREFIX = 'unknown:'

NODE_COLORS: Dict[str, str] = {
    'claude-md': '#3b82f6',  # blue-500
    'skill': '#10b981',  # emerald-500
    'subagent': '#F97316',  # orange-500
    'unknown': '#6b7280',  # gray-500
}

# gray-400, used for files that could not be read
ERROR_NODE_COLOR = '#9ca3af'

NODE_TYPE_LABELS: Dict[str, str] = {
    'claude-md': 'CLAUDE.md',
    'skill': 'Skill',
    'subagent': 'Subagent',
    'unknown': 'Unknown',
}


@dataclass(frozen=True)
class EdgeStyle:
    """Stroke color and optional dash pattern for rendering an edge."""
    stroke: str
    dash_array: Optional[str] = None


EDGE_STYLES: Dict[str, EdgeStyle] = {
    'direct': EdgeStyle(stroke='#64748b'),
    'mention': EdgeStyle(stroke='#94a3b8', dash_array='4 2'),
    'broken': EdgeStyle(stroke='#ef4444', dash_array='2 2'),
}


@dataclass(frozen=True)
class ReferenceMatch:
    """A candidate reference found in one document."""
    type: ReferenceType
    name: str   # normalized
    raw: str    # original matched text


@dataclass(frozen=True)
class GraphNode:
    """
    A graph vertex: one configuration document, or a synthetic placeholder
    standing in for a reference that matched no known file.
    """
    id: str
    label: str
    type: NodeType
    path: str
    description: Optional[str] = None
    color: str = NODE_COLORS['unknown']
    has_error: bool = False
    metadata: Optional[Any] = None


@dataclass(frozen=True)
class GraphEdge:
    """A directed reference between two nodes."""
    id: str
    source: str
    target: str
    type: EdgeType
    label: Optional[str] = None


@dataclass(frozen=True)
class TreeNode(GraphNode):
    """A GraphNode placed in a projected tree."""
    children: Tuple['TreeNode', ...] = ()
    is_expanded: bool = False
    is_cyclic: bool = False
    depth: int = 0


@dataclass(frozen=True)
class NodeDetail:
    """Forward, backward and unresolved references of one node."""
    node: GraphNode
    references_to: List[GraphNode] = field(default_factory=list)
    referenced_by: List[GraphNode] = field(default_factory=list)
    unknown_refs: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class GraphState:
    """
    One published snapshot of the graph.

    Attributes:
        nodes: All nodes, file nodes first, then synthetic unknown nodes
        edges: All edges in first-seen order
        error: User-facing message when the build failed, else None
        generation: Build generation that produced this snapshot
    """
    nodes: Tuple[GraphNode, ...] = ()
    edges: Tuple[GraphEdge, ...] = ()
    error: Optional[str] = None
    generation: int = 0

    @classmethod
    def empty(cls, error: Optional[str] = None, generation: int = 0) -> 'GraphState':
        return cls(nodes=(), edges=(), error=error, generation=generation)


def create_node_id(path: str) -> str:
    """File nodes are identified by their path."""
    return path


def create_edge_id(source: str, target: str) -> str:
    return f"{source}->{target}"


def unknown_node_id(name: str) -> str:
    return f"{UNKNOWN_ID_PREFIX}{name}"


def strip_unknown_prefix(node_id: str) -> str:
    if node_id.startswith(UNKNOWN_ID_PREFIX):
        return node_id[len(UNKNOWN_ID_PREFIX):]
    return node_id


def get_node_color(node_type: str) -> str:
    return NODE_COLORS.get(node_type, NODE_COLORS['unknown'])


def get_edge_style(edge_type: str) -> EdgeStyle:
    return EDGE_STYLES[edge_type]


def is_broken_edge(edge: GraphEdge) -> bool:
    return edge.type == 'broken'


def get_broken_edges(edges: Iterable[GraphEdge]) -> List[GraphEdge]:
    return [edge for edge in edges if is_broken_edge(edge)]


def get_related_edges(node_id: str, edges: Iterable[GraphEdge]) -> List[GraphEdge]:
    """Edges touching ``node_id`` in either direction."""
    return [edge for edge in edges if edge.source == node_id or edge.target == node_id]


def get_in_degree(node_id: str, edges: Iterable[GraphEdge]) -> int:
    return sum(1 for edge in edges if edge.target == node_id)


def get_out_degree(node_id: str, edges: Iterable[GraphEdge]) -> int:
    return sum(1 for edge in edges if edge.source == node_id)
