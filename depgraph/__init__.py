"""
Dependency graph of Claude-Code configuration documents.

Extracts references between CLAUDE.md, skill and subagent files, builds a
directed graph with placeholder nodes for unresolved references, and projects
it into cycle-safe trees for display.
"""

from .types import GraphEdge, GraphNode, GraphState, NodeDetail, ReferenceMatch, TreeNode
from .graph_config import DEFAULT_CONFIG, GraphConfig
from .extractors.graph_builder import GraphBuilder, GraphBuildError, assemble_graph, write_graph
from .tree_projection import project_tree, select_roots, toggle_expanded
from .node_detail import get_node_detail

__all__ = [
    # Data model
    "GraphNode",
    "GraphEdge",
    "GraphState",
    "NodeDetail",
    "ReferenceMatch",
    "TreeNode",
    # Configuration
    "GraphConfig",
    "DEFAULT_CONFIG",
    # Graph building
    "GraphBuilder",
    "GraphBuildError",
    "assemble_graph",
    "write_graph",
    # Projection and detail
    "project_tree",
    "select_roots",
    "toggle_expanded",
    "get_node_detail",
]
