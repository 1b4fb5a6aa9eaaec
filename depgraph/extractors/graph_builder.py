"""
Core dependency-graph building logic.

Loads every target document through a FileReader, extracts references from
each one, resolves them against the known file set and assembles node and edge
collections. Results are published as one GraphState snapshot per build.
"""
import json
import logging
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from tqdm.asyncio import tqdm_asyncio

from depgraph.graph_config import DEFAULT_CONFIG, GraphConfig
from depgraph.types import (
    EdgeType, GraphEdge, GraphNode, GraphState, NodeType, ReferenceMatch,
    create_edge_id, create_node_id, get_node_color, unknown_node_id,
)
from .classifier import classify, extract_target_files
from .metadata import FrontmatterError, extract_description, extract_skill_metadata
from .protocols import FileReader, FileTreeProvider, NameNormalizer, ReferenceExtractor
from .resolution import matches_known_file

logger = logging.getLogger(__name__)


NO_FILES_MESSAGE = "No files were found under the configuration root"
NO_TARGETS_MESSAGE = "No markdown files were found to analyze"
LOAD_FAILED_MESSAGE = "Failed to load the dependency graph"


class GraphBuildError(Exception):
    """A whole-build failure with a user-facing message."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


@dataclass(frozen=True)
class LoadedFile:
    """A target document after the load step."""
    path: str
    name: str
    content: str
    type: NodeType
    has_error: bool = False


async def load_file(path: str, reader: FileReader) -> LoadedFile:
    """
    Read one document. Never raises: a failed or empty read yields an error file.
    """
    name = path.replace('\\', '/').rstrip('/').split('/')[-1] or path
    file_type = classify(path)

    try:
        content = await reader.read(path)
    except Exception as e:
        logger.warning(f"Failed to read {path}: {e}")
        content = None

    if content is None:
        return LoadedFile(path=path, name=name, content='', type=file_type, has_error=True)
    return LoadedFile(path=path, name=name, content=content, type=file_type)


def create_node_from_file(file: LoadedFile, config: GraphConfig = DEFAULT_CONFIG) -> GraphNode:
    """
    Build the node for a loaded file.

    Description and metadata are best effort: malformed frontmatter drops both
    but leaves the node (and its references) intact.
    """
    if file.has_error:
        return GraphNode(
            id=create_node_id(file.path),
            label=file.name,
            type=file.type,
            path=file.path,
            color=config.error_color,
            has_error=True,
        )

    try:
        description = extract_description(file.content)
        metadata = extract_skill_metadata(file.content)
    except FrontmatterError as e:
        logger.warning(f"Skipping metadata for {file.path}: {e}")
        description, metadata = None, None

    return GraphNode(
        id=create_node_id(file.path),
        label=file.name,
        type=file.type,
        path=file.path,
        description=description,
        color=get_node_color(file.type),
        metadata=metadata,
    )


def create_edge_from_reference(
    source_id: str,
    reference: ReferenceMatch,
    known_paths: Sequence[str],
    normalizer: Optional[NameNormalizer] = None,
) -> Tuple[GraphEdge, Optional[str]]:
    """
    Turn one reference into an edge.

    Returns:
        (edge, target_path); target_path is None for a broken reference, whose
        edge points at the synthetic ``unknown:<name>`` node
    """
    target_path = matches_known_file(reference.name, known_paths, normalizer)

    if target_path is not None:
        edge_type: EdgeType = 'mention' if reference.type == 'unknown' else 'direct'
        target_id = create_node_id(target_path)
    else:
        edge_type = 'broken'
        target_id = unknown_node_id(reference.name)

    edge = GraphEdge(
        id=create_edge_id(source_id, target_id),
        source=source_id,
        target=target_id,
        type=edge_type,
        label=reference.raw,
    )
    return edge, target_path


def assemble_graph(
    loaded_files: Sequence[LoadedFile],
    known_paths: Sequence[str],
    extractor: Optional[ReferenceExtractor] = None,
    config: GraphConfig = DEFAULT_CONFIG,
) -> Tuple[List[GraphNode], List[GraphEdge]]:
    """
    Assemble nodes and edges from a settled batch of loaded files.

    Args:
        loaded_files: Every target, including ones that failed to load
        known_paths: Paths references may resolve to, in priority order
        extractor: Reference extractor (default from config)
        config: Graph configuration

    Returns:
        (nodes, edges): file nodes in load order followed by synthetic unknown
        nodes in first-seen order; edges in first-seen order
    """
    extractor = extractor or config.get_extractor()
    normalizer = config.get_normalizer()

    nodes: Dict[str, GraphNode] = {}
    for file in loaded_files:
        node = create_node_from_file(file, config)
        nodes[node.id] = node

    edges: Dict[str, GraphEdge] = {}
    unknown_nodes: Dict[str, GraphNode] = {}

    for file in loaded_files:
        if file.has_error:
            continue

        source_id = create_node_id(file.path)
        for ref in extractor.extract(file.content):
            edge, target_path = create_edge_from_reference(source_id, ref, known_paths, normalizer)

            if edge.source == edge.target:
                continue
            if edge.id in edges:
                continue
            edges[edge.id] = edge

            if target_path is None and edge.target not in unknown_nodes:
                unknown_nodes[edge.target] = GraphNode(
                    id=edge.target,
                    label=ref.name,
                    type='unknown',
                    path=edge.target,
                    color=get_node_color('unknown'),
                )

    for node_id, node in unknown_nodes.items():
        # A real file never carries the unknown: prefix, so this never overwrites one
        nodes.setdefault(node_id, node)

    return list(nodes.values()), list(edges.values())


class GraphBuilder:
    """
    Builds and publishes dependency-graph snapshots.

    This class implements the graph construction algorithm:
    1. Collect target documents from the file tree provider
    2. Read them all concurrently through the file reader
    3. Extract and resolve references, assemble nodes and edges
    4. Replace the published GraphState wholesale

    Every build takes a new generation number. A build that settles after a newer
    one has started is discarded, so overlapping builds never interleave their
    writes.
    """

    def __init__(
        self,
        tree_provider: Optional[FileTreeProvider],
        reader: FileReader,
        config: GraphConfig = DEFAULT_CONFIG,
        extractor: Optional[ReferenceExtractor] = None,
        show_progress: bool = True,
    ):
        """
        Args:
            tree_provider: Lists the configuration root; only needed when build()
                is called without explicit target paths
            reader: Reads document content
            config: Graph configuration
            extractor: Reference extractor (default from config)
            show_progress: Show progress bars via tqdm
        """
        self.tree_provider = tree_provider
        self.reader = reader
        self.config = config
        self.extractor = extractor or config.get_extractor()
        self.show_progress = show_progress

        self._state = GraphState.empty()
        self._generation = 0
        self._in_flight = 0

    @property
    def state(self) -> GraphState:
        return self._state

    @property
    def is_loading(self) -> bool:
        return self._in_flight > 0

    async def build(self, target_paths: Optional[Sequence[str]] = None) -> GraphState:
        """
        Build the graph and publish it.

        Never raises. Whole-build failures publish an empty state carrying a
        user-facing error message.

        Args:
            target_paths: Documents to analyze; fetched from the tree provider when None

        Returns:
            The published state (the newer one if this build went stale)
        """
        self._generation += 1
        generation = self._generation
        self._in_flight += 1

        try:
            if target_paths is None:
                target_paths = await self._collect_targets()
            elif not target_paths:
                raise GraphBuildError(NO_TARGETS_MESSAGE)

            nodes, edges = await self._build_from_paths(list(target_paths))
            state = GraphState(nodes=tuple(nodes), edges=tuple(edges), generation=generation)
        except GraphBuildError as e:
            logger.warning(e.message)
            state = GraphState.empty(error=e.message, generation=generation)
        except Exception:
            logger.exception("Dependency graph build failed")
            state = GraphState.empty(error=LOAD_FAILED_MESSAGE, generation=generation)
        finally:
            self._in_flight -= 1

        return self._publish(state, generation)

    async def refresh(self) -> GraphState:
        """Rebuild from the file tree."""
        return await self.build()

    async def _collect_targets(self) -> List[str]:
        if self.tree_provider is None:
            raise RuntimeError("No file tree provider configured")

        tree = await self.tree_provider.get_file_tree()
        if not tree:
            raise GraphBuildError(NO_FILES_MESSAGE)

        target_paths = extract_target_files(tree, self.config.target_extension)
        if not target_paths:
            raise GraphBuildError(NO_TARGETS_MESSAGE)
        return target_paths

    async def _build_from_paths(self, target_paths: List[str]) -> Tuple[List[GraphNode], List[GraphEdge]]:
        logger.info(f"Building dependency graph from {len(target_paths)} files...")

        loaded_files = await self._load_files(target_paths)

        failed = sum(1 for f in loaded_files if f.has_error)
        if failed:
            logger.warning(f"{failed} of {len(loaded_files)} files could not be read")

        nodes, edges = assemble_graph(loaded_files, target_paths, self.extractor, self.config)

        broken = sum(1 for e in edges if e.type == 'broken')
        logger.info(f"Graph complete: {len(nodes)} nodes, {len(edges)} edges ({broken} broken)")
        return nodes, edges

    async def _load_files(self, target_paths: List[str]) -> List[LoadedFile]:
        """Fan out all reads and wait for the whole batch."""
        return await tqdm_asyncio.gather(
            *(load_file(path, self.reader) for path in target_paths),
            desc="Reading files",
            unit="files",
            disable=not self.show_progress,
        )

    def _publish(self, state: GraphState, generation: int) -> GraphState:
        if generation != self._generation:
            logger.debug(f"Discarding stale graph build {generation} (latest is {self._generation})")
            return self._state
        self._state = state
        return state


def write_graph(state: GraphState, output_path: Path) -> None:
    """
    Write a graph snapshot as JSONL: one ``node`` record per line, then one
    ``edge`` record per line, each sorted by id for deterministic output.
    """
    logger.info(f"Writing graph to {output_path}...")
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, 'w', encoding='utf-8') as f:
        for node in sorted(state.nodes, key=lambda n: n.id):
            record = {
                'kind': 'node',
                'id': node.id,
                'label': node.label,
                'type': node.type,
                'path': node.path,
                'description': node.description,
                'color': node.color,
                'has_error': node.has_error,
                'metadata': asdict(node.metadata) if node.metadata is not None else None,
            }
            f.write(json.dumps(record, ensure_ascii=False) + '\n')

        for edge in sorted(state.edges, key=lambda e: e.id):
            record = {
                'kind': 'edge',
                'id': edge.id,
                'source': edge.source,
                'target': edge.target,
                'type': edge.type,
                'label': edge.label,
            }
            f.write(json.dumps(record, ensure_ascii=False) + '\n')

    logger.info(f"Graph written to {output_path}")
