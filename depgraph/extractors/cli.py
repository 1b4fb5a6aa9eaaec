#!/usr/bin/env python
"""
Command-line front end for the configuration dependency graph.

Usage:
    depgraph build ~/.claude -o graph.jsonl
    depgraph tree ~/.claude
    depgraph detail ~/.claude ~/.claude/skills/deploy-helper.md
"""
import argparse
import asyncio
import logging
import sys
from pathlib import Path


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "root",
        type=Path,
        help="Configuration root to scan (for example ~/.claude)"
    )
    parser.add_argument(
        "-c", "--config",
        type=Path,
        default=None,
        help="GraphConfig JSON file (defaults to the built-in config)"
    )
    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Suppress progress bars and info logging"
    )


def main():
    parser = argparse.ArgumentParser(
        prog="depgraph",
        description="Analyze references between CLAUDE.md, skill and subagent documents",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    subparsers = parser.add_subparsers(dest="command", required=True, help="Command to run")

    build_parser = subparsers.add_parser(
        "build",
        help="Build the dependency graph and write it as JSONL",
        description="Build the dependency graph of a configuration root"
    )
    _add_common_arguments(build_parser)
    build_parser.add_argument(
        "-o", "--output",
        type=Path,
        required=True,
        help="Output path for graph.jsonl"
    )

    tree_parser = subparsers.add_parser(
        "tree",
        help="Print the dependency tree",
        description="Print the graph projected into rooted trees"
    )
    _add_common_arguments(tree_parser)
    tree_parser.add_argument(
        "--collapsed",
        action="store_true",
        help="Only list the root documents"
    )

    detail_parser = subparsers.add_parser(
        "detail",
        help="Show references to and from one document",
        description="Show the forward, backward and unresolved references of a node"
    )
    _add_common_arguments(detail_parser)
    detail_parser.add_argument(
        "node_id",
        help="Node id: a document path as listed by 'tree', or unknown:<name>"
    )

    args = parser.parse_args()

    # Configure logging
    log_level = logging.WARNING if args.quiet else logging.INFO
    logging.basicConfig(
        level=log_level,
        format='%(levelname)s: %(message)s'
    )

    from depgraph.extractors.graph_builder import GraphBuilder, write_graph
    from depgraph.extractors.sources import LocalFileReader, LocalFileTreeProvider
    from depgraph.graph_config import load_config
    from depgraph.node_detail import format_node_detail, get_node_detail
    from depgraph.tree_projection import all_node_ids, format_tree, project_tree

    root = args.root.expanduser()
    if not root.is_dir():
        logging.error(f"Configuration root does not exist: {root}")
        sys.exit(1)

    try:
        config = load_config(args.config)
        builder = GraphBuilder(
            tree_provider=LocalFileTreeProvider(root, skip_dirs=config.skip_dirs),
            reader=LocalFileReader(),
            config=config,
            show_progress=not args.quiet,
        )
        state = asyncio.run(builder.build())
    except Exception as e:
        logging.error(f"Graph building failed: {e}", exc_info=True)
        sys.exit(1)

    if state.error:
        logging.error(state.error)
        sys.exit(1)

    if args.command == "build":
        write_graph(state, args.output)
        logging.info(f"Built graph with {len(state.nodes)} nodes -> {args.output}")

    elif args.command == "tree":
        expanded = set() if args.collapsed else all_node_ids(state.nodes)
        roots = project_tree(state.nodes, state.edges, expanded)
        print(format_tree(roots, only_expanded=True))

    elif args.command == "detail":
        node_id = args.node_id
        node = next((n for n in state.nodes if n.id == node_id), None)
        if node is None:
            # Accept ~-relative or relative paths for file nodes
            node_id = Path(node_id).expanduser().resolve().as_posix()
            node = next((n for n in state.nodes if Path(n.path).resolve().as_posix() == node_id), None)
        if node is None:
            logging.error(f"No node with id {args.node_id}")
            sys.exit(1)
        print(format_node_detail(get_node_detail(node, state.edges, state.nodes)))


if __name__ == "__main__":
    main()
