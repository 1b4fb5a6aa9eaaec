"""
Tests for the node detail resolver.
"""
import unittest

from depgraph.node_detail import format_node_detail, get_node_detail
from depgraph.types import GraphEdge, GraphNode, create_edge_id


def _node(node_id, node_type='skill', **kwargs):
    label = node_id.rsplit('/', 1)[-1]
    return GraphNode(id=node_id, label=label, type=node_type, path=node_id, **kwargs)


def _edge(source, target, edge_type='direct'):
    return GraphEdge(id=create_edge_id(source, target), source=source, target=target, type=edge_type)


class TestGetNodeDetail(unittest.TestCase):
    def setUp(self):
        self.claude = _node('/c/CLAUDE.md', 'claude-md')
        self.helper = _node('/c/skills/helper.md', description='Ships builds')
        self.agent = _node('/c/agents/ops.md', 'subagent')
        self.ghost = GraphNode(id='unknown:ghost', label='ghost', type='unknown', path='unknown:ghost')
        self.nodes = [self.claude, self.helper, self.agent, self.ghost]
        self.edges = [
            _edge(self.claude.id, self.helper.id),
            _edge(self.helper.id, self.agent.id),
            _edge(self.helper.id, self.ghost.id, 'broken'),
            _edge(self.agent.id, self.helper.id, 'mention'),
        ]

    def test_forward_and_backward_references(self):
        detail = get_node_detail(self.helper, self.edges, self.nodes)

        self.assertIs(detail.node, self.helper)
        self.assertEqual([n.id for n in detail.references_to], [self.agent.id, self.ghost.id])
        self.assertEqual([n.id for n in detail.referenced_by], [self.claude.id, self.agent.id])
        self.assertEqual(detail.unknown_refs, ['ghost'])

    def test_node_without_edges(self):
        lonely = _node('/c/skills/lonely.md')
        detail = get_node_detail(lonely, self.edges, self.nodes + [lonely])

        self.assertEqual(detail.references_to, [])
        self.assertEqual(detail.referenced_by, [])
        self.assertEqual(detail.unknown_refs, [])

    def test_missing_endpoints_are_skipped(self):
        edges = self.edges + [
            _edge(self.claude.id, '/c/skills/deleted.md'),
            _edge(self.claude.id, 'unknown:orphan', 'broken'),
        ]
        detail = get_node_detail(self.claude, edges, self.nodes)

        self.assertEqual([n.id for n in detail.references_to], [self.helper.id])
        # Broken targets are reported by name even without a synthetic node
        self.assertEqual(detail.unknown_refs, ['orphan'])


class TestFormatNodeDetail(unittest.TestCase):
    def test_format(self):
        helper = _node('/c/skills/helper.md', description='Ships builds')
        claude = _node('/c/CLAUDE.md', 'claude-md')
        ghost = GraphNode(id='unknown:ghost', label='ghost', type='unknown', path='unknown:ghost')
        edges = [_edge(claude.id, helper.id), _edge(helper.id, ghost.id, 'broken')]

        text = format_node_detail(get_node_detail(helper, edges, [helper, claude, ghost]))

        self.assertEqual(text.splitlines(), [
            'helper.md (skill)',
            '  path: /c/skills/helper.md',
            '  description: Ships builds',
            '  references (1):',
            '    -> ghost [unknown:ghost]',
            '  referenced by (1):',
            '    <- CLAUDE.md [/c/CLAUDE.md]',
            '  unresolved (1):',
            '    ?? ghost',
        ])

    def test_format_without_optional_sections(self):
        claude = _node('/c/CLAUDE.md', 'claude-md')
        text = format_node_detail(get_node_detail(claude, [], [claude]))

        self.assertEqual(text.splitlines(), [
            'CLAUDE.md (claude-md)',
            '  path: /c/CLAUDE.md',
            '  references (0):',
            '  referenced by (0):',
        ])


if __name__ == '__main__':
    unittest.main()
