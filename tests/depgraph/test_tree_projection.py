from typing import List

from depgraph.tree_projection import (
    all_node_ids,
    build_adjacency,
    format_tree,
    iter_tree,
    project_tree,
    select_roots,
    toggle_expanded,
)
from depgraph.types import GraphEdge, GraphNode, TreeNode, create_edge_id


def make_node(node_id: str, node_type: str = 'skill', **kwargs) -> GraphNode:
    return GraphNode(id=node_id, label=node_id, type=node_type, path=node_id, **kwargs)


def make_edge(source: str, target: str, edge_type: str = 'direct') -> GraphEdge:
    return GraphEdge(id=create_edge_id(source, target), source=source, target=target, type=edge_type)


def child_ids(node: TreeNode) -> List[str]:
    return [child.id for child in node.children]


def test_ring_projects_finite_tree_with_cyclic_leaf():
    nodes = [make_node('A', 'claude-md'), make_node('B'), make_node('C')]
    edges = [make_edge('A', 'B'), make_edge('B', 'C'), make_edge('C', 'A')]

    roots = project_tree(nodes, edges, all_node_ids(nodes))

    assert [r.id for r in roots] == ['A']
    a = roots[0]
    b = a.children[0]
    c = b.children[0]
    cyclic_a = c.children[0]

    assert (a.id, b.id, c.id, cyclic_a.id) == ('A', 'B', 'C', 'A')
    assert [n.depth for n in (a, b, c, cyclic_a)] == [0, 1, 2, 3]
    assert not a.is_cyclic and not b.is_cyclic and not c.is_cyclic
    assert cyclic_a.is_cyclic
    assert cyclic_a.children == ()
    assert not cyclic_a.is_expanded


def test_pure_cycle_falls_back_to_first_node_as_root():
    nodes = [make_node('A'), make_node('B')]
    edges = [make_edge('A', 'B'), make_edge('B', 'A')]

    roots = project_tree(nodes, edges)

    assert [r.id for r in roots] == ['A']
    assert child_ids(roots[0]) == ['B']
    assert roots[0].children[0].children[0].is_cyclic


def test_select_roots_prefers_claude_md():
    nodes = [make_node('skill-a'), make_node('root', 'claude-md'), make_node('project', 'claude-md')]
    edges = [make_edge('root', 'skill-a'), make_edge('skill-a', 'project')]

    assert [n.id for n in select_roots(nodes, edges)] == ['root', 'project']


def test_select_roots_unreferenced_nodes():
    nodes = [make_node('a'), make_node('b'), make_node('c')]
    edges = [make_edge('a', 'b')]

    assert [n.id for n in select_roots(nodes, edges)] == ['a', 'c']


def test_select_roots_empty():
    assert select_roots([], []) == []
    assert project_tree([], []) == []


def test_shared_child_appears_under_each_parent():
    """A diamond is not a cycle: each branch has its own visited set."""
    nodes = [make_node('R', 'claude-md'), make_node('X'), make_node('Y'), make_node('Z')]
    edges = [make_edge('R', 'X'), make_edge('R', 'Y'), make_edge('X', 'Z'), make_edge('Y', 'Z')]

    root = project_tree(nodes, edges)[0]

    assert child_ids(root) == ['X', 'Y']
    for branch in root.children:
        assert child_ids(branch) == ['Z']
        assert not branch.children[0].is_cyclic


def test_expansion_is_keyed_by_id():
    nodes = [make_node('R', 'claude-md'), make_node('X'), make_node('Y'), make_node('Z')]
    edges = [make_edge('R', 'X'), make_edge('R', 'Y'), make_edge('X', 'Z'), make_edge('Y', 'Z')]

    roots = project_tree(nodes, edges, frozenset({'R', 'Z'}))

    expanded = {(n.id, n.depth): n.is_expanded for n in iter_tree(roots)}
    assert expanded == {
        ('R', 0): True,
        ('X', 1): False,
        ('Z', 2): True,
        ('Y', 1): False,
    }


def test_children_are_built_regardless_of_expansion():
    nodes = [make_node('R', 'claude-md'), make_node('X')]
    edges = [make_edge('R', 'X')]

    root = project_tree(nodes, edges)[0]

    assert not root.is_expanded
    assert child_ids(root) == ['X']


def test_edges_to_missing_nodes_are_skipped():
    nodes = [make_node('R', 'claude-md'), make_node('X')]
    edges = [make_edge('R', 'gone'), make_edge('R', 'X')]

    root = project_tree(nodes, edges)[0]

    assert child_ids(root) == ['X']


def test_self_loop_is_cyclic_child():
    nodes = [make_node('R', 'claude-md')]
    edges = [make_edge('R', 'R')]

    root = project_tree(nodes, edges)[0]

    assert child_ids(root) == ['R']
    assert root.children[0].is_cyclic
    assert root.children[0].children == ()


def test_tree_node_carries_graph_node_fields():
    nodes = [make_node('R', 'claude-md', description='Project rules', has_error=False, color='#3b82f6')]

    root = project_tree(nodes, [])[0]

    assert isinstance(root, GraphNode)
    assert root.description == 'Project rules'
    assert root.color == '#3b82f6'
    assert root.type == 'claude-md'


def test_projection_is_bounded_on_dense_cycles():
    ids = [f'n{i}' for i in range(4)]
    nodes = [make_node(i) for i in ids]
    edges = [make_edge(s, t) for s in ids for t in ids if s != t]

    roots = project_tree(nodes, edges)
    occurrences = list(iter_tree(roots))

    assert [r.id for r in roots] == ['n0']
    assert all(o.depth <= len(ids) for o in occurrences)
    assert any(o.is_cyclic for o in occurrences)


def test_iter_tree_is_pre_order():
    nodes = [make_node('R', 'claude-md'), make_node('X'), make_node('Y'), make_node('Z')]
    edges = [make_edge('R', 'X'), make_edge('X', 'Z'), make_edge('R', 'Y')]

    roots = project_tree(nodes, edges)

    assert [n.id for n in iter_tree(roots)] == ['R', 'X', 'Z', 'Y']


def test_build_adjacency_keeps_edge_order():
    edges = [make_edge('a', 'c'), make_edge('b', 'a'), make_edge('a', 'b')]

    assert build_adjacency(edges) == {'a': ['c', 'b'], 'b': ['a']}


def test_toggle_expanded():
    expanded = toggle_expanded(frozenset(), 'A')
    assert expanded == frozenset({'A'})

    expanded = toggle_expanded(expanded, 'B')
    assert expanded == frozenset({'A', 'B'})

    expanded = toggle_expanded(expanded, 'A')
    assert expanded == frozenset({'B'})


def test_toggle_expanded_does_not_mutate_input():
    original = {'A'}
    toggle_expanded(original, 'A')
    assert original == {'A'}


def _sample_graph():
    nodes = [
        make_node('/c/CLAUDE.md', 'claude-md'),
        make_node('/c/skills/a.md'),
        GraphNode(id='unknown:ghost', label='ghost', type='unknown', path='unknown:ghost'),
        make_node('/c/skills/bad.md', has_error=True),
    ]
    edges = [
        make_edge('/c/CLAUDE.md', '/c/skills/a.md'),
        make_edge('/c/CLAUDE.md', 'unknown:ghost', 'broken'),
        make_edge('/c/CLAUDE.md', '/c/skills/bad.md'),
        make_edge('/c/skills/a.md', '/c/CLAUDE.md', 'mention'),
    ]
    return nodes, edges


def test_format_tree_markers():
    nodes, edges = _sample_graph()
    roots = project_tree(nodes, edges, all_node_ids(nodes))

    assert format_tree(roots).splitlines() == [
        '/c/CLAUDE.md',
        '  /c/skills/a.md',
        '    /c/CLAUDE.md (cycle)',
        '  ghost (broken)',
        '  /c/skills/bad.md (unreadable)',
    ]


def test_format_tree_only_expanded():
    nodes, edges = _sample_graph()

    roots = project_tree(nodes, edges, frozenset({'/c/CLAUDE.md'}))
    assert format_tree(roots, only_expanded=True).splitlines() == [
        '/c/CLAUDE.md',
        '  /c/skills/a.md',
        '  ghost (broken)',
        '  /c/skills/bad.md (unreadable)',
    ]

    collapsed = project_tree(nodes, edges)
    assert format_tree(collapsed, only_expanded=True) == '/c/CLAUDE.md'


def _chain(length: int):
    ids = [f'/cfg/skills/s{i}.md' for i in range(length)]
    nodes = [make_node(i) for i in ids]
    edges = [make_edge(ids[i], ids[i + 1]) for i in range(length - 1)]
    return ids, nodes, edges


def test_long_chain_projects_without_recursion_limit():
    ids, nodes, edges = _chain(2000)

    roots = project_tree(nodes, edges, all_node_ids(nodes))
    occurrences = list(iter_tree(roots))

    assert [r.id for r in roots] == [ids[0]]
    assert [o.id for o in occurrences] == ids
    assert occurrences[-1].depth == 1999
    assert not any(o.is_cyclic for o in occurrences)
    assert len(format_tree(roots).splitlines()) == 2000


def test_long_ring_closes_with_single_cyclic_leaf():
    ids, nodes, edges = _chain(2000)
    edges.append(make_edge(ids[-1], ids[0]))

    roots = project_tree(nodes, edges, all_node_ids(nodes))
    occurrences = list(iter_tree(roots))

    assert [r.id for r in roots] == [ids[0]]
    assert len(occurrences) == 2001
    cyclic = [o for o in occurrences if o.is_cyclic]
    assert len(cyclic) == 1
    assert cyclic[0].id == ids[0]
    assert cyclic[0].depth == 2000
    assert cyclic[0].children == ()
    assert format_tree(roots, only_expanded=True).splitlines()[-1].endswith('s0.md (cycle)')
