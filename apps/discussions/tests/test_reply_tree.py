"""
Unit tests for the in-memory comment/reply tree.

Nodes are unsaved Comment instances; no database access is needed.
"""

from uuid import uuid4

from apps.discussions.models import Comment
from apps.discussions.services import ReplyTree, node_key


def node(parent=None):
    return Comment(id=uuid4(), parent_id=parent.id if parent else None, body='text')


def build():
    """
    first
      a
        a1
          a1x
      b
    second
      c
    """
    first = node()
    a = node(first)
    a1 = node(a)
    a1x = node(a1)
    b = node(first)
    second = node()
    c = node(second)
    nodes = dict(first=first, a=a, a1=a1, a1x=a1x, b=b, second=second, c=c)
    return ReplyTree(nodes.values()), nodes


class TestNodeKey:

    def test_normalizes(self):
        value = uuid4()
        assert node_key(value) == str(value)
        assert node_key(str(value).upper()) == str(value)

    def test_rejects_garbage(self):
        assert node_key('not-a-uuid') is None
        assert node_key(None) is None
        assert node_key({'id': 1}) is None


class TestLookup:

    def test_find_comment_only_matches_top_level(self):
        tree, n = build()

        assert tree.find_comment(n['first'].id) is n['first']
        assert tree.find_comment(str(n['second'].id)) is n['second']
        assert tree.find_comment(n['a'].id) is None
        assert tree.find_comment(uuid4()) is None

    def test_find_reply_at_any_depth(self):
        tree, n = build()

        assert tree.find_reply(n['a1x'].id) is n['a1x']
        assert tree.find_reply(n['c'].id) is n['c']
        assert tree.find_reply(n['first'].id) is None

    def test_find_reply_within_comment(self):
        tree, n = build()

        assert tree.find_reply(n['a1'].id, within=n['first']) is n['a1']
        assert tree.find_reply(n['c'].id, within=n['first']) is None

    def test_find_target(self):
        tree, n = build()

        assert tree.find_target(n['second'].id) == (n['second'], None)
        assert tree.find_target(n['a1x'].id) == (n['first'], n['a1x'])
        assert tree.find_target(uuid4()) == (None, None)
        assert tree.find_target('garbage') == (None, None)


class TestTraversal:

    def test_walk_preorder_with_depth(self):
        tree, n = build()

        visited = [(node.id, depth) for node, depth in tree.walk()]

        assert visited == [
            (n['first'].id, 0),
            (n['a'].id, 1),
            (n['a1'].id, 2),
            (n['a1x'].id, 3),
            (n['b'].id, 1),
            (n['second'].id, 0),
            (n['c'].id, 1),
        ]

    def test_subtree_ids(self):
        tree, n = build()

        assert set(tree.subtree_ids(n['a'])) == {n['a'].id, n['a1'].id, n['a1x'].id}
        assert tree.subtree_ids(n['b']) == [n['b'].id]

    def test_path_to(self):
        tree, n = build()

        assert tree.path_to(n['a1x']) == [n['first'], n['a'], n['a1'], n['a1x']]
        assert tree.path_to(n['second']) == [n['second']]

    def test_deep_chain_has_no_recursion_limit(self):
        nodes = [node()]
        for _ in range(5000):
            nodes.append(node(nodes[-1]))
        tree = ReplyTree(nodes)

        assert tree.find_reply(nodes[-1].id) is nodes[-1]
        assert len(tree.subtree_ids(nodes[0])) == 5001
        assert len(tree.path_to(nodes[-1])) == 5001
