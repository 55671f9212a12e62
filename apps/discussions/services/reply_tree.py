"""
Comment/reply arena for one post.

Every comment and reply of a post is loaded once and indexed by id, with
children grouped under their parent in creation order. Lookups and
subtree walks use an explicit stack, so traversal depth is bounded only by
memory.
"""

from collections import defaultdict
from typing import Dict, Iterable, Iterator, List, Optional, Tuple
from uuid import UUID

from django.db.models import Count

from apps.discussions.models import Comment, Post


def node_key(value) -> Optional[str]:
    """Canonical string id, or None if value isn't a UUID."""
    if isinstance(value, UUID):
        return str(value)
    try:
        return str(UUID(str(value)))
    except (TypeError, ValueError, AttributeError):
        return None


class ReplyTree:

    def __init__(self, comments: Iterable[Comment]):
        self.nodes: Dict[str, Comment] = {}
        self.children: Dict[str, List[Comment]] = defaultdict(list)
        self.roots: List[Comment] = []

        for comment in comments:
            self.nodes[str(comment.id)] = comment
            if comment.parent_id is None:
                self.roots.append(comment)
            else:
                self.children[str(comment.parent_id)].append(comment)

    @classmethod
    def for_post(cls, post: Post, with_like_counts: bool = False) -> 'ReplyTree':
        comments = Comment.objects.filter(post=post).select_related('author')
        if with_like_counts:
            comments = comments.annotate(likes_count=Count('likes'))
        return cls(comments.order_by('created_at', 'id'))

    @classmethod
    def for_posts(cls, posts: Iterable[Post]) -> Dict[str, 'ReplyTree']:
        """One tree per post, loaded in a single query with like counts."""
        posts = list(posts)
        by_post = defaultdict(list)
        comments = (
            Comment.objects
            .filter(post__in=posts)
            .select_related('author')
            .annotate(likes_count=Count('likes'))
            .order_by('created_at', 'id')
        )
        for comment in comments:
            by_post[str(comment.post_id)].append(comment)
        return {str(post.id): cls(by_post[str(post.id)]) for post in posts}

    def __len__(self):
        return len(self.nodes)

    def get_children(self, node: Comment) -> List[Comment]:
        return self.children.get(str(node.id), [])

    def find_comment(self, comment_id) -> Optional[Comment]:
        """Top-level comment with the given id."""
        node = self.nodes.get(node_key(comment_id))
        if node is None or node.parent_id is not None:
            return None
        return node

    def find_reply(self, reply_id, within: Optional[Comment] = None) -> Optional[Comment]:
        """
        Depth-first search for a reply.

        Searches below `within` when given, otherwise below every top-level
        comment in order. Top-level comments themselves never match.
        """
        key = node_key(reply_id)
        if key is None:
            return None

        starts = [within] if within is not None else self.roots
        stack = []
        for start in reversed(starts):
            stack.extend(reversed(self.get_children(start)))

        while stack:
            node = stack.pop()
            if str(node.id) == key:
                return node
            stack.extend(reversed(self.get_children(node)))
        return None

    def find_target(self, target_id) -> Tuple[Optional[Comment], Optional[Comment]]:
        """
        Resolve a reply target.

        Returns (top_level_comment, replied_reply); replied_reply is None
        when the target is the top-level comment itself.
        """
        comment = self.find_comment(target_id)
        if comment is not None:
            return comment, None

        for root in self.roots:
            reply = self.find_reply(target_id, within=root)
            if reply is not None:
                return root, reply
        return None, None

    def walk(self, start: Optional[Comment] = None) -> Iterator[Tuple[Comment, int]]:
        """Pre-order traversal yielding (node, depth); top-level comments are depth 0."""
        if start is None:
            stack = [(root, 0) for root in reversed(self.roots)]
        else:
            stack = [(start, 0)]

        while stack:
            node, depth = stack.pop()
            yield node, depth
            stack.extend((child, depth + 1) for child in reversed(self.get_children(node)))

    def subtree_ids(self, node: Comment) -> List[UUID]:
        """Ids of node and all of its descendants."""
        return [descendant.id for descendant, _depth in self.walk(node)]

    def path_to(self, node: Comment) -> List[Comment]:
        """Ancestor chain from the top-level comment down to node."""
        chain = [node]
        while chain[-1].parent_id is not None:
            parent = self.nodes.get(str(chain[-1].parent_id))
            if parent is None:
                break
            chain.append(parent)
        chain.reverse()
        return chain
