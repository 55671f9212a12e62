from rest_framework import serializers
from .models import Post, PostType, Comment, PostLike, CommentLike
from apps.accounts.serializers import UserMinimalSerializer
from apps.discussions.services import ReplyTree


def build_comment_tree(tree, liked_ids=frozenset()):
    """
    Nested comment/reply payload for one post.

    Nodes are visited in pre-order, so each parent's dict exists before its
    children are attached.
    """
    payloads = {}
    roots = []
    author_serializer = UserMinimalSerializer()

    for node, depth in tree.walk():
        payload = {
            'id': str(node.id),
            'author': author_serializer.to_representation(node.author),
            'body': node.body,
            'depth': depth,
            'likes_count': getattr(node, 'likes_count', 0),
            'is_liked': node.id in liked_ids,
            'created_at': serializers.DateTimeField().to_representation(node.created_at),
            'replies': [],
        }
        payloads[node.id] = payload
        if node.parent_id is None:
            roots.append(payload)
        else:
            payloads[node.parent_id]['replies'].append(payload)
    return roots


class PostSerializer(serializers.ModelSerializer):
    """
    Post with its full comment tree.

    Pass `trees`, `liked_post_ids` and `liked_comment_ids` in context to
    serialize a page of posts without per-post queries.
    """

    author = UserMinimalSerializer(read_only=True)
    likes_count = serializers.SerializerMethodField()
    is_liked = serializers.SerializerMethodField()
    comments = serializers.SerializerMethodField()

    class Meta:
        model = Post
        fields = [
            'id',
            'group',
            'author',
            'title',
            'body',
            'post_type',
            'is_pinned',
            'likes_count',
            'is_liked',
            'comments',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields

    def _user(self):
        request = self.context.get('request')
        if request and request.user.is_authenticated:
            return request.user
        return None

    def get_likes_count(self, obj):
        if hasattr(obj, 'likes_count'):
            return obj.likes_count
        return obj.likes.count()

    def get_is_liked(self, obj):
        liked = self.context.get('liked_post_ids')
        if liked is not None:
            return obj.id in liked
        user = self._user()
        return bool(user) and PostLike.objects.filter(post=obj, user=user).exists()

    def get_comments(self, obj):
        trees = self.context.get('trees') or {}
        tree = trees.get(str(obj.id)) or ReplyTree.for_post(obj, with_like_counts=True)

        liked = self.context.get('liked_comment_ids')
        if liked is None:
            user = self._user()
            liked = set(
                CommentLike.objects
                .filter(comment__post=obj, user=user)
                .values_list('comment_id', flat=True)
            ) if user else set()
        return build_comment_tree(tree, liked)


class PinnedPostSerializer(serializers.ModelSerializer):
    """Highlights entry without the comment tree."""

    author = UserMinimalSerializer(read_only=True)

    class Meta:
        model = Post
        fields = ['id', 'group', 'author', 'title', 'body', 'post_type', 'is_pinned', 'created_at']
        read_only_fields = fields


class PostCreateSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=Post.TITLE_MAX_LENGTH)
    body = serializers.CharField(max_length=Post.BODY_MAX_LENGTH)
    post_type = serializers.ChoiceField(
        choices=PostType.choices,
        required=False,
        default=PostType.DISCUSSION
    )


class CommentCreateSerializer(serializers.Serializer):
    body = serializers.CharField(max_length=Comment.BODY_MAX_LENGTH)


class CommentSerializer(serializers.ModelSerializer):
    """A single comment or reply as returned after creation."""

    author = UserMinimalSerializer(read_only=True)

    class Meta:
        model = Comment
        fields = ['id', 'post', 'parent', 'author', 'body', 'created_at']
        read_only_fields = fields


class LikeResultSerializer(serializers.Serializer):
    liked = serializers.BooleanField()
    likes_count = serializers.IntegerField()


class ErrorResponseSerializer(serializers.Serializer):
    error = serializers.CharField()
