from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.pagination import PageNumberPagination
from drf_spectacular.utils import extend_schema, OpenApiParameter

from .models import PostLike, CommentLike
from .serializers import (
    PostSerializer,
    PinnedPostSerializer,
    PostCreateSerializer,
    CommentCreateSerializer,
    CommentSerializer,
    LikeResultSerializer,
    ErrorResponseSerializer,
)

from apps.discussions.services import (
    ReplyTree,
    LikeTarget,
    create_post,
    get_post,
    list_posts,
    list_pinned_posts,
    delete_post,
    pin_post,
    unpin_post,
    add_comment,
    delete_comment,
    add_reply,
    delete_reply,
    toggle_like,
    # Exceptions
    GroupNotFoundError,
    PostNotFoundError,
    CommentNotFoundError,
    ReplyNotFoundError,
    NotMemberError,
    InsufficientPermissionsError,
    InvalidLikeTargetError,
    InvalidContentError,
)


NOT_FOUND_ERRORS = (GroupNotFoundError, PostNotFoundError, CommentNotFoundError, ReplyNotFoundError)
FORBIDDEN_ERRORS = (NotMemberError, InsufficientPermissionsError)
BAD_REQUEST_ERRORS = (InvalidLikeTargetError, InvalidContentError)

ERROR_RESPONSES = {
    400: ErrorResponseSerializer,
    403: ErrorResponseSerializer,
    404: ErrorResponseSerializer,
}


class PostPagination(PageNumberPagination):
    """Custom pagination for group posts."""
    page_size = 10
    page_size_query_param = 'page_size'
    max_page_size = 50


def _post_context(request, posts):
    """Preload comment trees and the caller's likes for a page of posts."""
    posts = list(posts)
    return {
        'request': request,
        'trees': ReplyTree.for_posts(posts),
        'liked_post_ids': set(
            PostLike.objects
            .filter(post__in=posts, user=request.user)
            .values_list('post_id', flat=True)
        ),
        'liked_comment_ids': set(
            CommentLike.objects
            .filter(comment__post__in=posts, user=request.user)
            .values_list('comment_id', flat=True)
        ),
    }


def _error(exc, code):
    return Response({'error': str(exc)}, status=code)


@extend_schema(
    parameters=[OpenApiParameter('type', str, description='Post type filter')],
    request=PostCreateSerializer,
    responses={200: PostSerializer(many=True), 201: PostSerializer, **ERROR_RESPONSES},
    description="List a group's posts (members only) or create one.",
    tags=['discussions'],
)
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def group_posts(request, group_id):
    if request.method == 'GET':
        try:
            posts = list_posts(
                group_id=group_id,
                user=request.user,
                post_type=request.query_params.get('type')
            )
        except GroupNotFoundError as e:
            return _error(e, status.HTTP_404_NOT_FOUND)
        except NotMemberError as e:
            return _error(e, status.HTTP_403_FORBIDDEN)

        paginator = PostPagination()
        page = paginator.paginate_queryset(posts, request)
        serializer = PostSerializer(page, many=True, context=_post_context(request, page))
        return paginator.get_paginated_response(serializer.data)

    serializer = PostCreateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        post = create_post(
            group_id=group_id,
            author=request.user,
            title=serializer.validated_data['title'],
            body=serializer.validated_data['body'],
            post_type=serializer.validated_data['post_type'],
        )
    except GroupNotFoundError as e:
        return _error(e, status.HTTP_404_NOT_FOUND)
    except NotMemberError as e:
        return _error(e, status.HTTP_403_FORBIDDEN)
    except InvalidContentError as e:
        return _error(e, status.HTTP_400_BAD_REQUEST)

    output_serializer = PostSerializer(post, context=_post_context(request, [post]))
    return Response(output_serializer.data, status=status.HTTP_201_CREATED)


@extend_schema(
    responses={200: PinnedPostSerializer(many=True), 404: ErrorResponseSerializer},
    description="Pinned posts of a group; empty for non-members.",
    tags=['discussions'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def pinned_posts(request, group_id):
    try:
        posts = list_pinned_posts(group_id=group_id, user=request.user)
    except GroupNotFoundError as e:
        return _error(e, status.HTTP_404_NOT_FOUND)

    return Response(PinnedPostSerializer(posts, many=True).data)


@extend_schema(
    responses={200: PostSerializer, 204: None, **ERROR_RESPONSES},
    tags=['discussions'],
)
@api_view(['GET', 'DELETE'])
@permission_classes([IsAuthenticated])
def post_detail(request, post_id):
    """GET: post with its comment tree. DELETE: moderators only."""
    if request.method == 'GET':
        try:
            post = get_post(post_id=post_id, user=request.user)
        except PostNotFoundError as e:
            return _error(e, status.HTTP_404_NOT_FOUND)
        except NotMemberError as e:
            return _error(e, status.HTTP_403_FORBIDDEN)

        return Response(PostSerializer(post, context=_post_context(request, [post])).data)

    try:
        delete_post(post_id=post_id, user=request.user)
    except PostNotFoundError as e:
        return _error(e, status.HTTP_404_NOT_FOUND)
    except InsufficientPermissionsError as e:
        return _error(e, status.HTTP_403_FORBIDDEN)

    return Response(status=status.HTTP_204_NO_CONTENT)


def _toggle_like_response(request, **kwargs):
    try:
        result = toggle_like(user=request.user, **kwargs)
    except NOT_FOUND_ERRORS as e:
        return _error(e, status.HTTP_404_NOT_FOUND)
    except FORBIDDEN_ERRORS as e:
        return _error(e, status.HTTP_403_FORBIDDEN)
    except BAD_REQUEST_ERRORS as e:
        return _error(e, status.HTTP_400_BAD_REQUEST)

    return Response(LikeResultSerializer(result._asdict()).data)


@extend_schema(request=None, responses={200: LikeResultSerializer, **ERROR_RESPONSES}, tags=['discussions'])
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def like_post(request, post_id):
    return _toggle_like_response(request, target_kind=LikeTarget.POST, post_id=post_id)


@extend_schema(request=None, responses={200: LikeResultSerializer, **ERROR_RESPONSES}, tags=['discussions'])
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def like_comment(request, post_id, comment_id):
    return _toggle_like_response(
        request,
        target_kind=LikeTarget.COMMENT,
        post_id=post_id,
        comment_id=comment_id
    )


@extend_schema(request=None, responses={200: LikeResultSerializer, **ERROR_RESPONSES}, tags=['discussions'])
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def like_reply(request, post_id, comment_id, reply_id):
    return _toggle_like_response(
        request,
        target_kind=LikeTarget.REPLY,
        post_id=post_id,
        comment_id=comment_id,
        reply_id=reply_id
    )


def _set_pinned_response(request, post_id, service):
    try:
        post = service(post_id=post_id, user=request.user)
    except PostNotFoundError as e:
        return _error(e, status.HTTP_404_NOT_FOUND)
    except InsufficientPermissionsError as e:
        return _error(e, status.HTTP_403_FORBIDDEN)

    return Response(PinnedPostSerializer(post).data)


@extend_schema(request=None, responses={200: PinnedPostSerializer, **ERROR_RESPONSES}, tags=['discussions'])
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def pin(request, post_id):
    return _set_pinned_response(request, post_id, pin_post)


@extend_schema(request=None, responses={200: PinnedPostSerializer, **ERROR_RESPONSES}, tags=['discussions'])
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def unpin(request, post_id):
    return _set_pinned_response(request, post_id, unpin_post)


@extend_schema(
    request=CommentCreateSerializer,
    responses={201: CommentSerializer, **ERROR_RESPONSES},
    tags=['discussions'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def comments(request, post_id):
    serializer = CommentCreateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        comment = add_comment(
            post_id=post_id,
            user=request.user,
            body=serializer.validated_data['body']
        )
    except PostNotFoundError as e:
        return _error(e, status.HTTP_404_NOT_FOUND)
    except NotMemberError as e:
        return _error(e, status.HTTP_403_FORBIDDEN)
    except InvalidContentError as e:
        return _error(e, status.HTTP_400_BAD_REQUEST)

    return Response(CommentSerializer(comment).data, status=status.HTTP_201_CREATED)


@extend_schema(responses={204: None, **ERROR_RESPONSES}, tags=['discussions'])
@api_view(['DELETE'])
@permission_classes([IsAuthenticated])
def comment_detail(request, post_id, comment_id):
    try:
        delete_comment(post_id=post_id, comment_id=comment_id, user=request.user)
    except (PostNotFoundError, CommentNotFoundError) as e:
        return _error(e, status.HTTP_404_NOT_FOUND)
    except InsufficientPermissionsError as e:
        return _error(e, status.HTTP_403_FORBIDDEN)

    return Response(status=status.HTTP_204_NO_CONTENT)


@extend_schema(
    request=CommentCreateSerializer,
    responses={201: CommentSerializer, **ERROR_RESPONSES},
    description="Reply to a comment, or to a reply when comment_id is a reply id.",
    tags=['discussions'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def replies(request, post_id, comment_id):
    serializer = CommentCreateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        reply = add_reply(
            post_id=post_id,
            target_id=comment_id,
            user=request.user,
            body=serializer.validated_data['body']
        )
    except (PostNotFoundError, CommentNotFoundError) as e:
        return _error(e, status.HTTP_404_NOT_FOUND)
    except NotMemberError as e:
        return _error(e, status.HTTP_403_FORBIDDEN)
    except InvalidContentError as e:
        return _error(e, status.HTTP_400_BAD_REQUEST)

    return Response(CommentSerializer(reply).data, status=status.HTTP_201_CREATED)


@extend_schema(responses={204: None, **ERROR_RESPONSES}, tags=['discussions'])
@api_view(['DELETE'])
@permission_classes([IsAuthenticated])
def reply_detail(request, post_id, comment_id, reply_id):
    try:
        delete_reply(
            post_id=post_id,
            comment_id=comment_id,
            reply_id=reply_id,
            user=request.user
        )
    except (PostNotFoundError, CommentNotFoundError, ReplyNotFoundError) as e:
        return _error(e, status.HTTP_404_NOT_FOUND)
    except InsufficientPermissionsError as e:
        return _error(e, status.HTTP_403_FORBIDDEN)

    return Response(status=status.HTTP_204_NO_CONTENT)
