from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema

from .serializers import (
    FriendRequestSerializer,
    SendFriendRequestSerializer,
    RespondFriendRequestSerializer,
    FriendSerializer,
)

from apps.social.services import (
    send_friend_request,
    list_incoming_requests,
    respond_to_friend_request,
    list_friends,
    remove_friend,
    follow_user,
    unfollow_user,
    # Exceptions
    UserNotFoundError,
    SelfRelationshipError,
    AlreadyFriendsError,
    FriendRequestExistsError,
    FriendRequestNotFoundError,
    AlreadyFollowingError,
    NotFollowingError,
    NotFriendsError,
)


@extend_schema(
    request=SendFriendRequestSerializer,
    responses={201: FriendRequestSerializer, 200: FriendRequestSerializer(many=True)},
    tags=['social'],
)
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def friend_requests(request):
    """GET: pending requests addressed to me. POST: send a request."""
    if request.method == 'GET':
        serializer = FriendRequestSerializer(list_incoming_requests(user=request.user), many=True)
        return Response(serializer.data)

    serializer = SendFriendRequestSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        friend_request = send_friend_request(
            from_user=request.user,
            to_user_id=serializer.validated_data['user_id'],
            message=serializer.validated_data['message'],
        )
    except SelfRelationshipError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    except UserNotFoundError as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
    except (AlreadyFriendsError, FriendRequestExistsError) as e:
        return Response({'error': str(e)}, status=status.HTTP_409_CONFLICT)

    return Response(FriendRequestSerializer(friend_request).data, status=status.HTTP_201_CREATED)


@extend_schema(
    request=RespondFriendRequestSerializer,
    responses={200: FriendRequestSerializer},
    tags=['social'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def respond_friend_request(request, pk):
    serializer = RespondFriendRequestSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        friend_request = respond_to_friend_request(
            request_id=pk,
            user=request.user,
            accept=serializer.validated_data['action'] == 'accept',
        )
    except FriendRequestNotFoundError as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)

    return Response(FriendRequestSerializer(friend_request).data)


@extend_schema(responses={200: FriendSerializer(many=True)}, tags=['social'])
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def friends(request):
    serializer = FriendSerializer(list_friends(user=request.user), many=True)
    return Response(serializer.data)


@extend_schema(tags=['social'])
@api_view(['DELETE'])
@permission_classes([IsAuthenticated])
def friend_detail(request, user_id):
    """Remove a friend."""
    try:
        remove_friend(user=request.user, friend_id=user_id)
    except (UserNotFoundError, NotFriendsError) as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)

    return Response(status=status.HTTP_204_NO_CONTENT)


@extend_schema(tags=['social'])
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def follow(request, user_id):
    try:
        follow_user(user=request.user, target_id=user_id)
    except SelfRelationshipError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    except UserNotFoundError as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
    except AlreadyFollowingError as e:
        return Response({'error': str(e)}, status=status.HTTP_409_CONFLICT)

    return Response({'message': 'User followed successfully'}, status=status.HTTP_201_CREATED)


@extend_schema(tags=['social'])
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def unfollow(request, user_id):
    try:
        unfollow_user(user=request.user, target_id=user_id)
    except UserNotFoundError as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
    except NotFollowingError as e:
        return Response({'error': str(e)}, status=status.HTTP_409_CONFLICT)

    return Response({'message': 'User unfollowed successfully'})
