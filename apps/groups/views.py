from rest_framework import viewsets, mixins, status
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.pagination import PageNumberPagination
from drf_spectacular.utils import extend_schema, OpenApiParameter

from .serializers import (
    GroupSerializer,
    GroupCreateSerializer,
    GroupListSerializer,
    GroupMemberSerializer,
    GroupInvitationSerializer,
    InviteMembersSerializer,
    InvitationResponseSerializer,
    PromoteModeratorSerializer,
)

from apps.groups.services import (
    create_group,
    get_group_by_id,
    list_groups,
    get_featured_groups,
    get_popular_groups,
    get_user_groups,
    get_categories,
    join_group,
    leave_group,
    remove_member,
    get_group_members,
    promote_to_moderator,
    demote_moderator,
    invite_members,
    accept_invitation,
    decline_invitation,
    get_pending_invitations,
    # Exceptions
    GroupNotFoundError,
    DuplicateGroupNameError,
    AlreadyMemberError,
    NotMemberError,
    CreatorCannotLeaveError,
    CannotDemoteCreatorError,
    CannotRemoveCreatorError,
    InsufficientPermissionsError,
    InvalidRecipientsError,
    InvitationNotFoundError,
    InvitationAlreadyResolvedError,
)


class GroupPagination(PageNumberPagination):
    """Custom pagination for groups."""
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


def _error(exc, code):
    return Response({'error': str(exc)}, status=code)


class GroupViewSet(
    mixins.ListModelMixin,
    mixins.CreateModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet
):
    """
    ViewSet for group discovery, membership and roles.

    All business logic is handled by services.
    Views are thin HTTP handlers only.

    list: Search active groups
    create: Create a new group
    retrieve: Get a specific group
    """

    serializer_class = GroupSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = GroupPagination

    def get_queryset(self):
        params = self.request.query_params
        return list_groups(
            search=params.get('search'),
            category=params.get('category'),
            sort=params.get('sort', 'popular'),
        )

    def get_serializer_class(self):
        """Use different serializers for different actions."""
        if self.action == 'list':
            return GroupListSerializer
        elif self.action == 'create':
            return GroupCreateSerializer
        return GroupSerializer

    @extend_schema(
        parameters=[
            OpenApiParameter('search', str, description='Match on name or description'),
            OpenApiParameter('category', str, description='Exact category'),
            OpenApiParameter('sort', str, enum=['popular', 'recent', 'active']),
        ],
        tags=['groups'],
    )
    def list(self, request, *args, **kwargs):
        return super().list(request, *args, **kwargs)

    def create(self, request, *args, **kwargs):
        """Create a new group."""
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            group = create_group(
                name=data['name'],
                description=data['description'],
                category=data['category'],
                creator=request.user,
                tags=data.get('tags'),
                rules=data.get('rules'),
                is_private=data.get('is_private', False),
            )
        except DuplicateGroupNameError as e:
            return _error(e, status.HTTP_409_CONFLICT)

        output_serializer = GroupSerializer(group, context={'request': request})
        return Response(output_serializer.data, status=status.HTTP_201_CREATED)

    def retrieve(self, request, pk=None):
        try:
            group = get_group_by_id(group_id=pk)
        except GroupNotFoundError as e:
            return _error(e, status.HTTP_404_NOT_FOUND)

        serializer = GroupSerializer(group, context={'request': request})
        return Response(serializer.data)

    @action(detail=False, methods=['get'])
    def featured(self, request):
        serializer = GroupListSerializer(get_featured_groups(), many=True)
        return Response(serializer.data)

    @action(detail=False, methods=['get'])
    def popular(self, request):
        serializer = GroupListSerializer(get_popular_groups(), many=True)
        return Response(serializer.data)

    @action(detail=False, methods=['get'])
    def categories(self, request):
        return Response({'categories': get_categories()})

    @action(detail=False, methods=['get'])
    def my(self, request):
        """Groups where the current user is a member."""
        serializer = GroupListSerializer(get_user_groups(user=request.user), many=True)
        return Response(serializer.data)

    @action(detail=True, methods=['get'])
    def members(self, request, pk=None):
        """Get all members of the group."""
        try:
            group = get_group_by_id(group_id=pk)
            memberships = get_group_members(group_id=pk)
        except GroupNotFoundError as e:
            return _error(e, status.HTTP_404_NOT_FOUND)

        serializer = GroupMemberSerializer(memberships, many=True, context={'group': group})
        return Response(serializer.data)

    @action(detail=True, methods=['post'])
    def join(self, request, pk=None):
        """Join a group."""
        try:
            join_group(group_id=pk, user=request.user)
        except GroupNotFoundError as e:
            return _error(e, status.HTTP_404_NOT_FOUND)
        except AlreadyMemberError as e:
            return _error(e, status.HTTP_409_CONFLICT)

        group = get_group_by_id(group_id=pk)
        return Response(
            GroupSerializer(group, context={'request': request}).data,
            status=status.HTTP_201_CREATED
        )

    @action(detail=True, methods=['post'])
    def leave(self, request, pk=None):
        """Leave a group."""
        try:
            group = leave_group(group_id=pk, user=request.user)
        except GroupNotFoundError as e:
            return _error(e, status.HTTP_404_NOT_FOUND)
        except CreatorCannotLeaveError as e:
            return _error(e, status.HTTP_403_FORBIDDEN)

        return Response({
            'message': 'Successfully left the group',
            'member_count': group.member_count,
        })

    @extend_schema(request=PromoteModeratorSerializer)
    @action(detail=True, methods=['post'])
    def moderators(self, request, pk=None):
        """Promote a member to moderator."""
        serializer = PromoteModeratorSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            group = promote_to_moderator(
                group_id=pk,
                user_id=serializer.validated_data['user_id'],
                promoted_by=request.user
            )
        except GroupNotFoundError as e:
            return _error(e, status.HTTP_404_NOT_FOUND)
        except InsufficientPermissionsError as e:
            return _error(e, status.HTTP_403_FORBIDDEN)
        except NotMemberError as e:
            return _error(e, status.HTTP_409_CONFLICT)

        group = get_group_by_id(group_id=group.id)
        return Response(GroupSerializer(group, context={'request': request}).data)

    @action(detail=True, methods=['delete'], url_path=r'moderators/(?P<user_id>[^/.]+)')
    def demote(self, request, pk=None, user_id=None):
        """Demote a moderator back to member."""
        try:
            demote_moderator(group_id=pk, user_id=user_id, demoted_by=request.user)
        except GroupNotFoundError as e:
            return _error(e, status.HTTP_404_NOT_FOUND)
        except (InsufficientPermissionsError, CannotDemoteCreatorError) as e:
            return _error(e, status.HTTP_403_FORBIDDEN)

        return Response({'message': 'Moderator demoted'})

    @action(detail=True, methods=['delete'], url_path=r'members/(?P<user_id>[^/.]+)')
    def remove_member(self, request, pk=None, user_id=None):
        """Remove a member from the group (moderators only)."""
        try:
            group = remove_member(group_id=pk, user_id=user_id, removed_by=request.user)
        except (GroupNotFoundError, NotMemberError) as e:
            return _error(e, status.HTTP_404_NOT_FOUND)
        except (InsufficientPermissionsError, CannotRemoveCreatorError) as e:
            return _error(e, status.HTTP_403_FORBIDDEN)

        return Response({
            'message': 'Member removed successfully',
            'member_count': group.member_count,
        })

    @extend_schema(request=InviteMembersSerializer)
    @action(detail=True, methods=['post'])
    def invite(self, request, pk=None):
        """Invite friends to the group. Each recipient gets its own outcome."""
        serializer = InviteMembersSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            results = invite_members(
                group_id=pk,
                inviter=request.user,
                recipient_ids=serializer.validated_data['recipients']
            )
        except InvalidRecipientsError as e:
            return _error(e, status.HTTP_400_BAD_REQUEST)
        except GroupNotFoundError as e:
            return _error(e, status.HTTP_404_NOT_FOUND)
        except NotMemberError as e:
            return _error(e, status.HTTP_403_FORBIDDEN)

        return Response({'results': results})

    def _respond_to_invitation(self, request, pk, resolver):
        serializer = InvitationResponseSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            invitation = resolver(
                group_id=pk,
                invitation_id=serializer.validated_data['invitation_id'],
                user=request.user
            )
        except (GroupNotFoundError, InvitationNotFoundError) as e:
            return _error(e, status.HTTP_404_NOT_FOUND)
        except InvitationAlreadyResolvedError as e:
            return _error(e, status.HTTP_409_CONFLICT)

        return Response(GroupInvitationSerializer(invitation).data)

    @extend_schema(request=InvitationResponseSerializer)
    @action(detail=True, methods=['post'], url_path='invitations/accept')
    def accept_invitation(self, request, pk=None):
        return self._respond_to_invitation(request, pk, accept_invitation)

    @extend_schema(request=InvitationResponseSerializer)
    @action(detail=True, methods=['post'], url_path='invitations/decline')
    def decline_invitation(self, request, pk=None):
        return self._respond_to_invitation(request, pk, decline_invitation)


@extend_schema(
    responses={200: GroupInvitationSerializer(many=True)},
    description="Pending group invitations addressed to the current user.",
    tags=['groups'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def pending_invitations(request):
    invitations = get_pending_invitations(user=request.user)
    serializer = GroupInvitationSerializer(invitations, many=True)
    return Response(serializer.data)
