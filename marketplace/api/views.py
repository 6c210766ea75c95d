from django.contrib.auth import get_user_model
from django.shortcuts import get_object_or_404
from django.utils import timezone
from django.utils.dateparse import parse_datetime
from rest_framework import status
from rest_framework.generics import RetrieveAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from ..models import Property, RoommateMessage, StudentDetail
from ..services.booking import StudentBookingService
from ..services.listings import FavoriteService
from ..services.messaging import ChatError, RoommateChatService
from ..services.roommates import RoommateFilters, RoommateMatchService
from .serializers import (
    RoommateMatchSerializer,
    RoommateMessageCreateSerializer,
    RoommateMessageSerializer,
    UserSerializer,
)

User = get_user_model()


def _error(message, status_code):
    return Response({'success': False, 'error': message}, status=status_code)


class CurrentUserView(RetrieveAPIView):
    """Return the authenticated user's profile information."""

    serializer_class = UserSerializer
    permission_classes = [IsAuthenticated]

    def get_object(self):
        return self.request.user


class RoommateMatchListView(APIView):
    """Scored roommate suggestions, filtered by ``sleep_schedule`` and ``study_habits``."""

    permission_classes = [IsAuthenticated]

    def get(self, request):
        current_details = StudentBookingService(request.user).student_details()
        service = RoommateMatchService(request.user, current_details)
        matches = service.matches(RoommateFilters.from_data(request.query_params))
        return Response(
            {
                'success': True,
                'has_booking': current_details is not None,
                'matches': RoommateMatchSerializer(matches, many=True).data,
            }
        )


class RoommateMessageListView(APIView):
    """Poll for new chat messages (``?since=``) or send one."""

    permission_classes = [IsAuthenticated]

    def initial(self, request, *args, **kwargs):
        super().initial(request, *args, **kwargs)
        self.listing = get_object_or_404(Property, pk=kwargs['pk'])

    def _is_resident(self, request):
        return StudentDetail.objects.filter(user=request.user, property=self.listing).exists()

    def get(self, request, pk):
        if not self._is_resident(request):
            return _error('Only residents of this PG can read its messages.', status.HTTP_403_FORBIDDEN)

        since = None
        raw_since = request.query_params.get('since')
        if raw_since:
            since = parse_datetime(raw_since)
            if since is None:
                return _error('since must be an ISO 8601 timestamp', status.HTTP_400_BAD_REQUEST)
            if timezone.is_naive(since):
                since = timezone.make_aware(since)

        service = RoommateChatService(request.user, self.listing)
        messages = service.messages_since(since)
        return Response(
            {
                'success': True,
                'messages': RoommateMessageSerializer(messages, many=True).data,
                'unread': service.unread_count(),
            }
        )

    def post(self, request, pk):
        if not self._is_resident(request):
            return _error('Only residents of this PG can send messages.', status.HTTP_403_FORBIDDEN)

        payload = RoommateMessageCreateSerializer(data=request.data)
        if not payload.is_valid():
            return _error(payload.errors, status.HTTP_400_BAD_REQUEST)

        recipient = User.objects.filter(pk=payload.validated_data['recipient']).first()
        if recipient is None:
            return _error('Recipient not found', status.HTTP_400_BAD_REQUEST)

        service = RoommateChatService(request.user, self.listing)
        try:
            message = service.send(recipient, payload.validated_data['message'])
        except ChatError as exc:
            return _error(str(exc), status.HTTP_400_BAD_REQUEST)
        return Response(
            {'success': True, 'message': RoommateMessageSerializer(message).data},
            status=status.HTTP_201_CREATED,
        )


class RoommateMessageReadView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request, message_id):
        message = get_object_or_404(RoommateMessage.objects.select_related('property'), pk=message_id)
        service = RoommateChatService(request.user, message.property)
        try:
            service.mark_as_read(message)
        except PermissionError as exc:
            return _error(str(exc), status.HTTP_403_FORBIDDEN)
        return Response({'success': True, 'read': message.read})


class FavoriteToggleAPIView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request, pk):
        listing = get_object_or_404(Property, pk=pk)
        is_favorite = FavoriteService(request.user).toggle(listing)
        return Response({'success': True, 'is_favorite': is_favorite})
