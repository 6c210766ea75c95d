"""JSON API endpoints."""

from django.urls import path

from ..api.views import (
    CurrentUserView,
    FavoriteToggleAPIView,
    RoommateMatchListView,
    RoommateMessageListView,
    RoommateMessageReadView,
)

urlpatterns = [
    path('api/auth/me/', CurrentUserView.as_view(), name='auth_me'),
    path('api/roommates/', RoommateMatchListView.as_view(), name='api_roommates'),
    path('api/pg/<int:pk>/messages/', RoommateMessageListView.as_view(), name='api_messages'),
    path('api/messages/<int:message_id>/read/', RoommateMessageReadView.as_view(), name='api_message_read'),
    path('api/property/<int:pk>/favorite/', FavoriteToggleAPIView.as_view(), name='api_favorite_toggle'),
]
