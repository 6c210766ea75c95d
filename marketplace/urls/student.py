"""Student booking, roommate dashboard and chat URL patterns."""

from django.urls import path

from ..views import student

urlpatterns = [
    path("pg/<int:pk>/book/", student.BookingSlotView.as_view(), name="booking_slot"),
    path("student/dashboard/", student.StudentDashboardView.as_view(), name="student_dashboard"),
    path("pg/<int:pk>/chat/", student.RoommateChatView.as_view(), name="roommate_chat"),
    path(
        "pg/<int:pk>/roommates/<int:user_id>/review/",
        student.RoommateReviewView.as_view(),
        name="roommate_review",
    ),
]
