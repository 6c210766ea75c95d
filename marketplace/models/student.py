from django.db import models

from .property import Property
from .user import User


class StudentDetail(models.Model):
    """A student's PG booking for one property, plus routine and preferences.

    ``daily_routine`` holds ``wake_up_time``, ``sleep_time``, ``study_hours``,
    ``work_schedule`` and ``extracurricular`` labels. ``preferences`` holds
    ``room_type``, ``special_requests`` and the optional ``cleanliness``,
    ``noise``, ``sleep_schedule`` and ``guest_frequency`` answers.
    """

    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name="student_details")
    property = models.ForeignKey(Property, on_delete=models.CASCADE, related_name="student_details")
    college_name = models.CharField(max_length=255, blank=True)
    degree = models.CharField(max_length=255, blank=True)
    branch = models.CharField(max_length=255, blank=True)
    course = models.CharField(max_length=255, blank=True)
    year_of_study = models.CharField(max_length=50, blank=True)
    move_in_date = models.DateField()
    move_out_date = models.DateField(null=True, blank=True)
    emergency_contact = models.CharField(max_length=255, blank=True)
    daily_routine = models.JSONField(default=dict, blank=True)
    preferences = models.JSONField(default=dict, blank=True)
    has_booked_pg = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["user", "property"], name="unique_student_detail_per_property"),
        ]

    def __str__(self) -> str:  # pragma: no cover - simple display helper
        return f"{self.user.username} at {self.property.title}"
