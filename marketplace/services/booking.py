from __future__ import annotations

import logging
from typing import Any

from django.conf import settings
from django.core.cache import cache
from django.db import DatabaseError, connection, transaction

from ..models import Property, StudentDetail

logger = logging.getLogger(__name__)

# Columns replaced when a (user, property) booking already exists.
UPSERT_UPDATE_FIELDS = [
    "college_name",
    "degree",
    "branch",
    "course",
    "year_of_study",
    "move_in_date",
    "move_out_date",
    "emergency_contact",
    "daily_routine",
    "preferences",
    "has_booked_pg",
    "updated_at",
]

_MISSING = object()


class BookingError(Exception):
    """A booking write was rejected by the database."""


def booking_cache_key(user_id, property_id) -> str:
    return f"booking:{user_id}:{property_id}"


def student_details_cache_key(user_id) -> str:
    return f"student-details:{user_id}"


def build_student_detail_values(cleaned_data: dict[str, Any]) -> dict[str, Any]:
    """Map validated booking form data onto StudentDetail columns."""

    routine = {
        "wake_up_time": cleaned_data.get("wake_up_time") or None,
        "sleep_time": cleaned_data.get("sleep_time") or None,
        "study_hours": cleaned_data.get("study_hours") or None,
        "work_schedule": cleaned_data.get("work_schedule") or None,
        "extracurricular": cleaned_data.get("extracurricular") or None,
    }
    preferences = {
        "room_type": cleaned_data.get("room_type") or "shared",
        "special_requests": cleaned_data.get("special_requests") or None,
    }
    for key in ("cleanliness", "noise", "sleep_schedule", "guest_frequency"):
        value = cleaned_data.get(key)
        if value not in (None, ""):
            preferences[key] = value
    return {
        "move_in_date": cleaned_data["move_in_date"],
        "move_out_date": cleaned_data.get("move_out_date"),
        "college_name": cleaned_data.get("college_name") or "",
        "degree": cleaned_data.get("degree") or "",
        "branch": cleaned_data.get("branch") or "",
        "course": cleaned_data.get("course") or "",
        "year_of_study": cleaned_data.get("year_of_study") or "",
        "emergency_contact": cleaned_data.get("emergency_contact") or "",
        "daily_routine": routine,
        "preferences": preferences,
        "has_booked_pg": True,
    }


class StudentBookingService:
    """Reads and submits a student's PG booking for a property."""

    def __init__(self, user):
        self.user = user

    # Cached reads -----------------------------------------------------
    def booking_for(self, property: Property) -> StudentDetail | None:
        key = booking_cache_key(self.user.pk, property.pk)
        booking = cache.get(key, _MISSING)
        if booking is _MISSING:
            booking = StudentDetail.objects.filter(user=self.user, property=property).first()
            cache.set(key, booking, settings.STUDENT_DETAILS_CACHE_TTL)
        return booking

    def student_details(self) -> StudentDetail | None:
        """Return the user's first booking record, with its property."""

        key = student_details_cache_key(self.user.pk)
        details = cache.get(key, _MISSING)
        if details is _MISSING:
            details = (
                StudentDetail.objects
                .filter(user=self.user)
                .select_related("property")
                .order_by("created_at", "id")
                .first()
            )
            cache.set(key, details, settings.STUDENT_DETAILS_CACHE_TTL)
        return details

    def invalidate(self, property: Property) -> None:
        cache.delete_many([
            booking_cache_key(self.user.pk, property.pk),
            student_details_cache_key(self.user.pk),
        ])

    # Writes -----------------------------------------------------------
    def submit(self, property: Property, values: dict[str, Any]) -> StudentDetail:
        """Create or replace the booking for (user, property) in one statement.

        Repeated submissions overwrite the stored row. Database failures are
        raised as :class:`BookingError` with nothing written.
        """

        record = StudentDetail(user=self.user, property=property, **values)
        conflict_kwargs: dict[str, Any] = {
            "update_conflicts": True,
            "update_fields": UPSERT_UPDATE_FIELDS,
        }
        # MySQL resolves conflicts against every unique key and rejects an explicit target.
        if connection.features.supports_update_conflicts_with_target:
            conflict_kwargs["unique_fields"] = ["user", "property"]
        try:
            with transaction.atomic():
                StudentDetail.objects.bulk_create([record], **conflict_kwargs)
        except DatabaseError as exc:
            logger.error(
                "Booking upsert failed for user %s property %s: %s",
                self.user.pk,
                property.pk,
                exc,
            )
            raise BookingError(str(exc) or "Failed to submit booking request") from exc

        self.invalidate(property)
        booking = StudentDetail.objects.get(user=self.user, property=property)
        logger.info("Booking stored for user %s property %s (id=%s)", self.user.pk, property.pk, booking.pk)
        return booking


class PropertyResidentsService:
    """Lists the students booked into an owner's property."""

    def __init__(self, owner):
        self.owner = owner

    def residents(self, property: Property):
        if property.owner_id != self.owner.pk:
            raise PermissionError("Cannot view residents of another owner's property.")
        return (
            StudentDetail.objects
            .filter(property=property)
            .select_related("user__profile")
            .order_by("move_in_date", "id")
        )
