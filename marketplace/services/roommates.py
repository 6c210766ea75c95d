"""Roommate matching: compatibility scoring, routine filters and identity display.

Routine data is stored as free text, so everything here reads it loosely: an
hour is the integer before the first ``:`` of a label and study habits are
matched by substring. Labels written through the booking form are already
normalized to 24-hour ``HH:MM`` values and category names, which this loose
reading handles unchanged.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from django.core.exceptions import ObjectDoesNotExist

from ..models import StudentDetail

logger = logging.getLogger(__name__)

BASE_SCORE = 50

# (max hour difference, points) pairs, checked in order.
SLEEP_POINTS = ((1, 30), (2, 20), (3, 10))
WAKE_POINTS = ((1, 20), (2, 15), (3, 10))
STUDY_MATCH_POINTS = 10

SLEEP_SCHEDULES = ("any", "early", "normal", "late")
STUDY_HABITS = ("any", "morning", "evening", "flexible", "intense")

# Substrings accepted for each study-habit bucket (lower-cased label).
STUDY_HABIT_KEYWORDS = {
    "morning": ("morning", "am"),
    "evening": ("evening", "pm"),
    "flexible": ("flexible", "any"),
    "intense": ("8", "intensive"),
}

NOT_PROVIDED = "Not provided"
UNKNOWN_USER = "Unknown User"

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


# ---------------------------------------------------------------------------
# Routine helpers
# ---------------------------------------------------------------------------


def routine_of(record: Any) -> dict | None:
    """Return the record's daily routine mapping, or ``None`` when unusable."""

    if isinstance(record, Mapping):
        routine = record.get("daily_routine")
    else:
        routine = getattr(record, "daily_routine", None)
    if not isinstance(routine, Mapping):
        return None
    return dict(routine)


def parse_hour(label: Any) -> int | None:
    """Read the hour of an ``"HH:MM"``-style label.

    Only the leading integer before the first colon counts, so ``"11:00 PM"``
    reads as 11. Labels without a leading number give ``None``.
    """

    if not isinstance(label, str) or not label:
        return None
    match = _LEADING_INT.match(label.split(":", 1)[0])
    if match is None:
        return None
    return int(match.group(1))


def _proximity_points(first: Any, second: Any, table) -> int:
    first_hour = parse_hour(first)
    second_hour = parse_hour(second)
    if first_hour is None or second_hour is None:
        return 0
    diff = abs(first_hour - second_hour)
    for max_diff, points in table:
        if diff <= max_diff:
            return points
    return 0


# ---------------------------------------------------------------------------
# Compatibility scorer
# ---------------------------------------------------------------------------


def calculate_compatibility_score(current: Any, other: Any) -> int:
    """Estimate roommate compatibility of two student records on a 0-100 scale.

    Records may be :class:`StudentDetail` instances or plain mappings with a
    ``daily_routine`` key. Missing routine data on either side gives the base
    score of 50.
    """

    current_routine = routine_of(current)
    other_routine = routine_of(other)
    if current_routine is None or other_routine is None:
        return BASE_SCORE

    score = BASE_SCORE
    if current_routine.get("sleep_time") and other_routine.get("sleep_time"):
        score += _proximity_points(current_routine["sleep_time"], other_routine["sleep_time"], SLEEP_POINTS)
    if current_routine.get("wake_up_time") and other_routine.get("wake_up_time"):
        score += _proximity_points(current_routine["wake_up_time"], other_routine["wake_up_time"], WAKE_POINTS)

    current_study = current_routine.get("study_hours")
    other_study = other_routine.get("study_hours")
    if current_study and other_study and current_study == other_study:
        score += STUDY_MATCH_POINTS

    return min(100, max(0, score))


# ---------------------------------------------------------------------------
# Roommate filter
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RoommateFilters:
    """Sleep-schedule and study-habit selection for the roommate list."""

    sleep_schedule: str = "any"
    study_habits: str = "any"

    @classmethod
    def from_data(cls, data: Mapping[str, Any]) -> "RoommateFilters":
        sleep = (data.get("sleep_schedule") or "any").strip().lower()
        study = (data.get("study_habits") or "any").strip().lower()
        return cls(
            sleep_schedule=sleep if sleep in SLEEP_SCHEDULES else "any",
            study_habits=study if study in STUDY_HABITS else "any",
        )

    @property
    def is_default(self) -> bool:
        return self.sleep_schedule == "any" and self.study_habits == "any"


def _matches_sleep_schedule(sleep_time: Any, schedule: str) -> bool:
    if schedule == "any" or not sleep_time:
        return True
    hour = parse_hour(sleep_time)
    if hour is None:
        return True
    if schedule == "early":
        return hour <= 22
    if schedule == "normal":
        return 22 <= hour <= 24
    if schedule == "late":
        # Hours are not wrapped past midnight, so 01:00 reads as 1 and never matches.
        return hour > 24
    return True


def _matches_study_habit(study_hours: Any, habit: str) -> bool:
    if habit == "any" or not study_hours or not isinstance(study_hours, str):
        return True
    keywords = STUDY_HABIT_KEYWORDS.get(habit)
    if keywords is None:
        return True
    label = study_hours.lower()
    return any(keyword in label for keyword in keywords)


def matches_filters(record: Any, filters: RoommateFilters) -> bool:
    routine = routine_of(record)
    if routine is None:
        return True
    return _matches_sleep_schedule(routine.get("sleep_time"), filters.sleep_schedule) and _matches_study_habit(
        routine.get("study_hours"), filters.study_habits
    )


def filter_students(students: Iterable[Any], filters: RoommateFilters) -> list[Any]:
    """Return the students matching ``filters``, keeping input order."""

    return [student for student in students if matches_filters(student, filters)]


# ---------------------------------------------------------------------------
# Profile resolution
# ---------------------------------------------------------------------------


class ProfileRelation:
    """A joined identity relation: :class:`JoinedProfile`, :class:`RelationError` or :class:`MissingProfile`."""


@dataclass(frozen=True)
class JoinedProfile(ProfileRelation):
    full_name: str | None = None
    email: str | None = None
    phone: str | None = None
    user_id: Any = None


@dataclass(frozen=True)
class RelationError(ProfileRelation):
    detail: Any = None


@dataclass(frozen=True)
class MissingProfile(ProfileRelation):
    pass


IDENTITY_FIELDS = ("full_name", "email", "phone", "id")


def classify_relation(value: Any) -> ProfileRelation:
    """Turn a raw joined value into one of the three relation variants.

    Accepts :class:`~marketplace.models.Profile` instances, mappings such as
    ``{"full_name": ...}`` or ``{"error": True}``, and ``None``.
    """

    if isinstance(value, ProfileRelation):
        return value
    if value is None:
        return MissingProfile()
    if isinstance(value, Mapping):
        if "error" in value:
            return RelationError(detail=value.get("error"))
        if not any(field in value for field in IDENTITY_FIELDS):
            return MissingProfile()
        return JoinedProfile(
            full_name=value.get("full_name"),
            email=value.get("email"),
            phone=value.get("phone"),
            user_id=value.get("id"),
        )
    if all(hasattr(value, field) for field in ("full_name", "email", "phone")):
        return JoinedProfile(
            full_name=value.full_name,
            email=value.email,
            phone=value.phone,
            user_id=getattr(value, "user_id", None),
        )
    return MissingProfile()


@dataclass(frozen=True)
class DisplayIdentity:
    name: str
    email: str
    phone: str
    resolved: bool

    @property
    def initial(self) -> str:
        return self.name[0].upper() if self.resolved and self.name else "U"


def resolve_identity(value: Any, *, fallback_name: str = UNKNOWN_USER) -> DisplayIdentity:
    """Return a displayable identity for a joined profile relation."""

    relation = classify_relation(value)
    if isinstance(relation, JoinedProfile):
        name = relation.full_name or fallback_name
        return DisplayIdentity(
            name=name,
            email=relation.email or "",
            phone=relation.phone or NOT_PROVIDED,
            resolved=bool(relation.full_name),
        )
    if isinstance(relation, RelationError):
        logger.debug("Profile relation came back as an error: %r", relation.detail)
    return DisplayIdentity(name=fallback_name, email="", phone=NOT_PROVIDED, resolved=False)


def profile_relation_for(user: Any) -> ProfileRelation:
    """Look up ``user.profile`` and classify it, absorbing lookup failures."""

    if user is None:
        return MissingProfile()
    try:
        profile = user.profile
    except ObjectDoesNotExist:
        return MissingProfile()
    return classify_relation(profile)


def student_identity(student: StudentDetail, *, fallback_name: str = NOT_PROVIDED) -> DisplayIdentity:
    return resolve_identity(profile_relation_for(student.user), fallback_name=fallback_name)


# ---------------------------------------------------------------------------
# Display helpers
# ---------------------------------------------------------------------------


def compatibility_badge(score: int) -> str:
    if score >= 80:
        return "success"
    if score >= 60:
        return "warning"
    return "danger"


def format_daily_routine(record: Any) -> str:
    routine = routine_of(record)
    if routine is None:
        return "No routine information available"
    parts = []
    if routine.get("wake_up_time"):
        parts.append(f"Wakes up: {routine['wake_up_time']}")
    if routine.get("sleep_time"):
        parts.append(f"Sleeps: {routine['sleep_time']}")
    if routine.get("study_hours"):
        parts.append(f"Studies: {routine['study_hours']}")
    activities = routine.get("extracurricular") or routine.get("extracurricular_activities")
    if activities:
        parts.append(f"Activities: {activities}")
    return " • ".join(parts) if parts else "No routine details"


# ---------------------------------------------------------------------------
# Dashboard service
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RoommateMatch:
    student: StudentDetail
    score: int
    identity: DisplayIdentity
    routine_summary: str

    @property
    def badge_class(self) -> str:
        return compatibility_badge(self.score)


class RoommateMatchService:
    """Builds the scored, filtered list of potential roommates for a student."""

    def __init__(self, user, current_details: StudentDetail | None = None):
        self.user = user
        self.current_details = current_details

    def booked_students(self):
        return (
            StudentDetail.objects
            .filter(has_booked_pg=True)
            .exclude(user=self.user)
            .select_related("user__profile", "property")
            .order_by("id")
        )

    def matches(self, filters: RoommateFilters | None = None) -> list[RoommateMatch]:
        filters = filters or RoommateFilters()
        candidates = filter_students(self.booked_students(), filters)
        matches = []
        for student in candidates:
            if self.current_details is not None:
                score = calculate_compatibility_score(self.current_details, student)
            else:
                score = BASE_SCORE
            matches.append(
                RoommateMatch(
                    student=student,
                    score=score,
                    identity=student_identity(student),
                    routine_summary=format_daily_routine(student),
                )
            )
        matches.sort(key=lambda match: match.score, reverse=True)
        return matches

    def profile_gaps(self) -> list[str]:
        """Name the profile fields the student should fill in to improve matching."""

        relation = profile_relation_for(self.user)
        full_name = relation.full_name if isinstance(relation, JoinedProfile) else None
        phone = relation.phone if isinstance(relation, JoinedProfile) else None
        missing = []
        if not full_name:
            missing.append("Name")
        if not phone:
            missing.append("Phone")
        return missing
