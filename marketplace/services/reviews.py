from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..forms import PGFeedbackForm, RoommateReviewForm
from ..models import PGFeedback, Property, RoommateReview, StudentDetail


@dataclass(frozen=True)
class ReviewEligibility:
    can_review: bool
    reason: str | None = None


class PGFeedbackService:
    """Handle PG feedback creation and eligibility around bookings."""

    def __init__(self, user):
        self.user = user

    def _has_booking(self, property: Property) -> bool:
        return StudentDetail.objects.filter(user=self.user, property=property).exists()

    def feedback_for(self, property: Property):
        return PGFeedback.objects.filter(property=property).select_related("user__profile").order_by("-created_at")

    def user_feedback(self, property: Property) -> PGFeedback | None:
        if not getattr(self.user, "is_authenticated", False):
            return None
        return PGFeedback.objects.filter(property=property, user=self.user).first()

    def eligibility(self, property: Property) -> ReviewEligibility:
        if not getattr(self.user, "is_authenticated", False):
            return ReviewEligibility(False, "You must be logged in to review this PG.")
        if property.listing_type != "pg":
            return ReviewEligibility(False, "Only PG listings accept feedback.")
        if not self._has_booking(property):
            return ReviewEligibility(False, "You can review only after booking this PG.")
        return ReviewEligibility(True, None)

    def form(self, property: Property, data: dict[str, Any] | None = None) -> PGFeedbackForm:
        return PGFeedbackForm(data=data, instance=self.user_feedback(property))

    def save(self, property: Property, data: dict[str, Any]) -> tuple[bool, PGFeedbackForm, PGFeedback | None, ReviewEligibility]:
        eligibility = self.eligibility(property)
        form = self.form(property, data=data)
        if not eligibility.can_review or not form.is_valid():
            return False, form, None, eligibility
        feedback = form.save(commit=False)
        feedback.property = property
        feedback.user = self.user
        feedback.save()
        return True, form, feedback, eligibility

    def delete(self, feedback: PGFeedback) -> None:
        if feedback.user_id != self.user.pk:
            raise PermissionError("Cannot delete another user's feedback.")
        feedback.delete()


class RoommateReviewService:
    """Reviews left by one resident about another resident of the same PG."""

    def __init__(self, user):
        self.user = user

    def reviews_for(self, property: Property):
        return (
            RoommateReview.objects.filter(property=property)
            .select_related("reviewer__profile", "roommate__profile")
            .order_by("-created_at")
        )

    def eligibility(self, property: Property, roommate) -> ReviewEligibility:
        if roommate.pk == self.user.pk:
            return ReviewEligibility(False, "You cannot review yourself.")
        residents = set(
            StudentDetail.objects.filter(property=property, user__in=[self.user, roommate]).values_list(
                "user_id", flat=True
            )
        )
        if self.user.pk not in residents:
            return ReviewEligibility(False, "You can review roommates only after booking this PG.")
        if roommate.pk not in residents:
            return ReviewEligibility(False, "That student is not a resident of this PG.")
        return ReviewEligibility(True, None)

    def save(self, property: Property, roommate, data: dict[str, Any]) -> tuple[bool, RoommateReviewForm, RoommateReview | None, ReviewEligibility]:
        existing = RoommateReview.objects.filter(property=property, reviewer=self.user, roommate=roommate).first()
        form = RoommateReviewForm(data=data, instance=existing)
        eligibility = self.eligibility(property, roommate)
        if not eligibility.can_review or not form.is_valid():
            return False, form, None, eligibility
        review = form.save(commit=False)
        review.property = property
        review.reviewer = self.user
        review.roommate = roommate
        review.save()
        return True, form, review, eligibility

    def delete(self, review: RoommateReview) -> None:
        if review.reviewer_id != self.user.pk:
            raise PermissionError("Cannot delete another user's review.")
        review.delete()
