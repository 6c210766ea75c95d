from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from .property import Property
from .user import User


class PGFeedback(models.Model):
    property = models.ForeignKey(Property, on_delete=models.CASCADE, related_name="feedback")
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name="pg_feedback")
    rating = models.IntegerField(validators=[MinValueValidator(1), MaxValueValidator(5)])
    feedback = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:  # pragma: no cover - simple display helper
        return f"Feedback for {self.property.title} by {self.user.username}"


class RoommateReview(models.Model):
    property = models.ForeignKey(Property, on_delete=models.CASCADE, related_name="roommate_reviews")
    reviewer = models.ForeignKey(User, on_delete=models.CASCADE, related_name="roommate_reviews_written")
    roommate = models.ForeignKey(User, on_delete=models.CASCADE, related_name="roommate_reviews_received")
    rating = models.IntegerField(validators=[MinValueValidator(1), MaxValueValidator(5)])
    feedback = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:  # pragma: no cover - simple display helper
        return f"Review of {self.roommate.username} by {self.reviewer.username}"
