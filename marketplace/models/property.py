import os
import secrets
import time

from django.db import models
from django.urls import reverse

from .user import User


def property_image_path(instance, filename: str) -> str:
    """Store uploads as ``property-images/<user_id>/<timestamp>-<random>.<ext>``."""

    ext = os.path.splitext(filename)[1].lstrip(".").lower() or "jpg"
    owner_id = instance.property.owner_id
    return f"property-images/{owner_id}/{int(time.time() * 1000)}-{secrets.token_hex(6)}.{ext}"


class Property(models.Model):
    PROPERTY_TYPE_CHOICES = (
        ("apartment", "Apartment"),
        ("house", "House"),
        ("villa", "Villa"),
        ("pg", "PG"),
        ("plot", "Plot"),
    )
    LISTING_TYPE_CHOICES = (
        ("sale", "For Sale"),
        ("rent", "For Rent"),
        ("pg", "PG / Hostel"),
    )
    STATUS_CHOICES = (
        ("active", "Active"),
        ("under_review", "Under Review"),
        ("inactive", "Inactive"),
    )

    owner = models.ForeignKey(User, on_delete=models.CASCADE, related_name="properties")
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    location = models.CharField(max_length=255)
    price = models.DecimalField(max_digits=14, decimal_places=2)
    property_type = models.CharField(max_length=20, choices=PROPERTY_TYPE_CHOICES)
    listing_type = models.CharField(max_length=10, choices=LISTING_TYPE_CHOICES)
    bedrooms = models.PositiveIntegerField(null=True, blank=True)
    bathrooms = models.PositiveIntegerField(null=True, blank=True)
    area_sqft = models.PositiveIntegerField(null=True, blank=True)
    amenities = models.JSONField(default=dict, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default="active")
    owner_name = models.CharField(max_length=255, blank=True)
    owner_phone = models.CharField(max_length=20, blank=True)
    owner_email = models.EmailField(blank=True)
    owner_address = models.TextField(blank=True)
    owner_description = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name_plural = "properties"

    def __str__(self) -> str:  # pragma: no cover - simple display helper
        return self.title

    def get_absolute_url(self) -> str:
        return reverse("property_detail", kwargs={"pk": self.pk})

    @property
    def amenities_list(self) -> list[str]:
        if not isinstance(self.amenities, dict):
            return []
        return [name for name, enabled in self.amenities.items() if enabled]

    @property
    def image_urls(self) -> list[str]:
        return [image.image.url for image in self.images.all() if image.image]

    @property
    def primary_image_url(self) -> str | None:
        urls = self.image_urls
        return urls[0] if urls else None


class PropertyImage(models.Model):
    property = models.ForeignKey(Property, on_delete=models.CASCADE, related_name="images")
    image = models.ImageField(upload_to=property_image_path)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at", "id"]

    def __str__(self) -> str:  # pragma: no cover - simple display helper
        return f"Image for {self.property.title} ({self.image.name})"


class Favorite(models.Model):
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name="favorites")
    property = models.ForeignKey(Property, on_delete=models.CASCADE, related_name="favorited_by")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["user", "property"], name="unique_favorite_per_user"),
        ]

    def __str__(self) -> str:  # pragma: no cover - simple display helper
        return f"{self.user.username} likes {self.property.title}"


class SavedSearch(models.Model):
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name="saved_searches")
    name = models.CharField(max_length=255)
    criteria = models.JSONField(default=dict)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at", "-id"]

    def __str__(self) -> str:  # pragma: no cover - simple display helper
        return self.name
