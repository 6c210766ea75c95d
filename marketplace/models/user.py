from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    """Account identity. Display details live on :class:`Profile`."""


class Profile(models.Model):
    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name="profile")
    full_name = models.CharField(max_length=255, blank=True)
    email = models.EmailField(blank=True)
    phone = models.CharField(max_length=20, blank=True)
    bio = models.TextField(blank=True)
    location = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:  # pragma: no cover - simple display helper
        return f"Profile for {self.full_name or self.user.username}"
