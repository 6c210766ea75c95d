from django.db import models

from .property import Property
from .user import User


class RoommateMessage(models.Model):
    sender = models.ForeignKey(User, on_delete=models.CASCADE, related_name="sent_roommate_messages")
    recipient = models.ForeignKey(User, on_delete=models.CASCADE, related_name="received_roommate_messages")
    property = models.ForeignKey(Property, on_delete=models.CASCADE, related_name="roommate_messages")
    message = models.TextField()
    read = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["created_at", "id"]

    def __str__(self) -> str:  # pragma: no cover - simple display helper
        return f"Message from {self.sender_id} to {self.recipient_id}"
