from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable

from django.contrib.auth import get_user_model
from django.db.models import Q

from ..models import Property, RoommateMessage, StudentDetail
from .roommates import DisplayIdentity, UNKNOWN_USER, profile_relation_for, resolve_identity

logger = logging.getLogger(__name__)

User = get_user_model()


class ChatError(Exception):
    """A chat action was refused."""


def merge_messages(*streams: Iterable[RoommateMessage]) -> list[RoommateMessage]:
    """Merge message streams into one list ordered by ``created_at``.

    A message present in more than one stream is kept once; the copy seen
    last wins so a refreshed ``read`` flag replaces a stale one.
    """

    by_id: dict[int, RoommateMessage] = {}
    for stream in streams:
        for message in stream:
            by_id[message.pk] = message
    return sorted(by_id.values(), key=lambda message: (message.created_at, message.pk))


class RoommateChatService:
    """Conversations between residents of one property."""

    def __init__(self, user, property: Property):
        self.user = user
        self.property = property

    def _base_queryset(self):
        return RoommateMessage.objects.filter(property=self.property).select_related("sender", "recipient")

    def messages(self) -> list[RoommateMessage]:
        sent = self._base_queryset().filter(sender=self.user)
        received = self._base_queryset().filter(recipient=self.user)
        return merge_messages(sent, received)

    def messages_since(self, since: datetime | None) -> list[RoommateMessage]:
        """Return messages created after ``since``; the polling side of the chat."""

        queryset = self._base_queryset().filter(Q(sender=self.user) | Q(recipient=self.user))
        if since is not None:
            queryset = queryset.filter(created_at__gt=since)
        return merge_messages(queryset)

    def conversation_partners(self, messages: Iterable[RoommateMessage] | None = None) -> list[int]:
        """User ids this user has exchanged messages with, in order of first contact."""

        partners: list[int] = []
        for message in messages if messages is not None else self.messages():
            if message.sender_id == self.user.pk:
                partner_id = message.recipient_id
            elif message.recipient_id == self.user.pk:
                partner_id = message.sender_id
            else:
                continue
            if partner_id not in partners:
                partners.append(partner_id)
        return partners

    def conversation(self, partner_id: int, messages: Iterable[RoommateMessage] | None = None) -> list[RoommateMessage]:
        return [
            message
            for message in (messages if messages is not None else self.messages())
            if (message.sender_id == self.user.pk and message.recipient_id == partner_id)
            or (message.recipient_id == self.user.pk and message.sender_id == partner_id)
        ]

    def residents(self) -> list[StudentDetail]:
        """Other students booked into this property."""

        return list(
            StudentDetail.objects
            .filter(property=self.property)
            .exclude(user=self.user)
            .select_related("user__profile")
            .order_by("id")
        )

    def identity_for(self, user_id: int) -> DisplayIdentity:
        user = User.objects.select_related("profile").filter(pk=user_id).first()
        return resolve_identity(profile_relation_for(user), fallback_name=UNKNOWN_USER)

    def send(self, recipient, text: str) -> RoommateMessage:
        body = (text or "").strip()
        if not body:
            raise ChatError("Message cannot be empty.")
        if recipient.pk == self.user.pk:
            raise ChatError("You cannot message yourself.")
        if not StudentDetail.objects.filter(property=self.property, user=recipient).exists():
            raise ChatError("You can only message residents of this PG.")
        message = RoommateMessage.objects.create(
            sender=self.user,
            recipient=recipient,
            property=self.property,
            message=body,
            read=False,
        )
        logger.info(
            "Message %s sent from user %s to user %s on listing %s",
            message.pk,
            self.user.pk,
            recipient.pk,
            self.property.pk,
        )
        return message

    def mark_as_read(self, message: RoommateMessage) -> RoommateMessage:
        if message.recipient_id != self.user.pk:
            raise PermissionError("Only the recipient can mark a message as read.")
        if not message.read:
            message.read = True
            message.save(update_fields=["read", "updated_at"])
        return message

    def mark_conversation_read(self, partner_id: int) -> int:
        return (
            RoommateMessage.objects
            .filter(property=self.property, sender_id=partner_id, recipient=self.user, read=False)
            .update(read=True)
        )

    def unread_count(self) -> int:
        return RoommateMessage.objects.filter(property=self.property, recipient=self.user, read=False).count()
