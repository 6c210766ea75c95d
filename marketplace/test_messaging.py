from datetime import date, timedelta
from types import SimpleNamespace

from django.test import SimpleTestCase, TestCase
from django.urls import reverse
from django.utils import timezone

from .models import Profile, Property, RoommateMessage, StudentDetail, User
from .services.messaging import ChatError, RoommateChatService, merge_messages


class MergeMessagesTest(SimpleTestCase):
    def test_dedupes_by_id_and_orders_by_timestamp(self):
        now = timezone.now()
        first = SimpleNamespace(pk=1, created_at=now, read=False)
        second = SimpleNamespace(pk=2, created_at=now + timedelta(seconds=5), read=False)
        first_refreshed = SimpleNamespace(pk=1, created_at=now, read=True)

        merged = merge_messages([second, first], [first_refreshed])

        self.assertEqual([message.pk for message in merged], [1, 2])
        self.assertTrue(merged[0].read)

    def test_ties_are_broken_by_id(self):
        now = timezone.now()
        merged = merge_messages([SimpleNamespace(pk=9, created_at=now)], [SimpleNamespace(pk=3, created_at=now)])
        self.assertEqual([message.pk for message in merged], [3, 9])


class RoommateChatServiceTest(TestCase):
    def setUp(self):
        owner = User.objects.create_user(username="owner", password="pass12345")
        self.listing = Property.objects.create(
            owner=owner, title="Campus PG", location="Pune", price=8000, property_type="pg", listing_type="pg"
        )
        self.asha = User.objects.create_user(username="asha", password="pass12345")
        self.ravi = User.objects.create_user(username="ravi", password="pass12345")
        Profile.objects.create(user=self.ravi, full_name="Ravi Kumar")
        for user in (self.asha, self.ravi):
            StudentDetail.objects.create(
                user=user, property=self.listing, move_in_date=date(2024, 7, 1), has_booked_pg=True
            )
        self.service = RoommateChatService(self.asha, self.listing)

    def test_send_strips_and_stores_unread(self):
        message = self.service.send(self.ravi, "  hello there  ")
        self.assertEqual(message.message, "hello there")
        self.assertFalse(message.read)
        self.assertEqual(RoommateChatService(self.ravi, self.listing).unread_count(), 1)

    def test_empty_and_self_messages_rejected(self):
        with self.assertRaises(ChatError):
            self.service.send(self.ravi, "   ")
        with self.assertRaises(ChatError):
            self.service.send(self.asha, "note to self")
        self.assertFalse(RoommateMessage.objects.exists())

    def test_recipient_must_live_in_the_pg(self):
        outsider = User.objects.create_user(username="outsider", password="pass12345")
        with self.assertRaisesMessage(ChatError, "You can only message residents of this PG."):
            self.service.send(outsider, "hello")
        self.assertFalse(RoommateMessage.objects.exists())

    def test_conversation_partners_and_thread(self):
        self.service.send(self.ravi, "hi")
        RoommateChatService(self.ravi, self.listing).send(self.asha, "hey!")

        self.assertEqual(self.service.conversation_partners(), [self.ravi.pk])
        thread = self.service.conversation(self.ravi.pk)
        self.assertEqual([message.message for message in thread], ["hi", "hey!"])
        self.assertEqual(self.service.identity_for(self.ravi.pk).name, "Ravi Kumar")
        self.assertEqual(self.service.identity_for(self.asha.pk).name, "Unknown User")

    def test_messages_since_returns_only_newer(self):
        old = self.service.send(self.ravi, "old")
        RoommateMessage.objects.filter(pk=old.pk).update(created_at=timezone.now() - timedelta(hours=1))
        new = self.service.send(self.ravi, "new")

        since = timezone.now() - timedelta(minutes=5)
        self.assertEqual([message.pk for message in self.service.messages_since(since)], [new.pk])
        self.assertEqual(len(self.service.messages_since(None)), 2)

    def test_only_recipient_marks_read(self):
        message = self.service.send(self.ravi, "hi")
        with self.assertRaises(PermissionError):
            self.service.mark_as_read(message)
        RoommateChatService(self.ravi, self.listing).mark_as_read(message)
        message.refresh_from_db()
        self.assertTrue(message.read)

    def test_residents_exclude_self(self):
        self.assertEqual([resident.user for resident in self.service.residents()], [self.ravi])


class RoommateChatViewTest(TestCase):
    def setUp(self):
        owner = User.objects.create_user(username="owner", password="pass12345")
        self.listing = Property.objects.create(
            owner=owner, title="Campus PG", location="Pune", price=8000, property_type="pg", listing_type="pg"
        )
        self.asha = User.objects.create_user(username="asha", password="pass12345")
        self.ravi = User.objects.create_user(username="ravi", password="pass12345")
        for user in (self.asha, self.ravi):
            StudentDetail.objects.create(user=user, property=self.listing, move_in_date=date(2024, 7, 1))
        self.url = reverse("roommate_chat", kwargs={"pk": self.listing.pk})

    def test_non_resident_is_sent_to_booking(self):
        User.objects.create_user(username="visitor", password="pass12345")
        self.client.login(username="visitor", password="pass12345")
        response = self.client.get(self.url)
        self.assertRedirects(response, reverse("booking_slot", kwargs={"pk": self.listing.pk}))

    def test_send_and_read_conversation(self):
        self.client.login(username="asha", password="pass12345")
        response = self.client.post(self.url, {"recipient": self.ravi.pk, "message": "hello"})
        self.assertRedirects(response, f"{self.url}?with={self.ravi.pk}")

        self.client.login(username="ravi", password="pass12345")
        response = self.client.get(self.url, {"with": self.asha.pk})
        self.assertEqual(response.status_code, 200)
        self.assertEqual([message.message for message in response.context["conversation"]], ["hello"])
        self.assertFalse(RoommateMessage.objects.filter(read=False).exists())
