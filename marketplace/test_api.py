from datetime import date, timedelta

from django.core.cache import cache
from django.test import TestCase
from django.urls import reverse
from django.utils import timezone
from rest_framework.test import APIClient

from .models import Favorite, Profile, Property, RoommateMessage, StudentDetail, User


class ApiTestBase(TestCase):
    def setUp(self):
        cache.clear()
        self.client = APIClient()
        owner = User.objects.create_user(username="owner", password="pass12345")
        self.pg = Property.objects.create(
            owner=owner, title="Campus PG", location="Pune", price=8000, property_type="pg", listing_type="pg"
        )
        self.asha = User.objects.create_user(username="asha", email="asha@example.com", password="pass12345")
        self.ravi = User.objects.create_user(username="ravi", password="pass12345")
        Profile.objects.create(user=self.asha, full_name="Asha Rao", phone="9876543210", location="Pune")
        StudentDetail.objects.create(
            user=self.asha,
            property=self.pg,
            move_in_date=date(2024, 7, 1),
            daily_routine={"sleep_time": "23:00", "wake_up_time": "07:00"},
            has_booked_pg=True,
        )
        StudentDetail.objects.create(
            user=self.ravi,
            property=self.pg,
            move_in_date=date(2024, 7, 1),
            daily_routine={"sleep_time": "23:30", "wake_up_time": "09:00"},
            has_booked_pg=True,
        )


class CurrentUserApiTest(ApiTestBase):
    def test_requires_authentication(self):
        response = self.client.get(reverse("auth_me"))
        self.assertEqual(response.status_code, 403)

    def test_returns_profile_fields(self):
        self.client.force_authenticate(self.asha)
        response = self.client.get(reverse("auth_me"))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["full_name"], "Asha Rao")
        self.assertEqual(response.data["phone"], "9876543210")
        self.assertEqual(response.data["location"], "Pune")

    def test_user_without_profile(self):
        self.client.force_authenticate(self.ravi)
        response = self.client.get(reverse("auth_me"))
        self.assertEqual(response.data["full_name"], "ravi")
        self.assertIsNone(response.data["phone"])


class RoommateMatchApiTest(ApiTestBase):
    def test_scored_matches(self):
        self.client.force_authenticate(self.ravi)
        response = self.client.get(reverse("api_roommates"))
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.data["has_booking"])
        [match] = response.data["matches"]
        self.assertEqual(match["name"], "Asha Rao")
        self.assertEqual(match["score"], 95)
        self.assertEqual(match["badge"], "success")

    def test_filters_apply(self):
        self.client.force_authenticate(self.ravi)
        response = self.client.get(reverse("api_roommates"), {"sleep_schedule": "early"})
        self.assertEqual(response.data["matches"], [])


class RoommateMessageApiTest(ApiTestBase):
    def setUp(self):
        super().setUp()
        self.url = reverse("api_messages", kwargs={"pk": self.pg.pk})

    def test_send_and_poll(self):
        self.client.force_authenticate(self.asha)
        response = self.client.post(self.url, {"recipient": self.ravi.pk, "message": "hi"}, format="json")
        self.assertEqual(response.status_code, 201)
        self.assertTrue(response.data["success"])

        self.client.force_authenticate(self.ravi)
        response = self.client.get(self.url)
        self.assertEqual([item["message"] for item in response.data["messages"]], ["hi"])
        self.assertEqual(response.data["unread"], 1)

    def test_poll_since_timestamp(self):
        old = RoommateMessage.objects.create(sender=self.asha, recipient=self.ravi, property=self.pg, message="old")
        RoommateMessage.objects.filter(pk=old.pk).update(created_at=timezone.now() - timedelta(hours=2))
        RoommateMessage.objects.create(sender=self.asha, recipient=self.ravi, property=self.pg, message="new")

        self.client.force_authenticate(self.ravi)
        since = (timezone.now() - timedelta(hours=1)).isoformat()
        response = self.client.get(self.url, {"since": since})
        self.assertEqual([item["message"] for item in response.data["messages"]], ["new"])

    def test_bad_since(self):
        self.client.force_authenticate(self.ravi)
        response = self.client.get(self.url, {"since": "yesterday"})
        self.assertEqual(response.status_code, 400)
        self.assertFalse(response.data["success"])

    def test_empty_message_rejected(self):
        self.client.force_authenticate(self.asha)
        response = self.client.post(self.url, {"recipient": self.ravi.pk, "message": "   "}, format="json")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data, {"success": False, "error": "Message cannot be empty."})

    def test_non_resident_recipient_rejected(self):
        outsider = User.objects.create_user(username="outsider", password="pass12345")
        self.client.force_authenticate(self.asha)
        response = self.client.post(self.url, {"recipient": outsider.pk, "message": "hi"}, format="json")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data, {"success": False, "error": "You can only message residents of this PG."})
        self.assertFalse(RoommateMessage.objects.exists())

    def test_non_resident_forbidden(self):
        visitor = User.objects.create_user(username="visitor", password="pass12345")
        self.client.force_authenticate(visitor)
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, 403)

    def test_mark_read_only_by_recipient(self):
        message = RoommateMessage.objects.create(sender=self.asha, recipient=self.ravi, property=self.pg, message="hi")
        url = reverse("api_message_read", kwargs={"message_id": message.pk})

        self.client.force_authenticate(self.asha)
        self.assertEqual(self.client.post(url).status_code, 403)

        self.client.force_authenticate(self.ravi)
        response = self.client.post(url)
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.data["read"])


class FavoriteApiTest(ApiTestBase):
    def test_toggle(self):
        self.client.force_authenticate(self.ravi)
        url = reverse("api_favorite_toggle", kwargs={"pk": self.pg.pk})
        self.assertTrue(self.client.post(url).data["is_favorite"])
        self.assertFalse(self.client.post(url).data["is_favorite"])
        self.assertFalse(Favorite.objects.exists())
