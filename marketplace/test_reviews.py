from datetime import date

from django.contrib.auth.models import AnonymousUser
from django.test import TestCase
from django.urls import reverse

from .models import PGFeedback, Property, RoommateReview, StudentDetail, User
from .services.reviews import PGFeedbackService, RoommateReviewService


class ReviewTestBase(TestCase):
    def setUp(self):
        self.owner = User.objects.create_user(username="owner", password="pass12345")
        self.pg = Property.objects.create(
            owner=self.owner, title="Campus PG", location="Pune", price=8000, property_type="pg", listing_type="pg"
        )
        self.resident = User.objects.create_user(username="resident", password="pass12345")
        self.roommate = User.objects.create_user(username="roommate", password="pass12345")
        self.visitor = User.objects.create_user(username="visitor", password="pass12345")
        for user in (self.resident, self.roommate):
            StudentDetail.objects.create(user=user, property=self.pg, move_in_date=date(2024, 7, 1))


class PGFeedbackServiceTest(ReviewTestBase):
    def test_eligibility(self):
        self.assertFalse(PGFeedbackService(AnonymousUser()).eligibility(self.pg).can_review)
        self.assertEqual(
            PGFeedbackService(self.visitor).eligibility(self.pg).reason,
            "You can review only after booking this PG.",
        )
        self.assertTrue(PGFeedbackService(self.resident).eligibility(self.pg).can_review)

    def test_save_then_update_keeps_one_row(self):
        service = PGFeedbackService(self.resident)
        success, _form, feedback, _eligibility = service.save(self.pg, {"rating": "4", "feedback": "Clean rooms"})
        self.assertTrue(success)
        success, _form, updated, _eligibility = service.save(self.pg, {"rating": "5", "feedback": "Even better"})
        self.assertTrue(success)
        self.assertEqual(feedback.pk, updated.pk)
        self.assertEqual(PGFeedback.objects.get().rating, 5)

    def test_rating_out_of_range(self):
        success, form, _feedback, _eligibility = PGFeedbackService(self.resident).save(self.pg, {"rating": "7"})
        self.assertFalse(success)
        self.assertIn("rating", form.errors)

    def test_detail_page_post(self):
        self.client.login(username="resident", password="pass12345")
        url = reverse("property_detail", kwargs={"pk": self.pg.pk})
        response = self.client.post(url, {"rating": "3", "feedback": "Okay"})
        self.assertRedirects(response, url)
        self.assertEqual(PGFeedback.objects.get().user, self.resident)


class RoommateReviewServiceTest(ReviewTestBase):
    def test_eligibility_rules(self):
        self.assertFalse(RoommateReviewService(self.resident).eligibility(self.pg, self.resident).can_review)
        self.assertFalse(RoommateReviewService(self.visitor).eligibility(self.pg, self.roommate).can_review)
        self.assertFalse(RoommateReviewService(self.resident).eligibility(self.pg, self.visitor).can_review)
        self.assertTrue(RoommateReviewService(self.resident).eligibility(self.pg, self.roommate).can_review)

    def test_review_view(self):
        self.client.login(username="resident", password="pass12345")
        url = reverse("roommate_review", kwargs={"pk": self.pg.pk, "user_id": self.roommate.pk})
        response = self.client.post(url, {"rating": "5", "feedback": "Quiet and tidy"})
        self.assertRedirects(response, reverse("property_detail", kwargs={"pk": self.pg.pk}))
        review = RoommateReview.objects.get()
        self.assertEqual((review.reviewer, review.roommate, review.rating), (self.resident, self.roommate, 5))

    def test_only_reviewer_deletes(self):
        _success, _form, review, _eligibility = RoommateReviewService(self.resident).save(
            self.pg, self.roommate, {"rating": "4"}
        )
        with self.assertRaises(PermissionError):
            RoommateReviewService(self.roommate).delete(review)
        RoommateReviewService(self.resident).delete(review)
        self.assertFalse(RoommateReview.objects.exists())
