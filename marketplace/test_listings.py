import shutil
import tempfile
from decimal import Decimal

from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import TestCase, override_settings
from django.urls import reverse

from .forms import PropertyForm
from .models import Favorite, Property, PropertyImage, SavedSearch, User
from .services.images import upload_property_image
from .services.listings import (
    FavoriteService,
    PropertyCatalogService,
    PropertyFilters,
    PropertyService,
    SavedSearchService,
)

# 1x1 transparent GIF
TINY_GIF = (
    b"GIF89a\x01\x00\x01\x00\x80\x00\x00\x00\x00\x00\xff\xff\xff!\xf9\x04\x01\x00\x00\x00\x00,"
    b"\x00\x00\x00\x00\x01\x00\x01\x00\x00\x02\x02D\x01\x00;"
)


class ListingTestMixin:
    def make_listing(self, owner, **overrides):
        values = {
            "title": "Sunny 2BHK",
            "description": "Close to the metro",
            "location": "Koramangala, Bangalore",
            "price": Decimal("25000"),
            "property_type": "apartment",
            "listing_type": "rent",
            "bedrooms": 2,
            "amenities": {"wifi": True, "parking": False},
        }
        values.update(overrides)
        return Property.objects.create(owner=owner, **values)


class PropertyCatalogServiceTest(ListingTestMixin, TestCase):
    def setUp(self):
        self.owner = User.objects.create_user(username="owner", password="pass12345")
        self.rent = self.make_listing(self.owner)
        self.sale = self.make_listing(
            self.owner,
            title="Villa by the lake",
            location="Pune",
            price=Decimal("9000000"),
            property_type="villa",
            listing_type="sale",
            bedrooms=4,
            amenities={"wifi": True, "parking": True},
        )
        self.hidden = self.make_listing(self.owner, title="Old flat", status="inactive")
        self.service = PropertyCatalogService()

    def catalog(self, data, **kwargs):
        return list(self.service.get_catalog(self.service.build_filters(data, **kwargs)))

    def test_only_active_listings_are_public(self):
        self.assertCountEqual(self.catalog({}), [self.rent, self.sale])

    def test_listing_type_and_price_range(self):
        self.assertEqual(self.catalog({}, listing_type="sale"), [self.sale])
        self.assertEqual(self.catalog({"max_price": "30000"}), [self.rent])
        self.assertEqual(self.catalog({"min_price": "abc"}), self.catalog({}))

    def test_amenities_must_all_be_present(self):
        self.assertEqual(self.catalog({"amenities": ["wifi", "parking"]}), [self.sale])
        self.assertCountEqual(self.catalog({"amenities": "wifi"}), [self.rent, self.sale])

    def test_text_search_and_bedrooms(self):
        self.assertEqual(self.catalog({"q": "lake"}), [self.sale])
        self.assertEqual(self.catalog({"bedrooms": ["2", "x"]}), [self.rent])
        self.assertEqual(self.catalog({"location": "bangalore"}), [self.rent])

    def test_unknown_values_are_dropped(self):
        filters = self.service.build_filters({"property_type": ["castle", "villa"], "amenities": ["pool"]})
        self.assertEqual(filters.property_types, ("villa",))
        self.assertEqual(filters.amenities, ())

    def test_criteria_for_saved_search(self):
        filters = PropertyFilters(location="Pune", min_price=Decimal("100"), amenities=("wifi",))
        self.assertEqual(filters.as_criteria(), {"location": "Pune", "min_price": "100", "amenities": ["wifi"]})


class PropertyServiceTest(ListingTestMixin, TestCase):
    def setUp(self):
        self.owner = User.objects.create_user(username="owner", password="pass12345")
        self.other = User.objects.create_user(username="other", password="pass12345")
        self.listing = self.make_listing(self.owner)

    def test_owner_can_change_status(self):
        PropertyService(self.owner).set_status(self.listing, "under_review")
        self.listing.refresh_from_db()
        self.assertEqual(self.listing.status, "under_review")

    def test_unknown_status_rejected(self):
        with self.assertRaises(ValueError):
            PropertyService(self.owner).set_status(self.listing, "sold")

    def listing_form(self, instance=None, **overrides):
        data = {
            "title": "Garden studio",
            "location": "Pune",
            "price": "15000",
            "property_type": "apartment",
            "listing_type": "rent",
            "amenities": ["wifi"],
        }
        data.update(overrides)
        form = PropertyForm(data=data, instance=instance)
        self.assertTrue(form.is_valid(), form.errors)
        return form

    def test_create_assigns_owner_and_logs(self):
        with self.assertLogs("marketplace.services.listings", level="INFO") as logs:
            created = PropertyService(self.other).create(self.listing_form())
        self.assertEqual(created.owner, self.other)
        self.assertEqual(created.amenities_list, ["wifi"])
        self.assertIn(f"Listing {created.pk} created by user {self.other.pk}", logs.output[0])

    def test_update_saves_form_changes(self):
        PropertyService(self.owner).update(self.listing, self.listing_form(self.listing, title="Renamed"))
        self.listing.refresh_from_db()
        self.assertEqual(self.listing.title, "Renamed")
        self.assertEqual(self.listing.owner, self.owner)

    def test_other_users_cannot_modify(self):
        service = PropertyService(self.other)
        with self.assertRaises(PermissionError):
            service.update(self.listing, self.listing_form(self.listing, title="Mine now"))
        with self.assertRaises(PermissionError):
            service.delete(self.listing)
        self.assertTrue(Property.objects.filter(pk=self.listing.pk).exists())

    def test_user_properties_are_scoped(self):
        self.make_listing(self.other, title="Someone else's")
        self.assertEqual(list(PropertyService(self.owner).user_properties()), [self.listing])


class FavoriteAndSavedSearchServiceTest(ListingTestMixin, TestCase):
    def setUp(self):
        self.user = User.objects.create_user(username="buyer", password="pass12345")
        owner = User.objects.create_user(username="owner", password="pass12345")
        self.listing = self.make_listing(owner)

    def test_favorite_add_is_idempotent_and_toggle_flips(self):
        service = FavoriteService(self.user)
        service.add(self.listing)
        service.add(self.listing)
        self.assertEqual(Favorite.objects.filter(user=self.user).count(), 1)
        self.assertFalse(service.toggle(self.listing))
        self.assertFalse(service.is_favorite(self.listing))
        self.assertTrue(service.toggle(self.listing))
        self.assertEqual(service.favorite_ids(), {self.listing.pk})

    def test_saved_search_lifecycle(self):
        service = SavedSearchService(self.user)
        search = service.save("Cheap rentals", {"max_price": "20000"})
        service.update(search, "Cheaper rentals", {"max_price": "15000"})
        search.refresh_from_db()
        self.assertEqual(search.criteria, {"max_price": "15000"})
        with self.assertRaises(ValueError):
            service.save("  ", {})
        stranger = User.objects.create_user(username="stranger", password="pass12345")
        with self.assertRaises(PermissionError):
            SavedSearchService(stranger).delete(search)
        service.delete(search)
        self.assertFalse(SavedSearch.objects.exists())


class PropertyImageTest(ListingTestMixin, TestCase):
    def setUp(self):
        self.media_root = tempfile.mkdtemp()
        self.addCleanup(shutil.rmtree, self.media_root, ignore_errors=True)
        self.owner = User.objects.create_user(username="owner", password="pass12345")
        self.listing = self.make_listing(self.owner)

    def test_upload_and_delete(self):
        with override_settings(MEDIA_ROOT=self.media_root):
            url = upload_property_image(SimpleUploadedFile("front.gif", TINY_GIF, "image/gif"), self.listing, self.owner)
            self.assertTrue(url.startswith(f"/media/property-images/{self.owner.pk}/"))
            self.assertTrue(url.endswith(".gif"))
            self.assertEqual(self.listing.image_urls, [url])

            PropertyService(self.owner).delete(self.listing)
        self.assertFalse(PropertyImage.objects.exists())

    def test_only_owner_can_upload(self):
        stranger = User.objects.create_user(username="stranger", password="pass12345")
        with self.assertRaises(PermissionError):
            upload_property_image(SimpleUploadedFile("front.gif", TINY_GIF, "image/gif"), self.listing, stranger)


class ListingViewsTest(ListingTestMixin, TestCase):
    def setUp(self):
        self.owner = User.objects.create_user(username="owner", password="pass12345")
        self.other = User.objects.create_user(username="other", password="pass12345")
        self.listing = self.make_listing(self.owner)

    def test_rent_catalog_lists_active_rentals(self):
        self.make_listing(self.owner, title="Hidden", status="inactive")
        response = self.client.get(reverse("rent"))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.context["properties"], [self.listing])

    def test_create_listing(self):
        self.client.login(username="other", password="pass12345")
        response = self.client.post(
            reverse("add_property"),
            {
                "title": "Studio flat",
                "location": "Pune",
                "price": "12000",
                "property_type": "apartment",
                "listing_type": "rent",
                "amenities": ["wifi"],
            },
        )
        self.assertRedirects(response, reverse("profile"))
        created = Property.objects.get(title="Studio flat")
        self.assertEqual(created.owner, self.other)
        self.assertEqual(created.amenities_list, ["wifi"])

    def test_owner_edits_listing(self):
        self.client.login(username="owner", password="pass12345")
        with self.assertLogs("marketplace.services.listings", level="INFO") as logs:
            response = self.client.post(
                reverse("property_edit", kwargs={"pk": self.listing.pk}),
                {
                    "title": "Sunny 2BHK with balcony",
                    "location": "Koramangala, Bangalore",
                    "price": "26000",
                    "property_type": "apartment",
                    "listing_type": "rent",
                    "amenities": ["wifi", "parking"],
                },
            )
        self.assertRedirects(response, reverse("profile"))
        self.listing.refresh_from_db()
        self.assertEqual(self.listing.title, "Sunny 2BHK with balcony")
        self.assertEqual(sorted(self.listing.amenities_list), ["parking", "wifi"])
        self.assertIn(f"Listing {self.listing.pk} updated by user {self.owner.pk}", logs.output[0])

    def test_non_owner_cannot_delete(self):
        self.client.login(username="other", password="pass12345")
        response = self.client.post(reverse("property_delete", kwargs={"pk": self.listing.pk}))
        self.assertRedirects(response, reverse("profile"))
        self.assertTrue(Property.objects.filter(pk=self.listing.pk).exists())

    def test_owner_status_change(self):
        self.client.login(username="owner", password="pass12345")
        self.client.post(reverse("property_status", kwargs={"pk": self.listing.pk}), {"status": "inactive"})
        self.listing.refresh_from_db()
        self.assertEqual(self.listing.status, "inactive")

    def test_inactive_listing_detail_hidden_from_public(self):
        self.listing.status = "inactive"
        self.listing.save()
        response = self.client.get(reverse("property_detail", kwargs={"pk": self.listing.pk}))
        self.assertEqual(response.status_code, 404)
        self.client.login(username="owner", password="pass12345")
        response = self.client.get(reverse("property_detail", kwargs={"pk": self.listing.pk}))
        self.assertEqual(response.status_code, 200)

    def test_favorite_toggle_view(self):
        self.client.login(username="other", password="pass12345")
        url = reverse("favorite_toggle", kwargs={"pk": self.listing.pk})
        response = self.client.post(url)
        self.assertRedirects(response, self.listing.get_absolute_url())
        self.assertTrue(Favorite.objects.filter(user=self.other, property=self.listing).exists())

    def test_saved_search_from_catalog(self):
        self.client.login(username="other", password="pass12345")
        self.client.post(
            reverse("saved_search_create"),
            {"name": "Bangalore rentals", "location": "Bangalore", "listing_type": "rent"},
        )
        search = SavedSearch.objects.get(user=self.other)
        self.assertEqual(search.criteria, {"location": "Bangalore", "listing_type": "rent"})
