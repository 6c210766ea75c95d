"""Aggregate URL patterns for the marketplace application."""

from . import api, listings, profile, public, student

urlpatterns = [
    *public.urlpatterns,
    *listings.urlpatterns,
    *profile.urlpatterns,
    *student.urlpatterns,
    *api.urlpatterns,
]
