"""Profile, favorites and saved-search URL patterns."""

from django.urls import path

from ..views import profile

urlpatterns = [
    path("profile/", profile.ProfileView.as_view(), name="profile"),
    path("property/<int:pk>/favorite/", profile.FavoriteToggleView.as_view(), name="favorite_toggle"),
    path("saved-searches/", profile.SavedSearchCreateView.as_view(), name="saved_search_create"),
    path(
        "saved-searches/<int:pk>/delete/",
        profile.SavedSearchDeleteView.as_view(),
        name="saved_search_delete",
    ),
]
