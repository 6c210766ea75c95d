"""Owner listing management URL patterns."""

from django.urls import path

from ..views import listings

urlpatterns = [
    path("sell/", listings.PropertyCreateView.as_view(), name="add_property"),
    path("add-pg/", listings.AddPGListingView.as_view(), name="add_pg"),
    path("property/<int:pk>/edit/", listings.PropertyUpdateView.as_view(), name="property_edit"),
    path("property/<int:pk>/status/", listings.PropertyStatusView.as_view(), name="property_status"),
    path("property/<int:pk>/delete/", listings.PropertyDeleteView.as_view(), name="property_delete"),
    path("property/<int:pk>/residents/", listings.PropertyResidentsView.as_view(), name="property_residents"),
]
