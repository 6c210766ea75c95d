from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable

from django.db.models import Q

from ..forms.listing import AMENITY_CHOICES, PropertyForm
from ..models import Favorite, Property, SavedSearch
from .images import delete_property_image, upload_property_image

logger = logging.getLogger(__name__)

AMENITY_KEYS = {key for key, _ in AMENITY_CHOICES}

PROPERTY_TYPE_KEYS = {key for key, _ in Property.PROPERTY_TYPE_CHOICES}
LISTING_TYPE_KEYS = {key for key, _ in Property.LISTING_TYPE_CHOICES}
STATUS_KEYS = {key for key, _ in Property.STATUS_CHOICES}


def _parse_decimal(raw: Any) -> Decimal | None:
    text = str(raw or "").strip()
    if not text:
        return None
    try:
        return Decimal(text)
    except (InvalidOperation, TypeError):
        return None


def _get_list(data, key: str) -> list[str]:
    if hasattr(data, "getlist"):
        values = data.getlist(key)
    else:
        values = data.get(key) or []
        if isinstance(values, str):
            values = [values]
    flattened: list[str] = []
    for value in values:
        flattened.extend(part.strip() for part in str(value).split(",") if part.strip())
    return flattened


@dataclass(frozen=True)
class PropertyFilters:
    """Value object holding filter parameters for property catalog queries."""

    location: str = ""
    min_price: Decimal | None = None
    max_price: Decimal | None = None
    property_types: tuple[str, ...] = ()
    bedrooms: tuple[int, ...] = ()
    listing_type: str = ""
    search_query: str = ""
    amenities: tuple[str, ...] = ()

    def as_criteria(self) -> dict[str, Any]:
        """Return a JSON-friendly dict suitable for a saved search."""

        criteria: dict[str, Any] = {}
        if self.location:
            criteria["location"] = self.location
        if self.min_price is not None:
            criteria["min_price"] = str(self.min_price)
        if self.max_price is not None:
            criteria["max_price"] = str(self.max_price)
        if self.property_types:
            criteria["property_type"] = list(self.property_types)
        if self.bedrooms:
            criteria["bedrooms"] = list(self.bedrooms)
        if self.listing_type:
            criteria["listing_type"] = self.listing_type
        if self.search_query:
            criteria["q"] = self.search_query
        if self.amenities:
            criteria["amenities"] = list(self.amenities)
        return criteria


class PropertyCatalogService:
    """Encapsulates querying logic for the public property catalog."""

    def __init__(self, base_queryset=None) -> None:
        self.base_queryset = base_queryset if base_queryset is not None else Property.objects.all()

    def build_filters(self, data, *, listing_type: str = "") -> PropertyFilters:
        """Return validated filter parameters from raw request data."""

        bedrooms = []
        for raw in _get_list(data, "bedrooms"):
            try:
                bedrooms.append(int(raw))
            except ValueError:
                continue
        requested_listing = listing_type or (data.get("listing_type") or "").strip()
        return PropertyFilters(
            location=(data.get("location") or "").strip(),
            min_price=_parse_decimal(data.get("min_price")),
            max_price=_parse_decimal(data.get("max_price")),
            property_types=tuple(t for t in _get_list(data, "property_type") if t in PROPERTY_TYPE_KEYS),
            bedrooms=tuple(bedrooms),
            listing_type=requested_listing if requested_listing in LISTING_TYPE_KEYS else "",
            search_query=(data.get("q") or "").strip(),
            amenities=tuple(a for a in _get_list(data, "amenities") if a in AMENITY_KEYS),
        )

    def get_catalog(self, filters: PropertyFilters):
        """Apply filters and return the active-listing queryset."""

        queryset = self.base_queryset.filter(status="active").prefetch_related("images")

        if filters.location:
            queryset = queryset.filter(location__icontains=filters.location)
        if filters.min_price is not None:
            queryset = queryset.filter(price__gte=filters.min_price)
        if filters.max_price is not None:
            queryset = queryset.filter(price__lte=filters.max_price)
        if filters.property_types:
            queryset = queryset.filter(property_type__in=filters.property_types)
        if filters.bedrooms:
            queryset = queryset.filter(bedrooms__in=filters.bedrooms)
        if filters.listing_type:
            queryset = queryset.filter(listing_type=filters.listing_type)
        if filters.search_query:
            term = filters.search_query
            queryset = queryset.filter(
                Q(title__icontains=term) | Q(location__icontains=term) | Q(description__icontains=term)
            )
        for amenity in filters.amenities:
            queryset = queryset.filter(**{f"amenities__{amenity}": True})

        return queryset.order_by("-created_at", "-id")


class PropertyService:
    """Owner-scoped create, update and removal of listings."""

    def __init__(self, owner):
        self.owner = owner

    def _ensure_owner(self, property: Property) -> None:
        if property.owner_id != self.owner.pk:
            raise PermissionError("Cannot modify listings owned by another user.")

    def user_properties(self):
        return (
            Property.objects.filter(owner=self.owner)
            .prefetch_related("images")
            .order_by("-created_at", "-id")
        )

    def _save_form(self, form: PropertyForm) -> Property:
        property = form.save(commit=False)
        property.save()
        image = form.cleaned_data.get("property_image")
        if image:
            upload_property_image(image, property, self.owner)
        return property

    def create(self, form: PropertyForm) -> Property:
        form.instance.owner = self.owner
        property = self._save_form(form)
        logger.info("Listing %s created by user %s", property.pk, self.owner.pk)
        return property

    def update(self, property: Property, form: PropertyForm) -> Property:
        self._ensure_owner(property)
        if form.instance.pk != property.pk:
            raise ValueError("Form is bound to a different listing.")
        property = self._save_form(form)
        logger.info("Listing %s updated by user %s", property.pk, self.owner.pk)
        return property

    def set_status(self, property: Property, status: str) -> Property:
        self._ensure_owner(property)
        if status not in STATUS_KEYS:
            raise ValueError(f"Unknown listing status: {status}")
        property.status = status
        property.save(update_fields=["status", "updated_at"])
        logger.info("Listing %s status set to %s", property.pk, status)
        return property

    def delete(self, property: Property) -> None:
        self._ensure_owner(property)
        for image in list(property.images.all()):
            delete_property_image(image)
        property_id = property.pk
        property.delete()
        logger.info("Listing %s deleted by user %s", property_id, self.owner.pk)


class FavoriteService:
    """Create and remove a user's favorite listings."""

    def __init__(self, user):
        self.user = user

    def favorites(self) -> list[Favorite]:
        return list(
            Favorite.objects.filter(user=self.user)
            .select_related("property")
            .prefetch_related("property__images")
            .order_by("-created_at", "-id")
        )

    def favorite_ids(self, properties: Iterable[Property] | None = None) -> set[int]:
        queryset = Favorite.objects.filter(user=self.user)
        if properties is not None:
            queryset = queryset.filter(property__in=list(properties))
        return set(queryset.values_list("property_id", flat=True))

    def is_favorite(self, property: Property) -> bool:
        return Favorite.objects.filter(user=self.user, property=property).exists()

    def add(self, property: Property) -> Favorite:
        favorite, _ = Favorite.objects.get_or_create(user=self.user, property=property)
        return favorite

    def remove(self, property: Property) -> bool:
        deleted, _ = Favorite.objects.filter(user=self.user, property=property).delete()
        return bool(deleted)

    def toggle(self, property: Property) -> bool:
        """Flip the favorite flag and return the new state."""

        if self.remove(property):
            return False
        self.add(property)
        return True


class SavedSearchService:
    """Manage a user's named search criteria."""

    def __init__(self, user):
        self.user = user

    def _ensure_owner(self, search: SavedSearch) -> None:
        if search.user_id != self.user.pk:
            raise PermissionError("Cannot modify another user's saved search.")

    def saved_searches(self):
        return SavedSearch.objects.filter(user=self.user)

    def save(self, name: str, criteria: dict[str, Any]) -> SavedSearch:
        name = (name or "").strip()
        if not name:
            raise ValueError("Saved searches need a name.")
        return SavedSearch.objects.create(user=self.user, name=name, criteria=criteria)

    def update(self, search: SavedSearch, name: str, criteria: dict[str, Any]) -> SavedSearch:
        self._ensure_owner(search)
        name = (name or "").strip()
        if not name:
            raise ValueError("Saved searches need a name.")
        search.name = name
        search.criteria = criteria
        search.save(update_fields=["name", "criteria"])
        return search

    def delete(self, search: SavedSearch) -> None:
        self._ensure_owner(search)
        search.delete()
