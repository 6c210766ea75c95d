"""Marketplace data models exposed as a flat module-level API."""

from .messaging import RoommateMessage
from .property import Favorite, Property, PropertyImage, SavedSearch
from .review import PGFeedback, RoommateReview
from .student import StudentDetail
from .user import Profile, User

__all__ = [
    "User",
    "Profile",
    "Property",
    "PropertyImage",
    "Favorite",
    "SavedSearch",
    "StudentDetail",
    "RoommateMessage",
    "PGFeedback",
    "RoommateReview",
]
