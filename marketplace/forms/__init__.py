from .auth import RegisterForm
from .listing import AMENITY_CHOICES, PropertyForm, PropertyStatusForm, SavedSearchForm
from .messaging import MessageForm
from .profile import ProfileForm
from .review import PGFeedbackForm, RoommateReviewForm
from .student import StudentBookingForm

__all__ = [
    "RegisterForm",
    "ProfileForm",
    "PropertyForm",
    "PropertyStatusForm",
    "SavedSearchForm",
    "AMENITY_CHOICES",
    "StudentBookingForm",
    "MessageForm",
    "PGFeedbackForm",
    "RoommateReviewForm",
]
