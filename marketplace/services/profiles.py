from __future__ import annotations

import logging

from ..forms import ProfileForm
from ..models import Profile

logger = logging.getLogger(__name__)


class ProfileService:
    """Loads and updates the identity details shown across the site."""

    def __init__(self, user):
        self.user = user
        self.profile, created = Profile.objects.get_or_create(
            user=user,
            defaults={"email": user.email or "", "full_name": user.get_full_name()},
        )
        if created:
            logger.info("Created missing profile for user %s", user.pk)

    def form(self, data=None) -> ProfileForm:
        return ProfileForm(data, instance=self.profile)

    def update(self, data) -> tuple[bool, ProfileForm]:
        form = self.form(data)
        if form.is_valid():
            form.save()
            return True, form
        return False, form

