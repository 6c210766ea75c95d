from __future__ import annotations

import logging
import os

from django.core.exceptions import ValidationError

from ..models import Property, PropertyImage

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_EXTENSIONS = {"jpg", "jpeg", "png", "gif", "webp"}
MAX_IMAGE_BYTES = 5 * 1024 * 1024


def validate_image_upload(upload) -> None:
    ext = os.path.splitext(upload.name or "")[1].lstrip(".").lower()
    if ext not in ALLOWED_IMAGE_EXTENSIONS:
        raise ValidationError(f"Unsupported image type: .{ext or '?'}")
    if upload.size and upload.size > MAX_IMAGE_BYTES:
        raise ValidationError("Images must be 5 MB or smaller.")


def upload_property_image(upload, property: Property, user) -> str:
    """Store ``upload`` against ``property`` and return its public URL."""

    if property.owner_id != user.pk:
        raise PermissionError("Cannot add images to another user's listing.")
    validate_image_upload(upload)
    image = PropertyImage(property=property)
    image.image.save(upload.name, upload, save=True)
    logger.info("Stored image %s for listing %s", image.image.name, property.pk)
    return image.image.url


def delete_property_image(image: PropertyImage) -> None:
    """Remove the stored file and its row. Storage failures are logged, not raised."""

    name = image.image.name
    try:
        image.image.delete(save=False)
    except OSError as exc:
        logger.error("Error deleting image %s: %s", name, exc)
    image.delete()
