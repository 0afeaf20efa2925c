"""
Image storage: uploaded recipe photos under the instance folder.

Files are named <user_id>-<milliseconds>.<ext> inside one folder per
bucket and served back by the recipes blueprint.
"""

import logging
import os
import time
from typing import Optional

from flask import current_app, url_for
from werkzeug.utils import secure_filename

from recipeshare.errors import TransientError, ValidationError

logger = logging.getLogger(__name__)

RECIPE_IMAGES = 'recipe-images'


def bucket_path(bucket: str = RECIPE_IMAGES) -> str:
    path = os.path.join(current_app.instance_path, current_app.config['UPLOAD_FOLDER'], bucket)
    os.makedirs(path, exist_ok=True)
    return path


def image_extension(filename: str) -> str:
    """Lower-cased extension if it is an allowed image type."""
    ext = filename.rsplit('.', 1)[-1].lower() if '.' in filename else ''
    if ext not in current_app.config['ALLOWED_IMAGE_EXTENSIONS']:
        raise ValidationError('Please select a valid image file')
    return ext


def save_recipe_image(upload, user_id) -> str:
    """
    Store an uploaded image and return its public URL.

    Raises:
        ValidationError: not an allowed image type.
        TransientError: the file could not be written.
    """
    ext = image_extension(upload.filename or '')
    name = secure_filename(f'{user_id}-{int(time.time() * 1000)}.{ext}')
    try:
        upload.save(os.path.join(bucket_path(), name))
    except OSError as exc:
        logger.exception('Could not store image %s', name)
        raise TransientError('Failed to upload image.') from exc
    return url_for('recipes.uploaded_image', filename=name)


def discard_recipe_image(image_url: Optional[str]) -> None:
    """Delete a stored image by its public URL. URLs we did not issue are left alone."""
    if not image_url:
        return
    name = secure_filename(image_url.rsplit('/', 1)[-1])
    if not name or url_for('recipes.uploaded_image', filename=name) != image_url:
        return
    try:
        os.remove(os.path.join(bucket_path(), name))
    except FileNotFoundError:
        return
    except OSError:
        logger.exception('Could not remove image %s', name)
