# apps/board/storage.py

"""
Object store helpers for attachments

Blobs go through Django's storage API: filesystem in development,
S3-compatible storage (django-storages + boto3) in production, memory in
tests. Download URLs come from the storage backend, which presigns them on
S3 (settings.KANBAN_DOWNLOAD_URL_EXPIRY).
"""

import logging
import os
import re
import secrets
import time
from io import BytesIO
from typing import Optional

from django.conf import settings
from django.core.files.base import ContentFile
from django.core.files.storage import default_storage
from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)

UNSAFE_FILENAME_CHARS = re.compile(r'[^a-zA-Z0-9.-]')


def generate_storage_key(original_filename: str) -> str:
    """<millis>-<random hex>.<ext>"""
    ext = os.path.splitext(original_filename)[1].lstrip('.').lower()
    key = f"{int(time.time() * 1000)}-{secrets.token_hex(16)}"
    return f"{key}.{ext}" if ext else key


def attachment_upload_to(instance, filename):
    return f"attachments/{generate_storage_key(filename)}"


def thumbnail_upload_to(instance, filename):
    return f"attachments/thumbs/{filename}"


def inline_image_key(account_id, original_filename: str) -> str:
    """Key for images embedded in markdown before the task exists"""
    safe_name = UNSAFE_FILENAME_CHARS.sub('_', original_filename)
    return f"accounts/{account_id}/images/{int(time.time() * 1000)}-{safe_name}"


def make_thumbnail(data: bytes, mime_type: str) -> Optional[ContentFile]:
    """
    JPEG thumbnail, KANBAN_THUMBNAIL_WIDTH wide, never upscaled

    Returns None for non-images or images Pillow cannot decode.
    """
    if not mime_type.startswith('image/'):
        return None

    width = settings.KANBAN_THUMBNAIL_WIDTH
    try:
        with Image.open(BytesIO(data)) as img:
            # Bounding box: fixed width, height never the limiting side
            img.thumbnail((width, img.height))
            if img.mode not in ('RGB', 'L'):
                img = img.convert('RGB')
            output = BytesIO()
            img.save(output, format='JPEG', quality=80)
    except (UnidentifiedImageError, OSError) as e:
        logger.warning("Could not generate thumbnail (%s): %s", mime_type, e)
        return None

    return ContentFile(output.getvalue())


def store_inline_image(key: str, data: bytes):
    """Uploads the blob; returns (key actually used, URL)"""
    name = default_storage.save(key, ContentFile(data))
    return name, default_storage.url(name)


def download_url(field_file) -> Optional[str]:
    """Fresh URL for a stored blob (None when the field is empty)"""
    if not field_file:
        return None
    return field_file.url


def delete_blob(storage, name: str):
    """
    Removes a blob; failures are logged

    Called after the metadata row is gone, an orphaned blob is acceptable.
    """
    if not name:
        return
    try:
        storage.delete(name)
    except Exception:
        logger.warning("Could not delete blob %s", name, exc_info=True)
