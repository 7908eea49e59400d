"""
Image upload storage.

JPG/PNG uploads are re-encoded to WebP (quality 85) with Pillow; GIF and WebP
are stored untouched so animations survive. If an image cannot be decoded or
encoded, the original bytes are stored instead.
"""
import logging
import os
import time

from django.conf import settings
from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_EXTENSIONS = ('.jpg', '.jpeg', '.png', '.webp', '.gif')
PASSTHROUGH_EXTENSIONS = ('.gif', '.webp')
WEBP_QUALITY = 85


class InvalidUpload(ValueError):
    pass


def _upload_dir():
    upload_dir = settings.UPLOAD_ROOT
    os.makedirs(upload_dir, exist_ok=True)
    return upload_dir


def _timestamped(filename):
    return f"{time.time_ns()}-{os.path.basename(filename)}"


def _save_raw(uploaded_file, filename):
    target = os.path.join(_upload_dir(), filename)
    uploaded_file.seek(0)
    with open(target, 'wb') as out:
        for chunk in uploaded_file.chunks():
            out.write(chunk)
    return filename


def store_image(uploaded_file):
    """
    Store an uploaded image and return its public path (/uploads/<name>).

    Raises InvalidUpload when the extension is not an allowed image type.
    """
    name = uploaded_file.name or ''
    ext = os.path.splitext(name)[1].lower()
    if ext not in ALLOWED_IMAGE_EXTENSIONS:
        raise InvalidUpload("Invalid file type. Only images allowed (jpg, jpeg, png, webp, gif)")

    if ext in PASSTHROUGH_EXTENSIONS:
        final_name = _save_raw(uploaded_file, _timestamped(name))
    else:
        base_name = os.path.splitext(os.path.basename(name))[0]
        final_name = f"{time.time_ns()}-{base_name}.webp"
        target = os.path.join(_upload_dir(), final_name)
        try:
            uploaded_file.seek(0)
            with Image.open(uploaded_file) as img:
                if img.mode not in ('RGB', 'RGBA'):
                    img = img.convert('RGBA' if 'A' in img.getbands() else 'RGB')
                img.save(target, 'WEBP', quality=WEBP_QUALITY)
        except (UnidentifiedImageError, OSError) as e:
            logger.warning(f"WebP conversion failed for {name}, storing original: {e}")
            if os.path.exists(target):
                os.remove(target)
            final_name = _save_raw(uploaded_file, _timestamped(name))

    return f"{settings.UPLOAD_URL_PREFIX}{final_name}"
