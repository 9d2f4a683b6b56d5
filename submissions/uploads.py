"""
Application Form Image Uploads

Checks the declared type and size of uploaded images, writes accepted
images to the uploads directory under unique names and builds the public
URL each one is served from.

Checking and storing are separate steps: the pipeline checks uploads
before field validation but only stores them once the submission is
known to be valid, so a rejected submission never leaves files behind.
"""
import logging
import os
import uuid
from dataclasses import dataclass

from django.conf import settings
from django.core.files.storage import FileSystemStorage

from .results import Err, ErrorKind, Ok

logger = logging.getLogger(__name__)

ALLOWED_CONTENT_TYPES = ('image/jpeg', 'image/png', 'image/jpg')


@dataclass(frozen=True)
class UploadedAsset:
    field_name: str
    filename: str
    url: str


class UploadValidator:
    """
    Validates and stores the optional image uploads of a form.

    Usage:
        uploads = UploadValidator()
        result = uploads.check(request.FILES, form_type)
        ...
        result = uploads.store(result.value, request)
    """

    def __init__(self, storage=None, max_size=None, base_path=None):
        self.storage = storage or FileSystemStorage(location=settings.UPLOADS_ROOT)
        self.max_size = max_size if max_size is not None else settings.MAX_UPLOAD_SIZE
        self.base_path = (base_path if base_path is not None else settings.UPLOADS_BASE_PATH).rstrip('/')

    def check(self, files, form_type):
        """
        Check each upload field of the form in order. Fields with no file
        are skipped; the first rejected file fails the whole request.

        Returns:
            Ok([(field_name, file), ...]) or Err(INVALID_FILE_TYPE | FILE_TOO_LARGE)
        """
        accepted = []
        for name, _ in form_type.upload_fields:
            upload = files.get(name)
            if not upload:
                continue
            label = form_type.label_for(name)
            if upload.content_type not in ALLOWED_CONTENT_TYPES:
                return Err(ErrorKind.INVALID_FILE_TYPE, f"{label} must be a JPG or PNG image.")
            if upload.size > self.max_size:
                return Err(ErrorKind.FILE_TOO_LARGE, f"{label} must not exceed {self.max_size // (1024 * 1024)}MB.")
            accepted.append((name, upload))
        return Ok(accepted)

    def store(self, accepted, request):
        """
        Write accepted uploads under unique names.

        Returns:
            Ok({field_name: UploadedAsset}) or Err(STORAGE_WRITE_ERROR)
        """
        assets = {}
        for name, upload in accepted:
            try:
                filename = self.storage.save(self.unique_filename(name, upload.name), upload)
            except OSError:
                logger.exception(f"Could not write upload for {name}")
                self.discard(assets)
                return Err(
                    ErrorKind.STORAGE_WRITE_ERROR,
                    f"Failed to upload {name.replace('_', ' ')}"
                )
            assets[name] = UploadedAsset(
                field_name=name,
                filename=filename,
                url=self.public_url(request, filename),
            )
            logger.info(f"Stored {name} upload as {filename}")
        return Ok(assets)

    def discard(self, assets):
        """Remove stored uploads whose submission was never saved."""
        for asset in assets.values():
            try:
                self.storage.delete(asset.filename)
            except OSError:
                logger.exception(f"Could not remove orphaned upload {asset.filename}")

    @staticmethod
    def unique_filename(field_name, original_name):
        """passport_image + 'me.JPG' -> 'passport_image_<32 hex chars>.JPG'"""
        ext = os.path.splitext(original_name or '')[1]
        return f"{field_name}_{uuid.uuid4().hex}{ext}"

    def public_url(self, request, filename):
        return request.build_absolute_uri(f"{self.base_path}/uploads/{filename}")
