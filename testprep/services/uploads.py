"""
Upload Service for images and audio stored on local disk under MEDIA_ROOT.
"""
import logging
import os
import re
import time
import uuid

from django.conf import settings
from django.core.files.storage import default_storage
from rest_framework.exceptions import NotFound

from testprep.exceptions import BadRequest

logger = logging.getLogger(__name__)


class UploadService:
    IMAGE_TYPES = ['image/jpeg', 'image/png', 'image/gif', 'image/webp']
    AUDIO_TYPES = ['audio/mpeg', 'audio/mp3', 'audio/wav', 'audio/ogg', 'audio/webm']
    SUBDIRS = {'image': 'images', 'audio': 'audio'}
    URL_PATTERN = re.compile(r'/uploads/(images|audio)/([^/.][^/]*)$')

    @classmethod
    def allowed_types(cls, kind=None):
        if kind == 'image':
            return cls.IMAGE_TYPES
        if kind == 'audio':
            return cls.AUDIO_TYPES
        return cls.IMAGE_TYPES + cls.AUDIO_TYPES

    @staticmethod
    def generate_file_name(original_name):
        ext = os.path.splitext(original_name or '')[1].lower()
        return f"{int(time.time() * 1000)}-{uuid.uuid4()}{ext}"

    @classmethod
    def store(cls, uploaded_file, kind=None):
        """
        Save an uploaded file and describe where it went.

        ``kind`` restricts the accepted types to ``'image'`` or ``'audio'``;
        without it either is accepted and the type picks the subdirectory.
        """
        if uploaded_file is None:
            raise BadRequest("No file was uploaded")

        allowed = cls.allowed_types(kind)
        mime_type = uploaded_file.content_type
        if mime_type not in allowed:
            raise BadRequest("Invalid file type", details={'allowedTypes': allowed})

        max_bytes = settings.UPLOAD_MAX_BYTES
        if uploaded_file.size > max_bytes:
            raise BadRequest("File is too large", details={'maxBytes': max_bytes})

        subdir = cls.SUBDIRS['image'] if mime_type in cls.IMAGE_TYPES else cls.SUBDIRS['audio']
        saved_path = default_storage.save(
            f"{subdir}/{cls.generate_file_name(uploaded_file.name)}", uploaded_file
        )
        file_name = os.path.basename(saved_path)
        logger.info("Stored upload %s (%s, %d bytes)", saved_path, mime_type, uploaded_file.size)

        return {
            'url': f"/uploads/{subdir}/{file_name}",
            'fileName': file_name,
            'mimeType': mime_type,
            'size': uploaded_file.size,
        }

    @classmethod
    def delete(cls, url):
        if not url:
            raise BadRequest("URL is required")

        match = cls.URL_PATTERN.search(url)
        if not match:
            raise BadRequest("Invalid file URL")

        path = f"{match.group(1)}/{match.group(2)}"
        if not default_storage.exists(path):
            raise NotFound("File not found")

        default_storage.delete(path)
        logger.info("Deleted upload %s", path)
