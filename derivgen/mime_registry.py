"""
MimeRegistry - Maps MIME types to file extensions and back.
"""

import mimetypes
import os
from typing import Dict, Optional


class MimeRegistry:
    """
    MIME type / extension lookups for image datastreams.

    The explicit tables win over the platform's mimetypes database so
    that results do not vary between hosts.
    """

    EXTENSIONS = {
        'image/jpeg': 'jpg',
        'image/pjpeg': 'jpg',
        'image/png': 'png',
        'image/gif': 'gif',
        'image/tiff': 'tif',
        'image/bmp': 'bmp',
        'image/x-ms-bmp': 'bmp',
        'image/jp2': 'jp2',
        'image/webp': 'webp',
    }

    CONTENT_TYPES = {
        'jpg': 'image/jpeg',
        'jpeg': 'image/jpeg',
        'jpe': 'image/jpeg',
        'png': 'image/png',
        'gif': 'image/gif',
        'tif': 'image/tiff',
        'tiff': 'image/tiff',
        'bmp': 'image/bmp',
        'jp2': 'image/jp2',
        'webp': 'image/webp',
    }

    DEFAULT_EXTENSION = 'bin'
    DEFAULT_CONTENT_TYPE = 'application/octet-stream'

    def __init__(self, extra: Optional[Dict[str, str]] = None):
        """
        Initialize registry.

        Args:
            extra: Optional additional MIME type -> extension mappings
        """
        self.extensions = dict(self.EXTENSIONS)
        if extra:
            self.extensions.update(extra)

    def extension_for(self, mime_type: Optional[str]) -> str:
        """Get a filename-safe extension (without dot) for a MIME type."""
        if not mime_type:
            return self.DEFAULT_EXTENSION
        mime = mime_type.split(';', 1)[0].strip().lower()
        if mime in self.extensions:
            return self.extensions[mime]
        guessed = mimetypes.guess_extension(mime)
        if guessed:
            return guessed.lstrip('.')
        return self.DEFAULT_EXTENSION

    def mime_type_for(self, filename: str) -> str:
        """Get the MIME type for a filename from its extension."""
        ext = os.path.splitext(filename)[1].lstrip('.').lower()
        if ext in self.CONTENT_TYPES:
            return self.CONTENT_TYPES[ext]
        guessed, _ = mimetypes.guess_type(filename)
        return guessed or self.DEFAULT_CONTENT_TYPE
