"""
SourceExtractor - Copies an object's OBJ datastream into a temp file.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from .datastream import OBJ, RepositoryObject
from .mime_registry import MimeRegistry
from .object_store import ObjectStore
from .temp_files import FileHandle, TempFileService


class NoSourceError(Exception):
    """Raised when an object has no OBJ datastream."""
    pass


@dataclass
class ExtractedSource:
    """
    A working copy of an object's original image.

    Attributes:
        handle: Temp file holding the OBJ content
        extension: Extension derived from the OBJ MIME type
        base_name: Filename-safe name derived from the pid
    """
    handle: FileHandle
    extension: str
    base_name: str


class SourceExtractor:
    """
    Streams the OBJ datastream of an object into a new temp file.

    The caller owns the returned temp file and must delete it.
    """

    def __init__(
        self,
        store: ObjectStore,
        temp_files: TempFileService,
        mime_registry: Optional[MimeRegistry] = None,
        logger: Optional[logging.Logger] = None
    ):
        self.store = store
        self.temp_files = temp_files
        self.mime_registry = mime_registry or temp_files.mime_registry
        self.logger = logger or logging.getLogger(__name__)

    def extract_source(self, obj: RepositoryObject) -> ExtractedSource:
        """
        Copy OBJ out of the store.

        Raises:
            NoSourceError: If the object has no OBJ datastream
        """
        datastream = self.store.get_datastream(obj, OBJ)
        if datastream is None:
            raise NoSourceError(f"No {OBJ} datastream on {obj.pid}")

        extension = self.mime_registry.extension_for(datastream.mime_type)
        base_name = obj.base_name
        handle = self.temp_files.create(f"{base_name}.{extension}")
        try:
            with open(handle.path, 'wb') as f:
                self.store.read_content(obj, datastream, f)
        except Exception:
            self.temp_files.delete(handle)
            raise

        self.logger.debug(
            f"Extracted {OBJ} of {obj.pid} ({datastream.mime_type}) to {handle.path}"
        )
        return ExtractedSource(handle=handle, extension=extension, base_name=base_name)
