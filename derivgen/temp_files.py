"""
TempFileService - Working copies of image data under a temp folder.
"""

import logging
import os
import shutil
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

from .config import CurrentUser
from .mime_registry import MimeRegistry


@dataclass
class FileHandle:
    """
    A temporary file owned by one pipeline invocation.

    Attributes:
        path: Absolute path of the file
        filename: Base filename
        mime_type: MIME type derived from the filename
        owner: Id of the user the file was created for
        created: ISO timestamp of creation
    """
    path: str
    filename: str
    mime_type: str
    owner: str
    created: str = field(default_factory=lambda: datetime.now().isoformat())

    @property
    def size(self) -> int:
        return os.path.getsize(self.path)

    def exists(self) -> bool:
        return os.path.exists(self.path)


class TempFileService:
    """
    Creates, copies and deletes temp files, tracking the ones still allocated.
    """

    def __init__(
        self,
        tmp_folder: str,
        current_user: Optional[CurrentUser] = None,
        mime_registry: Optional[MimeRegistry] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize temp file service.

        Args:
            tmp_folder: Directory for temp files (created if missing)
            current_user: User recorded as owner of new files
            mime_registry: Registry used to type files by name
            logger: Optional logger instance
        """
        self.tmp_folder = tmp_folder
        self.current_user = current_user or CurrentUser()
        self.mime_registry = mime_registry or MimeRegistry()
        self.logger = logger or logging.getLogger(__name__)
        self._allocated: Dict[str, FileHandle] = {}
        os.makedirs(self.tmp_folder, exist_ok=True)

    @property
    def allocated(self) -> List[FileHandle]:
        """Handles created by this service and not yet deleted."""
        return list(self._allocated.values())

    def clean(self) -> None:
        """Delete every temp file this service allocated and has not deleted."""
        for handle in self.allocated:
            self.delete(handle)

    def create(self, suggested_name: str) -> FileHandle:
        """
        Create an empty temp file, replacing any file of the same name.

        Args:
            suggested_name: Filename to use inside the temp folder

        Returns:
            FileHandle for the new file
        """
        filename = os.path.basename(suggested_name)
        path = os.path.join(self.tmp_folder, filename)
        with open(path, 'wb'):
            pass
        return self._register(path, filename)

    def copy(self, handle: FileHandle, new_name: str) -> FileHandle:
        """Copy a temp file to a new name in the temp folder."""
        filename = os.path.basename(new_name)
        path = os.path.join(self.tmp_folder, filename)
        shutil.copyfile(handle.path, path)
        return self._register(path, filename)

    def delete(self, handle: FileHandle) -> None:
        """Delete a temp file. Missing files are ignored."""
        self._allocated.pop(handle.path, None)
        if os.path.exists(handle.path):
            try:
                os.remove(handle.path)
            except OSError as e:
                self.logger.warning(f"Could not delete {handle.path}: {e}")

    def _register(self, path: str, filename: str) -> FileHandle:
        handle = FileHandle(
            path=path,
            filename=filename,
            mime_type=self.mime_registry.mime_type_for(filename),
            owner=self.current_user.id,
        )
        self._allocated[path] = handle
        self.logger.debug(f"Allocated temp file {path} for {handle.owner}")
        return handle
