"""
LocalObjectStore - Repository objects stored on the local filesystem.

Layout:
    {root_path}/{prefix}/{quoted pid}/datastreams.json
    {root_path}/{prefix}/{quoted pid}/{dsid}
"""

import json
import logging
import os
import shutil
from dataclasses import dataclass
from datetime import datetime
from typing import BinaryIO, Iterator, List, Optional
from urllib.parse import quote, unquote

from .datastream import Datastream, RepositoryObject
from .object_store import ObjectNotFoundError, ObjectStore, ObjectStoreError


@dataclass
class LocalConfig:
    """
    Local filesystem storage configuration.

    Attributes:
        root_path: Root directory (e.g., /mnt/repository)
        prefix: Subdirectory holding the objects
    """
    root_path: str
    prefix: str = 'objects'

    @property
    def objects_path(self) -> str:
        return os.path.join(self.root_path, self.prefix)

    def validate(self) -> List[str]:
        """Return a list of configuration errors (empty if valid)."""
        errors = []
        if not self.root_path:
            errors.append("Local root path is not set")
        elif not os.path.isdir(self.root_path):
            errors.append(f"Local root path does not exist: {self.root_path}")
        return errors


class LocalObjectStore(ObjectStore):
    """
    Object store backed by a directory tree.
    """

    INDEX_FILE = 'datastreams.json'

    def __init__(self, config: LocalConfig, logger: Optional[logging.Logger] = None):
        """
        Initialize local store.

        Args:
            config: Local storage configuration
            logger: Optional logger instance
        """
        self.config = config
        self.logger = logger or logging.getLogger(__name__)

    @staticmethod
    def _path_segment(name: str) -> str:
        """Quote a pid or datastream id into a single directory entry name."""
        segment = quote(name, safe='')
        if segment in ('', '.', '..'):
            raise ObjectStoreError(f"Invalid identifier: {name!r}")
        return segment

    def object_path(self, pid: str) -> str:
        return os.path.join(self.config.objects_path, self._path_segment(pid))

    def datastream_path(self, pid: str, dsid: str) -> str:
        return os.path.join(self.object_path(pid), self._path_segment(dsid))

    def list_objects(self) -> Iterator[str]:
        base = self.config.objects_path
        if not os.path.isdir(base):
            return
        for name in sorted(os.listdir(base)):
            if os.path.isfile(os.path.join(base, name, self.INDEX_FILE)):
                yield unquote(name)

    def get_object(self, pid: str) -> RepositoryObject:
        index = self._read_index(pid)
        obj = RepositoryObject(pid=pid, label=index.get('label', ''))
        for dsid, data in index.get('datastreams', {}).items():
            obj.add_datastream(Datastream.from_dict(dsid, data))
        return obj

    def create_object(self, pid: str, label: str = '') -> RepositoryObject:
        """Create an empty object directory."""
        path = self.object_path(pid)
        if os.path.exists(os.path.join(path, self.INDEX_FILE)):
            raise ObjectStoreError(f"Object already exists: {pid}")
        os.makedirs(path, exist_ok=True)
        obj = RepositoryObject(pid=pid, label=label)
        self._write_index(obj)
        return obj

    def read_content(
        self,
        obj: RepositoryObject,
        datastream: Datastream,
        fileobj: BinaryIO
    ) -> None:
        path = self.datastream_path(obj.pid, datastream.id)
        try:
            with open(path, 'rb') as f:
                shutil.copyfileobj(f, fileobj)
        except OSError as e:
            raise ObjectStoreError(f"Error reading {path}: {e}") from e

    def ingest(self, obj: RepositoryObject, datastream: Datastream) -> None:
        self._check_new(obj, datastream)
        self._write_content(obj, datastream, datastream.content)
        obj.add_datastream(datastream)
        self._write_index(obj)

    def update_datastream(
        self,
        obj: RepositoryObject,
        datastream: Datastream,
        content: bytes,
        mime_type: Optional[str] = None
    ) -> None:
        self._write_content(obj, datastream, content)
        if mime_type is not None:
            datastream.mime_type = mime_type
        datastream.content = content
        obj.add_datastream(datastream)
        self._write_index(obj)

    def _write_content(
        self,
        obj: RepositoryObject,
        datastream: Datastream,
        content: bytes
    ) -> None:
        path = self.datastream_path(obj.pid, datastream.id)
        try:
            os.makedirs(os.path.dirname(path), exist_ok=True)
            with open(path, 'wb') as f:
                f.write(content)
        except OSError as e:
            raise ObjectStoreError(f"Error writing {path}: {e}") from e
        datastream.size = len(content)
        datastream.modified = datetime.now().isoformat()
        self.logger.debug(f"Wrote {path} ({len(content)} bytes)")

    def _read_index(self, pid: str) -> dict:
        path = os.path.join(self.object_path(pid), self.INDEX_FILE)
        try:
            with open(path, 'r') as f:
                return json.load(f)
        except FileNotFoundError:
            raise ObjectNotFoundError(f"Object not found: {pid}")
        except (OSError, ValueError) as e:
            raise ObjectStoreError(f"Error reading {path}: {e}") from e

    def _write_index(self, obj: RepositoryObject) -> None:
        path = os.path.join(self.object_path(obj.pid), self.INDEX_FILE)
        data = {
            'pid': obj.pid,
            'label': obj.label,
            'datastreams': {
                ds.id: ds.to_dict() for ds in obj.iter_datastreams()
            },
        }
        try:
            with open(path, 'w') as f:
                json.dump(data, f, indent=2)
        except OSError as e:
            raise ObjectStoreError(f"Error writing {path}: {e}") from e
