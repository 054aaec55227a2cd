"""
ObjectStore - Interface shared by the S3 and local filesystem stores.
"""

import abc
from typing import BinaryIO, Iterator, Optional

from .datastream import ControlGroup, Datastream, RepositoryObject


class ObjectStoreError(Exception):
    """Raised when the underlying storage fails."""
    pass


class ObjectNotFoundError(ObjectStoreError):
    """Raised when no object exists for a pid."""
    pass


class ObjectStore(abc.ABC):
    """
    Datastream persistence for repository objects.

    Concrete stores implement loading, listing, ingest, update and
    content streaming. Lookups on an already loaded object go through
    the object's own datastream collection.
    """

    @abc.abstractmethod
    def get_object(self, pid: str) -> RepositoryObject:
        """Load an object and its datastream metadata."""

    @abc.abstractmethod
    def list_objects(self) -> Iterator[str]:
        """Yield the pid of every object in the store."""

    @abc.abstractmethod
    def ingest(self, obj: RepositoryObject, datastream: Datastream) -> None:
        """Register a populated, new datastream on an object."""

    @abc.abstractmethod
    def update_datastream(
        self,
        obj: RepositoryObject,
        datastream: Datastream,
        content: bytes,
        mime_type: Optional[str] = None
    ) -> None:
        """
        Overwrite the content of an existing datastream.

        Args:
            obj: Object owning the datastream
            datastream: Existing datastream handle
            content: New content bytes
            mime_type: New MIME type, or None to leave it unchanged
        """

    @abc.abstractmethod
    def read_content(
        self,
        obj: RepositoryObject,
        datastream: Datastream,
        fileobj: BinaryIO
    ) -> None:
        """Stream a datastream's content into a binary file object."""

    def create_object(self, pid: str, label: str = '') -> RepositoryObject:
        """
        Create a new, empty object.

        Stores without an object-level record persist nothing until the
        first datastream is ingested.
        """
        return RepositoryObject(pid=pid, label=label)

    def get_datastream(self, obj: RepositoryObject, dsid: str) -> Optional[Datastream]:
        """Get a datastream from an object, or None if absent."""
        return obj.get_datastream(dsid)

    def has_datastream(self, obj: RepositoryObject, dsid: str) -> bool:
        """Check if an object has a datastream."""
        return obj.has_datastream(dsid)

    def create_datastream(
        self,
        obj: RepositoryObject,
        dsid: str,
        control_group: ControlGroup = ControlGroup.MANAGED
    ) -> Datastream:
        """
        Create a datastream that is not yet attached to the object.

        The caller populates it and then passes it to ingest().
        """
        return Datastream(id=dsid, control_group=control_group)

    def object_exists(self, pid: str) -> bool:
        """Check if an object exists."""
        try:
            self.get_object(pid)
            return True
        except ObjectNotFoundError:
            return False

    def _check_new(self, obj: RepositoryObject, datastream: Datastream) -> None:
        if obj.has_datastream(datastream.id):
            raise ObjectStoreError(
                f"Datastream {datastream.id} already exists on {obj.pid}"
            )
        if datastream.content is None:
            raise ObjectStoreError(
                f"Datastream {datastream.id} has no content to ingest"
            )
