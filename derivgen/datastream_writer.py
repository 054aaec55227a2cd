"""
DatastreamWriter - Ingests or updates a derivative datastream from a file.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from .datastream import ControlGroup, RepositoryObject
from .object_store import ObjectStore
from .temp_files import FileHandle, TempFileService


@dataclass(frozen=True)
class WriteResult:
    success: bool
    error: Optional[str] = None


class DatastreamWriter:
    """
    Writes a scaled temp file to a datastream on an object.

    New datastreams are fully populated before they are ingested. Existing
    ones are overwritten in place.
    """

    def __init__(
        self,
        store: ObjectStore,
        temp_files: TempFileService,
        logger: Optional[logging.Logger] = None
    ):
        self.store = store
        self.temp_files = temp_files
        self.logger = logger or logging.getLogger(__name__)

    def write_derivative(
        self,
        obj: RepositoryObject,
        dsid: str,
        source: FileHandle
    ) -> WriteResult:
        """
        Store the file's bytes as datastream dsid.

        On success the temp file is deleted. On failure it is left for
        the caller and the error text is returned.
        """
        try:
            with open(source.path, 'rb') as f:
                content = f.read()

            datastream = self.store.get_datastream(obj, dsid)
            if datastream is None:
                datastream = self.store.create_datastream(obj, dsid, ControlGroup.MANAGED)
                datastream.label = dsid
                datastream.mime_type = source.mime_type
                datastream.content = content
                self.store.ingest(obj, datastream)
                self.logger.debug(f"Ingested {dsid} on {obj.pid} ({len(content)} bytes)")
            else:
                mime_type = None
                if datastream.mime_type != source.mime_type:
                    mime_type = source.mime_type
                self.store.update_datastream(obj, datastream, content, mime_type=mime_type)
                self.logger.debug(f"Updated {dsid} on {obj.pid} ({len(content)} bytes)")
        except Exception as e:
            self.logger.exception(f"Error writing {dsid} to {obj.pid}: {e}")
            return WriteResult(False, str(e))

        self.temp_files.delete(source)
        return WriteResult(True)
