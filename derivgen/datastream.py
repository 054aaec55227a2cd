"""
Datastream - Repository objects and the datastreams attached to them.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, Optional


class ControlGroup(str, Enum):
    """Storage mode of a datastream."""
    INLINE = 'X'
    MANAGED = 'M'
    EXTERNAL = 'E'
    REDIRECT = 'R'


# Datastream ids used by the derivative workflow
OBJ = 'OBJ'
TN = 'TN'
MEDIUM_SIZE = 'MEDIUM_SIZE'


@dataclass
class Datastream:
    """
    A named binary content slot attached to a repository object.

    Attributes:
        id: Datastream id (e.g., 'OBJ', 'TN')
        label: Human-readable label
        mime_type: MIME type of the content
        control_group: Storage mode
        content: Content bytes, when loaded or pending ingest
        size: Size in bytes as reported by the store
        modified: ISO timestamp of the last write
    """
    id: str
    label: str = ''
    mime_type: str = 'application/octet-stream'
    control_group: ControlGroup = ControlGroup.MANAGED
    content: Optional[bytes] = None
    size: int = 0
    modified: Optional[str] = None

    def to_dict(self) -> dict:
        """Metadata for serialization (content is stored separately)."""
        return {
            'label': self.label,
            'mime_type': self.mime_type,
            'control_group': self.control_group.value,
            'size': self.size,
            'modified': self.modified,
        }

    @classmethod
    def from_dict(cls, dsid: str, data: dict) -> 'Datastream':
        return cls(
            id=dsid,
            label=data.get('label', ''),
            mime_type=data.get('mime_type', 'application/octet-stream'),
            control_group=ControlGroup(data.get('control_group', 'M')),
            size=data.get('size', 0),
            modified=data.get('modified'),
        )


@dataclass
class RepositoryObject:
    """
    A repository object identified by its persistent identifier.

    Datastreams are reached through explicit get/has/add calls rather
    than item access.

    Attributes:
        pid: Persistent identifier (e.g., 'demo:1')
        label: Object label
        datastreams: Dict mapping datastream id -> Datastream
    """
    pid: str
    label: str = ''
    datastreams: Dict[str, Datastream] = field(default_factory=dict)

    def get_datastream(self, dsid: str) -> Optional[Datastream]:
        """Get a datastream by id, or None if absent."""
        return self.datastreams.get(dsid)

    def has_datastream(self, dsid: str) -> bool:
        """Check if a datastream is present."""
        return dsid in self.datastreams

    def add_datastream(self, datastream: Datastream) -> None:
        """Attach a datastream, replacing any with the same id."""
        self.datastreams[datastream.id] = datastream

    def iter_datastreams(self) -> Iterator[Datastream]:
        return iter(self.datastreams.values())

    @property
    def datastream_ids(self) -> list:
        """Sorted list of datastream ids."""
        return sorted(self.datastreams.keys())

    @property
    def base_name(self) -> str:
        """Filename-safe name derived from the pid."""
        return self.pid.replace(':', '-').replace('/', '-')
