"""
Decide whether a derivative needs generating.
"""

from .datastream import RepositoryObject
from .object_store import ObjectStore


def should_generate(
    store: ObjectStore,
    obj: RepositoryObject,
    dsid: str,
    force: bool = False
) -> bool:
    """True if the derivative is absent or regeneration is forced."""
    return force or not store.has_datastream(obj, dsid)
