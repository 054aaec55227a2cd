"""
Image derivative generation for digital repository objects.

Creates thumbnail (TN, 200x200) and medium-size (MEDIUM_SIZE, 500x700)
datastreams from an object's original OBJ datastream:
    1. Decide: skip if the derivative exists (unless forced)
    2. Extract: copy OBJ into a temp file
    3. Scale: resize a working copy with Pillow
    4. Write: ingest or update the derivative datastream
    5. Report: return an OutcomeRecord

Supports both S3 and local filesystem storage.
"""

__version__ = "1.0.0"

from .config import CurrentUser, DerivativeConfig
from .s3_config import S3Config
from .datastream import ControlGroup, Datastream, RepositoryObject
from .object_store import ObjectNotFoundError, ObjectStore, ObjectStoreError
from .s3_client import S3ObjectStore
from .local_client import LocalConfig, LocalObjectStore
from .mime_registry import MimeRegistry
from .temp_files import FileHandle, TempFileService
from .image_scaler import ImageScaler, PillowImageCodec
from .outcome import Channel, Message, OutcomeKind, OutcomeRecord, Severity
from .derivatives import MEDIUM, THUMBNAIL, DerivativeGenerator, DerivativeKind
from .derivation_stats import DerivationStats
from .batch import BatchDeriver
from .reporter import Reporter

__all__ = [
    "CurrentUser",
    "DerivativeConfig",
    "S3Config",
    "ControlGroup",
    "Datastream",
    "RepositoryObject",
    "ObjectNotFoundError",
    "ObjectStore",
    "ObjectStoreError",
    "S3ObjectStore",
    "LocalConfig",
    "LocalObjectStore",
    "MimeRegistry",
    "FileHandle",
    "TempFileService",
    "ImageScaler",
    "PillowImageCodec",
    "Channel",
    "Message",
    "OutcomeKind",
    "OutcomeRecord",
    "Severity",
    "MEDIUM",
    "THUMBNAIL",
    "DerivativeGenerator",
    "DerivativeKind",
    "DerivationStats",
    "BatchDeriver",
    "Reporter",
]
