"""
DerivativeGenerator - Creates thumbnail and medium-size derivatives.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional

from . import reporter
from .config import DerivativeConfig
from .datastream import MEDIUM_SIZE, TN, RepositoryObject
from .datastream_writer import DatastreamWriter
from .decision import should_generate
from .image_scaler import ImageScaler, PillowImageCodec
from .object_store import ObjectStore
from .outcome import OutcomeRecord
from .source_extractor import NoSourceError, SourceExtractor
from .temp_files import TempFileService


@dataclass(frozen=True)
class DerivativeKind:
    """
    A kind of derivative and how to produce it.

    Attributes:
        name: Human-readable name used in messages
        dsid: Datastream id written on the object
        width: Maximum width
        height: Maximum height
        upscale_key: Config flag gating upscaling (None = always allowed)
    """
    name: str
    dsid: str
    width: int
    height: int
    upscale_key: Optional[str] = None


THUMBNAIL = DerivativeKind('thumbnail', TN, 200, 200)
MEDIUM = DerivativeKind('medium size', MEDIUM_SIZE, 500, 700, upscale_key='upscale_images')

KINDS: Dict[str, DerivativeKind] = {
    'thumbnail': THUMBNAIL,
    'medium': MEDIUM,
}

# Suffix of the working copy that gets scaled. Both kinds share it.
WORKING_COPY_SUFFIX = 'TN'


class DerivativeGenerator:
    """
    Runs the derivative pipeline for one object at a time.

    decide -> extract OBJ -> copy and scale -> write -> report

    Every failure is returned as an OutcomeRecord; nothing is raised to
    the caller.
    """

    def __init__(
        self,
        store: ObjectStore,
        temp_files: TempFileService,
        config: Optional[DerivativeConfig] = None,
        scaler: Optional[ImageScaler] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize generator.

        Args:
            store: Object store holding the repository objects
            temp_files: Temp file service for working copies
            config: Settings (default: DerivativeConfig())
            scaler: Image scaler (default: Pillow-backed ImageScaler)
            logger: Optional logger instance
        """
        self.store = store
        self.temp_files = temp_files
        self.config = config or DerivativeConfig()
        self.logger = logger or logging.getLogger(__name__)
        self.scaler = scaler or ImageScaler(
            PillowImageCodec(quality=self.config.jpeg_quality, logger=self.logger),
            logger=self.logger,
        )
        self.extractor = SourceExtractor(store, temp_files, logger=self.logger)
        self.writer = DatastreamWriter(store, temp_files, logger=self.logger)

    def create_thumbnail(self, obj: RepositoryObject, force: bool = False) -> OutcomeRecord:
        """Create the TN datastream (200x200)."""
        return self.create(obj, THUMBNAIL, force)

    def create_medium_size(self, obj: RepositoryObject, force: bool = False) -> OutcomeRecord:
        """Create the MEDIUM_SIZE datastream (500x700)."""
        return self.create(obj, MEDIUM, force)

    def allow_upscale(self, kind: DerivativeKind) -> bool:
        if kind.upscale_key is None:
            return True
        return self.config.get_bool(kind.upscale_key)

    def create(
        self,
        obj: RepositoryObject,
        kind: DerivativeKind,
        force: bool = False
    ) -> OutcomeRecord:
        """
        Generate one derivative for an object.

        Args:
            obj: Object to derive from
            kind: Derivative to produce
            force: Regenerate even if the datastream exists

        Returns:
            OutcomeRecord describing the result
        """
        if not should_generate(self.store, obj, kind.dsid, force):
            self.logger.debug(f"{kind.dsid} already present on {obj.pid}, skipping")
            return reporter.skipped()

        try:
            source = self.extractor.extract_source(obj)
        except NoSourceError:
            return reporter.no_source(obj.pid, kind.name)
        except Exception:
            self.logger.exception(f"Error reading OBJ of {obj.pid}")
            return reporter.no_source(obj.pid, kind.name)

        try:
            return self._scale_and_write(obj, kind, source)
        finally:
            self.temp_files.delete(source.handle)

    def _scale_and_write(self, obj, kind, source) -> OutcomeRecord:
        working_name = f"{source.base_name}{WORKING_COPY_SUFFIX}.{source.extension}"
        try:
            working = self.temp_files.copy(source.handle, working_name)
        except OSError:
            self.logger.exception(f"Error copying {source.handle.path}")
            return reporter.scale_failure(obj.pid, kind.dsid)

        if not self.scaler.scale(working.path, kind.width, kind.height, self.allow_upscale(kind)):
            self.temp_files.delete(working)
            return reporter.scale_failure(obj.pid, kind.dsid)

        result = self.writer.write_derivative(obj, kind.dsid, working)
        if not result.success:
            self.temp_files.delete(working)
            return reporter.write_failure(result.error)

        self.logger.info(f"Created {kind.dsid} for {obj.pid}")
        return reporter.success(obj.pid, kind.dsid)
