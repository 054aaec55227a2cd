"""
Configuration for derivative generation.
"""

import getpass
import os
import tempfile
from dataclasses import dataclass, field, fields
from typing import List, Optional


def str2bool(value, raise_exc=False):
    """converts diverse string values into boolean True or False."""
    true_set = {'yes', 'true', 't', 'y', '1', 'on'}
    false_set = {'no', 'false', 'f', 'n', '0', 'off'}

    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        value = value.strip().lower()
        if value in true_set:
            return True
        if value in false_set:
            return False

    if raise_exc:
        raise ValueError('Expected "%s"' % '", "'.join(sorted(true_set | false_set)))
    return None


def _default_tmp_folder() -> str:
    return os.path.join(tempfile.gettempdir(), 'derivgen')


@dataclass
class DerivativeConfig:
    """
    Settings consulted by the derivative pipeline.

    Attributes:
        upscale_images: Allow medium-size derivatives to enlarge small images
        tmp_folder: Directory for working copies
        jpeg_quality: Quality used when re-encoding JPEG derivatives
    """
    upscale_images: bool = False
    tmp_folder: str = field(default_factory=_default_tmp_folder)
    jpeg_quality: int = 85

    @classmethod
    def from_env(cls) -> 'DerivativeConfig':
        """Build configuration from DERIVGEN_* environment variables."""
        config = cls()
        upscale = os.getenv('DERIVGEN_UPSCALE_IMAGES')
        if upscale is not None:
            try:
                config.upscale_images = str2bool(upscale, raise_exc=True)
            except ValueError as e:
                raise ValueError(f"DERIVGEN_UPSCALE_IMAGES: {e}")
        config.tmp_folder = os.getenv('DERIVGEN_TMP_FOLDER', config.tmp_folder)
        quality = os.getenv('DERIVGEN_JPEG_QUALITY')
        if quality:
            try:
                config.jpeg_quality = int(quality)
            except ValueError:
                raise ValueError(f"DERIVGEN_JPEG_QUALITY must be an integer, got {quality!r}")
        return config

    def get_bool(self, key: str) -> bool:
        """Look up a boolean setting by name."""
        names = {f.name for f in fields(self)}
        if key not in names:
            raise KeyError(key)
        return bool(getattr(self, key))

    def validate(self) -> List[str]:
        """Return a list of configuration errors (empty if valid)."""
        errors = []
        if not 1 <= self.jpeg_quality <= 95:
            errors.append(f"DERIVGEN_JPEG_QUALITY must be 1-95, got {self.jpeg_quality}")
        if not self.tmp_folder:
            errors.append("DERIVGEN_TMP_FOLDER is empty")
        return errors


class CurrentUser:
    """The user on whose behalf derivatives are generated."""

    def __init__(self, user_id: Optional[str] = None):
        self._user_id = user_id or os.getenv('DERIVGEN_USER') or self._login_name()

    @staticmethod
    def _login_name() -> str:
        try:
            return getpass.getuser()
        except (KeyError, OSError):
            # No passwd entry (e.g., containers with arbitrary uids)
            return 'anonymous'

    @property
    def id(self) -> str:
        return self._user_id

    def __repr__(self) -> str:
        return f"CurrentUser({self._user_id!r})"
