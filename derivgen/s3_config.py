"""
S3Config - Connection settings for S3/MinIO object storage.
"""

import os
from dataclasses import dataclass
from typing import List, Optional

from .config import str2bool


@dataclass
class S3Config:
    """
    S3 connection configuration.

    Attributes:
        endpoint: S3 endpoint URL (e.g., https://minio.example.com:9000)
        bucket: Bucket holding repository objects
        prefix: Key prefix under which objects live
        access_key: Access key id
        secret_key: Secret access key
        region: Region name
        verify_ssl: Verify TLS certificates
    """
    endpoint: Optional[str] = None
    bucket: Optional[str] = None
    prefix: str = 'objects'
    access_key: Optional[str] = None
    secret_key: Optional[str] = None
    region: Optional[str] = 'us-east-1'
    verify_ssl: bool = True

    @classmethod
    def from_env(cls) -> 'S3Config':
        """Build configuration from S3_* environment variables."""
        verify = str2bool(os.getenv('S3_VERIFY_SSL', 'true'))
        return cls(
            endpoint=os.getenv('S3_ENDPOINT'),
            bucket=os.getenv('S3_BUCKET'),
            prefix=os.getenv('S3_PREFIX', 'objects'),
            access_key=os.getenv('S3_ACCESS_KEY'),
            secret_key=os.getenv('S3_SECRET_KEY'),
            region=os.getenv('S3_REGION', 'us-east-1'),
            verify_ssl=True if verify is None else verify,
        )

    def validate(self) -> List[str]:
        """Return a list of configuration errors (empty if valid)."""
        errors = []
        if not self.endpoint:
            errors.append("S3_ENDPOINT is not set")
        if not self.bucket:
            errors.append("S3_BUCKET is not set")
        if not self.access_key:
            errors.append("S3_ACCESS_KEY is not set")
        if not self.secret_key:
            errors.append("S3_SECRET_KEY is not set")
        return errors
