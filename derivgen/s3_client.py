"""
S3ObjectStore - Repository objects stored in S3/MinIO.

Each datastream is one S3 object at {prefix}/{pid}/{dsid}. The MIME type
is the S3 ContentType; label and control group are user metadata.
"""

import logging
from datetime import datetime, timezone
from typing import BinaryIO, Iterator, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError

from .datastream import ControlGroup, Datastream, RepositoryObject
from .object_store import ObjectNotFoundError, ObjectStore, ObjectStoreError
from .s3_config import S3Config


class S3ObjectStore(ObjectStore):
    """
    Object store backed by an S3 bucket.
    """

    def __init__(
        self,
        config: S3Config,
        chunk_size: int = 64 * 1024,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize S3 store.

        Args:
            config: S3 configuration
            chunk_size: Bytes per read when streaming content
            logger: Optional logger instance
        """
        self.config = config
        self.chunk_size = chunk_size
        self.logger = logger or logging.getLogger(__name__)

        self._client = boto3.client(
            's3',
            endpoint_url=config.endpoint,
            aws_access_key_id=config.access_key,
            aws_secret_access_key=config.secret_key,
            region_name=config.region,
            config=Config(
                signature_version='s3v4',
                s3={'addressing_style': 'path'}
            ),
            verify=config.verify_ssl
        )

    @property
    def client(self):
        """Return the underlying boto3 client."""
        return self._client

    def object_prefix(self, pid: str) -> str:
        return f"{self.config.prefix}/{pid}/"

    def datastream_key(self, pid: str, dsid: str) -> str:
        return f"{self.config.prefix}/{pid}/{dsid}"

    def list_objects(self) -> Iterator[str]:
        prefix = f"{self.config.prefix}/"
        paginator = self._client.get_paginator('list_objects_v2')
        try:
            for page in paginator.paginate(
                Bucket=self.config.bucket,
                Prefix=prefix,
                Delimiter='/'
            ):
                for common_prefix in page.get('CommonPrefixes', []):
                    pid = common_prefix['Prefix'][len(prefix):].rstrip('/')
                    if pid:
                        yield pid
        except ClientError as e:
            raise ObjectStoreError(f"Error listing objects: {e}") from e

    def get_object(self, pid: str) -> RepositoryObject:
        obj = RepositoryObject(pid=pid)
        prefix = self.object_prefix(pid)
        paginator = self._client.get_paginator('list_objects_v2')
        try:
            for page in paginator.paginate(Bucket=self.config.bucket, Prefix=prefix):
                for item in page.get('Contents', []):
                    dsid = item['Key'][len(prefix):]
                    if not dsid or '/' in dsid:
                        continue
                    obj.add_datastream(self._head_datastream(item['Key'], dsid))
        except ClientError as e:
            raise ObjectStoreError(f"Error loading {pid}: {e}") from e

        if not obj.datastreams:
            raise ObjectNotFoundError(f"Object not found: {pid}")
        return obj

    def _head_datastream(self, key: str, dsid: str) -> Datastream:
        response = self._client.head_object(Bucket=self.config.bucket, Key=key)
        metadata = response.get('Metadata', {})
        return Datastream(
            id=dsid,
            label=metadata.get('label', dsid),
            mime_type=response.get('ContentType', 'application/octet-stream'),
            control_group=ControlGroup(metadata.get('control-group', 'M')),
            size=response['ContentLength'],
            modified=response['LastModified'].isoformat(),
        )

    def read_content(
        self,
        obj: RepositoryObject,
        datastream: Datastream,
        fileobj: BinaryIO
    ) -> None:
        key = self.datastream_key(obj.pid, datastream.id)
        try:
            response = self._client.get_object(Bucket=self.config.bucket, Key=key)
        except ClientError as e:
            raise ObjectStoreError(f"Error reading {key}: {e}") from e

        body = response['Body']
        try:
            for chunk in iter(lambda: body.read(self.chunk_size), b''):
                fileobj.write(chunk)
        finally:
            body.close()

    def ingest(self, obj: RepositoryObject, datastream: Datastream) -> None:
        self._check_new(obj, datastream)
        self._put(obj, datastream, datastream.content, datastream.mime_type)
        obj.add_datastream(datastream)

    def update_datastream(
        self,
        obj: RepositoryObject,
        datastream: Datastream,
        content: bytes,
        mime_type: Optional[str] = None
    ) -> None:
        new_mime = mime_type or datastream.mime_type
        self._put(obj, datastream, content, new_mime)
        datastream.mime_type = new_mime
        datastream.content = content

    def _put(
        self,
        obj: RepositoryObject,
        datastream: Datastream,
        content: bytes,
        mime_type: str
    ) -> None:
        key = self.datastream_key(obj.pid, datastream.id)
        try:
            self._client.put_object(
                Bucket=self.config.bucket,
                Key=key,
                Body=content,
                ContentType=mime_type,
                Metadata={
                    'label': datastream.label,
                    'control-group': datastream.control_group.value,
                }
            )
        except ClientError as e:
            raise ObjectStoreError(f"Error writing {key}: {e}") from e
        datastream.size = len(content)
        datastream.modified = datetime.now(timezone.utc).isoformat()
        self.logger.debug(f"Uploaded {key} ({len(content)} bytes)")
