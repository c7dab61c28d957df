import logging
from datetime import datetime, timezone
from typing import Iterator, List, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from s3gateway.exceptions import StoreError
from s3gateway.schemas import ListingBatch, ObjectSummary, StoreObject

logger = logging.getLogger(__name__)

# Constants
DOWNLOAD_CHUNK_SIZE = 8192
DELIMITER = "/"


def format_last_modified(value) -> str:
    """Render a listing timestamp the way S3 sends it on the wire.

    boto3 parses ``LastModified`` into an aware datetime; the listing shows
    it back as ``YYYY-MM-DDTHH:MM:SS.mmmZ``.
    """
    if value is None:
        return ""
    if not isinstance(value, datetime):
        return str(value)
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


class BucketStore:
    """Read-only access to a single bucket of an S3 compatible store."""

    def __init__(
        self,
        bucket_name: str,
        endpoint_url: Optional[str] = None,
        aws_access_key_id: Optional[str] = None,
        aws_secret_access_key: Optional[str] = None,
        region_name: str = "us-east-1",
        path_style: bool = False,
        client=None
    ):
        self.bucket_name = bucket_name
        self.endpoint_url = endpoint_url
        self.region_name = region_name
        self.path_style = path_style
        # Built once and shared by every request thread; boto3 clients are thread-safe
        self._client = client or self._create_client(aws_access_key_id, aws_secret_access_key)

    @classmethod
    def from_settings(cls, settings) -> "BucketStore":
        return cls(
            bucket_name=settings.bucket_name,
            endpoint_url=settings.endpoint,
            aws_access_key_id=settings.access_key_id,
            aws_secret_access_key=settings.secret_access_key,
            region_name=settings.region,
            path_style=settings.path_style
        )

    def _create_client(self, aws_access_key_id: Optional[str], aws_secret_access_key: Optional[str]):
        config = Config(
            signature_version='s3v4',
            # Fail fast: one store failure is one user-visible failure
            retries={'total_max_attempts': 1, 'mode': 'standard'},
            max_pool_connections=25,
            s3={'addressing_style': 'path' if self.path_style else 'auto'}
        )

        kwargs = {
            'region_name': self.region_name,
            'config': config,
        }

        if self.endpoint_url:
            kwargs['endpoint_url'] = self.endpoint_url

        if aws_access_key_id:
            kwargs['aws_access_key_id'] = aws_access_key_id
            kwargs['aws_secret_access_key'] = aws_secret_access_key

        return boto3.client('s3', **kwargs)

    @property
    def client(self):
        return self._client

    def describe(self) -> str:
        endpoint = self.endpoint_url or f"s3.{self.region_name}.amazonaws.com"
        return f"bucket {self.bucket_name} at {endpoint}"

    def close(self):
        """Close the S3 client and release pooled connections."""
        self._client.close()

    def get_object(self, key: str) -> StoreObject:
        """Fetch an object.

        Error responses from the store come back as a ``StoreObject`` carrying
        their HTTP status and no body. Failures to talk to the store at all
        raise ``StoreError``.
        """
        try:
            response = self._client.get_object(Bucket=self.bucket_name, Key=key)
        except ClientError as e:
            status_code = e.response.get('ResponseMetadata', {}).get('HTTPStatusCode')
            if status_code is None:
                raise StoreError(str(e)) from e
            logger.debug(f"get_object {key!r} answered {status_code}")
            return StoreObject(status_code=status_code)
        except BotoCoreError as e:
            raise StoreError(str(e)) from e

        body = response['Body']
        return StoreObject(
            status_code=response.get('ResponseMetadata', {}).get('HTTPStatusCode', 200),
            body=self._iter_body(body),
            content_length=response.get('ContentLength')
        )

    @staticmethod
    def _iter_body(body) -> Iterator[bytes]:
        try:
            for chunk in body.iter_chunks(chunk_size=DOWNLOAD_CHUNK_SIZE):
                yield chunk
        finally:
            body.close()

    def list_objects(self, prefix: str = "", delimiter: str = DELIMITER) -> List[ListingBatch]:
        """List every page under a prefix, folded on the delimiter."""
        kwargs = {
            'Bucket': self.bucket_name,
            'Prefix': prefix,
        }

        if delimiter:
            kwargs['Delimiter'] = delimiter

        batches = []
        try:
            paginator = self._client.get_paginator('list_objects_v2')
            for page in paginator.paginate(**kwargs):
                batches.append(ListingBatch(
                    prefix=page.get('Prefix'),
                    common_prefixes=[cp['Prefix'] for cp in page.get('CommonPrefixes', [])],
                    contents=[
                        ObjectSummary(
                            key=obj['Key'],
                            size=obj.get('Size', 0),
                            last_modified=format_last_modified(obj.get('LastModified'))
                        )
                        for obj in page.get('Contents', [])
                    ]
                ))
        except ClientError as e:
            status_code = e.response.get('ResponseMetadata', {}).get('HTTPStatusCode')
            raise StoreError(str(e), status_code=status_code) from e
        except BotoCoreError as e:
            raise StoreError(str(e)) from e

        return batches
