"""
Path resolution against a bucket.

S3 has no notion of files and folders, only keys. The resolver maps a request
path onto the store the following way:

- a folder is queried as a prefix ending with a slash, using a slash as
  delimiter; subfolders come back as common prefixes, files as contents;
- the empty path is the bucket root and is always a folder (fetching the
  bucket address returns its properties, not an object);
- any other path is first fetched as an object and, if the store confirms
  there is no such key, listed as a folder instead.
"""

import logging
from typing import Iterable, List

from s3gateway.exceptions import NotFound, StoreError, StoreUnavailable
from s3gateway.schemas import ListEntry, ListingBatch, ObjectFile, ObjectFolder, ObjectResult
from s3gateway.store import DELIMITER
from s3gateway.utils.formatting import format_size

logger = logging.getLogger(__name__)

FOUND_STATUSES = (200, 204)
MISSING_STATUS = 404
DIRECTORY_SIZE = "[DIR]"


def folder_prefix(path: str) -> str:
    """Return the listing prefix for a path: empty for the root, else the path plus a delimiter.

    The path is a key, so a trailing delimiter already in it is kept: ``a/``
    lists the keys under ``a//``.
    """
    if not path:
        return path
    return path + DELIMITER


def normalize_listing(batches: Iterable[ListingBatch], queried_prefix: str) -> List[ListEntry]:
    """Turn raw listing pages into directory entries relative to the prefix.

    Each page is stripped of the prefix it echoes back. Keys that do not
    start with that prefix are skipped.
    """
    entries = []
    for batch in batches:
        prefix = batch.prefix if batch.prefix is not None else queried_prefix

        for common_prefix in batch.common_prefixes:
            if not common_prefix.startswith(prefix):
                logger.debug(f"Dropping folder {common_prefix!r} outside of prefix {prefix!r}")
                continue
            entries.append(ListEntry(
                name=common_prefix[len(prefix):],
                is_directory=True,
                size_bytes=0,
                size_human=DIRECTORY_SIZE,
                last_modified=""
            ))

        for obj in batch.contents:
            if not obj.key.startswith(prefix):
                logger.debug(f"Dropping object {obj.key!r} outside of prefix {prefix!r}")
                continue
            entries.append(ListEntry(
                name=obj.key[len(prefix):],
                is_directory=False,
                size_bytes=obj.size,
                size_human=format_size(obj.size),
                last_modified=obj.last_modified
            ))

    return entries


class PathResolver:
    """Resolves request paths to object bodies or folder listings.

    The store is shared read-only across concurrent requests.
    """

    def __init__(self, store):
        self.store = store

    def resolve(self, path: str) -> ObjectResult:
        if path:
            result = self.fetch_file(path)
            if result is not None:
                return result

        return self.list_folder(path)

    def fetch_file(self, path: str):
        """Fetch ``path`` as an object.

        Returns None when the store confirms the key does not exist, so that
        the caller can fall back to a folder listing.
        """
        try:
            response = self.store.get_object(path)
        except StoreError as e:
            logger.error(
                f"Object fetch failed: path={path}, error={e}",
                extra={"path": path, "operation": "get_object", "error_type": "transport"}
            )
            raise StoreUnavailable(path, "Unable to connect to S3 bucket") from e

        if response.status_code in FOUND_STATUSES:
            return ObjectFile(
                body=response.body if response.body is not None else iter(()),
                content_length=response.content_length
            )

        if response.status_code == MISSING_STATUS:
            return None

        logger.error(
            f"Object fetch failed: path={path}, status={response.status_code}",
            extra={"path": path, "operation": "get_object", "error_type": "unexpected_status"}
        )
        raise StoreUnavailable(path, f"Unknown S3 error (status {response.status_code})")

    def list_folder(self, path: str) -> ObjectFolder:
        prefix = folder_prefix(path)

        try:
            batches = self.store.list_objects(prefix, DELIMITER)
        except StoreError as e:
            logger.info(
                f"Listing failed: prefix={prefix!r}, error={e}",
                extra={"path": path, "operation": "list_objects", "error_type": "listing"}
            )
            raise NotFound(path) from e

        return ObjectFolder(path=prefix, entries=normalize_listing(batches, prefix))
