from typing import Dict, List, Optional

import pytest

from s3gateway.exceptions import StoreError
from s3gateway.schemas import ListingBatch, ObjectSummary, StoreObject

LAST_MODIFIED = "2024-05-28T17:19:04.000Z"


class FakeStore:
    """
    In-memory bucket honoring the store client contract.

    Listings are folded on the delimiter like S3 does and split into pages
    of ``page_size`` keys.
    """

    def __init__(self, objects: Optional[Dict[str, bytes]] = None, page_size: int = 1000) -> None:
        self.objects = dict(objects or {})
        self.page_size = page_size
        self.get_error: Optional[StoreError] = None
        self.get_status: Optional[int] = None
        self.list_error: Optional[StoreError] = None
        self.calls: List[tuple] = []

    def get_object(self, key: str) -> StoreObject:
        self.calls.append(("get_object", key))
        if self.get_error is not None:
            raise self.get_error
        if self.get_status is not None:
            return StoreObject(status_code=self.get_status)
        if key not in self.objects:
            return StoreObject(status_code=404)
        data = self.objects[key]
        return StoreObject(status_code=200, body=iter([data]), content_length=len(data))

    def list_objects(self, prefix: str, delimiter: str = "/") -> List[ListingBatch]:
        self.calls.append(("list_objects", prefix, delimiter))
        if self.list_error is not None:
            raise self.list_error

        rows = []
        seen_prefixes = set()
        for key in sorted(self.objects):
            if not key.startswith(prefix):
                continue
            rest = key[len(prefix):]
            if delimiter and delimiter in rest:
                common = prefix + rest.split(delimiter, 1)[0] + delimiter
                if common not in seen_prefixes:
                    seen_prefixes.add(common)
                    rows.append(("prefix", common))
            else:
                rows.append(("key", key))

        batches = []
        for start in range(0, max(len(rows), 1), self.page_size):
            page = rows[start:start + self.page_size]
            batches.append(ListingBatch(
                prefix=prefix,
                common_prefixes=[value for kind, value in page if kind == "prefix"],
                contents=[
                    ObjectSummary(key=value, size=len(self.objects[value]), last_modified=LAST_MODIFIED)
                    for kind, value in page if kind == "key"
                ]
            ))
        return batches

    def describe(self) -> str:
        return "bucket fake at memory://"

    def close(self) -> None:
        pass

    def operations(self) -> List[str]:
        return [call[0] for call in self.calls]


@pytest.fixture
def store() -> FakeStore:
    return FakeStore({
        "file.txt": b"I am a file",
        "folder/file.txt": b"I am a file in a folder",
    })
