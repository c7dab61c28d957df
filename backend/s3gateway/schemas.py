from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Iterator, List, Literal, Optional, Union


# ========== Store Schemas ==========
class ObjectSummary(BaseModel):
    """One object reported by a bucket listing."""
    model_config = ConfigDict(frozen=True)

    key: str
    size: int = Field(ge=0)
    last_modified: str = ""


class ListingBatch(BaseModel):
    """One page of a delimited bucket listing, as returned by the store."""
    model_config = ConfigDict(frozen=True)

    prefix: Optional[str] = None  # Prefix echoed back by the store
    common_prefixes: List[str] = []
    contents: List[ObjectSummary] = []


class StoreObject(BaseModel):
    """Outcome of fetching a single key from the store."""
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    status_code: int
    body: Any = None  # Iterator[bytes] when the fetch succeeded
    content_length: Optional[int] = None


# ========== View Schemas ==========
class ListEntry(BaseModel):
    """One row of a directory listing."""
    model_config = ConfigDict(frozen=True)

    name: str
    is_directory: bool
    size_bytes: int = 0
    size_human: str
    last_modified: str = ""


class ObjectFile(BaseModel):
    """A resolved object, with its body exposed as a lazy chunk iterator."""
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    kind: Literal["file"] = "file"
    body: Any
    content_length: Optional[int] = None

    def iter_bytes(self) -> Iterator[bytes]:
        yield from self.body

    def read(self) -> bytes:
        """Drain the body. Only for small objects and tests."""
        return b"".join(self.iter_bytes())


class ObjectFolder(BaseModel):
    """A resolved prefix with its immediate children."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["folder"] = "folder"
    path: str
    entries: List[ListEntry] = []


ObjectResult = Union[ObjectFile, ObjectFolder]
