from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from firebase_storage.reference import StorageReference


class FirebaseMetaData(BaseModel):
    """Object metadata as returned by a GET on the object URL."""

    bucket: str | None = None
    generation: str | None = None
    metageneration: str | None = None
    name: str | None = None
    content_type: str | None = Field(default=None, alias="contentType")
    time_created: datetime | None = Field(default=None, alias="timeCreated")
    updated: datetime | None = None
    storage_class: str | None = Field(default=None, alias="storageClass")
    size: int | None = None
    md5_hash: str | None = Field(default=None, alias="md5Hash")
    crc32c: str | None = None
    etag: str | None = None
    content_encoding: str | None = Field(default=None, alias="contentEncoding")
    content_disposition: str | None = Field(default=None, alias="contentDisposition")
    download_tokens: str | None = Field(default=None, alias="downloadTokens")
    metadata: dict[str, str] | None = None

    class Config:
        populate_by_name = True

    @property
    def full_path(self) -> str | None:
        return self.name

    @property
    def tokens(self) -> list[str]:
        if not self.download_tokens:
            return []
        return [token for token in self.download_tokens.split(",") if token]


class BucketItem(BaseModel):
    name: str
    bucket: str | None = None


class BucketListResponse(BaseModel):
    """Raw listing payload."""

    prefixes: list[str] = Field(default_factory=list)
    items: list[BucketItem] = Field(default_factory=list)
    next_page_token: str | None = Field(default=None, alias="nextPageToken")

    class Config:
        populate_by_name = True


@dataclass
class StorageBucketList:
    prefixes: list[StorageReference] = field(default_factory=list)
    items: list[StorageReference] = field(default_factory=list)
    next_page_token: str | None = None

    @property
    def has_more(self) -> bool:
        return bool(self.next_page_token)


__all__ = [
    "FirebaseMetaData",
    "BucketItem",
    "BucketListResponse",
    "StorageBucketList",
]
