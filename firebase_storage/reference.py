from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, TypeVar
from urllib.parse import quote

from loguru import logger

from firebase_storage.exceptions import NO_RESPONSE, MissingFieldError, StorageError
from firebase_storage.models import FirebaseMetaData, StorageBucketList
from firebase_storage.progress import UploadSource
from firebase_storage.task import UploadTask

if TYPE_CHECKING:
    from firebase_storage.client import FirebaseStorage

T = TypeVar("T")

DOWNLOAD_TOKEN_FIELD = "downloadTokens"


def _as_mapping(payload: Any) -> dict[str, Any]:
    if not isinstance(payload, dict):
        raise ValueError(f"Expected a JSON object, got {type(payload).__name__}")
    return payload


@dataclass(frozen=True)
class StorageReference:
    """Path within a bucket.

    References are immutable: :meth:`child` returns a new reference and leaves
    the receiver untouched.

    Example::

        storage.child("some").child("path").child("to/file.png")
    """

    storage: FirebaseStorage = field(repr=False)
    children: tuple[str, ...]

    @property
    def path(self) -> str:
        return "/".join(self.children)

    @property
    def name(self) -> str:
        return self.path.rsplit("/", 1)[-1]

    @property
    def escaped_path(self) -> str:
        return quote(self.path, safe="")

    @property
    def target_url(self) -> str:
        """Upload endpoint."""
        return f"{self.storage.bucket_url}?name={self.escaped_path}"

    @property
    def download_url(self) -> str:
        """Object endpoint used for metadata and delete."""
        return f"{self.storage.bucket_url}/{self.escaped_path}"

    @property
    def full_download_url(self) -> str:
        """Public download URL without its token."""
        return f"{self.download_url}?alt=media&token="

    def child(self, name: str) -> "StorageReference":
        return StorageReference(self.storage, self.children + (name,))

    def put(
        self,
        stream: UploadSource,
        cancel_event: asyncio.Event | None = None,
        mime_type: str | None = None,
    ) -> UploadTask:
        """Start uploading ``stream`` to this location.

        Args:
            stream: Seekable binary stream (or bytes) to upload from its
                current position to its end.
            cancel_event: Optional event which cancels the upload when set.
            mime_type: Optional type of the data, sent as Content-Type.

        Returns:
            :class:`UploadTask` which can be awaited for the download URL and
            used to track the progress of the upload.
        """
        return UploadTask(
            self.storage.options,
            self.target_url,
            self.full_download_url,
            stream,
            cancel_event,
            mime_type,
        )

    async def get_metadata(self) -> FirebaseMetaData:
        return await self._perform_fetch(FirebaseMetaData.model_validate)

    async def get_download_url(self) -> str:
        data = await self._perform_fetch(_as_mapping)
        token = data.get(DOWNLOAD_TOKEN_FIELD)
        if not isinstance(token, str):
            raise MissingFieldError(DOWNLOAD_TOKEN_FIELD, data)
        return self.full_download_url + token

    async def delete(self) -> None:
        url = self.download_url
        result_content = NO_RESPONSE

        try:
            async with await self.storage.options.create_http_client() as http:
                logger.debug("DELETE {url}", url=url)
                response = await http.delete(url)
                result_content = response.text
                response.raise_for_status()
        except Exception as exc:
            raise StorageError(url, result_content, exc) from exc

    async def list_files(self, max_results: int = 1000, page_token: str | None = None) -> StorageBucketList:
        """List all files descended from this reference (at most 1000 per page)."""
        return await self.storage.list_files(self, max_results, page_token)

    async def list_prefixes(self, max_results: int = 1000, page_token: str | None = None) -> StorageBucketList:
        """List prefixes (folders) immediately below this reference."""
        return await self.storage.list_prefixes(self, max_results, page_token)

    async def _perform_fetch(self, parse: Callable[[Any], T]) -> T:
        url = self.download_url
        result_content = NO_RESPONSE

        try:
            async with await self.storage.options.create_http_client() as http:
                logger.debug("GET {url}", url=url)
                response = await http.get(url)
                result_content = response.text
                response.raise_for_status()
                return parse(response.json())
        except Exception as exc:
            raise StorageError(url, result_content, exc) from exc


__all__ = ["StorageReference"]
