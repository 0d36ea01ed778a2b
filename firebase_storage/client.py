from __future__ import annotations

import httpx
from loguru import logger

from firebase_storage.exceptions import NO_RESPONSE, ConfigurationError, StorageError
from firebase_storage.models import BucketListResponse, StorageBucketList
from firebase_storage.options import FirebaseStorageOptions
from firebase_storage.reference import StorageReference
from firebase_storage.settings import DEFAULT_ENDPOINT, Settings, get_settings

MAX_LIST_RESULTS = 1000


class FirebaseStorage:
    """Entry point: a bucket plus the options every request is issued with."""

    def __init__(
        self,
        storage_bucket: str,
        options: FirebaseStorageOptions | None = None,
        endpoint: str = DEFAULT_ENDPOINT,
    ) -> None:
        bucket = (storage_bucket or "").strip().strip("/")
        if not bucket:
            raise ConfigurationError("Storage bucket is not set", {"setting": "storage.bucket"})
        self.storage_bucket = bucket
        self.options = options or FirebaseStorageOptions()
        self.endpoint = endpoint if endpoint.endswith("/") else f"{endpoint}/"

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "FirebaseStorage":
        settings = settings or get_settings()
        storage = settings.storage
        return cls(
            storage.bucket,
            FirebaseStorageOptions.from_settings(storage),
            endpoint=storage.endpoint,
        )

    @property
    def bucket_url(self) -> str:
        return f"{self.endpoint}{self.storage_bucket}/o"

    def child(self, name: str) -> StorageReference:
        return StorageReference(self, (name,))

    def reference_from_path(self, path: str) -> StorageReference:
        segments = tuple(segment for segment in path.split("/") if segment)
        return StorageReference(self, segments)

    async def list_files(
        self,
        reference: StorageReference,
        max_results: int = MAX_LIST_RESULTS,
        page_token: str | None = None,
    ) -> StorageBucketList:
        return await self._list(reference, max_results, page_token, delimiter=None)

    async def list_prefixes(
        self,
        reference: StorageReference,
        max_results: int = MAX_LIST_RESULTS,
        page_token: str | None = None,
    ) -> StorageBucketList:
        return await self._list(reference, max_results, page_token, delimiter="/")

    async def _list(
        self,
        reference: StorageReference,
        max_results: int,
        page_token: str | None,
        delimiter: str | None,
    ) -> StorageBucketList:
        if max_results < 1:
            raise ValueError("max_results must be at least 1")

        prefix = reference.path.strip("/")
        params = {
            "prefix": f"{prefix}/" if prefix else "",
            "maxResults": str(min(max_results, MAX_LIST_RESULTS)),
        }
        if delimiter:
            params["delimiter"] = delimiter
        if page_token:
            params["pageToken"] = page_token

        url = str(httpx.URL(self.bucket_url, params=params))
        result_content = NO_RESPONSE
        try:
            async with await self.options.create_http_client() as http:
                logger.debug("Listing {url}", url=url)
                response = await http.get(url)
                result_content = response.text
                response.raise_for_status()
                payload = BucketListResponse.model_validate(response.json())
        except Exception as exc:
            raise StorageError(url, result_content, exc) from exc

        return StorageBucketList(
            prefixes=[self.reference_from_path(name) for name in payload.prefixes],
            items=[self.reference_from_path(item.name) for item in payload.items],
            next_page_token=payload.next_page_token,
        )


__all__ = ["FirebaseStorage", "MAX_LIST_RESULTS"]
