"""Async client for the Firebase Cloud Storage REST API.

Uploads report coarse progress while they run::

    storage = FirebaseStorage("my-app.appspot.com", FirebaseStorageOptions(auth_token_factory=get_token))
    task = storage.child("images").child("cat.png").put(open("cat.png", "rb"), mime_type="image/png")
    task.progress.subscribe(lambda p: print(f"{p.percentage:.0f}%"))
    url = await task

The package logs through loguru and keeps its logger disabled until
:func:`firebase_storage.logging_config.setup_logging` is called.
"""

from loguru import logger

from .client import MAX_LIST_RESULTS, FirebaseStorage
from .exceptions import (
    ConfigurationError,
    FirebaseStorageError,
    MissingFieldError,
    StorageError,
)
from .models import FirebaseMetaData, StorageBucketList
from .options import FirebaseStorageOptions
from .progress import ProgressChannel, UploadProgress
from .reference import StorageReference
from .task import UploadTask

logger.disable(__name__)

__all__ = [
    "MAX_LIST_RESULTS",
    "FirebaseStorage",
    "FirebaseStorageOptions",
    "StorageReference",
    "UploadTask",
    "UploadProgress",
    "ProgressChannel",
    "FirebaseMetaData",
    "StorageBucketList",
    "FirebaseStorageError",
    "ConfigurationError",
    "StorageError",
    "MissingFieldError",
]
