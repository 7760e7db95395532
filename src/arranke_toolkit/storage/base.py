"""
Object storage abstractions.

Images (listing logos, user avatars) are stored in named buckets of a hosted
object store that serves them from public URLs. 'ObjectStore' is the pluggable
interface; the public URL is the only handle the rest of the toolkit keeps, so
'path_from_public_url' recovers the object path when an old file needs to be
removed.

Concrete implementations: 'InMemoryObjectStore', 'SupabaseObjectStore'.
"""

from abc import ABC, abstractmethod
from pathlib import PurePosixPath
from urllib.parse import urlparse

from arranke_toolkit.utils.database import generate_uid

LOGOS_BUCKET = "logos"
AVATARS_BUCKET = "avatars"


class ObjectStore(ABC):
    """Abstract base class for bucket-based object storage."""

    @abstractmethod
    async def upload(self, bucket: str, path: str, data: bytes, content_type: str | None = None) -> str:
        """Store 'data' under 'path' in 'bucket' and return its public URL."""
        pass

    @abstractmethod
    async def remove(self, bucket: str, paths: list[str]) -> None:
        pass

    @abstractmethod
    async def get_public_url(self, bucket: str, path: str) -> str:
        pass


def build_object_path(owner_id: str, filename: str) -> str:
    """'<owner_id>/<random id>.<extension of filename>'."""
    extension = PurePosixPath(filename).suffix
    return f"{owner_id}/{generate_uid()}{extension}"


def path_from_public_url(bucket: str, url: str) -> str | None:
    """Return the object path that follows the '<bucket>/' segment of 'url', if any."""
    parts = urlparse(url).path.split("/")
    if bucket not in parts:
        return None
    index = parts.index(bucket)
    if index == len(parts) - 1:
        return None
    return "/".join(parts[index + 1 :])
