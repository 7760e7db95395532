from arranke_toolkit.storage.base import ObjectStore


class InMemoryObjectStore(ObjectStore):
    """Keeps uploaded bytes in a dict keyed by '(bucket, path)'."""

    def __init__(self, base_url: str = "https://storage.local/object/public") -> None:
        self.base_url = base_url.rstrip("/")
        self.objects: dict[tuple[str, str], bytes] = {}

    async def upload(self, bucket: str, path: str, data: bytes, content_type: str | None = None) -> str:
        if (bucket, path) in self.objects:
            raise ValueError(f"Object {bucket}/{path} already exists")
        self.objects[(bucket, path)] = data
        return await self.get_public_url(bucket, path)

    async def remove(self, bucket: str, paths: list[str]) -> None:
        for path in paths:
            self.objects.pop((bucket, path), None)

    async def get_public_url(self, bucket: str, path: str) -> str:
        return f"{self.base_url}/{bucket}/{path}"
