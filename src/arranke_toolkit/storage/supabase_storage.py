"""Supabase Storage implementation of 'ObjectStore'."""

from supabase import AsyncClient

from arranke_toolkit.storage.base import ObjectStore


class SupabaseObjectStore(ObjectStore):
    def __init__(self, client: AsyncClient) -> None:
        self.client = client

    async def upload(self, bucket: str, path: str, data: bytes, content_type: str | None = None) -> str:
        file_options = {"content-type": content_type} if content_type else None
        await self.client.storage.from_(bucket).upload(path, data, file_options)
        return await self.get_public_url(bucket, path)

    async def remove(self, bucket: str, paths: list[str]) -> None:
        await self.client.storage.from_(bucket).remove(paths)

    async def get_public_url(self, bucket: str, path: str) -> str:
        return await self.client.storage.from_(bucket).get_public_url(path)
