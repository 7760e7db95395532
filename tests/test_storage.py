import pytest

from arranke_toolkit.storage.base import AVATARS_BUCKET, build_object_path, path_from_public_url
from arranke_toolkit.storage.in_memory import InMemoryObjectStore


def test_build_object_path_keeps_extension():
    path = build_object_path("user-1", "photo.final.JPG")

    assert path.startswith("user-1/")
    assert path.endswith(".JPG")


@pytest.mark.parametrize(
    "url, expected",
    [
        ("https://x.supabase.co/storage/v1/object/public/avatars/u1/abc.png", "u1/abc.png"),
        ("https://x.supabase.co/storage/v1/object/public/logos/u1/abc.png", None),
        ("https://x.supabase.co/storage/v1/object/public/avatars", None),
    ],
)
def test_path_from_public_url(url, expected):
    assert path_from_public_url(AVATARS_BUCKET, url) == expected


async def test_in_memory_store_round_trip():
    store = InMemoryObjectStore()

    url = await store.upload(AVATARS_BUCKET, "u1/a.png", b"data")
    assert path_from_public_url(AVATARS_BUCKET, url) == "u1/a.png"

    with pytest.raises(ValueError):
        await store.upload(AVATARS_BUCKET, "u1/a.png", b"again")

    await store.remove(AVATARS_BUCKET, ["u1/a.png"])
    assert store.objects == {}
