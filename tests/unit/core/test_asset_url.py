"""Unit tests for object key derivation from asset URLs."""

from __future__ import annotations

import pytest

from core.asset_url import derive_object_key, is_asset_url


def test_derive_object_key_drops_version_and_extension() -> None:
    """Key should omit the version segment and the file extension."""
    url = "https://res.cloudinary.com/demo/image/upload/v1234/trk-inventory/barang/a.jpg"

    assert derive_object_key(url) == "trk-inventory/barang/a"


def test_derive_object_key_without_version_segment() -> None:
    """URLs without a version segment should keep every folder."""
    url = "https://res.cloudinary.com/demo/image/upload/trk-inventory/barang/pump.png"

    assert derive_object_key(url) == "trk-inventory/barang/pump"


def test_derive_object_key_keeps_version_like_folder_names() -> None:
    """Only segments of the form v<digits> should be dropped."""
    url = "https://res.cloudinary.com/demo/image/upload/v9/videos/v2beta/clip.mp4"

    assert derive_object_key(url) == "videos/v2beta/clip"


def test_derive_object_key_strips_only_last_extension() -> None:
    """Dots in folder names and inner dots in the file name should survive."""
    url = "https://res.cloudinary.com/demo/image/upload/v1/folder.v1/pump.front.webp"

    assert derive_object_key(url) == "folder.v1/pump.front"


def test_derive_object_key_ignores_query_string() -> None:
    """Query and fragment should not leak into the key."""
    url = "https://res.cloudinary.com/demo/image/upload/v1/trk-inventory/barang/a.jpg?x=1#top"

    assert derive_object_key(url) == "trk-inventory/barang/a"


@pytest.mark.parametrize(
    "url",
    [
        "https://res.cloudinary.com/demo/image/fetch/trk-inventory/a.jpg",
        "https://cdn.example.com/image/upload/v1/trk-inventory/a.jpg",
        "https://res.cloudinary.com/demo/image/upload/v1/",
        "",
        None,
    ],
)
def test_derive_object_key_returns_none_for_foreign_urls(url) -> None:
    """URLs lacking storage structure should yield no key."""
    assert derive_object_key(url) is None


def test_is_asset_url_requires_scheme_and_host() -> None:
    """Only fully-qualified http(s) URLs should count as asset URLs."""
    assert is_asset_url("https://res.cloudinary.com/a.jpg") and not is_asset_url("a.jpg")
