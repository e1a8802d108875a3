from __future__ import annotations

from pathlib import Path

import httpx
import pytest

from remote_resizer.downloads import (
    build_unique_path,
    decode_data_uri,
    fetch_image_bytes,
    sanitize_filename,
    save_image_ref,
)
from remote_resizer.errors import DownloadError
from remote_resizer.resize_service import ImageRef

from conftest import make_data_uri


def test_decode_data_uri_base64(png_bytes: bytes) -> None:
    media_type, payload = decode_data_uri(make_data_uri(png_bytes))
    assert media_type == "image/png"
    assert payload == png_bytes


def test_decode_data_uri_percent_encoded() -> None:
    assert decode_data_uri("data:,a%20b") == ("text/plain", b"a b")


@pytest.mark.parametrize("uri", ["data:image/png;base64", "data:image/png;base64,@@@", "https://x"])
def test_decode_data_uri_rejects_invalid(uri: str) -> None:
    with pytest.raises(DownloadError):
        decode_data_uri(uri)


def test_sanitize_filename() -> None:
    assert sanitize_filename("thumbnail-photo.png") == "thumbnail-photo.png"
    assert sanitize_filename("../../etc/passwd") == "passwd"
    assert sanitize_filename("C:\\temp\\a:b.png") == "a_b.png"
    assert sanitize_filename("...") == "image"
    long_name = sanitize_filename("a" * 300 + ".png")
    assert long_name.endswith(".png")
    assert len(long_name) < 130


def test_build_unique_path_never_overwrites(tmp_path: Path) -> None:
    (tmp_path / "a.png").write_bytes(b"1")
    (tmp_path / "a_1.png").write_bytes(b"2")

    assert build_unique_path(tmp_path, "a.png") == tmp_path / "a_2.png"
    assert build_unique_path(tmp_path, "b.png") == tmp_path / "b.png"


@pytest.mark.asyncio
async def test_save_image_ref_does_not_overwrite(tmp_path: Path, png_bytes: bytes) -> None:
    existing = tmp_path / "photo.png"
    existing.write_bytes(b"keep")
    ref = ImageRef(uri=make_data_uri(png_bytes), filename="photo.png")

    saved = await save_image_ref(ref, tmp_path)

    assert saved == tmp_path / "photo_1.png"
    assert saved.read_bytes() == png_bytes
    assert existing.read_bytes() == b"keep"
    assert not list(tmp_path.glob(".*.tmp"))


@pytest.mark.asyncio
async def test_fetch_http_reference(png_bytes: bytes) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert str(request.url) == "https://cdn.test/medium.png"
        return httpx.Response(200, content=png_bytes)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        assert await fetch_image_bytes("https://cdn.test/medium.png", client=client) == png_bytes


@pytest.mark.asyncio
async def test_fetch_http_error_is_download_error() -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(404))

    async with httpx.AsyncClient(transport=transport) as client:
        with pytest.raises(DownloadError):
            await fetch_image_bytes("https://cdn.test/missing.png", client=client)


@pytest.mark.asyncio
async def test_unsupported_scheme_is_download_error() -> None:
    with pytest.raises(DownloadError):
        await fetch_image_bytes("file:///etc/passwd")
