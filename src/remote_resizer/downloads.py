"""Saving result image references (data URI / http URL) to local files."""

from __future__ import annotations

import base64
import binascii
import hashlib
import re
from pathlib import Path
from typing import Optional, Tuple
from urllib.parse import unquote_to_bytes

import httpx
from loguru import logger

from .errors import DownloadError
from .resize_service import ImageRef

_INVALID_FILENAME_CHARS = re.compile(r'[\\/:*?"<>|]+')


def sanitize_filename(name: str) -> str:
    """Reduce a suggested name to a safe basename."""
    basename = re.split(r"[\\/]", str(name))[-1]
    safe = _INVALID_FILENAME_CHARS.sub("_", basename).strip(" .")
    if not safe:
        safe = "image"
    if len(safe) > 120:
        stem, dot, suffix = safe.rpartition(".")
        digest = hashlib.sha1(safe.encode("utf-8")).hexdigest()[:8]
        if dot and len(suffix) <= 8:
            safe = f"{stem[:100]}_{digest}.{suffix}"
        else:
            safe = f"{safe[:100]}_{digest}"
    return safe


def build_unique_path(directory: Path, filename: str) -> Path:
    """Never overwrite: append _1, _2, ... to the stem until the name is free."""
    candidate = directory / filename
    stem = candidate.stem
    suffix = candidate.suffix
    index = 1
    while candidate.exists():
        candidate = directory / f"{stem}_{index}{suffix}"
        index += 1
    return candidate


def decode_data_uri(uri: str) -> Tuple[str, bytes]:
    """Return (media type, payload) of a data: URI."""
    if not uri.startswith("data:"):
        raise DownloadError("not a data URI")
    header, sep, data = uri[5:].partition(",")
    if not sep:
        raise DownloadError("data URI has no payload separator")

    params = header.split(";")
    media_type = params[0] or "text/plain"
    if "base64" in params[1:]:
        try:
            payload = base64.b64decode(data, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise DownloadError(f"invalid base64 payload: {exc}") from exc
    else:
        payload = unquote_to_bytes(data)
    return media_type, payload


async def fetch_image_bytes(uri: str, *, client: Optional[httpx.AsyncClient] = None, timeout: float = 60.0) -> bytes:
    if uri.startswith("data:"):
        return decode_data_uri(uri)[1]

    if not uri.startswith(("http://", "https://")):
        raise DownloadError(f"unsupported image reference: {uri[:32]}")

    try:
        if client is not None:
            response = await client.get(uri)
        else:
            async with httpx.AsyncClient(timeout=timeout) as own_client:
                response = await own_client.get(uri)
        response.raise_for_status()
    except httpx.HTTPError as exc:
        raise DownloadError(f"failed to fetch {uri}: {exc}") from exc
    return response.content


async def save_image_ref(
    ref: ImageRef,
    destination_dir: Path,
    *,
    client: Optional[httpx.AsyncClient] = None,
) -> Path:
    """Write the referenced image into destination_dir and return the path."""
    payload = await fetch_image_bytes(ref.uri, client=client)

    try:
        destination_dir.mkdir(parents=True, exist_ok=True)
        target = build_unique_path(destination_dir, sanitize_filename(ref.filename))
        tmp_path = target.with_name(f".{target.name}.tmp")
        tmp_path.write_bytes(payload)
        tmp_path.replace(target)
    except OSError as exc:
        raise DownloadError(f"failed to write {ref.filename}: {exc}") from exc

    logger.info(f"Saved {ref.filename} -> {target} ({len(payload)} bytes)")
    return target
