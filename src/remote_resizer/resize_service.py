"""
リモートリサイズサービスのクライアント

POST {base_url}/upload へ multipart で画像と対象一覧を送り、
変換結果の画像参照（data URI など）を受け取る。
"""
from __future__ import annotations

import json
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Protocol

import httpx
from loguru import logger

from .errors import (
    SubmissionMalformedReply,
    SubmissionServiceFailure,
    SubmissionTransportFailure,
)
from .request_validator import ResizeRequest

DEFAULT_BASE_URL = "http://127.0.0.1:8000"
DEFAULT_TIMEOUT = 60.0
UPLOAD_PATH = "/upload"


@dataclass(frozen=True)
class ImageRef:
    """取得可能な画像への参照と保存時の推奨ファイル名"""
    uri: str
    filename: str


@dataclass(frozen=True)
class ResultSet:
    """送信1回分の結果（元画像 + 対象ごとの画像）"""
    original: ImageRef
    variants: Mapping[str, ImageRef]

    def __post_init__(self) -> None:
        object.__setattr__(self, "variants", MappingProxyType(dict(self.variants)))

    @classmethod
    def from_reply(cls, payload: Any) -> "ResultSet":
        """サービス応答のJSONを解釈する。形が違えば SubmissionMalformedReply。"""
        if not isinstance(payload, dict):
            raise SubmissionMalformedReply(f"reply is not an object: {type(payload).__name__}")

        original = payload.get("original")
        filename = payload.get("filename")
        resized = payload.get("resized")

        if not isinstance(original, str) or not original:
            raise SubmissionMalformedReply("reply.original is missing or not a string")
        if not isinstance(filename, str) or not filename:
            raise SubmissionMalformedReply("reply.filename is missing or not a string")
        if not isinstance(resized, dict):
            raise SubmissionMalformedReply("reply.resized is missing or not an object")

        variants: Dict[str, ImageRef] = {}
        for label, uri in resized.items():
            if not isinstance(uri, str):
                raise SubmissionMalformedReply(f"reply.resized[{label!r}] is not a string")
            variants[str(label)] = ImageRef(uri=uri, filename=f"{label}-{filename}")

        return cls(original=ImageRef(uri=original, filename=filename), variants=variants)


class RemoteResizeService(Protocol):
    async def resize(self, request: ResizeRequest) -> ResultSet:
        ...


def build_form_fields(request: ResizeRequest) -> Dict[str, str]:
    """multipart のテキスト項目を作る。空の一覧は送らない。"""
    fields = {"format": request.format_mime_type}

    preset_names = request.targets.preset_names()
    if preset_names:
        fields["sizes"] = json.dumps(preset_names)

    custom_sizes = request.targets.custom_size_dicts()
    if custom_sizes:
        fields["customSizes"] = json.dumps(custom_sizes)

    return fields


class HttpResizeService:
    """httpx でリモートサービスへ送信する実装"""

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = client

    @property
    def upload_url(self) -> str:
        return f"{self.base_url}{UPLOAD_PATH}"

    async def resize(self, request: ResizeRequest) -> ResultSet:
        fields = build_form_fields(request)
        files = {"file": (request.file.name, request.file.data, request.file.content_type)}
        logger.info(
            f"Uploading {request.file.name} to {self.upload_url} "
            f"(format={fields['format']}, targets={len(request.targets)})"
        )

        try:
            if self._client is not None:
                response = await self._client.post(self.upload_url, data=fields, files=files)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.post(self.upload_url, data=fields, files=files)
        except httpx.HTTPError as exc:
            raise SubmissionTransportFailure(f"{type(exc).__name__}: {exc}") from exc

        if not response.is_success:
            raise SubmissionServiceFailure(response.status_code, response.text)

        try:
            payload = response.json()
        except ValueError as exc:
            raise SubmissionMalformedReply(f"reply is not JSON: {exc}") from exc

        result = ResultSet.from_reply(payload)
        logger.info(f"Received {len(result.variants)} variants for {request.file.name}")
        return result

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
