"""
pytest設定ファイル
共通のフィクスチャやテスト設定を定義
"""

from __future__ import annotations

import asyncio
import base64
import io
from pathlib import Path
from typing import List, Optional

import pytest
from loguru import logger
from PIL import Image

from remote_resizer.request_validator import ResizeRequest
from remote_resizer.resize_service import ResultSet
from remote_resizer.selection_store import SelectedFile
from remote_resizer.targets import TargetSet


def make_png_bytes(size=(32, 24), color=(255, 0, 0)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color=color).save(buffer, "PNG")
    return buffer.getvalue()


def make_data_uri(payload: bytes, media_type: str = "image/png") -> str:
    return f"data:{media_type};base64,{base64.b64encode(payload).decode('ascii')}"


def make_reply(labels, filename: str = "photo.png") -> dict:
    uri = make_data_uri(make_png_bytes())
    return {
        "original": uri,
        "filename": filename,
        "resized": {label: uri for label in labels},
    }


class FakeResizeService:
    """呼び出しを記録し、release() されるまで応答を保留するサービス"""

    def __init__(self, reply: Optional[dict] = None, error: Optional[BaseException] = None) -> None:
        self.reply = reply
        self.error = error
        self.calls: List[ResizeRequest] = []
        self._gate = asyncio.Event()

    def release(self) -> None:
        self._gate.set()

    async def resize(self, request: ResizeRequest) -> ResultSet:
        self.calls.append(request)
        await self._gate.wait()
        if self.error is not None:
            raise self.error
        labels = [t.label for t in request.targets]
        return ResultSet.from_reply(self.reply or make_reply(labels))


@pytest.fixture
def png_bytes() -> bytes:
    return make_png_bytes()


@pytest.fixture
def sample_png(tmp_path: Path) -> Path:
    path = tmp_path / "photo.png"
    path.write_bytes(make_png_bytes((64, 48)))
    return path


@pytest.fixture
def sample_jpeg(tmp_path: Path) -> Path:
    path = tmp_path / "photo.jpg"
    Image.new("RGB", (64, 48), color=(0, 0, 255)).save(path, "JPEG", quality=90)
    return path


@pytest.fixture
def selected_png(png_bytes: bytes) -> SelectedFile:
    return SelectedFile(name="photo.png", data=png_bytes, content_type="image/png")


@pytest.fixture
def resize_request(selected_png: SelectedFile) -> ResizeRequest:
    return ResizeRequest(
        file=selected_png,
        output_format="png",
        targets=TargetSet.build(["thumbnail", "medium"], []),
    )


@pytest.fixture
def log_messages():
    """loguru の出力を文字列のリストとして集める"""
    messages: List[str] = []
    handler_id = logger.add(lambda message: messages.append(str(message)), level="DEBUG", format="{level} {message}")
    yield messages
    logger.remove(handler_id)
