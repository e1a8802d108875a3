"""リモートリサイズで扱う例外と検証失敗の定義。"""

from __future__ import annotations

from enum import Enum
from typing import Optional

GENERIC_SUBMISSION_MESSAGE = "Upload failed. Check the log for details."


class RemoteResizerError(Exception):
    """このパッケージが送出する例外の基底クラス"""


class UnsupportedImageError(RemoteResizerError):
    """選択されたファイルが画像として認識できない"""


class SubmissionFailure(RemoteResizerError):
    """送信失敗の基底クラス。メッセージは診断ログ専用。"""

    kind = "submission"


class SubmissionTransportFailure(SubmissionFailure):
    """サービスへ到達できなかった（接続・タイムアウトなど）"""

    kind = "transport"


class SubmissionServiceFailure(SubmissionFailure):
    """サービスは応答したが成功ステータスではなかった"""

    kind = "service"

    def __init__(self, status_code: int, body: str = "") -> None:
        super().__init__(f"service returned HTTP {status_code}: {body}")
        self.status_code = status_code
        self.body = body


class SubmissionMalformedReply(SubmissionFailure):
    """成功ステータスだが応答の形が想定と異なる"""

    kind = "malformed"


class DownloadError(RemoteResizerError):
    """画像参照の保存に失敗した"""


class ValidationFailure(Enum):
    """送信前の検証で検出される失敗"""

    NO_FILE_SELECTED = "NoFileSelected"
    NO_TARGETS_SPECIFIED = "NoTargetsSpecified"

    @property
    def message(self) -> str:
        return _VALIDATION_MESSAGES[self]


_VALIDATION_MESSAGES = {
    ValidationFailure.NO_FILE_SELECTED: "Please upload an image.",
    ValidationFailure.NO_TARGETS_SPECIFIED: "Please select a preset or add a custom size.",
}


def describe_failure(error: Optional[BaseException]) -> str:
    """ログ出力用に例外の種類と内容をまとめる。"""
    if error is None:
        return "unknown error"
    kind = getattr(error, "kind", type(error).__name__)
    return f"[{kind}] {type(error).__name__}: {error}"
