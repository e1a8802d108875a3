"""Remote Resizer: リモートサービスで1枚の画像を複数サイズへ変換するクライアント。"""

from .errors import (
    DownloadError,
    RemoteResizerError,
    SubmissionFailure,
    SubmissionMalformedReply,
    SubmissionServiceFailure,
    SubmissionTransportFailure,
    UnsupportedImageError,
    ValidationFailure,
)
from .notifications import Notification, NotificationManager
from .request_validator import ResizeRequest, ValidationResult, validate
from .resize_service import HttpResizeService, ImageRef, ResultSet
from .selection_store import CustomSizeRow, SelectedFile, SelectionSnapshot, SelectionStore
from .session import ResizeSession
from .submission import SubmissionOrchestrator, SubmissionState
from .targets import CustomTarget, PresetTarget, TargetSet

__version__ = "0.1.0"

__all__ = [
    "CustomSizeRow",
    "CustomTarget",
    "DownloadError",
    "HttpResizeService",
    "ImageRef",
    "Notification",
    "NotificationManager",
    "PresetTarget",
    "RemoteResizerError",
    "ResizeRequest",
    "ResizeSession",
    "ResultSet",
    "SelectedFile",
    "SelectionSnapshot",
    "SelectionStore",
    "SubmissionFailure",
    "SubmissionMalformedReply",
    "SubmissionOrchestrator",
    "SubmissionServiceFailure",
    "SubmissionState",
    "SubmissionTransportFailure",
    "TargetSet",
    "UnsupportedImageError",
    "ValidationFailure",
    "ValidationResult",
    "validate",
]
