"""
送信ライフサイクルの管理

Idle → Submitting → Succeeded / Failed の状態遷移を持ち、
同時に送信中のリクエストは常に1件以下に保つ。
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Callable, Literal, Optional

from loguru import logger

from .errors import GENERIC_SUBMISSION_MESSAGE, SubmissionFailure, describe_failure
from .observable import Observable
from .request_validator import ResizeRequest
from .resize_service import RemoteResizeService, ResultSet

SubmissionStatus = Literal["idle", "submitting", "succeeded", "failed"]


@dataclass(frozen=True)
class SubmissionState:
    status: SubmissionStatus = "idle"
    result: Optional[ResultSet] = None
    reason: Optional[str] = None
    # 診断用。表示層には reason のみ渡す
    cause: Optional[BaseException] = field(default=None, compare=False, repr=False)

    @classmethod
    def idle(cls) -> "SubmissionState":
        return cls()

    @classmethod
    def submitting(cls) -> "SubmissionState":
        return cls(status="submitting")

    @classmethod
    def succeeded(cls, result: ResultSet) -> "SubmissionState":
        return cls(status="succeeded", result=result)

    @classmethod
    def failed(cls, cause: BaseException, reason: str = GENERIC_SUBMISSION_MESSAGE) -> "SubmissionState":
        return cls(status="failed", reason=reason, cause=cause)

    @property
    def is_submitting(self) -> bool:
        return self.status == "submitting"

    @property
    def is_succeeded(self) -> bool:
        return self.status == "succeeded"

    @property
    def is_failed(self) -> bool:
        return self.status == "failed"


class SubmissionOrchestrator(Observable):
    """リモートサービスへの送信を1件ずつ実行する"""

    def __init__(
        self,
        service: RemoteResizeService,
        *,
        on_failure: Optional[Callable[[SubmissionState], None]] = None,
    ) -> None:
        super().__init__()
        self._service = service
        self._on_failure = on_failure
        self._state = SubmissionState.idle()
        self._task: Optional[asyncio.Task] = None

    @property
    def state(self) -> SubmissionState:
        return self._state

    @property
    def is_submitting(self) -> bool:
        return self._state.is_submitting

    def submit(self, request: ResizeRequest) -> Optional[asyncio.Task]:
        """送信を開始する。送信中なら何もせず None を返す。

        Submitting への遷移は非同期処理を始める前に同期的に行うため、
        完了前の2回目の呼び出しは確実に無視される。
        """
        if self._state.is_submitting:
            logger.debug("Submit ignored: a submission is already in flight")
            return None

        loop = asyncio.get_running_loop()
        self._set_state(SubmissionState.submitting())
        self._task = loop.create_task(self._run(request))
        return self._task

    async def wait(self) -> SubmissionState:
        """送信中のタスクがあれば完了を待つ。"""
        if self._task is not None:
            await self._task
        return self._state

    async def _run(self, request: ResizeRequest) -> None:
        try:
            result = await self._service.resize(request)
        except SubmissionFailure as exc:
            self._fail(exc)
            return
        except Exception as exc:
            logger.exception("Unexpected error from resize service")
            self._fail(exc)
            return

        state = SubmissionState.succeeded(result)
        self._set_state(state)
        logger.info(f"Submission succeeded: {', '.join(result.variants) or '(no variants)'}")

    def _fail(self, exc: BaseException) -> None:
        logger.error(f"Submission failed: {describe_failure(exc)}")
        state = SubmissionState.failed(exc)
        self._set_state(state)
        if self._on_failure is not None:
            self._on_failure(state)

    def _set_state(self, state: SubmissionState) -> None:
        logger.debug(f"Submission state: {self._state.status} -> {state.status}")
        self._state = state
        self._notify("state", state)
