"""Firebase Cloud Messaging delivery helper."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

import firebase_admin
from firebase_admin import credentials, exceptions, messaging

logger = logging.getLogger(__name__)

# send_each_for_multicast accepts at most this many tokens per call
MULTICAST_LIMIT = 500

_PERMANENT_ERRORS: tuple[type[Exception], ...] = (
    messaging.UnregisteredError,
    messaging.SenderIdMismatchError,
    exceptions.InvalidArgumentError,
)


class FCMClientError(RuntimeError):
    """Raised when the messaging backend cannot be reached or configured."""


@dataclass(frozen=True, slots=True)
class DeliveryResult:
    """Outcome of delivering one notification to one device token."""

    token: str
    success: bool
    error_code: str | None = None
    permanent: bool = False


def _error_code(exc: BaseException) -> str:
    code = getattr(exc, "code", None)
    return str(code) if code else type(exc).__name__


class FCMClient:
    """Send notifications through the Firebase Admin SDK.

    Without a credentials file the client stays unconfigured and reports
    every token as a transient failure instead of raising.
    """

    def __init__(
        self, credentials_path: str | None = None, *, app_name: str = "mediroutines"
    ) -> None:
        self._credentials_path = credentials_path
        self._app_name = app_name
        self._app: firebase_admin.App | None = None

    @property
    def configured(self) -> bool:
        return bool(self._credentials_path)

    def _get_app(self) -> firebase_admin.App:
        if self._app is not None:
            return self._app
        try:
            self._app = firebase_admin.get_app(self._app_name)
        except ValueError:
            try:
                cred = credentials.Certificate(self._credentials_path)
                self._app = firebase_admin.initialize_app(cred, name=self._app_name)
            except (ValueError, OSError) as exc:
                raise FCMClientError(f"Invalid Firebase credentials: {exc}") from exc
            logger.info("Firebase Admin initialized as %s", self._app_name)
        return self._app

    def _send_chunk(
        self,
        tokens: list[str],
        title: str,
        body: str,
        data: Mapping[str, str] | None,
    ) -> list[DeliveryResult]:
        message = messaging.MulticastMessage(
            tokens=tokens,
            notification=messaging.Notification(title=title, body=body),
            data=dict(data) if data else None,
        )
        try:
            response = messaging.send_each_for_multicast(message, app=self._get_app())
        except exceptions.FirebaseError as exc:
            raise FCMClientError(f"Firebase delivery failed: {exc}") from exc

        results: list[DeliveryResult] = []
        for token, item in zip(tokens, response.responses):
            if item.success:
                results.append(DeliveryResult(token=token, success=True))
                continue
            results.append(
                DeliveryResult(
                    token=token,
                    success=False,
                    error_code=_error_code(item.exception),
                    permanent=isinstance(item.exception, _PERMANENT_ERRORS),
                )
            )
        return results

    async def deliver(
        self,
        tokens: Sequence[str],
        title: str,
        body: str,
        data: Mapping[str, str] | None = None,
    ) -> list[DeliveryResult]:
        """Send one notification to each token; returns one result per token."""
        unique = list(dict.fromkeys(token for token in tokens if token))
        if not unique:
            return []
        if not self.configured:
            logger.warning("Firebase credentials not configured; skipping %d push(es)", len(unique))
            return [
                DeliveryResult(token=token, success=False, error_code="not-configured")
                for token in unique
            ]

        results: list[DeliveryResult] = []
        for start in range(0, len(unique), MULTICAST_LIMIT):
            chunk = unique[start : start + MULTICAST_LIMIT]
            try:
                results.extend(
                    await asyncio.to_thread(self._send_chunk, chunk, title, body, data)
                )
            except FCMClientError as exc:
                logger.warning("Push chunk of %d token(s) failed: %s", len(chunk), exc)
                code = _error_code(exc.__cause__) if exc.__cause__ else "send-failed"
                results.extend(
                    DeliveryResult(token=token, success=False, error_code=code)
                    for token in chunk
                )
        failed = sum(1 for result in results if not result.success)
        if failed:
            logger.warning("Push delivery failed for %d of %d token(s)", failed, len(results))
        return results
