"""
Quota / Availability Guard

Heuristic classification of store failures into a closed set of error kinds,
plus a counter of consecutive quota events that escalates the user-facing
message. Classification reads free-form codes and messages, so unknown
failures come back as UNCLASSIFIED and callers must propagate them.
"""

from enum import StrEnum
import time
from typing import Any, Callable, Optional

import attrs

from src.platform.exception.exceptions import (
    ConflictError,
    NotFoundError,
    ServiceUnavailableError,
)
from src.platform.logging.loguru_io import Logger


class ErrorKind(StrEnum):
    NOT_FOUND = 'not_found'
    CONFLICT = 'conflict'
    QUOTA_EXCEEDED = 'quota_exceeded'
    UNAVAILABLE = 'unavailable'
    UNCLASSIFIED = 'unclassified'


QUOTA_DEGRADED_MESSAGE = 'Service experiencing high usage. Some features may be limited.'
QUOTA_ESCALATED_MESSAGE = (
    'Service temporarily unavailable due to high usage. Please try again in a few minutes.'
)
UNAVAILABLE_MESSAGE = 'Service temporarily unavailable. Please check your internet connection.'
UNEXPECTED_MESSAGE = 'An unexpected error occurred. Please try again.'
WRITE_QUOTA_MESSAGE = (
    'Service temporarily unavailable due to quota limits. Please try again later.'
)
WRITE_UNAVAILABLE_MESSAGE = 'Service temporarily unavailable. Please try again later.'

_EXCEEDED_CODES = {'resource-exhausted'}
_EXCEEDED_PHRASES = ('quota', 'Resource exhausted', 'Quota exceeded')
_UNAVAILABLE_CODES = {'unavailable', 'permission-denied'}
_UNAVAILABLE_PHRASES = ('network', 'timeout')


@attrs.define
class QuotaState:
    count: int = 0
    window_start: Optional[float] = None


@attrs.frozen
class QuotaStatus:
    kind: ErrorKind
    is_exceeded: bool
    is_unavailable: bool
    message: str


def _code_of(error: BaseException) -> str:
    return str(getattr(error, 'code', '') or '')


def _message_of(error: BaseException) -> str:
    return str(getattr(error, 'message', '') or error)


def is_quota_exceeded(error: BaseException) -> bool:
    message = _message_of(error)
    return _code_of(error) in _EXCEEDED_CODES or any(
        phrase in message for phrase in _EXCEEDED_PHRASES
    )


def is_unavailable(error: BaseException) -> bool:
    message = _message_of(error)
    return _code_of(error) in _UNAVAILABLE_CODES or any(
        phrase in message for phrase in _UNAVAILABLE_PHRASES
    )


class QuotaGuard:
    def __init__(
        self,
        *,
        state: Optional[QuotaState] = None,
        max_quota_errors: int = 3,
        reset_interval_seconds: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
        on_status: Optional[Callable[[QuotaStatus], None]] = None,
    ) -> None:
        self.state = state if state is not None else QuotaState()
        self.max_quota_errors = max_quota_errors
        self.reset_interval_seconds = reset_interval_seconds
        self._clock = clock
        self._on_status = on_status

    def tick(self, now: Optional[float] = None) -> bool:
        """Reset the counter once the cool-down window has elapsed. Returns True on reset."""
        if self.state.window_start is None:
            return False
        now = self._clock() if now is None else now
        if now - self.state.window_start < self.reset_interval_seconds:
            return False
        Logger.base.info(f'🔄 [QUOTA] Resetting quota counter after {self.state.count} events')
        self.state.count = 0
        self.state.window_start = None
        return True

    def check_quota_status(self, error: BaseException) -> QuotaStatus:
        now = self._clock()
        self.tick(now)

        exceeded = is_quota_exceeded(error)
        unavailable = is_unavailable(error)
        if exceeded:
            if self.state.window_start is None:
                self.state.window_start = now
            self.state.count += 1

        status = QuotaStatus(
            kind=self.classify(error),
            is_exceeded=exceeded,
            is_unavailable=unavailable,
            message=self._message(exceeded=exceeded, unavailable=unavailable),
        )
        if self._on_status is not None:
            self._on_status(status)
        return status

    def _message(self, *, exceeded: bool, unavailable: bool) -> str:
        if exceeded:
            if self.state.count >= self.max_quota_errors:
                return QUOTA_ESCALATED_MESSAGE
            return QUOTA_DEGRADED_MESSAGE
        if unavailable:
            return UNAVAILABLE_MESSAGE
        return UNEXPECTED_MESSAGE

    @staticmethod
    def classify(error: BaseException) -> ErrorKind:
        if isinstance(error, NotFoundError) or _code_of(error) == 'not-found':
            return ErrorKind.NOT_FOUND
        if isinstance(error, ConflictError):
            return ErrorKind.CONFLICT
        if is_quota_exceeded(error):
            return ErrorKind.QUOTA_EXCEEDED
        if is_unavailable(error):
            return ErrorKind.UNAVAILABLE
        return ErrorKind.UNCLASSIFIED

    def should_use_fallback(self, error: BaseException) -> bool:
        status = self.check_quota_status(error)
        return status.is_exceeded or status.is_unavailable

    def get_debug_info(self) -> dict[str, Any]:
        return {
            'quota_exceeded_count': self.state.count,
            'max_quota_errors': self.max_quota_errors,
            'window_start': self.state.window_start,
        }

    def write_error_for(
        self, error: BaseException, *, action: str
    ) -> Optional[ServiceUnavailableError]:
        """
        Translate a failed write into the fixed 'try again later' error.

        Returns None for unclassified failures, which the caller re-raises as is.
        """
        status = self.check_quota_status(error)
        if status.is_exceeded:
            Logger.base.warning(f'⚠️ [QUOTA] Store quota exceeded. Cannot {action}.')
            return ServiceUnavailableError(WRITE_QUOTA_MESSAGE)
        if status.is_unavailable:
            Logger.base.warning(f'⚠️ [QUOTA] Store access denied or unavailable. Cannot {action}.')
            return ServiceUnavailableError(WRITE_UNAVAILABLE_MESSAGE)
        return None
