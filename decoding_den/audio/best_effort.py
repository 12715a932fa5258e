"""
Best Effort
===========
Audio adalah enhancement, bukan fitur wajib. Semua entry point
dibungkus supaya error di-log lalu jadi PlayResult.FAILED.
"""

import functools
import inspect
import logging
from enum import Enum
from typing import Any, Callable, Optional, TypeVar

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


class PlayResult(Enum):
    """Hasil dari satu trigger"""
    PLAYED = "played"    # Graph sudah dijadwalkan
    SILENT = "silent"    # Sengaja tidak bunyi (no backend, disabled, volume 0)
    FAILED = "failed"    # Error di-log dan ditelan

    def __bool__(self) -> bool:
        return self is PlayResult.PLAYED


def _coerce(result: Optional[PlayResult]) -> PlayResult:
    return PlayResult.PLAYED if result is None else result


def best_effort(label: str) -> Callable[[F], F]:
    """
    Decorator untuk sync atau async callable.
    Exception apapun di-log dengan traceback dan diubah jadi FAILED.
    Return None dianggap PLAYED.
    """

    def decorator(func: F) -> F:
        if inspect.iscoroutinefunction(func):
            @functools.wraps(func)
            async def async_wrapper(*args, **kwargs) -> PlayResult:
                try:
                    return _coerce(await func(*args, **kwargs))
                except Exception:
                    logger.exception("[Audio] Error playing %s", label)
                    return PlayResult.FAILED
            return async_wrapper  # type: ignore[return-value]

        @functools.wraps(func)
        def wrapper(*args, **kwargs) -> PlayResult:
            try:
                return _coerce(func(*args, **kwargs))
            except Exception:
                logger.exception("[Audio] Error playing %s", label)
                return PlayResult.FAILED
        return wrapper  # type: ignore[return-value]

    return decorator
