"""Feature gating for report entry points."""

from __future__ import annotations

import functools
import logging
from collections.abc import Callable
from typing import Any, Protocol, TypeVar

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


class EmptyReport(Protocol):
    @classmethod
    def empty(cls) -> Any: ...


def requires_feature(report_type: type[EmptyReport]) -> Callable[[F], F]:
    """
    Return `report_type.empty()` instead of running a report when the
    owning object's `feature_available()` is False.

    Gated calls neither raise nor touch the store, whatever their arguments.

    Example:
        class ConversionAnalytics:
            @requires_feature(FunnelReport)
            def conversion_funnel(self, date_range, source_type=None):
                ...
    """

    def decorator(method: F) -> F:
        @functools.wraps(method)
        def wrapper(self, *args: Any, **kwargs: Any) -> Any:
            if not self.feature_available():
                logger.info(f"Analytics unavailable, {method.__name__} returns an empty report")
                return report_type.empty()
            return method(self, *args, **kwargs)

        return wrapper  # type: ignore[return-value]

    return decorator
