from __future__ import annotations

from typing import Any


class AnalyticsInputError(ValueError):
    """Raised when an analytics builder is handed input it cannot interpret.

    The whole call is rejected; builders never drop individual bad entries.
    """

    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field


def analytics_error_http_status(exc: AnalyticsInputError) -> int:
    return 400


def analytics_error_detail(*, view: str, exc: AnalyticsInputError) -> dict[str, Any]:
    return {
        "type": "invalid_analytics_input",
        "view": view,
        "field": exc.field,
        "message": str(exc),
    }
