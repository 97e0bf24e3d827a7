"""
core/alerts.py -- The single transient user-facing notification slot.

At most one Alert exists at a time; showing a new one replaces the old.
Remote failures end up here instead of propagating out of a workflow.
"""

from typing import Optional

from core.models import Alert, AlertType


class AlertBoard:
    def __init__(self) -> None:
        self.current: Optional[Alert] = None

    def show(self, type: AlertType, message: str) -> Alert:
        self.current = Alert(type=AlertType(type), message=message)
        return self.current

    def error(self, message: str) -> Alert:
        return self.show(AlertType.error, message)

    def dismiss(self) -> None:
        self.current = None

    def clear_errors(self) -> None:
        """Drop the current alert only if it reports an error."""
        if self.current is not None and self.current.type is AlertType.error:
            self.current = None
