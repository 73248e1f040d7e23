"""Custom errors with tracking IDs."""

from utils.timestamp import format_timestamp
from utils.ksuid import generate_ksuid


class BaseSimError(Exception):
    """Base error with unique ID and timestamp for tracking."""

    def __init__(self, message, context=None, cause=None):
        super().__init__(message)
        self.error_id = generate_ksuid()
        self.timestamp = format_timestamp()
        self.context = context or {}
        self.cause = cause

    def __str__(self):
        return f"[{self.error_id}] {super().__str__()}"

    def to_dict(self):
        return {"error_id": self.error_id,
                "timestamp": self.timestamp,
                "type": type(self).__name__,
                "msg": self.args[0] if self.args else "",
                "context": self.context}


class ConfigurationError(BaseSimError, ValueError):
    """Malformed particle configuration or run parameters."""

    def __init__(self, message, position=None, **kwargs):
        context = kwargs.pop("context", {})
        if position is not None:
            context["position"] = position
        super().__init__(message, context=context, **kwargs)


class SnapshotMismatchError(BaseSimError, ValueError):
    """Two snapshots of different length were compared."""

    def __init__(self, left, right, **kwargs):
        super().__init__(f"cannot compare snapshots of {left} and {right} particles",
                         context={"left": left, "right": right}, **kwargs)


class SessionError(BaseSimError):
    """Session control failures (already running, nothing to reverse)."""

    def __init__(self, message, state=None, **kwargs):
        context = kwargs.pop("context", {})
        if state:
            context["state"] = state
        super().__init__(message, context=context, **kwargs)
