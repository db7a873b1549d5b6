"""Errors raised by the relay and the custom endpoints.

Every error carries the HTTP status the caller should see. ``context`` names
the workflow that failed and is prefixed to the message when set.
"""
from typing import Any, Dict, Optional


class ProxyError(Exception):
    status_code = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.context: Optional[str] = None

    def __str__(self) -> str:
        if self.context:
            return f"{self.context}: {self.message}"
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        return {"message": str(self)}


class ValidationError(ProxyError):
    """A required field is missing or malformed."""

    status_code = 400


class InvalidCredentialKind(ProxyError):
    status_code = 400

    def __init__(self, kind: Any):
        super().__init__(f"Invalid tokenKey specified: {kind!r}")
        self.kind = kind


class UpstreamUnreachable(ProxyError):
    """Network failure or timeout talking to an upstream API."""

    status_code = 500


class UpstreamError(ProxyError):
    """An upstream API answered with a non-success status."""

    status_code = 500

    def __init__(self, message: str, upstream_status: Optional[int] = None, upstream_body: Optional[str] = None):
        if upstream_status is not None:
            message = f"{message} ({upstream_status})"
            if upstream_body:
                message = f"{message}: {upstream_body}"
        super().__init__(message)
        self.upstream_status = upstream_status
        self.upstream_body = upstream_body

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        if self.upstream_status is not None:
            data["upstreamStatus"] = self.upstream_status
        return data


class SchemaFetchError(UpstreamError):
    pass


class TimerStartError(UpstreamError):
    pass


class WorkflowError(ProxyError):
    """A multi-step custom endpoint could not complete."""

    status_code = 500


class KpiQueryError(WorkflowError):
    def __init__(self, message: str, upstream_status: Optional[int] = None):
        if upstream_status is not None:
            message = f"{message} ({upstream_status})"
        super().__init__(message)
        self.upstream_status = upstream_status
