from __future__ import annotations

from typing import Optional


class Judge0Error(Exception):
    """Base class for failures talking to the remote execution service."""


class RemoteUnavailable(Judge0Error):
    """The HTTP call could not be completed (connect failure, timeout, no base URL)."""


class RemoteError(Judge0Error):
    """Judge0 answered with a non-success status code."""

    def __init__(self, status_code: int, body: str = "", message: Optional[str] = None) -> None:
        self.status_code = status_code
        self.body = body[:300]
        super().__init__(message or f"Judge0 responded {status_code}: {self.body}")

    @property
    def transient(self) -> bool:
        return self.status_code >= 500 or self.status_code == 429


class SubmissionNotFound(RemoteError):
    def __init__(self, token: str, body: str = "") -> None:
        self.token = token
        super().__init__(404, body, f"Submission {token} not found")


class SubmissionTimeout(Judge0Error):
    """Client gave up polling; this is not a verdict from the judge."""

    def __init__(self, token: str, attempts: int) -> None:
        self.token = token
        self.attempts = attempts
        super().__init__(f"Submission {token} still running after {attempts} polls")


class DecodeError(Judge0Error):
    """Judge0 returned a record that does not have the expected structure."""


__all__ = [
    "Judge0Error",
    "RemoteUnavailable",
    "RemoteError",
    "SubmissionNotFound",
    "SubmissionTimeout",
    "DecodeError",
]
