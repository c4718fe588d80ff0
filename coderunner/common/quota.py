from __future__ import annotations

from typing import Iterable, Optional

SOURCE_MAX_BYTES = 128 * 1024
STDIN_MAX_BYTES = 32 * 1024


class QuotaError(ValueError):
    pass


def _check(label: str, text: Optional[str], limit: int) -> None:
    if text and len(text.encode()) > limit:
        raise QuotaError(f"payload_too_large: {label} exceeds {limit // 1024}KiB limit")


def enforce_source_stdin(source: str, stdin: str | None):
    _check("source_code", source, SOURCE_MAX_BYTES)
    _check("stdin", stdin, STDIN_MAX_BYTES)


def enforce_testcases(source: str, testcases: Iterable[str]):
    _check("source_code", source, SOURCE_MAX_BYTES)
    for idx, stdin in enumerate(testcases):
        _check(f"testcases[{idx}]", stdin, STDIN_MAX_BYTES)


__all__ = ["enforce_source_stdin", "enforce_testcases", "QuotaError"]
