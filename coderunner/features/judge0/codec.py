"""Encoding of Judge0 payloads.

Judge0 does not say whether the text fields of a submission record are base64
or plain text (it depends on the ``base64_encoded`` flag, the server version and
whether the output was valid UTF-8). Outbound text follows one configured
policy. Inbound text is classified with a printability heuristic and falls back
to passing the wire text through unchanged.
"""

from __future__ import annotations

import base64
import binascii
import logging
import re
from enum import Enum
from typing import Any, Mapping, Optional

from pydantic import ValidationError

from .errors import DecodeError
from .schemas import SubmissionResult, describe_status

logger = logging.getLogger(__name__)

TEXT_FIELDS = ("stdout", "stderr", "compile_output", "message")

_BASE64_SHAPE = re.compile(r"[A-Za-z0-9+/]+={0,2}")
_WRAP_WIDTH = 60
_MIN_BASE64_LENGTH = 10
_PRINTABLE_RATIO = 0.9


class EncodingMode(str, Enum):
    BASE64 = "base64"
    PLAIN = "plain"


def _unwrap(text: str) -> Optional[str]:
    """Strip Judge0's MIME line wrapping, or return None if ``text`` is not wrapped that way.

    Judge0 emits base64 in 60-column lines with a trailing newline. Every line
    but the last must be exactly 60 characters; a break anywhere else means the
    text is plain output that happens to use the base64 alphabet.
    """
    body = text[:-1] if text.endswith("\n") else text
    lines = body.split("\n")
    if any(len(line) != _WRAP_WIDTH for line in lines[:-1]):
        return None
    return "".join(lines)


def looks_like_base64(text: str) -> bool:
    compact = _unwrap(text)
    return (
        compact is not None
        and len(compact) > _MIN_BASE64_LENGTH
        and len(compact) % 4 == 0
        and _BASE64_SHAPE.fullmatch(compact) is not None
    )


def _is_control(ch: str) -> bool:
    # C0, DEL and C1 controls; tab and line breaks count as text
    if ch in "\t\n\r":
        return False
    code = ord(ch)
    return code < 32 or 127 <= code <= 159


def printable_ratio(text: str) -> float:
    if not text:
        return 0.0
    return sum(1 for ch in text if not _is_control(ch)) / len(text)


def decode_field(wire: Optional[str]) -> Optional[str]:
    """Decode one text field of a submission record.

    Returns None for absent/empty values, the decoded text when the value is
    base64 of readable UTF-8, and the value itself otherwise. Never raises.
    """
    if not wire:
        return None
    if not isinstance(wire, str):
        return str(wire)
    if not looks_like_base64(wire):
        return wire
    try:
        text = base64.b64decode(_unwrap(wire), validate=True).decode("utf-8")
    except (binascii.Error, ValueError):
        # UnicodeDecodeError is a ValueError
        return wire
    if printable_ratio(text) <= _PRINTABLE_RATIO:
        return wire
    return text


def _extract_status(raw: Mapping[str, Any]) -> dict:
    status = raw.get("status")
    if isinstance(status, Mapping):
        status_id = status.get("id")
        description = status.get("description")
    elif status is None:
        status_id = raw.get("status_id")
        description = raw.get("status_description")
    else:
        raise DecodeError(f"Unexpected status value in submission record: {status!r}")
    if status_id is None:
        raise DecodeError("Submission record has no status id")
    try:
        status_id = int(status_id)
    except (TypeError, ValueError) as exc:
        raise DecodeError(f"Invalid status id {status_id!r}") from exc
    return {"id": status_id, "description": description or describe_status(status_id)}


class PayloadCodec:
    """Applies the outbound encoding policy and decodes inbound records."""

    def __init__(self, mode: EncodingMode | str = EncodingMode.BASE64) -> None:
        try:
            self.mode = EncodingMode(mode)
        except ValueError as exc:
            raise ValueError(f"Unsupported Judge0 encoding mode: {mode!r}") from exc

    @property
    def base64_encoded(self) -> bool:
        return self.mode is EncodingMode.BASE64

    def encode_outbound(self, text: Optional[str]) -> Optional[str]:
        if text is None:
            return None
        if self.mode is EncodingMode.BASE64:
            return base64.b64encode(text.encode("utf-8")).decode("ascii")
        return text

    def decode_field(self, wire: Optional[str]) -> Optional[str]:
        return decode_field(wire)

    def decode_submission(self, raw: Any) -> SubmissionResult:
        if not isinstance(raw, Mapping):
            raise DecodeError(f"Submission record must be an object, got {type(raw).__name__}")
        fields = {name: decode_field(raw.get(name)) for name in TEXT_FIELDS}
        try:
            return SubmissionResult(
                token=raw.get("token"),
                status=_extract_status(raw),
                exit_code=raw.get("exit_code"),
                time=raw.get("time"),
                memory=raw.get("memory"),
                **fields,
            )
        except ValidationError as exc:
            logger.debug("Rejected submission record: %s", exc)
            raise DecodeError(f"Malformed submission record: {exc.error_count()} invalid field(s)") from exc
