from .codec import EncodingMode, PayloadCodec, decode_field
from .errors import (
    DecodeError,
    Judge0Error,
    RemoteError,
    RemoteUnavailable,
    SubmissionNotFound,
    SubmissionTimeout,
)
from .schemas import SubmissionRequest, SubmissionResult, SubmissionStatus, TestcaseOutcome
from .service import Judge0Service
from .batch import run_batch

__all__ = [
    "EncodingMode",
    "PayloadCodec",
    "decode_field",
    "DecodeError",
    "Judge0Error",
    "RemoteError",
    "RemoteUnavailable",
    "SubmissionNotFound",
    "SubmissionTimeout",
    "SubmissionRequest",
    "SubmissionResult",
    "SubmissionStatus",
    "TestcaseOutcome",
    "Judge0Service",
    "run_batch",
]
