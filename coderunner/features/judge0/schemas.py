from enum import IntEnum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class StatusCode(IntEnum):
    IN_QUEUE = 1
    PROCESSING = 2
    ACCEPTED = 3
    WRONG_ANSWER = 4
    TIME_LIMIT_EXCEEDED = 5
    COMPILATION_ERROR = 6
    RUNTIME_ERROR_SIGSEGV = 7
    RUNTIME_ERROR_SIGXFSZ = 8
    RUNTIME_ERROR_SIGFPE = 9
    RUNTIME_ERROR_SIGABRT = 10
    RUNTIME_ERROR_NZEC = 11
    RUNTIME_ERROR_OTHER = 12
    INTERNAL_ERROR = 13
    EXEC_FORMAT_ERROR = 14


STATUS_DESCRIPTIONS = {
    StatusCode.IN_QUEUE: "In Queue",
    StatusCode.PROCESSING: "Processing",
    StatusCode.ACCEPTED: "Accepted",
    StatusCode.WRONG_ANSWER: "Wrong Answer",
    StatusCode.TIME_LIMIT_EXCEEDED: "Time Limit Exceeded",
    StatusCode.COMPILATION_ERROR: "Compilation Error",
    StatusCode.RUNTIME_ERROR_SIGSEGV: "Runtime Error (SIGSEGV)",
    StatusCode.RUNTIME_ERROR_SIGXFSZ: "Runtime Error (SIGXFSZ)",
    StatusCode.RUNTIME_ERROR_SIGFPE: "Runtime Error (SIGFPE)",
    StatusCode.RUNTIME_ERROR_SIGABRT: "Runtime Error (SIGABRT)",
    StatusCode.RUNTIME_ERROR_NZEC: "Runtime Error (NZEC)",
    StatusCode.RUNTIME_ERROR_OTHER: "Runtime Error (Other)",
    StatusCode.INTERNAL_ERROR: "Internal Error",
    StatusCode.EXEC_FORMAT_ERROR: "Exec Format Error",
}


def describe_status(status_id: int) -> str:
    try:
        return STATUS_DESCRIPTIONS[StatusCode(status_id)]
    except ValueError:
        return "unknown"


class SubmissionRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    source_code: str
    language_id: int
    stdin: Optional[str] = None


class SubmissionToken(BaseModel):
    token: str


class SubmissionStatus(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    description: str = ""

    @property
    def is_terminal(self) -> bool:
        """Ordinals 1 and 2 mean the judge is still working on it."""
        return self.id >= StatusCode.ACCEPTED

    @property
    def is_accepted(self) -> bool:
        return self.id == StatusCode.ACCEPTED


class SubmissionResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    token: Optional[str] = None
    status: SubmissionStatus
    stdout: Optional[str] = None
    stderr: Optional[str] = None
    compile_output: Optional[str] = None
    message: Optional[str] = None
    exit_code: Optional[int] = None
    time: Optional[float] = None
    memory: Optional[int] = None


class TestcaseOutcome(SubmissionResult):
    __test__ = False

    input: str
    passed: bool


class RunTestcasesRequest(BaseModel):
    source_code: str
    language_id: int
    testcases: List[str]


class Judge0Status(BaseModel):
    id: int
    description: str
