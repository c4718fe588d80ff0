from __future__ import annotations

import logging
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse

from coderunner.common.quota import QuotaError, enforce_source_stdin, enforce_testcases
from coderunner.features.judge0.batch import run_batch
from coderunner.features.judge0.errors import (
    DecodeError,
    Judge0Error,
    RemoteError,
    RemoteUnavailable,
    SubmissionNotFound,
    SubmissionTimeout,
)
from coderunner.features.judge0.schemas import (
    Judge0Status,
    RunTestcasesRequest,
    SubmissionRequest,
    SubmissionResult,
    SubmissionToken,
    TestcaseOutcome,
)
from coderunner.features.judge0.service import Judge0Service, get_judge0_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["code"])


def _http_error(exc: Exception) -> HTTPException:
    if isinstance(exc, QuotaError):
        return HTTPException(status_code=413, detail=str(exc))
    if isinstance(exc, SubmissionNotFound):
        return HTTPException(status_code=404, detail=str(exc))
    if isinstance(exc, SubmissionTimeout):
        return HTTPException(status_code=504, detail=str(exc))
    if isinstance(exc, RemoteUnavailable):
        return HTTPException(status_code=503, detail=str(exc))
    if isinstance(exc, (RemoteError, DecodeError)):
        return HTTPException(status_code=502, detail=str(exc))
    return HTTPException(status_code=500, detail=str(exc))


def _log_result(result: SubmissionResult) -> None:
    logger.info(
        "Judge0 result: status=%s stdout=%s stderr=%s compile_output=%s",
        result.status.description,
        result.stdout is not None,
        result.stderr is not None,
        result.compile_output is not None,
    )


@router.get("/health")
async def health_check(service: Judge0Service = Depends(get_judge0_service)):
    try:
        judge0 = await service.health_check()
    except Judge0Error as exc:
        return JSONResponse(
            status_code=503,
            content={"status": "unhealthy", "error": str(exc), "judge0_url": service.base_url},
        )
    return {"status": "healthy", "judge0": judge0, "judge0_url": service.base_url}


@router.get("/languages")
async def get_languages(service: Judge0Service = Depends(get_judge0_service)) -> List[Dict[str, Any]]:
    try:
        return await service.get_languages()
    except Judge0Error as exc:
        raise _http_error(exc) from exc


@router.get("/statuses", response_model=List[Judge0Status])
async def get_statuses(service: Judge0Service = Depends(get_judge0_service)):
    try:
        return await service.get_statuses()
    except Judge0Error as exc:
        raise _http_error(exc) from exc


@router.post("/run-sync", response_model=SubmissionResult)
async def run_sync(submission: SubmissionRequest, service: Judge0Service = Depends(get_judge0_service)):
    logger.info(
        "Run request: source_code_length=%d language_id=%s has_stdin=%s",
        len(submission.source_code),
        submission.language_id,
        bool(submission.stdin),
    )
    try:
        enforce_source_stdin(submission.source_code, submission.stdin)
        result = await service.run_submission(submission)
    except (QuotaError, Judge0Error) as exc:
        raise _http_error(exc) from exc
    _log_result(result)
    return result


@router.post("/create-submission", response_model=SubmissionToken)
async def create_submission(submission: SubmissionRequest, service: Judge0Service = Depends(get_judge0_service)):
    try:
        enforce_source_stdin(submission.source_code, submission.stdin)
        return await service.create_submission(submission, blocking=False)
    except (QuotaError, Judge0Error) as exc:
        raise _http_error(exc) from exc


@router.get("/submissions/{token}", response_model=SubmissionResult)
async def get_submission(token: str, service: Judge0Service = Depends(get_judge0_service)):
    try:
        return await service.fetch_submission(token)
    except Judge0Error as exc:
        raise _http_error(exc) from exc


@router.post("/run-testcases", response_model=List[TestcaseOutcome])
async def run_testcases(body: RunTestcasesRequest, service: Judge0Service = Depends(get_judge0_service)):
    try:
        enforce_testcases(body.source_code, body.testcases)
        request = SubmissionRequest(source_code=body.source_code, language_id=body.language_id)
        return await run_batch(request, body.testcases, service=service)
    except (QuotaError, Judge0Error) as exc:
        raise _http_error(exc) from exc
