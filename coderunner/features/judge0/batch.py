from __future__ import annotations

import asyncio
import logging
from typing import List, Optional, Sequence

from .schemas import SubmissionRequest, SubmissionResult, TestcaseOutcome
from .service import Judge0Service, get_judge0_service

logger = logging.getLogger(__name__)


def _compute_passed(result: SubmissionResult) -> bool:
    # Accepted and silent on stderr; expected output is the caller's business
    return result.status.is_accepted and not result.stderr


def to_outcome(result: SubmissionResult, stdin: str) -> TestcaseOutcome:
    return TestcaseOutcome(
        **result.model_dump(),
        input=stdin,
        passed=_compute_passed(result),
    )


async def run_batch(
    request: SubmissionRequest,
    inputs: Sequence[str],
    *,
    service: Optional[Judge0Service] = None,
    concurrency: Optional[int] = None,
) -> List[TestcaseOutcome]:
    """Run ``request`` once per stdin value and return outcomes in input order.

    Items run concurrently up to ``concurrency``. The first failure cancels the
    remaining items and is raised as is; no partial results are returned.
    """
    if not inputs:
        return []
    service = service or get_judge0_service()
    limit = concurrency or service.settings.judge0_batch_concurrency
    semaphore = asyncio.Semaphore(max(1, min(limit, len(inputs))))

    async def _run_one(stdin: str) -> TestcaseOutcome:
        async with semaphore:
            result = await service.run_to_completion(request.model_copy(update={"stdin": stdin}))
            return to_outcome(result, stdin)

    tasks = [asyncio.ensure_future(_run_one(stdin)) for stdin in inputs]
    try:
        outcomes = await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise
    logger.info(
        "Batch finished: %d/%d testcases passed",
        sum(1 for o in outcomes if o.passed),
        len(outcomes),
    )
    return list(outcomes)
