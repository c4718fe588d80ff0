import httpx
import asyncio
import logging
from functools import lru_cache
from typing import Optional, Dict, Any, List, Union
from urllib.parse import quote, urlparse, urlunparse

from coderunner.common.cache import ReadCache
from coderunner.core.config import Settings, get_settings
from .codec import PayloadCodec
from .errors import (
    DecodeError,
    RemoteError,
    RemoteUnavailable,
    SubmissionNotFound,
    SubmissionTimeout,
)
from .schemas import (
    Judge0Status,
    SubmissionRequest,
    SubmissionResult,
    SubmissionToken,
)

DEFAULT_JUDGE0_PORT = 2358


def normalize_base_url(raw: str) -> str:
    """Assume http:// and the Judge0 CE port when only a host is configured."""
    base = (raw or "").strip()
    if not base:
        return ""
    if not base.startswith("http://") and not base.startswith("https://"):
        parsed = urlparse("http://" + base)
        if parsed.port is None:
            parsed = parsed._replace(netloc=f"{parsed.netloc}:{DEFAULT_JUDGE0_PORT}")
        base = urlunparse(parsed)
    return base.rstrip("/")


class Judge0Service:
    def __init__(
        self,
        settings: Optional[Settings] = None,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings or get_settings()
        self.base_url = normalize_base_url(self.settings.judge0_api_url)
        self.headers = {"Content-Type": "application/json"}
        self.codec = PayloadCodec(self.settings.judge0_encoding)
        self._transport = transport
        self._cache = ReadCache(
            default_ttl=self.settings.metadata_cache_seconds,
            enabled=not self.settings.read_cache_disabled,
        )
        self._logger = logging.getLogger(__name__)

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        """Perform one HTTP request against Judge0.

        Transport failures and timeouts surface as RemoteUnavailable. There is no
        retry here; polling decides what is transient.
        """
        if not self.base_url:
            raise RemoteUnavailable("Judge0 base URL is not configured (JUDGE0_BASE_URL / JUDGE0_URL).")
        if not path.startswith("/"):
            path = "/" + path
        url = self.base_url + path
        self._logger.debug("Judge0 request: %s %s", method, url)
        timeout = httpx.Timeout(connect=3.0, read=self.settings.judge0_timeout_s, write=5.0, pool=5.0)
        try:
            async with httpx.AsyncClient(timeout=timeout, transport=self._transport) as client:
                return await client.request(method, url, headers=self.headers, **kwargs)
        except httpx.TimeoutException as e:
            raise RemoteUnavailable(f"Judge0 at {self.base_url} timed out: {e}") from e
        except httpx.TransportError as e:
            raise RemoteUnavailable(f"Failed to connect to Judge0 at {self.base_url}: {e}") from e

    @staticmethod
    def _json(resp: httpx.Response) -> Any:
        if not resp.is_success:
            raise RemoteError(resp.status_code, resp.text)
        try:
            return resp.json()
        except ValueError as e:
            raise DecodeError(f"Judge0 returned invalid JSON: {e} body={resp.text[:200]}") from e

    def _params(self, **extra: str) -> Dict[str, str]:
        return {"base64_encoded": "true" if self.codec.base64_encoded else "false", **extra}

    # -------- Metadata --------
    async def get_languages(self) -> List[Dict[str, Any]]:
        key = "judge0:languages"
        cached = self._cache.get(key)
        if cached is not None:
            return cached
        data = self._json(await self._request("GET", "/languages"))
        if not isinstance(data, list):
            raise DecodeError("Judge0 /languages did not return a list")
        self._cache.set(key, data, ttl=self.settings.metadata_cache_seconds)
        return data

    async def get_statuses(self) -> List[Judge0Status]:
        """Judge0's status table as (id, description) pairs, cached like languages."""
        key = "judge0:statuses"
        cached = self._cache.get(key)
        if cached is not None:
            return cached
        data = self._json(await self._request("GET", "/statuses"))
        if not isinstance(data, list):
            raise DecodeError("Judge0 /statuses did not return a list")
        value = [Judge0Status(id=s.get("id"), description=s.get("description") or "") for s in data]
        self._cache.set(key, value, ttl=self.settings.metadata_cache_seconds)
        return value

    async def health_check(self) -> Dict[str, Any]:
        langs = await self.get_languages()
        return {"status": "connected", "languages": len(langs)}

    # -------- Submissions --------
    def _build_payload(self, request: SubmissionRequest, *, wait: bool) -> Dict[str, Any]:
        return {
            "source_code": self.codec.encode_outbound(request.source_code),
            "language_id": request.language_id,
            "stdin": self.codec.encode_outbound(request.stdin) if request.stdin else None,
            "wait": wait,
        }

    async def create_submission(
        self,
        request: SubmissionRequest,
        *,
        blocking: bool = False,
    ) -> Union[SubmissionToken, SubmissionResult]:
        """Create a Judge0 submission.

        Non-blocking creation returns the token. Blocking creation returns the
        decoded record, or only the token when the server did not honour wait.
        """
        resp = await self._request(
            "POST",
            "/submissions",
            params=self._params(wait=str(blocking).lower(), fields="*"),
            json=self._build_payload(request, wait=blocking),
        )
        data = self._json(resp)
        if not isinstance(data, dict):
            raise DecodeError("Judge0 create response is not an object")
        if blocking and ("status" in data or "status_id" in data):
            result = self.codec.decode_submission(data)
            self._logger.info("Judge0 waited submission %s finished: %s", result.token, result.status.description)
            return result
        token = data.get("token")
        if not token:
            raise DecodeError("Judge0 returned an empty token")
        self._logger.info("Created Judge0 submission %s (language %s)", token, request.language_id)
        return SubmissionToken(token=token)

    async def fetch_submission(self, token: str) -> SubmissionResult:
        resp = await self._request(
            "GET",
            f"/submissions/{quote(token, safe='')}",
            params=self._params(fields="*"),
        )
        if resp.status_code == 404:
            raise SubmissionNotFound(token, resp.text)
        result = self.codec.decode_submission(self._json(resp))
        if not result.token:
            result = result.model_copy(update={"token": token})
        return result

    async def run_to_completion(
        self,
        request: SubmissionRequest,
        *,
        poll_interval_ms: Optional[int] = None,
        max_attempts: Optional[int] = None,
    ) -> SubmissionResult:
        """Create a submission without waiting, then poll it until it is terminal.

        Exactly one create call; at most ``max_attempts`` fetches. A budget below
        one times out without fetching.
        """
        created = await self.create_submission(request, blocking=False)
        return await self._poll(
            created.token,
            poll_interval_ms=self.settings.judge0_poll_interval_ms if poll_interval_ms is None else poll_interval_ms,
            max_attempts=self.settings.judge0_max_poll_attempts if max_attempts is None else max_attempts,
        )

    async def _poll(self, token: str, *, poll_interval_ms: int, max_attempts: int) -> SubmissionResult:
        interval_s = max(0, poll_interval_ms) / 1000.0
        attempts = max_attempts
        if attempts < 1:
            self._logger.warning("No poll budget for submission %s", token)
            raise SubmissionTimeout(token, 0)
        for attempt in range(1, attempts + 1):
            try:
                result = await self.fetch_submission(token)
            except RemoteUnavailable as e:
                self._logger.warning("Poll %d/%d for %s failed: %s", attempt, attempts, token, e)
            except RemoteError as e:
                if not e.transient:
                    raise
                self._logger.warning("Poll %d/%d for %s failed: %s", attempt, attempts, token, e)
            else:
                if result.status.is_terminal:
                    self._logger.info(
                        "Submission %s finished after %d poll(s): %s",
                        token,
                        attempt,
                        result.status.description,
                    )
                    return result
                self._logger.debug("Submission %s is %s", token, result.status.description)
            if attempt < attempts:
                await asyncio.sleep(interval_s)
        raise SubmissionTimeout(token, attempts)

    async def run_submission(self, request: SubmissionRequest) -> SubmissionResult:
        """Run one submission to a terminal status using the configured strategy."""
        if not self.settings.judge0_use_wait:
            return await self.run_to_completion(request)
        created = await self.create_submission(request, blocking=True)
        if isinstance(created, SubmissionResult) and created.status.is_terminal:
            return created
        if not created.token:
            raise DecodeError("Judge0 returned an unfinished submission without a token")
        return await self._poll(
            created.token,
            poll_interval_ms=self.settings.judge0_poll_interval_ms,
            max_attempts=self.settings.judge0_max_poll_attempts,
        )


@lru_cache()
def get_judge0_service() -> Judge0Service:
    return Judge0Service()
