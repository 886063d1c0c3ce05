"""
HTTP client for the backend API.

Wraps a ``requests.Session`` whose cookie jar carries the HTTP-only access and
refresh cookies. When a request fails with 401 the client refreshes the
session once, shared by all concurrent callers, and resends the request a
single time.
"""

import asyncio
from dataclasses import dataclass, replace
from typing import Any, Dict, Optional

import requests

from auth_template.api.errors import ApiError, InvalidResponseError
from auth_template.config import settings
from auth_template.utils.logger import get_logger

logger = get_logger(__name__)

LOG_IN_PATH = "/auth/log-in"
REFRESH_PATH = "/auth/refresh"

# 401 on these is a terminal authentication failure, not an expired token
NON_RETRYABLE_PATHS = (LOG_IN_PATH, REFRESH_PATH)


@dataclass(frozen=True, repr=False)
class ApiRequest:
    """
    Immutable description of one outgoing call.

    ``attempt`` counts resends; a retry is a new object, never a mutation.
    """

    method: str
    path: str
    json: Any = None
    params: Optional[Dict[str, Any]] = None
    attempt: int = 0

    def __post_init__(self):
        object.__setattr__(self, "method", self.method.upper())

    # request bodies may carry credentials
    def __repr__(self) -> str:
        return f"ApiRequest({self.method} {self.path}, attempt={self.attempt})"

    @property
    def is_retry(self) -> bool:
        return self.attempt > 0

    def retried(self) -> "ApiRequest":
        return replace(self, attempt=self.attempt + 1)


def consume_task_exception(task: asyncio.Future) -> None:
    """Mark a shared task's failure as seen when every waiter was cancelled."""
    if not task.cancelled():
        task.exception()


def parse_json(response: requests.Response) -> Any:
    """
    Decode a success response body.

    Raises:
        InvalidResponseError: Body is not JSON.
    """
    try:
        return response.json()
    except ValueError as exc:
        logger.error(
            "Invalid JSON response",
            extra={"url": response.url, "status_code": response.status_code},
        )
        raise InvalidResponseError(
            "Invalid response from server",
            status_code=response.status_code,
            response=response,
        ) from exc


class ApiClient:
    """
    Cookie-authenticated API client with transparent session refresh.

    Blocking ``requests`` calls run in a worker thread; all bookkeeping,
    including the shared refresh handle, lives on the event loop thread.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
    ):
        self.base_url = (base_url or settings.API_BASE_URL).rstrip("/")
        self.timeout = timeout or settings.REQUEST_TIMEOUT
        self._session = session or requests.Session()
        self._refresh_task: Optional[asyncio.Task] = None

    @property
    def refresh_in_flight(self) -> bool:
        return self._refresh_task is not None

    def url_for(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def _dispatch(self, request: ApiRequest) -> requests.Response:
        return self._session.request(
            request.method,
            self.url_for(request.path),
            json=request.json,
            params=request.params,
            headers={"Accept": "application/json"},
            timeout=self.timeout,
        )

    @staticmethod
    def _should_refresh(request: ApiRequest, error: ApiError) -> bool:
        return (
            error.status_code == 401
            and not request.is_retry
            and not any(path in request.path for path in NON_RETRYABLE_PATHS)
        )

    async def send(self, request: ApiRequest) -> requests.Response:
        """
        Send a request, refreshing the session and retrying once on 401.

        Args:
            request: Call to perform.

        Returns:
            requests.Response: Successful response.

        Raises:
            ApiError: Non-success response. When the refresh fails, the
                original request's error is raised.
            requests.RequestException: Transport failure, unchanged.
        """
        response = await asyncio.to_thread(self._dispatch, request)

        if response.status_code < 400:
            return response

        error = ApiError.from_response(response)

        if not self._should_refresh(request, error):
            logger.debug(
                "Request failed",
                extra={"request": repr(request), "status_code": error.status_code},
            )
            raise error

        logger.info("Access expired; refreshing session", extra={"path": request.path})

        try:
            await self.refresh_access()
        except Exception:
            logger.warning("Session refresh failed", extra={"path": request.path})
            raise error

        return await self.send(request.retried())

    async def refresh_access(self) -> None:
        """
        Refresh the session cookies.

        Concurrent callers share one ``POST /auth/refresh``; the shared handle
        is released once that call settles.
        """
        if self._refresh_task is None:
            self._refresh_task = asyncio.ensure_future(self._run_refresh())
            self._refresh_task.add_done_callback(consume_task_exception)

        await asyncio.shield(self._refresh_task)

    async def _run_refresh(self) -> None:
        try:
            await self.send(ApiRequest("POST", REFRESH_PATH))
        finally:
            self._refresh_task = None

    async def get(self, path: str, *, params: Optional[Dict[str, Any]] = None) -> requests.Response:
        return await self.send(ApiRequest("GET", path, params=params))

    async def post(self, path: str, *, json: Any = None) -> requests.Response:
        return await self.send(ApiRequest("POST", path, json=json))

    async def put(self, path: str, *, json: Any = None) -> requests.Response:
        return await self.send(ApiRequest("PUT", path, json=json))

    async def delete(self, path: str) -> requests.Response:
        return await self.send(ApiRequest("DELETE", path))

    def close(self) -> None:
        self._session.close()
