# Copyright (c) 2025 Bytedance Ltd. and/or its affiliates
# SPDX-License-Identifier: MIT

# Report Data Service Fetcher
"""
Resilient fetcher for project data.

Walks an ordered list of candidate routes against the platform-integrations
layer until one returns usable project data. Each route is tried exactly
once with its own timeout; resilience comes from route diversity, not from
retrying the same route. Failures are recorded per attempt and returned to
the caller, never raised.

Usage:
    fetcher = ResilientFetcher(base_url="http://gateway:3000", auth_token=token)
    result = await fetcher.fetch(Platform.JIRA, connection_id, "PRISM")
    if result.ok:
        payload = result.payload
"""

import asyncio
import logging
import time
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import AsyncIterator, List, Mapping, Optional, Sequence, Tuple, Union

import httpx

from report_data_service.config import get_settings
from report_data_service.exceptions import AcquisitionExhausted
from report_data_service.models import Platform

from .payloads import RawPayload, UnknownPayload, classify_payload
from .routes import RouteDescriptor, get_routes

logger = logging.getLogger(__name__)


class RouteOutcome(str, Enum):
    """Result of a single route attempt"""
    SUCCESS = "success"
    NETWORK_ERROR = "network_error"
    TIMEOUT = "timeout"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    SERVER_ERROR = "server_error"
    HTTP_ERROR = "http_error"
    EMPTY_BODY = "empty_body"
    MALFORMED = "malformed"


_STATUS_OUTCOMES = {
    401: RouteOutcome.UNAUTHORIZED,
    403: RouteOutcome.FORBIDDEN,
    404: RouteOutcome.NOT_FOUND,
}


@dataclass(frozen=True)
class RouteAttempt:
    """Diagnostic record for one attempted route"""
    route: str
    url: str
    outcome: RouteOutcome
    latency_ms: float
    status_code: Optional[int] = None
    detail: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.outcome == RouteOutcome.SUCCESS

    def describe(self) -> str:
        text = f"{self.route}: {self.outcome.value}"
        if self.detail:
            text = f"{text} ({self.detail})"
        return text


@dataclass
class FetchSuccess:
    """A route produced project records"""
    payload: RawPayload
    attempts: List[RouteAttempt] = field(default_factory=list)
    ok: bool = field(default=True, init=False)


@dataclass
class FetchFailure:
    """Every route failed; carries the last observed error"""
    last_error: str
    attempts: List[RouteAttempt] = field(default_factory=list)
    ok: bool = field(default=False, init=False)

    def to_exception(self, platform: Platform, project_id: str) -> AcquisitionExhausted:
        """Exception form of this failure, for callers that prefer raising"""
        return AcquisitionExhausted(
            Platform.parse(platform).value, project_id, self.last_error, list(self.attempts)
        )


FetchResult = Union[FetchSuccess, FetchFailure]


class ResilientFetcher:
    """
    Route-cascading fetcher for the platform-integrations boundary.

    Stateless between calls: every fetch builds its own attempt list and,
    unless a client was injected, its own HTTP client.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        auth_token: Optional[str] = None,
        timeout: Optional[float] = None,
        routes: Optional[Mapping[Platform, Sequence[RouteDescriptor]]] = None,
        parallel: Optional[bool] = None,
        client: Optional[httpx.AsyncClient] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize fetcher.

        Args:
            base_url: API gateway base URL (defaults to settings)
            auth_token: Bearer token forwarded to the gateway
            timeout: Per-route timeout in seconds (defaults to settings)
            routes: Per-platform route overrides
            parallel: Race all routes, first success wins
            client: Caller-owned HTTP client; not closed by the fetcher
            transport: Transport for internally created clients (tests)
        """
        settings = get_settings()
        self.base_url = (base_url or settings.api_gateway_url).rstrip("/")
        self.auth_token = auth_token if auth_token is not None else settings.auth_token
        self.timeout = timeout if timeout is not None else settings.route_timeout
        self.routes = routes
        self.parallel = settings.parallel_routes if parallel is None else parallel
        self._client = client
        self._transport = transport

    def _headers(self) -> dict:
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        if self.auth_token:
            headers["Authorization"] = f"Bearer {self.auth_token}"
        return headers

    @asynccontextmanager
    async def _client_scope(self) -> AsyncIterator[httpx.AsyncClient]:
        if self._client is not None:
            yield self._client
            return

        client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            headers=self._headers(),
            transport=self._transport,
        )
        try:
            yield client
        finally:
            await client.aclose()

    async def fetch(
        self,
        platform: Union[Platform, str],
        connection_id: str,
        project_id: str,
    ) -> FetchResult:
        """
        Fetch raw project data, cascading through the platform's routes.

        Args:
            platform: Source platform
            connection_id: Opaque connection handle
            project_id: Project identifier scoped to the connection

        Returns:
            FetchSuccess with the first usable payload, or FetchFailure with
            the last error. Both carry the attempt records.
        """
        platform = Platform.parse(platform)
        routes = get_routes(platform, self.routes)
        if not routes:
            return FetchFailure(last_error=f"No routes configured for {platform.value}")

        logger.info(
            "Fetching %s project %s via connection %s (%d candidate routes)",
            platform.value, project_id, connection_id, len(routes)
        )

        async with self._client_scope() as client:
            if self.parallel:
                return await self._fetch_parallel(
                    client, platform, routes, connection_id, project_id
                )

            attempts: List[RouteAttempt] = []
            for route in routes:
                attempt, payload = await self._attempt(
                    client, route, platform, connection_id, project_id
                )
                attempts.append(attempt)
                if payload is not None:
                    return FetchSuccess(payload=payload, attempts=attempts)

        return self._exhausted(platform, project_id, attempts)

    async def _fetch_parallel(
        self,
        client: httpx.AsyncClient,
        platform: Platform,
        routes: List[RouteDescriptor],
        connection_id: str,
        project_id: str,
    ) -> FetchResult:
        """Race every route; the first success wins and the rest are cancelled."""
        pending = [
            asyncio.create_task(
                self._attempt(client, route, platform, connection_id, project_id)
            )
            for route in routes
        ]
        attempts: List[RouteAttempt] = []
        try:
            for next_done in asyncio.as_completed(pending):
                attempt, payload = await next_done
                attempts.append(attempt)
                if payload is not None:
                    return FetchSuccess(payload=payload, attempts=attempts)
        finally:
            for task in pending:
                if not task.done():
                    task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)

        return self._exhausted(platform, project_id, attempts)

    def _exhausted(
        self,
        platform: Platform,
        project_id: str,
        attempts: List[RouteAttempt]
    ) -> FetchFailure:
        last_error = attempts[-1].describe() if attempts else "no attempts made"
        logger.warning(
            "All %d routes failed for %s project %s; last error: %s",
            len(attempts), platform.value, project_id, last_error
        )
        return FetchFailure(last_error=last_error, attempts=attempts)

    async def _attempt(
        self,
        client: httpx.AsyncClient,
        route: RouteDescriptor,
        platform: Platform,
        connection_id: str,
        project_id: str,
    ) -> Tuple[RouteAttempt, Optional[RawPayload]]:
        """Issue one bounded GET and judge the response."""
        started = time.perf_counter()
        status_code: Optional[int] = None
        payload: Optional[RawPayload] = None

        try:
            url = route.render(platform, connection_id, project_id)
        except (KeyError, IndexError, ValueError) as e:
            url = route.template
            outcome, detail = RouteOutcome.MALFORMED, f"invalid route template: {e!r}"
        else:
            try:
                response = await client.get(url, timeout=self.timeout)
                status_code = response.status_code
                outcome, detail, payload = self._evaluate(response, platform, route)
            except httpx.TimeoutException as e:
                outcome, detail = RouteOutcome.TIMEOUT, str(e) or "request timed out"
            except httpx.RequestError as e:
                outcome, detail = RouteOutcome.NETWORK_ERROR, str(e) or type(e).__name__
            except httpx.InvalidURL as e:
                outcome, detail = RouteOutcome.HTTP_ERROR, f"invalid URL: {e}"

        attempt = RouteAttempt(
            route=route.name,
            url=url,
            outcome=outcome,
            latency_ms=round((time.perf_counter() - started) * 1000, 1),
            status_code=status_code,
            detail=detail,
        )
        self._log_attempt(attempt)
        return attempt, payload

    @staticmethod
    def _evaluate(
        response: httpx.Response,
        platform: Platform,
        route: RouteDescriptor,
    ) -> Tuple[RouteOutcome, Optional[str], Optional[RawPayload]]:
        code = response.status_code
        if not response.is_success:
            if code >= 500:
                outcome = RouteOutcome.SERVER_ERROR
            else:
                outcome = _STATUS_OUTCOMES.get(code, RouteOutcome.HTTP_ERROR)
            return outcome, f"HTTP {code}", None

        if not response.content.strip():
            return RouteOutcome.EMPTY_BODY, "response body is empty", None

        try:
            body = response.json()
        except ValueError as e:
            return RouteOutcome.MALFORMED, f"invalid JSON: {e}", None

        payload = classify_payload(platform, body, source=route.name)
        if isinstance(payload, UnknownPayload):
            outcome = RouteOutcome(payload.reason)
            return outcome, "no project records in response", None

        return RouteOutcome.SUCCESS, f"{len(payload.records)} project record(s)", payload

    @staticmethod
    def _log_attempt(attempt: RouteAttempt) -> None:
        if attempt.succeeded:
            logger.info(
                "Route %s -> %s [status=%s, %.1f ms] %s",
                attempt.route, attempt.outcome.value, attempt.status_code,
                attempt.latency_ms, attempt.url
            )
        else:
            logger.warning(
                "Route %s -> %s [status=%s, %.1f ms] %s: %s",
                attempt.route, attempt.outcome.value, attempt.status_code,
                attempt.latency_ms, attempt.url, attempt.detail
            )
