"""
Unit tests for the resilient route-cascading fetcher
"""

import asyncio
import logging

import httpx
import pytest

from report_data_service.client.fetcher import (
    FetchFailure,
    FetchSuccess,
    ResilientFetcher,
    RouteOutcome,
)
from report_data_service.client.payloads import JiraPayload
from report_data_service.client.routes import RouteDescriptor
from report_data_service.exceptions import AcquisitionExhausted
from report_data_service.models import Platform

BASE_URL = "http://gateway.test"
LISTING_PATH = "/api/connections/c1/projects"
PROJECT = {"key": "PRISM", "name": "Prism", "issues": [{"key": "PRISM-1", "summary": "Setup"}]}


def make_fetcher(handler, **kwargs):
    """Create a fetcher whose HTTP traffic goes to a handler function."""
    kwargs.setdefault("timeout", 2.0)
    return ResilientFetcher(
        base_url=BASE_URL,
        transport=httpx.MockTransport(handler),
        **kwargs
    )


def is_listing(request: httpx.Request) -> bool:
    return request.url.path == LISTING_PATH and "projectId" not in request.url.params


def fetcher_messages(caplog):
    return [
        record for record in caplog.records
        if record.name == "report_data_service.client.fetcher"
        and record.getMessage().startswith("Route ")
    ]


class TestResilientFetcherInit:
    """Tests for fetcher initialization."""

    def test_custom_init(self):
        fetcher = ResilientFetcher(
            base_url="http://custom:9000/",
            auth_token="secret",
            timeout=5.0,
            parallel=True,
        )
        assert fetcher.base_url == "http://custom:9000"
        assert fetcher.auth_token == "secret"
        assert fetcher.timeout == 5.0
        assert fetcher.parallel is True

    def test_headers_include_bearer_token(self):
        fetcher = ResilientFetcher(base_url=BASE_URL, auth_token="secret")
        headers = fetcher._headers()
        assert headers["Authorization"] == "Bearer secret"
        assert headers["Accept"] == "application/json"

    def test_headers_without_token(self):
        fetcher = ResilientFetcher(base_url=BASE_URL, auth_token="")
        assert "Authorization" not in fetcher._headers()


class TestSequentialCascade:
    """Tests for the sequential route cascade."""

    @pytest.mark.asyncio
    async def test_first_route_success_stops_cascade(self):
        calls = []

        def handler(request):
            calls.append(str(request.url))
            return httpx.Response(200, json={"project": PROJECT})

        result = await make_fetcher(handler).fetch(Platform.JIRA, "c1", "PRISM")

        assert isinstance(result, FetchSuccess)
        assert result.ok
        assert isinstance(result.payload, JiraPayload)
        assert result.payload.source == "project_query"
        assert len(calls) == 1
        assert [attempt.outcome for attempt in result.attempts] == [RouteOutcome.SUCCESS]

    @pytest.mark.asyncio
    async def test_only_third_route_valid(self, caplog):
        """Data comes from the third route after exactly three attempts."""
        caplog.set_level(logging.INFO, logger="report_data_service.client.fetcher")

        def handler(request):
            if is_listing(request):
                return httpx.Response(200, json={"projects": [PROJECT]})
            if "/jira/" in request.url.path:
                return httpx.Response(500, text="upstream exploded")
            return httpx.Response(404, json={"error": "not found"})

        result = await make_fetcher(handler).fetch(Platform.JIRA, "c1", "PRISM")

        assert result.ok
        assert result.payload.source == "project_listing"
        assert result.payload.records == [PROJECT]
        assert [attempt.route for attempt in result.attempts] == [
            "project_query", "platform_qualified", "project_listing",
        ]
        assert [attempt.outcome for attempt in result.attempts] == [
            RouteOutcome.NOT_FOUND, RouteOutcome.SERVER_ERROR, RouteOutcome.SUCCESS,
        ]
        assert len(fetcher_messages(caplog)) == 3

    @pytest.mark.asyncio
    async def test_all_routes_404(self):
        def handler(request):
            return httpx.Response(404)

        result = await make_fetcher(handler).fetch(Platform.MONDAY, "c1", "42")

        assert isinstance(result, FetchFailure)
        assert not result.ok
        assert len(result.attempts) == 4
        assert all(attempt.status_code == 404 for attempt in result.attempts)
        assert result.last_error.startswith("legacy_prefix: not_found")

        error = result.to_exception(Platform.MONDAY, "42")
        assert isinstance(error, AcquisitionExhausted)
        assert error.platform == "monday"
        assert len(error.attempts) == 4
        assert "legacy_prefix: not_found" in str(error)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status,outcome", [
        (401, RouteOutcome.UNAUTHORIZED),
        (403, RouteOutcome.FORBIDDEN),
        (404, RouteOutcome.NOT_FOUND),
        (418, RouteOutcome.HTTP_ERROR),
        (503, RouteOutcome.SERVER_ERROR),
    ])
    async def test_status_outcomes(self, status, outcome):
        def handler(request):
            return httpx.Response(status)

        result = await make_fetcher(handler).fetch(Platform.JIRA, "c1", "PRISM")

        assert not result.ok
        assert {attempt.outcome for attempt in result.attempts} == {outcome}

    @pytest.mark.asyncio
    async def test_body_outcomes(self):
        bodies = iter([
            httpx.Response(200, content=b""),
            httpx.Response(200, content=b"<html>gateway</html>"),
            httpx.Response(200, json={"unexpected": True}),
            httpx.Response(200, json={"projects": []}),
        ])

        def handler(request):
            return next(bodies)

        result = await make_fetcher(handler).fetch(Platform.TROFOS, "c1", "7")

        assert [attempt.outcome for attempt in result.attempts] == [
            RouteOutcome.EMPTY_BODY,
            RouteOutcome.MALFORMED,
            RouteOutcome.MALFORMED,
            RouteOutcome.EMPTY_BODY,
        ]

    @pytest.mark.asyncio
    async def test_network_errors_and_timeouts_are_recorded(self):
        def handler(request):
            if "/trofos/" in request.url.path:
                raise httpx.ReadTimeout("too slow", request=request)
            if is_listing(request):
                return httpx.Response(200, json={"data": {"data": [{"id": 7, "name": "Capstone"}]}})
            raise httpx.ConnectError("connection refused", request=request)

        result = await make_fetcher(handler).fetch("trofos", "c1", "7")

        assert result.ok
        assert [attempt.outcome for attempt in result.attempts] == [
            RouteOutcome.NETWORK_ERROR, RouteOutcome.TIMEOUT, RouteOutcome.SUCCESS,
        ]
        assert result.attempts[0].status_code is None
        assert "connection refused" in result.attempts[0].detail

    @pytest.mark.asyncio
    async def test_sends_auth_header(self):
        seen = []

        def handler(request):
            seen.append(request.headers.get("Authorization"))
            return httpx.Response(200, json={"project": PROJECT})

        await make_fetcher(handler, auth_token="tok").fetch(Platform.JIRA, "c1", "PRISM")

        assert seen == ["Bearer tok"]

    @pytest.mark.asyncio
    async def test_route_overrides(self):
        routes = {Platform.JIRA: [RouteDescriptor(name="direct", template="/direct/{project_id}")]}

        def handler(request):
            assert request.url.path == "/direct/PRISM"
            return httpx.Response(200, json=PROJECT)

        result = await make_fetcher(handler, routes=routes).fetch(Platform.JIRA, "c1", "PRISM")

        assert result.ok
        assert [attempt.route for attempt in result.attempts] == ["direct"]

    @pytest.mark.asyncio
    async def test_broken_route_overrides_are_recorded(self):
        routes = {Platform.JIRA: [
            RouteDescriptor(name="bad_template", template="/projects/{missing}"),
            RouteDescriptor(name="bad_port", template="http://gateway.test:abc/{project_id}"),
            RouteDescriptor(name="direct", template="/direct/{project_id}"),
        ]}

        def handler(request):
            return httpx.Response(200, json=PROJECT)

        result = await make_fetcher(handler, routes=routes).fetch(Platform.JIRA, "c1", "PRISM")

        assert result.ok
        assert [attempt.outcome for attempt in result.attempts] == [
            RouteOutcome.MALFORMED, RouteOutcome.HTTP_ERROR, RouteOutcome.SUCCESS,
        ]
        assert result.attempts[0].url == "/projects/{missing}"
        assert "invalid route template" in result.attempts[0].detail

    @pytest.mark.asyncio
    async def test_broken_routes_only_fail_without_raising(self):
        routes = {Platform.TROFOS: [RouteDescriptor(name="bad", template="/{0}")]}
        fetcher = make_fetcher(lambda request: httpx.Response(200), routes=routes)

        result = await fetcher.fetch(Platform.TROFOS, "c1", "7")

        assert not result.ok
        assert result.last_error.startswith("bad: malformed")

    @pytest.mark.asyncio
    async def test_no_routes_configured(self):
        fetcher = make_fetcher(lambda request: httpx.Response(200), routes={Platform.JIRA: []})

        result = await fetcher.fetch(Platform.JIRA, "c1", "PRISM")

        assert not result.ok
        assert result.attempts == []

    @pytest.mark.asyncio
    async def test_injected_client_is_not_closed(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(200, json=PROJECT))
        async with httpx.AsyncClient(base_url=BASE_URL, transport=transport) as client:
            fetcher = ResilientFetcher(base_url=BASE_URL, client=client)
            result = await fetcher.fetch(Platform.JIRA, "c1", "PRISM")
            assert result.ok
            assert not client.is_closed

    @pytest.mark.asyncio
    async def test_attempts_are_request_scoped(self):
        fetcher = make_fetcher(lambda request: httpx.Response(404))

        first = await fetcher.fetch(Platform.JIRA, "c1", "A")
        second = await fetcher.fetch(Platform.JIRA, "c1", "B")

        assert len(first.attempts) == 4
        assert len(second.attempts) == 4
        assert first.attempts is not second.attempts


class TestParallelCascade:
    """Tests for racing routes with first-success-wins."""

    @pytest.mark.asyncio
    async def test_first_success_wins_and_losers_are_cancelled(self):
        finished = []

        async def handler(request):
            if "/jira/" in request.url.path:
                return httpx.Response(200, json={"project": PROJECT})
            await asyncio.sleep(5)
            finished.append(request.url.path)
            return httpx.Response(200, json={"project": PROJECT})

        fetcher = make_fetcher(handler, parallel=True, timeout=10.0)
        result = await asyncio.wait_for(
            fetcher.fetch(Platform.JIRA, "c1", "PRISM"), timeout=3
        )

        assert result.ok
        assert result.payload.source == "platform_qualified"
        assert [attempt.route for attempt in result.attempts] == ["platform_qualified"]
        assert finished == []

    @pytest.mark.asyncio
    async def test_parallel_exhaustion(self):
        def handler(request):
            return httpx.Response(404)

        result = await make_fetcher(handler, parallel=True).fetch(Platform.JIRA, "c1", "PRISM")

        assert not result.ok
        assert len(result.attempts) == 4
        assert {attempt.route for attempt in result.attempts} == {
            "project_query", "platform_qualified", "project_listing", "legacy_prefix",
        }
