# Copyright (c) 2025 Bytedance Ltd. and/or its affiliates
# SPDX-License-Identifier: MIT

# Report Data Service Facade
"""
Single entry point for report generators.

Fetches project data through the route cascade, normalizes it, substitutes
synthetic data when the upstream cannot deliver, and derives analytics.
Total upstream unavailability degrades to fallback data instead of an
error, so a report can always be generated.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterator, List, Optional, Sequence, Union

from report_data_service.adapters import normalize
from report_data_service.analytics import analyze
from report_data_service.client import ResilientFetcher, RouteAttempt
from report_data_service.config import Settings
from report_data_service.fallback import synthesize
from report_data_service.models import (
    AcquisitionRequest,
    AnalyticsMetrics,
    ProjectData,
)

logger = logging.getLogger(__name__)

# Sprints kept when historical data is not requested (enough for velocity)
RECENT_SPRINTS = 2


@dataclass
class AcquisitionResult:
    """Project data and analytics, with diagnostics for this request"""
    project: ProjectData
    analytics: AnalyticsMetrics
    attempts: List[RouteAttempt] = field(default_factory=list)
    fallback_reason: Optional[str] = None

    def __iter__(self) -> Iterator[Any]:
        # Unpacks as (project, analytics)
        yield self.project
        yield self.analytics

    @property
    def used_fallback(self) -> bool:
        return self.project.fallback_data

    def to_dict(self) -> Dict[str, Any]:
        return {
            "projectData": self.project.to_dict(),
            "analytics": self.analytics.to_dict(),
            "attempts": [
                {
                    "route": attempt.route,
                    "url": attempt.url,
                    "outcome": attempt.outcome.value,
                    "statusCode": attempt.status_code,
                    "latencyMs": attempt.latency_ms,
                    "detail": attempt.detail,
                }
                for attempt in self.attempts
            ],
            "fallbackReason": self.fallback_reason,
        }


class DataAcquisitionFacade:
    """
    Acquisition pipeline: fetch -> adapt -> (fallback) -> analyze.

    Holds no per-request state, so one instance can serve concurrent
    requests.
    """

    def __init__(
        self,
        fetcher: Optional[ResilientFetcher] = None,
        settings: Optional[Settings] = None
    ):
        """
        Initialize facade.

        Args:
            fetcher: Fetcher to use (built from settings when omitted)
            settings: Settings for the default fetcher
        """
        if fetcher is None:
            if settings is not None:
                fetcher = ResilientFetcher(
                    base_url=settings.api_gateway_url,
                    auth_token=settings.auth_token,
                    timeout=settings.route_timeout,
                    parallel=settings.parallel_routes,
                )
            else:
                fetcher = ResilientFetcher()
        self.fetcher = fetcher

    async def acquire(
        self,
        request: Union[AcquisitionRequest, Dict[str, Any]],
        now: Optional[datetime] = None
    ) -> AcquisitionResult:
        """
        Acquire project data and analytics for one request.

        Args:
            request: Acquisition request (or its camelCase/snake_case dict)
            now: Clock anchor for fallback timestamps and analytics

        Returns:
            AcquisitionResult, unpackable as (project, analytics)
        """
        if not isinstance(request, AcquisitionRequest):
            request = AcquisitionRequest.model_validate(request)

        attempts: List[RouteAttempt] = []
        fallback_reason: Optional[str] = None
        project: Optional[ProjectData] = None

        try:
            result = await self.fetcher.fetch(
                request.platform, request.connection_id, request.project_id
            )
            attempts = list(result.attempts)
            if result.ok:
                projects = normalize(result.payload, request.platform, request.project_id)
                project = self.select_project(projects, request.project_id)
                if not projects:
                    fallback_reason = "upstream response held no usable project records"
                elif project is None:
                    fallback_reason = f"no upstream project matches '{request.project_id}'"
            else:
                fallback_reason = result.last_error
        except Exception as e:
            logger.error(
                "Unexpected error acquiring %s project %s: %s",
                request.platform.value, request.project_id, e,
                exc_info=True
            )
            fallback_reason = f"unexpected error: {e}"

        if project is None:
            logger.warning(
                "Using fallback data for %s project %s: %s",
                request.platform.value, request.project_id, fallback_reason
            )
            project = synthesize(request.platform, request.project_id, now=now)

        project = self.apply_filters(project, request)
        analytics = analyze(project, now=now)
        return AcquisitionResult(
            project=project,
            analytics=analytics,
            attempts=attempts,
            fallback_reason=fallback_reason,
        )

    @staticmethod
    def select_project(
        projects: Sequence[ProjectData],
        project_id: Optional[str]
    ) -> Optional[ProjectData]:
        """
        The project whose id or key matches the request.

        A single record is taken as the answer even without a match (a
        project query may return the numeric id for a requested key). A
        listing with no matching record yields None, never another project.
        """
        if not projects:
            return None
        wanted = (project_id or "").strip().lower()
        if wanted:
            for project in projects:
                keys = {project.id.lower()}
                keys.update(
                    str(metric.value).lower()
                    for metric in project.metrics
                    if metric.name == "Project Key" and metric.value
                )
                if wanted in keys:
                    return project
        if len(projects) == 1:
            return projects[0]
        logger.warning(
            "No record among %d upstream projects matches %s",
            len(projects), project_id
        )
        return None

    @staticmethod
    def apply_filters(project: ProjectData, request: AcquisitionRequest) -> ProjectData:
        """Apply the request's history and date-range options"""
        updates: Dict[str, Any] = {}
        if not request.include_historical_data and len(project.sprints) > RECENT_SPRINTS:
            updates["sprints"] = list(project.sprints[-RECENT_SPRINTS:])
        if request.date_range is not None:
            updates["tasks"] = [
                task for task in project.tasks
                if request.date_range.contains(task.created)
            ]
        if not updates:
            return project
        return project.model_copy(update=updates)


async def acquire(
    request: Union[AcquisitionRequest, Dict[str, Any]],
    fetcher: Optional[ResilientFetcher] = None,
    now: Optional[datetime] = None
) -> AcquisitionResult:
    """Acquire with a one-off facade"""
    return await DataAcquisitionFacade(fetcher=fetcher).acquire(request, now=now)
