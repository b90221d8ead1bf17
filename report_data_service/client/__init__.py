# Copyright (c) 2025 Bytedance Ltd. and/or its affiliates
# SPDX-License-Identifier: MIT

"""
Upstream access: candidate routes, payload classification and the
resilient fetcher.
"""

from .fetcher import (
    FetchFailure,
    FetchResult,
    FetchSuccess,
    ResilientFetcher,
    RouteAttempt,
    RouteOutcome,
)
from .payloads import (
    GenericPayload,
    JiraPayload,
    MondayPayload,
    RawPayload,
    TrofosPayload,
    UnknownPayload,
    classify_payload,
    extract_project_records,
)
from .routes import DEFAULT_ROUTES, RouteDescriptor, get_routes

__all__ = [
    "DEFAULT_ROUTES",
    "FetchFailure",
    "FetchResult",
    "FetchSuccess",
    "GenericPayload",
    "JiraPayload",
    "MondayPayload",
    "RawPayload",
    "ResilientFetcher",
    "RouteAttempt",
    "RouteDescriptor",
    "RouteOutcome",
    "TrofosPayload",
    "UnknownPayload",
    "classify_payload",
    "extract_project_records",
    "get_routes",
]
