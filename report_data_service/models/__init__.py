# Copyright (c) 2025 Bytedance Ltd. and/or its affiliates
# SPDX-License-Identifier: MIT

# Report Data Service Models
"""
Canonical project, analytics and request models.
"""

from .analytics import (
    AnalyticsMetrics,
    BurndownPoint,
    PriorityShare,
    QualityBreakdown,
    RiskLevel,
    StatusShare,
    VelocityTrend,
    WorkloadEntry,
)
from .project import (
    Platform,
    ProjectData,
    ProjectMetric,
    Sprint,
    Task,
    TeamMember,
    utcnow,
)
from .requests import AcquisitionRequest, DateRange

__all__ = [
    "AcquisitionRequest",
    "AnalyticsMetrics",
    "BurndownPoint",
    "DateRange",
    "Platform",
    "PriorityShare",
    "ProjectData",
    "ProjectMetric",
    "QualityBreakdown",
    "RiskLevel",
    "Sprint",
    "StatusShare",
    "Task",
    "TeamMember",
    "VelocityTrend",
    "WorkloadEntry",
    "utcnow",
]
