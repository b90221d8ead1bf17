# Copyright (c) 2025 Bytedance Ltd. and/or its affiliates
# SPDX-License-Identifier: MIT

"""
Data models for derived project analytics.

These are recomputed from a ProjectData on every call and serialize to the
plain records the report templates consume.
"""

from datetime import date as date_type
from enum import Enum
from typing import Any, Dict, List

from pydantic import BaseModel, Field


class RiskLevel(str, Enum):
    """Overall project risk"""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class VelocityTrend(str, Enum):
    """Direction of sprint-over-sprint completion"""
    INCREASING = "increasing"
    STABLE = "stable"
    DECREASING = "decreasing"


class WorkloadEntry(BaseModel):
    """Task load of one assignee relative to the team average"""
    member: str = Field(..., description="Assignee name")
    task_count: int = Field(..., alias="taskCount", description="Tasks assigned")
    utilization: int = Field(..., description="Percent of average load, may exceed 100")

    class Config:
        frozen = True
        populate_by_name = True


class StatusShare(BaseModel):
    """Share of tasks in one platform-native status"""
    status: str
    count: int
    percentage: int

    class Config:
        frozen = True


class PriorityShare(BaseModel):
    """Share of tasks at one priority"""
    priority: str
    count: int
    percentage: int

    class Config:
        frozen = True


class BurndownPoint(BaseModel):
    """One point on the synthesized burndown line"""
    date: date_type
    remaining: float
    ideal: float

    class Config:
        frozen = True


class QualityBreakdown(BaseModel):
    """The four sub-dimensions behind the quality score"""
    task_completeness: int = Field(0, alias="taskCompleteness")
    documentation_quality: int = Field(0, alias="documentationQuality")
    process_adherence: int = Field(0, alias="processAdherence")
    deliverable_standards: int = Field(0, alias="deliverableStandards")

    class Config:
        frozen = True
        populate_by_name = True


class AnalyticsMetrics(BaseModel):
    """Analytics consumed by every report template"""
    # Performance
    completion_rate: int = Field(0, alias="completionRate")
    velocity_trend: VelocityTrend = Field(VelocityTrend.STABLE, alias="velocityTrend")
    team_efficiency: int = Field(0, alias="teamEfficiency")
    quality_score: int = Field(0, alias="qualityScore")
    quality_breakdown: QualityBreakdown = Field(
        default_factory=QualityBreakdown, alias="qualityBreakdown"
    )

    # Risk
    risk_level: RiskLevel = Field(RiskLevel.LOW, alias="riskLevel")
    blocked_items_count: int = Field(0, alias="blockedItemsCount")
    overdue_tasks: int = Field(0, alias="overdueTasks")
    timeline_adherence: int = Field(0, alias="timelineAdherence")

    # Team
    workload_distribution: List[WorkloadEntry] = Field(
        default_factory=list, alias="workloadDistribution"
    )
    collaboration_score: int = Field(0, alias="collaborationScore")

    # Trends
    burndown_trend: List[BurndownPoint] = Field(default_factory=list, alias="burndownTrend")
    status_distribution: List[StatusShare] = Field(
        default_factory=list, alias="statusDistribution"
    )
    priority_breakdown: List[PriorityShare] = Field(
        default_factory=list, alias="priorityBreakdown"
    )

    # Predictive
    estimated_completion: str = Field("", alias="estimatedCompletion")
    recommended_actions: List[str] = Field(default_factory=list, alias="recommendedActions")
    critical_path: List[str] = Field(default_factory=list, alias="criticalPath")

    class Config:
        frozen = True
        populate_by_name = True

    def to_dict(self) -> Dict[str, Any]:
        """JSON-compatible record for report generators"""
        return self.model_dump(mode="json", by_alias=True)
