# Copyright (c) 2025 Bytedance Ltd. and/or its affiliates
# SPDX-License-Identifier: MIT

"""
Analytics engine.

Derives the metrics every report template consumes from a canonical
project. Pure computation: no I/O, the input is never modified and the
only clock read is the optional `now` anchor.
"""

import logging
import math
from collections import Counter
from datetime import date, datetime, timedelta, timezone
from typing import Dict, List, Optional, Sequence, Tuple

from report_data_service.models import (
    AnalyticsMetrics,
    BurndownPoint,
    PriorityShare,
    ProjectData,
    QualityBreakdown,
    RiskLevel,
    Sprint,
    StatusShare,
    Task,
    VelocityTrend,
    WorkloadEntry,
    utcnow,
)

from . import thresholds as t
from .thresholds import is_assigned, is_blocked, is_completed, round_half_up

logger = logging.getLogger(__name__)


def clamp_percentage(value: float) -> int:
    """Half-up rounded and kept within [0, 100]"""
    return max(0, min(100, round_half_up(value)))


def _ratio(part: float, whole: float) -> float:
    return part / whole if whole else 0.0


def largest_remainder_percentages(counts: Sequence[int]) -> List[int]:
    """Integer percentages that sum to exactly 100 (for a non-zero total)"""
    total = sum(counts)
    if not total:
        return [0 for _ in counts]
    raw = [100 * count / total for count in counts]
    floors = [int(math.floor(value)) for value in raw]
    shortfall = 100 - sum(floors)
    order = sorted(
        range(len(counts)),
        key=lambda index: (-(raw[index] - floors[index]), index)
    )
    for index in order[:shortfall]:
        floors[index] += 1
    return floors


class AnalyticsEngine:
    """Calculates AnalyticsMetrics for one project"""

    def __init__(self, now: Optional[datetime] = None):
        now = now or utcnow()
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        self.now = now
        self.stale_before = now - timedelta(days=t.STALE_AFTER_DAYS)

    def analyze(self, project: ProjectData) -> AnalyticsMetrics:
        """
        Calculate every metric for a project.

        Args:
            project: Canonical project data

        Returns:
            AnalyticsMetrics with all percentages except utilization in [0, 100]
        """
        tasks = project.tasks
        logger.info(
            "Calculating analytics for %s project %s (%d tasks, %d members)",
            project.platform.value, project.id, len(tasks), len(project.team)
        )

        completion_rate = self.completion_rate(tasks)
        blocked = sum(1 for task in tasks if is_blocked(task.status))
        overdue = sum(1 for task in tasks if self.is_overdue(task))
        adherence = self.timeline_adherence(len(tasks), overdue)
        risk = self.risk_level(blocked, adherence)
        efficiency = self.team_efficiency(tasks, len(project.team))
        quality = self.quality_breakdown(tasks)
        quality_score = self.quality_score(quality) if tasks else 0
        velocity = self.velocity_trend(project.sprints)
        workload = self.workload_distribution(tasks)

        return AnalyticsMetrics(
            completion_rate=completion_rate,
            velocity_trend=velocity,
            team_efficiency=efficiency,
            quality_score=quality_score,
            quality_breakdown=quality,
            risk_level=risk,
            blocked_items_count=blocked,
            overdue_tasks=overdue,
            timeline_adherence=adherence,
            workload_distribution=workload,
            collaboration_score=self.collaboration_score(tasks, len(project.team)),
            burndown_trend=self.burndown(tasks, project.sprints),
            status_distribution=self.status_distribution(tasks),
            priority_breakdown=self.priority_breakdown(tasks),
            estimated_completion=self.estimated_completion(tasks),
            recommended_actions=self.recommended_actions(
                risk, efficiency, quality_score, velocity, workload, blocked
            ),
            critical_path=self.critical_path(tasks),
        )

    # ==================== Performance ====================

    @staticmethod
    def completion_rate(tasks: Sequence[Task]) -> int:
        completed = sum(1 for task in tasks if is_completed(task.status))
        return clamp_percentage(100 * _ratio(completed, len(tasks)))

    @staticmethod
    def team_efficiency(tasks: Sequence[Task], team_size: int) -> int:
        if not tasks or not team_size:
            return 0
        assigned = [task for task in tasks if is_assigned(task.assignee)]
        completed_assigned = sum(1 for task in assigned if is_completed(task.status))

        assignment_rate = _ratio(len(assigned), len(tasks))
        assigned_completion = _ratio(completed_assigned, len(assigned))
        utilization = min(_ratio(len(assigned), team_size), 1.0)
        return clamp_percentage(100 * (
            t.EFFICIENCY_ASSIGNMENT_WEIGHT * assignment_rate
            + t.EFFICIENCY_COMPLETION_WEIGHT * assigned_completion
            + t.EFFICIENCY_UTILIZATION_WEIGHT * utilization
        ))

    def quality_breakdown(self, tasks: Sequence[Task]) -> QualityBreakdown:
        total = len(tasks)
        complete = sum(1 for task in tasks if task.assignee and task.priority)
        documented = sum(
            1 for task in tasks if len(task.name.strip()) > t.DESCRIPTIVE_NAME_LENGTH
        )
        adherent = sum(
            1 for task in tasks
            if is_completed(task.status)
            or (task.updated is not None and task.updated >= self.stale_before)
        )
        deliverable = sum(
            1 for task in tasks
            if not is_blocked(task.status) and not self.is_overdue(task)
        )
        return QualityBreakdown(
            task_completeness=clamp_percentage(100 * _ratio(complete, total)),
            documentation_quality=clamp_percentage(100 * _ratio(documented, total)),
            process_adherence=clamp_percentage(100 * _ratio(adherent, total)),
            deliverable_standards=clamp_percentage(100 * _ratio(deliverable, total)),
        )

    @staticmethod
    def quality_score(breakdown: QualityBreakdown) -> int:
        weighted = (
            t.QUALITY_COMPLETENESS_WEIGHT * breakdown.task_completeness
            + t.QUALITY_DOCUMENTATION_WEIGHT * breakdown.documentation_quality
            + t.QUALITY_PROCESS_WEIGHT * breakdown.process_adherence
            + t.QUALITY_DELIVERABLE_WEIGHT * breakdown.deliverable_standards
        )
        return clamp_percentage(weighted / 100)

    # ==================== Risk ====================

    def is_overdue(self, task: Task) -> bool:
        """Open and past its due date, or (undated) idle for too long"""
        if is_completed(task.status):
            return False
        if task.due_date is not None:
            return task.due_date < self.now.date()
        return task.updated is not None and task.updated < self.stale_before

    @staticmethod
    def timeline_adherence(total: int, overdue: int) -> int:
        if not total:
            return 100
        return clamp_percentage(100 * (total - overdue) / total)

    @staticmethod
    def risk_level(blocked: int, adherence: int) -> RiskLevel:
        if blocked > t.HIGH_RISK_BLOCKED or adherence < t.HIGH_RISK_ADHERENCE:
            return RiskLevel.HIGH
        if blocked > t.MEDIUM_RISK_BLOCKED or adherence < t.MEDIUM_RISK_ADHERENCE:
            return RiskLevel.MEDIUM
        return RiskLevel.LOW

    # ==================== Team ====================

    @staticmethod
    def workload_distribution(tasks: Sequence[Task]) -> List[WorkloadEntry]:
        """One entry per assignee in first-appearance order, unclamped"""
        counts: Dict[str, int] = {}
        for task in tasks:
            if is_assigned(task.assignee):
                counts[task.assignee] = counts.get(task.assignee, 0) + 1
        if not counts:
            return []

        average = sum(counts.values()) / len(counts)
        return [
            WorkloadEntry(
                member=member,
                task_count=count,
                utilization=round_half_up(100 * count / average),
            )
            for member, count in counts.items()
        ]

    @staticmethod
    def collaboration_score(tasks: Sequence[Task], team_size: int) -> int:
        if team_size < t.MIN_COLLABORATION_TEAM or not tasks:
            return 0
        assigned = [task.assignee for task in tasks if is_assigned(task.assignee)]
        involvement = len(set(assigned)) / team_size
        distribution = len(assigned) / len(tasks)
        return clamp_percentage(100 * (
            t.COLLABORATION_INVOLVEMENT_WEIGHT * involvement
            + t.COLLABORATION_DISTRIBUTION_WEIGHT * distribution
        ))

    # ==================== Trends ====================

    @staticmethod
    def velocity_trend(sprints: Sequence[Sprint]) -> VelocityTrend:
        if len(sprints) < 2:
            return VelocityTrend.STABLE
        previous = sprints[-2].completed_percentage()
        latest = sprints[-1].completed_percentage()
        if latest > previous:
            return VelocityTrend.INCREASING
        if latest < previous:
            return VelocityTrend.DECREASING
        return VelocityTrend.STABLE

    def _burndown_window(self, sprints: Sequence[Sprint]) -> Tuple[date, date]:
        dated = [
            sprint for sprint in sprints
            if sprint.start_date and sprint.end_date and sprint.end_date > sprint.start_date
        ]
        if dated:
            latest = max(dated, key=lambda sprint: sprint.end_date)
            return latest.start_date, latest.end_date
        end = self.now.date()
        return end - timedelta(days=t.BURNDOWN_POINTS - 1), end

    def burndown(self, tasks: Sequence[Task], sprints: Sequence[Sprint]) -> List[BurndownPoint]:
        """Linear burndown across the latest sprint (or the last days)"""
        start, end = self._burndown_window(sprints)
        total = len(tasks)
        remaining_open = sum(1 for task in tasks if not is_completed(task.status))
        steps = t.BURNDOWN_POINTS - 1
        span_days = (end - start).days

        points = []
        for index in range(t.BURNDOWN_POINTS):
            fraction = index / steps
            points.append(BurndownPoint(
                date=start + timedelta(days=round_half_up(span_days * fraction)),
                remaining=round(max(total - (total - remaining_open) * fraction, 0), 1),
                ideal=round(max(total - total * fraction, 0), 1),
            ))
        return points

    @staticmethod
    def status_distribution(tasks: Sequence[Task]) -> List[StatusShare]:
        counts = Counter(task.status or "Unknown" for task in tasks)
        percentages = largest_remainder_percentages(list(counts.values()))
        return [
            StatusShare(status=status, count=count, percentage=percentage)
            for (status, count), percentage in zip(counts.items(), percentages)
        ]

    @staticmethod
    def priority_breakdown(tasks: Sequence[Task]) -> List[PriorityShare]:
        counts = Counter(task.priority or "None" for task in tasks)
        percentages = largest_remainder_percentages(list(counts.values()))
        return [
            PriorityShare(priority=priority, count=count, percentage=percentage)
            for (priority, count), percentage in zip(counts.items(), percentages)
        ]

    # ==================== Predictive ====================

    def estimated_completion(self, tasks: Sequence[Task]) -> str:
        completed = sum(1 for task in tasks if is_completed(task.status))
        remaining = len(tasks) - completed
        rate = _ratio(completed, len(tasks))
        if rate > 0:
            days = math.ceil(remaining / (rate * t.DAYS_PER_WEEK))
        else:
            days = t.DEFAULT_COMPLETION_DAYS
        return (self.now + timedelta(days=days)).date().isoformat()

    @staticmethod
    def critical_path(tasks: Sequence[Task]) -> List[str]:
        """Open high-priority tasks, oldest first, undated last"""
        critical = [
            task for task in tasks
            if (task.priority or "").strip().lower() == t.HIGH_PRIORITY
            and not is_completed(task.status)
        ]
        critical.sort(key=lambda task: (task.created is None, task.created or datetime.min))
        return [task.name for task in critical]

    @staticmethod
    def recommended_actions(
        risk: RiskLevel,
        efficiency: int,
        quality: int,
        velocity: VelocityTrend,
        workload: Sequence[WorkloadEntry],
        blocked: int,
    ) -> List[str]:
        actions = []
        if risk == RiskLevel.HIGH:
            actions.append(
                f"Implement risk mitigation: resolve {blocked} blocked item(s) "
                "and recover overdue work"
            )
        if efficiency < t.EFFICIENCY_TARGET:
            actions.append(f"Optimize workflows to raise team efficiency ({efficiency}%)")
        if quality < t.QUALITY_TARGET:
            actions.append(f"Strengthen quality assurance practices (quality score {quality}%)")
        if velocity == VelocityTrend.DECREASING:
            actions.append("Investigate the decline in sprint velocity")

        overloaded = [entry.member for entry in workload if entry.utilization > t.OVERUTILIZED_ABOVE]
        if overloaded:
            actions.append(f"Rebalance workload for overutilized members: {', '.join(overloaded)}")
        idle = [entry.member for entry in workload if entry.utilization < t.UNDERUTILIZED_BELOW]
        if idle:
            actions.append(f"Assign more work to underutilized members: {', '.join(idle)}")

        if not actions:
            actions.append("Maintain current strategy: project metrics are on track")
        return actions


def analyze(project: ProjectData, now: Optional[datetime] = None) -> AnalyticsMetrics:
    """Calculate analytics for a project (see AnalyticsEngine.analyze)"""
    return AnalyticsEngine(now=now).analyze(project)
