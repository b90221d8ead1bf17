"""
Unit tests for the analytics engine
"""

from datetime import date, datetime, timedelta, timezone

import pytest

from report_data_service.analytics import (
    AnalyticsEngine,
    analyze,
    largest_remainder_percentages,
    round_half_up,
)
from report_data_service.models import (
    Platform,
    ProjectData,
    RiskLevel,
    Sprint,
    Task,
    TeamMember,
    VelocityTrend,
)

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


def make_project(tasks=(), team=(), sprints=()):
    return ProjectData(
        id="P",
        name="Project",
        platform=Platform.JIRA,
        tasks=list(tasks),
        team=list(team),
        sprints=list(sprints),
    )


def task(name="Task", **kwargs):
    return Task(name=name, **kwargs)


class TestHelpers:
    """Tests for rounding helpers."""

    @pytest.mark.parametrize("value,expected", [(2.5, 3), (2.4, 2), (49.5, 50), (0.0, 0)])
    def test_round_half_up(self, value, expected):
        assert round_half_up(value) == expected

    def test_largest_remainder_sums_to_100(self):
        assert largest_remainder_percentages([1, 1, 1]) == [34, 33, 33]
        assert sum(largest_remainder_percentages([3, 5, 7, 2])) == 100
        assert largest_remainder_percentages([]) == []
        assert largest_remainder_percentages([0, 0]) == [0, 0]


class TestCoreScenarios:
    """Tests for headline metrics."""

    def test_completion_and_risk(self):
        project = make_project(tasks=[
            task(status="Done"), task(status="Done"), task(status="To Do"), task(status="Blocked"),
        ])

        metrics = analyze(project, now=NOW)

        assert metrics.completion_rate == 50
        assert metrics.blocked_items_count == 1
        assert metrics.overdue_tasks == 0
        assert metrics.timeline_adherence == 100
        assert metrics.risk_level == RiskLevel.LOW

    def test_workload_utilization_is_unclamped(self):
        tasks = [task(assignee="A")] * 2 + [task(assignee="B")] * 6

        metrics = analyze(make_project(tasks=tasks), now=NOW)

        workload = {entry.member: entry for entry in metrics.workload_distribution}
        assert workload["A"].task_count == 2
        assert workload["A"].utilization == 50
        assert workload["B"].utilization == 150
        assert any("overutilized members: B" in action for action in metrics.recommended_actions)
        assert any("underutilized members: A" in action for action in metrics.recommended_actions)

    def test_empty_project(self):
        metrics = analyze(make_project(), now=NOW)

        assert metrics.completion_rate == 0
        assert metrics.team_efficiency == 0
        assert metrics.quality_score == 0
        assert metrics.collaboration_score == 0
        assert metrics.timeline_adherence == 100
        assert metrics.status_distribution == []
        assert len(metrics.burndown_trend) == 10
        assert metrics.estimated_completion == "2025-07-01"

    def test_percentages_are_clamped(self):
        team = [TeamMember(name="A"), TeamMember(name="B")]
        tasks = [task(assignee=n, status="Done", priority="High") for n in "ABCDE"]

        metrics = analyze(make_project(tasks=tasks, team=team), now=NOW)

        for value in (
            metrics.completion_rate, metrics.team_efficiency, metrics.quality_score,
            metrics.collaboration_score, metrics.timeline_adherence,
        ):
            assert 0 <= value <= 100
        assert metrics.collaboration_score == 100


class TestRisk:
    """Tests for overdue detection and risk levels."""

    def test_overdue_by_due_date_or_staleness(self):
        engine = AnalyticsEngine(now=NOW)
        assert engine.is_overdue(task(due_date=date(2025, 5, 1)))
        assert not engine.is_overdue(task(due_date=date(2025, 6, 10), updated=NOW - timedelta(days=60)))
        assert engine.is_overdue(task(updated=NOW - timedelta(days=15)))
        assert not engine.is_overdue(task(updated=NOW - timedelta(days=13)))
        assert not engine.is_overdue(task(status="Done", due_date=date(2025, 1, 1)))
        assert not engine.is_overdue(task())

    @pytest.mark.parametrize("blocked,adherence,expected", [
        (0, 100, RiskLevel.LOW),
        (2, 80, RiskLevel.LOW),
        (3, 100, RiskLevel.MEDIUM),
        (5, 100, RiskLevel.MEDIUM),
        (0, 79, RiskLevel.MEDIUM),
        (6, 100, RiskLevel.HIGH),
        (0, 59, RiskLevel.HIGH),
    ])
    def test_risk_level(self, blocked, adherence, expected):
        assert AnalyticsEngine.risk_level(blocked, adherence) == expected

    def test_stale_work_raises_risk(self):
        stale = NOW - timedelta(days=30)
        tasks = [task(status="In Progress", updated=stale)] * 3 + [task(status="Done")]

        metrics = analyze(make_project(tasks=tasks), now=NOW)

        assert metrics.overdue_tasks == 3
        assert metrics.timeline_adherence == 25
        assert metrics.risk_level == RiskLevel.HIGH
        assert metrics.recommended_actions[0].startswith("Implement risk mitigation")


class TestTeamAndQuality:
    """Tests for efficiency, collaboration and quality."""

    def test_team_efficiency(self):
        team = [TeamMember(name="A"), TeamMember(name="B"), TeamMember(name="C"), TeamMember(name="D")]
        tasks = [
            task(assignee="A", status="Done"),
            task(assignee="B", status="To Do"),
            task(status="To Do"),
            task(assignee="Unassigned", status="Done"),
        ]
        # 0.3 * 0.5 + 0.5 * 0.5 + 0.2 * 0.5 = 0.5
        assert AnalyticsEngine.team_efficiency(tasks, len(team)) == 50

    def test_collaboration_needs_two_members(self):
        assert AnalyticsEngine.collaboration_score([task(assignee="A")], 1) == 0

    def test_collaboration_score(self):
        tasks = [task(assignee="A"), task(assignee="A"), task(), task()]
        # 0.6 * 1/2 + 0.4 * 2/4 = 0.5
        assert AnalyticsEngine.collaboration_score(tasks, 2) == 50

    def test_quality_breakdown(self):
        tasks = [
            task(name="Implement Auth Service", assignee="A", priority="High", status="Done"),
            task(name="Fix", assignee="B", status="Blocked", updated=NOW - timedelta(days=2)),
        ]

        metrics = analyze(make_project(tasks=tasks), now=NOW)

        breakdown = metrics.quality_breakdown
        assert breakdown.task_completeness == 50
        assert breakdown.documentation_quality == 50
        assert breakdown.process_adherence == 100
        assert breakdown.deliverable_standards == 50
        # (25 * 50 + 20 * 50 + 25 * 100 + 30 * 50) / 100
        assert metrics.quality_score == 63


class TestTrends:
    """Tests for velocity, burndown and distributions."""

    @pytest.mark.parametrize("completions,expected", [
        (["50%", "70%"], VelocityTrend.INCREASING),
        (["70%", "50%"], VelocityTrend.DECREASING),
        (["60%", "60%"], VelocityTrend.STABLE),
        (["90%"], VelocityTrend.STABLE),
        ([], VelocityTrend.STABLE),
    ])
    def test_velocity_trend(self, completions, expected):
        sprints = [Sprint(name=f"S{i}", completed=c) for i, c in enumerate(completions)]
        assert AnalyticsEngine.velocity_trend(sprints) == expected

    def test_burndown_uses_latest_sprint(self):
        sprints = [
            Sprint(name="S1", start_date=date(2025, 4, 1), end_date=date(2025, 4, 10)),
            Sprint(name="S2", start_date=date(2025, 5, 1), end_date=date(2025, 5, 19)),
        ]
        tasks = [task(status="Done")] * 3 + [task(status="To Do")] * 6

        points = analyze(make_project(tasks=tasks, sprints=sprints), now=NOW).burndown_trend

        assert len(points) == 10
        assert points[0].date == date(2025, 5, 1)
        assert points[-1].date == date(2025, 5, 19)
        assert (points[0].remaining, points[0].ideal) == (9, 9)
        assert (points[-1].remaining, points[-1].ideal) == (6, 0)

    def test_burndown_without_sprints_ends_today(self):
        points = analyze(make_project(tasks=[task()]), now=NOW).burndown_trend
        assert points[0].date == date(2025, 5, 23)
        assert points[-1].date == date(2025, 6, 1)

    def test_status_distribution(self):
        tasks = [task(status="Done"), task(status="To Do"), task(status="In Progress")]

        distribution = analyze(make_project(tasks=tasks), now=NOW).status_distribution

        assert [(s.status, s.count) for s in distribution] == [
            ("Done", 1), ("To Do", 1), ("In Progress", 1),
        ]
        assert sum(s.percentage for s in distribution) == 100

    def test_priority_breakdown_uses_real_priorities(self):
        tasks = [task(priority="High"), task(priority="High"), task(), task(priority="Low")]

        breakdown = analyze(make_project(tasks=tasks), now=NOW).priority_breakdown

        assert [(p.priority, p.count, p.percentage) for p in breakdown] == [
            ("High", 2, 50), ("None", 1, 25), ("Low", 1, 25),
        ]


class TestPredictive:
    """Tests for forecasts and recommendations."""

    def test_critical_path_order(self):
        tasks = [
            task(name="Undated", priority="High"),
            task(name="Newer", priority="high", created=NOW - timedelta(days=1)),
            task(name="Older", priority="HIGH", created=NOW - timedelta(days=5)),
            task(name="Finished", priority="High", status="Done"),
            task(name="Highest", priority="Highest"),
        ]
        assert AnalyticsEngine.critical_path(tasks) == ["Older", "Newer", "Undated"]

    def test_estimated_completion(self):
        tasks = [task(status="Done")] * 2 + [task(status="To Do")] * 2
        # ceil(2 / (0.5 * 7)) = 1 day
        assert AnalyticsEngine(now=NOW).estimated_completion(tasks) == "2025-06-02"

    def test_healthy_project_keeps_strategy(self):
        team = [TeamMember(name="A"), TeamMember(name="B")]
        tasks = [
            task(name="Implement Auth Service", assignee="A", priority="Low",
                 status="Done", updated=NOW),
            task(name="Create Frontend Components", assignee="B", priority="Low",
                 status="Done", updated=NOW),
        ]

        metrics = analyze(make_project(tasks=tasks, team=team), now=NOW)

        assert metrics.team_efficiency == 100
        assert metrics.quality_score == 100
        assert metrics.recommended_actions == [
            "Maintain current strategy: project metrics are on track"
        ]

    def test_recommendation_order(self):
        actions = AnalyticsEngine.recommended_actions(
            RiskLevel.HIGH, 10, 10, VelocityTrend.DECREASING, [], 7
        )
        assert [action.split(" ")[0] for action in actions] == [
            "Implement", "Optimize", "Strengthen", "Investigate",
        ]

    def test_to_dict_uses_camel_case(self):
        record = analyze(make_project(tasks=[task(status="Done")]), now=NOW).to_dict()
        assert record["completionRate"] == 100
        assert record["riskLevel"] == "low"
        assert record["burndownTrend"][0]["date"] == "2025-05-23"
