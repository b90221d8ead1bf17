# Copyright (c) 2025 Bytedance Ltd. and/or its affiliates
# SPDX-License-Identifier: MIT

"""
Per-platform archetypes for synthetic project data.

Each archetype uses the platform's own status vocabulary so that reports
rendered from fallback data look like the platform they stand in for.
"""
from dataclasses import dataclass
from typing import Dict, Tuple

from report_data_service.models import Platform


@dataclass(frozen=True)
class Archetype:
    """Vocabulary and shape of one platform's synthetic projects"""
    statuses: Tuple[Tuple[str, int], ...]  # (status, weight)
    priorities: Tuple[str, ...]
    team: Tuple[Tuple[str, str], ...]  # (name, role)
    task_names: Tuple[str, ...]
    groups: Tuple[str, ...] = ()
    sprint_count: int = 0
    story_points: Tuple[int, ...] = ()
    key_tasks: bool = False


ARCHETYPES: Dict[Platform, Archetype] = {
    Platform.JIRA: Archetype(
        statuses=(
            ("To Do", 3), ("In Progress", 3), ("In Review", 2),
            ("Done", 4), ("Blocked", 1),
        ),
        priorities=("Highest", "High", "Medium", "Low"),
        team=(
            ("Bryan", "Frontend Developer"),
            ("Jian Da", "Backend Developer"),
            ("Kelvin", "Scrum Master"),
        ),
        task_names=(
            "Setup Project Repository",
            "Implement Auth Service",
            "Create Frontend Components",
            "Fix Login Bug",
            "Add Report Export Endpoint",
            "Write Integration Tests",
            "Configure Monitoring Alerts",
            "Refactor Data Access Layer",
            "Document Public API",
            "Harden Session Handling",
        ),
        sprint_count=3,
        story_points=(1, 2, 3, 5, 8),
        key_tasks=True,
    ),
    Platform.MONDAY: Archetype(
        statuses=(
            ("Not Started", 2), ("Working on it", 4), ("Stuck", 1), ("Done", 4),
        ),
        priorities=("Critical", "High", "Medium", "Low"),
        team=(
            ("Bryan", "UI/UX Designer"),
            ("Jian Da", "Backend Developer"),
            ("Kelvin", "Full Stack Developer"),
        ),
        task_names=(
            "Design UI Components",
            "Implement API Gateway",
            "Write Unit Tests",
            "Setup CI/CD Pipeline",
            "Prepare Sprint Demo",
            "Update Stakeholder Dashboard",
            "Review Accessibility Checklist",
            "Plan Release Communication",
        ),
        groups=("This Week", "Next Week", "Backlog"),
    ),
    Platform.TROFOS: Archetype(
        statuses=(
            ("To Do", 2), ("In Progress", 3), ("Pending", 2), ("Completed", 4),
        ),
        priorities=("High", "Medium", "Low"),
        team=(
            ("Bryan", "Research Lead"),
            ("Jian Da", "Technical Lead"),
            ("Kelvin", "Project Manager"),
        ),
        task_names=(
            "Market Research",
            "Competitor Analysis",
            "Platform Development",
            "User Testing",
            "Define Acceptance Criteria",
            "Prototype Review Session",
            "Deployment Planning",
            "Retrospective Action Items",
        ),
        sprint_count=3,
        story_points=(1, 2, 3, 5, 8, 13),
    ),
    Platform.OTHER: Archetype(
        statuses=(("To Do", 2), ("In Progress", 3), ("Done", 3)),
        priorities=("High", "Medium", "Low"),
        team=(
            ("Bryan", "Team Member"),
            ("Jian Da", "Team Member"),
            ("Kelvin", "Team Lead"),
        ),
        task_names=(
            "Project Kickoff",
            "Requirements Gathering",
            "Core Implementation",
            "Quality Assurance Pass",
            "Release Preparation",
            "Write User Documentation",
        ),
        sprint_count=2,
    ),
}


def get_archetype(platform: Platform) -> Archetype:
    return ARCHETYPES.get(platform, ARCHETYPES[Platform.OTHER])
