# Copyright (c) 2025 Bytedance Ltd. and/or its affiliates
# SPDX-License-Identifier: MIT

"""
Jira adapter

Maps Jira projects and issues onto the canonical model. Issue fields may
arrive flattened by the integrations layer or nested under "fields" as the
Jira REST API returns them; both are read.
"""
from typing import Any, Dict, List, Optional

from report_data_service.analytics.thresholds import is_completed
from report_data_service.models import Platform, ProjectMetric, Task

from .base import (
    BasePlatformAdapter,
    _first,
    _named,
    _parse_date,
    _parse_datetime,
    _person,
    _story_points,
    _text,
)

# Jira Cloud defaults for story points and sprint custom fields
STORY_POINTS_FIELD = "customfield_10016"
SPRINT_FIELD = "customfield_10020"


class JiraAdapter(BasePlatformAdapter):
    """Adapter for Jira projects"""

    platform = Platform.JIRA
    task_keys = ("issues", "tasks")
    unnamed_task = "Unnamed Issue"

    def project_name(self, record: Dict[str, Any]) -> Optional[str]:
        return _text(record.get("name")) or _text(record.get("key"))

    def parse_task(self, raw: Dict[str, Any], index: int) -> Task:
        """Parse a Jira issue into a Task"""
        fields = raw.get("fields") if isinstance(raw.get("fields"), dict) else {}

        def field(*keys: str) -> Any:
            value = _first(raw, *keys)
            return value if value is not None else _first(fields, *keys)

        # Prefer key (e.g., "SCRUM-123") over numeric ID
        issue_id = _text(raw.get("key")) or _text(raw.get("id")) or f"issue_{index}"

        return Task(
            id=issue_id,
            name=_text(field("summary", "name")) or self.unnamed_task,
            status=_named(field("status")) or "Unknown",
            assignee=_person(field("assignee")),
            priority=_named(field("priority")),
            created=_parse_datetime(field("created")),
            updated=_parse_datetime(field("updated")),
            story_points=_story_points(field("storyPoints", STORY_POINTS_FIELD, "story_points")),
            group=self._sprint_name(field(SPRINT_FIELD, "sprint")),
            due_date=_parse_date(field("duedate", "dueDate")),
        )

    @staticmethod
    def _sprint_name(sprint_field: Any) -> Optional[str]:
        # Sprint field is an array of sprint objects; take the first
        if isinstance(sprint_field, list):
            sprint_field = sprint_field[0] if sprint_field else None
        return _named(sprint_field)

    def platform_metrics(
        self,
        record: Dict[str, Any],
        tasks: List[Task]
    ) -> List[ProjectMetric]:
        issue_count = record.get("issueCount")
        open_issues = record.get("openIssues")
        return [
            ProjectMetric(
                name="Project Key",
                value=_text(record.get("key")) or _text(record.get("id")),
                type="text",
            ),
            ProjectMetric(
                name="Issue Count",
                value=issue_count if issue_count is not None else len(tasks),
                type="number",
            ),
            ProjectMetric(
                name="Open Issues",
                value=(
                    open_issues if open_issues is not None
                    else sum(1 for task in tasks if not is_completed(task.status))
                ),
                type="number",
            ),
        ]
