# Copyright (c) 2025 Bytedance Ltd. and/or its affiliates
# SPDX-License-Identifier: MIT

"""
Monday.com adapter

Boards map to projects and items to tasks. Item attributes such as status,
people and dates usually live in "column_values"; flattened attributes set
by the integrations layer take precedence.
"""
from typing import Any, Dict, List, Optional

from report_data_service.models import Platform, ProjectMetric, Task, TeamMember

from .base import (
    BasePlatformAdapter,
    _as_list,
    _first,
    _named,
    _parse_date,
    _parse_datetime,
    _person,
    _story_points,
    _text,
)

_STATUS_COLUMNS = ("status",)
_PEOPLE_COLUMNS = ("people", "person", "multiple-person", "owner")
_PRIORITY_COLUMNS = ("priority",)
_DATE_COLUMNS = ("date", "due_date")
_NUMBER_COLUMNS = ("numbers", "numeric", "story_points")


def _column_text(item: Dict[str, Any], kinds: tuple) -> Optional[str]:
    """Text of the first column whose id, type or title matches a kind"""
    for column in _as_list(item.get("column_values")):
        if not isinstance(column, dict):
            continue
        tags = {
            (_text(column.get(key)) or "").lower()
            for key in ("id", "type", "title")
        }
        if tags.intersection(kinds):
            text = _text(column.get("text"))
            if text:
                return text
    return None


class MondayAdapter(BasePlatformAdapter):
    """Adapter for Monday.com boards"""

    platform = Platform.MONDAY
    task_keys = ("items", "tasks")

    def raw_tasks(self, record: Dict[str, Any]) -> List[Dict[str, Any]]:
        items = super().raw_tasks(record)
        if items:
            return items
        # GraphQL boards page their items
        page = record.get("items_page")
        if isinstance(page, dict):
            return [item for item in _as_list(page.get("items")) if isinstance(item, dict)]
        return []

    def project_status(self, record: Dict[str, Any]) -> str:
        return _named(_first(record, "status", "boardState", "state")) or "active"

    def parse_task(self, raw: Dict[str, Any], index: int) -> Task:
        """Parse a board item into a Task"""
        assignee = _person(raw.get("assignee")) or _column_text(raw, _PEOPLE_COLUMNS)
        if assignee and "," in assignee:
            # People columns list every person; the first one owns the item
            assignee = assignee.split(",")[0].strip()
        points = _first(raw, "storyPoints", "story_points")
        if points is None:
            points = _column_text(raw, _NUMBER_COLUMNS)

        return Task(
            id=_text(raw.get("id")) or f"item_{index}",
            name=_text(_first(raw, "name", "title")) or self.unnamed_task,
            status=(
                _named(raw.get("status"), "label", "text", "name")
                or _column_text(raw, _STATUS_COLUMNS)
                or "Unknown"
            ),
            assignee=assignee,
            priority=_named(raw.get("priority"), "label", "text", "name")
            or _column_text(raw, _PRIORITY_COLUMNS),
            created=_parse_datetime(_first(raw, "created", "created_at", "createdAt")),
            updated=_parse_datetime(_first(raw, "updated", "updated_at", "updatedAt")),
            story_points=_story_points(points),
            group=_named(raw.get("group"), "title", "name"),
            due_date=_parse_date(
                _first(raw, "dueDate", "due_date") or _column_text(raw, _DATE_COLUMNS)
            ),
        )

    def parse_team(
        self,
        record: Dict[str, Any],
        tasks: List[Task]
    ) -> List[TeamMember]:
        """Explicit team, else board owners followed by item assignees"""
        members = self.members_from(_as_list(record.get("team")))
        if members:
            return members

        members = self.members_from(_as_list(record.get("owners")), default_role="Owner")
        owners = {member.name for member in members}
        for member in self.members_from_assignees(tasks, role="Member"):
            if member.name not in owners:
                members.append(member)
        return members

    def platform_metrics(
        self,
        record: Dict[str, Any],
        tasks: List[Task]
    ) -> List[ProjectMetric]:
        items_count = _first(record, "itemsCount", "items_count")
        return [
            ProjectMetric(
                name="Board Items",
                value=items_count if items_count is not None else len(tasks),
                type="number",
            ),
            ProjectMetric(
                name="Board State",
                value=_text(_first(record, "boardState", "state")) or "Active",
                type="text",
            ),
        ]
