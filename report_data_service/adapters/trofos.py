# Copyright (c) 2025 Bytedance Ltd. and/or its affiliates
# SPDX-License-Identifier: MIT

"""
TROFOS adapter

TROFOS projects carry backlog items at the top level, embedded in their
sprints, or both. Field names come in camelCase and snake_case depending
on the endpoint that produced them.
"""
from typing import Any, Dict, List

from report_data_service.analytics.thresholds import is_completed, round_half_up
from report_data_service.models import Platform, ProjectMetric, Sprint, Task, TeamMember

from .base import (
    BasePlatformAdapter,
    _as_list,
    _first,
    _named,
    _parse_date,
    _parse_datetime,
    _percentage,
    _person,
    _story_points,
    _text,
)

_SPRINT_ITEM_KEYS = ("backlog_items", "backlogs", "items")


class TrofosAdapter(BasePlatformAdapter):
    """Adapter for TROFOS projects"""

    platform = Platform.TROFOS
    task_keys = ("backlogItems", "backlog_items", "backlogs", "tasks")

    def raw_tasks(self, record: Dict[str, Any]) -> List[Dict[str, Any]]:
        """Top-level backlog plus items embedded in sprints, unique by id"""
        items = list(super().raw_tasks(record))
        sprint_items = []
        for sprint in _as_list(record.get("sprints")):
            if not isinstance(sprint, dict):
                continue
            sprint_name = _text(sprint.get("name"))
            for key in _SPRINT_ITEM_KEYS:
                for item in _as_list(sprint.get(key)):
                    if isinstance(item, dict):
                        if sprint_name and not _first(item, "sprint", "sprint_name", "sprintName"):
                            item = dict(item, sprint_name=sprint_name)
                        sprint_items.append(item)

        seen = {_text(item.get("id")) for item in items if _text(item.get("id"))}
        for item in sprint_items:
            item_id = _text(item.get("id"))
            if item_id and item_id in seen:
                continue
            if item_id:
                seen.add(item_id)
            items.append(item)
        return items

    def parse_task(self, raw: Dict[str, Any], index: int) -> Task:
        """Parse a backlog item into a Task"""
        sprint = _first(raw, "sprint", "sprint_name", "sprintName")
        return Task(
            id=_text(raw.get("id")) or f"item_{index}",
            name=_text(_first(raw, "title", "name")) or self.unnamed_task,
            status=_named(raw.get("status")) or "Unknown",
            assignee=_person(_first(raw, "assignee", "assignee_name", "assigneeName")),
            priority=_named(raw.get("priority")),
            created=_parse_datetime(_first(raw, "createdAt", "created_at", "created")),
            updated=_parse_datetime(_first(raw, "updatedAt", "updated_at", "updated")),
            story_points=_story_points(_first(raw, "story_points", "storyPoints", "points")),
            group=_named(sprint),
            due_date=_parse_date(_first(raw, "dueDate", "due_date")),
        )

    def parse_team(
        self,
        record: Dict[str, Any],
        tasks: List[Task]
    ) -> List[TeamMember]:
        for key in ("team", "members", "resources"):
            members = self.members_from(_as_list(record.get(key)))
            if members:
                return members
        return self.members_from_assignees(tasks)

    def parse_sprint(self, raw: Dict[str, Any], index: int) -> Sprint:
        """Sprints without a completion figure derive it from their items"""
        sprint = super().parse_sprint(raw, index)
        if _first(raw, "completed", "completion", "progress") is not None:
            return sprint

        items = [
            item
            for key in _SPRINT_ITEM_KEYS
            for item in _as_list(raw.get(key))
            if isinstance(item, dict)
        ]
        if not items:
            return sprint
        done = sum(1 for item in items if is_completed(_named(item.get("status"))))
        return sprint.model_copy(
            update={"completed": _percentage(round_half_up(100 * done / len(items)))}
        )

    def platform_metrics(
        self,
        record: Dict[str, Any],
        tasks: List[Task]
    ) -> List[ProjectMetric]:
        sprint_count = _first(record, "sprintCount", "sprint_count")
        total_points = _first(record, "totalStoryPoints", "total_story_points")
        if total_points is None:
            total_points = sum(task.story_points or 0 for task in tasks)
        return [
            ProjectMetric(
                name="Sprint Count",
                value=(
                    sprint_count if sprint_count is not None
                    else len(_as_list(record.get("sprints")))
                ),
                type="number",
            ),
            ProjectMetric(
                name="Total Story Points",
                value=total_points,
                type="number",
            ),
        ]
