# Copyright (c) 2025 Bytedance Ltd. and/or its affiliates
# SPDX-License-Identifier: MIT

"""
Generic adapter for platforms without dedicated field knowledge.
"""
from typing import Any, Dict

from report_data_service.models import Platform, Task

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


class GenericAdapter(BasePlatformAdapter):
    """Best-effort mapping of common task field names"""

    platform = Platform.OTHER
    task_keys = ("tasks", "items", "issues")

    def parse_task(self, raw: Dict[str, Any], index: int) -> Task:
        return Task(
            id=_text(_first(raw, "id", "key")) or f"task_{index}",
            name=_text(_first(raw, "name", "title", "summary")) or self.unnamed_task,
            status=_named(raw.get("status")) or "Unknown",
            assignee=_person(raw.get("assignee")),
            priority=_named(raw.get("priority")),
            created=_parse_datetime(_first(raw, "created", "createdAt", "created_at")),
            updated=_parse_datetime(_first(raw, "updated", "updatedAt", "updated_at")),
            story_points=_story_points(_first(raw, "storyPoints", "story_points")),
            group=_named(_first(raw, "group", "sprint"), "title", "name"),
            due_date=_parse_date(_first(raw, "dueDate", "due_date", "duedate")),
        )
