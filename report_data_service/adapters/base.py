# Copyright (c) 2025 Bytedance Ltd. and/or its affiliates
# SPDX-License-Identifier: MIT

"""
Base platform adapter

Defines the conversion every platform adapter performs: one raw project
record in, one canonical ProjectData out. Subclasses only describe where
their platform keeps tasks, people and sprints.
"""
import logging
from abc import ABC, abstractmethod
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple

from report_data_service.client.payloads import RawPayload, UnknownPayload, classify_payload
from report_data_service.models import (
    Platform,
    ProjectData,
    ProjectMetric,
    Sprint,
    Task,
    TeamMember,
    utcnow,
)

logger = logging.getLogger(__name__)

_PERSON_NAME_KEYS = ("displayName", "name", "username", "fullName", "email")


def _text(value: Any) -> Optional[str]:
    """Scalar as trimmed text; None for empty values and containers"""
    if value is None or isinstance(value, (dict, list, tuple, set)):
        return None
    text = str(value).strip()
    return text or None


def _first(record: Dict[str, Any], *keys: str) -> Any:
    """First value among keys that is neither None nor an empty string"""
    for key in keys:
        value = record.get(key)
        if value is not None and value != "":
            return value
    return None


def _named(value: Any, *keys: str) -> Optional[str]:
    """Text of a value that may be a plain string or an object with a name"""
    if isinstance(value, dict):
        for key in keys or ("name",):
            text = _text(value.get(key))
            if text:
                return text
        return None
    return _text(value)


def _person(value: Any) -> Optional[str]:
    return _named(value, *_PERSON_NAME_KEYS)


def _parse_datetime(dt_str: Any) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp, including Jira's '+0000' offsets"""
    if isinstance(dt_str, datetime):
        return dt_str
    if not dt_str or not isinstance(dt_str, str):
        return None
    try:
        # Jira format: "2023-01-15T10:30:00.000+0000"
        dt_str = (
            dt_str.strip()
            .replace("+0000", "+00:00")
            .replace("Z", "+00:00")
        )
        return datetime.fromisoformat(dt_str)
    except ValueError:
        return None


def _parse_date(date_str: Any) -> Optional[date]:
    """Parse a date string (YYYY-MM-DD or a full timestamp) to a date"""
    if isinstance(date_str, datetime):
        return date_str.date()
    if isinstance(date_str, date):
        return date_str
    parsed = _parse_datetime(date_str)
    return parsed.date() if parsed else None


def _story_points(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _percentage(value: Any) -> str:
    """Completion value as a percentage string such as '65%'"""
    if isinstance(value, str):
        stripped = value.strip().rstrip("%").strip()
    else:
        stripped = value
    number = _story_points(stripped)
    if number is None:
        return "0%"
    if number.is_integer():
        return f"{int(number)}%"
    return f"{number:g}%"


def _as_list(value: Any) -> List[Any]:
    return value if isinstance(value, list) else []


class BasePlatformAdapter(ABC):
    """
    Abstract base for platform adapters.

    Adapters are pure and stateless; the registry creates one per platform.
    """

    platform: Platform = Platform.OTHER
    task_keys: Tuple[str, ...] = ("tasks",)
    unnamed_task = "Unnamed Item"

    @property
    def unnamed_project(self) -> str:
        return f"Unnamed {self.platform.display_name} Project"

    # ==================== Entry points ====================

    def normalize(
        self,
        raw: Any,
        project_id: Optional[str] = None
    ) -> List[ProjectData]:
        """
        Convert a payload (or an undecoded body) into canonical projects.

        Records with neither identity nor task data are dropped; an
        unrecognised payload yields an empty list.
        """
        if not isinstance(raw, RawPayload):
            raw = classify_payload(self.platform, raw)
        if isinstance(raw, UnknownPayload):
            logger.warning(
                "Unrecognised %s payload (%s); nothing to normalize",
                self.platform.value, raw.reason
            )
            return []

        projects = []
        for record in raw.records:
            project = self.adapt(record, project_id)
            if project is not None:
                projects.append(project)
        logger.debug(
            "Normalized %d of %d %s record(s)",
            len(projects), len(raw.records), self.platform.value
        )
        return projects

    def adapt(
        self,
        record: Dict[str, Any],
        project_id: Optional[str] = None
    ) -> Optional[ProjectData]:
        """Convert one raw project record; None when it has no identity"""
        identity = _text(_first(record, "id", "key"))
        name = self.project_name(record)
        raw_tasks = self.raw_tasks(record)

        if not identity and not name and not raw_tasks:
            logger.warning(
                "Skipping %s record without id, name or tasks", self.platform.value
            )
            return None

        tasks = self.parse_tasks(raw_tasks)
        return ProjectData(
            id=identity or _text(project_id) or "unknown",
            name=name or self.unnamed_project,
            platform=self.platform,
            status=self.project_status(record),
            description=_text(record.get("description")),
            tasks=tasks,
            team=self.parse_team(record, tasks),
            sprints=self.parse_sprints(record),
            metrics=self.passthrough_metrics(record) + self.platform_metrics(record, tasks),
            fallback_data=False,
            last_updated=utcnow(),
        )

    # ==================== Platform hooks ====================

    def project_name(self, record: Dict[str, Any]) -> Optional[str]:
        return _text(record.get("name"))

    def project_status(self, record: Dict[str, Any]) -> str:
        return _named(record.get("status")) or "active"

    def raw_tasks(self, record: Dict[str, Any]) -> List[Dict[str, Any]]:
        for key in self.task_keys:
            items = record.get(key)
            if isinstance(items, list) and items:
                return [item for item in items if isinstance(item, dict)]
        return []

    @abstractmethod
    def parse_task(self, raw: Dict[str, Any], index: int) -> Task:
        """Map one raw task onto the canonical Task"""
        pass

    def platform_metrics(
        self,
        record: Dict[str, Any],
        tasks: List[Task]
    ) -> List[ProjectMetric]:
        return []

    # ==================== Shared conversions ====================

    def parse_tasks(self, raw_tasks: Iterable[Dict[str, Any]]) -> List[Task]:
        tasks = []
        for index, raw in enumerate(raw_tasks):
            try:
                tasks.append(self.parse_task(raw, index))
            except (TypeError, ValueError) as e:
                logger.warning(
                    "Skipping unparseable %s task %d: %s",
                    self.platform.value, index, e
                )
        return tasks

    def parse_team(
        self,
        record: Dict[str, Any],
        tasks: List[Task]
    ) -> List[TeamMember]:
        """Explicit team list if present, else the distinct task assignees"""
        members = self.members_from(_as_list(record.get("team")))
        if members:
            return members
        return self.members_from_assignees(tasks)

    @staticmethod
    def members_from(
        raw_members: Iterable[Any],
        default_role: str = "Team Member"
    ) -> List[TeamMember]:
        """Team members from strings or person objects, unique by name"""
        members: List[TeamMember] = []
        seen = set()
        for raw in raw_members:
            name = _person(raw)
            if not name or name in seen:
                continue
            seen.add(name)
            if isinstance(raw, dict):
                members.append(TeamMember(
                    id=_text(_first(raw, "id", "accountId", "userId")),
                    name=name,
                    role=_named(_first(raw, "role", "position")) or default_role,
                    email=_text(_first(raw, "email", "emailAddress")),
                ))
            else:
                members.append(TeamMember(name=name, role=default_role))
        return members

    @staticmethod
    def members_from_assignees(
        tasks: Iterable[Task],
        role: str = "Team Member"
    ) -> List[TeamMember]:
        members: List[TeamMember] = []
        seen = set()
        for task in tasks:
            name = task.assignee
            if not name or name == "Unassigned" or name in seen:
                continue
            seen.add(name)
            members.append(TeamMember(name=name, role=role))
        return members

    def parse_sprints(self, record: Dict[str, Any]) -> List[Sprint]:
        sprints = []
        for index, raw in enumerate(_as_list(record.get("sprints"))):
            if not isinstance(raw, dict):
                continue
            sprints.append(self.parse_sprint(raw, index))
        return sprints

    def parse_sprint(self, raw: Dict[str, Any], index: int) -> Sprint:
        return Sprint(
            name=_text(_first(raw, "name", "title")) or f"Sprint {index + 1}",
            start_date=_parse_date(_first(raw, "startDate", "start_date")),
            end_date=_parse_date(_first(raw, "endDate", "end_date")),
            completed=_percentage(_first(raw, "completed", "completion", "progress")),
        )

    @staticmethod
    def passthrough_metrics(record: Dict[str, Any]) -> List[ProjectMetric]:
        """Platform-supplied metrics, kept opaque"""
        metrics = []
        for raw in _as_list(record.get("metrics")):
            if isinstance(raw, dict) and _text(raw.get("name")):
                metrics.append(ProjectMetric(
                    name=_text(raw.get("name")),
                    value=raw.get("value"),
                    type=_text(raw.get("type")),
                ))
        return metrics
