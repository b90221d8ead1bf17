# Copyright (c) 2025 Bytedance Ltd. and/or its affiliates
# SPDX-License-Identifier: MIT

"""
Canonical project models

These models represent a project the same way regardless of which
platform it came from. Adapters and the fallback synthesizer build them
in one pass; they are frozen afterwards.
"""
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


def utcnow() -> datetime:
    """Timezone-aware current time used for normalization stamps"""
    return datetime.now(timezone.utc)


class Platform(str, Enum):
    """Supported source platforms"""
    JIRA = "jira"
    MONDAY = "monday"
    TROFOS = "trofos"
    OTHER = "other"

    @classmethod
    def parse(cls, value: Any) -> "Platform":
        """Lenient lookup: accepts 'Monday.com', any casing, unknown -> OTHER"""
        if isinstance(value, Platform):
            return value
        normalized = str(value or "").strip().lower()
        if normalized == "monday.com":
            return cls.MONDAY
        for member in cls:
            if member.value == normalized:
                return member
        return cls.OTHER

    @property
    def display_name(self) -> str:
        return {
            Platform.JIRA: "Jira",
            Platform.MONDAY: "Monday.com",
            Platform.TROFOS: "TROFOS",
            Platform.OTHER: "Platform",
        }[self]


class Task(BaseModel):
    """A unit of work (Jira issue, Monday item, TROFOS backlog item)"""
    id: Optional[str] = Field(None, description="Platform identifier or key")
    name: str = Field(..., min_length=1, description="Task title")
    status: str = Field("Unknown", description="Platform-native status text")
    assignee: Optional[str] = Field(None, description="Assignee display name")
    priority: Optional[str] = Field(None, description="Platform-native priority")
    created: Optional[datetime] = Field(None, description="Creation timestamp")
    updated: Optional[datetime] = Field(None, description="Last update timestamp")
    story_points: Optional[float] = Field(None, alias="storyPoints")
    group: Optional[str] = Field(None, description="Sprint, board group or epic")
    due_date: Optional[date] = Field(None, alias="dueDate")

    class Config:
        frozen = True
        populate_by_name = True

    @field_validator("created", "updated")
    @classmethod
    def ensure_timezone(cls, value: Optional[datetime]) -> Optional[datetime]:
        """Naive timestamps are treated as UTC"""
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class TeamMember(BaseModel):
    """A person on the project team"""
    id: Optional[str] = None
    name: str = Field(..., min_length=1)
    role: str = "Team Member"
    email: Optional[str] = None

    class Config:
        frozen = True


class Sprint(BaseModel):
    """A sprint or iteration with its completion percentage"""
    name: str
    start_date: Optional[date] = Field(None, alias="startDate")
    end_date: Optional[date] = Field(None, alias="endDate")
    completed: str = Field("0%", description="Completion percentage, e.g. '65%'")

    class Config:
        frozen = True
        populate_by_name = True

    def completed_percentage(self) -> float:
        """Numeric value of `completed` (0 when unparseable)"""
        try:
            return float(self.completed.strip().rstrip("%").strip())
        except ValueError:
            return 0.0


class ProjectMetric(BaseModel):
    """Platform-supplied auxiliary counter, passed through opaquely"""
    name: str
    value: Any = None
    type: Optional[str] = None

    class Config:
        frozen = True


class ProjectData(BaseModel):
    """Canonical, platform-agnostic project snapshot"""
    id: str
    name: str
    platform: Platform
    status: str = "active"
    description: Optional[str] = None
    tasks: List[Task] = Field(default_factory=list)
    team: List[TeamMember] = Field(default_factory=list)
    sprints: List[Sprint] = Field(default_factory=list)
    metrics: List[ProjectMetric] = Field(default_factory=list)
    fallback_data: bool = Field(
        False,
        alias="fallbackData",
        description="True when produced by the fallback synthesizer"
    )
    last_updated: datetime = Field(
        default_factory=utcnow,
        alias="lastUpdated",
        description="When this snapshot was normalized"
    )

    class Config:
        frozen = True
        populate_by_name = True

    @model_validator(mode="after")
    def check_unique_team_names(self) -> "ProjectData":
        names = [member.name for member in self.team]
        if len(names) != len(set(names)):
            raise ValueError(f"Duplicate team member names in project {self.id}")
        return self

    def to_dict(self) -> Dict[str, Any]:
        """JSON-compatible record for report generators"""
        return self.model_dump(mode="json", by_alias=True)
