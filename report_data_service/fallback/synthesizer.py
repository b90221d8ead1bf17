# Copyright (c) 2025 Bytedance Ltd. and/or its affiliates
# SPDX-License-Identifier: MIT

"""
Fallback data synthesizer.

Produces a realistic, clearly flagged project when no upstream route
yields data, so report generation can still proceed. Content is
deterministic for a (platform, project id) pair: the random generator is
seeded from both, and the wall clock only anchors timestamps.
"""

import hashlib
import logging
import random
import re
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Union

from report_data_service.analytics.thresholds import is_blocked, is_completed
from report_data_service.models import (
    Platform,
    ProjectData,
    ProjectMetric,
    Sprint,
    Task,
    TeamMember,
    utcnow,
)

from .archetypes import Archetype, get_archetype

logger = logging.getLogger(__name__)

SPRINT_LENGTH_DAYS = 14
DEFAULT_PROJECT_KEY = "PRISM"


class FallbackSynthesizer:
    """Generates synthetic project data for one platform"""

    def __init__(
        self,
        platform: Union[Platform, str],
        project_id: Optional[str] = None,
        now: Optional[datetime] = None
    ):
        """
        Initialize with the identity the synthetic data stands in for.

        Args:
            platform: Platform being substituted
            project_id: Requested project id, also part of the seed
            now: Anchor for timestamps (defaults to the current UTC time)
        """
        self.platform = Platform.parse(platform)
        self.project_id = (project_id or "").strip() or None
        self.now = now or utcnow()
        if self.now.tzinfo is None:
            self.now = self.now.replace(tzinfo=timezone.utc)
        self.archetype: Archetype = get_archetype(self.platform)
        self.rng = random.Random(self.seed(self.platform, self.project_id))

    @staticmethod
    def seed(platform: Platform, project_id: Optional[str]) -> int:
        """Stable seed across processes (unlike hash())"""
        digest = hashlib.sha256(
            f"{platform.value}:{project_id or ''}".encode("utf-8")
        ).digest()
        return int.from_bytes(digest[:8], "big")

    def project_key(self) -> str:
        key = re.sub(r"[^A-Za-z0-9]", "", self.project_id or "").upper()[:10]
        if not key or key[0].isdigit():
            return DEFAULT_PROJECT_KEY
        return key

    def build(self) -> ProjectData:
        """Generate the synthetic project"""
        display = self.platform.display_name
        team = self._team()
        sprints = self._sprint_windows()
        tasks = self._tasks(team, sprints)
        sprints = self._sprint_history(sprints, tasks)

        if self.project_id:
            name = f"{display} Project - {self.project_id}"
        else:
            name = f"Sample {display} Project"

        project = ProjectData(
            id=self.project_id or f"{self.platform.value}-sample",
            name=name,
            platform=self.platform,
            status="active",
            description=f"Sample data shown while {display} data is unavailable",
            tasks=tasks,
            team=team,
            sprints=sprints,
            metrics=self._metrics(tasks, sprints),
            fallback_data=True,
            last_updated=self.now,
        )
        logger.info(
            "Synthesized fallback %s project %s (%d tasks, %d members)",
            self.platform.value, project.id, len(tasks), len(team)
        )
        return project

    # ------------------------------------------------------------------
    # Generators
    # ------------------------------------------------------------------

    def _team(self) -> List[TeamMember]:
        return [
            TeamMember(
                id=f"{self.platform.value}-user-{index + 1}",
                name=name,
                role=role,
                email=f"{name.lower().replace(' ', '.')}@example.com",
            )
            for index, (name, role) in enumerate(self.archetype.team)
        ]

    def _sprint_windows(self) -> List[Sprint]:
        """Consecutive sprints, the last one in progress"""
        count = self.archetype.sprint_count
        today = self.now.date()
        current_start = today - timedelta(days=SPRINT_LENGTH_DAYS // 2)
        windows = []
        for index in range(count):
            start = current_start - timedelta(days=SPRINT_LENGTH_DAYS * (count - 1 - index))
            windows.append(Sprint(
                name=f"Sprint {index + 1}",
                start_date=start,
                end_date=start + timedelta(days=SPRINT_LENGTH_DAYS - 1),
            ))
        return windows

    def _tasks(self, team: List[TeamMember], sprints: List[Sprint]) -> List[Task]:
        archetype = self.archetype
        statuses = [status for status, _ in archetype.statuses]
        weights = [weight for _, weight in archetype.statuses]
        key = self.project_key()

        tasks = []
        for index, title in enumerate(archetype.task_names):
            status = self.rng.choices(statuses, weights=weights)[0]
            # Roughly one task in ten stays unassigned
            assignee = None if self.rng.random() < 0.1 else self.rng.choice(team).name
            # Offsets are whole days from now (created always before updated),
            # so derived metrics do not depend on the hour of generation
            age_days = self.rng.randint(3, 45)
            idle_days = self.rng.randint(0, min(age_days - 1, 21))
            created = self.now - timedelta(days=age_days, hours=self.rng.randint(0, 23))
            updated = self.now - timedelta(days=idle_days)
            due_date = (
                self.now.date()
                - timedelta(days=age_days)
                + timedelta(days=self.rng.randint(14, 42))
            )

            if archetype.key_tasks:
                task_id = f"{key}-{index + 1}"
                name = f"{task_id}: {title}"
            else:
                task_id = f"{self.platform.value}-item-{index + 1}"
                name = title

            tasks.append(Task(
                id=task_id,
                name=name,
                status=status,
                assignee=assignee,
                priority=self.rng.choice(archetype.priorities),
                created=created,
                updated=updated,
                story_points=(
                    float(self.rng.choice(archetype.story_points))
                    if archetype.story_points else None
                ),
                group=self._group(status, sprints),
                due_date=due_date,
            ))
        return tasks

    def _group(self, status: str, sprints: List[Sprint]) -> Optional[str]:
        if self.archetype.groups:
            return self.rng.choice(self.archetype.groups)
        if not sprints:
            return None
        if is_completed(status):
            return self.rng.choice(sprints).name
        return sprints[-1].name

    def _sprint_history(self, sprints: List[Sprint], tasks: List[Task]) -> List[Sprint]:
        """Closed sprints get a plausible completion, the open one the task ratio"""
        if not sprints:
            return sprints

        history = []
        for sprint in sprints[:-1]:
            completed = self.rng.choice((70, 75, 80, 85, 90, 95, 100))
            history.append(sprint.model_copy(update={"completed": f"{completed}%"}))

        current = [task for task in tasks if task.group == sprints[-1].name]
        done = sum(1 for task in current if is_completed(task.status))
        percent = int(100 * done / len(current)) if current else 0
        history.append(sprints[-1].model_copy(update={"completed": f"{percent}%"}))
        return history

    def _metrics(self, tasks: List[Task], sprints: List[Sprint]) -> List[ProjectMetric]:
        """Summary counters computed from the generated tasks"""
        completed = sum(1 for task in tasks if is_completed(task.status))
        blocked = sum(1 for task in tasks if is_blocked(task.status))
        metrics = [
            ProjectMetric(name="Data Source", value="Sample data", type="text"),
            ProjectMetric(name="Total Tasks", value=len(tasks), type="number"),
            ProjectMetric(name="Tasks Completed", value=completed, type="number"),
            ProjectMetric(
                name="In Progress",
                value=len(tasks) - completed - blocked,
                type="number",
            ),
            ProjectMetric(name="Blocked", value=blocked, type="number"),
        ]

        if self.platform == Platform.JIRA:
            metrics.append(
                ProjectMetric(name="Project Key", value=self.project_key(), type="text")
            )
        elif self.platform == Platform.MONDAY:
            metrics.append(ProjectMetric(name="Board State", value="Active", type="text"))
        elif self.platform == Platform.TROFOS:
            metrics.extend([
                ProjectMetric(name="Sprint Count", value=len(sprints), type="number"),
                ProjectMetric(
                    name="Total Story Points",
                    value=sum(task.story_points or 0 for task in tasks),
                    type="number",
                ),
            ])
        return metrics


def synthesize(
    platform: Union[Platform, str],
    project_id: Optional[str] = None,
    now: Optional[datetime] = None
) -> ProjectData:
    """
    Build synthetic project data for a platform.

    Never fails; the result always has fallback_data set.
    """
    return FallbackSynthesizer(platform, project_id, now=now).build()
