# Copyright (c) 2025 Bytedance Ltd. and/or its affiliates
# SPDX-License-Identifier: MIT

"""
Analytics thresholds and status vocabulary.

Values are kept exactly as the report templates expect them. They are
candidates for configuration should requirements change.
"""
import math
from typing import Optional

# Status vocabulary (compared case-insensitively)
COMPLETED_STATUSES = frozenset({"done", "completed", "closed", "resolved"})
BLOCKED_STATUSES = frozenset({"blocked", "stuck", "on hold"})
UNASSIGNED = "Unassigned"
HIGH_PRIORITY = "high"

# Staleness
STALE_AFTER_DAYS = 14

# Risk
HIGH_RISK_BLOCKED = 5
MEDIUM_RISK_BLOCKED = 2
HIGH_RISK_ADHERENCE = 60
MEDIUM_RISK_ADHERENCE = 80

# Team efficiency weights
EFFICIENCY_ASSIGNMENT_WEIGHT = 0.3
EFFICIENCY_COMPLETION_WEIGHT = 0.5
EFFICIENCY_UTILIZATION_WEIGHT = 0.2

# Quality score weights (sum to 100)
QUALITY_COMPLETENESS_WEIGHT = 25
QUALITY_DOCUMENTATION_WEIGHT = 20
QUALITY_PROCESS_WEIGHT = 25
QUALITY_DELIVERABLE_WEIGHT = 30
DESCRIPTIVE_NAME_LENGTH = 10

# Collaboration weights
COLLABORATION_INVOLVEMENT_WEIGHT = 0.6
COLLABORATION_DISTRIBUTION_WEIGHT = 0.4
MIN_COLLABORATION_TEAM = 2

# Workload
OVERUTILIZED_ABOVE = 120
UNDERUTILIZED_BELOW = 60

# Recommendations
EFFICIENCY_TARGET = 70
QUALITY_TARGET = 80

# Forecasting
BURNDOWN_POINTS = 10
DEFAULT_COMPLETION_DAYS = 30
DAYS_PER_WEEK = 7


def is_completed(status: Optional[str]) -> bool:
    return (status or "").strip().lower() in COMPLETED_STATUSES


def is_blocked(status: Optional[str]) -> bool:
    return (status or "").strip().lower() in BLOCKED_STATUSES


def is_assigned(assignee: Optional[str]) -> bool:
    return bool(assignee) and assignee != UNASSIGNED


def round_half_up(value: float) -> int:
    """Round halves upwards (2.5 -> 3), unlike the built-in round()"""
    return int(math.floor(value + 0.5))
