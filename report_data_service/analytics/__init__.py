# Copyright (c) 2025 Bytedance Ltd. and/or its affiliates
# SPDX-License-Identifier: MIT

"""
Derived project analytics.
"""

from .engine import AnalyticsEngine, analyze, clamp_percentage, largest_remainder_percentages
from .thresholds import is_assigned, is_blocked, is_completed, round_half_up

__all__ = [
    "AnalyticsEngine",
    "analyze",
    "clamp_percentage",
    "is_assigned",
    "is_blocked",
    "is_completed",
    "largest_remainder_percentages",
    "round_half_up",
]
