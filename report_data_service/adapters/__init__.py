# Copyright (c) 2025 Bytedance Ltd. and/or its affiliates
# SPDX-License-Identifier: MIT

"""
Platform adapters

Convert raw platform payloads into the canonical project model.
"""

from .base import BasePlatformAdapter
from .generic import GenericAdapter
from .jira import JiraAdapter
from .monday import MondayAdapter
from .registry import ADAPTERS, get_adapter, normalize
from .trofos import TrofosAdapter

__all__ = [
    "ADAPTERS",
    "BasePlatformAdapter",
    "GenericAdapter",
    "JiraAdapter",
    "MondayAdapter",
    "TrofosAdapter",
    "get_adapter",
    "normalize",
]
