# Copyright (c) 2025 Bytedance Ltd. and/or its affiliates
# SPDX-License-Identifier: MIT

# Report Data Service
"""
Report Data Service - project data acquisition, normalization and
analytics for report generation across Jira, Monday.com and TROFOS.
"""

from report_data_service.config import Settings, configure_logging, get_settings
from report_data_service.facade import (
    AcquisitionResult,
    DataAcquisitionFacade,
    acquire,
)

__version__ = "1.0.0"

__all__ = [
    "AcquisitionResult",
    "DataAcquisitionFacade",
    "Settings",
    "configure_logging",
    "get_settings",
    "acquire",
    "__version__",
]
