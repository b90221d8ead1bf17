# Copyright (c) 2025 Bytedance Ltd. and/or its affiliates
# SPDX-License-Identifier: MIT

"""
Exception types for the report data service.

The acquisition path itself does not raise these during normal operation:
route failures are recorded as attempts and exhaustion degrades to
synthetic data. They exist for strict lookups and for callers that want
to turn a failed fetch into an error of their own.
"""
from typing import List, Optional


class ReportDataError(Exception):
    """Base class for report data service errors"""


class UnsupportedPlatformError(ReportDataError):
    """Raised by strict lookups for a platform with no adapter"""

    def __init__(self, platform: str):
        super().__init__(f"Unsupported platform: {platform}")
        self.platform = platform


class AcquisitionExhausted(ReportDataError):
    """Every candidate route failed for a project"""

    def __init__(
        self,
        platform: str,
        project_id: str,
        last_error: Optional[str] = None,
        attempts: Optional[List] = None,
    ):
        message = f"All routes failed for {platform} project '{project_id}'"
        if last_error:
            message = f"{message}: {last_error}"
        super().__init__(message)
        self.platform = platform
        self.project_id = project_id
        self.last_error = last_error
        self.attempts = attempts or []
