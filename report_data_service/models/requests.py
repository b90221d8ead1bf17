# Copyright (c) 2025 Bytedance Ltd. and/or its affiliates
# SPDX-License-Identifier: MIT

# Report Data Service Request Models
"""
Pydantic models for acquisition requests.
"""

from datetime import date, datetime
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

from .project import Platform


class DateRange(BaseModel):
    """Inclusive date window applied to task creation dates."""
    start: Optional[date] = None
    end: Optional[date] = None

    def contains(self, moment: Optional[datetime]) -> bool:
        """Undated tasks are always inside the window."""
        if moment is None:
            return True
        day = moment.date()
        if self.start and day < self.start:
            return False
        if self.end and day > self.end:
            return False
        return True


class AcquisitionRequest(BaseModel):
    """Request from the report-generation caller."""
    platform: Platform
    connection_id: str = Field(..., alias="connectionId", min_length=1)
    project_id: str = Field(..., alias="projectId")
    include_historical_data: bool = Field(True, alias="includeHistoricalData")
    date_range: Optional[DateRange] = Field(None, alias="dateRange")

    class Config:
        populate_by_name = True

    @field_validator("platform", mode="before")
    @classmethod
    def parse_platform(cls, value: Any) -> Platform:
        return Platform.parse(value)
