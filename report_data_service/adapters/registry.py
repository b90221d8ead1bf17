# Copyright (c) 2025 Bytedance Ltd. and/or its affiliates
# SPDX-License-Identifier: MIT

"""
Adapter registry

Looks up the adapter for a platform and runs normalization.
"""
from typing import Any, Dict, List, Optional, Type, Union

from report_data_service.client.payloads import RawPayload
from report_data_service.exceptions import UnsupportedPlatformError
from report_data_service.models import Platform, ProjectData

from .base import BasePlatformAdapter
from .generic import GenericAdapter
from .jira import JiraAdapter
from .monday import MondayAdapter
from .trofos import TrofosAdapter

ADAPTERS: Dict[Platform, Type[BasePlatformAdapter]] = {
    Platform.JIRA: JiraAdapter,
    Platform.MONDAY: MondayAdapter,
    Platform.TROFOS: TrofosAdapter,
    Platform.OTHER: GenericAdapter,
}


def get_adapter(
    platform: Union[Platform, str],
    strict: bool = False
) -> BasePlatformAdapter:
    """
    Create the adapter for a platform.

    Args:
        platform: Platform enum or name
        strict: Raise for names that are not a known platform instead of
            falling back to the generic adapter

    Raises:
        UnsupportedPlatformError: In strict mode, for an unknown platform
    """
    resolved = Platform.parse(platform)
    if strict and resolved == Platform.OTHER and str(platform).strip().lower() != "other":
        raise UnsupportedPlatformError(str(platform))
    return ADAPTERS[resolved]()


def normalize(
    raw_payload: Any,
    platform: Optional[Union[Platform, str]] = None,
    project_id: Optional[str] = None
) -> List[ProjectData]:
    """
    Normalize a payload into canonical projects.

    Args:
        raw_payload: RawPayload from the fetcher, or a decoded response body
        platform: Source platform; defaults to the payload's own platform
        project_id: Requested project id, used when a record has none

    Returns:
        Canonical projects, empty when nothing usable was found
    """
    if platform is None:
        platform = raw_payload.platform if isinstance(raw_payload, RawPayload) else Platform.OTHER
    return get_adapter(platform).normalize(raw_payload, project_id)
