# Copyright (c) 2025 Bytedance Ltd. and/or its affiliates
# SPDX-License-Identifier: MIT

"""
Raw upstream payloads

The platform-integrations layer answers with loosely specified JSON. This
module recognises the known response shapes and wraps the project records
in a payload type tagged with the platform they came from:

- {"projects": [...]}
- {"project": {...}}
- {"data": <any of these>}  (TROFOS nests responses, sometimes twice)
- a bare array of project objects
- a single project object

Anything else becomes an UnknownPayload, which callers treat as a failed
route.
"""
import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from report_data_service.models import Platform

# Keys under which platforms carry their task lists
TASK_COLLECTION_KEYS = (
    "issues",
    "tasks",
    "items",
    "backlogItems",
    "backlog_items",
    "backlogs",
)

_IDENTITY_KEYS = ("id", "key", "name")
_MAX_NESTING = 3


@dataclass(frozen=True)
class RawPayload:
    """Project records extracted from one upstream response"""
    platform: Platform
    records: List[Dict[str, Any]] = field(default_factory=list)
    source: Optional[str] = None  # route that produced the payload

    @property
    def is_empty(self) -> bool:
        return not self.records


@dataclass(frozen=True)
class JiraPayload(RawPayload):
    pass


@dataclass(frozen=True)
class MondayPayload(RawPayload):
    pass


@dataclass(frozen=True)
class TrofosPayload(RawPayload):
    pass


@dataclass(frozen=True)
class GenericPayload(RawPayload):
    pass


@dataclass(frozen=True)
class UnknownPayload(RawPayload):
    """Body that matched no known shape (or held no project records)"""
    reason: str = "malformed"


_PAYLOAD_TYPES = {
    Platform.JIRA: JiraPayload,
    Platform.MONDAY: MondayPayload,
    Platform.TROFOS: TrofosPayload,
    Platform.OTHER: GenericPayload,
}


def is_project_record(record: Any) -> bool:
    """A dict carrying an identity (id/key/name) or a non-empty task list"""
    if not isinstance(record, dict) or not record:
        return False
    if any(record.get(key) not in (None, "") for key in _IDENTITY_KEYS):
        return True
    return any(
        isinstance(record.get(key), list) and record.get(key)
        for key in TASK_COLLECTION_KEYS
    )


def _extract(body: Any, depth: int = 0) -> Tuple[List[Dict[str, Any]], bool]:
    """
    Pull project records out of a decoded body.

    Returns:
        (records, recognised) where recognised tells whether the body had a
        known shape at all, so an empty-but-valid listing can be told apart
        from garbage.
    """
    if depth > _MAX_NESTING:
        return [], False

    if isinstance(body, list):
        return [record for record in body if is_project_record(record)], True

    if not isinstance(body, dict):
        return [], False
    if not body:
        return [], True

    projects = body.get("projects")
    if isinstance(projects, list):
        return [record for record in projects if is_project_record(record)], True

    project = body.get("project")
    if isinstance(project, dict):
        return ([project] if is_project_record(project) else []), True

    if is_project_record(body):
        return [body], True

    if "data" in body:
        return _extract(body["data"], depth + 1)

    return [], False


def extract_project_records(body: Any) -> List[Dict[str, Any]]:
    """Project records from a decoded (or JSON string) body"""
    try:
        records, _ = _extract(_decode(body))
    except ValueError:
        return []
    return records


def _decode(body: Any) -> Any:
    if isinstance(body, bytes):
        body = body.decode("utf-8", errors="replace")
    if isinstance(body, str):
        if not body.strip():
            return None
        # Invalid JSON raises ValueError
        return json.loads(body)
    return body


def classify_payload(
    platform: Platform,
    body: Any,
    source: Optional[str] = None
) -> RawPayload:
    """
    Wrap a response body in the payload type for its platform.

    Args:
        platform: Platform the request was made for
        body: Decoded JSON body (a JSON string is decoded once)
        source: Route name, kept for diagnostics

    Returns:
        A platform payload with at least one record, or an UnknownPayload
        whose reason is "empty_body" or "malformed"
    """
    try:
        decoded = _decode(body)
    except ValueError:
        return UnknownPayload(platform=platform, source=source, reason="malformed")
    if decoded is None:
        return UnknownPayload(platform=platform, source=source, reason="empty_body")

    records, recognised = _extract(decoded)
    if not records:
        reason = "empty_body" if recognised else "malformed"
        return UnknownPayload(platform=platform, source=source, reason=reason)

    payload_type = _PAYLOAD_TYPES.get(platform, GenericPayload)
    return payload_type(platform=platform, records=records, source=source)
