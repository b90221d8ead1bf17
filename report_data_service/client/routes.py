# Copyright (c) 2025 Bytedance Ltd. and/or its affiliates
# SPDX-License-Identifier: MIT

"""
Candidate routes to the platform-integrations layer.

Each platform gets an ordered list, most specific first. The fetcher walks
the list until one route returns usable project data.
"""
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Sequence
from urllib.parse import quote

from report_data_service.models import Platform


@dataclass(frozen=True)
class RouteDescriptor:
    """One candidate endpoint template"""
    name: str
    template: str

    def render(self, platform: Platform, connection_id: str, project_id: str) -> str:
        """Fill the template; identifiers are URL-quoted."""
        return self.template.format(
            platform=platform.value,
            connection_id=quote(str(connection_id), safe=""),
            project_id=quote(str(project_id), safe=""),
        )


def _routes_for(qualified_segment: str) -> List[RouteDescriptor]:
    return [
        RouteDescriptor(
            name="project_query",
            template="/api/connections/{connection_id}/projects?projectId={project_id}",
        ),
        RouteDescriptor(
            name="platform_qualified",
            template=(
                "/api/connections/{connection_id}/{platform}/"
                + qualified_segment
                + "/{project_id}"
            ),
        ),
        RouteDescriptor(
            name="project_listing",
            template="/api/connections/{connection_id}/projects",
        ),
        RouteDescriptor(
            name="legacy_prefix",
            template=(
                "/api/platform-integrations/connections/{connection_id}"
                "/projects?projectId={project_id}"
            ),
        ),
    ]


DEFAULT_ROUTES: Dict[Platform, List[RouteDescriptor]] = {
    Platform.JIRA: _routes_for("projects"),
    Platform.MONDAY: _routes_for("boards"),
    Platform.TROFOS: _routes_for("projects"),
    Platform.OTHER: _routes_for("projects"),
}


def get_routes(
    platform: Platform,
    overrides: Optional[Mapping[Platform, Sequence[RouteDescriptor]]] = None
) -> List[RouteDescriptor]:
    """Ordered routes for a platform, honouring caller overrides."""
    if overrides and platform in overrides:
        return list(overrides[platform])
    return list(DEFAULT_ROUTES.get(platform, DEFAULT_ROUTES[Platform.OTHER]))
