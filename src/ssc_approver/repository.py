"""Typed accessors for SSC resources, built on ``SSCClient``."""

from __future__ import annotations

import logging
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from .client import SSCClient
from .errors import DecodeError
from .models import Artifact, ListEnvelope, Project, ProjectVersion

logger = logging.getLogger(__name__)

PAGE_LIMIT = 200
ALL_VERSIONS_PAGE_LIMIT = 500

M = TypeVar("M", bound=BaseModel)


def _decode_list(payload: Any, model: type[M], resource: str) -> list[M]:
    try:
        envelope = ListEnvelope[model].model_validate(payload)
    except ValidationError as exc:
        raise DecodeError(f"Unexpected {resource} payload: {exc.error_count()} validation error(s)") from exc
    if envelope.truncated:
        logger.warning(
            "%s listing truncated: received %d of %d",
            resource,
            len(envelope.data),
            envelope.total_count,
        )
    return envelope.data


class SSCRepository:
    """Resource-specific queries and response decoding.

    Each call issues exactly one request; nothing is cached. Transport failures
    surface as ``TransportError``, malformed payloads as ``DecodeError``.
    """

    def __init__(self, client: SSCClient):
        self.client = client

    def get_projects(self) -> list[Project]:
        payload = self.client.get("projects", limit=PAGE_LIMIT, fields="id,name,description")
        return _decode_list(payload, Project, "projects")

    def get_project_versions(self, project_id: int) -> list[ProjectVersion]:
        payload = self.client.get(f"projects/{project_id}/versions", limit=PAGE_LIMIT, fields="id,name")
        return _decode_list(payload, ProjectVersion, f"projects/{project_id}/versions")

    def get_all_project_versions(self) -> list[ProjectVersion]:
        payload = self.client.get("projectVersions", limit=ALL_VERSIONS_PAGE_LIMIT, fields="id,name,project")
        return _decode_list(payload, ProjectVersion, "projectVersions")

    def get_artifacts(self, project_version_id: int) -> list[Artifact]:
        resource = f"projectVersions/{project_version_id}/artifacts"
        payload = self.client.get(resource, limit=PAGE_LIMIT, embed="messages")
        return _decode_list(payload, Artifact, resource)

    def get_artifact_details(self, artifact_id: int) -> Artifact:
        payload = self.client.get(f"artifacts/{artifact_id}", embed="messages")
        # Single resources normally arrive as {"data": {...}}
        if isinstance(payload, dict) and "data" in payload:
            payload = payload["data"]
        try:
            return Artifact.model_validate(payload)
        except ValidationError as exc:
            raise DecodeError(f"Unexpected artifact payload: {exc.error_count()} validation error(s)") from exc
