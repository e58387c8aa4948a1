"""Organisation-wide scan for artifacts pending approval."""

from __future__ import annotations

from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor, as_completed
import logging

from .errors import SSCError
from .models import Artifact, ProjectVersion
from .repository import SSCRepository

logger = logging.getLogger(__name__)

PROGRESS_EVERY = 10

ArtifactFetcher = Callable[[int], list[Artifact]]


def _fetch_or_skip(fetch_artifacts: ArtifactFetcher, version: ProjectVersion) -> list[Artifact]:
    """Fetch one version's artifacts; an ``SSCError`` yields an empty list."""
    try:
        return fetch_artifacts(version.id)
    except SSCError as exc:
        logger.info("Skipping project version %s (%s): %s", version.id, version.display_label, exc)
        return []


def _log_progress(checked: int, total: int) -> None:
    if checked % PROGRESS_EVERY == 0:
        logger.info("Checked %d/%d project versions...", checked, total)


def _fetch_all(
    versions: list[ProjectVersion],
    fetch_artifacts: ArtifactFetcher,
    max_workers: int,
) -> list[list[Artifact]]:
    if len(versions) <= 1 or max_workers <= 1:
        results = []
        for checked, version in enumerate(versions, start=1):
            results.append(_fetch_or_skip(fetch_artifacts, version))
            _log_progress(checked, len(versions))
        return results

    # Results land by listing index so completion order never leaks out
    results: list[list[Artifact]] = [[] for _ in versions]
    with ThreadPoolExecutor(max_workers=min(len(versions), max_workers)) as executor:
        future_to_index = {
            executor.submit(_fetch_or_skip, fetch_artifacts, version): idx for idx, version in enumerate(versions)
        }
        for checked, future in enumerate(as_completed(future_to_index), start=1):
            results[future_to_index[future]] = future.result()
            _log_progress(checked, len(versions))
    return results


def find_artifacts_requiring_approval(
    repository: SSCRepository,
    *,
    fetch_artifacts: ArtifactFetcher | None = None,
    max_workers: int = 1,
) -> list[Artifact]:
    """Collect every artifact pending approval across all project versions.

    The version listing is fetched first and any failure there propagates.
    Each version's artifacts are then fetched with ``fetch_artifacts``
    (``repository.get_artifacts`` unless given); a version whose fetch raises
    ``SSCError`` contributes nothing and the scan moves on. Matches are copied
    with their owning version id and ``"<project> - <version>"`` label and
    returned in version order, then artifact order.
    """
    if fetch_artifacts is None:
        fetch_artifacts = repository.get_artifacts

    logger.info("Fetching project versions...")
    versions = repository.get_all_project_versions()
    logger.info("Found %d project versions, checking for artifacts requiring approval...", len(versions))

    pending: list[Artifact] = []
    for version, artifacts in zip(versions, _fetch_all(versions, fetch_artifacts, max_workers)):
        label = version.display_label
        for artifact in artifacts:
            if not artifact.requires_approval:
                continue
            pending.append(
                artifact.model_copy(update={"project_version_id": version.id, "project_version_name": label})
            )
    return pending


def filter_by_project(artifacts: list[Artifact], needle: str | None) -> list[Artifact]:
    """Case-insensitive substring match on the ``"<project> - <version>"`` label."""
    if not needle:
        return list(artifacts)
    lowered = needle.lower()
    return [a for a in artifacts if lowered in (a.project_version_name or "").lower()]
