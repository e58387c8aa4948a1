"""Fold an artifact's processing messages into one display string."""

from __future__ import annotations

from .models import Artifact

NO_MESSAGES = "No processing messages available"


def message_lines(artifact: Artifact) -> list[str]:
    lines = []
    if artifact.processing_messages:
        lines.append(artifact.processing_messages)

    messages = artifact.messages
    if isinstance(messages, str):
        if messages:
            lines.append(messages)
    elif isinstance(messages, list):
        lines.extend(m.render() for m in messages if m.message)
    return lines


def extract_messages(artifact: Artifact) -> str:
    """Newline-joined processing messages, or ``NO_MESSAGES`` when there are none."""
    lines = message_lines(artifact)
    if not lines:
        return NO_MESSAGES
    return "\n".join(lines)
