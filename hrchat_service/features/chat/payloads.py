"""Payload helpers for chat rows coming out of the HR database.

Aggregated columns (``participants``, ``last_message``,
``other_participant``) arrive either already decoded or as JSON text,
depending on the driver. These helpers accept both and never raise: bad
input degrades to an empty list or ``None``.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
import json
import logging
from typing import Any

logger = logging.getLogger(__name__)


def normalize_participants(data: Any) -> list[dict[str, Any]]:
    """Return the participant list carried by ``data``.

    Accepts a list, a single mapping or JSON text holding either.
    Anything else, including malformed JSON, yields an empty list.
    """
    if not data:
        return []

    if isinstance(data, list):
        return data

    if isinstance(data, str):
        text = data.strip()
        if not text.startswith(("[", "{")):
            return []
        try:
            parsed = json.loads(text)
        except json.JSONDecodeError:
            logger.warning("Could not parse participants JSON", extra={"raw": text[:200]})
            return []
        return parsed if isinstance(parsed, list) else [parsed]

    if isinstance(data, Mapping):
        return [dict(data)]

    return []


def normalize_last_message(data: Any) -> dict[str, Any] | None:
    """Return the last-message mapping carried by ``data``, or None."""
    if not data:
        return None

    if isinstance(data, str):
        try:
            parsed = json.loads(data)
        except json.JSONDecodeError:
            logger.warning("Could not parse last_message JSON")
            return None
        return parsed if isinstance(parsed, dict) else None

    if isinstance(data, Mapping):
        return dict(data)

    return None


def normalize_chat(chat: Mapping[str, Any]) -> dict[str, Any]:
    """Copy of ``chat`` with its aggregated columns decoded."""
    result = dict(chat)

    if result.get("participants"):
        result["participants"] = normalize_participants(result["participants"])

    if result.get("last_message"):
        result["last_message"] = normalize_last_message(result["last_message"])

    other = result.get("other_participant")
    if isinstance(other, str):
        try:
            result["other_participant"] = json.loads(other)
        except json.JSONDecodeError:
            result["other_participant"] = None

    return result


def participant_ids(participants: Iterable[Any]) -> list[str]:
    """Subject ids of ``participants`` (mappings with ``id`` or bare ids), deduplicated."""
    ids: list[str] = []
    for participant in participants:
        raw = participant.get("id") if isinstance(participant, Mapping) else participant
        if raw is None or isinstance(raw, bool):
            continue
        value = str(raw).strip()
        if value and value not in ids:
            ids.append(value)
    return ids
