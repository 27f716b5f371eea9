"""Recording export/import as human-readable JSON text."""

from __future__ import annotations

import json
import logging
import random
import string
import time

from .recording import Recording

log = logging.getLogger(__name__)

_ID_ALPHABET = string.digits + string.ascii_lowercase


def now_ms() -> int:
    """Wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


def generate_id() -> str:
    """Return a new recording id: ``recording_<epoch-ms>_<9 base36 chars>``."""
    suffix = "".join(random.choices(_ID_ALPHABET, k=9))
    return f"recording_{now_ms()}_{suffix}"


def export_recording(recording: Recording) -> str:
    """Serialize every field of *recording* to indented JSON.

    Output is deterministic: fixed key order, 2-space indent.
    """
    return json.dumps(recording.to_dict(), indent=2, ensure_ascii=False)


def import_recording(text: str) -> Recording | None:
    """Parse text produced by :func:`export_recording`.

    Returns a Recording carrying a freshly generated id, or None (after
    logging why) when the text is not a valid recording.
    """
    try:
        data = json.loads(text)
    except (json.JSONDecodeError, TypeError) as e:
        log.error("Failed to import recording: %s", e)
        return None

    if not isinstance(data, dict):
        log.error("Failed to import recording: expected a JSON object")
        return None
    if not data.get("id") or not isinstance(data["id"], str):
        log.error("Failed to import recording: missing id")
        return None
    if not data.get("name") or not isinstance(data["name"], str):
        log.error("Failed to import recording: missing name")
        return None
    if not isinstance(data.get("notes"), list):
        log.error("Failed to import recording: notes must be a list")
        return None

    try:
        recording = Recording.from_dict(data)
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        log.error("Failed to import recording: malformed data (%s)", e)
        return None

    recording.id = generate_id()
    return recording
