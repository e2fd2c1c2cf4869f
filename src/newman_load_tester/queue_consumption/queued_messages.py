"""Queued run event messages."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from newman_load_tester.distribution_planning.distribution_models import (
    InvalidRunEventError,
    RunEvent,
)


@dataclass(frozen=True)
class QueuedMessage:
    """One message received from the run event queue.

    `receipt` is whatever the backend needs to acknowledge the message.
    """

    message_id: str
    body: str
    receipt: Any = None


def decode_run_event(body: str | bytes) -> RunEvent:
    """Decode a queue message body into a run event."""
    try:
        payload = json.loads(body)
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise InvalidRunEventError(f"Run event body is not valid JSON: {exc}") from exc
    return RunEvent.from_payload(payload)
