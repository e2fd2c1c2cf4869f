"""Load trigger exports."""

from .trigger_contracts import (
    GENERIC_FAILURE_MESSAGE,
    TriggerOptions,
    TriggerOutcome,
    TriggerRequest,
    TriggerValidationError,
)
from .trigger_use_case import TriggerCollaborators, build_trigger_collaborators, trigger_load_test

__all__ = [
    "GENERIC_FAILURE_MESSAGE",
    "TriggerOptions",
    "TriggerOutcome",
    "TriggerRequest",
    "TriggerValidationError",
    "TriggerCollaborators",
    "build_trigger_collaborators",
    "trigger_load_test",
]
