"""Usage violations raised by the orchestrators."""

from __future__ import annotations

from enum import Enum


class UsageViolationCode(str, Enum):
    ALREADY_STARTED = "already_started"
    ALREADY_REGISTERED = "already_registered"
    INVALID_BATCH = "invalid_batch"
    INVALID_MODULE = "invalid_module"
    DUPLICATE_MODULE = "duplicate_module"
    NOT_STARTED = "not_started"
    NOT_DISCOVERED = "not_discovered"
    UNKNOWN_MODULE = "unknown_module"


class UsageViolation(RuntimeError):
    """Raised when an orchestrator is driven out of protocol order.

    These are programming errors in the caller, not recoverable conditions;
    the message names the violated precondition.
    """

    def __init__(self, code: UsageViolationCode, message: str):
        super().__init__(message)
        self.code = code
