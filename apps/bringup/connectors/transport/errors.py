"""Error normalization for the in-process transport."""

from __future__ import annotations

from enum import Enum


class TransportErrorCode(str, Enum):
    DUPLICATE_ENDPOINT = "duplicate_endpoint"
    ENDPOINT_SEALED = "endpoint_sealed"
    UNKNOWN_MEMBER = "unknown_member"
    UNSUPPORTED_MEMBER = "unsupported_member"
    REJECTED = "rejected"
    FLAG_ALREADY_SET = "flag_already_set"
    FLAG_ALREADY_CLAIMED = "flag_already_claimed"


class TransportError(Exception):
    """Transport-level error raised by endpoints, flags and the registry."""

    def __init__(self, code: TransportErrorCode, message: str, *, cause: Exception | None = None):
        super().__init__(message)
        self.code = code
        self.cause = cause
