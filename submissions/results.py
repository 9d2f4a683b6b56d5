"""
Submission Pipeline Results

Every pipeline stage returns either Ok(value) or Err(kind, ...).
The pipeline stops at the first Err and hands it to the response encoder.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class ErrorKind(Enum):
    """Terminal failure kinds. None of them is retried."""

    RATE_LIMITED = 'rate_limited'
    SPAM_DETECTED = 'spam_detected'
    INVALID_FILE_TYPE = 'invalid_file_type'
    FILE_TOO_LARGE = 'file_too_large'
    STORAGE_WRITE_ERROR = 'storage_write_error'
    VALIDATION_FAILED = 'validation_failed'
    PERSISTENCE_ERROR = 'persistence_error'
    NOTIFICATION_ERROR = 'notification_error'

    @property
    def is_user_error(self):
        """Expected user-input conditions, not system faults."""
        return self not in INFRASTRUCTURE_ERRORS


INFRASTRUCTURE_ERRORS = frozenset({
    ErrorKind.STORAGE_WRITE_ERROR,
    ErrorKind.PERSISTENCE_ERROR,
    ErrorKind.NOTIFICATION_ERROR,
})


@dataclass(frozen=True)
class Ok:
    value: Any = None
    ok = True


@dataclass(frozen=True)
class Err:
    kind: ErrorKind
    message: str = ''
    errors: Optional[dict] = None
    # Seconds until the request may be retried, sent as Retry-After
    retry_after: Optional[int] = None
    ok = False
