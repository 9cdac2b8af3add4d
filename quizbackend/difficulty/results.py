"""
Tagged outcomes for difficulty store operations.

The public service methods keep a boolean contract; the ``*_outcome``
variants return a StoreOutcome so callers and tests can tell why an
operation did not take effect.
"""

import enum
from dataclasses import dataclass
from typing import Optional

from quizbackend.common.exceptions import (
    StoreError,
    StorePayloadError,
    StoreResponseError,
    StoreUnavailableError,
)
from quizbackend.domain.questions.model import QuestionRecord


class OutcomeStatus(str, enum.Enum):
    """Result of a store operation."""
    SUCCESS = "success"
    SKIPPED = "skipped"              # nothing to do, e.g. record already bootstrapped
    NOT_FOUND = "not_found"
    UNAVAILABLE = "unavailable"      # unreachable or timed out
    REMOTE_ERROR = "remote_error"    # non-success status
    MALFORMED = "malformed"          # undecodable payload


_ERROR_STATUS = (
    (StoreUnavailableError, OutcomeStatus.UNAVAILABLE),
    (StoreResponseError, OutcomeStatus.REMOTE_ERROR),
    (StorePayloadError, OutcomeStatus.MALFORMED),
)

FAILURE_STATUSES = frozenset({
    OutcomeStatus.UNAVAILABLE,
    OutcomeStatus.REMOTE_ERROR,
    OutcomeStatus.MALFORMED,
})


@dataclass(frozen=True)
class StoreOutcome:
    """
    Tagged result of a store operation.
    
    Attributes:
        status: What happened
        record: The resulting (or found) record, when known
        detail: Human-readable failure detail
    """
    status: OutcomeStatus
    record: Optional[QuestionRecord] = None
    detail: Optional[str] = None
    
    @property
    def ok(self) -> bool:
        """Whether the store holds the intended state after the operation."""
        return self.status in (OutcomeStatus.SUCCESS, OutcomeStatus.SKIPPED)
    
    @property
    def failed(self) -> bool:
        """Whether the operation hit a remote failure."""
        return self.status in FAILURE_STATUSES
    
    @classmethod
    def success(cls, record: Optional[QuestionRecord] = None) -> 'StoreOutcome':
        return cls(OutcomeStatus.SUCCESS, record)
    
    @classmethod
    def skipped(cls, record: Optional[QuestionRecord] = None) -> 'StoreOutcome':
        return cls(OutcomeStatus.SKIPPED, record)
    
    @classmethod
    def not_found(cls) -> 'StoreOutcome':
        return cls(OutcomeStatus.NOT_FOUND)
    
    @classmethod
    def from_error(cls, error: StoreError) -> 'StoreOutcome':
        """Classify a store exception."""
        for error_type, status in _ERROR_STATUS:
            if isinstance(error, error_type):
                return cls(status, detail=str(error))
        return cls(OutcomeStatus.REMOTE_ERROR, detail=str(error))
