"""Typed outcomes of the lending transition engine."""

from dataclasses import dataclass
from enum import Enum


class TransitionErrorKind(str, Enum):
    """Why a borrow or return did not happen."""

    INVALID_INPUT = "InvalidInput"
    NO_AVAILABLE_UNIT = "NoAvailableUnit"
    NO_HELD_UNIT = "NoHeldUnit"


@dataclass(frozen=True)
class TransitionResult:
    """Outcome of a single borrow/return call.

    Exactly one of (``unit_id``, ``lend_record_id``) pair or ``error_kind``
    is populated, depending on ``success``.
    """

    success: bool
    unit_id: str | None = None
    lend_record_id: str | None = None
    error_kind: TransitionErrorKind | None = None
    message: str = ""

    @classmethod
    def ok(cls, unit_id: str, lend_record_id: str) -> "TransitionResult":
        return cls(success=True, unit_id=unit_id, lend_record_id=lend_record_id)

    @classmethod
    def failed(cls, kind: TransitionErrorKind, message: str = "") -> "TransitionResult":
        return cls(success=False, error_kind=kind, message=message)
