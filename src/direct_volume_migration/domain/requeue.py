"""Requeue directives returned to the reconcile runtime."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

FAST_REQUEUE_SECONDS = 0.1
ADVANCE_REQUEUE_SECONDS = 0.1
POLL_REQUEUE_SECONDS = 3.0


class RequeueKind(StrEnum):
    """When the runtime should reconcile an object again."""

    NONE = "NoRequeue"
    FAST = "FastRequeue"
    AFTER = "RequeueAfter"


@dataclass(slots=True, frozen=True)
class RequeueDirective:
    """Instruction to the control loop on when to re-invoke reconciliation."""

    kind: RequeueKind
    delay_seconds: float = 0.0

    @classmethod
    def no_requeue(cls) -> RequeueDirective:
        return cls(RequeueKind.NONE)

    @classmethod
    def fast(cls, delay_seconds: float = FAST_REQUEUE_SECONDS) -> RequeueDirective:
        return cls(RequeueKind.FAST, delay_seconds)

    @classmethod
    def after(cls, delay_seconds: float) -> RequeueDirective:
        return cls(RequeueKind.AFTER, max(delay_seconds, 0.0))

    @property
    def requeue(self) -> bool:
        return self.kind is not RequeueKind.NONE


__all__ = [
    "ADVANCE_REQUEUE_SECONDS",
    "FAST_REQUEUE_SECONDS",
    "POLL_REQUEUE_SECONDS",
    "RequeueDirective",
    "RequeueKind",
]
