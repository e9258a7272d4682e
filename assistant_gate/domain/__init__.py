from __future__ import annotations

from .models import (
    ActivitySignal,
    AdmissionStatus,
    Fragment,
    RateDecision,
    Reply,
    Task,
    UserId,
    UserState,
)
from .errors import CompletionError, DomainError, EmptyCompletionError

__all__ = [
    "ActivitySignal",
    "AdmissionStatus",
    "Fragment",
    "RateDecision",
    "Reply",
    "Task",
    "UserId",
    "UserState",
    "CompletionError",
    "DomainError",
    "EmptyCompletionError",
]
