from __future__ import annotations


class DomainError(Exception):
    """Base domain error shown to user as friendly message."""


class CompletionError(DomainError):
    """The completion service failed, timed out or returned nothing usable."""


class EmptyCompletionError(CompletionError):
    pass
