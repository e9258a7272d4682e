from __future__ import annotations

from dataclasses import dataclass

from assistant_gate.domain.models import AdmissionStatus


@dataclass(frozen=True, slots=True)
class AdmissionResultDTO:
    status: AdmissionStatus
    count: int = 0
    time_until_reset: float = 0.0
    ban_duration: float = 0.0
    warn_near_limit: bool = False
    messages_left: int = 0
    queue_position: int = 0

    @property
    def accepted(self) -> bool:
        return self.status is AdmissionStatus.QUEUED
