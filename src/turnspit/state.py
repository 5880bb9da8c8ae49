from dataclasses import dataclass

from .types import BLOCK_DURATION


@dataclass
class QuarantineEntry:
    credential: str
    scope: str
    blocked_at: float

    def expires_at(self, duration: float = BLOCK_DURATION) -> float:
        return self.blocked_at + duration

    def is_active(self, now: float, duration: float = BLOCK_DURATION) -> bool:
        return now - self.blocked_at < duration
