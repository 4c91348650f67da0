import time
from dataclasses import dataclass, field


@dataclass
class SearchBudget:
    """Wall-clock and queue bounds shared by the searches of one query.

    A search that hits a bound returns what it has so far and sets
    `truncated`; the flag is surfaced on the RoutePlan.
    """

    seconds: float
    max_queue_size: int = 1000
    truncated: bool = False
    started_at: float = field(default_factory=time.monotonic)

    @property
    def deadline(self) -> float:
        return self.started_at + self.seconds

    def expired(self) -> bool:
        return time.monotonic() > self.deadline

    def child(self, seconds: float) -> "SearchBudget":
        """A sub-budget starting now, never outliving this one."""
        now = time.monotonic()
        remaining = max(0.0, self.deadline - now)
        return SearchBudget(
            seconds=min(seconds, remaining),
            max_queue_size=self.max_queue_size,
            started_at=now,
        )

    def absorb(self, other: "SearchBudget") -> None:
        """Carry a sub-budget's truncation up to this one."""
        if other.truncated:
            self.truncated = True

    def elapsed_ms(self) -> int:
        return int((time.monotonic() - self.started_at) * 1000)
