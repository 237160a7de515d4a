import time
from collections.abc import Callable
from dataclasses import dataclass

DEFAULT_CLEANUP_THRESHOLD = 1000


def _wall_clock_ms() -> int:
    return int(time.time() * 1000)


@dataclass(frozen=True, slots=True)
class RateLimitPolicy:
    window_ms: int
    max_requests: int

    @property
    def is_valid(self) -> bool:
        return self.window_ms > 0 and self.max_requests > 0


@dataclass(frozen=True, slots=True)
class RateLimitResult:
    allowed: bool
    remaining: int
    reset_at: int


@dataclass(slots=True)
class RateLimitRecord:
    count: int
    reset_at: int


class FixedWindowRateLimiter:
    """Process-local fixed-window request counter keyed by an opaque string.

    ``check`` never awaits, so on a single event loop it runs to completion
    inside one turn and needs no lock. Expired records are swept only when the
    number of tracked keys grows past ``cleanup_threshold``.
    """

    def __init__(
        self,
        cleanup_threshold: int = DEFAULT_CLEANUP_THRESHOLD,
        clock: Callable[[], int] = _wall_clock_ms,
    ) -> None:
        self.cleanup_threshold = cleanup_threshold
        self._clock = clock
        self._records: dict[str, RateLimitRecord] = {}

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, key: object) -> bool:
        return key in self._records

    def check(self, key: str, policy: RateLimitPolicy) -> RateLimitResult:
        now = self._clock()

        # Non-positive policies reject everything and leave no record behind.
        if not policy.is_valid:
            return RateLimitResult(allowed=False, remaining=0, reset_at=now)

        if len(self._records) > self.cleanup_threshold:
            self._sweep_expired(now)

        record = self._records.get(key)
        if record is None or record.reset_at < now:
            reset_at = now + policy.window_ms
            self._records[key] = RateLimitRecord(count=1, reset_at=reset_at)
            return RateLimitResult(
                allowed=True,
                remaining=policy.max_requests - 1,
                reset_at=reset_at,
            )

        if record.count >= policy.max_requests:
            return RateLimitResult(allowed=False, remaining=0, reset_at=record.reset_at)

        record.count += 1
        return RateLimitResult(
            allowed=True,
            remaining=policy.max_requests - record.count,
            reset_at=record.reset_at,
        )

    def retry_after_seconds(self, result: RateLimitResult) -> int:
        remaining_ms = max(0, result.reset_at - self._clock())
        seconds = -(-remaining_ms // 1000)
        if not result.allowed:
            # A window is still live at reset_at itself, so never advertise 0.
            return max(1, seconds)
        return seconds

    def _sweep_expired(self, now: int) -> None:
        expired = [key for key, record in self._records.items() if record.reset_at < now]
        for key in expired:
            del self._records[key]
