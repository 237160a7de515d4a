import pytest

from app.core.rate_limit import (
    FixedWindowRateLimiter,
    RateLimitPolicy,
    RateLimitResult,
)


class FakeClock:
    def __init__(self, now: int = 0) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def limiter(clock: FakeClock) -> FixedWindowRateLimiter:
    return FixedWindowRateLimiter(clock=clock)


@pytest.mark.parametrize("max_requests", [1, 3, 5, 10])
def test_first_n_calls_allowed_with_decreasing_remaining(
    limiter: FixedWindowRateLimiter, max_requests: int
) -> None:
    policy = RateLimitPolicy(window_ms=60_000, max_requests=max_requests)

    remaining = [limiter.check("post:user-1", policy).remaining for _ in range(max_requests)]

    assert remaining == list(range(max_requests - 1, -1, -1))
    rejected = limiter.check("post:user-1", policy)
    assert rejected == RateLimitResult(allowed=False, remaining=0, reset_at=60_000)


def test_window_fully_resets_after_expiry(
    limiter: FixedWindowRateLimiter, clock: FakeClock
) -> None:
    policy = RateLimitPolicy(window_ms=1_000, max_requests=2)
    limiter.check("comment:user-1", policy)
    limiter.check("comment:user-1", policy)
    assert not limiter.check("comment:user-1", policy).allowed

    clock.now = 1_001
    result = limiter.check("comment:user-1", policy)

    assert result.allowed
    assert result.remaining == 1
    assert result.reset_at == 2_001


def test_record_is_still_live_at_exact_reset_instant(
    limiter: FixedWindowRateLimiter, clock: FakeClock
) -> None:
    policy = RateLimitPolicy(window_ms=1_000, max_requests=1)
    limiter.check("event:user-1", policy)

    clock.now = 1_000
    assert not limiter.check("event:user-1", policy).allowed

    clock.now = 1_001
    assert limiter.check("event:user-1", policy).allowed


def test_keys_are_independent(limiter: FixedWindowRateLimiter) -> None:
    policy = RateLimitPolicy(window_ms=60_000, max_requests=1)

    assert limiter.check("post:user-1", policy).allowed
    assert not limiter.check("post:user-1", policy).allowed

    assert limiter.check("post:user-2", policy).allowed
    assert limiter.check("comment:user-1", policy).allowed


def test_rejection_is_idempotent_within_window(
    limiter: FixedWindowRateLimiter, clock: FakeClock
) -> None:
    policy = RateLimitPolicy(window_ms=10_000, max_requests=1)
    first = limiter.check("ticket:user-1", policy)

    rejections = []
    for offset in (1, 500, 9_999, 10_000):
        clock.now = offset
        rejections.append(limiter.check("ticket:user-1", policy))

    assert all(not result.allowed for result in rejections)
    assert all(result.remaining == 0 for result in rejections)
    assert {result.reset_at for result in rejections} == {first.reset_at}


def test_reset_at_is_not_extended_by_later_calls(
    limiter: FixedWindowRateLimiter, clock: FakeClock
) -> None:
    policy = RateLimitPolicy(window_ms=60_000, max_requests=5)
    first = limiter.check("profile:user-1", policy)

    clock.now = 30_000
    second = limiter.check("profile:user-1", policy)

    assert first.reset_at == second.reset_at == 60_000


def test_post_scenario(limiter: FixedWindowRateLimiter, clock: FakeClock) -> None:
    policy = RateLimitPolicy(window_ms=60_000, max_requests=5)

    for _ in range(5):
        assert limiter.check("post:user-1", policy).allowed

    clock.now = 100
    sixth = limiter.check("post:user-1", policy)
    assert not sixth.allowed
    assert sixth.remaining == 0

    clock.now = 60_001
    seventh = limiter.check("post:user-1", policy)
    assert seventh.allowed
    assert seventh.remaining == 4


def test_server_listing_scenario(limiter: FixedWindowRateLimiter, clock: FakeClock) -> None:
    policy = RateLimitPolicy(window_ms=3_600_000, max_requests=3)

    for _ in range(3):
        assert limiter.check("server:user-2", policy).allowed

    clock.now = 1_000
    assert not limiter.check("server:user-2", policy).allowed

    clock.now = 3_600_001
    assert limiter.check("server:user-2", policy).allowed


def test_expired_records_are_swept_past_threshold(clock: FakeClock) -> None:
    limiter = FixedWindowRateLimiter(cleanup_threshold=10, clock=clock)
    short = RateLimitPolicy(window_ms=100, max_requests=1)

    for index in range(11):
        limiter.check(f"post:user-{index}", short)
    assert len(limiter) == 11

    clock.now = 101
    limiter.check("post:fresh", short)

    assert len(limiter) == 1
    assert "post:fresh" in limiter
    assert "post:user-0" not in limiter


def test_sweep_keeps_live_records(clock: FakeClock) -> None:
    limiter = FixedWindowRateLimiter(cleanup_threshold=2, clock=clock)
    short = RateLimitPolicy(window_ms=100, max_requests=5)
    long = RateLimitPolicy(window_ms=10_000, max_requests=5)

    limiter.check("a", short)
    limiter.check("b", short)
    limiter.check("c", long)

    clock.now = 500
    limiter.check("d", short)

    assert "c" in limiter
    assert "a" not in limiter
    assert "b" not in limiter


def test_no_sweep_below_threshold(clock: FakeClock) -> None:
    limiter = FixedWindowRateLimiter(cleanup_threshold=100, clock=clock)
    short = RateLimitPolicy(window_ms=10, max_requests=1)

    for index in range(5):
        limiter.check(f"key-{index}", short)

    clock.now = 1_000
    limiter.check("another", short)

    assert len(limiter) == 6


@pytest.mark.parametrize(
    "policy",
    [
        RateLimitPolicy(window_ms=0, max_requests=5),
        RateLimitPolicy(window_ms=-1, max_requests=5),
        RateLimitPolicy(window_ms=60_000, max_requests=0),
        RateLimitPolicy(window_ms=60_000, max_requests=-3),
    ],
)
def test_non_positive_policy_rejects_everything(
    limiter: FixedWindowRateLimiter, clock: FakeClock, policy: RateLimitPolicy
) -> None:
    clock.now = 42

    result = limiter.check("post:user-1", policy)

    assert result == RateLimitResult(allowed=False, remaining=0, reset_at=42)
    assert "post:user-1" not in limiter


def test_invalid_policy_does_not_touch_existing_record(limiter: FixedWindowRateLimiter) -> None:
    valid = RateLimitPolicy(window_ms=60_000, max_requests=2)
    limiter.check("post:user-1", valid)

    limiter.check("post:user-1", RateLimitPolicy(window_ms=0, max_requests=0))

    assert limiter.check("post:user-1", valid).remaining == 0


def test_retry_after_rounds_up_to_whole_seconds(
    limiter: FixedWindowRateLimiter, clock: FakeClock
) -> None:
    policy = RateLimitPolicy(window_ms=60_000, max_requests=1)
    limiter.check("post:user-1", policy)

    clock.now = 100
    rejected = limiter.check("post:user-1", policy)

    assert limiter.retry_after_seconds(rejected) == 60

    clock.now = 59_001
    assert limiter.retry_after_seconds(rejected) == 1

    clock.now = 60_000
    assert limiter.retry_after_seconds(rejected) == 1


def test_rejection_at_reset_instant_still_asks_for_a_wait(
    limiter: FixedWindowRateLimiter, clock: FakeClock
) -> None:
    policy = RateLimitPolicy(window_ms=1_000, max_requests=1)
    limiter.check("post:user-1", policy)

    clock.now = 1_000
    rejected = limiter.check("post:user-1", policy)

    assert not rejected.allowed
    assert limiter.retry_after_seconds(rejected) == 1
    assert not limiter.check("post:user-1", policy).allowed


def test_allowed_result_past_reset_needs_no_wait(
    limiter: FixedWindowRateLimiter, clock: FakeClock
) -> None:
    policy = RateLimitPolicy(window_ms=1_000, max_requests=2)
    allowed = limiter.check("post:user-1", policy)

    clock.now = 5_000

    assert limiter.retry_after_seconds(allowed) == 0
