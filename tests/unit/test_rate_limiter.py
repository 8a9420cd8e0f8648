import pytest

from regiosync.data_collection.rate_limiter import RateLimiter


@pytest.mark.asyncio
async def test_first_acquire_waits_a_full_slot(clock):
    limiter = RateLimiter(1, 2.0, clock=clock, sleep=clock.sleep)
    waited = await limiter.acquire()
    assert waited == pytest.approx(2.0)
    assert clock.now == pytest.approx(102.0)


@pytest.mark.asyncio
async def test_consecutive_acquires_are_spaced(clock):
    limiter = RateLimiter(1, 2.0, clock=clock, sleep=clock.sleep)
    for _ in range(3):
        await limiter.acquire()
    assert clock.now == pytest.approx(106.0)


@pytest.mark.asyncio
async def test_tokens_refill_while_idle(clock):
    limiter = RateLimiter(2, 1.0, clock=clock, sleep=clock.sleep)
    clock.now += 10
    assert await limiter.acquire() == 0.0
    assert await limiter.acquire() == 0.0
    # Bucket capacity is rate_limit
    assert await limiter.acquire() == pytest.approx(0.5)


@pytest.mark.asyncio
async def test_initial_tokens(clock):
    limiter = RateLimiter(1, 2.0, initial_tokens=1, clock=clock, sleep=clock.sleep)
    assert await limiter.acquire() == 0.0
    assert clock.sleeps == []


@pytest.mark.asyncio
async def test_penalize_blocks_and_drains(clock):
    limiter = RateLimiter(1, 2.0, initial_tokens=1, clock=clock, sleep=clock.sleep)
    limiter.penalize(30)
    waited = await limiter.acquire()
    # 30 s block, then one full refill slot
    assert waited == pytest.approx(32.0)


def test_penalize_ignores_non_positive(clock):
    limiter = RateLimiter(1, 2.0, initial_tokens=1, clock=clock, sleep=clock.sleep)
    limiter.penalize(0)
    assert limiter.tokens == 1


def test_interval():
    assert RateLimiter(4, 2.0).interval == 0.5


@pytest.mark.parametrize("rate_limit,window", [(0, 1.0), (1, 0), (1, -2.0)])
def test_invalid_arguments(rate_limit, window):
    with pytest.raises(ValueError):
        RateLimiter(rate_limit, window)


@pytest.mark.asyncio
async def test_release_restarts_the_pause_after_long_work(clock):
    limiter = RateLimiter(1, 2.0, clock=clock, sleep=clock.sleep)
    await limiter.acquire()
    # Work outlasts the window; the bucket has refilled meanwhile
    clock.now += 5.0
    limiter.release()
    waited = await limiter.acquire()
    assert waited == pytest.approx(2.0)
    assert clock.now == pytest.approx(109.0)


@pytest.mark.asyncio
async def test_refilled_token_is_used_at_once_without_release(clock):
    limiter = RateLimiter(1, 2.0, clock=clock, sleep=clock.sleep)
    await limiter.acquire()
    clock.now += 5.0
    assert await limiter.acquire() == 0.0


@pytest.mark.asyncio
async def test_release_and_penalty_use_the_later_deadline(clock):
    limiter = RateLimiter(1, 2.0, clock=clock, sleep=clock.sleep)
    await limiter.acquire()
    limiter.release()
    limiter.penalize(10)
    waited = await limiter.acquire()
    # 10 s block, then one refill slot
    assert waited == pytest.approx(12.0)
