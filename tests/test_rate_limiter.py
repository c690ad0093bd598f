import pytest

from collabdocs.core.exceptions import RateLimitExceeded
from collabdocs.core.rate_limiter import RateLimiter


@pytest.fixture
def limiter():
    return RateLimiter(requests_per_minute=3)


def test_allows_up_to_limit(limiter):
    assert limiter.is_allowed("user-1") == (True, 2)
    assert limiter.is_allowed("user-1") == (True, 1)
    assert limiter.is_allowed("user-1") == (True, 0)
    assert limiter.is_allowed("user-1") == (False, 0)


def test_identifiers_are_independent(limiter):
    for _ in range(3):
        limiter.is_allowed("user-1")

    assert limiter.get_remaining("user-1") == 0
    assert limiter.get_remaining("user-2") == 3


def test_check_raises_with_retry_after(limiter):
    for _ in range(3):
        limiter.check("user-1")

    with pytest.raises(RateLimitExceeded) as exc_info:
        limiter.check("user-1")

    assert exc_info.value.status_code == 429
    assert 1 <= exc_info.value.retry_after <= 61


def test_reset(limiter):
    for _ in range(3):
        limiter.is_allowed("user-1")

    limiter.reset("user-1")
    assert limiter.get_remaining("user-1") == 3
