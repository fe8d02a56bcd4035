import pytest
from django.core.cache import cache


@pytest.fixture(autouse=True)
def clear_cache_between_tests():
    """Throttle counters live in the cache; reset them for every test."""
    cache.clear()
    yield
    cache.clear()
