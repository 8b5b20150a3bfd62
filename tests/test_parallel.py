import os
import pytest
from pydedx.utils.parallel import process_pool_plan


@pytest.fixture
def eight_cores(monkeypatch):
    monkeypatch.setattr(os, "cpu_count", lambda: 8)


@pytest.mark.parametrize("n_events, expected", [
    (0, (1, 1)),
    (3, (1, 1)),
    (64, (4, 4)),
    (1000, (7, 36)),
])
def test_plan_follows_batch_size(eight_cores, n_events, expected):
    assert process_pool_plan(n_events) == expected

def test_plan_small_share_per_process(eight_cores):
    assert process_pool_plan(5, min_events_per_process=1) == (5, 1)

def test_plan_unknown_cpu_count(monkeypatch):
    monkeypatch.setattr(os, "cpu_count", lambda: None)
    assert process_pool_plan(1000) == (1, 250)

def test_user_requested_within_cap(eight_cores):
    assert process_pool_plan(1000, user_requested=2) == (2, 125)

def test_user_requested_still_bounded_by_batch(eight_cores):
    processes, _ = process_pool_plan(20, user_requested=6)
    assert processes == 1

def test_user_requested_exceeds_cpu(monkeypatch):
    monkeypatch.setattr(os, "cpu_count", lambda: 4)
    with pytest.warns(UserWarning, match=r"only 3 cores are free"):
        result = process_pool_plan(1000, user_requested=10)
    assert result == (3, 84)

def test_user_requested_with_empty_batch(eight_cores):
    assert process_pool_plan(0, user_requested=2) == (1, 1)

@pytest.mark.parametrize("kwargs, message", [
    ({"user_requested": 0}, "at least 1 is needed"),
    ({"min_events_per_process": 0}, "min_events_per_process must be at least 1"),
])
def test_invalid_plan_arguments(kwargs, message):
    with pytest.raises(ValueError, match=message):
        process_pool_plan(100, **kwargs)
