# -*- coding: utf-8 -*-

import pytest

from eventual.promise import ManualScheduler, set_default_scheduler


@pytest.fixture
def scheduler():
    """Manual scheduler, used as default scheduler during the test."""
    scheduler = ManualScheduler()
    previous = set_default_scheduler(scheduler)
    yield scheduler
    set_default_scheduler(previous)


@pytest.fixture
def observe(scheduler):
    """Register callbacks on a promise, and collect what they receive.

    The returned list is filled with ('fulfilled', value) or
    ('rejected', reason) tuples, once the scheduler has run.
    """
    def _observe(promise):
        outcomes = []
        promise.then(lambda value: outcomes.append(('fulfilled', value)),
                     lambda reason: outcomes.append(('rejected', reason)))
        return outcomes
    return _observe
