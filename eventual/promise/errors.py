# -*- coding: utf-8 -*-
"""Errors raised by the promise module.

Rejection reasons can be any value: these classes only cover the errors
produced by the promise machinery itself.
"""


class PromiseError(Exception):
    """Base class for eventual.promise errors."""
    pass


class ChainingCycleError(PromiseError, TypeError):
    """A Promise has been resolved with itself.

    Such a Promise would wait for its own settlement forever, so it's rejected
    with this error instead.
    """
    pass


class SchedulerClosedError(PromiseError, RuntimeError):
    """A task has been submitted to a scheduler already shut down."""
    pass
