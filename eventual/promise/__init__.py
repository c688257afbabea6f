# -*- coding: utf-8 -*-

from .decorators import wrap_promise
from .deferred import Deferred
from .errors import ChainingCycleError, PromiseError, SchedulerClosedError
from .promise import Promise
from .reduce_coroutine import reduce_coroutine
from .scheduler import (get_default_scheduler, ManualScheduler, Scheduler,
                        set_default_scheduler, ThreadScheduler)
from .thread_pool import ThreadPoolExecutor
from .util import is_thenable

__all__ = ['is_thenable', 'ChainingCycleError', 'Deferred',
           'get_default_scheduler', 'ManualScheduler', 'Promise',
           'PromiseError', 'reduce_coroutine', 'Scheduler',
           'SchedulerClosedError', 'set_default_scheduler',
           'ThreadPoolExecutor', 'ThreadScheduler', 'wrap_promise']
