# -*- coding: utf-8 -*-

"""Schedulers used by the promises to run their callbacks later.

A Promise never calls a callback directly from the call who triggered it
(settlement, or `then()` on a settled Promise). Instead, it gives the call to
a scheduler, which runs it at a later moment.

Two schedulers are available:
- `ThreadScheduler` runs tasks, one after the other, in a dedicated worker
  thread. It's the default scheduler.
- `ManualScheduler` runs tasks only when asked to. Its clock is virtual, and
  delayed tasks are executed when the clock is advanced. It's intended for
  tests and for programs driving their own main loop.
"""

from concurrent.futures import ThreadPoolExecutor
import heapq
import itertools
import logging
from collections import deque
from threading import Lock, Timer

from ..common import config
from .errors import SchedulerClosedError

_logger = logging.getLogger(__name__)


def _run_task(task):
    """Execute a task. Errors are logged, and never propagated."""
    try:
        task()
    except Exception:
        _logger.exception('Scheduled task %r has raised an exception', task)


class Scheduler(object):
    """Capability of deferring the execution of a callable.

    Subclasses must guarantee that a task is never executed during the call to
    `schedule()` (or `schedule_after()`), and that the tasks scheduled from
    the same thread are executed in the same order they've been submitted.
    """

    def schedule(self, task):
        """Execute `task()` as soon as possible, but strictly later.

        Args:
            task (callable): function without argument.
        """
        raise NotImplementedError()

    def schedule_after(self, task, delay):
        """Execute `task()` after at least `delay` seconds.

        Args:
            task (callable): function without argument.
            delay (float): minimal delay, in seconds.
        """
        raise NotImplementedError()


class ThreadScheduler(Scheduler):
    """Execute the tasks in a dedicated worker thread.

    All tasks are executed in the same thread, in submission order. Delayed
    tasks are handled by `threading.Timer` objects, who submit the task to the
    worker thread once the delay has elapsed.

    The scheduler can be used as a context manager; it's shut down at exit.
    """

    def __init__(self, name='eventual'):
        """
        Args:
            name (str): prefix of the worker thread's name.
        """
        self._name = name
        self._executor = ThreadPoolExecutor(max_workers=1,
                                            thread_name_prefix=name)
        self._lock = Lock()
        self._timers = set()  # must be acceded only with self._lock
        self._closed = False
        _logger.debug('Start scheduler %s', name)

    def _submit(self, task):
        # self._lock must be held.
        if self._closed:
            raise SchedulerClosedError('Scheduler %s is shut down'
                                       % self._name)
        self._executor.submit(_run_task, task)

    def schedule(self, task):
        with self._lock:
            self._submit(task)

    def schedule_after(self, task, delay):
        def on_timeout():
            with self._lock:
                self._timers.discard(timer)
                if self._closed:
                    _logger.debug('Scheduler %s is shut down. Delayed task '
                                  '%r is dropped.', self._name, task)
                    return
                self._submit(task)

        timer = Timer(max(delay, 0), on_timeout)
        timer.name = '%s-timer' % self._name
        timer.daemon = True
        with self._lock:
            if self._closed:
                raise SchedulerClosedError('Scheduler %s is shut down'
                                           % self._name)
            self._timers.add(timer)
            timer.start()

    def shutdown(self, wait=True):
        """Stop the scheduler.

        Pending delayed tasks are dropped. Tasks already submitted are still
        executed.

        Args:
            wait (boolean): if True, wait until all submitted tasks are done.
                It must not be True when called from a scheduled task.
        """
        with self._lock:
            if self._closed:
                return
            self._closed = True
            timers = list(self._timers)
            self._timers.clear()

        _logger.debug('Stop scheduler %s', self._name)
        for timer in timers:
            timer.cancel()
        self._executor.shutdown(wait=wait)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.shutdown()

    def __repr__(self):
        return 'ThreadScheduler(%s)' % self._name


class ManualScheduler(Scheduler):
    """Deterministic scheduler, executing tasks only on demand.

    Tasks are queued until `run_pending()`, `run_until_idle()` or `advance()`
    is called. Delayed tasks use a virtual clock, starting at 0 and moved
    forward only by `advance()`.

    Example:

        >>> scheduler = ManualScheduler()
        >>> p = Promise.resolve(3, scheduler=scheduler).then(print)
        >>> scheduler.run_until_idle()
        3
    """

    def __init__(self):
        self._lock = Lock()
        self._tasks = deque()
        self._timers = []  # heap of (deadline, sequence number, task)
        self._sequence = itertools.count()
        self._time = 0

    @property
    def time(self):
        """Current value of the virtual clock, in seconds."""
        return self._time

    @property
    def pending(self):
        """Number of tasks ready to be executed."""
        with self._lock:
            return len(self._tasks)

    def schedule(self, task):
        with self._lock:
            self._tasks.append(task)

    def schedule_after(self, task, delay):
        with self._lock:
            deadline = self._time + max(delay, 0)
            heapq.heappush(self._timers,
                           (deadline, next(self._sequence), task))

    def run_pending(self):
        """Execute the tasks queued so far.

        Tasks scheduled during this call are kept for later.

        Returns:
            int: number of tasks executed.
        """
        with self._lock:
            tasks = list(self._tasks)
            self._tasks.clear()
        for task in tasks:
            _run_task(task)
        return len(tasks)

    def run_until_idle(self):
        """Execute tasks until the queue is empty.

        Delayed tasks are not executed, as the clock doesn't move.

        Returns:
            int: number of tasks executed.
        """
        nb_tasks = 0
        while True:
            with self._lock:
                if not self._tasks:
                    return nb_tasks
                task = self._tasks.popleft()
            _run_task(task)
            nb_tasks += 1

    def advance(self, delay):
        """Move the clock forward, and execute all tasks due.

        Delayed tasks are released in deadline order; the queue is emptied
        after each one of them, so the tasks they schedule are executed
        before the next timer fires.

        Args:
            delay (float): time to add to the clock, in seconds.
        Returns:
            int: number of tasks executed.
        """
        nb_tasks = self.run_until_idle()
        with self._lock:
            end = self._time + delay

        while True:
            with self._lock:
                if not self._timers or self._timers[0][0] > end:
                    self._time = end
                    break
                deadline, _, task = heapq.heappop(self._timers)
                self._time = deadline
                self._tasks.append(task)
            nb_tasks += self.run_until_idle()
        return nb_tasks


_default_scheduler = None
_default_scheduler_lock = Lock()

_scheduler_factories = {
    'thread': ThreadScheduler,
    'manual': ManualScheduler
}


def get_default_scheduler():
    """Returns the scheduler used by promises created without one.

    At first call, the scheduler is created, according to the config entry
    'default_scheduler'.
    """
    global _default_scheduler

    with _default_scheduler_lock:
        if _default_scheduler is None:
            kind = config.get('default_scheduler')
            factory = _scheduler_factories.get(kind)
            if factory is None:
                _logger.warning('Unknown scheduler "%s" in config. The '
                                'thread scheduler will be used.', kind)
                factory = ThreadScheduler
            _default_scheduler = factory()
        return _default_scheduler


def set_default_scheduler(scheduler):
    """Replace the default scheduler.

    Args:
        scheduler (Scheduler): new default scheduler. If None, a new one will
            be created from the config at the next call of
            `get_default_scheduler()`.
    Returns:
        Scheduler: the previous default scheduler (can be None).
    """
    global _default_scheduler

    with _default_scheduler_lock:
        previous = _default_scheduler
        _default_scheduler = scheduler
    return previous
