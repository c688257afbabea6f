# -*- coding: utf-8 -*-

import logging
import weakref
from functools import partial
from threading import Lock, RLock

from ..common import config
from .errors import ChainingCycleError
from .scheduler import get_default_scheduler
from .util import is_thenable

_logger = logging.getLogger(__name__)


class _OnceGuard(object):
    """Let only the first call among a group of callbacks pass through."""

    def __init__(self):
        self._lock = Lock()
        self.called = False

    def acquire(self):
        """Returns True the first time, then False."""
        with self._lock:
            if self.called:
                return False
            self.called = True
            return True

    def wrap(self, func, on_ignored=None):
        def wrapper(value):
            if self.acquire():
                func(value)
            elif on_ignored is not None:
                on_ignored(value)
        return wrapper


class Promise(object):
    """It represents an operation expected to be completed in the future.

    A Promise is used for asynchronous computation. It contains a value not yet
    known when the Promise is created. It allows to set callbacks who will be
    called as soon as the result is known. It's a "promise" of a future value.

    Callbacks are never executed synchronously: they're always given to the
    scheduler of the Promise, who executes them later, even if the Promise is
    already settled when the callback is set.

    There is no way to get the result synchronously. The result is only
    accessible from a callback, set with `then()` or `catch()`.

    All calls to the methods are thread-safe.
    """

    PENDING = 'pending'
    FULFILLED = 'fulfilled'
    REJECTED = 'rejected'

    _STATE_LETTERS = {PENDING: 'P', FULFILLED: 'F', REJECTED: 'R'}
    _MAX_PRINTED_ANCESTORS = 10

    def __init__(self, executor, scheduler=None, _name=None, _previous=None):
        """Constructor of the Promise.

        Generate the two callbacks for the executor, then call the `executor`.
        It means the executor will be fully executed before the the constructor
        returns.
        If the executor raises an exception, it's caught and the Promise is
        rejected with this exception.

        Only the first call to one of the two callbacks has an effect.
        Subsequent calls are ignored (and logged).

        Args:
            executor (callable): Takes 2 callable arguments:
                The first one, `resolve()` should be called when the Promise
                is fulfilled (ie the tasks is done) and must accept the
                result's value as its only argument. If this value is itself
                a Promise (or a thenable), the new Promise will follow it, and
                will settle with the same result or reason.
                The second, `reject()`, should be called when an error
                occurs. Its argument is the reason of the rejection, usually
                an instance of `Exception`.
            scheduler (Scheduler, optional): scheduler executing the
                callbacks. By default, the default scheduler is used.
            _name (str): if set, name used when converted to text.
            _previous (Promise): parent in a chain of `then()`, only used
                when converted to text. It's held by a weak reference, so a
                long chain doesn't keep all its ancestors alive.
        """
        self._state = self.PENDING
        self._value = None
        self._waiters = []
        self._lock = RLock()
        if scheduler is None:
            scheduler = get_default_scheduler()
        self._scheduler = scheduler
        self._name = _name or getattr(executor, '__name__', '???')
        self._previous = None
        if _previous is not None:
            self._previous = weakref.ref(_previous)

        guard = _OnceGuard()
        resolve = guard.wrap(self._resolve, partial(self._log_ignored,
                                                    'resolve'))
        reject = guard.wrap(self._reject, partial(self._log_ignored,
                                                  'reject'))

        try:
            executor(resolve, reject)
        except Exception as error:
            reject(error)

    @property
    def state(self):
        """One of PENDING, FULFILLED or REJECTED."""
        with self._lock:
            return self._state

    @property
    def scheduler(self):
        """Scheduler executing the callbacks of this Promise."""
        return self._scheduler

    def then(self, on_fulfilled=None, on_rejected=None):
        """Create a new promise from callbacks called when this one is settled.

        If the promise is fulfilled, the `on_fulfilled` callback will be
        called. Otherwise (the promise has been rejected), the `on_rejected`
        callback is called.
        In any case, the callback will define the state of the returned
        Promise. If the callback raises an exception, the new Promise is
        rejected. The callback can returns:
        - A value: the new promise will be fulfilled with this value.
        - Another Promise, or any object with a `then` method: when fulfilled
            or rejected, will transfer its status (state and result/error) to
            the Promise returned by this method.

        If a callback is not defined, the state of the "self promise" is
        transferred at the new promise (the state and the value/error).

        The callbacks are never called before `then()` returns.

        Args:
            on_fulfilled (callable, optional):  This callback will receive the
                result of the original promise as argument.
            on_rejected (callable, optional): This callback will receive the
                reason of the rejection of the original promise as argument.
        Returns:
            Promise<*>: new promise depending of self.
        """

        def chained_promise_executor(resolve, reject):

            def dispatch(handler, value):
                try:
                    new_value = handler(value)
                except Exception as error:
                    return reject(error)
                resolve(new_value)

            if on_fulfilled is None:
                callback = resolve
            else:
                callback = partial(dispatch, on_fulfilled)

            if on_rejected is None:
                errback = reject
            else:
                errback = partial(dispatch, on_rejected)

            self._add_waiter(callback, errback)

        if not on_rejected:
            name = '%s' % getattr(on_fulfilled, '__name__', '???')
        elif not on_fulfilled:
            name = '<None, %s>' % getattr(on_rejected, '__name__', '???')
        else:
            name = '<%s, %s>' % (getattr(on_fulfilled, '__name__', '???'),
                                 getattr(on_rejected, '__name__', '???'))
        return Promise(chained_promise_executor, scheduler=self._scheduler,
                       _name=name, _previous=self)

    def catch(self, on_rejected):
        """Create a new promise with a callback called when an error occurs.

        Alias of `self.then(None, on_rejected)`

        Args:
            on_rejected (callable): takes the rejection reason as argument.
                Will be called if `self` is rejected.
        returns:
            Promise<*>: new Promise chained to `self`. If `self` is fulfilled,
                the promised value will be the same as `self`. Otherwise, the
                value returned by the `on_rejected()` callback.
        """
        return self.then(None, on_rejected)

    def safeguard(self):
        """Log the rejection, if any, with the most details possible.

        A rejected Promise with no error handler is silently ignored.
        Calling `safeguard()` after all chains are set will catch these errors,
        and log them as ERROR with the maximum of details possible.
        """
        def guard(reason):
            if isinstance(reason, BaseException):
                _logger.error('[SAFEGUARD] %s', self,
                              exc_info=(type(reason), reason,
                                        reason.__traceback__))
            else:
                _logger.error('[SAFEGUARD] %s rejected with %r', self, reason)

        self._add_waiter(lambda _value: None, guard)

    def __repr__(self):
        return 'Promise(%s)' % self._inner_print()

    def _inner_print(self):
        """Describe the chain, from the oldest ancestor still alive to self.

        At most `_MAX_PRINTED_ANCESTORS` ancestors are shown. Ancestors
        hidden or already garbage-collected are replaced by "...".
        """
        parts = []
        promise = self
        while promise is not None:
            if len(parts) > self._MAX_PRINTED_ANCESTORS:
                parts.append('...')
                break
            with promise._lock:
                state = promise._state
            parts.append('%s %s' % (promise._name, self._STATE_LETTERS[state]))

            if promise._previous is None:
                break
            promise = promise._previous()
            if promise is None:
                parts.append('...')
        return ' -> '.join(reversed(parts))

    @classmethod
    def resolve(cls, value, scheduler=None):
        """Create a promise who resolves the selected value.

        Args:
            value: result of the promise. If it's a promise (or a thenable),
                the new Promise will settle the same way, once `value` is
                settled.
            scheduler (Scheduler, optional): scheduler of the new Promise.
        Returns:
            Promise: new Promise already fulfilled, containing the value
                passed in parameter.
        """
        return cls(lambda ok, error: ok(value), scheduler=scheduler,
                   _name='RESOLVE')

    @classmethod
    def reject(cls, reason, scheduler=None):
        """Create a Promise rejected for the reason specified.

        Args:
            reason: reason of the rejection, usually an Exception. It's used
                as is, even if it's a Promise.
            scheduler (Scheduler, optional): scheduler of the new Promise.
        Returns:
            Promise: new Promise already rejected.
        """
        return cls(lambda ok, error: error(reason), scheduler=scheduler,
                   _name='REJECT')

    @classmethod
    def all(cls, promises, scheduler=None):
        """Create a Promise who wait a list of promises to be all fulfilled.

        The resulting Promise resolve when all of the promises in the list are
        resolved, and returns a list of all the resulting values, keeping the
        order of the promise list.
        If a promise is rejected, then the resulting promise is rejected with
        the same reason, and all results from other promises are ignored.
        They're not stopped: they still run until their completion.

        Args:
            promises (iterable): promises, or plain values. A plain value is
                considered as a promise already fulfilled.
            scheduler (Scheduler, optional): scheduler of the new Promise.
        Returns:
            Promise<list>: resulting promise, fulfilled when all promises
                are fulfilled, or rejected when one of them is rejected. As
                every promise of an empty list is (vacuously) fulfilled, an
                empty list gives a promise fulfilled with `[]`.
        """
        promises = [cls.resolve(p, scheduler=scheduler) for p in promises]
        if not promises:
            return cls.resolve([], scheduler=scheduler)

        def executor(resolve, reject):
            lock = Lock()
            results = [None] * len(promises)
            remaining_tasks = len(promises)
            has_error = False

            def resolve_one_promise(index, value):
                nonlocal remaining_tasks
                with lock:
                    if has_error:
                        return
                    results[index] = value
                    remaining_tasks -= 1
                    if remaining_tasks != 0:
                        return
                resolve(results)

            def reject_one_promise(reason):
                nonlocal has_error
                with lock:
                    if has_error:
                        return
                    has_error = True
                reject(reason)

            for index, p in enumerate(promises):
                p.then(partial(resolve_one_promise, index), reject_one_promise)

        return cls(executor, scheduler=scheduler, _name='ALL')

    @classmethod
    def race(cls, promises, scheduler=None):
        """Run all promises, then resolve or reject with the fastest Promise.

        Run all promises given in argument, and returns a new Promise. The
        resulting Promise will be settled as soon as the one the running
        Promises is done. Result value or rejection reason of the finished
        promise are transmitted.
        All other Promise result's will be ignored.

        Args:
            promises (iterable): promises, or plain values. A plain value is
                considered as a promise already fulfilled.
            scheduler (Scheduler, optional): scheduler of the new Promise.
        Returns:
            Promise: a promise. If the promise list is empty, it will stay
                pending forever.
        """
        promises = [cls.resolve(p, scheduler=scheduler) for p in promises]

        def executor(resolve, reject):
            lock = Lock()
            is_settled = False

            def settle_once(settle, value):
                nonlocal is_settled
                with lock:
                    if is_settled:
                        return
                    is_settled = True
                settle(value)

            for p in promises:
                p.then(partial(settle_once, resolve),
                       partial(settle_once, reject))

        return cls(executor, scheduler=scheduler, _name='RACE')

    @classmethod
    def delay_resolve(cls, value, delay, scheduler=None):
        """Create a Promise who resolves the value after a delay.

        Args:
            value: result of the promise. If it's a promise (or a thenable),
                the new Promise will follow it once the delay has elapsed.
            delay (float): delay before resolution, in seconds.
            scheduler (Scheduler, optional): scheduler of the new Promise.
        Returns:
            Promise: new Promise, pending during at least `delay` seconds.
        """
        if scheduler is None:
            scheduler = get_default_scheduler()

        def executor(resolve, _reject):
            scheduler.schedule_after(partial(resolve, value), delay)

        return cls(executor, scheduler=scheduler, _name='DELAY_RESOLVE')

    @classmethod
    def delay_reject(cls, reason, delay, scheduler=None):
        """Create a Promise rejected for the reason specified, after a delay.

        Args:
            reason: reason of the rejection. It's used as is, even if it's a
                Promise.
            delay (float): delay before rejection, in seconds.
            scheduler (Scheduler, optional): scheduler of the new Promise.
        Returns:
            Promise: new Promise, pending during at least `delay` seconds.
        """
        if scheduler is None:
            scheduler = get_default_scheduler()

        def executor(_resolve, reject):
            scheduler.schedule_after(partial(reject, reason), delay)

        return cls(executor, scheduler=scheduler, _name='DELAY_REJECT')

    def _resolve(self, value):
        """Settle the Promise with `value`, following it if it's a thenable.

        The result of a thenable is itself resolved (so a Promise of Promise is
        flattened), whereas its rejection reason is used as is.
        """
        if value is self:
            return self._reject(ChainingCycleError(
                'Promise %r cannot be resolved with itself.' % self))

        if not is_thenable(value):
            return self._settle(self.FULFILLED, value)

        # A foreign thenable may call both callbacks, or raise after one call.
        guard = _OnceGuard()
        try:
            value.then(guard.wrap(self._resolve), guard.wrap(self._reject))
        except Exception as error:
            if guard.acquire():
                self._reject(error)

    def _reject(self, reason):
        self._settle(self.REJECTED, reason)

    def _settle(self, state, value):
        with self._lock:
            if self._state != self.PENDING:
                already_settled = True
            else:
                already_settled = False
                self._state = state
                self._value = value
                waiters = self._waiters
                # Free the references
                self._waiters = None

        if already_settled:
            return self._log_ignored(
                'fulfill' if state == self.FULFILLED else 'reject', value)

        if waiters:
            self._scheduler.schedule(
                partial(self._exec_waiters, waiters, state, value))

    def _log_ignored(self, action, value):
        level = config.get('resettle_log_level')
        if not isinstance(level, int):
            level = logging.getLevelName(str(level).upper())
        if not isinstance(level, int):
            level = logging.WARNING
        _logger.log(level, 'Try to %s Promise %r already settled. The new '
                    'value will be ignored: %r', action, self, value)

    def _exec_waiters(self, waiters, state, value):
        for callback, errback in waiters:
            if state == self.FULFILLED:
                self._exec_callback(callback, value)
            else:
                self._exec_callback(errback, value, is_errback=True)

    @staticmethod
    def _exec_callback(callback, value, is_errback=False):
        try:
            callback(value)
        except Exception:
            if is_errback:
                _logger.exception("Promise errback raise an exception!")
            else:
                _logger.exception("Promise callback raise an exception!")

    def _add_waiter(self, callback, errback):
        with self._lock:
            if self._state == self.PENDING:
                self._waiters.append((callback, errback))
                return
            state = self._state
            value = self._value

        if state == self.FULFILLED:
            self._scheduler.schedule(
                partial(self._exec_callback, callback, value))
        else:
            self._scheduler.schedule(
                partial(self._exec_callback, errback, value, is_errback=True))
