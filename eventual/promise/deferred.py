# -*- coding: utf-8 -*-

from .promise import Promise


class Deferred(object):
    """Creator side of an asynchronous task.

    A Deferred is the "creator" side of an async task, whereas a Promise
    represents the asynchronous value from the "consumer" side. It's useful
    when the code settling the Promise is not the code creating it: the
    Deferred is kept by the producer, and only `promise` is given away.

    Like the executor callbacks, only the first call to `resolve()` or
    `reject()` has an effect. Later calls are ignored and logged.

    Attributes:
        promise (Promise): the Promise associated to the Deferred.
    """

    def __init__(self, scheduler=None, _name=None):
        settle_callbacks = []
        self.promise = Promise(lambda ok, error: settle_callbacks.extend(
            (ok, error)), scheduler=scheduler, _name=_name or 'DEFERRED')
        self._resolve, self._reject = settle_callbacks

    def resolve(self, value):
        """Fulfill the promise, or make it follow `value` if it's a thenable.
        """
        self._resolve(value)

    def reject(self, reason):
        """Reject the promise. `reason` is used as is, even if it's a Promise.
        """
        self._reject(reason)

    def __repr__(self):
        return 'Deferred(%s)' % self.promise._inner_print()
