# -*- coding: utf-8 -*-

from functools import partial, wraps

from .promise import Promise


def wrap_promise(f=None, scheduler=None):
    """Decorator who converts the result in a Promise object.

    If the function decorated returns a thenable, the Promise follows it.
    Else, a new Promise is created with the returned value as result.
    If the function raises an exception, a rejected Promise is returned.

    It can be used directly (``@wrap_promise``), or with a scheduler given to
    the Promises created (``@wrap_promise(scheduler=my_scheduler)``).
    """
    if f is None:
        return partial(wrap_promise, scheduler=scheduler)

    @wraps(f)
    def wrapper(*args, **kwargs):
        try:
            result = f(*args, **kwargs)
        except Exception as error:
            return Promise.reject(error, scheduler=scheduler)
        return Promise.resolve(result, scheduler=scheduler)

    return wrapper
