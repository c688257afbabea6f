# -*- coding: utf-8 -*-

from functools import wraps

from .deferred import Deferred
from .util import is_thenable


def reduce_coroutine(safeguard=False, scheduler=None):
    """Decorator who converts a coroutine of promises into a single promise.

    The greatest interest is the ability to write a function in an
    synchronous-like style, using many asynchronous Promises.
    Whatever is the number of Promises or async calls used, the result will
    always be an unique Promise wrapping the whole process.

    The decorated function must be a generator. Each time it yields a
    Promise, the generator is resumed with the Promise's result, or the
    rejection reason is raised inside it. The final result is the value of
    the `return` statement, or the first non-thenable value yielded.

    Example:

        >>> @reduce_coroutine()
        ... def add_remote_values():
        ...     a = yield fetch_a()
        ...     b = yield fetch_b()
        ...     return a + b

    Args:
        safeguard (boolean): if true, use `Promise.safeguard()` on the
            resulting promise.
        scheduler (Scheduler, optional): scheduler of the resulting promise.
    """

    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            """
            Args:
                *args
                **kwargs
            Returns:
                Promise<*>
            """
            df = Deferred(scheduler=scheduler,
                          _name='COROUTINE %s' % func.__name__)
            if safeguard:
                df.promise.safeguard()

            try:
                # Create generator; Initialization phase
                gen = func(*args, **kwargs)
            except Exception as error:
                df.reject(error)
                return df.promise

            def _call_next_or_set_result(value):
                if is_thenable(value):
                    value.then(iter_next, iter_error)
                else:
                    gen.close()
                    df.resolve(value)

            def iter_next(yielded_value):
                try:
                    next_value = gen.send(yielded_value)
                except StopIteration as stop:
                    return df.resolve(stop.value)
                except Exception as error:
                    return df.reject(error)
                _call_next_or_set_result(next_value)

            def iter_error(raised_error):
                try:
                    if isinstance(raised_error, BaseException):
                        next_value = gen.throw(raised_error)
                    else:
                        # Non-exception reasons can't be raised in the
                        # generator: the coroutine is stopped.
                        gen.close()
                        return df.reject(raised_error)
                except StopIteration as stop:
                    return df.resolve(stop.value)
                except Exception as error:
                    return df.reject(error)
                _call_next_or_set_result(next_value)

            # Start and resolve loop.
            try:
                f = next(gen)
            except StopIteration as stop:
                df.resolve(stop.value)
                return df.promise
            except Exception as error:
                df.reject(error)
                return df.promise
            _call_next_or_set_result(f)

            return df.promise

        return wrapper
    return decorator
