# -*- coding: utf-8 -*-

import pytest

from eventual import promise


class Err(Exception):
    pass


class TestReduceCoroutine(object):

    def test_reduce_two_promises_coroutine(self, scheduler, observe):
        """Use @reduce_coroutine on a generator of two fulfilled promises.

        The most common Promise-generator case: a generator who yield two
        promises. the decorated coroutine must return a Promise who resolves
        when the generator is over, with the returned value.
        """

        @promise.reduce_coroutine()
        def generator():
            first_value = yield promise.Promise.resolve(1)
            second_value = yield promise.Promise.resolve(2)
            return first_value + second_value

        p = generator()
        assert isinstance(p, promise.Promise)
        outcomes = observe(p)
        scheduler.run_until_idle()
        assert outcomes == [('fulfilled', 3)]

    def test_reduce_direct_value_coroutine(self, scheduler, observe):
        """Use @reduce_coroutine on a generator yielding non-future result.

        A value yielded without being wrapped in a Promise is the "return"
        value.
        """

        @promise.reduce_coroutine()
        def generator():
            first_value = yield promise.Promise.resolve(1)
            assert first_value == 1
            second_value = yield promise.Promise.resolve(2)
            assert second_value == 2
            yield 3

        outcomes = observe(generator())
        scheduler.run_until_idle()
        assert outcomes == [('fulfilled', 3)]

    def test_reduce_coroutine_with_failed_promise(self, scheduler, observe):
        """Use @reduce_coroutine on a generator who yield rejected Promise

        If not caught (like in this case), the error is transmitted to the
        Promise p.
        """
        error = Err()

        @promise.reduce_coroutine()
        def generator():
            first_value = yield promise.Promise.resolve(1)
            assert first_value
            yield promise.Promise.reject(error)

        outcomes = observe(generator())
        scheduler.run_until_idle()
        assert outcomes == [('rejected', error)]

    def test_reduce_coroutine_with_non_exception_rejection(self, scheduler,
                                                           observe):
        @promise.reduce_coroutine()
        def generator():
            yield promise.Promise.reject('reason')

        outcomes = observe(generator())
        scheduler.run_until_idle()
        assert outcomes == [('rejected', 'reason')]

    def test_reduce_coroutine_raising_exception(self, scheduler, observe):
        """Use @reduce_coroutine on a generator who raise an Exception."""
        error = Err()

        @promise.reduce_coroutine()
        def generator():
            first_value = yield promise.Promise.resolve(1)
            assert first_value
            raise error

        outcomes = observe(generator())
        scheduler.run_until_idle()
        assert outcomes == [('rejected', error)]

    def test_reduce_one_step_coroutine(self, scheduler, observe):
        """Use @reduce_coroutine on a generator who yield only once."""
        @promise.reduce_coroutine()
        def generator():
            yield 'direct_result'

        outcomes = observe(generator())
        scheduler.run_until_idle()
        assert outcomes == [('fulfilled', 'direct_result')]

    def test_reduce_coroutine_raising_exception_at_initialization(
            self, scheduler, observe):
        """Use @reduce_coroutine on a generator raising error before any yield.

        A typical example is the coroutine raising due to missing call
        preconditions.
        """
        error = Err()

        @promise.reduce_coroutine()
        def generator():
            raise error
            yield None

        outcomes = observe(generator())
        scheduler.run_until_idle()
        assert outcomes == [('rejected', error)]

    def test_reduce_coroutine_catching_exception(self, scheduler, observe):
        """Use a generator who catch exceptions from Promise.

        The coroutine uses the classical try/except block on yield
        instruction over a Promise.
        """

        @promise.reduce_coroutine()
        def generator():
            try:
                yield promise.Promise.reject(Err())
            except Err:
                yield 'fixed_result'
            yield 'never_yielded'

        outcomes = observe(generator())
        scheduler.run_until_idle()
        assert outcomes == [('fulfilled', 'fixed_result')]

    def test_reduce_coroutine_close_generator(self, scheduler, observe):
        """Ensure the generator is properly closed when it yields a value.

        If a generator has yielded the final result, and the caller don't want
        to iter until the end, the caller must close the generator.
        Closing the generator will raise an exception GeneratorExit, and so
        allow the generator to clean resources.
        """
        is_generator_closed = []

        @promise.reduce_coroutine()
        def generator():
            try:
                yield 'RESULT'
            except GeneratorExit:
                is_generator_closed.append(True)
                raise

        outcomes = observe(generator())
        scheduler.run_until_idle()
        assert outcomes == [('fulfilled', 'RESULT')]
        assert is_generator_closed

    def test_coroutine_empty_coroutine(self, scheduler, observe):
        """Use a coroutine who never yield (it returns directly)."""

        @promise.reduce_coroutine()
        def generator():
            return
            yield

        outcomes = observe(generator())
        scheduler.run_until_idle()
        assert outcomes == [('fulfilled', None)]

    @pytest.fixture
    def replace_safeguard(self, monkeypatch):
        context = {'flag': False}

        def raise_flag(*args):
            context['flag'] = True
        monkeypatch.setattr(promise.Promise, 'safeguard', raise_flag)
        return context

    def test_use_safeguard(self, scheduler, observe, replace_safeguard):
        error = Err()

        @promise.reduce_coroutine(safeguard=True)
        def generator():
            raise error
            yield None

        outcomes = observe(generator())
        scheduler.run_until_idle()
        assert outcomes == [('rejected', error)]
        assert replace_safeguard['flag']
